"""
FastAPI application - Main entry point
"""

from dotenv import load_dotenv

load_dotenv()

import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from storefront import __version__
from storefront.api.catalog_router import router as catalog_router
from storefront.error_handler import ErrorHandler
from storefront.integrations.contracts.errors import FetchError

# Setup logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

# Initialize FastAPI app
app = FastAPI(
    title="Storefront Catalogue API",
    description="Cached, coalesced catalogue collections with filter/sort views",
    version=__version__,
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Configure appropriately for production
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

error_handler = ErrorHandler()

app.include_router(catalog_router, prefix="/api/v1")


@app.exception_handler(FetchError)
async def fetch_error_handler(request: Request, exc: FetchError) -> JSONResponse:
    payload = error_handler.handle_exception(exc, context={"path": request.url.path})
    headers = {}
    if exc.retry_after is not None:
        headers["Retry-After"] = str(int(round(exc.retry_after)))
    return JSONResponse(status_code=error_handler.status_for(exc), content=payload, headers=headers)


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    payload = error_handler.handle_exception(exc, context={"path": request.url.path})
    return JSONResponse(status_code=error_handler.status_for(exc), content=payload)


@app.get("/health")
def health_check():
    return {"status": "ok"}
