"""Error handling helpers for the catalogue layer."""
from typing import Any, Dict
import logging

from storefront.integrations.contracts.errors import FetchError, FetchErrorKind

logger = logging.getLogger(__name__)

STATUS_BY_KIND = {
    FetchErrorKind.RATE_LIMITED: 429,
    FetchErrorKind.NOT_FOUND: 404,
    FetchErrorKind.NETWORK_ERROR: 502,
    FetchErrorKind.SERVER_ERROR: 502,
    FetchErrorKind.INVALID_RESPONSE_SHAPE: 502,
}

USER_MESSAGES = {
    FetchErrorKind.RATE_LIMITED: "Too many requests. Please wait a moment and try again.",
    FetchErrorKind.NOT_FOUND: "We couldn't find products for this selection.",
    FetchErrorKind.NETWORK_ERROR: "The product catalogue is unreachable right now. Please try again.",
    FetchErrorKind.SERVER_ERROR: "Failed to fetch products. Please try again later.",
    FetchErrorKind.INVALID_RESPONSE_SHAPE: "Failed to fetch products. Please try again later.",
}


class ErrorHandler:
    def status_for(self, exc: Exception) -> int:
        if isinstance(exc, FetchError):
            return STATUS_BY_KIND.get(exc.kind, 502)
        return 500

    def handle_exception(self, exc: Exception, context: Dict[str, Any] = None) -> Dict[str, Any]:
        if isinstance(exc, FetchError):
            logger.warning("Catalogue fetch failed (%s): %s", exc.kind.value, exc.message)
            return {
                "message": USER_MESSAGES[exc.kind],
                "kind": exc.kind.value,
                "retry_after": exc.retry_after,
                "metadata": {"error": exc.message, "status_code": exc.status_code, "context": context or {}},
            }
        logger.error("Unhandled exception in catalogue layer: %s", exc, exc_info=True)
        return {
            "message": "An internal error occurred while processing your request. Please try again later.",
            "kind": "INTERNAL_ERROR",
            "retry_after": None,
            "metadata": {"error": str(exc), "context": context or {}},
        }
