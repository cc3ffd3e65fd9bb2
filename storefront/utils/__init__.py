"""
Utility modules for the catalogue layer
"""
from .config_loader import CatalogConfig, load_catalog_config
from .rate_limiter import AsyncRateLimiter

__all__ = [
    'CatalogConfig',
    'load_catalog_config',
    'AsyncRateLimiter',
]
