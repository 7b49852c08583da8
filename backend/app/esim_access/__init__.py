"""
eSIM Access partner API — signed HTTP client, response models and
price-unit conversions.
"""

from app.esim_access.client import EsimAccessClient, get_esim_client

__all__ = ["EsimAccessClient", "get_esim_client"]
