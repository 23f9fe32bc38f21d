"""Consent management (Didomi) API integration module."""

from .client import (
    ConsentApiClient,
    create_client,
    fetch_api_token,
)

__all__ = [
    "ConsentApiClient",
    "create_client",
    "fetch_api_token",
]
