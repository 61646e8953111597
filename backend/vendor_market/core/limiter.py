"""Rate limiting configuration."""

from __future__ import annotations

import logging

from limits.errors import ConfigurationError
from slowapi import Limiter
from slowapi.util import get_remote_address

from vendor_market.core.config import settings

logger = logging.getLogger(__name__)

MEMORY_STORAGE_URI = "memory://"


def build_limiter(storage_uri: str, enabled: bool = True) -> Limiter:
    """
    Limiter backed by ``storage_uri`` (Redis when running several instances).

    Falls back to in-memory storage when the configured storage cannot be
    set up, e.g. an unknown scheme or a missing Redis driver.
    """
    try:
        limiter = Limiter(
            key_func=get_remote_address,
            storage_uri=storage_uri,
            default_limits=["1000/hour"],
            enabled=enabled,
        )
        logger.info(f"Rate limiter configured with storage {storage_uri} (enabled={enabled})")
        return limiter
    except ConfigurationError as e:
        logger.warning(f"Failed to configure rate limit storage {storage_uri}: {e}. Using in-memory storage.")
        return Limiter(
            key_func=get_remote_address,
            storage_uri=MEMORY_STORAGE_URI,
            default_limits=["1000/hour"],
            enabled=enabled,
        )


limiter = build_limiter(settings.RATE_LIMIT_STORAGE_URI, enabled=settings.RATE_LIMIT_ENABLED)
