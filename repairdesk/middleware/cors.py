"""
Browser origins allowed to call the desk API

The staff dashboard at ``SHOP_FRONTEND_URL`` is always allowed. Extra origins,
such as a counter kiosk or a customer status page, come from
``CORS_ALLOWED_ORIGINS``. Loopback origins are dropped in production.
"""
import logging
from typing import List, Optional
from urllib.parse import urlsplit

from repairdesk.config import Settings, settings

logger = logging.getLogger(__name__)

LOOPBACK_HOSTS = {"localhost", "127.0.0.1", "0.0.0.0", "::1"}


def normalize_origin(value: str) -> Optional[str]:
    """
    Reduce a configured URL to the ``scheme://host[:port]`` a browser sends

    Returns:
        The origin, or None when the value is not an http(s) URL
    """
    parts = urlsplit(value.strip())
    if parts.scheme not in ("http", "https") or not parts.hostname:
        return None
    host = parts.netloc.rsplit("@", 1)[-1].lower()
    return f"{parts.scheme}://{host}"


def is_loopback(origin: str) -> bool:
    return urlsplit(origin).hostname in LOOPBACK_HOSTS


def get_cors_origins(config: Optional[Settings] = None) -> List[str]:
    """
    Allowed origins: the shop front end first, then the extra origins

    Duplicates and malformed entries are skipped.

    Raises:
        ValueError: In production when no public origin is left
    """
    config = config or settings
    origins: List[str] = []
    for value in [config.shop_frontend_url, *config.cors_allowed_origins]:
        if not value:
            continue
        origin = normalize_origin(value)
        if origin is None:
            logger.warning(f"CORS: ignoring malformed origin {value!r}")
            continue
        if origin not in origins:
            origins.append(origin)

    if config.environment != "production":
        return origins

    public = [origin for origin in origins if not is_loopback(origin)]
    if not public:
        raise ValueError(
            "No public origin for the shop front end in production. "
            "Set SHOP_FRONTEND_URL to the dashboard's public address."
        )

    dropped = [origin for origin in origins if origin not in public]
    if dropped:
        logger.warning(f"CORS: dropped loopback origins in production: {dropped}")
    return public
