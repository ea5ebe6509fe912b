"""Observability configuration with Pydantic Logfire."""

import logging
from typing import Any

from commandless.config import settings

logger = logging.getLogger(__name__)


def setup_logfire(app: Any | None = None) -> bool:
    """Configure Logfire for observability.

    Only activates if LOGFIRE_TOKEN environment variable is set.
    Instruments outbound httpx traffic (litellm model calls) and, when an
    application is given, the FastAPI request handlers.

    Args:
        app: Optional FastAPI application to instrument.

    Returns:
        True if Logfire was configured.
    """
    if not settings.logfire_token:
        return False

    try:
        import logfire

        logfire.configure(send_to_logfire="if-token-present")
        logfire.instrument_httpx(capture_all=True)
        if app is not None:
            logfire.instrument_fastapi(app)
    except Exception as e:
        # Log but don't fail - observability is optional
        logger.warning("Failed to configure Logfire: %s", str(e))
        return False
    return True
