"""
Wiring of server-side sessions into an ASGI application from Settings.
"""

import logging
from typing import Optional

from starlette.applications import Starlette

from dynamo_session_store.core.config import Settings
from dynamo_session_store.core.logging_config import configure_logging
from dynamo_session_store.stores import DynamoDBStore, KeyValueBackend, create_store
from dynamo_session_store.web.middleware import ServerSideSessionMiddleware

logger = logging.getLogger(__name__)


def setup_sessions(
    app: Starlette,
    settings: Optional[Settings] = None,
    client: Optional[KeyValueBackend] = None,
) -> DynamoDBStore:
    """
    Configure logging, build the session store and add the session middleware.

    Must be called before the application starts serving. The returned store
    owns any client it opens from credentials; close it on shutdown.

    Args:
        app: Starlette or FastAPI application
        settings: Settings to read; the global settings when omitted
        client: Optional pre-built backend client, overriding configured credentials

    Raises:
        ConfigurationError: If no client is given and no AWS credentials are configured
    """
    if settings is None:
        from dynamo_session_store.core.config import settings

    configure_logging(settings)
    store = create_store(settings, client=client)

    app.add_middleware(
        ServerSideSessionMiddleware,
        store=store,
        secret_key=settings.SECRET_KEY,
        session_cookie=settings.SESSION_COOKIE_NAME,
        max_age_ms=settings.SESSION_MAX_AGE_MS,
    )
    logger.info(
        "Server-side sessions enabled",
        extra={"table": store.table},
    )
    return store
