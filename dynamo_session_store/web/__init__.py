"""
Web integration for the session store.
"""

from dynamo_session_store.web.middleware import ServerSideSessionMiddleware
from dynamo_session_store.web.setup import setup_sessions

__all__ = ["ServerSideSessionMiddleware", "setup_sessions"]
