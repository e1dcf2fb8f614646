"""
Server-side session middleware.

Works like Starlette's SessionMiddleware, except the cookie only carries a
signed session id and the session itself lives in a SessionStore. The
persisted session includes a `cookie` entry whose `maxAge` (milliseconds)
the store uses to compute the item's expiration.
"""

import json
import logging
import secrets
from typing import Any, Dict, Optional

from itsdangerous import BadSignature, Signer
from starlette.datastructures import MutableHeaders
from starlette.requests import HTTPConnection
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from dynamo_session_store.core.logging_config import (
    REQUEST_ID_HEADER,
    bind_correlation_id,
    correlation_id_ctx,
)
from dynamo_session_store.stores.base import SessionStore

logger = logging.getLogger(__name__)

COOKIE_META_KEY = "cookie"


def generate_session_id() -> str:
    return secrets.token_urlsafe(32)


def _snapshot(session: Dict[str, Any]) -> str:
    return json.dumps(session, sort_keys=True, default=str)


class ServerSideSessionMiddleware:
    """
    ASGI middleware exposing `request.session` backed by a SessionStore.

    On each response:
      - a new or modified session is written with store.set()
      - an unmodified existing session has its expiration refreshed with store.touch()
      - an existing session that was cleared is removed with store.destroy()
    """

    def __init__(
        self,
        app: ASGIApp,
        store: SessionStore,
        secret_key: str,
        session_cookie: str = "sid",
        max_age_ms: Optional[int] = None,
        path: str = "/",
        same_site: str = "lax",
        https_only: bool = False,
    ) -> None:
        self.app = app
        self.store = store
        self.signer = Signer(str(secret_key))
        self.session_cookie = session_cookie
        self.max_age_ms = max_age_ms
        self.path = path
        self.same_site = same_site
        self.https_only = https_only
        self.security_flags = "httponly; samesite=" + same_site
        if https_only:
            self.security_flags += "; secure"

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] not in ("http", "websocket"):
            await self.app(scope, receive, send)
            return

        connection = HTTPConnection(scope)
        token = bind_correlation_id(connection.headers.get(REQUEST_ID_HEADER))
        try:
            await self._handle(connection, correlation_id_ctx.get(), scope, receive, send)
        finally:
            correlation_id_ctx.reset(token)

    async def _handle(
        self,
        connection: HTTPConnection,
        request_id: str,
        scope: Scope,
        receive: Receive,
        send: Send,
    ) -> None:
        sid = self._read_session_id(connection)
        stored = await self.store.get(sid) if sid is not None else None

        session = {
            key: value for key, value in (stored or {}).items() if key != COOKIE_META_KEY
        }
        scope["session"] = session
        initial = _snapshot(session)

        async def send_wrapper(message: Message) -> None:
            if message["type"] == "http.response.start":
                await self._commit(scope, message, sid if stored is not None else None, initial)
                MutableHeaders(scope=message)[REQUEST_ID_HEADER] = request_id
            await send(message)

        await self.app(scope, receive, send_wrapper)

    def _read_session_id(self, connection: HTTPConnection) -> Optional[str]:
        value = connection.cookies.get(self.session_cookie)
        if not value:
            return None
        try:
            return self.signer.unsign(value.encode("utf-8")).decode("utf-8")
        except BadSignature:
            logger.warning("Rejected session cookie with invalid signature")
            return None

    def _cookie_meta(self) -> Dict[str, Any]:
        return {
            "maxAge": self.max_age_ms,
            "path": self.path,
            "httpOnly": True,
            "sameSite": self.same_site,
            "secure": self.https_only,
        }

    async def _commit(
        self, scope: Scope, message: Message, sid: Optional[str], initial: str
    ) -> None:
        """Persist the session and set the cookie. `sid` is None when nothing was loaded."""
        session = scope["session"]
        headers = MutableHeaders(scope=message)

        if session:
            payload = {**session, COOKIE_META_KEY: self._cookie_meta()}
            if sid is None:
                sid = generate_session_id()
                await self.store.set(sid, payload)
            elif _snapshot(session) != initial:
                await self.store.set(sid, payload)
            else:
                await self.store.touch(sid, payload)
            headers.append("Set-Cookie", self._cookie_header(sid))
        elif sid is not None:
            await self.store.destroy(sid)
            headers.append(
                "Set-Cookie",
                "{session_cookie}=null; path={path}; expires=Thu, 01 Jan 1970 00:00:00 GMT; {security_flags}".format(
                    session_cookie=self.session_cookie,
                    path=self.path,
                    security_flags=self.security_flags,
                ),
            )

    def _cookie_header(self, sid: str) -> str:
        max_age = ""
        if self.max_age_ms:
            max_age = f"Max-Age={self.max_age_ms // 1000}; "
        return "{session_cookie}={data}; path={path}; {max_age}{security_flags}".format(
            session_cookie=self.session_cookie,
            data=self.signer.sign(sid.encode("utf-8")).decode("utf-8"),
            path=self.path,
            max_age=max_age,
            security_flags=self.security_flags,
        )
