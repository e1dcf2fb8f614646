"""
Interfaces shared by the session store and its backends.

SessionStore is the contract a web-session middleware consumes.
KeyValueBackend is the subset of the DynamoDB client API the store needs;
an aiobotocore DynamoDB client satisfies it, as does InMemoryDynamoDBClient.
"""

import asyncio
import logging
from typing import Any, Awaitable, Dict, Optional, Protocol, Set, runtime_checkable

logger = logging.getLogger(__name__)


@runtime_checkable
class SessionStore(Protocol):
    """Session persistence operations used by the session middleware"""

    async def set(self, sid: str, session: Dict[str, Any]) -> None:
        ...

    async def get(self, sid: str) -> Optional[Dict[str, Any]]:
        ...

    async def destroy(self, sid: str) -> None:
        ...

    async def touch(self, sid: str, session: Dict[str, Any]) -> None:
        ...


@runtime_checkable
class KeyValueBackend(Protocol):
    """DynamoDB item primitives, called with the botocore keyword arguments"""

    async def put_item(self, **kwargs: Any) -> Dict[str, Any]:
        ...

    async def get_item(self, **kwargs: Any) -> Dict[str, Any]:
        ...

    async def delete_item(self, **kwargs: Any) -> Dict[str, Any]:
        ...

    async def update_item(self, **kwargs: Any) -> Dict[str, Any]:
        ...


# Strong references to detached tasks so they are not garbage collected mid-flight
_background_tasks: Set["asyncio.Task[Any]"] = set()


def _discard_result(task: "asyncio.Task[Any]") -> None:
    _background_tasks.discard(task)
    if task.cancelled():
        return
    error = task.exception()
    if error is not None:
        logger.debug(f"Detached session store call failed: {error!r}")


def run_detached(call: Awaitable[Any]) -> "asyncio.Task[Any]":
    """
    Run a store call without waiting for it.

    Any error the call raises is dropped (logged at DEBUG), which is the
    behaviour of destroy/touch when the caller does not ask for completion.
    Must be called from a running event loop.
    """
    task = asyncio.ensure_future(call)
    _background_tasks.add(task)
    task.add_done_callback(_discard_result)
    return task
