"""DynamoDB-backed session store.

Each session is one item keyed by the session id:

    <hash_key>  S  session id
    Expires     N  unix seconds, exclusive
    Session     S  JSON text of the full session

Expiration is checked on every read. A TTL on the Expires attribute should be
enabled on the table so DynamoDB eventually removes expired items; the store
does not create tables or configure TTL.
"""

import asyncio
import json
import logging
from contextlib import AsyncExitStack
from typing import Any, Dict, Optional

from botocore.exceptions import BotoCoreError, ClientError
from pydantic import ValidationError

from dynamo_session_store.core.config import DynamoDBStoreConfig
from dynamo_session_store.core.exceptions import BackendError, ConfigurationError
from dynamo_session_store.providers.aws.client_factory import create_dynamodb_client
from dynamo_session_store.stores.base import KeyValueBackend
from dynamo_session_store.stores.codec import (
    EXPIRES_KEY,
    AttributeType,
    SessionRecord,
    parse_expires,
    parse_session,
)
from dynamo_session_store.stores.expiration import compute_expiration, is_expired

logger = logging.getLogger(__name__)

_BACKEND_ERRORS = (ClientError, BotoCoreError)


class DynamoDBStore:
    """
    Session store persisting sessions to a DynamoDB table.

    Implements the SessionStore protocol (set, get, destroy, touch). The table
    must already exist with a string partition key named `hash_key`.

    Usage:
        store = DynamoDBStore(table="Sessions", hash_key="SessionID", client=dynamodb)

        # or let the store own its client
        async with DynamoDBStore(table="Sessions", hash_key="SessionID",
                                 credentials=AWSCredentials(...)) as store:
            await store.set(sid, session)
    """

    def __init__(self, config: Optional[DynamoDBStoreConfig] = None, **options: Any):
        """
        Args:
            config: Store configuration
            **options: Fields of DynamoDBStoreConfig, used when config is not given

        Raises:
            ConfigurationError: If required options are missing or invalid
        """
        if config is not None and options:
            raise ConfigurationError("Pass either a config object or keyword options, not both")
        if config is None:
            try:
                config = DynamoDBStoreConfig(**options)
            except ValidationError as e:
                raise ConfigurationError(f"Invalid session store configuration: {e}") from e

        self.config = config
        self.table = config.table
        self.hash_key = config.hash_key

        self._client: Optional[KeyValueBackend] = config.client
        self._exit_stack: Optional[AsyncExitStack] = None
        self._client_lock = asyncio.Lock()

    async def __aenter__(self) -> "DynamoDBStore":
        await self._get_client()
        return self

    async def __aexit__(self, exc_type: Any, exc: Any, tb: Any) -> None:
        await self.close()

    async def _get_client(self) -> KeyValueBackend:
        """Return the backend client, opening one from credentials on first use"""
        if self._client is not None:
            return self._client

        async with self._client_lock:
            if self._client is None:
                stack = AsyncExitStack()
                try:
                    self._client = await stack.enter_async_context(
                        create_dynamodb_client(self.config.credentials)
                    )
                except _BACKEND_ERRORS as e:
                    await stack.aclose()
                    raise BackendError("create_client", e) from e
                self._exit_stack = stack
                logger.debug(f"Opened DynamoDB client for table {self.table}")
        return self._client

    async def close(self) -> None:
        """Close a client opened from credentials. A client passed in is left open."""
        if self._exit_stack is None:
            return
        stack, self._exit_stack = self._exit_stack, None
        self._client = None
        await stack.aclose()
        logger.debug(f"Closed DynamoDB client for table {self.table}")

    def _key(self, sid: str) -> Dict[str, Dict[str, str]]:
        return {self.hash_key: {AttributeType.STRING.value: sid}}

    async def _call(self, operation: str, **params: Any) -> Dict[str, Any]:
        client = await self._get_client()
        try:
            return await getattr(client, operation)(TableName=self.table, **params)
        except _BACKEND_ERRORS as e:
            raise BackendError(operation, e) from e

    async def set(self, sid: str, session: Dict[str, Any]) -> None:
        """
        Store a session, replacing any existing item with the same id.

        Raises:
            BackendError: If the put fails
        """
        record = SessionRecord(
            id=sid,
            payload=session,
            expires_at=compute_expiration(session),
        )
        await self._call("put_item", Item=record.to_item(self.hash_key))
        logger.debug(f"Stored session, expires at {record.expires_at}")

    async def get(self, sid: str) -> Optional[Dict[str, Any]]:
        """
        Fetch a session.

        Returns:
            The stored session, or None if there is none or it has expired

        Raises:
            BackendError: If the read fails
            DecodeError: If the stored item is malformed
        """
        result = await self._call("get_item", Key=self._key(sid), ConsistentRead=True)

        item = result.get("Item")
        if not item:
            return None

        # Expired items are dropped before the payload is decoded
        expires_at = parse_expires(item)
        if expires_at is not None and is_expired(expires_at):
            logger.debug(f"Session expired at {expires_at}")
            if self.config.delete_expired_on_read:
                await self.destroy(sid)
            return None

        return parse_session(item)

    async def destroy(self, sid: str) -> None:
        """
        Delete a session. Deleting a missing session is not an error.

        Raises:
            BackendError: If the delete fails
        """
        await self._call("delete_item", Key=self._key(sid))
        logger.debug("Destroyed session")

    async def touch(self, sid: str, session: Dict[str, Any]) -> None:
        """
        Push a session's expiration back without rewriting its payload.

        Only the Expires attribute is written. If no item exists the backend
        creates one holding just the key and Expires; get() reports such an
        item as a DecodeError until a later set() writes the payload.

        Raises:
            BackendError: If the update fails
        """
        expires_at = compute_expiration(session)
        await self._call(
            "update_item",
            Key=self._key(sid),
            UpdateExpression="SET #expires = :e",
            ExpressionAttributeNames={"#expires": EXPIRES_KEY},
            ExpressionAttributeValues={":e": {AttributeType.NUMBER.value: json.dumps(expires_at)}},
            ReturnValues="UPDATED_NEW",
        )
        logger.debug(f"Touched session, expires at {expires_at}")
