"""
DynamoDB-backed session store with lazy expiry.

Usage:
    from dynamo_session_store import DynamoDBStore

    store = DynamoDBStore(table="Sessions", hash_key="SessionID", client=dynamodb)
    await store.set(sid, {"cookie": {"maxAge": 60000}, "user": "alice"})
"""

from dynamo_session_store.core.config import AWSCredentials, DynamoDBStoreConfig, Settings
from dynamo_session_store.core.exceptions import (
    BackendError,
    ConfigurationError,
    DecodeError,
    SessionStoreError,
)
from dynamo_session_store.stores import (
    DynamoDBStore,
    InMemoryDynamoDBClient,
    SessionStore,
    create_store,
    run_detached,
)

__version__ = "1.0.0"

__all__ = [
    "AWSCredentials",
    "BackendError",
    "ConfigurationError",
    "DecodeError",
    "DynamoDBStore",
    "DynamoDBStoreConfig",
    "InMemoryDynamoDBClient",
    "SessionStore",
    "SessionStoreError",
    "Settings",
    "create_store",
    "run_detached",
]
