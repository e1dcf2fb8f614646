"""Session stores and the helpers they share."""

from typing import Optional

from pydantic import ValidationError

from dynamo_session_store.core.config import Settings
from dynamo_session_store.core.exceptions import ConfigurationError
from dynamo_session_store.stores.base import KeyValueBackend, SessionStore, run_detached
from dynamo_session_store.stores.dynamodb import DynamoDBStore
from dynamo_session_store.stores.memory import InMemoryDynamoDBClient


def create_store(
    settings: Optional[Settings] = None, client: Optional[KeyValueBackend] = None
) -> DynamoDBStore:
    """
    Build a DynamoDBStore from application settings.

    Args:
        settings: Settings to read; the global settings when omitted
        client: Optional pre-built backend client, overriding configured credentials

    Raises:
        ConfigurationError: If no client is given and no AWS credentials are configured
    """
    if settings is None:
        from dynamo_session_store.core.config import settings

    try:
        config = settings.store_config(client=client)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid session store configuration: {e}") from e
    return DynamoDBStore(config)


__all__ = [
    "DynamoDBStore",
    "InMemoryDynamoDBClient",
    "KeyValueBackend",
    "SessionStore",
    "create_store",
    "run_detached",
]
