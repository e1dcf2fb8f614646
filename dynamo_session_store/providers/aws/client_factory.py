import logging
from typing import Optional

import aiobotocore.session
from aiobotocore.session import ClientCreatorContext
from botocore.config import Config

from dynamo_session_store.core.config import AWSCredentials

logger = logging.getLogger(__name__)

DYNAMODB_SERVICE = "dynamodb"


def create_dynamodb_client(
    credentials: AWSCredentials,
    config: Optional[Config] = None,
) -> ClientCreatorContext:
    """
    Create a DynamoDB client from explicit credentials.

    The returned object is an async context manager; entering it yields the
    client and leaving it closes the underlying HTTP session:

        async with create_dynamodb_client(creds) as dynamodb:
            await dynamodb.get_item(...)

    Args:
        credentials: Access key, secret key, optional session token and region
        config: Optional botocore Config (timeouts, retries)
    """
    logger.debug(
        f"Creating DynamoDB client in {credentials.region}"
        + (f" at {credentials.endpoint_url}" if credentials.endpoint_url else "")
    )

    session = aiobotocore.session.get_session()
    return session.create_client(
        DYNAMODB_SERVICE,
        region_name=credentials.region,
        endpoint_url=credentials.endpoint_url,
        aws_access_key_id=credentials.access_key,
        aws_secret_access_key=credentials.secret_key,
        aws_session_token=credentials.session_token,
        config=config,
    )
