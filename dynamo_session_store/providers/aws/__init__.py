"""
AWS provider: DynamoDB client construction.
"""

from dynamo_session_store.providers.aws.client_factory import create_dynamodb_client

__all__ = ["create_dynamodb_client"]
