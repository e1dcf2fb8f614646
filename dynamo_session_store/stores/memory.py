"""In-memory stand-in for a DynamoDB client.

Implements the item primitives the session store uses, with the same
keyword arguments, response shapes and ClientError codes as the real client.
For local development and tests; nothing is persisted.
"""

import copy
import re
from typing import Any, Dict, List, Mapping, Optional

from botocore.exceptions import ClientError

Item = Dict[str, Dict[str, Any]]

_SET_CLAUSE = re.compile(r"^\s*(#?[A-Za-z0-9_]+)\s*=\s*(:[A-Za-z0-9_]+)\s*$")


def _client_error(code: str, message: str, operation: str) -> ClientError:
    return ClientError({"Error": {"Code": code, "Message": message}}, operation)


class InMemoryDynamoDBClient:
    """
    Dict-backed DynamoDB client supporting put/get/delete/update item.

    Args:
        tables: Table name to partition key attribute name
    """

    def __init__(self, tables: Optional[Mapping[str, str]] = None) -> None:
        self._key_schema: Dict[str, str] = dict(tables or {})
        self._tables: Dict[str, Dict[str, Item]] = {name: {} for name in self._key_schema}

    def create_table(self, name: str, hash_key: str) -> None:
        if name in self._tables:
            raise _client_error("ResourceInUseException", f"Table already exists: {name}", "CreateTable")
        self._key_schema[name] = hash_key
        self._tables[name] = {}

    def scan_table(self, name: str) -> List[Item]:
        """Return a copy of every item in a table"""
        return [copy.deepcopy(item) for item in self._table(name, "Scan").values()]

    def _table(self, name: str, operation: str) -> Dict[str, Item]:
        if name not in self._tables:
            raise _client_error(
                "ResourceNotFoundException",
                "Requested resource not found",
                operation,
            )
        return self._tables[name]

    def _key_value(self, table: str, key: Mapping[str, Any], operation: str) -> str:
        hash_key = self._key_schema[table]
        attribute = key.get(hash_key)
        if not isinstance(attribute, Mapping) or "S" not in attribute:
            raise _client_error(
                "ValidationException",
                "The provided key element does not match the schema",
                operation,
            )
        return attribute["S"]

    async def put_item(self, *, TableName: str, Item: Item, **_: Any) -> Dict[str, Any]:
        table = self._table(TableName, "PutItem")
        key = self._key_value(TableName, Item, "PutItem")
        table[key] = copy.deepcopy(dict(Item))
        return {}

    async def get_item(
        self, *, TableName: str, Key: Mapping[str, Any], ConsistentRead: bool = False, **_: Any
    ) -> Dict[str, Any]:
        table = self._table(TableName, "GetItem")
        item = table.get(self._key_value(TableName, Key, "GetItem"))
        if item is None:
            return {}
        return {"Item": copy.deepcopy(item)}

    async def delete_item(self, *, TableName: str, Key: Mapping[str, Any], **_: Any) -> Dict[str, Any]:
        table = self._table(TableName, "DeleteItem")
        table.pop(self._key_value(TableName, Key, "DeleteItem"), None)
        return {}

    async def update_item(
        self,
        *,
        TableName: str,
        Key: Mapping[str, Any],
        UpdateExpression: str,
        ExpressionAttributeValues: Optional[Mapping[str, Any]] = None,
        ExpressionAttributeNames: Optional[Mapping[str, str]] = None,
        ReturnValues: str = "NONE",
        **_: Any,
    ) -> Dict[str, Any]:
        """Apply a `SET a = :v, #b = :w` update, creating the item if absent"""
        table = self._table(TableName, "UpdateItem")
        key_value = self._key_value(TableName, Key, "UpdateItem")
        names = ExpressionAttributeNames or {}
        values = ExpressionAttributeValues or {}

        action, _, clauses = UpdateExpression.strip().partition(" ")
        if action.upper() != "SET" or not clauses.strip():
            raise _client_error(
                "ValidationException",
                f"Unsupported update expression: {UpdateExpression}",
                "UpdateItem",
            )

        updates: Item = {}
        for clause in clauses.split(","):
            match = _SET_CLAUSE.match(clause)
            if not match:
                raise _client_error(
                    "ValidationException",
                    f"Invalid UpdateExpression clause: {clause.strip()}",
                    "UpdateItem",
                )
            name, placeholder = match.groups()
            if name.startswith("#"):
                if name not in names:
                    raise _client_error(
                        "ValidationException",
                        f"An expression attribute name used in the document path is not defined: {name}",
                        "UpdateItem",
                    )
                name = names[name]
            if placeholder not in values:
                raise _client_error(
                    "ValidationException",
                    f"An expression attribute value used in expression is not defined: {placeholder}",
                    "UpdateItem",
                )
            updates[name] = copy.deepcopy(dict(values[placeholder]))

        item = table.setdefault(key_value, copy.deepcopy(dict(Key)))
        item.update(updates)

        if ReturnValues == "UPDATED_NEW":
            return {"Attributes": copy.deepcopy(updates)}
        if ReturnValues == "ALL_NEW":
            return {"Attributes": copy.deepcopy(item)}
        return {}
