"""
Marshalling between session records and DynamoDB typed attribute maps.

A stored item looks like:

    {
        "<hash_key>": {"S": "<session id>"},
        "Expires":    {"N": "1700000300"},
        "Session":    {"S": "{\"cookie\": {...}, ...}"},
    }
"""

import json
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any, Dict, Mapping, Optional

from dynamo_session_store.core.exceptions import DecodeError

# Attribute holding the JSON text of the full session payload
SESSION_KEY = "Session"
# Attribute holding the expiration, unix seconds
EXPIRES_KEY = "Expires"

BackendItem = Dict[str, Dict[str, str]]


class AttributeType(str, Enum):
    """DynamoDB attribute type descriptors supported by the codec"""
    STRING = "S"
    NUMBER = "N"


def marshal_item(
    fields: Mapping[str, str],
    types: Optional[Mapping[str, AttributeType]] = None,
) -> BackendItem:
    """
    Wrap each field value in its DynamoDB type descriptor.

    Args:
        fields: Attribute name to pre-serialized text value
        types: Optional attribute name to type overrides; unlisted fields are strings

    Returns:
        Item in DynamoDB attribute-value format
    """
    types = types or {}
    result: BackendItem = {}
    for name, value in fields.items():
        tag = AttributeType(types.get(name, AttributeType.STRING))
        result[name] = {tag.value: value}
    return result


def unmarshal_value(item: Mapping[str, Any], name: str, tag: AttributeType) -> str:
    """
    Extract the raw value stored under `name` with type `tag`.

    Raises:
        DecodeError: If the attribute is absent or not stored with that type
    """
    attribute = item.get(name)
    if not isinstance(attribute, Mapping):
        raise DecodeError(f"Attribute '{name}' is missing from item", attribute=name)

    tag = AttributeType(tag)
    if tag.value not in attribute:
        raise DecodeError(
            f"Attribute '{name}' is not of type {tag.value}", attribute=name
        )
    return attribute[tag.value]


def parse_expires(item: Mapping[str, Any]) -> Optional[int]:
    """Return the item's expiration in unix seconds, or None if it has none"""
    if EXPIRES_KEY not in item:
        return None
    raw = unmarshal_value(item, EXPIRES_KEY, AttributeType.NUMBER)
    try:
        return int(Decimal(raw))
    except (InvalidOperation, ValueError, TypeError, OverflowError) as e:
        raise DecodeError(
            f"Attribute '{EXPIRES_KEY}' is not a number: {raw!r}", attribute=EXPIRES_KEY
        ) from e


def parse_session(item: Mapping[str, Any]) -> Any:
    """Decode the JSON session payload of an item"""
    raw = unmarshal_value(item, SESSION_KEY, AttributeType.STRING)
    try:
        return json.loads(raw)
    except json.JSONDecodeError as e:
        raise DecodeError(
            f"Attribute '{SESSION_KEY}' is not valid JSON: {e}", attribute=SESSION_KEY
        ) from e


@dataclass
class SessionRecord:
    """One session as written by set(): id, JSON-serializable payload and expiration"""
    id: str
    payload: Any
    expires_at: int

    def to_item(self, hash_key: str) -> BackendItem:
        """Convert to DynamoDB item format."""
        fields = {
            EXPIRES_KEY: str(self.expires_at),
            SESSION_KEY: json.dumps(self.payload),
            hash_key: self.id,
        }
        return marshal_item(fields, {EXPIRES_KEY: AttributeType.NUMBER})
