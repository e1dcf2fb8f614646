"""
Unit tests for the record codec

Covers typed attribute marshalling and decoding of stored session items.
"""

import json

import pytest

from dynamo_session_store.core.exceptions import DecodeError
from dynamo_session_store.stores.codec import (
    EXPIRES_KEY,
    SESSION_KEY,
    AttributeType,
    SessionRecord,
    marshal_item,
    parse_expires,
    parse_session,
    unmarshal_value,
)

pytestmark = pytest.mark.unit


class TestMarshalItem:
    """Test wrapping values in type descriptors"""

    def test_defaults_to_string_type(self):
        item = marshal_item({"SessionID": "abc", "Session": "{}"})

        assert item == {"SessionID": {"S": "abc"}, "Session": {"S": "{}"}}

    def test_type_override_applies_only_to_listed_fields(self):
        item = marshal_item(
            {"SessionID": "abc", "Expires": "1700000300"},
            {"Expires": AttributeType.NUMBER},
        )

        assert item["Expires"] == {"N": "1700000300"}
        assert item["SessionID"] == {"S": "abc"}

    def test_type_override_accepts_plain_tag_strings(self):
        item = marshal_item({"Expires": "12"}, {"Expires": "N"})

        assert item == {"Expires": {"N": "12"}}

    def test_unknown_tag_rejected(self):
        with pytest.raises(ValueError):
            marshal_item({"Expires": "12"}, {"Expires": "BOOL"})

    def test_values_are_not_validated(self):
        # the caller guarantees pre-serialized text
        item = marshal_item({"Expires": "not-a-number"}, {"Expires": AttributeType.NUMBER})

        assert item == {"Expires": {"N": "not-a-number"}}

    def test_empty_fields(self):
        assert marshal_item({}) == {}

    def test_round_trip(self):
        fields = {"SessionID": "abc", "Expires": "1700000300", "Session": '{"a": 1}'}
        types = {"Expires": AttributeType.NUMBER}

        item = marshal_item(fields, types)

        for name, value in fields.items():
            tag = types.get(name, AttributeType.STRING)
            assert unmarshal_value(item, name, tag) == value


class TestUnmarshalValue:
    """Test extracting raw values from typed attributes"""

    def test_missing_attribute(self):
        with pytest.raises(DecodeError) as exc_info:
            unmarshal_value({}, "Session", AttributeType.STRING)

        assert exc_info.value.attribute == "Session"

    def test_wrong_type(self):
        item = {"Expires": {"S": "1700000300"}}

        with pytest.raises(DecodeError):
            unmarshal_value(item, "Expires", AttributeType.NUMBER)

    def test_decode_error_is_value_error(self):
        with pytest.raises(ValueError):
            unmarshal_value({"Session": "raw"}, "Session", AttributeType.STRING)


class TestItemParsing:
    """Test decoding the reserved Session and Expires attributes"""

    def test_parse_expires_absent(self):
        assert parse_expires({"SessionID": {"S": "abc"}}) is None

    def test_parse_expires_integer(self):
        assert parse_expires({EXPIRES_KEY: {"N": "1700000300"}}) == 1700000300

    def test_parse_expires_decimal_truncates(self):
        assert parse_expires({EXPIRES_KEY: {"N": "1700000300.9"}}) == 1700000300

    def test_parse_expires_not_a_number(self):
        with pytest.raises(DecodeError) as exc_info:
            parse_expires({EXPIRES_KEY: {"N": "soon"}})

        assert exc_info.value.attribute == EXPIRES_KEY

    def test_parse_session(self):
        item = {SESSION_KEY: {"S": '{"user": "alice", "n": [1, 2]}'}}

        assert parse_session(item) == {"user": "alice", "n": [1, 2]}

    def test_parse_session_malformed_json(self):
        with pytest.raises(DecodeError) as exc_info:
            parse_session({SESSION_KEY: {"S": "{not json"}})

        assert exc_info.value.attribute == SESSION_KEY
        assert isinstance(exc_info.value.__cause__, json.JSONDecodeError)

    def test_parse_session_missing(self):
        with pytest.raises(DecodeError):
            parse_session({EXPIRES_KEY: {"N": "1"}})


class TestSessionRecord:
    """Test SessionRecord conversion to items"""

    def test_to_item_layout(self, sample_session):
        record = SessionRecord(id="abc", payload=sample_session, expires_at=1700000060)

        item = record.to_item("SessionID")

        assert item["SessionID"] == {"S": "abc"}
        assert item[EXPIRES_KEY] == {"N": "1700000060"}
        assert json.loads(item[SESSION_KEY]["S"]) == sample_session

    def test_item_decodes_with_parse_helpers(self, sample_session):
        item = SessionRecord(id="abc", payload=sample_session, expires_at=1700000060).to_item("SessionID")

        assert parse_expires(item) == 1700000060
        assert parse_session(item) == sample_session
