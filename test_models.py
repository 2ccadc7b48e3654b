#!/usr/bin/env python3
"""
Unit tests for asana_rest support modules

Tests cover:
- Filter encoding and copy semantics
- Update payload serialization
- Webhook event decoding
- Configuration loading
- Transports
- Exception classes
"""

import os
import sys
from datetime import datetime, timezone
from pathlib import Path
from unittest.mock import MagicMock, Mock, patch

import pytest
import requests
from pydantic import ValidationError

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent))

from asana_rest import (
    AsanaAPIError,
    AsanaAuthError,
    AsanaConfig,
    AsanaDecodeError,
    AsanaError,
    BearerTokenTransport,
    DEFAULT_BASE_URL,
    ErrorRecord,
    Filter,
    HTTPTransport,
    MembershipUpdate,
    REQUEST_TIMEOUT,
    SectionUpdate,
    TaskUpdate,
    TransportFunc,
    load_config,
    parse_events,
)


class TestFilter:
    """Tests for Filter."""

    def test_default_filter_sends_nothing(self):
        assert Filter().to_params() == []

    def test_only_set_options_sent(self):
        params = dict(Filter(project=12, limit=100).to_params())
        assert params == {"project": "12", "limit": "100"}

    def test_list_options_comma_joined(self):
        params = dict(Filter(opt_fields=["name", "assignee.name"], opt_expand=["tags"]).to_params())
        assert params["opt_fields"] == "name,assignee.name"
        assert params["opt_expand"] == "tags"

    def test_datetime_and_sentinel(self):
        when = datetime(2023, 5, 1, 12, 0, tzinfo=timezone.utc)
        params = dict(Filter(completed_since="now", modified_since=when).to_params())
        assert params["completed_since"] == "now"
        assert params["modified_since"] == "2023-05-01T12:00:00+00:00"

    def test_booleans(self):
        assert dict(Filter(archived=True).to_params()) == {"archived": "true"}
        assert dict(Filter(archived=False).to_params()) == {"archived": "false"}

    def test_empty_offset_not_sent(self):
        assert Filter(offset="").to_params() == []

    def test_with_offset_returns_copy(self):
        original = Filter(project=1, opt_fields=["name"])
        advanced = original.with_offset("abc")
        assert advanced.offset == "abc"
        assert advanced.project == 1
        assert advanced.opt_fields == ("name",)
        assert original.offset is None

    def test_with_opt_fields_returns_copy(self):
        original = Filter()
        selected = original.with_opt_fields(["name"])
        assert selected.opt_fields == ("name",)
        assert original.opt_fields == ()

    def test_frozen(self):
        opt = Filter(project=1)
        with pytest.raises(ValidationError):
            opt.offset = "x"

    def test_unknown_option_rejected(self):
        with pytest.raises(ValidationError):
            Filter(projects=1)

    def test_limit_must_be_positive(self):
        with pytest.raises(ValidationError):
            Filter(limit=0)


class TestUpdatePayloads:
    """Tests for partial-update payload serialization."""

    def test_unset_fields_omitted(self):
        assert TaskUpdate(name="x").to_payload() == {"name": "x"}
        assert TaskUpdate().to_payload() == {}

    def test_false_values_kept(self):
        assert TaskUpdate(completed=False, hearted=False).to_payload() == {
            "completed": False,
            "hearted": False,
        }

    def test_completed_at_serialized(self):
        update = TaskUpdate(completed_at=datetime(2024, 2, 1, 9, 30, tzinfo=timezone.utc))
        assert update.to_payload()["completed_at"].startswith("2024-02-01T09:30:00")

    def test_custom_fields_keys_are_strings(self):
        payload = TaskUpdate(custom_fields={123: "High", "456": 7}).to_payload()
        assert payload == {"custom_fields": {"123": "High", "456": 7}}

    def test_membership_update(self):
        update = MembershipUpdate(project=1, insert_after=5)
        assert update.to_payload() == {"project": 1, "insert_after": 5}

    def test_membership_update_accepts_gids(self):
        update = MembershipUpdate(project="1201", section="1202", insert_before=9)
        assert update.to_payload() == {"project": "1201", "section": "1202", "insert_before": 9}

    def test_section_update(self):
        assert SectionUpdate().to_payload() == {}
        assert SectionUpdate(name="Later").to_payload() == {"name": "Later"}


class TestEvents:
    """Tests for webhook event decoding."""

    BODY = (
        b'{"events": ['
        b'{"user": {"id": 1, "name": "Ana"}, "resource": {"id": 2, "name": "Task"},'
        b' "type": "task", "action": "changed", "created_at": "2024-01-01T00:00:00.000Z"},'
        b'{"user": null, "resource": {"id": 3}, "type": "story", "action": "added",'
        b' "parent": {"id": 2}}'
        b"]}"
    )

    def test_parse_bytes(self):
        events = parse_events(self.BODY)
        assert len(events) == 2
        assert events[0].user.name == "Ana"
        assert events[0].action == "changed"
        assert events[0].created_at.year == 2024
        assert events[1].user is None
        assert events[1].parent.id == 2

    def test_parse_decoded_dict(self):
        events = parse_events({"events": [{"type": "project", "action": "removed"}]})
        assert events[0].type == "project"

    def test_handshake_body_is_empty(self):
        assert parse_events(b"") == []
        assert parse_events({}) == []

    def test_malformed_body(self):
        with pytest.raises(AsanaDecodeError):
            parse_events(b"{not json")
        with pytest.raises(AsanaDecodeError):
            parse_events({"events": "nope"})


class TestConfig:
    """Tests for configuration loading."""

    def test_defaults(self):
        config = AsanaConfig.from_mapping({})
        assert config.base_url == DEFAULT_BASE_URL
        assert config.timeout == REQUEST_TIMEOUT
        assert config.workspace is None
        assert not config.has_token

    def test_from_mapping(self):
        config = AsanaConfig.from_mapping({
            "ASANA_ACCESS_TOKEN": "tok",
            "ASANA_BASE_URL": "https://example.test/api/",
            "ASANA_REQUEST_TIMEOUT": "12.5",
            "ASANA_WORKSPACE": "99",
        })
        assert config.access_token == "tok"
        assert config.base_url == "https://example.test/api/"
        assert config.timeout == 12.5
        assert config.workspace == "99"

    def test_invalid_timeout(self):
        with pytest.raises(ValueError) as exc_info:
            AsanaConfig.from_mapping({"ASANA_REQUEST_TIMEOUT": "soon"})
        assert "ASANA_REQUEST_TIMEOUT" in str(exc_info.value)
        assert exc_info.value.__cause__ is None
        assert exc_info.value.__suppress_context__

    def test_missing_token_raises(self):
        with pytest.raises(AsanaAuthError) as exc_info:
            AsanaConfig().access_token
        assert "ASANA_ACCESS_TOKEN" in str(exc_info.value)

    def test_repr_hides_token(self):
        assert "secret" not in repr(AsanaConfig(access_token="secret"))

    def test_load_config_reads_environment(self):
        with patch.dict(os.environ, {"ASANA_ACCESS_TOKEN": "env_token"}, clear=True):
            config = load_config(dotenv=False)
        assert config.access_token == "env_token"

    def test_load_config_loads_dotenv(self):
        with patch("asana_rest.config.load_dotenv") as mock_load:
            with patch.dict(os.environ, {}, clear=True):
                load_config()
        mock_load.assert_called_once()


class TestTransports:
    """Tests for transport implementations."""

    def prepared(self):
        return requests.Request("GET", "https://app.asana.com/api/1.0/tasks").prepare()

    def test_http_transport_applies_timeout(self):
        session = MagicMock()
        transport = HTTPTransport(session=session, timeout=7)
        request = self.prepared()

        transport.send(request)

        session.send.assert_called_once_with(request, timeout=7)

    def test_bearer_transport_sets_header(self):
        session = MagicMock()
        transport = BearerTokenTransport("tok123", session=session)
        request = self.prepared()

        transport.send(request)

        sent = session.send.call_args.args[0]
        assert sent.headers["Authorization"] == "Bearer tok123"
        assert session.send.call_args.kwargs["timeout"] == REQUEST_TIMEOUT

    def test_bearer_transport_requires_token(self):
        with pytest.raises(ValueError):
            BearerTokenTransport("")

    def test_transport_func(self):
        response = Mock()
        func = Mock(return_value=response)
        request = self.prepared()
        assert TransportFunc(func).send(request) is response
        func.assert_called_once_with(request)

    def test_close_closes_session(self):
        session = MagicMock()
        HTTPTransport(session=session).close()
        session.close.assert_called_once()


class TestExceptionClasses:
    """Tests for custom exception classes."""

    def test_hierarchy(self):
        assert issubclass(AsanaAuthError, AsanaError)
        assert issubclass(AsanaAPIError, AsanaError)
        assert issubclass(AsanaDecodeError, AsanaError)

    def test_auth_error_message(self):
        assert str(AsanaAuthError()) == "asana: unauthorized"

    def test_api_error_carries_records(self):
        records = [ErrorRecord(message="a", phrase="b"), ErrorRecord(message="c")]
        error = AsanaAPIError(records, 403)
        assert error.status_code == 403
        assert error.errors == records
        assert str(error) == "code: 403, a - b, c - "

    def test_decode_error_status(self):
        assert AsanaDecodeError("bad", 500).status_code == 500
        assert AsanaDecodeError("bad").status_code is None
