"""
Shared fixtures for asana_rest tests.

No test makes a real API call: the client is built on a Mock transport
whose ``send`` returns canned responses, and assertions inspect the
PreparedRequest objects the client handed to it.
"""

import json
from typing import Any, Optional
from unittest.mock import Mock

import pytest

from asana_rest import AsanaClient


def make_response(status_code: int = 200, body: Any = None, raw: Optional[bytes] = None) -> Mock:
    """Mock requests.Response carrying a JSON body (or raw bytes)."""
    response = Mock()
    response.status_code = status_code
    response.url = "https://app.asana.com/api/1.0/mock"
    if raw is not None:
        response.content = raw
    elif body is not None:
        response.content = json.dumps(body).encode()
    else:
        response.content = b""
    response.json.side_effect = lambda: json.loads(response.content)
    return response


def page(items, offset: Optional[str] = None) -> Mock:
    """Mock response for one page of a list, with an optional cursor."""
    body = {"data": items}
    if offset is not None:
        body["next_page"] = {
            "offset": offset,
            "path": f"/tasks?offset={offset}",
            "uri": f"https://app.asana.com/api/1.0/tasks?offset={offset}",
        }
    return make_response(200, body)


@pytest.fixture
def transport():
    """Transport double; set ``transport.send.return_value``/``side_effect``."""
    mock = Mock()
    mock.send.return_value = make_response(200, {"data": {}})
    return mock


@pytest.fixture
def client(transport):
    return AsanaClient(transport)


def sent_requests(transport):
    """PreparedRequests passed to the transport, in order."""
    return [c.args[0] for c in transport.send.call_args_list]
