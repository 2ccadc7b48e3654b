#!/usr/bin/env python3
"""
Asana Webhook Events

Decodes the body Asana POSTs to a webhook target:

    {"events": [{"user": {...}, "resource": {...}, "action": "changed", ...}]}
"""

import json
import logging
from datetime import datetime
from typing import Any, List, Mapping, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .errors import AsanaDecodeError
from .models import Resource, User

logger = logging.getLogger(__name__)


class Event(BaseModel):
    """
    A single change delivered to a webhook.

    ``user`` is None for system-generated events, and may differ from the
    subscriber. ``resource`` may be a child of the subscribed resource
    (a task inside a subscribed project, for instance). ``parent`` is only
    set for added/removed actions.
    """

    model_config = ConfigDict(extra="ignore")

    user: Optional[User] = None
    resource: Optional[Resource] = None
    type: Optional[str] = None
    action: Optional[str] = None
    parent: Optional[Resource] = None
    created_at: Optional[datetime] = None


class EventBatch(BaseModel):
    model_config = ConfigDict(extra="ignore")

    events: List[Event] = Field(default_factory=list)


def parse_events(body: Union[bytes, str, Mapping[str, Any]]) -> List[Event]:
    """
    Decode a webhook delivery body.

    Args:
        body: Raw request body, or the already-decoded JSON object

    Returns:
        Events in delivery order (empty for the initial handshake request)

    Raises:
        AsanaDecodeError: If the body is not a valid event batch
    """
    if isinstance(body, (bytes, str)):
        if not body:
            return []
        try:
            body = json.loads(body)
        except ValueError as e:
            raise AsanaDecodeError(f"Malformed webhook body: {e}") from e

    try:
        batch = EventBatch.model_validate(body)
    except ValidationError as e:
        raise AsanaDecodeError(f"Malformed webhook events: {e}") from e

    logger.debug(f"Decoded {len(batch.events)} webhook events")
    return batch.events
