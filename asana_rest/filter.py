#!/usr/bin/env python3
"""
Asana Query Filter

Query options accepted by list and get operations. A Filter is frozen:
the pipeline derives new filters (default fields, page offsets) as copies
and never changes the one a caller passed in.
"""

from datetime import datetime
from typing import List, Optional, Sequence, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field

# Wire order of query parameters; encoded sorted by key.
_PARAM_NAMES = (
    "archived",
    "assignee",
    "completed_since",
    "limit",
    "modified_since",
    "offset",
    "opt_expand",
    "opt_fields",
    "project",
    "workspace",
)


class Filter(BaseModel):
    """
    Query parameters for a single call.

    Only fields holding a non-default value are transmitted. List-valued
    options are comma-joined; datetimes are sent as ISO-8601.

    Example:
        opt = Filter(project=1234, opt_fields=["name", "due_on"], limit=50)
        client.list_tasks(opt)
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    archived: Optional[bool] = None
    assignee: Optional[Union[int, str]] = None
    project: Optional[Union[int, str]] = None
    workspace: Optional[Union[int, str]] = None
    completed_since: Optional[Union[datetime, str]] = None
    modified_since: Optional[Union[datetime, str]] = None
    opt_fields: Tuple[str, ...] = ()
    opt_expand: Tuple[str, ...] = ()
    offset: Optional[str] = None
    limit: Optional[int] = Field(default=None, gt=0)

    def with_offset(self, offset: str) -> "Filter":
        """Copy of this filter positioned at a pagination cursor."""
        return self.model_copy(update={"offset": offset})

    def with_opt_fields(self, fields: Sequence[str]) -> "Filter":
        """Copy of this filter selecting the given fields."""
        return self.model_copy(update={"opt_fields": tuple(fields)})

    def to_params(self) -> List[Tuple[str, str]]:
        """Encode as (name, value) query pairs, skipping unset options."""
        params = []
        for name in _PARAM_NAMES:
            value = _encode_value(getattr(self, name))
            if value:
                params.append((name, value))
        return params


def _encode_value(value) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, tuple):
        return ",".join(value)
    return str(value)
