#!/usr/bin/env python3
"""
Asana REST - Python client for the Asana API

Typed operations for workspaces, users, projects, tasks, sections, tags,
stories, webhooks and custom fields, over a single request pipeline with
automatic offset pagination.

Usage:
    from asana_rest import AsanaClient, Filter, TaskUpdate

    # Token from ASANA_ACCESS_TOKEN (or .env)
    client = AsanaClient.from_env()

    # Every page is fetched; results come back in server order
    tasks = client.list_project_tasks(1234, Filter(opt_fields=["name", "completed"]))

    client.update_task(tasks[0].id, TaskUpdate(completed=True))

Custom transports:
    # Anything with send(PreparedRequest) -> Response
    client = AsanaClient(BearerTokenTransport(token, timeout=10))
"""

# Error classes
from .errors import (
    AsanaError,
    AsanaAuthError,
    AsanaAPIError,
    AsanaDecodeError,
)

# Configuration
from .config import (
    AsanaConfig,
    DEFAULT_BASE_URL,
    load_config,
)

# Transports
from .transport import (
    Transport,
    TransportFunc,
    HTTPTransport,
    BearerTokenTransport,
    REQUEST_TIMEOUT,
)

# Query options
from .filter import Filter

# Resource models
from .models import (
    CustomField,
    EnumOption,
    Envelope,
    ErrorRecord,
    External,
    Heart,
    Membership,
    MembershipUpdate,
    NextPage,
    Project,
    Resource,
    Section,
    SectionUpdate,
    Story,
    Tag,
    Task,
    TaskUpdate,
    User,
    Webhook,
    Workspace,
)

# Client
from .client import (
    AsanaClient,
    DEFAULT_OPT_FIELDS,
    LIBRARY_VERSION,
    USER_AGENT,
    default_opt_fields,
    external_path,
    item_path,
)

# Webhook events
from .events import Event, parse_events

__all__ = [
    # Errors
    "AsanaError",
    "AsanaAuthError",
    "AsanaAPIError",
    "AsanaDecodeError",
    # Configuration
    "AsanaConfig",
    "DEFAULT_BASE_URL",
    "load_config",
    # Transports
    "Transport",
    "TransportFunc",
    "HTTPTransport",
    "BearerTokenTransport",
    "REQUEST_TIMEOUT",
    # Query options
    "Filter",
    # Models
    "CustomField",
    "EnumOption",
    "Envelope",
    "ErrorRecord",
    "External",
    "Heart",
    "Membership",
    "MembershipUpdate",
    "NextPage",
    "Project",
    "Resource",
    "Section",
    "SectionUpdate",
    "Story",
    "Tag",
    "Task",
    "TaskUpdate",
    "User",
    "Webhook",
    "Workspace",
    # Client
    "AsanaClient",
    "DEFAULT_OPT_FIELDS",
    "LIBRARY_VERSION",
    "USER_AGENT",
    "default_opt_fields",
    "external_path",
    "item_path",
    # Events
    "Event",
    "parse_events",
]

__version__ = LIBRARY_VERSION
