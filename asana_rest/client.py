#!/usr/bin/env python3
"""
Asana REST API Client

Every operation funnels through one request pipeline:

    build request -> transport.send -> decode envelope / map errors

List operations run that pipeline once per page, following the server's
``next_page.offset`` cursor until it stops returning one.

Usage:
    from asana_rest import AsanaClient, Filter

    client = AsanaClient.from_env()
    tasks = client.list_project_tasks(1234, Filter(opt_fields=["name", "due_on"]))
"""

import logging
from functools import lru_cache
from types import MappingProxyType
from typing import Any, List, Mapping, Optional, Tuple, Type, TypeVar, Union
from urllib.parse import quote

import requests
from pydantic import BaseModel, TypeAdapter, ValidationError

from .config import AsanaConfig, DEFAULT_BASE_URL, load_config
from .errors import AsanaAPIError, AsanaAuthError, AsanaDecodeError
from .filter import Filter
from .models import (
    CustomField,
    Envelope,
    MembershipUpdate,
    NextPage,
    Project,
    Section,
    SectionUpdate,
    Story,
    Tag,
    Task,
    TaskUpdate,
    UpdatePayload,
    User,
    Webhook,
    Workspace,
)
from .transport import BearerTokenTransport, HTTPTransport, Transport

logger = logging.getLogger(__name__)

LIBRARY_VERSION = "0.1.0"
USER_AGENT = f"asana-rest-client/{LIBRARY_VERSION}"

# Fields requested when the caller's Filter selects none.
DEFAULT_OPT_FIELDS: Mapping[str, Tuple[str, ...]] = MappingProxyType({
    "tags": ("name", "color", "notes"),
    "users": ("name", "email", "photo"),
    "projects": ("name", "color", "archived"),
    "workspaces": ("name", "is_organization"),
    "tasks": ("name", "assignee", "assignee_status", "completed", "parent"),
})

T = TypeVar("T", bound=BaseModel)

Payload = Union[Mapping[str, Any], BaseModel]
ItemId = Union[int, str]


def default_opt_fields(path: str) -> Tuple[str, ...]:
    """
    Default field selection for a resource path.

    Collection paths match exactly ("tasks"). Single-item paths
    ("tasks/123", "tasks/external:abc", "users/me") use their collection's
    defaults. Nested paths ("tasks/123/stories") get none.
    """
    fields = DEFAULT_OPT_FIELDS.get(path)
    if fields is not None:
        return fields
    parts = path.split("/")
    if len(parts) == 2 and parts[1]:
        return DEFAULT_OPT_FIELDS.get(parts[0], ())
    return ()


def _segment(value: str) -> str:
    # A whole id is one path segment; "/", "?" and "#" are escaped
    return quote(value, safe="")


def item_path(resource: str, item_id: ItemId) -> str:
    """Path of a single resource by primary id: ``tasks/123``."""
    if item_id is None or item_id == "" or str(item_id) in (".", ".."):
        raise ValueError(f"Invalid {resource} id: {item_id!r}")
    return f"{resource}/{_segment(str(item_id))}"


def external_path(resource: str, external_id: str) -> str:
    """Path of a single resource by external id: ``tasks/external:abc``."""
    if not external_id or not isinstance(external_id, str):
        raise ValueError(f"Invalid {resource} external id: {external_id!r}")
    return f"{resource}/external:{_segment(external_id)}"


@lru_cache(maxsize=None)
def _adapter(model: Any) -> TypeAdapter:
    return TypeAdapter(model)


def _to_payload(data: Payload) -> Any:
    if isinstance(data, UpdatePayload):
        return data.to_payload()
    if isinstance(data, BaseModel):
        return data.model_dump(exclude_none=True, mode="json")
    return dict(data)


class AsanaClient:
    """
    Asana REST API client.

    Holds only a transport, a base URL and a User-Agent, all read-only after
    construction, so one client may serve independent concurrent callers if
    its transport allows it. Nothing is retried or cached.
    """

    def __init__(
        self,
        transport: Optional[Transport] = None,
        base_url: str = DEFAULT_BASE_URL,
        user_agent: str = USER_AGENT,
    ):
        """
        Initialize client.

        Args:
            transport: Object with ``send(PreparedRequest) -> Response``.
                       Defaults to an unauthenticated HTTPTransport.
            base_url: API root; resource paths are resolved beneath it.
            user_agent: Value of the User-Agent header on every request.
        """
        self._transport = transport if transport is not None else HTTPTransport()
        self._base_url = base_url
        self._user_agent = user_agent

    @classmethod
    def from_env(cls, config: Optional[AsanaConfig] = None) -> "AsanaClient":
        """Create a token-authenticated client from ASANA_* settings."""
        config = config or load_config()
        transport = BearerTokenTransport(config.access_token, timeout=config.timeout)
        return cls(transport, base_url=config.base_url)

    @property
    def base_url(self) -> str:
        return self._base_url

    @property
    def user_agent(self) -> str:
        return self._user_agent

    def close(self) -> None:
        close = getattr(self._transport, "close", None)
        if close is not None:
            close()

    def __enter__(self) -> "AsanaClient":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    # ========== Request Pipeline ==========

    def _url(self, path: str) -> str:
        return f"{self._base_url.rstrip('/')}/{path.lstrip('/')}"

    def _build_request(
        self,
        method: str,
        path: str,
        data: Optional[Payload] = None,
        form: Optional[Mapping[str, str]] = None,
        opt: Optional[Filter] = None,
    ) -> requests.PreparedRequest:
        """
        Assemble an outbound request.

        Only one body kind is sent: when both ``data`` and ``form`` are
        given, ``data`` wins and ``form`` is dropped. ``data`` is wrapped as
        ``{"data": ...}`` and sent as JSON; ``form`` is URL-encoded.
        """
        if opt is None:
            opt = Filter()
        if not opt.opt_fields:
            opt = opt.with_opt_fields(default_opt_fields(path))

        body = {}
        if data is not None:
            if form is not None:
                logger.debug(f"{method} {path}: JSON payload given, ignoring form data")
            body["json"] = {"data": _to_payload(data)}
        elif form is not None:
            body["data"] = form

        request = requests.Request(
            method=method,
            url=self._url(path),
            params=opt.to_params(),
            headers={"User-Agent": self._user_agent},
            **body,
        )
        return request.prepare()

    def _parse_envelope(self, response: requests.Response) -> Envelope:
        status = response.status_code
        if not response.content:
            return Envelope()
        try:
            body = response.json()
        except ValueError as e:
            raise AsanaDecodeError(f"Malformed response body (HTTP {status}): {e}", status) from e
        if not isinstance(body, dict):
            raise AsanaDecodeError(
                f"Expected a JSON object response (HTTP {status}), got {type(body).__name__}",
                status,
            )
        try:
            return Envelope.model_validate(body)
        except ValidationError as e:
            raise AsanaDecodeError(f"Malformed response envelope (HTTP {status}): {e}", status) from e

    def _decode_response(
        self, response: requests.Response, model: Any = None
    ) -> Tuple[Any, Optional[NextPage]]:
        """
        Classify a response and decode its data.

        Args:
            response: Response returned by the transport
            model: Destination type for ``data`` (a model class or List[Model]);
                   None discards the data

        Returns:
            Tuple of (decoded data, next_page cursor or None)

        Raises:
            AsanaAuthError: On HTTP 401, whatever the body holds
            AsanaAPIError: If the envelope carries error records, even on 2xx
            AsanaDecodeError: If the body or its data cannot be decoded
        """
        status = response.status_code
        if status == 401:
            logger.warning(f"Unauthorized response from {response.url}")
            raise AsanaAuthError()

        envelope = self._parse_envelope(response)
        if envelope.errors:
            logger.warning(
                f"Asana returned {len(envelope.errors)} error(s) (HTTP {status}) for {response.url}"
            )
            raise AsanaAPIError(envelope.errors, status)

        if model is None:
            return None, envelope.next_page
        try:
            result = _adapter(model).validate_python(envelope.data)
        except ValidationError as e:
            raise AsanaDecodeError(f"Unexpected response data (HTTP {status}): {e}", status) from e
        return result, envelope.next_page

    def _request(
        self,
        method: str,
        path: str,
        data: Optional[Payload] = None,
        form: Optional[Mapping[str, str]] = None,
        opt: Optional[Filter] = None,
        model: Any = None,
    ) -> Tuple[Any, Optional[NextPage]]:
        """Make one request and decode the response into ``model``."""
        request = self._build_request(method, path, data=data, form=form, opt=opt)
        logger.debug(f"{method} {request.url}")
        response = self._transport.send(request)
        return self._decode_response(response, model)

    def request(self, path: str, opt: Optional[Filter] = None, model: Any = None) -> Any:
        """GET a path and decode its data into ``model``."""
        result, _ = self._request("GET", path, opt=opt, model=model)
        return result

    def _paginate(self, path: str, opt: Optional[Filter], model: Type[T]) -> List[T]:
        """
        GET every page of a list, in server order.

        Stops when a page arrives without a cursor. Any failure propagates
        and the pages gathered so far are dropped. There is no page limit.
        """
        opt = opt if opt is not None else Filter()
        results: List[T] = []
        pages = 0
        while True:
            page, next_page = self._request("GET", path, opt=opt, model=Optional[List[model]])
            pages += 1
            results.extend(page or [])
            if next_page is None or not next_page.offset:
                break
            opt = opt.with_offset(next_page.offset)

        logger.info(f"Fetched {len(results)} items from {path} in {pages} page(s)")
        return results

    # ========== Workspace Operations ==========

    def list_workspaces(self, opt: Optional[Filter] = None) -> List[Workspace]:
        """List all workspaces visible to the authenticated user."""
        return self._paginate("workspaces", opt, Workspace)

    # ========== User Operations ==========

    def list_users(self, opt: Optional[Filter] = None) -> List[User]:
        return self._paginate("users", opt, User)

    def get_authenticated_user(self, opt: Optional[Filter] = None) -> User:
        """Get the user the transport authenticates as."""
        return self.request("users/me", opt, User)

    def get_user(self, user_id: ItemId, opt: Optional[Filter] = None) -> User:
        return self.request(item_path("users", user_id), opt, User)

    # ========== Project Operations ==========

    def list_projects(self, opt: Optional[Filter] = None) -> List[Project]:
        """List projects, usually scoped with Filter(workspace=...)."""
        return self._paginate("projects", opt, Project)

    def get_project(self, project_id: ItemId, opt: Optional[Filter] = None) -> Project:
        return self.request(item_path("projects", project_id), opt, Project)

    # ========== Tag Operations ==========

    def list_tags(self, opt: Optional[Filter] = None) -> List[Tag]:
        return self._paginate("tags", opt, Tag)

    # ========== Task Operations ==========

    def list_tasks(self, opt: Optional[Filter] = None) -> List[Task]:
        """
        Query tasks.

        The API requires either Filter(project=...) or
        Filter(assignee=..., workspace=...).
        """
        return self._paginate("tasks", opt, Task)

    def list_project_tasks(self, project_id: ItemId, opt: Optional[Filter] = None) -> List[Task]:
        return self._paginate(f"{item_path('projects', project_id)}/tasks", opt, Task)

    def get_task(self, task_id: ItemId, opt: Optional[Filter] = None) -> Task:
        return self.request(item_path("tasks", task_id), opt, Task)

    def get_task_by_external_id(self, external_id: str, opt: Optional[Filter] = None) -> Task:
        return self.request(external_path("tasks", external_id), opt, Task)

    def create_task(self, fields: Payload, opt: Optional[Filter] = None) -> Task:
        """
        Create a task.

        Args:
            fields: Task fields, e.g. {"name": ..., "projects": [...]} or
                    {"name": ..., "workspace": ...}
            opt: Fields to return for the created task
        """
        task, _ = self._request("POST", "tasks", data=fields, opt=opt, model=Task)
        return task

    def update_task(self, task_id: ItemId, update: TaskUpdate, opt: Optional[Filter] = None) -> Task:
        """Update a task; fields left as None in ``update`` are unchanged."""
        task, _ = self._request("PUT", item_path("tasks", task_id), data=update, opt=opt, model=Task)
        return task

    def update_task_by_external_id(
        self, external_id: str, update: TaskUpdate, opt: Optional[Filter] = None
    ) -> Task:
        task, _ = self._request(
            "PUT", external_path("tasks", external_id), data=update, opt=opt, model=Task
        )
        return task

    def delete_task(self, task_id: ItemId, opt: Optional[Filter] = None) -> None:
        self._request("DELETE", item_path("tasks", task_id), opt=opt)

    def delete_task_by_external_id(self, external_id: str, opt: Optional[Filter] = None) -> None:
        self._request("DELETE", external_path("tasks", external_id), opt=opt)

    def add_tag(self, task_id: ItemId, tag_id: ItemId, opt: Optional[Filter] = None) -> None:
        self._request("POST", f"{item_path('tasks', task_id)}/addTag", data={"tag": tag_id}, opt=opt)

    def remove_tag(self, task_id: ItemId, tag_id: ItemId, opt: Optional[Filter] = None) -> None:
        self._request("POST", f"{item_path('tasks', task_id)}/removeTag", data={"tag": tag_id}, opt=opt)

    def add_tag_by_external_id(self, external_id: str, tag_id: ItemId, opt: Optional[Filter] = None) -> None:
        self._request(
            "POST", f"{external_path('tasks', external_id)}/addTag", data={"tag": tag_id}, opt=opt
        )

    def remove_tag_by_external_id(self, external_id: str, tag_id: ItemId, opt: Optional[Filter] = None) -> None:
        self._request(
            "POST", f"{external_path('tasks', external_id)}/removeTag", data={"tag": tag_id}, opt=opt
        )

    def add_project(self, task_id: ItemId, membership: MembershipUpdate, opt: Optional[Filter] = None) -> None:
        """
        Add a task to a project.

        ``membership.project`` is required; ``insert_before``/``insert_after``
        and ``section`` position it within the project.
        """
        if membership.project is None:
            raise ValueError("membership.project is required")
        self._request("POST", f"{item_path('tasks', task_id)}/addProject", data=membership, opt=opt)

    def remove_project(self, task_id: ItemId, project_id: ItemId, opt: Optional[Filter] = None) -> None:
        self._request(
            "POST", f"{item_path('tasks', task_id)}/removeProject", data={"project": project_id}, opt=opt
        )

    # ========== Story Operations ==========

    def list_task_stories(self, task_id: ItemId, opt: Optional[Filter] = None) -> List[Story]:
        """List stories (comments and activity) on a task, oldest first."""
        return self._paginate(f"{item_path('tasks', task_id)}/stories", opt, Story)

    def create_task_story(self, task_id: ItemId, text: str, opt: Optional[Filter] = None) -> Story:
        """Add a comment to a task."""
        if not text:
            raise ValueError("Story text must not be empty")
        story, _ = self._request(
            "POST", f"{item_path('tasks', task_id)}/stories", data={"text": text}, opt=opt, model=Story
        )
        return story

    # ========== Section Operations ==========

    def list_project_sections(self, project_id: ItemId, opt: Optional[Filter] = None) -> List[Section]:
        return self._paginate(f"{item_path('projects', project_id)}/sections", opt, Section)

    def get_section(self, section_id: ItemId, opt: Optional[Filter] = None) -> Section:
        return self.request(item_path("sections", section_id), opt, Section)

    def get_section_by_external_id(self, external_id: str, opt: Optional[Filter] = None) -> Section:
        return self.request(external_path("sections", external_id), opt, Section)

    def create_section(self, project_id: ItemId, fields: Payload, opt: Optional[Filter] = None) -> Section:
        section, _ = self._request(
            "POST", f"{item_path('projects', project_id)}/sections", data=fields, opt=opt, model=Section
        )
        return section

    def update_section(self, section_id: ItemId, update: SectionUpdate, opt: Optional[Filter] = None) -> Section:
        section, _ = self._request(
            "PUT", item_path("sections", section_id), data=update, opt=opt, model=Section
        )
        return section

    def update_section_by_external_id(
        self, external_id: str, update: SectionUpdate, opt: Optional[Filter] = None
    ) -> Section:
        section, _ = self._request(
            "PUT", external_path("sections", external_id), data=update, opt=opt, model=Section
        )
        return section

    def delete_section(self, section_id: ItemId, opt: Optional[Filter] = None) -> None:
        self._request("DELETE", item_path("sections", section_id), opt=opt)

    def delete_section_by_external_id(self, external_id: str, opt: Optional[Filter] = None) -> None:
        self._request("DELETE", external_path("sections", external_id), opt=opt)

    # ========== Webhook Operations ==========

    def list_webhooks(self, opt: Optional[Filter] = None) -> List[Webhook]:
        """List webhooks; the API requires Filter(workspace=...)."""
        return self._paginate("webhooks", opt, Webhook)

    def get_webhook(self, webhook_id: ItemId, opt: Optional[Filter] = None) -> Webhook:
        return self.request(item_path("webhooks", webhook_id), opt, Webhook)

    def create_webhook(self, resource_id: ItemId, target: str, opt: Optional[Filter] = None) -> Webhook:
        """
        Subscribe ``target`` (an HTTPS URL) to events on a resource.

        Sent as form data; Asana then performs the X-Hook-Secret handshake
        against the target before answering.
        """
        if not target:
            raise ValueError("Webhook target URL is required")
        form = {"resource": str(resource_id), "target": target}
        webhook, _ = self._request("POST", "webhooks", form=form, opt=opt, model=Webhook)
        return webhook

    def delete_webhook(self, webhook_id: ItemId, opt: Optional[Filter] = None) -> None:
        self._request("DELETE", item_path("webhooks", webhook_id), opt=opt)

    # ========== Custom Field Operations ==========

    def list_workspace_custom_fields(
        self, workspace_id: ItemId, opt: Optional[Filter] = None
    ) -> List[CustomField]:
        return self._paginate(f"{item_path('workspaces', workspace_id)}/custom_fields", opt, CustomField)

    def get_custom_field(self, custom_field_id: ItemId, opt: Optional[Filter] = None) -> CustomField:
        return self.request(item_path("custom_fields", custom_field_id), opt, CustomField)
