#!/usr/bin/env python3
"""
Asana REST command line.

Environment Variables:
    ASANA_ACCESS_TOKEN: Personal Access Token (required)
    ASANA_WORKSPACE: Default workspace id (optional)

Usage:
    asana-rest workspaces
    asana-rest projects -w <workspace>
    asana-rest tasks -p <project>
    asana-rest task <id>
    asana-rest task --external <external_id>
    asana-rest sections <project>
    asana-rest stories <task>
"""

import argparse
import json
import logging
import sys
from typing import List, Optional

import requests
from pydantic import BaseModel

from .client import AsanaClient
from .config import AsanaConfig, load_config
from .errors import AsanaError
from .filter import Filter

logger = logging.getLogger(__name__)

EPILOG = """\
Examples:
  asana-rest workspaces                 List workspaces
  asana-rest projects -w <workspace>    List projects in workspace
  asana-rest tasks -p <project>         List tasks in project
  asana-rest tasks -a me -w <ws>        My tasks in workspace
  asana-rest task <id>                  Get task details
  asana-rest task --external <ext_id>   Get task by external id
  asana-rest stories <task>             Task activity
  asana-rest task --external -- -v      Ids starting with "-" go after --

Environment:
  ASANA_ACCESS_TOKEN   Required. Personal access token.
  ASANA_WORKSPACE      Optional. Default workspace id.
"""


def _fields(args) -> List[str]:
    raw = getattr(args, "fields", None)
    return [f.strip() for f in raw.split(",") if f.strip()] if raw else []


def _workspace(args, config: AsanaConfig) -> Optional[str]:
    return getattr(args, "workspace", None) or config.workspace


def print_json(items) -> None:
    if isinstance(items, BaseModel):
        data = items.model_dump(mode="json", exclude_none=True)
    else:
        data = [i.model_dump(mode="json", exclude_none=True) for i in items]
    print(json.dumps(data, indent=2))


def format_task(task, verbose: bool = False) -> str:
    """Format task for display."""
    status = "✓" if task.completed else " "
    due = task.due_on or "-"
    assignee = (task.assignee.name if task.assignee else None) or "-"
    line = f"[{status}] {due:<12} {assignee:<15} {task.name or 'Untitled'}"
    if verbose:
        line = f"{task.gid or task.id or '':<20} {line}"
    return line


def print_named(items, args, label: str) -> None:
    """Print name-only listings (optionally with ids) and a count line."""
    if args.json:
        print_json(items)
        return
    for item in items:
        name = item.name or "Untitled"
        if args.verbose:
            print(f"{item.gid or item.id or '':<20} {name}")
        else:
            print(name)
    print(f"\n({len(items)} {label})")


def cmd_workspaces(client: AsanaClient, args, config: AsanaConfig):
    """List workspaces."""
    print_named(client.list_workspaces(Filter(opt_fields=_fields(args))), args, "workspaces")


def cmd_users(client: AsanaClient, args, config: AsanaConfig):
    """List users in a workspace."""
    opt = Filter(workspace=_workspace(args, config), opt_fields=_fields(args))
    print_named(client.list_users(opt), args, "users")


def cmd_me(client: AsanaClient, args, config: AsanaConfig):
    """Show the authenticated user."""
    user = client.get_authenticated_user(Filter(opt_fields=_fields(args)))
    if args.json:
        print_json(user)
        return
    print(f"User: {user.name}")
    print(f"Email: {user.email or '-'}")
    if args.verbose:
        print(f"ID: {user.gid or user.id}")


def cmd_projects(client: AsanaClient, args, config: AsanaConfig):
    """List projects."""
    opt = Filter(
        workspace=_workspace(args, config),
        archived=True if args.archived else None,
        opt_fields=_fields(args),
    )
    print_named(client.list_projects(opt), args, "projects")


def cmd_tags(client: AsanaClient, args, config: AsanaConfig):
    """List tags."""
    opt = Filter(workspace=_workspace(args, config), opt_fields=_fields(args))
    print_named(client.list_tags(opt), args, "tags")


def cmd_tasks(client: AsanaClient, args, config: AsanaConfig):
    """List tasks in a project, or assigned to a user in a workspace."""
    opt_fields = _fields(args) or ["name", "completed", "due_on", "assignee.name"]
    if args.project:
        opt = Filter(completed_since=args.completed_since, opt_fields=opt_fields)
        tasks = client.list_project_tasks(args.project, opt)
    elif args.assignee:
        workspace = _workspace(args, config)
        if not workspace:
            raise AsanaError("--assignee requires -w/--workspace or ASANA_WORKSPACE")
        opt = Filter(
            assignee=args.assignee,
            workspace=workspace,
            completed_since=args.completed_since,
            opt_fields=opt_fields,
        )
        tasks = client.list_tasks(opt)
    else:
        raise AsanaError("Must provide -p/--project or -a/--assignee")

    if args.json:
        print_json(tasks)
        return
    for task in tasks:
        print(format_task(task, verbose=args.verbose))
    print(f"\n({len(tasks)} tasks)")


def cmd_task(client: AsanaClient, args, config: AsanaConfig):
    """Get task details."""
    opt = Filter(opt_fields=_fields(args) or [
        "name", "notes", "completed", "due_on", "assignee.name", "projects.name", "tags.name",
    ])
    if args.external:
        task = client.get_task_by_external_id(args.task_id, opt)
    else:
        task = client.get_task(args.task_id, opt)

    if args.json:
        print_json(task)
        return

    print(f"Task: {task.name}")
    print(f"ID: {task.gid or task.id or args.task_id}")
    print(f"Completed: {'Yes' if task.completed else 'No'}")
    print(f"Due: {task.due_on or 'None'}")
    print(f"Assignee: {(task.assignee.name if task.assignee else None) or 'Unassigned'}")
    if task.projects:
        print(f"Projects: {', '.join(p.name or '?' for p in task.projects)}")
    if task.tags:
        print(f"Tags: {', '.join(t.name or '?' for t in task.tags)}")
    if task.notes:
        print(f"\nDescription:\n{task.notes}")


def cmd_sections(client: AsanaClient, args, config: AsanaConfig):
    """List project sections."""
    opt = Filter(opt_fields=_fields(args) or ["name"])
    print_named(client.list_project_sections(args.project_id, opt), args, "sections")


def cmd_stories(client: AsanaClient, args, config: AsanaConfig):
    """Show task stories (comments and activity)."""
    opt = Filter(opt_fields=_fields(args) or ["created_at", "created_by.name", "text", "type"])
    stories = client.list_task_stories(args.task_id, opt)
    if args.json:
        print_json(stories)
        return
    for story in stories:
        when = story.created_at.strftime("%Y-%m-%d %H:%M") if story.created_at else "-"
        who = (story.created_by.name if story.created_by else None) or "system"
        print(f"{when}  {who}: {story.text or ''}")
    print(f"\n({len(stories)} stories)")


def cmd_webhooks(client: AsanaClient, args, config: AsanaConfig):
    """List webhooks in a workspace."""
    workspace = _workspace(args, config)
    if not workspace:
        raise AsanaError("webhooks requires -w/--workspace or ASANA_WORKSPACE")
    webhooks = client.list_webhooks(Filter(workspace=workspace, opt_fields=_fields(args)))
    if args.json:
        print_json(webhooks)
        return
    for hook in webhooks:
        state = "active" if hook.active else "inactive"
        resource = hook.resource.name if hook.resource and hook.resource.name else "-"
        line = f"{state:<9} {resource:<30} {hook.target or '-'}"
        if args.verbose:
            line = f"{hook.gid or hook.id or '':<20} {line}"
        print(line)
    print(f"\n({len(webhooks)} webhooks)")


def cmd_custom_fields(client: AsanaClient, args, config: AsanaConfig):
    """List custom fields in a workspace."""
    opt = Filter(opt_fields=_fields(args) or ["name", "type", "enum_options.name"])
    fields = client.list_workspace_custom_fields(args.workspace_id, opt)
    if args.json:
        print_json(fields)
        return
    for field in fields:
        options = ", ".join(o.name or "?" for o in field.enum_options)
        line = f"{field.name or '?':<30} {field.type or '-':<8} {options}"
        if args.verbose:
            line = f"{field.gid or field.id or '':<20} {line}"
        print(line)
    print(f"\n({len(fields)} custom fields)")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="asana-rest",
        description="Asana CLI - REST API client",
        epilog=EPILOG,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--json", action="store_true", help="Output as JSON")
    parser.add_argument("-v", "--verbose", action="store_true", help="Show ids in output")
    parser.add_argument("--debug", action="store_true", help="Log HTTP requests")
    subparsers = parser.add_subparsers(dest="command", metavar="command")

    # -f is accepted after any sub-command
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("-f", "--fields", help="Comma-separated opt_fields to request")

    ws = subparsers.add_parser("workspaces", parents=[common], help="List workspaces")
    ws.set_defaults(func=cmd_workspaces)

    users = subparsers.add_parser("users", parents=[common], help="List users")
    users.add_argument("-w", "--workspace", help="Workspace id")
    users.set_defaults(func=cmd_users)

    me = subparsers.add_parser("me", parents=[common], help="Show authenticated user")
    me.set_defaults(func=cmd_me)

    proj = subparsers.add_parser("projects", parents=[common], help="List projects")
    proj.add_argument("-w", "--workspace", help="Workspace id")
    proj.add_argument("--archived", action="store_true", help="Only archived projects")
    proj.set_defaults(func=cmd_projects)

    tags = subparsers.add_parser("tags", parents=[common], help="List tags")
    tags.add_argument("-w", "--workspace", help="Workspace id")
    tags.set_defaults(func=cmd_tags)

    tasks = subparsers.add_parser("tasks", parents=[common], help="List tasks in project or for assignee")
    tasks.add_argument("-p", "--project", help="Project id")
    tasks.add_argument("-a", "--assignee", help="Assignee id or 'me'")
    tasks.add_argument("-w", "--workspace", help="Workspace id (with --assignee)")
    tasks.add_argument("--completed-since", dest="completed_since",
                       help="Only tasks incomplete or completed since (ISO date or 'now')")
    tasks.set_defaults(func=cmd_tasks)

    task = subparsers.add_parser("task", parents=[common], help="Get task details")
    task.add_argument("task_id", help="Task id (or external id with --external)")
    task.add_argument("--external", action="store_true", help="Look up by external id")
    task.set_defaults(func=cmd_task)

    sections = subparsers.add_parser("sections", parents=[common], help="List project sections")
    sections.add_argument("project_id", help="Project id")
    sections.set_defaults(func=cmd_sections)

    stories = subparsers.add_parser("stories", parents=[common], help="Get task stories (activity)")
    stories.add_argument("task_id", help="Task id")
    stories.set_defaults(func=cmd_stories)

    hooks = subparsers.add_parser("webhooks", parents=[common], help="List webhooks")
    hooks.add_argument("-w", "--workspace", help="Workspace id")
    hooks.set_defaults(func=cmd_webhooks)

    cfields = subparsers.add_parser("custom-fields", parents=[common], help="List workspace custom fields")
    cfields.add_argument("workspace_id", help="Workspace id")
    cfields.set_defaults(func=cmd_custom_fields)

    return parser


GLOBAL_FLAGS = {"--json", "-v", "--verbose", "--debug"}


def hoist_global_flags(raw_args: List[str]) -> List[str]:
    """Move global flags ahead of the sub-command; stops at a literal "--"."""
    if "--" in raw_args:
        split = raw_args.index("--")
        head, tail = raw_args[:split], raw_args[split:]
    else:
        head, tail = raw_args, []
    hoisted = [a for a in head if a in GLOBAL_FLAGS]
    rest = [a for a in head if a not in GLOBAL_FLAGS]
    return hoisted + rest + tail


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()

    # Global flags work in any position ("tasks -p X --json")
    raw_args = sys.argv[1:] if argv is None else list(argv)
    args = parser.parse_args(hoist_global_flags(raw_args))

    if args.command is None:
        parser.print_help()
        return 0

    logging.basicConfig(
        level=logging.DEBUG if args.debug else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    logger.debug(f"Running command: {args.command}")

    try:
        config = load_config()
        with AsanaClient.from_env(config) as client:
            args.func(client, args, config)
    except (AsanaError, requests.RequestException) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        return 130
    return 0


if __name__ == "__main__":
    sys.exit(main())
