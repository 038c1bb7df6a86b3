"""Tasktrack CLI — run the server and manage your tasks from a terminal.

Usage:
    tasktrack serve                               # Run the API server
    tasktrack register Ada ada@example.com        # Create an account
    tasktrack login ada@example.com               # Get and store a token
    tasktrack tasks                               # List your tasks
    tasktrack add "Write report" -p High          # Create a task
    tasktrack update <id> --deadline 2099-01-01   # Change fields
    tasktrack done <id>                           # Mark completed
    tasktrack reopen <id>                         # Back to pending
    tasktrack rm <id>                             # Delete
    tasktrack logout                              # Forget the stored token
"""

from __future__ import annotations

import asyncio
import concurrent.futures
import json
import os
import sys
from pathlib import Path
from typing import Optional

import click
import httpx

from tasktrack import __version__

# ---------------------------------------------------------------------------
# Config
# ---------------------------------------------------------------------------

DEFAULT_API_URL = "http://localhost:8000"
PRIORITIES = ("High", "Medium", "Low")
STATUSES = ("Pending", "Completed")


def _api_url() -> str:
    return os.environ.get("TASKTRACK_API_URL", DEFAULT_API_URL).rstrip("/")


def _token_path() -> Path:
    custom = os.environ.get("TASKTRACK_TOKEN_FILE")
    if custom:
        return Path(custom)
    return Path.home() / ".config" / "tasktrack" / "token"


def _load_token() -> Optional[str]:
    try:
        token = _token_path().read_text(encoding="utf-8").strip()
    except FileNotFoundError:
        return None
    return token or None


def _save_token(token: str) -> None:
    path = _token_path()
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(token, encoding="utf-8")
    path.chmod(0o600)


def _clear_token() -> None:
    _token_path().unlink(missing_ok=True)


def _client() -> httpx.AsyncClient:
    """Build an async HTTP client pointed at the Tasktrack backend."""
    headers = {}
    token = _load_token()
    if token:
        headers["Authorization"] = f"Bearer {token}"
    return httpx.AsyncClient(base_url=_api_url(), headers=headers, timeout=30.0)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _run(coro):
    """Run an async coroutine from a synchronous Click handler.

    Handles nested event loops (e.g. when invoked via Click CliRunner
    inside an existing async context like tests) by offloading to a thread.
    """
    try:
        asyncio.get_running_loop()
    except RuntimeError:
        return asyncio.run(coro)
    else:
        with concurrent.futures.ThreadPoolExecutor(max_workers=1) as pool:
            return pool.submit(asyncio.run, coro).result()


def _error_message(r: httpx.Response) -> str:
    try:
        return r.json().get("message") or r.reason_phrase
    except (json.JSONDecodeError, AttributeError):
        return r.reason_phrase or f"HTTP {r.status_code}"


def _fail(message: str) -> None:
    click.secho(f"Error: {message}", fg="red", err=True)
    sys.exit(1)


def _handle_auth_failure(r: httpx.Response) -> bool:
    """Report 401/403. A 403 means the stored token is dead, so drop it."""
    if r.status_code == 403:
        _clear_token()
        click.secho("Session expired or invalid. Run `tasktrack login` again.",
                    fg="yellow", err=True)
        return True
    if r.status_code == 401:
        click.secho("Not logged in. Run `tasktrack login` first.", fg="yellow", err=True)
        return True
    return False


async def _write(
    method: str, path: str, body: Optional[dict] = None, auth: bool = True
) -> dict:
    """Send a mutating request. Any failure is reported and exits non-zero.

    auth=False is for the account endpoints, where a 401 means bad
    credentials rather than a missing session.
    """
    async with _client() as c:
        try:
            r = await c.request(method, path, json=body)
        except httpx.HTTPError as e:
            _fail(f"cannot reach {_api_url()}: {e}")
    if auth and _handle_auth_failure(r):
        sys.exit(1)
    if r.is_error:
        _fail(_error_message(r))
    return r.json()


def _print_table(rows: list[dict], columns: list[tuple[str, str, int]]):
    """Print a simple ASCII table.

    columns: list of (header, dict_key, width)
    """
    header = "  ".join(h.ljust(w) for h, _, w in columns)
    click.secho(header, bold=True)
    click.echo("-" * len(header))
    for row in rows:
        line = "  ".join(str(row.get(k) or "—")[:w].ljust(w) for _, k, w in columns)
        click.echo(line)


def _priority_color(priority: str) -> str:
    return {"High": "red", "Medium": "yellow", "Low": "green"}.get(priority, "white")


# ---------------------------------------------------------------------------
# CLI group
# ---------------------------------------------------------------------------


@click.group()
@click.version_option(version=__version__, prog_name="tasktrack")
def main():
    """Tasktrack — multi-user task tracking."""


# ---------------------------------------------------------------------------
# tasktrack serve
# ---------------------------------------------------------------------------


@main.command()
@click.option("--host", default=None, help="Bind address (default: TASKTRACK_HOST)")
@click.option("--port", type=int, default=None, help="Port (default: TASKTRACK_PORT)")
@click.option("--reload", is_flag=True, help="Auto-reload on code changes")
def serve(host: Optional[str], port: Optional[int], reload: bool):
    """Run the API server with uvicorn."""
    import uvicorn

    from tasktrack.config import settings

    uvicorn.run(
        "tasktrack.main:app",
        host=host or settings.host,
        port=port or settings.port,
        reload=reload,
        log_level=settings.log_level.lower(),
    )


# ---------------------------------------------------------------------------
# Accounts
# ---------------------------------------------------------------------------


@main.command()
@click.argument("name")
@click.argument("email")
@click.option("--last-name", "-l", default=None, help="Last name")
@click.password_option(help="Account password (prompted if omitted)")
def register(name: str, email: str, last_name: Optional[str], password: str):
    """Create an account."""
    body = {"name": name, "lastName": last_name, "email": email, "password": password}
    data = _run(_write("POST", "/api/register", body, auth=False))
    click.secho(data.get("message", "User registered"), fg="green")


@main.command()
@click.argument("email")
@click.option("--password", prompt=True, hide_input=True, help="Account password")
def login(email: str, password: str):
    """Log in and store the access token."""
    data = _run(_write(
        "POST", "/api/login", {"email": email, "password": password}, auth=False
    ))
    _save_token(data["token"])
    click.secho(data.get("message", "Login successful"), fg="green")


@main.command()
def logout():
    """Forget the stored access token."""
    _clear_token()
    click.echo("Logged out.")


# ---------------------------------------------------------------------------
# tasktrack tasks
# ---------------------------------------------------------------------------


@main.command()
@click.option("--status", "-s", "status_filter", type=click.Choice(STATUSES), help="Filter by status")
@click.option("--priority", "-p", type=click.Choice(PRIORITIES), help="Filter by priority")
@click.option("--json", "as_json", is_flag=True, help="Print raw JSON")
def tasks(status_filter: Optional[str], priority: Optional[str], as_json: bool):
    """List your tasks."""
    rows = _run(_tasks_impl(status_filter, priority))
    if as_json:
        click.echo(json.dumps(rows, indent=2, default=str))
        return
    if not rows:
        click.echo("No tasks.")
        return
    _print_table(rows, [
        ("ID", "id", 36),
        ("Name", "name", 28),
        ("Priority", "priority", 8),
        ("Status", "status", 9),
        ("Deadline", "deadline", 10),
        ("Owner", "owner", 12),
    ])
    pending = sum(1 for t in rows if t.get("status") == "Pending")
    click.echo(f"\n{len(rows)} task(s), {pending} pending")


async def _tasks_impl(status_filter: Optional[str], priority: Optional[str]) -> list[dict]:
    """Fetch tasks. Any failure degrades to an empty list with a warning."""
    params = {}
    if status_filter:
        params["status"] = status_filter
    if priority:
        params["priority"] = priority

    async with _client() as c:
        try:
            r = await c.get("/api/tasks", params=params)
        except httpx.HTTPError as e:
            click.secho(f"Warning: cannot reach {_api_url()}: {e}", fg="yellow", err=True)
            return []

    if _handle_auth_failure(r):
        return []
    if r.is_error:
        click.secho(f"Warning: failed to load tasks: {_error_message(r)}", fg="yellow", err=True)
        return []
    try:
        return r.json()
    except json.JSONDecodeError:
        click.secho("Warning: server sent an unreadable task list", fg="yellow", err=True)
        return []


# ---------------------------------------------------------------------------
# Task writes
# ---------------------------------------------------------------------------


@main.command()
@click.argument("name")
@click.option("--description", "-d", default="", help="Details")
@click.option("--priority", "-p", type=click.Choice(PRIORITIES), default="Medium")
@click.option("--deadline", help="Due date, YYYY-MM-DD")
@click.option("--owner", "-o", default="", help="Who the task is for")
def add(name: str, description: str, priority: str, deadline: Optional[str], owner: str):
    """Create a task."""
    body = {
        "name": name,
        "description": description,
        "priority": priority,
        "deadline": deadline,
        "owner": owner,
    }
    data = _run(_write("POST", "/api/tasks", body))
    task = data["task"]
    click.secho(f"{data['message']}: ", fg="green", nl=False)
    click.secho(f"{task['name']} ({task['priority']})", fg=_priority_color(task["priority"]))
    click.echo(task["id"])


@main.command()
@click.argument("task_id")
@click.option("--name", "-n", help="New name")
@click.option("--description", "-d", help="New description")
@click.option("--priority", "-p", type=click.Choice(PRIORITIES))
@click.option("--deadline", help="New due date, YYYY-MM-DD")
@click.option("--owner", "-o", help="New owner")
def update(task_id: str, **fields):
    """Change fields on a task."""
    body = {k: v for k, v in fields.items() if v is not None}
    if not body:
        _fail("nothing to update; pass at least one option")
    data = _run(_write("PUT", f"/api/tasks/{task_id}", body))
    click.secho(data["message"], fg="green")


@main.command()
@click.argument("task_id")
@click.option("--yes", "-y", is_flag=True, help="Skip confirmation")
def done(task_id: str, yes: bool):
    """Mark a task as completed."""
    if not yes:
        click.confirm("Mark as done?", abort=True)
    data = _run(_write("POST", f"/api/tasks/{task_id}/status", {"status": "Completed"}))
    click.secho(f"{data['task']['name']} → Completed", fg="green")


@main.command()
@click.argument("task_id")
def reopen(task_id: str):
    """Move a completed task back to pending."""
    data = _run(_write("POST", f"/api/tasks/{task_id}/status", {"status": "Pending"}))
    click.secho(f"{data['task']['name']} → Pending", fg="yellow")


@main.command()
@click.argument("task_id")
@click.option("--yes", "-y", is_flag=True, help="Skip confirmation")
def rm(task_id: str, yes: bool):
    """Delete a task."""
    if not yes:
        click.confirm("Delete this task?", abort=True)
    data = _run(_write("DELETE", f"/api/tasks/{task_id}"))
    click.secho(data["message"], fg="green")


if __name__ == "__main__":
    main()
