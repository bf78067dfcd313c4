"""Taskboard CLI — talk to a running Taskboard API from the terminal.

Usage:
    taskboard register "Alice" alice@example.com      # prompts for password, saves token
    taskboard login alice@example.com                  # prompts for password, saves token
    taskboard whoami                                   # who the saved token belongs to
    taskboard tasks                                    # list your tasks
    taskboard add "Write report" -d "Q3 numbers"       # create a task
    taskboard update 12 --status DONE                  # change any subset of fields
    taskboard rm 12                                    # delete a task

The token comes from --token, then TASKBOARD_TOKEN, then the token file
written by login/register (~/.taskboard/token, or TASKBOARD_TOKEN_FILE).
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

from taskboard import __version__

# ---------------------------------------------------------------------------
# Config
# ---------------------------------------------------------------------------

DEFAULT_API_URL = "http://localhost:8000"

STATUSES = ("TODO", "IN_PROGRESS", "DONE")


def _api_url() -> str:
    return os.environ.get("TASKBOARD_API_URL", DEFAULT_API_URL).rstrip("/")


def _token_file() -> Path:
    override = os.environ.get("TASKBOARD_TOKEN_FILE")
    if override:
        return Path(override)
    return Path.home() / ".taskboard" / "token"


def _client(token: Optional[str] = None) -> httpx.AsyncClient:
    """Build an async HTTP client pointed at the Taskboard API."""
    headers = {"Authorization": f"Bearer {token}"} if token else {}
    return httpx.AsyncClient(base_url=_api_url(), headers=headers, timeout=30.0)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _run(coro):
    """Run an async coroutine from a synchronous Click handler.

    Offloads to a thread when an event loop is already running (e.g. when
    invoked through CliRunner inside an async test).
    """
    try:
        asyncio.get_running_loop()
    except RuntimeError:
        return asyncio.run(coro)
    else:
        with concurrent.futures.ThreadPoolExecutor(max_workers=1) as pool:
            return pool.submit(asyncio.run, coro).result()


def _save_token(token: str) -> Path:
    path = _token_file()
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(token)
    path.chmod(0o600)
    return path


def _load_token(explicit: Optional[str]) -> str:
    token = explicit or os.environ.get("TASKBOARD_TOKEN")
    if not token:
        path = _token_file()
        if path.exists():
            token = path.read_text().strip()
    if not token:
        click.secho("Not logged in. Run `taskboard login` first.", fg="red", err=True)
        sys.exit(1)
    return token


def _check(r: httpx.Response) -> dict | list:
    """Return the JSON body, or print the API's error message and exit."""
    if r.is_success:
        return r.json()
    try:
        message = r.json().get("message", r.text)
    except (ValueError, AttributeError):
        message = r.text
    click.secho(f"Error ({r.status_code}): {message}", fg="red", err=True)
    sys.exit(1)


def _print_table(rows: list[dict], columns: list[tuple[str, str, int]]):
    """Print a simple ASCII table.

    columns: list of (header, dict_key, width)
    """
    header = "  ".join(h.ljust(w) for h, _, w in columns)
    click.secho(header, bold=True)
    click.echo("-" * len(header))
    for row in rows:
        line = "  ".join(
            str(row.get(k) if row.get(k) is not None else "—")[:w].ljust(w)
            for _, k, w in columns
        )
        click.echo(line)


def _status_color(status: str) -> str:
    return {"TODO": "white", "IN_PROGRESS": "yellow", "DONE": "green"}.get(status, "white")


token_option = click.option("--token", envvar="TASKBOARD_TOKEN", help="Bearer token (default: saved token)")


# ---------------------------------------------------------------------------
# CLI group
# ---------------------------------------------------------------------------


@click.group()
@click.version_option(version=__version__, prog_name="taskboard")
def main():
    """Taskboard — manage your tasks from the command line."""


# ---------------------------------------------------------------------------
# Accounts
# ---------------------------------------------------------------------------


@main.command()
@click.argument("name")
@click.argument("email")
@click.password_option()
def register(name: str, email: str, password: str):
    """Create an account and save its token."""
    _run(_auth_impl("/api/auth/register", {"name": name, "email": email, "password": password}))


@main.command()
@click.argument("email")
@click.option("--password", prompt=True, hide_input=True)
def login(email: str, password: str):
    """Log in and save the token."""
    _run(_auth_impl("/api/auth/login", {"email": email, "password": password}))


async def _auth_impl(path: str, body: dict):
    async with _client() as c:
        data = _check(await c.post(path, json=body))
    saved = _save_token(data["token"])
    click.secho(f"Logged in as {data['username']}", fg="green")
    click.echo(f"Token saved to {saved}")


@main.command()
@token_option
def whoami(token: Optional[str]):
    """Show the user the token belongs to."""
    _run(_whoami_impl(_load_token(token)))


async def _whoami_impl(token: str):
    async with _client(token) as c:
        me = _check(await c.get("/api/auth/me"))
    click.echo(f"{me['name']} <{me['email']}>")


# ---------------------------------------------------------------------------
# Tasks
# ---------------------------------------------------------------------------


@main.command()
@token_option
@click.option("--json", "as_json", is_flag=True, help="Raw JSON output")
def tasks(token: Optional[str], as_json: bool):
    """List your tasks in board order."""
    _run(_tasks_impl(_load_token(token), as_json))


async def _tasks_impl(token: str, as_json: bool):
    async with _client(token) as c:
        rows = _check(await c.get("/api/tasks"))

    if as_json:
        click.echo(json.dumps(rows, indent=2, default=str))
        return
    if not rows:
        click.echo("No tasks.")
        return

    _print_table(rows, [
        ("ID", "id", 6),
        ("STATUS", "status", 12),
        ("TITLE", "title", 40),
        ("DESCRIPTION", "description", 30),
    ])


@main.command()
@click.argument("title")
@click.option("--description", "-d", help="Longer description")
@token_option
def add(title: str, description: Optional[str], token: Optional[str]):
    """Create a task (starts in TODO)."""
    _run(_add_impl(_load_token(token), title, description))


async def _add_impl(token: str, title: str, description: Optional[str]):
    body: dict = {"title": title}
    if description is not None:
        body["description"] = description
    async with _client(token) as c:
        task = _check(await c.post("/api/tasks", json=body))
    click.secho(f"Task #{task['id']} created", fg="green")


@main.command()
@click.argument("task_id", type=int)
@click.option("--title", help="New title")
@click.option("--description", "-d", help="New description")
@click.option("--status", "-s", type=click.Choice(STATUSES, case_sensitive=False))
@click.option("--order", type=int, help="New sort position")
@token_option
def update(task_id: int, title: Optional[str], description: Optional[str],
           status: Optional[str], order: Optional[int], token: Optional[str]):
    """Change a task. Only the options you pass are sent."""
    body = {
        k: v for k, v in {
            "title": title,
            "description": description,
            "status": status.upper() if status else None,
            "order": order,
        }.items() if v is not None
    }
    if not body:
        click.secho("Nothing to update.", fg="yellow", err=True)
        sys.exit(1)
    _run(_update_impl(_load_token(token), task_id, body))


async def _update_impl(token: str, task_id: int, body: dict):
    async with _client(token) as c:
        task = _check(await c.put(f"/api/tasks/{task_id}", json=body))
    click.secho(
        f"Task #{task['id']} [{task['status']}] {task['title']}",
        fg=_status_color(task["status"]),
    )


@main.command()
@click.argument("task_id", type=int)
@token_option
def rm(task_id: int, token: Optional[str]):
    """Delete a task."""
    _run(_rm_impl(_load_token(token), task_id))


async def _rm_impl(token: str, task_id: int):
    async with _client(token) as c:
        _check(await c.delete(f"/api/tasks/{task_id}"))
    click.echo(f"Task #{task_id} deleted")


if __name__ == "__main__":
    main()
