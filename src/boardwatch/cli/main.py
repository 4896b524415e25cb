"""Boardwatch CLI — inspect mappings, manage subscriptions, run the dispatcher.

Usage:
    boardwatch map cardUpdate '{"boardId": "b1", "item": {"id": "c1"}}'
    boardwatch listen                              # Run the event dispatcher
    boardwatch subscribe sess-1 planka://boards/b1
    boardwatch unsubscribe sess-1 planka://boards/b1
    boardwatch uris sess-1                         # What does a session watch?
    boardwatch subscribers planka://boards/b1      # Who watches a resource?
    boardwatch drop-session sess-1
    boardwatch send-webhook cardCreate '{"boardId": "b1", "listId": "l1"}'
"""

from __future__ import annotations

import asyncio
import concurrent.futures
import json
import os

import click
import httpx

from boardwatch import __version__

# ---------------------------------------------------------------------------
# Config
# ---------------------------------------------------------------------------

DEFAULT_API_URL = "http://localhost:8000"


def _api_url() -> str:
    return os.environ.get("BOARDWATCH_API_URL", DEFAULT_API_URL).rstrip("/")


def _client() -> httpx.AsyncClient:
    """Build an async HTTP client pointed at the Boardwatch API."""
    return httpx.AsyncClient(base_url=_api_url(), timeout=30.0)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _run(coro):
    """Run an async coroutine from synchronous Click handler.

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


def _parse_payload(raw: str | None) -> dict:
    if not raw:
        return {}
    try:
        payload = json.loads(raw)
    except json.JSONDecodeError as e:
        raise click.BadParameter(f"not valid JSON: {e}", param_hint="PAYLOAD")
    if not isinstance(payload, dict):
        raise click.BadParameter("must be a JSON object", param_hint="PAYLOAD")
    return payload


async def _request(method: str, path: str, **kwargs) -> dict:
    async with _client() as c:
        try:
            r = await c.request(method, path, **kwargs)
        except httpx.HTTPError as e:
            raise click.ClickException(f"cannot reach {_api_url()} ({e})")
    if r.is_error:
        raise click.ClickException(f"{r.status_code}: {r.text}")
    return r.json()


# ---------------------------------------------------------------------------
# CLI group
# ---------------------------------------------------------------------------


@click.group()
@click.version_option(version=__version__, prog_name="boardwatch")
def main():
    """Boardwatch — resource subscriptions for Planka boards."""


@main.command("map")
@click.argument("event_type")
@click.argument("payload", required=False)
def map_event(event_type: str, payload: str | None):
    """Show which resource URIs an event invalidates (offline).

    PAYLOAD is the event's data object as JSON.
    """
    from boardwatch.events.mapper import map_to_uris

    uris = map_to_uris(event_type, _parse_payload(payload))
    if not uris:
        click.secho("No resources affected.", fg="yellow")
        return
    for uri in uris:
        click.echo(uri)


@main.command()
def listen():
    """Run the event dispatcher in the foreground."""
    from boardwatch.dispatcher.main import main as dispatcher_main

    dispatcher_main()


@main.command()
@click.argument("session_id")
@click.argument("uri")
def subscribe(session_id: str, uri: str):
    """Subscribe SESSION_ID to URI."""
    _run(_request("PUT", f"/api/v1/sessions/{session_id}/subscriptions", json={"uri": uri}))
    click.secho(f"{session_id} → {uri}", fg="green")


@main.command()
@click.argument("session_id")
@click.argument("uri")
def unsubscribe(session_id: str, uri: str):
    """Unsubscribe SESSION_ID from URI."""
    _run(_request(
        "DELETE",
        f"/api/v1/sessions/{session_id}/subscriptions",
        params={"uri": uri},
    ))
    click.echo(f"{session_id} ✗ {uri}")


@main.command()
@click.argument("session_id")
def uris(session_id: str):
    """List the URIs SESSION_ID watches."""
    data = _run(_request("GET", f"/api/v1/sessions/{session_id}/subscriptions"))
    if not data["uris"]:
        click.echo("(none)")
    for uri in data["uris"]:
        click.echo(uri)


@main.command()
@click.argument("uri")
def subscribers(uri: str):
    """List the live sessions subscribed to URI."""
    data = _run(_request("GET", "/api/v1/subscribers", params={"uri": uri}))
    if not data["sessions"]:
        click.echo("(none)")
    for session_id in data["sessions"]:
        click.echo(session_id)


@main.command("drop-session")
@click.argument("session_id")
def drop_session(session_id: str):
    """Remove every subscription SESSION_ID holds."""
    data = _run(_request("DELETE", f"/api/v1/sessions/{session_id}"))
    click.echo(f"Removed {data['removed']} subscription(s) for {session_id}")


@main.command("send-webhook")
@click.argument("event_type")
@click.argument("payload", required=False)
def send_webhook(event_type: str, payload: str | None):
    """POST a Planka-style webhook (for testing a deployment).

    Signs the body with BOARDWATCH_WEBHOOK_SECRET when it is set.
    """
    from boardwatch.services.webhook_service import sign

    body = json.dumps({"type": event_type, "data": _parse_payload(payload)}).encode()
    headers = {"Content-Type": "application/json"}
    secret = os.environ.get("BOARDWATCH_WEBHOOK_SECRET")
    if secret:
        headers["X-Webhook-Signature"] = sign(secret, body)

    data = _run(_request("POST", "/api/v1/webhooks/planka", content=body, headers=headers))
    click.echo(f"{data['status']}: {', '.join(data['uris']) or '(no uris)'}")


if __name__ == "__main__":
    main()
