#!/usr/bin/env python3
"""
CloudLink CLI.

Command-line access to CloudLink objects, lists and push notifications.
Connection settings come from config/settings/cloudlink.yaml and the
server key from config/.env (CLOUDLINK_SERVER_KEY); options override both.

Usage:
    python cli.py --help
    python cli.py get motd
    python cli.py add motd "Hello"
    python cli.py add settings '{"theme": "dark"}' --json
    python cli.py list-get scores --json
    python cli.py push --title "Hi" --body "Hello there" --topic news
"""

import json
import sys
from pathlib import Path
from typing import Any

import click
from pydantic import ValidationError

PROJECT_ROOT = Path(__file__).parent
sys.path.insert(0, str(PROJECT_ROOT))

from cloudlink.client import CloudLinkClient
from cloudlink.core.config import get_client_config
from cloudlink.core.exceptions import CloudLinkClientError, CloudLinkError
from cloudlink.core.logging import get_logger, log_with_source, setup_logging
from cloudlink.schemas.object_data import ObjectData
from cloudlink.schemas.push_notification import (
    ExpirationType,
    Priority,
    PushNotification,
    Target,
    TargetType,
)

EXIT_NOT_FOUND = 1
EXIT_SERVICE_ERROR = 2
EXIT_USAGE_ERROR = 3


def _json_payload(data: ObjectData) -> Any:
    return json.loads(data.payload) if data.payload else None


def _payload_decoder(as_json: bool) -> Any:
    return _json_payload if as_json else str


def _parse_value(value: str, as_json: bool) -> Any:
    if not as_json:
        return value
    try:
        return json.loads(value)
    except json.JSONDecodeError as e:
        raise click.BadParameter(f"not valid JSON: {e}", param_hint="VALUE") from e


def _echo_value(value: Any, as_json: bool) -> None:
    if as_json:
        click.echo(json.dumps(value, indent=2))
    else:
        click.echo(value)


def _echo_missing(what: str) -> None:
    click.echo(click.style(f"{what} not found.", fg="yellow"), err=True)
    sys.exit(EXIT_NOT_FOUND)


class _ClientContext:
    """Lazily builds the client so --help works without configuration."""

    def __init__(self, overrides: dict[str, Any]) -> None:
        self.overrides = overrides
        self._client: CloudLinkClient | None = None

    @property
    def client(self) -> CloudLinkClient:
        if self._client is None:
            self._client = CloudLinkClient(get_client_config(**self.overrides))
        return self._client

    def close(self) -> None:
        if self._client is not None:
            self._client.close()


def _run(ctx: click.Context, action: Any) -> None:
    """Run an action against the client, translating SDK errors to exit codes."""
    logger = get_logger("cli")
    state: _ClientContext = ctx.obj
    try:
        action(state.client)
    except CloudLinkClientError as e:
        log_with_source(logger, "cli", "warning", "CloudLink error", status_code=e.status_code)
        click.echo(click.style(f"Error: HTTP {e.status_code}", fg="red"), err=True)
        if e.body:
            click.echo(e.body, err=True)
        sys.exit(EXIT_SERVICE_ERROR)
    except CloudLinkError as e:
        click.echo(click.style(f"Error: {e.message}", fg="red"), err=True)
        sys.exit(EXIT_USAGE_ERROR)
    except ValidationError as e:
        click.echo(click.style(f"Error: payload does not match: {e.error_count()} error(s)", fg="red"), err=True)
        click.echo("Try --json for payloads that are not plain strings.", err=True)
        sys.exit(EXIT_USAGE_ERROR)


@click.group()
@click.option("--hostname", default=None, help="CloudLink host (overrides cloudlink.yaml).")
@click.option("--server-key", default=None, envvar="CLOUDLINK_SERVER_KEY", help="CloudLink server key.")
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output (INFO level logging).")
@click.option("--debug", "-d", is_flag=True, help="Enable debug output (DEBUG level logging).")
@click.pass_context
def main(ctx: click.Context, hostname: str | None, server_key: str | None, verbose: bool, debug: bool) -> None:
    """CloudLink object storage and push notification CLI."""
    log_level = "DEBUG" if debug else "INFO" if verbose else None
    setup_logging(
        level=log_level or "WARNING",
        format_type="console",
        enable_console=True,
        enable_file_logging=False,
    )

    ctx.obj = _ClientContext({
        "hostname": hostname,
        "server_key": server_key,
        "log_level": log_level,
    })
    ctx.call_on_close(ctx.obj.close)


# =============================================================================
# Objects
# =============================================================================


@main.command("get")
@click.argument("object_id")
@click.option("--json", "as_json", is_flag=True, help="Treat the payload as JSON.")
@click.pass_context
def get_object(ctx: click.Context, object_id: str, as_json: bool) -> None:
    """Print the object stored under OBJECT_ID."""
    def action(client: CloudLinkClient) -> None:
        value = client.get_object(object_id, _payload_decoder(as_json))
        if value is None:
            _echo_missing(f"Object '{object_id}'")
        _echo_value(value, as_json)

    _run(ctx, action)


@main.command("add")
@click.argument("object_id")
@click.argument("value")
@click.option("--json", "as_json", is_flag=True, help="Parse VALUE as JSON.")
@click.pass_context
def add_object(ctx: click.Context, object_id: str, value: str, as_json: bool) -> None:
    """Store VALUE under OBJECT_ID, overwriting any existing object."""
    target = _parse_value(value, as_json)

    def action(client: CloudLinkClient) -> None:
        _echo_value(client.add_object(object_id, target, _payload_decoder(as_json)), as_json)

    _run(ctx, action)


@main.command("update")
@click.argument("object_id")
@click.argument("value")
@click.option("--json", "as_json", is_flag=True, help="Parse VALUE as JSON.")
@click.pass_context
def update_object(ctx: click.Context, object_id: str, value: str, as_json: bool) -> None:
    """Replace the existing object under OBJECT_ID with VALUE."""
    target = _parse_value(value, as_json)

    def action(client: CloudLinkClient) -> None:
        updated = client.update_object(object_id, target, _payload_decoder(as_json))
        if updated is None:
            _echo_missing(f"Object '{object_id}'")
        _echo_value(updated, as_json)

    _run(ctx, action)


@main.command("remove")
@click.argument("object_id")
@click.pass_context
def remove_object(ctx: click.Context, object_id: str) -> None:
    """Remove the object stored under OBJECT_ID."""
    def action(client: CloudLinkClient) -> None:
        client.remove_object(object_id)
        click.echo(f"Removed '{object_id}'.")

    _run(ctx, action)


# =============================================================================
# Lists
# =============================================================================


@main.command("list-get")
@click.argument("list_id")
@click.option("--json", "as_json", is_flag=True, help="Treat payloads as JSON.")
@click.pass_context
def get_list(ctx: click.Context, list_id: str, as_json: bool) -> None:
    """Print the objects of LIST_ID, one per line."""
    def action(client: CloudLinkClient) -> None:
        items = client.get_list(list_id, _payload_decoder(as_json))
        if as_json:
            _echo_value(items, as_json)
            return
        for item in items:
            click.echo(item)

    _run(ctx, action)


@main.command("list-add")
@click.argument("list_id")
@click.argument("object_id")
@click.argument("value")
@click.option("--json", "as_json", is_flag=True, help="Parse VALUE as JSON.")
@click.pass_context
def add_to_list(ctx: click.Context, list_id: str, object_id: str, value: str, as_json: bool) -> None:
    """Add VALUE to LIST_ID under OBJECT_ID."""
    target = _parse_value(value, as_json)

    def action(client: CloudLinkClient) -> None:
        _echo_value(client.add_to_list(list_id, object_id, target, _payload_decoder(as_json)), as_json)

    _run(ctx, action)


@main.command("list-update")
@click.argument("list_id")
@click.argument("object_id")
@click.argument("value")
@click.option("--json", "as_json", is_flag=True, help="Parse VALUE as JSON.")
@click.pass_context
def update_in_list(ctx: click.Context, list_id: str, object_id: str, value: str, as_json: bool) -> None:
    """Replace OBJECT_ID in LIST_ID with VALUE."""
    target = _parse_value(value, as_json)

    def action(client: CloudLinkClient) -> None:
        updated = client.update_in_list(list_id, object_id, target, _payload_decoder(as_json))
        if updated is None:
            _echo_missing(f"Object '{object_id}' in list '{list_id}'")
        _echo_value(updated, as_json)

    _run(ctx, action)


@main.command("list-remove")
@click.argument("list_id")
@click.argument("object_id")
@click.pass_context
def remove_from_list(ctx: click.Context, list_id: str, object_id: str) -> None:
    """Remove OBJECT_ID from LIST_ID."""
    def action(client: CloudLinkClient) -> None:
        client.remove_from_list(list_id, object_id)
        click.echo(f"Removed '{object_id}' from '{list_id}'.")

    _run(ctx, action)


# =============================================================================
# Push notifications
# =============================================================================


@main.command("push")
@click.option("--title", required=True, help="Notification title.")
@click.option("--body", required=True, help="Notification body.")
@click.option("--custom-id", default=None, help="Caller-defined identifier.")
@click.option("--topic", default=None, help="Deliver to devices subscribed to this topic.")
@click.option("--device-token", default=None, help="Deliver to a single device.")
@click.option(
    "--priority",
    type=click.Choice([p.value for p in Priority], case_sensitive=False),
    default=Priority.NORMAL.value,
    help="Delivery priority.",
)
@click.option(
    "--expiration-type",
    type=click.Choice([e.value for e in ExpirationType], case_sensitive=False),
    default=ExpirationType.WEEKS.value,
    help="Unit of --expiration-amount.",
)
@click.option("--expiration-amount", type=int, default=4, help="Expiration after delivery.")
@click.option("--delivery-date", type=int, default=0, help="Epoch millis, 0 sends immediately.")
@click.option("--invisible", is_flag=True, help="Deliver silently.")
@click.pass_context
def push(
    ctx: click.Context,
    title: str,
    body: str,
    custom_id: str | None,
    topic: str | None,
    device_token: str | None,
    priority: str,
    expiration_type: str,
    expiration_amount: int,
    delivery_date: int,
    invisible: bool,
) -> None:
    """Send a push notification to all devices, a topic or one device."""
    if topic and device_token:
        raise click.UsageError("--topic and --device-token are mutually exclusive.")

    if device_token:
        target = Target(type=TargetType.SINGLE_DEVICE, device_token=device_token)
    elif topic:
        target = Target(type=TargetType.TOPIC, topic=topic)
    else:
        target = Target()

    def action(client: CloudLinkClient) -> None:
        notification = PushNotification.model_construct(
            custom_identifier=custom_id,
            title=title,
            body=body,
            delivery_date=delivery_date,
            priority=Priority(priority.upper()),
            expiration_type=ExpirationType(expiration_type.upper()),
            expiration_amount=expiration_amount,
            target=target,
            invisible=invisible,
        )
        sent = client.send_push_notification(notification)
        click.echo(f"Sent notification {sent.identifier}.")

    _run(ctx, action)


if __name__ == "__main__":
    main()
