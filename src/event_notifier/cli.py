"""CLI for event-notifier.

Usage:
    event-notifier route event.json
    cat event.json | event-notifier route
    event-notifier test
    event-notifier send "Deploy finished"
    event-notifier page "Manual page" --key incident-manual
"""

from pathlib import Path
from typing import BinaryIO

import click

from event_notifier import __version__
from event_notifier.config import Config
from event_notifier.errors import ConfigError, EventNotifierError
from event_notifier.handler import build_router
from event_notifier.logging import configure_logging
from event_notifier.messages import COLOR_INFO, Incident, NotificationMessage, wide
from event_notifier.notifiers import PagerDutyClient, SlackClient


@click.group()
@click.option(
    "--config",
    "config_path",
    type=click.Path(exists=False, path_type=Path),
    default=Path.home() / ".event-notifier" / "config.yaml",
    help="Config file path",
)
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
@click.version_option(__version__)
@click.pass_context
def main(ctx: click.Context, config_path: Path, verbose: bool) -> None:
    """Route AWS events to Slack and PagerDuty."""
    try:
        config = Config.from_file(config_path)
    except ConfigError as e:
        click.echo(f"Error: {e}", err=True)
        raise SystemExit(1) from e

    configure_logging(level="DEBUG" if verbose else config.log_level)
    ctx.ensure_object(dict)
    ctx.obj["config"] = config


@main.command("route")
@click.argument("payload", type=click.File("rb"), default="-")
@click.pass_context
def route(ctx: click.Context, payload: BinaryIO) -> None:
    """Route a JSON event payload read from PAYLOAD (default: stdin)."""
    router = build_router(ctx.obj["config"])
    try:
        router.route(payload.read())
    except EventNotifierError as e:
        click.echo(f"Failed to route event: {e}", err=True)
        raise SystemExit(1) from e
    click.echo("Event routed")


@main.command("test")
@click.pass_context
def test_message(ctx: click.Context) -> None:
    """Send a test message to verify the Slack webhook."""
    message = NotificationMessage(
        title="Test Alert",
        color=COLOR_INFO,
        fields=[wide("Test Alert", "event-notifier is configured correctly.")],
    )
    _send(ctx.obj["config"], message)
    click.echo("Test message sent successfully!")


@main.command("send")
@click.argument("message")
@click.option("--title", default="event-notifier", help="Field title")
@click.pass_context
def send(ctx: click.Context, message: str, title: str) -> None:
    """Send a custom informational message to Slack."""
    _send(
        ctx.obj["config"],
        NotificationMessage(title=message, color=COLOR_INFO, fields=[wide(title, message)]),
    )
    click.echo("Message sent!")


@main.command("page")
@click.argument("description")
@click.option("--key", "incident_key", required=True, help="Incident key for deduplication")
@click.option("--field", "fields", multiple=True, help="Detail field as NAME=VALUE")
@click.pass_context
def page(ctx: click.Context, description: str, incident_key: str, fields: tuple[str, ...]) -> None:
    """Trigger a PagerDuty incident by hand."""
    details = {}
    for item in fields:
        name, sep, value = item.partition("=")
        if not sep:
            raise click.BadParameter(f"expected NAME=VALUE, got {item!r}", param_hint="--field")
        details[name] = value

    config = ctx.obj["config"]
    client = PagerDutyClient(
        config.pagerduty.service_key,
        events_url=config.pagerduty.events_url,
        client_name=config.pagerduty.client_name,
    )
    try:
        client.trigger_incident(Incident(description, incident_key, details))
    except EventNotifierError as e:
        click.echo(f"Failed to trigger incident: {e}", err=True)
        raise SystemExit(1) from e
    click.echo("Incident triggered!")


# --- Utility Functions ---


def _send(config: Config, message: NotificationMessage) -> None:
    """Send a message to Slack or exit with error."""
    try:
        SlackClient(config.slack_webhook_url).send_message(message)
    except EventNotifierError as e:
        click.echo(f"Failed to send message: {e}", err=True)
        raise SystemExit(1) from e
