"""Command line interface for sending mail through a Postal server.

Reads ``POSTAL_ADDRESS`` and ``POSTAL_TOKEN`` (see ``PostalSettings``).
"""

import asyncio
import logging
from typing import Annotated

import typer
from pydantic import TypeAdapter, ValidationError

from .client import PostalClient
from .exceptions import PostalError
from .logger import setup_logger
from .models import Delivery, DetailsInterest, Message
from .settings import PostalSettings, get_settings


_deliveries = TypeAdapter(list[Delivery])


app = typer.Typer(
    name="postal",
    help="Send e-mail and inspect messages through a Postal server.",
    add_completion=False,
    no_args_is_help=True,
)


def _load_settings() -> PostalSettings:
    try:
        settings = get_settings()
    except ValidationError as e:
        missing = ", ".join(f"POSTAL_{'_'.join(map(str, err['loc'])).upper()}" for err in e.errors())
        typer.echo(f"Invalid or missing configuration: {missing}", err=True)
        raise typer.Exit(code=1) from e

    log_level = logging.getLevelNamesMapping().get(settings.log_level.upper(), logging.INFO)
    setup_logger(log_level=log_level, console_render=settings.debug)
    return settings


async def _send(
    settings: PostalSettings,
    message: Message,
    with_details: bool,
) -> None:
    async with PostalClient.from_settings(settings) as client:
        result = await client.send(message)
        for recipient, status in result.messages.items():
            typer.echo(f"Message to {recipient}: id={status.id} token={status.token}")
            if not with_details:
                continue

            details = await client.details(status.id, DetailsInterest.STATUS | DetailsInterest.DETAILS)
            typer.echo("Details")
            typer.echo(details.model_dump_json(indent=2, exclude_none=True))

            deliveries = await client.deliveries(status.id)
            typer.echo("Deliveries")
            typer.echo(_deliveries.dump_json(deliveries, indent=2, exclude_none=True).decode())


@app.command(help="Send a plain-text message to one or more recipients.")
def send(
    subject: Annotated[str, typer.Argument(help="Subject of the message.")],
    body: Annotated[str, typer.Argument(help="Plain-text body.")],
    from_address: Annotated[str, typer.Argument(metavar="FROM", help="Sender address.")],
    to: Annotated[list[str], typer.Argument(help="Recipient addresses.")],
    html: Annotated[str | None, typer.Option("--html", help="Optional HTML body.")] = None,
    tag: Annotated[str | None, typer.Option("--tag", help="Tag to attach to the message.")] = None,
    with_details: Annotated[
        bool,
        typer.Option("--details/--no-details", help="Fetch status, details and deliveries after sending."),
    ] = False,
) -> None:
    settings = _load_settings()

    message = Message().with_to(*to).with_from(from_address).with_subject(subject).with_text(body)
    if html is not None:
        message = message.with_html(html)
    if tag is not None:
        message = message.with_tag(tag)

    try:
        asyncio.run(_send(settings, message, with_details))
    except PostalError as e:
        typer.echo(f"Sending failed: {e}", err=True)
        raise typer.Exit(code=1) from e


@app.command(help="Show a message record, optionally with expanded sections.")
def details(
    message_id: Annotated[int, typer.Argument(help="Postal message id.")],
    expand: Annotated[
        list[str] | None,
        typer.Option("--expand", "-e", help="Section to include (repeatable), e.g. status, details, headers, all."),
    ] = None,
) -> None:
    interest = DetailsInterest.NONE
    for name in expand or []:
        try:
            interest |= DetailsInterest[name.upper()]
        except KeyError as e:
            typer.echo(f"Unknown section: {name}", err=True)
            raise typer.Exit(code=2) from e

    settings = _load_settings()

    async def _details() -> None:
        async with PostalClient.from_settings(settings) as client:
            record = await client.details(message_id, interest)
        typer.echo(record.model_dump_json(indent=2, exclude_none=True))

    try:
        asyncio.run(_details())
    except PostalError as e:
        typer.echo(f"Lookup failed: {e}", err=True)
        raise typer.Exit(code=1) from e


def main() -> None:
    app()


if __name__ == "__main__":
    main()
