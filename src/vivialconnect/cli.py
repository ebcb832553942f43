from __future__ import annotations
import json
import logging
import sys
from typing import Any, Dict, Optional

import click

from vivialconnect.client import ApiClient
from vivialconnect.config import load_config
from vivialconnect.errors import VivialConnectError
from vivialconnect.logging_setup import setup_logging
from vivialconnect.models import Account, Connector, Contact, Message, Number
from vivialconnect.models.base import ApiModel

log = logging.getLogger(__name__)


def _plain(obj: Any) -> Any:
    if isinstance(obj, ApiModel):
        return obj.to_dict()
    if isinstance(obj, list):
        return [_plain(o) for o in obj]
    return obj


def _emit(obj: Any) -> None:
    click.echo(json.dumps(_plain(obj), indent=2, ensure_ascii=False))


def _page_params(page: Optional[int], limit: Optional[int]) -> Dict[str, str]:
    params: Dict[str, str] = {}
    if page is not None:
        params["page"] = str(page)
    if limit is not None:
        params["limit"] = str(limit)
    return params


class ApiGroup(click.Group):
    """Turns SDK errors into clean CLI failures instead of tracebacks."""

    def invoke(self, ctx: click.Context) -> Any:
        try:
            return super().invoke(ctx)
        except VivialConnectError as e:
            log.debug("command_failed", exc_info=True)
            raise click.ClickException(str(e)) from e


@click.group(cls=ApiGroup)
@click.pass_context
def cli(ctx: click.Context):
    """Vivial Connect API from the command line. Results are printed as JSON."""
    cfg = load_config()
    # stdout carries command output
    setup_logging(cfg.log_level, stream=sys.stderr)
    ctx.obj = cfg


def _client(ctx: click.Context) -> ApiClient:
    root = ctx.find_root()
    client = root.meta.get("vivialconnect.client")
    if client is None:
        client = ApiClient.from_config(root.obj)
        root.meta["vivialconnect.client"] = client
        root.call_on_close(client.close)
    return client


@cli.command()
@click.pass_context
def account(ctx):
    """Show the authenticated account."""
    _emit(Account.get_account(client=_client(ctx)))


# ---------------- messages ----------------

@cli.group()
def messages():
    """Send and inspect text messages."""


@messages.command("list")
@click.option("--page", type=int, default=None)
@click.option("--limit", type=int, default=None)
@click.pass_context
def messages_list(ctx, page, limit):
    _emit(Message.get_messages(_page_params(page, limit), client=_client(ctx)))


@messages.command("get")
@click.argument("message_id", type=int)
@click.pass_context
def messages_get(ctx, message_id):
    _emit(Message.get_by_id(message_id, client=_client(ctx)))


@messages.command("count")
@click.pass_context
def messages_count(ctx):
    _emit({"count": Message.count(client=_client(ctx))})


@messages.command("send")
@click.option("--to", "to_number", required=True, help="Destination number, E.164 (+1xxxyyyzzzz).")
@click.option("--from", "from_number", default=None, help="Associated number to send from.")
@click.option("--connector-id", type=int, default=None, help="Send through a connector instead of --from.")
@click.option("--body", required=True)
@click.option("--media-url", "media_urls", multiple=True, help="Attach media (MMS); repeatable.")
@click.pass_context
def messages_send(ctx, to_number, from_number, connector_id, body, media_urls):
    if not from_number and not connector_id:
        raise click.UsageError("one of --from or --connector-id is required")
    msg = Message(to_number=to_number, from_number=from_number, connector_id=connector_id, body=body)
    msg.bind(_client(ctx))
    for url in media_urls:
        msg.add_media_url(url)
    _emit(msg.send())


@messages.command("redact")
@click.argument("message_id", type=int)
@click.pass_context
def messages_redact(ctx, message_id):
    _emit(Message(id=message_id).bind(_client(ctx)).redact())


@messages.command("attachments")
@click.argument("message_id", type=int)
@click.pass_context
def messages_attachments(ctx, message_id):
    _emit(Message(id=message_id).bind(_client(ctx)).get_attachments())


# ---------------- numbers ----------------

@cli.group()
def numbers():
    """Associated and available phone numbers."""


@numbers.command("list")
@click.option("--local", is_flag=True, help="Only local numbers.")
@click.option("--page", type=int, default=None)
@click.option("--limit", type=int, default=None)
@click.pass_context
def numbers_list(ctx, local, page, limit):
    params = _page_params(page, limit)
    if local:
        _emit(Number.get_local_associated_numbers(params, client=_client(ctx)))
    else:
        _emit(Number.get_associated_numbers(params, client=_client(ctx)))


@numbers.command("get")
@click.argument("number_id", type=int)
@click.pass_context
def numbers_get(ctx, number_id):
    _emit(Number.get_by_id(number_id, client=_client(ctx)))


@numbers.command("count")
@click.option("--local", is_flag=True)
@click.pass_context
def numbers_count(ctx, local):
    client = _client(ctx)
    _emit({"count": Number.count_local(client=client) if local else Number.count(client=client)})


@numbers.command("available")
@click.option("--region", default=None, help="Two-letter state, e.g. CA.")
@click.option("--area-code", default=None)
@click.option("--postal-code", default=None)
@click.option("--limit", type=int, default=None)
@click.pass_context
def numbers_available(ctx, region, area_code, postal_code, limit):
    """Search US local numbers for sale."""
    given = [x for x in (region, area_code, postal_code) if x]
    if len(given) != 1:
        raise click.UsageError("pass exactly one of --region, --area-code, --postal-code")
    params = _page_params(None, limit)
    client = _client(ctx)
    if region:
        found = Number.find_available_numbers_in_region(region, params, client=client)
    elif area_code:
        found = Number.find_available_numbers_by_area_code(area_code, params, client=client)
    else:
        found = Number.find_available_numbers_by_postal_code(postal_code, params, client=client)
    _emit(found)


@numbers.command("buy")
@click.argument("phone_number")
@click.option("--type", "phone_number_type", default="local", show_default=True)
@click.option("--name", default=None)
@click.pass_context
def numbers_buy(ctx, phone_number, phone_number_type, name):
    optional = {"name": name} if name else None
    _emit(Number.buy_number(phone_number, None, phone_number_type, optional, client=_client(ctx)))


@numbers.command("lookup")
@click.argument("number_id", type=int)
@click.pass_context
def numbers_lookup(ctx, number_id):
    """Carrier/device info for an associated number."""
    _emit(Number.get_by_id(number_id, client=_client(ctx)).lookup())


# ---------------- connectors ----------------

@cli.group()
def connectors():
    """Connectors: callbacks and phone number routing."""


@connectors.command("list")
@click.pass_context
def connectors_list(ctx):
    _emit(Connector.get_connectors(client=_client(ctx)))


@connectors.command("get")
@click.argument("connector_id", type=int)
@click.pass_context
def connectors_get(ctx, connector_id):
    _emit(Connector.get_by_id(connector_id, client=_client(ctx)))


@connectors.command("create")
@click.argument("name")
@click.pass_context
def connectors_create(ctx, name):
    _emit(Connector(name=name).bind(_client(ctx)).create())


@connectors.command("delete")
@click.argument("connector_id", type=int)
@click.pass_context
def connectors_delete(ctx, connector_id):
    _emit({"deleted": Connector(id=connector_id).bind(_client(ctx)).delete()})


# ---------------- contacts ----------------

@cli.group()
def contacts():
    """Account contacts."""


@contacts.command("list")
@click.pass_context
def contacts_list(ctx):
    _emit(Contact.get_contacts(client=_client(ctx)))


def main() -> None:
    cli(prog_name="vivialconnect")


if __name__ == "__main__":
    main()
