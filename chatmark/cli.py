"""Command-line interface for chatmark."""

import json
import logging
import sys

import click

from chatmark import __version__
from chatmark.config import get_config
from chatmark.tokens import MentionKind


@click.group()
@click.version_option(version=__version__, prog_name="chatmark")
@click.option("-v", "--verbose", is_flag=True, help="Enable verbose logging.")
def cli(verbose: bool) -> None:
    """chatmark - Chat message markdown tokenizer with safe links and mentions."""
    level = logging.DEBUG if verbose else logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
        stream=sys.stderr,
    )


def _read_content(text: str | None) -> str:
    """Return TEXT, or stdin when it is omitted, enforcing the length cap."""
    if text is None:
        text = sys.stdin.read().rstrip("\n")
    config = get_config()
    if config.exceeds_limit(text):
        raise click.ClickException(
            f"Message is {len(text)} characters long; "
            f"the limit is {config.max_message_length}."
        )
    return text


@cli.command()
@click.argument("text", required=False)
def tokenize(text: str | None) -> None:
    """Print the token tree of TEXT (or stdin) as JSON."""
    from chatmark.tokenizer import tokenize as tokenize_text
    from chatmark.tokens import tokens_to_json

    click.echo(tokens_to_json(tokenize_text(_read_content(text)), indent=2))


@cli.command()
@click.argument("text", required=False)
@click.option("--server-id", default=None, help="Server scope for mention links.")
def render(text: str | None, server_id: str | None) -> None:
    """Render TEXT (or stdin) as HTML."""
    from chatmark.renderer import render_message

    config = get_config()
    click.echo(render_message(
        _read_content(text),
        server_id=server_id or config.server_id,
        link_target=config.link_target,
    ))


@cli.command()
@click.argument("state_file", type=click.File("r"))
def serialize(state_file) -> None:
    """Convert an editor state JSON file to markdown."""
    from chatmark.document import DocumentDecodeError, document_from_lexical
    from chatmark.serializer import serialize as serialize_document

    try:
        document = document_from_lexical(state_file.read())
    except DocumentDecodeError as e:
        raise click.ClickException(str(e)) from e
    click.echo(serialize_document(document))


@cli.command("check-url")
@click.argument("url")
def check_url(url: str) -> None:
    """Exit 0 if URL may be rendered as a link, 1 otherwise."""
    from chatmark.validation import is_valid_url

    valid = is_valid_url(url)
    click.echo("valid" if valid else "invalid")
    sys.exit(0 if valid else 1)


@cli.command("check-id")
@click.argument("identifier")
def check_id(identifier: str) -> None:
    """Exit 0 if IDENTIFIER is a valid mention identifier, 1 otherwise."""
    from chatmark.validation import is_valid_identifier

    valid = is_valid_identifier(identifier)
    click.echo("valid" if valid else "invalid")
    sys.exit(0 if valid else 1)


@cli.command()
@click.argument("text", required=False)
@click.option(
    "--kind",
    type=click.Choice([k.value for k in MentionKind]),
    default=None,
    help="Only list user or channel mentions.",
)
def mentions(text: str | None, kind: str | None) -> None:
    """List the mentions in TEXT (or stdin) as JSON."""
    from chatmark.scan import iter_mentions
    from chatmark.tokenizer import tokenize as tokenize_text
    from chatmark.tokens import token_to_dict

    found = iter_mentions(tokenize_text(_read_content(text)))
    if kind is not None:
        found = (m for m in found if m.kind is MentionKind(kind))
    click.echo(json.dumps([token_to_dict(m) for m in found], indent=2))


@cli.command("serve-mcp")
def serve_mcp() -> None:
    """Start the MCP server (stdio transport)."""
    from chatmark.mcp_server import serve

    serve()


@cli.command()
def doctor() -> None:
    """Show version and configuration."""
    config = get_config()

    click.echo(f"chatmark v{__version__}")
    click.echo(f"  Max message length: {config.max_message_length}")
    click.echo(f"  Server id:          {config.server_id or 'not set'}")
    click.echo(f"  Link target:        {config.link_target}")

    click.echo("\nMCP server:")
    try:
        import mcp  # noqa: F401

        click.echo("  mcp: available")
    except ImportError:
        click.echo("  mcp: NOT available")

    # Print MCP registration info
    click.echo("\n--- MCP Registration ---")
    click.echo(
        json.dumps(
            {"mcpServers": {"chatmark": {"command": "chatmark", "args": ["serve-mcp"]}}},
            indent=2,
        )
    )


if __name__ == "__main__":
    cli()
