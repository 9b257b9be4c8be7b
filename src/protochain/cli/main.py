"""
Main CLI entry point for protochain.

Provides the command-line interface using Click.
"""

import json as _json
import logging as _logging
import pathlib as _pathlib
import typing as _typing

import click as _click
import rich.console as _rich_console
import rich.logging as _rich_logging
import yaml as _yaml

import protochain
import protochain.cli.demo as demo
import protochain.config as config
import protochain.errors as errors
import protochain.merge as merge
import protochain.payload as payload

_logger = _logging.getLogger(__name__)

# Custom Click context settings for better help formatting
CONTEXT_SETTINGS: dict[str, _typing.Any] = {
    "help_option_names": ["-h", "--help"],
    "max_content_width": 100,
}


def _configure_logging(level: int) -> None:
    """Route protochain loggers to stderr through Rich."""
    handler = _rich_logging.RichHandler(
        console=_rich_console.Console(stderr=True),
        show_path=False,
    )
    package_logger = _logging.getLogger("protochain")
    package_logger.handlers[:] = [handler]
    package_logger.setLevel(level)
    package_logger.propagate = False


def _read_payload_argument(value: str) -> str:
    """Return payload text; ``@path`` reads the file at path."""
    if not value.startswith("@"):
        return value
    path = _pathlib.Path(value[1:])
    try:
        return path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise _click.BadParameter(f"cannot read {path}: {e}", param_hint="PAYLOAD") from e


@_click.group(context_settings=CONTEXT_SETTINGS)
@_click.version_option(protochain.__version__, "-v", "--version", prog_name="protochain")
@_click.option(
    "--verbose",
    is_flag=True,
    help="Enable debug logging",
)
@_click.pass_context
def cli(ctx: _click.Context, verbose: bool) -> None:
    """
    protochain - prototype delegation and safe merging.

    \b
    Examples:
        protochain demo                                  # Walk through delegation
        protochain merge '{"a": 1, "__proto__": {}}'     # Safe-merge a payload
        protochain merge @payload.json --target '{"b": 2}'
        protochain config show                           # Show configuration
    """
    try:
        settings = config.Settings()
    except errors.ConfigFileError as e:
        raise _click.ClickException(str(e)) from e

    _configure_logging(_logging.DEBUG if verbose else settings.log_level)

    ctx.ensure_object(dict)
    ctx.obj["settings"] = settings


@cli.command(name="demo")
@_click.option("--no-color", is_flag=True, help="Disable colored output")
def demo_cmd(no_color: bool) -> None:
    """Print a labeled walkthrough of delegation and safe merging."""
    console = _rich_console.Console(no_color=no_color, highlight=not no_color)
    demo.run_demo(console)


@cli.command(name="merge")
@_click.argument("payload_arg", metavar="PAYLOAD")
@_click.option(
    "--target",
    "target_text",
    type=str,
    default="{}",
    show_default=True,
    help="JSON object to merge into",
)
@_click.option(
    "--extra-reserved",
    "extra_reserved",
    multiple=True,
    help="Additional key to block (repeatable)",
)
@_click.option(
    "--fold-case/--no-fold-case",
    default=None,
    help="Also block case variants of reserved keys (default: from config)",
)
@_click.option("--json", "json_output", is_flag=True, help="Output as JSON")
@_click.pass_context
def merge_cmd(
    ctx: _click.Context,
    payload_arg: str,
    target_text: str,
    extra_reserved: tuple[str, ...],
    fold_case: bool | None,
    json_output: bool,
) -> None:
    """Safe-merge a JSON PAYLOAD into a target object.

    PAYLOAD is JSON object text, or @path to read it from a file.
    Reserved keys in the payload are skipped and listed.
    """
    settings: config.Settings = ctx.obj["settings"]

    try:
        source = payload.parse_payload(_read_payload_argument(payload_arg))
    except errors.PayloadError as e:
        raise _click.BadParameter(str(e), param_hint="PAYLOAD") from e

    try:
        target = _json.loads(target_text)
    except _json.JSONDecodeError as e:
        raise _click.BadParameter(f"invalid JSON: {e}", param_hint="--target") from e
    if not isinstance(target, dict):
        raise _click.BadParameter("target must be a JSON object", param_hint="--target")

    reserved = settings.reserved_keys() | frozenset(extra_reserved)
    if fold_case is None:
        fold_case = settings.merge.fold_case

    skipped = [key for key in source if merge.is_reserved(key, reserved, fold_case=fold_case)]
    merge.safe_merge(target, source, reserved_keys=reserved, fold_case=fold_case)
    if skipped:
        _logger.info("Skipped reserved keys: %s", ", ".join(skipped))

    result = payload.to_plain(target)
    if json_output:
        _click.echo(_json.dumps({"result": result, "skipped": skipped}, indent=2))
        return

    _click.echo(_json.dumps(result, indent=2))
    if skipped:
        _click.echo(f"Skipped reserved keys: {', '.join(skipped)}", err=True)


@cli.group(name="config")
def config_cmd() -> None:
    """Configuration commands."""


@config_cmd.command(name="show")
@_click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@_click.pass_context
def config_show(ctx: _click.Context, as_json: bool) -> None:
    """Show effective configuration from all sources."""
    settings: config.Settings = ctx.obj["settings"]
    data = settings.to_dict()

    if as_json:
        _click.echo(_json.dumps(data, indent=2))
    else:
        _click.echo(_yaml.safe_dump(data, default_flow_style=False, sort_keys=False))


def main() -> None:
    """Main entry point with correct program name."""
    cli(prog_name="protochain")


if __name__ == "__main__":
    main()
