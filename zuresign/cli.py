"""
ZureSign Command-Line Interface

Prints the string-to-sign or the signed headers for an Azure Storage request.
"""

import sys
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import click

from zuresign import __version__
from zuresign.auth.exceptions import SigningError
from zuresign.core.config_manager import ConfigManager, ZureSignConfig
from zuresign.core.logging_config import setup_logging
from zuresign.models import SignableRequest
from zuresign.signing.canonicalizer import build_signature_string
from zuresign.signing.headers import add_ms_date_header, add_ms_version_header
from zuresign.signing.pipeline import SigningPipeline
from zuresign.signing.tracing import LoggingObserver


def _parse_headers(values: Tuple[str, ...]) -> Dict[str, str]:
    headers: Dict[str, str] = {}
    for value in values:
        if ":" not in value:
            raise click.BadParameter(f"expected name:value, got {value!r}", param_hint="--header")
        name, header_value = value.split(":", 1)
        headers[name.strip()] = header_value.strip()
    return headers


def _parse_params(values: Tuple[str, ...]) -> List[Tuple[str, str]]:
    params: List[Tuple[str, str]] = []
    for value in values:
        if "=" not in value:
            raise click.BadParameter(f"expected key=value, got {value!r}", param_hint="--param")
        key, param_value = value.split("=", 1)
        params.append((key, param_value))
    return params


def _build_request(
    config: ZureSignConfig,
    method: str,
    url: str,
    header: Tuple[str, ...],
    param: Tuple[str, ...],
) -> SignableRequest:
    try:
        return SignableRequest.from_url(
            method,
            url,
            headers=_parse_headers(header),
            params=_parse_params(param),
            options=config.account,
        )
    except ValueError as e:
        raise click.BadParameter(str(e), param_hint="METHOD") from e


def request_arguments(func):
    """Arguments shared by commands that describe a request."""
    func = click.option(
        "--param",
        "-p",
        multiple=True,
        help="Query parameter as key=value (repeatable)",
    )(func)
    func = click.option(
        "--header",
        "-H",
        multiple=True,
        help="Request header as name:value (repeatable)",
    )(func)
    func = click.argument("url")(func)
    func = click.argument("method")(func)
    return func


@click.group()
@click.version_option(version=__version__, prog_name="zuresign")
@click.option(
    "--config",
    "-c",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="Path to configuration file (YAML or JSON)",
)
@click.option("--account-name", help="Storage account name")
@click.option("--account-key", help="Base64-encoded storage account key")
@click.option("--ms-version", help="Storage service API version")
@click.option("--ms-date", help="Request timestamp in RFC 2616 format")
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"], case_sensitive=False),
    help="Logging level",
)
@click.pass_context
def cli(
    ctx,
    config: Optional[Path],
    account_name: Optional[str],
    account_key: Optional[str],
    ms_version: Optional[str],
    ms_date: Optional[str],
    log_level: Optional[str],
):
    """
    ZureSign - SharedKey signing for Azure Storage requests

    Credentials may also come from ZURESIGN_ACCOUNT_NAME and
    ZURESIGN_ACCOUNT_KEY.
    """
    ctx.ensure_object(dict)

    account: Dict[str, Any] = {
        name: value
        for name, value in (
            ("account_name", account_name),
            ("account_key", account_key),
            ("ms_version", ms_version),
            ("ms_date", ms_date),
        )
        if value is not None
    }
    overrides: Dict[str, Any] = {}
    if account:
        overrides["account"] = account
    if log_level:
        overrides["logging"] = {"level": log_level.upper()}

    try:
        loaded = ConfigManager().load(
            config_file=str(config) if config else None,
            cli_overrides=overrides,
        )
    except SigningError as e:
        click.echo(f"[ERROR] {e.message}", err=True)
        sys.exit(1)

    setup_logging(loaded.logging.level, loaded.logging.format, loaded.logging.file)
    ctx.obj["config"] = loaded


@cli.command("string-to-sign")
@request_arguments
@click.pass_context
def string_to_sign(ctx, method: str, url: str, header: Tuple[str, ...], param: Tuple[str, ...]):
    """
    Print the string-to-sign for a request.

    Examples:
        zuresign --account-name myaccount string-to-sign GET \\
            "https://myaccount.blob.core.windows.net/mycontainer?restype=container"
    """
    request = _build_request(ctx.obj["config"], method, url, header, param)

    try:
        add_ms_version_header(add_ms_date_header(request))
        click.echo(build_signature_string(request))
    except SigningError as e:
        click.echo(f"[ERROR] {e.message}", err=True)
        sys.exit(1)


@cli.command()
@request_arguments
@click.pass_context
def sign(ctx, method: str, url: str, header: Tuple[str, ...], param: Tuple[str, ...]):
    """
    Print the x-ms-date, x-ms-version and Authorization headers for a request.

    Examples:
        zuresign -c account.yaml sign PUT \\
            "https://myaccount.blob.core.windows.net/mycontainer/blob.txt" \\
            -H "x-ms-blob-type:BlockBlob" -H "content-length:11"
    """
    request = _build_request(ctx.obj["config"], method, url, header, param)
    pipeline = SigningPipeline(observers=[LoggingObserver()])

    try:
        pipeline.run(request)
    except SigningError as e:
        click.echo(f"[ERROR] {e.message}", err=True)
        sys.exit(1)

    for name in ("x-ms-date", "x-ms-version", "Authorization"):
        click.echo(f"{name}: {request.get_header(name)}")


@cli.command()
def version():
    """Show ZureSign version."""
    click.echo(f"ZureSign version {__version__}")


def main():
    """Main entry point for CLI."""
    cli(obj={})


if __name__ == "__main__":
    main()
