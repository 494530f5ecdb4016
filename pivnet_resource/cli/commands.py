from __future__ import annotations

from pathlib import Path
from typing import Literal

import typer

from pivnet_resource.cli._helpers import fail, read_request, unwrap_or_exit
from pivnet_resource.cli.context import build_console, build_context
from pivnet_resource.concourse.models import (
    CheckRequest,
    InRequest,
    OutRequest,
    check_response_json,
    parse_request_json,
)
from pivnet_resource.concourse.validation import validate_check, validate_in, validate_out
from pivnet_resource.core.errors import ResourceError
from pivnet_resource.core.result import Err
from pivnet_resource.output.console import ConsoleProtocol
from pivnet_resource.services.check import CheckService
from pivnet_resource.services.fetch import FetchService
from pivnet_resource.services.publish import PublishService


def _load(
    kind: Literal["check", "in", "out"],
) -> tuple[CheckRequest | InRequest | OutRequest, ConsoleProtocol]:
    parsed = parse_request_json(read_request(), kind)
    if isinstance(parsed, Err):
        fail(parsed.error, build_console())
    request = parsed.value
    return request, build_console(verbose=request.source.verbose)


def _require_dir(path: Path | None, label: str, console: ConsoleProtocol) -> Path:
    if path is None:
        fail(ResourceError(kind="missing_field", message=f"{label} must be provided"), console)
    if not path.is_dir():
        message = f"{label} does not exist: {path}"
        fail(ResourceError(kind="invalid_input", message=message), console)
    return path


def check() -> None:
    """Print the versions Concourse has not seen yet."""
    request, console = _load("check")
    assert isinstance(request, CheckRequest)
    unwrap_or_exit(validate_check(request), console)

    ctx = build_context(request.source, console)
    service = CheckService(client=ctx.pivnet, console=console)
    versions = unwrap_or_exit(service.run(request), console)

    typer.echo(check_response_json(versions))


def in_(
    destination: Path | None = typer.Argument(
        None,
        help="Directory to download the release into.",
        show_default=False,
    ),
) -> None:
    """Download the requested release."""
    request, console = _load("in")
    assert isinstance(request, InRequest)
    dest_dir = _require_dir(destination, "destination directory", console)
    unwrap_or_exit(validate_in(request), console)

    ctx = build_context(request.source, console)
    service = FetchService(client=ctx.pivnet, console=console)
    response = unwrap_or_exit(service.run(request, dest_dir), console)

    typer.echo(response.to_json())


def out(
    sources: Path | None = typer.Argument(
        None,
        help="Directory holding the build outputs.",
        show_default=False,
    ),
) -> None:
    """Create a release, uploading a file when a glob is configured."""
    request, console = _load("out")
    assert isinstance(request, OutRequest)
    sources_dir = _require_dir(sources, "sources directory", console)
    unwrap_or_exit(validate_out(request), console)

    ctx = build_context(
        request.source,
        console,
        with_uploader=request.params.file_glob is not None,
    )
    service = PublishService(client=ctx.pivnet, console=console, uploader=ctx.uploader)
    response = unwrap_or_exit(service.run(request, sources_dir), console)

    typer.echo(response.to_json())
