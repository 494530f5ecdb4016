from __future__ import annotations

from dataclasses import dataclass

from pivnet_resource.concourse.models import Source
from pivnet_resource.output.console import ConsoleProtocol, RichConsole
from pivnet_resource.pivnet.client import PivnetAPIClient, PivnetClient
from pivnet_resource.pivnet.http import UrllibTransport
from pivnet_resource.storage.s3 import BotoObjectStore
from pivnet_resource.storage.upload import Uploader


@dataclass(frozen=True, slots=True)
class CLIContext:
    console: ConsoleProtocol
    pivnet: PivnetClient
    uploader: Uploader | None = None


def build_console(*, verbose: bool = False) -> ConsoleProtocol:
    return RichConsole(verbose=verbose)


def build_context(
    source: Source,
    console: ConsoleProtocol,
    *,
    with_uploader: bool = False,
) -> CLIContext:
    """Wire the production clients for one invocation."""
    transport = UrllibTransport(
        source.api_token or "",
        skip_ssl_verification=source.skip_ssl_verification,
    )
    pivnet = PivnetAPIClient(transport, endpoint=source.endpoint)

    uploader: Uploader | None = None
    if with_uploader and source.bucket is not None:
        uploader = Uploader(BotoObjectStore.from_source(source), source.bucket, console)

    return CLIContext(console=console, pivnet=pivnet, uploader=uploader)
