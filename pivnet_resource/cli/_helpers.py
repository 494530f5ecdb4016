"""Shared helpers for the check/in/out commands."""

from __future__ import annotations

import sys
from typing import NoReturn, TypeVar

import typer

from pivnet_resource.core.errors import ResourceError
from pivnet_resource.core.result import Err, Ok, Result
from pivnet_resource.output.console import ConsoleProtocol, Style

T = TypeVar("T")


def read_request() -> str:
    """Read the JSON request Concourse writes to stdin."""
    return sys.stdin.read()


def fail(error: ResourceError, console: ConsoleProtocol) -> NoReturn:
    console.error(error.message)
    if error.hint:
        console.print(f"hint: {error.hint}", Style.DIM)
    raise typer.Exit(code=int(error.exit_code))


def unwrap_or_exit(result: Result[T, ResourceError], console: ConsoleProtocol) -> T:
    """Return the value of an Ok result, or report the error and exit.

    This replaces the pattern:
        match result:
            case Err(e):
                console.error(e.message)
                raise typer.Exit(code=int(e.exit_code))
            case Ok(value):
                ...
    """
    if isinstance(result, Err):
        fail(result.error, console)
    assert isinstance(result, Ok)
    return result.value
