from __future__ import annotations

from pivnet_resource.concourse.models import CheckRequest, Source, Version
from pivnet_resource.core.result import Err, Ok
from pivnet_resource.output.console import MockConsole
from pivnet_resource.pivnet.client import MockPivnetClient
from pivnet_resource.pivnet.http import PivnetError
from pivnet_resource.pivnet.models import Release
from pivnet_resource.services.check import CheckService

SLUG = "p-redis"


def _client(*releases: tuple[str, str]) -> MockPivnetClient:
    """Releases are given oldest first."""
    client = MockPivnetClient()
    for version, release_type in releases:
        client.add_release(SLUG, Release(id=None, version=version, release_type=release_type))
    return client


def _run(
    client: MockPivnetClient,
    current: str | None = None,
    **source: object,
) -> list[str]:
    request = CheckRequest(
        source=Source(api_token="t", product_slug=SLUG, **source),  # type: ignore[arg-type]
        version=Version(product_version=current),
    )
    result = CheckService(client=client, console=MockConsole()).run(request)
    assert isinstance(result, Ok)
    return [v.product_version or "" for v in result.value]


def test_first_check_returns_newest() -> None:
    client = _client(("1.0.0", "Major Release"), ("1.1.0", "Minor Release"))
    assert _run(client) == ["1.1.0"]


def test_returns_current_and_newer() -> None:
    client = _client(("1.0.0", "A"), ("1.1.0", "A"), ("1.2.0", "A"))
    assert _run(client, "1.0.0") == ["1.0.0", "1.1.0", "1.2.0"]


def test_no_releases() -> None:
    assert _run(MockPivnetClient()) == []


def test_release_type_filter() -> None:
    client = _client(("1.0.0", "Major Release"), ("1.0.1", "Security Release"))
    assert _run(client, release_type="Major Release") == ["1.0.0"]


def test_product_version_is_a_full_match_regex() -> None:
    client = _client(("1.0.0", "A"), ("11.0.0", "A"), ("2.0.0", "A"))
    assert _run(client, product_version=r"1\..*") == ["1.0.0"]


def test_invalid_product_version_regex() -> None:
    request = CheckRequest(
        source=Source(api_token="t", product_slug=SLUG, product_version="("),
        version=Version(),
    )
    result = CheckService(client=_client(("1.0", "A")), console=MockConsole()).run(request)
    assert isinstance(result, Err)
    assert result.error.kind == "invalid_input"


def test_sort_by_none_trusts_service_order() -> None:
    # Service lists newest first; "1.2.0" was published last.
    client = _client(("1.10.0", "A"), ("1.2.0", "A"))
    assert _run(client) == ["1.2.0"]


def test_sort_by_semver() -> None:
    client = _client(("1.10.0", "A"), ("1.2.0", "A"))
    assert _run(client, sort_by="semver") == ["1.10.0"]
    assert _run(client, "1.2.0", sort_by="semver") == ["1.2.0", "1.10.0"]


def test_service_error() -> None:
    client = MockPivnetClient()
    client.fail("releases", PivnetError(url="u", status=401, message="bad token"))
    request = CheckRequest(source=Source(api_token="t", product_slug=SLUG), version=Version())

    result = CheckService(client=client, console=MockConsole()).run(request)

    assert isinstance(result, Err)
    assert result.error.kind == "unauthorized"
