"""Release-service client.

``PivnetClient`` is the capability the services depend on. ``PivnetAPIClient``
implements it against the v2 REST API through a ``Transport``;
``MockPivnetClient`` keeps releases in memory for tests.
"""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path
from typing import Protocol, TypeVar, runtime_checkable

from pivnet_resource.core.result import Err, Ok, Result
from pivnet_resource.core.structured import StrDict, as_str_dict, get_list, get_table
from pivnet_resource.pivnet.http import PivnetError, Transport
from pivnet_resource.pivnet.models import ProductFile, Release, ReleaseDependency

__all__ = ["PivnetClient", "PivnetAPIClient", "MockPivnetClient"]

T = TypeVar("T")


@runtime_checkable
class PivnetClient(Protocol):
    """Operations the resource performs against the release service."""

    def releases(self, product_slug: str) -> Result[list[Release], PivnetError]:
        """All releases of a product, in the order the service returns them (newest first)."""
        ...

    def release_by_version(
        self, product_slug: str, version: str
    ) -> Result[Release, PivnetError]: ...

    def accept_eula(self, product_slug: str, release_id: int) -> Result[None, PivnetError]: ...

    def product_files(
        self, product_slug: str, release_id: int
    ) -> Result[list[ProductFile], PivnetError]: ...

    def release_dependencies(
        self, product_slug: str, release_id: int
    ) -> Result[list[ReleaseDependency], PivnetError]: ...

    def create_release(
        self, product_slug: str, release: Release
    ) -> Result[Release, PivnetError]: ...

    def delete_release(self, product_slug: str, release_id: int) -> Result[None, PivnetError]: ...

    def create_product_file(
        self, product_slug: str, product_file: ProductFile
    ) -> Result[ProductFile, PivnetError]: ...

    def add_product_file(
        self, product_slug: str, release_id: int, product_file_id: int
    ) -> Result[None, PivnetError]: ...

    def download_product_file(
        self, product_file: ProductFile, dest: Path
    ) -> Result[Path, PivnetError]: ...


def _parse_items(
    data: StrDict,
    key: str,
    parse: Callable[[StrDict], T | None],
) -> list[T]:
    items: list[T] = []
    for raw in get_list(data, key) or []:
        table = as_str_dict(raw)
        if table is None:
            continue
        item = parse(table)
        if item is not None:
            items.append(item)
    return items


class PivnetAPIClient:
    """Client for ``<endpoint>/api/v2``."""

    def __init__(self, transport: Transport, *, endpoint: str) -> None:
        self._transport = transport
        self._base = f"{endpoint.rstrip('/')}/api/v2"

    def _url(self, path: str) -> str:
        return f"{self._base}/{path.lstrip('/')}"

    def _release_url(self, product_slug: str, release_id: int, suffix: str = "") -> str:
        path = f"products/{product_slug}/releases/{release_id}"
        return self._url(f"{path}/{suffix}" if suffix else path)

    def releases(self, product_slug: str) -> Result[list[Release], PivnetError]:
        result = self._transport.request_json("GET", self._url(f"products/{product_slug}/releases"))
        if isinstance(result, Err):
            return result
        return Ok(_parse_items(result.value, "releases", Release.from_dict))

    def release_by_version(self, product_slug: str, version: str) -> Result[Release, PivnetError]:
        listed = self.releases(product_slug)
        if isinstance(listed, Err):
            return listed
        for release in listed.value:
            if release.version == version:
                return Ok(release)
        return Err(
            PivnetError(
                url=self._url(f"products/{product_slug}/releases"),
                status=404,
                message=f"release not found for version: '{version}'",
            )
        )

    def accept_eula(self, product_slug: str, release_id: int) -> Result[None, PivnetError]:
        url = self._release_url(product_slug, release_id, "eula_acceptance")
        return self._transport.request_json("POST", url).map(lambda _: None)

    def product_files(
        self, product_slug: str, release_id: int
    ) -> Result[list[ProductFile], PivnetError]:
        url = self._release_url(product_slug, release_id, "product_files")
        result = self._transport.request_json("GET", url)
        if isinstance(result, Err):
            return result
        return Ok(_parse_items(result.value, "product_files", ProductFile.from_dict))

    def release_dependencies(
        self, product_slug: str, release_id: int
    ) -> Result[list[ReleaseDependency], PivnetError]:
        url = self._release_url(product_slug, release_id, "dependencies")
        result = self._transport.request_json("GET", url)
        if isinstance(result, Err):
            return result
        return Ok(_parse_items(result.value, "dependencies", ReleaseDependency.from_dict))

    def create_release(self, product_slug: str, release: Release) -> Result[Release, PivnetError]:
        url = self._url(f"products/{product_slug}/releases")
        result = self._transport.request_json("POST", url, {"release": release.to_dict()})
        if isinstance(result, Err):
            return result

        created = Release.from_dict(get_table(result.value, "release") or {})
        if created is None:
            return Err(PivnetError(url=url, status=0, message="Missing release in response"))
        return Ok(created)

    def delete_release(self, product_slug: str, release_id: int) -> Result[None, PivnetError]:
        url = self._release_url(product_slug, release_id)
        return self._transport.request_json("DELETE", url).map(lambda _: None)

    def create_product_file(
        self, product_slug: str, product_file: ProductFile
    ) -> Result[ProductFile, PivnetError]:
        url = self._url(f"products/{product_slug}/product_files")
        body: StrDict = {"product_file": product_file.to_dict()}
        result = self._transport.request_json("POST", url, body)
        if isinstance(result, Err):
            return result

        created = ProductFile.from_dict(get_table(result.value, "product_file") or {})
        if created is None:
            return Err(PivnetError(url=url, status=0, message="Missing product_file in response"))
        return Ok(created)

    def add_product_file(
        self, product_slug: str, release_id: int, product_file_id: int
    ) -> Result[None, PivnetError]:
        url = self._release_url(product_slug, release_id, "add_product_file")
        body: StrDict = {"product_file": {"id": product_file_id}}
        return self._transport.request_json("PATCH", url, body).map(lambda _: None)

    def download_product_file(
        self, product_file: ProductFile, dest: Path
    ) -> Result[Path, PivnetError]:
        if product_file.download_url is None:
            return Err(
                PivnetError(
                    url=self._base,
                    status=0,
                    message=f"product file '{product_file.name}' has no download link",
                )
            )
        return self._transport.download(product_file.download_url, dest)


class MockPivnetClient:
    """In-memory release service for testing.

    Usage:
        client = MockPivnetClient()
        client.add_release("my-product", Release(id=1, version="1.0.0"))
        client.add_file("my-product", 1, ProductFile(...), b"content")
    """

    def __init__(self) -> None:
        self._releases: dict[str, list[Release]] = {}
        self._files: dict[tuple[str, int], list[ProductFile]] = {}
        self._dependencies: dict[tuple[str, int], list[ReleaseDependency]] = {}
        self._contents: dict[str, bytes] = {}
        self._failures: dict[str, PivnetError] = {}
        self._next_id = 1000
        self.created_files: list[ProductFile] = []
        self.accepted_eulas: list[tuple[str, int]] = []
        self.calls: list[str] = []

    # Test setup helpers

    def add_release(self, product_slug: str, release: Release) -> Release:
        """Add a release; later additions are treated as newer."""
        if release.id is None:
            release = release.with_id(self._allocate_id())
        self._releases.setdefault(product_slug, []).insert(0, release)
        return release

    def add_file(
        self,
        product_slug: str,
        release_id: int,
        product_file: ProductFile,
        content: bytes = b"",
    ) -> ProductFile:
        if product_file.id is None:
            product_file = product_file.with_id(self._allocate_id())
        self._files.setdefault((product_slug, release_id), []).append(product_file)
        self._contents[product_file.aws_object_key] = content
        return product_file

    def add_dependency(
        self, product_slug: str, release_id: int, dependency: ReleaseDependency
    ) -> None:
        self._dependencies.setdefault((product_slug, release_id), []).append(dependency)

    def fail(self, operation: str, error: PivnetError) -> None:
        """Make every later call of ``operation`` (a method name) fail."""
        self._failures[operation] = error

    def releases_of(self, product_slug: str) -> list[Release]:
        return list(self._releases.get(product_slug, []))

    def files_of(self, product_slug: str, release_id: int) -> list[ProductFile]:
        return list(self._files.get((product_slug, release_id), []))

    def _allocate_id(self) -> int:
        self._next_id += 1
        return self._next_id

    def _check(self, operation: str) -> PivnetError | None:
        self.calls.append(operation)
        return self._failures.get(operation)

    # PivnetClient

    def releases(self, product_slug: str) -> Result[list[Release], PivnetError]:
        if (error := self._check("releases")) is not None:
            return Err(error)
        return Ok(self.releases_of(product_slug))

    def release_by_version(self, product_slug: str, version: str) -> Result[Release, PivnetError]:
        if (error := self._check("release_by_version")) is not None:
            return Err(error)
        for release in self._releases.get(product_slug, []):
            if release.version == version:
                return Ok(release)
        return Err(
            PivnetError(
                url=f"mock://products/{product_slug}/releases",
                status=404,
                message=f"release not found for version: '{version}'",
            )
        )

    def accept_eula(self, product_slug: str, release_id: int) -> Result[None, PivnetError]:
        if (error := self._check("accept_eula")) is not None:
            return Err(error)
        self.accepted_eulas.append((product_slug, release_id))
        return Ok(None)

    def product_files(
        self, product_slug: str, release_id: int
    ) -> Result[list[ProductFile], PivnetError]:
        if (error := self._check("product_files")) is not None:
            return Err(error)
        return Ok(self.files_of(product_slug, release_id))

    def release_dependencies(
        self, product_slug: str, release_id: int
    ) -> Result[list[ReleaseDependency], PivnetError]:
        if (error := self._check("release_dependencies")) is not None:
            return Err(error)
        return Ok(list(self._dependencies.get((product_slug, release_id), [])))

    def create_release(self, product_slug: str, release: Release) -> Result[Release, PivnetError]:
        if (error := self._check("create_release")) is not None:
            return Err(error)
        return Ok(self.add_release(product_slug, release))

    def delete_release(self, product_slug: str, release_id: int) -> Result[None, PivnetError]:
        if (error := self._check("delete_release")) is not None:
            return Err(error)
        releases = self._releases.get(product_slug, [])
        self._releases[product_slug] = [r for r in releases if r.id != release_id]
        self._files.pop((product_slug, release_id), None)
        return Ok(None)

    def create_product_file(
        self, product_slug: str, product_file: ProductFile
    ) -> Result[ProductFile, PivnetError]:
        if (error := self._check("create_product_file")) is not None:
            return Err(error)
        created = product_file.with_id(self._allocate_id())
        self.created_files.append(created)
        return Ok(created)

    def add_product_file(
        self, product_slug: str, release_id: int, product_file_id: int
    ) -> Result[None, PivnetError]:
        if (error := self._check("add_product_file")) is not None:
            return Err(error)
        for created in self.created_files:
            if created.id == product_file_id:
                self._files.setdefault((product_slug, release_id), []).append(created)
                return Ok(None)
        return Err(
            PivnetError(
                url=f"mock://products/{product_slug}/product_files/{product_file_id}",
                status=404,
                message="product file not found",
            )
        )

    def download_product_file(
        self, product_file: ProductFile, dest: Path
    ) -> Result[Path, PivnetError]:
        if (error := self._check("download_product_file")) is not None:
            return Err(error)
        content = self._contents.get(product_file.aws_object_key)
        if content is None:
            return Err(
                PivnetError(
                    url=f"mock://{product_file.aws_object_key}",
                    status=404,
                    message="Not found (mock)",
                )
            )
        dest.parent.mkdir(parents=True, exist_ok=True)
        dest.write_bytes(content)
        return Ok(dest)
