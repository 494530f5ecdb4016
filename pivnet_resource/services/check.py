from __future__ import annotations

import re
from dataclasses import dataclass

from pivnet_resource.concourse.models import CheckRequest, Version
from pivnet_resource.core.errors import ResourceError
from pivnet_resource.core.result import Err, Ok, Result
from pivnet_resource.output.console import ConsoleProtocol
from pivnet_resource.pivnet.client import PivnetClient
from pivnet_resource.pivnet.models import Release
from pivnet_resource.services.semver import new_versions, sort_versions


def _filter_releases(
    releases: list[Release],
    *,
    release_type: str | None,
    version_pattern: str | None,
) -> Result[list[Release], ResourceError]:
    if release_type is not None:
        releases = [r for r in releases if r.release_type == release_type]

    if version_pattern is not None:
        try:
            regex = re.compile(version_pattern)
        except re.error as e:
            return Err(
                ResourceError(
                    kind="invalid_input",
                    message=f"product_version is not a valid regular expression: {e}",
                )
            )
        releases = [r for r in releases if regex.fullmatch(r.version)]

    return Ok(releases)


@dataclass(frozen=True, slots=True)
class CheckService:
    """Lists the versions Concourse should know about."""

    client: PivnetClient
    console: ConsoleProtocol

    def run(self, request: CheckRequest) -> Result[list[Version], ResourceError]:
        source = request.source
        product_slug = source.product_slug or ""

        self.console.debug(f"fetching releases for product: {product_slug}")
        listed = self.client.releases(product_slug)
        if isinstance(listed, Err):
            return Err(listed.error.to_resource_error())

        filtered = _filter_releases(
            listed.value,
            release_type=source.release_type,
            version_pattern=source.product_version,
        )
        if isinstance(filtered, Err):
            return filtered

        ordered = sort_versions([r.version for r in filtered.value], source.sort_by)
        self.console.debug(f"{len(ordered)} candidate versions (sort_by: {source.sort_by})")

        selected = new_versions(ordered, request.version.product_version)
        return Ok([Version(product_version=v) for v in selected])
