from __future__ import annotations

from pivnet_resource.core.result import Err, Ok
from pivnet_resource.pivnet.models import ProductFile
from pivnet_resource.services.globs import select_product_files

FILES = [
    ProductFile(id=1, name="Tile", aws_object_key="product_files/p-redis-1.0.pivotal"),
    ProductFile(id=2, name="CLI linux", aws_object_key="product_files/redis-cli-linux.tgz"),
    ProductFile(id=3, name="CLI mac", aws_object_key="product_files/redis-cli-darwin.tgz"),
]


def test_no_globs_selects_everything() -> None:
    assert select_product_files(FILES, None) == Ok(FILES)


def test_empty_globs_select_nothing() -> None:
    assert select_product_files(FILES, []) == Ok([])


def test_globs_match_file_names_in_listing_order() -> None:
    result = select_product_files(FILES, ["*darwin*", "*.pivotal"])
    assert isinstance(result, Ok)
    assert [f.id for f in result.value] == [1, 3]


def test_file_matching_several_globs_is_selected_once() -> None:
    result = select_product_files(FILES, ["redis-cli-*", "*.tgz"])
    assert isinstance(result, Ok)
    assert [f.id for f in result.value] == [2, 3]


def test_unmatched_glob_is_an_error() -> None:
    result = select_product_files(FILES, ["*.pivotal", "*.exe"])
    assert isinstance(result, Err)
    assert result.error.kind == "no_match"
    assert result.error.message == "no product files match glob: '*.exe'"
    assert result.error.hint is not None
    assert "redis-cli-linux.tgz" in result.error.hint


def test_matching_is_case_sensitive() -> None:
    assert isinstance(select_product_files(FILES, ["*.PIVOTAL"]), Err)
