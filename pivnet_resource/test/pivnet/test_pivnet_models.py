from __future__ import annotations

from pivnet_resource.pivnet.models import ProductFile, Release, ReleaseDependency


class TestRelease:
    def test_from_dict(self) -> None:
        release = Release.from_dict(
            {
                "id": 7,
                "version": "1.2.0",
                "release_type": "Minor Release",
                "release_date": "2024-05-01",
                "eula": {"slug": "pivotal_software_eula", "id": 3},
                "availability": "All Users",
                "controlled": True,
            }
        )
        assert release is not None
        assert release.id == 7
        assert release.version == "1.2.0"
        assert release.release_type == "Minor Release"
        assert release.eula_slug == "pivotal_software_eula"
        assert release.controlled is True

    def test_without_version_is_skipped(self) -> None:
        assert Release.from_dict({"id": 1}) is None

    def test_to_dict_omits_unset_fields(self) -> None:
        release = Release(id=None, version="1.0", eula_slug="eula")
        assert release.to_dict() == {
            "version": "1.0",
            "eula": {"slug": "eula"},
            "controlled": False,
        }

    def test_with_id(self) -> None:
        assert Release(id=None, version="1.0").with_id(5).id == 5


class TestProductFile:
    def test_from_dict_reads_download_link(self) -> None:
        product_file = ProductFile.from_dict(
            {
                "id": 12,
                "name": "Redis Tile",
                "aws_object_key": "product_files/redis/p-redis-1.0.pivotal",
                "sha256": "abc",
                "_links": {"download": {"href": "https://pivnet/api/v2/x/download"}},
            }
        )
        assert product_file is not None
        assert product_file.id == 12
        assert product_file.download_url == "https://pivnet/api/v2/x/download"
        assert product_file.file_name == "p-redis-1.0.pivotal"

    def test_name_defaults_to_file_name(self) -> None:
        product_file = ProductFile.from_dict({"aws_object_key": "a/b/c.tgz"})
        assert product_file is not None
        assert product_file.name == "c.tgz"
        assert product_file.download_url is None

    def test_without_object_key_is_skipped(self) -> None:
        assert ProductFile.from_dict({"name": "x"}) is None

    def test_to_dict(self) -> None:
        product_file = ProductFile(
            id=None,
            name="tile",
            aws_object_key="product_files/tile.pivotal",
            file_type="Software",
            md5="d41d8cd9",
        )
        assert product_file.to_dict() == {
            "name": "tile",
            "aws_object_key": "product_files/tile.pivotal",
            "file_type": "Software",
            "md5": "d41d8cd9",
        }


class TestReleaseDependency:
    def test_from_dict(self) -> None:
        dependency = ReleaseDependency.from_dict(
            {"release": {"id": 3, "version": "2.1", "product": {"slug": "stemcells"}}}
        )
        assert dependency == ReleaseDependency(
            release_id=3, version="2.1", product_slug="stemcells"
        )

    def test_missing_release_is_skipped(self) -> None:
        assert ReleaseDependency.from_dict({}) is None
        assert ReleaseDependency.from_dict({"release": {"id": 3}}) is None
