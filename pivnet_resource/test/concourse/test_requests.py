"""Tests for parsing Concourse requests and rendering responses."""

from __future__ import annotations

import json

from pivnet_resource.concourse.models import (
    DEFAULT_ENDPOINT,
    DEFAULT_REGION,
    CheckRequest,
    InRequest,
    InResponse,
    Metadata,
    OutRequest,
    OutResponse,
    Source,
    Version,
    check_response_json,
    parse_request_json,
)
from pivnet_resource.core.result import Err, Ok


class TestSource:
    def test_defaults(self) -> None:
        source = Source.from_dict({})
        assert source.api_token is None
        assert source.endpoint == DEFAULT_ENDPOINT
        assert source.region == DEFAULT_REGION
        assert source.sort_by == "none"
        assert source.skip_ssl_verification is False
        assert source.copy_metadata is False
        assert source.verbose is False

    def test_reads_all_fields(self) -> None:
        source = Source.from_dict(
            {
                "api_token": "tok",
                "product_slug": "p-redis",
                "product_version": "1\\..*",
                "endpoint": "https://pivnet.example.com/",
                "access_key_id": "AKIA",
                "secret_access_key": "secret",
                "bucket": "bkt",
                "region": "us-east-1",
                "release_type": "Minor Release",
                "sort_by": "semver",
                "skip_ssl_verification": True,
                "copy_metadata": True,
                "verbose": True,
            }
        )
        assert source.api_token == "tok"
        assert source.product_slug == "p-redis"
        assert source.product_version == "1\\..*"
        assert source.endpoint == "https://pivnet.example.com"
        assert source.bucket == "bkt"
        assert source.region == "us-east-1"
        assert source.release_type == "Minor Release"
        assert source.sort_by == "semver"
        assert source.skip_ssl_verification is True
        assert source.copy_metadata is True
        assert source.verbose is True

    def test_wrong_types_read_as_missing(self) -> None:
        source = Source.from_dict({"api_token": 12, "verbose": "yes"})
        assert source.api_token is None
        assert source.verbose is False


class TestParseRequest:
    def test_check_without_version(self) -> None:
        result = parse_request_json('{"source": {"api_token": "t"}}', "check")
        assert isinstance(result, Ok)
        request = result.value
        assert isinstance(request, CheckRequest)
        assert request.version == Version()

    def test_check_with_version(self) -> None:
        raw = json.dumps({"source": {}, "version": {"product_version": "1.2.3"}})
        result = parse_request_json(raw, "check")
        assert isinstance(result, Ok)
        assert result.value.version == Version(product_version="1.2.3")  # type: ignore[union-attr]

    def test_in_params(self) -> None:
        raw = json.dumps(
            {
                "source": {},
                "version": {"product_version": "1.0"},
                "params": {"globs": ["*.pivotal"], "unpack": True},
            }
        )
        result = parse_request_json(raw, "in")
        assert isinstance(result, Ok)
        request = result.value
        assert isinstance(request, InRequest)
        assert request.params.globs == ["*.pivotal"]
        assert request.params.unpack is True

    def test_in_without_params_downloads_everything(self) -> None:
        result = parse_request_json('{"source": {}, "version": {"product_version": "1"}}', "in")
        assert isinstance(result, Ok)
        assert isinstance(result.value, InRequest)
        assert result.value.params.globs is None

    def test_out_params(self) -> None:
        raw = json.dumps(
            {
                "source": {},
                "params": {
                    "file_glob": "build/*.tgz",
                    "s3_filepath_prefix": "redis",
                    "version_file": "version/number",
                    "metadata_file": "meta.json",
                    "override": True,
                },
            }
        )
        result = parse_request_json(raw, "out")
        assert isinstance(result, Ok)
        request = result.value
        assert isinstance(request, OutRequest)
        assert request.params.file_glob == "build/*.tgz"
        assert request.params.s3_filepath_prefix == "redis"
        assert request.params.version_file == "version/number"
        assert request.params.metadata_file == "meta.json"
        assert request.params.override is True

    def test_invalid_json(self) -> None:
        result = parse_request_json("{not json", "check")
        assert isinstance(result, Err)
        assert result.error.kind == "invalid_input"
        assert result.error.message.startswith("invalid request JSON")

    def test_non_object(self) -> None:
        result = parse_request_json("[]", "out")
        assert isinstance(result, Err)
        assert "expected an object" in result.error.message


class TestResponses:
    def test_check_response(self) -> None:
        versions = [Version(product_version="1.0"), Version(product_version="1.1")]
        assert json.loads(check_response_json(versions)) == [
            {"product_version": "1.0"},
            {"product_version": "1.1"},
        ]

    def test_empty_check_response(self) -> None:
        assert check_response_json([]) == "[]"

    def test_in_response_with_metadata(self) -> None:
        response = InResponse(
            version=Version(product_version="2.0"),
            metadata=[Metadata(name="release_type", value="Major Release")],
        )
        assert json.loads(response.to_json()) == {
            "version": {"product_version": "2.0"},
            "metadata": [{"name": "release_type", "value": "Major Release"}],
        }

    def test_out_response_omits_empty_metadata(self) -> None:
        response = OutResponse(version=Version(product_version="2.0"))
        assert json.loads(response.to_json()) == {"version": {"product_version": "2.0"}}
