"""Unit tests for request path parsing."""

import pytest

from carimbo_cdn.paths import RequestParams, parse_request_path


class TestParseRequestPath:
    def test_runtime_script_path(self):
        assert parse_request_path("/9.9.9/foo.js").version == "9.9.9"

    def test_runtime_binary_path(self):
        assert parse_request_path("/1.2.0/carimbo.wasm").version == "1.2.0"

    def test_bundle_path_extracts_all_fields(self):
        params = parse_request_path("/1.0.0/acme/widget/2.3.1/bundle.zip")

        assert params == RequestParams(
            version="1.0.0",
            org="acme",
            repo="widget",
            release="2.3.1",
        )

    def test_bundle_path_without_trailing_file(self):
        params = parse_request_path("/1.0.0/acme/widget/2.3.1.zip")

        assert params.release == "2.3.1.zip"

    def test_short_path_leaves_trailing_fields_empty(self):
        params = parse_request_path("/1.0.0/acme")

        assert params == RequestParams(version="1.0.0", org="acme")

    @pytest.mark.parametrize("path", ["/", "", "//carimbo.js", "carimbo.js"])
    def test_unmatched_path_yields_empty_record(self, path):
        assert parse_request_path(path) == RequestParams()
