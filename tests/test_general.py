"""
Tests for abiquo_client.general module.
"""

import json

import pytest

from abiquo_client.core.errors import DecodeError, PreconditionViolation
from abiquo_client.general.builders import FilterBuilder, HeaderBuilder
from abiquo_client.general.serialization import decode, decode_dictionary, encode
from abiquo_client.general.uri import (
    concat_uri,
    create_filter_string,
    extract_id_as_int,
    extract_last_segment,
    extract_relative_uri,
    is_absolute_uri,
    is_relative_uri,
)
from abiquo_client.v1.model import Link, User, VirtualMachineState, VirtualMachineStateEnum

BASE = "https://abiquo.example.com/api"


class TestUriHelpers:
    """Tests for URI helper functions."""

    @pytest.mark.parametrize("base, suffix", [
        (BASE, "/admin/enterprises"),
        (BASE + "/", "/admin/enterprises"),
        (BASE + "/", "admin/enterprises/"),
        (BASE, "admin/enterprises"),
    ])
    def test_concat_uri_single_slash(self, base, suffix):
        assert concat_uri(base, suffix) == BASE + "/admin/enterprises"

    def test_concat_uri_rejects_empty(self):
        with pytest.raises(PreconditionViolation):
            concat_uri(BASE, "")
        with pytest.raises(PreconditionViolation):
            concat_uri("", "/login")

    def test_is_absolute_uri(self):
        assert is_absolute_uri(BASE)
        assert not is_absolute_uri("/login")
        assert not is_absolute_uri("")
        assert not is_absolute_uri(None)

    def test_is_relative_uri(self):
        assert is_relative_uri("/cloud/virtualmachines")
        assert is_relative_uri("/cloud/virtualmachines?limit=25")
        assert not is_relative_uri(BASE + "/login")
        assert not is_relative_uri("   ")
        assert not is_relative_uri("/with space")

    def test_filter_string_keeps_order(self):
        assert create_filter_string([("limit", 25), ("currentPage", 1)]) == "limit=25&currentPage=1"

    def test_filter_string_from_mapping(self):
        assert create_filter_string({"has": "admin"}) == "has=admin"

    def test_filter_string_booleans_lowercase(self):
        assert create_filter_string([("force", True), ("async", False)]) == "force=true&async=false"

    def test_empty_filter_string(self):
        assert create_filter_string([]) == ""

    def test_filter_string_rejects_none_value(self):
        with pytest.raises(PreconditionViolation):
            create_filter_string([("force", None)])

    def test_extract_id_as_int(self):
        assert extract_id_as_int(BASE + "/admin/enterprises/42") == 42
        assert extract_id_as_int(BASE + "/admin/enterprises/42/") == 42

    def test_extract_id_rejects_non_integer(self):
        with pytest.raises(PreconditionViolation):
            extract_id_as_int(BASE + "/admin/enterprises")

    def test_extract_last_segment(self):
        uri = BASE + "/cloud/virtualdatacenters/1/virtualappliances/2/virtualmachines/3/tasks/5b3c-task"
        assert extract_last_segment(uri) == "5b3c-task"

    def test_extract_last_segment_requires_absolute_uri(self):
        with pytest.raises(PreconditionViolation):
            extract_last_segment("/tasks/1")

    def test_extract_relative_uri(self):
        assert extract_relative_uri(BASE, BASE + "/cloud/virtualdatacenters/3") == "/cloud/virtualdatacenters/3"
        assert extract_relative_uri(BASE + "/", BASE + "/cloud/virtualdatacenters/3") == "/cloud/virtualdatacenters/3"

    def test_extract_relative_uri_keeps_query(self):
        uri = BASE + "/cloud/virtualmachines?limit=25&startwith=0"
        assert extract_relative_uri(BASE, uri) == "/cloud/virtualmachines?limit=25&startwith=0"

    @pytest.mark.parametrize("uri", [
        "https://other.example.com/api/cloud/virtualdatacenters",
        "http://abiquo.example.com/api/cloud/virtualdatacenters",
        "https://abiquo.example.com/api2/cloud/virtualdatacenters",
        "https://abiquo.example.com/api",
    ])
    def test_extract_relative_uri_rejects_non_descendants(self, uri):
        with pytest.raises(PreconditionViolation):
            extract_relative_uri(BASE, uri)


class TestBuilders:
    """Tests for FilterBuilder and HeaderBuilder."""

    def test_filter_builder_order(self):
        pairs = (
            FilterBuilder()
            .build_filter_part("currentPage", 1)
            .build_filter_part("limit", 25)
            .build_filter_part("has", "web")
            .get_filter()
        )
        assert pairs == [("currentPage", 1), ("limit", 25), ("has", "web")]

    def test_filter_builder_rejects_invalid_parts(self):
        with pytest.raises(PreconditionViolation):
            FilterBuilder().build_filter_part("", 1)
        with pytest.raises(PreconditionViolation):
            FilterBuilder().build_filter_part("force", None)

    def test_header_builder(self):
        headers = (
            HeaderBuilder()
            .build_accept("application/vnd.abiquo.user+json")
            .build_content_type("application/vnd.abiquo.user+json")
            .build_custom("X-Abiquo-Trace", "1")
            .get_headers()
        )
        assert headers == {
            "Accept": "application/vnd.abiquo.user+json",
            "Content-Type": "application/vnd.abiquo.user+json",
            "X-Abiquo-Trace": "1",
        }

    def test_header_builder_rejects_duplicates(self):
        builder = HeaderBuilder().build_accept("application/json")
        with pytest.raises(PreconditionViolation):
            builder.build_accept("text/plain")

    def test_header_builder_rejects_empty_value(self):
        with pytest.raises(PreconditionViolation):
            HeaderBuilder().build_content_type("")


class TestSerialization:
    """Tests for decode, decode_dictionary and encode."""

    def test_decode_model(self, sample_user):
        user = decode(User, json.dumps(sample_user))
        assert user.nick == "admin"
        assert user.auth_type == "ABIQUO"

    def test_decode_with_function(self):
        assert decode(json.loads, "[1, 2]") == [1, 2]

    @pytest.mark.parametrize("body", ["", "   ", "not json", '{"nick": "admin"}'])
    def test_decode_failures(self, body):
        with pytest.raises(DecodeError):
            decode(User, body)

    def test_decode_function_error_wrapped(self):
        with pytest.raises(DecodeError) as exc_info:
            decode(json.loads, "{broken")
        assert exc_info.value.target == "loads"

    @pytest.mark.parametrize("decoder", [
        lambda t: json.loads(t)["missing"],
        lambda t: json.loads(t)["x"] + "suffix",
        lambda t: json.loads(t)["x"].missing,
    ])
    def test_decode_function_lookup_errors_wrapped(self, decoder):
        with pytest.raises(DecodeError) as exc_info:
            decode(decoder, '{"x": 1}')
        assert exc_info.value.target == "<lambda>"
        assert exc_info.value.__cause__ is not None

    def test_decode_dictionary_keeps_order(self):
        data = decode_dictionary('{"zeta": 1, "alpha": {"nested": true}, "mid": [1]}')
        assert list(data) == ["zeta", "alpha", "mid"]
        assert data["alpha"] == {"nested": True}

    @pytest.mark.parametrize("body", ["", "[1, 2]", '"text"', "{broken"])
    def test_decode_dictionary_failures(self, body):
        with pytest.raises(DecodeError):
            decode_dictionary(body)

    def test_encode_passthrough(self):
        assert encode(None) is None
        assert encode("") == ""
        assert encode('{"raw": 1}') == '{"raw": 1}'

    def test_encode_model_uses_aliases(self):
        body = encode(VirtualMachineState(state=VirtualMachineStateEnum.ON))
        assert json.loads(body) == {"links": [], "state": "ON"}

    def test_encode_link_media_type_as_type(self):
        link = Link(rel="edit", href=BASE + "/admin/enterprises/1", media_type="application/vnd.abiquo.enterprise+json")
        assert json.loads(encode(link)) == {
            "rel": "edit",
            "href": BASE + "/admin/enterprises/1",
            "type": "application/vnd.abiquo.enterprise+json",
        }

    def test_encode_unsupported_body(self):
        with pytest.raises(PreconditionViolation):
            encode(42)
