"""Tests for apicol.builder.url."""

from __future__ import annotations

import pytest

from apicol.builder.url import build_query_string, build_url, rewrite_path_template, stringify
from apicol.models import ImportSettings, ParameterLocation, ParameterSpec
from apicol.parser.loader import LiteralFloat


def _param(name: str, location: str = "query", example: object = None) -> ParameterSpec:
    return ParameterSpec(name=name, location=ParameterLocation(location), example=example)


class TestRewritePathTemplate:
    @pytest.mark.parametrize(
        ("path", "expected"),
        [
            ("/cob/{txid}", "/cob/{{txid}}"),
            ("/pix/{e2eid}/devolucao/{id}", "/pix/{{e2eid}}/devolucao/{{id}}"),
            ("/files/{file-name}.{ext}", "/files/{{file-name}}.{{ext}}"),
            ("/plain/path", "/plain/path"),
            ("/", "/"),
        ],
    )
    def test_rewrite(self, path: str, expected: str) -> None:
        assert rewrite_path_template(path) == expected


class TestBuildUrl:
    def test_path_only(self) -> None:
        assert build_url("/cob/{txid}", [_param("txid", "path")]) == "{{BaseUrl}}/cob/{{txid}}"

    def test_query_without_examples(self) -> None:
        url = build_url("/pet/{petId}", [_param("petId", "path"), _param("name"), _param("status")])
        assert url == "{{BaseUrl}}/pet/{{petId}}?name=&status="

    def test_query_with_examples(self) -> None:
        url = build_url("/cob/{txid}", [_param("revisao", example=0)])
        assert url == "{{BaseUrl}}/cob/{{txid}}?revisao=0"

    def test_header_and_cookie_never_in_query(self) -> None:
        params = [_param("X-Trace", "header", "abc"), _param("session", "cookie", "s"), _param("q")]
        assert build_url("/search", params) == "{{BaseUrl}}/search?q="

    def test_custom_base_url_variable(self) -> None:
        settings = ImportSettings(base_url_variable="ApiRoot")
        assert build_url("/a", [], settings) == "{{ApiRoot}}/a"

    def test_no_percent_encoding(self) -> None:
        assert build_url("/s", [_param("q", example="a b&c")]) == "{{BaseUrl}}/s?q=a b&c"


class TestStringify:
    @pytest.mark.parametrize(
        ("value", "expected"),
        [
            (None, ""),
            ("text", "text"),
            (False, "False"),
            (True, "True"),
            (0, "0"),
            (1.5, "1.5"),
            (LiteralFloat("1.50"), "1.50"),
            ([1, "a"], '[1,"a"]'),
            ({"k": "ç"}, '{"k":"ç"}'),
        ],
    )
    def test_values(self, value: object, expected: str) -> None:
        assert stringify(value) == expected


class TestBuildQueryString:
    def test_declaration_order(self) -> None:
        params = [_param("b", example=2), _param("a", example=True), _param("c")]
        assert build_query_string(params) == "b=2&a=True&c="

    def test_empty(self) -> None:
        assert build_query_string([_param("id", "path")]) == ""
