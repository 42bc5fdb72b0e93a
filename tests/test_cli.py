from unittest.mock import patch

import click
import pytest
import yaml
from click.testing import CliRunner

from api_contract.cli import _load_suite, _make_generator, _parse_headers, main
from api_contract.docs.raml import RamlGenerator
from api_contract.docs.swagger import SwaggerGenerator
from api_contract.runner.transport import FuncTransport
from user_api import StubUsersApi


def _invoke(args, stub=None):
    stub = stub or StubUsersApi()
    with patch("api_contract.cli.RequestsTransport") as MockTransport:
        MockTransport.return_value = FuncTransport(stub)
        result = CliRunner().invoke(main, args)
    return result, stub, MockTransport


class TestCliRun:
    def test_passing_suite_writes_swagger(self, tmp_path):
        output = tmp_path / "docs" / "swagger.yml"
        result, stub, _ = _invoke(["run", "user_api:users_suite", "--base-url", "http://testapi.my", "-o", str(output)])

        assert result.exit_code == 0, result.output
        doc = yaml.safe_load(output.read_text(encoding="utf-8"))
        assert doc["swagger"] == "2.0"
        assert doc["host"] == "testapi.my"
        assert doc["schemes"] == ["http"]
        assert set(doc["paths"]) == {"/user", "/user/{username}"}
        assert stub.requests[0].url == "http://testapi.my/user/octocat"

    def test_raml_format(self, tmp_path):
        output = tmp_path / "api.raml"
        result, _, _ = _invoke(
            ["run", "user_api:users_suite", "--base-url", "http://testapi.my", "--format", "raml", "-o", str(output)]
        )

        assert result.exit_code == 0, result.output
        text = output.read_text(encoding="utf-8")
        assert text.startswith("#%RAML 0.8\n")
        assert yaml.safe_load(text)["baseUri"] == "http://testapi.my"

    def test_failing_suite_emits_no_document(self, tmp_path):
        output = tmp_path / "swagger.yml"
        result, _, _ = _invoke(["run", "user_api:broken_suite", "--base-url", "http://testapi.my", "-o", str(output)])

        assert result.exit_code == 1
        assert not output.exists()
        assert "1 failures" in result.output
        assert "[assertion]" in result.output

    def test_token_and_headers_become_default_headers(self, tmp_path):
        result, stub, _ = _invoke(
            [
                "run", "user_api:users_suite",
                "--base-url", "http://testapi.my",
                "--token", "secret",
                "-H", "X-Client: cli",
                "-o", str(tmp_path / "out.yml"),
            ]
        )

        assert result.exit_code == 0, result.output
        assert stub.requests[0].headers["Authorization"] == "Bearer secret"
        assert stub.requests[0].headers["X-Client"] == "cli"

    def test_base_url_from_environment(self, tmp_path, monkeypatch):
        monkeypatch.setenv("API_BASE_URL", "http://env.example")
        result, stub, _ = _invoke(["run", "user_api:users_suite", "-o", str(tmp_path / "out.yml")])
        assert result.exit_code == 0, result.output
        assert stub.requests[0].url.startswith("http://env.example/")

    def test_timeout_passed_to_transport(self, tmp_path):
        result, _, MockTransport = _invoke(
            ["run", "user_api:users_suite", "--timeout", "2.5", "-o", str(tmp_path / "out.yml")]
        )
        assert result.exit_code == 0, result.output
        MockTransport.assert_called_once_with(timeout=2.5)

    def test_bad_suite_target(self):
        result, _, _ = _invoke(["run", "no_such_module_here:suite"])
        assert result.exit_code == 2
        assert "cannot import" in result.output


class TestHelpers:
    def test_load_suite_calls_factories(self):
        tests = _load_suite("user_api:users_suite")
        assert [t.method for t in tests] == ["GET", "POST", "PATCH", "DELETE"]

    def test_load_suite_requires_attribute(self):
        with pytest.raises(click.BadParameter):
            _load_suite("user_api")

    def test_load_suite_rejects_non_tests(self):
        with pytest.raises(click.BadParameter, match="list of ApiTest"):
            _load_suite("user_api:JSON_HEADERS")

    def test_parse_headers(self):
        assert _parse_headers(("Accept: application/json", "X-A:1"), "") == {"Accept": "application/json", "X-A": "1"}
        assert _parse_headers((), "t") == {"Authorization": "Bearer t"}

    def test_parse_headers_rejects_malformed(self):
        with pytest.raises(click.BadParameter):
            _parse_headers(("no-colon",), "")

    def test_make_generator(self):
        swagger = _make_generator("swagger-yaml", "https://api.example.com/v1", "", "API", "1.0")
        assert isinstance(swagger, SwaggerGenerator)
        assert swagger.seed.host == "api.example.com"
        assert swagger.seed.base_path == "/v1"
        assert swagger.seed.schemes == ["https"]

        raml = _make_generator("raml", "https://api.example.com/v1", "", "API", "1.0")
        assert isinstance(raml, RamlGenerator)
        assert raml.seed.protocols == ["HTTPS"]
