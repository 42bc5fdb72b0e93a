"""CLI entry point for api-contract."""

import importlib
import logging
import sys
from pathlib import Path
from urllib.parse import urlparse

import click

from api_contract.docs.base import DocGenerator
from api_contract.docs.raml import RamlGenerator, RamlSeed
from api_contract.docs.swagger import Info, SwaggerSeed, swagger_json_indent, swagger_yaml
from api_contract.errors import SynthesisError
from api_contract.runner.reporter import RecordingReporter
from api_contract.runner.runner import Runner, RunnerConfig
from api_contract.runner.transport import RequestsTransport
from api_contract.suite.base import ApiTest


def _load_suite(target: str) -> list[ApiTest]:
    """Resolve 'package.module:attribute' to a list of ApiTest.

    The attribute may be the list itself or a callable returning it.
    """
    module_name, _, attr = target.partition(":")
    if not module_name or not attr:
        raise click.BadParameter("expected 'module:attribute'", param_hint="SUITE")
    try:
        module = importlib.import_module(module_name)
    except ImportError as e:
        raise click.BadParameter(f"cannot import '{module_name}': {e}", param_hint="SUITE") from e
    try:
        suite = getattr(module, attr)
    except AttributeError as e:
        raise click.BadParameter(f"'{module_name}' has no attribute '{attr}'", param_hint="SUITE") from e

    if callable(suite):
        suite = suite()
    tests = list(suite)
    if not all(isinstance(t, ApiTest) for t in tests):
        raise click.BadParameter(f"'{target}' must provide a list of ApiTest", param_hint="SUITE")
    return tests


def _parse_headers(values: tuple[str, ...], token: str) -> dict[str, str]:
    headers = {}
    if token:
        headers["Authorization"] = f"Bearer {token}"
    for value in values:
        name, sep, content = value.partition(":")
        if not sep or not name.strip():
            raise click.BadParameter(f"expected NAME:VALUE, got '{value}'", param_hint="--header")
        headers[name.strip()] = content.strip()
    return headers


def _make_generator(fmt: str, base_url: str, host: str, title: str, version: str) -> DocGenerator:
    parsed = urlparse(base_url)
    if fmt == "raml":
        return RamlGenerator(
            RamlSeed(
                title=title,
                version=version,
                base_uri=base_url,
                media_type="application/json",
                protocols=[parsed.scheme.upper()] if parsed.scheme else [],
            )
        )

    seed = SwaggerSeed(
        info=Info(title=title, version=version),
        host=host or parsed.netloc,
        base_path=parsed.path or "/",
        schemes=[parsed.scheme] if parsed.scheme else [],
        consumes=["application/json"],
        produces=["application/json"],
    )
    if fmt == "swagger-json":
        return swagger_json_indent(seed)
    return swagger_yaml(seed)


@click.group()
def main():
    """API Contract: run declarative API tests and document the API they prove."""
    pass


@main.command()
@click.argument("suite")
@click.option("--base-url", envvar="API_BASE_URL", default="http://localhost:8080", show_default=True, help="Base URL of the API under test.")
@click.option("--token", envvar="API_TOKEN", default="", help="Bearer token sent with every request.")
@click.option("-H", "--header", "headers", multiple=True, help="Default header as NAME:VALUE (repeatable).")
@click.option("--timeout", type=float, default=None, help="Per-request timeout in seconds.")
@click.option("--format", "fmt", default="swagger-yaml", type=click.Choice(["swagger-yaml", "swagger-json", "raml"]), help="Document format.")
@click.option("-o", "--output", type=click.Path(path_type=Path), default=None, help="Output file for the document (stdout if omitted).")
@click.option("--host", default="", help="Host written into the document (defaults to the base URL host).")
@click.option("--title", default="API", help="API title written into the document.")
@click.option("--api-version", default="0.1", help="API version written into the document.")
@click.option("-v", "--verbose", is_flag=True, help="Log every request.")
def run(
    suite: str,
    base_url: str,
    token: str,
    headers: tuple[str, ...],
    timeout: float | None,
    fmt: str,
    output: Path | None,
    host: str,
    title: str,
    api_version: str,
    verbose: bool,
):
    """Run the SUITE ('module:attribute') and, if it passes, generate its API document."""
    logging.basicConfig(level=logging.DEBUG if verbose else logging.WARNING, format="%(levelname)s %(name)s: %(message)s")

    tests = _load_suite(suite)
    click.echo(f"Running {len(tests)} tests against {base_url}...", err=True)

    config = RunnerConfig(
        default_headers=_parse_headers(headers, token),
        transport=RequestsTransport(timeout=timeout),
    )
    reporter = RecordingReporter()
    passed = Runner(base_url, config).run(tests, reporter)

    if not passed:
        for failure in reporter.failures:
            click.echo(str(failure), err=True)
        click.echo(f"{len(reporter.failures)} failures, no document generated.", err=True)
        sys.exit(1)

    click.echo("All cases passed. Generating document...", err=True)
    generator = _make_generator(fmt, base_url, host, title, api_version)
    try:
        document = generator.generate(tests)
    except SynthesisError as e:
        raise click.ClickException(str(e)) from e

    if output is None:
        click.echo(document.decode("utf-8"), nl=False)
        return

    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_bytes(document)
    click.echo(f"Document saved to {output}", err=True)
