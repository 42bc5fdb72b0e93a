"""URL building for test cases: path template expansion plus query string."""

import re
from typing import Any
from urllib.parse import quote, urlencode

from api_contract.errors import TemplateError
from api_contract.suite.base import ParamMap

_PLACEHOLDER = re.compile(r"\{([^{}]*)\}")


def stringify(value: Any) -> str:
    """Render a parameter value the way it goes on the wire."""
    if isinstance(value, bool):
        return "true" if value else "false"
    if value is None:
        return ""
    return str(value)


def build_url(template: str, path_params: ParamMap | None = None, query_params: ParamMap | None = None) -> str:
    """Expand ``{name}`` placeholders in ``template`` and append the query string.

    Raises TemplateError when a placeholder has no matching path parameter.
    """
    path_params = path_params or {}

    def _expand(match: re.Match) -> str:
        name = match.group(1)
        if name not in path_params:
            raise TemplateError(f"path parameter '{name}' is required by template '{template}' but not provided")
        return quote(stringify(path_params[name].value), safe="")

    url = _PLACEHOLDER.sub(_expand, template)

    if query_params:
        query = urlencode([(name, stringify(query_params[name].value)) for name in sorted(query_params)])
        url = f"{url}{'&' if '?' in url else '?'}{query}"

    return url
