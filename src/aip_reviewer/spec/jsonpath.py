"""JSONPath addressing for spec locations.

Every fix addresses the document through the builders below, so all paths
share one small dialect:

    $.paths['/users/{id}'].get.responses['200']
    $.paths['/users'].get.parameters[?(@.name=='limit' & @.in=='query')].schema
    $.components.schemas['Error'].properties['code']

It is the filter dialect of `jsonpath_ng.ext`, which `locate` uses to resolve
an expression against a document into JSON Pointer parts.
"""

import re
from functools import reduce

from cachetools import LRUCache, cached
from jsonpath_ng.exceptions import JSONPathError
from jsonpath_ng.ext import parse
from jsonpath_ng.jsonpath import Child, DatumInContext, Fields, Index, JSONPath

from aip_reviewer.errors import JsonPathError

_IDENTIFIER = re.compile(r"[A-Za-z_][A-Za-z0-9_]*")


def quote(key: str) -> str:
    escaped = str(key).replace("\\", "\\\\").replace("'", "\\'")
    return f"['{escaped}']"


# -- builders ------------------------------------------------------------

def path_json_path(path: str) -> str:
    return f"$.paths{quote(path)}"


def operation_json_path(path: str, method: str) -> str:
    return f"{path_json_path(path)}.{method.lower()}"


def parameters_json_path(path: str, method: str | None = None) -> str:
    """The operation's parameter list, or the path-level list without a method."""
    base = operation_json_path(path, method) if method else path_json_path(path)
    return f"{base}.parameters"


def parameter_filter(name: str, location: str | None = None) -> str:
    conditions = [f"@.name=={quote(name)[1:-1]}"]
    if location:
        conditions.append(f"@.in=={quote(location)[1:-1]}")
    return "[?(" + " & ".join(conditions) + ")]"


def parameter_json_path(
    path: str, method: str | None, name: str, location: str | None = None
) -> str:
    return parameters_json_path(path, method) + parameter_filter(name, location)


def request_body_json_path(path: str, method: str) -> str:
    return f"{operation_json_path(path, method)}.requestBody"


def responses_json_path(path: str, method: str) -> str:
    return f"{operation_json_path(path, method)}.responses"


def response_json_path(path: str, method: str, code: str) -> str:
    return f"{responses_json_path(path, method)}{quote(code)}"


def response_schema_json_path(
    path: str, method: str, code: str, media_type: str = "application/json"
) -> str:
    return f"{response_json_path(path, method, code)}.content{quote(media_type)}.schema"


def schemas_json_path() -> str:
    return "$.components.schemas"


def schema_json_path(name: str) -> str:
    return f"{schemas_json_path()}{quote(name)}"


def property_json_path(schema_path: str, name: str) -> str:
    """A property of the schema at `schema_path` (any schema location)."""
    return f"{schema_path}.properties{quote(name)}"


def ref_to_json_path(ref: str) -> str:
    """`#/components/schemas/Pet` -> `$.components.schemas['Pet']`."""
    if not ref.startswith("#/"):
        raise JsonPathError(f"Only local references are supported: {ref}")
    parts = [p.replace("~1", "/").replace("~0", "~") for p in ref[2:].split("/")]
    out = "$"
    for i, part in enumerate(parts):
        last = i == len(parts) - 1
        if not last and _IDENTIFIER.fullmatch(part):
            out += f".{part}"
        else:
            out += quote(part)
    return out


# -- resolution ----------------------------------------------------------

@cached(LRUCache(maxsize=512))
def compile_json_path(expr: str) -> JSONPath:
    if not expr.startswith("$"):
        raise JsonPathError(f"JSONPath must start with '$': {expr}")
    try:
        return parse(expr)
    except JSONPathError as e:
        raise JsonPathError(f"Invalid JSONPath {expr}: {e}") from e


def _steps(node: JSONPath) -> list:
    if isinstance(node, Child):
        return _steps(node.left) + _steps(node.right)
    return [node]


def _index(step: Index) -> int:
    # newer jsonpath-ng releases hold several indices per step
    indices = getattr(step, "indices", None)
    return indices[0] if indices else step.index


def _key(step: JSONPath, expr: str):
    if isinstance(step, Fields) and len(step.fields) == 1:
        return step.fields[0]
    if isinstance(step, Index):
        return _index(step)
    raise JsonPathError(f"Nothing matches {expr}")


def _pointer_parts(match: DatumInContext) -> list:
    parts = []
    while match is not None:
        if isinstance(match.path, Fields):
            parts.append(match.path.fields[0])
        elif isinstance(match.path, Index):
            parts.append(_index(match.path))
        match = match.context
    return parts[::-1]


def locate(doc, expr: str) -> list:
    """Resolve a JSONPath against `doc` into concrete JSON Pointer parts.

    Trailing keys and indexes that do not exist yet are kept as-is so
    callers can create them; a filter must select an existing element.
    """
    steps = _steps(compile_json_path(expr))
    missing = []
    while steps:
        matches = reduce(Child, steps).find(doc)
        if matches:
            return _pointer_parts(matches[0]) + missing
        missing.insert(0, _key(steps.pop(), expr))
    raise JsonPathError(f"Nothing matches {expr}")
