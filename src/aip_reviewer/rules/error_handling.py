"""AIP-193 error rules."""

import copy

from aip_reviewer.fixes.builders import add_response_fix, add_schema_fix
from aip_reviewer.models import Severity
from aip_reviewer.rules.base import operation_rule, spec_rule
from aip_reviewer.spec.jsonpath import responses_json_path, schemas_json_path
from aip_reviewer.spec.traversal import get_schemas

STANDARD_CLIENT_ERRORS = ("400", "401", "403", "404", "405", "409", "412", "422", "429")
STANDARD_SERVER_ERRORS = ("500", "501", "502", "503", "504")
STANDARD_ERROR_CODES = STANDARD_CLIENT_ERRORS + STANDARD_SERVER_ERRORS

ERROR_SCHEMA_NAME = "Error"

ERROR_SCHEMA = {
    "type": "object",
    "required": ["error"],
    "properties": {
        "error": {
            "type": "object",
            "required": ["code", "message"],
            "properties": {
                "code": {"type": "string", "description": "Error code"},
                "message": {"type": "string", "description": "Human-readable error message"},
                "details": {"type": "array", "description": "Additional error details"},
                "request_id": {"type": "string", "description": "Request identifier for debugging"},
            },
        },
    },
}


def error_schema_names(spec: dict) -> list[str]:
    return [name for name in get_schemas(spec) if "error" in name.lower()]


@spec_rule(
    "aip193/schema-defined",
    "Error Schema Defined",
    aip="AIP-193",
    severity=Severity.WARNING,
    description="The API should define a structured error schema",
)
def schema_defined(ctx):
    if error_schema_names(ctx.spec):
        return

    yield ctx.finding(
        "components/schemas",
        "No error schema defined",
        suggestion="Define an Error schema with code, message, and details fields",
        json_path=schemas_json_path(),
        context={"suggestedSchema": copy.deepcopy(ERROR_SCHEMA)},
        fix=add_schema_fix(ERROR_SCHEMA_NAME, copy.deepcopy(ERROR_SCHEMA)),
    )


def _is_error_code(code: str) -> bool:
    return code.startswith("4") or code.startswith("5")


@operation_rule(
    "aip193/responses-documented",
    "Error Responses Documented",
    aip="AIP-193",
    severity=Severity.SUGGESTION,
    description="Operations should document their error responses",
)
def responses_documented(ctx, op):
    codes = op.response_codes
    if "default" in codes or any(_is_error_code(c) for c in codes):
        return

    # Point at the error schema the spec already has, or the one schema-defined proposes
    existing = error_schema_names(ctx.spec)
    schema_name = existing[0] if existing else ERROR_SCHEMA_NAME
    response = {
        "description": "Error response",
        "content": {
            "application/json": {
                "schema": {"$ref": f"#/components/schemas/{schema_name}"},
            },
        },
    }

    yield ctx.finding(
        op.location,
        "No error responses documented",
        suggestion="Add 4xx/5xx responses or a default error response",
        json_path=responses_json_path(op.path, op.method),
        fix=add_response_fix(op.path, op.method, "default", response),
    )


@operation_rule(
    "aip193/standard-codes",
    "Standard Error Codes",
    aip="AIP-193",
    severity=Severity.SUGGESTION,
    description="Use standard HTTP error status codes",
)
def standard_codes(ctx, op):
    for code in op.response_codes:
        if code == "default" or not _is_error_code(code):
            continue
        if code in STANDARD_ERROR_CODES:
            continue
        yield ctx.finding(
            op.location,
            f"Non-standard error code {code}",
            suggestion="Use standard codes: 400, 401, 403, 404, 409, 422, 429 (client) or 500, 503 (server)",
            json_path=responses_json_path(op.path, op.method),
            context={"code": code, "standardCodes": list(STANDARD_ERROR_CODES)},
        )
