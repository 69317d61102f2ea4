"""Standard method rules (AIP-131 to AIP-135)."""

import copy

from aip_reviewer.fixes.builders import (
    add_operation_fix,
    change_status_code_fix,
    remove_request_body_fix,
)
from aip_reviewer.models import Severity
from aip_reviewer.rules.base import operation_rule, path_rule
from aip_reviewer.spec.jsonpath import operation_json_path, responses_json_path

DELETE_SUCCESS_CODES = ("200", "202", "204")


@operation_rule(
    "aip131/get-no-body",
    "GET No Request Body",
    aip="AIP-131",
    severity=Severity.ERROR,
    methods=["GET"],
    description="GET requests must not carry a request body",
)
def get_no_body(ctx, op):
    if "requestBody" in op.operation:
        yield ctx.finding(
            op.location,
            "GET request has a request body",
            suggestion="Move request data to query parameters",
            fix=remove_request_body_fix(op.path, op.method),
        )


@operation_rule(
    "aip133/post-returns-201",
    "POST Returns 201 or 202",
    aip="AIP-133",
    severity=Severity.SUGGESTION,
    methods=["POST"],
    description="Create methods should return 201 Created, or 202 Accepted when creation is asynchronous",
)
def post_returns_created(ctx, op):
    if ":" in op.path:
        return  # custom method

    codes = op.response_codes
    if "201" in codes or "202" in codes or "200" not in codes:
        return

    yield ctx.finding(
        op.location,
        "POST returns 200. Consider 201 (Created) for sync or 202 (Accepted) for async.",
        suggestion="Use 201 when the resource is created immediately, 202 for async creation",
        context={"responseCodes": codes},
        fix=change_status_code_fix(op.path, op.method, "200", "201"),
    )


def _patch_template(put: dict) -> dict:
    operation = {
        "summary": "Partially update resource",
        "description": "Update resource fields using field mask (AIP-134)",
        "parameters": [
            {
                "name": "update_mask",
                "in": "query",
                "required": False,
                "schema": {"type": "string"},
                "description": "Field mask specifying which fields to update",
            }
        ],
    }
    for key in ("requestBody", "responses"):
        if key in put:
            operation[key] = copy.deepcopy(put[key])
    return operation


@path_rule(
    "aip134/patch-over-put",
    "PATCH for Partial Updates",
    aip="AIP-134",
    severity=Severity.SUGGESTION,
    description="Resources updated with PUT should also offer PATCH with a field mask",
)
def patch_over_put(ctx, path, path_item):
    if "{" not in path:
        return  # collections are not updated
    if "put" not in path_item or "patch" in path_item:
        return

    fix = None
    if ctx.config.propose_patch_operation and isinstance(path_item["put"], dict):
        fix = add_operation_fix(path, "patch", _patch_template(path_item["put"]), based_on="put")

    yield ctx.finding(
        f"PUT {path}",
        "Using PUT without PATCH. Consider adding PATCH for partial updates.",
        suggestion="Add PATCH endpoint with field mask support for partial updates",
        json_path=operation_json_path(path, "put"),
        fix=fix,
    )


@operation_rule(
    "aip135/delete-idempotent",
    "DELETE Is Idempotent",
    aip="AIP-135",
    severity=Severity.WARNING,
    methods=["DELETE"],
    description="DELETE should be idempotent: no request body and no 201 Created",
)
def delete_idempotent(ctx, op):
    if "requestBody" in op.operation:
        yield ctx.finding(
            op.location,
            "DELETE should not have a request body",
            suggestion="Move any required data to path or query parameters",
            fix=remove_request_body_fix(op.path, op.method),
        )

    codes = op.response_codes
    if "201" in codes:
        yield ctx.finding(
            op.location,
            "DELETE returns 201 Created, which implies non-idempotent behavior",
            suggestion="Use 200 OK, 204 No Content, or 202 Accepted instead",
            json_path=responses_json_path(op.path, op.method),
        )

    success = [c for c in codes if c.startswith("2") and c != "201"]
    if success and not any(c in DELETE_SUCCESS_CODES for c in success):
        yield ctx.finding(
            op.location,
            f"DELETE uses unusual success code(s): {', '.join(success)}",
            suggestion="Use 200 OK (with body), 204 No Content, or 202 Accepted",
            json_path=responses_json_path(op.path, op.method),
            context={"responseCodes": success},
        )
