"""AIP-155 request identification."""

import copy

from aip_reviewer.fixes.builders import add_parameters_fix
from aip_reviewer.models import Severity
from aip_reviewer.rules.base import operation_rule

IDEMPOTENCY_HEADERS = ("idempotency-key", "idempotency_key", "x-idempotency-key")

IDEMPOTENCY_KEY_PARAM = {
    "name": "Idempotency-Key",
    "in": "header",
    "required": False,
    "schema": {"type": "string"},
    "description": "Unique key for idempotent requests",
}


@operation_rule(
    "aip155/idempotency-key",
    "POST Supports Idempotency Key",
    aip="AIP-155",
    severity=Severity.SUGGESTION,
    methods=["POST"],
    description="POST endpoints should accept an Idempotency-Key header so clients can retry safely",
)
def idempotency_key(ctx, op):
    if ":" in op.path or "search" in op.path:
        return  # custom methods and search endpoints do not create resources

    if any(p.location == "header" and p.name.lower() in IDEMPOTENCY_HEADERS for p in op.parameters):
        return

    yield ctx.finding(
        op.location,
        "POST endpoint missing Idempotency-Key header",
        suggestion="Add optional Idempotency-Key header parameter for safe retries",
        fix=add_parameters_fix(op.path, op.method, [copy.deepcopy(IDEMPOTENCY_KEY_PARAM)]),
    )
