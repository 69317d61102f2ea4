"""List method rules: filtering (AIP-160), ordering (AIP-132) and pagination (AIP-158)."""

import copy

from aip_reviewer.fixes.builders import (
    add_parameters_fix,
    add_schema_property_fix,
    set_schema_constraint_fix,
)
from aip_reviewer.models import RuleCategory, Severity
from aip_reviewer.rules.base import operation_rule, parameter_rule
from aip_reviewer.spec.jsonpath import ref_to_json_path
from aip_reviewer.spec.traversal import locate_response_schema, resolve

FILTER_PARAMS = ("filter", "q", "query", "search")
# Query parameters that never narrow a result set
NON_FILTER_PARAMS = ("page_size", "page_token", "limit", "offset", "order_by")
ORDER_PARAMS = ("order_by", "orderBy", "sort", "sort_by", "sortBy", "order")

PAGE_SIZE_PARAMS = ("page_size", "pageSize", "limit")
PAGE_TOKEN_PARAMS = ("page_token", "pageToken", "cursor", "offset")
PAGINATION_PARAMS = PAGE_SIZE_PARAMS + ("page_token", "pageToken", "cursor")
NEXT_TOKEN_FIELDS = ("next_page_token", "nextPageToken", "next_cursor", "nextCursor", "cursor")

MAX_PAGE_SIZE = 100

FILTER_PARAM = {
    "name": "filter",
    "in": "query",
    "required": False,
    "schema": {"type": "string"},
    "description": 'Filter expression (AIP-160), e.g. "status = ACTIVE"',
}

ORDER_BY_PARAM = {
    "name": "order_by",
    "in": "query",
    "required": False,
    "schema": {"type": "string"},
    "description": 'Sort order (e.g., "created_at desc")',
}

PAGE_PARAMS = [
    {
        "name": "page_size",
        "in": "query",
        "required": False,
        "schema": {"type": "integer", "minimum": 1, "maximum": MAX_PAGE_SIZE},
        "description": "Maximum number of results to return",
    },
    {
        "name": "page_token",
        "in": "query",
        "required": False,
        "schema": {"type": "string"},
        "description": "Token from a previous response to fetch the next page",
    },
]

NEXT_PAGE_TOKEN = {"type": "string", "nullable": True}


@operation_rule(
    "aip132/has-filtering",
    "List Endpoints Document Filtering",
    aip="AIP-160",
    severity=Severity.SUGGESTION,
    methods=["GET"],
    description="List endpoints should accept a filter or field-specific filter parameters",
)
def has_filtering(ctx, op):
    if not ctx.is_collection(op.path):
        return

    query = [p for p in op.parameters if p.location == "query"]
    if any(p.name.lower() in FILTER_PARAMS for p in query):
        return
    if any(p.name not in NON_FILTER_PARAMS for p in query):
        return  # field-specific filters

    yield ctx.finding(
        op.location,
        "List endpoint has no filter parameters",
        suggestion="Add filter parameter or field-specific filters (e.g., status, created_after)",
        fix=add_parameters_fix(op.path, op.method, [copy.deepcopy(FILTER_PARAM)]),
    )


@operation_rule(
    "aip132/has-ordering",
    "List Endpoints Support Ordering",
    aip="AIP-132",
    category=RuleCategory.FILTERING,
    severity=Severity.SUGGESTION,
    methods=["GET"],
    description="List endpoints should accept an order_by parameter",
)
def has_ordering(ctx, op):
    if not ctx.is_collection(op.path):
        return
    if op.find_parameter(ORDER_PARAMS):
        return

    yield ctx.finding(
        op.location,
        "List endpoint missing ordering parameter",
        suggestion='Add order_by query parameter (e.g., "created_at desc, name asc")',
        fix=add_parameters_fix(op.path, op.method, [copy.deepcopy(ORDER_BY_PARAM)]),
    )


@operation_rule(
    "aip158/list-paginated",
    "List Endpoints Have Pagination",
    aip="AIP-158",
    severity=Severity.WARNING,
    methods=["GET"],
    description="List endpoints should accept page_size and page_token",
)
def list_paginated(ctx, op):
    if not ctx.is_collection(op.path):
        return
    if op.find_parameter(PAGE_SIZE_PARAMS) or op.find_parameter(PAGE_TOKEN_PARAMS):
        return

    yield ctx.finding(
        op.location,
        "List endpoint has no pagination parameters",
        suggestion="Add page_size and page_token query parameters",
        fix=add_parameters_fix(op.path, op.method, copy.deepcopy(PAGE_PARAMS)),
    )


@parameter_rule(
    "aip158/max-page-size",
    "Pagination Has Maximum",
    aip="AIP-158",
    severity=Severity.SUGGESTION,
    methods=["GET"],
    locations=["query"],
    description="Page size parameters should declare a maximum",
)
def max_page_size(ctx, op, param):
    if param.name not in PAGE_SIZE_PARAMS or param.schema is None:
        return

    schema = resolve(ctx.spec, param.schema)
    if not isinstance(schema, dict) or "maximum" in schema:
        return

    if "$ref" in param.schema:
        schema_path = ref_to_json_path(param.schema["$ref"])
    else:
        schema_path = f"{param.json_path}.schema"

    yield ctx.finding(
        op.location,
        f"Page size parameter '{param.name}' has no maximum",
        suggestion=f"Add maximum: {MAX_PAGE_SIZE} to the {param.name} schema",
        context={"parameter": param.name, "suggestedMaximum": MAX_PAGE_SIZE},
        fix=set_schema_constraint_fix(schema_path, "maximum", MAX_PAGE_SIZE, target={"parameter": param.name}),
    )


@operation_rule(
    "aip158/response-next-token",
    "Response Has Next Page Token",
    aip="AIP-158",
    severity=Severity.WARNING,
    methods=["GET"],
    description="Paginated list responses should return next_page_token",
)
def response_next_token(ctx, op):
    if not ctx.is_collection(op.path):
        return
    if not op.find_parameter(PAGINATION_PARAMS):
        return

    found = locate_response_schema(ctx.spec, op, "200")
    if found is None:
        return
    schema, location = found

    properties = schema.get("properties") or {}
    if any(name in properties for name in NEXT_TOKEN_FIELDS):
        return

    fix = None
    if schema.get("type") == "object" or "properties" in schema:
        fix = add_schema_property_fix(location, "next_page_token", dict(NEXT_PAGE_TOKEN))

    yield ctx.finding(
        op.location,
        "Paginated response missing next_page_token field",
        suggestion="Add next_page_token (string, nullable) to response schema",
        json_path=location,
        context={"suggestedField": {"next_page_token": dict(NEXT_PAGE_TOKEN)}},
        fix=fix,
    )
