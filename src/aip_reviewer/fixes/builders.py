"""Builders for the fix descriptors that rules attach to findings.

Each builder produces a `Fix` whose `spec_changes` can be replayed against
the original document. The changes are written so that replaying them twice
leaves the document unchanged.
"""

from aip_reviewer.models import Fix, FixType, SpecChange, SpecChangeOperation
from aip_reviewer.spec.jsonpath import (
    operation_json_path,
    parameters_json_path,
    path_json_path,
    property_json_path,
    request_body_json_path,
    response_json_path,
    responses_json_path,
    schema_json_path,
)


def rename_path_fix(
    path: str,
    new_path: str,
    *,
    target: dict | None = None,
    replacement=None,
    fix_type: FixType = FixType.RENAME_PATH_SEGMENT,
    extra_changes: list[SpecChange] | None = None,
) -> Fix:
    """Rename a key under `$.paths`, matching the whole original path string."""
    changes = [
        SpecChange(
            operation=SpecChangeOperation.RENAME_KEY,
            path="$.paths",
            from_=path,
            to=new_path,
        )
    ]
    return Fix(
        type=fix_type,
        json_path=path_json_path(path),
        target=target,
        replacement=new_path if replacement is None else replacement,
        spec_changes=changes + (extra_changes or []),
    )


def rename_parameter_fix(
    path: str,
    new_path: str,
    old_name: str,
    new_name: str,
    definitions: list[str],
) -> Fix:
    """Rename a path parameter in the template and in its inline definitions.

    `definitions` are JSONPaths of the parameter objects, already addressed
    under `new_path`.
    """
    sets = [
        SpecChange(operation=SpecChangeOperation.SET, path=f"{d}.name", value=new_name)
        for d in definitions
    ]
    return rename_path_fix(
        path,
        new_path,
        target={"parameter": old_name},
        replacement=new_name,
        fix_type=FixType.RENAME_PARAMETER,
        extra_changes=sets,
    )


def remove_request_body_fix(path: str, method: str) -> Fix:
    body = request_body_json_path(path, method)
    return Fix(
        type=FixType.REMOVE_REQUEST_BODY,
        json_path=body,
        target={"method": method.upper()},
        spec_changes=[SpecChange(operation=SpecChangeOperation.REMOVE, path=body)],
    )


def change_status_code_fix(path: str, method: str, current: str, suggested: str) -> Fix:
    return Fix(
        type=FixType.CHANGE_STATUS_CODE,
        json_path=response_json_path(path, method, current),
        target={"currentCode": current, "suggestedCode": suggested},
        replacement=suggested,
        spec_changes=[
            SpecChange(
                operation=SpecChangeOperation.RENAME_KEY,
                path=responses_json_path(path, method),
                from_=current,
                to=suggested,
            )
        ],
    )


def add_parameters_fix(path: str, method: str, params: list[dict]) -> Fix:
    """Merge parameter objects into an operation's parameter list."""
    target = parameters_json_path(path, method)
    return Fix(
        type=FixType.ADD_PARAMETERS if len(params) > 1 else FixType.ADD_PARAMETER,
        json_path=target,
        target={"names": [p["name"] for p in params]},
        replacement=params if len(params) > 1 else params[0],
        spec_changes=[SpecChange(operation=SpecChangeOperation.MERGE, path=target, value=params)],
    )


def set_schema_constraint_fix(schema_path: str, constraint: str, value, target: dict | None = None) -> Fix:
    return Fix(
        type=FixType.SET_SCHEMA_CONSTRAINT,
        json_path=schema_path,
        target={"constraint": constraint, **(target or {})},
        replacement=value,
        spec_changes=[
            SpecChange(
                operation=SpecChangeOperation.SET,
                path=f"{schema_path}.{constraint}",
                value=value,
            )
        ],
    )


def add_schema_fix(name: str, schema: dict) -> Fix:
    location = schema_json_path(name)
    return Fix(
        type=FixType.ADD_SCHEMA,
        json_path=location,
        target={"schema": name},
        replacement=schema,
        spec_changes=[SpecChange(operation=SpecChangeOperation.SET, path=location, value=schema)],
    )


def add_schema_property_fix(schema_path: str, name: str, prop: dict) -> Fix:
    location = property_json_path(schema_path, name)
    return Fix(
        type=FixType.ADD_SCHEMA_PROPERTY,
        json_path=schema_path,
        target={"property": name},
        replacement=prop,
        spec_changes=[SpecChange(operation=SpecChangeOperation.SET, path=location, value=prop)],
    )


def add_response_fix(path: str, method: str, code: str, response: dict) -> Fix:
    location = response_json_path(path, method, code)
    return Fix(
        type=FixType.ADD_RESPONSE,
        json_path=responses_json_path(path, method),
        target={"code": code},
        replacement=response,
        spec_changes=[SpecChange(operation=SpecChangeOperation.SET, path=location, value=response)],
    )


def add_operation_fix(path: str, method: str, operation: dict, based_on: str | None = None) -> Fix:
    target = {"method": method.lower()}
    if based_on:
        target["basedOn"] = based_on.lower()
    return Fix(
        type=FixType.ADD_OPERATION,
        json_path=path_json_path(path),
        target=target,
        replacement=operation,
        spec_changes=[
            SpecChange(
                operation=SpecChangeOperation.SET,
                path=operation_json_path(path, method),
                value=operation,
            )
        ],
    )
