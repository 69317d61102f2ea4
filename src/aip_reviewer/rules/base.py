"""Rule taxonomy: rule kinds, rule metadata, and the decorators that declare rules.

A rule is a generator function wrapped by one of the kind decorators:

    @operation_rule("aip131/get-no-body", "GET No Request Body",
                    aip="AIP-131", severity=Severity.ERROR, methods=["GET"],
                    description="GET requests must not carry a request body")
    def get_no_body(ctx, op):
        if "requestBody" in op.operation:
            yield ctx.finding(op.location, "GET request has a request body")

The decorator returns a `Rule`. Its `check_*` method for the declared kind
runs the generator; the other `check_*` methods raise WrongRuleKindError.
"""

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Callable, Iterable

from aip_reviewer.errors import WrongRuleKindError
from aip_reviewer.models import Finding, RuleCategory, Severity

if TYPE_CHECKING:
    from aip_reviewer.rules.context import RuleContext
    from aip_reviewer.spec.traversal import OperationEntry, ParameterEntry

AIP_CATEGORIES = {
    122: RuleCategory.NAMING,
    123: RuleCategory.NAMING,
    131: RuleCategory.STANDARD_METHODS,
    132: RuleCategory.STANDARD_METHODS,
    133: RuleCategory.STANDARD_METHODS,
    134: RuleCategory.STANDARD_METHODS,
    135: RuleCategory.STANDARD_METHODS,
    136: RuleCategory.STANDARD_METHODS,
    155: RuleCategory.IDEMPOTENCY,
    158: RuleCategory.PAGINATION,
    160: RuleCategory.FILTERING,
    193: RuleCategory.ERRORS,
    194: RuleCategory.ERRORS,
}


def aip_number(text: str | None) -> int | None:
    """`"AIP-122"` or `"aip122/plural-resources"` -> 122."""
    if not text:
        return None
    m = re.search(r"(?i)aip-?(\d+)", text)
    return int(m.group(1)) if m else None


def category_for_aip(aip: str | None) -> RuleCategory:
    return AIP_CATEGORIES.get(aip_number(aip), RuleCategory.NAMING)


class RuleKind(str, Enum):
    SPEC = "spec"
    PATH = "path"
    OPERATION = "operation"
    PARAMETER = "parameter"
    SCHEMA = "schema"
    PROPERTY = "property"


@dataclass(frozen=True)
class Rule:
    id: str
    name: str
    kind: RuleKind
    severity: Severity
    description: str
    handler: Callable[..., Iterable[Finding]] = field(repr=False, compare=False)
    aip: str | None = None
    category_override: RuleCategory | None = None
    methods: frozenset[str] | None = None  # upper-case HTTP methods
    locations: frozenset[str] | None = None  # parameter locations

    @property
    def category(self) -> RuleCategory:
        return self.category_override or category_for_aip(self.aip)

    @property
    def namespace(self) -> int | None:
        """AIP number from the id prefix, which groups rules in the registry."""
        return aip_number(self.id.split("/", 1)[0])

    def applies_to_method(self, method: str) -> bool:
        return self.methods is None or method.upper() in self.methods

    def applies_to_location(self, location: str) -> bool:
        return self.locations is None or location in self.locations

    def _run(self, kind: RuleKind, ctx: "RuleContext", *args) -> list[Finding]:
        if self.kind != kind:
            raise WrongRuleKindError(
                f"{self.id} is a {self.kind.value} rule; check_{kind.value} is not implemented"
            )
        return list(self.handler(ctx, *args))

    def check_spec(self, ctx: "RuleContext") -> list[Finding]:
        return self._run(RuleKind.SPEC, ctx)

    def check_path(self, ctx: "RuleContext", path: str, path_item: dict) -> list[Finding]:
        return self._run(RuleKind.PATH, ctx, path, path_item)

    def check_operation(self, ctx: "RuleContext", operation: "OperationEntry") -> list[Finding]:
        return self._run(RuleKind.OPERATION, ctx, operation)

    def check_parameter(
        self, ctx: "RuleContext", operation: "OperationEntry", parameter: "ParameterEntry"
    ) -> list[Finding]:
        return self._run(RuleKind.PARAMETER, ctx, operation, parameter)

    def check_schema(self, ctx: "RuleContext", name: str, schema: dict) -> list[Finding]:
        return self._run(RuleKind.SCHEMA, ctx, name, schema)

    def check_property(
        self, ctx: "RuleContext", schema_name: str, name: str, prop: dict
    ) -> list[Finding]:
        return self._run(RuleKind.PROPERTY, ctx, schema_name, name, prop)


def _declare(kind: RuleKind):
    def declare(
        id: str,
        name: str,
        *,
        severity: Severity,
        description: str,
        aip: str | None = None,
        category: RuleCategory | None = None,
        methods: list[str] | None = None,
        locations: list[str] | None = None,
    ):
        def decorator(func) -> Rule:
            return Rule(
                id=id,
                name=name,
                kind=kind,
                severity=severity,
                description=description,
                handler=func,
                aip=aip,
                category_override=category,
                methods=frozenset(m.upper() for m in methods) if methods else None,
                locations=frozenset(locations) if locations else None,
            )

        return decorator

    declare.__name__ = f"{kind.value}_rule"
    return declare


spec_rule = _declare(RuleKind.SPEC)
path_rule = _declare(RuleKind.PATH)
operation_rule = _declare(RuleKind.OPERATION)
parameter_rule = _declare(RuleKind.PARAMETER)
schema_rule = _declare(RuleKind.SCHEMA)
property_rule = _declare(RuleKind.PROPERTY)
