"""Data models for review findings and fixes.

Findings and fixes are immutable once a rule creates them. Every model
serialises to camelCase JSON, the shape external formatters and patchers
consume.
"""

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class Severity(str, Enum):
    ERROR = "error"
    WARNING = "warning"
    SUGGESTION = "suggestion"


class RuleCategory(str, Enum):
    NAMING = "naming"
    STANDARD_METHODS = "standard-methods"
    ERRORS = "errors"
    PAGINATION = "pagination"
    FILTERING = "filtering"
    LRO = "lro"
    IDEMPOTENCY = "idempotency"
    VERSIONING = "versioning"
    SECURITY = "security"


class FixType(str, Enum):
    RENAME_PATH_SEGMENT = "rename-path-segment"
    RENAME_PARAMETER = "rename-parameter"
    ADD_PARAMETER = "add-parameter"
    ADD_PARAMETERS = "add-parameters"
    REMOVE_REQUEST_BODY = "remove-request-body"
    CHANGE_STATUS_CODE = "change-status-code"
    ADD_OPERATION = "add-operation"
    ADD_SCHEMA = "add-schema"
    ADD_SCHEMA_PROPERTY = "add-schema-property"
    ADD_RESPONSE = "add-response"
    SET_SCHEMA_CONSTRAINT = "set-schema-constraint"


class SpecChangeOperation(str, Enum):
    RENAME_KEY = "rename-key"
    SET = "set"
    ADD = "add"
    REMOVE = "remove"
    MERGE = "merge"


class _Record(BaseModel):
    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )

    def to_dict(self) -> dict:
        """JSON-ready dict with camelCase keys and unset optionals dropped."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class SpecChange(_Record):
    """A primitive edit of the spec document addressed by JSONPath."""

    operation: SpecChangeOperation
    path: str
    from_: str | None = Field(default=None, alias="from")
    to: str | None = None
    value: Any = None


class Fix(_Record):
    """A machine-applicable correction for a finding."""

    type: FixType
    json_path: str
    target: dict | None = None
    replacement: Any = None
    spec_changes: list[SpecChange] = []


class Finding(_Record):
    """A single rule violation."""

    rule_id: str
    severity: Severity
    category: RuleCategory
    path: str  # "/users/{id}" or "GET /users"
    message: str
    aip: str | None = None
    suggestion: str | None = None
    json_path: str | None = None
    context: dict | None = None
    fix: Fix | None = None


class ReviewSummary(_Record):
    errors: int = 0
    warnings: int = 0
    suggestions: int = 0
    by_category: dict[str, int] = {}


class ReviewMetadata(_Record):
    reviewer_version: str
    rules_applied: int


class ReviewResult(_Record):
    """All findings of one review pass over one spec."""

    spec_path: str | None = None
    spec_title: str | None = None
    spec_version: str | None = None
    findings: list[Finding]
    summary: ReviewSummary
    metadata: ReviewMetadata

    @property
    def has_errors(self) -> bool:
        return self.summary.errors > 0

    def by_rule(self, rule_id: str) -> list[Finding]:
        return [f for f in self.findings if f.rule_id == rule_id]


def summarize(findings: list[Finding]) -> ReviewSummary:
    """Count findings per severity and per category."""
    counts = {severity: 0 for severity in Severity}
    by_category: dict[str, int] = {}
    for finding in findings:
        counts[finding.severity] += 1
        key = finding.category.value
        by_category[key] = by_category.get(key, 0) + 1

    return ReviewSummary(
        errors=counts[Severity.ERROR],
        warnings=counts[Severity.WARNING],
        suggestions=counts[Severity.SUGGESTION],
        by_category=by_category,
    )
