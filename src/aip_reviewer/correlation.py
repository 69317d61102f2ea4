"""Hand-off of findings to an external code-location correlator.

The correlator (typically an LLM agent reading the service's source tree)
is not part of this package. This module narrows the findings it sees,
groups them per operation, and merges the locations it returns.
"""

import logging
import re
from enum import Enum
from typing import Protocol

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from aip_reviewer.models import Finding, Severity
from aip_reviewer.spec.traversal import HTTP_METHODS

logger = logging.getLogger(__name__)

_SEVERITY_RANK = {Severity.ERROR: 0, Severity.WARNING: 1, Severity.SUGGESTION: 2}

_OPERATION = re.compile(rf"^({'|'.join(HTTP_METHODS)})\s+(.+)$", re.IGNORECASE)


class CorrelationLevel(str, Enum):
    MINIMAL = "minimal"
    MODERATE = "moderate"
    THOROUGH = "thorough"

    @property
    def threshold(self) -> Severity:
        return {
            CorrelationLevel.MINIMAL: Severity.ERROR,
            CorrelationLevel.MODERATE: Severity.WARNING,
            CorrelationLevel.THOROUGH: Severity.SUGGESTION,
        }[self]


class CodeLocationType(str, Enum):
    CONTROLLER = "controller"
    HANDLER = "handler"
    ROUTE = "route"
    SCHEMA = "schema"
    DTO = "dto"
    SERVICE = "service"
    DECORATOR = "decorator"


class CodeLocation(BaseModel):
    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    file: str
    line: int | None = None
    type: CodeLocationType
    confidence: float = Field(default=1.0, ge=0.0, le=1.0)


class CorrelatedFinding(Finding):
    code_locations: list[CodeLocation] = []


class SpecContext(BaseModel):
    method: str
    path: str


class CodeLocator(Protocol):
    def locate(self, method: str, path: str, findings: list[Finding]) -> list[CodeLocation]:
        """Source locations implementing `method path`."""
        ...


def filter_by_severity(findings: list[Finding], threshold: Severity) -> list[Finding]:
    """Findings at `threshold` or more severe."""
    limit = _SEVERITY_RANK[Severity(threshold)]
    return [f for f in findings if _SEVERITY_RANK[f.severity] <= limit]


def spec_context(finding: Finding) -> SpecContext:
    """The operation a finding is about; path-level findings count as GET."""
    m = _OPERATION.match(finding.path.strip())
    if m:
        return SpecContext(method=m.group(1).upper(), path=m.group(2).strip())
    return SpecContext(method="GET", path=finding.path)


def group_by_operation(findings: list[Finding]) -> dict[tuple[str, str], list[Finding]]:
    groups: dict[tuple[str, str], list[Finding]] = {}
    for finding in findings:
        ctx = spec_context(finding)
        groups.setdefault((ctx.method, ctx.path), []).append(finding)
    return groups


def correlate(
    findings: list[Finding],
    locator: CodeLocator,
    level: CorrelationLevel = CorrelationLevel.MODERATE,
) -> list[CorrelatedFinding]:
    """Ask `locator` once per operation and attach its locations to each finding."""
    selected = filter_by_severity(findings, CorrelationLevel(level).threshold)
    groups = group_by_operation(selected)
    logger.debug("Correlating %d findings over %d operations", len(selected), len(groups))

    located: dict[tuple[str, str], list[CodeLocation]] = {}
    for (method, path), group in groups.items():
        located[(method, path)] = list(locator.locate(method, path, group))

    correlated = []
    for finding in selected:
        ctx = spec_context(finding)
        correlated.append(
            CorrelatedFinding(**dict(finding), code_locations=located[(ctx.method, ctx.path)])
        )
    return correlated
