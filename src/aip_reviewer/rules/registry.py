"""Rule registry and the default rule set."""

from typing import Iterator, NamedTuple

from aip_reviewer.models import RuleCategory
from aip_reviewer.rules import error_handling, idempotency, listing, methods, naming
from aip_reviewer.rules.base import Rule, RuleKind


class AipInfo(NamedTuple):
    title: str
    summary: str
    category: RuleCategory


AIP_METADATA = {
    122: AipInfo("Resource Names", "Resource naming conventions", RuleCategory.NAMING),
    131: AipInfo("Standard Methods: Get", "GET method conventions", RuleCategory.STANDARD_METHODS),
    132: AipInfo("Standard Methods: List", "List method conventions", RuleCategory.STANDARD_METHODS),
    133: AipInfo("Standard Methods: Create", "POST/create conventions", RuleCategory.STANDARD_METHODS),
    134: AipInfo("Standard Methods: Update", "PATCH/PUT conventions", RuleCategory.STANDARD_METHODS),
    135: AipInfo("Standard Methods: Delete", "DELETE method conventions", RuleCategory.STANDARD_METHODS),
    155: AipInfo("Request Identification", "Idempotency keys for safe retries", RuleCategory.IDEMPOTENCY),
    158: AipInfo("Pagination", "List pagination with page tokens", RuleCategory.PAGINATION),
    160: AipInfo("Filtering", "Filter parameters for list methods", RuleCategory.FILTERING),
    193: AipInfo("Errors", "Structured error responses", RuleCategory.ERRORS),
}


class RuleRegistry:
    """Rules grouped by the AIP they were registered under, in registration order."""

    def __init__(self):
        self._by_aip: dict[int, list[Rule]] = {}
        self._by_id: dict[str, Rule] = {}

    def register(self, aip: int, *rules: Rule) -> "RuleRegistry":
        for rule in rules:
            if rule.id in self._by_id:
                raise ValueError(f"Rule {rule.id} is already registered")
            self._by_aip.setdefault(aip, []).append(rule)
            self._by_id[rule.id] = rule
        return self

    def all(self) -> list[Rule]:
        return [rule for rules in self._by_aip.values() for rule in rules]

    def by_aip(self, aip: int) -> list[Rule]:
        return list(self._by_aip.get(aip, []))

    def by_category(self, category: RuleCategory) -> list[Rule]:
        return [rule for rule in self.all() if rule.category == category]

    def by_id(self, rule_id: str) -> Rule | None:
        return self._by_id.get(rule_id)

    def by_kind(self, kind: RuleKind) -> list[Rule]:
        return [rule for rule in self.all() if rule.kind == kind]

    def aips(self) -> list[int]:
        return sorted(self._by_aip)

    def __len__(self) -> int:
        return len(self._by_id)

    def __iter__(self) -> Iterator[Rule]:
        return iter(self.all())


def default_registry() -> RuleRegistry:
    """Every built-in rule."""
    registry = RuleRegistry()
    registry.register(
        122,
        naming.plural_resources,
        naming.no_verbs,
        naming.consistent_casing,
        naming.nested_ownership,
    )
    registry.register(131, methods.get_no_body)
    registry.register(132, listing.has_filtering, listing.has_ordering)
    registry.register(133, methods.post_returns_created)
    registry.register(134, methods.patch_over_put)
    registry.register(135, methods.delete_idempotent)
    registry.register(155, idempotency.idempotency_key)
    registry.register(
        158,
        listing.list_paginated,
        listing.max_page_size,
        listing.response_next_token,
    )
    registry.register(
        193,
        error_handling.schema_defined,
        error_handling.responses_documented,
        error_handling.standard_codes,
    )
    return registry
