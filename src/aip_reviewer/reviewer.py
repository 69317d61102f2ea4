"""Review pass: run the active rules over a spec and collect findings."""

import logging
import time

from aip_reviewer.config import ReviewerConfig
from aip_reviewer.errors import RuleExecutionError, WrongRuleKindError
from aip_reviewer.models import (
    Finding,
    ReviewMetadata,
    ReviewResult,
    Severity,
    summarize,
)
from aip_reviewer.nlp.classifier import Classifier, default_classifier
from aip_reviewer.rules.base import Rule, RuleKind
from aip_reviewer.rules.context import ReviewContext
from aip_reviewer.rules.registry import RuleRegistry, default_registry
from aip_reviewer.spec.traversal import get_paths, get_schemas

logger = logging.getLogger(__name__)

REVIEWER_VERSION = "2.0.0"

KIND_ORDER = (
    RuleKind.SPEC,
    RuleKind.PATH,
    RuleKind.OPERATION,
    RuleKind.PARAMETER,
    RuleKind.SCHEMA,
    RuleKind.PROPERTY,
)


class OpenAPIReviewer:
    def __init__(
        self,
        config: ReviewerConfig | None = None,
        registry: RuleRegistry | None = None,
        classifier: Classifier | None = None,
    ):
        self.config = config or ReviewerConfig()
        self.registry = registry or default_registry()
        self.classifier = classifier or default_classifier

    def active_rules(self) -> list[Rule]:
        skipped = set(self.config.skip_rules)
        categories = set(self.config.categories) if self.config.categories is not None else None
        return [
            rule for rule in self.registry.all()
            if rule.id not in skipped and (categories is None or rule.category in categories)
        ]

    def review(self, spec: dict, spec_path: str | None = None) -> ReviewResult:
        """Run every active rule over `spec`. The spec is not modified."""
        started = time.perf_counter()
        review = ReviewContext.build(spec, self.config, self.classifier)
        rules = self.active_rules()
        logger.debug("Reviewing %s with %d rules", spec_path or "<spec>", len(rules))

        findings: list[Finding] = []
        for kind in KIND_ORDER:
            for rule in rules:
                if rule.kind == kind:
                    findings.extend(self._run_rule(rule, review))

        logger.debug("Ran %d rules in %.1f ms", len(rules), (time.perf_counter() - started) * 1000)

        if self.config.strict:
            findings = [_promote(f) for f in findings]

        info = spec.get("info") if isinstance(spec.get("info"), dict) else {}
        result = ReviewResult(
            spec_path=spec_path,
            spec_title=info.get("title"),
            spec_version=_as_str(info.get("version")),
            findings=findings,
            summary=summarize(findings),
            metadata=ReviewMetadata(reviewer_version=REVIEWER_VERSION, rules_applied=len(rules)),
        )
        logger.info(
            "Review of %s: %d errors, %d warnings, %d suggestions",
            spec_path or "<spec>",
            result.summary.errors,
            result.summary.warnings,
            result.summary.suggestions,
        )
        return result

    def _run_rule(self, rule: Rule, review: ReviewContext) -> list[Finding]:
        ctx = review.for_rule(rule)
        findings: list[Finding] = []

        if rule.kind == RuleKind.SPEC:
            findings += self._guard(rule, "spec", rule.check_spec, ctx)

        elif rule.kind == RuleKind.PATH:
            for path, path_item in get_paths(review.spec).items():
                if isinstance(path_item, dict):
                    findings += self._guard(rule, path, rule.check_path, ctx, path, path_item)

        elif rule.kind == RuleKind.OPERATION:
            for op in review.operations:
                if rule.applies_to_method(op.method):
                    findings += self._guard(rule, op.location, rule.check_operation, ctx, op)

        elif rule.kind == RuleKind.PARAMETER:
            for op in review.operations:
                if not rule.applies_to_method(op.method):
                    continue
                for param in op.parameters:
                    if rule.applies_to_location(param.location):
                        findings += self._guard(
                            rule, f"{op.location} {param.name}", rule.check_parameter, ctx, op, param
                        )

        elif rule.kind == RuleKind.SCHEMA:
            for name, schema in get_schemas(review.spec).items():
                if isinstance(schema, dict):
                    findings += self._guard(rule, name, rule.check_schema, ctx, name, schema)

        elif rule.kind == RuleKind.PROPERTY:
            for name, schema in get_schemas(review.spec).items():
                if not isinstance(schema, dict):
                    continue
                for prop_name, prop in (schema.get("properties") or {}).items():
                    if isinstance(prop, dict):
                        findings += self._guard(
                            rule, f"{name}.{prop_name}", rule.check_property, ctx, name, prop_name, prop
                        )

        return findings

    def _guard(self, rule: Rule, location: str, check, *args) -> list[Finding]:
        """Run one rule call; a failure is handled by the configured policy."""
        try:
            return check(*args)
        except WrongRuleKindError:
            raise
        except Exception as e:
            policy = self.config.on_rule_error
            if policy == "raise":
                raise RuleExecutionError(rule.id, location, e) from e
            logger.exception("Rule %s failed on %s", rule.id, location)
            if policy == "record":
                return [
                    Finding(
                        rule_id=rule.id,
                        severity=Severity.ERROR,
                        category=rule.category,
                        aip=rule.aip,
                        path=location,
                        message=f"Rule failed: {e}",
                        context={"exception": type(e).__name__},
                    )
                ]
            return []


def _promote(finding: Finding) -> Finding:
    if finding.severity == Severity.WARNING:
        return finding.model_copy(update={"severity": Severity.ERROR})
    return finding


def _as_str(value) -> str | None:
    return None if value is None else str(value)


def review_spec(spec: dict, config: ReviewerConfig | None = None, spec_path: str | None = None) -> ReviewResult:
    """Review `spec` with the default rule set."""
    return OpenAPIReviewer(config).review(spec, spec_path)
