"""Per-pass review state shared by every rule invocation."""

from dataclasses import dataclass, field

from aip_reviewer.config import ReviewerConfig
from aip_reviewer.models import Finding, Fix
from aip_reviewer.nlp.classifier import Classifier, default_classifier
from aip_reviewer.rules.base import Rule
from aip_reviewer.spec.paths import is_collection_endpoint
from aip_reviewer.spec.singleton import find_singleton_resources
from aip_reviewer.spec.traversal import OperationEntry, get_all_operations


@dataclass
class ReviewContext:
    """Facts derived from the spec once per pass and discarded afterwards."""

    spec: dict
    config: ReviewerConfig
    classifier: Classifier
    singletons: frozenset[str]
    operations: list[OperationEntry]
    _collections: dict[str, bool] = field(default_factory=dict, repr=False)

    @classmethod
    def build(
        cls,
        spec: dict,
        config: ReviewerConfig | None = None,
        classifier: Classifier | None = None,
    ) -> "ReviewContext":
        return cls(
            spec=spec,
            config=config or ReviewerConfig(),
            classifier=classifier or default_classifier,
            singletons=find_singleton_resources(spec),
            operations=get_all_operations(spec),
        )

    def is_collection(self, path: str) -> bool:
        if path not in self._collections:
            self._collections[path] = is_collection_endpoint(
                path, self.classifier, self.config.singleton_endpoints
            )
        return self._collections[path]

    def operations_for(self, path: str) -> list[OperationEntry]:
        return [op for op in self.operations if op.path == path]

    def for_rule(self, rule: Rule) -> "RuleContext":
        return RuleContext(self, rule)


@dataclass(frozen=True)
class RuleContext:
    """What a rule sees: the review state plus its own metadata."""

    review: ReviewContext
    rule: Rule

    @property
    def spec(self) -> dict:
        return self.review.spec

    @property
    def config(self) -> ReviewerConfig:
        return self.review.config

    @property
    def classifier(self) -> Classifier:
        return self.review.classifier

    @property
    def singletons(self) -> frozenset[str]:
        return self.review.singletons

    def is_collection(self, path: str) -> bool:
        return self.review.is_collection(path)

    def finding(
        self,
        path: str,
        message: str,
        *,
        suggestion: str | None = None,
        json_path: str | None = None,
        context: dict | None = None,
        fix: Fix | None = None,
    ) -> Finding:
        """Create a finding stamped with this rule's id, severity, category and AIP."""
        return Finding(
            rule_id=self.rule.id,
            severity=self.rule.severity,
            category=self.rule.category,
            aip=self.rule.aip,
            path=path,
            message=message,
            suggestion=suggestion,
            json_path=json_path or (fix.json_path if fix else None),
            context=context,
            fix=fix,
        )
