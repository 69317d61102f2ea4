"""Exception hierarchy for aip-reviewer."""


class ReviewerError(Exception):
    """Base class for all aip-reviewer errors."""


class SpecLoadError(ReviewerError):
    """The spec file could not be read or is not an OpenAPI document."""


class ConfigError(ReviewerError):
    """The reviewer configuration is invalid."""


class JsonPathError(ReviewerError, ValueError):
    """A JSONPath expression is malformed or cannot be resolved."""


class PatchError(ReviewerError):
    """A spec change could not be applied."""


class RuleExecutionError(ReviewerError):
    """A rule raised while checking a spec element."""

    def __init__(self, rule_id: str, location: str, cause: Exception):
        super().__init__(f"Rule {rule_id} failed on {location}: {cause}")
        self.rule_id = rule_id
        self.location = location
        self.cause = cause


class WrongRuleKindError(ReviewerError, NotImplementedError):
    """A rule was asked to check an element of a kind it does not handle."""
