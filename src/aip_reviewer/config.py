"""Reviewer configuration."""

from pathlib import Path
from typing import Literal

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from aip_reviewer.errors import ConfigError
from aip_reviewer.models import RuleCategory
from aip_reviewer.spec.paths import SINGLETON_ENDPOINTS

RuleErrorPolicy = Literal["log", "record", "raise"]


class ReviewerConfig(BaseModel):
    """Options for one review pass."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    strict: bool = Field(
        default=False,
        description="Promote warnings to errors",
    )

    categories: list[RuleCategory] | None = Field(
        default=None,
        description="Only run rules in these categories (all when unset)",
    )

    skip_rules: list[str] = Field(
        default_factory=list,
        description="Rule ids to disable, e.g. 'aip134/patch-over-put'",
    )

    on_rule_error: RuleErrorPolicy = Field(
        default="log",
        description="What to do when a rule raises: log and continue, record an error finding, or raise",
    )

    singleton_endpoints: frozenset[str] = Field(
        default=SINGLETON_ENDPOINTS,
        description="Final path segments that never denote a collection",
    )

    propose_patch_operation: bool = Field(
        default=False,
        description="Attach an add-operation fix (a PATCH template) to patch-over-put findings",
    )


def load_config(file_path: Path) -> ReviewerConfig:
    """Read a YAML config file; keys use the field names above."""
    try:
        data = yaml.safe_load(file_path.read_text(encoding="utf-8")) or {}
    except (OSError, yaml.YAMLError) as e:
        raise ConfigError(f"Cannot read config {file_path}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigError(f"Config {file_path} must be a mapping")

    try:
        return ReviewerConfig(**data)
    except ValidationError as e:
        raise ConfigError(f"Invalid config {file_path}: {e}") from e
