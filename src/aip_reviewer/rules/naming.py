"""AIP-122 resource naming rules."""

from collections import Counter

from aip_reviewer.fixes.builders import rename_parameter_fix, rename_path_fix
from aip_reviewer.models import RuleCategory, Severity
from aip_reviewer.rules.base import path_rule, spec_rule
from aip_reviewer.spec.jsonpath import parameters_json_path, path_json_path
from aip_reviewer.spec.naming import (
    is_custom_method,
    is_singular,
    looks_like_verb,
    pluralize_segment,
    singularize_segment,
    strip_verb_prefix,
)
from aip_reviewer.spec.paths import (
    CasingStyle,
    convert_casing,
    detect_casing_style,
    is_path_parameter,
    is_version_prefix,
    last_word,
    parent_path,
    replace_segments,
    resource_segments,
    split_path,
)
from aip_reviewer.spec.singleton import is_singleton_path
from aip_reviewer.spec.traversal import HTTP_METHODS, get_paths, resolve


def _skippable(ctx, segment: str, path: str) -> bool:
    """Segments no naming rule should judge as a resource name."""
    return (
        is_path_parameter(segment)
        or ":" in segment
        or is_version_prefix(segment)
        or segment.lower() in ctx.config.singleton_endpoints
        or is_custom_method(segment, path, ctx.singletons)
    )


def _singular_segments(ctx, path: str) -> list[tuple[int, str]]:
    found = []
    for index, segment in enumerate(split_path(path)):
        if _skippable(ctx, segment, path):
            continue
        if is_singleton_path(parent_path(path, index + 1), ctx.singletons):
            continue
        if ctx.classifier.is_uncountable(last_word(segment)):
            continue
        if looks_like_verb(segment, ctx.classifier):
            continue  # reported by no-verbs
        if is_singular(segment, ctx.classifier):
            found.append((index, segment))
    return found


@path_rule(
    "aip122/plural-resources",
    "Plural Resource Names",
    aip="AIP-122",
    severity=Severity.WARNING,
    description="Collection identifiers should be plural nouns, except for singleton resources",
)
def plural_resources(ctx, path, path_item):
    singular = _singular_segments(ctx, path)
    if not singular:
        return

    plurals = {index: pluralize_segment(segment, ctx.classifier) for index, segment in singular}
    new_path = replace_segments(path, plurals)

    for index, segment in singular:
        plural = plurals[index]
        yield ctx.finding(
            path,
            f"Resource name '{segment}' appears singular. Use plural form.",
            suggestion=f"Rename to '{plural}'",
            context={"segment": segment, "suggestedFix": plural},
            fix=rename_path_fix(
                path,
                new_path,
                target={"segment": segment, "segmentIndex": index},
                replacement=plural,
            ),
        )


@path_rule(
    "aip122/no-verbs",
    "No Verbs in Path",
    aip="AIP-131",
    category=RuleCategory.NAMING,
    severity=Severity.ERROR,
    description="Paths should name resources with nouns; actions belong in HTTP methods or custom methods",
)
def no_verbs(ctx, path, path_item):
    for segment in resource_segments(path):
        if _skippable(ctx, segment, path):
            continue
        if looks_like_verb(segment, ctx.classifier):
            yield ctx.finding(
                path,
                f"Path contains verb '{segment}'. Use nouns for resources.",
                suggestion=f"Extract the noun (e.g., '{strip_verb_prefix(segment)}') or use a custom method (':{segment}')",
                json_path=path_json_path(path),
                context={"segment": segment},
            )


@spec_rule(
    "aip122/consistent-casing",
    "Consistent Casing",
    aip="AIP-122",
    severity=Severity.WARNING,
    description="Path segments should share one casing style",
)
def consistent_casing(ctx):
    paths = list(get_paths(ctx.spec))

    styles = Counter()
    for path in paths:
        for segment in resource_segments(path):
            style = detect_casing_style(segment)
            if style != CasingStyle.LOWER:
                styles[style] += 1

    if len(styles) < 2:
        return
    # Ties go to the style seen first
    dominant = styles.most_common(1)[0][0]

    for path in paths:
        offending = {}
        for index, segment in enumerate(split_path(path)):
            if is_path_parameter(segment) or ":" in segment:
                continue
            style = detect_casing_style(segment)
            if style not in (CasingStyle.LOWER, dominant):
                offending[index] = (segment, style)
        if not offending:
            continue

        new_path = replace_segments(
            path, {i: convert_casing(seg, dominant) for i, (seg, _) in offending.items()}
        )
        for index, (segment, style) in offending.items():
            converted = convert_casing(segment, dominant)
            yield ctx.finding(
                path,
                f"Inconsistent casing: '{segment}' uses {style.value}, but API predominantly uses {dominant.value}",
                suggestion=f"Convert to {dominant.value} for consistency: '{converted}'",
                context={"segment": segment, "currentStyle": style.value, "dominantStyle": dominant.value},
                fix=rename_path_fix(
                    path,
                    new_path,
                    target={"segment": segment, "segmentIndex": index, "style": dominant.value},
                    replacement=converted,
                ),
            )


def _owner_id(ctx, parent: str) -> str:
    """`users` -> `userId`, `order-items` -> `orderItemId`."""
    return convert_casing(singularize_segment(parent, ctx.classifier), CasingStyle.CAMEL) + "Id"


def _parameter_levels(path_item: dict):
    yield None, path_item.get("parameters")
    for method, operation in path_item.items():
        if method.lower() in HTTP_METHODS and isinstance(operation, dict):
            yield method.lower(), operation.get("parameters")


def _ownership_fix(ctx, path: str, path_item: dict, index: int, new_name: str):
    """Rename `{id}` in the path and in its inline definitions, or None when that is ambiguous."""
    segments = split_path(path)
    if "{" + new_name + "}" in segments:
        return None

    new_path = replace_segments(path, {index: "{" + new_name + "}"})
    definitions = []
    for method, params in _parameter_levels(path_item):
        for position, raw in enumerate(params or []):
            if not isinstance(raw, dict):
                continue
            if "$ref" in raw:
                shared = resolve(ctx.spec, raw)
                # A shared component may be used by other paths
                if isinstance(shared, dict) and shared.get("name") == "id" and shared.get("in") == "path":
                    return None
                continue
            if raw.get("name") == "id" and raw.get("in") == "path":
                definitions.append(f"{parameters_json_path(new_path, method)}[{position}]")

    return rename_parameter_fix(path, new_path, "id", new_name, definitions)


@path_rule(
    "aip122/nested-ownership",
    "Nested Resource Ownership",
    aip="AIP-122",
    severity=Severity.SUGGESTION,
    description="Nested paths should name parent identifiers after their resource",
)
def nested_ownership(ctx, path, path_item):
    segments = split_path(path)
    pairs = [
        i for i in range(1, len(segments))
        if is_path_parameter(segments[i]) and not is_path_parameter(segments[i - 1])
    ]
    if len(pairs) < 2:
        return

    generic = [i for i in pairs if segments[i] == "{id}"]
    fix = None
    if len(generic) == 1:
        index = generic[0]
        fix = _ownership_fix(ctx, path, path_item, index, _owner_id(ctx, segments[index - 1]))

    for index in generic:
        parent = segments[index - 1]
        suggested = _owner_id(ctx, parent)
        yield ctx.finding(
            path,
            f"Generic '{{id}}' in nested path. Use descriptive name like '{{{suggested}}}'",
            suggestion=f"Rename to '{{{suggested}}}' so the owning resource is clear",
            json_path=None if fix else path_json_path(path),
            context={"paramName": "id", "parentResource": parent, "suggestedName": suggested},
            fix=fix,
        )
