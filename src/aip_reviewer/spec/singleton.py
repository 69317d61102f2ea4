"""Singleton resource inference over the full set of declared paths."""

import re

from aip_reviewer.spec.paths import is_version_prefix, split_path


def _has_param_child(prefix: str, paths: list[str], exact: bool) -> bool:
    pattern = "^" + re.escape(prefix) + r"/\{[^/]+\}" + ("$" if exact else "")
    rx = re.compile(pattern)
    return any(rx.match(p) for p in paths)


def find_singleton_resources(spec: dict) -> frozenset[str]:
    """Paths that address a single resource rather than a collection.

    A declared path without parameters is a singleton unless `path/{x}` is
    declared too. Prefixes of declared paths that are never declared
    themselves (`/v1/database` for `/v1/database/backup`) are singletons
    as long as nothing in the spec addresses `prefix/{x}`.
    """
    paths = list((spec.get("paths") or {}).keys())
    declared = set(paths)
    singletons = set()

    for path in paths:
        if "{" in path or path == "/":
            continue
        if not _has_param_child(path, paths, exact=True):
            singletons.add(path)

    for path in paths:
        if "{" in path:
            continue
        segments = split_path(path)
        for i in range(1, len(segments)):
            prefix = "/" + "/".join(segments[:i])
            if prefix in declared or is_version_prefix(segments[i - 1]):
                continue
            if not _has_param_child(prefix, paths, exact=False):
                singletons.add(prefix)

    return frozenset(singletons)


def is_singleton_path(path: str, singletons: frozenset[str]) -> bool:
    if path in singletons:
        return True
    return any(path.startswith(s + "/") for s in singletons)
