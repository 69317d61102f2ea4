"""Apply fix descriptors to a spec document.

The patcher works on its own deep copy of the document. Every spec change is
resolved from JSONPath to JSON Pointer and executed as a jsonpatch operation
list. A fix is all-or-nothing: it is applied to a working copy and committed
only when every one of its changes succeeded.
"""

import copy
import logging

import jsonpatch
from jsonpointer import JsonPointer
from pydantic import BaseModel

from aip_reviewer.errors import JsonPathError, PatchError
from aip_reviewer.models import Finding, Fix, FixType, SpecChange, SpecChangeOperation
from aip_reviewer.spec.jsonpath import locate

logger = logging.getLogger(__name__)


class ChangeOutcome(BaseModel):
    change: SpecChange
    applied: bool
    error: str | None = None


class FixOutcome(BaseModel):
    rule_id: str
    fix_type: FixType
    applied: bool
    changes: list[ChangeOutcome]

    @property
    def error(self) -> str | None:
        return next((c.error for c in self.changes if c.error), None)


class PatchSummary(BaseModel):
    total: int
    applied: int
    failed: int
    changes: int


def _pointer(parts: list) -> str:
    return JsonPointer.from_parts(parts).path


def _lookup(doc, parts: list):
    node = doc
    for part in parts:
        if isinstance(node, dict) and part in node:
            node = node[part]
        elif isinstance(node, list) and isinstance(part, int) and part < len(node):
            node = node[part]
        else:
            return False, None
    return True, node


def _same_item(a, b) -> bool:
    """Parameters are the same when name and location match; anything else by equality."""
    if isinstance(a, dict) and isinstance(b, dict) and "name" in a and "in" in a:
        if a.get("in") != b.get("in"):
            return False
        if a.get("in") == "header":
            return str(a["name"]).lower() == str(b.get("name", "")).lower()
        return a["name"] == b.get("name")
    return a == b


def _ensure_parents(doc, parts: list) -> list[dict]:
    """`add` operations creating the missing objects on the way to `parts[-1]`.

    Path items and operations are never created implicitly: a change aimed
    at one that no longer exists (renamed by an earlier fix) is stale.
    """
    ops = []
    node = doc
    creating = False
    for i, part in enumerate(parts[:-1]):
        missing = creating or not (isinstance(node, dict) and part in node)
        if missing and parts[0] == "paths" and 0 < i < 3:
            raise PatchError(f"{_pointer(parts[: i + 1])} does not exist")
        if creating:
            ops.append({"op": "add", "path": _pointer(parts[: i + 1]), "value": {}})
            continue
        if isinstance(node, dict):
            if part not in node:
                creating = True
                ops.append({"op": "add", "path": _pointer(parts[: i + 1]), "value": {}})
                continue
            node = node[part]
        elif isinstance(node, list) and isinstance(part, int) and part < len(node):
            node = node[part]
        else:
            raise PatchError(f"Cannot create {_pointer(parts[: i + 1])}: parent is not an object")
        if not isinstance(node, (dict, list)):
            raise PatchError(f"Cannot descend into scalar at {_pointer(parts[: i + 1])}")
    return ops


class SpecPatcher:
    """Applies `Fix.spec_changes` to a copy of a spec and records the outcome of each fix."""

    def __init__(self, spec: dict):
        self.spec = copy.deepcopy(spec)
        self.log: list[FixOutcome] = []

    # -- fixes -----------------------------------------------------------

    def apply_fix(self, fix: Fix, rule_id: str = "") -> FixOutcome:
        working = copy.deepcopy(self.spec)
        outcomes = []
        failed = False

        for change in fix.spec_changes:
            if failed:
                outcomes.append(ChangeOutcome(change=change, applied=False, error="skipped after an earlier failure"))
                continue
            try:
                working = self.apply_change(working, change)
                outcomes.append(ChangeOutcome(change=change, applied=True))
            except PatchError as e:
                failed = True
                outcomes.append(ChangeOutcome(change=change, applied=False, error=str(e)))

        if not failed:
            self.spec = working

        outcome = FixOutcome(rule_id=rule_id, fix_type=fix.type, applied=not failed, changes=outcomes)
        self.log.append(outcome)
        if failed:
            logger.warning("Fix %s from %s not applied: %s", fix.type.value, rule_id or "?", outcome.error)
        else:
            logger.debug("Applied %s from %s at %s", fix.type.value, rule_id or "?", fix.json_path)
        return outcome

    def apply_findings(self, findings: list[Finding]) -> list[FixOutcome]:
        """Apply the fix of every finding that carries one, in order."""
        return [self.apply_fix(f.fix, f.rule_id) for f in findings if f.fix is not None]

    def summary(self) -> PatchSummary:
        applied = sum(1 for o in self.log if o.applied)
        return PatchSummary(
            total=len(self.log),
            applied=applied,
            failed=len(self.log) - applied,
            changes=sum(1 for o in self.log for c in o.changes if c.applied),
        )

    def has_errors(self) -> bool:
        return any(not o.applied for o in self.log)

    def errors(self) -> list[FixOutcome]:
        return [o for o in self.log if not o.applied]

    # -- primitive changes -----------------------------------------------

    def apply_change(self, doc: dict, change: SpecChange) -> dict:
        """Apply one change to `doc` in place and return the resulting document."""
        handlers = {
            SpecChangeOperation.RENAME_KEY: self._rename_key,
            SpecChangeOperation.SET: self._set,
            SpecChangeOperation.ADD: self._add,
            SpecChangeOperation.REMOVE: self._remove,
            SpecChangeOperation.MERGE: self._merge,
        }
        try:
            ops = handlers[change.operation](doc, change)
        except JsonPathError as e:
            raise PatchError(str(e)) from e
        if not ops:
            return doc
        try:
            return jsonpatch.apply_patch(doc, ops, in_place=True)
        except (jsonpatch.JsonPatchException, jsonpatch.JsonPointerException) as e:
            raise PatchError(f"{change.operation.value} at {change.path} failed: {e}") from e

    def _rename_key(self, doc, change: SpecChange) -> list[dict]:
        if change.from_ is None or change.to is None:
            raise PatchError(f"rename-key at {change.path} needs 'from' and 'to'")

        parts = locate(doc, change.path)
        found, parent = _lookup(doc, parts)
        if not found or not isinstance(parent, dict):
            raise PatchError(f"{change.path} is not an object")

        has_from = change.from_ in parent
        has_to = change.to in parent
        if not has_from and has_to:
            return []  # already renamed
        if not has_from:
            raise PatchError(f"Key '{change.from_}' not found at {change.path}")
        if has_to:
            raise PatchError(f"Key '{change.to}' already exists at {change.path}")

        # Rebuild the object so the renamed key keeps its position
        renamed = {(change.to if k == change.from_ else k): v for k, v in parent.items()}
        return [{"op": "replace", "path": _pointer(parts), "value": renamed}]

    def _set(self, doc, change: SpecChange) -> list[dict]:
        parts = locate(doc, change.path)
        value = copy.deepcopy(change.value)
        if not parts:
            return [{"op": "replace", "path": "", "value": value}]

        ops = _ensure_parents(doc, parts)
        found, _ = _lookup(doc, parts)
        _, parent = _lookup(doc, parts[:-1])
        if isinstance(parent, list):
            if not found:
                raise PatchError(f"Index out of range at {change.path}")
            ops.append({"op": "replace", "path": _pointer(parts), "value": value})
        else:
            ops.append({"op": "add", "path": _pointer(parts), "value": value})
        return ops

    def _add(self, doc, change: SpecChange) -> list[dict]:
        parts = locate(doc, change.path)
        found, node = _lookup(doc, parts)
        value = copy.deepcopy(change.value)

        if not found:
            return _ensure_parents(doc, parts) + [{"op": "add", "path": _pointer(parts), "value": [value]}]
        if not isinstance(node, list):
            raise PatchError(f"{change.path} is not a list")
        if any(_same_item(value, item) for item in node):
            return []
        return [{"op": "add", "path": _pointer(parts) + "/-", "value": value}]

    def _remove(self, doc, change: SpecChange) -> list[dict]:
        try:
            parts = locate(doc, change.path)
        except JsonPathError:
            return []  # a filter that selects nothing: already absent
        found, _ = _lookup(doc, parts)
        if not found:
            return []
        return [{"op": "remove", "path": _pointer(parts)}]

    def _merge(self, doc, change: SpecChange) -> list[dict]:
        parts = locate(doc, change.path)
        found, node = _lookup(doc, parts)
        value = copy.deepcopy(change.value)

        if not found:
            if isinstance(value, list):
                initial = []
                for item in value:
                    if not any(_same_item(item, seen) for seen in initial):
                        initial.append(item)
                value = initial
            return _ensure_parents(doc, parts) + [{"op": "add", "path": _pointer(parts), "value": value}]

        if isinstance(node, list):
            items = value if isinstance(value, list) else [value]
            ops = []
            pending = list(node)
            for item in items:
                if any(_same_item(item, existing) for existing in pending):
                    continue
                pending.append(item)
                ops.append({"op": "add", "path": _pointer(parts) + "/-", "value": item})
            return ops

        if isinstance(node, dict):
            if not isinstance(value, dict):
                raise PatchError(f"Cannot merge a {type(value).__name__} into the object at {change.path}")
            base = _pointer(parts)
            return [
                {"op": "add", "path": f"{base}/{JsonPointer.from_parts([k]).path[1:]}", "value": v}
                for k, v in value.items()
            ]

        raise PatchError(f"Cannot merge into a scalar at {change.path}")


def apply_fixes(spec: dict, findings: list[Finding]) -> tuple[dict, list[FixOutcome]]:
    """Patch a copy of `spec` with every fix carried by `findings`."""
    patcher = SpecPatcher(spec)
    outcomes = patcher.apply_findings(findings)
    return patcher.spec, outcomes
