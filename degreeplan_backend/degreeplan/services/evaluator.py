"""Requirement satisfaction and progress for degree and minor programs.

Every function here is pure: it reads a requirement tree and a
``CompletionState`` snapshot and returns results. Nothing is cached, so
callers re-evaluate after each change to the completion state.

Malformed nodes never raise. They evaluate as unsatisfied and are recorded
on a ``Diagnostics`` instance (and logged once per instance). A node that is
reachable from itself raises ``RequirementCycleError``.
"""

import logging
from dataclasses import dataclass, field

from degreeplan.services.requirement_tree import (
    GROUP_KINDS,
    LEAF_KINDS,
    CompletionState,
    NodeKind,
    Program,
    RequirementCategory,
    RequirementCycleError,
    RequirementNode,
    requirement_key,
)

logger = logging.getLogger(__name__)

# Legacy fallback for rows stored without a credit value.
DEFAULT_CREDITS = 3


@dataclass
class Anomaly:
    kind: str
    message: str
    code: str | None = None
    group_id: str | None = None


class Diagnostics:
    """Collects configuration anomalies found while evaluating a tree."""

    def __init__(self) -> None:
        self.anomalies: list[Anomaly] = []
        self._seen: set[tuple[int, str]] = set()

    def record(self, node: RequirementNode, kind: str, message: str) -> None:
        self._add(
            (id(node), kind),
            Anomaly(kind=kind, message=message, code=node.code, group_id=node.group_id),
        )

    def record_load_issues(self, program: Program) -> None:
        for issue in program.issues:
            self._add((id(issue), issue.kind), Anomaly(kind=issue.kind, message=issue.message))

    def _add(self, key: tuple[int, str], anomaly: Anomaly) -> None:
        if key in self._seen:
            return
        self._seen.add(key)
        self.anomalies.append(anomaly)
        logger.warning(f"Requirement anomaly ({anomaly.kind}): {anomaly.message}")


@dataclass
class CategoryProgress:
    name: str
    completed_units: int
    total_units: int
    percentage: int
    completed_credits: int = 0
    min_credits: int | None = None

    @property
    def is_complete(self) -> bool:
        # A rounded 100% can still be short of the total.
        return self.total_units > 0 and self.completed_units >= self.total_units


@dataclass
class ProgramProgress:
    complete_category_count: int
    total_category_count: int
    overall_percentage: int
    categories: list[CategoryProgress] = field(default_factory=list)


@dataclass
class CreditsSummary:
    completed_credits: int
    total_credits: int


@dataclass
class NodeResult:
    kind: str
    key: str | None
    title: str | None
    satisfied: bool
    planned: bool
    credits: int | None = None
    satisfied_count: int | None = None
    required_count: int | None = None
    group_id: str | None = None
    footnote_refs: list[int] = field(default_factory=list)
    children: list["NodeResult"] = field(default_factory=list)
    anomaly: str | None = None


def percentage(completed: int, total: int) -> int:
    """Whole-number percentage, halves rounded up."""
    if total <= 0:
        return 0
    return (200 * completed + total) // (2 * total)


def node_credits(node: RequirementNode) -> int:
    if node.credits is not None and node.credits > 0:
        return node.credits
    return DEFAULT_CREDITS


def _describe(node: RequirementNode) -> str:
    return node.group_id or node.code or node.title or node.text or node.kind.value


def _malformed(node: RequirementNode) -> tuple[str, str] | None:
    if node.kind == NodeKind.UNKNOWN:
        return "unknown_kind", f"unknown requirement kind {node.raw_kind!r} at {_describe(node)}"
    if node.kind == NodeKind.REGULAR and not node.code:
        return "missing_code", f"regular course without a code at {_describe(node)}"
    if node.kind == NodeKind.FLEXIBLE and requirement_key(node) is None:
        return "missing_identifier", f"flexible requirement without code or text at {_describe(node)}"
    if node.kind == NodeKind.SELECTION:
        if node.selection_count is None or node.selection_count < 1:
            return (
                "invalid_selection_count",
                f"selection count {node.selection_count!r} at {_describe(node)}",
            )
        if not node.children:
            return "empty_selection", f"selection without options at {_describe(node)}"
    return None


def _combine(node: RequirementNode, flags: list[bool]) -> bool:
    if node.kind == NodeKind.AND_GROUP:
        return all(flags)
    if node.kind == NodeKind.OR_GROUP:
        return any(flags)
    return sum(flags) >= node.selection_count


def _enter(node: RequirementNode, path: set[int]) -> None:
    if id(node) in path:
        raise RequirementCycleError(f"Requirement node {_describe(node)} is reachable from itself")
    path.add(id(node))


def _satisfied(
    node: RequirementNode,
    state: CompletionState,
    diagnostics: Diagnostics,
    path: set[int],
) -> bool:
    problem = _malformed(node)
    if problem:
        diagnostics.record(node, *problem)
        return False
    if node.kind in LEAF_KINDS:
        return requirement_key(node) in state.completed_courses
    return _combine(node, _child_flags(node, state, diagnostics, path))


def _child_flags(
    node: RequirementNode,
    state: CompletionState,
    diagnostics: Diagnostics,
    path: set[int],
) -> list[bool]:
    # No short-circuit: every child is evaluated.
    _enter(node, path)
    try:
        return [_satisfied(child, state, diagnostics, path) for child in node.children]
    finally:
        path.discard(id(node))


def is_satisfied(
    node: RequirementNode,
    state: CompletionState,
    diagnostics: Diagnostics | None = None,
) -> bool:
    return _satisfied(node, state, diagnostics or Diagnostics(), set())


def _node_units(
    node: RequirementNode,
    state: CompletionState,
    diagnostics: Diagnostics,
) -> tuple[int, int]:
    problem = _malformed(node)
    if problem:
        diagnostics.record(node, *problem)
        return 0, 1
    if node.kind == NodeKind.AND_GROUP:
        flags = _child_flags(node, state, diagnostics, set())
        return sum(flags), len(flags)
    if node.kind == NodeKind.SELECTION:
        flags = _child_flags(node, state, diagnostics, set())
        return min(sum(flags), node.selection_count), node.selection_count
    # Regular, flexible and OR groups count as a single unit.
    return int(_satisfied(node, state, diagnostics, set())), 1


def _iter_leaves(node: RequirementNode, path: set[int]):
    if node.kind in LEAF_KINDS:
        yield node
        return
    if node.kind not in GROUP_KINDS:
        return
    _enter(node, path)
    try:
        for child in node.children:
            yield from _iter_leaves(child, path)
    finally:
        path.discard(id(node))


def _completed_credits(
    nodes: list[RequirementNode],
    state: CompletionState,
    seen: set[str],
) -> int:
    total = 0
    for node in nodes:
        for leaf in _iter_leaves(node, set()):
            key = requirement_key(leaf)
            if key is None or key in seen:
                continue
            # First occurrence in tree order decides the credit value.
            seen.add(key)
            if key in state.completed_courses:
                total += node_credits(leaf)
    return total


def category_progress(
    category: RequirementCategory,
    state: CompletionState,
    diagnostics: Diagnostics | None = None,
) -> CategoryProgress:
    diagnostics = diagnostics or Diagnostics()
    completed_units = 0
    total_units = 0
    for node in category.courses:
        done, total = _node_units(node, state, diagnostics)
        completed_units += done
        total_units += total
    return CategoryProgress(
        name=category.name,
        completed_units=completed_units,
        total_units=total_units,
        percentage=percentage(completed_units, total_units),
        completed_credits=_completed_credits(category.courses, state, set()),
        min_credits=category.min_credits,
    )


def program_progress(
    program: Program,
    state: CompletionState,
    diagnostics: Diagnostics | None = None,
) -> ProgramProgress:
    """Category-counting progress: how many categories are fully complete.

    The overall percentage is never weighted by units or credits.
    """
    diagnostics = diagnostics or Diagnostics()
    diagnostics.record_load_issues(program)
    categories = [category_progress(c, state, diagnostics) for c in program.categories]
    complete = sum(1 for c in categories if c.is_complete)
    return ProgramProgress(
        complete_category_count=complete,
        total_category_count=len(categories),
        overall_percentage=percentage(complete, len(categories)),
        categories=categories,
    )


def credits_summary(program: Program, state: CompletionState) -> CreditsSummary:
    seen: set[str] = set()
    completed = 0
    for category in program.categories:
        completed += _completed_credits(category.courses, state, seen)
    return CreditsSummary(completed_credits=completed, total_credits=program.total_credits)


def _evaluate(
    node: RequirementNode,
    state: CompletionState,
    diagnostics: Diagnostics,
    path: set[int],
) -> tuple[NodeResult, bool]:
    """Return the node's result and whether it holds once planned courses finish."""
    key = requirement_key(node)
    result = NodeResult(
        kind=node.kind.value,
        key=key,
        title=node.title or node.text,
        satisfied=False,
        planned=False,
        group_id=node.group_id,
        footnote_refs=list(node.footnote_refs),
    )
    problem = _malformed(node)
    if problem:
        diagnostics.record(node, *problem)
        result.anomaly = problem[0]
        return result, False

    if node.kind in LEAF_KINDS:
        result.credits = node_credits(node)
        result.satisfied = key in state.completed_courses
        result.planned = not result.satisfied and key in state.planned_courses
        return result, result.satisfied or result.planned

    _enter(node, path)
    try:
        evaluated = [_evaluate(child, state, diagnostics, path) for child in node.children]
    finally:
        path.discard(id(node))

    result.children = [child for child, _ in evaluated]
    flags = [child.satisfied for child in result.children]
    projected = _combine(node, [holds for _, holds in evaluated])
    result.satisfied = _combine(node, flags)
    result.planned = not result.satisfied and projected
    result.satisfied_count = sum(flags)
    if node.kind == NodeKind.AND_GROUP:
        result.required_count = len(flags)
    elif node.kind == NodeKind.OR_GROUP:
        result.required_count = 1
    else:
        result.required_count = node.selection_count
    return result, projected


def evaluate_node(
    node: RequirementNode,
    state: CompletionState,
    diagnostics: Diagnostics | None = None,
) -> NodeResult:
    result, _ = _evaluate(node, state, diagnostics or Diagnostics(), set())
    return result


def satisfied_group_ids(
    category: RequirementCategory,
    state: CompletionState,
    diagnostics: Diagnostics | None = None,
) -> set[str]:
    diagnostics = diagnostics or Diagnostics()
    return {
        node.group_id
        for node in category.courses
        if node.kind in GROUP_KINDS
        and node.group_id
        and is_satisfied(node, state, diagnostics)
    }
