from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Iterable


class NodeKind(Enum):
    REGULAR = "regular"
    FLEXIBLE = "flexible"
    AND_GROUP = "and_group"
    OR_GROUP = "or_group"
    SELECTION = "selection"
    UNKNOWN = "unknown"


GROUP_KINDS = {NodeKind.AND_GROUP, NodeKind.OR_GROUP, NodeKind.SELECTION}
LEAF_KINDS = {NodeKind.REGULAR, NodeKind.FLEXIBLE}


class RequirementCycleError(ValueError):
    """A requirement node is reachable from itself."""


@dataclass
class RequirementNode:
    kind: NodeKind
    code: str | None = None
    text: str | None = None
    title: str | None = None
    credits: int | None = None
    is_option: bool = False
    group_id: str | None = None
    footnote_refs: list[int] = field(default_factory=list)
    # AND/OR children and selection options
    children: list["RequirementNode"] = field(default_factory=list)
    selection_count: int | None = None
    raw_kind: str | None = None


@dataclass
class RequirementCategory:
    name: str
    courses: list[RequirementNode] = field(default_factory=list)
    min_credits: int | None = None


@dataclass
class Footnote:
    number: int
    text: str


@dataclass
class LoadIssue:
    """A stored requirement value that could not be read as a category."""

    kind: str
    message: str


@dataclass
class Program:
    name: str
    total_credits: int
    categories: list[RequirementCategory] = field(default_factory=list)
    footnotes: list[Footnote] = field(default_factory=list)
    program_type: str = "degree"
    issues: list[LoadIssue] = field(default_factory=list)


@dataclass(frozen=True)
class CompletionState:
    """Snapshot of a student's completed and planned identifiers.

    Both sets hold course codes and, for text-only flexible requirements,
    the requirement text itself. Use ``requirement_key`` to get the
    identifier a node is checked against.
    """

    completed_courses: frozenset[str] = frozenset()
    planned_courses: frozenset[str] = frozenset()

    @classmethod
    def of(
        cls,
        completed: Iterable[str] | None = None,
        planned: Iterable[str] | None = None,
    ) -> "CompletionState":
        return cls(
            completed_courses=frozenset(c for c in (completed or []) if c),
            planned_courses=frozenset(c for c in (planned or []) if c),
        )

    def projected(self) -> "CompletionState":
        """Planned courses counted as completed."""
        return CompletionState(
            completed_courses=self.completed_courses | self.planned_courses,
            planned_courses=frozenset(),
        )


def requirement_key(node: RequirementNode) -> str | None:
    if node.code:
        return node.code
    if node.kind == NodeKind.FLEXIBLE and node.text:
        return node.text
    return None


# ── JSON load boundary ───────────────────────────────────────────────────────

_KIND_BY_NAME = {kind.value: kind for kind in NodeKind if kind != NodeKind.UNKNOWN}


def _as_int(value: Any) -> int | None:
    if value is None or isinstance(value, bool):
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def _as_str(value: Any) -> str | None:
    if value is None:
        return None
    value = str(value).strip()
    return value or None


def parse_node(payload: Any) -> RequirementNode:
    if isinstance(payload, str):
        return RequirementNode(kind=NodeKind.REGULAR, code=_as_str(payload))
    if not isinstance(payload, dict):
        return RequirementNode(kind=NodeKind.UNKNOWN, raw_kind=type(payload).__name__)

    raw_kind = payload.get("courseType")
    kind = _KIND_BY_NAME.get(str(raw_kind).strip().lower(), NodeKind.UNKNOWN)

    if kind == NodeKind.SELECTION:
        raw_children = payload.get("selectionOptions") or []
    else:
        raw_children = payload.get("groupCourses") or []
    if isinstance(raw_children, list):
        children = [parse_node(child) for child in raw_children]
    else:
        children = [RequirementNode(kind=NodeKind.UNKNOWN, raw_kind=type(raw_children).__name__)]

    selection_count = None
    if kind == NodeKind.SELECTION:
        # Stored programs omit the count for "choose one" selections.
        if payload.get("selectionCount") is None:
            selection_count = 1
        else:
            selection_count = _as_int(payload.get("selectionCount"))
            if selection_count is None:
                selection_count = 0

    footnote_refs = [
        ref for ref in (_as_int(r) for r in payload.get("footnoteRefs") or []) if ref is not None
    ]

    return RequirementNode(
        kind=kind,
        code=_as_str(payload.get("code")),
        text=_as_str(payload.get("text")),
        title=_as_str(payload.get("title")),
        credits=_as_int(payload.get("credits")),
        is_option=bool(payload.get("isOption", False)),
        group_id=_as_str(payload.get("groupId")),
        footnote_refs=footnote_refs,
        children=children,
        selection_count=selection_count,
        raw_kind=None if raw_kind is None else str(raw_kind),
    )


def _category(
    name: str,
    raw_courses: Any,
    min_credits: Any,
    issues: list[LoadIssue],
) -> RequirementCategory:
    courses: list[RequirementNode] = []
    if isinstance(raw_courses, list):
        courses = [parse_node(item) for item in raw_courses]
    elif raw_courses is not None:
        issues.append(
            LoadIssue(
                kind="invalid_courses",
                message=f"courses of category {name!r} is a {type(raw_courses).__name__}, not a list",
            )
        )
    return RequirementCategory(name=name, courses=courses, min_credits=_as_int(min_credits))


def parse_category(payload: dict, issues: list[LoadIssue] | None = None) -> RequirementCategory:
    name = payload.get("name") or payload.get("title") or ""
    return _category(
        str(name),
        payload.get("courses"),
        payload.get("minCredits"),
        issues if issues is not None else [],
    )


def parse_categories(requirements: Any, issues: list[LoadIssue]) -> list[RequirementCategory]:
    """Read stored requirements into categories.

    Two shapes are stored: a list of category objects, and a mapping of
    category name to its course list.
    """
    if requirements is None:
        return []
    if isinstance(requirements, dict):
        return [
            _category(str(name), courses, None, issues)
            for name, courses in requirements.items()
        ]
    if not isinstance(requirements, list):
        issues.append(
            LoadIssue(
                kind="invalid_requirements",
                message=f"requirements is a {type(requirements).__name__}, not a list or mapping",
            )
        )
        return []

    categories: list[RequirementCategory] = []
    for position, item in enumerate(requirements):
        if isinstance(item, dict):
            categories.append(parse_category(item, issues))
        else:
            issues.append(
                LoadIssue(
                    kind="invalid_category",
                    message=f"category at position {position} is a {type(item).__name__}: {item!r}",
                )
            )
    return categories


def parse_footnotes(payload: Any) -> list[Footnote]:
    # Some rows store a free-text note instead of a list.
    if not isinstance(payload, list):
        return []
    footnotes: list[Footnote] = []
    for item in payload:
        if not isinstance(item, dict):
            continue
        number = _as_int(item.get("number", item.get("id")))
        if number is None:
            continue
        footnotes.append(Footnote(number=number, text=str(item.get("text") or "")))
    return footnotes


def parse_program(
    name: str,
    requirements: Any,
    total_credits: int,
    footnotes: Any = None,
    program_type: str = "degree",
) -> Program:
    issues: list[LoadIssue] = []
    categories = parse_categories(requirements, issues)
    return Program(
        name=name,
        total_credits=total_credits,
        categories=categories,
        footnotes=parse_footnotes(footnotes),
        program_type=program_type,
        issues=issues,
    )
