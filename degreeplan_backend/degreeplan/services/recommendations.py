from dataclasses import dataclass

from degreeplan.services.evaluator import (
    Diagnostics,
    category_progress,
    is_satisfied,
    node_credits,
)
from degreeplan.services.requirement_tree import (
    GROUP_KINDS,
    CompletionState,
    NodeKind,
    Program,
    RequirementNode,
)


@dataclass
class CatalogEntry:
    code: str
    title: str | None = None
    credits: int | None = None


@dataclass
class Recommendation:
    course_code: str
    course_title: str | None
    credits: int
    category: str
    reason: str


def _open_courses(
    node: RequirementNode,
    state: CompletionState,
    diagnostics: Diagnostics,
) -> list[RequirementNode]:
    """Regular courses under ``node`` that still need to be taken."""
    if is_satisfied(node, state, diagnostics):
        return []
    if node.kind == NodeKind.REGULAR:
        return [node]
    if node.kind not in GROUP_KINDS:
        return []
    out: list[RequirementNode] = []
    for child in node.children:
        out.extend(_open_courses(child, state, diagnostics))
    return out


def prerequisites_met(
    code: str,
    prereqs: dict[str, list[set[str]]],
    completed: frozenset[str],
) -> bool:
    """Every prerequisite group of ``code`` has at least one completed course."""
    return all(not group.isdisjoint(completed) for group in prereqs.get(code, []))


def recommend_courses(
    program: Program,
    state: CompletionState,
    prereqs: dict[str, list[set[str]]],
    catalog: dict[str, CatalogEntry],
    limit: int = 10,
    diagnostics: Diagnostics | None = None,
) -> list[Recommendation]:
    diagnostics = diagnostics or Diagnostics()
    recommendations: list[Recommendation] = []
    recommended: set[str] = set()

    for category in program.categories:
        if category_progress(category, state, diagnostics).is_complete:
            continue
        for top in category.courses:
            for node in _open_courses(top, state, diagnostics):
                code = node.code
                if code in recommended or code in state.planned_courses:
                    continue
                if not prerequisites_met(code, prereqs, state.completed_courses):
                    continue
                entry = catalog.get(code)
                credits = entry.credits if entry and entry.credits else node_credits(node)
                recommendations.append(
                    Recommendation(
                        course_code=code,
                        course_title=(entry.title if entry else None) or node.title,
                        credits=credits,
                        category=category.name,
                        reason=f"Required for {category.name}",
                    )
                )
                recommended.add(code)
                if len(recommendations) >= limit:
                    return recommendations
    return recommendations
