"""Rebuild a franchise's flat node set into a timeline of eras.

The timeline is a chronological spine of mainline TV entries. Every other
node is an extra, clustered under one spine entry and nested by relation
inside that era. Nodes live in a flat arena and the tree links are indices
into it, so a node can be attached at most once and never duplicated.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field

from franchise_mapper.models.franchise_models import Era, FranchiseNode, TimelineNode, ViewPolicy
from franchise_mapper.models.media_models import MediaFormat, RelationType
from franchise_mapper.services.franchise.view_policy import apply_view_policy

logger = logging.getLogger(__name__)

_CHAIN_RELATIONS = frozenset({RelationType.PREQUEL.value, RelationType.SEQUEL.value})
_PREQUEL = frozenset({RelationType.PREQUEL.value})
_SEQUEL = frozenset({RelationType.SEQUEL.value})

# A TV entry with a prequel and one of these is a variant, not mainline.
_VARIANT_RELATIONS = frozenset({
    RelationType.SPIN_OFF.value,
    RelationType.SIDE_STORY.value,
    RelationType.ALTERNATIVE.value,
})

_NESTING_RELATIONS = frozenset({
    RelationType.SIDE_STORY.value,
    RelationType.ALTERNATIVE.value,
    RelationType.SPIN_OFF.value,
    RelationType.SUMMARY.value,
})
# OTHER only counts on the parent's own outbound edge.
_PARENT_NESTING_RELATIONS = _NESTING_RELATIONS | {RelationType.OTHER.value}


@dataclass
class _Slot:
    node: FranchiseNode
    parent: int | None = None
    relation_to_parent: str | None = None
    children: list[int] = field(default_factory=list)


def _edge_type(source: FranchiseNode, target: FranchiseNode, types: frozenset[str] | None = None) -> str | None:
    """Relation type of the first edge source -> target (optionally restricted to types)."""
    for edge in source.edges:
        if edge.target_id == target.id and (types is None or edge.relation_type in types):
            return edge.relation_type
    return None


def _linked(a: FranchiseNode, b: FranchiseNode) -> bool:
    return _edge_type(a, b) is not None or _edge_type(b, a) is not None


def _chronological(arena: list[_Slot], indices: Iterable[int]) -> list[int]:
    return sorted(indices, key=lambda i: (arena[i].node.year, arena[i].node.id))


def _build_spine(arena: list[_Slot]) -> list[int]:
    """Mainline TV chain, independent of the display sort order."""
    tv = _chronological(arena, (i for i, slot in enumerate(arena) if slot.node.format == MediaFormat.TV))
    if not tv:
        # No TV entry at all: the chronologically first node anchors a single era.
        return _chronological(arena, range(len(arena)))[:1]
    spine = [tv[0]]
    on_spine = set(spine)

    def next_in_chain(tail: int) -> int | None:
        tail_node = arena[tail].node
        return next(
            (
                i for i in tv
                if i not in on_spine and (
                    _edge_type(tail_node, arena[i].node, _CHAIN_RELATIONS)
                    or _edge_type(arena[i].node, tail_node, _CHAIN_RELATIONS)
                )
            ),
            None,
        )

    def prequel_of(head: int) -> int | None:
        head_node = arena[head].node
        return next(
            (
                i for i in tv
                if i not in on_spine and (
                    _edge_type(head_node, arena[i].node, _PREQUEL)
                    or _edge_type(arena[i].node, head_node, _SEQUEL)
                )
            ),
            None,
        )

    # Walk the chain forward from the head, then back through its prequels.
    while True:
        nxt = next_in_chain(spine[-1])
        if nxt is None:
            break
        spine.append(nxt)
        on_spine.add(nxt)
    while True:
        prev = prequel_of(spine[0])
        if prev is None:
            break
        spine.insert(0, prev)
        on_spine.add(prev)

    # Sweep: absorb TV entries that name a spine member as their prequel.
    for i in tv:
        if i in on_spine:
            continue
        node = arena[i].node
        if any(e.relation_type in _VARIANT_RELATIONS for e in node.edges):
            continue
        if any(_edge_type(node, arena[s].node, _PREQUEL) for s in spine):
            spine.append(i)
            on_spine.add(i)

    # Stable: equal years keep chain order.
    spine.sort(key=lambda i: arena[i].node.year)
    return spine


def _nearest_spine(arena: list[_Slot], extra: int, candidates: list[int]) -> int:
    """Latest candidate released at or before the extra, else the latest candidate.

    Candidates are in spine order, so equal years resolve to the earlier spine entry.
    """
    year = arena[extra].node.year
    at_or_before = [s for s in candidates if arena[s].node.year <= year]
    pool = at_or_before or candidates
    return max(pool, key=lambda s: arena[s].node.year)


def _assign_extras(arena: list[_Slot], spine: list[int], extras: list[int]) -> dict[int, int]:
    """Map every extra to exactly one spine entry."""
    assignment: dict[int, int] = {}

    for e in extras:
        candidates = [s for s in spine if _linked(arena[e].node, arena[s].node)]
        if candidates:
            assignment[e] = _nearest_spine(arena, e, candidates)

    # Two-hop: inherit the era of a directly assigned sibling linked to this extra.
    direct = _chronological(arena, (x for x in extras if x in assignment))
    for e in extras:
        if e in assignment:
            continue
        sibling = next((x for x in direct if _linked(arena[e].node, arena[x].node)), None)
        if sibling is not None:
            assignment[e] = assignment[sibling]
        else:
            assignment[e] = spine[0]

    return assignment


def _nest(arena: list[_Slot], members: list[int]) -> list[int]:
    """Nest an era's extras under each other; returns the top-level indices.

    Parents are scanned in ascending id order and the first match wins. Only
    entries ordered strictly before the child by (year, id) qualify as
    parents, which keeps the nesting acyclic.
    """
    by_id = sorted(members, key=lambda i: arena[i].node.id)

    for child in members:
        child_node = arena[child].node
        child_rank = (child_node.year, child_node.id)
        for parent in by_id:
            if parent == child:
                continue
            parent_node = arena[parent].node
            if (parent_node.year, parent_node.id) >= child_rank:
                continue
            relation = (
                _edge_type(parent_node, child_node, _PARENT_NESTING_RELATIONS)
                or _edge_type(child_node, parent_node, _NESTING_RELATIONS)
            )
            if relation is None:
                continue
            arena[child].parent = parent
            arena[child].relation_to_parent = relation
            break

    for child in members:
        parent = arena[child].parent
        if parent is not None:
            arena[parent].children.append(child)

    return [i for i in members if arena[i].parent is None]


def _materialize(arena: list[_Slot], index: int) -> TimelineNode:
    slot = arena[index]
    return TimelineNode(
        **slot.node.model_dump(exclude={"children", "relation_to_parent"}),
        children=[_materialize(arena, c) for c in slot.children],
        relation_to_parent=slot.relation_to_parent,
    )


def assemble_eras(ordered: list[FranchiseNode]) -> list[Era]:
    """Build eras from nodes that are already filtered and sorted."""
    if not ordered:
        return []

    seen: set[int] = set()
    for node in ordered:
        if node.id in seen:
            raise ValueError(f"Duplicate node id {node.id} in hierarchy input")
        seen.add(node.id)

    arena = [_Slot(node=n) for n in ordered]
    spine = _build_spine(arena)
    spine_set = set(spine)
    extras = [i for i in range(len(arena)) if i not in spine_set]
    assignment = _assign_extras(arena, spine, extras)

    eras = []
    for s in spine:
        members = [e for e in extras if assignment[e] == s]
        top_level = _nest(arena, members)
        eras.append(
            Era(
                main=_materialize(arena, s),
                extras=[_materialize(arena, i) for i in top_level],
            )
        )

    logger.debug("Hierarchy: %d nodes, %d eras, %d extras", len(arena), len(spine), len(extras))
    return eras


def build_hierarchy(nodes: Iterable[FranchiseNode], policy: ViewPolicy | None = None) -> list[Era]:
    """Apply the view policy, then build the era timeline."""
    return assemble_eras(apply_view_policy(nodes, policy))
