"""Filtering and ordering applied to a franchise's nodes before display."""

from __future__ import annotations

from collections.abc import Iterable

from franchise_mapper.models.franchise_models import FranchiseNode, SortMode, ViewPolicy


def year_sort_key(node: FranchiseNode) -> tuple[int, int]:
    return (node.year, node.id)


def title_sort_key(node: FranchiseNode) -> tuple[str, str, int]:
    """Case-insensitive title order; exact title then id break ties."""
    title = node.title.best()
    return (title.casefold(), title, node.id)


def apply_view_policy(nodes: Iterable[FranchiseNode], policy: ViewPolicy | None = None) -> list[FranchiseNode]:
    policy = policy or ViewPolicy()
    hidden = set(policy.hidden_ids)
    formats = set(policy.formats) if policy.formats is not None else None

    kept = [
        n for n in nodes
        if n.id not in hidden and (formats is None or n.format in formats)
    ]
    key = title_sort_key if policy.sort == SortMode.TITLE else year_sort_key
    return sorted(kept, key=key)
