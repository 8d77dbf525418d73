from __future__ import annotations

from collections.abc import Iterable

from franchise_mapper.models.franchise_models import FranchiseNode


def select_face(nodes: Iterable[FranchiseNode]) -> FranchiseNode:
    """Pick the most popular node; ties keep the first one encountered."""
    face: FranchiseNode | None = None
    for node in nodes:
        if face is None or node.popularity > face.popularity:
            face = node
    if face is None:
        raise ValueError("Cannot select a face from an empty node set")
    return face
