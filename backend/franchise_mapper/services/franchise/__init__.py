"""Franchise crawling and timeline hierarchy reconstruction."""

from franchise_mapper.services.franchise.crawler import crawl
from franchise_mapper.services.franchise.face_selector import select_face
from franchise_mapper.services.franchise.hierarchy import assemble_eras, build_hierarchy
from franchise_mapper.services.franchise.resolver import get_or_resolve_franchise, resolve_franchise
from franchise_mapper.services.franchise.root_resolver import resolve_root

__all__ = [
    "assemble_eras",
    "build_hierarchy",
    "crawl",
    "get_or_resolve_franchise",
    "resolve_franchise",
    "resolve_root",
    "select_face",
]
