from __future__ import annotations

import logging
from typing import Dict, List, Optional, Sequence

from graph.base import DocumentGraph, Node
from inbox_sync.models import CategoryMapping
from storage.synced_storage import SyncedStorage

logger = logging.getLogger(__name__)

CATEGORY_STORAGE_KEY = "categoryRemIds"
DEFAULT_CATEGORIES: List[str] = ["Tasks", "Ideas", "People", "Admin", "Inbox"]


def resolve_category_ids(graph: DocumentGraph, names: Sequence[str]) -> CategoryMapping:
    ids: Dict[str, str] = {}
    for name in names:
        node = graph.find_by_name(name)
        if node is None:
            logger.info(f"Category '{name}' not found in graph")
            continue
        ids[name.lower()] = node.id
    return CategoryMapping(ids=ids)


def load_category_mapping(
    storage: SyncedStorage,
    graph: DocumentGraph,
    names: Sequence[str] = DEFAULT_CATEGORIES,
) -> CategoryMapping:
    """Return the cached mapping, auto-configuring it on first use.

    An empty resolution is not persisted so the next activation retries.
    """
    cached = storage.get(CATEGORY_STORAGE_KEY)
    if isinstance(cached, dict) and cached:
        return CategoryMapping(ids=cached)

    mapping = resolve_category_ids(graph, names)
    if not mapping.is_empty():
        storage.set(CATEGORY_STORAGE_KEY, mapping.ids)
        logger.info(f"Auto-configured {len(mapping.ids)} categories")
    return mapping


def re_resolve_categories(
    storage: SyncedStorage,
    graph: DocumentGraph,
    names: Sequence[str] = DEFAULT_CATEGORIES,
) -> CategoryMapping:
    """Resolve all names again and overwrite the cache when anything resolved."""
    mapping = resolve_category_ids(graph, names)
    if not mapping.is_empty():
        storage.set(CATEGORY_STORAGE_KEY, mapping.ids)
    return mapping


class CategoryResolver:
    def __init__(self, graph: DocumentGraph, mapping: CategoryMapping):
        self.graph = graph
        self.mapping = mapping

    def recognized_tag_ids(self) -> set:
        return self.mapping.tag_ids()

    def resolve(self, name: str) -> Optional[Node]:
        if not name:
            return None
        node_id = self.mapping.get(name)
        if node_id:
            node = self.graph.find_by_id(node_id)
            if node is not None:
                return node
            logger.warning(f"Cached id for category '{name}' is stale")
        return self.graph.find_by_name(name)

    def resolve_or_create(self, name: str) -> Node:
        node = self.resolve(name)
        if node is not None:
            return node
        node = self.graph.create_node()
        self.graph.set_text(node.id, [name])
        logger.info(f"Created category node '{name}' ({node.id})")
        return node
