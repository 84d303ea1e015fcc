from __future__ import annotations

import uuid
from typing import Dict, List, Optional

from graph.base import DocumentGraph, GraphError, Node, RichText


class InMemoryGraph(DocumentGraph):
    """Dictionary-backed document graph.

    Children keep insertion order. ``today_id`` and ``focused_id`` point at
    the nodes returned by ``todays_doc`` and ``focused_container``.
    """

    def __init__(self):
        self.nodes: Dict[str, Node] = {}
        self.today_id: Optional[str] = None
        self.focused_id: Optional[str] = None

    def _get(self, node_id: str) -> Node:
        node = self.nodes.get(node_id)
        if node is None:
            raise GraphError(f"Node {node_id} not found")
        return node

    def add(self, text, parent_id: Optional[str] = None) -> Node:
        """Create a node with text (str or rich segments) in one call."""
        node = self.create_node()
        self.set_text(node.id, [text] if isinstance(text, str) else list(text))
        if parent_id is not None:
            self.set_parent(node.id, parent_id)
        return node

    def find_by_id(self, node_id: str) -> Optional[Node]:
        return self.nodes.get(node_id)

    def find_by_name(self, name: str) -> Optional[Node]:
        for node in self.nodes.values():
            if node.parent_id is None and node.plain_text == name:
                return node
        return None

    def create_node(self) -> Node:
        node = Node(id=uuid.uuid4().hex)
        self.nodes[node.id] = node
        return node

    def set_text(self, node_id: str, text: RichText) -> None:
        self._get(node_id).text = list(text)

    def set_parent(self, node_id: str, parent_id: str) -> None:
        self._get(parent_id)
        self._get(node_id).parent_id = parent_id

    def add_tag(self, node_id: str, tag_id: str) -> None:
        self._get(tag_id)
        node = self._get(node_id)
        if tag_id not in node.tag_ids:
            node.tag_ids.append(tag_id)

    def set_todo(self, node_id: str, is_todo: bool) -> None:
        self._get(node_id).is_todo = is_todo

    def list_children(self, node_id: str) -> List[Node]:
        self._get(node_id)
        return [n for n in self.nodes.values() if n.parent_id == node_id]

    def list_tags(self, node_id: str) -> List[str]:
        return list(self._get(node_id).tag_ids)

    def todays_doc(self) -> Optional[Node]:
        return self.nodes.get(self.today_id) if self.today_id else None

    def focused_container(self) -> Optional[Node]:
        return self.nodes.get(self.focused_id) if self.focused_id else None
