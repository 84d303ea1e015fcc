from __future__ import annotations
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, List, Optional, Union

RichText = List[Union[str, Any]]


class GraphError(Exception):
    """A host document graph operation failed."""


def plain_text(segments: Optional[RichText]) -> str:
    """Concatenate the string segments of a rich-text value.

    Non-string segments (references, images, formatting objects) contribute
    nothing.
    """
    if not segments:
        return ""
    return "".join(s if isinstance(s, str) else "" for s in segments)


@dataclass
class Node:
    id: str
    text: RichText = field(default_factory=list)
    parent_id: Optional[str] = None
    tag_ids: List[str] = field(default_factory=list)
    is_todo: bool = False

    @property
    def plain_text(self) -> str:
        return plain_text(self.text)


class DocumentGraph(ABC):
    """Narrow view of the host application's document graph."""

    @abstractmethod
    def find_by_id(self, node_id: str) -> Optional[Node]:
        raise NotImplementedError

    @abstractmethod
    def find_by_name(self, name: str) -> Optional[Node]:
        """Top-level node whose plain text equals ``name``."""
        raise NotImplementedError

    @abstractmethod
    def create_node(self) -> Node:
        raise NotImplementedError

    @abstractmethod
    def set_text(self, node_id: str, text: RichText) -> None:
        raise NotImplementedError

    @abstractmethod
    def set_parent(self, node_id: str, parent_id: str) -> None:
        raise NotImplementedError

    @abstractmethod
    def add_tag(self, node_id: str, tag_id: str) -> None:
        raise NotImplementedError

    @abstractmethod
    def set_todo(self, node_id: str, is_todo: bool) -> None:
        raise NotImplementedError

    @abstractmethod
    def list_children(self, node_id: str) -> List[Node]:
        raise NotImplementedError

    @abstractmethod
    def list_tags(self, node_id: str) -> List[str]:
        raise NotImplementedError

    @abstractmethod
    def todays_doc(self) -> Optional[Node]:
        raise NotImplementedError

    @abstractmethod
    def focused_container(self) -> Optional[Node]:
        raise NotImplementedError
