from __future__ import annotations

import logging
import threading
from enum import Enum
from typing import List, Optional

from categories.resolver import CategoryResolver
from classification.server_client import ClassificationServerClient, ClassificationServerError
from graph.base import DocumentGraph, GraphError, Node
from inbox_sync.models import ImportOutcome, QueueItem
from plugin.notifier import Notifier

logger = logging.getLogger(__name__)

FALLBACK_FOLDER = "Inbox"


class ImportDestination(str, Enum):
    CATEGORY = "category"
    DAILY = "daily"


class InboxImporter:
    """Materializes queued inbox items as nodes and acknowledges them.

    ``items`` is the local pending list. An item leaves it only after the
    server accepted ``mark-processed``, so a failed import can be retried.
    Every step runs under ``lock``; share it with other workflows that write
    to the same graph.
    """

    def __init__(
        self,
        graph: DocumentGraph,
        client: ClassificationServerClient,
        resolver: CategoryResolver,
        notifier: Notifier,
        destination: ImportDestination = ImportDestination.CATEGORY,
        lock: Optional[threading.RLock] = None,
    ):
        self.graph = graph
        self.client = client
        self.resolver = resolver
        self.notifier = notifier
        self.destination = ImportDestination(destination)
        self.items: List[QueueItem] = []
        self.error: Optional[str] = None
        self.lock = lock or threading.RLock()

    def refresh(self) -> List[QueueItem]:
        with self.lock:
            self.error = None
            try:
                self.items = self.client.list_unprocessed()
            except ClassificationServerError as e:
                logger.error(f"Failed to fetch inbox items: {e}")
                self.error = str(e)
                self.notifier.error(f"Failed to fetch items: {e}")
            return self.items

    def find(self, row_number: int) -> Optional[QueueItem]:
        for item in self.items:
            if item.row_number == row_number:
                return item
        return None

    def _remove(self, row_number: int) -> None:
        self.items = [i for i in self.items if i.row_number != row_number]

    def _parent_for(self, item: QueueItem, folder: str) -> Node:
        if self.destination == ImportDestination.DAILY:
            doc = self.graph.todays_doc()
            if doc is None:
                raise GraphError("No Daily Doc found for today")
            return doc
        return self.resolver.resolve_or_create(folder)

    def _materialize(self, item: QueueItem) -> Node:
        folder = item.target_folder or FALLBACK_FOLDER
        parent = self._parent_for(item, folder)

        node = self.graph.create_node()
        self.graph.set_text(node.id, [item.raw_input])
        self.graph.set_parent(node.id, parent.id)

        if self.destination == ImportDestination.CATEGORY:
            category: Optional[Node] = parent
        else:
            category = self.resolver.resolve(folder)
        if category is not None:
            self.graph.add_tag(node.id, category.id)

        if item.is_task:
            self.graph.set_todo(node.id, True)
        return node

    def import_item(self, item: QueueItem) -> ImportOutcome:
        with self.lock:
            if self.find(item.row_number) is None:
                logger.info(f"Row {item.row_number} is no longer pending")
                return ImportOutcome(
                    row_number=item.row_number, ok=False, error="Item is no longer pending"
                )
            try:
                node = self._materialize(item)
                self.client.mark_processed(item.row_number, node.id)
            except (ClassificationServerError, GraphError) as e:
                logger.error(f"Failed to import row {item.row_number}: {e}")
                self.error = f"Failed to import item: {e}"
                self.notifier.error(self.error)
                return ImportOutcome(row_number=item.row_number, ok=False, error=str(e))

            self._remove(item.row_number)
        logger.info(f"Imported row {item.row_number} as node {node.id}")
        return ImportOutcome(row_number=item.row_number, ok=True, rem_id=node.id)

    def import_all(self) -> List[ImportOutcome]:
        """Import every pending item in order, one at a time.

        Not transactional: earlier imports stay committed when a later one
        fails, and a failure does not stop the remaining items.
        """
        with self.lock:
            outcomes = [self.import_item(item) for item in list(self.items)]
            failed = sum(1 for o in outcomes if not o.ok)
            if outcomes:
                self.notifier.toast(
                    f"Imported {len(outcomes) - failed} of {len(outcomes)} items"
                )
            return outcomes

    def skip(self, item: QueueItem) -> bool:
        with self.lock:
            if self.find(item.row_number) is None:
                return False
            try:
                self.client.mark_skipped(item.row_number)
            except ClassificationServerError as e:
                logger.error(f"Failed to skip row {item.row_number}: {e}")
                self.error = f"Failed to skip item: {e}"
                self.notifier.error(self.error)
                return False
            self._remove(item.row_number)
            return True
