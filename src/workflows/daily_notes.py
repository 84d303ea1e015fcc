from __future__ import annotations

import logging
import threading
from enum import Enum
from typing import List, Optional

from categories.resolver import CategoryResolver
from classification.server_client import ClassificationServerClient, ClassificationServerError
from graph.base import DocumentGraph, GraphError, Node
from inbox_sync.models import ProcessResult, ProcessStatus, RunSummary
from plugin.notifier import Notifier

logger = logging.getLogger(__name__)

ALREADY_TAGGED = "already tagged"
EMPTY = "empty"


class TargetDocument(str, Enum):
    DAILY = "daily"
    FOCUSED = "focused"


_MISSING_PARENT = {
    TargetDocument.DAILY: "No Daily Doc found for today",
    TargetDocument.FOCUSED: "No focused document found",
}
_NO_CHILDREN = {
    TargetDocument.DAILY: "No items in today's Daily Doc",
    TargetDocument.FOCUSED: "No items in the focused document",
}


class DailyNotesClassifier:
    """Classify and tag every uncategorized child of the target document.

    Children are handled in graph order, one classification call at a time.
    A failure on one child is recorded on its ProcessResult and the run moves
    on; nothing is retried. Runs hold ``lock`` for their whole duration.
    """

    def __init__(
        self,
        graph: DocumentGraph,
        client: ClassificationServerClient,
        resolver: CategoryResolver,
        notifier: Notifier,
        lock: Optional[threading.RLock] = None,
    ):
        self.graph = graph
        self.client = client
        self.resolver = resolver
        self.notifier = notifier
        self.lock = lock or threading.RLock()

    def _target(self, target: TargetDocument):
        if target == TargetDocument.FOCUSED:
            return self.graph.focused_container()
        return self.graph.todays_doc()

    def run(self, target: TargetDocument = TargetDocument.DAILY) -> RunSummary:
        target = TargetDocument(target)
        self.notifier.toast("Processing notes...")
        try:
            with self.lock:
                return self._run(target)
        except Exception:
            logger.exception("Error processing notes")
            self.notifier.error("Error processing notes")
            return RunSummary(message="Error processing notes")

    def _run(self, target: TargetDocument) -> RunSummary:
        parent = self._target(target)
        if parent is None:
            self.notifier.toast(_MISSING_PARENT[target])
            return RunSummary(message=_MISSING_PARENT[target])

        children = self.graph.list_children(parent.id)
        if not children:
            self.notifier.toast(_NO_CHILDREN[target])
            return RunSummary(message=_NO_CHILDREN[target])

        results: List[ProcessResult] = [
            ProcessResult(rem_id=c.id, text=ProcessResult.snippet(c.plain_text))
            for c in children
        ]
        summary = RunSummary(results=results)
        recognized = self.resolver.recognized_tag_ids()

        for child, result in zip(children, summary.results):
            result.status = ProcessStatus.PROCESSING
            try:
                skipped = self._process_child(child, result, recognized)
            except (ClassificationServerError, GraphError) as e:
                logger.warning(f"Failed to classify node {child.id}: {e}")
                result.status = ProcessStatus.ERROR
                result.error = str(e)
                summary.errors += 1
                continue

            result.status = ProcessStatus.DONE
            if skipped:
                summary.skipped += 1
            else:
                summary.processed += 1

        summary.message = f"Done! Processed: {summary.processed}, Skipped: {summary.skipped}"
        if summary.errors:
            summary.message += f", Errors: {summary.errors}"
        self.notifier.toast(summary.message)
        return summary

    def _process_child(self, child: Node, result: ProcessResult, recognized: set) -> bool:
        """Classify and tag one child. Returns True when it was skipped."""
        tags = self.graph.list_tags(child.id)
        if any(t in recognized for t in tags):
            result.classification = ALREADY_TAGGED
            return True

        text = child.plain_text
        if not text.strip():
            result.classification = EMPTY
            return True

        classified = self.client.classify(text)
        result.classification = ", ".join(classified.categories)
        result.target_folder = ", ".join(classified.folders)
        result.confidence = classified.confidence

        for folder in classified.folders:
            category = self.resolver.resolve(folder)
            if category is None:
                logger.info(f"No category node for folder '{folder}', tag skipped")
                continue
            self.graph.add_tag(child.id, category.id)
            result.tags_applied.append(category.id)

        if classified.is_actionable:
            self.graph.set_todo(child.id, True)
        return False
