import logging
import os
import threading
from typing import List, Optional

from api.metrics import (
    INBOX_PENDING,
    ITEMS_IMPORTED_TOTAL,
    ITEMS_SKIPPED_TOTAL,
    NOTES_CLASSIFIED_TOTAL,
    SERVER_ONLINE,
)
from categories.resolver import (
    CATEGORY_STORAGE_KEY,
    CategoryResolver,
    load_category_mapping,
    re_resolve_categories,
)
from classification.server_client import DEFAULT_SERVER_URL, ClassificationServerClient
from graph.base import DocumentGraph
from graph.memory_graph import InMemoryGraph
from inbox_sync.models import CategoryMapping, ImportOutcome, QueueItem, RunSummary
from plugin.notifier import Notifier
from plugin.registry import PluginRegistry, activate
from storage.synced_storage import SyncedStorage
from workflows.daily_notes import DailyNotesClassifier, TargetDocument
from workflows.inbox_import import ImportDestination, InboxImporter
from workflows.inbox_poller import InboxPoller, InboxStatus

logger = logging.getLogger(__name__)

# Config
INBOX_SERVER_URL = os.getenv("INBOX_SERVER_URL", DEFAULT_SERVER_URL).strip()
INBOX_POLL_INTERVAL_S = float(os.getenv("INBOX_POLL_INTERVAL_S", "600"))
INBOX_POLL_TIMEOUT_S = float(os.getenv("INBOX_POLL_TIMEOUT_S", "3.0"))
PLUGIN_STORAGE_PATH = os.getenv("PLUGIN_STORAGE_PATH", "data/plugin_storage.json")
INBOX_IMPORT_DESTINATION = os.getenv("INBOX_IMPORT_DESTINATION", "category").strip().lower()
INBOX_POLLER_ENABLED = os.getenv("INBOX_POLLER_ENABLED", "true").lower() in {
    "1",
    "true",
    "yes",
}


# Last pending count seen by the poller
_last_polled_count: Optional[int] = None


def on_inbox_status(status: InboxStatus) -> None:
    """Publish poll results and reload the pending list when the count moved."""
    global _last_polled_count
    SERVER_ONLINE.set(1 if status.online else 0)
    if not status.online or status.count is None:
        return
    INBOX_PENDING.set(status.count)
    if status.count != _last_polled_count:
        _last_polled_count = status.count
        importer.refresh()


# Host capabilities (replaced at startup or in tests via configure())
graph: DocumentGraph = InMemoryGraph()
storage = SyncedStorage(PLUGIN_STORAGE_PATH)
client = ClassificationServerClient(INBOX_SERVER_URL)
notifier = Notifier()

# Workflows built by configure()
category_mapping = CategoryMapping()
resolver: CategoryResolver
classifier: DailyNotesClassifier
importer: InboxImporter
registry: PluginRegistry
poller = InboxPoller(
    INBOX_SERVER_URL,
    interval_s=INBOX_POLL_INTERVAL_S,
    timeout_s=INBOX_POLL_TIMEOUT_S,
    on_status=on_inbox_status,
)

# Results of the most recent classifier run (UI-only, discarded on restart)
last_run: Optional[RunSummary] = None


def configure(
    graph_: Optional[DocumentGraph] = None,
    storage_: Optional[SyncedStorage] = None,
    client_: Optional[ClassificationServerClient] = None,
    destination: Optional[str] = None,
) -> None:
    """(Re)build every workflow around the given host capabilities."""
    global graph, storage, client, notifier, category_mapping
    global resolver, classifier, importer, registry, last_run, workflow_lock
    global _last_polled_count

    if graph_ is not None:
        graph = graph_
    if storage_ is not None:
        storage = storage_
    if client_ is not None:
        client = client_

    # one lock for every workflow that writes to the graph
    workflow_lock = threading.RLock()
    notifier = Notifier()
    category_mapping = CategoryMapping()
    resolver = CategoryResolver(graph, category_mapping)
    classifier = DailyNotesClassifier(graph, client, resolver, notifier, lock=workflow_lock)
    importer = InboxImporter(
        graph,
        client,
        resolver,
        notifier,
        destination=ImportDestination(destination or INBOX_IMPORT_DESTINATION),
        lock=workflow_lock,
    )
    registry = PluginRegistry(notifier)
    last_run = None
    _last_polled_count = None


def run_classifier(target: TargetDocument = TargetDocument.DAILY) -> RunSummary:
    global last_run
    last_run = classifier.run(target)
    for result in last_run.results:
        NOTES_CLASSIFIED_TOTAL.labels(status=result.status.value).inc()
    return last_run


def _count_imports(outcomes: List[ImportOutcome]) -> None:
    for outcome in outcomes:
        ITEMS_IMPORTED_TOTAL.labels(status="ok" if outcome.ok else "error").inc()


def import_item(item: QueueItem) -> ImportOutcome:
    outcome = importer.import_item(item)
    _count_imports([outcome])
    return outcome


def import_all() -> List[ImportOutcome]:
    outcomes = importer.import_all()
    _count_imports(outcomes)
    return outcomes


def skip_item(item: QueueItem) -> bool:
    skipped = importer.skip(item)
    if skipped:
        ITEMS_SKIPPED_TOTAL.inc()
    return skipped


def load_categories() -> CategoryMapping:
    global category_mapping
    category_mapping = load_category_mapping(storage, graph)
    resolver.mapping = category_mapping
    return category_mapping


def refresh_categories() -> CategoryMapping:
    global category_mapping
    with workflow_lock:
        mapping = re_resolve_categories(storage, graph)
        if not mapping.is_empty():
            category_mapping = mapping
            resolver.mapping = mapping
    return category_mapping


def reset_categories() -> None:
    global category_mapping
    with workflow_lock:
        storage.delete(CATEGORY_STORAGE_KEY)
        category_mapping = CategoryMapping()
        resolver.mapping = category_mapping
    logger.info("Category cache cleared")


def activate_plugin() -> None:
    """Load the category cache and register widgets and commands."""
    load_categories()
    activate(registry, process_daily_notes=run_classifier)


configure()
