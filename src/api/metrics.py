from prometheus_client import Counter, Gauge, REGISTRY


# we check if they are already registered to avoid errors during hot reloads or test runs
def get_or_create_metric(name, documentation, metric_type, **kwargs):
    try:
        return metric_type(name, documentation, **kwargs)
    except ValueError:
        # If it already exists, retrieve it from the registry
        return REGISTRY._names_to_collectors[name]


ITEMS_IMPORTED_TOTAL = get_or_create_metric(
    "inbox_items_imported_total",
    "Inbox items imported into the document graph",
    Counter,
    labelnames=["status"],
)

ITEMS_SKIPPED_TOTAL = get_or_create_metric(
    "inbox_items_skipped_total", "Inbox items skipped without import", Counter
)

NOTES_CLASSIFIED_TOTAL = get_or_create_metric(
    "notes_classified_total",
    "Document children handled by the notes classifier",
    Counter,
    labelnames=["status"],
)

INBOX_PENDING = get_or_create_metric(
    "inbox_pending_items", "Unprocessed items reported by the inbox server", Gauge
)

SERVER_ONLINE = get_or_create_metric(
    "inbox_server_online", "1 when the last inbox poll reached the server", Gauge
)
