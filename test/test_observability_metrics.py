import importlib

from fastapi.testclient import TestClient
from prometheus_client import REGISTRY


def _import_app():
    # Import lazily so environment variables (if any) can be set before import.
    mod = importlib.import_module("api.main")
    return mod


def test_metrics_endpoint_exposes_prometheus_text() -> None:
    mod = _import_app()
    client = TestClient(mod.app)

    r = client.get("/metrics")
    assert r.status_code == 200
    assert "text/plain" in r.headers.get("content-type", "")
    body = r.text
    assert "inbox_pending_items" in body
    assert "inbox_server_online" in body
    assert "inbox_items_skipped_total" in body


def test_skip_increments_counter(fake_server, server_client, graph, storage) -> None:
    mod = _import_app()
    state = importlib.import_module("api.state")
    state.configure(graph_=graph, storage_=storage, client_=server_client)
    client = TestClient(mod.app)

    fake_server.add_item(5, "Noise")
    client.get("/inbox")
    client.post("/inbox/5/skip")

    m = client.get("/metrics")
    lines = m.text.splitlines()
    sample = [l for l in lines if l.startswith("inbox_items_skipped_total ")]
    assert sample and float(sample[0].split(" ", 1)[1]) >= 1.0


def test_pending_gauge_matches_inbox_count(fake_server, server_client, graph, storage) -> None:
    mod = _import_app()
    state = importlib.import_module("api.state")
    state.configure(graph_=graph, storage_=storage, client_=server_client)
    client = TestClient(mod.app)

    fake_server.add_item(1, "one")
    fake_server.add_item(2, "two")
    count = client.get("/inbox").json()["count"]

    depth = None
    for line in client.get("/metrics").text.splitlines():
        if line.startswith("inbox_pending_items "):
            depth = line.split(" ", 1)[1].strip()
            break

    assert depth is not None, "inbox_pending_items metric not found"
    assert int(float(depth)) == count


def test_classify_command_counts_classified_notes(fake_server, server_client, graph, storage) -> None:
    mod = _import_app()
    state = importlib.import_module("api.state")
    state.configure(graph_=graph, storage_=storage, client_=server_client)
    state.activate_plugin()
    client = TestClient(mod.app)

    graph.add("Draft newsletter", parent_id=graph.today_id)
    before = REGISTRY.get_sample_value("notes_classified_total", {"status": "done"}) or 0.0

    r = client.post("/commands/classify")
    assert r.status_code == 200

    after = REGISTRY.get_sample_value("notes_classified_total", {"status": "done"})
    assert after == before + 1


def test_import_all_counts_each_outcome(fake_server, server_client, graph, storage) -> None:
    mod = _import_app()
    state = importlib.import_module("api.state")
    state.configure(graph_=graph, storage_=storage, client_=server_client)
    client = TestClient(mod.app)

    fake_server.add_item(1, "one")
    fake_server.add_item(2, "two")
    fake_server.fail_mark.add(2)
    ok_before = REGISTRY.get_sample_value("inbox_items_imported_total", {"status": "ok"}) or 0.0
    err_before = REGISTRY.get_sample_value("inbox_items_imported_total", {"status": "error"}) or 0.0

    client.get("/inbox")
    client.post("/inbox/import-all")

    assert REGISTRY.get_sample_value("inbox_items_imported_total", {"status": "ok"}) == ok_before + 1
    assert REGISTRY.get_sample_value("inbox_items_imported_total", {"status": "error"}) == err_before + 1
