import json

import httpx
import pytest

from classification.server_client import (
    ClassificationServerClient,
    ClassificationServerError,
    normalize_classification,
)


def test_normalize_legacy_shape():
    r = normalize_classification({"classification": "task", "target_folder": "Tasks"})
    assert r.categories == ["task"]
    assert r.folders == ["Tasks"]
    assert r.is_task is True


def test_normalize_current_shape():
    r = normalize_classification(
        {"categories": ["idea", "admin"], "folders": ["Ideas", "Admin"], "confidence": 0.8, "is_task": False}
    )
    assert r.folders == ["Ideas", "Admin"]
    assert r.confidence == 0.8
    assert r.is_task is False


def test_normalize_null_is_task():
    r = normalize_classification({"categories": ["idea"], "folders": ["Ideas"], "is_task": None})
    assert r.is_task is False


@pytest.mark.parametrize("payload", [{"label": "x"}, ["Ideas"], None, {"folders": "Ideas"}])
def test_normalize_rejects_malformed(payload):
    with pytest.raises(ClassificationServerError):
        normalize_classification(payload)


def _client(handler):
    return ClassificationServerClient(
        "http://inbox.test/", client=httpx.Client(transport=httpx.MockTransport(handler))
    )


def test_non_2xx_raises_with_status():
    client = _client(lambda request: httpx.Response(502))
    with pytest.raises(ClassificationServerError) as exc:
        client.classify("hello")
    assert exc.value.status_code == 502


def test_network_error_raises():
    def handler(request):
        raise httpx.ConnectError("refused")

    with pytest.raises(ClassificationServerError):
        _client(handler).list_unprocessed()


def test_invalid_json_raises():
    client = _client(lambda request: httpx.Response(200, content=b"<html>"))
    with pytest.raises(ClassificationServerError):
        client.get_unprocessed()


def test_mark_processed_posts_row_and_rem_id():
    seen = {}

    def handler(request):
        seen["url"] = str(request.url)
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, json={"status": "ok"})

    _client(handler).mark_processed(12, "rem-1")

    assert seen["url"] == "http://inbox.test/mark-processed"
    assert seen["body"] == {"row_number": 12, "rem_id": "rem-1"}


def test_mark_skipped_uses_sentinel():
    seen = {}

    def handler(request):
        seen["body"] = json.loads(request.content)
        return httpx.Response(204)

    _client(handler).mark_skipped(4)
    assert seen["body"] == {"row_number": 4, "rem_id": "skipped"}


def test_get_unprocessed_parses_items(fake_server, server_client):
    fake_server.add_item(1, "Buy milk", classification="task", target_folder="Tasks")
    resp = server_client.get_unprocessed()
    assert resp.count == 1
    assert resp.items[0].raw_input == "Buy milk"


def test_get_unprocessed_tolerates_null_confidence(fake_server, server_client):
    fake_server.add_item(1, "Buy milk")
    fake_server.add_item(2, "Half-typed note", confidence=None)
    fake_server.add_item(3, "Call Ana", confidence=1.3)

    resp = server_client.get_unprocessed()

    assert [i.row_number for i in resp.items] == [1, 2, 3]
    assert resp.items[1].confidence == 0.0
    assert resp.items[2].confidence == 1.0


def test_get_unprocessed_drops_only_malformed_rows(fake_server, server_client):
    fake_server.add_item(1, "Buy milk")
    fake_server.items.append({"raw_input": "row without a number"})
    fake_server.add_item(3, "Call Ana")

    resp = server_client.get_unprocessed()

    assert [i.row_number for i in resp.items] == [1, 3]
    assert resp.count == 3


def test_get_unprocessed_rejects_non_list_items():
    def handler(request):
        return httpx.Response(200, json={"count": 1, "items": "nope"})

    with pytest.raises(ClassificationServerError):
        _client(handler).get_unprocessed()
