import json
import time

import httpx
import pytest

from categories.resolver import CategoryResolver, load_category_mapping
from classification.server_client import ClassificationServerClient
from graph.memory_graph import InMemoryGraph
from plugin.notifier import Notifier
from storage.synced_storage import SyncedStorage

SERVER_URL = "http://inbox.test"


class FakeInboxServer:
    """In-process stand-in for the classification / queue server."""

    def __init__(self):
        self.items = []
        self.default_classification = {"classification": "idea", "target_folder": "Ideas"}
        # text -> payload, (status, payload) or an exception to raise
        self.classify_responses = {}
        self.fail_mark = set()
        self.classify_calls = []
        self.marked = []
        self.offline = False
        # seconds /mark-processed takes to answer
        self.mark_delay_s = 0.0

    def add_item(self, row_number, raw_input, classification="idea", target_folder="Ideas", confidence=0.9):
        self.items.append(
            {
                "row_number": row_number,
                "timestamp": "2026-10-18 09:00:00",
                "raw_input": raw_input,
                "classification": classification,
                "target_folder": target_folder,
                "confidence": confidence,
                "notes": None,
            }
        )

    def handler(self, request: httpx.Request) -> httpx.Response:
        if self.offline:
            return httpx.Response(503, json={"error": "unavailable"})
        path = request.url.path
        if request.method == "GET" and path == "/unprocessed":
            return httpx.Response(200, json={"count": len(self.items), "items": self.items})

        if request.method == "POST" and path == "/classify-and-log":
            text = json.loads(request.content)["text"]
            self.classify_calls.append(text)
            answer = self.classify_responses.get(text, self.default_classification)
            if isinstance(answer, Exception):
                raise answer
            if isinstance(answer, tuple):
                status, payload = answer
                return httpx.Response(status, json=payload)
            return httpx.Response(200, json=answer)

        if request.method == "POST" and path == "/mark-processed":
            body = json.loads(request.content)
            if self.mark_delay_s:
                time.sleep(self.mark_delay_s)
            if body["row_number"] in self.fail_mark:
                return httpx.Response(500, json={"error": "sheet write failed"})
            self.marked.append((body["row_number"], body["rem_id"]))
            self.items = [i for i in self.items if i["row_number"] != body["row_number"]]
            return httpx.Response(200, json={"status": "ok"})

        return httpx.Response(404, json={"error": "not found"})

    def client(self) -> ClassificationServerClient:
        transport = httpx.MockTransport(self.handler)
        return ClassificationServerClient(SERVER_URL, client=httpx.Client(transport=transport))


@pytest.fixture
def fake_server():
    return FakeInboxServer()


@pytest.fixture
def server_client(fake_server):
    return fake_server.client()


@pytest.fixture
def graph():
    g = InMemoryGraph()
    for name in ["Tasks", "Ideas", "People", "Admin", "Inbox"]:
        g.add(name)
    today = g.add("October 18th, 2026")
    g.today_id = today.id
    return g


def category(graph, name):
    return graph.find_by_name(name)


@pytest.fixture
def storage(tmp_path):
    return SyncedStorage(path=str(tmp_path / "plugin_storage.json"))


@pytest.fixture
def notifier():
    return Notifier()


@pytest.fixture
def resolver(graph, storage):
    return CategoryResolver(graph, load_category_mapping(storage, graph))
