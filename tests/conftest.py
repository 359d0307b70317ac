"""
Shared fixtures: a shell talking to a fake CouchDB via httpx.MockTransport.
"""

import io
import json

import httpx
import pytest

from couch_shell.http.transport import HttpTransport
from couch_shell.shell import Shell


class FakeCouch:
    """Minimal in-memory CouchDB answering the requests the core plugin makes."""

    def __init__(self):
        self.docs: dict[str, dict[str, dict]] = {}
        self.requests: list[httpx.Request] = []
        self._uuid = 0

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        parts = [p for p in request.url.path.split("/") if p]
        method = request.method

        if not parts:
            return self._json(200, {"couchdb": "Welcome", "version": "3.3.3"})
        if parts == ["_uuids"]:
            count = int(request.url.params.get("count", "1"))
            uuids = []
            for _ in range(count):
                self._uuid += 1
                uuids.append(f"uuid{self._uuid:04d}")
            return self._json(200, {"uuids": uuids})
        if parts == ["_all_dbs"]:
            return self._json(200, sorted(self.docs))

        db = parts[0]
        if len(parts) == 1:
            if method == "PUT":
                if db in self.docs:
                    return self._json(412, {"error": "file_exists"})
                self.docs[db] = {}
                return self._json(201, {"ok": True})
            if method == "GET" and db in self.docs:
                return self._json(200, {"db_name": db, "doc_count": len(self.docs[db])})
            if method == "POST" and db in self.docs:
                doc = json.loads(request.content)
                self._uuid += 1
                doc_id = doc.get("_id", f"uuid{self._uuid:04d}")
                return self._store(db, doc_id, doc)
            return self._json(404, {"error": "not_found", "reason": "Database does not exist."})

        doc_id = parts[1]
        if db not in self.docs:
            return self._json(404, {"error": "not_found", "reason": "Database does not exist."})
        if method == "GET":
            if doc_id not in self.docs[db]:
                return self._json(404, {"error": "not_found", "reason": "missing"})
            return self._json(200, self.docs[db][doc_id])
        if method == "PUT":
            if request.headers.get("content-type", "").startswith("multipart/"):
                return self._json(201, {"ok": True, "id": doc_id})
            doc = json.loads(request.content)
            current = self.docs[db].get(doc_id)
            if current is not None and current["_rev"] != request.url.params.get("rev", doc.get("_rev")):
                return self._json(409, {"error": "conflict"})
            return self._store(db, doc_id, doc)
        if method == "DELETE":
            self.docs[db].pop(doc_id, None)
            return self._json(200, {"ok": True, "id": doc_id})
        return self._json(405, {"error": "method_not_allowed"})

    def _store(self, db: str, doc_id: str, doc: dict) -> httpx.Response:
        current = self.docs[db].get(doc_id)
        n = int(current["_rev"].split("-")[0]) + 1 if current else 1
        rev = f"{n}-abc{n}"
        stored = dict(doc, _id=doc_id, _rev=rev)
        self.docs[db][doc_id] = stored
        return self._json(201, {"ok": True, "id": doc_id, "rev": rev})

    @staticmethod
    def _json(status: int, data) -> httpx.Response:
        return httpx.Response(
            status,
            content=json.dumps(data).encode("utf-8"),
            headers={"Content-Type": "application/json"},
        )


@pytest.fixture
def couch():
    """Fake CouchDB server."""
    return FakeCouch()


@pytest.fixture
def shell(couch, tmp_path):
    """Shell with core plugins loaded, talking to the fake server."""
    sh = Shell(
        stdin=io.StringIO(),
        stdout=io.StringIO(),
        stderr=io.StringIO(),
        history_size=10,
        transport=HttpTransport(transport=httpx.MockTransport(couch)),
        color=False,
        read_secret=lambda: "secret",
        plugins_dir=tmp_path / "plugins",
    )
    sh.plugin("core")
    sh.plugin("core_help")
    yield sh
    sh.close()


@pytest.fixture
def connected(shell):
    """Shell with the server set and output cleared."""
    shell.execute("server localhost:5984")
    clear_output(shell)
    return shell


def clear_output(shell):
    for stream in (shell.stdout, shell.stderr):
        stream.seek(0)
        stream.truncate()
