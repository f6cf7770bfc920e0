"""
Fixtures for the CLI tests.

FakeDigestApi answers the digest and block endpoints from an in-memory list,
served to the real ApiClient through httpx.MockTransport.
"""

from __future__ import annotations

import json

import httpx
import pytest
import pytest_asyncio

from digest_cli.client import ApiClient
from digest_cli.mutations import BlockMutationClient

TEAM_ID = "team-1"
DIGEST_ID = "digest-1"


class FakeDigestApi:
    """A digest with blocks A-D, version 0."""

    def __init__(self, block_ids=("a", "b", "c", "d")):
        self.blocks = [
            {"id": bid, "digest_id": DIGEST_ID, "type": "BOOKMARK", "bookmark_id": f"bm-{bid}", "bookmark": None}
            for bid in block_ids
        ]
        self.version = 0
        self.requests: list[httpx.Request] = []
        # One-shot overrides keyed by HTTP method: a Response to return or an exception to raise
        self.overrides: dict[str, httpx.Response | Exception] = {}
        self.spy = None

    @property
    def base(self) -> str:
        return f"/api/teams/{TEAM_ID}/digests/{DIGEST_ID}"

    def ids(self) -> list[str]:
        return [b["id"] for b in self.blocks]

    def methods(self) -> list[str]:
        return [r.method for r in self.requests]

    def digest(self) -> dict:
        return {
            "id": DIGEST_ID,
            "title": "Weekly",
            "version": self.version,
            # Deliberately unsorted; clients order by "order"
            "blocks": list(reversed([{**b, "order": i} for i, b in enumerate(self.blocks)])),
        }

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.spy:
            self.spy(request)

        override = self.overrides.pop(request.method, None)
        if isinstance(override, Exception):
            raise override
        if override is not None:
            return override

        path = request.url.path
        if request.method == "GET" and path == self.base:
            return httpx.Response(200, json=self.digest())

        if request.method == "POST" and path == f"{self.base}/blocks":
            data = json.loads(request.content)
            block = {
                "id": data["block_id"],
                "digest_id": DIGEST_ID,
                "type": data["type"],
                "bookmark_id": data["bookmark_id"],
                "bookmark": None,
            }
            self.blocks.insert(data["position"], block)
            self.version += 1
            return httpx.Response(201, json={**block, "order": data["position"], "digest_version": self.version})

        if path.startswith(f"{self.base}/blocks/"):
            block_id = path.rsplit("/", 1)[1]
            if block_id not in self.ids():
                return httpx.Response(409, json={"error": "Block not found.", "code": "BLOCK_NOT_FOUND"})
            block = self.blocks.pop(self.ids().index(block_id))
            if request.method == "PATCH":
                self.blocks.insert(json.loads(request.content)["position"], block)
            self.version += 1
            return httpx.Response(200, json={"ok": True, "version": self.version})

        return httpx.Response(404, json={"error": "Not Found"})


class RecordingNotifier:
    def __init__(self):
        self.successes: list[str] = []
        self.errors: list[str] = []

    def success(self, message: str) -> None:
        self.successes.append(message)

    def error(self, message: str) -> None:
        self.errors.append(message)


@pytest_asyncio.fixture(loop_scope="session")
async def server():
    return FakeDigestApi()


@pytest_asyncio.fixture(loop_scope="session")
async def api(server):
    client = ApiClient("http://test", transport=httpx.MockTransport(server.handler))
    yield client
    await client.close()


@pytest_asyncio.fixture(loop_scope="session")
async def mutations(api, server):
    """A mutation client with the digest already loaded; request log cleared."""
    client = BlockMutationClient(api, TEAM_ID, DIGEST_ID)
    await client.load()
    server.requests.clear()
    return client


@pytest.fixture
def notifier():
    return RecordingNotifier()
