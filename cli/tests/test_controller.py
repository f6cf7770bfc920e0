"""Tests for drop classification and the drag controller state machine."""

from __future__ import annotations

import json

import httpx
import pytest

from digest_cli.controller import (
    DragController,
    DraggableLocation,
    DragState,
    DropKind,
    DropResult,
    classify_drop,
)

POOL = "bookmark"
LIST = "digest"


def drop(draggable_id, source, destination) -> DropResult:
    return DropResult(
        draggable_id,
        DraggableLocation(*source),
        DraggableLocation(*destination) if destination else None,
    )


class TestClassifyDrop:
    @pytest.mark.parametrize(
        "result, expected",
        [
            (drop("bm-x", (POOL, 0), None), DropKind.NOOP),
            (drop("bm-x", (POOL, 0), (POOL, 3)), DropKind.NOOP),
            (drop("a", (LIST, 0), (POOL, 0)), DropKind.NOOP),
            (drop("a", (LIST, 2), None), DropKind.NOOP),
            (drop("bm-x", (POOL, 4), (LIST, 1)), DropKind.INSERT),
            (drop("a", (LIST, 0), (LIST, 2)), DropKind.REORDER),
        ],
    )
    def test_classification(self, result, expected):
        assert classify_drop(result) == expected

    def test_custom_pool_id(self):
        result = drop("bm-x", ("saved", 0), (LIST, 0))
        assert classify_drop(result, pool_id="saved") == DropKind.INSERT
        assert classify_drop(result) == DropKind.REORDER


@pytest.mark.asyncio(loop_scope="session")
class TestDragController:
    @pytest.fixture
    def controller(self, mutations, notifier):
        return DragController(mutations, notifier)

    async def test_drop_onto_pool_does_nothing(self, controller, server):
        assert controller.drag_start()
        kind = await controller.drag_end(drop("bm-x", (POOL, 0), (POOL, 2)))

        assert kind == DropKind.NOOP
        assert server.requests == []
        assert controller.state == DragState.IDLE

    async def test_drop_outside_does_nothing(self, controller, server):
        controller.drag_start()
        assert await controller.drag_end(drop("a", (LIST, 0), None)) == DropKind.NOOP
        assert server.requests == []

    async def test_insert_from_pool(self, controller, mutations, server):
        controller.drag_start()
        kind = await controller.drag_end(drop("bm-x", (POOL, 3), (LIST, 1)))

        assert kind == DropKind.INSERT
        sent = json.loads(server.requests[0].content)
        assert (sent["bookmark_id"], sent["position"], sent["type"]) == ("bm-x", 1, "BOOKMARK")
        assert mutations.blocks[1]["bookmark_id"] == "bm-x"
        assert controller.state == DragState.IDLE

    async def test_reorder_within_list(self, controller, mutations, server):
        controller.drag_start()
        kind = await controller.drag_end(drop("a", (LIST, 0), (LIST, 2)))

        assert kind == DropKind.REORDER
        assert server.methods() == ["PATCH", "GET"]
        assert [b["id"] for b in mutations.blocks] == ["b", "c", "a", "d"]

    async def test_new_drag_refused_while_committing(self, controller, server):
        seen = []
        server.spy = lambda request: seen.append((controller.state, controller.drag_start()))

        controller.drag_start()
        await controller.drag_end(drop("a", (LIST, 0), (LIST, 1)))

        assert seen[0] == (DragState.COMMITTING, False)
        assert controller.is_interactive

    async def test_drag_refused_while_client_loading(self, controller, mutations):
        mutations._loading = True
        assert not controller.drag_start()
        assert controller.state == DragState.IDLE

    async def test_failure_is_notified_not_raised(self, controller, notifier, server):
        server.overrides["PATCH"] = httpx.Response(409, json={"error": "Block not found."})

        controller.drag_start()
        kind = await controller.drag_end(drop("a", (LIST, 0), (LIST, 3)))

        assert kind == DropKind.REORDER
        assert notifier.errors == ["Block not found."]
        assert controller.last_error.status_code == 409
        assert controller.state == DragState.IDLE

    async def test_network_failure_message(self, controller, notifier, server):
        server.overrides["POST"] = httpx.ConnectError("connection refused")

        controller.drag_start()
        await controller.drag_end(drop("bm-x", (POOL, 0), (LIST, 0)))

        assert notifier.errors == ["connection refused"]

    async def test_local_validation_is_notified(self, controller, notifier, server):
        controller.drag_start()
        await controller.drag_end(drop("bm-x", (POOL, 0), (LIST, 9)))

        assert server.requests == []
        assert notifier.errors == ["Position 9 is out of range (0..4)."]
        assert controller.state == DragState.IDLE

    async def test_drag_end_without_start(self, controller, server):
        assert await controller.drag_end(drop("a", (LIST, 0), (LIST, 1))) == DropKind.NOOP
        assert server.requests == []

    async def test_html_success_body_is_notified(self, controller, notifier, server):
        server.overrides["PATCH"] = httpx.Response(200, text="<html>ok</html>")
        server.overrides["GET"] = httpx.Response(200, text="<html>ok</html>")

        controller.drag_start()
        kind = await controller.drag_end(drop("a", (LIST, 0), (LIST, 2)))

        assert kind == DropKind.REORDER
        assert notifier.errors == ["Something went wrong. Please try again."]
        assert controller.state == DragState.IDLE
        assert controller.is_interactive
