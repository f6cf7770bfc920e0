"""Tests for the notification sinks."""

from __future__ import annotations

import logging

import pytest

from digest_cli.controller import DragController, DraggableLocation, DropResult
from digest_cli.notify import ConsoleNotifier, LoggingNotifier


def test_console_notifier(capsys):
    notifier = ConsoleNotifier()
    notifier.success("Block moved")
    notifier.error("Block not found.")

    assert capsys.readouterr().out == "  Block moved\n  Error: Block not found.\n"


def test_logging_notifier_levels(caplog):
    caplog.set_level(logging.INFO, logger="digest_cli.notify")
    notifier = LoggingNotifier()
    notifier.success("Block added")
    notifier.error("Digest not found.")

    assert [(r.levelno, r.getMessage()) for r in caplog.records] == [
        (logging.INFO, "Block added"),
        (logging.WARNING, "Digest not found."),
    ]


@pytest.mark.asyncio(loop_scope="session")
async def test_controller_reports_to_logging_notifier(mutations, server, caplog):
    caplog.set_level(logging.WARNING, logger="digest_cli.notify")
    controller = DragController(mutations, LoggingNotifier())

    controller.drag_start()
    await controller.drag_end(DropResult("bm-x", DraggableLocation("bookmark", 0), DraggableLocation("digest", 9)))

    assert server.requests == []
    assert "Position 9 is out of range (0..4)." in [
        r.getMessage() for r in caplog.records if r.name == "digest_cli.notify"
    ]
