"""Tests for the structlog processors and run-context helpers."""

import pytest
import structlog

from galuxium.core.logging import MAX_FIELD_CHARS, bind_run_context, clear_run_context, clip_long_fields

pytestmark = pytest.mark.unit


def test_long_error_is_clipped():
    body = "<html>" + "x" * (MAX_FIELD_CHARS * 2) + "</html>"
    event = clip_long_fields(None, "warning", {"event": "agent_model_call_failed", "error": body})

    assert event["error"].startswith("<html>")
    assert len(event["error"]) < len(body)
    assert event["error"].endswith(f"[+{len(body) - MAX_FIELD_CHARS} chars]")


def test_short_fields_and_other_keys_are_untouched():
    long_idea = "y" * (MAX_FIELD_CHARS + 10)
    event = clip_long_fields(None, "info", {"event": "e", "error": "short", "idea_text": long_idea, "raw_length": 5})
    assert event == {"event": "e", "error": "short", "idea_text": long_idea, "raw_length": 5}


def test_run_context_binds_and_clears():
    try:
        bind_run_context(owner_id="u1", idea_id=None)
        assert structlog.contextvars.get_contextvars() == {"owner_id": "u1"}

        bind_run_context(idea_id="i-1")
        assert structlog.contextvars.get_contextvars() == {"owner_id": "u1", "idea_id": "i-1"}
    finally:
        clear_run_context()
    assert structlog.contextvars.get_contextvars() == {}
