# tests/unit/logging/test_unit_context.py — v2
"""Tests for logging/context.py."""

from __future__ import annotations

import asyncio

import pytest

from clincerta.logging.context import (
    clear_context,
    get_context,
    set_document_context,
    set_stage_context,
    stage,
)


@pytest.fixture(autouse=True)
def _reset():
    clear_context()
    yield
    clear_context()


class TestLogContext:
    def test_empty(self):
        assert get_context().as_dict() == {}

    def test_document_context(self):
        set_document_context("k1", "a.pdf")
        ctx = get_context()
        assert ctx.document_id == "k1"
        assert ctx.file_name == "a.pdf"

    def test_set_stage(self):
        set_stage_context("cache")
        assert get_context().stage == "cache"

    def test_stage_restored(self):
        set_stage_context("outer")
        with stage("inner"):
            assert get_context().stage == "inner"
        assert get_context().stage == "outer"

    def test_stage_restored_on_error(self):
        with pytest.raises(RuntimeError):
            with stage("failing"):
                raise RuntimeError("boom")
        assert get_context().stage is None

    @pytest.mark.asyncio
    async def test_tasks_isolated(self):
        async def worker(name: str) -> str | None:
            set_document_context(name)
            await asyncio.sleep(0)
            return get_context().document_id

        results = await asyncio.gather(worker("a"), worker("b"))
        assert results == ["a", "b"]
