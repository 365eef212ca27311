"""Draft persistence and the debounced auto-saver."""

import asyncio
import logging

import pytest

from mockexam_lifecycle.drafts import DEFAULT_DRAFT_KEY, AutoSaver, DraftStore


@pytest.fixture
def store(tmp_path):
    return DraftStore(tmp_path / "drafts")


# =====================================================================
# DraftStore
# =====================================================================


class TestDraftStore:

    def test_save_and_load(self, store):
        path = store.save(DEFAULT_DRAFT_KEY, {"title": "Year 11 Biology", "duration": 90})
        assert path.name == "mockExamDraft.json"
        assert store.load(DEFAULT_DRAFT_KEY) == {"title": "Year 11 Biology", "duration": 90}

    def test_save_overwrites(self, store):
        store.save("exam", {"v": 1})
        store.save("exam", {"v": 2})
        assert store.load("exam") == {"v": 2}
        assert not list(store._dir.glob("*.tmp")), "Temporary file should be renamed"

    def test_load_missing_returns_none(self, store):
        assert store.load("nothing") is None

    def test_corrupt_draft_is_discarded(self, store):
        store.save("exam", {"v": 1})
        (store._dir / "exam.json").write_text("{not json", encoding="utf-8")
        assert store.load("exam") is None

    def test_clear(self, store):
        store.save("exam", {"v": 1})
        assert store.clear("exam") is True
        assert store.load("exam") is None
        assert store.clear("exam") is False

    @pytest.mark.parametrize("key", ["../escape", "a/b", "", "with space", "abc\n", "\nabc"])
    def test_unsafe_keys_rejected(self, store, key):
        with pytest.raises(ValueError):
            store.save(key, {})
        assert not store._dir.exists() or not list(store._dir.iterdir())


# =====================================================================
# AutoSaver
# =====================================================================


class TestAutoSaver:

    @pytest.mark.asyncio
    async def test_only_last_value_is_written(self, store):
        saver = AutoSaver(store, "exam", delay=0.05)
        saver.schedule({"v": 1})
        saver.schedule({"v": 2})
        saver.schedule({"v": 3})
        assert saver.pending
        assert store.load("exam") is None, "Nothing written before the delay"

        await asyncio.sleep(0.15)

        assert not saver.pending
        assert store.load("exam") == {"v": 3}

    @pytest.mark.asyncio
    async def test_flush_writes_immediately(self, store):
        saver = AutoSaver(store, "exam", delay=10)
        saver.schedule({"v": 1})
        await saver.flush()
        assert not saver.pending
        assert store.load("exam") == {"v": 1}

    @pytest.mark.asyncio
    async def test_cancel_drops_pending_value(self, store):
        saver = AutoSaver(store, "exam", delay=0.05)
        saver.schedule({"v": 1})
        saver.cancel()
        await asyncio.sleep(0.1)
        assert store.load("exam") is None
        await saver.flush()
        assert store.load("exam") is None, "Flush after cancel has nothing to write"

    @pytest.mark.asyncio
    async def test_background_write_failure_is_logged_and_retried(self, store, caplog):
        calls = []
        real_save = store.save

        def failing_save(key, data):
            calls.append(data)
            if len(calls) == 1:
                raise OSError("disk full")
            return real_save(key, data)

        store.save = failing_save
        saver = AutoSaver(store, "exam", delay=0.01)
        saver.schedule({"v": 1})

        with caplog.at_level(logging.ERROR, logger="mockexam_lifecycle.drafts"):
            await asyncio.sleep(0.05)

        assert not saver.pending
        assert "Auto-save of draft 'exam' failed" in caplog.text
        assert store.load("exam") is None

        await saver.flush()
        assert store.load("exam") == {"v": 1}, "Failed value is kept for the next flush"
