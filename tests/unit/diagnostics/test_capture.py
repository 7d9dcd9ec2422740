import asyncio
from pathlib import Path

import pytest

from diagnostics import ArtifactStore, get_artifact_store, normalize_name


@pytest.fixture
def store(tmp_path: Path):
    return ArtifactStore(tmp_path / "screenshots")


class TestClearAll:

    def test_clear_twice(self, store):
        store.output_dir.mkdir(parents=True)
        for name in ("a.png", "b.png", "c.png"):
            (store.output_dir / name).write_bytes(b"")

        assert store.clear_all() == 3
        assert store.clear_all() == 0

    def test_missing_directory(self, store):
        assert store.clear_all() == 0

    @pytest.mark.asyncio
    async def test_clears_index(self, store, mock_page):
        await store.capture(mock_page, "S", "step", 1)
        store.clear_all()
        assert store.artifacts() == []


@pytest.mark.asyncio
class TestCapture:

    async def test_capture_writes_and_registers(self, store, mock_page):
        path = await store.capture(mock_page, "Scenario A", "Click button", 2)

        assert path is not None and path.exists()
        assert path.parent == store.output_dir
        assert normalize_name("Scenario A") in path.name
        assert normalize_name("Click button") in path.name
        mock_page.screenshot.assert_awaited_once()
        assert mock_page.screenshot.await_args.kwargs["full_page"] is True

        [artifact] = store.artifacts()
        assert artifact.scenario_name == "Scenario A"
        assert artifact.step_name == "Click button"
        assert artifact.step_index == 2
        assert artifact.file_path == path

    async def test_capture_without_page(self, store):
        assert await store.capture(None, "S", "step", 1) is None
        assert store.artifacts() == []

    async def test_capture_closed_page(self, store, mock_page):
        mock_page.is_closed.return_value = True
        assert await store.capture(mock_page, "S", "step", 1) is None
        mock_page.screenshot.assert_not_called()

    async def test_capture_screenshot_error_returns_none(self, store, mock_page):
        mock_page.screenshot.side_effect = RuntimeError("Target page, context or browser has been closed")
        assert await store.capture(mock_page, "S", "step", 1) is None
        assert store.artifacts() == []

    async def test_capture_on_failure(self, store, mock_page):
        path = await store.capture_on_failure(mock_page, "Checkout flow")

        assert path.name.startswith("Checkout-flow-")
        [artifact] = store.artifacts()
        assert artifact.step_name is None
        assert not artifact.is_step_capture

    async def test_same_step_twice_keeps_both(self, store, mock_page):
        first = await store.capture(mock_page, "S", "Click", 1)
        second = await store.capture(mock_page, "S", "Click", 1)

        assert first != second
        assert len(store.artifacts()) == 2

    async def test_find_is_normalized_and_case_insensitive(self, store, mock_page):
        path = await store.capture(mock_page, "Scenario A", "Click button!", 1)

        artifact = store.find("scenario a", "click button")
        assert artifact is not None and artifact.file_path == path
        assert store.find("Scenario B", "Click button") is None

    async def test_concurrent_lanes_register_all(self, store, mock_page):
        await asyncio.gather(*[
            store.capture(mock_page, f"Scenario {lane}", f"step {i}", i)
            for lane in range(3)
            for i in range(5)
        ])
        assert len(store.artifacts()) == 15


def test_get_artifact_store_is_lazy_singleton(monkeypatch, tmp_path):
    monkeypatch.setattr("diagnostics.capture._artifact_store", None)
    store1 = get_artifact_store(tmp_path)
    store2 = get_artifact_store(tmp_path / "other")

    assert store1 is store2
    assert store1.output_dir == tmp_path
