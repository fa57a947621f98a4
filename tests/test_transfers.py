"""Tests for the binary transfer coordinator and the download writer."""

from unittest.mock import MagicMock

import pytest

from store import StateStore
from transfers import BinaryTransferCoordinator, DownloadWriter


@pytest.fixture
def store():
    store = StateStore()
    store.set_connected(True)
    return store


@pytest.fixture
def encoder():
    return MagicMock()


@pytest.fixture
def received():
    return []


@pytest.fixture
def coordinator(store, encoder, received, bus):
    return BinaryTransferCoordinator(
        store, encoder, lambda data, path: received.append((data, path)), bus=bus
    )


class TestBinaryTransferCoordinator:

    def test_round_trip(self, coordinator, encoder, received):
        assert coordinator.request_download("a.txt") is True
        encoder.request_file.assert_called_once_with("a.txt")

        assert coordinator.on_start_transfer("a.txt") is True
        assert coordinator.on_binary(b"hello") is True

        assert received == [(b"hello", "a.txt")]
        assert "a.txt" not in coordinator.pending
        assert coordinator.armed_path is None

    def test_second_binary_frame_is_discarded(self, coordinator, received):
        coordinator.request_download("a.txt")
        coordinator.on_start_transfer("a.txt")
        coordinator.on_binary(b"one")

        assert coordinator.on_binary(b"two") is False

        assert received == [(b"one", "a.txt")]

    def test_orphan_binary_frame(self, coordinator, received, bus):
        assert coordinator.on_binary(b"stray") is False

        assert received == []
        bus.emit.assert_called_once()
        assert bus.emit.call_args[0][0] == "download.discarded"

    def test_request_while_disconnected_is_ignored(self, coordinator, store, encoder):
        store.set_connected(False)

        assert coordinator.request_download("a.txt") is False

        encoder.request_file.assert_not_called()
        assert coordinator.pending == set()

    def test_announcement_for_unrequested_path_disarms(self, coordinator, received):
        coordinator.request_download("a.txt")
        coordinator.on_start_transfer("a.txt")

        assert coordinator.on_start_transfer("b.txt") is False
        coordinator.on_binary(b"data")

        assert received == []
        assert coordinator.pending == {"a.txt"}

    def test_last_announcement_wins(self, coordinator, received):
        coordinator.request_download("a.txt")
        coordinator.request_download("b.txt")
        coordinator.on_start_transfer("a.txt")
        coordinator.on_start_transfer("b.txt")

        coordinator.on_binary(b"payload")

        assert received == [(b"payload", "b.txt")]
        # a.txt stays pending with no way to complete
        assert coordinator.pending == {"a.txt"}
        assert coordinator.armed_path is None

    def test_pending_downloads_do_not_expire(self, coordinator):
        coordinator.request_download("a.txt")
        coordinator.request_download("b.txt")

        assert coordinator.pending == {"a.txt", "b.txt"}

    def test_failing_materializer_still_consumes_frame(self, store, encoder, bus):
        def broken(data, path):
            raise OSError("disk full")

        coordinator = BinaryTransferCoordinator(store, encoder, broken, bus=bus)
        coordinator.request_download("a.txt")
        coordinator.on_start_transfer("a.txt")

        assert coordinator.on_binary(b"x") is True

        assert coordinator.pending == set()
        assert coordinator.armed_path is None
        assert bus.emit.call_args[0][0] == "download.failed"


class TestDownloadWriter:

    def test_writes_file(self, tmp_path):
        writer = DownloadWriter(str(tmp_path / "downloads"))

        target = writer(b"content", "report.pdf")

        assert target == tmp_path / "downloads" / "report.pdf"
        assert target.read_bytes() == b"content"
        assert writer.save_count == 1

    def test_keeps_only_final_component(self, tmp_path):
        writer = DownloadWriter(str(tmp_path))

        assert writer.save(b"1", "docs/2024/notes.txt").name == "notes.txt"
        assert writer.save(b"2", "../../etc/passwd").parent == tmp_path
        assert writer.save(b"3", "..\\windows\\evil.ini").name == "evil.ini"

    def test_does_not_overwrite(self, tmp_path):
        writer = DownloadWriter(str(tmp_path))

        first = writer.save(b"a", "a.txt")
        second = writer.save(b"b", "a.txt")
        third = writer.save(b"c", "dir/a.txt")

        assert [p.name for p in (first, second, third)] == ["a.txt", "a (1).txt", "a (2).txt"]
        assert first.read_bytes() == b"a"

    def test_empty_name_falls_back(self, tmp_path):
        writer = DownloadWriter(str(tmp_path))

        assert writer.save(b"x", "folder/").name == "folder"
        assert writer.save(b"y", "..").name == "download"
