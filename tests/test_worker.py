import pytest

pytest.importorskip("PySide6")
from wavecursorgui.worker import prune_workers  # noqa: E402


class _FakeWorker:
    def __init__(self, running):
        self.running = running
        self.deleted = False

    def isRunning(self):
        return self.running

    def deleteLater(self):
        self.deleted = True


def test_finished_workers_are_deleted():
    busy, done, also_done = _FakeWorker(True), _FakeWorker(False), _FakeWorker(False)
    assert prune_workers([busy, done, also_done]) == [busy]
    assert done.deleted and also_done.deleted
    assert not busy.deleted


def test_nothing_to_prune():
    assert prune_workers([]) == []
