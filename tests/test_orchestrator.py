# Tests for orchestrator.py: sequential batch upload with partial failures

import pytest

from conftest import DeferredRunner, FakeLocalGateway, FakeRemoteGateway, local_file, remote_dir
from dualpane.orchestrator import ALREADY_RUNNING, NOT_CONNECTED, NOTHING_SELECTED
from dualpane.session import Session


def select(session, *names):
    for name in names:
        entry = next(e for e in session.local.listing if e.name == name)
        session.selection.toggle(entry, True)


# ---------------------------------------------------------------------------
# Preconditions
# ---------------------------------------------------------------------------
class TestPreconditions:
    def test_requires_connection_first(self, session, remote_gateway):
        # empty selection too, but the connection check is reported
        assert not session.start_upload()
        assert session.status == NOT_CONNECTED
        assert remote_gateway.uploads == []

    def test_requires_selection(self, connected_session, remote_gateway):
        assert not connected_session.start_upload()
        assert connected_session.status == NOTHING_SELECTED
        assert remote_gateway.uploads == []

    def test_rejected_start_keeps_selection(self, session):
        select(session, "notes.txt")
        assert not session.start_upload()
        assert session.selection.count == 1


# ---------------------------------------------------------------------------
# Batch procedure
# ---------------------------------------------------------------------------
class TestBatch:
    def test_partial_failure_end_to_end(self, connected_session, remote_gateway, local_gateway):
        session = connected_session
        session.local.navigate("/docs")
        select(session, "a.txt", "b.txt")
        remote_gateway.failing = {"a.txt"}
        local_before = len(local_gateway.listed)
        remote_before = len(remote_gateway.listed)

        assert session.start_upload()

        assert session.status == "1 succeeded, 1 failed"
        assert session.selection.count == 0
        assert local_gateway.listed[local_before:] == ["/docs"]
        assert remote_gateway.listed[remote_before:] == ["/"]

    def test_source_paths_and_target(self, connected_session, remote_gateway):
        session = connected_session
        session.remote.navigate("/inbox")
        select(session, "notes.txt")
        session.local.navigate("/docs")
        select(session, "a.txt")

        session.start_upload()

        # sources use the local path at batch start; root has no prefix
        assert remote_gateway.uploads == [
            ("/docs/notes.txt", "/inbox"),
            ("/docs/a.txt", "/inbox"),
        ]

    def test_root_source_is_bare_name(self, connected_session, remote_gateway):
        select(connected_session, "notes.txt")
        connected_session.start_upload()
        assert remote_gateway.uploads == [("notes.txt", "/")]

    def test_all_succeed(self, connected_session):
        select(connected_session, "notes.txt", "big.iso")
        connected_session.start_upload()
        assert connected_session.status == "2 succeeded, 0 failed"

    def test_batch_finished_signal(self, connected_session, remote_gateway):
        remote_gateway.failing = {"notes.txt", "big.iso"}
        results = []
        connected_session.uploads.batch_finished.connect(lambda ok, bad: results.append((ok, bad)))
        select(connected_session, "notes.txt", "big.iso")

        connected_session.start_upload()

        assert results == [(0, 2)]

    def test_progress_reported_per_file(self, connected_session):
        events = []
        connected_session.uploads.progress.connect(lambda i, n, src: events.append((i, n, src)))
        select(connected_session, "notes.txt", "big.iso")

        connected_session.start_upload()

        assert events == [(0, 2, "notes.txt"), (1, 2, "big.iso"), (2, 2, "")]


# ---------------------------------------------------------------------------
# Ordering with asynchronous completion
# ---------------------------------------------------------------------------
@pytest.fixture
def deferred():
    runner = DeferredRunner()
    local = FakeLocalGateway({"/": [local_file("a", 1), local_file("b", 2), local_file("c", 3)]})
    remote = FakeRemoteGateway({"/": [], "/elsewhere": [remote_dir("z")]})
    session = Session(remote, local, runner)
    session.start()
    session.connect_server("host")
    runner.complete_all()
    for entry in session.local.listing:
        session.selection.toggle(entry, True)
    return session, runner, remote


class TestSequencing:
    def test_one_upload_in_flight_at_a_time(self, deferred):
        session, runner, remote = deferred
        session.start_upload()

        assert len(runner.pending) == 1
        assert session.selection.count == 0
        runner.complete()
        assert len(runner.pending) == 1
        assert remote.uploads == [("a", "/")]

    def test_target_captured_at_start(self, deferred):
        session, runner, remote = deferred
        session.start_upload()

        session.remote.navigate("/elsewhere")
        # the navigation request is queued behind the first upload
        runner.complete(1)
        assert session.remote.current_path == "/elsewhere"

        runner.complete_all()
        assert [target for _, target in remote.uploads] == ["/", "/", "/"]

    def test_second_batch_rejected_while_running(self, deferred):
        session, runner, remote = deferred
        session.start_upload()
        session.selection.toggle(local_file("a", 1), True)

        assert not session.start_upload()
        assert session.status == ALREADY_RUNNING

        runner.complete_all()
        assert session.status == "3 succeeded, 0 failed"
        assert session.selection.count == 1

    def test_refreshes_both_panes_after_batch(self, deferred):
        session, runner, remote = deferred
        session.start_upload()
        for _ in range(3):
            runner.complete()

        refreshes = [(func, args) for func, args, _, _ in runner.pending]
        assert len(refreshes) == 2
        assert {args for _, args in refreshes} == {("/",)}
