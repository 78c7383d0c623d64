# Shared fixtures: task runners and fake gateways for the core tests.

import pytest

from dualpane.gateway import GatewayError, NotConnectedError
from dualpane.models import LocalEntry, RemoteEntry
from dualpane.session import Session
from dualpane.workers import describe_error


class InlineRunner:
    """Completes every submitted call before ``submit`` returns."""

    def __init__(self):
        self.calls = []

    def submit(self, func, *args, on_success=None, on_error=None):
        self.calls.append((func, args))
        try:
            result = func(*args)
        except Exception as e:
            if on_error is not None:
                on_error(describe_error(e))
        else:
            if on_success is not None:
                on_success(result)


class DeferredRunner:
    """Holds submitted calls until the test completes them, in any order."""

    def __init__(self):
        self.pending = []

    def submit(self, func, *args, on_success=None, on_error=None):
        self.pending.append((func, args, on_success, on_error))

    def complete(self, index=0):
        func, args, on_success, on_error = self.pending.pop(index)
        try:
            result = func(*args)
        except Exception as e:
            if on_error is not None:
                on_error(describe_error(e))
        else:
            if on_success is not None:
                on_success(result)

    def complete_all(self):
        while self.pending:
            self.complete()


class FakeLocalGateway:
    def __init__(self, tree=None):
        # path -> list of LocalEntry; missing paths fail
        self.tree = tree or {}
        self.listed = []

    def list_local_dir(self, path):
        self.listed.append(path)
        if path not in self.tree:
            raise GatewayError(f"Directory not found or inaccessible: {path}")
        return list(self.tree[path]), "/home/tester" + ("" if path == "/" else path)


class FakeRemoteGateway:
    def __init__(self, tree=None, failing=()):
        self.tree = tree or {}
        self.failing = set(failing)
        self.connected = False
        self.refuse_connect = False
        self.listed = []
        self.uploads = []

    def connect(self, url):
        if self.refuse_connect:
            raise GatewayError(f"Connection failed: {url} refused")
        self.connected = True
        return f"Connected to {url}"

    def list_remote_dir(self, path):
        if not self.connected:
            raise NotConnectedError()
        self.listed.append(path)
        if path not in self.tree:
            raise GatewayError(f"Failed to list directory: {path}")
        return list(self.tree[path])

    def upload_file(self, local_path, target_dir):
        if not self.connected:
            raise NotConnectedError()
        self.uploads.append((local_path, target_dir))
        if local_path.rsplit("/", 1)[-1] in self.failing:
            raise GatewayError(f"Upload failed: {local_path}")
        return "ok"

    def close(self):
        self.connected = False


def local_file(name, size=0):
    return LocalEntry(name=name, is_directory=False, size_bytes=size)


def local_dir(name):
    return LocalEntry(name=name, is_directory=True)


def remote_file(name):
    return RemoteEntry(name=name, is_directory=False)


def remote_dir(name):
    return RemoteEntry(name=name, is_directory=True)


@pytest.fixture
def runner():
    return InlineRunner()


@pytest.fixture
def local_gateway():
    return FakeLocalGateway(
        {
            "/": [local_file("notes.txt", 120), local_dir("docs"), local_file("big.iso", 200 * 1024 * 1024)],
            "/docs": [local_file("a.txt", 10), local_file("b.txt", 2048), local_dir("old")],
            "/docs/old": [],
        }
    )


@pytest.fixture
def remote_gateway():
    return FakeRemoteGateway(
        {
            "/": [remote_dir("inbox"), remote_file("readme.md")],
            "/inbox": [remote_file("x.bin")],
        }
    )


@pytest.fixture
def session(remote_gateway, local_gateway, runner):
    session = Session(remote_gateway, local_gateway, runner)
    session.start()
    return session


@pytest.fixture
def connected_session(session):
    session.connect_server("tester@example.org:22")
    return session
