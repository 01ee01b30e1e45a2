"""
Shared fixtures: an in-memory delivery store and a scriptable fake SFTP source.
"""

import pytest

from feedwatch.config import Config
from feedwatch.connections.sftp import SFTPConfig
from feedwatch.core.state import DeliveryStore
from feedwatch.service.server import MonitorService


class FakeRemote:
    """In-memory stand-in for the remote SFTP server."""

    def __init__(self, files=(), dirs=(), stat_errors=(), connect_error: Exception | None = None):
        self.files = set(files)
        self.dirs = set(dirs)
        self.stat_errors = set(stat_errors)
        self.connect_error = connect_error
        self.connections = 0
        self.closed = 0
        self.stat_calls: list[str] = []

    def factory(self, config: SFTPConfig) -> "FakeConnection":
        return FakeConnection(self)


class FakeConnection:
    def __init__(self, remote: FakeRemote):
        self.remote = remote

    def connect(self):
        self.remote.connections += 1
        if self.remote.connect_error is not None:
            raise self.remote.connect_error
        return self

    def is_regular_file(self, path: str) -> bool:
        self.remote.stat_calls.append(path)
        if path in self.remote.stat_errors:
            raise PermissionError(f"permission denied: {path}")
        if path in self.remote.files:
            return True
        if path in self.remote.dirs:
            return False
        raise FileNotFoundError(path)

    def close(self) -> None:
        self.remote.closed += 1


@pytest.fixture
def remote():
    return FakeRemote()


@pytest.fixture
def sftp_config():
    return SFTPConfig(host="sftp.example.org", username="obs", password="secret", base_path="/data")


@pytest.fixture
def store():
    store = DeliveryStore()
    yield store
    store.close()


@pytest.fixture
def service(store, remote):
    config = Config(
        {
            "monitor": {"feeds": {"metar": 1, "synop": 3}},
            "remote": {"host": "sftp.example.org", "username": "obs", "base_path": "/data"},
        }
    )
    return MonitorService(config, store=store, connection_factory=remote.factory)
