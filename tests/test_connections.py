"""
Tests for the SFTP connection wrapper (paramiko mocked).
"""

import stat
from unittest.mock import MagicMock, patch

import paramiko
import pytest

from feedwatch.connections.sftp import SFTPConfig, SFTPConnection
from feedwatch.exceptions import ConfigurationError, RemoteConnectionError


@pytest.fixture
def config():
    return SFTPConfig(host="sftp.example.org", port=2222, username="obs", password="secret", connect_timeout_s=5.0)


@pytest.fixture
def paramiko_mocks():
    with patch("feedwatch.connections.sftp.socket.create_connection") as mock_socket:
        with patch("paramiko.Transport") as mock_transport_cls:
            with patch("paramiko.SFTPClient.from_transport") as mock_from_transport:
                transport = MagicMock()
                mock_transport_cls.return_value = transport
                client = MagicMock()
                mock_from_transport.return_value = client
                yield mock_socket, transport, client


class TestConnect:
    def test_requires_host(self):
        with pytest.raises(ConfigurationError):
            SFTPConnection(SFTPConfig(host="")).connect()

    def test_connect_authenticates_with_timeouts(self, config, paramiko_mocks):
        mock_socket, transport, client = paramiko_mocks

        conn = SFTPConnection(config)
        assert conn.connect() is client

        mock_socket.assert_called_once_with(("sftp.example.org", 2222), timeout=5.0)
        assert transport.banner_timeout == 5.0
        assert transport.auth_timeout == 5.0
        transport.connect.assert_called_once_with(username="obs", password="secret", pkey=None)
        client.get_channel.return_value.settimeout.assert_called_once_with(5.0)

    def test_connect_is_lazy(self, config, paramiko_mocks):
        mock_socket, _, client = paramiko_mocks

        conn = SFTPConnection(config)
        conn.connect()
        conn.connect()

        assert mock_socket.call_count == 1

    def test_socket_error_becomes_remote_error(self, config):
        with patch("feedwatch.connections.sftp.socket.create_connection", side_effect=TimeoutError("timed out")):
            with pytest.raises(RemoteConnectionError) as exc_info:
                SFTPConnection(config).connect()

        assert exc_info.value.host == "sftp.example.org"
        assert exc_info.value.port == 2222

    def test_auth_failure_closes_transport(self, config, paramiko_mocks):
        _, transport, _ = paramiko_mocks
        transport.connect.side_effect = paramiko.AuthenticationException("bad password")

        conn = SFTPConnection(config)
        with pytest.raises(RemoteConnectionError, match="bad password"):
            conn.connect()

        transport.close.assert_called_once()
        assert conn._transport is None


class TestIsRegularFile:
    def test_regular_file(self, config, paramiko_mocks):
        _, _, client = paramiko_mocks
        client.stat.return_value = MagicMock(st_mode=stat.S_IFREG | 0o644)

        assert SFTPConnection(config).is_regular_file("/data/mmetar.csv")
        client.stat.assert_called_once_with("/data/mmetar.csv")

    def test_directory(self, config, paramiko_mocks):
        _, _, client = paramiko_mocks
        client.stat.return_value = MagicMock(st_mode=stat.S_IFDIR | 0o755)

        assert not SFTPConnection(config).is_regular_file("/data/mmetar.csv")

    def test_absent_path_raises(self, config, paramiko_mocks):
        _, _, client = paramiko_mocks
        client.stat.side_effect = FileNotFoundError("/data/mmetar.csv")

        with pytest.raises(OSError):
            SFTPConnection(config).is_regular_file("/data/mmetar.csv")


def test_context_manager_closes(config, paramiko_mocks):
    _, transport, client = paramiko_mocks

    with SFTPConnection(config) as conn:
        assert conn._client is client

    client.close.assert_called_once()
    transport.close.assert_called_once()
