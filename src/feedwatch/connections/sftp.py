"""
SFTP connection to the remote feed source.
"""

from __future__ import annotations

import socket
import stat
from dataclasses import dataclass
from typing import Any

import paramiko

from feedwatch.config.resolver import is_unresolved
from feedwatch.exceptions import ConfigurationError, RemoteConnectionError


@dataclass(frozen=True)
class SFTPConfig:
    host: str
    port: int = 22
    username: str | None = None
    password: str | None = None
    private_key_path: str | None = None
    private_key_passphrase: str | None = None
    base_path: str | None = None
    # Bounds connect, banner and auth so an unresponsive server cannot stall a pass
    connect_timeout_s: float = 15.0

    @classmethod
    def from_dict(cls, cfg: dict[str, Any]) -> SFTPConfig:
        def opt(key: str) -> str | None:
            value = cfg.get(key)
            if value is None or is_unresolved(value) or str(value).strip() == "":
                return None
            return str(value)

        try:
            port = int(cfg.get("port", 22))
            timeout = float(cfg.get("connect_timeout_s", 15.0))
        except (TypeError, ValueError) as e:
            raise ConfigurationError(f"Invalid remote settings: {e}") from None

        return cls(
            host=opt("host") or "",
            port=port,
            username=opt("username"),
            password=opt("password"),
            private_key_path=opt("private_key_path"),
            private_key_passphrase=opt("private_key_passphrase"),
            base_path=opt("base_path"),
            connect_timeout_s=timeout,
        )


class SFTPConnection:
    """
    One SFTP session: connect, authenticate, stat, close.

    The prober opens a fresh session per candidate filename, so this wrapper
    stays small and is used as a context manager.
    """

    def __init__(self, config: SFTPConfig):
        self.config = config
        self._transport: paramiko.Transport | None = None
        self._client: paramiko.SFTPClient | None = None

    def connect(self) -> paramiko.SFTPClient:
        """
        Connect (lazy) and return a live ``paramiko.SFTPClient``.

        Raises:
            ConfigurationError: If no host is configured
            RemoteConnectionError: If the server cannot be reached or rejects authentication
        """
        if self._client is not None:
            return self._client

        cfg = self.config
        if not cfg.host:
            raise ConfigurationError("Remote source is missing 'host'")

        try:
            sock = socket.create_connection((cfg.host, cfg.port), timeout=cfg.connect_timeout_s)
            transport = paramiko.Transport(sock)
            transport.banner_timeout = cfg.connect_timeout_s
            transport.auth_timeout = cfg.connect_timeout_s
            self._transport = transport

            transport.connect(
                username=cfg.username,
                password=cfg.password,
                pkey=self._load_private_key(),
            )
            self._client = paramiko.SFTPClient.from_transport(transport)
            if self._client is None:
                raise paramiko.SSHException("server refused the sftp subsystem")
            self._client.get_channel().settimeout(cfg.connect_timeout_s)
        except (OSError, paramiko.SSHException) as e:
            self.close()
            raise RemoteConnectionError(
                f"Cannot open SFTP session to {cfg.host}:{cfg.port}: {e}", host=cfg.host, port=cfg.port
            ) from e
        return self._client

    def _load_private_key(self) -> paramiko.PKey | None:
        cfg = self.config
        if not cfg.private_key_path:
            return None
        # Try common key types; paramiko raises if incompatible
        try:
            return paramiko.RSAKey.from_private_key_file(cfg.private_key_path, password=cfg.private_key_passphrase)
        except paramiko.SSHException:
            return paramiko.Ed25519Key.from_private_key_file(
                cfg.private_key_path, password=cfg.private_key_passphrase
            )

    def is_regular_file(self, path: str) -> bool:
        """
        Stat ``path``; True only for a regular file.

        Raises:
            OSError: When the path cannot be stat'ed (absent, permission, ...)
        """
        attrs = self.connect().stat(path)
        return attrs.st_mode is not None and stat.S_ISREG(attrs.st_mode)

    def close(self) -> None:
        """Close SFTP client + underlying transport."""
        try:
            if self._client is not None:
                self._client.close()
        finally:
            self._client = None
        try:
            if self._transport is not None:
                self._transport.close()
        finally:
            self._transport = None

    def __enter__(self) -> SFTPConnection:
        self.connect()
        return self

    def __exit__(self, exc_type: type[BaseException] | None, exc: BaseException | None, tb: Any) -> None:
        self.close()
