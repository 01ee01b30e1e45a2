"""
Remote existence prober.

Decides whether a feed file for a given slot is present on the remote source.
Candidate filenames are tried in priority order, each with a fresh SFTP
session:

- a regular file at the candidate path ends the probe as found;
- a failed stat, or a target that is not a regular file, moves on to the next
  candidate;
- a failure to connect or authenticate ends the probe as not found, since it
  affects every candidate alike.

Probing never raises; every fault is logged and resolved to "not found".
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime

from feedwatch.connections.sftp import SFTPConfig, SFTPConnection
from feedwatch.core.feeds import candidates_for
from feedwatch.utils.logging import get_logger

logger = get_logger("feedwatch.prober")


@dataclass(frozen=True)
class ProbeResult:
    found: bool
    matched: str | None = None
    attempted: tuple[str, ...] = ()
    # Set when the probe was cut short by a connection-level fault
    error: str | None = None


class RemoteProber:
    """Checks the remote source for the file of one (feed type, timestamp) slot."""

    def __init__(
        self,
        remote: SFTPConfig,
        connection_factory: Callable[[SFTPConfig], SFTPConnection] = SFTPConnection,
    ):
        self.remote = remote
        self._connection_factory = connection_factory

    def probe(self, feed_type: str, timestamp: datetime, base_path: str | None = None) -> ProbeResult:
        base = (base_path or self.remote.base_path or "").rstrip("/")
        attempted: list[str] = []

        for candidate in candidates_for(feed_type, timestamp):
            path = f"{base}/{candidate}"
            attempted.append(candidate)
            logger.debug(f"Checking {path} for {feed_type} at {timestamp.isoformat()}")

            conn = self._connection_factory(self.remote)
            try:
                conn.connect()
            except Exception as e:
                conn.close()
                logger.error(
                    f"SFTP connection to {self.remote.host} failed while checking {path} "
                    f"for {feed_type} at {timestamp.isoformat()}: {e}"
                )
                return ProbeResult(found=False, attempted=tuple(attempted), error=str(e))

            try:
                if conn.is_regular_file(path):
                    logger.info(f"File found: {path}")
                    return ProbeResult(found=True, matched=candidate, attempted=tuple(attempted))
                logger.warning(f"{path} exists but is not a regular file")
            except Exception as e:
                logger.debug(f"Stat failed for {path}: {e}")
            finally:
                conn.close()

        logger.warning(f"All filename patterns for {feed_type} at {timestamp.isoformat()} failed: {attempted}")
        return ProbeResult(found=False, attempted=tuple(attempted))
