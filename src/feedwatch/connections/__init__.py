"""
Remote source connections.
"""

from feedwatch.connections.sftp import SFTPConfig, SFTPConnection

__all__ = ["SFTPConfig", "SFTPConnection"]
