"""
Operator notifications.
"""

from feedwatch.notify.mailer import Mailer, compose_missing_alert

__all__ = ["Mailer", "compose_missing_alert"]
