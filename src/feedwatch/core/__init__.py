"""
Reconciliation engine: feed conventions, schedule generation, probing and the
delivery state machine.
"""

from feedwatch.core.delivery import ChangeEvent, DeliveryStatus, ExpectedDelivery, LastReceivedIndex, next_status
from feedwatch.core.feeds import candidate_filenames, canonical_filename
from feedwatch.core.prober import ProbeResult, RemoteProber
from feedwatch.core.reconcile import PassSummary, Reconciler
from feedwatch.core.schedule import GenerationSummary, expected_deliveries, generate_day
from feedwatch.core.state import DeliveryStore

__all__ = [
    "ChangeEvent",
    "DeliveryStatus",
    "ExpectedDelivery",
    "LastReceivedIndex",
    "next_status",
    "candidate_filenames",
    "canonical_filename",
    "ProbeResult",
    "RemoteProber",
    "PassSummary",
    "Reconciler",
    "GenerationSummary",
    "expected_deliveries",
    "generate_day",
    "DeliveryStore",
]
