"""Upload load generation.

On every timer tick the orchestrator asks the admission gate for a slot,
places a new object under a two-character shard directory of the session
root, and streams zero-filled content into the object store. A write that
finds its shard directory missing gets the directory recreated and one retry.
"""

from mperf.perf.gate import AdmissionGate
from mperf.perf.healer import DirectoryHealer
from mperf.perf.orchestrator import AttemptState, RunStats, UploadAttempt, UploadOrchestrator
from mperf.perf.session import Session
from mperf.perf.stream import ZeroStream

__all__ = [
    "AdmissionGate",
    "AttemptState",
    "DirectoryHealer",
    "RunStats",
    "Session",
    "UploadAttempt",
    "UploadOrchestrator",
    "ZeroStream",
]
