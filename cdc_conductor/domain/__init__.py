"""Pipeline domain model."""

from cdc_conductor.domain.models import (
    Connection,
    Pipeline,
    PipelineStatus,
    Predicate,
    Transform,
)
from cdc_conductor.domain.signal import Signal, SignalType, SnapshotMode

__all__ = [
    "Connection",
    "Pipeline",
    "PipelineStatus",
    "Predicate",
    "Signal",
    "SignalType",
    "SnapshotMode",
    "Transform",
]
