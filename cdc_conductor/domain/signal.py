"""Out-of-band commands sent to a running pipeline."""

import json
import uuid
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Iterable, Optional


class SignalType(Enum):
    LOG = "log"
    EXECUTE_SNAPSHOT = "execute-snapshot"
    STOP_SNAPSHOT = "stop-snapshot"
    PAUSE_SNAPSHOT = "pause-snapshot"
    RESUME_SNAPSHOT = "resume-snapshot"


class SnapshotMode(Enum):
    """Ad-hoc (incremental) and blocking snapshots share one signal type."""

    INCREMENTAL = "INCREMENTAL"
    BLOCKING = "BLOCKING"


@dataclass(frozen=True)
class Signal:
    """Wire shape ``{id, type, data}``; ``data`` is a JSON encoded payload."""

    id: str
    type: str
    data: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        payload = {"id": self.id, "type": self.type}
        if self.data is not None:
            payload["data"] = self.data
        return payload

    def payload(self) -> Dict[str, Any]:
        """Decoded ``data`` (empty for signals without data)."""
        return json.loads(self.data) if self.data else {}

    @classmethod
    def log(cls, message: str, signal_id: Optional[str] = None) -> "Signal":
        return cls._build(SignalType.LOG, {"message": message}, signal_id)

    @classmethod
    def execute_snapshot(
        cls,
        data_collections: Iterable[str],
        mode: SnapshotMode = SnapshotMode.INCREMENTAL,
        signal_id: Optional[str] = None,
    ) -> "Signal":
        return cls._build(
            SignalType.EXECUTE_SNAPSHOT,
            _snapshot_data(data_collections, mode),
            signal_id,
        )

    @classmethod
    def stop_snapshot(
        cls,
        data_collections: Iterable[str],
        mode: SnapshotMode = SnapshotMode.INCREMENTAL,
        signal_id: Optional[str] = None,
    ) -> "Signal":
        return cls._build(
            SignalType.STOP_SNAPSHOT, _snapshot_data(data_collections, mode), signal_id
        )

    @classmethod
    def pause_snapshot(cls, signal_id: Optional[str] = None) -> "Signal":
        return cls._build(SignalType.PAUSE_SNAPSHOT, None, signal_id)

    @classmethod
    def resume_snapshot(cls, signal_id: Optional[str] = None) -> "Signal":
        return cls._build(SignalType.RESUME_SNAPSHOT, None, signal_id)

    @classmethod
    def _build(
        cls,
        signal_type: SignalType,
        data: Optional[Dict[str, Any]],
        signal_id: Optional[str],
    ) -> "Signal":
        return cls(
            id=signal_id or str(uuid.uuid4()),
            type=signal_type.value,
            data=json.dumps(data) if data is not None else None,
        )


def _snapshot_data(data_collections: Iterable[str], mode: SnapshotMode) -> Dict[str, Any]:
    collections = [c.strip() for c in data_collections if c and c.strip()]
    return {"data-collections": collections, "type": mode.value}
