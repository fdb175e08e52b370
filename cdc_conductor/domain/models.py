"""Pipeline entities as seen by the compiler.

These are plain views handed over by the persistence layer. The compiler and
the validators only read them.
"""

from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Optional, Union

from cdc_conductor.errors import InvalidArgumentError

PipelineId = Union[int, str]


class PipelineStatus(Enum):
    """Lifecycle of a pipeline."""

    CREATED = "created"
    DEPLOYED = "deployed"
    STOPPED = "stopped"
    UNDEPLOYED = "undeployed"


def _frozen(config: Optional[Mapping[str, Any]]) -> Mapping[str, Any]:
    return MappingProxyType(dict(config or {}))


@dataclass(frozen=True)
class Connection:
    """A source or destination: a type tag and its opaque configuration."""

    type: str
    config: Mapping[str, Any] = field(default_factory=dict)
    name: Optional[str] = None
    id: Optional[PipelineId] = None

    def __post_init__(self):
        object.__setattr__(self, "config", _frozen(self.config))

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Connection":
        if not isinstance(data, Mapping):
            raise InvalidArgumentError("Connection definition must be a mapping")
        return cls(
            type=str(data.get("type") or ""),
            config=data.get("config") or {},
            name=data.get("name"),
            id=data.get("id"),
        )


@dataclass(frozen=True)
class Predicate:
    type: str
    config: Mapping[str, Any] = field(default_factory=dict)
    negate: bool = False

    def __post_init__(self):
        object.__setattr__(self, "config", _frozen(self.config))


@dataclass(frozen=True)
class Transform:
    """A single message transformation, optionally gated by a predicate."""

    id: PipelineId
    type: str
    config: Mapping[str, Any] = field(default_factory=dict)
    position: int = 0
    predicate: Optional[Predicate] = None

    def __post_init__(self):
        object.__setattr__(self, "config", _frozen(self.config))

    @classmethod
    def from_dict(cls, data: Mapping[str, Any], position: int = 0) -> "Transform":
        if not isinstance(data, Mapping):
            raise InvalidArgumentError("Transform definition must be a mapping")
        if "id" not in data or data["id"] is None:
            raise InvalidArgumentError("Transform definition requires an 'id'")
        predicate = None
        if data.get("predicate"):
            predicate_data = data["predicate"]
            if not isinstance(predicate_data, Mapping):
                raise InvalidArgumentError(
                    f"Transform {data['id']} predicate must be a mapping"
                )
            predicate = Predicate(
                type=str(predicate_data.get("type") or ""),
                config=predicate_data.get("config") or {},
                negate=bool(predicate_data.get("negate", False)),
            )
        try:
            position = int(data.get("position", position))
        except (TypeError, ValueError):
            raise InvalidArgumentError(
                f"Transform {data['id']} position must be an integer"
            )
        return cls(
            id=data["id"],
            type=str(data.get("type") or ""),
            config=data.get("config") or {},
            position=position,
            predicate=predicate,
        )


@dataclass
class Pipeline:
    """A source -> transforms -> destination flow; the unit of deployment."""

    id: PipelineId
    name: str
    source: Connection
    destination: Connection
    transforms: List[Transform] = field(default_factory=list)
    log_level: str = "INFO"
    status: PipelineStatus = PipelineStatus.CREATED

    def ordered_transforms(self) -> List[Transform]:
        """Transforms in chain order (by position, ties keep list order)."""
        return sorted(self.transforms, key=lambda t: t.position)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Pipeline":
        """Build a pipeline from a parsed YAML/JSON document.

        Raises:
            InvalidArgumentError: If a required section is missing
        """
        if not isinstance(data, Mapping):
            raise InvalidArgumentError("Pipeline definition must be a mapping")
        for key in ("id", "name", "source", "destination"):
            if data.get(key) is None:
                raise InvalidArgumentError(f"Pipeline definition requires '{key}'")

        transform_data = data.get("transforms") or []
        if not isinstance(transform_data, list):
            raise InvalidArgumentError("Pipeline transforms must be a list")
        transforms = [
            Transform.from_dict(t, position=i) for i, t in enumerate(transform_data)
        ]
        return cls(
            id=data["id"],
            name=str(data["name"]),
            source=Connection.from_dict(data["source"]),
            destination=Connection.from_dict(data["destination"]),
            transforms=transforms,
            log_level=str(data.get("log_level") or data.get("logLevel") or "INFO"),
        )

    def to_summary(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "status": self.status.value,
            "source": self.source.type,
            "destination": self.destination.type,
            "transforms": len(self.transforms),
        }
