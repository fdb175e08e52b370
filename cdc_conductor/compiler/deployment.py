"""The deployable runtime configuration produced for a pipeline.

A ``DeploymentSpec`` serializes into a ``DebeziumServer`` custom resource, the
shape the Debezium operator consumes.
"""

import re
from dataclasses import dataclass, field
from typing import Any, Dict

from cdc_conductor.compiler.storage import OffsetConfig, SchemaHistoryConfig
from cdc_conductor.compiler.transforms import CompiledTransforms
from cdc_conductor.domain.models import Pipeline, PipelineId

API_GROUP = "debezium.io"
API_VERSION = "v1alpha1"
KIND = "DebeziumServer"
PLURAL = "debeziumservers"
LABEL_CONDUCTOR_ID = "debezium.io/conductor-id"

MAX_RESOURCE_NAME_LENGTH = 63

_INVALID_NAME_CHARS = re.compile(r"[^a-z0-9-]")
_DASH_RUNS = re.compile(r"-+")


def resource_name_for(pipeline: Pipeline) -> str:
    """Kubernetes resource name (RFC 1123 label) derived from the pipeline name."""
    name = _INVALID_NAME_CHARS.sub("-", (pipeline.name or "").lower())
    name = _DASH_RUNS.sub("-", name).strip("-")
    name = name[:MAX_RESOURCE_NAME_LENGTH].rstrip("-")
    return name or f"pipeline-{pipeline.id}"


@dataclass(frozen=True)
class RuntimeSpec:
    log_level: str = "INFO"
    console_json: bool = False
    api_enabled: bool = True
    jmx_exporter_enabled: bool = True

    def quarkus_spec(self) -> Dict[str, Any]:
        return {
            "config": {
                "log.level": self.log_level,
                "log.console.json": self.console_json,
            }
        }

    def runtime_spec(self) -> Dict[str, Any]:
        return {
            "api": {"enabled": self.api_enabled},
            "metrics": {"jmxExporter": {"enabled": self.jmx_exporter_enabled}},
        }


@dataclass(frozen=True)
class SourceSpec:
    source_class: str
    config: Dict[str, Any]
    offset: OffsetConfig
    schema_history: SchemaHistoryConfig

    def to_spec(self) -> Dict[str, Any]:
        return {
            "class": self.source_class,
            "offset": self.offset.to_spec(),
            "schemaHistory": self.schema_history.to_spec(),
            "config": dict(self.config),
        }


@dataclass(frozen=True)
class SinkSpec:
    type: str
    config: Dict[str, Any]

    def to_spec(self) -> Dict[str, Any]:
        return {"type": self.type, "config": dict(self.config)}


@dataclass
class DeploymentSpec:
    """Everything needed to run one pipeline, tagged with its id and name."""

    pipeline_id: PipelineId
    pipeline_name: str
    resource_name: str
    runtime: RuntimeSpec
    source: SourceSpec
    sink: SinkSpec
    transforms: CompiledTransforms = field(default_factory=CompiledTransforms)
    suspended: bool = False

    @property
    def labels(self) -> Dict[str, str]:
        return {LABEL_CONDUCTOR_ID: str(self.pipeline_id)}

    def to_resource(self) -> Dict[str, Any]:
        """Render the ``DebeziumServer`` custom resource."""
        spec: Dict[str, Any] = {
            "quarkus": self.runtime.quarkus_spec(),
            "runtime": self.runtime.runtime_spec(),
            "source": self.source.to_spec(),
            "sink": self.sink.to_spec(),
            "transforms": [t.to_spec() for t in self.transforms.transformations],
            "predicates": {
                alias: predicate.to_spec()
                for alias, predicate in self.transforms.predicates.items()
            },
        }
        if self.suspended:
            spec["suspended"] = True

        return {
            "apiVersion": f"{API_GROUP}/{API_VERSION}",
            "kind": KIND,
            "metadata": {
                "name": self.resource_name,
                "labels": self.labels,
                "annotations": {"debezium.io/pipeline-name": self.pipeline_name},
            },
            "spec": spec,
        }
