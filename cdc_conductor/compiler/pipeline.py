"""Pipeline deployment compiler.

Composes the runtime, source, sink, storage and transform configuration of a
pipeline into one ``DeploymentSpec`` and drives its lifecycle on a deployment
target.
"""

from typing import Any, Dict, Mapping, Optional

from cdc_conductor.compiler.deployment import (
    DeploymentSpec,
    RuntimeSpec,
    SinkSpec,
    SourceSpec,
    resource_name_for,
)
from cdc_conductor.compiler.storage import (
    OffsetConfigurationFactory,
    SchemaHistoryConfigurationFactory,
)
from cdc_conductor.compiler.table_names import TableNameResolver
from cdc_conductor.compiler.transforms import PredicateTransformCompiler
from cdc_conductor.config import ConductorConfig
from cdc_conductor.domain.models import Pipeline, PipelineId, PipelineStatus
from cdc_conductor.domain.signal import Signal
from cdc_conductor.environment.base import DeploymentTarget
from cdc_conductor.environment.proxy import DebeziumServerProxy
from cdc_conductor.errors import InvalidArgumentError, NotFoundError
from cdc_conductor.logging import get_logger

logger = get_logger(__name__)

SIGNAL_ENABLED_CHANNELS_CONFIG = "signal.enabled.channels"
NOTIFICATION_ENABLED_CHANNELS_CONFIG = "notification.enabled.channels"
DEFAULT_SIGNAL_CHANNELS = "source,in-process"
DEFAULT_NOTIFICATION_CHANNELS = "log"

SOURCE_CONFIG_DEFAULTS = {
    SIGNAL_ENABLED_CHANNELS_CONFIG: DEFAULT_SIGNAL_CHANNELS,
    NOTIFICATION_ENABLED_CHANNELS_CONFIG: DEFAULT_NOTIFICATION_CHANNELS,
}


class PipelineDeploymentCompiler:
    """Compile pipelines and manage their deployments.

    Compilation is pure: ``compile`` reads the pipeline and the configuration
    given at construction and touches nothing else. Only ``deploy`` and the
    lifecycle operations talk to the deployment target.
    """

    def __init__(
        self,
        target: DeploymentTarget,
        config: Optional[ConductorConfig] = None,
        proxy: Optional[DebeziumServerProxy] = None,
        table_name_resolver: Optional[TableNameResolver] = None,
    ):
        self.target = target
        self.config = config or ConductorConfig()
        self.proxy = proxy or DebeziumServerProxy(
            self.config.signals, namespace=self.config.kubernetes.namespace
        )
        resolver = table_name_resolver or TableNameResolver()
        self.offset_factory = OffsetConfigurationFactory.from_config(
            self.config, resolver
        )
        self.schema_history_factory = SchemaHistoryConfigurationFactory.from_config(
            self.config, resolver
        )
        self.transform_compiler = PredicateTransformCompiler()

    def compile(self, pipeline: Pipeline) -> DeploymentSpec:
        """Build the deployment spec for ``pipeline`` without submitting it.

        Raises:
            InvalidArgumentError: If the pipeline name, source type or
                destination type is missing, or transforms are malformed
            UnsupportedConfigurationError: If a storage backend is unknown
        """
        self._check_pipeline(pipeline)

        source_config = self._source_config(pipeline.source.config)
        source = SourceSpec(
            source_class=pipeline.source.type,
            config=source_config,
            offset=self.offset_factory.create(pipeline),
            schema_history=self.schema_history_factory.create(pipeline),
        )
        sink = SinkSpec(
            type=pipeline.destination.type, config=dict(pipeline.destination.config)
        )
        transforms = self.transform_compiler.compile(pipeline.ordered_transforms())

        return DeploymentSpec(
            pipeline_id=pipeline.id,
            pipeline_name=pipeline.name,
            resource_name=resource_name_for(pipeline),
            runtime=RuntimeSpec(log_level=pipeline.log_level or "INFO"),
            source=source,
            sink=sink,
            transforms=transforms,
        )

    def deploy(self, pipeline: Pipeline) -> Dict[str, Any]:
        """Compile ``pipeline`` and submit it; nothing is submitted on error."""
        spec = self.compile(pipeline)
        resource = spec.to_resource()
        logger.info(
            f"Deploying pipeline {pipeline.id} ('{pipeline.name}') as '{spec.resource_name}'"
        )
        deployed = self.target.deploy(resource)
        pipeline.status = PipelineStatus.DEPLOYED
        return deployed

    def undeploy(self, pipeline_id: PipelineId) -> bool:
        removed = self.target.undeploy(pipeline_id)
        if removed:
            logger.info(f"Undeployed pipeline {pipeline_id}")
        return removed

    def start(self, pipeline_id: PipelineId) -> bool:
        """Resume a stopped pipeline; a no-op if it is already running."""
        changed = self.target.change_status(pipeline_id, suspended=False)
        if not changed:
            logger.debug(f"Pipeline {pipeline_id} already running")
        return changed

    def stop(self, pipeline_id: PipelineId) -> bool:
        """Suspend a running pipeline; a no-op if it is already stopped."""
        changed = self.target.change_status(pipeline_id, suspended=True)
        if not changed:
            logger.debug(f"Pipeline {pipeline_id} already stopped")
        return changed

    def find_deployment(self, pipeline_id: PipelineId) -> Optional[Dict[str, Any]]:
        return self.target.find(pipeline_id)

    def send_signal(self, pipeline_id: PipelineId, signal: Signal) -> None:
        """Forward ``signal`` to the live deployment of ``pipeline_id``.

        Raises:
            NotFoundError: If the pipeline has no live deployment
            SignalDeliveryError: If the deployment could not be reached
        """
        deployment = self.find_deployment(pipeline_id)
        if deployment is None:
            raise NotFoundError(f"Pipeline with id {pipeline_id} not found")
        self.proxy.send_signal(signal, deployment)

    def _check_pipeline(self, pipeline: Pipeline) -> None:
        if pipeline is None:
            raise InvalidArgumentError("Pipeline cannot be null")
        if not pipeline.name or not pipeline.name.strip():
            raise InvalidArgumentError("Pipeline name cannot be null or empty")
        if pipeline.source is None or not pipeline.source.type:
            raise InvalidArgumentError(
                f"Pipeline '{pipeline.name}' must have a source with a type"
            )
        if pipeline.destination is None or not pipeline.destination.type:
            raise InvalidArgumentError(
                f"Pipeline '{pipeline.name}' must have a destination with a type"
            )

    def _source_config(self, config: Mapping[str, Any]) -> Dict[str, Any]:
        source_config = dict(config)
        for key, default in SOURCE_CONFIG_DEFAULTS.items():
            source_config.setdefault(key, default)
        return source_config
