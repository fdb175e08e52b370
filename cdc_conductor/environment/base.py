from abc import ABC, abstractmethod
from typing import Any, Dict, Optional

from cdc_conductor.domain.models import PipelineId


class DeploymentTarget(ABC):
    """External system that turns a compiled resource into a running pipeline.

    Implementations must apply idempotently: deploying a resource whose name
    already exists replaces it instead of creating a second one.
    """

    @abstractmethod
    def deploy(self, resource: Dict[str, Any]) -> Dict[str, Any]:
        """Create or replace the resource.

        Args:
            resource: Rendered ``DebeziumServer`` custom resource

        Returns:
            The resource as stored by the target
        """

    @abstractmethod
    def find(self, pipeline_id: PipelineId) -> Optional[Dict[str, Any]]:
        """Return the live resource labeled with ``pipeline_id``, if any."""

    @abstractmethod
    def undeploy(self, pipeline_id: PipelineId) -> bool:
        """Delete the resource of ``pipeline_id``.

        Returns:
            True if a resource was deleted, False if there was none
        """

    @abstractmethod
    def change_status(self, pipeline_id: PipelineId, suspended: bool) -> bool:
        """Set the ``suspended`` flag of the pipeline's resource.

        Returns:
            True if the flag changed, False if it already had that value

        Raises:
            NotFoundError: If the pipeline has no resource
        """


def is_suspended(resource: Dict[str, Any]) -> bool:
    return bool((resource.get("spec") or {}).get("suspended", False))
