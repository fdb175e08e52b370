from __future__ import annotations

import copy
from typing import Any, Dict, Optional

from cdc_conductor.compiler.deployment import LABEL_CONDUCTOR_ID
from cdc_conductor.domain.models import PipelineId
from cdc_conductor.environment.base import DeploymentTarget, is_suspended
from cdc_conductor.errors import NotFoundError
from cdc_conductor.logging import get_logger

logger = get_logger(__name__)


class InMemoryDeploymentTarget(DeploymentTarget):
    """
    Deployment target keeping resources in a dict, primarily for testing and
    for dry runs of the compiler.
    """

    def __init__(self, namespace: str = "default"):
        self.namespace = namespace
        self.resources: Dict[str, Dict[str, Any]] = {}

    def deploy(self, resource: Dict[str, Any]) -> Dict[str, Any]:
        stored = copy.deepcopy(resource)
        stored["metadata"].setdefault("namespace", self.namespace)
        name = stored["metadata"]["name"]
        action = "Replaced" if name in self.resources else "Created"
        self.resources[name] = stored
        logger.info(f"{action} in-memory deployment '{name}'")
        return copy.deepcopy(stored)

    def find(self, pipeline_id: PipelineId) -> Optional[Dict[str, Any]]:
        for resource in self.resources.values():
            labels = resource["metadata"].get("labels") or {}
            if labels.get(LABEL_CONDUCTOR_ID) == str(pipeline_id):
                return copy.deepcopy(resource)
        return None

    def undeploy(self, pipeline_id: PipelineId) -> bool:
        resource = self.find(pipeline_id)
        if resource is None:
            return False
        del self.resources[resource["metadata"]["name"]]
        return True

    def change_status(self, pipeline_id: PipelineId, suspended: bool) -> bool:
        resource = self.find(pipeline_id)
        if resource is None:
            raise NotFoundError(f"Pipeline with id {pipeline_id} not found")
        if is_suspended(resource) == suspended:
            return False
        self.resources[resource["metadata"]["name"]]["spec"]["suspended"] = suspended
        return True
