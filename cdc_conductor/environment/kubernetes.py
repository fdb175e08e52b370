"""Deployment target backed by the Debezium Kubernetes operator."""

from typing import Any, Dict, Optional

from kubernetes import client
from kubernetes import config as kube_config
from kubernetes.client.rest import ApiException

from cdc_conductor.compiler.deployment import (
    API_GROUP,
    API_VERSION,
    LABEL_CONDUCTOR_ID,
    PLURAL,
)
from cdc_conductor.config import KubernetesSettings
from cdc_conductor.domain.models import PipelineId
from cdc_conductor.environment.base import DeploymentTarget, is_suspended
from cdc_conductor.errors import ConductorError, NotFoundError
from cdc_conductor.logging import get_logger

logger = get_logger(__name__)


class KubernetesDeploymentTarget(DeploymentTarget):
    """Manage ``DebeziumServer`` custom resources in one namespace.

    Resources are looked up by the ``debezium.io/conductor-id`` label rather
    than by name, so renaming a pipeline does not orphan its deployment lookup.
    """

    def __init__(
        self,
        settings: Optional[KubernetesSettings] = None,
        api: Optional[client.CustomObjectsApi] = None,
    ):
        self.settings = settings or KubernetesSettings()
        self.namespace = self.settings.namespace
        self._api = api

    @property
    def api(self) -> client.CustomObjectsApi:
        if self._api is None:
            if self.settings.in_cluster:
                kube_config.load_incluster_config()
            else:
                kube_config.load_kube_config(context=self.settings.kubeconfig_context)
            self._api = client.CustomObjectsApi()
        return self._api

    def deploy(self, resource: Dict[str, Any]) -> Dict[str, Any]:
        name = resource["metadata"]["name"]
        try:
            existing = self.api.get_namespaced_custom_object(
                API_GROUP, API_VERSION, self.namespace, PLURAL, name
            )
        except ApiException as e:
            if e.status != 404:
                raise ConductorError(
                    f"Failed to look up deployment '{name}': {e.reason}"
                ) from e
            existing = None

        try:
            if existing is None:
                logger.info(f"Creating DebeziumServer '{name}' in '{self.namespace}'")
                return self.api.create_namespaced_custom_object(
                    API_GROUP, API_VERSION, self.namespace, PLURAL, resource
                )

            body = dict(resource)
            body["metadata"] = dict(resource["metadata"])
            body["metadata"]["resourceVersion"] = existing["metadata"]["resourceVersion"]
            logger.info(f"Replacing DebeziumServer '{name}' in '{self.namespace}'")
            return self.api.replace_namespaced_custom_object(
                API_GROUP, API_VERSION, self.namespace, PLURAL, name, body
            )
        except ApiException as e:
            raise ConductorError(f"Failed to deploy '{name}': {e.reason}") from e

    def find(self, pipeline_id: PipelineId) -> Optional[Dict[str, Any]]:
        try:
            result = self.api.list_namespaced_custom_object(
                API_GROUP,
                API_VERSION,
                self.namespace,
                PLURAL,
                label_selector=f"{LABEL_CONDUCTOR_ID}={pipeline_id}",
            )
        except ApiException as e:
            raise ConductorError(
                f"Failed to look up deployment of pipeline {pipeline_id}: {e.reason}"
            ) from e

        items = result.get("items") or []
        if len(items) > 1:
            logger.warning(
                f"Found {len(items)} deployments labeled with pipeline {pipeline_id}, using the first"
            )
        return items[0] if items else None

    def undeploy(self, pipeline_id: PipelineId) -> bool:
        resource = self.find(pipeline_id)
        if resource is None:
            logger.debug(f"No deployment for pipeline {pipeline_id}, nothing to undeploy")
            return False

        name = resource["metadata"]["name"]
        try:
            self.api.delete_namespaced_custom_object(
                API_GROUP, API_VERSION, self.namespace, PLURAL, name
            )
        except ApiException as e:
            if e.status == 404:
                return False
            raise ConductorError(f"Failed to undeploy '{name}': {e.reason}") from e

        logger.info(f"Deleted DebeziumServer '{name}'")
        return True

    def change_status(self, pipeline_id: PipelineId, suspended: bool) -> bool:
        resource = self.find(pipeline_id)
        if resource is None:
            raise NotFoundError(f"Pipeline with id {pipeline_id} not found")
        if is_suspended(resource) == suspended:
            return False

        name = resource["metadata"]["name"]
        try:
            self.api.patch_namespaced_custom_object(
                API_GROUP,
                API_VERSION,
                self.namespace,
                PLURAL,
                name,
                {"spec": {"suspended": suspended}},
            )
        except ApiException as e:
            raise ConductorError(
                f"Failed to change status of '{name}': {e.reason}"
            ) from e

        logger.info(f"DebeziumServer '{name}' suspended={suspended}")
        return True
