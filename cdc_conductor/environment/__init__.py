"""Deployment targets that run compiled pipelines."""

from cdc_conductor.environment.base import DeploymentTarget
from cdc_conductor.environment.in_memory import InMemoryDeploymentTarget
from cdc_conductor.environment.proxy import DebeziumServerProxy

__all__ = [
    "DebeziumServerProxy",
    "DeploymentTarget",
    "InMemoryDeploymentTarget",
]
