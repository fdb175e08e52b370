"""Compilation of pipelines into deployable runtime configuration."""

from cdc_conductor.compiler.deployment import DeploymentSpec, resource_name_for
from cdc_conductor.compiler.pipeline import PipelineDeploymentCompiler
from cdc_conductor.compiler.storage import (
    OffsetConfig,
    OffsetConfigurationFactory,
    SchemaHistoryConfig,
    SchemaHistoryConfigurationFactory,
    StoreKind,
)
from cdc_conductor.compiler.table_names import TableNameResolver, sanitize_table_name
from cdc_conductor.compiler.transforms import (
    CompiledTransforms,
    PredicateTransformCompiler,
    predicate_alias,
)

__all__ = [
    "CompiledTransforms",
    "DeploymentSpec",
    "OffsetConfig",
    "OffsetConfigurationFactory",
    "PipelineDeploymentCompiler",
    "PredicateTransformCompiler",
    "SchemaHistoryConfig",
    "SchemaHistoryConfigurationFactory",
    "StoreKind",
    "TableNameResolver",
    "predicate_alias",
    "resource_name_for",
    "sanitize_table_name",
]
