"""Pytest configuration for cdc-conductor tests."""

from typing import Any, Callable, Dict, List, Optional

import pytest

from cdc_conductor.config import ConductorConfig, StorageSettings
from cdc_conductor.domain import Connection, Pipeline, Predicate, Transform
from cdc_conductor.environment import InMemoryDeploymentTarget


@pytest.fixture
def make_pipeline() -> Callable[..., Pipeline]:
    """Factory for pipelines with a Postgres source and a Redis sink."""

    def factory(
        name: str = "Orders Pipeline",
        pipeline_id: Any = 1,
        transforms: Optional[List[Transform]] = None,
        source_config: Optional[Dict[str, Any]] = None,
    ) -> Pipeline:
        return Pipeline(
            id=pipeline_id,
            name=name,
            source=Connection(
                type="io.debezium.connector.postgresql.PostgresConnector",
                config=source_config
                or {
                    "database.hostname": "postgres",
                    "database.port": "5432",
                    "database.user": "debezium",
                    "topic.prefix": "orders",
                },
            ),
            destination=Connection(
                type="redis",
                config={"address": "redis:6379"},
            ),
            transforms=transforms or [],
        )

    return factory


@pytest.fixture
def filter_transform() -> Transform:
    return Transform(
        id=7,
        type="io.debezium.transforms.Filter",
        config={"language": "jsr223.groovy", "condition": "value.op == 'c'"},
        position=0,
        predicate=Predicate(
            type="org.apache.kafka.connect.transforms.predicates.TopicNameMatches",
            config={"pattern": "orders.*"},
            negate=True,
        ),
    )


@pytest.fixture
def jdbc_config() -> ConductorConfig:
    return ConductorConfig(
        offset=StorageSettings(
            "io.debezium.storage.jdbc.offset.JdbcOffsetBackingStore",
            {
                "jdbc.url": "jdbc:postgresql://db:5432/conductor",
                "jdbc.user": "conductor",
                "jdbc.password": "secret",
            },
        ),
        schema_history=StorageSettings(
            "io.debezium.storage.jdbc.history.JdbcSchemaHistory",
            {
                "jdbc.url": "jdbc:postgresql://db:5432/conductor",
                "jdbc.user": "conductor",
                "jdbc.password": "secret",
            },
        ),
    )


@pytest.fixture
def in_memory_target() -> InMemoryDeploymentTarget:
    return InMemoryDeploymentTarget(namespace="debezium")
