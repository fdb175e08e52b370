import pytest

from cdc_conductor.compiler.deployment import (
    LABEL_CONDUCTOR_ID,
    RuntimeSpec,
    resource_name_for,
)


@pytest.mark.parametrize(
    "name,expected",
    [
        ("Orders Pipeline", "orders-pipeline"),
        ("orders_eu--v2", "orders-eu-v2"),
        ("  --Inventory!!  ", "inventory"),
        ("x" * 80, "x" * 63),
    ],
)
def test_resource_name_is_a_dns_label(make_pipeline, name, expected):
    assert resource_name_for(make_pipeline(name=name)) == expected


def test_resource_name_falls_back_to_pipeline_id(make_pipeline):
    assert resource_name_for(make_pipeline(name="!!!", pipeline_id=12)) == "pipeline-12"


def test_runtime_spec_defaults():
    runtime = RuntimeSpec(log_level="DEBUG")

    assert runtime.quarkus_spec() == {
        "config": {"log.level": "DEBUG", "log.console.json": False}
    }
    assert runtime.runtime_spec() == {
        "api": {"enabled": True},
        "metrics": {"jmxExporter": {"enabled": True}},
    }


def test_label_name():
    assert LABEL_CONDUCTOR_ID == "debezium.io/conductor-id"
