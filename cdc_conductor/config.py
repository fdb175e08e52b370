"""Process-wide conductor configuration.

The configuration is read once (usually from a YAML file) and handed to the
compiler and the validator registry at construction time. Nothing in the
package reads ambient configuration on its own.

Example file::

    conductor:
      pipeline:
        offset:
          storage:
            type: io.debezium.storage.jdbc.offset.JdbcOffsetBackingStore
            config:
              jdbc:
                url: ${OFFSET_JDBC_URL}
                user: ${OFFSET_JDBC_USER|postgres}
        schema:
          internal: io.debezium.storage.file.history.FileSchemaHistory
          config:
            file.filename: schema-history.dat
      kubernetes:
        namespace: debezium
      signals:
        port: 8080
        timeout: 10
    destinations:
      redis:
        connection:
          timeout: 5
"""

import os
import re
from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional

import yaml

from cdc_conductor.errors import ConfigurationError
from cdc_conductor.logging import get_logger

logger = get_logger(__name__)

FILE_OFFSET_STORE = "org.apache.kafka.connect.storage.FileOffsetBackingStore"
FILE_SCHEMA_HISTORY_STORE = "io.debezium.storage.file.history.FileSchemaHistory"
DEFAULT_VALIDATION_TIMEOUT_SECONDS = 30

_VARIABLE_PATTERN = re.compile(r"\$\{([^}|]+)(?:\|([^}]*))?\}")


@dataclass
class StorageSettings:
    """Backend type identifier plus its flat ``key -> value`` configuration."""

    type: str
    config: Dict[str, str] = field(default_factory=dict)


@dataclass
class KubernetesSettings:
    namespace: str = "debezium"
    in_cluster: bool = False
    kubeconfig_context: Optional[str] = None


@dataclass
class SignalSettings:
    port: int = 8080
    timeout_seconds: float = 10.0
    scheme: str = "http"


def _default_offset() -> StorageSettings:
    return StorageSettings(FILE_OFFSET_STORE, {"file.filename": "offsets.dat"})


def _default_schema_history() -> StorageSettings:
    return StorageSettings(
        FILE_SCHEMA_HISTORY_STORE, {"file.filename": "schema-history.dat"}
    )


@dataclass
class ConductorConfig:
    """Explicit configuration for compilation, deployment and validation."""

    offset: StorageSettings = field(default_factory=_default_offset)
    schema_history: StorageSettings = field(default_factory=_default_schema_history)
    validation_timeouts: Dict[str, int] = field(default_factory=dict)
    kubernetes: KubernetesSettings = field(default_factory=KubernetesSettings)
    signals: SignalSettings = field(default_factory=SignalSettings)

    def validation_timeout(self, destination_type: str) -> int:
        """Return the connection timeout (seconds) for a destination family."""
        return int(
            self.validation_timeouts.get(
                destination_type.lower(), DEFAULT_VALIDATION_TIMEOUT_SECONDS
            )
        )

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ConductorConfig":
        """Build a configuration from an already parsed (and substituted) document."""
        if data is None:
            return cls()
        if not isinstance(data, Mapping):
            raise ConfigurationError("Configuration root must be a mapping")

        conductor = _section(data, "conductor")
        pipeline = _section(conductor, "pipeline")

        config = cls()

        offset_storage = _section(_section(pipeline, "offset"), "storage")
        if offset_storage:
            config.offset = _storage_settings(
                offset_storage, "type", "conductor.pipeline.offset.storage"
            )

        schema = _section(pipeline, "schema")
        if schema:
            config.schema_history = _storage_settings(
                schema, "internal", "conductor.pipeline.schema"
            )

        kubernetes = _section(conductor, "kubernetes")
        if kubernetes:
            config.kubernetes = KubernetesSettings(
                namespace=str(kubernetes.get("namespace", "debezium")),
                in_cluster=_as_bool(kubernetes.get("in-cluster", False)),
                kubeconfig_context=kubernetes.get("context"),
            )

        signals = _section(conductor, "signals")
        if signals:
            try:
                config.signals = SignalSettings(
                    port=int(signals.get("port", 8080)),
                    timeout_seconds=float(signals.get("timeout", 10.0)),
                    scheme=str(signals.get("scheme", "http")),
                )
            except (TypeError, ValueError) as e:
                raise ConfigurationError(f"Invalid signals configuration: {e}")

        destinations = _section(data, "destinations")
        for name in destinations:
            timeout = _section(_section(destinations, name), "connection").get(
                "timeout"
            )
            if timeout is None:
                continue
            try:
                seconds = int(timeout)
            except (TypeError, ValueError):
                raise ConfigurationError(
                    f"destinations.{name}.connection.timeout must be an integer"
                )
            if seconds <= 0:
                raise ConfigurationError(
                    f"destinations.{name}.connection.timeout must be positive"
                )
            config.validation_timeouts[str(name).lower()] = seconds

        return config


def load_config(
    path: Optional[str] = None, variables: Optional[Mapping[str, str]] = None
) -> ConductorConfig:
    """Load configuration from a YAML file.

    ``${VAR}`` and ``${VAR|default}`` references are resolved against
    ``variables`` (defaults to the process environment) before parsing.

    Args:
        path: Path to the YAML file. ``None`` returns the defaults.
        variables: Values for placeholder substitution

    Returns:
        Parsed ConductorConfig

    Raises:
        ConfigurationError: If the file is missing or malformed
    """
    if path is None:
        logger.debug("No configuration file given, using defaults")
        return ConductorConfig()

    if not os.path.exists(path):
        raise ConfigurationError(f"Configuration file not found: {path}")

    with open(path, "r", encoding="utf-8") as f:
        raw = f.read()

    text = substitute_variables(raw, os.environ if variables is None else variables)
    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Invalid YAML in {path}: {e}")

    logger.debug(f"Loaded conductor configuration from {path}")
    return ConductorConfig.from_dict(data or {})


def substitute_variables(text: str, variables: Mapping[str, Any]) -> str:
    """Substitute ${var} and ${var|default} patterns.

    Unknown variables without a default are left untouched.
    """
    if not text:
        return text

    def replace(match):
        var_name = match.group(1).strip()
        default = match.group(2)

        if var_name in variables:
            return str(variables[var_name])
        elif default is not None:
            return default.strip().strip("'\"")
        else:
            return match.group(0)

    return _VARIABLE_PATTERN.sub(replace, text)


def flatten_config(data: Mapping[str, Any], prefix: str = "") -> Dict[str, str]:
    """Flatten nested mappings into dotted keys with string values.

    ``{"file": {"filename": "offsets.dat"}}`` becomes
    ``{"file.filename": "offsets.dat"}``.
    """
    flat: Dict[str, str] = {}
    for key, value in data.items():
        full_key = f"{prefix}.{key}" if prefix else str(key)
        if isinstance(value, Mapping):
            flat.update(flatten_config(value, full_key))
        elif value is None:
            continue
        elif isinstance(value, bool):
            flat[full_key] = "true" if value else "false"
        else:
            flat[full_key] = str(value)
    return flat


def _section(data: Mapping[str, Any], key: str) -> Mapping[str, Any]:
    value = data.get(key) if data else None
    if value is None:
        return {}
    if not isinstance(value, Mapping):
        raise ConfigurationError(f"'{key}' section must be a mapping")
    return value


def _storage_settings(
    section: Mapping[str, Any], type_key: str, path: str
) -> StorageSettings:
    store_type = section.get(type_key)
    if not store_type:
        raise ConfigurationError(f"{path}.{type_key} must be specified")
    return StorageSettings(
        type=str(store_type).strip(),
        config=flatten_config(_section(section, "config")),
    )


def _as_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() == "true"
