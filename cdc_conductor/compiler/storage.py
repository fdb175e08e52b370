"""Offset and schema history storage configuration.

A pipeline persists two kinds of state: how far the source has been streamed
(offsets) and how the source schema evolved (schema history). Both are
pluggable over the same family of backends. The backend is selected by a
process-wide type identifier; the resolvers below turn that identifier and its
flat configuration map into exactly one concrete store.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, ClassVar, Dict, Mapping, Optional, Type, Union

from typing_extensions import assert_never

from cdc_conductor.compiler.table_names import TableNameResolver
from cdc_conductor.config import ConductorConfig, StorageSettings
from cdc_conductor.domain.models import Pipeline
from cdc_conductor.errors import UnsupportedConfigurationError
from cdc_conductor.logging import get_logger

logger = get_logger(__name__)


class StoreKind(Enum):
    FILE = "file"
    JDBC = "jdbc"
    KAFKA = "kafka"
    REDIS = "redis"
    CONFIG_MAP = "configMap"
    IN_MEMORY = "memory"


# Configuration keys, as found in the global storage config map
FILE_FILENAME = "file.filename"
JDBC_URL = "jdbc.url"
JDBC_USER = "jdbc.user"
JDBC_PASSWORD = "jdbc.password"
KAFKA_BOOTSTRAP_SERVERS = "bootstrap.servers"
KAFKA_TOPIC = "topic"
KAFKA_PARTITIONS = "partitions"
KAFKA_REPLICATION_FACTOR = "replication.factor"
REDIS_ADDRESS = "address"
REDIS_USER = "user"
REDIS_PASSWORD = "password"
REDIS_SSL_ENABLED = "ssl.enabled"
REDIS_KEY = "key"
REDIS_WAIT_ENABLED = "wait.enabled"
REDIS_WAIT_TIMEOUT_MS = "wait.timeout.ms"
REDIS_WAIT_RETRY_ENABLED = "wait.retry.enabled"
REDIS_WAIT_RETRY_DELAY_MS = "wait.retry.delay.ms"
CONFIG_MAP_NAME = "configmap.name"

KAFKA_KNOWN_KEYS = (
    KAFKA_BOOTSTRAP_SERVERS,
    KAFKA_TOPIC,
    KAFKA_PARTITIONS,
    KAFKA_REPLICATION_FACTOR,
)


@dataclass(frozen=True)
class FileStore:
    file_name: Optional[str] = None


@dataclass(frozen=True)
class JdbcStore:
    url: Optional[str]
    user: Optional[str]
    password: Optional[str]
    table_name: str


@dataclass(frozen=True)
class KafkaStore:
    bootstrap_servers: Optional[str]
    topic: Optional[str]
    partitions: int = 1
    replication_factor: int = 1
    props: Dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class RedisWaitConfig:
    """Write acknowledgement policy (Redis ``WAIT``)."""

    enabled: bool = False
    timeout_ms: Optional[int] = None
    retry: bool = False
    retry_delay_ms: Optional[int] = None


@dataclass(frozen=True)
class RedisStore:
    address: Optional[str]
    user: Optional[str]
    password: Optional[str]
    ssl_enabled: bool
    key: Optional[str]
    wait: RedisWaitConfig = field(default_factory=RedisWaitConfig)


@dataclass(frozen=True)
class ConfigMapStore:
    name: Optional[str]


@dataclass(frozen=True)
class InMemoryStore:
    pass


Store = Union[FileStore, JdbcStore, KafkaStore, RedisStore, ConfigMapStore, InMemoryStore]


def store_kind(store: Store) -> StoreKind:
    if isinstance(store, FileStore):
        return StoreKind.FILE
    elif isinstance(store, JdbcStore):
        return StoreKind.JDBC
    elif isinstance(store, KafkaStore):
        return StoreKind.KAFKA
    elif isinstance(store, RedisStore):
        return StoreKind.REDIS
    elif isinstance(store, ConfigMapStore):
        return StoreKind.CONFIG_MAP
    elif isinstance(store, InMemoryStore):
        return StoreKind.IN_MEMORY
    else:
        assert_never(store)


def store_to_spec(store: Store) -> Dict[str, Any]:
    """Serialize a store into the operator's custom resource representation."""
    if isinstance(store, FileStore):
        return _drop_none({"fileName": store.file_name})
    elif isinstance(store, JdbcStore):
        return _drop_none(
            {
                "url": store.url,
                "user": store.user,
                "password": store.password,
                "table": {"name": store.table_name},
            }
        )
    elif isinstance(store, KafkaStore):
        spec = _drop_none(
            {
                "bootstrapServers": store.bootstrap_servers,
                "topic": store.topic,
                "partitions": store.partitions,
                "replicationFactor": store.replication_factor,
            }
        )
        if store.props:
            spec["props"] = dict(store.props)
        return spec
    elif isinstance(store, RedisStore):
        return _drop_none(
            {
                "address": store.address,
                "user": store.user,
                "password": store.password,
                "sslEnabled": store.ssl_enabled,
                "key": store.key,
                "wait": _drop_none(
                    {
                        "enabled": store.wait.enabled,
                        "timeoutMs": store.wait.timeout_ms,
                        "retry": store.wait.retry,
                        "retryDelayMs": store.wait.retry_delay_ms,
                    }
                ),
            }
        )
    elif isinstance(store, ConfigMapStore):
        return _drop_none({"name": store.name})
    elif isinstance(store, InMemoryStore):
        return {}
    else:
        assert_never(store)


@dataclass(frozen=True)
class StorageConfig:
    """Exactly one active store for one axis (offset or schema history)."""

    store: Store

    @property
    def active_store(self) -> Store:
        return self.store

    @property
    def kind(self) -> StoreKind:
        return store_kind(self.store)

    @property
    def file(self) -> Optional[FileStore]:
        return self.store if isinstance(self.store, FileStore) else None

    @property
    def jdbc(self) -> Optional[JdbcStore]:
        return self.store if isinstance(self.store, JdbcStore) else None

    @property
    def kafka(self) -> Optional[KafkaStore]:
        return self.store if isinstance(self.store, KafkaStore) else None

    @property
    def redis(self) -> Optional[RedisStore]:
        return self.store if isinstance(self.store, RedisStore) else None

    @property
    def config_map(self) -> Optional[ConfigMapStore]:
        return self.store if isinstance(self.store, ConfigMapStore) else None

    @property
    def in_memory(self) -> Optional[InMemoryStore]:
        return self.store if isinstance(self.store, InMemoryStore) else None

    def to_spec(self) -> Dict[str, Any]:
        return {self.kind.value: store_to_spec(self.store)}


class OffsetConfig(StorageConfig):
    pass


class SchemaHistoryConfig(StorageConfig):
    pass


class StorageConfigurationFactory:
    """Select a storage backend and resolve its per-pipeline identifiers.

    Subclasses only declare which type identifiers they accept, how the
    unsupported-type error reads and which key holds the JDBC table name.
    """

    store_types: ClassVar[Dict[str, StoreKind]] = {}
    unsupported_message: ClassVar[str] = "Storage type {} not supported"
    table_name_key: ClassVar[str] = ""
    default_table_suffix: ClassVar[str] = ""
    config_class: ClassVar[Type[StorageConfig]] = StorageConfig

    def __init__(
        self,
        settings: StorageSettings,
        table_name_resolver: Optional[TableNameResolver] = None,
    ):
        self.settings = settings
        self.table_name_resolver = table_name_resolver or TableNameResolver()

    def create(self, pipeline: Pipeline) -> StorageConfig:
        """Build the storage configuration for ``pipeline``.

        Raises:
            UnsupportedConfigurationError: If the configured type is unknown or
                one of its values cannot be parsed
            InvalidArgumentError: If a table name has to be generated for a
                pipeline without a name
        """
        store_type = self.settings.type
        kind = self.store_types.get(store_type)
        if kind is None:
            raise UnsupportedConfigurationError(
                self.unsupported_message.format(store_type)
            )

        config = dict(self.settings.config or {})
        store = self._build_store(kind, pipeline, config)
        logger.debug(
            f"Resolved {kind.value} store for pipeline '{pipeline.name}' from {store_type}"
        )
        return self.config_class(store)

    def _build_store(
        self, kind: StoreKind, pipeline: Pipeline, config: Mapping[str, str]
    ) -> Store:
        if kind is StoreKind.FILE:
            return FileStore(file_name=config.get(FILE_FILENAME))
        elif kind is StoreKind.JDBC:
            return JdbcStore(
                url=config.get(JDBC_URL),
                user=config.get(JDBC_USER),
                password=config.get(JDBC_PASSWORD),
                table_name=self._table_name(pipeline, config),
            )
        elif kind is StoreKind.KAFKA:
            return KafkaStore(
                bootstrap_servers=config.get(KAFKA_BOOTSTRAP_SERVERS),
                topic=config.get(KAFKA_TOPIC),
                partitions=_parse_int(config, KAFKA_PARTITIONS, 1),
                replication_factor=_parse_int(config, KAFKA_REPLICATION_FACTOR, 1),
                props={
                    k: v for k, v in config.items() if k not in KAFKA_KNOWN_KEYS
                },
            )
        elif kind is StoreKind.REDIS:
            return RedisStore(
                address=config.get(REDIS_ADDRESS),
                user=config.get(REDIS_USER),
                password=config.get(REDIS_PASSWORD),
                ssl_enabled=_parse_bool(config.get(REDIS_SSL_ENABLED)),
                key=config.get(REDIS_KEY),
                wait=RedisWaitConfig(
                    enabled=_parse_bool(config.get(REDIS_WAIT_ENABLED)),
                    timeout_ms=_parse_int(config, REDIS_WAIT_TIMEOUT_MS, None),
                    retry=_parse_bool(config.get(REDIS_WAIT_RETRY_ENABLED)),
                    retry_delay_ms=_parse_int(config, REDIS_WAIT_RETRY_DELAY_MS, None),
                ),
            )
        elif kind is StoreKind.CONFIG_MAP:
            return ConfigMapStore(name=config.get(CONFIG_MAP_NAME))
        elif kind is StoreKind.IN_MEMORY:
            return InMemoryStore()
        else:
            assert_never(kind)

    def _table_name(self, pipeline: Pipeline, config: Mapping[str, str]) -> str:
        template = config.get(self.table_name_key) or self.default_table_suffix
        return self.table_name_resolver.resolve(pipeline, template)


class OffsetConfigurationFactory(StorageConfigurationFactory):
    store_types = {
        "org.apache.kafka.connect.storage.FileOffsetBackingStore": StoreKind.FILE,
        "io.debezium.storage.jdbc.offset.JdbcOffsetBackingStore": StoreKind.JDBC,
        "org.apache.kafka.connect.storage.KafkaOffsetBackingStore": StoreKind.KAFKA,
        "io.debezium.storage.redis.offset.RedisOffsetBackingStore": StoreKind.REDIS,
        "io.debezium.storage.configmap.ConfigMapOffsetStore": StoreKind.CONFIG_MAP,
        "org.apache.kafka.connect.storage.MemoryOffsetBackingStore": StoreKind.IN_MEMORY,
    }
    unsupported_message = "Offset type {} not supported"
    table_name_key = "jdbc.offset.table.name"
    default_table_suffix = "offset"
    config_class = OffsetConfig

    @classmethod
    def from_config(
        cls,
        config: ConductorConfig,
        table_name_resolver: Optional[TableNameResolver] = None,
    ) -> "OffsetConfigurationFactory":
        return cls(config.offset, table_name_resolver)


class SchemaHistoryConfigurationFactory(StorageConfigurationFactory):
    store_types = {
        "io.debezium.storage.file.history.FileSchemaHistory": StoreKind.FILE,
        "io.debezium.storage.jdbc.history.JdbcSchemaHistory": StoreKind.JDBC,
        "io.debezium.storage.kafka.history.KafkaSchemaHistory": StoreKind.KAFKA,
        "io.debezium.storage.redis.history.RedisSchemaHistory": StoreKind.REDIS,
        "io.debezium.relational.history.MemorySchemaHistory": StoreKind.IN_MEMORY,
    }
    unsupported_message = "Schema history {} not supported"
    table_name_key = "jdbc.schema.history.table.name"
    default_table_suffix = "schema_history"
    config_class = SchemaHistoryConfig

    @classmethod
    def from_config(
        cls,
        config: ConductorConfig,
        table_name_resolver: Optional[TableNameResolver] = None,
    ) -> "SchemaHistoryConfigurationFactory":
        return cls(config.schema_history, table_name_resolver)


def _parse_int(config: Mapping[str, str], key: str, default: Optional[int]) -> Optional[int]:
    value = config.get(key)
    if value is None or str(value).strip() == "":
        return default
    try:
        return int(str(value).strip())
    except ValueError:
        raise UnsupportedConfigurationError(
            f"Storage property '{key}' must be an integer, got '{value}'"
        )


def _parse_bool(value: Optional[str]) -> bool:
    # Anything but a case-insensitive "true" is false
    return value is not None and str(value).strip().lower() == "true"


def _drop_none(values: Dict[str, Any]) -> Dict[str, Any]:
    return {k: v for k, v in values.items() if v is not None}
