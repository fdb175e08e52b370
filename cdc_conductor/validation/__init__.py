"""Pre-save connection validation for destination families."""

from cdc_conductor.validation.base import (
    ConnectionValidationResult,
    ConnectionValidator,
    DestinationType,
    ValidationErrorKind,
)
from cdc_conductor.validation.registry import (
    ValidatorRegistry,
    default_registry,
    register_validator,
)

# Importing the modules registers the validators
from cdc_conductor.validation.http_validator import HttpConnectionValidator  # noqa: E402
from cdc_conductor.validation.kinesis_validator import (  # noqa: E402
    KinesisConnectionValidator,
)
from cdc_conductor.validation.milvus_validator import (  # noqa: E402
    MilvusConnectionValidator,
)
from cdc_conductor.validation.qdrant_validator import (  # noqa: E402
    QdrantConnectionValidator,
)
from cdc_conductor.validation.redis_validator import (  # noqa: E402
    RedisConnectionValidator,
)

__all__ = [
    "ConnectionValidationResult",
    "ConnectionValidator",
    "DestinationType",
    "ValidationErrorKind",
    "ValidatorRegistry",
    "default_registry",
    "register_validator",
    "HttpConnectionValidator",
    "KinesisConnectionValidator",
    "MilvusConnectionValidator",
    "QdrantConnectionValidator",
    "RedisConnectionValidator",
]
