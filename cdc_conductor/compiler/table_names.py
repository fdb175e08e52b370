"""Generation of per-pipeline storage identifiers.

Identifiers end up as unquoted PostgreSQL table names, so the sanitized form
follows PostgreSQL rules: lowercase, ``[a-z0-9_]`` only, not starting with a
digit, at most 63 bytes.
"""

import re
from typing import Callable, Dict

from cdc_conductor.domain.models import Pipeline
from cdc_conductor.errors import InvalidArgumentError

MAX_IDENTIFIER_LENGTH = 63

PIPELINE_NAME_PLACEHOLDER = "@{pipeline_name}"

_INVALID_CHARS = re.compile(r"[^a-z0-9_]")
_VALID_START = re.compile(r"^[a-z_]")
_UNDERSCORE_RUNS = re.compile(r"_+")
_TRAILING_UNDERSCORE = re.compile(r"_$")


class TableNameResolver:
    """Expand and sanitize table name templates for a pipeline."""

    PLACEHOLDERS: Dict[str, Callable[[Pipeline], str]] = {
        PIPELINE_NAME_PLACEHOLDER: lambda pipeline: pipeline.name,
    }

    def resolve(self, pipeline: Pipeline, template_or_suffix: str) -> str:
        """Resolve a table name for ``pipeline``.

        A value without placeholders is a suffix appended to the sanitized
        pipeline name. A value with placeholders is expanded and then
        sanitized as a whole.

        Raises:
            InvalidArgumentError: If the pipeline name or the suffix is empty
        """
        if not template_or_suffix:
            raise InvalidArgumentError("Table name suffix cannot be null or empty")

        if self.has_placeholders(template_or_suffix):
            expanded = template_or_suffix
            for placeholder, value_of in self.PLACEHOLDERS.items():
                if placeholder in expanded:
                    expanded = expanded.replace(placeholder, value_of(pipeline) or "")
            return sanitize_table_name(expanded)

        return f"{sanitize_table_name(pipeline.name)}_{template_or_suffix}"

    def has_placeholders(self, value: str) -> bool:
        return any(placeholder in value for placeholder in self.PLACEHOLDERS)


def sanitize_table_name(table_name: str) -> str:
    """Sanitize a string for use as a PostgreSQL table name.

    Raises:
        InvalidArgumentError: If ``table_name`` is None or empty
    """
    if not table_name:
        raise InvalidArgumentError("Table name cannot be null or empty")

    # PostgreSQL folds unquoted identifiers to lowercase
    sanitized = table_name.lower()
    sanitized = _INVALID_CHARS.sub("_", sanitized)

    if not _VALID_START.match(sanitized):
        sanitized = "_" + sanitized

    sanitized = _UNDERSCORE_RUNS.sub("_", sanitized)
    sanitized = _TRAILING_UNDERSCORE.sub("", sanitized)

    # Only ASCII is left at this point, so characters and bytes coincide
    if len(sanitized) > MAX_IDENTIFIER_LENGTH:
        sanitized = sanitized[:MAX_IDENTIFIER_LENGTH]
        sanitized = _TRAILING_UNDERSCORE.sub("", sanitized)

    return sanitized
