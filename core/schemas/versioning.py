"""
Schemas
File: versioning.py

Purpose: Centralize schema version constants.
Kept free of imports from other schema files to avoid circular dependencies.
"""

from typing import Literal

# Current schema version - stamped on every persisted model
SCHEMA_VERSION: str = "v1"

SchemaVersion = Literal["v1"]

SUPPORTED_SCHEMA_VERSIONS: frozenset[str] = frozenset({"v1"})


class UnsupportedSchemaVersionError(ValueError):
    """Raised when an unsupported schema version is encountered."""

    def __init__(self, version: str, supported: frozenset[str] | None = None) -> None:
        self.version = version
        self.supported = supported or SUPPORTED_SCHEMA_VERSIONS
        super().__init__(
            f"Unsupported schema version: '{version}'. "
            f"Supported versions: {sorted(self.supported)}"
        )


def assert_supported_schema_version(version: str) -> None:
    """Raise UnsupportedSchemaVersionError unless the version is known."""
    if version not in SUPPORTED_SCHEMA_VERSIONS:
        raise UnsupportedSchemaVersionError(version)
