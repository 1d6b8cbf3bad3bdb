"""Central exit-code taxonomy for schemacraft."""

from __future__ import annotations

from enum import IntEnum


class ExitCode(IntEnum):
    """CLI exit codes used by the schemacraft launcher."""

    SUCCESS = 0
    INVALID_INPUT = 2
    CONFIGURATION_ERROR = 10
    INPUT_MISSING = 20
    INTERNAL_ERROR = 70
