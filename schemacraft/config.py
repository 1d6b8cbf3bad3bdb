"""Configuration precedence system for schemacraft."""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from pathlib import Path
from typing import Any

try:
    import tomllib  # type: ignore[import-not-found]
except ImportError:
    import tomli as tomllib  # type: ignore[import-not-found, no-redef]

from schemacraft.errors import SchemaConfigurationError, Suggestion
from schemacraft.nodes import DEFAULT_REF_PREFIX

logger = logging.getLogger(__name__)

ENV_PREFIX = "SCHEMACRAFT_"

DEFAULTS: dict[str, Any] = {
    "ref_prefix": DEFAULT_REF_PREFIX,
    "max_depth": 64,
    "capture_defaults": True,
    "openapi_version": "3.1.0",
}


class SchemacraftConfig:
    """Resolves configuration through the precedence chain.

    Defaults, then ``[tool.schemacraft]`` in ``pyproject.toml``, then
    ``SCHEMACRAFT_*`` environment variables, then explicit overrides.
    """

    def __init__(
        self,
        project_root: str | Path | None = None,
        *,
        environ: Mapping[str, str] | None = None,
        load: bool = True,
        **overrides: Any,
    ) -> None:
        self.project_root = Path(project_root) if project_root is not None else Path.cwd()
        self._config: dict[str, Any] = {}
        self._load_defaults()
        if load:
            self._load_project_config()
            self._load_env_vars(os.environ if environ is None else environ)
        self._config.update({key: value for key, value in overrides.items() if value is not None})

    def _load_defaults(self) -> None:
        self._config = dict(DEFAULTS)

    def _load_project_config(self) -> None:
        """Load from pyproject.toml [tool.schemacraft]"""
        path = self.project_root / "pyproject.toml"
        if not path.exists():
            return
        try:
            with open(path, "rb") as f:
                data = tomllib.load(f)
        except (OSError, tomllib.TOMLDecodeError) as exc:
            logger.warning("Ignoring unreadable %s: %s", path, exc)
            return
        section = data.get("tool", {}).get("schemacraft", {})
        if isinstance(section, dict):
            self._config.update({key.replace("-", "_"): value for key, value in section.items()})

    def _load_env_vars(self, environ: Mapping[str, str]) -> None:
        """Load from SCHEMACRAFT_* environment variables."""
        for key, value in environ.items():
            if key.startswith(ENV_PREFIX):
                config_key = key[len(ENV_PREFIX) :].lower()
                # Handle boolean strings
                if value.lower() in ("true", "1", "yes"):
                    self._config[config_key] = True
                elif value.lower() in ("false", "0", "no"):
                    self._config[config_key] = False
                else:
                    self._config[config_key] = value

    def get(self, key: str, default: Any = None) -> Any:
        return self._config.get(key, default)

    def as_dict(self) -> dict[str, Any]:
        return dict(self._config)

    @property
    def ref_prefix(self) -> str:
        return str(self._config["ref_prefix"])

    @property
    def openapi_version(self) -> str:
        value = str(self._config["openapi_version"])
        # Nullable types render as 3.1 type arrays.
        if value != "3.1" and not value.startswith("3.1."):
            raise SchemaConfigurationError(
                f"openapi_version must be a 3.1.x release, got {value!r}.",
                code="E1000",
                subject="openapi_version",
                suggestion=Suggestion(
                    action="fix the configuration",
                    fix="Set [tool.schemacraft] openapi_version or SCHEMACRAFT_OPENAPI_VERSION to 3.1.0.",
                ),
            )
        return value

    @property
    def capture_defaults(self) -> bool:
        value = self._config["capture_defaults"]
        if isinstance(value, str):
            return value.lower() not in ("false", "0", "no", "off")
        return bool(value)

    @property
    def max_depth(self) -> int:
        value = self._config["max_depth"]
        # "1" and "0" arrive from the environment as booleans.
        try:
            depth = int(value)
        except (TypeError, ValueError):
            depth = 0
        if depth < 1:
            raise SchemaConfigurationError(
                f"max_depth must be a positive integer, got {value!r}.",
                code="E1000",
                subject="max_depth",
                suggestion=Suggestion(
                    action="fix the configuration",
                    fix="Set [tool.schemacraft] max_depth or SCHEMACRAFT_MAX_DEPTH to a positive integer.",
                ),
            )
        return depth
