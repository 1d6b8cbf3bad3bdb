"""Tests for the configuration precedence chain."""

from __future__ import annotations

import pytest

from schemacraft import SchemaCompiler, SchemacraftConfig
from schemacraft.errors import SchemaConfigurationError


def test_defaults_without_project_file(tmp_path) -> None:
    config = SchemacraftConfig(tmp_path, environ={})

    assert config.ref_prefix == "#/components/schemas/"
    assert config.max_depth == 64
    assert config.capture_defaults is True
    assert config.openapi_version == "3.1.0"


def test_project_file_overrides_defaults(tmp_path) -> None:
    (tmp_path / "pyproject.toml").write_text(
        '[tool.schemacraft]\nmax_depth = 8\nref-prefix = "#/definitions/"\n',
        encoding="utf-8",
    )

    config = SchemacraftConfig(tmp_path, environ={})

    assert config.max_depth == 8
    assert config.ref_prefix == "#/definitions/"


def test_environment_overrides_project_file(tmp_path) -> None:
    (tmp_path / "pyproject.toml").write_text("[tool.schemacraft]\nmax_depth = 8\n", encoding="utf-8")

    config = SchemacraftConfig(
        tmp_path,
        environ={"SCHEMACRAFT_MAX_DEPTH": "5", "SCHEMACRAFT_CAPTURE_DEFAULTS": "false", "OTHER": "x"},
    )

    assert config.max_depth == 5
    assert config.capture_defaults is False
    assert config.get("other") is None


def test_explicit_overrides_win(tmp_path) -> None:
    config = SchemacraftConfig(tmp_path, environ={"SCHEMACRAFT_MAX_DEPTH": "5"}, max_depth=12)

    assert config.max_depth == 12


def test_unreadable_project_file_is_ignored(tmp_path) -> None:
    (tmp_path / "pyproject.toml").write_text("[tool.schemacraft\nbroken", encoding="utf-8")

    assert SchemacraftConfig(tmp_path, environ={}).max_depth == 64


@pytest.mark.parametrize("value", ["abc", "0", "-3"])
def test_invalid_max_depth_is_a_configuration_error(tmp_path, value: str) -> None:
    config = SchemacraftConfig(tmp_path, environ={"SCHEMACRAFT_MAX_DEPTH": value})

    with pytest.raises(SchemaConfigurationError) as excinfo:
        SchemaCompiler(config=config)

    assert excinfo.value.details["subject"] == "max_depth"
    assert excinfo.value.exit_code == 10


@pytest.mark.parametrize("value", ["3.0.3", "2.0", "3.10.0"])
def test_openapi_version_outside_3_1_is_rejected(tmp_path, value: str) -> None:
    config = SchemacraftConfig(tmp_path, environ={"SCHEMACRAFT_OPENAPI_VERSION": value})

    with pytest.raises(SchemaConfigurationError) as excinfo:
        SchemaCompiler(config=config)

    assert excinfo.value.details["subject"] == "openapi_version"
    assert excinfo.value.exit_code == 10


def test_openapi_patch_release_is_accepted() -> None:
    compiler = SchemaCompiler(config=SchemacraftConfig(load=False, openapi_version="3.1.1"))

    assert compiler.document()["openapi"] == "3.1.1"
