"""Shared test fixtures for schemacraft tests."""

from __future__ import annotations

import pytest
from typer.testing import CliRunner

from schemacraft import SchemaCompiler, SchemaRegistry


@pytest.fixture
def runner() -> CliRunner:
    """Provide a CLI test runner."""
    return CliRunner()


@pytest.fixture
def registry() -> SchemaRegistry:
    """Provide an empty schema registry."""
    return SchemaRegistry()


@pytest.fixture
def compiler(registry: SchemaRegistry) -> SchemaCompiler:
    """Provide a compiler bound to the ``registry`` fixture."""
    return SchemaCompiler(registry)
