"""Tests for the schemacraft command-line launcher."""

from __future__ import annotations

import json

import pytest
from typer.testing import CliRunner

from schemacraft.cli import cli


def _write_types_module(tmp_path, body: str | None = None):
    module_path = tmp_path / "shop_types.py"
    module_path.write_text(
        body
        or '''
from __future__ import annotations

from dataclasses import dataclass, field


@dataclass
class Point:
    x: int
    y: int = 7


@dataclass
class Shape:
    name: str
    points: list[Point] = field(default_factory=list)


__schemas__ = [Shape]
''',
        encoding="utf-8",
    )
    return module_path


def test_build_prints_components_document(runner: CliRunner, tmp_path) -> None:
    module_path = _write_types_module(tmp_path)

    result = runner.invoke(cli, ["build", f"{module_path}:Point", "--title", "Shop"], prog_name="schemacraft")

    assert result.exit_code == 0
    document = json.loads(result.stdout)
    assert document["openapi"] == "3.1.0"
    assert document["info"]["title"] == "Shop"
    assert document["components"]["schemas"]["Point"] == {
        "type": "object",
        "properties": {"x": {"type": "integer"}, "y": {"type": "integer", "default": 7}},
        "required": ["x"],
    }


def test_build_uses_module_schema_list(runner: CliRunner, tmp_path) -> None:
    module_path = _write_types_module(tmp_path)

    result = runner.invoke(cli, ["build", str(module_path)], prog_name="schemacraft")

    assert result.exit_code == 0
    schemas = json.loads(result.stdout)["components"]["schemas"]
    assert list(schemas) == ["Point", "Shape"]
    assert schemas["Shape"]["properties"]["points"]["items"] == {"$ref": "#/components/schemas/Point"}


def test_build_inline_prints_root_schemas(runner: CliRunner, tmp_path) -> None:
    module_path = _write_types_module(tmp_path)

    result = runner.invoke(cli, ["build", f"{module_path}:Shape", "--inline"], prog_name="schemacraft")

    assert result.exit_code == 0
    roots = json.loads(result.stdout)
    assert list(roots) == ["Shape"]
    assert roots["Shape"]["required"] == ["name"]


def test_build_reports_missing_type(runner: CliRunner, tmp_path) -> None:
    module_path = _write_types_module(tmp_path)

    result = runner.invoke(cli, ["build", f"{module_path}:Nope"], prog_name="schemacraft")

    assert result.exit_code == 20
    assert "has no 'Nope' attribute" in result.output


@pytest.mark.parametrize(
    "body",
    [
        "from dataclasses import dataclas\n",
        "def broken(:\n    pass\n",
    ],
)
def test_build_reports_module_body_failures_as_input_errors(runner: CliRunner, tmp_path, body: str) -> None:
    module_path = _write_types_module(tmp_path, body)

    result = runner.invoke(cli, ["build", f"{module_path}:Shape"], prog_name="schemacraft")

    assert result.exit_code == 20
    assert "E2002" in result.output
    assert "Traceback" not in result.output


def test_build_reports_schema_errors_with_exit_code(runner: CliRunner, tmp_path) -> None:
    module_path = _write_types_module(
        tmp_path,
        '''
from dataclasses import dataclass

from schemacraft import required, schema_component


@schema_component(required("ghost"))
@dataclass
class Broken:
    present: str = ""
''',
    )

    result = runner.invoke(cli, ["build", f"{module_path}:Broken"], prog_name="schemacraft")

    assert result.exit_code == 10
    assert "E1003" in result.output


def test_build_requires_a_target(runner: CliRunner) -> None:
    result = runner.invoke(cli, ["build"], prog_name="schemacraft")

    assert result.exit_code == 2
