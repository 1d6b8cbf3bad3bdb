"""Command-line launcher for schemacraft."""

from __future__ import annotations

import importlib
import importlib.util
import json
import logging
import sys
import uuid
from pathlib import Path
from typing import Any

import click
import typer

from schemacraft.compiler import SchemaCompiler
from schemacraft.config import SchemacraftConfig
from schemacraft.errors import SchemaError
from schemacraft.exit_codes import ExitCode

cli = typer.Typer(no_args_is_help=True, help="schemacraft launcher")


@cli.callback()
def _launcher_callback() -> None:
    """Top-level schemacraft launcher entrypoint."""


def _normalize_type_spec(raw: str) -> tuple[str, str | None]:
    """Split `<source>[:name]` into source path/module and optional attribute name."""
    if ":" in raw:
        source, type_name = raw.rsplit(":", 1)
        return source.strip(), type_name.strip() or None
    return raw.strip(), None


def _load_module_from_path(path: Path) -> Any:
    module_name = f"schemacraft_loader_{uuid.uuid4().hex}"
    spec = importlib.util.spec_from_file_location(module_name, str(path))
    if spec is None or spec.loader is None:
        raise RuntimeError(f"Failed to create import spec for {path}.")

    module = importlib.util.module_from_spec(spec)
    # Forward references resolve through sys.modules[cls.__module__].
    sys.modules[module_name] = module
    try:
        spec.loader.exec_module(module)
    except Exception as exc:
        sys.modules.pop(module_name, None)
        raise RuntimeError(f"Executing {path} failed: {exc!r}") from exc
    except BaseException:
        sys.modules.pop(module_name, None)
        raise
    return module


def _load_module(source: str) -> Any:
    """Load a module from a file path or import path."""
    source_path = Path(source)
    if source_path.exists():
        if not source_path.is_file():
            raise RuntimeError(f"Not a file: {source_path}")
        return _load_module_from_path(source_path)

    try:
        return importlib.import_module(source)
    except ModuleNotFoundError as exc:
        raise RuntimeError(f"Could not import module '{source}'.") from exc
    except Exception as exc:
        raise RuntimeError(f"Importing module '{source}' failed: {exc!r}") from exc


def _resolve_types(module: Any, type_name: str | None) -> list[Any]:
    if type_name is not None:
        value = getattr(module, type_name, None)
        if value is None:
            raise RuntimeError(f"Module '{module.__name__}' has no '{type_name}' attribute.")
        return [value]

    exported = getattr(module, "__schemas__", None)
    if exported is not None:
        return list(exported)

    raise RuntimeError(
        "Module does not name any types (expected `__schemas__` or an explicit `:<Type>` selector)."
    )


def _emit_error(payload: dict[str, Any], exit_code: int) -> None:
    click.echo(json.dumps({"ok": False, "error": payload}, indent=2), err=True)
    raise SystemExit(exit_code)


@cli.command()
def build(
    targets: list[str] = typer.Argument(
        ...,
        help="One or more <file.py|module>[:Type] selectors.",
    ),
    inline: bool = typer.Option(False, "--inline", help="Print the root schemas inline instead of a document."),
    title: str = typer.Option("schemacraft", help="Document title."),
    version: str = typer.Option("0.0.0", help="Document version."),
    verbose: int = typer.Option(0, "--verbose", "-v", count=True, help="Increase log verbosity."),
) -> None:
    """Compile declared types into an OpenAPI components document."""
    level = logging.WARNING - 10 * min(verbose, 2)
    logging.basicConfig(stream=sys.stderr, level=level, format="%(levelname)s %(name)s: %(message)s")

    try:
        compiler = SchemaCompiler(config=SchemacraftConfig())
        roots: dict[str, Any] = {}
        for target in targets:
            source, type_name = _normalize_type_spec(target)
            module = _load_module(source)
            for tp in _resolve_types(module, type_name):
                node = compiler.schema_for(tp, inline=inline)
                roots[getattr(tp, "__name__", str(tp))] = compiler.render(node)
    except SchemaError as exc:
        _emit_error(exc.to_dict(), exc.exit_code)
    except RuntimeError as exc:
        _emit_error(
            {"message": f"Failed to load types: {exc}", "code": "E2002", "category": "input"},
            int(ExitCode.INPUT_MISSING),
        )

    payload = roots if inline else compiler.document(title=title, version=version)
    click.echo(json.dumps(payload, indent=2))


def main() -> None:
    cli()


if __name__ == "__main__":
    main()
