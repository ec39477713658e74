#!/usr/bin/env python3
"""
Command-line front end for spinlio.

Usage:
    python -m spinlio templates
    python -m spinlio generate TYPE [--param NAME=VALUE ...] [--output FILE] [--request]
    python -m spinlio validate FILE [--strict]
    python -m spinlio extract-script FILE
    python -m spinlio inspect FILE
    python -m spinlio preview RESPONSE.json --output MESH.stl [--ascii] [--json FILE]

Examples:
    # Generate a fork definition and save the base64 document
    python -m spinlio generate fork --param rake=50 --param blade_length=420 \
        --output fork.ghx.b64

    # Emit the full compute request body instead
    python -m spinlio generate fork --request --output request.json

    # Check a definition, including container counts
    python -m spinlio validate fork.ghx.b64 --strict

    # Convert a saved solver response to STL (needs spinlio[rhino])
    python -m spinlio preview response.json --output fork.stl
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Dict, List, Optional, Tuple

from spinlio import __version__
from spinlio.config import Settings
from spinlio.errors import SpinlioError
from spinlio.ghx.catalog import build_registry
from spinlio.ghx.inspect import describe_document, extract_script_body
from spinlio.ghx.validator import validate


def parse_param(param_str: str) -> Tuple[str, float]:
    """Parse a parameter string like 'name=value' into (name, number)."""
    if '=' not in param_str:
        raise ValueError(f"Invalid parameter format: {param_str} (expected name=value)")

    name, value_str = param_str.split('=', 1)
    name = name.strip()
    value_str = value_str.strip()
    try:
        value = int(value_str)
    except ValueError:
        try:
            value = float(value_str)
        except ValueError:
            raise ValueError(f"Invalid value for {name}: {value_str!r} is not a number") from None
    return name, value


def _read_text(path: Path) -> str:
    if str(path) == "-":
        return sys.stdin.read()
    return path.read_text(encoding="utf-8")


def _write_text(text: str, output: Optional[Path]) -> None:
    if output is None:
        print(text)
    else:
        output.write_text(text + "\n", encoding="utf-8")
        print(f"Wrote {output}", file=sys.stderr)


def _format_bound(value) -> str:
    return "-" if value is None else f"{value:g}"


def cmd_templates(args, settings: Settings) -> int:
    registry = build_registry(extra_paths=args.templates or ())
    for template in registry:
        print(f"{template.id}: {template.name}")
        if template.description:
            print(f"    {template.description}")
        for d in template.parameter_definitions:
            kind = f" [{d.kind.value}]" if d.kind else ""
            print(
                f"    {d.name:<20} default={d.default_value:g} "
                f"min={_format_bound(d.min)} max={_format_bound(d.max)}{kind}"
            )
    return 0


def cmd_generate(args, settings: Settings) -> int:
    from spinlio.pipeline import GeometryPipeline

    values: Dict[str, float] = {}
    for param_str in args.param or []:
        name, value = parse_param(param_str)
        values[name] = value

    pipeline = GeometryPipeline(build_registry(extra_paths=args.templates or ()), settings=settings)
    generated = pipeline.generate(args.type, values)
    if args.request:
        _write_text(json.dumps(generated.request.to_payload(), indent=2), args.output)
    else:
        _write_text(generated.document, args.output)
    return 0


def cmd_validate(args, settings: Settings) -> int:
    result = validate(_read_text(args.file).strip(), strict=args.strict)
    if result.is_valid:
        print(f"OK: {args.file} passed validation")
        return 0
    print(f"FAILED: {args.file} has validation errors")
    for error in result.errors:
        print(f"ERROR: {error}")
    return 1


def cmd_extract_script(args, settings: Settings) -> int:
    print(extract_script_body(_read_text(args.file).strip()))
    return 0


def cmd_inspect(args, settings: Settings) -> int:
    summary = describe_document(_read_text(args.file).strip())
    print(f"Document: {summary.document_id}")
    print(f"Nodes:    {len(summary.node_types)}")
    for slider in summary.sliders:
        print(
            f"  slider {slider.name:<20} {slider.value:g} ({slider.kind.value}) "
            f"range {_format_bound(slider.min)}..{_format_bound(slider.max)}"
        )
    print(f"Script inputs: {', '.join(summary.script_inputs) or '(none)'}")
    print(f"Output:        {summary.output_name}")
    print(f"Bake node:     {'yes' if summary.has_bake else 'no'}")
    return 0


def cmd_preview(args, settings: Settings) -> int:
    from spinlio.compute.codec import Rhino3dmCodec
    from spinlio.compute.decoder import decode
    from spinlio.render import surface_to_json, to_surface, write_stl

    response = json.loads(_read_text(args.response))
    mesh = decode(response, codec=Rhino3dmCodec(), output_name=settings.output_name)
    surface = to_surface(mesh)
    write_stl(surface, args.output, binary=not args.ascii, name=args.response.stem)
    print(f"Wrote {surface.triangle_count} triangle(s) to {args.output}", file=sys.stderr)
    if args.json:
        args.json.write_text(json.dumps(surface_to_json(surface)), encoding="utf-8")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="spinlio",
        description="Generate GHX definitions for bicycle components and decode solver meshes.",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("-v", "--verbose", action="count", default=0,
                        help="Increase logging verbosity (repeatable).")
    parser.add_argument("--templates", type=Path, action="append",
                        help="Extra YAML template catalog file or directory (repeatable).")
    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("templates", help="List available component templates.")
    p.set_defaults(func=cmd_templates)

    p = sub.add_parser("generate", help="Generate a base64 GHX definition.")
    p.add_argument("type", help="Component type id (e.g. fork, handlebar, wheel).")
    p.add_argument("--param", "-p", action="append", metavar="NAME=VALUE",
                   help="Parameter value (repeatable).")
    p.add_argument("--output", "-o", type=Path, help="Write to FILE instead of stdout.")
    p.add_argument("--request", action="store_true",
                   help="Emit the compute request JSON instead of the bare document.")
    p.set_defaults(func=cmd_generate)

    p = sub.add_parser("validate", help="Validate a base64 GHX definition.")
    p.add_argument("file", type=Path, help="File holding the base64 document ('-' for stdin).")
    p.add_argument("--strict", action="store_true",
                   help="Also parse the XML and check container counts.")
    p.set_defaults(func=cmd_validate)

    p = sub.add_parser("extract-script", help="Print the script embedded in a definition.")
    p.add_argument("file", type=Path)
    p.set_defaults(func=cmd_extract_script)

    p = sub.add_parser("inspect", help="Summarize the nodes of a definition.")
    p.add_argument("file", type=Path)
    p.set_defaults(func=cmd_inspect)

    p = sub.add_parser("preview", help="Convert a saved solver response to STL.")
    p.add_argument("response", type=Path, help="Solver response JSON file.")
    p.add_argument("--output", "-o", type=Path, required=True, help="STL file to write.")
    p.add_argument("--ascii", action="store_true", help="Write ASCII instead of binary STL.")
    p.add_argument("--json", type=Path, help="Also write three.js JSON for the surface.")
    p.set_defaults(func=cmd_preview)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    settings = Settings.from_env()

    level = settings.log_level
    if args.verbose == 1:
        level = "INFO"
    elif args.verbose > 1:
        level = "DEBUG"
    logging.basicConfig(level=getattr(logging, level, logging.WARNING),
                        format="%(levelname)s %(name)s: %(message)s")

    try:
        return args.func(args, settings)
    except SpinlioError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1
    except (ValueError, OSError, RuntimeError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 2


if __name__ == "__main__":
    sys.exit(main())
