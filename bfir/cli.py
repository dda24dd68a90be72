from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import List, Optional

from .instructions import Instruction, format_program, program_to_dicts
from .parser import ParseError, parse, parse_iterative


def _read_source(path: str) -> str:
    source_path = Path(path)
    if not source_path.exists():
        raise FileNotFoundError(f"Source file not found: {path}")
    return source_path.read_text(encoding="utf-8")


def _write_output(path: str, data: str) -> None:
    output_path = Path(path)
    output_path.write_text(data, encoding="utf-8")


def _render(instructions: List[Instruction], output_format: str) -> str:
    if output_format == "json":
        return json.dumps({"instructions": program_to_dicts(instructions)}, indent=2)
    return format_program(instructions)


def main(argv: Optional[list[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Parse Brainfuck source into its IR tree")
    parser.add_argument("source", help="Path to Brainfuck source file")
    parser.add_argument(
        "-o",
        "--output",
        help="Destination file for the rendered IR (default: print to stdout)",
    )
    parser.add_argument(
        "--format",
        choices=("tree", "json"),
        default="tree",
        help="Rendering of the IR: indented tree or JSON (default: tree)",
    )
    parser.add_argument(
        "--iterative",
        action="store_true",
        help="Use the explicit-stack parser (for very deeply nested loops)",
    )
    args = parser.parse_args(argv)

    try:
        source_text = _read_source(args.source)
    except FileNotFoundError as exc:
        print(str(exc), file=sys.stderr)
        return 1

    parse_fn = parse_iterative if args.iterative else parse
    try:
        instructions = parse_fn(source_text)
    except ParseError as exc:
        print(f"Parse error: {exc}", file=sys.stderr)
        return 1
    except RecursionError:
        print("Parse error: loops nested too deeply, retry with --iterative", file=sys.stderr)
        return 1

    try:
        rendered = _render(instructions, args.format)
    except RecursionError:
        print("Render error: IR nested too deeply for JSON output, use --format tree", file=sys.stderr)
        return 1
    if rendered and not rendered.endswith("\n"):
        rendered += "\n"

    if args.output:
        _write_output(args.output, rendered)
    else:
        sys.stdout.write(rendered)

    return 0


if __name__ == "__main__":
    raise SystemExit(main())
