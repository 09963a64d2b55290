from __future__ import annotations

import argparse
import dataclasses
import enum
import json
import logging
import sys
from collections import Counter
from pathlib import Path
from typing import List, Optional

from protoparser.generator.outline_generator import generate_outline
from protoparser.parser.errors import ProtoParseError
from protoparser.parser.proto_ast import ProtoFile, Visitor
from protoparser.parser.proto_parser import parse_proto_file
from protoparser.parser.proto_transform import InterpretError, interpret_proto


class DeclarationCounter(Visitor):
    """Counts messages, enums, services and rpcs, nested ones included."""

    def __init__(self):
        self.counts: Counter = Counter()

    def visit_message(self, node) -> bool:
        self.counts["message"] += 1
        return True

    def visit_enum(self, node) -> bool:
        self.counts["enum"] += 1
        return True

    def visit_service(self, node) -> bool:
        self.counts["service"] += 1
        return True

    def visit_rpc(self, node) -> bool:
        self.counts["rpc"] += 1
        return True


def _summary(proto: ProtoFile) -> str:
    counter = DeclarationCounter()
    proto.accept(counter)
    return ", ".join(
        f"{counter.counts[kind]} {kind}(s)" for kind in ("message", "enum", "service", "rpc")
    )


def _find_files(paths: List[str]) -> List[str]:
    """Expand directories to the .proto files found recursively under them."""
    results = []
    for path in paths:
        p = Path(path)
        if p.is_dir():
            results.extend(sorted(str(f) for f in p.rglob("*.proto")))
        else:
            results.append(str(p))
    return results


def _json_default(value):
    if isinstance(value, enum.Enum):
        return value.value
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def to_json(node) -> str:
    """Serialize an AST (or unordered view) dataclass to indented JSON."""
    return json.dumps(dataclasses.asdict(node), indent=2, default=_json_default)


def run(
    paths: List[str],
    output_format: str = "json",
    permissive: bool = False,
    body_including_comments: bool = False,
    unordered: bool = False,
    debug: bool = False,
) -> None:
    """Parse every proto file under ``paths`` and print it in ``output_format``."""
    proto_files = _find_files(paths)
    if not proto_files:
        print(f"No .proto files found under {', '.join(paths)}", file=sys.stderr)
        sys.exit(1)

    print(f"Found {len(proto_files)} proto file(s)", file=sys.stderr)

    for pf in proto_files:
        try:
            proto = parse_proto_file(
                pf,
                debug=debug,
                permissive=permissive,
                body_including_comments=body_including_comments,
            )
            result = interpret_proto(proto) if unordered else proto
        except (ProtoParseError, InterpretError, OSError) as e:
            print(f"FATAL: {e}", file=sys.stderr)
            sys.exit(1)

        print(f"  Parsed {pf}: {_summary(proto)}", file=sys.stderr)

        if output_format == "outline":
            sys.stdout.write(generate_outline(proto, filename=pf))
        else:
            print(to_json(result))


def main(argv: Optional[List[str]] = None):
    parser = argparse.ArgumentParser(
        description="Parse proto3 files and print their syntax tree",
    )
    parser.add_argument(
        "paths",
        nargs="+",
        help=".proto files, or directories to scan for .proto files",
    )
    parser.add_argument(
        "--format",
        dest="output_format",
        choices=["json", "outline"],
        default="json",
        help="Output format (default: json)",
    )
    parser.add_argument(
        "--permissive",
        action="store_true",
        help="Accept { ... } option values (Cloud Endpoints, go-proto-validators)",
    )
    parser.add_argument(
        "--body-including-comments",
        action="store_true",
        help="Keep the comments that close a block body as body elements",
    )
    parser.add_argument(
        "--unordered",
        action="store_true",
        help="Print bodies grouped by declaration kind (json only)",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Log every scanned token",
    )

    args = parser.parse_args(argv)
    if args.unordered and args.output_format != "json":
        parser.error("--unordered requires --format json")

    logging.basicConfig(
        level=logging.DEBUG if args.debug else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    run(
        args.paths,
        output_format=args.output_format,
        permissive=args.permissive,
        body_including_comments=args.body_including_comments,
        unordered=args.unordered,
        debug=args.debug,
    )


if __name__ == "__main__":
    main()
