from __future__ import annotations

import logging
from pathlib import Path
from typing import IO, Union

from .proto_ast import ProtoFile
from .proto_ast_parser import ProtoParser
from .proto_lexer import ProtoLexer

logger = logging.getLogger(__name__)


def parse(
    reader: Union[IO[bytes], IO[str]],
    filename: str = "",
    debug: bool = False,
    permissive: bool = False,
    body_including_comments: bool = False,
) -> ProtoFile:
    """Parse proto3 source read from ``reader`` into a ProtoFile.

    ``reader`` may yield bytes (decoded as UTF-8) or str. ``filename`` only
    shows up in positions and error messages. Raises ProtoParseError on the
    first syntax error.
    """
    lexer = ProtoLexer(reader, filename=filename, debug=debug)
    parser = ProtoParser(
        lexer,
        permissive=permissive,
        body_including_comments=body_including_comments,
    )
    return parser.parse()


def parse_proto_file(file_path: Union[str, Path], **options) -> ProtoFile:
    """Parse a .proto file; accepts the keyword options of ``parse``."""
    logger.debug("Parsing %s", file_path)
    with open(file_path, "rb") as f:
        return parse(f, filename=str(file_path), **options)
