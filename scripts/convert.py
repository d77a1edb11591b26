#!/usr/bin/env python3
"""
CLI entry point for converting OpenAPI specifications.

Usage:
    openapi-docgen -i openapi.yaml -o api.pdf
    openapi-docgen -i openapi.yaml -o api.docx -f docx
    python -m scripts.convert -i openapi.json -o api.json -f confluence
"""

import argparse
import logging
import os
import sys
import tempfile
from pathlib import Path
from typing import List, Optional

from config.settings import LOG_LEVELS, settings
from core.converters import create_converter
from core.exceptions import OpenAPIDocsError, OutputError
from core.openapi import load_document

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="openapi-docgen",
        description="Convert OpenAPI specifications to PDF, Word or Confluence documents",
    )
    parser.add_argument("-i", "--input", required=True, help="Input OpenAPI specification (YAML or JSON)")
    parser.add_argument("-o", "--output", required=True, help="Output file path")
    parser.add_argument(
        "-f", "--format",
        default=settings.default_format,
        help="Output format: pdf, docx (word), confluence (adf)",
    )
    parser.add_argument(
        "--no-toc-page-numbers",
        action="store_true",
        help="Do not print page numbers in the PDF table of contents",
    )
    parser.add_argument(
        "--log-level",
        default=settings.log_level.upper(),
        type=str.upper,
        choices=LOG_LEVELS,
        help="Logging level",
    )
    return parser


def write_atomic(path: Path, data: bytes):
    """
    Write ``data`` to ``path`` through a temporary file in the same directory.

    Raises:
        OutputError: If the file cannot be written
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", suffix=".tmp", dir=str(path.parent))
    try:
        with os.fdopen(fd, "wb") as f:
            f.write(data)
        os.replace(tmp_name, path)
    except OSError as e:
        if os.path.exists(tmp_name):
            os.unlink(tmp_name)
        raise OutputError(path.suffix.lstrip(".") or "output", f"failed to write {path}: {e}") from e


def run(input_path: str, output_path: str, format_name: str, toc_page_numbers: bool = True) -> Path:
    """
    Load, convert and write one specification.

    Returns:
        Path of the written file

    Raises:
        OpenAPIDocsError: On load, conversion or write failure
    """
    logger.info(f"Loading OpenAPI specification from {input_path}")
    document = load_document(input_path)
    logger.info(f"Loaded API: {document.title} (v{document.version})")

    options = {}
    if format_name.lower() == "pdf":
        options = settings.pdf_options()
        options["toc_page_numbers"] = options["toc_page_numbers"] and toc_page_numbers

    converter = create_converter(format_name, **options)
    logger.info(f"Converting to {converter.format} format...")
    data = converter.convert(document)

    output = Path(output_path)
    write_atomic(output, data)
    logger.info(f"Successfully created: {output}")
    return output


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    logging.basicConfig(level=getattr(logging, args.log_level), format="%(message)s")

    try:
        run(args.input, args.output, args.format, toc_page_numbers=not args.no_toc_page_numbers)
    except OpenAPIDocsError as e:
        logger.error(f"Error: {e}")
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
