"""Command-line interface for extraction, validation and export.

Subcommands:
    extract   merge one or more document scans into a single profile
    validate  check an identifier value (Aadhaar, PAN, Voter ID, DL, pincode)
    export    render a profile JSON file as a printable HTML page
"""

import argparse
import asyncio
import json
import sys
from pathlib import Path

from formfill.documents.loader import (
    UnsupportedDocumentError,
    document_from_path,
    find_documents,
)
from formfill.documents.models import (
    ExtractedRecord,
    UploadedDocument,
    record_field_name,
)
from formfill.export.html import render_html
from formfill.extraction.client import GatewayExtractionClient
from formfill.merge.engine import MergeEngine, MergeResult
from formfill.utils.config import ConfigurationError, load_config
from formfill.utils.logger import get_logger, setup_logging
from formfill.validation.identifiers import FieldValidator

logger = get_logger(__name__)


def _collect_documents(paths: list[Path], allowed: tuple[str, ...]) -> list[UploadedDocument]:
    """Load every file, expanding directories into their supported documents."""
    files: list[Path] = []
    for path in paths:
        files.extend(find_documents(path) if path.is_dir() else [path])
    return [document_from_path(f, allowed) for f in files]


def summarize(result: MergeResult, documents: list[UploadedDocument]) -> dict[str, object]:
    """JSON-serialisable summary of a merge run."""
    by_id = {d.document_id: d for d in documents}
    return {
        "empty": result.is_empty,
        "record": result.extracted.to_payload(),
        "extraction_calls": result.extraction_calls,
        "fallback_used": result.fallback_used,
        "documents": [
            {
                "filename": by_id[o.document_id].filename,
                "document_class": str(o.document_class),
                "mode": str(o.mode),
                "succeeded": o.succeeded,
                "error": o.error,
                "fallback": o.fallback,
            }
            for o in result.outcomes
        ],
    }


def extract_documents(
    paths: list[Path], config_path: Path | None = None
) -> tuple[MergeResult, list[UploadedDocument]]:
    """Extract and merge the given documents.

    Args:
        paths: Document files or directories, in upload order.
        config_path: Optional YAML configuration file.

    Returns:
        The merge result and the loaded documents.
    """
    config = load_config(config_path)
    documents = _collect_documents(paths, config.upload.allowed_content_types)
    engine = MergeEngine(GatewayExtractionClient.from_config(config.gateway))
    result = asyncio.run(engine.merge(documents))
    return result, documents


def _write_or_print(text: str, output: Path | None) -> None:
    if output:
        output.parent.mkdir(parents=True, exist_ok=True)
        output.write_text(text)
        print(f"Output written to {output}")
    else:
        print(text)


def _run_extract(args: argparse.Namespace) -> int:
    missing = [p for p in args.files if not p.exists()]
    if missing:
        print(f"Error: {missing[0]} does not exist", file=sys.stderr)
        return 1

    try:
        result, documents = extract_documents(args.files, args.config)
    except (ConfigurationError, UnsupportedDocumentError, ValueError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    if result.is_empty:
        print(
            "Processing completed, but no usable data could be extracted",
            file=sys.stderr,
        )

    _write_or_print(json.dumps(summarize(result, documents), indent=2), args.output)
    if args.html:
        args.html.parent.mkdir(parents=True, exist_ok=True)
        args.html.write_text(render_html(result.working))
        print(f"Printable document written to {args.html}")
    return 0


def _run_validate(args: argparse.Namespace) -> int:
    validator = FieldValidator()
    field_name = record_field_name(args.field)
    if not validator.validates(field_name):
        print(
            f"Error: unknown field {args.field}; expected one of "
            f"{', '.join(validator.field_names)}",
            file=sys.stderr,
        )
        return 1

    result = validator.validate(field_name, args.value)
    print(
        json.dumps(
            {
                "field": field_name,
                "is_valid": result.is_valid,
                "canonical_form": result.canonical_form,
                "error_message": result.error_message,
            },
            indent=2,
        )
    )
    return 0 if result.is_valid else 1


def _run_export(args: argparse.Namespace) -> int:
    if not args.input.exists():
        print(f"Error: {args.input} does not exist", file=sys.stderr)
        return 1
    try:
        data = json.loads(args.input.read_text())
    except json.JSONDecodeError as exc:
        print(f"Error: {args.input} is not valid JSON: {exc}", file=sys.stderr)
        return 1

    # Accept both a bare record and the output of ``extract``.
    payload = data.get("record", data) if isinstance(data, dict) else data
    if not isinstance(payload, dict):
        print(f"Error: {args.input} must contain a JSON object", file=sys.stderr)
        return 1

    record = ExtractedRecord.from_payload(payload)
    _write_or_print(render_html(record), args.output)
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Identity document form-fill assistant",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--log-level", default="INFO", help="Logging level (default: INFO)"
    )
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    extract_parser = subparsers.add_parser(
        "extract", help="Extract and merge details from document scans"
    )
    extract_parser.add_argument(
        "files", type=Path, nargs="+", help="Document files or folders, in upload order"
    )
    extract_parser.add_argument("-o", "--output", type=Path, help="Output JSON file")
    extract_parser.add_argument("--html", type=Path, help="Also write a printable HTML page")
    extract_parser.add_argument("-c", "--config", type=Path, help="YAML configuration file")

    validate_parser = subparsers.add_parser(
        "validate", help="Validate an identifier value"
    )
    validate_parser.add_argument(
        "field", help="Field name, e.g. aadhaar_number, panNumber, pincode"
    )
    validate_parser.add_argument("value", help="Value to validate")

    export_parser = subparsers.add_parser(
        "export", help="Render a profile JSON file as printable HTML"
    )
    export_parser.add_argument("input", type=Path, help="Profile or extract output JSON")
    export_parser.add_argument("-o", "--output", type=Path, help="Output HTML file")

    return parser


def main(argv: list[str] | None = None) -> None:
    """Parse CLI arguments and dispatch to the appropriate command.

    Args:
        argv: Command-line arguments (defaults to sys.argv).
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    setup_logging(args.log_level)

    handlers = {
        "extract": _run_extract,
        "validate": _run_validate,
        "export": _run_export,
    }
    handler = handlers.get(args.command)
    if handler is None:
        parser.print_help()
        sys.exit(0)
    sys.exit(handler(args))


if __name__ == "__main__":
    main()
