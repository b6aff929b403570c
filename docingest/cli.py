"""Command-line interface for the document ingestion service.

Provides subcommands to start the API server, map an existing OCR text
file onto a model, and run OCR plus mapping on a local document.
"""

import argparse
import asyncio
import json
import mimetypes
import sys
from pathlib import Path

from docingest.api.app import build_services
from docingest.exceptions import ConfigError, IngestionError
from docingest.mapping.field_mapper import map_fields
from docingest.mapping.model_store import ModelStore
from docingest.storage.uploads import DEFAULT_MIME_TYPE
from docingest.utils.config import StorageConfig, load_config
from docingest.utils.logger import get_logger, setup_logging
from docingest.workflow.upload import UploadWorkflow

logger = get_logger(__name__)


class LocalUpload:
    """Adapts a file on disk to the upload interface used by the workflow."""

    def __init__(self, path: Path) -> None:
        self.path = path
        self.filename = path.name
        self.content_type = mimetypes.guess_type(path.name)[0] or DEFAULT_MIME_TYPE
        self._handle = None

    async def read(self, size: int = -1) -> bytes:
        if self._handle is None:
            self._handle = await asyncio.to_thread(open, self.path, "rb")
        return await asyncio.to_thread(self._handle.read, size)

    def close(self) -> None:
        if self._handle is not None:
            self._handle.close()


def map_text_file(
    text_file: Path,
    document_type: str,
    models_dir: Path,
) -> dict[str, object]:
    """Map the contents of a text file with a document type's model.

    Args:
        text_file: File holding OCR text.
        document_type: Identifier of the mapping model.
        models_dir: Directory containing the models.

    Returns:
        The structured record as a dictionary.
    """
    model = ModelStore(models_dir).load_sync(document_type)
    text = text_file.read_text(encoding="utf-8")
    return map_fields(text, model).model_dump()


async def _process_file(path: Path, document_type: str, config_path: Path | None) -> dict[str, object]:
    config = load_config(config_path)
    services = build_services(config)
    upload = LocalUpload(path)
    try:
        result = await UploadWorkflow(services).run(upload, document_type)
    finally:
        upload.close()
        await services.ocr_client.aclose()
    return {
        "originalText": result.original_text,
        "structuredData": result.structured_data.model_dump(),
        "jsonFile": result.json_file,
    }


def process_file(
    path: Path,
    document_type: str,
    config_path: Path | None = None,
) -> dict[str, object]:
    """Run OCR and field mapping on a local document.

    The structured record is also saved to the configured artifact directory.
    """
    return asyncio.run(_process_file(path, document_type, config_path))


def _emit(result: dict[str, object], output: Path | None) -> None:
    output_str = json.dumps(result, indent=2, ensure_ascii=False)
    if output:
        output.parent.mkdir(parents=True, exist_ok=True)
        output.write_text(output_str, encoding="utf-8")
        print(f"Output written to {output}")
    else:
        print(output_str)


def main(argv: list[str] | None = None) -> None:
    """Parse CLI arguments and dispatch to the appropriate command.

    Args:
        argv: Command-line arguments (defaults to sys.argv).
    """
    parser = argparse.ArgumentParser(
        description="Document ingestion: OCR and field mapping",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "-c", "--config", type=Path, default=None, help="YAML configuration file"
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    subparsers.add_parser("serve", help="Start the API server")

    map_parser = subparsers.add_parser("map", help="Map an OCR text file onto a model")
    map_parser.add_argument("text_file", type=Path, help="File with OCR text")
    map_parser.add_argument(
        "-t", "--type", required=True, dest="doc_type", help="Document type"
    )
    map_parser.add_argument(
        "-m",
        "--models-dir",
        type=Path,
        default=StorageConfig().models_dir,
        help="Directory of mapping models (default: models)",
    )
    map_parser.add_argument("-o", "--output", type=Path, help="Output JSON file")

    process_parser = subparsers.add_parser(
        "process", help="Run OCR and mapping on a local document"
    )
    process_parser.add_argument("file", type=Path, help="Document file to process")
    process_parser.add_argument(
        "-t", "--type", required=True, dest="doc_type", help="Document type"
    )
    process_parser.add_argument("-o", "--output", type=Path, help="Output JSON file")

    args = parser.parse_args(argv)

    if args.command == "serve":
        from docingest.main import main as serve

        serve(args.config)
        return

    setup_logging()

    if args.command == "map":
        if not args.text_file.exists():
            print(f"Error: {args.text_file} does not exist", file=sys.stderr)
            sys.exit(1)
        try:
            result = map_text_file(args.text_file, args.doc_type, args.models_dir)
        except IngestionError as exc:
            print(f"Error: {exc}", file=sys.stderr)
            sys.exit(1)
        _emit(result, args.output)
    elif args.command == "process":
        if not args.file.exists():
            print(f"Error: {args.file} does not exist", file=sys.stderr)
            sys.exit(1)
        try:
            result = process_file(args.file, args.doc_type, args.config)
        except (ConfigError, IngestionError) as exc:
            print(f"Error: {exc}", file=sys.stderr)
            sys.exit(1)
        _emit(result, args.output)
    else:
        parser.print_help()
        sys.exit(0)


if __name__ == "__main__":
    main()
