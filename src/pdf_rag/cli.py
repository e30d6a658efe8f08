"""Command-line entry point.

Examples
--------
    pdf-rag ingest --name "Manuals" --model ollama:nomic-embed-text a.pdf b.pdf
    pdf-rag query 3f0c...e1 "What is the warranty period?" --top-k 5
    pdf-rag list
    pdf-rag delete 3f0c...e1
"""

from __future__ import annotations

import argparse
import json
import logging
import sys

from pdf_rag.config import configure_logging, settings
from pdf_rag.errors import RagStoreError
from pdf_rag.service import StoreService

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="pdf-rag", description="PDF vector stores with grounded answers")
    parser.add_argument("--log-level", default=settings.log_level, help="Logging level (default: %(default)s)")
    sub = parser.add_subparsers(dest="command", required=True)

    ingest = sub.add_parser("ingest", help="Create a store from PDF files")
    ingest.add_argument("files", nargs="*", help="PDF files to ingest")
    ingest.add_argument("--name", required=True, help="Store display name")
    ingest.add_argument("--model", default=settings.embedding_model, help="Embedding model (default: %(default)s)")

    query = sub.add_parser("query", help="Ask a question against a store")
    query.add_argument("store_id")
    query.add_argument("question")
    query.add_argument("--top-k", type=int, default=None, help="Number of chunks to retrieve")

    sub.add_parser("list", help="List stores, newest first")

    delete = sub.add_parser("delete", help="Delete a store and its collection")
    delete.add_argument("store_id")
    return parser


def run(args: argparse.Namespace, service: StoreService) -> None:
    if args.command == "ingest":
        record = service.create_store_from_paths(args.files, args.name, args.model)
        print(json.dumps(record.model_dump(mode="json", by_alias=True), indent=2))
    elif args.command == "query":
        result = service.query(args.store_id, args.question, args.top_k)
        print(result.answer)
        for chunk in result.sources:
            print(f"  {chunk.rank}. {chunk.short_ref()} score={chunk.score}")
    elif args.command == "list":
        for record in service.list_stores():
            print(f"{record.id}  {record.name}  {record.embedding_model}  {record.chunk_count} chunks  {record.created_at:%Y-%m-%d %H:%M}")
    elif args.command == "delete":
        service.delete_store(args.store_id)
        print(f"Deleted {args.store_id}")


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(args.log_level)
    try:
        run(args, StoreService.from_settings())
    except RagStoreError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1
    except Exception as exc:
        logger.exception("Command %s failed", args.command)
        print(f"error: {exc}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
