from __future__ import annotations

import argparse
import asyncio
import json
import sys
from dataclasses import asdict
from pathlib import Path
from typing import Any, List

from aoss_rag.clients import aoss, oai
from aoss_rag.config import rag
from aoss_rag.errors import AossRagError
from aoss_rag import index as idx


def _positive_int(value: str) -> int:
    ivalue = int(value)
    if ivalue <= 0:
        raise argparse.ArgumentTypeError("value must be a positive integer")
    return ivalue


def _read_documents(path: Path) -> List[idx.Document]:
    """Parse one JSON document per non-blank line."""
    docs: List[idx.Document] = []
    with path.open("r", encoding="utf-8") as handle:
        for lineno, line in enumerate(handle, start=1):
            line = line.strip()
            if not line:
                continue
            try:
                data = json.loads(line)
            except json.JSONDecodeError as exc:
                raise argparse.ArgumentTypeError(f"{path}:{lineno}: invalid JSON ({exc.msg})") from exc
            if not isinstance(data, dict):
                raise argparse.ArgumentTypeError(f"{path}:{lineno}: expected a JSON object")
            docs.append(idx.Document.from_dict(data))
    return docs


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="python -m aoss_rag",
        description="Manage k-NN document indices on OpenSearch Serverless.",
    )
    subparsers = parser.add_subparsers(
        dest="command", metavar="<command>", required=True
    )

    subparsers.add_parser("list", help="List every index.")

    exists_cmd = subparsers.add_parser("exists", help="Report whether an index exists.")
    exists_cmd.add_argument("name")

    create_cmd = subparsers.add_parser("create", help="Create an index with the k-NN schema.")
    create_cmd.add_argument("name")
    create_cmd.add_argument(
        "--if-missing",
        action="store_true",
        help="Skip creation when the index already exists.",
    )

    drop_cmd = subparsers.add_parser("drop", help="Delete an index.")
    drop_cmd.add_argument("name")

    ingest_cmd = subparsers.add_parser(
        "ingest",
        help="Bulk-insert documents from a JSONL file (vector, text, source, file_name per line).",
    )
    ingest_cmd.add_argument("index")
    ingest_cmd.add_argument("file", type=Path)

    delete_cmd = subparsers.add_parser(
        "delete-file",
        help="Delete every document that originated from FILE_NAME.",
    )
    delete_cmd.add_argument("index")
    delete_cmd.add_argument("file_name")

    purge_cmd = subparsers.add_parser(
        "purge-file",
        help="Delete every document from FILE_NAME out of the index that holds it.",
    )
    purge_cmd.add_argument("file_name")

    search_cmd = subparsers.add_parser("search", help="Run a k-NN search for a text query.")
    search_cmd.add_argument("query")
    search_cmd.add_argument(
        "--index",
        "-i",
        nargs="+",
        required=True,
        help="Index name(s) to search.",
    )
    search_cmd.add_argument(
        "-k",
        type=_positive_int,
        default=None,
        help="Number of results (defaults to retrieval.default_k).",
    )

    return parser


async def _dispatch(args: argparse.Namespace) -> Any:
    if args.command == "list":
        return [asdict(s) for s in await idx.list_indices()]
    if args.command == "exists":
        return {"index": args.name, "exists": await idx.index_exists(args.name)}
    if args.command == "create":
        if args.if_missing:
            return {"index": args.name, "created": await idx.ensure_index(args.name)}
        return await idx.create_index(args.name)
    if args.command == "drop":
        return await idx.drop(args.name)
    if args.command == "ingest":
        docs = _read_documents(args.file)
        return await idx.insert(idx.build_bulk_payload(args.index, docs))
    if args.command == "delete-file":
        return (await idx.delete_by_file_name(args.index, args.file_name)).as_dict()
    if args.command == "purge-file":
        return (await idx.purge_file_name(args.file_name)).as_dict()
    if args.command == "search":
        hits = await idx.perform_search(args.query, args.index, args.k or rag.DEFAULT_K)
        return [asdict(h) for h in hits]
    raise AossRagError(f"Unknown command {args.command}")


async def _run(args: argparse.Namespace) -> Any:
    try:
        status = await aoss.connect()
        if not status.ok:
            raise status.error
        return await _dispatch(args)
    finally:
        await aoss.close()
        await oai.close()


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        result = asyncio.run(_run(args))
    except (argparse.ArgumentTypeError, OSError) as exc:
        parser.error(str(exc))
    except AossRagError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1

    print(json.dumps(result, indent=2, default=str))
    return 0
