"""Command line trigger for the web form filler."""

from __future__ import annotations

import argparse
import getpass
import json
import logging
import sys
from pathlib import Path
from typing import Optional, Sequence

from dotenv import load_dotenv

from models.form_data import FormData
from services import FormDocument, FormFillPipeline, ImmediateScheduler
from webformfiller.storage import SecureStorage, StorageError

load_dotenv()

logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")
logger = logging.getLogger(__name__)


def _read_fields(path: str) -> dict:
    data = json.loads(Path(path).read_text(encoding="utf-8"))
    if not isinstance(data, dict):
        raise ValueError(f"{path} must contain a JSON object of field names to values")
    # Accept both a bare field mapping and an exported FormData record.
    if isinstance(data.get("fields"), dict):
        return data["fields"]
    return data


def _password(args: argparse.Namespace) -> str:
    return args.password or getpass.getpass("Storage password: ")


def _cmd_fill(args: argparse.Namespace) -> int:
    document = FormDocument.from_path(args.page, scheduler=ImmediateScheduler())
    storage = SecureStorage(args.storage_dir) if args.latest else None
    pipeline = FormFillPipeline(storage=storage)

    if args.latest:
        outcome = pipeline.fill_with_latest(document, _password(args))
    else:
        outcome = pipeline.fill_document(document, _read_fields(args.data))

    rendered = document.render()
    if args.out:
        Path(args.out).write_text(rendered, encoding="utf-8")
        logger.info("Wrote filled page to %s", args.out)
    else:
        sys.stdout.write(rendered)

    if outcome is None:
        return 1
    print(f"{outcome.filled_count} field(s) filled using {outcome.strategy} matching", file=sys.stderr)
    return 0


def _cmd_save(args: argparse.Namespace) -> int:
    fields = _read_fields(args.data)
    record = FormData(fields=fields, form_name=args.name or Path(args.data).stem, source=args.data)
    SecureStorage(args.storage_dir).add_form_data(record, _password(args))
    print(f"Saved '{record.form_name}' ({record.non_empty_count()} non-empty field(s)) as {record.id}")
    return 0


def _cmd_list(args: argparse.Namespace) -> int:
    for record in SecureStorage(args.storage_dir).load_form_data(_password(args)):
        print(f"{record.id}\t{record.timestamp.isoformat()}\t{record.form_name}\t{len(record.fields)} field(s)")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Fill HTML forms from saved field values.")
    parser.add_argument("--storage-dir", type=Path, default=None, help="Directory holding encrypted field sets")
    parser.add_argument("--password", default=None, help="Storage password (prompted when omitted)")
    subparsers = parser.add_subparsers(dest="command", required=True)

    fill = subparsers.add_parser("fill", help="Fill the form controls of an HTML page")
    fill.add_argument("page", help="Path to the HTML page")
    source = fill.add_mutually_exclusive_group(required=True)
    source.add_argument("--data", help="JSON file of field names to values")
    source.add_argument("--latest", action="store_true", help="Use the most recently saved field set")
    fill.add_argument("--out", help="Where to write the filled page (stdout when omitted)")
    fill.set_defaults(handler=_cmd_fill)

    save = subparsers.add_parser("save", help="Save a JSON field set to encrypted storage")
    save.add_argument("data", help="JSON file of field names to values")
    save.add_argument("--name", help="Display name for the field set")
    save.set_defaults(handler=_cmd_save)

    listing = subparsers.add_parser("list", help="List saved field sets")
    listing.set_defaults(handler=_cmd_list)
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    try:
        return args.handler(args)
    except StorageError as exc:
        logger.error("Storage error: %s", exc)
        return 2


if __name__ == "__main__":
    sys.exit(main())
