# ruff: noqa: T201

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from signal import SIGINT, signal
from typing import TYPE_CHECKING, Any

from dotenv import load_dotenv

from partnerlink.app import (
    add_partner,
    apply_reference_sheet_mappings,
    build_reference_reader,
    list_client_names,
    list_mapping_marketplaces,
    list_partners,
    maybe_sync_on_tab_sync,
    preview_reference_sheet,
)
from partnerlink.config import ConfigurationError, configure_logging
from partnerlink.domain.model import MappingSource

if TYPE_CHECKING:
    from collections.abc import Sequence
    from types import FrameType

log = logging.getLogger(__name__)


def _add_reader_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--csv",
        type=Path,
        help="Read the reference rows from a local CSV export instead of Google Sheets",
    )
    parser.add_argument(
        "--spreadsheet-id",
        type=str,
        help="Reference spreadsheet id (defaults to PARTNERLINK_REFERENCE_SHEET_ID)",
    )


def _add_source_argument(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--source",
        type=MappingSource,
        choices=list(MappingSource),
        default=MappingSource.WAREHOUSE,
        help="Mapping source to reconcile (default: %(default)s)",
    )


def _parse_args(argv: Sequence[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Reconcile reference sheet brands with partners")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    subparsers = parser.add_subparsers(dest="command", required=True)

    preview = subparsers.add_parser("preview", help="Classify reference rows without writing")
    _add_reader_arguments(preview)
    _add_source_argument(preview)

    apply = subparsers.add_parser("apply", help="Write mappings for ready reference rows")
    _add_reader_arguments(apply)
    _add_source_argument(apply)
    apply.add_argument(
        "--dry-run",
        action="store_true",
        help="Report the writes that would happen without performing them",
    )

    tab_synced = subparsers.add_parser(
        "tab-synced",
        help="Apply mappings if the synced spreadsheet is the reference sheet",
    )
    tab_synced.add_argument("synced_spreadsheet_id", type=str)
    tab_synced.add_argument("--dry-run", action="store_true")
    _add_source_argument(tab_synced)

    partners = subparsers.add_parser("partners", help="Partner registry commands")
    partners_sub = partners.add_subparsers(dest="partners_command", required=True)
    partners_add = partners_sub.add_parser("add", help="Register a partner")
    partners_add.add_argument("brand_name", type=str)
    partners_sub.add_parser("list", help="List partners")

    mappings = subparsers.add_parser("mappings", help="Mapping commands")
    mappings_sub = mappings.add_subparsers(dest="mappings_command", required=True)
    mappings_list = mappings_sub.add_parser("list", help="List client ids with partner names")
    _add_source_argument(mappings_list)
    mappings_marketplaces = mappings_sub.add_parser(
        "marketplaces",
        help="List mappings with their partner and marketplace",
    )
    _add_source_argument(mappings_marketplaces)

    return parser.parse_args(list(argv))


def _emit(payload: Any) -> None:
    print(json.dumps(payload, indent=2, ensure_ascii=False))


def _run(args: argparse.Namespace) -> Any:
    if args.command in {"preview", "apply"}:
        reader = build_reference_reader(csv_path=args.csv, spreadsheet_id=args.spreadsheet_id)
        if args.command == "preview":
            return preview_reference_sheet(reader=reader, source=args.source).to_dict()
        return apply_reference_sheet_mappings(
            dry_run=args.dry_run,
            reader=reader,
            source=args.source,
        ).to_dict()
    if args.command == "tab-synced":
        return maybe_sync_on_tab_sync(
            args.synced_spreadsheet_id,
            dry_run=args.dry_run,
            source=args.source,
        ).to_dict()
    if args.command == "partners" and args.partners_command == "add":
        partner = add_partner(args.brand_name)
        return {"id": str(partner.id), "brand_name": partner.brand_name}
    if args.command == "partners" and args.partners_command == "list":
        return [
            {"id": str(partner.id), "brand_name": partner.brand_name}
            for partner in list_partners()
        ]
    if args.command == "mappings" and args.mappings_command == "list":
        return list_client_names(args.source)
    if args.command == "mappings" and args.mappings_command == "marketplaces":
        return list_mapping_marketplaces(args.source)
    raise ValueError(f"Unsupported command: {args.command}")


def main(argv: Sequence[str] | None = None) -> None:
    """Main application entry point."""
    args_list = list(argv) if argv is not None else list(sys.argv[1:])
    parsed_args = _parse_args(args_list)
    configure_logging(level=logging.DEBUG if parsed_args.verbose else logging.INFO)

    try:
        payload = _run(parsed_args)
    except (ConfigurationError, ValueError) as exc:
        log.error("Invalid configuration or arguments: %s", exc)  # noqa: TRY400
        sys.exit(2)
    except Exception:
        log.exception("Fatal error during %s", parsed_args.command)
        sys.exit(1)

    _emit(payload)


def sigint_handler(_signal_received: int, _frame: FrameType | None) -> None:
    """Handle SIGINT (Ctrl+C) gracefully."""
    log.info("Closed by user (Ctrl+C)")
    sys.exit(0)


def run() -> None:
    """Console script entry point."""
    load_dotenv()
    signal(SIGINT, sigint_handler)
    main()


if __name__ == "__main__":
    run()
