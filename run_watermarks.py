"""CLI utility to inspect or clear job watermarks in a SQL store."""

from __future__ import annotations

import argparse
from datetime import UTC, datetime

from pysynced.storage.sql_storage import SqlWatermarkStore


def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Inspect pysynced job watermarks")
    parser.add_argument(
        "--connection-url",
        required=True,
        help="SQLAlchemy connection URL (e.g., sqlite:///pysynced.db)",
    )
    parser.add_argument(
        "--key-prefix",
        default="",
        help="Key prefix the schedulers were configured with.",
    )
    parser.add_argument(
        "--job",
        help="Only show this job's watermark.",
    )
    parser.add_argument(
        "--clear",
        action="store_true",
        help="Delete the watermark of --job so its next firing runs unconditionally.",
    )
    return parser


def _format(value: int) -> str:
    return datetime.fromtimestamp(value / 1000, UTC).isoformat()


def main(argv: list[str] | None = None) -> None:
    parser = build_arg_parser()
    args = parser.parse_args(argv)
    if args.clear and not args.job:
        parser.error("--clear requires --job")

    store = SqlWatermarkStore(connection_url=args.connection_url, key_prefix=args.key_prefix)
    if args.clear:
        store.delete(args.job)
        print(f"Cleared watermark for {args.job}.")
        return

    if args.job:
        value = store.get(args.job)
        watermarks = {} if value is None else {args.job: value}
    else:
        watermarks = store.list_watermarks()

    if not watermarks:
        print("No watermarks found.")
        return
    for job_name, value in watermarks.items():
        print(f"- {job_name}: {value} ({_format(value)})")


if __name__ == "__main__":
    main()
