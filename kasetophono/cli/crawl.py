"""CLI for building and inspecting catalog snapshots without the server.

Usage::

    # Crawl the site once and write the snapshot (default: metadata.json)
    python -m kasetophono.cli.crawl build
    python -m kasetophono.cli.crawl build --output /tmp/metadata.json

    # List categories and their subcategories
    python -m kasetophono.cli.crawl categories

    # Summarize an existing snapshot
    python -m kasetophono.cli.crawl summary --catalog metadata.json
"""

from __future__ import annotations

import argparse
import asyncio
import sys
from collections import Counter

from kasetophono.config.settings import Settings


# ---------------------------------------------------------------------------
# Subcommand handlers
# ---------------------------------------------------------------------------


async def _handle_build(args: argparse.Namespace) -> int:
    """Crawl once and write the snapshot atomically."""
    from kasetophono.main import build_crawl_service
    from kasetophono.providers.http.httpx_fetcher import build_http_client
    from kasetophono.services.catalog_store import save_snapshot
    from kasetophono.utils.errors import KasetophonoError

    app_settings = Settings()
    output = args.output or app_settings.catalog_path

    async with build_http_client(timeout=app_settings.http_timeout) as client:
        service = build_crawl_service(app_settings, client)
        print(f"Crawling {app_settings.upstream_base_url} ...")
        try:
            catalog = await service.crawl()
        except KasetophonoError as exc:
            print(f"Error: crawl failed: {exc}", file=sys.stderr)
            return 1

    save_snapshot(output, catalog)
    print(f"Wrote {len(catalog):,} cassettes to {output}")
    return 0


async def _handle_categories(args: argparse.Namespace) -> int:
    """Print every category with its subcategories."""
    from kasetophono.main import build_crawl_service
    from kasetophono.models.catalog import LabelKind
    from kasetophono.providers.http.httpx_fetcher import build_http_client
    from kasetophono.utils.errors import KasetophonoError

    app_settings = Settings()

    async with build_http_client(timeout=app_settings.http_timeout) as client:
        service = build_crawl_service(app_settings, client)
        try:
            tree = await service.crawl_category_tree()
        except KasetophonoError as exc:
            print(f"Error: {exc}", file=sys.stderr)
            return 1

    for category, subcategories in tree.items():
        print(f"{category.name}  ({category.url})")
        for sc in subcategories:
            if isinstance(sc.kind, LabelKind):
                print(f"    {sc.name}  [label: {sc.kind.label}]")
            else:
                print(f"    {sc.name}  [cassette: {sc.kind.url}]")
    return 0


def _handle_summary(args: argparse.Namespace) -> int:
    """Print statistics about a snapshot file."""
    from kasetophono.services.catalog_store import load_snapshot

    path = args.catalog or Settings().catalog_path
    catalog = load_snapshot(path)
    if catalog is None:
        print(f"Error: no readable catalog at {path}", file=sys.stderr)
        return 1

    labels: Counter[str] = Counter()
    subcategories: Counter[str] = Counter()
    for cassette in catalog.values():
        labels.update(cassette.labels)
        subcategories.update(sc.name for sc in cassette.subcategories)

    unclassified = sum(1 for c in catalog.values() if not c.subcategories)

    print(f"Catalog:        {path}")
    print(f"Cassettes:      {len(catalog):,}")
    print(f"Labels:         {len(labels):,}")
    print(f"Subcategories:  {len(subcategories):,}")
    print(f"Unclassified:   {unclassified:,}")
    if labels:
        print()
        print("Top labels:")
        for label, count in labels.most_common(args.top):
            print(f"  {count:>5}  {label}")
    return 0


def _build_parser() -> argparse.ArgumentParser:
    """Build the argparse parser for the crawl CLI."""
    parser = argparse.ArgumentParser(
        prog="python -m kasetophono.cli.crawl",
        description="Build and inspect Kasetophono catalog snapshots.",
    )
    subparsers = parser.add_subparsers(dest="command", help="Catalog commands")

    build_parser = subparsers.add_parser("build", help="Crawl the site and write a snapshot")
    build_parser.add_argument("--output", help="Snapshot path (default: CATALOG_PATH)")

    subparsers.add_parser("categories", help="List categories and subcategories")

    summary_parser = subparsers.add_parser("summary", help="Summarize a snapshot")
    summary_parser.add_argument("--catalog", help="Snapshot path (default: CATALOG_PATH)")
    summary_parser.add_argument(
        "--top", type=int, default=10, help="Number of most common labels to show"
    )

    return parser


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------


def main(argv: list[str] | None = None) -> None:
    """CLI entry point for the crawl tool."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        sys.exit(1)

    if args.command == "summary":
        sys.exit(_handle_summary(args))

    if args.command == "build":
        exit_code = asyncio.run(_handle_build(args))
    elif args.command == "categories":
        exit_code = asyncio.run(_handle_categories(args))
    else:
        parser.print_help()
        exit_code = 1

    sys.exit(exit_code)


if __name__ == "__main__":
    main()
