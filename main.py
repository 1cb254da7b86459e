"""CLI entry point for the career matcher."""

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path

from career_match.core.config import Settings
from career_match.core.db import init_db
from career_match.handler import build_dependencies, handle_request
from career_match.stores.importer import import_catalog, import_profiles, load_documents

# Seconds to wait for background writes before the process exits.
_DRAIN_TIMEOUT = 10.0


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Career matcher - rank career paths for a talent profile",
    )
    parser.add_argument(
        "--config",
        default=None,
        help="Path to settings YAML file (default: built-in defaults)",
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable verbose (DEBUG) logging",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    # --- match subcommand ---
    match_parser = subparsers.add_parser("match", help="Run one match request")
    match_parser.add_argument(
        "--request",
        default="-",
        help="Path to a JSON request body, or '-' for stdin (default: -)",
    )
    match_parser.add_argument(
        "--no-oracle",
        action="store_true",
        help="Skip the LLM and rank with the fallback scorer only",
    )

    # --- import-catalog subcommand ---
    catalog_parser = subparsers.add_parser(
        "import-catalog",
        help="Load career paths from a YAML/JSON file into the database",
    )
    catalog_parser.add_argument("file", help="Career path list (.yaml or .json)")

    # --- import-profiles subcommand ---
    profiles_parser = subparsers.add_parser(
        "import-profiles",
        help="Load talent profiles from a YAML/JSON file into the database",
    )
    profiles_parser.add_argument("file", help="Talent list (.yaml or .json)")

    return parser.parse_args(argv)


def setup_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
        stream=sys.stderr,
    )


def load_settings(path: str | None) -> Settings:
    return Settings.from_yaml(path) if path else Settings()


def _read_request(source: str) -> str:
    if source == "-":
        return sys.stdin.read()
    path = Path(source)
    if not path.exists():
        msg = f"Request file not found: {path}"
        raise FileNotFoundError(msg)
    return path.read_text()


async def run_match_command(settings: Settings, body: str, use_oracle: bool) -> int:
    """Handle one request, print the envelope, then let background writes finish."""
    deps = build_dependencies(settings, use_oracle=use_oracle)
    envelope, status = await handle_request(body, deps, settings)
    print(json.dumps(envelope, indent=2))
    await deps.writer.drain(timeout=_DRAIN_TIMEOUT)
    return 0 if status == 200 else 1


def cmd_import(settings: Settings, file: str, kind: str) -> None:
    conn = init_db(settings.database.path)
    try:
        if kind == "catalog":
            documents = load_documents(file, key="careerPaths")
            new_count = import_catalog(conn, documents)
            print(f"Imported {len(documents)} career paths ({new_count} new) "
                  f"into {settings.database.path}")
        else:
            documents = load_documents(file, key="talents")
            import_profiles(conn, documents)
            print(f"Imported {len(documents)} talent profiles into {settings.database.path}")
    finally:
        conn.close()


def main(argv: list[str] | None = None) -> None:
    args = parse_args(argv)
    setup_logging(args.verbose)

    try:
        settings = load_settings(args.config)
    except (FileNotFoundError, ValueError) as e:
        print(f"Error loading config: {e}", file=sys.stderr)
        sys.exit(1)

    if args.command == "match":
        try:
            body = _read_request(args.request)
        except FileNotFoundError as e:
            print(f"Error: {e}", file=sys.stderr)
            sys.exit(1)
        sys.exit(asyncio.run(run_match_command(settings, body, not args.no_oracle)))
    else:
        kind = "catalog" if args.command == "import-catalog" else "profiles"
        try:
            cmd_import(settings, args.file, kind)
        except (FileNotFoundError, ValueError) as e:
            print(f"Error: {e}", file=sys.stderr)
            sys.exit(1)


if __name__ == "__main__":
    main()
