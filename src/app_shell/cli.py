import argparse
import json
import logging
import sys
from pathlib import Path

from src.adapters.sqlite.migrator import SQLiteMigrator
from src.adapters.sqlite.options import SQLiteOptionStore
from src.components.settings import (
    ConfigurationError,
    ImportRejected,
    SettingsRegistry,
    build_registries,
    delete_settings,
)
from src.components.transfer import export_settings, import_settings
from src.rules.loader import load_definitions

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger("cli")

DATA_DIR = "data"
DEFINITIONS_DIR = "definitions"
MIGRATIONS_DIR = "migrations"


def get_store(data_dir: Path) -> SQLiteOptionStore:
    data_dir.mkdir(parents=True, exist_ok=True)
    db_path = str(data_dir / "options.db")
    SQLiteMigrator(db_path, MIGRATIONS_DIR).run_migrations()
    return SQLiteOptionStore(db_path)


def get_registry(args: argparse.Namespace) -> SettingsRegistry:
    try:
        definitions = load_definitions(Path(args.definitions))
    except ConfigurationError as e:
        logger.error("Invalid settings definition: %s", e)
        sys.exit(1)

    registries = build_registries(definitions, get_store(Path(args.data_dir)))
    registry = registries.get(args.group)
    if registry is None:
        logger.error("Unknown option group '%s'.", args.group)
        sys.exit(1)
    return registry


def handle_list(args: argparse.Namespace) -> None:
    definitions = load_definitions(Path(args.definitions))
    for group, definition in sorted(definitions.items()):
        print(f"{group}\t{definition.page.title}")


def handle_show(registry: SettingsRegistry, args: argparse.Namespace) -> None:
    print(json.dumps(registry.get_settings(), indent=2, ensure_ascii=False))


def handle_export(registry: SettingsRegistry, args: argparse.Namespace) -> None:
    body, filename = export_settings(registry.store, registry.option_group)
    target = Path(args.output) if args.output else Path(filename)
    target.write_bytes(body)
    print(f"Exported settings to {target}")


def handle_import(registry: SettingsRegistry, args: argparse.Namespace) -> None:
    source = Path(args.file)
    if not source.exists():
        logger.error("Import file %s not found.", source)
        sys.exit(1)

    try:
        saved = import_settings(registry.store, registry.option_group, source.read_bytes())
    except ImportRejected as e:
        logger.error("Import rejected: %s", e)
        sys.exit(1)
    print(f"Imported {len(saved)} settings into {registry.option_group}.")


def handle_delete(registry: SettingsRegistry, args: argparse.Namespace) -> None:
    delete_settings(registry.store, registry.option_group)
    print(f"Deleted settings for {registry.option_group}.")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Plugin Settings Framework CLI")
    parser.add_argument("--definitions", default=DEFINITIONS_DIR, help="Definitions directory")
    parser.add_argument("--data-dir", default=DATA_DIR, help="Directory holding options.db")
    subparsers = parser.add_subparsers(dest="command", required=True)

    # list
    subparsers.add_parser("list", help="List option groups")

    # show
    show_parser = subparsers.add_parser("show", help="Print current values")
    show_parser.add_argument("group", help="Option group")

    # export
    export_parser = subparsers.add_parser("export", help="Export stored values to JSON")
    export_parser.add_argument("group", help="Option group")
    export_parser.add_argument("--output", help="Output file (default settings-<group>.json)")

    # import
    import_parser = subparsers.add_parser("import", help="Replace stored values from JSON")
    import_parser.add_argument("group", help="Option group")
    import_parser.add_argument("file", help="JSON file to import")

    # delete
    delete_parser = subparsers.add_parser("delete", help="Delete stored values")
    delete_parser.add_argument("group", help="Option group")

    return parser


def main(argv: list[str] | None = None) -> None:
    args = build_parser().parse_args(argv)

    if args.command == "list":
        handle_list(args)
        return

    registry = get_registry(args)

    if args.command == "show":
        handle_show(registry, args)
    elif args.command == "export":
        handle_export(registry, args)
    elif args.command == "import":
        handle_import(registry, args)
    elif args.command == "delete":
        handle_delete(registry, args)


if __name__ == "__main__":
    main()
