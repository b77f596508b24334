"""Command-line interface for HeaderBridge."""

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path

import uvicorn

from .config import settings


def main():
    """Main entry point for the CLI."""
    parser = argparse.ArgumentParser(
        description="HeaderBridge - header reconciliation for client, worker and task data"
    )
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # Server command
    server_parser = subparsers.add_parser("serve", help="Start the web server")
    server_parser.add_argument(
        "--host", default=settings.host, help=f"Host to bind to (default: {settings.host})"
    )
    server_parser.add_argument(
        "--port", type=int, default=settings.port, help=f"Port to bind to (default: {settings.port})"
    )
    server_parser.add_argument(
        "--reload", action="store_true", help="Enable auto-reload for development"
    )

    # Reconcile command
    reconcile_parser = subparsers.add_parser(
        "reconcile", help="Reconcile headers of JSON record files"
    )
    reconcile_parser.add_argument("clients", type=Path, help="JSON array of client records")
    reconcile_parser.add_argument("workers", type=Path, help="JSON array of worker records")
    reconcile_parser.add_argument("tasks", type=Path, help="JSON array of task records")
    reconcile_parser.add_argument(
        "--commit", action="store_true", help="Apply the suggested mappings and persist the result"
    )

    subparsers.add_parser("show", help="Show the persisted dataset summary")
    subparsers.add_parser("clear", help="Erase the persisted dataset")

    args = parser.parse_args()
    logging.basicConfig(
        level=getattr(logging, settings.log_level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.command == "serve":
        run_server(args.host, args.port, args.reload)
    elif args.command == "reconcile":
        sys.exit(asyncio.run(run_reconcile(args.clients, args.workers, args.tasks, args.commit)))
    elif args.command == "show":
        asyncio.run(run_show())
    elif args.command == "clear":
        asyncio.run(run_clear())
    else:
        parser.print_help()
        sys.exit(1)


def run_server(host: str, port: int, reload: bool):
    """Run the web server."""
    uvicorn.run(
        "headerbridge.api:create_app",
        host=host,
        port=port,
        reload=reload,
        factory=True,
    )


def _load_records(path: Path) -> list[dict]:
    records = json.loads(path.read_text(encoding="utf-8"))
    if not isinstance(records, list) or not all(isinstance(r, dict) for r in records):
        raise ValueError(f"{path} must contain a JSON array of objects")
    return records


async def run_reconcile(clients: Path, workers: Path, tasks: Path, commit: bool) -> int:
    """
    Load records, resolve header mappings and optionally commit them.

    Without ``commit`` the run is a preview on an in-memory store and the
    persisted dataset is left untouched.

    Returns:
        0 when committed or nothing needs review, 1 when headers need review,
        2 when an input file cannot be read or a collection is empty
    """
    from .exceptions import DatasetNotLoadedError
    from .service import ReconciliationService
    from .store import DatasetStore, InMemoryStateStorage

    try:
        collections = {
            "clients": _load_records(clients),
            "workers": _load_records(workers),
            "tasks": _load_records(tasks),
        }
    except (OSError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2

    store = DatasetStore() if commit else DatasetStore(InMemoryStateStorage())
    service = ReconciliationService(store=store)
    await service.initialize()

    try:
        await service.store.apply_modification(**collections)
        try:
            state = await service.start_session()
        except DatasetNotLoadedError as e:
            print(f"Error: {e}", file=sys.stderr)
            return 2

        for check in state.draft:
            status = "needs review" if check.has_issues else "ok"
            print(f"{check.entity.value} ({check.record_count} records): {status}")
            for mapping in check.headers:
                marker = " " if mapping.is_valid else "!"
                print(
                    f"  {marker} {mapping.original!r} -> {mapping.suggested!r} "
                    f"({mapping.confidence:.2f}, {mapping.source.value})"
                )

        if commit:
            await service.commit()
            print(f"Committed: {service.store.state.summary()}")
        return 1 if state.has_any_issues and not commit else 0
    finally:
        await service.shutdown()


async def run_show():
    """Print the persisted dataset summary."""
    from .store import DatasetStore

    store = DatasetStore()
    await store.initialize()
    try:
        print(json.dumps(store.state.summary(), indent=2))
    finally:
        await store.close()


async def run_clear():
    """Erase persisted dataset state."""
    from .store import DatasetStore

    store = DatasetStore()
    await store.initialize()
    try:
        await store.clear()
        print("Dataset cleared.")
    finally:
        await store.close()


if __name__ == "__main__":
    main()
