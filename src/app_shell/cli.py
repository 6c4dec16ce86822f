import argparse
import logging
import os
import sys
import time
from pathlib import Path
from uuid import UUID

import uvicorn

from src.adapters.clock import SystemClock
from src.adapters.sqlite.migrator import SQLiteMigrator
from src.adapters.sqlite.repos import SQLiteContentRepo, SQLiteScheduleRepo
from src.api.deps import Settings
from src.components.scheduler import (
    ScheduleManager,
    SchedulerEngine,
    build_config,
    create_scheduler,
)
from src.rules.loader import load_rules
from src.rules.models import Rules

logger = logging.getLogger("cli")


def get_rules(settings: Settings) -> Rules:
    if not Path(settings.rules_path).exists():
        logger.error("Rules file %s not found.", settings.rules_path)
        sys.exit(1)
    return load_rules(Path(settings.rules_path))


def build_scheduler(settings: Settings, rules: Rules) -> tuple[SchedulerEngine, ScheduleManager]:
    return create_scheduler(
        content_repo=SQLiteContentRepo(
            settings.db_path,
            revision_history_limit=rules.content.revision_history_limit,
        ),
        schedule_repo=SQLiteScheduleRepo(settings.db_path),
        time_port=SystemClock(),
        config=build_config(rules.scheduler),
    )


def handle_migrate(settings: Settings) -> None:
    applied = SQLiteMigrator(settings.db_path).run_migrations()
    print(f"Applied {len(applied)} migrations.")
    for filename in applied:
        print(f" - {filename}")


def handle_tick(engine: SchedulerEngine) -> None:
    engine.reload_index()
    result = engine.trigger_now()
    print(
        f"Processed {result.total_processed} schedules: "
        f"{result.transitioned} transitioned, {result.skipped} skipped, "
        f"{result.orphaned} orphaned, {result.failed} failed."
    )
    if result.error:
        logger.error("Tick reported an error: %s", result.error)
        sys.exit(1)


def handle_backfill(manager: ScheduleManager) -> None:
    created = manager.backfill_legacy_schedules()
    print(f"Backfilled {len(created)} legacy publish schedules.")


def handle_run(engine: SchedulerEngine) -> None:
    engine.start()
    print("Scheduler running. Press Ctrl+C to stop.")
    try:
        while engine.is_running:
            time.sleep(1.0)
    except KeyboardInterrupt:
        pass
    finally:
        engine.stop()


def handle_serve(args: argparse.Namespace) -> None:
    uvicorn.run("src.api.main:app", host=args.host, port=args.port)


def handle_show(manager: ScheduleManager, content_id: str) -> None:
    try:
        cid = UUID(content_id)
    except ValueError:
        logger.error("Invalid content id: %s", content_id)
        sys.exit(1)

    schedule = manager.get_content_schedule(cid)
    print(f"Content {cid}")
    for action, info in (("publish", schedule.publish), ("unpublish", schedule.unpublish)):
        if info is None:
            print(f"  {action}: -")
        else:
            note = f" ({info.note})" if info.note else ""
            print(f"  {action}: {info.scheduled_at.isoformat()}{note}")


def main() -> None:
    parser = argparse.ArgumentParser(description="Content Scheduler CLI")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("migrate", help="Apply pending database migrations")
    subparsers.add_parser("tick", help="Process due schedules once")
    subparsers.add_parser("backfill", help="Move legacy scheduled_publish values")
    subparsers.add_parser("run", help="Run the scheduler until interrupted")

    serve_parser = subparsers.add_parser("serve", help="Run the HTTP API with the scheduler")
    serve_parser.add_argument("--host", default="127.0.0.1")
    serve_parser.add_argument("--port", type=int, default=int(os.environ.get("PORT", 8000)))

    show_parser = subparsers.add_parser("show", help="Show schedules of a content item")
    show_parser.add_argument("content_id", help="Content UUID")

    args = parser.parse_args()

    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO)

    settings = Settings()

    if args.command == "migrate":
        handle_migrate(settings)
        return
    if args.command == "serve":
        handle_serve(args)
        return

    rules = get_rules(settings)
    engine, manager = build_scheduler(settings, rules)

    if args.command == "tick":
        handle_tick(engine)
    elif args.command == "backfill":
        handle_backfill(manager)
    elif args.command == "run":
        handle_run(engine)
    elif args.command == "show":
        handle_show(manager, args.content_id)


if __name__ == "__main__":
    main()
