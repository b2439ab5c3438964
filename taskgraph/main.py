# taskgraph/main.py
# Usage examples:
#   python -m taskgraph migrate
#   python -m taskgraph gantt 1 --start 2026-01-05 --filter BEHIND_SCHEDULE
#   python -m taskgraph depend 12 7        # task 12 depends on task 7
#   python -m taskgraph bottlenecks 1 --db /path/to/taskgraph.db
#
# Notes:
# - DB path defaults to settings.json database.path, then TASKGRAPH_DB, then the XDG data dir
# - Every command prints JSON on stdout; engine errors exit with status 2

from __future__ import annotations

import argparse
import json
import sys
from datetime import date
from typing import Optional, Sequence

from .app_context import AppContext
from .models.chart import FilterCriteria
from .services.errors import TaskGraphError
from .utils.logging_setup import get_logger, setup_logging


def _date(value: str) -> date:
    try:
        return date.fromisoformat(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"not an ISO date: {value}") from exc


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(prog="taskgraph", description="Task dependency graph & Gantt data")
    ap.add_argument("--db", default=None, help="SQLite database path")
    sub = ap.add_subparsers(dest="command", required=True)

    sub.add_parser("migrate", help="apply pending migrations")

    g = sub.add_parser("gantt", help="Gantt payload for a project window")
    g.add_argument("project_id", type=int)
    g.add_argument("--start", type=_date)
    g.add_argument("--end", type=_date)
    g.add_argument("--day", type=_date, help="single-day view (overrides --start/--end)")
    g.add_argument("--filter", dest="filter_type", choices=["BEHIND_SCHEDULE", "CRITICAL_PATH"])
    g.add_argument("--subsystem")
    g.add_argument("--subteam")

    for name, text in (("bottlenecks", "rank structurally central tasks"),
                       ("critical", "tasks on the critical path (priority sense)"),
                       ("deps", "task id -> dependency ids")):
        p = sub.add_parser(name, help=text)
        p.add_argument("project_id", type=int)

    for name, text in (("depend", "make TASK depend on DEPENDENCY"),
                       ("undepend", "remove the dependency of TASK on DEPENDENCY")):
        p = sub.add_parser(name, help=text)
        p.add_argument("task_id", type=int)
        p.add_argument("dependency_id", type=int)

    return ap


def run(args: argparse.Namespace, ctx: AppContext) -> object:
    if args.command == "migrate":
        return {"applied": ctx.db.run_migrations()}
    if args.command == "gantt":
        gantt = ctx.gantt_service
        if args.day:
            payload = gantt.window_view(args.project_id, args.day)
        else:
            payload = gantt.format_for_window(args.project_id, args.start, args.end)
        criteria = FilterCriteria(filter_type=args.filter_type, subsystem=args.subsystem, subteam=args.subteam)
        return gantt.apply_filters(payload, criteria).to_dict()
    if args.command == "bottlenecks":
        return ctx.gantt_service.bottlenecks(args.project_id)
    if args.command == "critical":
        return sorted(ctx.gantt_service.critical_path(args.project_id))
    if args.command == "deps":
        return {str(k): v for k, v in ctx.gantt_service.task_dependency_map(args.project_id).items()}
    if args.command == "depend":
        return {"changed": ctx.dependency_service.add_dependency(args.task_id, args.dependency_id)}
    if args.command == "undepend":
        return {"changed": ctx.dependency_service.remove_dependency(args.task_id, args.dependency_id)}
    raise ValueError(f"unknown command {args.command}")


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging("taskgraph", console=False)
    log = get_logger("cli")

    ctx = AppContext.create(args.db)
    try:
        result = run(args, ctx)
    except TaskGraphError as exc:
        log.warning("Command %s failed: %s", args.command, exc)
        print(json.dumps({"error": type(exc).__name__, "message": str(exc)}), file=sys.stderr)
        return 2
    finally:
        ctx.close()

    print(json.dumps(result, indent=2))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
