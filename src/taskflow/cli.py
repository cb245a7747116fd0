"""
Command-line entry point.

Usage:
    taskflow rank tasks.json
    taskflow order tasks.json
    taskflow schedule tasks.json --team Alice Bob [--apply]
    taskflow ready tasks.json
    taskflow blocked tasks.json

The input file holds a JSON list of tasks or an object with a "tasks" key.
Results are printed as JSON; logs go to stderr.
"""

import argparse
import json
import sys
from datetime import date
from pathlib import Path
from typing import Any, Dict, List, Optional

from taskflow.exceptions import TaskflowError
from taskflow.models import Task
from taskflow.platform.logging import configure_logging, get_logger
from taskflow.schedulers import DependencyAnalyzer, PriorityCalculator, ScheduleOptimizer
from taskflow.tasks import create_tasks, detect_blocked_tasks, get_ready_tasks

logger = get_logger(__name__)


def load_tasks(path: str) -> List[Task]:
    """Read and validate a task file."""
    data = json.loads(Path(path).read_text(encoding="utf-8"))
    if isinstance(data, dict):
        data = data.get("tasks", [])
    if not isinstance(data, list):
        raise TaskflowError("expected a JSON array of tasks or an object with a 'tasks' key")
    return create_tasks(data)


def run_command(args: argparse.Namespace) -> Dict[str, Any]:
    tasks = load_tasks(args.file)
    today = args.today

    if args.command == "rank":
        ranked = PriorityCalculator(today=today).rank_tasks(tasks)
        return {"tasks": [t.to_dict() for t in ranked]}

    if args.command == "order":
        ranked = PriorityCalculator(today=today).rank_tasks(tasks)
        analysis = DependencyAnalyzer(today=today).analyze_critical_path(ranked)
        return {
            "order": analysis.order.ids,
            "hasCycle": analysis.order.has_cycle,
            "unsortableIds": analysis.order.unsortable_ids,
            "criticalPath": analysis.critical_path,
        }

    if args.command == "schedule":
        optimizer = ScheduleOptimizer(today=today)
        result = optimizer.optimize_schedule(tasks, args.team)
        output: Dict[str, Any] = {"schedule": result.to_dict()}
        if args.apply:
            output["tasks"] = [t.to_dict() for t in optimizer.apply_schedule(tasks, result)]
        return output

    if args.command == "ready":
        return {"tasks": [t.to_dict() for t in get_ready_tasks(tasks)]}

    return {"tasks": [t.to_dict() for t in detect_blocked_tasks(tasks)]}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="taskflow",
        description="Rank, order and schedule project tasks.",
    )
    parser.add_argument(
        "command",
        choices=["rank", "order", "schedule", "ready", "blocked"],
    )
    parser.add_argument("file", help="JSON file with the task list")
    parser.add_argument("--team", nargs="*", default=[], help="Team member names (schedule)")
    parser.add_argument("--today", type=date.fromisoformat, default=None, help="Reference date YYYY-MM-DD")
    parser.add_argument("--apply", action="store_true", help="Include tasks with the schedule applied")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(stream=sys.stderr)

    try:
        output = run_command(args)
    except (OSError, json.JSONDecodeError, TaskflowError) as e:
        logger.error("command_failed", command=args.command, file=args.file, error=str(e))
        print(f"Error: {e}", file=sys.stderr)
        return 1

    print(json.dumps(output, indent=2))
    return 0


if __name__ == "__main__":
    sys.exit(main())
