"""
Tests for ScheduleOptimizer.
"""

import pytest

from taskflow.models import Reassignment, ScheduleResult, TaskStatus
from taskflow.platform.config import Settings
from taskflow.schedulers import ScheduleOptimizer, apply_schedule, optimize_schedule


@pytest.fixture
def optimizer(today):
    """Create a ScheduleOptimizer pinned to the test date."""
    return ScheduleOptimizer(today=today)


@pytest.fixture
def two_step_tasks(make_task, today):
    """A is due today and B waits on it."""
    return [
        make_task("A", estimated_hours=12, deadline=today.isoformat()),
        make_task("B", estimated_hours=6, dependencies=["A"]),
    ]


class TestEmptyInput:
    """Degenerate inputs produce an empty result."""

    def test_no_tasks(self, optimizer):
        assert optimizer.optimize_schedule([], ["Alice"]) == ScheduleResult()

    def test_no_team(self, optimizer, two_step_tasks):
        result = optimizer.optimize_schedule(two_step_tasks, [])
        assert result.slots == []
        assert result.critical_path_length == 0
        assert result.resource_utilization == {}

    def test_only_done_tasks(self, optimizer, make_task):
        result = optimizer.optimize_schedule([make_task("A", status="done")], ["Alice"])
        assert result.slots == []
        assert result.critical_path_length == 0
        assert result.resource_utilization == {"Alice": 0}
        assert result.total_estimated_hours == 0


class TestSlots:
    """Placement of tasks on the calendar."""

    def test_sequential_dependency(self, optimizer, two_step_tasks):
        result = optimizer.optimize_schedule(two_step_tasks, ["Alice"])

        a = result.slot_for("A")
        b = result.slot_for("B")
        assert (a.start_date, a.end_date) == ("2026-02-09", "2026-02-11")
        assert (b.start_date, b.end_date) == ("2026-02-11", "2026-02-12")
        assert a.assignee == b.assignee == "Alice"
        assert a.is_critical_path and b.is_critical_path
        assert result.critical_path_length == 3
        assert result.resource_utilization == {"Alice": 100}
        assert result.total_estimated_hours == 18
        assert result.bottlenecks == []

    def test_parallel_tasks_spread_over_team(self, optimizer, make_task):
        tasks = [make_task("one", estimated_hours=6), make_task("two", estimated_hours=6)]
        result = optimizer.optimize_schedule(tasks, ["Alice", "Bob"])

        assert {s.assignee for s in result.slots} == {"Alice", "Bob"}
        assert all(s.start_date == "2026-02-09" for s in result.slots)
        assert result.critical_path_length == 1
        assert result.resource_utilization == {"Alice": 100, "Bob": 100}
        assert result.suggested_reassignments == []

    def test_existing_assignee_is_kept(self, optimizer, make_task):
        tasks = [make_task("A", assigned_to="Bob"), make_task("B", assigned_to="Bob")]
        result = optimizer.optimize_schedule(tasks, ["Alice", "Bob"])

        assert [s.assignee for s in result.slots] == ["Bob", "Bob"]
        assert result.slot_for("B").start_date == "2026-02-10"
        assert result.resource_utilization == {"Alice": 0, "Bob": 100}

    def test_unknown_assignee_is_auto_assigned(self, optimizer, make_task):
        result = optimizer.optimize_schedule([make_task("A", assigned_to="Mallory")], ["Alice"])
        assert result.slot_for("A").assignee == "Alice"

    def test_unassigned_never_matches_a_member(self, optimizer, make_task):
        tasks = [make_task("one", estimated_hours=6), make_task("two", estimated_hours=6)]
        result = optimizer.optimize_schedule(tasks, ["Unassigned", "Bob"])

        assert {s.assignee for s in result.slots} == {"Unassigned", "Bob"}
        assert result.critical_path_length == 1

    def test_duration_rounds_up_to_whole_days(self, optimizer, make_task):
        tasks = [make_task("tiny", estimated_hours=0.5), make_task("big", estimated_hours=13)]
        result = optimizer.optimize_schedule(tasks, ["Alice", "Bob"])
        assert result.slot_for("big").end_date == "2026-02-12"
        assert result.slot_for("tiny").end_date == "2026-02-10"

    def test_done_tasks_skipped(self, optimizer, make_task):
        tasks = [
            make_task("D", status=TaskStatus.DONE, estimated_hours=30),
            make_task("E", dependencies=["D"]),
        ]
        result = optimizer.optimize_schedule(tasks, ["Alice"])

        assert result.slot_for("D") is None
        assert result.slot_for("E").start_date == "2026-02-09"
        assert result.total_estimated_hours == 4

    def test_slots_respect_dependencies(self, optimizer, make_task):
        tasks = [
            make_task("design", estimated_hours=10),
            make_task("api", estimated_hours=20, dependencies=["design"]),
            make_task("ui", estimated_hours=14, dependencies=["design"]),
            make_task("docs", estimated_hours=3),
            make_task("release", estimated_hours=2, dependencies=["api", "ui", "docs"]),
        ]
        result = optimizer.optimize_schedule(tasks, ["Alice", "Bob"])

        assert len(result.slots) == len(tasks)
        by_id = {s.task_id: s for s in result.slots}
        for task in tasks:
            for dep in task.dependencies:
                assert by_id[task.id].start_date >= by_id[dep].end_date

    def test_cyclic_tasks_still_scheduled(self, optimizer, cyclic_tasks):
        result = optimizer.optimize_schedule(cyclic_tasks, ["Alice"])
        assert sorted(s.task_id for s in result.slots) == ["X", "Y", "Z"]

    def test_custom_hours_per_day(self, make_task, today):
        optimizer = ScheduleOptimizer(settings=Settings(HOURS_PER_DAY=8), today=today)
        tasks = [
            make_task("X", estimated_hours=8),
            make_task("Y", estimated_hours=12, dependencies=["X"]),
        ]
        result = optimizer.optimize_schedule(tasks, ["Alice"])
        assert result.slot_for("X").end_date == "2026-02-10"
        assert result.slot_for("Y").end_date == "2026-02-12"
        assert result.critical_path_length == 3


class TestAnalysis:
    """Bottlenecks and reassignment suggestions."""

    def test_bottleneck_needs_two_dependents(self, optimizer, make_task):
        tasks = [
            make_task("A", estimated_hours=6),
            make_task("B", estimated_hours=6, dependencies=["A"]),
            make_task("C", estimated_hours=6, dependencies=["A"]),
        ]
        result = optimizer.optimize_schedule(tasks, ["Alice"])
        assert result.bottlenecks == ["A"]

    def test_overloaded_member_gets_suggestion(self, optimizer, make_task):
        tasks = [
            make_task("L1", assigned_to="Alice", estimated_hours=12),
            make_task("L2", assigned_to="Alice", estimated_hours=12),
            make_task("S", assigned_to="Alice", estimated_hours=6),
        ]
        result = optimizer.optimize_schedule(tasks, ["Alice", "Bob", "Carol"])

        assert result.resource_utilization == {"Alice": 100, "Bob": 0, "Carol": 0}
        assert result.suggested_reassignments == [
            Reassignment(
                task_id="S",
                from_member="Alice",
                to_member="Bob",
                reason="Alice is overloaded (100% util) vs Bob (0% util)",
            )
        ]

    def test_no_suggestion_when_only_critical_work(self, optimizer, make_task):
        tasks = [make_task("L1", assigned_to="Alice", estimated_hours=12)]
        result = optimizer.optimize_schedule(tasks, ["Alice", "Bob"])
        assert result.suggested_reassignments == []

    def test_reassignment_serializes_from_and_to(self, optimizer, make_task):
        tasks = [
            make_task("L1", assigned_to="Alice", estimated_hours=12),
            make_task("S", assigned_to="Alice", estimated_hours=6),
        ]
        data = optimizer.optimize_schedule(tasks, ["Alice", "Bob", "Carol"]).to_dict()
        suggestion = data["suggestedReassignments"][0]
        assert suggestion["from"] == "Alice"
        assert suggestion["to"] == "Bob"
        assert suggestion["taskId"] == "S"

    def test_deterministic(self, two_step_tasks, today):
        first = optimize_schedule(two_step_tasks, ["Alice", "Bob"], today=today)
        second = optimize_schedule(two_step_tasks, ["Alice", "Bob"], today=today)
        assert first == second


class TestApplySchedule:
    """Merging slots back onto tasks."""

    def test_scheduled_fields_set(self, optimizer, two_step_tasks):
        result = optimizer.optimize_schedule(two_step_tasks, ["Alice"])
        applied = apply_schedule(two_step_tasks, result)

        assert applied[0].scheduled_start == "2026-02-09"
        assert applied[0].scheduled_end == "2026-02-11"
        assert applied[0].critical_path is True
        assert applied[0].assigned_to == "Alice"
        assert two_step_tasks[0].scheduled_start is None

    def test_unscheduled_tasks_pass_through(self, optimizer, make_task):
        done = make_task("D", status="done")
        tasks = [done, make_task("E")]
        applied = optimizer.apply_schedule(tasks, optimizer.optimize_schedule(tasks, ["Alice"]))
        assert applied[0] is done
        assert applied[1].scheduled_start == "2026-02-09"
