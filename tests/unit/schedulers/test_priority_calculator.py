"""
Tests for PriorityCalculator.
"""

from datetime import timedelta

import pytest

from taskflow.models import TaskComplexity, TaskPriority, TaskStatus
from taskflow.schedulers import PriorityCalculator, compute_priority_score, rank_tasks
from taskflow.schedulers.priority_calculator import PriorityComponents


@pytest.fixture
def calculator(today):
    """Create a PriorityCalculator pinned to the test date."""
    return PriorityCalculator(today=today)


class TestStatusOverrides:
    """Done and blocked tasks get fixed scores."""

    def test_done_task_scores_zero(self, calculator, make_task, today):
        task = make_task("A", status="done", deadline=today.isoformat(), priority="critical")
        assert calculator.compute_priority_score(task, [task]) == 0

    def test_blocked_task_scores_five(self, calculator, make_task, today):
        task = make_task("A", status="blocked", deadline=today.isoformat(), priority="critical")
        assert calculator.compute_priority_score(task, [task]) == 5

    def test_components_still_reported_for_done_task(self, calculator, make_task, today):
        task = make_task("A", status="done", deadline=today.isoformat())
        components = calculator.get_priority_components(task, [task])
        assert components.urgency_score == 100
        assert components.total_score == 0


class TestUrgency:
    """Deadline proximity scoring."""

    @pytest.mark.parametrize("days, expected", [
        (-5, 100),
        (0, 100),
        (10, 67),
        (15, 50),
        (29, 3),
        (30, 0),
        (45, 0),
    ])
    def test_urgency_by_days_left(self, calculator, make_task, today, days, expected):
        task = make_task("A", deadline=(today + timedelta(days=days)).isoformat())
        components = calculator.get_priority_components(task, [task])
        assert components.urgency_score == expected

    def test_no_deadline_has_flat_baseline(self, calculator, make_task):
        task = make_task("A")
        assert calculator.get_priority_components(task, [task]).urgency_score == 20


class TestDependencyImpact:
    """Dependent counting."""

    def test_counts_dependents(self, calculator, make_task):
        root = make_task("root")
        tasks = [root] + [make_task(f"d{i}", dependencies=["root"]) for i in range(3)]
        assert calculator.get_priority_components(root, tasks).dependency_impact_score == 60

    def test_saturates_at_five_dependents(self, calculator, make_task):
        root = make_task("root")
        tasks = [root] + [make_task(f"d{i}", dependencies=["root"]) for i in range(7)]
        assert calculator.get_priority_components(root, tasks).dependency_impact_score == 100

    def test_task_not_in_list_has_no_dependents(self, calculator, make_task):
        task = make_task("A")
        assert calculator.get_priority_components(task, []).dependency_impact_score == 0


class TestComplexityTimePressure:
    """Effort relative to remaining time."""

    def test_without_deadline_uses_complexity(self, calculator, make_task):
        task = make_task("A", complexity=TaskComplexity.COMPLEX)
        assert calculator.get_priority_components(task, [task]).complexity_time_score == 50

    def test_ratio_of_hours_to_available_time(self, calculator, make_task, today):
        # 2 days x 6 hours = 12 available, 6 needed
        task = make_task("A", estimated_hours=6, deadline=(today + timedelta(days=2)).isoformat())
        assert calculator.get_priority_components(task, [task]).complexity_time_score == 50

    def test_past_deadline_counts_as_one_day(self, calculator, make_task, today):
        task = make_task("A", estimated_hours=3, deadline=(today - timedelta(days=4)).isoformat())
        assert calculator.get_priority_components(task, [task]).complexity_time_score == 50

    def test_capped_at_100(self, calculator, make_task, today):
        task = make_task("A", estimated_hours=40, deadline=today.isoformat())
        assert calculator.get_priority_components(task, [task]).complexity_time_score == 100


class TestManualWeight:
    """Manual priority levels."""

    @pytest.mark.parametrize("priority, expected", [
        (TaskPriority.CRITICAL, 100),
        (TaskPriority.HIGH, 75),
        (TaskPriority.MEDIUM, 50),
        (TaskPriority.LOW, 25),
    ])
    def test_priority_weights(self, calculator, make_task, priority, expected):
        task = make_task("A", priority=priority)
        assert calculator.get_priority_components(task, [task]).manual_weight_score == expected


class TestTotalScore:
    """Weighted total."""

    def test_deadline_today_with_one_dependent(self, calculator, make_task, today):
        a = make_task("A", estimated_hours=12, deadline=today.isoformat())
        b = make_task("B", estimated_hours=6, dependencies=["A"])

        components = calculator.get_priority_components(a, [a, b])

        assert isinstance(components, PriorityComponents)
        assert components.urgency_score == 100
        assert components.dependency_impact_score == 20
        assert components.complexity_time_score == 100
        assert components.manual_weight_score == 50
        # 35 + 5 + 20 + 10
        assert components.total_score == 70

    def test_no_deadline_task(self, calculator, make_task):
        a = make_task("A")
        b = make_task("B", estimated_hours=6, dependencies=["A"])
        # 7 + 0 + 6 + 10
        assert calculator.compute_priority_score(b, [a, b]) == 23

    def test_scores_stay_in_bounds(self, calculator, make_task, today):
        tasks = []
        for i, status in enumerate(TaskStatus):
            for j, priority in enumerate(TaskPriority):
                for days in (-10, 0, 3, 60, None):
                    deadline = (today + timedelta(days=days)).isoformat() if days is not None else None
                    tasks.append(make_task(
                        f"t{i}-{j}-{days}",
                        status=status,
                        priority=priority,
                        deadline=deadline,
                        estimated_hours=100,
                        complexity=8,
                    ))
        for task in tasks:
            assert 0 <= calculator.compute_priority_score(task, tasks) <= 100

    def test_module_function_matches_calculator(self, calculator, make_task, today):
        task = make_task("A", deadline=(today + timedelta(days=5)).isoformat(), priority="high")
        assert compute_priority_score(task, [task], today=today) == calculator.compute_priority_score(task, [task])


class TestRankTasks:
    """Ranking returns a sorted copy."""

    def test_sorted_descending(self, calculator, make_task, today):
        tasks = [
            make_task("low", priority="low"),
            make_task("urgent", priority="critical", deadline=today.isoformat()),
            make_task("done", status="done"),
            make_task("mid"),
        ]
        ranked = calculator.rank_tasks(tasks)

        assert [t.id for t in ranked] == ["urgent", "mid", "low", "done"]
        scores = [t.priority_score for t in ranked]
        assert scores == sorted(scores, reverse=True)

    def test_does_not_mutate_input(self, calculator, make_task, today):
        tasks = [make_task("A", deadline=today.isoformat()), make_task("B")]
        calculator.rank_tasks(tasks)
        assert [t.id for t in tasks] == ["A", "B"]
        assert all(t.priority_score == 0 for t in tasks)

    def test_ties_keep_input_order(self, calculator, make_task):
        tasks = [make_task(name) for name in ("first", "second", "third")]
        assert [t.id for t in calculator.rank_tasks(tasks)] == ["first", "second", "third"]

    def test_dependents_counted_against_full_list(self, calculator, make_task):
        tasks = [make_task("hub")] + [make_task(f"d{i}", dependencies=["hub"]) for i in range(5)]
        ranked = calculator.rank_tasks(tasks)
        assert ranked[0].id == "hub"
        # 7 + 25 + 6 + 10
        assert ranked[0].priority_score == 48

    def test_deterministic(self, make_task, today):
        tasks = [
            make_task("A", deadline=(today + timedelta(days=3)).isoformat()),
            make_task("B", dependencies=["A"], priority="high"),
            make_task("C", priority="low"),
        ]
        assert rank_tasks(tasks, today=today) == rank_tasks(tasks, today=today)
