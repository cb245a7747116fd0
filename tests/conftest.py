"""
Pytest configuration and shared fixtures.
"""

import os
import sys
from datetime import date

import pytest

sys.path.append(os.path.join(os.getcwd(), "src"))

from taskflow.tasks import create_task  # noqa: E402

TODAY = date(2026, 2, 9)


@pytest.fixture(scope="session", autouse=True)
def setup_test_environment() -> None:
    """Set up test environment variables."""
    os.environ.setdefault("APP_ENV", "test")
    os.environ.setdefault("LOG_LEVEL", "debug")


# =============================================================================
# Task Creation Helpers
# =============================================================================

def build_task(task_id: str, **fields):
    """Helper to create tasks with a fixed id and a default title."""
    fields.setdefault("title", f"Task {task_id}")
    return create_task(id=task_id, **fields)


@pytest.fixture
def make_task():
    """Fixture to create tasks."""
    return build_task


@pytest.fixture
def today() -> date:
    """Fixed reference date shared by all engine tests."""
    return TODAY


@pytest.fixture
def chain_tasks():
    """A -> B -> C, each depending on the previous one."""
    return [
        build_task("A", estimated_hours=6),
        build_task("B", estimated_hours=6, dependencies=["A"]),
        build_task("C", estimated_hours=6, dependencies=["B"]),
    ]


@pytest.fixture
def diamond_tasks():
    """A fans out to B (long) and C (short), both feed D."""
    return [
        build_task("A", estimated_hours=4),
        build_task("B", estimated_hours=8, dependencies=["A"]),
        build_task("C", estimated_hours=2, dependencies=["A"]),
        build_task("D", estimated_hours=4, dependencies=["B", "C"]),
    ]


@pytest.fixture
def cyclic_tasks():
    """X depends on Y, Y on Z and Z on X."""
    return [
        build_task("X", dependencies=["Y"]),
        build_task("Y", dependencies=["Z"]),
        build_task("Z", dependencies=["X"]),
    ]
