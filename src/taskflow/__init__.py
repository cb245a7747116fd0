"""
TaskFlow - Task Prioritization and Scheduling Engine

This package contains the planning core of the academic project planner:
- models: Task, Milestone and schedule records
- schedulers: priority scoring, dependency analysis, schedule optimization
- tasks: task factory and readiness / blocking utilities
- milestones: milestone progress and date tracking
- breakdown: ingestion of generated phase breakdowns
- alerts: overdue, deadline and critical-path alerts
- api: FastAPI endpoints
- platform: Cross-cutting concerns (configuration, logging)
"""

__version__ = "0.1.0"
