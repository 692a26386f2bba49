"""Simulation orchestration."""

from .orchestrator import aggregate, run_replications, simulate_design
from .replicate_tasks import ReplicateTask, build_tasks, chunk_tasks, run_batch, run_task

__all__ = [
    "aggregate",
    "run_replications",
    "simulate_design",
    "ReplicateTask",
    "build_tasks",
    "chunk_tasks",
    "run_batch",
    "run_task",
]
