"""Deterministic replication tasks.

Each task carries the run seed and its own index; the worker derives its
random stream from the pair, so a task produces the same trial whichever
process runs it and in whatever order.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Sequence

from ..contracts.types import TrialRun
from ..engine.context import replicate_rng
from ..engine.trial import TrialStateMachine


@dataclass(frozen=True)
class ReplicateTask:
    """Descriptor for one simulated trial."""

    index: int
    seed: int


def build_tasks(n_sim: int, seed_sim: int) -> List[ReplicateTask]:
    """Create ``n_sim`` tasks sharing the base seed."""
    return [ReplicateTask(index=i, seed=seed_sim) for i in range(n_sim)]


def run_task(machine: TrialStateMachine, task: ReplicateTask) -> TrialRun:
    """Run one replication."""
    return machine.run(replicate_rng(task.seed, task.index))


def run_batch(machine: TrialStateMachine, tasks: Sequence[ReplicateTask]) -> List[TrialRun]:
    """Run several replications in order; the unit of work shipped to a worker."""
    return [run_task(machine, task) for task in tasks]


def chunk_tasks(tasks: Sequence[ReplicateTask], n_chunks: int) -> List[List[ReplicateTask]]:
    """Split tasks into contiguous chunks, preserving order."""
    n_chunks = max(1, min(n_chunks, len(tasks)))
    size, extra = divmod(len(tasks), n_chunks)
    chunks: List[List[ReplicateTask]] = []
    start = 0
    for i in range(n_chunks):
        stop = start + size + (1 if i < extra else 0)
        chunks.append(list(tasks[start:stop]))
        start = stop
    return chunks
