"""Run context for simulation execution."""

from __future__ import annotations
import time
from typing import Dict, Any, Optional
import structlog
import numpy as np


def replicate_rng(seed: int, index: int) -> np.random.Generator:
    """Independent random stream for replication ``index`` of a run seeded with ``seed``.

    The stream depends only on (seed, index), never on scheduling.
    """
    return np.random.default_rng([seed, index])


class RunContext:
    """Context for a simulation run with logging, timing, and RNG management."""

    def __init__(
        self,
        run_id: str,
        seed: int = 100,
        n_jobs: int = 1,
        logger: Optional[structlog.BoundLogger] = None
    ):
        self.run_id = run_id
        self.seed = seed
        self.n_jobs = n_jobs

        if logger is None:
            self.logger = structlog.get_logger().bind(run_id=run_id)
        else:
            self.logger = logger.bind(run_id=run_id)

        self._start_time: Optional[float] = None
        self._runtime: float = 0.0

        self.metadata: Dict[str, Any] = {
            "run_id": run_id,
            "seed": seed,
            "n_jobs": n_jobs,
        }

    def start_run(self, **fields: Any) -> None:
        """Mark start of run execution."""
        self._start_time = time.perf_counter()
        self.logger.info("Simulation started", **fields)

    def end_run(self, **fields: Any) -> float:
        """Mark end of run execution and return total runtime.

        Returns:
            Total runtime in seconds
        """
        if self._start_time is None:
            return 0.0

        self._runtime = time.perf_counter() - self._start_time
        self.logger.info("Simulation completed", runtime_s=self._runtime, **fields)
        return self._runtime

    def get_runtime_metadata(self) -> Dict[str, Any]:
        """Get runtime metadata for this execution."""
        metadata = self.metadata.copy()
        metadata["runtime_s"] = self._runtime
        return metadata
