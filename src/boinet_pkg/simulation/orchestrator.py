"""Replication loop and aggregation into operating characteristics."""

from __future__ import annotations

from collections import Counter
from dataclasses import replace
from typing import List, Optional
import os
import uuid

import numpy as np
import structlog
from joblib import Parallel, delayed

from ..contracts.types import SimulationResult, StopReason, TrialRun
from ..domain.design import TrialDesign
from ..engine.context import RunContext
from ..engine.trial import TrialStateMachine
from .replicate_tasks import build_tasks, chunk_tasks, run_batch

logger = structlog.get_logger()


def _effective_jobs(n_jobs: int) -> int:
    if n_jobs < 0:
        return max(1, (os.cpu_count() or 1) + 1 + n_jobs)
    return n_jobs


def run_replications(
    design: TrialDesign,
    n_sim: int,
    seed_sim: int,
    n_jobs: int = 1,
) -> List[TrialRun]:
    """Run ``n_sim`` independent trials, in replication order.

    With ``n_jobs`` other than 1 the replications are split into contiguous
    batches and run by joblib workers; the per-replication random streams
    make the result identical to a sequential run.
    """
    machine = TrialStateMachine(design)
    tasks = build_tasks(n_sim, seed_sim)
    jobs = _effective_jobs(n_jobs)

    if jobs == 1:
        return run_batch(machine, tasks)

    batches = Parallel(n_jobs=jobs)(
        delayed(run_batch)(machine, chunk) for chunk in chunk_tasks(tasks, jobs)
    )
    return [trial for batch in batches for trial in batch]


def aggregate(design: TrialDesign, runs: List[TrialRun]) -> SimulationResult:
    """Collapse replications into a ``SimulationResult``."""
    n_sim = len(runs)
    scenario = design.scenario

    selected = np.zeros(design.n_dose)
    for trial in runs:
        if trial.obd is not None:
            selected[trial.obd] += 1
    reasons = Counter(trial.stop_reason for trial in runs if trial.stop_reason is not None)

    prop_select = 100.0 * selected / n_sim
    prop_stop = 100.0 * sum(reasons.values()) / n_sim

    et = design.event_time
    return SimulationResult(
        design=design.design,
        toxprob=scenario.toxprob if design.design.is_graded else scenario.toxprob[1],
        effprob=scenario.effprob if design.design.is_graded else scenario.effprob[1],
        n_ets=scenario.n_ets,
        n_ees=scenario.n_ees,
        boundaries=design.boundaries,
        phi=design.targets.phi,
        delta=design.targets.delta,
        n_patient=np.mean([trial.n_patient for trial in runs], axis=0),
        prop_select=prop_select,
        prop_stop=prop_stop,
        duration=float(np.mean([trial.duration for trial in runs])),
        n_sim=n_sim,
        tau_t=et.tau_t,
        tau_e=et.tau_e,
        accrual=et.accrual,
        n_tox=np.mean([trial.n_tox for trial in runs], axis=0),
        n_eff=np.mean([trial.n_eff for trial in runs], axis=0),
        prop_stop_reasons={
            reason.value: 100.0 * reasons.get(reason, 0) / n_sim for reason in StopReason
        },
        settings={
            "phi1": design.targets.phi1,
            "phi2": design.targets.phi2,
            "delta1": design.targets.delta1,
            "start_dose": design.start_dose + 1,
            "size_cohort": design.size_cohort,
            "n_cohort": design.n_cohort,
            "stopping_npts": design.stopping_npts,
            "stopping_prob_t": design.stopping_prob_t,
            "stopping_prob_e": design.stopping_prob_e,
            "estpt_method": design.selection.estpt_method,
            "obd_method": design.selection.obd_method,
            "te_corr": et.te_corr,
            "gen_event_time": et.gen_event_time,
            "gen_enroll_time": et.gen_enroll_time,
        },
    )


def simulate_design(
    design: TrialDesign,
    n_sim: int,
    seed_sim: int,
    n_jobs: int = 1,
    run_id: Optional[str] = None,
) -> SimulationResult:
    """Run and aggregate all replications of a resolved design."""
    context = RunContext(run_id=run_id or f"{design.design.value}_{uuid.uuid4().hex[:8]}", seed=seed_sim, n_jobs=n_jobs)
    context.start_run(design=design.design.value, n_sim=n_sim)

    runs = run_replications(design, n_sim, seed_sim, n_jobs=n_jobs)
    for i, trial in enumerate(runs):
        context.logger.debug(
            "Replication finished",
            replicate=i,
            obd=None if trial.obd is None else trial.obd + 1,
            stop_reason=None if trial.stop_reason is None else trial.stop_reason.value,
            n_patients=trial.total_patients,
        )

    result = aggregate(design, runs)
    context.end_run(prop_stop=result.prop_stop, duration=result.duration)
    return replace(result, settings={**result.settings, "run": context.get_runtime_metadata()})
