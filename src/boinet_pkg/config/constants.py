"""Global constants for BOIN-ET simulation."""

from __future__ import annotations

# Derived target defaults
PHI1_RATIO = 0.1
PHI2_RATIO = 1.4
DELTA1_RATIO = 0.6

# Tolerance when checking that category probabilities sum to one
PROB_SUM_TOL = 1e-6

# Utility scoring table corners fixed by monotonicity:
# (no toxicity, response) is best, (toxicity, no response) is worst
PSI_NO_TOX_EFF = 100.0
PSI_TOX_NO_EFF = 0.0

# First-degree fractional polynomial powers (0 denotes log)
FP_POWERS = (-2.0, -1.0, -0.5, 0.0, 0.5, 1.0, 2.0, 3.0)

# Event probabilities are clipped away from 0 and 1 before Weibull calibration
EVENT_PROB_EPS = 1e-10

# Replications below this count give unstable operating characteristics
MIN_RECOMMENDED_N_SIM = 100
