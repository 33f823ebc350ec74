"""
Scoring Engine Constants

Sub-score weights, defaults, thresholds and static curriculum policy.
All values are deterministic with no AI/ML components.
"""

from typing import Dict, Tuple

ALGORITHM_VERSION = "1.4"

# =============================================================================
# COMPETENCY MATCH
# =============================================================================

PREREQ_SATISFACTION_WEIGHT = 0.4
GRADE_MATCH_WEIGHT = 0.3
SKILL_GAP_FILL_WEIGHT = 0.3

# =============================================================================
# INTEREST
# =============================================================================

DEFAULT_INTEREST = 0.1             # Unexplored subdomains are not zeroed out
MAX_GRADE = 4.0
DEFAULT_PERFORMANCE = 0.5          # Subdomain with no recorded grade
CONCENTRATION_WEIGHT = 0.6
PERFORMANCE_WEIGHT = 0.4
RECENT_SUCCESS_GRADE = 1.0         # Grades strictly above count as success
RECENT_SUCCESS_BOOST = 5.0
PREFERRED_SUBDOMAIN_SHARE = 0.5    # Blend of stated preference vs inferred

# =============================================================================
# PROGRAM PROGRESS
# =============================================================================

REQUIRED_COMPETENCY_WEIGHT = 0.5
DISTRIBUTION_WEIGHT = 0.4
REMAINING_DEGREE_WEIGHT = 0.1

SATISFIED_AREA_SCORE = 0.2         # Gap closed, continued depth
ELECTIVE_AREA_SCORE = 0.3          # No distribution requirement

# (progress below, multiplier), checked in order
URGENCY_BANDS: Tuple[Tuple[float, float], ...] = (
    (0.5, 1.2),
    (0.75, 1.1),
)

# =============================================================================
# REASONS
# =============================================================================

REASON_PROGRESS_THRESHOLD = 0.7
REASON_INTEREST_THRESHOLD = 0.7
REASON_FIT_THRESHOLD = 0.8

# =============================================================================
# OPTIMIZER MARGINAL VALUE
# =============================================================================

MARGINAL_NEW_SKILL_WEIGHT = 0.3
MARGINAL_DISTRIBUTION_WEIGHT = 0.3
MARGINAL_FIT_WEIGHT = 0.4

# =============================================================================
# QUALITY EVALUATION
# =============================================================================

GOODNESS_SKILL_COVERAGE_WEIGHT = 0.3
GOODNESS_COMPLIANCE_WEIGHT = 0.3
GOODNESS_PROGRESS_FIT_WEIGHT = 0.4

PROGRESS_FIT_COMPETENCY_WEIGHT = 0.6
PROGRESS_FIT_DISTRIBUTION_WEIGHT = 0.4

# =============================================================================
# REQUEST DEFAULTS & STATIC POLICY
# =============================================================================

TARGET_CREDIT_CAP = 60.0           # Above this a load is an overload
DEFAULT_TOTAL_CREDITS_REQUIRED = 120.0

DEFAULT_DISTRIBUTION_REQUIREMENTS: Dict[str, float] = {
    "AI": 36.0,
    "SE": 24.0,
    "Math": 12.0,
}

LOW_RECOMMENDATION_COUNT = 3
