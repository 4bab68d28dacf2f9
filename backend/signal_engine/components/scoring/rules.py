"""Scoring constants: category weights, level thresholds, and signal thresholds."""

SKILL_CATEGORIES = [
    "communication",
    "problem_decomposition",
    "ai_leverage",
    "code_quality",
    "xfn_collaboration",
    "time_management",
    "technical_decision_making",
    "presentation",
]

# Sums to 1.0
CATEGORY_WEIGHTS = {
    "code_quality": 0.20,
    "communication": 0.15,
    "problem_decomposition": 0.15,
    "technical_decision_making": 0.15,
    "ai_leverage": 0.10,
    "xfn_collaboration": 0.10,
    "time_management": 0.10,
    "presentation": 0.05,
}

# Highest first; a score maps to the first rung whose minimum it reaches.
LEVEL_THRESHOLDS = [
    (4.5, "exceptional"),
    (3.5, "strong"),
    (2.5, "adequate"),
    (1.5, "developing"),
]
LOWEST_LEVEL = "needs_improvement"

DEFAULT_SCORE = 3
MIN_SCORE = 1
MAX_SCORE = 5

AI_TOOL_KEYWORDS = ["claude", "chatgpt", "copilot", "ai"]
AI_TOOLS_PRESENT_SCORE = 4

STUCK_MOMENT_COUNT_PENALTY = 5
STUCK_AVG_DURATION_PENALTY_SECONDS = 300
TECHNICAL_DIFFICULTY_PENALTY_COUNT = 3
ACTIVE_RATIO_PENALTY_BELOW = 0.5

CI_SUCCESS_BONUS = 0.5
CI_FAILURE_PENALTY = 0.5
DEFENSE_EXCHANGES_FOR_BONUS = 10
DEFENSE_BONUS = 0.5

# unique coworkers contacted -> score (highest matching minimum wins)
COLLABORATION_THRESHOLDS = [
    (3, 5),
    (2, 4),
    (1, 3),
]
NO_COLLABORATION_SCORE = 2
