"""Centralized constants for memora.

SM-2 parameters, mastery thresholds and time heuristics live here so every
layer imports from a single source of truth.
"""

# ---------- SM-2 ----------
DEFAULT_EASE_FACTOR = 2.5
MIN_EASE_FACTOR = 1.3
INITIAL_INTERVAL = 1  # days
SECOND_INTERVAL = 6  # days
MAX_INTERVAL = 36500  # days; keeps next_review within datetime range
PASSING_QUALITY = 3
MIN_QUALITY = 0
MAX_QUALITY = 5

# Ease-factor update: EF' = EF + (BASE - d * (LINEAR + d * QUADRATIC)), d = 5 - q
EASE_BASE_DELTA = 0.1
EASE_LINEAR_PENALTY = 0.08
EASE_QUADRATIC_PENALTY = 0.02

# ---------- Quality Mapper ----------
INFERRED_WRONG_QUALITY = 2
NO_ANSWER_QUALITY = 0

# ---------- Mastery ----------
MASTERY_MIN_REPETITION = 3
MASTERY_MIN_INTERVAL = 21  # days
YOUNG_INTERVAL_LIMIT = 7  # days

# ---------- Statistics ----------
# Rough per-item time heuristic, not measured telemetry.
DEFAULT_SECONDS_PER_ITEM = 30

# ---------- Study session ----------
DEFAULT_SESSION_LIMIT = 20

# ---------- Persistence ----------
STORAGE_VERSION = "1.0.0"
BACKUP_SUFFIX = ".bak"
