"""
Configuration constants for gym-tracker.

All adjustable parameters are centralized here.  Values that users may
override at runtime are also listed in the bundled settings.yaml and read
through config_loader.load_settings().
"""

from pathlib import Path
from typing import Final

# =============================================================================
# PERSISTENCE
# =============================================================================

EXERCISES_KEY: Final[str] = "gym_data"  # Blob key for the exercise collection
SESSIONS_KEY: Final[str] = "gym_sessions"  # Blob key for the session collection
PLANS_KEY: Final[str] = "gym_plans"  # Blob key for the plan collection

BUNDLE_VERSION: Final[str] = "1.0"  # Export bundle format version

DATA_DIR_ENV: Final[str] = "GYM_TRACKER_HOME"
DEFAULT_DATA_DIR: Final[Path] = Path.home() / ".gym-tracker"
BLOB_SUFFIX: Final[str] = ".json"

# =============================================================================
# ONE-REP-MAX ESTIMATION
# =============================================================================

EPLEY_DIVISOR: Final[float] = 30.0  # 1RM = w * (1 + reps / 30)

# =============================================================================
# PROGRESSIVE OVERLOAD BANDS
# =============================================================================

# Upper bounds on |score| in percent; anything at or above NOTABLE is "strong".
OVERLOAD_PLATEAU_MAX: Final[float] = 5.0
OVERLOAD_SLIGHT_MAX: Final[float] = 15.0
OVERLOAD_NOTABLE_MAX: Final[float] = 30.0

OVERLOAD_LABELS: Final[dict[tuple[str, str], str]] = {
    ("plateau", "gain"): "Plateau",
    ("plateau", "loss"): "Plateau",
    ("slight", "gain"): "Slight increase",
    ("slight", "loss"): "Slight decrease",
    ("notable", "gain"): "Good increase",
    ("notable", "loss"): "Notable decrease",
    ("strong", "gain"): "Strong increase!",
    ("strong", "loss"): "Strong decrease",
}

# =============================================================================
# PLANS
# =============================================================================

PLAN_SESSION_NOTES: Final[str] = "Based on plan: {plan_name}"
