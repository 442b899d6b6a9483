from __future__ import annotations
import os, random


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw.strip())
    except ValueError:
        return default


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return float(raw.strip())
    except ValueError:
        return default


# baseline battery per assessment tier
BASELINE_COUNTS: dict[str, int] = {"quick": 10, "standard": 20, "comprehensive": 25}
BASELINE_ALLOWED_TIERS: dict[str, tuple[str, ...]] = {
    "quick": ("core",),
    "standard": ("core", "comprehensive"),
    "comprehensive": ("core", "comprehensive", "specialized"),
}
COMPREHENSIVE_PER_TRAIT: int = 2
COMPREHENSIVE_ND_QUOTA: int = 10

# trait bands
EXTREME_HIGH: float = 70.0
EXTREME_LOW: float = 30.0
UNCERTAIN_LOW: float = 45.0
UNCERTAIN_HIGH: float = 55.0
PROCESSING_OPENNESS_MIN: float = 65.0
PROCESSING_CONSCIENTIOUSNESS_MAX: float = 35.0

# indicator rules
EF_NEUROTICISM_MIN: float = 60.0
EF_CONSCIENTIOUSNESS_MAX: float = 40.0
HIGH_OPENNESS_MIN: float = 70.0
EXTRAVERSION_DEVIATION_MIN: float = 30.0
PATHWAY_TRAIT_MAX: float = 35.0
LATENCY_CV_MIN: float = 0.5
EXTREME_RESPONSE_SHARE_MIN: float = 0.6
SENSORY_NEUROTICISM_MIN: float = 60.0
SENSORY_RESPONSE_MIN: int = 4
# whole-word match, only for items without tags or subcategory
SENSORY_KEYWORDS: tuple[str, ...] = (
    "sensory", "sound", "noise", "noises", "loud", "light", "lights", "bright", "texture",
    "textures", "fabric", "smell", "smells", "touch", "taste", "temperature", "crowd", "crowded",
)
SENSORY_SUBCATEGORY: str = "sensory_processing"

# category budget shares
SHARE_PERSONALITY: float = 0.40
SHARE_FACETS: float = 0.25
SHARE_COMMUNICATION_BASE: float = 0.10
SHARE_COMMUNICATION_MAX: float = 0.20
SHARE_PROCESSING: float = 0.05
SHARE_OTHER: float = 0.05
SHARE_PERSONALITY_FLOOR: float = 0.30
SHARE_FACETS_FLOOR: float = 0.15
SHARE_ND_MAX: float = 0.25
SHARE_ND_SCALE: float = 0.30
SHARE_SENSORY_MAX: float = 0.15
SHARE_SENSORY_SCALE: float = 0.20
INDICATOR_THRESHOLD: float = 0.3

# candidate rules
EXTREME_MIN_WEIGHT: float = 3.0
UNCERTAIN_MIN_DISCRIMINATION: float = 0.5
FALLBACK_MIN_WEIGHT: float = 2.0
OTHER_INSTRUMENTS: tuple[str, ...] = ("NEURLYN_STRESS", "NEURLYN_DECISION", "NEURLYN_ATTACHMENT")
COMMUNICATION_INSTRUMENT: str = "NEURLYN_COMMUNICATION"
PROCESSING_INSTRUMENT: str = "NEURLYN_PROCESSING"
SENSORY_INSTRUMENT: str = "NEURLYN_SENSORY"

# neurodiversity pathways
ADHD_INSTRUMENTS: tuple[str, ...] = ("ASRS-5", "NEURLYN_EXECUTIVE")
ADHD_SUBCATEGORIES: tuple[str, ...] = ("executive_function",)
ADHD_TEXT_PATTERN: str = r"attention|focus|concentrate|hyperactive|impulsive"
ADHD_CONSCIENTIOUSNESS_MAX: float = 40.0
ADHD_NEUROTICISM_MIN: float = 60.0
AUTISM_INSTRUMENTS: tuple[str, ...] = ("AQ-10", "NEURLYN_SENSORY", "NEURLYN_MASKING")
AUTISM_SUBCATEGORIES: tuple[str, ...] = ("sensory_processing", "social_interaction")
AUTISM_TEXT_PATTERN: str = r"routine|pattern|social|sensory|literal"
AUTISM_EXTRAVERSION_MAX: float = 35.0
SOCIAL_DIFFICULTY_PATTERN: str = "social_difficulty"
GENERAL_ND_INSTRUMENTS: tuple[str, ...] = ("NEURLYN_EMOTIONAL", "NEURLYN_INTERESTS")

# answered-count floors per sensitivity tier
SENSITIVITY_FLOOR_LOW: int = 0
SENSITIVITY_FLOOR_MODERATE: int = 20
SENSITIVITY_FLOOR_HIGH: int = 30
SENSITIVITY_FLOOR_EXTREME: int = 40

# answered-count lower bound -> phase focus
PHASES: tuple[tuple[int, str], ...] = (
    (0, "broad_screening"),
    (10, "trait_building"),
    (30, "clinical_validation"),
    (50, "uncertainty_reduction"),
    (65, "gap_filling"),
)

ADAPTIVE_BATCH_SIZE: int = 20

BANK_MIN_BASELINE_PER_TRAIT: int = 2
BANK_MIN_ND_BASELINE: int = 10
BANK_MIN_PER_CATEGORY: int = 5
ITEM_BANK_PATH: str | None = None

AUDIT_EXPORT_ENABLED: bool = True

DEBUG_TRACE: bool = False
DEBUG_SEED: int | None = None
TRACE_FIELDS: tuple[str, ...] = ("pass", "budget", "candidates", "accepted", "gated")

# // env overrides for staging/ops; defaults remain conservative.
ADAPTIVE_BATCH_SIZE = _env_int("ADAPTIVE_BATCH_SIZE", ADAPTIVE_BATCH_SIZE)
SENSITIVITY_FLOOR_MODERATE = _env_int("SENSITIVITY_FLOOR_MODERATE", SENSITIVITY_FLOOR_MODERATE)
SENSITIVITY_FLOOR_HIGH = _env_int("SENSITIVITY_FLOOR_HIGH", SENSITIVITY_FLOOR_HIGH)
SENSITIVITY_FLOOR_EXTREME = _env_int("SENSITIVITY_FLOOR_EXTREME", SENSITIVITY_FLOOR_EXTREME)
FALLBACK_MIN_WEIGHT = _env_float("FALLBACK_MIN_WEIGHT", FALLBACK_MIN_WEIGHT)
ITEM_BANK_PATH = os.getenv("ITEM_BANK_PATH") or None
AUDIT_EXPORT_ENABLED = _env_bool("AUDIT_EXPORT_ENABLED", AUDIT_EXPORT_ENABLED)
DEBUG_TRACE = _env_bool("DEBUG_TRACE", False)
_seed_raw = os.getenv("DEBUG_SEED")
DEBUG_SEED = _env_int("DEBUG_SEED", 0) if _seed_raw else None


def make_rng(seed: int | None = None) -> random.Random:
    """RNG for shuffles; falls back to DEBUG_SEED, then to a fresh random seed."""
    if seed is None:
        seed = DEBUG_SEED
    if seed is None:
        seed = random.randint(0, 2**31 - 1)
    return random.Random(int(seed))
