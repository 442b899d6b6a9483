from __future__ import annotations
from dataclasses import dataclass, field
from enum import IntEnum
from typing import Dict, FrozenSet, List, Literal, Optional, Tuple

Category = Literal[
    "personality", "neurodiversity", "cognitive", "lateral", "interactive",
    "psychoanalytic", "cognitive_functions", "enneagram", "attachment",
    "defense_mechanisms", "learning_style", "trauma_screening", "clinical", "validity",
]
CATEGORIES: Tuple[str, ...] = Category.__args__  # type: ignore[attr-defined]


class SelectionInputError(ValueError):
    """Caller supplied something the engine refuses to guess about."""


class UnknownTierError(SelectionInputError):
    pass


class ProfileError(SelectionInputError):
    pass


class Sensitivity(IntEnum):
    NONE = 0
    LOW = 1
    MODERATE = 2
    HIGH = 3
    EXTREME = 4


@dataclass(frozen=True)
class TriggerCondition:
    dimension: str
    min_score: Optional[float] = None
    max_score: Optional[float] = None
    min_level: Optional[str] = None


@dataclass(frozen=True)
class RequiredSignals:
    min_question_count: Optional[int] = None
    required_phase: Optional[str] = None
    trigger_conditions: Tuple[TriggerCondition, ...] = ()
    any_of: bool = False


@dataclass(frozen=True)
class Item:
    id: str; text: str; category: str
    instrument: str = "UNSPECIFIED"
    subcategory: Optional[str] = None
    trait: Optional[str] = None
    facet: Optional[str] = None
    tags: FrozenSet[str] = frozenset()
    correlated_traits: FrozenSet[str] = frozenset()
    diagnostic_weight: float = 1.0
    discrimination_index: float = 0.0
    sensitivity: Sensitivity = Sensitivity.NONE
    required_signals: Optional[RequiredSignals] = None
    is_baseline: bool = False
    baseline_priority: Optional[int] = None
    tier: str = "core"
    reverse_scored: bool = False
    incompatible_with: FrozenSet[str] = frozenset()
    active: bool = True


@dataclass
class TraitProfile:
    traits: Dict[str, float]
    patterns: List[str] = field(default_factory=list)
    dimensions: Dict[str, float] = field(default_factory=dict)

    def score(self, dimension: str) -> Optional[float]:
        if dimension in self.traits:
            return self.traits[dimension]
        return self.dimensions.get(dimension)


@dataclass(frozen=True)
class ResponseRecord:
    item_id: str; value: int
    rt_ms: Optional[float] = None
    text: str = ""
    tags: FrozenSet[str] = frozenset()
    subcategory: Optional[str] = None


@dataclass(frozen=True)
class SelectionSession:
    exclude_ids: FrozenSet[str] = frozenset()
    items_answered: int = 0
    phase: str = "broad_screening"


@dataclass(frozen=True)
class Indicators:
    neurodiversity: float = 0.0
    sensory: float = 0.0
    communication: float = 0.0


@dataclass(frozen=True)
class CategoryBudget:
    personality: int = 0
    facets: int = 0
    communication: int = 0
    processing: int = 0
    neurodiversity: int = 0
    sensory: int = 0
    other: int = 0

    def total(self) -> int:
        return (self.personality + self.facets + self.communication + self.processing
                + self.neurodiversity + self.sensory + self.other)


@dataclass
class SelectionResult:
    items: List[Item]
    indicators: Indicators
    budget: CategoryBudget
    events: List[Dict[str, object]] = field(default_factory=list)
