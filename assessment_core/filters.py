"""Closed predicate type for catalog queries.

Every selection pass describes the items it wants with one of the frozen
dataclasses below; ``matches`` is the only evaluator and handles each
variant explicitly.
"""
from __future__ import annotations

from dataclasses import dataclass
import re
from typing import FrozenSet, Tuple, Union

from .types import Item


@dataclass(frozen=True)
class ByTrait:
    trait: str


@dataclass(frozen=True)
class ByCategory:
    category: str


@dataclass(frozen=True)
class ByInstrument:
    instruments: FrozenSet[str]


@dataclass(frozen=True)
class ByTags:
    tags: FrozenSet[str]


@dataclass(frozen=True)
class BySubcategory:
    subcategories: FrozenSet[str]


@dataclass(frozen=True)
class ByTextPattern:
    """Case-insensitive regex search over the item wording."""
    pattern: str


@dataclass(frozen=True)
class ByTier:
    tiers: FrozenSet[str]


@dataclass(frozen=True)
class ByCorrelatedTraits:
    traits: FrozenSet[str]


@dataclass(frozen=True)
class HasFacet:
    pass


@dataclass(frozen=True)
class HasSubcategory:
    pass


@dataclass(frozen=True)
class IsBaseline:
    pass


@dataclass(frozen=True)
class IsActive:
    pass


@dataclass(frozen=True)
class MinWeight:
    value: float


@dataclass(frozen=True)
class MinDiscrimination:
    value: float


@dataclass(frozen=True)
class ExcludeIds:
    ids: FrozenSet[str]


@dataclass(frozen=True)
class And:
    parts: Tuple["Predicate", ...]


@dataclass(frozen=True)
class Or:
    parts: Tuple["Predicate", ...]


@dataclass(frozen=True)
class Not:
    part: "Predicate"


Predicate = Union[
    ByTrait, ByCategory, ByInstrument, ByTags, BySubcategory, ByTextPattern,
    ByTier, ByCorrelatedTraits, HasFacet, HasSubcategory, IsBaseline, IsActive,
    MinWeight, MinDiscrimination, ExcludeIds, And, Or, Not,
]


def all_of(*parts: Predicate) -> And:
    return And(tuple(parts))


def any_of(*parts: Predicate) -> Or:
    return Or(tuple(parts))


def matches(pred: Predicate, item: Item) -> bool:
    if isinstance(pred, ByTrait):
        return item.trait == pred.trait
    if isinstance(pred, ByCategory):
        return item.category == pred.category
    if isinstance(pred, ByInstrument):
        return item.instrument in pred.instruments
    if isinstance(pred, ByTags):
        return bool(item.tags & pred.tags)
    if isinstance(pred, BySubcategory):
        return item.subcategory in pred.subcategories
    if isinstance(pred, ByTextPattern):
        return re.search(pred.pattern, item.text, re.IGNORECASE) is not None
    if isinstance(pred, ByTier):
        return item.tier in pred.tiers
    if isinstance(pred, ByCorrelatedTraits):
        return bool(item.correlated_traits & pred.traits)
    if isinstance(pred, HasFacet):
        return bool(item.facet)
    if isinstance(pred, HasSubcategory):
        return bool(item.subcategory)
    if isinstance(pred, IsBaseline):
        return item.is_baseline
    if isinstance(pred, IsActive):
        return item.active
    if isinstance(pred, MinWeight):
        return item.diagnostic_weight >= pred.value
    if isinstance(pred, MinDiscrimination):
        return item.discrimination_index >= pred.value
    if isinstance(pred, ExcludeIds):
        return item.id not in pred.ids
    if isinstance(pred, And):
        return all(matches(p, item) for p in pred.parts)
    if isinstance(pred, Or):
        return any(matches(p, item) for p in pred.parts)
    if isinstance(pred, Not):
        return not matches(pred.part, item)
    raise TypeError(f"unsupported predicate {type(pred).__name__}")
