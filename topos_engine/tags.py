# -*- coding: utf-8 -*-
"""
态射能力标签格

    ISO ⇒ SPLIT_MONO, EPI
    SPLIT_MONO ⇒ REGULAR_MONO ⇒ MONO
    MONO ∧ EPI ∧ (平衡范畴) ⇒ ISO   （见 classifier.balanced_inverse）

标签只经由显式函数获得: 可判定的谓词 (tag / tag_mono / tag_epi)，
或附带见证的推导规则 (with_tag)。
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Any, Dict, FrozenSet, Mapping, Optional

from .category import CapabilityError, Category, Morphism


class MorphismTag(Enum):
    MONO = auto()
    EPI = auto()
    SPLIT_MONO = auto()
    REGULAR_MONO = auto()
    ISO = auto()


_IMPLIES: Dict[MorphismTag, FrozenSet[MorphismTag]] = {
    MorphismTag.ISO: frozenset({MorphismTag.SPLIT_MONO, MorphismTag.EPI}),
    MorphismTag.SPLIT_MONO: frozenset({MorphismTag.REGULAR_MONO}),
    MorphismTag.REGULAR_MONO: frozenset({MorphismTag.MONO}),
}


def _closure(tags: FrozenSet[MorphismTag]) -> FrozenSet[MorphismTag]:
    out = set(tags)
    frontier = list(tags)
    while frontier:
        for implied in _IMPLIES.get(frontier.pop(), frozenset()):
            if implied not in out:
                out.add(implied)
                frontier.append(implied)
    return frozenset(out)


@dataclass(frozen=True)
class TaggedMorphism:
    """态射 + 能力标签 + 每个标签的见证"""
    morphism: Morphism
    tags: FrozenSet[MorphismTag] = frozenset()
    witnesses: Mapping[MorphismTag, Any] = field(default_factory=dict, compare=False, hash=False)

    def has(self, tag: MorphismTag) -> bool:
        return tag in self.tags

    def require(self, *tags: MorphismTag) -> "TaggedMorphism":
        missing = [t.name for t in tags if t not in self.tags]
        if missing:
            raise CapabilityError(f"{self.morphism!r} lacks capability tags {missing}")
        return self

    def with_tag(self, tag: MorphismTag, witness: Optional[Any] = None) -> "TaggedMorphism":
        witnesses = dict(self.witnesses)
        if witness is not None:
            witnesses[tag] = witness
        return TaggedMorphism(self.morphism, _closure(self.tags | {tag}), witnesses)

    def witness(self, tag: MorphismTag) -> Any:
        if tag not in self.witnesses:
            raise CapabilityError(f"{self.morphism!r} carries no witness for {tag.name}")
        return self.witnesses[tag]


def tag(category: Category, f: Morphism) -> TaggedMorphism:
    """用范畴的可判定谓词打 MONO / EPI 标签"""
    tagged = TaggedMorphism(f)
    if category.is_monic(f):
        tagged = tagged.with_tag(MorphismTag.MONO)
    if category.is_epic(f):
        tagged = tagged.with_tag(MorphismTag.EPI)
    return tagged


def tag_mono(category: Category, f: Morphism) -> TaggedMorphism:
    if not category.is_monic(f):
        raise CapabilityError(f"{f!r} is not a monomorphism")
    return TaggedMorphism(f).with_tag(MorphismTag.MONO)


def tag_epi(category: Category, f: Morphism) -> TaggedMorphism:
    if not category.is_epic(f):
        raise CapabilityError(f"{f!r} is not an epimorphism")
    return TaggedMorphism(f).with_tag(MorphismTag.EPI)
