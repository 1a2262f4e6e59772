# -*- coding: utf-8 -*-
"""
极限见证: 二元积 / 拉回方块 / 等化子

拉回方块的数学定义:

        P ──snd──→ B
        │          │
       fst         g
        ↓          ↓
        A ───f───→ C

    fst ≫ f = snd ≫ g，且对任意 h: Z → A, k: Z → B (h ≫ f = k ≫ g)
    存在唯一 lift(h, k): Z → P 使 lift ≫ fst = h, lift ≫ snd = k

工程红线:
- 见证构造时必须检查方块交换
- lift() 每次调用都检查竞争方块交换与两个三角形
- 唯一性不能只靠存在性: 构造时（及 verify()）检查 ⟨fst, snd⟩ 单（联合单）
- 下游所有"唯一的 X 使得……"都复用 uniq()
"""

from __future__ import annotations

import logging
from typing import Callable, Iterable, Optional, Tuple

from .category import (
    Category, FiniteLimitCategory, LimitWitnessViolation, Morphism, Object,
    PullbackWitnessViolation,
)
from .certificates import Equation, prove_equal

_logger = logging.getLogger(__name__)

LiftFn = Callable[[Morphism, Morphism], Morphism]


# ============================================================================
# Section 1: BinaryProduct
# ============================================================================

class BinaryProduct:
    """二元积见证 A ⨯ B，带投影与配对"""

    def __init__(
        self,
        category: Category,
        left: Object,
        right: Object,
        obj: Object,
        fst: Morphism,
        snd: Morphism,
        pair_fn: LiftFn,
        label: str = "",
    ):
        if fst.source != obj or fst.target != left or snd.source != obj or snd.target != right:
            raise LimitWitnessViolation(
                label or obj.id, f"projections {fst!r}, {snd!r} do not leave {obj.id}"
            )
        self.category = category
        self.left = left
        self.right = right
        self.obj = obj
        self.fst = fst
        self.snd = snd
        self._pair_fn = pair_fn
        self.label = label or obj.id

    def pair(self, f: Morphism, g: Morphism) -> Morphism:
        """⟨f, g⟩: Z → A ⨯ B"""
        if f.source != g.source:
            raise ValueError(f"Cannot pair {f!r} and {g!r}: different sources")
        if f.target != self.left or g.target != self.right:
            raise ValueError(f"Cannot pair {f!r}, {g!r} into {self.obj.id}")
        paired = self._pair_fn(f, g)
        cat = self.category
        if not (cat.equal(cat.compose(self.fst, paired), f)
                and cat.equal(cat.compose(self.snd, paired), g)):
            raise LimitWitnessViolation(self.label, f"⟨{f.name}, {g.name}⟩ breaks a projection triangle")
        return paired

    def __repr__(self):
        return f"BinaryProduct({self.left.id} ⨯ {self.right.id})"


# ============================================================================
# Section 2: PullbackSquare
# ============================================================================

class PullbackSquare:
    """拉回方块见证 (f, g, fst, snd) + 中介态射函数"""

    def __init__(
        self,
        category: Category,
        f: Morphism,
        g: Morphism,
        fst: Morphism,
        snd: Morphism,
        lift_fn: LiftFn,
        label: str = "pullback",
        *,
        check_unique: bool = True,
    ):
        self.category = category
        self.label = label
        if f.target != g.target:
            raise PullbackWitnessViolation(label, f"cospan legs {f!r}, {g!r} have different targets")
        if fst.source != snd.source:
            raise PullbackWitnessViolation(label, f"span legs {fst!r}, {snd!r} have different sources")
        if fst.target != f.source or snd.target != g.source:
            raise PullbackWitnessViolation(label, "span does not land on the cospan")
        if not category.equal(category.compose(f, fst), category.compose(g, snd)):
            raise PullbackWitnessViolation(label, "square does not commute: fst ≫ f ≠ snd ≫ g")
        self.f = f
        self.g = g
        self.fst = fst
        self.snd = snd
        self._lift_fn = lift_fn
        if check_unique:
            self._check_jointly_monic()

    @property
    def apex(self) -> Object:
        return self.fst.source

    def lift(self, h: Morphism, k: Morphism) -> Morphism:
        """中介态射 lift(h, k): Z → P"""
        cat = self.category
        if h.source != k.source or h.target != self.f.source or k.target != self.g.source:
            raise ValueError(f"Competing span {h!r}, {k!r} does not fit '{self.label}'")
        if not cat.equal(cat.compose(self.f, h), cat.compose(self.g, k)):
            raise PullbackWitnessViolation(self.label, "competing square does not commute: h ≫ f ≠ k ≫ g")
        mediating = self._lift_fn(h, k)
        if mediating.source != h.source or mediating.target != self.apex:
            raise PullbackWitnessViolation(self.label, f"lift returned {mediating!r}")
        if not cat.equal(cat.compose(self.fst, mediating), h):
            raise PullbackWitnessViolation(self.label, "lift ≫ fst ≠ h")
        if not cat.equal(cat.compose(self.snd, mediating), k):
            raise PullbackWitnessViolation(self.label, "lift ≫ snd ≠ k")
        return mediating

    def uniq(self, h: Morphism, k: Morphism, candidate: Morphism) -> Equation:
        """candidate 满足两三角形 ⇒ candidate = lift(h, k)"""
        cat = self.category
        prove_equal(cat, cat.compose(self.fst, candidate), h, f"{self.label}: candidate ≫ fst = h")
        prove_equal(cat, cat.compose(self.snd, candidate), k, f"{self.label}: candidate ≫ snd = k")
        mediating = self.lift(h, k)
        if not cat.equal(candidate, mediating):
            raise PullbackWitnessViolation(
                self.label, f"mediating morphism is not unique: {candidate!r} ≠ {mediating!r}"
            )
        return Equation(candidate, mediating, f"{self.label}: uniqueness of lift")

    def _check_jointly_monic(self) -> None:
        cat = self.category
        if isinstance(cat, FiniteLimitCategory):
            jointly = cat.product(self.f.source, self.g.source).pair(self.fst, self.snd)
            if not cat.is_monic(jointly):
                raise PullbackWitnessViolation(
                    self.label, "⟨fst, snd⟩ is not monic: mediating morphisms are not unique"
                )

    def verify(self, spans: Iterable[Tuple[Morphism, Morphism]] = ()) -> "PullbackSquare":
        """拒绝不唯一的见证，并对给定的竞争方块实际求 lift"""
        self._check_jointly_monic()
        count = 0
        for h, k in spans:
            self.lift(h, k)
            count += 1
        _logger.debug("pullback '%s' verified on %d competing spans", self.label, count)
        return self

    def flip(self) -> "PullbackSquare":
        """对称方块 (g, f, snd, fst)"""
        return PullbackSquare(
            self.category, self.g, self.f, self.snd, self.fst,
            lambda k, h: self._lift_fn(h, k),
            label=f"{self.label}ᵀ",
        )

    def __repr__(self):
        return (
            f"PullbackSquare('{self.label}', {self.apex.id} → "
            f"{self.f.source.id} ⨯_{self.f.target.id} {self.g.source.id})"
        )


def is_pullback(
    category: FiniteLimitCategory,
    f: Morphism,
    g: Morphism,
    fst: Morphism,
    snd: Morphism,
    label: str = "pullback",
) -> PullbackSquare:
    """为任意候选方块构造拉回见证

    与规范拉回比较: 比较态射 c = canonical.lift(fst, snd) 必须可逆，
    此时 lift(h, k) = c⁻¹ ∘ canonical.lift(h, k)。

    Raises:
        PullbackWitnessViolation: 方块不交换或比较态射不可逆
    """
    canonical = category.pullback(f, g)
    comparison = canonical.lift(fst, snd)
    inverse = category.find_inverse(comparison)
    if inverse is None:
        raise PullbackWitnessViolation(
            label, f"comparison {fst.source.id} → {canonical.apex.id} is not invertible"
        )

    def _lift(h: Morphism, k: Morphism) -> Morphism:
        return category.compose(inverse, canonical.lift(h, k))

    return PullbackSquare(category, f, g, fst, snd, _lift, label=label)


# ============================================================================
# Section 3: Equalizer
# ============================================================================

class Equalizer:
    """等化子见证: inclusion: E → Y 等化 a, b: Y → W"""

    def __init__(
        self,
        category: Category,
        a: Morphism,
        b: Morphism,
        inclusion: Morphism,
        lift_fn: Callable[[Morphism], Morphism],
        label: str = "equalizer",
    ):
        self.category = category
        self.label = label
        if a.source != b.source or a.target != b.target:
            raise LimitWitnessViolation(label, f"{a!r} and {b!r} are not parallel")
        if inclusion.target != a.source:
            raise LimitWitnessViolation(label, f"{inclusion!r} does not land in {a.source.id}")
        if not category.equal(category.compose(a, inclusion), category.compose(b, inclusion)):
            raise LimitWitnessViolation(label, "inclusion does not equalize the pair")
        self.a = a
        self.b = b
        self.inclusion = inclusion
        self._lift_fn = lift_fn

    def lift(self, h: Morphism) -> Morphism:
        cat = self.category
        if h.target != self.a.source:
            raise ValueError(f"{h!r} does not land in {self.a.source.id}")
        if not cat.equal(cat.compose(self.a, h), cat.compose(self.b, h)):
            raise LimitWitnessViolation(self.label, f"{h!r} does not equalize the pair")
        mediating = self._lift_fn(h)
        if not cat.equal(cat.compose(self.inclusion, mediating), h):
            raise LimitWitnessViolation(self.label, "lift ≫ inclusion ≠ h")
        return mediating

    def pullback_along(self, square: PullbackSquare) -> "Equalizer":
        """正则单在拉回下稳定

        square 为 inclusion 沿 h: X → Y 的拉回 (f=h, g=inclusion, fst=m, snd)，
        则 m 等化 (h ≫ a, h ≫ b)，lift(z) = square.lift(z, self.lift(z ≫ h))。
        """
        cat = self.category
        if not cat.equal(square.g, self.inclusion):
            raise LimitWitnessViolation(self.label, "square is not a pullback of this inclusion")
        h = square.f
        outer = self

        def _lift(z: Morphism) -> Morphism:
            return square.lift(z, outer.lift(cat.compose(h, z)))

        return Equalizer(
            cat, cat.compose(self.a, h), cat.compose(self.b, h), square.fst, _lift,
            label=f"{self.label} pulled back along {h.name or repr(h)}",
        )

    def __repr__(self):
        return f"Equalizer('{self.label}', {self.inclusion!r})"
