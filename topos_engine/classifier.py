# -*- coding: utf-8 -*-
"""
SubobjectClassifier - Topos 的真值对象 Ω

数学定义:
对于任意单态射 m: U ↪ X，存在唯一的特征态射 χ_m: X → Ω
使得下图是拉回方块:

    U ──!──→ ⊤
    │        │
    m        t
    ↓        ↓
    X ─χ_m─→ Ω

分类器是显式传递的能力值: 依赖它的构造都以参数接收，不从范畴上隐式解析。

派生结论:
1. t 是可裂单 (左逆 !_Ω)，因而是正则单 (等化 id_Ω 与 !_Ω ≫ t)
2. 每个单态射 m 是 t 沿 χ_m 的拉回；正则性沿拉回稳定 ⇒ m 正则
3. 平衡: 单 + 满 ⇒ 同构 (等化子对被满态射消去后相等，逆即 id 的 lift)
4. 忠实函子反射同构 (含反变情形)

工程红线:
- χ_m 的唯一性是承重的: uniq() 发现第二个分类态射即判分类器非法
- 非单态射求 χ 直接拒绝，不做"尽量分类"
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Dict, Hashable, Iterable, Optional, Tuple, Union

from .category import (
    CapabilityError, ClassifierLawViolation, EquationFailure, FiniteLimitCategory,
    FunctorLawViolation, Morphism, Object, PullbackWitnessViolation,
)
from .certificates import Calc, Equation, prove_equal
from .functor import Functor
from .limits import Equalizer, PullbackSquare, is_pullback
from .tags import MorphismTag, TaggedMorphism, tag, tag_mono

_logger = logging.getLogger(__name__)


# ============================================================================
# Section 1: 分类器契约
# ============================================================================

class SubobjectClassifier:
    """(Ω, t: ⊤ → Ω, char) 三元组

    Args:
        category: 带有限极限的宿主范畴（构造时要求其通过定律验证）
        omega: 真值对象 Ω
        truth: t: ⊤ → Ω
        characteristic: 单态射 ↦ 特征态射 的原始构造
    """

    def __init__(
        self,
        category: FiniteLimitCategory,
        omega: Object,
        truth: Morphism,
        characteristic: Callable[[Morphism], Morphism],
        *,
        label: str = "Ω",
    ):
        category.require_valid()
        if truth.source != category.terminal or truth.target != omega:
            raise ClassifierLawViolation(f"truth must be ⊤ → {omega.id}, got {truth!r}")
        self.category = category
        self.omega = omega
        self.truth = truth
        self.label = label
        self._characteristic = characteristic
        self._char_cache: Dict[Hashable, Morphism] = {}
        self._square_cache: Dict[Hashable, PullbackSquare] = {}
        self._validated = False

    def truth_at(self, obj: Object) -> Morphism:
        """true_X = !_X ≫ t"""
        return self.category.compose(self.truth, self.category.terminal_map(obj))

    def char(self, m: Morphism) -> Morphism:
        """特征态射 χ_m: X → Ω（同一单态射重复调用返回同一结果）"""
        key = m.key()
        cached = self._char_cache.get(key)
        if cached is not None:
            return cached
        if not self.category.is_monic(m):
            raise CapabilityError(f"char() requires a monomorphism, got {m!r}")
        chi = self._characteristic(m)
        if chi.source != m.target or chi.target != self.omega:
            raise ClassifierLawViolation(f"char({m!r}) has type {chi!r}, expected {m.target.id} → {self.omega.id}")
        self._char_cache[key] = chi
        return chi

    def classifying_square(self, m: Morphism) -> PullbackSquare:
        """拉回方块 (χ_m, t, m, !_U)"""
        key = m.key()
        cached = self._square_cache.get(key)
        if cached is not None:
            return cached
        chi = self.char(m)
        try:
            square = is_pullback(
                self.category, chi, self.truth, m, self.category.terminal_map(m.source),
                label=f"classifying square of {m.name or repr(m)}",
            )
        except PullbackWitnessViolation as e:
            raise ClassifierLawViolation(f"classifying square of {m!r} is not a pullback: {e.details}") from e
        self._square_cache[key] = square
        return square

    def is_classifying(self, m: Morphism, chi: Morphism) -> bool:
        """(m, χ) 构成拉回方块?"""
        try:
            is_pullback(self.category, chi, self.truth, m, self.category.terminal_map(m.source))
        except PullbackWitnessViolation:
            return False
        return True

    def uniq(self, m: Morphism, chi: Morphism, square: PullbackSquare) -> Equation:
        """唯一性定律: square 见证 (m, χ) 为拉回 ⇒ χ = char(m)

        先拒绝坏见证（腿不符、不是拉回、lift 不成立），再比较 χ；
        只有见证合法而 χ ≠ char(m) 时才判分类器非法。
        """
        cat = self.category
        bang = cat.terminal_map(m.source)
        legs = (
            (square.f, chi, "f = χ"),
            (square.g, self.truth, "g = t"),
            (square.fst, m, "fst = m"),
            (square.snd, bang, "snd = !_U"),
        )
        for actual, expected, what in legs:
            if not cat.equal(actual, expected):
                raise PullbackWitnessViolation(square.label, f"square does not present (m, χ): {what} fails")
        is_pullback(cat, chi, self.truth, m, bang, label=square.label)
        square.verify([(m, bang)])
        try:
            return prove_equal(cat, chi, self.char(m), f"uniqueness of χ for {m.name or repr(m)}")
        except EquationFailure as e:
            raise ClassifierLawViolation(
                f"two distinct morphisms classify {m!r}: {chi!r} and {self.char(m)!r}"
            ) from e

    def subobject(self, chi: Morphism) -> PullbackSquare:
        """χ ↦ 子对象: t 沿 χ 的拉回；fst 即单态射"""
        return self.category.pullback(chi, self.truth)

    def naturality(self, m: Morphism, h: Morphism) -> Equation:
        """h: Y → X，n 为 m 沿 h 的拉回 ⇒ χ_n = h ≫ χ_m（拉回粘合）"""
        cat = self.category
        pulled = cat.pullback(h, m)
        return prove_equal(
            cat, self.char(pulled.fst), cat.compose(self.char(m), h),
            f"char naturality along {h.name or repr(h)}",
        )

    def validate(self, monos: Optional[Iterable[Morphism]] = None) -> "SubobjectClassifier":
        """对样本单态射检查: 方块为拉回；有限 hom 集上 χ 唯一

        Args:
            monos: 样本单态射；默认取 t 与范畴中全部已登记的单态射

        Raises:
            ClassifierLawViolation: 任一样本违反
        """
        cat = self.category
        if monos is None:
            monos = [self.truth] + [f for f in cat.morphisms if cat.is_monic(f)]
        checked = 0
        for m in monos:
            self.classifying_square(m)
            if cat.can_enumerate(m.target, self.omega):
                chi = self.char(m)
                for other in cat.hom(m.target, self.omega):
                    if not cat.equal(other, chi) and self.is_classifying(m, other):
                        raise ClassifierLawViolation(
                            f"{other!r} also classifies {m!r}; χ is not unique"
                        )
            checked += 1
        self._validated = True
        _logger.info("classifier '%s' accepted on %d sample monomorphisms", self.label, checked)
        return self

    def require_valid(self) -> "SubobjectClassifier":
        """下游构造（幂对象层、指数、正像、正则单、平衡）前调用"""
        if not self._validated:
            self.validate()
        return self


# ============================================================================
# Section 2: 派生结论 - 正则单 / 平衡 / 同构反射
# ============================================================================

@dataclass(frozen=True)
class IsomorphismWitness:
    inverse: Morphism
    section: Equation     # f ∘ f⁻¹ = id_Y
    retraction: Equation  # f⁻¹ ∘ f = id_X


def truth_split_mono(clf: SubobjectClassifier) -> TaggedMorphism:
    """t: ⊤ → Ω 可裂单，左逆 !_Ω；正则单见证为 id_Ω 与 !_Ω ≫ t 的等化子"""
    cat = clf.category
    t = clf.truth
    retraction = cat.terminal_map(clf.omega)
    prove_equal(cat, cat.compose(retraction, t), cat.identity(cat.terminal), "!_Ω ∘ t = id_⊤")
    equalizer = Equalizer(
        cat, cat.identity(clf.omega), cat.compose(t, retraction), t,
        lambda h: cat.terminal_map(h.source),
        label="t equalizes id_Ω, !_Ω ≫ t",
    )
    return (
        TaggedMorphism(t)
        .with_tag(MorphismTag.SPLIT_MONO, retraction)
        .with_tag(MorphismTag.REGULAR_MONO, equalizer)
    )


def regular_mono(clf: SubobjectClassifier, m: Morphism) -> TaggedMorphism:
    """m 为 t 沿 χ_m 的拉回 ⇒ m 等化 (χ_m, true_X)"""
    clf.require_valid()
    cat = clf.category
    tagged = tag_mono(cat, m)
    t_equalizer: Equalizer = truth_split_mono(clf).witness(MorphismTag.REGULAR_MONO)
    presentation = t_equalizer.pullback_along(clf.classifying_square(m))
    prove_equal(cat, presentation.a, clf.char(m), "id_Ω ∘ χ_m = χ_m")
    prove_equal(cat, presentation.b, clf.truth_at(m.target), "t ∘ !_Ω ∘ χ_m = true_X")
    return tagged.with_tag(MorphismTag.REGULAR_MONO, presentation)


def balanced_inverse(
    clf: SubobjectClassifier, f: Union[Morphism, TaggedMorphism]
) -> TaggedMorphism:
    """单 + 满 ⇒ 同构

    f 作为正则单等化 (a, b)；f 满 ⇒ a = b ⇒ id_Y 亦等化 (a, b)，
    逆 = lift(id_Y)。f ∘ f⁻¹ = id_Y 由 lift 三角形给出，
    f⁻¹ ∘ f = id_X 由 f 单可消去。
    """
    clf.require_valid()
    cat = clf.category
    tagged = f if isinstance(f, TaggedMorphism) else tag(cat, f)
    tagged.require(MorphismTag.MONO, MorphismTag.EPI)
    m = tagged.morphism
    if tagged.has(MorphismTag.REGULAR_MONO) and isinstance(
        tagged.witnesses.get(MorphismTag.REGULAR_MONO), Equalizer
    ):
        presentation: Equalizer = tagged.witness(MorphismTag.REGULAR_MONO)
    else:
        presentation = regular_mono(clf, m).witness(MorphismTag.REGULAR_MONO)

    try:
        prove_equal(cat, presentation.a, presentation.b, "epi cancels the equalized pair")
    except EquationFailure as e:
        raise CapabilityError(f"{m!r} is tagged EPI but does not cancel its equalizer pair") from e
    inverse = presentation.lift(cat.identity(m.target))
    section = prove_equal(cat, cat.compose(m, inverse), cat.identity(m.target), "f ∘ f⁻¹ = id")
    # f ≫ f⁻¹ ≫ f = f，f 单 ⇒ f ≫ f⁻¹ = id
    prove_equal(cat, cat.chain(m, inverse, m), m, "f ∘ f⁻¹ ∘ f = f")
    retraction = prove_equal(cat, cat.compose(inverse, m), cat.identity(m.source), "f⁻¹ ∘ f = id")
    _logger.debug("balanced: %r is an isomorphism", m)
    return tagged.with_tag(MorphismTag.ISO, IsomorphismWitness(inverse, section, retraction))


def _cancellation_pair(
    category: FiniteLimitCategory, f: Morphism, mono: bool
) -> Tuple[Optional[Tuple[Morphism, Morphism]], int]:
    """在可穷举的 hom 集上找 a ≠ b 使 f ∘ a = f ∘ b（mono）或 a ∘ f = b ∘ f（epi）

    Returns:
        (反例对或 None, 已检查的 hom 集个数)
    """
    checked = 0
    for z in category.objects:
        src, tgt = (z, f.source) if mono else (f.target, z)
        if not category.can_enumerate(src, tgt):
            continue
        seen: Dict[Hashable, Morphism] = {}
        for a in category.hom(src, tgt):
            composite = category.compose(f, a) if mono else category.compose(a, f)
            b = seen.get(composite.key())
            if b is not None:
                return (a, b), checked + 1
            seen[composite.key()] = a
        checked += 1
    return None, checked


def _refute_by_cancellation(
    functor: Functor, image: Morphism, inverse: Morphism,
    a: Morphism, b: Morphism, iso_on_left: bool,
) -> None:
    """F(f) 可逆 ⇒ 从 F(f ∘ a) = F(f ∘ b) 消去得 F(a) = F(b)，与忠实矛盾"""
    tgt = functor.target_category
    fa, fb = functor(a), functor(b)
    if iso_on_left:
        through_a, through_b = tgt.chain(fa, image, inverse), tgt.chain(fb, image, inverse)
    else:
        through_a, through_b = tgt.chain(inverse, image, fa), tgt.chain(inverse, image, fb)
    try:
        (
            Calc(tgt, fa, f"F cancels {a!r}, {b!r}")
            .step(through_a, "F(f) is invertible")
            .step(through_b, "F preserves the equation")
            .step(fb, "F(f) is invertible")
            .qed()
        )
    except EquationFailure as e:
        raise FunctorLawViolation(functor.name, "composition", str(e)) from e
    raise FunctorLawViolation(
        functor.name, "faithfulness", f"F({a!r}) = F({b!r}) for distinct {a!r}, {b!r}"
    )


def reflects_isomorphism(
    clf: SubobjectClassifier, functor: Functor, f: Morphism
) -> TaggedMorphism:
    """忠实函子 F（可反变）: F(f) 同构 ⇒ f 同构

    单: 若 f ∘ a = f ∘ b，则 F(f ∘ a) = F(f ∘ b)，消去可逆的 F(f) 得 F(a) = F(b)，
    忠实 ⇒ a = b。满同理（反变时 F(f) 落在另一侧）。于是 f 单且满，再由平衡性得同构。
    反例对在可穷举的 hom 集上实际搜索；一个都不可穷举时才退回范畴自身的判定。
    """
    if functor.source_category is not clf.category:
        raise CapabilityError(f"functor '{functor.name}' does not leave the classified category")
    if not functor.faithful:
        raise CapabilityError(f"functor '{functor.name}' is not known to be faithful")
    image = functor(f)
    inverse = functor.target_category.find_inverse(image)
    if inverse is None:
        raise CapabilityError(f"F({f!r}) = {image!r} is not an isomorphism")
    cat = clf.category
    reflected = TaggedMorphism(f)
    for kind, mono, decide in (
        (MorphismTag.MONO, True, cat.is_monic),
        (MorphismTag.EPI, False, cat.is_epic),
    ):
        pair, checked = _cancellation_pair(cat, f, mono)
        if pair is not None:
            _refute_by_cancellation(
                functor, image, inverse, *pair, iso_on_left=(mono != functor.contravariant)
            )
        if checked:
            witness = ("cancelled through", functor.name, checked)
        elif decide(f):
            witness = ("decided by", cat.name)
        else:
            raise FunctorLawViolation(
                functor.name, "faithfulness", f"F({f!r}) is invertible but {f!r} is not {kind.name}"
            )
        reflected = reflected.with_tag(kind, witness)
    return balanced_inverse(clf, reflected)
