# -*- coding: utf-8 -*-
"""
Beck–Chevalley 正像算子 ∃_k: Pow B' → Pow B（k: B' ↪ B 单）

    ∈_{B'} ↪ B' ⨯ Pow B'          （t 沿 in_{B'} 的拉回）
    ∈_{B'} ↪ B  ⨯ Pow B'          （再复合 k ⨯ id，仍为单）
    ∃_k = transpose_B(χ_{上述单})

自然性: ⌜χ_m⌝ ≫ ∃_k = ⌜χ_{m ≫ k}⌝，m: S ↪ B'
两侧经 transpose_inv 展开后都分类同一个单 ⟨m ≫ k, !_S⟩: S ↪ B ⨯ ⊤，
由 χ 唯一性相等，再由转置单射回到 ⊤ → Pow B。
"""

from __future__ import annotations

import logging

from .category import Morphism
from .certificates import Calc, Equation
from .classifier import SubobjectClassifier
from .limits import is_pullback
from .power import PowerObjectLayer
from .tags import tag_mono

_logger = logging.getLogger(__name__)


class DirectImage:
    """单态射 k 诱导的 ∃_k"""

    def __init__(self, classifier: SubobjectClassifier, powers: PowerObjectLayer, k: Morphism):
        classifier.require_valid()
        if powers.classifier is not classifier:
            raise ValueError("power-object layer was built over a different classifier")
        cat = classifier.category
        tag_mono(cat, k)
        self.classifier = classifier
        self.powers = powers
        self.category = cat
        self.k = k
        self.source_pow = powers.pow(k.source)
        self.target_pow = powers.pow(k.target)

        membership = classifier.subobject(powers.membership(k.source))
        self.membership_mono = membership.fst
        pushed = cat.compose(
            cat.product_map(k, cat.identity(self.source_pow)), self.membership_mono
        )
        self.morphism = powers.transpose(k.target, self.source_pow, classifier.char(pushed))
        _logger.debug("direct image along %r built", k)

    def naturality(self, m: Morphism) -> Equation:
        """⌜χ_m⌝ ≫ ∃_k = ⌜χ_{m ≫ k}⌝"""
        cat = self.category
        clf = self.classifier
        powers = self.powers
        tag_mono(cat, m)
        if m.target != self.k.source:
            raise ValueError(f"{m!r} is not a subobject of {self.k.source.id}")
        b = self.k.target
        top = cat.terminal
        lhs = cat.compose(self.morphism, powers.name(clf.char(m)))
        rhs = powers.name(clf.char(cat.compose(self.k, m)))

        bang = cat.terminal_map(m.source)
        pushed_point = cat.product(b, top).pair(cat.compose(self.k, m), bang)
        lhs_pred = powers.transpose_inv(b, lhs)
        rhs_pred = powers.transpose_inv(b, rhs)
        clf.uniq(pushed_point, lhs_pred, is_pullback(cat, lhs_pred, clf.truth, pushed_point, bang))
        clf.uniq(pushed_point, rhs_pred, is_pullback(cat, rhs_pred, clf.truth, pushed_point, bang))

        return (
            Calc(cat, lhs, "Beck–Chevalley naturality")
            .step(powers.transpose(b, top, lhs_pred), "transpose ∘ transpose_inv = id")
            .step(powers.transpose(b, top, clf.char(pushed_point)), "left side classifies ⟨m ≫ k, !⟩")
            .step(powers.transpose(b, top, rhs_pred), "right side classifies ⟨m ≫ k, !⟩")
            .step(rhs, "transpose ∘ transpose_inv = id")
            .qed()
        )

    def then(self, outer: "DirectImage") -> Equation:
        """∃_k ≫ ∃_{k'} = ∃_{k ≫ k'}"""
        cat = self.category
        if outer.k.source != self.k.target:
            raise ValueError(f"{outer.k!r} does not continue {self.k!r}")
        composite = DirectImage(self.classifier, self.powers, cat.compose(outer.k, self.k))
        return (
            Calc(cat, cat.compose(outer.morphism, self.morphism), "direct images compose")
            .step(composite.morphism, "composite of monomorphisms")
            .qed()
        )
