# -*- coding: utf-8 -*-
"""
PowerObjectLayer - 幂对象层契约

原语（由具体范畴提供）:
    pow(A)          : Pow A
    membership(A)   : in_A : A ⨯ Pow A → Ω
    _transpose(A, X, φ) : φ: A ⨯ X → Ω  ↦  φ̂: X → Pow A

转置双射:  (id_A ⨯ φ̂) ≫ in_A = φ，且对 h: X → Pow A 有 transpose(transpose_inv(h)) = h

派生（通用，只经由原语与分类器）:
    transpose_inv, name, singleton, is_singleton, transpose_naturality
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Dict, Iterable, Tuple

from .category import (
    EquationFailure, FiniteLimitCategory, Morphism, Object, PowerObjectLawViolation,
)
from .certificates import Equation, prove_equal
from .classifier import SubobjectClassifier

_logger = logging.getLogger(__name__)


class PowerObjectLayer(ABC):
    """幂对象层: 以分类器为显式上下文"""

    def __init__(self, classifier: SubobjectClassifier):
        self.classifier = classifier.require_valid()
        self.category: FiniteLimitCategory = classifier.category
        self._singletons: Dict[str, Morphism] = {}

    @abstractmethod
    def pow(self, obj: Object) -> Object:
        pass

    @abstractmethod
    def membership(self, obj: Object) -> Morphism:
        pass

    @abstractmethod
    def _transpose(self, obj: Object, parameter: Object, phi: Morphism) -> Morphism:
        pass

    def transpose(self, obj: Object, parameter: Object, phi: Morphism) -> Morphism:
        """φ: A ⨯ X → Ω  ↦  φ̂: X → Pow A，并检查 (id_A ⨯ φ̂) ≫ in_A = φ"""
        cat = self.category
        expected_source = cat.product(obj, parameter).obj
        if phi.source != expected_source or phi.target != self.classifier.omega:
            raise ValueError(
                f"transpose expects {expected_source.id} → {self.classifier.omega.id}, got {phi!r}"
            )
        hat = self._transpose(obj, parameter, phi)
        if hat.source != parameter or hat.target != self.pow(obj):
            raise PowerObjectLawViolation(f"transpose of {phi!r} has type {hat!r}")
        if not cat.equal(self.transpose_inv(obj, hat), phi):
            raise PowerObjectLawViolation(f"(id ⨯ transpose(φ)) ≫ in_{obj.id} ≠ φ for {phi!r}")
        return hat

    def transpose_inv(self, obj: Object, h: Morphism) -> Morphism:
        """h: X → Pow A  ↦  (id_A ⨯ h) ≫ in_A : A ⨯ X → Ω"""
        cat = self.category
        return cat.compose(self.membership(obj), cat.product_map(cat.identity(obj), h))

    def name(self, chi: Morphism) -> Morphism:
        """⌜χ⌝: ⊤ → Pow A，χ: A → Ω 的名字"""
        cat = self.category
        obj = chi.source
        top = cat.terminal
        return self.transpose(obj, top, cat.compose(chi, cat.product(obj, top).fst))

    def singleton(self, obj: Object) -> Morphism:
        """{·}_A = transpose(χ_Δ): A → Pow A"""
        cached = self._singletons.get(obj.id)
        if cached is None:
            delta = self.classifier.char(self.category.diagonal(obj))
            cached = self.transpose(obj, obj, delta)
            if not self.category.is_monic(cached):
                raise PowerObjectLawViolation(f"singleton map of {obj.id} is not monic")
            self._singletons[obj.id] = cached
        return cached

    def is_singleton(self, obj: Object) -> Morphism:
        """σ_A = χ_{ {·}_A } : Pow A → Ω"""
        return self.classifier.char(self.singleton(obj))

    def transpose_naturality(
        self, obj: Object, parameter: Object, phi: Morphism, h: Morphism
    ) -> Equation:
        """h: Y → X ⇒ h ≫ φ̂ = ((id_A ⨯ h) ≫ φ)^"""
        cat = self.category
        lhs = cat.compose(self.transpose(obj, parameter, phi), h)
        reindexed = cat.compose(phi, cat.product_map(cat.identity(obj), h))
        rhs = self.transpose(obj, h.source, reindexed)
        return prove_equal(cat, lhs, rhs, f"transpose naturality along {h.name or repr(h)}")

    def validate(
        self, samples: Iterable[Tuple[Object, Object, Morphism]]
    ) -> "PowerObjectLayer":
        """检查转置双射两半: transpose_inv ∘ transpose = id，transpose ∘ transpose_inv = id"""
        cat = self.category
        checked = 0
        for obj, parameter, phi in samples:
            hat = self.transpose(obj, parameter, phi)
            try:
                prove_equal(cat, self.transpose(obj, parameter, self.transpose_inv(obj, hat)), hat,
                            f"transpose ∘ transpose_inv = id on {parameter.id}")
            except EquationFailure as e:
                raise PowerObjectLawViolation(str(e)) from e
            checked += 1
        _logger.info("power-object layer accepted on %d samples", checked)
        return self
