# -*- coding: utf-8 -*-
"""
Functor - 严格函子律验证

函子 F: C → D 必须满足:
1. F(id_A) = id_{F(A)}
2. F(g ∘ f) = F(g) ∘ F(f)         （反变: F(g ∘ f) = F(f) ∘ F(g)）

反变函子即源自对偶范畴 C^op 的函子。忠实性可断言 (faithful=True)，
在有限 hom 集上用 verify_faithful() 实际检查。
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Iterable, Optional, Set, Tuple, Union

from .category import Category, FunctorLawViolation, Morphism, Object

_logger = logging.getLogger(__name__)


class Functor(ABC):
    """函子基类: 在 __call__ 中验证函子律，任何违反抛 FunctorLawViolation"""

    def __init__(
        self,
        source_category: Category,
        target_category: Category,
        name: str = "",
        *,
        contravariant: bool = False,
        faithful: bool = False,
    ):
        self.source_category = source_category
        self.target_category = target_category
        self.name = name or self.__class__.__name__
        self.contravariant = contravariant
        self.faithful = faithful
        self._verified_identities: Set[str] = set()
        self._verified_compositions: Set[Tuple[Tuple, Tuple]] = set()

    @abstractmethod
    def on_objects(self, obj: Object) -> Object:
        """对象映射 F: Ob(C) → Ob(D)"""
        pass

    @abstractmethod
    def on_morphisms(self, f: Morphism) -> Morphism:
        """态射映射 F: Mor(C) → Mor(D)"""
        pass

    def __call__(self, x: Union[Object, Morphism]) -> Union[Object, Morphism]:
        if isinstance(x, Object):
            return self.on_objects(x)
        elif isinstance(x, Morphism):
            return self._apply_on_morphism(x)
        else:
            raise TypeError(f"Functor expects Object or Morphism, got {type(x)}")

    def _apply_on_morphism(self, f: Morphism) -> Morphism:
        result = self.on_morphisms(f)
        expected_src, expected_tgt = self.on_objects(f.source), self.on_objects(f.target)
        if self.contravariant:
            expected_src, expected_tgt = expected_tgt, expected_src
        if result.source != expected_src or result.target != expected_tgt:
            raise FunctorLawViolation(self.name, "typing", f"F({f!r}) = {result!r}")

        for obj in (f.source, f.target):
            if obj.id not in self._verified_identities:
                self._verify_identity_law(obj)
                self._verified_identities.add(obj.id)

        # 只对源范畴中显式登记的可复合态射做穷举验证
        for g in self.source_category.morphisms:
            if g.source == f.target:
                self.verify_composition_law(g, f)
            if g.target == f.source:
                self.verify_composition_law(f, g)
        return result

    def _verify_identity_law(self, obj: Object) -> None:
        F_id = self.on_morphisms(self.source_category.identity(obj))
        F_A = self.on_objects(obj)
        if not self.target_category.equal(F_id, self.target_category.identity(F_A)):
            raise FunctorLawViolation(self.name, "identity", f"F(id_{obj.id}) ≠ id_{{F({obj.id})}}")

    def verify_composition_law(self, g: Morphism, f: Morphism) -> None:
        key = (g.key(), f.key())
        if key in self._verified_compositions:
            return
        src, tgt = self.source_category, self.target_category
        F_gf = self.on_morphisms(src.compose(g, f))
        F_g, F_f = self.on_morphisms(g), self.on_morphisms(f)
        expected = tgt.compose(F_f, F_g) if self.contravariant else tgt.compose(F_g, F_f)
        if not tgt.equal(F_gf, expected):
            raise FunctorLawViolation(
                self.name, "composition", f"F({g.name} ∘ {f.name}) ≠ F({g.name}) ∘ F({f.name})"
            )
        self._verified_compositions.add(key)

    def verify_faithful(
        self, pairs: Optional[Iterable[Tuple[Object, Object]]] = None
    ) -> "Functor":
        """在有限 hom 集上检查 F 对每个 hom(X, Y) 单射

        Args:
            pairs: 待检查的 (X, Y)；默认取已登记对象中可穷举的全部有序对
        """
        src = self.source_category
        if pairs is None:
            objs = src.objects
            pairs = [(x, y) for x in objs for y in objs if src.can_enumerate(x, y)]
        checked = 0
        for x, y in pairs:
            seen = {}
            for f in src.hom(x, y):
                image = self.on_morphisms(f)
                previous = seen.get(image.key())
                if previous is not None and not src.equal(previous, f):
                    raise FunctorLawViolation(
                        self.name, "faithfulness",
                        f"F({previous!r}) = F({f!r}) for distinct morphisms {x.id} → {y.id}"
                    )
                seen[image.key()] = f
            checked += 1
        self.faithful = True
        _logger.debug("functor '%s' faithful on %d hom sets", self.name, checked)
        return self
