# -*- coding: utf-8 -*-
"""
FinSet - 有限集范畴（子对象分类器与幂对象的具体实例）

线性代数表示: 函数 f: A → B 为 (|B|, |A|) 的 0/1 矩阵，每列恰一个 1；
复合 = 矩阵乘法，单 ⇔ 行和 ≤ 1，满 ⇔ 行和 ≥ 1。

    ⊤ = 1 = {*}
    Ω = {true, false}，t(*) = true
    Pow A = A 的全部子集（按位掩码排序）
"""

from __future__ import annotations

import hashlib
import itertools
import logging
from typing import Any, Callable, Dict, Hashable, Iterable, List, Mapping, Optional, Tuple, Union

import numpy as np

from .category import (
    CapabilityError, FiniteLimitCategory, Morphism, Object, PullbackWitnessViolation,
)
from .classifier import SubobjectClassifier
from .limits import BinaryProduct, PullbackSquare
from .power import PowerObjectLayer

_logger = logging.getLogger(__name__)

TRUE = "true"
FALSE = "false"
_TRUE_INDEX = 0
_FALSE_INDEX = 1


def _images(f: Morphism) -> np.ndarray:
    """每个源元素的像下标"""
    if f.source.dimension == 0:
        return np.zeros(0, dtype=np.int64)
    return np.asarray(f.matrix.argmax(axis=0), dtype=np.int64)


def _from_images(source: Object, target: Object, images: Iterable[int], name: str = "") -> Morphism:
    images = np.asarray(list(images), dtype=np.int64)
    matrix = np.zeros((target.dimension, source.dimension), dtype=np.int64)
    if source.dimension:
        matrix[images, np.arange(source.dimension)] = 1
    return Morphism(source, target, matrix, name)


class FinSet(FiniteLimitCategory):
    """有限集与函数"""

    def __init__(self, name: str = "FinSet"):
        super().__init__(name)
        self._terminal = Object("1", 1, ("*",))
        self._products: Dict[Tuple[str, str], BinaryProduct] = {}
        self._pullbacks: Dict[Tuple[Hashable, Hashable], PullbackSquare] = {}
        self.add_object(self._terminal)
        self.omega = self.obj("Ω", (TRUE, FALSE))
        self.truth = self.function(self._terminal, self.omega, {"*": TRUE}, name="t")

    # -- construction helpers ---------------------------------------------

    def obj(self, obj_id: str, elements: Iterable[Any]) -> Object:
        elements = tuple(elements)
        if len(set(elements)) != len(elements):
            raise ValueError(f"duplicate elements in {obj_id}: {elements!r}")
        existing = self._objects.get(obj_id)
        if existing is not None:
            if existing.data != elements:
                raise ValueError(f"object id {obj_id!r} already names {existing.data!r}")
            return existing
        return self.add_object(Object(obj_id, len(elements), elements))

    def function(
        self,
        source: Object,
        target: Object,
        mapping: Union[Mapping[Any, Any], Callable[[Any], Any]],
        name: str = "",
    ) -> Morphism:
        """由元素映射构造并登记函数"""
        lookup = mapping if callable(mapping) else mapping.__getitem__
        images: List[int] = []
        for x in source.data:
            y = lookup(x)
            try:
                images.append(target.data.index(y))
            except ValueError as e:
                raise ValueError(f"{name or 'function'}({x!r}) = {y!r} is not an element of {target.id}") from e
        return self.add_morphism(_from_images(source, target, images, name))

    def apply(self, f: Morphism, element: Any) -> Any:
        return f.target.data[int(_images(f)[f.source.data.index(element)])]

    def as_dict(self, f: Morphism) -> Dict[Any, Any]:
        return {x: f.target.data[int(i)] for x, i in zip(f.source.data, _images(f))}

    # -- Category ----------------------------------------------------------

    def _identity(self, obj: Object) -> Morphism:
        return Morphism(obj, obj, np.eye(obj.dimension, dtype=np.int64), f"id_{obj.id}")

    def _compose(self, g: Morphism, f: Morphism) -> Morphism:
        name = f"({g.name} ∘ {f.name})" if g.name and f.name else ""
        return Morphism(f.source, g.target, g.matrix @ f.matrix, name)

    @property
    def terminal(self) -> Object:
        return self._terminal

    def terminal_map(self, obj: Object) -> Morphism:
        return Morphism(obj, self._terminal, np.ones((1, obj.dimension), dtype=np.int64), f"!_{obj.id}")

    def is_monic(self, f: Morphism) -> bool:
        return bool(np.all(f.matrix.sum(axis=1) <= 1))

    def is_epic(self, f: Morphism) -> bool:
        return bool(np.all(f.matrix.sum(axis=1) >= 1))

    def hom_size(self, source: Object, target: Object) -> Optional[int]:
        return target.dimension ** source.dimension

    def hom(self, source: Object, target: Object) -> List[Morphism]:
        if not self.can_enumerate(source, target):
            raise CapabilityError(
                f"hom({source.id}, {target.id}) has {self.hom_size(source, target)} elements; "
                "raise TOPOS_HOM_ENUMERATION_LIMIT to enumerate it"
            )
        return [
            _from_images(source, target, images)
            for images in itertools.product(range(target.dimension), repeat=source.dimension)
        ]

    def find_inverse(self, f: Morphism) -> Optional[Morphism]:
        if f.source.dimension != f.target.dimension or not (self.is_monic(f) and self.is_epic(f)):
            return None
        return Morphism(f.target, f.source, f.matrix.T, f"{f.name}⁻¹" if f.name else "")

    # -- finite limits -----------------------------------------------------

    def product(self, left: Object, right: Object) -> BinaryProduct:
        key = (left.id, right.id)
        cached = self._products.get(key)
        if cached is not None:
            return cached
        n_right = right.dimension
        obj = Object(
            f"({left.id}⨯{right.id})",
            left.dimension * n_right,
            tuple((a, b) for a in left.data for b in right.data),
        )
        index = np.arange(obj.dimension, dtype=np.int64)
        fst = _from_images(obj, left, index // n_right if n_right else index, f"π₁[{obj.id}]")
        snd = _from_images(obj, right, index % n_right if n_right else index, f"π₂[{obj.id}]")

        def _pair(f: Morphism, g: Morphism) -> Morphism:
            return _from_images(f.source, obj, _images(f) * n_right + _images(g))

        witness = BinaryProduct(self, left, right, obj, fst, snd, _pair)
        self._products[key] = witness
        return witness

    def pullback(self, f: Morphism, g: Morphism) -> PullbackSquare:
        key = (f.key(), g.key())
        cached = self._pullbacks.get(key)
        if cached is not None:
            return cached
        if f.target != g.target:
            raise ValueError(f"cannot pull back {f!r} and {g!r}: different targets")
        fi, gi = _images(f), _images(g)
        pairs = [
            (i, j)
            for i in range(f.source.dimension)
            for j in range(g.source.dimension)
            if fi[i] == gi[j]
        ]
        digest = hashlib.sha256(repr(key).encode("utf-8")).hexdigest()[:10]
        apex = Object(
            f"({f.source.id}×_{f.target.id}{g.source.id})#{digest}",
            len(pairs),
            tuple((f.source.data[i], g.source.data[j]) for i, j in pairs),
        )
        position = {pair: n for n, pair in enumerate(pairs)}
        label = f"{f.name or 'f'} ⨯_{f.target.id} {g.name or 'g'}"

        def _lift(h: Morphism, k: Morphism) -> Morphism:
            out = []
            for i, j in zip(_images(h), _images(k)):
                n = position.get((int(i), int(j)))
                if n is None:
                    raise PullbackWitnessViolation(label, f"({i}, {j}) is not in the apex")
                out.append(n)
            return _from_images(h.source, apex, out)

        square = PullbackSquare(
            self, f, g,
            _from_images(apex, f.source, [i for i, _ in pairs], f"p₁[{label}]"),
            _from_images(apex, g.source, [j for _, j in pairs], f"p₂[{label}]"),
            _lift,
            label=label,
        )
        self._pullbacks[key] = square
        return square


# ============================================================================
# Section 2: FinSet 分类器与幂对象
# ============================================================================

def finset_classifier(category: FinSet) -> SubobjectClassifier:
    """χ_m(x) = true ⇔ x ∈ im(m)"""

    def _characteristic(m: Morphism) -> Morphism:
        inside = m.matrix.sum(axis=1) > 0
        images = np.where(inside, _TRUE_INDEX, _FALSE_INDEX)
        return _from_images(m.target, category.omega, images, f"χ[{m.name or m.source.id}]")

    return SubobjectClassifier(
        category, category.omega, category.truth, _characteristic, label="Ω_FinSet"
    )


class FinSetPowerObjects(PowerObjectLayer):
    """Pow A = 2^A，位掩码 s 的第 j 位表示 A 的第 j 个元素是否属于子集"""

    def __init__(self, classifier: SubobjectClassifier):
        if not isinstance(classifier.category, FinSet):
            raise TypeError("FinSetPowerObjects needs a classifier over FinSet")
        super().__init__(classifier)
        self._pows: Dict[str, Object] = {}
        self._members: Dict[str, Morphism] = {}

    def pow(self, obj: Object) -> Object:
        cached = self._pows.get(obj.id)
        if cached is None:
            n = obj.dimension
            subsets = tuple(
                frozenset(obj.data[j] for j in range(n) if (mask >> j) & 1)
                for mask in range(1 << n)
            )
            cached = Object(f"P({obj.id})", len(subsets), subsets)
            self._pows[obj.id] = cached
        return cached

    def membership(self, obj: Object) -> Morphism:
        cached = self._members.get(obj.id)
        if cached is None:
            power = self.pow(obj)
            prod = self.category.product(obj, power)
            images = [
                _TRUE_INDEX if (mask >> i) & 1 else _FALSE_INDEX
                for i in range(obj.dimension)
                for mask in range(power.dimension)
            ]
            cached = _from_images(prod.obj, self.classifier.omega, images, f"in_{obj.id}")
            self._members[obj.id] = cached
        return cached

    def _transpose(self, obj: Object, parameter: Object, phi: Morphism) -> Morphism:
        n = obj.dimension
        holds = (_images(phi) == _TRUE_INDEX).reshape(n, parameter.dimension)
        weights = (np.int64(1) << np.arange(n, dtype=np.int64))[:, None]
        masks = (holds * weights).sum(axis=0)
        return _from_images(parameter, self.pow(obj), masks)
