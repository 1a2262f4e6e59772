#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
Topos Engine 范畴核心: Category Interface

基础抽象:
1. Object / Morphism - 对象与态射（可选整数矩阵表示）
2. Category           - 恒等、复合、终对象、单/满判定
3. FiniteLimitCategory - 额外提供二元积与拉回（有限极限）

工程红线:
- 禁伪范畴: validate() 必须验证恒等律、结合律、终对象唯一性，违反即拒绝
- 禁猜测复合: 不可复合的态射对直接抛 ValueError
- 禁静默降级: 所有定律违反都抛 CategoricalError 子类，不存在降级模式
"""

from __future__ import annotations

import logging
import os
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import (
    Any, Dict, Hashable, Iterable, List, Optional, Sequence, Tuple, TYPE_CHECKING
)

import numpy as np

if TYPE_CHECKING:
    from .limits import BinaryProduct, PullbackSquare

_logger = logging.getLogger(__name__)


# ============================================================================
# Section 0: 配置常数与异常定义
# ============================================================================

def _env_int(name: str, *, default: int) -> int:
    """Read an env var as a positive int (base-10), strict."""
    raw = os.getenv(name)
    if raw is None or not str(raw).strip():
        return int(default)
    try:
        value = int(str(raw).strip(), 10)
    except Exception as e:
        raise ValueError(f"{name} must be an integer (base-10), got {raw!r}") from e
    if value < 1:
        raise ValueError(f"{name} must be >= 1, got {value}")
    return value


# hom 集穷举上限: |Y|^|X| 超过 2^16 即视为不可判定，只能走断言模式
_DEFAULT_HOM_ENUMERATION_LIMIT = 1 << 16
HOM_ENUMERATION_LIMIT = _env_int(
    "TOPOS_HOM_ENUMERATION_LIMIT", default=_DEFAULT_HOM_ENUMERATION_LIMIT
)


class CategoricalError(Exception):
    """范畴引擎基础异常"""
    pass


class MalformedCategoryError(CategoricalError):
    """范畴公理违反（恒等律 / 结合律 / 终对象唯一性）"""
    def __init__(self, category_name: str, law: str, details: str):
        self.category_name = category_name
        self.law = law
        self.details = details
        super().__init__(f"Category '{category_name}' violates {law} law: {details}")


class LimitWitnessViolation(CategoricalError):
    """极限见证（积、等化子、拉回）不满足泛性质"""
    def __init__(self, label: str, details: str):
        self.label = label
        self.details = details
        super().__init__(f"Invalid witness '{label}': {details}")


class PullbackWitnessViolation(LimitWitnessViolation):
    """拉回方块不交换，或中介态射不唯一"""
    pass


class ClassifierLawViolation(CategoricalError):
    """子对象分类器定律违反"""
    pass


class PowerObjectLawViolation(CategoricalError):
    """幂对象转置双射违反"""
    pass


class FunctorLawViolation(CategoricalError):
    """函子律违反

    当 F(id) ≠ id、F(g∘f) ≠ F(g)∘F(f) 或断言的忠实性不成立时抛出
    """
    def __init__(self, functor_name: str, law: str, details: str):
        self.functor_name = functor_name
        self.law = law
        self.details = details
        super().__init__(f"Functor '{functor_name}' violates {law} law: {details}")


class EquationFailure(CategoricalError):
    """等式证书检查失败"""
    def __init__(self, label: str, lhs: "Morphism", rhs: "Morphism"):
        self.label = label
        self.lhs = lhs
        self.rhs = rhs
        super().__init__(f"Equation '{label}' fails: {lhs!r} ≠ {rhs!r}")


class CapabilityError(CategoricalError):
    """态射缺少所需的能力标签（单、满、同构……）"""
    pass


# ============================================================================
# Section 1: Object / Morphism
# ============================================================================

@dataclass(frozen=True)
class Object:
    """范畴中的对象

    Attributes:
        id: 对象唯一标识符
        dimension: 对象维度（有限集范畴中即基数）
        data: 可选的附加数据（有限集范畴中为元素元组）
    """
    id: str
    dimension: int = 1
    data: Optional[Any] = None

    def __hash__(self):
        return hash(self.id)

    def __eq__(self, other):
        if not isinstance(other, Object):
            return False
        return self.id == other.id

    def __repr__(self):
        return f"Object({self.id})"


@dataclass(eq=False)
class Morphism:
    """范畴中的态射 f: A → B

    Attributes:
        source: 源对象 A
        target: 目标对象 B
        matrix: 整数矩阵表示（可选），形状 (dim B, dim A)
        name: 态射名称（仅用于调试；有矩阵时不参与相等判定）
    """
    source: Object
    target: Object
    matrix: Optional[np.ndarray] = None
    name: str = ""

    def __post_init__(self):
        if self.matrix is not None:
            self.matrix = np.array(self.matrix, dtype=np.int64)
            if self.matrix.shape != (self.target.dimension, self.source.dimension):
                raise ValueError(
                    f"Matrix shape {self.matrix.shape} incompatible with "
                    f"morphism {self.source.dimension} → {self.target.dimension}"
                )
            self.matrix.setflags(write=False)

    def key(self) -> Tuple[Hashable, ...]:
        """结构键: 有矩阵时按矩阵内容，否则按名称"""
        if self.matrix is not None:
            return (self.source.id, self.target.id, self.matrix.shape, self.matrix.tobytes())
        return (self.source.id, self.target.id, self.name)

    def __hash__(self):
        return hash(self.key())

    def __eq__(self, other):
        if not isinstance(other, Morphism):
            return False
        return self.key() == other.key()

    def __repr__(self):
        name_str = f"'{self.name}'" if self.name else ""
        return f"Morphism{name_str}({self.source.id} → {self.target.id})"


# ============================================================================
# Section 2: Category - 恒等 + 复合 + 终对象
# ============================================================================

class Category(ABC):
    """范畴: 对象 + 态射 + 复合律 + 终对象

    公理:
    1. 结合律: (h ∘ g) ∘ f = h ∘ (g ∘ f)
    2. 恒等律: id_B ∘ f = f = f ∘ id_A
    3. 终对象: 对每个 X 恰有一个 X → ⊤

    子类实现 _identity / _compose / terminal / terminal_map / is_monic / is_epic。
    依赖本范畴的构造（分类器、指数对象……）在使用前调用 require_valid()。
    """

    def __init__(self, name: str = ""):
        self.name = name
        self._objects: Dict[str, Object] = {}
        self._morphisms: Dict[Tuple[str, str], List[Morphism]] = {}
        self._validated = False

    # -- registry ----------------------------------------------------------

    def add_object(self, obj: Object) -> Object:
        """添加对象并登记其恒等态射"""
        existing = self._objects.get(obj.id)
        if existing is not None:
            return existing
        self._objects[obj.id] = obj
        self._add_morphism_internal(self.identity(obj))
        self._validated = False
        return obj

    def add_morphism(self, morphism: Morphism) -> Morphism:
        """添加态射（端点对象自动登记）"""
        for obj in (morphism.source, morphism.target):
            if obj.id not in self._objects:
                self.add_object(obj)
        self._add_morphism_internal(morphism)
        self._validated = False
        return morphism

    def _add_morphism_internal(self, morphism: Morphism) -> None:
        bucket = self._morphisms.setdefault((morphism.source.id, morphism.target.id), [])
        if morphism not in bucket:
            bucket.append(morphism)

    def get_morphisms(self, source: Object, target: Object) -> List[Morphism]:
        """获取已登记的 source → target 态射"""
        return list(self._morphisms.get((source.id, target.id), []))

    @property
    def objects(self) -> List[Object]:
        return list(self._objects.values())

    @property
    def morphisms(self) -> List[Morphism]:
        out: List[Morphism] = []
        for bucket in self._morphisms.values():
            out.extend(bucket)
        return out

    # -- structure ---------------------------------------------------------

    @abstractmethod
    def _identity(self, obj: Object) -> Morphism:
        pass

    @abstractmethod
    def _compose(self, g: Morphism, f: Morphism) -> Morphism:
        pass

    @property
    @abstractmethod
    def terminal(self) -> Object:
        """终对象 ⊤"""
        pass

    @abstractmethod
    def terminal_map(self, obj: Object) -> Morphism:
        """唯一态射 !_X: X → ⊤"""
        pass

    @abstractmethod
    def is_monic(self, f: Morphism) -> bool:
        """单态射判定（可判定或断言）"""
        pass

    @abstractmethod
    def is_epic(self, f: Morphism) -> bool:
        """满态射判定（可判定或断言）"""
        pass

    def identity(self, obj: Object) -> Morphism:
        return self._identity(obj)

    def compose(self, g: Morphism, f: Morphism) -> Morphism:
        """态射复合 g ∘ f

        若 f: A → B, g: B → C, 则 g ∘ f: A → C
        """
        if f.target != g.source:
            raise ValueError(
                f"Cannot compose: {f} target {f.target.id} ≠ {g} source {g.source.id}"
            )
        return self._compose(g, f)

    def chain(self, *morphisms: Morphism) -> Morphism:
        """图序复合 f1 ≫ f2 ≫ ... ≫ fn = fn ∘ ... ∘ f1"""
        if not morphisms:
            raise ValueError("chain() needs at least one morphism")
        result = morphisms[0]
        for nxt in morphisms[1:]:
            result = self.compose(nxt, result)
        return result

    def equal(self, f: Morphism, g: Morphism) -> bool:
        """态射相等（默认: 结构键相等）"""
        return f.source == g.source and f.target == g.target and f == g

    # -- optional finite enumeration ---------------------------------------

    def hom_size(self, source: Object, target: Object) -> Optional[int]:
        """hom 集大小；None 表示本范畴不支持穷举"""
        return None

    def can_enumerate(self, source: Object, target: Object) -> bool:
        size = self.hom_size(source, target)
        return size is not None and size <= HOM_ENUMERATION_LIMIT

    def hom(self, source: Object, target: Object) -> List[Morphism]:
        """穷举 hom(source, target)；不可穷举时抛 NotImplementedError"""
        raise NotImplementedError(f"{type(self).__name__} does not enumerate hom sets")

    def find_inverse(self, f: Morphism) -> Optional[Morphism]:
        """在 hom(B, A) 中搜索 f 的双边逆"""
        for candidate in self.hom(f.target, f.source):
            if (self.equal(self.compose(candidate, f), self.identity(f.source))
                    and self.equal(self.compose(f, candidate), self.identity(f.target))):
                return candidate
        return None

    def is_iso(self, f: Morphism) -> bool:
        return self.find_inverse(f) is not None

    # -- law validation ----------------------------------------------------

    def validate(self, sample: Optional[Sequence[Morphism]] = None) -> "Category":
        """验证恒等律、结合律、终对象唯一性

        Args:
            sample: 待检查的态射；默认使用全部已登记态射

        Raises:
            MalformedCategoryError: 任一定律违反
        """
        morphisms = list(sample) if sample is not None else self.morphisms

        for f in morphisms:
            left = self.compose(self.identity(f.target), f)
            right = self.compose(f, self.identity(f.source))
            if not (self.equal(left, f) and self.equal(right, f)):
                raise MalformedCategoryError(self.name, "identity", f"id ∘ {f!r} ∘ id ≠ {f!r}")

        by_source: Dict[str, List[Morphism]] = {}
        for f in morphisms:
            by_source.setdefault(f.source.id, []).append(f)
        for f in morphisms:
            for g in by_source.get(f.target.id, []):
                gf = self.compose(g, f)
                for h in by_source.get(g.target.id, []):
                    lhs = self.compose(h, gf)
                    rhs = self.compose(self.compose(h, g), f)
                    if not self.equal(lhs, rhs):
                        raise MalformedCategoryError(
                            self.name, "associativity",
                            f"({h.name} ∘ {g.name}) ∘ {f.name} ≠ {h.name} ∘ ({g.name} ∘ {f.name})"
                        )

        self._validate_terminal(morphisms)
        self._validated = True
        _logger.debug(
            "category '%s' validated: %d morphisms, %d objects",
            self.name, len(morphisms), len(self._objects),
        )
        return self

    def _validate_terminal(self, morphisms: Iterable[Morphism]) -> None:
        top = self.terminal
        if not self.equal(self.terminal_map(top), self.identity(top)):
            raise MalformedCategoryError(self.name, "terminal", "!_⊤ ≠ id_⊤")
        sources = {obj.id: obj for obj in self._objects.values()}
        for f in morphisms:
            sources.setdefault(f.source.id, f.source)
        for obj in sources.values():
            bang = self.terminal_map(obj)
            if bang.source != obj or bang.target != top:
                raise MalformedCategoryError(
                    self.name, "terminal", f"terminal_map({obj.id}) has type {bang!r}"
                )
            competitors = [f for f in morphisms if f.source == obj and f.target == top]
            if self.can_enumerate(obj, top):
                competitors.extend(self.hom(obj, top))
            for other in competitors:
                if not self.equal(other, bang):
                    raise MalformedCategoryError(
                        self.name, "terminal",
                        f"two distinct morphisms {obj.id} → {top.id}: {bang!r}, {other!r}"
                    )

    def require_valid(self) -> "Category":
        if not self._validated:
            self.validate()
        return self

    def __repr__(self):
        return f"{type(self).__name__}('{self.name}', {len(self._objects)} objects)"


# ============================================================================
# Section 3: FiniteLimitCategory - 积 + 拉回
# ============================================================================

class FiniteLimitCategory(Category):
    """带有限极限的范畴: 终对象 + 二元积 + 拉回

    积与拉回以可验证见证返回（见 limits 模块），派生的积映射、
    对角、结合子都只经由见证的 pair() 构造。
    """

    @abstractmethod
    def product(self, left: Object, right: Object) -> "BinaryProduct":
        pass

    @abstractmethod
    def pullback(self, f: Morphism, g: Morphism) -> "PullbackSquare":
        pass

    def product_map(self, f: Morphism, g: Morphism) -> Morphism:
        """f ⨯ g: A ⨯ B → A' ⨯ B'"""
        src = self.product(f.source, g.source)
        tgt = self.product(f.target, g.target)
        return tgt.pair(self.compose(f, src.fst), self.compose(g, src.snd))

    def diagonal(self, obj: Object) -> Morphism:
        """Δ_A = ⟨id, id⟩: A → A ⨯ A"""
        ident = self.identity(obj)
        return self.product(obj, obj).pair(ident, ident)

    def associator(self, a: Object, b: Object, c: Object) -> Morphism:
        """α: A ⨯ (B ⨯ C) → (A ⨯ B) ⨯ C"""
        outer = self.product(a, self.product(b, c).obj)
        inner = self.product(b, c)
        ab = self.product(a, b)
        to_b = self.compose(inner.fst, outer.snd)
        to_c = self.compose(inner.snd, outer.snd)
        return self.product(ab.obj, c).pair(ab.pair(outer.fst, to_b), to_c)
