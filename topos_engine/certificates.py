# -*- coding: utf-8 -*-
"""
等式证书: 显式的等式引理与 calc 链

每个"这个方块交换"的事实都是一个 Equation 值；多步推导用 Calc 逐步
给出中间表达式和理由，每一步都在范畴中实际检查。失败即抛 EquationFailure，
标签指出是哪一步断了。
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Tuple

from .category import Category, EquationFailure, Morphism


@dataclass(frozen=True)
class Equation:
    """已检查的等式 lhs = rhs"""
    lhs: Morphism
    rhs: Morphism
    label: str
    steps: Tuple[str, ...] = ()

    def symm(self) -> "Equation":
        return Equation(self.rhs, self.lhs, f"({self.label})⁻¹", tuple(reversed(self.steps)))

    def __str__(self):
        if not self.steps:
            return f"{self.label}: {self.lhs!r} = {self.rhs!r}"
        chain = " = ".join(self.steps)
        return f"{self.label}: {chain}"


def prove_equal(category: Category, lhs: Morphism, rhs: Morphism, label: str) -> Equation:
    if not category.equal(lhs, rhs):
        raise EquationFailure(label, lhs, rhs)
    return Equation(lhs, rhs, label)


def trans(category: Category, first: Equation, second: Equation,
          label: Optional[str] = None) -> Equation:
    """传递性: a = b, b = c ⊢ a = c"""
    if not category.equal(first.rhs, second.lhs):
        raise EquationFailure(
            label or f"{first.label} ; {second.label}", first.rhs, second.lhs
        )
    return Equation(
        first.lhs, second.rhs,
        label or f"{first.label} ; {second.label}",
        first.steps + second.steps,
    )


class Calc:
    """calc 链

    用法:
        Calc(cat, start, "eval well-defined")
            .step(expr1, "transpose law")
            .step(expr2, "pullback commutes")
            .qed()
    """

    def __init__(self, category: Category, start: Morphism, label: str):
        self.category = category
        self.label = label
        self._start = start
        self._current = start
        self._steps: List[str] = []

    def step(self, expr: Morphism, reason: str) -> "Calc":
        if not self.category.equal(self._current, expr):
            raise EquationFailure(f"{self.label} [{reason}]", self._current, expr)
        self._steps.append(reason)
        self._current = expr
        return self

    def qed(self, expected: Optional[Morphism] = None) -> Equation:
        if expected is not None and not self.category.equal(self._current, expected):
            raise EquationFailure(f"{self.label} [qed]", self._current, expected)
        return Equation(self._start, self._current, self.label, tuple(self._steps))
