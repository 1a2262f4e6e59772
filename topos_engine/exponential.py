# -*- coding: utf-8 -*-
"""
ExponentialObject - 由幂对象与分类器构造内部 hom Exp(A, B)

构造（R = Pow(B ⨯ A)，关系对象）:

    u = transpose_B(α ≫ in_{B⨯A})     : A ⨯ R → Pow B      (a, ρ) ↦ {b | (b, a) ∈ ρ}
    v = transpose_A(u ≫ σ_B)           : R → Pow A          ρ ↦ {a | ρ_a 是单点}
    Exp(A, B) = v 与 ⌜true_A⌝ 的拉回   ι: Exp ↪ R            (函数图像)

    eval: A ⨯ Exp → B 为 (id_A ⨯ ι) ≫ u 穿过 {·}_B 分类方块的 lift，
    合法性由三步自然性链给出（eval_chain）。

    curry(f) = lift(transpose_{B⨯A}(graph f), !_X)，graph f ((b, a), x) = [b = f(a, x)]

柯里化双射:
    beta:  (id_A ⨯ curry f) ≫ eval = f
    eta:   curry((id_A ⨯ g) ≫ eval) = g
    唯一性: ι 单 + 转置单射
"""

from __future__ import annotations

import logging
from typing import Dict, Tuple

from .category import Morphism, Object
from .certificates import Calc, Equation, prove_equal
from .classifier import SubobjectClassifier
from .limits import PullbackSquare
from .power import PowerObjectLayer
from .tags import tag_mono

_logger = logging.getLogger(__name__)


class ExponentialObject:
    """Exp(A, B) + eval + 柯里化

    Attributes:
        domain: A
        codomain: B
        obj: Exp(A, B)
        inclusion: ι: Exp(A, B) ↪ Pow(B ⨯ A)
        evaluation: eval: A ⨯ Exp(A, B) → B
        eval_chain: eval 合法性的等式链证书
    """

    def __init__(
        self,
        classifier: SubobjectClassifier,
        powers: PowerObjectLayer,
        domain: Object,
        codomain: Object,
    ):
        self.classifier = classifier
        self.powers = powers
        self.category = cat = classifier.category
        self.domain = a = domain
        self.codomain = b = codomain

        self._ba = cat.product(b, a)
        self.relations = powers.pow(self._ba.obj)
        self._in_rel = powers.membership(self._ba.obj)
        self._alpha = cat.associator(b, a, self.relations)
        self._ar = cat.product(a, self.relations)
        self._sigma = powers.is_singleton(b)
        self._singleton = powers.singleton(b)
        self._delta = classifier.char(cat.diagonal(b))

        self.fibres = powers.transpose(b, self._ar.obj, cat.compose(self._in_rel, self._alpha))
        self.functional = powers.transpose(a, self.relations, cat.compose(self._sigma, self.fibres))
        self.name_true = powers.name(classifier.truth_at(a))
        self.square: PullbackSquare = cat.pullback(self.functional, self.name_true)
        self.inclusion = self.square.fst
        self.obj = self.square.apex
        tag_mono(cat, self.inclusion)

        self.eval_chain = self._eval_chain()
        ae = cat.product(a, self.obj)
        self.evaluation = classifier.classifying_square(self._singleton).lift(
            self._eval_fibres(), cat.terminal_map(ae.obj)
        )

    # -- eval -------------------------------------------------------------

    def _eval_fibres(self) -> Morphism:
        """(id_A ⨯ ι) ≫ u : A ⨯ Exp → Pow B"""
        cat = self.category
        return cat.compose(self.fibres, cat.product_map(cat.identity(self.domain), self.inclusion))

    def _eval_chain(self) -> Equation:
        """(id_A ⨯ ι) ≫ u ≫ σ_B = true_{A⨯Exp}

        三步自然性:
          1. v 的转置律: (id_A ⨯ v) ≫ in_A = u ≫ σ_B
          2. Exp 拉回方块交换: ι ≫ v = ! ≫ ⌜true_A⌝
          3. 名字律: (id_A ⨯ ⌜χ⌝) ≫ in_A = π_A ≫ χ
        """
        cat = self.category
        a = self.domain
        id_a = cat.identity(a)
        in_a = self.powers.membership(a)
        bang = self.square.snd
        id_x_iota = cat.product_map(id_a, self.inclusion)
        at = cat.product(a, cat.terminal)
        return (
            Calc(cat, cat.chain(id_x_iota, self.fibres, self._sigma), "eval is well defined")
            .step(cat.chain(id_x_iota, cat.product_map(id_a, self.functional), in_a),
                  "transpose law for v")
            .step(cat.chain(cat.product_map(id_a, cat.compose(self.functional, self.inclusion)), in_a),
                  "functoriality of A ⨯ −")
            .step(cat.chain(cat.product_map(id_a, cat.compose(self.name_true, bang)), in_a),
                  "Exp pullback square commutes")
            .step(cat.chain(cat.product_map(id_a, bang), at.fst, self.classifier.truth_at(a)),
                  "name law")
            .qed(self.classifier.truth_at(cat.product(a, self.obj).obj))
        )

    # -- curry ------------------------------------------------------------

    def _check_uncurried(self, f: Morphism, parameter: Object) -> None:
        expected = self.category.product(self.domain, parameter).obj
        if f.source != expected or f.target != self.codomain:
            raise ValueError(f"expected {expected.id} → {self.codomain.id}, got {f!r}")

    def graph(self, f: Morphism, parameter: Object) -> Morphism:
        """graph f: (B ⨯ A) ⨯ X → Ω，((b, a), x) ↦ [b = f(a, x)]"""
        self._check_uncurried(f, parameter)
        cat = self.category
        bax = cat.product(self._ba.obj, parameter)
        ax = cat.product(self.domain, parameter)
        to_b = cat.compose(self._ba.fst, bax.fst)
        to_a = cat.compose(self._ba.snd, bax.fst)
        value = cat.compose(f, ax.pair(to_a, bax.snd))
        return cat.compose(self._delta, cat.product(self.codomain, self.codomain).pair(to_b, value))

    def relation(self, f: Morphism, parameter: Object) -> Morphism:
        """X → Pow(B ⨯ A)，x ↦ f(−, x) 的图像"""
        return self.powers.transpose(self._ba.obj, parameter, self.graph(f, parameter))

    def graph_lemma(self, f: Morphism, parameter: Object) -> Equation:
        """(id_A ⨯ r) ≫ u = f ≫ {·}_B"""
        cat = self.category
        powers = self.powers
        b = self.codomain
        id_b = cat.identity(b)
        ax = cat.product(self.domain, parameter)
        r = self.relation(f, parameter)
        id_x_r = cat.product_map(cat.identity(self.domain), r)
        return (
            Calc(cat, cat.compose(self.fibres, id_x_r), "graph fibres are singletons")
            .step(powers.transpose(b, ax.obj, cat.chain(cat.product_map(id_b, id_x_r), self._alpha, self._in_rel)),
                  "transpose naturality")
            .step(powers.transpose(b, ax.obj, cat.compose(self._delta, cat.product_map(id_b, f))),
                  "membership in the graph")
            .step(cat.compose(self._singleton, f), "transpose naturality of {·}_B")
            .qed()
        )

    def functional_lemma(self, f: Morphism, parameter: Object) -> Equation:
        """r ≫ v = !_X ≫ ⌜true_A⌝，即 r 穿过 Exp"""
        cat = self.category
        powers = self.powers
        a = self.domain
        ax = cat.product(a, parameter)
        r = self.relation(f, parameter)
        id_x_r = cat.product_map(cat.identity(a), r)
        return (
            Calc(cat, cat.compose(self.functional, r), "graph of f is functional")
            .step(powers.transpose(a, parameter, cat.chain(id_x_r, self.fibres, self._sigma)),
                  "transpose naturality")
            .step(powers.transpose(a, parameter, cat.chain(f, self._singleton, self._sigma)),
                  "graph lemma")
            .step(powers.transpose(a, parameter, self.classifier.truth_at(ax.obj)),
                  "classifying square of {·}_B")
            .step(cat.compose(self.name_true, cat.terminal_map(parameter)), "name naturality")
            .qed()
        )

    def curry(self, f: Morphism, parameter: Object) -> Morphism:
        """f: A ⨯ X → B  ↦  curry(f): X → Exp(A, B)"""
        self.graph_lemma(f, parameter)
        self.functional_lemma(f, parameter)
        return self.square.lift(self.relation(f, parameter), self.category.terminal_map(parameter))

    def uncurry(self, g: Morphism) -> Morphism:
        """g: X → Exp(A, B)  ↦  (id_A ⨯ g) ≫ eval"""
        if g.target != self.obj:
            raise ValueError(f"expected a morphism into {self.obj.id}, got {g!r}")
        cat = self.category
        return cat.compose(self.evaluation, cat.product_map(cat.identity(self.domain), g))

    def beta(self, f: Morphism, parameter: Object) -> Equation:
        return prove_equal(
            self.category, self.uncurry(self.curry(f, parameter)), f, "eval ∘ (id ⨯ curry f) = f"
        )

    def eta(self, g: Morphism) -> Equation:
        return prove_equal(
            self.category, self.curry(self.uncurry(g), g.source), g, "curry(eval ∘ (id ⨯ g)) = g"
        )

    def curry_unique(self, f: Morphism, parameter: Object, g: Morphism) -> Equation:
        """(id_A ⨯ g) ≫ eval = f ⇒ g = curry(f)"""
        cat = self.category
        prove_equal(cat, self.uncurry(g), f, "g solves the currying equation")
        curried = self.curry(f, parameter)
        # g ≫ ι 与 curry(f) ≫ ι 转置回同一个图像谓词
        prove_equal(
            cat, self.powers.transpose_inv(self._ba.obj, cat.compose(self.inclusion, g)),
            self.graph(f, parameter), "g ≫ ι classifies the graph of f",
        )
        prove_equal(
            cat, cat.compose(self.inclusion, g), cat.compose(self.inclusion, curried),
            "transpose is injective",
        )
        return prove_equal(cat, g, curried, "ι is monic")

    def __repr__(self):
        return f"ExponentialObject({self.domain.id} ⇒ {self.codomain.id})"


class ExponentialBuilder:
    """Exp(A, B) 按 (A, B) 缓存；构造是引用透明的，缓存不影响正确性"""

    def __init__(self, classifier: SubobjectClassifier, powers: PowerObjectLayer):
        classifier.require_valid()
        if powers.classifier is not classifier:
            raise ValueError("power-object layer was built over a different classifier")
        classifier.category.require_valid()
        self.classifier = classifier
        self.powers = powers
        self._cache: Dict[Tuple[str, str], ExponentialObject] = {}

    def build(self, domain: Object, codomain: Object) -> ExponentialObject:
        key = (domain.id, codomain.id)
        cached = self._cache.get(key)
        if cached is None:
            cached = ExponentialObject(self.classifier, self.powers, domain, codomain)
            self._cache[key] = cached
            _logger.info(
                "exponential %s ⇒ %s built: |Exp| = %d", domain.id, codomain.id, cached.obj.dimension
            )
        return cached
