import itertools

import pytest

from topos_engine import EquationFailure, ExponentialBuilder, FinSetPowerObjects, finset_classifier


@pytest.fixture
def builder(clf, powers):
    return ExponentialBuilder(clf, powers)


@pytest.fixture
def exp(cat, builder):
    a = cat.obj("A", ("a0", "a1"))
    b = cat.obj("B", ("b0", "b1"))
    return builder.build(a, b)


@pytest.fixture
def parameter(cat):
    return cat.obj("P", ("p0", "p1"))


def _all_uncurried(cat, exp, parameter):
    ap = cat.product(exp.domain, parameter).obj
    for values in itertools.product(exp.codomain.data, repeat=ap.dimension):
        yield cat.function(ap, exp.codomain, dict(zip(ap.data, values)))


class TestExponentialObject:
    def test_exp_holds_function_graphs(self, exp):
        assert exp.obj.dimension == 4
        for relation, _ in exp.obj.data:
            assert sorted(a for _, a in relation) == ["a0", "a1"]

    def test_evaluation_reads_the_graph(self, cat, exp):
        for point in exp.obj.data:
            relation = point[0]
            for a in exp.domain.data:
                b = cat.apply(exp.evaluation, (a, point))
                assert (b, a) in relation

    def test_eval_chain_certificate(self, cat, exp):
        assert exp.eval_chain.steps == (
            "transpose law for v",
            "functoriality of A ⨯ −",
            "Exp pullback square commutes",
            "name law",
        )
        assert cat.equal(exp.eval_chain.rhs, exp.classifier.truth_at(cat.product(exp.domain, exp.obj).obj))

    def test_inclusion_is_monic(self, cat, exp):
        assert exp.inclusion.target == exp.relations
        assert cat.is_monic(exp.inclusion)

    def test_builder_caches(self, cat, builder, exp):
        assert builder.build(exp.domain, exp.codomain) is exp

    def test_builder_rejects_foreign_power_layer(self, cat, powers):
        other = finset_classifier(cat)
        with pytest.raises(ValueError):
            ExponentialBuilder(other, powers)

    @pytest.mark.parametrize("domain, codomain, size", [
        ((), ("b0", "b1"), 1),
        (("a0", "a1"), (), 0),
        (("a0",), ("b0", "b1", "b2"), 3),
    ])
    def test_sizes(self, cat, builder, domain, codomain, size):
        a = cat.obj("D", domain)
        b = cat.obj("C", codomain)
        assert builder.build(a, b).obj.dimension == size


class TestCurrying:
    def test_beta_for_every_map(self, cat, exp, parameter):
        count = 0
        for f in _all_uncurried(cat, exp, parameter):
            eq = exp.beta(f, parameter)
            assert cat.equal(eq.rhs, f)
            count += 1
        assert count == 16

    def test_eta_for_every_map(self, cat, exp, parameter):
        for g in cat.hom(parameter, exp.obj):
            exp.eta(g)

    def test_curry_picks_the_graph(self, cat, exp, parameter):
        ap = cat.product(exp.domain, parameter).obj
        table = {("a0", "p0"): "b1", ("a1", "p0"): "b0", ("a0", "p1"): "b1", ("a1", "p1"): "b1"}
        f = cat.function(ap, exp.codomain, table, name="f")
        curried = exp.curry(f, parameter)
        relation, _ = cat.apply(curried, "p0")
        assert relation == frozenset({("b1", "a0"), ("b0", "a1")})

    def test_curry_unique(self, cat, exp, parameter):
        for f in itertools.islice(_all_uncurried(cat, exp, parameter), 4):
            g = exp.curry(f, parameter)
            eq = exp.curry_unique(f, parameter, g)
            assert eq.lhs == g

    def test_curry_unique_rejects_non_solution(self, cat, exp, parameter):
        maps = list(itertools.islice(_all_uncurried(cat, exp, parameter), 2))
        wrong = exp.curry(maps[1], parameter)
        with pytest.raises(EquationFailure):
            exp.curry_unique(maps[0], parameter, wrong)

    def test_lemmas(self, cat, exp, parameter):
        f = next(_all_uncurried(cat, exp, parameter))
        assert len(exp.graph_lemma(f, parameter).steps) == 3
        assert len(exp.functional_lemma(f, parameter).steps) == 4

    def test_curry_rejects_wrong_type(self, cat, exp, parameter):
        f = cat.function(parameter, exp.codomain, {"p0": "b0", "p1": "b1"})
        with pytest.raises(ValueError):
            exp.curry(f, parameter)

    def test_uncurry_rejects_wrong_target(self, cat, exp, parameter):
        with pytest.raises(ValueError):
            exp.uncurry(cat.identity(parameter))


def test_exponential_over_separate_layers(cat):
    clf = finset_classifier(cat)
    a = cat.obj("A", ("a0",))
    b = cat.obj("B", ("b0", "b1"))
    exp = ExponentialBuilder(clf, FinSetPowerObjects(clf)).build(a, b)
    assert exp.obj.dimension == 2
