import pytest

from topos_engine import FinSetPowerObjects, PowerObjectLawViolation


@pytest.fixture
def relation(cat):
    a = cat.obj("A", ("a0", "a1"))
    x = cat.obj("X", ("x0", "x1", "x2"))
    related = {("a0", "x0"), ("a1", "x0"), ("a1", "x2")}
    ax = cat.product(a, x).obj
    phi = cat.function(ax, cat.omega, lambda pair: "true" if pair in related else "false", name="φ")
    return a, x, phi


class TestTranspose:
    def test_transpose_collects_related_elements(self, cat, powers, relation):
        a, x, phi = relation
        hat = powers.transpose(a, x, phi)
        assert hat.target == powers.pow(a)
        assert cat.as_dict(hat) == {
            "x0": frozenset({"a0", "a1"}),
            "x1": frozenset(),
            "x2": frozenset({"a1"}),
        }
        assert cat.equal(powers.transpose_inv(a, hat), phi)

    def test_transpose_of_untransposed_map(self, cat, powers, relation):
        a, x, phi = relation
        h = cat.function(x, powers.pow(a), {
            "x0": frozenset({"a1"}), "x1": frozenset({"a0", "a1"}), "x2": frozenset(),
        })
        assert cat.equal(powers.transpose(a, x, powers.transpose_inv(a, h)), h)

    def test_membership_is_transpose_of_identity(self, cat, powers, relation):
        a, x, phi = relation
        pa = powers.pow(a)
        assert pa.dimension == 4
        assert cat.equal(powers.transpose(a, pa, powers.membership(a)), cat.identity(pa))

    def test_transpose_rejects_wrong_source(self, cat, powers, relation):
        a, x, phi = relation
        with pytest.raises(ValueError):
            powers.transpose(x, a, phi)

    def test_naturality(self, cat, powers, relation):
        a, x, phi = relation
        y = cat.obj("Y", ("y0", "y1"))
        h = cat.function(y, x, {"y0": "x2", "y1": "x0"}, name="h")
        eq = powers.transpose_naturality(a, x, phi, h)
        assert cat.as_dict(eq.lhs) == {"y0": frozenset({"a1"}), "y1": frozenset({"a0", "a1"})}

    def test_validate(self, powers, relation):
        a, x, phi = relation
        assert powers.validate([(a, x, phi)]) is powers


class TestDerivedMaps:
    def test_singleton(self, cat, powers):
        b = cat.obj("B", ("b0", "b1", "b2"))
        single = powers.singleton(b)
        assert cat.as_dict(single) == {e: frozenset({e}) for e in b.data}
        assert cat.is_monic(single)
        assert powers.singleton(b) is single

    def test_is_singleton(self, cat, powers):
        b = cat.obj("B", ("b0", "b1", "b2"))
        sigma = powers.is_singleton(b)
        for subset, truth in cat.as_dict(sigma).items():
            assert (truth == "true") == (len(subset) == 1)

    def test_name_of_characteristic_map(self, cat, scenario, clf, powers):
        u, x, m = scenario
        named = powers.name(clf.char(m))
        assert named.source == cat.terminal
        assert cat.apply(named, "*") == frozenset({1})

    def test_name_of_empty_set(self, cat, powers):
        empty = cat.obj("E", ())
        pe = powers.pow(empty)
        assert pe.data == (frozenset(),)
        chi = cat.function(empty, cat.omega, {})
        assert cat.apply(powers.name(chi), "*") == frozenset()


class _EmptyTranspose(FinSetPowerObjects):
    """transpose 恒取空子集"""

    def _transpose(self, obj, parameter, phi):
        return self.category.function(parameter, self.pow(obj), lambda _: frozenset())


def test_broken_transpose_is_rejected(cat, clf, relation):
    a, x, phi = relation
    broken = _EmptyTranspose(clf)
    with pytest.raises(PowerObjectLawViolation):
        broken.transpose(a, x, phi)
