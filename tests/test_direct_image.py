import itertools

import pytest

from conftest import subset_inclusion
from topos_engine import CapabilityError, DirectImage, FinSetPowerObjects, finset_classifier


@pytest.fixture
def embedding(cat, scenario):
    u, x, m = scenario
    c = cat.obj("C", ("c0", "c1", "c2"))
    k = cat.function(x, c, {1: "c0", 2: "c2"}, name="k")
    return x, c, k


def _subsets(elements):
    for r in range(len(elements) + 1):
        yield from itertools.combinations(elements, r)


class TestDirectImage:
    def test_image_of_every_subset(self, cat, clf, powers, embedding):
        x, c, k = embedding
        image = DirectImage(clf, powers, k)
        assert image.morphism.source == powers.pow(x)
        assert image.morphism.target == powers.pow(c)
        for subset in powers.pow(x).data:
            assert cat.apply(image.morphism, subset) == frozenset(cat.apply(k, e) for e in subset)

    def test_naturality_for_every_subobject(self, cat, clf, powers, embedding):
        x, c, k = embedding
        image = DirectImage(clf, powers, k)
        for n, members in enumerate(_subsets(x.data)):
            m = subset_inclusion(cat, x, members, f"S{n}")
            eq = image.naturality(m)
            assert len(eq.steps) == 4
            assert cat.apply(eq.rhs, "*") == frozenset(cat.apply(k, e) for e in members)

    def test_naturality_rejects_foreign_subobject(self, cat, clf, powers, embedding):
        x, c, k = embedding
        image = DirectImage(clf, powers, k)
        with pytest.raises(ValueError):
            image.naturality(subset_inclusion(cat, c, ("c1",), "T"))

    def test_requires_mono(self, cat, clf, powers, embedding):
        x, c, k = embedding
        fold = cat.function(c, x, {"c0": 1, "c1": 1, "c2": 2}, name="fold")
        with pytest.raises(CapabilityError):
            DirectImage(clf, powers, fold)

    def test_requires_matching_layer(self, cat, clf, embedding):
        x, c, k = embedding
        other = FinSetPowerObjects(finset_classifier(cat))
        with pytest.raises(ValueError):
            DirectImage(clf, other, k)

    def test_direct_images_compose(self, cat, clf, powers, embedding):
        x, c, k = embedding
        d = cat.obj("D", ("d0", "d1", "d2", "d3"))
        outer_k = cat.function(c, d, {"c0": "d3", "c1": "d0", "c2": "d1"}, name="k'")
        inner = DirectImage(clf, powers, k)
        outer = DirectImage(clf, powers, outer_k)
        eq = inner.then(outer)
        assert cat.apply(eq.lhs, frozenset({1, 2})) == frozenset({"d3", "d1"})
        with pytest.raises(ValueError):
            outer.then(inner)
