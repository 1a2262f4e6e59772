import pytest

from topos_engine import FinSet, FinSetPowerObjects, Functor, finset_classifier


@pytest.fixture
def cat():
    return FinSet("test")


@pytest.fixture
def scenario(cat):
    """U = {1} ↪ X = {1, 2}"""
    u = cat.obj("U", (1,))
    x = cat.obj("X", (1, 2))
    m = cat.function(u, x, {1: 1}, name="m")
    return u, x, m


@pytest.fixture
def clf(cat):
    return finset_classifier(cat)


@pytest.fixture
def powers(clf):
    return FinSetPowerObjects(clf)


def subset_inclusion(cat, ambient, members, obj_id):
    sub = cat.obj(obj_id, tuple(members))
    return cat.function(sub, ambient, {e: e for e in members}, name=f"ι_{obj_id}")


class ProductWith(Functor):
    """X ↦ X ⨯ K, f ↦ f ⨯ id_K"""

    def __init__(self, category, factor, **kwargs):
        super().__init__(category, category, f"− ⨯ {factor.id}", **kwargs)
        self.factor = factor

    def on_objects(self, obj):
        return self.source_category.product(obj, self.factor).obj

    def on_morphisms(self, f):
        cat = self.source_category
        return cat.product_map(f, cat.identity(self.factor))


class Preimage(Functor):
    """逆像函子 FinSet^op → FinSet, A ↦ Pow A"""

    def __init__(self, powers, **kwargs):
        cat = powers.category
        super().__init__(cat, cat, "Pow", contravariant=True, **kwargs)
        self.powers = powers

    def on_objects(self, obj):
        return self.powers.pow(obj)

    def on_morphisms(self, f):
        cat = self.source_category
        pb = self.powers.pow(f.target)
        pulled = cat.compose(
            self.powers.membership(f.target), cat.product_map(f, cat.identity(pb))
        )
        return self.powers.transpose(f.source, pb, pulled)


class Collapse(Functor):
    """X ↦ 1，不忠实"""

    def on_objects(self, obj):
        return self.target_category.terminal

    def on_morphisms(self, f):
        return self.target_category.identity(self.target_category.terminal)
