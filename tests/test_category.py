import numpy as np
import pytest

from topos_engine import MalformedCategoryError, TableCategory
from topos_engine.category import _env_int


class TestFinSetStructure:
    def test_terminal_and_truth(self, cat):
        assert cat.terminal.data == ("*",)
        assert cat.omega.data == ("true", "false")
        assert cat.apply(cat.truth, "*") == "true"

    def test_compose_is_function_composition(self, cat):
        a = cat.obj("A", ("x", "y"))
        b = cat.obj("B", (0, 1, 2))
        c = cat.obj("C", ("lo", "hi"))
        f = cat.function(a, b, {"x": 0, "y": 2}, name="f")
        g = cat.function(b, c, {0: "lo", 1: "lo", 2: "hi"}, name="g")
        gf = cat.compose(g, f)
        assert cat.as_dict(gf) == {"x": "lo", "y": "hi"}
        assert cat.equal(cat.chain(f, g), gf)

    def test_compose_rejects_mismatched_endpoints(self, cat):
        a = cat.obj("A", ("x",))
        b = cat.obj("B", (0,))
        f = cat.function(a, b, {"x": 0})
        with pytest.raises(ValueError):
            cat.compose(f, f)

    def test_function_rejects_foreign_values(self, cat):
        a = cat.obj("A", ("x",))
        b = cat.obj("B", (0,))
        with pytest.raises(ValueError):
            cat.function(a, b, {"x": 7})

    def test_object_id_is_not_reused_for_new_elements(self, cat):
        cat.obj("A", ("x",))
        with pytest.raises(ValueError):
            cat.obj("A", ("x", "y"))

    def test_mono_epi_and_inverse(self, cat):
        a = cat.obj("A", (1, 2))
        b = cat.obj("B", (1, 2, 3))
        inj = cat.function(a, b, {1: 1, 2: 3})
        surj = cat.function(b, a, {1: 1, 2: 2, 3: 2})
        swap = cat.function(a, a, {1: 2, 2: 1})
        assert cat.is_monic(inj) and not cat.is_epic(inj)
        assert cat.is_epic(surj) and not cat.is_monic(surj)
        assert cat.find_inverse(inj) is None
        inverse = cat.find_inverse(swap)
        assert cat.equal(cat.compose(inverse, swap), cat.identity(a))

    def test_hom_enumeration(self, cat):
        a = cat.obj("A", (1, 2))
        b = cat.obj("B", (1, 2, 3))
        maps = cat.hom(a, b)
        assert len(maps) == 9
        assert len({m.key() for m in maps}) == 9

    def test_product_pair_and_associator(self, cat):
        a = cat.obj("A", (1, 2))
        b = cat.obj("B", ("p", "q"))
        c = cat.obj("C", (True,))
        prod = cat.product(a, b)
        assert prod is cat.product(a, b)
        f = cat.function(c, a, {True: 2})
        g = cat.function(c, b, {True: "p"})
        assert cat.apply(prod.pair(f, g), True) == (2, "p")
        alpha = cat.associator(a, b, c)
        assert cat.apply(alpha, (1, ("q", True))) == ((1, "q"), True)

    def test_validate_accepts_finset(self, cat):
        a = cat.obj("A", (1, 2))
        cat.function(a, a, {1: 2, 2: 1})
        cat.function(a, cat.terminal, {1: "*", 2: "*"})
        assert cat.validate() is cat

    def test_morphism_matrix_is_frozen(self, cat):
        a = cat.obj("A", (1, 2))
        f = cat.identity(a)
        with pytest.raises(ValueError):
            f.matrix[0, 0] = 0
        assert np.array_equal(f.matrix, np.eye(2, dtype=np.int64))


class TestTableCategory:
    def test_walking_arrow(self):
        cat = TableCategory("walking arrow", ["A", "T"], {"p": ("A", "T")}, {}, terminal="T")
        p = cat.arrow("p")
        assert cat.equal(cat.terminal_map(cat.obj("A")), p)
        # 单且满但不可逆: 没有分类器时平衡性不成立
        assert cat.is_monic(p) and cat.is_epic(p)
        assert cat.find_inverse(p) is None

    def test_rejects_non_associative_table(self):
        table = {("a", "a"): "b", ("a", "b"): "a", ("b", "a"): "b", ("b", "b"): "b"}
        with pytest.raises(MalformedCategoryError) as excinfo:
            TableCategory("bad monoid", ["A"], {"a": ("A", "A"), "b": ("A", "A")}, table, terminal="A")
        assert excinfo.value.law == "associativity"

    def test_rejects_two_maps_into_terminal(self):
        with pytest.raises(MalformedCategoryError) as excinfo:
            TableCategory("two points", ["A", "T"], {"p": ("A", "T"), "q": ("A", "T")}, {}, terminal="T")
        assert excinfo.value.law == "terminal"

    def test_rejects_missing_terminal_map(self):
        with pytest.raises(MalformedCategoryError) as excinfo:
            TableCategory("disconnected", ["A", "T"], {}, {}, terminal="T")
        assert excinfo.value.law == "terminal"

    def test_rejects_ill_typed_table(self):
        with pytest.raises(MalformedCategoryError) as excinfo:
            TableCategory(
                "ill typed", ["A", "T"], {"p": ("A", "T")}, {("p", "p"): "p"}, terminal="T"
            )
        assert excinfo.value.law == "typing"

    def test_rejects_identity_override(self):
        with pytest.raises(MalformedCategoryError) as excinfo:
            TableCategory(
                "bad identity", ["A"], {"e": ("A", "A")},
                {("id_A", "e"): "id_A", ("e", "e"): "e"}, terminal="A",
            )
        assert excinfo.value.law == "identity"


class TestConfiguration:
    def test_env_int_default(self, monkeypatch):
        monkeypatch.delenv("TOPOS_TEST_LIMIT", raising=False)
        assert _env_int("TOPOS_TEST_LIMIT", default=5) == 5

    def test_env_int_reads_value(self, monkeypatch):
        monkeypatch.setenv("TOPOS_TEST_LIMIT", " 12 ")
        assert _env_int("TOPOS_TEST_LIMIT", default=5) == 12

    @pytest.mark.parametrize("raw", ["abc", "0", "-3"])
    def test_env_int_rejects_bad_values(self, monkeypatch, raw):
        monkeypatch.setenv("TOPOS_TEST_LIMIT", raw)
        with pytest.raises(ValueError):
            _env_int("TOPOS_TEST_LIMIT", default=5)
