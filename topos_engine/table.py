# -*- coding: utf-8 -*-
"""
TableCategory - 由显式复合表给出的有限范畴

恒等态射自动生成（名为 id_X）；复合表 table[(g, f)] = g ∘ f 的名字，
未列出的复合只允许一侧为恒等。构造时立即 validate()，不合法的表直接拒绝。
单/满按 hom 集穷举判定。
"""

from __future__ import annotations

from typing import Dict, List, Mapping, Optional, Sequence, Tuple

from .category import Category, MalformedCategoryError, Morphism, Object


class TableCategory(Category):

    def __init__(
        self,
        name: str,
        objects: Sequence[str],
        arrows: Mapping[str, Tuple[str, str]],
        table: Mapping[Tuple[str, str], str],
        terminal: str,
    ):
        super().__init__(name)
        self._by_id: Dict[str, Object] = {o: Object(o) for o in objects}
        self._arrows: Dict[str, Morphism] = {}
        for o, obj in self._by_id.items():
            self._arrows[f"id_{o}"] = Morphism(obj, obj, name=f"id_{o}")
        for arrow, (src, tgt) in arrows.items():
            if src not in self._by_id or tgt not in self._by_id:
                raise MalformedCategoryError(name, "typing", f"{arrow}: {src} → {tgt} uses an unknown object")
            if arrow in self._arrows:
                raise MalformedCategoryError(name, "typing", f"arrow name {arrow!r} is used twice")
            self._arrows[arrow] = Morphism(self._by_id[src], self._by_id[tgt], name=arrow)
        if terminal not in self._by_id:
            raise MalformedCategoryError(name, "terminal", f"unknown terminal object {terminal!r}")
        self._terminal = self._by_id[terminal]

        self._table: Dict[Tuple[str, str], str] = {}
        for (g_name, f_name), gf_name in table.items():
            g, f, gf = (self._arrow(n) for n in (g_name, f_name, gf_name))
            if f.target != g.source or gf.source != f.source or gf.target != g.target:
                raise MalformedCategoryError(
                    name, "typing", f"{g_name} ∘ {f_name} = {gf_name} is ill-typed"
                )
            self._table[(g_name, f_name)] = gf_name

        for obj in self._by_id.values():
            self.add_object(obj)
        for arrow in arrows:
            self.add_morphism(self._arrows[arrow])
        self.validate()

    def _arrow(self, arrow: str) -> Morphism:
        if arrow not in self._arrows:
            raise MalformedCategoryError(self.name, "typing", f"unknown arrow {arrow!r}")
        return self._arrows[arrow]

    def obj(self, obj_id: str) -> Object:
        return self._by_id[obj_id]

    def arrow(self, arrow: str) -> Morphism:
        return self._arrow(arrow)

    def _identity(self, obj: Object) -> Morphism:
        return self._arrows[f"id_{obj.id}"]

    def _compose(self, g: Morphism, f: Morphism) -> Morphism:
        explicit = self._table.get((g.name, f.name))
        if explicit is not None:
            return self._arrows[explicit]
        if g.name == f"id_{g.source.id}":
            return f
        if f.name == f"id_{f.source.id}":
            return g
        raise MalformedCategoryError(self.name, "closure", f"no composite for {g.name} ∘ {f.name}")

    @property
    def terminal(self) -> Object:
        return self._terminal

    def terminal_map(self, obj: Object) -> Morphism:
        candidates = self.hom(obj, self._terminal)
        if not candidates:
            raise MalformedCategoryError(self.name, "terminal", f"no morphism {obj.id} → {self._terminal.id}")
        return candidates[0]

    def hom_size(self, source: Object, target: Object) -> Optional[int]:
        return len(self.hom(source, target))

    def hom(self, source: Object, target: Object) -> List[Morphism]:
        return [m for m in self._arrows.values() if m.source == source and m.target == target]

    def is_monic(self, f: Morphism) -> bool:
        for z in self._by_id.values():
            maps = self.hom(z, f.source)
            for i, a in enumerate(maps):
                for b in maps[i + 1:]:
                    if self.equal(self.compose(f, a), self.compose(f, b)):
                        return False
        return True

    def is_epic(self, f: Morphism) -> bool:
        for z in self._by_id.values():
            maps = self.hom(f.target, z)
            for i, a in enumerate(maps):
                for b in maps[i + 1:]:
                    if self.equal(self.compose(a, f), self.compose(b, f)):
                        return False
        return True
