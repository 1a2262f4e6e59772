#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
Smoke / Acceptance: FinSet 上的最小可落地验收

    python -m topos_engine.smoke

验收指标（strict）:
- U = {1} ↪ X = {1, 2}: χ_m 为 1 ↦ true, 2 ↦ false，方块为拉回且 χ 唯一
- 每个单态射正则；t 可裂单；双射经平衡性得到逆
- Exp(A, B) 上柯里化双射两半都成立（全部 f: A ⨯ X → B）
- Beck–Chevalley 自然性
- 两次运行报告完全一致（可复现）
"""

from __future__ import annotations

import itertools
import logging
import sys
from typing import Any, Dict

from .category import CategoricalError
from .classifier import balanced_inverse, regular_mono, truth_split_mono
from .direct_image import DirectImage
from .exponential import ExponentialBuilder
from .finset import FinSet, FinSetPowerObjects, finset_classifier
from .tags import MorphismTag

_logger = logging.getLogger(__name__)


def _configure_smoke_logging() -> None:
    """健康日志输出：只在未配置 handler 时注入默认配置，避免污染宿主应用。"""
    root = logging.getLogger()
    if not root.handlers:
        logging.basicConfig(
            level=logging.INFO,
            format="[%(levelname)s] %(name)s: %(message)s",
        )
    root.setLevel(logging.INFO)


def _run_acceptance() -> Dict[str, Any]:
    cat = FinSet("smoke")
    u = cat.obj("U", (1,))
    x = cat.obj("X", (1, 2))
    m = cat.function(u, x, {1: 1}, name="m")
    clf = finset_classifier(cat).validate([m])
    chi = clf.char(m)
    clf.uniq(m, chi, clf.classifying_square(m))

    report: Dict[str, Any] = {"char": cat.as_dict(chi)}

    t_tags = truth_split_mono(clf)
    report["truth_tags"] = sorted(t.name for t in t_tags.tags)
    report["m_regular"] = regular_mono(clf, m).has(MorphismTag.REGULAR_MONO)

    swap = cat.function(x, x, {1: 2, 2: 1}, name="swap")
    iso = balanced_inverse(clf, swap)
    report["swap_inverse"] = cat.as_dict(iso.witness(MorphismTag.ISO).inverse)

    powers = FinSetPowerObjects(clf)
    a = cat.obj("A", ("a0", "a1"))
    b = cat.obj("B", ("b0", "b1"))
    p = cat.obj("P", ("p0", "p1"))
    exp = ExponentialBuilder(clf, powers).build(a, b)
    ap = cat.product(a, p)
    curried = 0
    for values in itertools.product(b.data, repeat=ap.obj.dimension):
        table = dict(zip(ap.obj.data, values))
        f = cat.function(ap.obj, b, table)
        exp.beta(f, p)
        exp.eta(exp.curry(f, p))
        curried += 1
    report["exp_size"] = exp.obj.dimension
    report["curried"] = curried

    big = cat.obj("C", ("c0", "c1", "c2"))
    k = cat.function(x, big, {1: "c0", 2: "c2"}, name="k")
    image = DirectImage(clf, powers, k)
    image.naturality(m)
    report["direct_image_of_m"] = sorted(
        cat.apply(cat.compose(image.morphism, powers.name(clf.char(m))), "*")
    )
    return report


def main() -> int:
    _configure_smoke_logging()
    _logger.info("topos_engine smoke: START")
    try:
        report1 = _run_acceptance()
        report2 = _run_acceptance()
    except CategoricalError as e:
        _logger.error("REJECT: %s", e)
        return 1
    if report1 != report2:
        _logger.error("REJECT: report is not reproducible")
        return 1
    for key in sorted(report1):
        _logger.info("[%s] %s", key, report1[key])
    _logger.info("topos_engine smoke: PASS")
    return 0


if __name__ == "__main__":
    sys.exit(main())
