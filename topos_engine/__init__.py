# -*- coding: utf-8 -*-
"""
topos_engine: 初等 topos 构造引擎

Category → Pullback 见证 → SubobjectClassifier → (PowerObjectLayer) →
ExponentialObject → DirectImage
"""

from .category import (
    CapabilityError,
    CategoricalError,
    Category,
    ClassifierLawViolation,
    EquationFailure,
    FiniteLimitCategory,
    FunctorLawViolation,
    LimitWitnessViolation,
    MalformedCategoryError,
    Morphism,
    Object,
    PowerObjectLawViolation,
    PullbackWitnessViolation,
)
from .certificates import Calc, Equation, prove_equal, trans
from .classifier import (
    IsomorphismWitness,
    SubobjectClassifier,
    balanced_inverse,
    reflects_isomorphism,
    regular_mono,
    truth_split_mono,
)
from .direct_image import DirectImage
from .exponential import ExponentialBuilder, ExponentialObject
from .finset import FinSet, FinSetPowerObjects, finset_classifier
from .functor import Functor
from .limits import BinaryProduct, Equalizer, PullbackSquare, is_pullback
from .power import PowerObjectLayer
from .table import TableCategory
from .tags import MorphismTag, TaggedMorphism, tag, tag_epi, tag_mono

__all__ = [
    "BinaryProduct",
    "Calc",
    "CapabilityError",
    "CategoricalError",
    "Category",
    "ClassifierLawViolation",
    "DirectImage",
    "Equalizer",
    "Equation",
    "EquationFailure",
    "ExponentialBuilder",
    "ExponentialObject",
    "FinSet",
    "FinSetPowerObjects",
    "FiniteLimitCategory",
    "Functor",
    "FunctorLawViolation",
    "IsomorphismWitness",
    "LimitWitnessViolation",
    "MalformedCategoryError",
    "Morphism",
    "MorphismTag",
    "Object",
    "PowerObjectLawViolation",
    "PowerObjectLayer",
    "PullbackSquare",
    "PullbackWitnessViolation",
    "SubobjectClassifier",
    "TableCategory",
    "TaggedMorphism",
    "balanced_inverse",
    "finset_classifier",
    "is_pullback",
    "prove_equal",
    "reflects_isomorphism",
    "regular_mono",
    "tag",
    "tag_epi",
    "tag_mono",
    "trans",
    "truth_split_mono",
]
