"""Conversion of biom tables into annotated count containers."""

from .biom_import import (
    load_from_biom,
    make_experiment_from_biom,
    make_feature_experiment_from_biom,
    strip_taxa_prefixes,
)
from .experiment import FeatureExperiment
from .facets import AnnotationTable

__all__ = [
    "AnnotationTable",
    "FeatureExperiment",
    "load_from_biom",
    "make_experiment_from_biom",
    "make_feature_experiment_from_biom",
    "strip_taxa_prefixes",
]
