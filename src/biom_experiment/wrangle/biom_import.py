"""Conversion of biom tables into FeatureExperiment objects.

Decoding of the biom file format is left to the ``biom-format`` package.
This module only reshapes the decoded table: counts become a dense matrix,
sample and observation metadata become annotation tables, and taxonomic
rank prefixes can optionally be removed from feature annotations.
"""

import logging
import warnings
from pathlib import Path
from typing import Any, List, Optional, Union

import numpy as np
import polars as pl

from biom_experiment.core.config import ConversionConfig
from biom_experiment.core.exceptions import InvalidInputTypeError
from biom_experiment.utils.packages import require_package
from biom_experiment.utils.taxonomy import TaxonomicRanks
from biom_experiment.wrangle.experiment import FeatureExperiment
from biom_experiment.wrangle.facets import (
    AnnotationTable,
    facet_from_metadata,
    normalize_facet,
)

logger = logging.getLogger(__name__)

# standardised error messages
ERR_NOT_BIOM = "'obj' must be a biom Table (or expose matrix_data, ids() and metadata())"


def load_from_biom(
    path: Union[str, Path],
    remove_taxa_prefixes: Optional[bool] = None,
    config: Optional[ConversionConfig] = None,
) -> FeatureExperiment:
    """Load a biom file into a FeatureExperiment.

    Args:
        path: Location of a JSON or HDF5 biom file
        remove_taxa_prefixes: Strip rank prefixes such as ``k__`` from the
            feature annotations; defaults to the config value (False)
        config: Conversion options

    Returns:
        FeatureExperiment built from the file

    Raises:
        DependencyMissingError: If biom-format is not installed
    """
    biom = require_package("biom")
    logger.info("Loading biom table from %s", path)
    table = biom.load_table(str(path))
    return make_experiment_from_biom(table, remove_taxa_prefixes, config=config)


def _is_biom_like(obj: Any) -> bool:
    return (
        hasattr(obj, "matrix_data")
        and callable(getattr(obj, "ids", None))
        and callable(getattr(obj, "metadata", None))
    )


def _dense_counts(obj: Any) -> np.ndarray:
    """Observations x samples matrix as a dense array."""
    data = obj.matrix_data
    counts = data.toarray() if hasattr(data, "toarray") else np.asarray(data)
    if counts.ndim != 2:
        raise InvalidInputTypeError(ERR_NOT_BIOM)
    return counts


def _axis_ids(obj: Any, axis: str) -> Optional[List[str]]:
    ids = obj.ids(axis=axis)
    if ids is None:
        return None
    return [i.decode() if isinstance(i, bytes) else str(i) for i in ids]


def strip_taxa_prefixes(table: AnnotationTable) -> AnnotationTable:
    """Remove leading rank prefixes from every string cell of a table.

    Non-string columns and null cells are left untouched.
    """
    pattern = TaxonomicRanks.prefix_regex()
    string_columns = [
        name for name, dtype in table.data.schema.items() if dtype == pl.String
    ]
    if not string_columns:
        return table

    data = table.data.with_columns(
        pl.col(name).str.replace(pattern, "") for name in string_columns
    )
    return table.with_data(data)


def make_experiment_from_biom(
    obj: Any,
    remove_taxa_prefixes: Optional[bool] = None,
    config: Optional[ConversionConfig] = None,
    **kwargs: Any,
) -> FeatureExperiment:
    """Convert a decoded biom table into a FeatureExperiment.

    Args:
        obj: ``biom.Table`` or an object exposing ``matrix_data``,
            ``ids(axis=...)`` and ``metadata(axis=...)``
        remove_taxa_prefixes: Strip rank prefixes such as ``k__`` from the
            feature annotations; defaults to the config value (False)
        config: Conversion options
        **kwargs: Accepted for compatibility, not used

    Returns:
        FeatureExperiment with counts, feature and sample annotations

    Raises:
        InvalidInputTypeError: If ``obj`` is not a biom table
    """
    if not _is_biom_like(obj):
        raise InvalidInputTypeError(
            f"{ERR_NOT_BIOM}; got {type(obj).__name__}"
        )

    if config is None:
        config = ConversionConfig()
    if remove_taxa_prefixes is None:
        remove_taxa_prefixes = config.remove_taxa_prefixes

    counts = _dense_counts(obj)
    n_features, n_samples = counts.shape
    feature_ids = _axis_ids(obj, "observation")
    sample_ids = _axis_ids(obj, "sample")
    logger.debug(
        "Converting biom table with %d features and %d samples",
        n_features,
        n_samples,
    )

    sample_data = normalize_facet(
        facet_from_metadata(obj.metadata(axis="sample"), sample_ids),
        sample_ids,
        n_samples,
        config.alignment,
    )
    feature_data = normalize_facet(
        facet_from_metadata(obj.metadata(axis="observation"), feature_ids),
        feature_ids,
        n_features,
        config.alignment,
    )

    if remove_taxa_prefixes and feature_data.width > 0:
        feature_data = strip_taxa_prefixes(feature_data)

    experiment = FeatureExperiment(
        counts,
        row_data=feature_data,
        col_data=sample_data,
        feature_id_column=config.feature_id_column,
        sample_id_column=config.sample_id_column,
    )

    if experiment.col_names is None:
        warnings.warn(
            "Output does not include column names. You can add them with "
            "'experiment.col_names = ...'.",
            UserWarning,
            stacklevel=2,
        )
    if experiment.row_names is None:
        warnings.warn(
            "Output does not include row names. You can add them with "
            "'experiment.row_names = ...'.",
            UserWarning,
            stacklevel=2,
        )

    return experiment


def make_feature_experiment_from_biom(obj: Any, *args: Any, **kwargs: Any) -> FeatureExperiment:
    """Legacy name for make_experiment_from_biom."""
    return make_experiment_from_biom(obj, *args, **kwargs)
