"""Container pairing a counts matrix with feature and sample annotations."""

from typing import Dict, List, Optional, Tuple

import numpy as np
import polars as pl

from biom_experiment.wrangle.facets import AnnotationTable

# standardised error messages
ERR_COUNTS_NOT_2D = "Counts must be a 2-D matrix (features x samples)"


class FeatureExperiment:
    """Counts matrix with row (feature) and column (sample) annotations.

    Rows of ``row_data`` line up with rows of the counts matrix and rows of
    ``col_data`` line up with its columns, both by position.

    Attributes:
        assays: Named data layers, always including ``counts``
        row_data: Feature annotations
        col_data: Sample annotations
    """

    def __init__(
        self,
        counts: np.ndarray,
        row_data: Optional[AnnotationTable] = None,
        col_data: Optional[AnnotationTable] = None,
        feature_id_column: str = "feature",
        sample_id_column: str = "sample",
    ):
        """Initialize FeatureExperiment.

        Args:
            counts: Matrix with features as rows and samples as columns
            row_data: Feature annotations; defaults to an empty table
            col_data: Sample annotations; defaults to an empty table
            feature_id_column: Identifier column name used when exporting
                feature-wise frames
            sample_id_column: Identifier column name used when exporting
                sample-wise frames

        Raises:
            ValueError: If annotation heights don't match the counts matrix
        """
        counts = np.asarray(counts)
        if counts.ndim != 2:
            raise ValueError(ERR_COUNTS_NOT_2D)

        n_features, n_samples = counts.shape
        if row_data is None:
            row_data = AnnotationTable(pl.DataFrame(), height=n_features)
        if col_data is None:
            col_data = AnnotationTable(pl.DataFrame(), height=n_samples)

        if row_data.height != n_features:
            raise ValueError(
                f"Row annotations ({row_data.height}) must match counts rows ({n_features})"
            )
        if col_data.height != n_samples:
            raise ValueError(
                f"Column annotations ({col_data.height}) must match counts columns ({n_samples})"
            )

        self.assays: Dict[str, np.ndarray] = {"counts": counts}
        self.row_data = row_data
        self.col_data = col_data
        self.feature_id_column = feature_id_column
        self.sample_id_column = sample_id_column

    @property
    def counts(self) -> np.ndarray:
        """Primary counts layer."""
        return self.assays["counts"]

    @property
    def shape(self) -> Tuple[int, int]:
        return self.counts.shape  # type: ignore[return-value]

    @property
    def row_names(self) -> Optional[List[str]]:
        return self.row_data.ids

    @row_names.setter
    def row_names(self, names: Optional[List[str]]) -> None:
        self.row_data = self.row_data.with_ids(
            [str(name) for name in names] if names is not None else None
        )

    @property
    def col_names(self) -> Optional[List[str]]:
        return self.col_data.ids

    @col_names.setter
    def col_names(self, names: Optional[List[str]]) -> None:
        self.col_data = self.col_data.with_ids(
            [str(name) for name in names] if names is not None else None
        )

    def assay(self, name: str = "counts") -> np.ndarray:
        """Get a data layer by name."""
        if name not in self.assays:
            raise KeyError(
                f"Assay '{name}' not found; available: {list(self.assays)}"
            )
        return self.assays[name]

    def counts_frame(self) -> pl.DataFrame:
        """Counts as a wide DataFrame: one row per feature, one column per
        sample, plus the feature identifier column.

        Raises:
            ValueError: If row or column names are missing
        """
        if self.row_names is None or self.col_names is None:
            raise ValueError(
                "counts_frame() requires both row_names and col_names"
            )
        df = pl.DataFrame(self.counts, schema=self.col_names, orient="row")
        return pl.concat(
            [pl.DataFrame({self.feature_id_column: self.row_names}), df],
            how="horizontal",
        )

    def to_long(self) -> pl.DataFrame:
        """Counts in long format with feature, sample and count columns."""
        return self.counts_frame().unpivot(
            index=self.feature_id_column,
            variable_name=self.sample_id_column,
            value_name="count",
        )

    def collect_row_data(self) -> pl.DataFrame:
        """Feature annotations with the feature identifier column."""
        return self.row_data.collect(self.feature_id_column)

    def collect_col_data(self) -> pl.DataFrame:
        """Sample annotations with the sample identifier column."""
        return self.col_data.collect(self.sample_id_column)

    def __repr__(self) -> str:
        n_features, n_samples = self.shape
        return (
            f"FeatureExperiment(features={n_features}, samples={n_samples}, "
            f"assays={list(self.assays)}, row_data={self.row_data.columns}, "
            f"col_data={self.col_data.columns})"
        )
