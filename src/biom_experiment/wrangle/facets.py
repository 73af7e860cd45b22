"""Per-axis metadata facets and their normalization into annotation
tables."""

import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple, Union

import numpy as np
import polars as pl

from biom_experiment.core.config import FacetAlignment
from biom_experiment.core.exceptions import InvalidInputTypeError

logger = logging.getLogger(__name__)

Record = List[Tuple[str, Any]]


@dataclass(frozen=True)
class EmptyFacet:
    """No metadata is available for the axis."""


@dataclass(frozen=True)
class RecordMapFacet:
    """Ordered mapping of identifier to its ``(field, value)`` pairs.

    Records may differ in length and field set between identifiers.
    """

    records: Dict[str, Record] = field(default_factory=dict)


@dataclass(frozen=True, eq=False)
class TableFacet:
    """Metadata already held as a rectangular table aligned with the axis."""

    table: pl.DataFrame


Facet = Union[EmptyFacet, RecordMapFacet, TableFacet]


class AnnotationTable:
    """Rectangular metadata for one axis of a FeatureExperiment.

    Identifiers are kept beside the polars frame rather than inside it, so a
    table without metadata columns still knows how many rows it describes.

    Attributes:
        data: Metadata columns only
        ids: Row identifiers, or None when the axis is unnamed
    """

    def __init__(
        self,
        data: pl.DataFrame,
        ids: Optional[List[str]] = None,
        height: Optional[int] = None,
    ):
        """Initialize AnnotationTable.

        Args:
            data: Metadata columns
            ids: Row identifiers
            height: Number of rows; only needed when ``data`` has no columns
                and ``ids`` is None

        Raises:
            ValueError: If the identifiers, height and data disagree
        """
        if data.width > 0:
            n_rows = data.height
        elif height is not None:
            n_rows = height
        elif ids is not None:
            n_rows = len(ids)
        else:
            n_rows = 0

        if height is not None and height != n_rows:
            raise ValueError(
                f"Annotation rows ({n_rows}) must match height ({height})"
            )
        if ids is not None and len(ids) != n_rows:
            raise ValueError(
                f"Annotation rows ({n_rows}) must match identifiers length ({len(ids)})"
            )

        self.data = data
        self.ids = list(ids) if ids is not None else None
        self._height = n_rows

    @property
    def height(self) -> int:
        return self._height

    @property
    def width(self) -> int:
        return self.data.width

    @property
    def shape(self) -> Tuple[int, int]:
        return (self._height, self.data.width)

    @property
    def columns(self) -> List[str]:
        return self.data.columns

    def with_ids(self, ids: Optional[List[str]]) -> "AnnotationTable":
        """Return a copy carrying new row identifiers."""
        return AnnotationTable(self.data, ids, height=self._height)

    def with_data(self, data: pl.DataFrame) -> "AnnotationTable":
        """Return a copy holding new metadata columns for the same rows."""
        return AnnotationTable(data, self.ids, height=self._height)

    def collect(self, id_column: str) -> pl.DataFrame:
        """Return the metadata with identifiers as the first column.

        Args:
            id_column: Name of the identifier column

        Raises:
            ValueError: If the table has no identifiers or the column name
                is already taken by a metadata field
        """
        if self.ids is None:
            raise ValueError("AnnotationTable has no identifiers to collect")
        if id_column in self.data.columns:
            raise ValueError(
                f"Identifier column '{id_column}' clashes with a metadata column"
            )
        id_frame = pl.DataFrame({id_column: self.ids}, schema={id_column: pl.String})
        if self.data.width == 0:
            return id_frame
        return pl.concat([id_frame, self.data], how="horizontal")

    def equals(self, other: "AnnotationTable") -> bool:
        """Compare identifiers, shape and cell values."""
        return (
            self.ids == other.ids
            and self.shape == other.shape
            and self.data.equals(other.data)
        )

    def __repr__(self) -> str:
        return f"AnnotationTable(shape={self.shape}, columns={self.columns})"


def _record_items(record: Any) -> Record:
    """Turn one biom metadata record into ordered ``(field, value)`` pairs.

    List values, such as a biom ``taxonomy`` entry, are expanded into one
    field per element named ``taxonomy1``, ``taxonomy2`` and so on.
    """
    if record is None:
        return []

    if isinstance(record, Mapping):
        items: Record = []
        for key, value in record.items():
            if isinstance(value, (list, tuple, np.ndarray)):
                items.extend(
                    (f"{key}{i + 1}", element) for i, element in enumerate(value)
                )
            else:
                items.append((str(key), value))
    elif (
        isinstance(record, Sequence)
        and not isinstance(record, str)
        and all(isinstance(pair, tuple) and len(pair) == 2 for pair in record)
    ):
        items = [(str(name), value) for name, value in record]
    else:
        raise InvalidInputTypeError(
            f"Unsupported metadata record type: {type(record).__name__}"
        )

    names = [name for name, _ in items]
    duplicates = sorted({name for name in names if names.count(name) > 1})
    if duplicates:
        raise ValueError(f"Duplicate metadata fields in record: {duplicates}")
    return items


def facet_from_metadata(
    metadata: Any, ids: Optional[List[str]] = None
) -> Facet:
    """Classify a decoder's metadata value into a Facet.

    Args:
        metadata: None, a polars DataFrame, a mapping of identifier to
            record, or a sequence of records ordered like ``ids``
        ids: Axis identifiers used to key sequence-style metadata

    Returns:
        The matching Facet variant
    """
    if metadata is None:
        return EmptyFacet()

    if isinstance(metadata, pl.DataFrame):
        return TableFacet(metadata)

    if isinstance(metadata, Mapping):
        return RecordMapFacet(
            {str(key): _record_items(value) for key, value in metadata.items()}
        )

    if isinstance(metadata, Sequence) and not isinstance(metadata, str):
        if ids is not None and len(ids) != len(metadata):
            raise ValueError(
                f"Metadata records ({len(metadata)}) must match identifiers length ({len(ids)})"
            )
        keys = ids if ids is not None else [str(i) for i in range(len(metadata))]
        return RecordMapFacet(
            {key: _record_items(value) for key, value in zip(keys, metadata)}
        )

    raise InvalidInputTypeError(
        f"Unsupported metadata type: {type(metadata).__name__}"
    )


def _canonical_columns(records: List[Record], alignment: FacetAlignment) -> List[str]:
    """Field names of the first longest record, extended with every other
    name seen when aligning by name."""
    max_length = max(len(record) for record in records)
    longest = next(record for record in records if len(record) == max_length)
    columns = [name for name, _ in longest]

    if alignment == FacetAlignment.BY_NAME:
        seen = dict.fromkeys(columns)
        for record in records:
            for name, _ in record:
                if name not in seen:
                    seen[name] = None
        columns = list(seen)

    return columns


def _records_to_frame(
    records: List[Record], alignment: FacetAlignment
) -> pl.DataFrame:
    """Stack records into a frame with one column per canonical field."""
    columns = _canonical_columns(records, alignment)

    if alignment == FacetAlignment.POSITIONAL:
        # Pad with trailing nulls; assumes every record lists its fields in
        # the same order
        width = len(columns)
        rows = [
            [value for _, value in record] + [None] * (width - len(record))
            for record in records
        ]
    elif alignment == FacetAlignment.BY_NAME:
        lookups = [dict(record) for record in records]
        rows = [[lookup.get(name) for name in columns] for lookup in lookups]
    else:
        raise ValueError(f"Unknown facet alignment: {alignment}")

    return pl.DataFrame(
        [_column(name, [row[i] for row in rows]) for i, name in enumerate(columns)]
    )


def _column(name: str, values: List[Any]) -> pl.Series:
    """Build one metadata column; values of mixed types are cast to their
    common supertype, usually String."""
    try:
        return pl.Series(name, values)
    except (TypeError, pl.exceptions.PolarsError):
        series = pl.Series(name, values, strict=False)
        logger.debug(
            "Metadata field %s holds mixed value types; coerced to %s",
            name,
            series.dtype,
        )
        return series


def normalize_facet(
    facet: Facet,
    ids: Optional[List[str]],
    n: int,
    alignment: FacetAlignment = FacetAlignment.BY_NAME,
) -> AnnotationTable:
    """Normalize a Facet into an AnnotationTable with ``n`` rows.

    Args:
        facet: Metadata facet for one axis
        ids: Identifiers of that axis in the counts matrix, or None
        n: Length of that axis in the counts matrix
        alignment: How records of different shape are merged

    Returns:
        AnnotationTable aligned with the counts axis
    """
    if isinstance(facet, EmptyFacet):
        logger.debug("Empty facet, creating %d-row table without columns", n)
        return AnnotationTable(pl.DataFrame(), ids, height=n)

    if isinstance(facet, TableFacet):
        logger.debug("Table facet with shape %s passed through", facet.table.shape)
        return AnnotationTable(facet.table, ids, height=n)

    if isinstance(facet, RecordMapFacet):
        if ids is not None and set(facet.records) == set(ids):
            records = [facet.records[key] for key in ids]
        else:
            records = list(facet.records.values())
        if len(records) != n:
            raise ValueError(
                f"Metadata records ({len(records)}) must match axis length ({n})"
            )
        if not records or max(len(record) for record in records) == 0:
            return AnnotationTable(pl.DataFrame(), ids, height=n)

        data = _records_to_frame(records, alignment)
        logger.debug(
            "Normalized %d records into columns %s (%s alignment)",
            len(records),
            data.columns,
            alignment.value,
        )
        return AnnotationTable(data, ids, height=n)

    raise TypeError(f"Unsupported facet type: {type(facet).__name__}")
