"""Shared pytest fixtures for biom_experiment tests."""

import numpy as np
import polars as pl
import pytest
from biom import Table


class BiomStub:
    """Minimal biom-like object for shapes biom.Table cannot produce, such
    as rectangular metadata or unnamed axes."""

    def __init__(
        self,
        data,
        observation_ids=None,
        sample_ids=None,
        observation_metadata=None,
        sample_metadata=None,
    ):
        self.matrix_data = np.asarray(data)
        self._ids = {"observation": observation_ids, "sample": sample_ids}
        self._metadata = {
            "observation": observation_metadata,
            "sample": sample_metadata,
        }

    def ids(self, axis="sample"):
        return self._ids[axis]

    def metadata(self, id=None, axis="sample"):
        return self._metadata[axis]


# Data fixtures - small synthetic datasets

@pytest.fixture
def counts_data():
    """3 features x 2 samples."""
    return np.array([[10, 0], [5, 3], [0, 7]])


@pytest.fixture
def observation_ids():
    return ["OTU1", "OTU2", "OTU3"]


@pytest.fixture
def sample_ids():
    return ["S1", "S2"]


@pytest.fixture
def heterogeneous_sample_metadata():
    """Second sample lacks the Phylum field."""
    return [
        {"Kingdom": "Bacteria", "Phylum": "Firmicutes"},
        {"Kingdom": "Archaea"},
    ]


@pytest.fixture
def uniform_sample_metadata():
    return [
        {"BODY_SITE": "gut", "pH": "6.5"},
        {"BODY_SITE": "skin", "pH": "7.1"},
    ]


@pytest.fixture
def taxonomy_metadata():
    """Observation metadata as written by QIIME: one taxonomy list per
    feature, truncated at the deepest classified rank."""
    return [
        {"taxonomy": ["k__Bacteria", "p__Firmicutes", "c__Bacilli"]},
        {"taxonomy": ["k__Bacteria", "p__Proteobacteria"]},
        {"taxonomy": ["sk__Eukaryota", "Unclassified"]},
    ]


# Instance fixtures - biom tables

@pytest.fixture
def bare_table(counts_data, observation_ids, sample_ids):
    """biom Table without any metadata."""
    return Table(counts_data, observation_ids, sample_ids)


@pytest.fixture
def rich_table(
    counts_data,
    observation_ids,
    sample_ids,
    taxonomy_metadata,
    heterogeneous_sample_metadata,
):
    """biom Table with taxonomy and heterogeneous sample metadata."""
    return Table(
        counts_data,
        observation_ids,
        sample_ids,
        observation_metadata=taxonomy_metadata,
        sample_metadata=heterogeneous_sample_metadata,
    )


@pytest.fixture
def uniform_table(counts_data, observation_ids, sample_ids, uniform_sample_metadata):
    """biom Table whose sample records share fields and field order."""
    return Table(
        counts_data,
        observation_ids,
        sample_ids,
        sample_metadata=uniform_sample_metadata,
    )


@pytest.fixture
def rich_table_json(tmp_path, rich_table):
    """Write the rich table to a JSON biom file and return the path."""
    path = tmp_path / "rich.biom"
    path.write_text(rich_table.to_json("biom_experiment tests"))
    return path


# Instance fixtures - biom-like stubs

@pytest.fixture
def biom_stub():
    """The BiomStub class, for tests that build their own shapes."""
    return BiomStub


@pytest.fixture
def rectangular_sample_frame():
    return pl.DataFrame(
        {
            "BODY_SITE": ["gut", "skin"],
            "age": [34, 51],
        }
    )
