# ABOUTME: Dataset persistence layer
# ABOUTME: Pipeline Stage 3: Validated records → JSON and script-embedded files for the browser UI

"""
Persistence Layer: Write finished datasets and read inputs

This layer handles:
- Atomic writes of episodes/quotes as JSON and window-bound script files
- Refusing to replace an existing dataset with an empty one
- Reading the topic vocabulary and previously written datasets

Data Flow: core/ pipelines → data/*.json, data/*.js → browser UI
"""

from .writer import (
    DATASETS,
    DatasetFormatError,
    DatasetWriter,
    EmptyDatasetError,
    PersistenceError,
    load_dataset,
    load_topics,
)

__all__ = [
    "DATASETS",
    "DatasetFormatError",
    "DatasetWriter",
    "EmptyDatasetError",
    "PersistenceError",
    "load_dataset",
    "load_topics",
]
