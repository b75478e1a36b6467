"""
Tabular Input Helpers for AgroInsight v1.0
==========================================
Normalizes the datasets handed to the engines (a list of row mappings or a
pandas DataFrame) into row records with a stable column order.
"""

from typing import Any, Dict, List, Mapping, Sequence, Union

import pandas as pd

from agroinsight.config import DataProcessingError

Dataset = Union[pd.DataFrame, Sequence[Mapping[str, Any]]]


def to_records(data: Dataset) -> List[Dict[str, Any]]:
    """Convert a dataset into a list of row dictionaries"""
    if data is None:
        return []

    if isinstance(data, pd.DataFrame):
        frame = data.copy()
        frame.columns = [str(c) for c in frame.columns]
        return frame.to_dict(orient='records')

    records = []
    for index, row in enumerate(data):
        if not isinstance(row, Mapping):
            raise DataProcessingError(
                f"Row {index} is a {type(row).__name__}, expected a mapping of column -> value"
            )
        records.append(dict(row))
    return records


def column_names(records: Sequence[Mapping[str, Any]]) -> List[str]:
    """Union of row keys in first-seen order"""
    seen: Dict[str, None] = {}
    for row in records:
        for key in row:
            if key not in seen:
                seen[key] = None
    return list(seen)


def column_values(records: Sequence[Mapping[str, Any]], name: str) -> List[Any]:
    """Values of one column, None where a row lacks the key"""
    return [row.get(name) for row in records]
