from __future__ import annotations

from typing import Iterable, Mapping, Union

import pandas as pd

from core.schema import BALANCE_SHEET_COLUMNS, PROFIT_LOSS_COLUMNS

_NUMERIC_COLUMNS = set(PROFIT_LOSS_COLUMNS) | set(BALANCE_SHEET_COLUMNS)

RecordSource = Union[pd.DataFrame, Iterable[Mapping]]


def load_records_csv(path: str, *, low_memory: bool = False) -> pd.DataFrame:
    """
    Load an exported profit/loss or balance-sheet table.
    """
    return to_frame(pd.read_csv(path, low_memory=low_memory))


def to_frame(records: RecordSource) -> pd.DataFrame:
    """
    DataFrame from rows or mappings; known amount columns are coerced to numbers
    (unparseable values become NaN).
    """
    df = records.copy() if isinstance(records, pd.DataFrame) else pd.DataFrame(list(records))
    for col in _NUMERIC_COLUMNS & set(df.columns):
        df[col] = pd.to_numeric(df[col], errors="coerce")
    return df
