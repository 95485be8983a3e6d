"""Display tables for extraction results."""
from collections.abc import Sequence
from typing import Any

import pandas as pd
from pydantic import BaseModel

from .models import Column

EMPTY_TABLE_MESSAGE = "No data available to display."


def table_rows(records: Sequence[BaseModel], columns: Sequence[Column]) -> list[list[Any]]:
    """Project records onto the given columns, in column order."""
    rows = []
    for record in records:
        data = record.model_dump(by_alias=True)
        rows.append([data.get(column.key) for column in columns])
    return rows


def to_dataframe(records: Sequence[BaseModel], columns: Sequence[Column]) -> pd.DataFrame:
    """Build a DataFrame with labeled columns in display order.

    Cells are rendered as text so mixed number/string columns show exactly
    what the model returned; missing values are empty strings.
    """
    rows = [
        ["" if value is None else str(value) for value in row]
        for row in table_rows(records, columns)
    ]
    return pd.DataFrame(rows, columns=[column.label for column in columns])
