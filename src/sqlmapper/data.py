"""
Loading mapped records into pandas.
"""
from collections.abc import Sequence
from typing import Any

import pandas as pd
from sqlmapper.fields_map import FieldsMap, new_record

__all__ = ['records_to_frame']


def _column_types(fm: FieldsMap) -> dict[str, dict]:
    return {f.tag: {'name': f.name, 'kind': f.kind.name, 'python_type': f.kind.value.__name__}
            for f in fm.fields}


def records_to_frame(records: Sequence[Any], record_type: type | None = None) -> pd.DataFrame:
    """DataFrame with one row per record and one column per mapped field.

    Columns are named after the database columns, in declared order. Always
    returns a DataFrame, with columns preserved for empty input when
    ``record_type`` is given. Type information goes in ``DataFrame.attrs``.
    """
    if record_type is None:
        if not records:
            return pd.DataFrame()
        record_type = type(records[0])

    fm = FieldsMap('', new_record(record_type))
    columns = fm.column_names()
    data = [FieldsMap('', record).values() for record in records]

    df = pd.DataFrame.from_records(data, columns=columns)
    df.attrs['column_types'] = _column_types(fm)
    return df
