import io

import pandas as pd
import pytest

from canton_maps.errors import MissingColumnError
from canton_maps.tabular import RegionValue, load_table, region_values


class TestLoadTable:

    def test_load_from_bytes(self, csv_bytes):
        df = load_table(csv_bytes)
        assert list(df.columns) == ['Canton', 'Total', 'Year']
        assert len(df) == 3

    def test_numeric_values_are_inferred(self, csv_bytes):
        df = load_table(csv_bytes)
        assert pd.api.types.is_numeric_dtype(df['Total'])
        assert df['Total'].tolist() == [5, 15, 25]
        assert df['Canton'].tolist() == ['A', 'B', 'C']

    def test_load_from_path(self, csv_file):
        assert len(load_table(csv_file)) == 3
        assert len(load_table(str(csv_file))) == 3

    def test_load_from_file_object(self, csv_bytes):
        assert len(load_table(io.BytesIO(csv_bytes))) == 3

    def test_semicolon_delimiter(self):
        df = load_table(b"Canton;Total\nZurich;1200\nBern;800\n")
        assert df['Total'].tolist() == [1200, 800]

    def test_missing_total_column(self):
        with pytest.raises(MissingColumnError) as exc_info:
            load_table(b"Canton,Value\nA,5\n")
        assert exc_info.value.missing == ['Total']
        assert exc_info.value.row == 0

    def test_missing_both_columns(self):
        with pytest.raises(MissingColumnError) as exc_info:
            load_table(b"Region,Value\nA,5\n")
        assert set(exc_info.value.missing) == {'Total', 'Canton'}

    def test_null_value_on_first_row(self):
        with pytest.raises(MissingColumnError) as exc_info:
            load_table(b"Canton,Total\n,5\nB,3\n")
        assert exc_info.value.missing == ['Canton']

    def test_only_first_row_is_validated(self):
        df = load_table(b"Canton,Total\nA,5\nB,\n")
        assert len(df) == 2
        assert pd.isna(df['Total'].iloc[1])

    def test_strict_validates_every_row(self):
        with pytest.raises(MissingColumnError) as exc_info:
            load_table(b"Canton,Total\nA,5\nB,\n", strict=True)
        assert exc_info.value.row == 1
        assert exc_info.value.missing == ['Total']

    def test_load_from_text(self):
        df = load_table("Canton,Total\nA,5\n")
        assert len(df) == 1
        assert df['Total'].tolist() == [5]

    def test_empty_upload(self):
        with pytest.raises(MissingColumnError) as exc_info:
            load_table(b"")
        assert exc_info.value.row is None

    def test_header_only(self):
        with pytest.raises(MissingColumnError) as exc_info:
            load_table(b"Canton,Total\n")
        assert exc_info.value.row is None


class TestRegionValues:

    def test_yields_one_value_per_named_row(self):
        rows = pd.DataFrame({'Canton': ['A', None, 'C'], 'Total': [5, 7, None]})
        assert list(region_values(rows)) == [
            RegionValue(name='A', total=5),
            RegionValue(name='C', total=None),
        ]

    def test_non_numeric_totals_become_none(self):
        rows = pd.DataFrame({'Canton': ['A', 'B'], 'Total': ['12', 'n/a']})
        values = list(region_values(rows))
        assert values[0].total == 12
        assert values[1].total is None
