"""
Tests for dataset parsing and shape detection.
"""

import pytest

from wvhash.core.base import detect_shape
from wvhash.core.parsing import (
    check_serializable_key,
    iter_lines,
    iter_records,
    parse_record,
)
from wvhash.errors import MalformedRecordError

from conftest import write_dataset


class TestParseRecord:
    """Test turning one line into a record."""

    def test_valid_line(self):
        """Test a well-formed line."""
        record = parse_record("cat 1.0 2.5", 2)
        assert record.key == "cat"
        assert record.vector == (1.0, 2.5)
        assert record.dimension == 2

    def test_extra_whitespace(self):
        """Test tabs and repeated spaces are accepted."""
        record = parse_record("cat\t1.0   2.5  ", 2)
        assert record.vector == (1.0, 2.5)

    def test_wrong_field_count(self):
        """Test a short line is rejected with its line number."""
        with pytest.raises(MalformedRecordError) as exc_info:
            parse_record("cat 1.0", 2, source="data.txt", line_index=4)
        assert exc_info.value.line_number == 5
        assert exc_info.value.file_path == "data.txt"

    def test_non_numeric_field(self):
        """Test a non-numeric value is rejected."""
        with pytest.raises(MalformedRecordError):
            parse_record("cat 1.0 abc", 2)

    def test_comma_key_not_serializable(self):
        """Test keys containing a comma cannot go into an index file."""
        check_serializable_key("cat")
        with pytest.raises(MalformedRecordError):
            check_serializable_key("a,b")


class TestIterRecords:
    """Test iterating over a dataset file."""

    def test_blank_lines_skipped_but_counted(self, tmp_path):
        """Test blank lines are skipped while line indices stay physical."""
        path = write_dataset(tmp_path / "d.txt", ["cat 1 2", "", "dog 3 4"])
        assert [i for i, _ in iter_lines(path)] == [0, 2]

    def test_strict_raises(self, tmp_path):
        """Test strict mode raises on a malformed line."""
        path = write_dataset(tmp_path / "d.txt", ["cat 1 2", "dog 3"])
        with pytest.raises(MalformedRecordError):
            list(iter_records(path, 2))

    def test_lenient_skips(self, tmp_path):
        """Test lenient mode skips malformed lines and reports them."""
        path = write_dataset(tmp_path / "d.txt", ["cat 1 2", "dog 3", "bird 0 0"])
        skipped = []
        records = list(iter_records(path, 2, strict=False, on_skip=skipped.append))
        assert [r.key for _, r in records] == ["cat", "bird"]
        assert len(skipped) == 1
        assert skipped[0].line_number == 2


class TestDetectShape:
    """Test dataset shape detection."""

    def test_scenario_shape(self, scenario_dataset):
        """Test the vector size and record count of a small dataset."""
        shape = detect_shape(scenario_dataset)
        assert shape.is_valid
        assert shape.vector_size == 2
        assert shape.record_count == 3
        assert shape.line_count == 3

    def test_blank_lines_not_counted(self, tmp_path):
        """Test blank lines are excluded from the record count."""
        path = write_dataset(tmp_path / "d.txt", ["", "cat 1 2 3", "", "dog 4 5 6"])
        shape = detect_shape(path)
        assert shape.vector_size == 3
        assert shape.record_count == 2
        assert shape.line_count == 4

    def test_missing_file(self, tmp_path):
        """Test a missing file gives an invalid shape."""
        shape = detect_shape(tmp_path / "nope.txt")
        assert not shape.is_valid
        assert "cannot read" in shape.reason

    def test_empty_file(self, tmp_path):
        """Test an empty file gives an invalid shape."""
        path = tmp_path / "empty.txt"
        path.write_text("")
        assert not detect_shape(path).is_valid

    def test_keys_only(self, tmp_path):
        """Test a file of bare words has no vectors."""
        path = write_dataset(tmp_path / "words.txt", ["cat", "dog"])
        shape = detect_shape(path)
        assert shape.vector_size == 0
        assert not shape.is_valid
