"""
Tests for the in-memory hash table.
"""

import math

import pytest

from wvhash.config import IndexConfig
from wvhash.core.hashing import bucket_index
from wvhash.core.types import Record
from wvhash.errors import InvalidIndexError, MalformedRecordError
from wvhash.memory_index import InMemoryIndex

from conftest import write_dataset


class TestBuild:
    """Test table construction."""

    def test_default_table_size(self, synthetic_dataset):
        """Test the table size follows record_count // 20."""
        index = InMemoryIndex(synthetic_dataset).build()
        assert index.table_size == 10
        assert len(index) == 200

    def test_small_dataset_gets_one_bucket(self, scenario_dataset):
        """Test the table never drops below one bucket."""
        index = InMemoryIndex(scenario_dataset)
        assert index.table_size == 1

    def test_explicit_table_size(self, synthetic_dataset):
        """Test an explicit table size wins over the configuration."""
        config = IndexConfig(table_size=50)
        index = InMemoryIndex(synthetic_dataset, config, table_size=7)
        assert index.table_size == 7

    def test_chain_keeps_insertion_order(self, scenario_dataset):
        """Test colliding records are appended to the chain tail."""
        index = InMemoryIndex(scenario_dataset, table_size=1).build()
        assert [r.key for r in index.bucket(0)] == ["cat", "dog", "bird"]

    def test_records_land_in_hashed_bucket(self, synthetic_dataset):
        """Test every record sits in the bucket its key hashes to."""
        index = InMemoryIndex(synthetic_dataset, table_size=13).build()
        for bucket in range(13):
            for record in index.bucket(bucket):
                assert bucket_index(record.key, 13) == bucket

    def test_build_is_idempotent(self, scenario_dataset):
        """Test building twice does not duplicate records."""
        index = InMemoryIndex(scenario_dataset).build()
        index.build()
        assert len(index) == 3

    def test_strict_malformed_line(self, tmp_path):
        """Test a malformed line aborts a strict build."""
        path = write_dataset(tmp_path / "d.txt", ["cat 1 2", "dog 3"])
        with pytest.raises(MalformedRecordError):
            InMemoryIndex(path).build()

    def test_failed_build_leaves_table_unchanged(self, tmp_path):
        """Test a failed strict build keeps none of the records read before the bad line."""
        path = write_dataset(tmp_path / "d.txt", ["cat 1 2", "dog 3 4", "bird 0"])
        index = InMemoryIndex(path, table_size=1)
        for _ in range(2):
            with pytest.raises(MalformedRecordError):
                index.build()

        assert len(index) == 0
        assert index.bucket(0) == []
        assert not index.lookup("cat").found

    def test_failed_build_keeps_added_records(self, tmp_path):
        """Test records added by hand survive a failed build."""
        path = write_dataset(tmp_path / "d.txt", ["cat 1 2", "bird 0"])
        index = InMemoryIndex(path, table_size=1)
        index.add(Record("cow", (5.0, 6.0)))
        with pytest.raises(MalformedRecordError):
            index.build()

        assert len(index) == 1
        assert [r.key for r in index.bucket(0)] == ["cow"]

    def test_lenient_malformed_line(self, tmp_path):
        """Test a malformed line is skipped in lenient mode."""
        path = write_dataset(tmp_path / "d.txt", ["cat 1 2", "dog 3", "bird 0 0"])
        index = InMemoryIndex(path, IndexConfig(strict_records=False)).build()
        assert len(index) == 2
        assert "dog" not in index
        assert index.stats().stored_records == 2

    def test_add_rejects_wrong_dimension(self, scenario_dataset):
        """Test records of another dimension are refused."""
        index = InMemoryIndex(scenario_dataset)
        with pytest.raises(ValueError):
            index.add(Record("cow", (1.0, 2.0, 3.0)))


class TestLookup:
    """Test key lookup."""

    def test_round_trip(self, synthetic_dataset, synthetic_vectors):
        """Test every key returns exactly its original vector."""
        index = InMemoryIndex(synthetic_dataset, table_size=7).build()
        for word, vector in synthetic_vectors.items():
            result = index.lookup(word)
            assert result.found
            assert result.vector == vector
            assert result.bucket == bucket_index(word, 7)

    def test_missing_key(self, scenario_dataset):
        """Test an absent key is reported as not found."""
        index = InMemoryIndex(scenario_dataset).build()
        result = index.lookup("zebra")
        assert not result.found
        assert result.vector is None

    def test_zero_vector_is_found(self, scenario_dataset):
        """Test an all-zero vector is a hit, not a miss."""
        index = InMemoryIndex(scenario_dataset).build()
        result = index.lookup("bird")
        assert result.found
        assert result.vector == (0.0, 0.0)

    def test_first_duplicate_wins(self, tmp_path):
        """Test the first record of a duplicated key is returned."""
        path = write_dataset(tmp_path / "d.txt", ["cat 1 2", "cat 9 9"])
        index = InMemoryIndex(path).build()
        assert index.lookup("cat").vector == (1.0, 2.0)

    def test_contains(self, scenario_dataset):
        """Test membership."""
        index = InMemoryIndex(scenario_dataset).build()
        assert "cat" in index
        assert "cow" not in index
        assert 3 not in index


class TestCompare:
    """Test pairwise comparison."""

    def test_scenario(self, scenario_dataset):
        """Test cosine similarity and distance of two known words."""
        index = InMemoryIndex(scenario_dataset, table_size=1).build()
        comparison = index.compare("cat", "dog")
        assert comparison.ok
        assert comparison.cosine_similarity == pytest.approx(11 / (5 * math.sqrt(5)))
        assert comparison.cosine_similarity == pytest.approx(0.9839, abs=1e-4)
        assert comparison.euclidean_distance == pytest.approx(math.sqrt(8))

    def test_zero_vector(self, scenario_dataset):
        """Test comparing with a zero vector resolves both words."""
        index = InMemoryIndex(scenario_dataset, table_size=1).build()
        comparison = index.compare("cat", "bird")
        assert comparison.ok
        assert comparison.missing == []
        assert math.isnan(comparison.cosine_similarity)
        assert comparison.euclidean_distance == pytest.approx(math.sqrt(5))

    def test_missing_word(self, scenario_dataset):
        """Test a missing word skips the metrics."""
        index = InMemoryIndex(scenario_dataset).build()
        comparison = index.compare("cat", "zebra")
        assert not comparison.ok
        assert comparison.missing == ["zebra"]
        assert comparison.cosine_similarity is None
        assert comparison.euclidean_distance is None

    def test_both_missing(self, scenario_dataset):
        """Test both missing words are reported in order."""
        index = InMemoryIndex(scenario_dataset).build()
        assert index.compare("zebra", "cow").missing == ["zebra", "cow"]


class TestStats:
    """Test table diagnostics."""

    def test_single_bucket(self, scenario_dataset):
        """Test diagnostics of a fully chained table."""
        stats = InMemoryIndex(scenario_dataset, table_size=1).build().stats()
        assert stats.vector_size == 2
        assert stats.record_count == 3
        assert stats.table_size == 1
        assert stats.empty_buckets == 0
        assert stats.longest_chain == 3
        assert stats.load_factor == 3.0
        assert stats.longest_chain_percentage == pytest.approx(100.0)

    def test_bucket_sizes_match_stats(self, synthetic_dataset):
        """Test diagnostics agree with a full scan of chain lengths."""
        index = InMemoryIndex(synthetic_dataset, table_size=31).build()
        sizes = index.bucket_sizes()
        stats = index.stats()
        assert sum(sizes) == 200
        assert stats.empty_buckets == sizes.count(0)
        assert stats.longest_chain == max(sizes)
        assert stats.empty_bucket_percentage == pytest.approx(100.0 * sizes.count(0) / 31)

    @pytest.mark.parametrize("index", [-1, 3])
    def test_bucket_out_of_range(self, scenario_dataset, index):
        """Test bucket numbers outside the table are refused instead of wrapping."""
        table = InMemoryIndex(scenario_dataset, table_size=3).build()
        with pytest.raises(IndexError):
            table.bucket(index)


class TestInvalidIndex:
    """Test that an invalid index refuses operations."""

    def test_empty_file(self, tmp_path):
        """Test an empty dataset yields an invalid index."""
        path = tmp_path / "empty.txt"
        path.write_text("")
        index = InMemoryIndex(path)
        assert not index.is_valid
        with pytest.raises(InvalidIndexError):
            index.build()
        with pytest.raises(InvalidIndexError):
            index.lookup("cat")
        with pytest.raises(InvalidIndexError):
            index.stats()

    def test_missing_file(self, tmp_path):
        """Test a missing dataset yields an invalid index."""
        index = InMemoryIndex(tmp_path / "nope.txt")
        assert not index.is_valid
        with pytest.raises(InvalidIndexError) as exc_info:
            index.compare("cat", "dog")
        assert "nope.txt" in exc_info.value.message

    def test_invalid_table_size(self, scenario_dataset):
        """Test a non-positive explicit table size is rejected."""
        with pytest.raises(ValueError):
            InMemoryIndex(scenario_dataset, table_size=0)
