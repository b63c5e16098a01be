"""Test StreamingPipeline chunking, consolidation and cleanup."""

from datetime import date
from pathlib import Path

import pytest

import tracemalloc

from cake_days.core.errors import DataError, MalformedRecordError, SpillStoreIOError
from cake_days.engine.batch import BatchScheduler
from cake_days.engine.rules import RuleEngine
from cake_days.pipeline.streaming import DEFAULT_CHUNK_SIZE, ProcessingResult, StreamingPipeline

YEAR = 2025


@pytest.fixture
def spill_dir(tmp_path: Path) -> Path:
    path = tmp_path / "spill"
    path.mkdir()
    return path


class TestRun:
    def test_default_chunk_size(self):
        assert DEFAULT_CHUNK_SIZE == 100

    def test_counts_persons_and_chunks(self, person, spill_dir):
        people = [person(f"p{i}", "1990-06-02") for i in range(5)]
        result = StreamingPipeline(chunk_size=2, spill_dir=spill_dir).run(people, YEAR)
        assert result.total_persons == 5
        assert result.total_chunks == 3
        assert result.converged

    def test_same_date_across_chunks_consolidated(self, person, spill_dir):
        people = [person("Rob", "1950-06-02"), person("Sam", "1980-06-02")]
        result = StreamingPipeline(chunk_size=1, spill_dir=spill_dir).run(people, YEAR)
        assert len(result.cake_days) == 1
        assert result.cake_days[0].large_cakes == 1
        assert result.cake_days[0].attendees == ("Rob", "Sam")

    def test_chunk_boundaries_authoritative_by_default(self, person, spill_dir):
        # Mon 6 and Tue 7 Jan end up in different chunks
        people = [person("Ann", "1990-01-03"), person("Bob", "1991-01-06")]
        result = StreamingPipeline(chunk_size=1, spill_dir=spill_dir).run(people, YEAR)
        assert [cd.date for cd in result.cake_days] == [date(2025, 1, 6), date(2025, 1, 7)]

    def test_reapply_rules_closes_the_gap(self, person, spill_dir):
        people = [person("Ann", "1990-01-03"), person("Bob", "1991-01-06")]
        pipeline = StreamingPipeline(chunk_size=1, spill_dir=spill_dir, reapply_rules=True)
        result = pipeline.run(people, YEAR)
        assert [cd.date for cd in result.cake_days] == [date(2025, 1, 7)]
        assert result.cake_days[0].large_cakes == 1

    def test_within_chunk_rules_applied(self, person, spill_dir):
        people = [person("Ann", "1990-01-03"), person("Bob", "1991-01-06")]
        result = StreamingPipeline(chunk_size=10, spill_dir=spill_dir).run(people, YEAR)
        assert [cd.date for cd in result.cake_days] == [date(2025, 1, 7)]

    def test_empty_source(self, spill_dir):
        result = StreamingPipeline(spill_dir=spill_dir).run([], YEAR)
        assert result.cake_days == []
        assert result.total_chunks == 0

    def test_non_convergence_surfaces(self, calendar, person, spill_dir):
        scheduler = BatchScheduler(RuleEngine(calendar=calendar, max_rounds=1))
        people = [person("Mon", "1990-01-13"), person("Tue", "1990-01-14"), person("Wed", "1990-01-15")]
        result = StreamingPipeline(scheduler=scheduler, spill_dir=spill_dir).run(people, YEAR)
        assert not result.converged

    def test_run_file(self, write_source, spill_dir):
        path = write_source(["# staff", "Dave,1986-06-02", "", "Rob,1950-07-05", "Sam,1980-07-05"])
        result = StreamingPipeline(spill_dir=spill_dir).run_file(path, YEAR)
        assert result.total_persons == 3
        assert [cd.date for cd in result.cake_days] == [date(2025, 6, 3), date(2025, 7, 8)]
        assert result.input_size_bytes == path.stat().st_size

    def test_zero_byte_file_rejected(self, tmp_path, spill_dir):
        path = tmp_path / "empty.txt"
        path.touch()
        with pytest.raises(DataError, match="File is empty"):
            StreamingPipeline(spill_dir=spill_dir).run_file(path, YEAR)

    def test_missing_file_is_data_error(self, tmp_path, spill_dir):
        with pytest.raises(DataError, match="Unable to read"):
            StreamingPipeline(spill_dir=spill_dir).run_file(tmp_path / "missing.txt", YEAR)

    def test_records_peak_memory(self, person, spill_dir):
        people = [person(f"p{i}", "1990-06-02") for i in range(50)]
        result = StreamingPipeline(chunk_size=10, spill_dir=spill_dir).run(people, YEAR)
        assert result.peak_memory_bytes > 0

    def test_memory_tracing_left_as_found(self, person, spill_dir):
        was_tracing = tracemalloc.is_tracing()
        StreamingPipeline(spill_dir=spill_dir).run([person("A", "1990-06-02")], YEAR)
        assert tracemalloc.is_tracing() == was_tracing


class TestCleanup:
    def test_spill_removed_after_success(self, person, spill_dir):
        StreamingPipeline(chunk_size=1, spill_dir=spill_dir).run([person("A", "1990-06-02")], YEAR)
        assert list(spill_dir.iterdir()) == []

    def test_spill_removed_when_parsing_fails(self, write_source, spill_dir):
        lines = [f"p{i},1990-06-02" for i in range(5)] + ["broken line"]
        path = write_source(lines)
        with pytest.raises(MalformedRecordError):
            StreamingPipeline(chunk_size=2, spill_dir=spill_dir).run_file(path, YEAR)
        assert list(spill_dir.iterdir()) == []

    def test_spill_removed_when_engine_fails(self, person, spill_dir):
        class ExplodingScheduler(BatchScheduler):
            def schedule(self, persons, year):
                raise RuntimeError("engine failure")

        with pytest.raises(RuntimeError, match="engine failure"):
            StreamingPipeline(scheduler=ExplodingScheduler(), spill_dir=spill_dir).run(
                [person("A", "1990-06-02")], YEAR
            )
        assert list(spill_dir.iterdir()) == []

    def test_unusable_spill_dir(self, person, tmp_path):
        pipeline = StreamingPipeline(spill_dir=tmp_path / "missing")
        with pytest.raises(SpillStoreIOError):
            pipeline.run([person("A", "1990-06-02")], YEAR)


class TestProcessingResult:
    def test_totals(self, cake_day):
        result = ProcessingResult(
            cake_days=[cake_day("2025-01-07", "A"), cake_day("2025-01-09", "B", "C")],
            processing_time_seconds=1.234,
        )
        assert result.total_cake_days == 2
        assert result.total_small_cakes == 1
        assert result.total_large_cakes == 1
        assert result.formatted_processing_time == "1.23 seconds"

    def test_megabyte_helpers(self):
        result = ProcessingResult(peak_memory_bytes=3 * 1024 * 1024 + 512 * 1024, input_size_bytes=10 * 1024)
        assert result.peak_memory_mb == 3.5
        assert result.input_size_mb == 0.01
