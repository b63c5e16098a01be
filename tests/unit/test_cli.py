"""Test the click CLI."""

import csv

import pytest
from click.testing import CliRunner

from cake_days.cli import main


@pytest.fixture
def runner():
    return CliRunner()


class TestCalculate:
    def test_writes_csv_and_summary(self, runner, write_source, tmp_path):
        source = write_source(["Dave,1986-06-02", "Rob,1950-07-05", "Sam,1980-07-05"])
        output = tmp_path / "out" / "cakes.csv"

        result = runner.invoke(main, ["calculate", str(source), str(output), "--year", "2025"])

        assert result.exit_code == 0, result.output
        assert "Total cake days   : 2" in result.output
        assert "Input size        :" in result.output
        assert "Peak memory       :" in result.output
        rows = list(csv.reader(output.open()))
        assert rows[0] == ["Date", "Small Cakes", "Large Cakes", "Names"]
        assert rows[1][0] == "2025-06-03 (Tuesday)"
        assert rows[2][3] == "Rob, Sam"

    def test_verbose_preview(self, runner, write_source, tmp_path):
        source = write_source(["Dave,1986-06-02"])
        result = runner.invoke(
            main, ["calculate", str(source), str(tmp_path / "c.csv"), "-y", "2025", "-v"]
        )
        assert result.exit_code == 0, result.output
        assert "2025-06-03 (Tuesday): Small cake for Dave" in result.output

    def test_empty_source(self, runner, write_source, tmp_path):
        source = write_source(["# nobody here"])
        output = tmp_path / "c.csv"
        result = runner.invoke(main, ["calculate", str(source), str(output), "--year", "2025"])
        assert result.exit_code == 0
        assert "No cake days" in result.output
        assert not output.exists()

    def test_malformed_record_fails(self, runner, write_source, tmp_path):
        source = write_source(["Dave,1986-06-02", "broken"])
        result = runner.invoke(main, ["calculate", str(source), str(tmp_path / "c.csv"), "--year", "2025"])
        assert result.exit_code == 1
        assert "Error on line 2" in result.output

    def test_invalid_utf8_reported_with_line_number(self, runner, tmp_path):
        source = tmp_path / "people.txt"
        source.write_bytes(b"Dave,1986-06-02\n\xff\xfeBad,1990-01-01\n")
        result = runner.invoke(main, ["calculate", str(source), str(tmp_path / "c.csv"), "--year", "2025"])
        assert result.exit_code == 1
        assert "Error on line 2: Invalid UTF-8" in result.output

    def test_zero_byte_input_rejected(self, runner, tmp_path):
        source = tmp_path / "people.txt"
        source.touch()
        result = runner.invoke(main, ["calculate", str(source), str(tmp_path / "c.csv"), "--year", "2025"])
        assert result.exit_code == 1
        assert "File is empty" in result.output

    @pytest.mark.parametrize("year", ["0", "9999"])
    def test_year_out_of_range(self, runner, write_source, tmp_path, year):
        source = write_source(["Noel,1990-12-31"])
        result = runner.invoke(main, ["calculate", str(source), str(tmp_path / "c.csv"), "--year", year])
        assert result.exit_code == 2
        assert "Invalid value" in result.output

    def test_last_supported_year(self, runner, write_source, tmp_path):
        source = write_source(["Noel,1990-12-31"])
        result = runner.invoke(main, ["calculate", str(source), str(tmp_path / "c.csv"), "--year", "9998"])
        assert result.exit_code == 0, result.output

    def test_missing_input(self, runner, tmp_path):
        result = runner.invoke(main, ["calculate", str(tmp_path / "none.txt"), str(tmp_path / "c.csv")])
        assert result.exit_code == 2

    def test_reapply_rules_flag(self, runner, write_source, tmp_path):
        source = write_source(["Ann,1990-01-03", "Bob,1991-01-06"])
        config = tmp_path / "cake.toml"
        config.write_text("[pipeline]\nchunk_size = 1\n")
        args = ["calculate", str(source), str(tmp_path / "c.csv"), "--year", "2025", "--config", str(config)]

        split = runner.invoke(main, args)
        merged = runner.invoke(main, args + ["--reapply-rules"])

        assert "Total cake days   : 2" in split.output
        assert "Total cake days   : 1" in merged.output
