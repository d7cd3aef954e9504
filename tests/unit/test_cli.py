"""Tests for the command-line entry point."""

import pytest

from postal_search.cli import build_parser, main


@pytest.fixture
def base_path(tmp_path):
    return tmp_path / "data"


def run(base_path, *args):
    return main(["--base-path", str(base_path), *args])


class TestParser:
    def test_download_flag(self):
        parser = build_parser()

        assert parser.parse_args(["rebuild"]).download is True
        assert parser.parse_args(["rebuild", "--no-download"]).download is False

    def test_source_csv_excludes_download(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args(["rebuild", "--source-csv", "x.csv", "--no-download"])


class TestCommands:
    def test_rebuild_then_search(self, base_path, catalogue_csv, capsys):
        assert run(base_path, "rebuild", "--source-csv", str(catalogue_csv)) == 0
        assert "Published index version" in capsys.readouterr().out

        assert run(base_path, "search", "千代田") == 0
        lines = capsys.readouterr().out.splitlines()

        assert lines == [
            '"1000001","東京都","千代田区","千代田"',
            '"1020072","東京都","千代田区","飯田橋"',
            "2 addresses matched",
        ]

    def test_search_words_are_joined(self, base_path, catalogue_csv, capsys):
        run(base_path, "rebuild", "--source-csv", str(catalogue_csv))
        capsys.readouterr()

        assert run(base_path, "search", "与那", "国") == 0

        assert capsys.readouterr().out.splitlines()[0].startswith('"9071801"')

    def test_search_no_match(self, base_path, catalogue_csv, capsys):
        run(base_path, "rebuild", "--source-csv", str(catalogue_csv))
        capsys.readouterr()

        assert run(base_path, "search", "大阪") == 0
        assert capsys.readouterr().out.strip() == "No addresses matched"

    def test_rebuild_from_extracted_source(self, base_path, ken_all_writer):
        ken_all_writer(base_path / "source" / "KEN_ALL.CSV")

        assert run(base_path, "rebuild", "--no-download") == 0

    def test_rebuild_missing_source(self, base_path):
        assert run(base_path, "rebuild", "--no-download") == 1

    def test_search_before_build(self, base_path):
        assert run(base_path, "search", "東京") == 1

    def test_stats(self, base_path, catalogue_csv, capsys):
        run(base_path, "rebuild", "--source-csv", str(catalogue_csv))
        capsys.readouterr()

        assert run(base_path, "stats") == 0
        out = capsys.readouterr().out

        assert "num_records: 5" in out

    def test_stats_before_build(self, base_path):
        assert run(base_path, "stats") == 1
