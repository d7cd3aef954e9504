"""Shared fixtures: a small KEN_ALL-style catalogue."""

from pathlib import Path

import pytest

from postal_search.records import RawRow

# (zip_code, prefecture, city, town) in file order. The two 6050874 rows are
# one logical address split across lines.
SAMPLE_ROWS = [
    ("1000001", "東京都", "千代田区", "千代田"),
    ("1020072", "東京都", "千代田区", "飯田橋"),
    ("0600042", "北海道", "札幌市中央区", "大通西（１～１９丁目）"),
    ("6050874", "京都府", "京都市東山区", "常盤町（東大路通松原上る３丁目、"),
    ("6050874", "京都府", "京都市東山区", "松原通東大路東入）"),
    ("9071801", "沖縄県", "八重山郡与那国町", "与那国"),
]


def ken_all_line(zip_code: str, prefecture: str, city: str, town: str) -> str:
    """Render one row in the 15-column KEN_ALL layout."""
    fields = [
        "13101",
        zip_code[:3] + "  ",
        zip_code,
        "ﾄｳｷｮｳﾄ",
        "ﾁﾖﾀﾞｸ",
        "ﾁﾖﾀﾞ",
        prefecture,
        city,
        town,
        "0",
        "0",
        "0",
        "0",
        "0",
        "0",
    ]
    return ",".join(f'"{field}"' for field in fields)


def write_ken_all_csv(path: Path, rows=SAMPLE_ROWS, encoding: str = "cp932") -> Path:
    """Write rows as a KEN_ALL-style CSV (no header, CRLF line endings)."""
    path.parent.mkdir(parents=True, exist_ok=True)
    text = "".join(ken_all_line(*row) + "\r\n" for row in rows)
    path.write_bytes(text.encode(encoding))
    return path


@pytest.fixture
def sample_rows() -> list[RawRow]:
    """Sample catalogue as RawRows."""
    return [RawRow(*row) for row in SAMPLE_ROWS]


@pytest.fixture
def catalogue_csv(tmp_path) -> Path:
    """Sample catalogue written as a cp932 CSV."""
    return write_ken_all_csv(tmp_path / "KEN_ALL.CSV")


@pytest.fixture
def sample_catalogue() -> list[tuple[str, str, str, str]]:
    """Sample catalogue as plain tuples."""
    return list(SAMPLE_ROWS)


@pytest.fixture
def ken_all_writer():
    """The CSV writer helper, for tests that need custom rows or encodings."""
    return write_ken_all_csv
