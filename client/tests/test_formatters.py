import pytest

from mediatheque_client.formatters import format_count, format_file_size


@pytest.mark.parametrize("size,expected", [
    (0, "0 Bytes"),
    (512, "512 Bytes"),
    (1024, "1 KB"),
    (1536, "1.5 KB"),
    (10 * 1024 * 1024, "10 MB"),
    (3 * 1024 ** 3, "3 GB"),
])
def test_format_file_size(size, expected):
    assert format_file_size(size) == expected


def test_format_count():
    assert format_count(1, "file") == "1 file"
    assert format_count(0, "file") == "0 files"
