"""Human-readable renderings for listings and notifications."""

_SIZE_UNITS = ["Bytes", "KB", "MB", "GB", "TB"]


def format_file_size(size: int) -> str:
    """``1536`` -> ``"1.5 KB"``. Powers of 1024, at most two decimals."""
    if size <= 0:
        return "0 Bytes"
    exponent = 0
    while exponent < len(_SIZE_UNITS) - 1 and size >= 1024 ** (exponent + 1):
        exponent += 1
    value = round(size / 1024 ** exponent, 2)
    # 2.00 -> 2, 1.50 -> 1.5
    text = f"{value:.2f}".rstrip("0").rstrip(".")
    return f"{text} {_SIZE_UNITS[exponent]}"


def format_count(count: int, noun: str) -> str:
    """``format_count(3, "file")`` -> ``"3 files"``."""
    return f"{count} {noun}{'' if count == 1 else 's'}"
