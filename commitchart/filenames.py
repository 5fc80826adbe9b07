"""Filesystem-safe names for chart files."""

_REPLACEMENTS = str.maketrans({
    " ": "_",
    ":": "-",
    "\\": "-",
    "/": "-",
})


def sanitize_filename(name: str) -> str:
    """Replace spaces with '_' and ':', '\\' and '/' with '-'."""
    return name.translate(_REPLACEMENTS)
