"""Metadata for osmosis_check."""

__all__ = [
    "__title__",
    "__version__",
    "__description__",
    "__credits__",
    "__requires_python__",
]

__title__ = "osmosis_check"
__version__ = "0.1.0"
__description__ = (
    "Batch checker that fetches pages through CORS relays and reports which ones embed a video."
)
__credits__ = [
    {"name": "Matthew D. Martin", "email": "matthewdeanmartin@users.noreply.github.com"}
]
__requires_python__ = ">=3.9"
