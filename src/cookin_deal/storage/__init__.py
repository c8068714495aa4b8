"""Storage layer for saved deals and analysis exports."""

from .db import Storage
from .export import export_csv, export_json, render_worksheet, write_worksheet

__all__ = [
    "Storage",
    "export_csv",
    "export_json",
    "render_worksheet",
    "write_worksheet",
]
