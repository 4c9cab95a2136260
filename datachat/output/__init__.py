"""Output writers."""

from .excel_writer import ExcelWriter

__all__ = ["ExcelWriter"]
