"""Database models."""

from .report import ReportRecord

__all__ = ["ReportRecord"]
