"""
Grid state models and persistence gateways.

This package defines the row/column schema of the tracker grid and the
stores that keep the single "lamis_data" record durable: a local JSON file
and an S3 object encrypted with Fernet.
"""

from .models import COLUMNS, ROW_COUNT, STORAGE_KEY, GridState, RowFlags

__all__ = ["COLUMNS", "ROW_COUNT", "STORAGE_KEY", "GridState", "RowFlags"]
