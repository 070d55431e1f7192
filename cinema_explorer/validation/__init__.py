"""
Validation of raw tables before they become a Dataset or an AxisOrderStore.
"""

from .errors import FormatError, ValidationIssue
from .table_validation import validate_axis_order_table, validate_data_table

__all__ = ["FormatError", "ValidationIssue", "validate_axis_order_table", "validate_data_table"]
