from __future__ import annotations

import math
from typing import Sequence

from cinema_explorer.core.csv_parser import Grid, parse_number
from cinema_explorer.validation.errors import FormatError, ValidationIssue


def _ragged(grid: Grid) -> bool:
    width = len(grid[0])
    return any(len(row) != width for row in grid)


def validate_data_table(grid: Grid) -> None:
    """
    Check the primary table (data.csv) before building a Dataset.

    Raises FormatError listing every problem found.
    """
    issues: list[ValidationIssue] = []

    if len(grid) < 2:
        issues.append(
            ValidationIssue("TABLE_TOO_FEW_LINES", "The first and second lines in the file are required.")
        )
        raise FormatError(issues)

    header = grid[0]
    if len(header) < 2:
        issues.append(
            ValidationIssue("TABLE_TOO_FEW_COLUMNS", "The dataset must include at least two dimensions.")
        )

    if any(name is None for name in header):
        issues.append(
            ValidationIssue("TABLE_HEADER_MISSING", "Empty values may not occur in the header (first line).")
        )

    present = [name for name in header if name is not None]
    duplicates = sorted({name for name in present if present.count(name) > 1})
    if duplicates:
        issues.append(
            ValidationIssue("TABLE_DUPLICATE_HEADER", f"Dimension names must be unique, repeated: {duplicates}.")
        )

    if _ragged(grid):
        issues.append(
            ValidationIssue(
                "TABLE_RAGGED_ROWS",
                "Each line must have an equal number of comma separated values (columns).",
            )
        )

    if issues:
        raise FormatError(issues)


def validate_axis_order_table(grid: Grid, dimensions: Sequence[str]) -> None:
    """
    Check an axis_order.csv table against the dimensions of the loaded Dataset.

    Header is ``[category, value, dim_1, dim_2, ...]``; data rows carry a
    category, a label and one numeric (or missing) priority per dimension.
    """
    issues: list[ValidationIssue] = []

    if len(grid) < 2:
        issues.append(ValidationIssue("AXIS_TOO_FEW_LINES", "The first and second lines in the file are required."))
        raise FormatError(issues)

    if _ragged(grid):
        issues.append(
            ValidationIssue(
                "AXIS_RAGGED_ROWS",
                "Each line must have an equal number of comma separated values (columns).",
            )
        )
        # column-wise checks below would be meaningless
        raise FormatError(issues)

    known = set(dimensions)
    for name in grid[0][2:]:
        if name not in known:
            issues.append(
                ValidationIssue("AXIS_UNKNOWN_DIMENSION", f"Dimension in axis order file '{name}' is not valid.")
            )

    for row in grid:
        if len(row) < 1 or row[0] is None:
            issues.append(ValidationIssue("AXIS_CATEGORY_MISSING", "Category cannot be undefined."))
            break
    for row in grid:
        if len(row) < 2 or row[1] is None:
            issues.append(ValidationIssue("AXIS_VALUE_MISSING", "Value cannot be undefined."))
            break

    for row in grid[1:]:
        bad = [cell for cell in row[2:] if cell is not None and _not_a_priority(cell)]
        if bad:
            issues.append(
                ValidationIssue("AXIS_PRIORITY_NOT_NUMERIC", f"Values for dimensions must be numbers, got '{bad[0]}'.")
            )
            break

    if issues:
        raise FormatError(issues)


def _not_a_priority(cell: str) -> bool:
    value = parse_number(cell)
    return value is None or math.isnan(value)
