from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence, Tuple

from cinema_explorer.core.csv_parser import Grid, parse_number
from cinema_explorer.validation.table_validation import validate_axis_order_table


@dataclass(frozen=True)
class AxisOrdering:
    """One named ordering variant (a data line of axis_order.csv)."""

    name: str
    order: Tuple[str, ...]


class AxisOrderStore:
    """
    Preferred axis orderings grouped by category, parsed from axis_order.csv.

    Each ordering lists the table's dimensions ascending by priority; a
    dimension with no priority goes to the end, ties keep column order.
    """

    def __init__(self, orderings: Dict[str, List[AxisOrdering]]):
        self._orderings = orderings

    @classmethod
    def from_table(cls, grid: Grid, dimensions: Sequence[str]) -> "AxisOrderStore":
        """
        :raises FormatError: if the table is malformed or names unknown dimensions
        """
        validate_axis_order_table(grid, dimensions)

        dim_names: List[str] = list(grid[0][2:])
        orderings: Dict[str, List[AxisOrdering]] = {}

        for row in grid[1:]:
            category, label = row[0], row[1]
            priorities = [parse_number(cell) for cell in row[2:]]

            ranked = sorted(
                range(len(dim_names)),
                key=lambda j: (priorities[j] is None, priorities[j] if priorities[j] is not None else 0.0),
            )
            ordering = AxisOrdering(name=label, order=tuple(dim_names[j] for j in ranked))
            orderings.setdefault(category, []).append(ordering)

        return cls(orderings)

    @property
    def categories(self) -> List[str]:
        return list(self._orderings)

    def orderings(self, category: str) -> List[AxisOrdering]:
        try:
            return list(self._orderings[category])
        except KeyError:
            raise KeyError(f"Axis order category '{category}' not found")

    def order_for(self, category: str, name: str) -> Optional[Tuple[str, ...]]:
        for ordering in self.orderings(category):
            if ordering.name == name:
                return ordering.order
        return None

    def __len__(self) -> int:
        return sum(len(v) for v in self._orderings.values())
