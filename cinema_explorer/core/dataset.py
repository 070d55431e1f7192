from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple, TYPE_CHECKING

import numpy as np
import pandas as pd

from cinema_explorer.core.csv_parser import Grid, parse_number
from cinema_explorer.validation.table_validation import validate_data_table

if TYPE_CHECKING:
    from cinema_explorer.core.axis_order import AxisOrderStore

logger = logging.getLogger(__name__)


class DimensionType(Enum):
    INTEGER = 0
    FLOAT = 1
    CATEGORICAL = 2


@dataclass(frozen=True)
class Dimension:
    """
    A named, typed column of a Dataset.

    - numeric domain: (min, max) over all non-missing, non-NaN values,
      (0.0, 0.0) when the column has none
    - categorical domain: the raw per-row values in row order (not
      deduplicated, missing values included); see Dataset.categories()
    """

    name: str
    type: DimensionType
    domain: Tuple[Any, ...]

    @property
    def is_categorical(self) -> bool:
        return self.type is DimensionType.CATEGORICAL

    @property
    def is_numeric(self) -> bool:
        return not self.is_categorical


def infer_dimension_type(raw: Sequence[Optional[str]]) -> DimensionType:
    """
    Type a column from its first present value only.

    A column whose first present value is integral stays INTEGER even if
    later rows are fractional.
    """
    first = next((v for v in raw if v is not None), None)
    number = parse_number(first)
    if number is None:
        return DimensionType.CATEGORICAL
    if math.isnan(number) or not number.is_integer():
        return DimensionType.FLOAT
    return DimensionType.INTEGER


def _numeric_column(raw: Sequence[Optional[str]]) -> np.ndarray:
    values = np.full(len(raw), np.nan, dtype=float)
    for i, cell in enumerate(raw):
        number = parse_number(cell)
        if number is not None:
            values[i] = number
    return values


def _numeric_domain(values: np.ndarray) -> Tuple[float, float]:
    present = values[~np.isnan(values)]
    if present.size == 0:
        return (0.0, 0.0)
    return (float(present.min()), float(present.max()))


def normalize(value, low: float, high: float):
    """Position of value between low and high, as 0..1. Degenerate range -> 0."""
    if high - low == 0:
        return value * 0.0
    return (value - low) / (high - low)


class Dataset:
    """
    In-memory Cinema database: ordered dimensions + immutable rows.

    Includes:
    - per-dimension type inference and domains, computed once at load time
    - a pandas DataFrame view of the rows (float columns for numeric
      dimensions, object columns for categorical ones)
    - the normalised similarity query (get_similar)
    - knowledge of which columns are file references (name prefix)
    """

    DEFAULT_FILE_PREFIX = "FILE"

    # -------------------------------------------------------------------------
    # Constructor
    # -------------------------------------------------------------------------
    def __init__(
        self,
        name: str,
        dimensions: Sequence[Dimension],
        columns: Mapping[str, np.ndarray],
        missing: Mapping[str, np.ndarray],
        file_prefix: str = DEFAULT_FILE_PREFIX,
        directory: Optional[Path] = None,
    ) -> None:
        self.name = name
        self.directory = directory
        self.file_prefix = file_prefix

        self._dimensions: List[Dimension] = list(dimensions)
        self._by_name: Dict[str, Dimension] = {d.name: d for d in self._dimensions}

        self._columns: Dict[str, np.ndarray] = {}
        self._missing: Dict[str, np.ndarray] = {}
        for dim in self._dimensions:
            col = np.asarray(columns[dim.name], dtype=object if dim.is_categorical else float)
            col.flags.writeable = False
            mask = np.asarray(missing[dim.name], dtype=bool)
            mask.flags.writeable = False
            self._columns[dim.name] = col
            self._missing[dim.name] = mask

        lengths = {len(c) for c in self._columns.values()}
        if len(lengths) > 1:
            raise ValueError(f"Columns of dataset '{name}' have different lengths: {sorted(lengths)}")
        self._row_count = lengths.pop() if lengths else 0

        self._frame: Optional[pd.DataFrame] = None
        self._rows: Optional[List[Dict[str, Any]]] = None

        # filled in by the loader when axis_order.csv is present and valid
        self.has_axis_ordering = False
        self.axis_order: Optional["AxisOrderStore"] = None

    @classmethod
    def from_table(
        cls,
        grid: Grid,
        name: str = "",
        file_prefix: str = DEFAULT_FILE_PREFIX,
        directory: Optional[Path] = None,
    ) -> "Dataset":
        """
        Build a Dataset from a parsed table (header line + data lines).

        :raises FormatError: if the table is not a valid primary table
        """
        validate_data_table(grid)

        header: List[str] = list(grid[0])
        body = grid[1:]

        dimensions: List[Dimension] = []
        columns: Dict[str, np.ndarray] = {}
        missing: Dict[str, np.ndarray] = {}

        for j, dim_name in enumerate(header):
            raw = [row[j] for row in body]
            dim_type = infer_dimension_type(raw)
            missing[dim_name] = np.array([v is None for v in raw], dtype=bool)

            if dim_type is DimensionType.CATEGORICAL:
                columns[dim_name] = np.array(raw, dtype=object)
                domain: Tuple[Any, ...] = tuple(raw)
            else:
                values = _numeric_column(raw)
                columns[dim_name] = values
                domain = _numeric_domain(values)

            dimensions.append(Dimension(name=dim_name, type=dim_type, domain=domain))

        logger.debug(
            "Inferred dimension types",
            extra={"dataset": name, "types": {d.name: d.type.name for d in dimensions}},
        )

        return cls(
            name=name,
            dimensions=dimensions,
            columns=columns,
            missing=missing,
            file_prefix=file_prefix,
            directory=directory,
        )

    # -------------------------------------------------------------------------
    # Dimensions
    # -------------------------------------------------------------------------
    @property
    def dimensions(self) -> List[Dimension]:
        return list(self._dimensions)

    @property
    def dimension_names(self) -> List[str]:
        return [d.name for d in self._dimensions]

    @property
    def dimension_types(self) -> Dict[str, DimensionType]:
        return {d.name: d.type for d in self._dimensions}

    @property
    def dimension_domains(self) -> Dict[str, Tuple[Any, ...]]:
        return {d.name: d.domain for d in self._dimensions}

    def dimension(self, name: str) -> Dimension:
        try:
            return self._by_name[name]
        except KeyError:
            raise KeyError(f"Dimension '{name}' not found in dataset '{self.name}'")

    def is_categorical(self, name: str) -> bool:
        return self.dimension(name).is_categorical

    def is_file_dimension(self, name: str) -> bool:
        return bool(self.file_prefix) and name.startswith(self.file_prefix)

    @property
    def file_dimensions(self) -> List[str]:
        """Columns holding file references (excluded from scaling and brushing)."""
        return [n for n in self.dimension_names if self.is_file_dimension(n)]

    @property
    def plottable_dimensions(self) -> List[str]:
        return [n for n in self.dimension_names if not self.is_file_dimension(n)]

    def categories(self, name: str) -> List[str]:
        """Distinct present values of a categorical dimension, first-seen order."""
        dim = self.dimension(name)
        if not dim.is_categorical:
            raise ValueError(f"Dimension '{name}' is not categorical")
        return list(dict.fromkeys(v for v in dim.domain if v is not None))

    # -------------------------------------------------------------------------
    # Rows
    # -------------------------------------------------------------------------
    @property
    def row_count(self) -> int:
        return self._row_count

    def __len__(self) -> int:
        return self._row_count

    def column(self, name: str) -> np.ndarray:
        """Read-only column: float (NaN for missing) or object (None for missing)."""
        self.dimension(name)
        return self._columns[name]

    def numeric_values(self, name: str) -> np.ndarray:
        if self.is_categorical(name):
            raise ValueError(f"Dimension '{name}' is not numeric")
        return self._columns[name]

    def missing_mask(self, name: str) -> np.ndarray:
        self.dimension(name)
        return self._missing[name]

    def row(self, index: int) -> Dict[str, Any]:
        return dict(self.rows[index])

    @property
    def rows(self) -> List[Dict[str, Any]]:
        """
        Rows as dicts; missing cells are None, numeric cells are floats
        (NaN for a present but non-numeric value).
        """
        if self._rows is None:
            rows: List[Dict[str, Any]] = [{} for _ in range(self._row_count)]
            for dim in self._dimensions:
                col = self._columns[dim.name]
                miss = self._missing[dim.name]
                for i in range(self._row_count):
                    if miss[i]:
                        rows[i][dim.name] = None
                    elif dim.is_categorical:
                        rows[i][dim.name] = col[i]
                    else:
                        rows[i][dim.name] = float(col[i])
            self._rows = rows
        return self._rows

    @property
    def frame(self) -> pd.DataFrame:
        """All rows as a DataFrame indexed by row position."""
        if self._frame is None:
            self._frame = pd.DataFrame(
                {name: pd.Series(col, dtype=col.dtype) for name, col in self._columns.items()},
                index=pd.RangeIndex(self._row_count),
                columns=self.dimension_names,
            )
        return self._frame

    def subset_frame(self, indices: Iterable[int]) -> pd.DataFrame:
        return self.frame.iloc[list(indices)]

    # -------------------------------------------------------------------------
    # Similarity query
    # -------------------------------------------------------------------------
    def distances(self, query: Mapping[str, Any]) -> np.ndarray:
        """
        Normalised Manhattan distance from every row to a (partial) query point.

        Per dimension present in the query:
        - categorical: 0 if equal, else 1
        - numeric, NaN query: 0 if the row is NaN or missing, else 1
        - numeric, defined query: 1 if the row is NaN or missing, else the
          difference of the values normalised over the dimension's domain
        Dimensions absent from the query (or set to None) add nothing.
        """
        dist = np.zeros(self._row_count, dtype=float)

        for name, value in query.items():
            if value is None or name not in self._by_name:
                continue
            dim = self._by_name[name]
            col = self._columns[name]

            if dim.is_categorical:
                target = value if isinstance(value, str) else str(value)
                dist += (col != target).astype(float)
                continue

            q = _query_number(value)
            row_nan = np.isnan(col)
            if math.isnan(q):
                dist += np.where(row_nan, 0.0, 1.0)
            else:
                low, high = dim.domain
                with np.errstate(invalid="ignore"):
                    diff = np.abs(normalize(q, low, high) - normalize(col, low, high))
                dist += np.where(row_nan, 1.0, diff)

        return dist

    def get_similar(self, query: Mapping[str, Any], threshold: float) -> List[int]:
        """Indices of all rows whose distance to the query is <= threshold."""
        dist = self.distances(query)
        return np.flatnonzero(dist <= float(threshold)).tolist()

    # -------------------------------------------------------------------------
    # Sorting
    # -------------------------------------------------------------------------
    def sort_indices(self, indices: Iterable[int], dimension: str, descending: bool = False) -> List[int]:
        """
        Sort row indices by their value on one dimension.

        Ascending: missing first, then NaN, then values.
        Descending: values (largest first), then NaN, then missing.
        """
        dim = self.dimension(dimension)
        col = self._columns[dimension]
        miss = self._missing[dimension]
        indices = list(indices)

        missing_rows = [i for i in indices if miss[i]]
        if dim.is_categorical:
            nan_rows: List[int] = []
            valued = [i for i in indices if not miss[i]]
        else:
            nan_rows = [i for i in indices if not miss[i] and math.isnan(col[i])]
            valued = [i for i in indices if not miss[i] and not math.isnan(col[i])]

        valued = sorted(valued, key=lambda i: col[i], reverse=descending)

        if descending:
            return valued + nan_rows + missing_rows
        return missing_rows + nan_rows + valued

    # -------------------------------------------------------------------------
    # Axis ordering
    # -------------------------------------------------------------------------
    def attach_axis_order(self, store: Optional["AxisOrderStore"]) -> None:
        self.axis_order = store
        self.has_axis_ordering = store is not None

    def __repr__(self) -> str:
        return f"Dataset(name={self.name!r}, rows={self._row_count}, dimensions={self.dimension_names})"


def _query_number(value: Any) -> float:
    if isinstance(value, (int, float, np.integer, np.floating)) and not isinstance(value, bool):
        return float(value)
    number = parse_number(str(value))
    return math.nan if number is None else number
