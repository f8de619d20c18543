from __future__ import annotations

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    import pandas as pd


def is_polars_frame(data: Any) -> bool:
    _type = type(data)
    return _type.__name__ == "DataFrame" and (getattr(_type, "__module__", "") or "").startswith("polars")


def is_arrow_table(data: Any) -> bool:
    _type = type(data)
    return _type.__name__ == "Table" and (getattr(_type, "__module__", "") or "").startswith("pyarrow")


def to_pandas(data: Any) -> pd.DataFrame | Any:
    """Coerce Polars / PyArrow tables to pandas; return everything else unchanged."""
    if is_polars_frame(data) or is_arrow_table(data):
        from ._dependencies import import_optional_dependency

        import_optional_dependency("pyarrow", extra="It is required to convert Polars/Arrow input to pandas.")
        return data.to_pandas()
    return data
