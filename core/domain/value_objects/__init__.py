"""Domain value objects."""

from .value_objects import ExecutionID
from .order_number import OrderNumber

__all__ = [
    "ExecutionID",
    "OrderNumber",
]
