"""Order number value object."""
from dataclasses import dataclass


@dataclass(frozen=True)
class OrderNumber:
    """
    Customer-facing store order number.

    Store order numbers are plain digit strings (e.g. "12345").
    Leading/trailing whitespace and a leading '#' are stripped.
    """
    value: str

    def __post_init__(self):
        cleaned = str(self.value).strip().lstrip("#")
        object.__setattr__(self, "value", cleaned)

        if not cleaned:
            raise ValueError("Order number cannot be empty")

        if not cleaned.isdigit():
            raise ValueError(
                f"Order number must contain digits only: {self.value}"
            )

    def __str__(self) -> str:
        return self.value
