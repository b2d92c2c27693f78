class LensGridError(Exception):
    """Base class for lens-grid errors."""


class ValidationError(LensGridError):
    """Input rejected before any store call."""


class CellKeyError(ValidationError):
    pass


class NotFoundError(LensGridError):
    pass


class InsufficientStockError(LensGridError):
    def __init__(self, key: str, requested: int, available: int):
        self.key = key
        self.requested = int(requested)
        self.available = int(available)
        super().__init__(
            f"Only {self.available} lenses available for {key}. Requested: {self.requested}"
        )

    @property
    def shortfall(self) -> int:
        return self.requested - self.available


class StoreError(LensGridError):
    """A single record-store operation failed (network, constraint, ...)."""
