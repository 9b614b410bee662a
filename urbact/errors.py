# urbact/errors.py


class UrbactError(Exception):
    """Base class for errors raised by the toolkit itself."""


class CapacityExceededError(UrbactError):
    def __init__(self, limit: int):
        self.limit = limit
        super().__init__(
            f"You can only draw up to {limit} polygons. Please reset to draw new polygons."
        )


class InvalidGeometryError(UrbactError, ValueError):
    pass


class EmptyRegionError(UrbactError, ValueError):
    pass


class PixelBudgetExceededError(UrbactError, ValueError):
    def __init__(self, filename: str, pixels: float, budget: float):
        self.filename = filename
        self.pixels = pixels
        self.budget = budget
        super().__init__(
            f"Export '{filename}' needs about {pixels:.3g} pixels, over the budget of {budget:.3g}"
        )
