"""Domain errors raised by the service layer and translated by the routers."""


class WarehouseError(Exception):
    """Base class for expected, request-local failures."""


class ConflictError(WarehouseError):
    """The resource already exists (e.g. a taken username)."""


class InvalidCredentialsError(WarehouseError):
    """Unknown user or wrong password. Deliberately does not say which."""

    def __init__(self, message: str = "Invalid credentials"):
        super().__init__(message)


class InvalidSortFieldError(WarehouseError):
    def __init__(self, sort_field: str):
        self.sort_field = sort_field
        super().__init__(f"Cannot sort products by '{sort_field}'")
