"""Custom exceptions for storefront."""


class StorefrontError(Exception):
    """Base exception for all storefront errors."""

    pass


class ValidationError(StorefrontError):
    """Raised when caller-supplied input is rejected before touching storage."""

    def __init__(self, field: str, reason: str):
        self.field = field
        self.reason = reason
        super().__init__(f"Invalid {field}: {reason}")


class EmptyCartError(ValidationError):
    """Raised when checking out a cart with no items."""

    def __init__(self, user_id: str):
        self.user_id = user_id
        super().__init__("cart", f"cart for {user_id} is empty")


class StorageError(StorefrontError):
    """Raised when the persistent store fails to read, write or decode a key."""

    def __init__(self, key: str, operation: str, detail: str | None = None):
        self.key = key
        self.operation = operation
        msg = f"Storage {operation} failed for key '{key}'"
        if detail:
            msg = f"{msg}: {detail}"
        super().__init__(msg)


class NotAuthenticatedError(StorefrontError):
    """Raised when a user-scoped mutation runs with no active user."""

    def __init__(self, action: str):
        self.action = action
        super().__init__(f"Cannot {action}: no user is logged in.")
