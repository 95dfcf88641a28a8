"""Domain-level exceptions.

All business rule violations are expressed as subclasses of DomainException
so the CLI and HTTP layers can catch them uniformly and map them to
user-facing messages and status codes.
"""


class DomainException(Exception):
    """Base class for all domain errors."""


class ValidationError(DomainException):
    """Input was malformed or a value invariant was violated."""


class EntityNotFoundError(DomainException):
    """A requested entity does not exist."""


class UserNotFoundError(EntityNotFoundError):

    def __init__(self, user_id: str) -> None:
        self.user_id = user_id
        super().__init__(f"User not found: {user_id}")


class BookNotFoundError(EntityNotFoundError):

    def __init__(self, book_id: str) -> None:
        self.book_id = book_id
        super().__init__(f"Book not found with ID: {book_id}")


class OrderNotFoundError(EntityNotFoundError):

    def __init__(self, order_id: str) -> None:
        self.order_id = order_id
        super().__init__(f"Order not found: {order_id}")


class InsufficientInventoryError(DomainException):
    """The requested quantity exceeds the book's available stock."""

    def __init__(self, book_id: str, title: str, requested: int, available: int) -> None:
        self.book_id = book_id
        self.title = title
        self.requested = requested
        self.available = available
        super().__init__(
            f'Insufficient inventory for "{title}". '
            f"Requested: {requested}, available: {available}"
        )


class InvalidStateTransitionError(DomainException):
    """An order status change is not allowed from the current status."""

    def __init__(self, current_status: str, message: str) -> None:
        self.current_status = current_status
        super().__init__(message)


class NotAuthorizedError(DomainException):
    """The requester may not act on this resource."""
