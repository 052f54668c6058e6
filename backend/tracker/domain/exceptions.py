"""Domain-specific exceptions — framework-independent."""


class NotFoundError(Exception):
    """Raised when a requested entity does not exist."""

    def __init__(self, entity_type: str, entity_id: int | str):
        self.entity_type = entity_type
        self.entity_id = entity_id
        super().__init__(f"{entity_type} with number '{entity_id}' not found")


class PersistenceError(Exception):
    """Raised when the storage backend fails to execute an operation.

    The original exception is kept on ``cause`` (and chained as ``__cause__``)
    so callers can inspect what the database actually reported.
    """

    def __init__(self, operation: str, cause: Exception):
        self.operation = operation
        self.cause = cause
        super().__init__(f"{operation} failed: {cause}")
