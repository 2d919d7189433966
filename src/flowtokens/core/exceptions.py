"""Exceptions raised by the token issuing and lookup services."""


class FlowTokensError(Exception):
    """Base class for all Flow Tokens errors."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class StorageError(FlowTokensError):
    """Raised when the meta store cannot be read or written.

    Wraps the underlying database error so callers never have to
    import SQLAlchemy to handle a failed issue or lookup.
    """

    def __init__(self, message: str, operation: str | None = None) -> None:
        self.operation = operation
        super().__init__(message)


class TokenSpaceExhaustedError(FlowTokensError):
    """Raised when no unique token could be generated within the attempt budget."""

    def __init__(self, entity_kind: str, entity_id: int, attempts: int) -> None:
        self.entity_kind = entity_kind
        self.entity_id = entity_id
        self.attempts = attempts
        super().__init__(
            f"Could not generate a unique token for {entity_kind} {entity_id} "
            f"after {attempts} attempts"
        )


class UnknownEntityKindError(FlowTokensError):
    """Raised when an entity kind other than 'user' or 'post' is requested."""

    def __init__(self, kind: str) -> None:
        self.kind = kind
        super().__init__(f"Unknown entity kind: {kind!r}")


class MetaValueConflictError(StorageError):
    """Raised when a meta write collides with a value another entity already holds."""

    def __init__(self, meta_key: str, operation: str | None = None) -> None:
        self.meta_key = meta_key
        super().__init__(f"Value for meta key {meta_key!r} is already taken", operation)


class MetaKeyTakenError(StorageError):
    """Raised by an insert-only meta write when the entity already holds a value.

    Attributes:
        existing_value: The value the entity holds.
    """

    def __init__(self, meta_key: str, existing_value: str, operation: str | None = None) -> None:
        self.meta_key = meta_key
        self.existing_value = existing_value
        super().__init__(f"Entity already holds a value for meta key {meta_key!r}", operation)
