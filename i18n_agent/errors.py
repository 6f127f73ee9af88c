"""Exception types shared across the translation assistant."""


class AgentError(Exception):
    """Base error for the translation assistant."""


class StoreError(AgentError):
    """Base error raised by the translation store."""


class NotFoundError(StoreError):
    """A language or translation addressed by its natural key does not exist."""


class ConflictError(StoreError):
    """A row with the same natural key already exists."""


class InvariantError(StoreError):
    """The operation would break a store invariant (e.g. the default language rules)."""


class StoreValidationError(StoreError):
    """Input data for a store operation is missing or malformed."""

    def __init__(self, errors: list[str]):
        self.errors = errors
        super().__init__(", ".join(errors))


