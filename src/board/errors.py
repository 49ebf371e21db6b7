"""Errors raised by the board managers."""


class BoardError(Exception):
    """Base class for board errors."""


class NotFoundError(BoardError):
    """A referenced record does not exist."""

    def __init__(self, entity: str, record_id: str):
        self.entity = entity
        self.record_id = record_id
        super().__init__(f"{entity} not found: {record_id}")


class InvalidOperationError(BoardError):
    """The operation would break a board rule."""


class UnauthorizedError(BoardError):
    """The caller is not allowed to run this operation."""
