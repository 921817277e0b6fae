"""Service-layer exceptions shared by routers."""

from uuid import UUID


class DuplicateError(ValueError):
    """Raised when a unique field collides with an existing record (maps to 409)."""

    def __init__(self, message: str, existing_id: UUID | None = None):
        super().__init__(message)
        self.existing_id = existing_id


class InvalidTransitionError(ValueError):
    """Raised when a status change is not allowed from the current status."""

    def __init__(self, current: str, target: str):
        self.current = current
        self.target = target
        super().__init__(f"Cannot change status from {current} to {target}")
