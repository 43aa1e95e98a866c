"""Typed exceptions raised by the service layer."""


class ResourceError(Exception):
    """Base class for resource operation failures."""


class ResourceNotFoundError(ResourceError):
    """No row with the requested id."""

    def __init__(self, entity: str, entity_id):
        self.entity = entity
        self.entity_id = entity_id
        super().__init__(f"{entity} {entity_id} not found")


class ResourceConflictError(ResourceError):
    """Create or update would violate a unique constraint."""


class InvalidReferenceError(ResourceError):
    """A foreign key points at a row that does not exist."""

    def __init__(self, field: str, message: str):
        self.field = field
        super().__init__(message)


class ResourceInUseError(ResourceError):
    """Delete blocked because other records still reference this one."""
