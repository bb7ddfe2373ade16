"""Domain error types."""


class DomainError(Exception):
    """Base domain error."""
    pass


class NotFoundError(DomainError):
    """Resource not found."""
    def __init__(self, resource: str, identifier: str):
        self.resource = resource
        self.identifier = identifier
        super().__init__(f"{resource} with id {identifier} not found")


class ValidationError(DomainError):
    """Validation error."""
    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class AuthorizationError(DomainError):
    """Authorization error."""
    def __init__(self, message: str = "Not authorized"):
        self.message = message
        super().__init__(message)


class InvalidTransitionError(DomainError):
    """Status change not allowed from the current state."""
    def __init__(self, resource: str, current: str, target: str):
        self.resource = resource
        self.current = current
        self.target = target
        self.message = f"Cannot move {resource} from {current} to {target}"
        super().__init__(self.message)


class ConflictError(DomainError):
    """Resource conflict error (a concurrent writer got there first)."""
    def __init__(self, message: str):
        self.message = message
        super().__init__(message)
