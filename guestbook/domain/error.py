"""Domain layer errors."""


class DomainError(Exception):
    """Base domain error."""

    pass


class ValidationError(DomainError):
    """User input rejected before reaching the remote store."""

    pass


class ParentNotFoundError(ValidationError):
    """Raised when replying to a comment that is not in the current tree."""

    def __init__(self, parent_id: str):
        self.parent_id = parent_id
        super().__init__(f"Parent comment not found: {parent_id}")


class MaxDepthExceededError(ValidationError):
    """Raised when a reply would exceed the maximum depth and policy rejects it."""

    def __init__(self, parent_id: str, max_depth: int):
        self.parent_id = parent_id
        self.max_depth = max_depth
        super().__init__(
            f"Comment {parent_id} is already at the maximum reply depth ({max_depth})"
        )


class PermissionDeniedError(DomainError):
    """Raised when the current session may not perform a destructive operation."""

    def __init__(self, action: str, resource_id: str | None = None):
        self.action = action
        self.resource_id = resource_id
        target = f"comment {resource_id}" if resource_id else "comments"
        super().__init__(f"Not authorized to {action} {target}")


class RemoteError(DomainError):
    """The remote store failed or rejected a write."""

    pass


class FetchError(DomainError):
    """Loading the flat list from the remote store failed."""

    pass


class NotFoundError(DomainError):
    """Raised when a requested resource is not found."""

    def __init__(self, resource: str, identifier: str):
        self.resource = resource
        self.identifier = identifier
        super().__init__(f"{resource} not found: {identifier}")


class MutationInProgressError(DomainError):
    """Raised when the same action on the same target is already submitting."""

    def __init__(self, action: str, target: str | None):
        self.action = action
        self.target = target
        super().__init__(f"{action} already in progress for {target or 'thread'}")
