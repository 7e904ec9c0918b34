"""Exception types shared by the repository, services and HTTP layer."""


class ImmoError(Exception):
    """Base class for errors raised by the listings backend."""


class InvalidInputError(ImmoError):
    """Request data was rejected before reaching the data store."""


class NotFoundError(ImmoError):
    """The requested row does not exist or is not owned by the caller."""


class StoreError(ImmoError):
    """The data store failed while serving a request."""
