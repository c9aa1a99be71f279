class DomainError(ValueError):
    """Base for business-rule failures raised by the services layer."""


class NotFoundError(DomainError):
    pass


class ConflictError(DomainError):
    pass


class ValidationError(DomainError):
    pass
