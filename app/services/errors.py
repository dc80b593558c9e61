class ConflictError(ValueError):
    """Raised when a write would duplicate an existing record (HTTP 409)"""
