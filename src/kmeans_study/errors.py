"""
Error types raised by kmeans_study.

All argument validation happens once at entry; numeric internals do not
raise for finite input.
"""


class InvalidArgumentError(ValueError):
    """Raised when a caller passes a malformed dataset, k, range or assignment."""
