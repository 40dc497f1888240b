"""
Error taxonomy shared by the parsing, service and repository layers.

The HTTP layer maps these onto status codes:
- `InvalidParameter` -> 400 (malformed or out-of-range client input)
- `NotFound` -> 404 (unknown station)
- anything else -> 500 with a generic message
"""


class InvalidParameter(ValueError):
    """A query-string parameter could not be parsed or was out of range."""

    def __init__(self, name: str, message: str):
        super().__init__(message)
        self.name = name
        self.message = message


class NotFound(LookupError):
    """The requested station does not exist in the station directory."""
