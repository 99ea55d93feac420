"""
Typed error kinds raised by the services.

Absence (an unknown id or name) is not an error: lookups and updates return
`None` for it. Everything else a caller can act on is one of the classes
below, each with a stable `code` the HTTP layer maps to a status.
"""

from __future__ import annotations


class RepositoryError(Exception):
    code = "repository_error"

    def __init__(self, message: str, *, field: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.field = field


class NoFieldsProvided(RepositoryError):
    code = "no_fields_provided"

    def __init__(self, allowed: tuple[str, ...]) -> None:
        super().__init__(f"Provide at least one of: {', '.join(allowed)}.")
        self.allowed = allowed


class DuplicateName(RepositoryError):
    code = "duplicate_name"

    def __init__(self, name: str) -> None:
        super().__init__(f"An artist named {name!r} already exists.", field="name")
        self.name = name


class DuplicateTitle(RepositoryError):
    code = "duplicate_title"

    def __init__(self, title: str) -> None:
        super().__init__(f"An album titled {title!r} already exists.", field="title")
        self.title = title


class ArtistNotFound(RepositoryError):
    code = "artist_not_found"

    def __init__(self, artist_id: int) -> None:
        super().__init__(f"Artist {artist_id} does not exist.", field="artist_id")
        self.artist_id = artist_id


class InvalidInput(RepositoryError):
    """
    The store refused a value while encoding or casting it (e.g. an integer
    outside bigint).
    """

    code = "invalid_input"

    def __init__(self, detail: str) -> None:
        super().__init__("A supplied value is out of range or malformed.")
        self.detail = detail


class StoreUnavailable(RepositoryError):
    """
    The store could not be reached or failed for reasons unrelated to the
    input. `detail` keeps the driver message for logs; never send it out.
    """

    code = "store_unavailable"

    def __init__(self, detail: str) -> None:
        super().__init__("The database is unavailable.")
        self.detail = detail


class ConstraintViolation(RepositoryError):
    """
    Raised by the store boundary; services remap it to a typed kind above.
    """

    code = "constraint_violation"

    UNIQUE = "unique"
    FOREIGN_KEY = "foreign_key"
    OTHER = "other"

    def __init__(self, kind: str, *, constraint: str | None, detail: str) -> None:
        super().__init__(f"{kind} constraint violated ({constraint or 'unnamed'}).")
        self.kind = kind
        self.constraint = constraint
        self.detail = detail
