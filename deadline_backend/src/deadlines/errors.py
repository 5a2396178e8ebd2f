from __future__ import annotations


# PUBLIC_INTERFACE
class RepoError(Exception):
    """
    Base class for every failure a repository backend surfaces.

    Callers are expected to catch RepoError, leave their own state unchanged,
    and report the failure; none of these errors should end the process.
    """

    def __init__(self, message: str = "") -> None:
        super().__init__(message)
        self.message = message

    def __str__(self) -> str:
        return self.message


class NotFoundError(RepoError):
    """No record with the requested uid has ever been created."""

    def __init__(self, uid: str = "") -> None:
        super().__init__(f"not found: {uid}" if uid else "not found")
        self.uid = uid


class UnavailableError(RepoError):
    """The storage medium (file, directory, database connection) cannot be opened."""

    def __init__(self, message: str = "") -> None:
        super().__init__(f"unavailable: {message}")


class SerdeError(RepoError):
    """Persisted data could not be encoded or decoded."""

    def __init__(self, message: str = "") -> None:
        super().__init__(f"serialization error: {message}")


class SqlError(RepoError):
    """The embedded database rejected a query."""

    def __init__(self, message: str = "") -> None:
        super().__init__(f"sqlite error: {message}")


class UnknownError(RepoError):
    """A failure that fits none of the other categories."""

    def __init__(self, message: str = "") -> None:
        super().__init__(f"unknown: {message}")
