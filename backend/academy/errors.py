# backend/academy/errors.py


class AcademyError(Exception):
    """Base class for errors raised by the academy services."""


class ConflictError(AcademyError):
    """A write would break a uniqueness invariant (e.g. a taken username)."""


class AdvisoryError(AcademyError):
    """The AI advisor could not produce a well-formed result."""


class NotFoundError(AcademyError):
    """A workflow referenced a record that does not exist."""


class InvalidRequestError(AcademyError):
    """A workflow cannot run with the data it was given."""
