"""Exception taxonomy for the matching pipeline.

Caller-facing errors carry an HTTP-like ``status_code`` used by the request
handler. Oracle errors are internal: the generator always recovers from them
with the fallback scorer.
"""


class MatchError(Exception):
    """Base class for errors reported to the caller."""

    status_code = 500


class InputError(MatchError):
    """The request is missing or has malformed required fields."""

    status_code = 400


class MissingStageError(InputError):
    """Neither the request nor the stored profile carries a career stage."""

    def __init__(self, message: str = "Career stage is required") -> None:
        super().__init__(message)


class InvalidStageError(InputError):
    """The career stage is present but not one we know."""


class NotFoundError(MatchError):
    """A collaborator record is absent (caller should re-onboard, not retry)."""

    status_code = 404


class ProfileNotFoundError(NotFoundError):
    def __init__(self, external_id: str) -> None:
        super().__init__(f"Talent not found: {external_id}")
        self.external_id = external_id


class CatalogNotFoundError(NotFoundError):
    def __init__(self, message: str = "No career paths available") -> None:
        super().__init__(message)


class MatchTimeoutError(MatchError):
    """The overall budget ran out before profile/catalog reads completed."""

    status_code = 504


class EmptyCatalogError(MatchError):
    """There is nothing to rank."""

    def __init__(self, message: str = "Cannot rank an empty catalog") -> None:
        super().__init__(message)


class OracleError(Exception):
    """The ranking oracle failed; recovered locally by the fallback scorer."""


class OracleTimeoutError(OracleError):
    pass


class UnparsableOracleOutputError(OracleError):
    """Every parse-and-repair stage failed on the oracle text."""


class InvalidOracleOutputError(OracleError):
    """The oracle output parsed but does not hold a list of candidates."""
