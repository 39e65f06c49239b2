"""Exception hierarchy shared by the solver and its collaborators."""

from __future__ import annotations

from typing import Any, Dict


class SolverError(Exception):
    """Base class for every error raised by cemantix_solver."""


class ConfigLoadError(SolverError):
    """Lexicon or embedding model could not be loaded."""


class EmptyPoolError(SolverError):
    """No candidates are left to sample."""


class UnknownWordError(SolverError):
    def __init__(self, word: str) -> None:
        super().__init__(word)
        self.word = word

    def __str__(self) -> str:
        return f"'{self.word}' is not in the model vocabulary"


# -------------------- Oracle errors --------------------
class OracleError(SolverError):
    """Scoring oracle failed to return a score.

    `status` is the HTTP status when one was received, `message` the
    transport or server-reported reason.
    """

    def __init__(self, word: str, message: str, status: int | None = None) -> None:
        super().__init__(f"{word}: {message}" if status is None else f"{word}: HTTP {status} {message}")
        self.word = word
        self.message = message
        self.status = status

    @property
    def retryable(self) -> bool:
        return False


class OracleTransportError(OracleError):
    """Network failure, timeout, HTTP status >= 400 or an unreadable body."""

    @property
    def retryable(self) -> bool:
        return True


class OracleDomainError(OracleError):
    """The oracle answered but reported an error (unknown word, ...)."""


# -------------------- Solver termination --------------------
class SolverAbortedError(SolverError):
    """Solve stopped on an unrecoverable fault.

    `diagnostics` holds the solver and pool state at the time of the fault;
    the triggering exception is chained as `__cause__`.
    """

    def __init__(self, message: str, diagnostics: Dict[str, Any]) -> None:
        super().__init__(message)
        self.diagnostics = diagnostics
