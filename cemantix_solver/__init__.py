"""Cemantix solver: frequency prior plus embedding feedback."""

from cemantix_solver.config import ErrorPolicy, SolverConfig, SolverContext
from cemantix_solver.errors import (
    ConfigLoadError,
    EmptyPoolError,
    OracleDomainError,
    OracleError,
    OracleTransportError,
    SolverAbortedError,
    SolverError,
    UnknownWordError,
)
from cemantix_solver.pool import Candidate, CandidatePool
from cemantix_solver.scoring import ScoringClient
from cemantix_solver.similarity import SimilarityOracleAdapter
from cemantix_solver.solver import QueryOutcome, SolveResult, Solver, SolverState

__all__ = [
    "Candidate",
    "CandidatePool",
    "ConfigLoadError",
    "EmptyPoolError",
    "ErrorPolicy",
    "OracleDomainError",
    "OracleError",
    "OracleTransportError",
    "QueryOutcome",
    "ScoringClient",
    "SimilarityOracleAdapter",
    "SolveResult",
    "Solver",
    "SolverAbortedError",
    "SolverConfig",
    "SolverContext",
    "SolverError",
    "SolverState",
    "UnknownWordError",
]
