"""HTTP client for the Cemantix scoring endpoint."""

from __future__ import annotations

from dataclasses import dataclass

import requests

from cemantix_solver.errors import OracleDomainError, OracleTransportError

DEFAULT_BASE_URL = "https://cemantix.certitudes.org"
DEFAULT_TIMEOUT = 10.0


@dataclass
class ScoreReply:
    score: float
    num: int | None = None
    solvers: int | None = None


class ScoringClient:
    """Submit one guess per request and return its similarity score.

    No retries and no caching: each call is exactly one POST and one unit
    of the server's rate budget. Retry decisions belong to the caller.
    """

    def __init__(
        self,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = DEFAULT_TIMEOUT,
        session: requests.Session | None = None,
    ) -> None:
        if timeout <= 0:
            raise ValueError("timeout must be > 0")
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session if session is not None else requests.Session()
        self.headers = {
            "Content-Type": "application/x-www-form-urlencoded",
            "Origin": self.base_url,
        }

    @property
    def score_url(self) -> str:
        return f"{self.base_url}/score"

    def submit(self, word: str) -> ScoreReply:
        try:
            resp = self.session.post(
                self.score_url,
                data={"word": word},
                headers=self.headers,
                timeout=self.timeout,
            )
        except requests.RequestException as exc:
            raise OracleTransportError(word, str(exc)) from exc

        if resp.status_code >= 400:
            raise OracleTransportError(word, resp.reason or "request failed", status=resp.status_code)

        try:
            payload = resp.json()
        except ValueError as exc:
            raise OracleTransportError(word, f"invalid JSON body: {exc}", status=resp.status_code) from exc
        if not isinstance(payload, dict):
            raise OracleTransportError(word, "unexpected JSON body", status=resp.status_code)

        error = payload.get("error")
        if error:
            raise OracleDomainError(word, str(error), status=resp.status_code)

        # The server omits zero-valued fields.
        try:
            score = float(payload.get("score") or 0.0)
        except (TypeError, ValueError) as exc:
            raise OracleTransportError(word, f"invalid score {payload.get('score')!r}") from exc

        return ScoreReply(
            score=score,
            num=payload.get("num"),
            solvers=payload.get("solvers"),
        )

    def score(self, word: str) -> float:
        """Similarity of `word` to the target, 1.0 on a match.

        Values are passed through as the server sent them; unrelated words
        score below 0, so the result is not clamped to [0, 1].
        """
        return self.submit(word).score

    def close(self) -> None:
        self.session.close()
