"""
Round-based game engine.

Phases::

    loading -> playing -> result -> loading (next round)
                                 -> finished (after the last round)

``restart()`` goes back to ``loading`` from any phase. Everything runs on one
asyncio event loop; fetching the next rug is the only suspending step.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Awaitable, Callable

from tenacity import (
    AsyncRetrying,
    RetryCallState,
    RetryError,
    retry_if_exception_type,
    stop_after_attempt,
    stop_never,
    wait_fixed,
)

from rugguesser.services.geo import Coordinate, distance_km, score_from_distance
from rugguesser.services.rugs import RugObject

log = logging.getLogger(__name__)

DEFAULT_ROUND_LIMIT = 5

RoundSupplier = Callable[[], Awaitable[RugObject]]
Listener = Callable[[str, "GameState", dict[str, Any]], None]
Sleep = Callable[[float], Awaitable[None]]


class RoundFetchFailure(Exception):
    """The supplier could not produce a rug for the round."""


class Phase(str, Enum):
    LOADING = "loading"
    PLAYING = "playing"
    RESULT = "result"
    FINISHED = "finished"


@dataclass(frozen=True, slots=True)
class RetryPolicy:
    """Fixed-delay retry for round fetching. ``max_attempts=None`` retries forever."""

    delay_seconds: float = 1.0
    max_attempts: int | None = None

    def stop(self):
        if self.max_attempts is None or self.max_attempts <= 0:
            return stop_never
        return stop_after_attempt(self.max_attempts)


@dataclass(frozen=True, slots=True)
class RoundOutcome:
    distance_km: float
    points: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "distance_km": self.distance_km,
            "distance_km_display": round(self.distance_km),
            "points": self.points,
        }


@dataclass
class GameState:
    round_limit: int = DEFAULT_ROUND_LIMIT
    round_index: int = 1
    score: int = 0
    round_active: bool = True
    pending_guess: Coordinate | None = None
    current_target: RugObject | None = None
    last_outcome: RoundOutcome | None = None
    phase: Phase = Phase.LOADING
    history: list[RoundOutcome] = field(default_factory=list)

    @property
    def is_last_round(self) -> bool:
        return self.round_index == self.round_limit

    def to_dict(self) -> dict[str, Any]:
        return {
            "phase": self.phase.value,
            "round_index": self.round_index,
            "round_limit": self.round_limit,
            "is_last_round": self.is_last_round,
            "score": self.score,
            "round_active": self.round_active,
            "pending_guess": self.pending_guess.as_dict() if self.pending_guess else None,
            "current_target": (
                self.current_target.to_dict(reveal_location=self.phase in (Phase.RESULT, Phase.FINISHED))
                if self.current_target
                else None
            ),
            "last_outcome": self.last_outcome.to_dict() if self.last_outcome else None,
            "history": [outcome.to_dict() for outcome in self.history],
        }


class GameEngine:
    """Owns one ``GameState`` and drives it through the rounds of a game.

    Invalid calls for the current phase are ignored rather than raised: the
    presentation layer is expected to disable controls based on ``phase``.
    """

    def __init__(
        self,
        supplier: RoundSupplier,
        round_limit: int = DEFAULT_ROUND_LIMIT,
        retry_policy: RetryPolicy | None = None,
        sleep: Sleep = asyncio.sleep,
    ):
        if round_limit < 1:
            raise ValueError("round_limit must be at least 1")
        self._supplier = supplier
        self._retry_policy = retry_policy or RetryPolicy()
        self._sleep = sleep
        self._listeners: list[Listener] = []
        self._generation = 0
        self._fetch_task: asyncio.Task | None = None
        self.state = GameState(round_limit=round_limit)

    # ------------------------------------------------------------------
    # Listeners
    # ------------------------------------------------------------------
    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register *listener*; returns a function that unregisters it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self, event: str, **detail: Any) -> None:
        for listener in list(self._listeners):
            try:
                listener(event, self.state, detail)
            except Exception:
                log.exception("Game listener failed on %s event", event)

    @property
    def generation(self) -> int:
        return self._generation

    @property
    def fetch_task(self) -> asyncio.Task | None:
        return self._fetch_task

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------
    def start_round(self) -> asyncio.Task:
        """Enter ``loading`` and fetch the rug for the current round.

        Must be called from within a running event loop.
        """
        state = self.state
        state.phase = Phase.LOADING
        state.pending_guess = None
        state.last_outcome = None
        state.round_active = True

        self._generation += 1
        generation = self._generation
        log.info("Starting round %d/%d (generation %d)", state.round_index, state.round_limit, generation)

        self._fetch_task = asyncio.get_running_loop().create_task(self._fetch_round(generation))
        self._notify("state")
        return self._fetch_task

    def submit_guess(self, pos: Coordinate) -> bool:
        state = self.state
        if not state.round_active or state.phase is not Phase.PLAYING:
            return False
        state.pending_guess = pos
        self._notify("state")
        return True

    def confirm_guess(self) -> RoundOutcome | None:
        state = self.state
        if state.phase is not Phase.PLAYING or state.pending_guess is None or state.current_target is None:
            return None

        distance = distance_km(state.pending_guess, state.current_target.coordinates)
        outcome = RoundOutcome(distance_km=distance, points=score_from_distance(distance))

        state.round_active = False
        state.score += outcome.points
        state.last_outcome = outcome
        state.history.append(outcome)
        state.phase = Phase.RESULT
        log.info(
            "Round %d scored: %.1f km -> %d points (total %d)",
            state.round_index,
            outcome.distance_km,
            outcome.points,
            state.score,
        )
        self._notify("state")
        return outcome

    def advance(self) -> asyncio.Task | None:
        """Move on from ``result``: next round, or ``finished`` after the last one."""
        state = self.state
        if state.phase is not Phase.RESULT:
            return None

        if state.round_index >= state.round_limit:
            state.phase = Phase.FINISHED
            state.last_outcome = None
            log.info("Game finished with %d points", state.score)
            self._notify("state")
            return None

        state.round_index += 1
        return self.start_round()

    def restart(self) -> asyncio.Task:
        state = self.state
        state.round_index = 1
        state.score = 0
        state.pending_guess = None
        state.last_outcome = None
        state.current_target = None
        state.round_active = True
        state.history.clear()
        log.info("Restarting game")
        return self.start_round()

    def close(self) -> None:
        """Abandon the game: any in-flight fetch stops at its next check."""
        self._generation += 1
        self._listeners.clear()

    # ------------------------------------------------------------------
    # Fetching
    # ------------------------------------------------------------------
    async def _fetch_once(self) -> RugObject:
        try:
            rug = await self._supplier()
        except Exception as exc:
            raise RoundFetchFailure(f"{type(exc).__name__}: {exc}") from exc
        if rug is None:
            raise RoundFetchFailure("supplier returned no rug")
        return rug

    def _before_retry(self, retry_state: RetryCallState, generation: int) -> None:
        error = retry_state.outcome.exception() if retry_state.outcome else None
        log.warning(
            "Round fetch attempt %d failed (%s); retrying in %.1fs",
            retry_state.attempt_number,
            error,
            self._retry_policy.delay_seconds,
        )
        if generation != self._generation:
            return
        self._notify("fetch_failed", attempt=retry_state.attempt_number, error=str(error))

    async def _fetch_round(self, generation: int) -> None:
        retrying = AsyncRetrying(
            sleep=self._sleep,
            retry=retry_if_exception_type(RoundFetchFailure),
            wait=wait_fixed(self._retry_policy.delay_seconds),
            stop=self._retry_policy.stop(),
            before_sleep=lambda retry_state: self._before_retry(retry_state, generation),
        )

        rug: RugObject | None = None
        try:
            async for attempt in retrying:
                with attempt:
                    if generation != self._generation:
                        log.debug("Dropping superseded fetch (generation %d)", generation)
                        return
                    rug = await self._fetch_once()
        except RetryError as exc:
            attempts = exc.last_attempt.attempt_number
            log.error("Giving up on round fetch after %d attempts", attempts)
            if generation == self._generation:
                self._notify("fetch_exhausted", attempts=attempts)
            return

        if generation != self._generation:
            log.debug("Discarding rug for superseded fetch (generation %d)", generation)
            return

        self.state.current_target = rug
        self.state.phase = Phase.PLAYING
        log.info("Round %d ready: %s", self.state.round_index, rug.id)
        self._notify("state")
