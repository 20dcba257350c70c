"""
Background event loop hosting the game engines.

Flask handles requests on worker threads while every ``GameEngine`` lives on
a single asyncio loop. ``GameRuntime.call`` hops onto that loop, runs one
engine operation and hands back the resulting snapshot.
"""

from __future__ import annotations

import asyncio
import logging
import threading
import time
from collections import OrderedDict
from typing import Any, Callable

from rugguesser.services.game import GameEngine, RetryPolicy, RoundSupplier

log = logging.getLogger(__name__)

CALL_TIMEOUT_SECONDS = 10.0
DEFAULT_IDLE_TTL_SECONDS = 30 * 60
DEFAULT_MAX_SESSIONS = 1000


class GameRuntime:
    """Event loop thread plus the per-session engine registry.

    Sessions idle for longer than *idle_ttl* seconds are evicted, and the
    registry never holds more than *max_sessions* engines (least recently
    used first out). An evicted engine is closed so its pending fetch stops.
    """

    def __init__(
        self,
        supplier: RoundSupplier,
        round_limit: int,
        retry_policy: RetryPolicy,
        idle_ttl: float = DEFAULT_IDLE_TTL_SECONDS,
        max_sessions: int = DEFAULT_MAX_SESSIONS,
        clock: Callable[[], float] = time.monotonic,
    ):
        self._supplier = supplier
        self._round_limit = round_limit
        self._retry_policy = retry_policy
        self._idle_ttl = idle_ttl
        self._max_sessions = max(1, max_sessions)
        self._clock = clock
        # session id -> (engine, last seen), least recently used first
        self._engines: OrderedDict[str, tuple[GameEngine, float]] = OrderedDict()
        self._lock = threading.Lock()
        self._loop: asyncio.AbstractEventLoop | None = None
        self._thread: threading.Thread | None = None

    # ------------------------------------------------------------------
    # Loop lifecycle
    # ------------------------------------------------------------------
    def start(self) -> None:
        with self._lock:
            if self._thread is not None:
                return
            self._loop = asyncio.new_event_loop()
            self._thread = threading.Thread(target=self._run_loop, name="game-loop", daemon=True)
            self._thread.start()
        log.debug("Game event loop started.")

    def _run_loop(self) -> None:
        assert self._loop is not None
        asyncio.set_event_loop(self._loop)
        self._loop.run_forever()

    def stop(self) -> None:
        with self._lock:
            loop, thread = self._loop, self._thread
            self._loop = None
            self._thread = None
        if loop is None or thread is None:
            return
        loop.call_soon_threadsafe(loop.stop)
        thread.join(timeout=CALL_TIMEOUT_SECONDS)
        loop.close()
        log.debug("Game event loop stopped.")

    # ------------------------------------------------------------------
    # Engine access
    # ------------------------------------------------------------------
    def call(self, session_id: str, operation: Callable[[GameEngine], Any]) -> dict[str, Any]:
        """Run *operation* on the session's engine inside the loop; return the snapshot.

        A session seen for the first time gets a fresh engine whose first
        round starts immediately.
        """
        self.start()
        loop = self._loop
        assert loop is not None

        async def _invoke() -> dict[str, Any]:
            engine = self._get_or_create(session_id)
            operation(engine)
            return engine.state.to_dict()

        future = asyncio.run_coroutine_threadsafe(_invoke(), loop)
        return future.result(timeout=CALL_TIMEOUT_SECONDS)

    def _get_or_create(self, session_id: str) -> GameEngine:
        now = self._clock()
        with self._lock:
            evicted = self._evict_idle(now)
            entry = self._engines.get(session_id)
            if entry is not None:
                engine = entry[0]
                self._engines[session_id] = (engine, now)
                self._engines.move_to_end(session_id)
                created = False
            else:
                engine = GameEngine(
                    self._supplier,
                    round_limit=self._round_limit,
                    retry_policy=self._retry_policy,
                )
                self._engines[session_id] = (engine, now)
                while len(self._engines) > self._max_sessions:
                    evicted.append(self._engines.popitem(last=False))
                created = True

        for old_session_id, (old_engine, _) in evicted:
            log.info("Evicting game for session %s", old_session_id)
            old_engine.close()
        if created:
            log.info("New game for session %s", session_id)
            engine.start_round()
        return engine

    def _evict_idle(self, now: float) -> list[tuple[str, tuple[GameEngine, float]]]:
        """Pop sessions not seen for ``idle_ttl`` seconds. Caller holds the lock."""
        evicted = []
        while self._engines:
            _, last_seen = next(iter(self._engines.values()))
            if now - last_seen <= self._idle_ttl:
                break
            evicted.append(self._engines.popitem(last=False))
        return evicted

    def __contains__(self, session_id: str) -> bool:
        with self._lock:
            return session_id in self._engines

    def __len__(self) -> int:
        with self._lock:
            return len(self._engines)
