"""Game store: persists one state per game type for a room in Upstash Redis."""

import asyncio
import inspect
import json
import logging
import random
from dataclasses import dataclass
from typing import Any, Awaitable, Callable

from upstash_redis.asyncio import Redis

from duo_games.config import Settings
from duo_games.dependencies.redis import get_redis_client
from duo_games.schemas.game_engine import FrozenState, GameType, RuleOptions
from duo_games.services.game.engine import (
    GameAction,
    MalformedStateError,
    ProcessResult,
    process_action,
)
from duo_games.services.game.start_game import initialize_game

from .normalize import normalize_state

logger = logging.getLogger(__name__)

StateListener = Callable[[FrozenState], Awaitable[None] | None]

# Write ARGV[2] only if the key still holds ARGV[1] ("" means absent)
COMPARE_AND_SET_SCRIPT = """
local current = redis.call('GET', KEYS[1])
if (current == false and ARGV[1] == '') or current == ARGV[1] then
  redis.call('SET', KEYS[1], ARGV[2])
  return 1
end
return 0
"""


@dataclass
class StoreActionResult:
    """Result of apply_action: the engine's verdict plus whether it was persisted."""

    result: ProcessResult
    attempts: int = 1
    written: bool = False

    @property
    def success(self) -> bool:
        return self.result.success and self.written


class GameStore:
    """Read, write and watch the states of one room's games.

    Every transition goes through apply_action, which serialises writers in
    this process with a per-key lock and across processes with a
    compare-and-set script, so an action is always applied to the latest state.
    """

    def __init__(
        self,
        room_id: str,
        redis_client: Redis | None = None,
        *,
        options: RuleOptions | None = None,
        write_retries: int = 3,
        rng: random.Random | None = None,
    ):
        self._redis = redis_client or get_redis_client()
        self._room_id = room_id
        self._options = options or RuleOptions()
        self._write_retries = write_retries
        self._rng = rng
        self._locks: dict[str, asyncio.Lock] = {}
        self._listeners: dict[GameType, list[StateListener]] = {}

    @classmethod
    def from_settings(cls, settings: Settings, redis_client: Redis | None = None) -> "GameStore":
        return cls(
            settings.ROOM_ID,
            redis_client or get_redis_client(settings),
            options=settings.rule_options(),
            write_retries=settings.STORE_WRITE_RETRIES,
        )

    def _game_key(self, game_type: GameType) -> str:
        return f"games:{self._room_id}:{game_type.value}"

    def _score_key(self, game_type: GameType, player: int | str) -> str:
        return f"scores:{self._room_id}:{game_type.value}:{player}"

    def _lock_for(self, key: str) -> asyncio.Lock:
        if key not in self._locks:
            self._locks[key] = asyncio.Lock()
        return self._locks[key]

    def _decode(self, game_type: GameType, raw: str) -> FrozenState:
        try:
            data: Any = json.loads(raw)
        except json.JSONDecodeError as e:
            raise MalformedStateError(f"Stored {game_type.value} state is not JSON: {e}") from e
        return normalize_state(game_type, data)

    async def read(self, game_type: GameType) -> FrozenState | None:
        """Return the stored state, or None when the game has never been written.

        Raises:
            MalformedStateError: the stored payload cannot be repaired.
        """
        raw = await self._redis.get(self._game_key(game_type))
        if raw is None:
            logger.debug("No stored state for %s", self._game_key(game_type))
            return None
        return self._decode(game_type, raw)

    async def write(self, game_type: GameType, state: FrozenState) -> None:
        """Overwrite the stored state and notify local listeners."""
        key = self._game_key(game_type)
        await self._redis.set(key, state.model_dump_json())
        logger.info("State written: key=%s, log=%s", key, state.log)
        await self._notify(game_type, state)

    def subscribe(self, game_type: GameType, listener: StateListener) -> Callable[[], None]:
        """Call `listener` with every state written for this game.

        Returns a function that removes the listener again.
        """
        listeners = self._listeners.setdefault(game_type, [])
        listeners.append(listener)
        logger.debug("Listener added for %s (%d total)", game_type.value, len(listeners))

        def unsubscribe() -> None:
            if listener in listeners:
                listeners.remove(listener)
                logger.debug("Listener removed for %s", game_type.value)

        return unsubscribe

    async def _notify(self, game_type: GameType, state: FrozenState) -> int:
        notified = 0
        for listener in list(self._listeners.get(game_type, [])):
            try:
                outcome = listener(state)
                if inspect.isawaitable(outcome):
                    await outcome
                notified += 1
            except Exception as e:
                logger.warning("Listener for %s failed: %s", game_type.value, e)
        return notified

    async def atomic_increment(self, game_type: GameType, player: int | str) -> int:
        """Add one to a player's score counter and return the new value."""
        key = self._score_key(game_type, player)
        value = await self._redis.incr(key)
        logger.info("Score incremented: key=%s, value=%d", key, value)
        return value

    async def get_score(self, game_type: GameType, player: int | str) -> int:
        raw = await self._redis.get(self._score_key(game_type, player))
        return int(raw) if raw is not None else 0

    async def reset(self, game_type: GameType) -> FrozenState:
        """Start a fresh game of this type and store it."""
        state = initialize_game(game_type, self._rng)
        await self.write(game_type, state)
        logger.info("Game reset: key=%s", self._game_key(game_type))
        return state

    async def apply_action(
        self,
        game_type: GameType,
        action: GameAction,
        seat: int | None = None,
    ) -> StoreActionResult:
        """Apply an action to the latest stored state and persist the outcome.

        A missing game is started first. When another writer lands between our
        read and our write, the action is replayed against the fresher state.
        """
        key = self._game_key(game_type)
        async with self._lock_for(key):
            for attempt in range(1, self._write_retries + 1):
                raw = await self._redis.get(key)
                if raw is None:
                    state = initialize_game(game_type, self._rng)
                    expected = ""
                else:
                    state = self._decode(game_type, raw)
                    expected = raw

                result = process_action(
                    state, action, seat, options=self._options, rng=self._rng
                )
                if not result.success:
                    return StoreActionResult(result=result, attempts=attempt)

                new_state = result.state
                swapped = await self._redis.eval(
                    COMPARE_AND_SET_SCRIPT,
                    keys=[key],
                    args=[expected, new_state.model_dump_json()],
                )
                if swapped == 1:
                    logger.info("Action stored: key=%s, attempt=%d", key, attempt)
                    await self._notify(game_type, new_state)
                    return StoreActionResult(result=result, attempts=attempt, written=True)

                logger.warning("Write conflict: key=%s, attempt=%d", key, attempt)

        logger.error("Giving up after %d conflicting writes: key=%s", self._write_retries, key)
        return StoreActionResult(
            result=ProcessResult.failure(
                "WRITE_CONFLICT", "The game changed while the action was being applied"
            ),
            attempts=self._write_retries,
        )
