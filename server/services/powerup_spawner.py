# server/services/powerup_spawner.py
"""Power-up spawn cycle: one pickup at a time, fixed rotation of kinds."""

import logging
import random
from enum import Enum
from typing import Callable, Iterable, Optional

from config.settings import (
    ARENA_HEIGHT,
    ARENA_WIDTH,
    PLAYER_SIZE,
    POWER_UP_MARGIN,
    POWER_UP_RESPAWN_DELAY,
    POWER_UP_SIZE,
)
from models.entities import Player, PowerUpKind, PowerUpPickup
from models.powerups import POWER_UP_CATALOG
from utils.helpers import is_collision
from utils.scheduler import TimerSlot

logger = logging.getLogger(__name__)


class SpawnerState(str, Enum):
    EMPTY = "empty"
    PENDING_SPAWN = "pendingSpawn"
    ACTIVE = "active"


class PowerUpSpawner:
    """State machine placing at most one pickup in the arena.

    EMPTY -> PENDING_SPAWN on ``request_spawn``; PENDING_SPAWN -> ACTIVE when
    the delay timer fires; ACTIVE -> EMPTY on ``take``. The caller applies
    the collected effect and then requests the next spawn.
    """

    def __init__(
        self,
        scheduler,
        rng: random.Random,
        on_spawn: Callable[[PowerUpPickup], None],
        delay: float = POWER_UP_RESPAWN_DELAY,
    ):
        self.scheduler = scheduler
        self.rng = rng
        self.on_spawn = on_spawn
        self.delay = delay  # ms
        self.state = SpawnerState.EMPTY
        self.pickup: Optional[PowerUpPickup] = None
        self.next_kind_index = 0
        self._timer = TimerSlot()

    def request_spawn(self):
        """Start the respawn delay unless a pickup is live or already pending."""
        if self.state is not SpawnerState.EMPTY:
            return
        self.state = SpawnerState.PENDING_SPAWN
        self._timer.start(
            lambda: self.scheduler.call_later(self.delay / 1000, self._spawn)
        )

    def _spawn(self):
        if self.state is not SpawnerState.PENDING_SPAWN:
            return
        kind = self._next_kind()
        self.pickup = PowerUpPickup(
            x=self.rng.uniform(POWER_UP_MARGIN, ARENA_WIDTH - POWER_UP_MARGIN),
            y=self.rng.uniform(POWER_UP_MARGIN, ARENA_HEIGHT - POWER_UP_MARGIN),
            type=kind,
            size=POWER_UP_SIZE,
        )
        self.state = SpawnerState.ACTIVE
        logger.info(
            "Spawned %s at (%.0f, %.0f)", kind.value, self.pickup.x, self.pickup.y
        )
        self.on_spawn(self.pickup)

    def _next_kind(self) -> PowerUpKind:
        kind = POWER_UP_CATALOG[self.next_kind_index]
        self.next_kind_index = (self.next_kind_index + 1) % len(POWER_UP_CATALOG)
        return kind

    def find_collector(self, players: Iterable[Player]) -> Optional[Player]:
        """First player whose center is within pickup range, if any."""
        if self.pickup is None:
            return None
        for player in players:
            if is_collision(
                player.x + PLAYER_SIZE / 2,
                player.y + PLAYER_SIZE / 2,
                PLAYER_SIZE / 2,
                self.pickup.x,
                self.pickup.y,
                self.pickup.size / 2,
            ):
                return player
        return None

    def take(self) -> Optional[PowerUpPickup]:
        """Remove the live pickup so nobody else can collect it."""
        pickup = self.pickup
        if pickup is None:
            return None
        self.pickup = None
        self.state = SpawnerState.EMPTY
        return pickup

    def reset(self):
        """Cancel any pending spawn and clear the arena of pickups."""
        self._timer.cancel()
        self.pickup = None
        self.state = SpawnerState.EMPTY

    @property
    def timer_active(self) -> bool:
        return self._timer.active
