# server/services/game_service.py
"""Core game logic and state management."""

import logging
import math
import random
from dataclasses import asdict
from typing import Callable, Dict, Iterable, List, Optional

from config.settings import (
    ARENA_HEIGHT,
    ARENA_WIDTH,
    BULLET_DAMAGE,
    BULLET_SIZE,
    BULLET_SPEED,
    PLAYER_FIRE_COOLDOWN,
    PLAYER_HEALTH,
    PLAYER_SIZE,
    PLAYER_SPEED,
    SMART_BOMB_DAMAGE,
    TICK_RATE,
    TRIPLE_SHOT_SPREAD,
)
from models.entities import (
    ActivePowerUp,
    Direction,
    KillSummaryEntry,
    Player,
    PowerUpKind,
    PowerUpPickup,
    Projectile,
)
from models.messages import OutboundMessage
from models.powerups import INSTANT_KINDS, PowerUpBehavior, behavior_for
from models.snapshot import Snapshot
from services.entity_store import EntityStore
from services.powerup_spawner import PowerUpSpawner
from utils.helpers import (
    clamp,
    clamp_to_arena,
    is_collision,
    now_ms,
    random_color,
    random_spawn,
    reflect_off_horizontal,
    reflect_off_vertical,
)
from utils.scheduler import AsyncioScheduler, TimerSlot

logger = logging.getLogger(__name__)

NO_POWER_UP = PowerUpBehavior()

DIRECTION_STEPS = {
    Direction.UP: (0, -1),
    Direction.DOWN: (0, 1),
    Direction.LEFT: (-1, 0),
    Direction.RIGHT: (1, 0),
}


class GameService:
    """Authoritative arena simulation.

    Owns the entity store, the power-up spawner and the tick timer. Every
    public method runs to completion synchronously; outbound events are
    handed to subscribers as they happen.
    """

    def __init__(
        self,
        scheduler=None,
        clock: Callable[[], float] = now_ms,
        rng: Optional[random.Random] = None,
    ):
        self.scheduler = scheduler or AsyncioScheduler()
        self.clock = clock
        self.rng = rng or random.Random()
        self.store = EntityStore()
        self.spawner = PowerUpSpawner(
            self.scheduler, self.rng, self._on_power_up_spawned
        )
        self.tick_count = 0
        self.muted = False
        self._tick_timer = TimerSlot()
        self._subscribers: List[Callable[[OutboundMessage], None]] = []

        self._instant_effects: Dict[PowerUpKind, Callable[[Player, float], None]] = {
            PowerUpKind.SMART_BOMB: self._detonate_smart_bomb,
            PowerUpKind.MEDKIT: self._apply_medkit,
        }
        if set(self._instant_effects) != INSTANT_KINDS:
            raise RuntimeError("Instant power-up kinds and effects are out of sync")

    # Outbound events
    def subscribe(self, listener: Callable[[OutboundMessage], None]):
        """Register a listener for every outbound event."""
        self._subscribers.append(listener)

    def _publish(
        self,
        message_type: str,
        payload: Optional[dict] = None,
        target: Optional[str] = None,
        exclude: Optional[str] = None,
    ):
        message = OutboundMessage(message_type, payload or {}, target, exclude)
        for listener in self._subscribers:
            listener(message)

    # Timers
    @property
    def running(self) -> bool:
        return self._tick_timer.active

    def start(self):
        """(Re)start the tick loop and the power-up cycle."""
        self._tick_timer.start(
            lambda: self.scheduler.call_every(1 / TICK_RATE, self.tick)
        )
        self.spawner.reset()
        self.spawner.request_spawn()
        logger.info("Simulation started at %d Hz", TICK_RATE)

    def stop(self):
        """Stop the tick loop and cancel any pending power-up spawn."""
        self._tick_timer.cancel()
        self.spawner.reset()
        logger.info("Simulation stopped")

    # Session lifecycle
    def join(self, connection_id: str, name: str) -> Player:
        """Add a player for a connection and announce them."""
        if not self.running:
            self.start()

        player = self.store.get_player(connection_id)
        if player is not None:
            self._publish("gameState", self.snapshot().to_dict(), target=connection_id)
            return player

        x, y = random_spawn(self.rng, PLAYER_SIZE, ARENA_WIDTH, ARENA_HEIGHT)
        player = self.store.add_player(
            Player(
                id=connection_id,
                name=name,
                x=x,
                y=y,
                color=random_color(self.rng),
                health=PLAYER_HEALTH,
            )
        )
        logger.info("%s (ID: %s) joined the game.", name, connection_id)

        self._publish("gameState", self.snapshot().to_dict(), target=connection_id)
        self._publish("newPlayer", {"player": player.to_dict()}, exclude=connection_id)
        return player

    def update_input(self, connection_id: str, directions: Iterable[Direction]):
        """Replace the player's held directions."""
        player = self.store.get_player(connection_id)
        if player is not None:
            player.keys = set(directions)

    def shoot(self, connection_id: str, angle: float) -> List[Projectile]:
        """Fire from the player's center if the fire-rate cooldown allows."""
        player = self.store.get_player(connection_id)
        if player is None or player.health <= 0:
            return []

        now = self.clock()
        behavior = self._active_behavior(player, now)
        cooldown = behavior.fire_cooldown or PLAYER_FIRE_COOLDOWN
        if now - player.lastShotTime < cooldown:
            return []
        player.lastShotTime = now

        center_x = player.x + PLAYER_SIZE / 2
        center_y = player.y + PLAYER_SIZE / 2
        return [
            self.store.add_projectile(
                center_x,
                center_y,
                shot_angle,
                player.id,
                bounces=behavior.bounces,
                piercing=behavior.piercing,
            )
            for shot_angle in _spread(angle, behavior.shot_count)
        ]

    def disconnect(self, connection_id: str) -> Optional[Player]:
        """Remove a departed connection's player."""
        player = self.store.remove_player(connection_id)
        if player is None:
            logger.info("An unknown user disconnected: %s", connection_id)
            return None
        logger.info("%s (ID: %s) disconnected.", player.name, connection_id)
        self._publish("playerDisconnected", {"id": connection_id})
        return player

    def restart(self):
        """Reset every player and the arena, then restart the timers."""
        for player in self.store.all_players():
            player.health = PLAYER_HEALTH
            player.kills = 0
            player.x, player.y = random_spawn(
                self.rng, PLAYER_SIZE, ARENA_WIDTH, ARENA_HEIGHT
            )
            player.activePowerUp = None
            player.shieldHealth = 0
            player.lastShotTime = float("-inf")
        self.store.clear_projectiles()
        self.start()
        logger.info("Game restarted with %d players", len(self.store.players))

        self._publish("gameRestarted")
        self._publish("gameState", self.snapshot().to_dict())

    def end_game(self) -> List[KillSummaryEntry]:
        """Stop the game, announce the final kill ranking and clear the arena."""
        self.stop()
        summary = sorted(
            (KillSummaryEntry(p.name, p.kills) for p in self.store.all_players()),
            key=lambda entry: entry.kills,
            reverse=True,
        )
        self._publish("gameEnded", {"killSummary": [asdict(e) for e in summary]})
        self.store.clear()
        logger.info("Game ended, summary: %s", summary)
        return summary

    def toggle_mute(self, connection_id: str, muted: bool):
        """Share a background-music mute toggle with the other players."""
        self.muted = muted
        self._publish("muteToggled", {"muted": muted}, exclude=connection_id)

    # Simulation tick
    def tick(self) -> Snapshot:
        """Advance the world one step and broadcast the result."""
        now = self.clock()
        self.tick_count += 1

        self._move_players(now)
        self._advance_projectiles()
        self._resolve_collisions(now)
        self._expire_power_ups(now)
        self._collect_power_up(now)

        snapshot = self.snapshot()
        self._publish("gameState", snapshot.to_dict())
        return snapshot

    def snapshot(self) -> Snapshot:
        return Snapshot.capture(
            self.tick_count,
            self.store.players.values(),
            self.store.projectiles,
            self.spawner.pickup,
        )

    def _move_players(self, now: float):
        for player in self.store.all_players():
            speed = PLAYER_SPEED * self._active_behavior(player, now).speed_multiplier
            for direction in player.keys:
                dx, dy = DIRECTION_STEPS[direction]
                player.x += dx * speed
                player.y += dy * speed
            player.x, player.y = clamp_to_arena(
                player.x, player.y, PLAYER_SIZE, ARENA_WIDTH, ARENA_HEIGHT
            )

    def _advance_projectiles(self):
        for projectile in list(self.store.projectiles):
            projectile.x += math.cos(projectile.angle) * BULLET_SPEED
            projectile.y += math.sin(projectile.angle) * BULLET_SPEED
            if not self._bounce(projectile):
                self.store.remove_projectile(projectile)

    def _bounce(self, projectile: Projectile) -> bool:
        """Reflect a projectile that left the arena; False if it is spent."""
        if projectile.x < 0 or projectile.x > ARENA_WIDTH:
            if projectile.bouncesLeft <= 0:
                return False
            projectile.angle = reflect_off_vertical(projectile.angle)
            projectile.x = clamp(projectile.x, 0, ARENA_WIDTH)
            projectile.bouncesLeft -= 1

        if projectile.y < 0 or projectile.y > ARENA_HEIGHT:
            if projectile.bouncesLeft <= 0:
                return False
            projectile.angle = reflect_off_horizontal(projectile.angle)
            projectile.y = clamp(projectile.y, 0, ARENA_HEIGHT)
            projectile.bouncesLeft -= 1

        return True

    def _resolve_collisions(self, now: float):
        for projectile in list(self.store.projectiles):
            for player in self.store.all_players():
                if player.id == projectile.ownerId or player.id in projectile.hitPlayers:
                    continue
                if not is_collision(
                    projectile.x,
                    projectile.y,
                    BULLET_SIZE / 2,
                    player.x + PLAYER_SIZE / 2,
                    player.y + PLAYER_SIZE / 2,
                    PLAYER_SIZE / 2,
                ):
                    continue

                lethal = self._apply_damage(player, BULLET_DAMAGE, now)
                if projectile.piercing:
                    projectile.hitPlayers.add(player.id)
                else:
                    self.store.remove_projectile(projectile)

                if lethal:
                    self._handle_death(player, projectile.ownerId)
                    break
                if not projectile.piercing:
                    break

    def _apply_damage(self, player: Player, amount: int, now: float) -> bool:
        """Damage a player, letting an energy shield absorb the hit.

        Returns True when the hit was lethal.
        """
        if player.has_power_up(PowerUpKind.ENERGY_SHIELD, now) and player.shieldHealth > 0:
            player.shieldHealth -= 1
            if player.shieldHealth == 0:
                player.activePowerUp = None
            return False

        player.health = max(0, player.health - amount)
        return player.health == 0

    def _handle_death(self, victim: Player, killer_id: Optional[str]):
        self._publish(
            "playerDestroyed", {"x": victim.x, "y": victim.y, "color": victim.color}
        )

        killer = self.store.get_player(killer_id) if killer_id else None
        if killer is not None and killer.id != victim.id:
            killer.kills += 1
            logger.debug("%s destroyed %s", killer.name, victim.name)

        victim.x, victim.y = random_spawn(
            self.rng, PLAYER_SIZE, ARENA_WIDTH, ARENA_HEIGHT
        )
        victim.health = PLAYER_HEALTH
        victim.activePowerUp = None
        victim.shieldHealth = 0

    def _expire_power_ups(self, now: float):
        for player in self.store.all_players():
            active = player.activePowerUp
            if active is not None and active.expiresAt <= now:
                player.activePowerUp = None
                player.shieldHealth = 0

    def _active_behavior(self, player: Player, now: float) -> PowerUpBehavior:
        active = player.activePowerUp
        if active is None or active.expiresAt <= now:
            return NO_POWER_UP
        return behavior_for(active.type)

    # Power-ups
    def _on_power_up_spawned(self, pickup: PowerUpPickup):
        self._publish("powerUpSpawned", {"powerUp": pickup.to_dict()})

    def _collect_power_up(self, now: float):
        collector = self.spawner.find_collector(self.store.all_players())
        if collector is None:
            return

        pickup = self.spawner.take()
        logger.info("%s collected %s", collector.name, pickup.type.value)
        self._publish(
            "powerUpCollected",
            {"playerName": collector.name, "type": pickup.type.value},
        )
        self.apply_power_up(collector, pickup.type, now)
        self.spawner.request_spawn()

    def apply_power_up(self, player: Player, kind: PowerUpKind, now: float):
        """Give a player a power-up; timed kinds replace the active one."""
        behavior = behavior_for(kind)
        if behavior.instant:
            self._instant_effects[kind](player, now)
            return
        player.activePowerUp = ActivePowerUp(kind, now + behavior.duration)
        player.shieldHealth = behavior.shield_charges

    def _apply_medkit(self, player: Player, now: float):
        player.health = PLAYER_HEALTH

    def _detonate_smart_bomb(self, player: Player, now: float):
        self._publish("smartBombBlast", {"x": player.x, "y": player.y})

        others = [p for p in self.store.all_players() if p.id != player.id]
        fallen = [p for p in others if self._apply_damage(p, SMART_BOMB_DAMAGE, now)]
        self.store.clear_projectiles()
        for victim in fallen:
            self._handle_death(victim, player.id)

    # Getter methods for game state
    def get_all_players(self) -> List[dict]:
        """Get all players as dictionaries."""
        return [player.to_dict() for player in self.store.players.values()]

    def get_stats(self) -> dict:
        """Get game statistics."""
        return {
            "totalPlayers": len(self.store.players),
            "totalBullets": len(self.store.projectiles),
            "tick": self.tick_count,
            "running": self.running,
            "powerUpState": self.spawner.state.value,
            "muted": self.muted,
        }


def _spread(angle: float, count: int) -> List[float]:
    """Angles for ``count`` shots fanned symmetrically around ``angle``."""
    middle = (count - 1) / 2
    return [angle + (i - middle) * TRIPLE_SHOT_SPREAD for i in range(count)]
