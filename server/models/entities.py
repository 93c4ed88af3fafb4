# server/models/entities.py
"""Game entity models and data classes."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Set


class Direction(str, Enum):
    """A movement direction a player can hold."""

    UP = "up"
    DOWN = "down"
    LEFT = "left"
    RIGHT = "right"


class PowerUpKind(str, Enum):
    """Closed set of power-up kinds, in spawn rotation order."""

    HASTE = "haste"
    TRIPLE_SHOT = "tripleShot"
    SMART_BOMB = "smartBomb"
    ENERGY_SHIELD = "energyShield"
    MEDKIT = "medkit"
    RICOCHET = "ricochet"
    PIERCING_SHOT = "piercingShot"
    RAPID_FIRE = "rapidFire"


@dataclass
class ActivePowerUp:
    """A timed power-up currently affecting a player."""

    type: PowerUpKind
    expiresAt: float

    def to_dict(self) -> dict:
        return {"type": self.type.value, "expiresAt": self.expiresAt}

    @classmethod
    def from_dict(cls, data: dict) -> "ActivePowerUp":
        return cls(type=PowerUpKind(data["type"]), expiresAt=data["expiresAt"])


@dataclass
class Player:
    """Represents a player in the arena."""

    id: str
    name: str
    x: float
    y: float
    color: str
    health: int
    kills: int = 0
    keys: Set[Direction] = field(default_factory=set)
    activePowerUp: Optional[ActivePowerUp] = None
    shieldHealth: int = 0
    lastShotTime: float = float("-inf")

    def has_power_up(self, kind: PowerUpKind, now: float) -> bool:
        """True if ``kind`` is active and not yet expired at ``now``."""
        active = self.activePowerUp
        return active is not None and active.type is kind and active.expiresAt > now

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "x": self.x,
            "y": self.y,
            "color": self.color,
            "health": self.health,
            "kills": self.kills,
            "keys": sorted(direction.value for direction in self.keys),
            "activePowerUp": (
                self.activePowerUp.to_dict() if self.activePowerUp else None
            ),
            "shieldHealth": self.shieldHealth,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Player":
        active = data.get("activePowerUp")
        return cls(
            id=data["id"],
            name=data["name"],
            x=data["x"],
            y=data["y"],
            color=data["color"],
            health=data["health"],
            kills=data.get("kills", 0),
            keys={Direction(d) for d in data.get("keys", [])},
            activePowerUp=ActivePowerUp.from_dict(active) if active else None,
            shieldHealth=data.get("shieldHealth", 0),
        )


@dataclass
class Projectile:
    """Represents a bullet travelling through the arena."""

    id: int
    x: float
    y: float
    angle: float
    ownerId: str
    bouncesLeft: int = 0
    piercing: bool = False
    hitPlayers: Set[str] = field(default_factory=set)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "x": self.x,
            "y": self.y,
            "angle": self.angle,
            "ownerId": self.ownerId,
            "bouncesLeft": self.bouncesLeft,
            "piercing": self.piercing,
            "hitPlayers": sorted(self.hitPlayers),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Projectile":
        return cls(
            id=data["id"],
            x=data["x"],
            y=data["y"],
            angle=data["angle"],
            ownerId=data["ownerId"],
            bouncesLeft=data.get("bouncesLeft", 0),
            piercing=data.get("piercing", False),
            hitPlayers=set(data.get("hitPlayers", [])),
        )


@dataclass
class PowerUpPickup:
    """Represents the single power-up item lying in the arena."""

    x: float
    y: float
    type: PowerUpKind
    size: float

    def to_dict(self) -> dict:
        return {"x": self.x, "y": self.y, "type": self.type.value, "size": self.size}

    @classmethod
    def from_dict(cls, data: dict) -> "PowerUpPickup":
        return cls(
            x=data["x"], y=data["y"], type=PowerUpKind(data["type"]), size=data["size"]
        )


@dataclass
class KillSummaryEntry:
    """A player's final kill count, captured when the game ends."""

    name: str
    kills: int
