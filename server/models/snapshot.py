# server/models/snapshot.py
"""Immutable world snapshot broadcast at the end of every tick."""

import copy
from dataclasses import dataclass
from typing import Iterable, Optional, Tuple

from models.entities import Player, PowerUpPickup, Projectile


@dataclass(frozen=True)
class Snapshot:
    """Full state of players, projectiles and pickup at a tick boundary.

    Entities are deep copies taken at capture time, so later simulation
    steps never leak into a snapshot that is already queued for delivery.
    """

    tick: int
    players: Tuple[Player, ...]
    projectiles: Tuple[Projectile, ...]
    pickup: Optional[PowerUpPickup]

    @classmethod
    def capture(
        cls,
        tick: int,
        players: Iterable[Player],
        projectiles: Iterable[Projectile],
        pickup: Optional[PowerUpPickup],
    ) -> "Snapshot":
        return cls(
            tick=tick,
            players=tuple(copy.deepcopy(p) for p in players),
            projectiles=tuple(copy.deepcopy(p) for p in projectiles),
            pickup=copy.deepcopy(pickup),
        )

    def to_dict(self) -> dict:
        """Wire form; ``players`` is keyed by id as clients expect."""
        return {
            "tick": self.tick,
            "players": {player.id: player.to_dict() for player in self.players},
            "bullets": [projectile.to_dict() for projectile in self.projectiles],
            "currentPowerUp": self.pickup.to_dict() if self.pickup else None,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Snapshot":
        """Rebuild a snapshot from its wire form, as a client would."""
        pickup = data.get("currentPowerUp")
        return cls(
            tick=data.get("tick", 0),
            players=tuple(Player.from_dict(p) for p in data["players"].values()),
            projectiles=tuple(Projectile.from_dict(b) for b in data["bullets"]),
            pickup=PowerUpPickup.from_dict(pickup) if pickup else None,
        )
