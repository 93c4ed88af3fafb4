# server/services/entity_store.py
"""In-memory store of players and live projectiles."""

from typing import Dict, List, Optional

from models.entities import Player, Projectile


class EntityStore:
    """Single source of truth for the arena's entities.

    Players are keyed by connection id; projectiles keep firing order.
    Callers own every game invariant, the store only keeps keys unique.
    """

    def __init__(self):
        self.players: Dict[str, Player] = {}
        self.projectiles: List[Projectile] = []
        self.next_projectile_id = 0

    def add_player(self, player: Player) -> Player:
        """Add a player, or return the one already registered under its id."""
        return self.players.setdefault(player.id, player)

    def remove_player(self, player_id: str) -> Optional[Player]:
        return self.players.pop(player_id, None)

    def get_player(self, player_id: str) -> Optional[Player]:
        return self.players.get(player_id)

    def has_player(self, player_id: str) -> bool:
        return player_id in self.players

    def all_players(self) -> List[Player]:
        return list(self.players.values())

    def add_projectile(
        self,
        x: float,
        y: float,
        angle: float,
        owner_id: str,
        bounces: int = 0,
        piercing: bool = False,
    ) -> Projectile:
        projectile = Projectile(
            id=self.next_projectile_id,
            x=x,
            y=y,
            angle=angle,
            ownerId=owner_id,
            bouncesLeft=bounces,
            piercing=piercing,
        )
        self.next_projectile_id += 1
        self.projectiles.append(projectile)
        return projectile

    def remove_projectile(self, projectile: Projectile):
        """Remove a projectile; safe while iterating over ``list(projectiles)``."""
        self.projectiles = [p for p in self.projectiles if p.id != projectile.id]

    def clear_projectiles(self):
        self.projectiles.clear()

    def clear(self):
        self.players.clear()
        self.projectiles.clear()
