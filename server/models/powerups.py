# server/models/powerups.py
"""Per-kind power-up behavior table."""

from dataclasses import dataclass
from typing import Dict, Optional, Tuple

from config.settings import (
    ENERGY_SHIELD_CHARGES,
    ENERGY_SHIELD_DURATION,
    HASTE_DURATION,
    HASTE_SPEED_MULTIPLIER,
    PIERCING_SHOT_DURATION,
    RAPID_FIRE_COOLDOWN,
    RAPID_FIRE_DURATION,
    RICOCHET_BOUNCES,
    RICOCHET_DURATION,
    TRIPLE_SHOT_DURATION,
)
from models.entities import PowerUpKind


@dataclass(frozen=True)
class PowerUpBehavior:
    """How a power-up kind affects the player who collects it.

    ``duration`` is ``None`` for instant kinds, which never become the
    player's active power-up.
    """

    duration: Optional[int] = None  # ms
    speed_multiplier: float = 1.0
    shot_count: int = 1
    fire_cooldown: Optional[int] = None  # ms, overrides the default
    bounces: int = 0
    piercing: bool = False
    shield_charges: int = 0

    @property
    def instant(self) -> bool:
        return self.duration is None


POWER_UP_BEHAVIORS: Dict[PowerUpKind, PowerUpBehavior] = {
    PowerUpKind.HASTE: PowerUpBehavior(
        duration=HASTE_DURATION, speed_multiplier=HASTE_SPEED_MULTIPLIER
    ),
    PowerUpKind.TRIPLE_SHOT: PowerUpBehavior(
        duration=TRIPLE_SHOT_DURATION, shot_count=3
    ),
    PowerUpKind.SMART_BOMB: PowerUpBehavior(),
    PowerUpKind.ENERGY_SHIELD: PowerUpBehavior(
        duration=ENERGY_SHIELD_DURATION, shield_charges=ENERGY_SHIELD_CHARGES
    ),
    PowerUpKind.MEDKIT: PowerUpBehavior(),
    PowerUpKind.RICOCHET: PowerUpBehavior(
        duration=RICOCHET_DURATION, bounces=RICOCHET_BOUNCES
    ),
    PowerUpKind.PIERCING_SHOT: PowerUpBehavior(
        duration=PIERCING_SHOT_DURATION, piercing=True
    ),
    PowerUpKind.RAPID_FIRE: PowerUpBehavior(
        duration=RAPID_FIRE_DURATION, fire_cooldown=RAPID_FIRE_COOLDOWN
    ),
}

_missing = set(PowerUpKind) - set(POWER_UP_BEHAVIORS)
if _missing:
    raise RuntimeError(
        f"No behavior defined for power-up kinds: {sorted(k.value for k in _missing)}"
    )

# Fixed spawn rotation.
POWER_UP_CATALOG: Tuple[PowerUpKind, ...] = tuple(PowerUpKind)

INSTANT_KINDS = frozenset(
    kind for kind, behavior in POWER_UP_BEHAVIORS.items() if behavior.instant
)


def behavior_for(kind: PowerUpKind) -> PowerUpBehavior:
    """Look up the behavior of a power-up kind."""
    return POWER_UP_BEHAVIORS[kind]
