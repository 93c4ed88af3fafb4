# server/config/settings.py
"""Game configuration constants and settings."""

import os

# Arena settings
ARENA_WIDTH = 1200
ARENA_HEIGHT = 900

# Player settings
PLAYER_SIZE = 24
PLAYER_SPEED = 3  # units per tick
PLAYER_HEALTH = 100
PLAYER_FIRE_COOLDOWN = 300  # ms

# Bullet settings
BULLET_SIZE = 5
BULLET_SPEED = 7  # units per tick
BULLET_DAMAGE = 10

# Power-up settings
POWER_UP_SIZE = 30
POWER_UP_MARGIN = 50
POWER_UP_RESPAWN_DELAY = 3000  # ms

HASTE_DURATION = 8000  # ms
HASTE_SPEED_MULTIPLIER = 1.75
TRIPLE_SHOT_DURATION = 10000
TRIPLE_SHOT_SPREAD = 0.2  # radians between adjacent shots
ENERGY_SHIELD_DURATION = 15000
ENERGY_SHIELD_CHARGES = 3
RICOCHET_DURATION = 10000
RICOCHET_BOUNCES = 3
PIERCING_SHOT_DURATION = 10000
RAPID_FIRE_DURATION = 8000
RAPID_FIRE_COOLDOWN = 100  # ms
SMART_BOMB_DAMAGE = 30

# Server settings
TICK_RATE = 60  # simulation steps per second
HOST = os.environ.get("HOST", "0.0.0.0")
PORT = int(os.environ.get("PORT", "3000"))
LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")


def get_game_config():
    """Get the complete game configuration as a dictionary."""
    return {
        "arenaWidth": ARENA_WIDTH,
        "arenaHeight": ARENA_HEIGHT,
        "playerSize": PLAYER_SIZE,
        "playerSpeed": PLAYER_SPEED,
        "playerHealth": PLAYER_HEALTH,
        "fireCooldown": PLAYER_FIRE_COOLDOWN,
        "bulletSize": BULLET_SIZE,
        "bulletSpeed": BULLET_SPEED,
        "bulletDamage": BULLET_DAMAGE,
        "powerUpSize": POWER_UP_SIZE,
        "powerUpRespawnDelay": POWER_UP_RESPAWN_DELAY,
        "tickRate": TICK_RATE,
    }
