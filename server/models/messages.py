# server/models/messages.py
"""Inbound message schema and outbound message envelope."""

import logging
from dataclasses import dataclass, field
from typing import Annotated, Dict, List, Literal, Optional, Set, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError

from models.entities import Direction

logger = logging.getLogger(__name__)

# Browser key codes sent by the web client.
KEY_CODE_DIRECTIONS = {
    "ArrowUp": Direction.UP,
    "KeyW": Direction.UP,
    "ArrowDown": Direction.DOWN,
    "KeyS": Direction.DOWN,
    "ArrowLeft": Direction.LEFT,
    "KeyA": Direction.LEFT,
    "ArrowRight": Direction.RIGHT,
    "KeyD": Direction.RIGHT,
}


class JoinGame(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    type: Literal["joinGame"]
    name: str = Field(min_length=1, max_length=24)


class PlayerMovement(BaseModel):
    """Held movement input.

    Either ``directions`` (``up``/``down``/``left``/``right``) or the raw
    ``keys`` map a browser produces. Unrecognised entries are ignored.
    """

    type: Literal["playerMovement"]
    directions: List[str] = Field(default_factory=list)
    keys: Dict[str, bool] = Field(default_factory=dict)

    def held_directions(self) -> Set[Direction]:
        held = set()
        for name in self.directions:
            try:
                held.add(Direction(name))
            except ValueError:
                continue
        for code, pressed in self.keys.items():
            if pressed and code in KEY_CODE_DIRECTIONS:
                held.add(KEY_CODE_DIRECTIONS[code])
        return held


class Shoot(BaseModel):
    type: Literal["shoot"]
    angle: float = Field(allow_inf_nan=False)


class RestartGame(BaseModel):
    type: Literal["restartGame"]


class EndGame(BaseModel):
    type: Literal["endGame"]


class ToggleMute(BaseModel):
    type: Literal["toggleMute"]
    muted: bool


InboundMessage = Annotated[
    Union[JoinGame, PlayerMovement, Shoot, RestartGame, EndGame, ToggleMute],
    Field(discriminator="type"),
]

_inbound_adapter = TypeAdapter(InboundMessage)


def parse_inbound(raw: Union[str, bytes]):
    """Parse a raw client frame, returning ``None`` if it is malformed."""
    try:
        return _inbound_adapter.validate_json(raw)
    except ValidationError as e:
        logger.debug("Dropping malformed message: %s", e.errors(include_url=False))
        return None


@dataclass
class OutboundMessage:
    """An event published by the game for delivery to connections.

    With ``target`` set the message goes to that connection only;
    otherwise it is broadcast to everyone except ``exclude``.
    """

    type: str
    payload: dict = field(default_factory=dict)
    target: Optional[str] = None
    exclude: Optional[str] = None

    def to_wire(self) -> dict:
        return {"type": self.type, **self.payload}
