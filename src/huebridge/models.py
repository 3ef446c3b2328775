"""Light models and the light command encoder."""

from __future__ import annotations

import json
from typing import Annotated, Any, Optional

from pydantic import BaseModel, ConfigDict, Field, StrictBool, StrictFloat, StrictInt, StrictStr
from pydantic import ValidationError as PydanticValidationError

from .errors import DecodeError, ValidationError

Byte = Annotated[StrictInt, Field(ge=0, le=255)]
Word = Annotated[StrictInt, Field(ge=0, le=65535)]


def _describe(exc: PydanticValidationError) -> str:
    return "; ".join(
        f"{'.'.join(str(part) for part in error['loc']) or 'value'}: {error['msg']}"
        for error in exc.errors()
    )


class LightState(BaseModel):
    """Snapshot of a light's state as reported by the bridge."""

    model_config = ConfigDict(frozen=True)

    on: StrictBool
    bri: Byte
    hue: Word
    sat: Byte
    effect: StrictStr
    xy: tuple[StrictFloat, StrictFloat]
    ct: Word = 0
    alert: StrictStr
    colormode: StrictStr
    reachable: StrictBool


class Light(BaseModel):
    """A light device connected to the bridge."""

    model_config = ConfigDict(frozen=True)

    name: StrictStr
    modelid: StrictStr
    swversion: StrictStr
    uniqueid: StrictStr
    state: LightState
    type: StrictStr
    manufacturername: StrictStr
    # Absent on current bridge firmware
    pointsymbol: dict[str, Any] = Field(default_factory=dict)

    def __hash__(self) -> int:
        # pointsymbol holds arbitrary JSON and is left out
        return hash(
            (self.name, self.modelid, self.swversion, self.uniqueid, self.state, self.type, self.manufacturername)
        )

    @classmethod
    def from_dict(cls, data: Any) -> Light:
        """Decode one light object from the ``/lights`` listing."""
        try:
            return cls.model_validate(data)
        except PydanticValidationError as exc:
            raise DecodeError(f"invalid light: {_describe(exc)}") from exc


class IdentifiedLight(BaseModel):
    """A light together with the id the bridge assigned to it."""

    model_config = ConfigDict(frozen=True)

    id: StrictInt
    light: Light


class CommandLight(BaseModel):
    """
    Partial light state change.

    Every field is optional and absent fields are never sent. Build commands
    with :meth:`empty`, :meth:`turn_on` or :meth:`turn_off` and chain the ``with_*``
    methods, each of which returns a new command:

        >>> CommandLight.turn_on().with_bri(128).to_payload()
        {'on': True, 'bri': 128}
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    on: Optional[StrictBool] = None
    bri: Optional[Byte] = None
    hue: Optional[Word] = None
    sat: Optional[Byte] = None
    transitiontime: Optional[Word] = None

    def __init__(self, **data: Any) -> None:
        try:
            super().__init__(**data)
        except PydanticValidationError as exc:
            raise ValidationError(f"invalid command: {_describe(exc)}") from exc

    @classmethod
    def empty(cls) -> CommandLight:
        return cls()

    @classmethod
    def turn_on(cls) -> CommandLight:
        return cls(on=True)

    @classmethod
    def turn_off(cls) -> CommandLight:
        return cls(on=False)

    def _with(self, **changes: Any) -> CommandLight:
        return type(self)(**{**self.to_payload(), **changes})

    def with_on(self, on: bool) -> CommandLight:
        return self._with(on=on)

    def with_bri(self, bri: int) -> CommandLight:
        return self._with(bri=bri)

    def with_hue(self, hue: int) -> CommandLight:
        return self._with(hue=hue)

    def with_sat(self, sat: int) -> CommandLight:
        return self._with(sat=sat)

    def with_transitiontime(self, transitiontime: int) -> CommandLight:
        """Set the transition duration, in multiples of 100ms."""
        return self._with(transitiontime=transitiontime)

    def to_payload(self) -> dict[str, Any]:
        """Return the JSON object for this command, holding only present fields."""
        return self.model_dump(exclude_none=True)

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> CommandLight:
        """Rebuild a command from a partial-field mapping."""
        return cls(**payload)


def encode_command(command: CommandLight) -> bytes:
    """Serialize a command to the JSON body sent to the bridge."""
    return json.dumps(command.to_payload(), separators=(",", ":")).encode()


class Registration(BaseModel):
    """Successful user registration."""

    username: str
    raw: Any


class WriteResult(BaseModel):
    """Successful state change, with every ``success`` entry keyed by address."""

    successes: dict[str, Any]
    raw: Any
