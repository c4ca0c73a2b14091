"""Built-in payload variants.

Importing this module registers every variant with ``default_registry``.
Write your own variants the same way: subclass ``CustomData``, give every
field a default, and decorate with ``register_payload``.
"""

from __future__ import annotations

from bisect import bisect_right

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .registry import CustomData, register_payload

__all__ = [
    "Vector3",
    "Keyframe",
    "Curve",
    "IntData",
    "FloatData",
    "StringData",
    "Vec3Data",
    "CurveData",
    "ObjectCollection",
]


class Vector3(BaseModel):
    model_config = ConfigDict(extra="forbid", validate_assignment=True)

    x: float = 0.0
    y: float = 0.0
    z: float = 0.0


class Keyframe(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    time: float
    value: float


class Curve(BaseModel):
    """Piecewise-linear curve over keyframes kept sorted by time."""

    model_config = ConfigDict(extra="forbid", validate_assignment=True)

    keys: list[Keyframe] = Field(default_factory=list)

    @field_validator("keys")
    @classmethod
    def sort_keys(cls, v: list[Keyframe]) -> list[Keyframe]:
        return sorted(v, key=lambda k: k.time)

    @classmethod
    def linear(
        cls, time_start: float, value_start: float, time_end: float, value_end: float
    ) -> Curve:
        return cls(
            keys=[
                Keyframe(time=time_start, value=value_start),
                Keyframe(time=time_end, value=value_end),
            ]
        )

    def evaluate(self, time: float) -> float:
        """Sample the curve, clamping outside the first and last keyframe."""
        if not self.keys:
            return 0.0
        if time <= self.keys[0].time:
            return self.keys[0].value
        if time >= self.keys[-1].time:
            return self.keys[-1].value

        i = bisect_right([k.time for k in self.keys], time)
        left, right = self.keys[i - 1], self.keys[i]
        span = right.time - left.time
        if span == 0:
            return right.value
        t = (time - left.time) / span
        return left.value + (right.value - left.value) * t


@register_payload
class IntData(CustomData):
    value: int = 0


@register_payload
class FloatData(CustomData):
    value: float = 0.0


@register_payload
class StringData(CustomData):
    value: str = ""


@register_payload
class Vec3Data(CustomData):
    value: Vector3 = Field(default_factory=Vector3)


@register_payload
class CurveData(CustomData):
    curve: Curve = Field(default_factory=lambda: Curve.linear(0.0, 0.0, 1.0, 1.0))


@register_payload
class ObjectCollection(CustomData):
    """References to external objects, stored by id."""

    collection: list[str] = Field(default_factory=list)
