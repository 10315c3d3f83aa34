"""Built-in animation presets.

Every update advances age/time by dt in ticks and returns only the channels it drives.
"""
from __future__ import annotations

from typing import Callable, Dict, List

from blockforge.animation_kernel.schemas import (
    TICKS_PER_SECOND, TIME_WRAP_TICKS, AnimationPreset, EntityState, StatePatch,
)
from blockforge.common.errors import NotFound

MIN_ANIMATION_SPEED = 0.1
MAX_ANIMATION_SPEED = 3.0
DEATH_TIME_MAX = 20.0

ATTACK_CYCLE_SEC = 0.5
ATTACK_SWING_SEC = 0.3
HURT_CYCLE_SEC = 0.5


def clamp_speed(speed: float) -> float:
    return max(MIN_ANIMATION_SPEED, min(MAX_ANIMATION_SPEED, speed))


def _clock(state: EntityState, dt: float) -> StatePatch:
    ticks = dt * TICKS_PER_SECOND
    return {
        "age": state.age + ticks,
        "time": (state.time + ticks) % TIME_WRAP_TICKS,
        "frame_time": dt,
    }


def _alive() -> StatePatch:
    return {"hurt_time": 0.0, "death_time": 0.0, "health": 20.0}


def _locomotion(limb_speed: float, **extra) -> Callable[[EntityState, float], StatePatch]:
    def update(state: EntityState, dt: float) -> StatePatch:
        patch = _clock(state, dt)
        patch["limb_swing"] = state.limb_swing + dt * TICKS_PER_SECOND * limb_speed
        patch["limb_speed"] = limb_speed
        patch.update(extra)
        return patch
    return update


def _attacking(state: EntityState, dt: float) -> StatePatch:
    cycle_pos = (state.age / TICKS_PER_SECOND) % ATTACK_CYCLE_SEC
    patch = _clock(state, dt)
    patch.update({
        "swing_progress": cycle_pos / ATTACK_SWING_SEC if cycle_pos < ATTACK_SWING_SEC else 0.0,
        "is_aggressive": True,
        "limb_swing": state.limb_swing + dt * TICKS_PER_SECOND * 0.2,
        "limb_speed": 0.2,
    })
    return patch


def _hurt(state: EntityState, dt: float) -> StatePatch:
    phase = ((state.age / TICKS_PER_SECOND) % HURT_CYCLE_SEC) / HURT_CYCLE_SEC
    hurt_time = phase * 20 if phase < 0.5 else (1 - phase) * 20
    patch = _clock(state, dt)
    patch.update({"hurt_time": hurt_time, "is_hurt": hurt_time > 0})
    return patch


def _dying(state: EntityState, dt: float) -> StatePatch:
    return {
        "age": state.age + dt * TICKS_PER_SECOND,
        "frame_time": dt,
        "death_time": min(state.death_time + dt * TICKS_PER_SECOND, DEATH_TIME_MAX),
        "health": 0.0,
    }


def _angry(state: EntityState, dt: float) -> StatePatch:
    patch = _clock(state, dt)
    patch.update({
        "limb_swing": state.limb_swing + dt * TICKS_PER_SECOND * state.limb_speed,
        "limb_speed": 0.5,
        "is_aggressive": True,
        "anger_time": 100.0,
    })
    return patch


PRESETS: List[AnimationPreset] = [
    AnimationPreset(
        id="idle",
        name="Idle",
        description="Standing still",
        setup=lambda: {"limb_swing": 0.0, "limb_speed": 0.0, **_alive()},
        update=_locomotion(0.0),
    ),
    AnimationPreset(
        id="walking",
        name="Walking",
        description="Normal walking pace",
        setup=lambda: {"is_on_ground": True, **_alive()},
        update=_locomotion(0.5, is_on_ground=True),
    ),
    AnimationPreset(
        id="sprinting",
        name="Sprinting",
        description="Running at full speed",
        setup=lambda: {"is_on_ground": True, "is_sprinting": True, **_alive()},
        update=_locomotion(1.0, is_on_ground=True, is_sprinting=True),
    ),
    AnimationPreset(
        id="attacking",
        name="Attacking",
        description="Repeating attack swing",
        setup=lambda: {"is_aggressive": True, **_alive()},
        update=_attacking,
    ),
    AnimationPreset(
        id="hurt",
        name="Hurt",
        description="Repeated damage flash",
        setup=lambda: {"is_hurt": True, "health": 10.0},
        held_channels=["hurt_time"],
        update=_hurt,
    ),
    AnimationPreset(
        id="dying",
        name="Dying",
        description="Death animation; death_time stops at 20",
        duration=1.0,
        loop=False,
        held_channels=["death_time"],
        setup=lambda: {
            "death_time": 0.0, "health": 0.0, "hurt_time": 0.0, "swing_progress": 0.0, "limb_speed": 0.0,
        },
        update=_dying,
    ),
    AnimationPreset(
        id="angry",
        name="Angry",
        description="Aggressive state",
        setup=lambda: {"is_aggressive": True, "anger_time": 100.0, "anger_time_start": 100.0, **_alive()},
        update=_angry,
    ),
    AnimationPreset(
        id="baby",
        name="Baby",
        description="Child variant walking",
        setup=lambda: {"is_child": True, "is_on_ground": True, **_alive()},
        update=_locomotion(0.5, is_child=True, is_on_ground=True),
    ),
]
_BY_ID: Dict[str, AnimationPreset] = {preset.id: preset for preset in PRESETS}


def get_preset(preset_id: str) -> AnimationPreset:
    preset = _BY_ID.get(preset_id)
    if preset is None:
        raise NotFound(f"Unknown animation preset: {preset_id}", stage="animation")
    return preset


def list_presets() -> List[AnimationPreset]:
    return list(PRESETS)
