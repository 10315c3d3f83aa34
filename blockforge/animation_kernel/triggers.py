"""Temporary overlay triggers (attack, hurt, death, rearing, eating).

Triggers run alongside whatever preset is active. Each one contributes a root
offset and/or bone input overrides derived from its local progress t in [0, 1].
"""
from __future__ import annotations

import math
from typing import Callable, Dict, List, NamedTuple, Optional, Set, Tuple

from blockforge.animation_kernel.schemas import ActiveOverlay, BoneInputs, EntityState, RootOverlay, StatePatch
from blockforge.common.errors import NotFound

HURT_TIME_ON_TRIGGER = 10.0
DEATH_TIME_ON_TRIGGER = 20.0

NECK_REST_TY = 4.0
REAR_NECK_DELTA = -8.0
EAT_NECK_DELTA = 7.0
EAT_HEAD_PITCH = 1.2

Contribution = Tuple[RootOverlay, BoneInputs, StatePatch]


class TriggerDef(NamedTuple):
    id: str
    label: str
    duration_sec: float
    effect: Callable[[float, EntityState, Optional[Set[str]]], Contribution]


def _pulse(t: float) -> float:
    return math.sin(math.pi * t)


def _wants(bone: str, bone_targets: Optional[Set[str]]) -> bool:
    return bone_targets is None or bone in bone_targets


def _attack(t: float, state: EntityState, bone_targets: Optional[Set[str]]) -> Contribution:
    return RootOverlay(), {}, {"swing_progress": _pulse(t)}


def _hurt(t: float, state: EntityState, bone_targets: Optional[Set[str]]) -> Contribution:
    return RootOverlay(y=0.06 * _pulse(t)), {}, {}


def _death(t: float, state: EntityState, bone_targets: Optional[Set[str]]) -> Contribution:
    envelope = math.sin(math.pi / 2 * t)
    return RootOverlay(x=0.12 * envelope, y=0.02 * envelope, rz=1.1 * envelope), {}, {}


def _horse_rearing(t: float, state: EntityState, bone_targets: Optional[Set[str]]) -> Contribution:
    bones: BoneInputs = {}
    if _wants("neck", bone_targets):
        bones["neck"] = {"ty": NECK_REST_TY + REAR_NECK_DELTA * _pulse(t)}
    return RootOverlay(), bones, {}


def _eat(t: float, state: EntityState, bone_targets: Optional[Set[str]]) -> Contribution:
    envelope = _pulse(t)
    bones: BoneInputs = {}
    if _wants("neck", bone_targets):
        bones["neck"] = {"ty": NECK_REST_TY + EAT_NECK_DELTA * envelope}
    if _wants("head", bone_targets):
        bones["head"] = {"rx": math.radians(state.head_pitch) + EAT_HEAD_PITCH * envelope}
    return RootOverlay(), bones, {}


TRIGGERS: Dict[str, TriggerDef] = {
    trigger.id: trigger
    for trigger in (
        TriggerDef("trigger.attack", "Attack", 0.3, _attack),
        TriggerDef("trigger.hurt", "Hurt", 0.5, _hurt),
        TriggerDef("trigger.death", "Death", 1.0, _death),
        TriggerDef("trigger.horse_rearing", "Rear", 1.0, _horse_rearing),
        TriggerDef("trigger.eat", "Eat", 1.0, _eat),
    )
}


def get_trigger(trigger_id: str) -> TriggerDef:
    trigger = TRIGGERS.get(trigger_id)
    if trigger is None:
        raise NotFound(f"Unknown animation trigger: {trigger_id}", stage="animation")
    return trigger


def start_trigger(
    state: EntityState, overlays: List[ActiveOverlay], trigger_id: str,
) -> Tuple[EntityState, List[ActiveOverlay]]:
    """
    Start (or restart) a trigger. A trigger that is already running has its
    elapsed time reset to zero; it is never stacked.
    """
    trigger = get_trigger(trigger_id)

    if trigger_id == "trigger.hurt":
        state = state.apply_patch({"hurt_time": max(state.hurt_time, HURT_TIME_ON_TRIGGER), "is_hurt": True})
    elif trigger_id == "trigger.death":
        state = state.apply_patch({"death_time": max(state.death_time, DEATH_TIME_ON_TRIGGER), "health": 0.0})

    restarted = False
    out: List[ActiveOverlay] = []
    for overlay in overlays:
        if overlay.id == trigger_id:
            overlay = overlay.model_copy(update={"elapsed_sec": 0.0, "root": RootOverlay(), "bone_inputs": {}})
            restarted = True
        out.append(overlay)
    if not restarted:
        out.append(ActiveOverlay(id=trigger_id, duration_sec=trigger.duration_sec))
    return state, out


def advance_overlay(
    overlay: ActiveOverlay, dt: float, state: EntityState, bone_targets: Optional[Set[str]] = None,
) -> Tuple[ActiveOverlay, StatePatch]:
    """Step one overlay by dt seconds and record what it contributes at its new phase."""
    trigger = get_trigger(overlay.id)
    elapsed = overlay.elapsed_sec + dt
    t = min(1.0, elapsed / overlay.duration_sec) if overlay.duration_sec > 0 else 1.0
    root, bones, patch = trigger.effect(t, state, bone_targets)
    return overlay.model_copy(update={"elapsed_sec": elapsed, "root": root, "bone_inputs": bones}), patch
