"""Generic mob state switches driving animation channels.

Applied after family resolution: the controls are appended to whichever family
matched, and on their own they form the schema of a known mob with no family.
"""
from __future__ import annotations

from typing import Dict, List, Optional, Union

from blockforge.entity_composite.families.base import FamilyContext, select_control
from blockforge.entity_composite.schemas import Control, ControlState, MobStateProfile, ToggleControl

AGGRESSIVE_ENTITIES = frozenset({
    "bee", "wolf", "polar_bear", "iron_golem", "zombie_pigman", "zombified_piglin",
    "panda", "dolphin", "goat", "warden", "spider", "cave_spider",
})
CHILD_ENTITIES = frozenset({
    "zombie", "husk", "drowned", "zombie_villager", "pig", "cow", "chicken", "mooshroom",
    "wolf", "cat", "ocelot", "rabbit", "polar_bear", "turtle", "panda", "fox", "bee",
    "hoglin", "zoglin", "strider", "goat", "axolotl", "frog", "tadpole", "camel",
    "sniffer", "armadillo",
})
SITTING_ENTITIES = frozenset({"wolf", "cat", "parrot", "fox"})
WATER_ENTITIES = frozenset({"axolotl", "dolphin", "turtle", "guardian", "elder_guardian", "squid", "glow_squid"})
SNEAKING_ENTITIES = frozenset({"cat", "fox"})
SLEEPING_ENTITIES = frozenset({"fox", "villager", "cat"})

MOVEMENT_LIMB_SPEED = {"idle": 0.0, "walking": 0.5, "running": 1.0}
ANGER_TIME = 100


def mob_state_profile(ctx: FamilyContext) -> Optional[MobStateProfile]:
    entity_type = ctx.entity_root if ctx.dir else ctx.leaf
    profile = MobStateProfile(
        entity_type=entity_type,
        aggressive=entity_type in AGGRESSIVE_ENTITIES,
        child=entity_type in CHILD_ENTITIES,
        sitting=entity_type in SITTING_ENTITIES,
        in_water=entity_type in WATER_ENTITIES,
        sneaking=entity_type in SNEAKING_ENTITIES,
        sleeping=entity_type in SLEEPING_ENTITIES,
    )
    if not any((profile.aggressive, profile.child, profile.sitting, profile.in_water,
                profile.sneaking, profile.sleeping)):
        return None
    return profile


def mob_state_controls(profile: MobStateProfile) -> List[Control]:
    prefix = profile.entity_type
    toggles = (
        (profile.aggressive, "aggressive", "Aggressive", "Shows the entity in an aggressive/angry state"),
        (profile.child, "baby", "Baby", "Shows the baby/child variant of the entity"),
        (profile.sitting, "sitting", "Sitting", "Shows the entity in a sitting pose"),
        (profile.in_water, "in_water", "In Water", "Shows the entity as if swimming in water"),
        (profile.sneaking, "sneaking", "Sneaking", "Shows the entity in a sneaking/crouching pose"),
        (profile.sleeping, "sleeping", "Sleeping", "Shows the entity in a sleeping pose"),
    )
    controls: List[Control] = [
        ToggleControl(id=f"{prefix}.{suffix}", label=label, description=description)
        for enabled, suffix, label, description in toggles
        if enabled
    ]
    controls.append(select_control(
        f"{prefix}.movement", "Movement", list(MOVEMENT_LIMB_SPEED), "idle",
        labels={"idle": "Idle", "walking": "Walking", "running": "Running"},
        description="Controls the movement animation state",
    ))
    return controls


def mob_state_overrides(profile: MobStateProfile, state: ControlState) -> Dict[str, Union[bool, float]]:
    prefix = profile.entity_type
    overrides: Dict[str, Union[bool, float]] = {}
    if profile.aggressive:
        aggressive = state.toggle(f"{prefix}.aggressive")
        overrides["is_aggressive"] = aggressive
        if aggressive:
            overrides["anger_time"] = ANGER_TIME
            overrides["anger_time_start"] = ANGER_TIME
    if profile.child:
        overrides["is_child"] = state.toggle(f"{prefix}.baby")
    if profile.sitting:
        overrides["is_sitting"] = state.toggle(f"{prefix}.sitting")
    if profile.in_water:
        overrides["is_in_water"] = state.toggle(f"{prefix}.in_water")
    if profile.sneaking:
        overrides["is_sneaking"] = state.toggle(f"{prefix}.sneaking")
    if profile.sleeping and state.toggle(f"{prefix}.sleeping"):
        overrides["is_sleeping"] = True

    movement = state.select(f"{prefix}.movement", "idle")
    overrides["limb_speed"] = MOVEMENT_LIMB_SPEED.get(movement, 0.0)
    if movement == "running":
        overrides["is_sprinting"] = True
    return overrides
