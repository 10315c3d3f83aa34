"""Animation Kernel Schemas."""
from __future__ import annotations

from typing import Any, Callable, Dict, List, Mapping, Optional, Union
from pydantic import BaseModel, Field

from blockforge.common.errors import MalformedDefinition

TICKS_PER_SECOND = 20
TIME_WRAP_TICKS = 27720

ChannelValue = Union[bool, int, float]


class EntityState(BaseModel):
    """Named animation channels read by entity animation expressions."""

    # movement
    limb_swing: float = 0.0
    limb_speed: float = 0.0
    head_yaw: float = 0.0
    head_pitch: float = 0.0

    # timing (ticks unless noted)
    age: float = 100.0
    time: float = 0.0
    day_time: float = 6000.0
    day_count: float = 0.0
    frame_time: float = 0.05  # seconds
    frame_counter: int = 0

    # combat
    swing_progress: float = 0.0
    hurt_time: float = 0.0
    death_time: float = 0.0
    swing_direction: float = 3.0
    health: float = 20.0
    max_health: float = 20.0
    anger_time: float = 0.0
    anger_time_start: float = 0.0
    ticks: float = 0.0

    # placement
    pos_x: float = 0.0
    pos_y: float = 0.0
    pos_z: float = 0.0
    rot_x: float = 0.0
    rot_y: float = 0.0
    player_pos_x: float = 0.0
    player_pos_y: float = 0.0
    player_pos_z: float = 0.0
    player_rot_x: float = 0.0
    player_rot_y: float = 0.0

    is_aggressive: bool = False
    is_alive: bool = True
    is_burning: bool = False
    is_child: bool = False
    is_glowing: bool = False
    is_hurt: bool = False
    is_in_hand: bool = False
    is_in_item_frame: bool = False
    is_in_ground: bool = False
    is_in_gui: bool = False
    is_in_lava: bool = False
    is_in_water: bool = False
    is_invisible: bool = False
    is_on_ground: bool = True
    is_on_head: bool = False
    is_on_shoulder: bool = False
    is_ridden: bool = False
    is_riding: bool = False
    is_sitting: bool = False
    is_sleeping: bool = False
    is_sneaking: bool = False
    is_sprinting: bool = False
    is_tamed: bool = False
    is_wet: bool = False

    dimension: int = 0
    id: int = 1
    rule_index: int = 0

    @classmethod
    def channel_names(cls) -> List[str]:
        return list(cls.model_fields)

    def apply_patch(self, patch: Mapping[str, Any]) -> "EntityState":
        """Merged copy; the patch wins per channel. Unknown channels are rejected."""
        unknown = sorted(set(patch) - set(type(self).model_fields))
        if unknown:
            raise MalformedDefinition(
                f"Unknown animation channel(s): {', '.join(unknown)}",
                details={"channels": unknown},
                stage="animation",
            )
        return self.model_copy(update=dict(patch))

    def channel_value(self, name: str) -> float:
        if name not in type(self).model_fields:
            raise MalformedDefinition(f"Unknown animation channel: {name}", stage="animation")
        value = getattr(self, name)
        if isinstance(value, bool):
            return 1.0 if value else 0.0
        return float(value)


StatePatch = Dict[str, ChannelValue]


class AnimationPreset(BaseModel):
    id: str
    name: str
    description: str = ""
    # seconds; 0 means open-ended
    duration: float = 0.0
    loop: bool = True
    # channels the preset owns; counter decay leaves them alone
    held_channels: List[str] = Field(default_factory=list)
    setup: Optional[Callable[[], StatePatch]] = None
    update: Callable[[EntityState, float], StatePatch]


class RootOverlay(BaseModel):
    """Model-level offset added on top of the pose (units and radians)."""
    x: float = 0.0
    y: float = 0.0
    z: float = 0.0
    rx: float = 0.0
    ry: float = 0.0
    rz: float = 0.0

    def plus(self, other: "RootOverlay") -> "RootOverlay":
        return RootOverlay(**{k: getattr(self, k) + getattr(other, k) for k in type(self).model_fields})


BoneInputs = Dict[str, Dict[str, float]]


class ActiveOverlay(BaseModel):
    """A running trigger plus what it contributed on its latest tick."""
    id: str
    duration_sec: float
    elapsed_sec: float = 0.0
    root: RootOverlay = Field(default_factory=RootOverlay)
    bone_inputs: BoneInputs = Field(default_factory=dict)

    @property
    def progress(self) -> float:
        if self.duration_sec <= 0:
            return 1.0
        return min(1.0, self.elapsed_sec / self.duration_sec)

    @property
    def done(self) -> bool:
        return self.elapsed_sec >= self.duration_sec


class TickResult(BaseModel):
    state: EntityState
    root_overlay: RootOverlay = Field(default_factory=RootOverlay)
    bone_input_overrides: BoneInputs = Field(default_factory=dict)
    playing: bool = False
    preset_id: Optional[str] = None
    elapsed: float = 0.0
    active_triggers: List[str] = Field(default_factory=list)
