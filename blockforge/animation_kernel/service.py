"""Animation State Engine: preset playback plus overlay triggers over EntityState."""
from __future__ import annotations

import logging
from typing import Iterable, List, Mapping, Optional, Set, Tuple

from blockforge.animation_kernel.presets import clamp_speed, get_preset
from blockforge.animation_kernel.schemas import (
    TICKS_PER_SECOND, ActiveOverlay, AnimationPreset, BoneInputs, EntityState, RootOverlay, TickResult,
)
from blockforge.animation_kernel.triggers import advance_overlay, start_trigger

logger = logging.getLogger(__name__)

DECAYING_CHANNELS = ("hurt_time", "death_time")
# Channels that survive a preset switch.
PRESERVED_ON_SELECT = ("id", "head_yaw", "head_pitch")


def evaluate(
    state: EntityState,
    dt: float,
    preset: Optional[AnimationPreset],
    active_overlays: Iterable[ActiveOverlay],
    held: Iterable[str] = (),
    bone_targets: Optional[Set[str]] = None,
) -> Tuple[EntityState, List[ActiveOverlay]]:
    """
    One simulated frame. Pure: returns the new state and the advanced overlays.

    Order: preset update, frame bookkeeping, counter decay (held channels are
    skipped), then overlays. Overlays that finish on this frame are still
    returned so their last contribution can be shown; callers drop `done` ones.
    """
    if dt < 0:
        raise ValueError("dt must be >= 0")

    held_channels = set(held)
    if preset is not None:
        state = state.apply_patch(preset.update(state, dt))
        held_channels.update(preset.held_channels)

    patch = {"frame_time": dt, "frame_counter": state.frame_counter + 1}
    for channel in DECAYING_CHANNELS:
        if channel not in held_channels:
            patch[channel] = max(0.0, getattr(state, channel) - dt * TICKS_PER_SECOND)
    if "hurt_time" not in held_channels:
        patch["is_hurt"] = patch["hurt_time"] > 0
    state = state.apply_patch(patch)

    advanced: List[ActiveOverlay] = []
    for overlay in active_overlays:
        overlay, overlay_patch = advance_overlay(overlay, dt, state, bone_targets)
        if overlay_patch:
            state = state.apply_patch(overlay_patch)
        advanced.append(overlay)
    return state, advanced


def combine_overlays(overlays: Iterable[ActiveOverlay]) -> Tuple[RootOverlay, BoneInputs]:
    """Root offsets add up; bone inputs are last-write-wins per bone channel."""
    root = RootOverlay()
    bones: BoneInputs = {}
    for overlay in overlays:
        root = root.plus(overlay.root)
        for bone, channels in overlay.bone_inputs.items():
            bones.setdefault(bone, {}).update(channels)
    return root, bones


class AnimationStateEngine:
    """
    Stateful controller for one preview: the selected preset, its playback
    clock, the speed multiplier and the running triggers.
    """

    def __init__(self, state: Optional[EntityState] = None, bone_targets: Optional[Set[str]] = None):
        self.state = state or EntityState()
        self.bone_targets = bone_targets
        self.preset: Optional[AnimationPreset] = None
        self.playing = False
        self.elapsed = 0.0
        self.speed = 1.0
        self.overlays: List[ActiveOverlay] = []

    # --- Preset selection ---

    @property
    def preset_id(self) -> Optional[str]:
        return self.preset.id if self.preset else None

    def _reset_state(self) -> None:
        keep = {name: getattr(self.state, name) for name in PRESERVED_ON_SELECT}
        self.state = EntityState(**keep)
        if self.preset is not None and self.preset.setup is not None:
            self.state = self.state.apply_patch(self.preset.setup())

    def select(self, preset_id: Optional[str], autoplay: bool = True) -> None:
        """
        Select a preset. Selecting the current preset again toggles playback;
        selecting another resets state to defaults and applies its setup patch.
        None clears the selection.
        """
        if preset_id is None:
            self.preset = None
            self.playing = False
            self.elapsed = 0.0
            return
        preset = get_preset(preset_id)
        if self.preset is not None and self.preset.id == preset.id:
            self.playing = not self.playing
            return
        self.preset = preset
        self.elapsed = 0.0
        self._reset_state()
        self.playing = autoplay
        logger.debug("Selected animation preset %s (autoplay=%s)", preset.id, autoplay)

    def play(self) -> None:
        if self.preset is not None:
            self.playing = True

    def pause(self) -> None:
        self.playing = False

    def stop(self) -> None:
        """Pause, rewind the preset clock and drop running triggers."""
        self.playing = False
        self.elapsed = 0.0
        self.overlays = []
        self._reset_state()

    def set_speed(self, speed: float) -> float:
        self.speed = clamp_speed(speed)
        return self.speed

    # --- Triggers & overrides ---

    def trigger(self, trigger_id: str) -> None:
        self.state, self.overlays = start_trigger(self.state, self.overlays, trigger_id)
        logger.debug("Trigger %s (%d running)", trigger_id, len(self.overlays))

    def apply_overrides(self, patch: Mapping[str, object]) -> EntityState:
        """Merge external channel values (e.g. composite control overrides)."""
        self.state = self.state.apply_patch(patch)
        return self.state

    # --- Clock ---

    def tick(self, dt: float) -> TickResult:
        if dt < 0:
            raise ValueError("dt must be >= 0")
        scaled = dt * self.speed

        running: Optional[AnimationPreset] = None
        finished = False
        if self.preset is not None and self.playing:
            running = self.preset
            self.elapsed += scaled
            if not self.preset.loop and self.preset.duration > 0 and self.elapsed >= self.preset.duration:
                self.elapsed = self.preset.duration
                finished = True

        held = self.preset.held_channels if self.preset is not None else ()
        self.state, overlays = evaluate(self.state, scaled, running, self.overlays, held, self.bone_targets)
        root, bones = combine_overlays(overlays)
        self.overlays = [overlay for overlay in overlays if not overlay.done]
        if finished:
            self.playing = False
            logger.debug("Preset %s finished", self.preset.id)

        return TickResult(
            state=self.state,
            root_overlay=root,
            bone_input_overrides=bones,
            playing=self.playing,
            preset_id=self.preset_id,
            elapsed=self.elapsed,
            active_triggers=[overlay.id for overlay in self.overlays],
        )
