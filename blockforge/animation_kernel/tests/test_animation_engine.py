"""Tests for entity animation presets, triggers and the state engine."""
import math

import pytest

from blockforge.animation_kernel.presets import (
    DEATH_TIME_MAX, MAX_ANIMATION_SPEED, MIN_ANIMATION_SPEED, get_preset, list_presets,
)
from blockforge.animation_kernel.schemas import ActiveOverlay, EntityState, RootOverlay
from blockforge.animation_kernel.service import AnimationStateEngine, combine_overlays, evaluate
from blockforge.animation_kernel.triggers import start_trigger
from blockforge.common.errors import MalformedDefinition, NotFound


class TestEntityState:
    def test_patch_is_last_write_wins(self):
        state = EntityState(limb_speed=0.2)
        merged = state.apply_patch({"limb_speed": 0.7, "is_child": True})
        assert merged.limb_speed == 0.7
        assert merged.is_child is True
        assert state.limb_speed == 0.2

    def test_unknown_channel_rejected(self):
        with pytest.raises(MalformedDefinition) as exc:
            EntityState().apply_patch({"wing_flap": 1.0})
        assert exc.value.stage == "animation"
        assert exc.value.details["channels"] == ["wing_flap"]

    def test_channel_value_converts_flags(self):
        state = EntityState(is_sneaking=True)
        assert state.channel_value("is_sneaking") == 1.0
        assert state.channel_value("is_child") == 0.0
        assert state.channel_value("health") == 20.0

    def test_defaults(self):
        state = EntityState()
        assert state.age == 100.0
        assert state.day_time == 6000.0
        assert state.is_alive and state.is_on_ground
        assert "rule_index" in EntityState.channel_names()


class TestPresets:
    def test_builtin_ids(self):
        assert [p.id for p in list_presets()] == [
            "idle", "walking", "sprinting", "attacking", "hurt", "dying", "angry", "baby",
        ]

    def test_unknown_preset(self):
        with pytest.raises(NotFound):
            get_preset("moonwalk")

    def test_time_wraps(self):
        patch = get_preset("walking").update(EntityState(time=27719.0), 0.1)
        assert patch["time"] == pytest.approx(1.0)

    def test_dying_never_exceeds_max(self):
        """Repeated updates, including an absurd dt, stay clamped."""
        preset = get_preset("dying")
        state = EntityState()
        for dt in (0.05, 0.5, 3.0, 1e6):
            state = state.apply_patch(preset.update(state, dt))
            assert state.death_time <= DEATH_TIME_MAX
        assert state.death_time == DEATH_TIME_MAX

    def test_attacking_swing_cycle(self):
        preset = get_preset("attacking")
        # age 103 ticks -> 5.15s -> 0.15s into the 0.5s cycle
        patch = preset.update(EntityState(age=103.0), 0.05)
        assert patch["swing_progress"] == pytest.approx(0.5)
        assert patch["is_aggressive"] is True


class TestEvaluate:
    def test_negative_dt_rejected(self):
        with pytest.raises(ValueError):
            evaluate(EntityState(), -0.1, None, [])

    def test_huge_dt_keeps_death_time_bounded(self):
        state, _ = evaluate(EntityState(), 1e6, get_preset("dying"), [])
        assert state.death_time == DEATH_TIME_MAX

    def test_counters_decay(self):
        state, _ = evaluate(EntityState(hurt_time=10.0, is_hurt=True), 0.25, None, [])
        assert state.hurt_time == pytest.approx(5.0)
        assert state.is_hurt is True
        state, _ = evaluate(state, 1.0, None, [])
        assert state.hurt_time == 0.0
        assert state.is_hurt is False

    def test_held_channel_skips_decay(self):
        state, _ = evaluate(EntityState(death_time=12.0), 1.0, None, [], held=["death_time"])
        assert state.death_time == 12.0

    def test_frame_bookkeeping(self):
        state, _ = evaluate(EntityState(), 0.1, None, [])
        assert state.frame_time == 0.1
        assert state.frame_counter == 1

    def test_combine_overlays(self):
        a = ActiveOverlay(id="a", duration_sec=1.0, root=RootOverlay(y=0.1), bone_inputs={"neck": {"ty": 1.0}})
        b = ActiveOverlay(id="b", duration_sec=1.0, root=RootOverlay(y=0.2, rz=0.5),
                          bone_inputs={"neck": {"ty": 3.0}, "head": {"rx": 0.4}})
        root, bones = combine_overlays([a, b])
        assert root.y == pytest.approx(0.3)
        assert root.rz == 0.5
        assert bones == {"neck": {"ty": 3.0}, "head": {"rx": 0.4}}


class TestTriggers:
    def test_unknown_trigger(self):
        with pytest.raises(NotFound):
            start_trigger(EntityState(), [], "trigger.backflip")

    def test_retrigger_resets_phase(self):
        engine = AnimationStateEngine()
        engine.trigger("trigger.hurt")
        engine.tick(0.4)
        assert engine.overlays[0].elapsed_sec == pytest.approx(0.4)

        engine.trigger("trigger.hurt")
        assert len(engine.overlays) == 1
        assert engine.overlays[0].elapsed_sec == 0.0

        result = engine.tick(0.25)
        assert result.root_overlay.y == pytest.approx(0.06)
        assert result.active_triggers == ["trigger.hurt"]

    def test_hurt_sets_and_decays_hurt_time(self):
        engine = AnimationStateEngine()
        engine.trigger("trigger.hurt")
        assert engine.state.hurt_time == 10.0
        assert engine.state.is_hurt is True
        assert engine.tick(0.25).state.hurt_time == pytest.approx(5.0)
        state = engine.tick(0.25).state
        assert state.hurt_time == pytest.approx(0.0)
        assert state.is_hurt is False

    def test_attack_swing_and_expiry(self):
        engine = AnimationStateEngine()
        engine.trigger("trigger.attack")
        mid = engine.tick(0.15)
        assert mid.state.swing_progress == pytest.approx(1.0)
        assert mid.active_triggers == ["trigger.attack"]
        end = engine.tick(0.15)
        assert end.state.swing_progress == pytest.approx(0.0, abs=1e-9)
        assert end.active_triggers == []

    def test_death_trigger(self):
        engine = AnimationStateEngine()
        engine.trigger("trigger.death")
        assert engine.state.death_time == 20.0
        assert engine.state.health == 0.0
        result = engine.tick(1.0)
        assert result.root_overlay.rz == pytest.approx(1.1)
        assert result.root_overlay.x == pytest.approx(0.12)

    def test_horse_rearing_neck(self):
        engine = AnimationStateEngine()
        engine.trigger("trigger.horse_rearing")
        result = engine.tick(0.5)
        assert result.bone_input_overrides["neck"]["ty"] == pytest.approx(-4.0)

    def test_eat_respects_bone_targets(self):
        engine = AnimationStateEngine(EntityState(head_pitch=10.0), bone_targets={"head"})
        engine.trigger("trigger.eat")
        result = engine.tick(0.5)
        assert set(result.bone_input_overrides) == {"head"}
        assert result.bone_input_overrides["head"]["rx"] == pytest.approx(math.radians(10.0) + 1.2)

    def test_triggers_run_while_paused(self):
        engine = AnimationStateEngine()
        engine.select("walking", autoplay=False)
        engine.trigger("trigger.attack")
        result = engine.tick(0.15)
        assert result.playing is False
        assert result.state.swing_progress == pytest.approx(1.0)
        assert result.state.limb_swing == 0.0


class TestAnimationStateEngine:
    def test_speed_is_clamped(self):
        engine = AnimationStateEngine()
        assert engine.set_speed(10) == MAX_ANIMATION_SPEED
        assert engine.set_speed(0) == MIN_ANIMATION_SPEED
        assert engine.set_speed(1.5) == 1.5

    def test_walking_tick(self):
        engine = AnimationStateEngine()
        engine.select("walking")
        result = engine.tick(0.5)
        assert result.playing is True
        assert result.preset_id == "walking"
        assert result.state.limb_swing == pytest.approx(5.0)
        assert result.state.limb_speed == 0.5
        assert result.state.age == pytest.approx(110.0)
        assert result.elapsed == pytest.approx(0.5)

    def test_speed_scales_dt(self):
        engine = AnimationStateEngine()
        engine.select("walking")
        engine.set_speed(2.0)
        result = engine.tick(0.5)
        assert result.elapsed == pytest.approx(1.0)
        assert result.state.limb_swing == pytest.approx(10.0)

    def test_switch_preserves_identity_channels(self):
        engine = AnimationStateEngine(EntityState(id=42, head_yaw=30.0, limb_swing=5.0))
        engine.select("sprinting")
        assert engine.state.id == 42
        assert engine.state.head_yaw == 30.0
        assert engine.state.limb_swing == 0.0
        assert engine.state.is_sprinting is True

    def test_reselect_toggles_playback(self):
        engine = AnimationStateEngine()
        engine.select("idle")
        assert engine.playing is True
        engine.select("idle")
        assert engine.playing is False
        engine.select("idle")
        assert engine.playing is True

    def test_dying_stops_and_holds(self):
        engine = AnimationStateEngine()
        engine.select("dying")
        result = engine.tick(1000.0)
        assert result.state.death_time == DEATH_TIME_MAX
        assert result.playing is False
        assert result.elapsed == 1.0
        for _ in range(5):
            result = engine.tick(5.0)
        assert result.state.death_time == DEATH_TIME_MAX

    def test_stop_rewinds(self):
        engine = AnimationStateEngine()
        engine.select("attacking")
        engine.trigger("trigger.hurt")
        engine.tick(0.2)
        engine.stop()
        assert engine.playing is False
        assert engine.elapsed == 0.0
        assert engine.overlays == []
        assert engine.state.is_aggressive is True
        assert engine.state.frame_counter == 0

    def test_clear_selection(self):
        engine = AnimationStateEngine()
        engine.select("walking")
        engine.select(None)
        assert engine.preset_id is None
        assert engine.tick(0.1).playing is False

    def test_apply_overrides(self):
        engine = AnimationStateEngine()
        state = engine.apply_overrides({"is_child": True, "anger_time": 100.0})
        assert state.is_child is True
        with pytest.raises(MalformedDefinition):
            engine.apply_overrides({"not_a_channel": 1})
