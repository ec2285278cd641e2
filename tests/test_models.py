"""
Tests for the pydantic models: wire aliases, the schedule union and the
PUT body shape.
"""

from datetime import datetime, time, timedelta, timezone

import pytest
from pydantic import ValidationError

from coach_console.models import (
    Configured,
    HookDefinition,
    HookResult,
    ParamKind,
    ParamSpec,
    ScheduleWindow,
    SessionState,
    Unconfigured,
)


def window(**overrides) -> ScheduleWindow:
    fields = {"enabled": True, "first_run": "09:00", "last_run": "21:00", "frequency": "2h"}
    fields.update(overrides)
    return ScheduleWindow(**fields)


class TestHookDefinition:
    """Parsing hooks as the service sends them."""

    def test_null_config_is_unconfigured(self):
        hook = HookDefinition.model_validate({"id": "h1", "name": "Hook", "config": None})
        assert isinstance(hook.schedule, Unconfigured)
        assert hook.window is None

    def test_missing_config_is_unconfigured(self):
        hook = HookDefinition.model_validate({"id": "h1", "name": "Hook"})
        assert isinstance(hook.schedule, Unconfigured)

    def test_raw_window_becomes_configured(self):
        hook = HookDefinition.model_validate(
            {
                "id": "h1",
                "name": "Hook",
                "config": {
                    "enabled": True,
                    "trigger": "scheduled",
                    "first_run": "08:00",
                    "last_run": "20:00",
                    "frequency": "1h",
                    "params": None,
                },
            }
        )
        assert isinstance(hook.schedule, Configured)
        assert hook.window.first_run == time(8, 0)
        assert hook.window.frequency == timedelta(hours=1)
        assert hook.window.parameters == {}

    def test_configured_instance_accepted(self):
        hook = HookDefinition(id="h1", name="Hook", schedule=Configured(window=window()))
        assert hook.window == window()

    def test_null_params_is_empty_schema(self):
        hook = HookDefinition.model_validate({"id": "h1", "name": "Hook", "params": None})
        assert hook.parameter_schema == ()

    def test_param_spec_aliases(self):
        hook = HookDefinition.model_validate(
            {
                "id": "h1",
                "name": "Hook",
                "params": [
                    {"key": "tone", "name": "Tone", "type": "select", "default": "kind", "options": ["kind", "blunt"]},
                    {"key": "note", "name": "Note", "type": "text", "options": None},
                ],
            }
        )
        tone, note = hook.parameter_schema
        assert tone.kind is ParamKind.CHOICE
        assert tone.display_name == "Tone"
        assert tone.default_value == "kind"
        assert tone.choices == ("kind", "blunt")
        assert note.choices == ()
        assert note.default_value == ""

    def test_unknown_param_kind_rejected(self):
        with pytest.raises(ValidationError):
            ParamSpec.model_validate({"key": "k", "name": "K", "type": "slider"})


class TestScheduleWindow:
    """Shape checks and the PUT body."""

    def test_to_wire(self):
        body = window(parameters={"prompt": "hi"}).to_wire()
        assert body == {
            "enabled": True,
            "trigger": "scheduled",
            "first_run": "09:00",
            "last_run": "21:00",
            "frequency": "2h",
            "params": {"prompt": "hi"},
        }

    def test_defaults(self):
        w = ScheduleWindow(first_run=time(9), last_run=time(10), frequency=timedelta(minutes=15))
        assert w.enabled is False
        assert w.trigger == "scheduled"
        assert w.parameters == {}

    def test_bad_time_rejected(self):
        with pytest.raises(ValidationError):
            window(first_run="25:00")

    def test_bad_frequency_rejected(self):
        with pytest.raises(ValidationError):
            window(frequency="soon")

    def test_out_of_order_window_is_representable(self):
        w = window(first_run="22:00", last_run="08:00", frequency="-30m")
        assert w.first_run > w.last_run
        assert w.frequency < timedelta(0)

    def test_frozen(self):
        with pytest.raises(ValidationError):
            window().enabled = False


class TestHookResult:
    def test_created_alias_and_utc(self):
        result = HookResult.model_validate(
            {"id": "r1", "hook_id": "h1", "content": "x", "created": "2026-10-18T09:00:00"}
        )
        assert result.created_at == datetime(2026, 10, 18, 9, 0, tzinfo=timezone.utc)
        assert result.read is False

    def test_created_at_name_also_accepted(self):
        result = HookResult.model_validate(
            {"id": "r1", "hook_id": "h1", "created_at": "2026-10-18T09:00:00+02:00"}
        )
        assert result.created_at.utcoffset() == timedelta(hours=2)


class TestSessionState:
    def test_negative_counts_rejected(self):
        with pytest.raises(ValidationError):
            SessionState(focusing=True, remaining_seconds=-1, since_last_change_seconds=0, sessions_today=0)
