"""
Pydantic models for session state, hook definitions, schedules and results.

Field names follow the console's vocabulary; aliases accept the coach
service's wire names (params, config, name, type, default, options, created).

Usage:
    from coach_console.models import HookDefinition

    hooks = [HookDefinition.model_validate(item) for item in response.json()]
    if isinstance(hooks[0].schedule, Configured):
        ...
"""

from datetime import datetime, time, timedelta, timezone
from enum import Enum
from typing import Annotated, Any, Literal, Union

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    field_serializer,
    field_validator,
)

from coach_console.durations import format_frequency, parse_frequency

# =============================================================================
# SESSION
# =============================================================================


class SessionState(BaseModel):
    """Mirror of the service's focus session, replaced wholesale on every push."""

    model_config = ConfigDict(frozen=True)

    focusing: bool
    remaining_seconds: int = Field(ge=0)
    since_last_change_seconds: int = Field(ge=0)
    sessions_today: int = Field(ge=0)


class FocusRecord(BaseModel):
    """One completed focus session from the history endpoint."""

    model_config = ConfigDict(frozen=True)

    timestamp: datetime
    duration: int = Field(ge=0)


# =============================================================================
# HOOK PARAMETERS
# =============================================================================


class ParamKind(str, Enum):
    LINE_TEXT = "text"
    MULTILINE_TEXT = "textarea"
    CHOICE = "select"


class ParamSpec(BaseModel):
    """Declared parameter of a hook."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    key: str
    display_name: str = Field(alias="name")
    kind: ParamKind = Field(default=ParamKind.LINE_TEXT, alias="type")
    default_value: str = Field(default="", alias="default")
    choices: tuple[str, ...] = Field(default=(), alias="options")

    @field_validator("choices", mode="before")
    @classmethod
    def _null_choices(cls, value: Any) -> Any:
        return () if value is None else value


# =============================================================================
# SCHEDULE WINDOW
# =============================================================================


class ScheduleWindow(BaseModel):
    """
    Recurrence envelope of a hook.

    Construction only checks shape (HH:MM times, a parseable duration).
    Ordering and sign constraints are checked by schedule.validate so an
    invalid window can still be represented and reported precisely.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    enabled: bool = False
    trigger: str = "scheduled"
    first_run: time
    last_run: time
    frequency: timedelta
    parameters: dict[str, str] = Field(default_factory=dict, alias="params")

    @field_validator("frequency", mode="before")
    @classmethod
    def _parse_frequency(cls, value: Any) -> Any:
        if isinstance(value, str):
            return parse_frequency(value)
        return value

    @field_validator("parameters", mode="before")
    @classmethod
    def _null_parameters(cls, value: Any) -> Any:
        return {} if value is None else value

    @field_serializer("first_run", "last_run")
    def _dump_time(self, value: time) -> str:
        return value.strftime("%H:%M")

    @field_serializer("frequency")
    def _dump_frequency(self, value: timedelta) -> str:
        return format_frequency(value)

    def to_wire(self) -> dict[str, Any]:
        """Request body for PUT /hooks/{id}."""
        return self.model_dump(mode="json", by_alias=True)


class Unconfigured(BaseModel):
    """A hook that has never had a schedule saved."""

    model_config = ConfigDict(frozen=True)

    state: Literal["unconfigured"] = "unconfigured"


class Configured(BaseModel):
    """A hook with a saved schedule window."""

    model_config = ConfigDict(frozen=True)

    state: Literal["configured"] = "configured"
    window: ScheduleWindow


HookSchedule = Annotated[Union[Unconfigured, Configured], Field(discriminator="state")]


# =============================================================================
# HOOKS AND RESULTS
# =============================================================================


class HookDefinition(BaseModel):
    """A registered hook. Only `schedule` ever changes, and only via save."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str
    name: str
    description: str = ""
    parameter_schema: tuple[ParamSpec, ...] = Field(default=(), alias="params")
    schedule: HookSchedule = Field(default_factory=Unconfigured, alias="config")

    @field_validator("parameter_schema", mode="before")
    @classmethod
    def _null_params(cls, value: Any) -> Any:
        return () if value is None else value

    @field_validator("schedule", mode="before")
    @classmethod
    def _wrap_config(cls, value: Any) -> Any:
        # The service embeds the raw window or null
        if value is None or isinstance(value, Unconfigured):
            return {"state": "unconfigured"}
        if isinstance(value, Configured):
            return {"state": "configured", "window": value.window}
        if isinstance(value, ScheduleWindow):
            return {"state": "configured", "window": value}
        if isinstance(value, dict) and "state" not in value:
            return {"state": "configured", "window": value}
        return value

    @property
    def window(self) -> ScheduleWindow | None:
        if isinstance(self.schedule, Configured):
            return self.schedule.window
        return None


class HookResult(BaseModel):
    """One execution outcome of a hook."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str
    hook_id: str
    content: str = ""
    read: bool = False
    created_at: datetime = Field(validation_alias=AliasChoices("created_at", "created"))

    @field_validator("created_at")
    @classmethod
    def _assume_utc(cls, value: datetime) -> datetime:
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value


# =============================================================================
# VIEW STATE
# =============================================================================


class LoadState(str, Enum):
    """List load status. LOADED with zero items is distinct from FAILED."""

    IDLE = "idle"
    LOADING = "loading"
    LOADED = "loaded"
    FAILED = "failed"


class ActionPhase(str, Enum):
    IDLE = "idle"
    PENDING = "pending"
    SETTLED = "settled"
