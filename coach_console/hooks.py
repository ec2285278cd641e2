"""
Hook registry cache and per-hook card state.

The cache holds the authoritative HookDefinitions from the last load. Each
hook has a HookCard: an editable draft of its schedule window plus the phase
of every in-flight action. Cards are derived from the authoritative copy on
every load unless the operator has unsaved edits (dirty).

Rules:
  - save_schedule validates locally first; a rejected window never leaves
    the process and leaves the cache untouched
  - a save or trigger is refused while the same action is pending for that hook
  - trigger bypasses the schedule window entirely
  - once closed, late responses are dropped without touching state
"""

import logging
from dataclasses import dataclass
from typing import Any, Optional

from coach_console.client import CoachClient
from coach_console.errors import ActionResult, ConsoleError, ErrorKind, ValidationFailure
from coach_console.models import (
    ActionPhase,
    Configured,
    HookDefinition,
    LoadState,
    ScheduleWindow,
)
from coach_console.schedule import default_window, normalize, validate

logger = logging.getLogger(__name__)


@dataclass
class HookCard:
    """Editable view of one hook."""

    hook_id: str
    draft: ScheduleWindow
    dirty: bool = False
    save_phase: ActionPhase = ActionPhase.IDLE
    trigger_phase: ActionPhase = ActionPhase.IDLE
    context_phase: ActionPhase = ActionPhase.IDLE
    status: str = ""
    context_text: str | None = None

    @property
    def saving(self) -> bool:
        return self.save_phase is ActionPhase.PENDING

    @property
    def triggering(self) -> bool:
        return self.trigger_phase is ActionPhase.PENDING

    @property
    def loading_context(self) -> bool:
        return self.context_phase is ActionPhase.PENDING

    @property
    def save_label(self) -> str:
        return "Saving..." if self.saving else "Save"

    @property
    def trigger_label(self) -> str:
        return "Running..." if self.triggering else "Trigger Now"

    @property
    def context_label(self) -> str:
        if self.loading_context:
            return "Loading..."
        return "Show Context" if self.context_text is None else "Hide Context"


def _draft_for(hook: HookDefinition) -> ScheduleWindow:
    if isinstance(hook.schedule, Configured):
        return normalize(hook.schedule.window, hook.parameter_schema)
    return default_window(hook.parameter_schema)


class HookRegistryCache:
    """Known hooks, their cards, and the save/trigger/context actions."""

    def __init__(self, client: CoachClient, refresh_after_save: bool = True):
        self.client = client
        self.refresh_after_save = refresh_after_save
        self.load_state = LoadState.IDLE
        self.load_error: str | None = None
        self._hooks: dict[str, HookDefinition] = {}
        self._cards: dict[str, HookCard] = {}
        self._closed = False

    @property
    def hooks(self) -> list[HookDefinition]:
        return list(self._hooks.values())

    @property
    def cards(self) -> list[HookCard]:
        return [self._cards[hook_id] for hook_id in self._hooks]

    def get(self, hook_id: str) -> Optional[HookDefinition]:
        return self._hooks.get(hook_id)

    def card(self, hook_id: str) -> Optional[HookCard]:
        return self._cards.get(hook_id)

    async def load(self) -> list[HookDefinition]:
        """Replace the cached set with a fresh pull. Zero hooks is a valid result."""
        self.load_state = LoadState.LOADING
        try:
            hooks = await self.client.fetch_hooks()
        except ConsoleError as e:
            if not self._closed:
                self.load_state = LoadState.FAILED
                self.load_error = str(e)
            logger.warning(f"Failed to load hooks: {e}")
            return self.hooks

        if self._closed:
            return hooks

        self._hooks = {hook.id: hook for hook in hooks}
        for hook in hooks:
            card = self._cards.get(hook.id)
            if card is None:
                self._cards[hook.id] = HookCard(hook_id=hook.id, draft=_draft_for(hook))
            elif not card.dirty:
                card.draft = _draft_for(hook)
        for stale in set(self._cards) - set(self._hooks):
            del self._cards[stale]

        self.load_state = LoadState.LOADED
        self.load_error = None
        logger.info("Loaded hooks", extra={"count": len(hooks)})
        return hooks

    def edit(self, hook_id: str, **changes: Any) -> ScheduleWindow:
        """
        Replace the card's draft with the given fields changed.

        Raises:
            KeyError if the hook is unknown.
            pydantic.ValidationError if a value has the wrong shape.
        """
        card = self._cards[hook_id]
        fields = card.draft.model_dump()
        fields.update(changes)
        card.draft = ScheduleWindow.model_validate(fields)
        card.dirty = True
        return card.draft

    def set_param(self, hook_id: str, key: str, value: str) -> ScheduleWindow:
        params = dict(self._cards[hook_id].draft.parameters)
        params[key] = value
        return self.edit(hook_id, parameters=params)

    async def save_card(self, hook_id: str) -> ActionResult:
        card = self._cards.get(hook_id)
        if card is None:
            return ActionResult.fail(ErrorKind.UNKNOWN_ID, f"Unknown hook: {hook_id}")
        return await self.save_schedule(hook_id, card.draft)

    async def save_schedule(self, hook_id: str, window: ScheduleWindow) -> ActionResult:
        """Validate, submit, and on success swap the cached window in one step."""
        hook = self._hooks.get(hook_id)
        if hook is None:
            return ActionResult.fail(ErrorKind.UNKNOWN_ID, f"Unknown hook: {hook_id}")
        card = self._cards[hook_id]
        if card.saving:
            return ActionResult.fail(ErrorKind.PENDING, "Save already in progress")

        check = validate(window, hook.parameter_schema)
        if not check.ok:
            failure = ValidationFailure(check)
            card.save_phase = ActionPhase.SETTLED
            card.status = f"Error: {failure}"
            return ActionResult.from_exception(failure)

        window = normalize(window, hook.parameter_schema)
        submitted_draft = card.draft
        card.save_phase = ActionPhase.PENDING
        card.status = ""
        try:
            await self.client.update_hook_config(hook_id, window)
        except ConsoleError as e:
            logger.warning(f"Saving schedule failed: {e}", extra={"hook_id": hook_id})
            if not self._closed:
                card.save_phase = ActionPhase.SETTLED
                card.status = f"Error: {e}"
            return ActionResult.from_exception(e)

        if self._closed:
            return ActionResult.ok(window)

        current = self._hooks.get(hook_id)
        if current is not None:
            self._hooks[hook_id] = current.model_copy(update={"schedule": Configured(window=window)})
        card.save_phase = ActionPhase.SETTLED
        card.status = "Saved"
        # Edits made while the save was in flight stay dirty
        if card.draft == submitted_draft:
            card.draft = window
            card.dirty = False
        logger.info("Hook schedule saved", extra={"hook_id": hook_id})

        if self.refresh_after_save:
            await self.load()
        return ActionResult.ok(window)

    async def trigger(self, hook_id: str) -> ActionResult:
        """Run the hook now, regardless of its schedule. Its result arrives via the feed."""
        card = self._cards.get(hook_id)
        if card is None:
            return ActionResult.fail(ErrorKind.UNKNOWN_ID, f"Unknown hook: {hook_id}")
        if card.triggering:
            return ActionResult.fail(ErrorKind.PENDING, "Trigger already in progress")

        card.trigger_phase = ActionPhase.PENDING
        card.status = ""
        try:
            await self.client.trigger_hook(hook_id)
        except ConsoleError as e:
            logger.warning(f"Trigger failed: {e}", extra={"hook_id": hook_id})
            if not self._closed:
                card.trigger_phase = ActionPhase.SETTLED
                card.status = f"Error: {e}"
            return ActionResult.from_exception(e)

        if not self._closed:
            card.trigger_phase = ActionPhase.SETTLED
            card.status = "Triggered"
        logger.info("Hook triggered", extra={"hook_id": hook_id})
        return ActionResult.ok()

    async def toggle_context(self, hook_id: str) -> ActionResult:
        """Fetch and show the hook's context preview, or hide it if shown."""
        card = self._cards.get(hook_id)
        if card is None:
            return ActionResult.fail(ErrorKind.UNKNOWN_ID, f"Unknown hook: {hook_id}")
        if card.context_text is not None:
            card.context_text = None
            return ActionResult.ok()
        if card.loading_context:
            return ActionResult.fail(ErrorKind.PENDING, "Context already loading")

        card.context_phase = ActionPhase.PENDING
        try:
            text = await self.client.fetch_hook_context(hook_id)
        except ConsoleError as e:
            if not self._closed:
                card.context_phase = ActionPhase.SETTLED
                card.status = f"Error: {e}"
            return ActionResult.from_exception(e)

        if not self._closed:
            card.context_phase = ActionPhase.SETTLED
            card.context_text = text
        return ActionResult.ok(text)

    def close(self) -> None:
        self._closed = True
