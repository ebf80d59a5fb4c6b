"""Single-owner store for the values a user edits on the rendered form.

Input handlers never touch the value map directly; they publish
:class:`FormValueUpdate` messages and the store applies them in order
when the exporter asks for a snapshot.
"""

from __future__ import annotations

import queue
from dataclasses import dataclass
from typing import Dict, Iterable, Mapping, Optional

from .models import FieldSuggestion


@dataclass(frozen=True)
class FormValueUpdate:
    """One edit event. ``checked`` is set only for checkbox events."""

    field_name: str
    value: str
    checked: Optional[bool] = None


class FormStateStore:
    """Owns the field-name -> value map fed by a message channel."""

    def __init__(self, initial: Optional[Mapping[str, str]] = None) -> None:
        self._values: Dict[str, str] = dict(initial or {})
        self._channel: "queue.SimpleQueue[FormValueUpdate]" = queue.SimpleQueue()

    def publish(self, update: FormValueUpdate) -> None:
        self._channel.put(update)

    def publish_value(self, field_name: str, value: str) -> None:
        self.publish(FormValueUpdate(field_name, value))

    def publish_checkbox(self, field_name: str, export_value: str, checked: bool) -> None:
        self.publish(FormValueUpdate(field_name, export_value or "true", checked))

    def apply_suggestions(self, suggestions: Iterable[FieldSuggestion]) -> int:
        """Queue every suggestion that carries a value; returns how many were queued."""

        count = 0
        for suggestion in suggestions:
            if suggestion.suggested_value is None:
                continue
            self.publish_value(suggestion.field_name, suggestion.suggested_value)
            count += 1
        return count

    def _apply(self, update: FormValueUpdate) -> None:
        if update.checked is None or update.checked:
            self._values[update.field_name] = update.value
            return
        # Unchecking one widget of a group must not clear a sibling's value.
        if self._values.get(update.field_name) == update.value:
            del self._values[update.field_name]

    def drain(self) -> int:
        applied = 0
        while True:
            try:
                update = self._channel.get_nowait()
            except queue.Empty:
                return applied
            self._apply(update)
            applied += 1

    def snapshot(self) -> Dict[str, str]:
        """Apply pending updates and return a copy of the current values."""

        self.drain()
        return dict(self._values)


__all__ = ["FormStateStore", "FormValueUpdate"]
