"""EventLog — append-only журнал событий vault.

Каждая запись перед добавлением валидируется против
contracts/schema/vault_event.json.
"""

import logging
from typing import Iterator, TypeVar

from ladder_vault.core.contracts import VaultEventValidator
from ladder_vault.core.domain.events import VaultEvent

logger = logging.getLogger(__name__)

E = TypeVar("E", bound=VaultEvent)


class EventLog:
    """Журнал событий; записи только добавляются."""

    def __init__(self, validate: bool = True):
        self._events: list[VaultEvent] = []
        self._validator = VaultEventValidator() if validate else None

    def emit(self, event: VaultEvent) -> None:
        """
        Добавление события.

        Raises:
            jsonschema.ValidationError: Если запись не соответствует схеме
        """
        if self._validator is not None:
            self._validator.validate(event.model_dump(mode="json"))
        self._events.append(event)
        logger.debug("Event %s: %s", event.event_type, event.model_dump(mode="json"))

    def of_type(self, event_cls: type[E]) -> list[E]:
        return [event for event in self._events if isinstance(event, event_cls)]

    def last(self, event_cls: type[E]) -> E | None:
        matching = self.of_type(event_cls)
        return matching[-1] if matching else None

    def __iter__(self) -> Iterator[VaultEvent]:
        return iter(list(self._events))

    def __len__(self) -> int:
        return len(self._events)
