# planboard/confirm.py
"""Confirmation policy for destructive or constraint-breaking actions."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Callable, Iterable, Optional, Protocol, Tuple

log = logging.getLogger(__name__)

# Request kinds raised by the controller.
KIND_DELETE = "delete"
KIND_DELETE_GROUP = "delete_group"
KIND_PINNED_MOVE = "pinned_move"
KIND_CLEAR = "clear"

SUPPRESS_SECONDS = 5 * 60


@dataclass(frozen=True)
class ConfirmRequest:
    kind: str
    title: str
    message: str
    suppressible: bool = False


class Confirmer(Protocol):
    def confirm(self, request: ConfirmRequest) -> bool:
        """Return True to proceed."""


class AlwaysConfirm:
    def confirm(self, request: ConfirmRequest) -> bool:
        return True


class NeverConfirm:
    def confirm(self, request: ConfirmRequest) -> bool:
        return False


# Prompt answer: (accepted, dont_ask_again).
Prompt = Callable[[ConfirmRequest], Tuple[bool, bool]]


class SuppressibleConfirmer:
    """Asks through `prompt`; an accepted answer with "don't ask again"
    silences further requests of the same kind for `window` seconds.

    Only kinds listed in `suppressible_kinds` can be silenced.
    """

    def __init__(
        self,
        prompt: Prompt,
        *,
        window: float = SUPPRESS_SECONDS,
        suppressible_kinds: Iterable[str] = (KIND_DELETE,),
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._prompt = prompt
        self._window = float(window)
        self._kinds = frozenset(suppressible_kinds)
        self._clock = clock
        self._until: dict[str, float] = {}

    def suppressed_until(self, kind: str) -> Optional[float]:
        until = self._until.get(kind)
        if until is None:
            return None
        if self._clock() >= until:
            del self._until[kind]
            return None
        return until

    def is_suppressed(self, kind: str) -> bool:
        return self.suppressed_until(kind) is not None

    def reset(self) -> None:
        self._until.clear()

    def confirm(self, request: ConfirmRequest) -> bool:
        if request.kind in self._kinds and self.is_suppressed(request.kind):
            log.debug("confirmation %s suppressed", request.kind)
            return True

        can_suppress = request.kind in self._kinds
        if can_suppress != request.suppressible:
            request = ConfirmRequest(request.kind, request.title, request.message, suppressible=can_suppress)

        accepted, dont_ask = self._prompt(request)
        if accepted and dont_ask and can_suppress:
            self._until[request.kind] = self._clock() + self._window
            log.info("confirmations of kind %s suppressed for %.0fs", request.kind, self._window)
        return bool(accepted)


__all__ = [
    "AlwaysConfirm",
    "ConfirmRequest",
    "Confirmer",
    "KIND_CLEAR",
    "KIND_DELETE",
    "KIND_DELETE_GROUP",
    "KIND_PINNED_MOVE",
    "NeverConfirm",
    "SUPPRESS_SECONDS",
    "SuppressibleConfirmer",
]
