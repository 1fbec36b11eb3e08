"""The single authoritative voice status and its allowed transitions."""

from __future__ import annotations

import logging
from enum import Enum
from typing import Callable


class VoiceStatus(str, Enum):
    """What the voice core is doing right now."""

    IDLE = "idle"
    LISTENING = "listening"
    PROCESSING = "processing"
    SPEAKING = "speaking"


_EDGES: dict[VoiceStatus, frozenset[VoiceStatus]] = {
    VoiceStatus.IDLE: frozenset({VoiceStatus.LISTENING, VoiceStatus.SPEAKING}),
    VoiceStatus.LISTENING: frozenset({VoiceStatus.PROCESSING, VoiceStatus.IDLE}),
    VoiceStatus.PROCESSING: frozenset({VoiceStatus.IDLE, VoiceStatus.SPEAKING}),
    VoiceStatus.SPEAKING: frozenset({VoiceStatus.IDLE, VoiceStatus.LISTENING}),
}

StatusListener = Callable[[VoiceStatus, VoiceStatus], None]


class InvalidTransitionError(RuntimeError):
    """Raised when a status change does not follow a defined edge."""

    def __init__(self, current: VoiceStatus, target: VoiceStatus) -> None:
        super().__init__(f"Cannot move voice status from {current.value} to {target.value}")
        self.current = current
        self.target = target


class StatusMachine:
    """Finite-state machine over ``VoiceStatus``.

    Components never assign the status directly; they request one of the
    transitions below. Observers registered with :meth:`subscribe` are told
    about every change, which is how the host UI re-renders its affordance.
    """

    def __init__(self, logger: logging.Logger | None = None) -> None:
        self._current = VoiceStatus.IDLE
        self._listeners: list[StatusListener] = []
        self._logger = logger or logging.getLogger("blind_aid.voice.status")

    @property
    def current(self) -> VoiceStatus:
        return self._current

    def can_transition(self, target: VoiceStatus) -> bool:
        return target == self._current or target in _EDGES[self._current]

    def transition(self, target: VoiceStatus) -> None:
        """Move to ``target`` or raise :class:`InvalidTransitionError`."""
        if target == self._current:
            return
        if target not in _EDGES[self._current]:
            raise InvalidTransitionError(self._current, target)
        self._set(target)

    def try_transition(self, target: VoiceStatus) -> bool:
        """Like :meth:`transition`, but logs and returns ``False`` on an undefined edge."""
        try:
            self.transition(target)
        except InvalidTransitionError:
            self._logger.warning(
                "status_transition_rejected",
                extra={"current": self._current.value, "target": target.value},
            )
            return False
        return True

    def activate(self) -> bool:
        """Enter listening from idle or speaking; a no-op in any other state."""
        if self._current not in (VoiceStatus.IDLE, VoiceStatus.SPEAKING):
            return False
        self._set(VoiceStatus.LISTENING)
        return True

    def reset(self) -> None:
        """Force idle from any state."""
        if self._current != VoiceStatus.IDLE:
            self._logger.info("status_reset", extra={"previous": self._current.value})
            self._set(VoiceStatus.IDLE)

    def subscribe(self, listener: StatusListener) -> Callable[[], None]:
        """Register ``listener`` and return a callable that unregisters it."""
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    def _set(self, target: VoiceStatus) -> None:
        previous = self._current
        self._current = target
        self._logger.debug("status_changed", extra={"previous": previous.value, "current": target.value})
        for listener in list(self._listeners):
            try:
                listener(previous, target)
            except Exception:  # noqa: BLE001 - observers must not break the machine.
                self._logger.exception("status_listener_failed")
