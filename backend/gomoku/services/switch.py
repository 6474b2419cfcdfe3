import threading


class SharedSwitch:
    """A single on/off switch shared by every connected client."""

    def __init__(self, state: bool = False):
        self._state = state
        self._lock = threading.Lock()

    @property
    def state(self) -> bool:
        return self._state

    def toggle(self) -> bool:
        with self._lock:
            self._state = not self._state
            return self._state

    def to_dict(self):
        return {'state': self._state}
