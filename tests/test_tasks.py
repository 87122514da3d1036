# tests/test_tasks.py
import threading


class RecordingAction:
    """An action that counts its invocations."""

    def __init__(self, label="action"):
        self.label = label
        self.calls = 0
        self._lock = threading.Lock()

    def __call__(self):
        with self._lock:
            self.calls += 1


class SharedCounter:
    """Counts invocations across several instances' actions."""

    def __init__(self):
        self.calls = []
        self._lock = threading.Lock()

    def action_for(self, instance):
        def action():
            with self._lock:
                self.calls.append(instance)

        return action


def failure_action():
    """An action that is designed to fail."""
    raise ValueError("This action is designed to fail")
