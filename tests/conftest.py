import sys
from pathlib import Path

import pytest

# Modules live at the repository root (flat layout)
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from notifications import Notification  # noqa: E402


class RecordingNotifier:
    """Collects notifications instead of displaying them."""

    def __init__(self):
        self.notifications: list[Notification] = []

    def notify(self, notification: Notification) -> None:
        self.notifications.append(notification)

    @property
    def titles(self) -> list[str]:
        return [n.title for n in self.notifications]


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def sample_records():
    """One finding per category, in the order the UI fixture uses."""
    from mock_data import MOCK_FINDINGS

    return [dict(record) for record in MOCK_FINDINGS]
