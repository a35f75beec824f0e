"""Push channel adapter registry.

Provides singleton access to the push adapter. The fake adapter is the
default; a real provider adapter can be selected with PUSH_ADAPTER.
"""

import os

_push_instance = None


def get_push_channel():
    """Return the configured push adapter (singleton)."""
    global _push_instance
    if _push_instance is None:
        adapter = os.environ.get("PUSH_ADAPTER", "fake")
        if adapter == "fake":
            from notifications.channel.fake_push import FakePushAdapter

            _push_instance = FakePushAdapter()
        else:
            raise ValueError(f"Unknown push adapter: {adapter}")
    return _push_instance


def reset_channels():
    """Reset the push singleton (useful for testing)."""
    global _push_instance
    _push_instance = None
