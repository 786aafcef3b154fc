"""Assistant backend interface.

The local implementation lives in voxsettings.backend.local and is imported
on demand because it pulls in the audio stack.
"""

from voxsettings.backend.protocol import AssistantBackend

__all__ = [
    "AssistantBackend",
]
