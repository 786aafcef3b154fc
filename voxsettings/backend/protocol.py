"""Backend interface consumed by the settings engine."""

from __future__ import annotations

from typing import Any, Protocol


class AssistantBackend(Protocol):
    """Operations the assistant backend exposes to the settings page.

    Every operation is a request/response coroutine. Enumeration methods
    may return a mapping of id to name, a list of names, or a list of
    {"id", "name"} records.
    """

    async def read(self, key: str) -> Any | None:
        """Return the stored value for key, or None if absent."""
        ...

    async def write(self, key: str, value: Any) -> bool:
        """Persist a value. Returns False or raises on failure."""
        ...

    async def apply(self) -> bool:
        """Re-activate in-memory configuration from the stored values."""
        ...

    async def list_input_devices(self) -> Any:
        ...

    async def list_output_devices(self) -> Any:
        ...

    async def list_voices(self) -> Any:
        ...

    async def stop_listening(self) -> bool:
        ...

    async def start_listening(self) -> bool:
        ...

    async def speak_test(self, text: str, voice: str, speed: float, volume: float) -> bool:
        """Speak text with the given voice parameters."""
        ...

    async def test_ai_connection(self, openai_key: str, openrouter_key: str, model: str) -> str:
        """Send a short test request and return the model's reply."""
        ...
