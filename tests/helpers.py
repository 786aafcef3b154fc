"""Shared test helper classes and utilities.

This module contains classes and utilities that need to be imported
directly in test files (as opposed to pytest fixtures which are
auto-injected).
"""

from __future__ import annotations

import asyncio
from typing import Any


class FakeBackend:
    """In-memory AssistantBackend that records every call.

    Failure injection:
    - fail_read_at: key whose read raises
    - fail_write_on: 1-based index of the write call that raises
    - reject_writes: write() returns False instead of raising
    - fail_apply: apply() raises
    - fail_inputs / fail_outputs / fail_voices: the query raises
    - fail_stop / fail_start: listening control raises
    - stop_delay: seconds stop_listening() takes before returning
    """

    def __init__(self, values: dict[str, Any] | None = None) -> None:
        self.values: dict[str, Any] = dict(values or {})
        self.calls: list[tuple] = []
        self.loop_times: list[tuple[str, float]] = []

        self.inputs: Any = {"0": "Built-in Microphone"}
        self.outputs: Any = {"1": "Built-in Speakers"}
        self.voices: Any = ["default"]

        self.fail_read_at: str | None = None
        self.fail_write_on: int | None = None
        self.reject_writes = False
        self.fail_apply = False
        self.fail_inputs = False
        self.fail_outputs = False
        self.fail_voices = False
        self.fail_stop = False
        self.fail_start = False
        self.stop_delay = 0.0

        self.tts_error: Exception | None = None
        self.ai_reply = "Hello from the model"
        self.ai_error: Exception | None = None

        self.write_count = 0
        self.applied = 0
        self.query_count = 0

    def _record(self, *call: Any) -> None:
        self.calls.append(call)
        self.loop_times.append((call[0], asyncio.get_running_loop().time()))

    def call_names(self) -> list[str]:
        return [call[0] for call in self.calls]

    def writes(self) -> list[tuple[str, Any]]:
        return [(call[1], call[2]) for call in self.calls if call[0] == "write"]

    async def read(self, key: str) -> Any | None:
        self._record("read", key)
        if key == self.fail_read_at:
            raise RuntimeError("store unavailable")
        return self.values.get(key)

    async def write(self, key: str, value: Any) -> bool:
        self._record("write", key, value)
        self.write_count += 1
        if self.fail_write_on is not None and self.write_count == self.fail_write_on:
            raise RuntimeError("disk full")
        if self.reject_writes:
            return False
        self.values[key] = value
        return True

    async def apply(self) -> bool:
        self._record("apply")
        if self.fail_apply:
            raise RuntimeError("assistant not running")
        self.applied += 1
        return True

    async def list_input_devices(self) -> Any:
        self._record("list_input_devices")
        self.query_count += 1
        if self.fail_inputs:
            raise RuntimeError("PortAudio error")
        return self.inputs

    async def list_output_devices(self) -> Any:
        self._record("list_output_devices")
        if self.fail_outputs:
            raise RuntimeError("PortAudio error")
        return self.outputs

    async def list_voices(self) -> Any:
        self._record("list_voices")
        if self.fail_voices:
            raise RuntimeError("voices unavailable")
        return self.voices

    async def stop_listening(self) -> bool:
        self._record("stop_listening")
        if self.stop_delay:
            await asyncio.sleep(self.stop_delay)
        if self.fail_stop:
            raise RuntimeError("not running")
        return True

    async def start_listening(self) -> bool:
        self._record("start_listening")
        if self.fail_start:
            raise RuntimeError("microphone busy")
        return True

    async def speak_test(self, text: str, voice: str, speed: float, volume: float) -> bool:
        self._record("speak_test", text, voice, speed, volume)
        if self.tts_error is not None:
            raise self.tts_error
        return True

    async def test_ai_connection(self, openai_key: str, openrouter_key: str, model: str) -> str:
        self._record("test_ai_connection", openai_key, openrouter_key, model)
        if self.ai_error is not None:
            raise self.ai_error
        return self.ai_reply


class RecordingView:
    """SettingsViewProtocol implementation that records every call."""

    def __init__(self) -> None:
        self.populated: list[Any] = []
        self.device_updates = 0
        self.save_enabled: list[bool] = []
        self.saved: list[bool] = []
        self.errors: list[str] = []
        self.messages: list[str] = []

    def populate(self, settings: Any) -> None:
        self.populated.append(settings)

    def set_devices(self, directory: Any) -> None:
        self.device_updates += 1

    def set_save_enabled(self, enabled: bool) -> None:
        self.save_enabled.append(enabled)

    def set_saved(self, saved: bool) -> None:
        self.saved.append(saved)

    def show_error(self, message: str) -> None:
        self.errors.append(message)

    def show_message(self, message: str) -> None:
        self.messages.append(message)
