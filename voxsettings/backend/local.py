"""Standalone assistant backend.

Implements AssistantBackend on the local machine:
- Settings persisted as a flat TOML file, written on every change
- Audio devices enumerated with sounddevice
- Voices taken from the TTS engine's catalogue or a voice pack directory
- Listening service run as an optional external command
- TTS test through plyer, AI test against a chat completions endpoint
"""

from __future__ import annotations

import asyncio
import json
import logging
import math
import tomllib
import urllib.error
import urllib.request
from pathlib import Path
from typing import TYPE_CHECKING, Any

from voxsettings.errors import ExternalApiFailure

if TYPE_CHECKING:
    from voxsettings.config.types import Config

logger = logging.getLogger(__name__)

OPENROUTER_URL = "https://openrouter.ai/api/v1/chat/completions"
OPENAI_URL = "https://api.openai.com/v1/chat/completions"
OPENAI_FALLBACK_MODEL = "gpt-3.5-turbo"
AI_TEST_PROMPT = "Hello! This is a connection test. Reply briefly."
AI_TEST_TIMEOUT = 30

OPENAI_VOICES = ("alloy", "echo", "fable", "onyx", "nova", "shimmer")


def _toml_value(value: Any) -> str:
    """Format a scalar as a TOML value."""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float):
        if not math.isfinite(value):
            raise ValueError(f"cannot store non-finite number {value!r}")
        return repr(value)
    if isinstance(value, str):
        return _toml_string(value)
    raise ValueError(f"unsupported value type: {type(value).__name__}")


def _toml_string(value: str) -> str:
    # JSON escapes are valid in TOML basic strings; DEL is the one control
    # character JSON leaves as is
    return json.dumps(value, ensure_ascii=False).replace("\x7f", "\\u007f")


def _http_error_detail(error: urllib.error.HTTPError) -> str:
    """Status line plus the response body the API sent with it."""
    try:
        body = error.read().decode("utf-8", "replace").strip()
    except OSError:
        body = ""
    detail = f"HTTP {error.code} {error.reason}"
    return f"{detail}: {body}" if body else detail


def _query_devices() -> list[dict[str, Any]]:
    """Return sounddevice's device list, re-enumerated from the host.

    PortAudio builds its device table once at initialization, so it is
    re-initialized first to pick up devices plugged in or removed since.
    sounddevice is imported here because loading it requires the PortAudio
    shared library.
    """
    import sounddevice as sd

    sd._terminate()
    sd._initialize()
    return list(sd.query_devices())


def _toml_key(key: str) -> str:
    if key and all(c.isalnum() or c in "_-" for c in key):
        return key
    return _toml_string(key)


class LocalBackend:
    """AssistantBackend implementation for a single machine."""

    def __init__(
        self,
        store_path: Path,
        voices_dir: Path | None = None,
        listener_command: list[str] | None = None,
    ) -> None:
        """Initialize the backend and load the store file.

        Args:
            store_path: TOML file holding the persisted settings.
            voices_dir: Directory whose subdirectories are voice packs.
            listener_command: Command that runs the wake-word listener.
        """
        self._path = store_path
        self._voices_dir = voices_dir
        self._listener_command = list(listener_command or [])
        self._values: dict[str, Any] = self._load()
        self._device_query: asyncio.Future | None = None
        self._process: asyncio.subprocess.Process | None = None

    @classmethod
    def from_config(cls, config: "Config", store_path: Path) -> LocalBackend:
        """Build a backend from the [voices] and [listener] config sections."""
        voices_dir = config.get("voices", {}).get("directory", "")
        return cls(
            store_path,
            voices_dir=Path(voices_dir) if voices_dir else None,
            listener_command=config.get("listener", {}).get("command", []),
        )

    @property
    def is_listening(self) -> bool:
        return self._process is not None and self._process.returncode is None

    # ------------------------------------------------------------------
    # Store
    # ------------------------------------------------------------------

    def _load(self) -> dict[str, Any]:
        if not self._path.exists():
            logger.debug("local_backend: no store at %s", self._path)
            return {}
        with open(self._path, "rb") as f:
            return tomllib.load(f)

    def _save(self) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        lines = ["# voxsettings assistant settings", ""]
        for key, value in self._values.items():
            lines.append(f"{_toml_key(key)} = {_toml_value(value)}")
        lines.append("")
        with open(self._path, "w", encoding="utf-8") as f:
            f.write("\n".join(lines))

    async def read(self, key: str) -> Any | None:
        return self._values.get(key)

    async def write(self, key: str, value: Any) -> bool:
        _toml_value(value)  # raises before the store is touched
        self._values[key] = value
        self._save()
        return True

    async def apply(self) -> bool:
        # Re-read what was written so a store the listener cannot parse fails here
        self._values = self._load()
        logger.info("local_backend: applied %d settings", len(self._values))
        return True

    # ------------------------------------------------------------------
    # Devices and voices
    # ------------------------------------------------------------------

    async def _devices(self) -> list[dict[str, Any]]:
        """Enumerate devices once for concurrent input and output queries."""
        if self._device_query is None:
            self._device_query = asyncio.ensure_future(asyncio.to_thread(_query_devices))
            self._device_query.add_done_callback(self._device_query_done)
        return await asyncio.shield(self._device_query)

    def _device_query_done(self, future: asyncio.Future) -> None:
        self._device_query = None

    async def list_input_devices(self) -> dict[str, str]:
        devices = await self._devices()
        return {
            str(i): device["name"]
            for i, device in enumerate(devices)
            if device["max_input_channels"] > 0
        }

    async def list_output_devices(self) -> dict[str, str]:
        devices = await self._devices()
        return {
            str(i): device["name"]
            for i, device in enumerate(devices)
            if device["max_output_channels"] > 0
        }

    async def list_voices(self) -> list[str]:
        engine = self._values.get("tts_engine") or "system"
        if engine == "openai":
            return list(OPENAI_VOICES)

        voices = ["default"]
        if self._voices_dir is not None and self._voices_dir.is_dir():
            voices.extend(
                sorted(p.name for p in self._voices_dir.iterdir() if p.is_dir())
            )
        return voices

    # ------------------------------------------------------------------
    # Listening service
    # ------------------------------------------------------------------

    async def stop_listening(self) -> bool:
        process, self._process = self._process, None
        if process is None or process.returncode is not None:
            return True
        process.terminate()
        await process.wait()
        logger.info("local_backend: listener exited, code=%s", process.returncode)
        return True

    async def start_listening(self) -> bool:
        if not self._listener_command:
            logger.info("local_backend: no listener command configured")
            return False
        if self.is_listening:
            return True
        self._process = await asyncio.create_subprocess_exec(*self._listener_command)
        logger.info("local_backend: listener started, pid=%s", self._process.pid)
        return True

    # ------------------------------------------------------------------
    # External test endpoints
    # ------------------------------------------------------------------

    async def speak_test(self, text: str, voice: str, speed: float, volume: float) -> bool:
        try:
            from plyer import tts
        except ImportError as e:
            raise ExternalApiFailure(str(e)) from e

        logger.debug(
            "local_backend: speak test, voice=%s, speed=%.2f, volume=%.2f",
            voice,
            speed,
            volume,
        )
        try:
            await asyncio.to_thread(tts.speak, text)
        except Exception as e:
            raise ExternalApiFailure(str(e)) from e
        return True

    async def test_ai_connection(self, openai_key: str, openrouter_key: str, model: str) -> str:
        if openrouter_key:
            url, api_key = OPENROUTER_URL, openrouter_key
        elif openai_key:
            url, api_key, model = OPENAI_URL, openai_key, OPENAI_FALLBACK_MODEL
        else:
            raise ExternalApiFailure("No API key available")

        payload = json.dumps({
            "model": model,
            "messages": [{"role": "user", "content": AI_TEST_PROMPT}],
            "max_tokens": 50,
        }).encode("utf-8")
        headers = {
            "Authorization": f"Bearer {api_key}",
            "Content-Type": "application/json",
        }
        if url == OPENROUTER_URL:
            headers["X-Title"] = "voxsettings"

        request = urllib.request.Request(url, data=payload, headers=headers, method="POST")
        try:
            body = await asyncio.to_thread(self._post, request)
            return body["choices"][0]["message"]["content"]
        except urllib.error.HTTPError as e:
            raise ExternalApiFailure(_http_error_detail(e)) from e
        except (urllib.error.URLError, OSError) as e:
            raise ExternalApiFailure(str(e)) from e
        except (KeyError, IndexError, TypeError, ValueError) as e:
            raise ExternalApiFailure(f"unexpected response ({e})") from e

    @staticmethod
    def _post(request: urllib.request.Request) -> dict[str, Any]:
        with urllib.request.urlopen(request, timeout=AI_TEST_TIMEOUT) as resp:
            return json.loads(resp.read().decode("utf-8"))
