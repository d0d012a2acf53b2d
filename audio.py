"""Audio decoding and single-slot playback.

`decode_wav` plays the role of the platform decoder: it reads a WAV container
into frames plus format metadata. An output turns decoded audio into a playing
source; `PlaybackSlot` makes sure only one source plays at a time.
"""
import io
import time
import wave
from pathlib import Path
from typing import Optional, Protocol

from pydantic import BaseModel, ConfigDict

from log import get_logger

logger = get_logger("hakeena.audio")


class DecodedAudio(BaseModel):
    model_config = ConfigDict(frozen=True)

    sample_rate: int
    channels: int
    sample_width: int
    frames: bytes

    @property
    def duration(self) -> float:
        frame_size = self.channels * self.sample_width
        return len(self.frames) / (frame_size * self.sample_rate) if frame_size and self.sample_rate else 0.0


def decode_wav(data: bytes) -> DecodedAudio:
    """Decode a WAV container. Raises wave.Error or EOFError on malformed input."""
    with wave.open(io.BytesIO(data), "rb") as wf:
        return DecodedAudio(
            sample_rate=wf.getframerate(),
            channels=wf.getnchannels(),
            sample_width=wf.getsampwidth(),
            frames=wf.readframes(wf.getnframes()),
        )


class PlaybackSource(Protocol):
    def stop(self) -> None: ...


class AudioOutput(Protocol):
    def decode(self, data: bytes) -> DecodedAudio: ...

    def play(self, audio: DecodedAudio) -> PlaybackSource: ...


class PlaybackSlot:
    """Holds the one playback source that may be active.

    Acquiring a new source always stops and releases the previous one first.
    """

    def __init__(self):
        self.current: Optional[PlaybackSource] = None

    def release(self):
        source, self.current = self.current, None
        if source is not None:
            source.stop()

    def acquire(self, source: PlaybackSource) -> PlaybackSource:
        self.release()
        self.current = source
        return source

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.release()
        return False


# --- Outputs ---

class _DeviceSource:
    def __init__(self, sd):
        self._sd = sd

    def stop(self):
        self._sd.stop()


class SoundDeviceOutput:
    """Plays through the default output device via sounddevice (install the `audio` extra)."""

    def decode(self, data: bytes) -> DecodedAudio:
        return decode_wav(data)

    def play(self, audio: DecodedAudio) -> PlaybackSource:
        import numpy as np
        import sounddevice as sd

        samples = np.frombuffer(audio.frames, dtype=np.int16)
        if audio.channels > 1:
            samples = samples.reshape(-1, audio.channels)
        sd.play(samples, samplerate=audio.sample_rate)
        return _DeviceSource(sd)


class _FileSource:
    def __init__(self, path: Path):
        self.path = path
        self.stopped = False

    def stop(self):
        self.stopped = True


class WavFileOutput:
    """Writes each played clip to a numbered WAV file in `directory`."""

    def __init__(self, directory: Path):
        self.directory = Path(directory)
        self.written: list = []

    def decode(self, data: bytes) -> DecodedAudio:
        return decode_wav(data)

    def play(self, audio: DecodedAudio) -> PlaybackSource:
        self.directory.mkdir(parents=True, exist_ok=True)
        path = self.directory / f"hakeena-{time.time_ns()}.wav"
        with wave.open(str(path), "wb") as wf:
            wf.setnchannels(audio.channels)
            wf.setsampwidth(audio.sample_width)
            wf.setframerate(audio.sample_rate)
            wf.writeframes(audio.frames)
        self.written.append(path)
        logger.info("Wrote speech clip", extra={"component": "audio", "detail": str(path)})
        return _FileSource(path)
