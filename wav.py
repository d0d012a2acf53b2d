"""Minimal WAV framing for raw 16-bit mono PCM."""
import struct
from typing import Tuple

SAMPLE_RATE = 24000
NUM_CHANNELS = 1
BITS_PER_SAMPLE = 16
HEADER_SIZE = 44

# RIFF header, "fmt " chunk and "data" chunk header, all little-endian
_HEADER = struct.Struct("<4sI4s4sIHHIIHH4sI")


def build_wav_header(data_length: int, sample_rate: int = SAMPLE_RATE) -> bytes:
    """Build the 44-byte header that turns `data_length` bytes of PCM into a WAV file."""
    block_align = NUM_CHANNELS * (BITS_PER_SAMPLE // 8)
    byte_rate = sample_rate * block_align
    return _HEADER.pack(
        b"RIFF", 36 + data_length, b"WAVE",
        b"fmt ", 16, 1, NUM_CHANNELS, sample_rate, byte_rate, block_align, BITS_PER_SAMPLE,
        b"data", data_length,
    )


def read_wav_header(header: bytes) -> Tuple[int, int]:
    """Return (data_length, sample_rate) declared by a header built with build_wav_header."""
    if len(header) < HEADER_SIZE:
        raise ValueError(f"WAV header needs {HEADER_SIZE} bytes, got {len(header)}")
    fields = _HEADER.unpack(header[:HEADER_SIZE])
    if fields[0] != b"RIFF" or fields[2] != b"WAVE" or fields[11] != b"data":
        raise ValueError("Not a RIFF/WAVE header")
    return fields[12], fields[7]


def wrap_pcm(pcm: bytes, sample_rate: int = SAMPLE_RATE) -> bytes:
    return build_wav_header(len(pcm), sample_rate) + pcm
