"""Audio re-encoding through an external ffmpeg binary."""
import asyncio

from subdeck.core.config import settings


class AudioConversionError(RuntimeError):
    pass


async def convert_to_opus(data: bytes, bitrate_kbps: int = 64) -> bytes:
    """Decode any ffmpeg-readable audio from memory and re-encode it as Ogg/Opus."""
    if not data:
        raise AudioConversionError("Source audio is empty")
    try:
        proc = await asyncio.create_subprocess_exec(
            settings.FFMPEG_BINARY,
            "-hide_banner",
            "-loglevel", "error",
            "-i", "pipe:0",
            "-vn",
            "-c:a", "libopus",
            "-b:a", f"{bitrate_kbps}k",
            "-f", "ogg",
            "pipe:1",
            stdin=asyncio.subprocess.PIPE,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
        )
    except FileNotFoundError as e:
        raise AudioConversionError(f"ffmpeg not found: {settings.FFMPEG_BINARY}") from e
    out, err = await proc.communicate(data)
    if proc.returncode != 0:
        raise AudioConversionError(err.decode(errors="replace").strip() or f"ffmpeg exited with {proc.returncode}")
    if not out:
        raise AudioConversionError("ffmpeg produced no output")
    return out
