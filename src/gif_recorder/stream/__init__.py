"""
Stream Module
=============

Frame ingestion and output streaming components.

This module provides the I/O edges of the conversion pipeline:
    - decode_frame: Compressed frame bytes -> CanonicalFrame
    - GifFileSink: Bounded async hand-off from encoder to file

Example:
    from gif_recorder.stream import GifFileSink, decode_frame

    frame = decode_frame(raw_frame)

    async with GifFileSink("out.gif", max_pending_chunks=16) as sink:
        await sink.write(chunk)
        path = await sink.close()
"""

from gif_recorder.stream.image_decoder import decode_frame
from gif_recorder.stream.sink import GifFileSink


__all__ = [
    "decode_frame",
    "GifFileSink",
]
