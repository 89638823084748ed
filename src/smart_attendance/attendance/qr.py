"""QR helpers: render a student's code and read codes back from uploaded images."""

from __future__ import annotations

import io
from itertools import islice
from typing import Callable, Iterable, Optional

import qrcode
from PIL import Image, ImageSequence
from pyzbar.pyzbar import decode as pyzbar_decode

from ..core.constants import DEFAULT_QR_MAX_FRAMES


def make_qr_png(data: str) -> bytes:
    qr = qrcode.QRCode(
        version=1,
        error_correction=qrcode.constants.ERROR_CORRECT_L,
        box_size=10,
        border=2,
    )
    qr.add_data(data)
    qr.make(fit=True)

    img = qr.make_image(fill_color="black", back_color="white")
    buf = io.BytesIO()
    img.save(buf, format="PNG")
    return buf.getvalue()


def first_payload(
    frames: Iterable[Image.Image],
    *,
    max_frames: int = DEFAULT_QR_MAX_FRAMES,
    decoder: Callable = pyzbar_decode,
) -> Optional[str]:
    """Poll frames in order and return the first decoded QR payload.

    At most ``max_frames`` frames are examined; None when none of them holds a code.
    """

    for frame in islice(frames, max(0, int(max_frames))):
        for symbol in decoder(frame.convert("RGB")):
            try:
                payload = symbol.data.decode("utf-8").strip()
            except UnicodeDecodeError:
                # Not a student code.
                continue
            if payload:
                return payload
    return None


def decode_image(stream, *, max_frames: int = DEFAULT_QR_MAX_FRAMES, decoder: Callable = pyzbar_decode) -> Optional[str]:
    """Decode an uploaded still or multi-frame image (GIF/TIFF burst)."""

    with Image.open(stream) as img:
        return first_payload(ImageSequence.Iterator(img), max_frames=max_frames, decoder=decoder)
