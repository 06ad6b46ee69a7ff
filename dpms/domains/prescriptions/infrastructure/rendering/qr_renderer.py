"""
QR Payload Renderer

Encodes snapshot text as a PNG QR code wrapped in a data URL.
"""

import base64
import io
import logging

import qrcode
from PIL import Image

logger = logging.getLogger(__name__)

DATA_URL_PREFIX = "data:image/png;base64,"


class QrPayloadRenderer:
    """
    Renders text to a ``data:image/png;base64,...`` QR image.

    Defaults produce a medium error-correction code with a four module
    quiet zone, sized automatically to the text.
    """

    def __init__(
        self,
        box_size: int = 4,
        border: int = 4,
        error_correction: int = qrcode.ERROR_CORRECT_M,
    ):
        self.box_size = box_size
        self.border = border
        self.error_correction = error_correction

    def render(self, text: str) -> str:
        return DATA_URL_PREFIX + base64.b64encode(self.render_png(text)).decode("ascii")

    def render_png(self, text: str) -> bytes:
        qr = qrcode.QRCode(
            version=None,
            error_correction=self.error_correction,
            box_size=self.box_size,
            border=self.border,
        )
        qr.add_data(text)
        qr.make(fit=True)

        image: Image.Image = qr.make_image(fill_color="black", back_color="white").get_image()
        buffer = io.BytesIO()
        image.save(buffer, format="PNG")
        logger.debug(f"Rendered QR version {qr.version} ({len(text)} chars, {image.width}x{image.height}px)")
        return buffer.getvalue()
