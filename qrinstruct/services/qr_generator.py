"""
QR encoding adapter.
Wraps the `qrcode` encoder and Pillow to turn an opaque qr_id into a content URL,
a displayable data URL and raw PNG bytes.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Optional
from PIL import Image
from qrinstruct.config import settings
from qrinstruct.database import utcnow
import qrcode
import base64
import io
import re
import uuid
import logging

logger = logging.getLogger(__name__)

ERROR_CORRECTION_LEVELS = {
    "L": qrcode.constants.ERROR_CORRECT_L,
    "M": qrcode.constants.ERROR_CORRECT_M,
    "Q": qrcode.constants.ERROR_CORRECT_Q,
    "H": qrcode.constants.ERROR_CORRECT_H,
}

QR_ID_PATTERN = re.compile(
    r"^[0-9a-f]{8}-[0-9a-f]{4}-4[0-9a-f]{3}-[89ab][0-9a-f]{3}-[0-9a-f]{12}$",
    re.IGNORECASE
)

MAX_SLUG_LENGTH = 50


@dataclass
class GeneratedQRCode:
    """Output of one encoder run."""

    qr_id: str
    item_id: str
    content_url: str
    data_url: str
    png_bytes: bytes
    options: Dict[str, Any]
    generated_at: datetime = field(default_factory=utcnow)


class QRGenerator:
    """
    Builds content URLs and QR images.
    Defaults come from settings; per-call options override them.
    """

    def __init__(self, frontend_base_url: Optional[str] = None):
        self.frontend_base_url = (frontend_base_url or settings.frontend_base_url).rstrip("/")

    @staticmethod
    def generate_qr_id() -> str:
        """Random UUID4 string used as the public token."""
        return str(uuid.uuid4())

    def get_content_url(self, qr_id: str) -> str:
        return f"{self.frontend_base_url}/content/{qr_id}"

    @staticmethod
    def validate_qr_format(qr_id: Optional[str]) -> bool:
        """Check that a token has the UUID4 shape produced by generate_qr_id."""
        if not qr_id:
            return False
        return bool(QR_ID_PATTERN.match(qr_id))

    @staticmethod
    def resolve_options(options: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """Merge caller options over the configured defaults."""
        options = options or {}
        resolved = {
            "width": options.get("width") or settings.qr_default_width,
            "margin": options.get("margin") if options.get("margin") is not None else settings.qr_default_margin,
            "error_correction_level": (
                options.get("error_correction_level") or settings.qr_default_error_correction
            ).upper(),
            "dark_color": options.get("dark_color") or "#000000",
            "light_color": options.get("light_color") or "#FFFFFF",
        }
        if resolved["error_correction_level"] not in ERROR_CORRECTION_LEVELS:
            raise ValueError(
                f"Error correction level must be one of: {', '.join(ERROR_CORRECTION_LEVELS)}"
            )
        return resolved

    def render_png(self, data: str, options: Optional[Dict[str, Any]] = None) -> bytes:
        """
        Encode `data` as a square PNG of exactly `options["width"]` pixels.

        Args:
            data: Text to encode, normally a content URL
            options: width, margin, error_correction_level, dark_color, light_color

        Returns:
            PNG bytes
        """
        resolved = self.resolve_options(options)
        width = int(resolved["width"])
        border = int(resolved["margin"])

        qr = qrcode.QRCode(
            version=None,
            error_correction=ERROR_CORRECTION_LEVELS[resolved["error_correction_level"]],
            box_size=1,
            border=border,
        )
        qr.add_data(data)
        qr.make(fit=True)

        # Largest whole module size that fits, then scale to the exact width
        qr.box_size = max(1, width // (qr.modules_count + 2 * border))
        rendered = qr.make_image(
            fill_color=resolved["dark_color"],
            back_color=resolved["light_color"],
        )

        raw = io.BytesIO()
        rendered.save(raw, format="PNG")
        raw.seek(0)

        with Image.open(raw) as img:
            img = img.convert("RGB")
            if img.size != (width, width):
                img = img.resize((width, width), Image.Resampling.NEAREST)
            output = io.BytesIO()
            img.save(output, format="PNG", optimize=True)

        return output.getvalue()

    @staticmethod
    def to_data_url(png_bytes: bytes) -> str:
        return "data:image/png;base64," + base64.b64encode(png_bytes).decode("ascii")

    def create_qr_code(self, item_id: Any, options: Optional[Dict[str, Any]] = None) -> GeneratedQRCode:
        """
        Generate a fresh qr_id for an item and encode its content URL.

        Raises:
            ValueError: If the options name an unknown error correction level
        """
        resolved = self.resolve_options(options)
        qr_id = self.generate_qr_id()
        content_url = self.get_content_url(qr_id)

        png_bytes = self.render_png(content_url, resolved)
        logger.debug(f"Encoded QR {qr_id} for item {item_id} ({len(png_bytes)} bytes)")

        return GeneratedQRCode(
            qr_id=qr_id,
            item_id=str(item_id),
            content_url=content_url,
            data_url=self.to_data_url(png_bytes),
            png_bytes=png_bytes,
            options=resolved,
        )

    @staticmethod
    def generate_qr_file_name(item_name: Optional[str], qr_id: str, ext: str = "png") -> str:
        """
        Filesystem-safe download name: `<slug>-<first 8 hex of qr_id>.<ext>`.
        The slug is the lowercased item name with runs of other characters collapsed to '-'.
        """
        slug = re.sub(r"[^a-z0-9]+", "-", (item_name or "").lower()).strip("-")
        slug = slug[:MAX_SLUG_LENGTH].strip("-") or "item"
        short_id = qr_id.replace("-", "")[:8]
        return f"{slug}-{short_id}.{ext}"


qr_generator = QRGenerator()
