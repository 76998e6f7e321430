import io
from typing import Iterable, Optional, Sequence

from django.conf import settings
from django.utils import timezone
from PIL import Image, ImageDraw

from documents.records import Signature
from documents.services.exceptions import EmptySignature, MissingName


class SignaturePad:
    """
    Server-side counterpart of the signature canvas.

    Holds the strokes drawn on a fixed size canvas and the signer's typed
    name. Nothing is persisted; ``submit()`` hands back a Signature value
    and the caller decides what to do with it.

    Usage:
        pad = SignaturePad()
        pad.name = "J. Rivera"
        pad.add_stroke([(10, 80), (60, 40), (120, 90)])
        signature = pad.submit(ip_address="10.0.0.7")
    """

    def __init__(self, width=None, height=None, ink=None, stroke_width=None):
        self.width = int(width or getattr(settings, "SIGNATURE_CANVAS_WIDTH", 700))
        self.height = int(height or getattr(settings, "SIGNATURE_CANVAS_HEIGHT", 150))
        self.ink = ink or getattr(settings, "SIGNATURE_INK_COLOR", "#000000")
        self.stroke_width = int(
            stroke_width or getattr(settings, "SIGNATURE_STROKE_WIDTH", 3)
        )
        self.name = ""
        self._strokes: list[list[tuple[float, float]]] = []

    @classmethod
    def from_payload(cls, name: Optional[str], strokes: Optional[Iterable]):
        """Build a pad from a JSON payload: name plus ``[[[x, y], ...], ...]``."""
        pad = cls()
        pad.name = name or ""
        for stroke in strokes or []:
            pad.add_stroke(stroke)
        return pad

    @property
    def strokes(self) -> list[list[tuple[float, float]]]:
        return [list(stroke) for stroke in self._strokes]

    @property
    def is_empty(self) -> bool:
        return not self._strokes

    def _clip(self, point: Sequence) -> tuple[float, float]:
        x, y = float(point[0]), float(point[1])
        return (
            min(max(x, 0.0), self.width - 1.0),
            min(max(y, 0.0), self.height - 1.0),
        )

    def add_stroke(self, points: Iterable[Sequence]) -> None:
        stroke = [self._clip(p) for p in points]
        # A click without movement is still ink
        if stroke:
            self._strokes.append(stroke)

    def clear(self) -> None:
        """Wipe the drawing surface. The name field is left alone."""
        self._strokes.clear()

    def render_png(self) -> bytes:
        img = Image.new("RGB", (self.width, self.height), "white")
        draw = ImageDraw.Draw(img)
        radius = max(self.stroke_width / 2.0, 0.5)
        for stroke in self._strokes:
            if len(stroke) == 1:
                x, y = stroke[0]
                draw.ellipse(
                    (x - radius, y - radius, x + radius, y + radius), fill=self.ink
                )
            else:
                draw.line(stroke, fill=self.ink, width=self.stroke_width, joint="curve")

        buf = io.BytesIO()
        img.save(buf, format="PNG")
        return buf.getvalue()

    def submit(self, ip_address: str = "", captured_at=None) -> Signature:
        """
        Validate and return the captured Signature.

        Raises:
            MissingName: name is empty or whitespace
            EmptySignature: nothing was drawn
        """
        name = (self.name or "").strip()
        if not name:
            raise MissingName("Please enter the signer's name.")
        if self.is_empty:
            raise EmptySignature("Please provide a signature.")

        return Signature(
            signer_name=name,
            image_png=self.render_png(),
            captured_at=captured_at or timezone.now(),
            ip_address=ip_address or "",
        )
