# backend/signature_capture.py
"""
Per-signer signature capture.

A SignatureSlot walks empty -> editing -> drawing|uploading -> confirming (drawn only) -> signed.
Drawing happens on a Pillow canvas the size of the on-screen pad; pointer and touch
events land in the same handlers after being translated from the canvas bounding box.
"""
import base64
import io
import logging
from dataclasses import asdict, dataclass
from datetime import date, datetime, timezone
from enum import Enum
from typing import Callable, NamedTuple, Optional, Sequence

from PIL import Image, ImageChops, ImageDraw

logger = logging.getLogger(__name__)

CANVAS_W = 250
CANVAS_H = 80
STROKE_WIDTH = 2
WHITE = (255, 255, 255, 255)
BLACK = (0, 0, 0, 255)

ALLOWED_UPLOAD_TYPES = ("image/jpeg", "image/png", "image/svg+xml")


class SignatureCaptureError(ValueError):
    """User-facing validation failure; the slot state is left unchanged."""


class EmptySignatureError(SignatureCaptureError):
    def __init__(self):
        super().__init__("Please draw your signature first")


class UnsupportedSignatureFile(SignatureCaptureError):
    def __init__(self, content_type: str):
        super().__init__("Please upload a JPG, PNG, or SVG file")
        self.content_type = content_type


class InvalidTransition(RuntimeError):
    pass


@dataclass
class SignatureData:
    type: str                      # upload | drawn | none
    timestamp: str
    data: Optional[str] = None     # data URL
    file_name: Optional[str] = None
    signer_name: Optional[str] = None
    signer_date: Optional[str] = None

    def to_dict(self) -> dict:
        return asdict(self)


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def to_data_url(content: bytes, content_type: str) -> str:
    return f"data:{content_type};base64,{base64.b64encode(content).decode('ascii')}"


class CanvasRect(NamedTuple):
    left: float = 0.0
    top: float = 0.0


class PointerEvent(NamedTuple):
    client_x: float
    client_y: float


class SignatureCanvas:
    """White pad with a fixed 2px round-cap, round-join black pen."""

    def __init__(self, width: int = CANVAS_W, height: int = CANVAS_H):
        self.width = width
        self.height = height
        self._pen_down = False
        self._last: Optional[tuple[float, float]] = None
        self.reset()

    def reset(self):
        self.image = Image.new("RGBA", (self.width, self.height), WHITE)
        self._draw = ImageDraw.Draw(self.image)
        self._pen_down = False
        self._last = None

    @staticmethod
    def translate(event: PointerEvent, rect: CanvasRect) -> tuple[float, float]:
        return event.client_x - rect.left, event.client_y - rect.top

    def begin(self, x: float, y: float):
        # moveTo only: a click without movement leaves no ink
        self._pen_down = True
        self._last = (x, y)

    def extend(self, x: float, y: float):
        if not self._pen_down or self._last is None:
            return
        self._draw.line([self._last, (x, y)], fill=BLACK, width=STROKE_WIDTH, joint="curve")
        r = STROKE_WIDTH / 2
        for px, py in (self._last, (x, y)):
            self._draw.ellipse([px - r, py - r, px + r, py + r], fill=BLACK)
        self._last = (x, y)

    def end(self):
        self._pen_down = False
        self._last = None

    @property
    def is_drawing(self) -> bool:
        return self._pen_down

    def has_ink(self) -> bool:
        """True when at least one pixel differs from opaque white."""
        blank = Image.new("RGBA", self.image.size, WHITE)
        return ImageChops.difference(self.image, blank).getbbox() is not None

    def to_png(self) -> bytes:
        buf = io.BytesIO()
        self.image.save(buf, format="PNG")
        return buf.getvalue()

    def to_data_url(self) -> str:
        return to_data_url(self.to_png(), "image/png")


class SlotState(str, Enum):
    EMPTY = "empty"
    EDITING = "editing"
    DRAWING = "drawing"
    UPLOADING = "uploading"
    CONFIRMING = "confirming"
    SIGNED = "signed"


class SignatureSlot:
    """
    One signer role (e.g. "Seller/Landlord"). `on_change` receives the new SignatureData,
    or None, every time the slot flips between signed and unsigned.
    While `disabled` is set every transition is ignored.
    """

    def __init__(self, label: str, default_signer_name: str = "",
                 on_change: Optional[Callable[[Optional[SignatureData]], None]] = None,
                 disabled: bool = False, signer_date: Optional[str] = None):
        self.label = label
        self.signer_name = default_signer_name
        self.signer_date = signer_date or date.today().isoformat()
        self.disabled = disabled
        self.state = SlotState.EMPTY
        self.signature: Optional[SignatureData] = None
        self.canvas: Optional[SignatureCanvas] = None
        self.pending: Optional[str] = None  # drawn data URL awaiting accept/reject
        self._on_change = on_change

    # ---------- helpers ----------
    def _allowed(self, *states: SlotState) -> bool:
        if self.disabled:
            return False
        if self.state not in states:
            raise InvalidTransition(f"{self.label}: cannot do that while {self.state.value}")
        return True

    def _emit(self):
        if self._on_change:
            self._on_change(self.signature)

    def _sign(self, sig: SignatureData):
        self.signature = sig
        self.state = SlotState.SIGNED
        self.pending = None
        self.canvas = None
        logger.debug("%s signed (%s)", self.label, sig.type)
        self._emit()

    @property
    def is_signed(self) -> bool:
        return self.state == SlotState.SIGNED and self.signature is not None

    # ---------- transitions ----------
    def add(self):
        if self._allowed(SlotState.EMPTY):
            self.state = SlotState.EDITING

    def choose_draw(self):
        if self._allowed(SlotState.EDITING, SlotState.UPLOADING, SlotState.DRAWING):
            self.canvas = SignatureCanvas()
            self.pending = None
            self.state = SlotState.DRAWING

    def choose_upload(self):
        if self._allowed(SlotState.EDITING, SlotState.DRAWING, SlotState.UPLOADING):
            self.canvas = None
            self.state = SlotState.UPLOADING

    def clear_canvas(self):
        if self._allowed(SlotState.DRAWING):
            self.canvas.reset()

    def confirm(self):
        if not self._allowed(SlotState.DRAWING):
            return
        if not self.canvas.has_ink():
            raise EmptySignatureError()
        self.canvas.end()
        self.pending = self.canvas.to_data_url()
        self.state = SlotState.CONFIRMING

    def accept(self):
        if not self._allowed(SlotState.CONFIRMING) or not self.pending:
            return
        self._sign(SignatureData(
            type="drawn",
            data=self.pending,
            timestamp=_now_iso(),
            signer_name=self.signer_name,
            signer_date=self.signer_date,
        ))

    def reject(self):
        if self._allowed(SlotState.CONFIRMING):
            self.pending = None
            self.canvas.reset()
            self.state = SlotState.DRAWING

    def upload(self, file_name: str, content_type: str, content: bytes):
        if not self._allowed(SlotState.UPLOADING):
            return
        if content_type not in ALLOWED_UPLOAD_TYPES:
            raise UnsupportedSignatureFile(content_type)
        self._sign(SignatureData(
            type="upload",
            data=to_data_url(content, content_type),
            file_name=file_name,
            timestamp=_now_iso(),
            signer_name=self.signer_name,
            signer_date=self.signer_date,
        ))

    def edit(self):
        if self._allowed(SlotState.SIGNED):
            self.signature = None
            self.state = SlotState.EDITING
            self._emit()

    # ---------- input ----------
    def pointer_down(self, event: PointerEvent, rect: CanvasRect = CanvasRect()):
        if self.disabled or self.state != SlotState.DRAWING:
            return
        self.canvas.begin(*SignatureCanvas.translate(event, rect))

    def pointer_move(self, event: PointerEvent, rect: CanvasRect = CanvasRect()):
        if self.disabled or self.state != SlotState.DRAWING:
            return
        self.canvas.extend(*SignatureCanvas.translate(event, rect))

    def pointer_up(self):
        if self.canvas is not None:
            self.canvas.end()

    # touch lands in the pointer handlers, first touch point only
    def touch_start(self, touches: Sequence[PointerEvent], rect: CanvasRect = CanvasRect()):
        if touches:
            self.pointer_down(touches[0], rect)

    def touch_move(self, touches: Sequence[PointerEvent], rect: CanvasRect = CanvasRect()):
        if touches:
            self.pointer_move(touches[0], rect)

    def touch_end(self):
        self.pointer_up()


def draw_strokes(slot: SignatureSlot, strokes: Sequence[Sequence[PointerEvent]],
                 rect: CanvasRect = CanvasRect(), touch: bool = False):
    """Replay recorded strokes (client coordinates) into a slot that is drawing."""
    for stroke in strokes:
        if not stroke:
            continue
        if touch:
            slot.touch_start([stroke[0]], rect)
            for ev in stroke[1:]:
                slot.touch_move([ev], rect)
            slot.touch_end()
        else:
            slot.pointer_down(stroke[0], rect)
            for ev in stroke[1:]:
                slot.pointer_move(ev, rect)
            slot.pointer_up()
