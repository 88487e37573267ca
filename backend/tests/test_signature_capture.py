import pytest

from signature_capture import (
    CanvasRect, EmptySignatureError, InvalidTransition, PointerEvent, SignatureSlot, SlotState,
    UnsupportedSignatureFile, draw_strokes,
)

STROKE = [PointerEvent(20, 20), PointerEvent(60, 40), PointerEvent(100, 30)]

def drawing_slot(**kw):
    slot = SignatureSlot("Seller/Landlord", default_signer_name="Jane Doe", **kw)
    slot.add(); slot.choose_draw()
    return slot

def test_untouched_canvas_is_rejected():
    slot = drawing_slot()
    with pytest.raises(EmptySignatureError):
        slot.confirm()
    assert slot.state == SlotState.DRAWING
    assert not slot.is_signed

def test_click_without_movement_leaves_no_ink():
    slot = drawing_slot()
    draw_strokes(slot, [[PointerEvent(30, 30)]])
    with pytest.raises(EmptySignatureError):
        slot.confirm()

def test_drawn_signature_round_trip():
    changes = []
    slot = drawing_slot(on_change=changes.append, signer_date="2024-05-01")
    draw_strokes(slot, [STROKE], CanvasRect(10, 10))
    slot.confirm()
    assert slot.state == SlotState.CONFIRMING
    slot.accept()
    assert slot.is_signed
    sig = slot.signature
    assert sig.type == "drawn"
    assert sig.data.startswith("data:image/png;base64,")
    assert (sig.signer_name, sig.signer_date) == ("Jane Doe", "2024-05-01")
    assert changes == [sig]

def test_reject_goes_back_to_blank_canvas():
    slot = drawing_slot()
    draw_strokes(slot, [STROKE])
    slot.confirm(); slot.reject()
    assert slot.state == SlotState.DRAWING
    assert not slot.canvas.has_ink()

def test_touch_draws_like_pointer():
    slot = drawing_slot()
    draw_strokes(slot, [STROKE], touch=True)
    assert slot.canvas.has_ink()

def test_clear_canvas():
    slot = drawing_slot()
    draw_strokes(slot, [STROKE])
    slot.clear_canvas()
    assert not slot.canvas.has_ink()

def test_upload_rejects_other_mime_and_keeps_state():
    slot = SignatureSlot("Broker")
    slot.add(); slot.choose_upload()
    with pytest.raises(UnsupportedSignatureFile) as e:
        slot.upload("sig.gif", "image/gif", b"GIF89a")
    assert str(e.value) == "Please upload a JPG, PNG, or SVG file"
    assert slot.state == SlotState.UPLOADING
    assert slot.signature is None

def test_upload_svg():
    slot = SignatureSlot("Broker")
    slot.add(); slot.choose_upload()
    slot.upload("sig.svg", "image/svg+xml", b"<svg/>")
    assert slot.signature.type == "upload"
    assert slot.signature.file_name == "sig.svg"
    assert slot.signature.data.startswith("data:image/svg+xml;base64,")

def test_edit_clears_and_notifies():
    changes = []
    slot = SignatureSlot("Broker", on_change=changes.append)
    slot.add(); slot.choose_upload()
    slot.upload("s.png", "image/png", b"\x89PNG")
    slot.edit()
    assert slot.state == SlotState.EDITING
    assert slot.signature is None
    assert changes[-1] is None

def test_disabled_slot_ignores_everything():
    slot = SignatureSlot("Broker", disabled=True)
    slot.add()
    assert slot.state == SlotState.EMPTY

def test_wrong_state_raises():
    slot = SignatureSlot("Broker")
    with pytest.raises(InvalidTransition):
        slot.confirm()

def test_disabled_freezes_every_state():
    changes = []
    slot = drawing_slot(on_change=changes.append)
    draw_strokes(slot, [STROKE])

    # drawing
    ink = slot.canvas.to_png()
    slot.disabled = True
    draw_strokes(slot, [[PointerEvent(5, 70), PointerEvent(200, 10)]])
    draw_strokes(slot, [[PointerEvent(5, 10), PointerEvent(200, 70)]], touch=True)
    slot.clear_canvas(); slot.confirm(); slot.choose_upload()
    assert slot.state == SlotState.DRAWING
    assert slot.canvas.to_png() == ink

    # confirming
    slot.disabled = False
    slot.confirm()
    pending = slot.pending
    slot.disabled = True
    slot.accept(); slot.reject()
    assert slot.state == SlotState.CONFIRMING
    assert slot.pending == pending
    assert slot.signature is None
    assert changes == []

    # signed
    slot.disabled = False
    slot.accept()
    signed = slot.signature
    changes.clear()
    slot.disabled = True
    slot.edit()
    slot.upload("s.png", "image/png", b"\x89PNG")
    slot.choose_draw()
    assert slot.state == SlotState.SIGNED
    assert slot.signature is signed
    assert changes == []
