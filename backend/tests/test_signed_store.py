import base64, io, json

import pytest
from PIL import Image

from signed_store import (
    MAX_CONTENT_LENGTH, TRUNCATION_NOTE, SignedDocumentStore, SignedDocumentStoreError,
    compress_image_data,
)

def png_data_url(size=(500, 200)):
    buf = io.BytesIO()
    Image.new("RGBA", size, (0, 0, 0, 255)).save(buf, format="PNG")
    return "data:image/png;base64," + base64.b64encode(buf.getvalue()).decode("ascii")

def doc(i, content="<p>signed</p>", signature="{}"):
    return {"title": f"Doc {i}", "content": content, "signed_by": "Jane",
            "signed_at": f"2024-05-01T10:00:{i:02d}Z", "signature": signature,
            "signing_date": "2024-05-01", "template_name": "Listing"}

def test_save_and_get(tmp_path):
    store = SignedDocumentStore(tmp_path / "signed.json")
    rec = store.save(doc(1))
    assert rec["id"].startswith("signed-")
    assert store.get(rec["id"])["title"] == "Doc 1"
    assert store.all()[0]["id"] == rec["id"]

def test_ids_unique_and_newest_first(tmp_path):
    store = SignedDocumentStore(tmp_path / "signed.json")
    ids = [store.save(doc(i))["id"] for i in range(3)]
    assert len(set(ids)) == 3
    assert [d["id"] for d in store.all()] == ids[::-1]

def test_long_content_truncated(tmp_path):
    store = SignedDocumentStore(tmp_path / "signed.json")
    rec = store.save(doc(1, content="x" * (MAX_CONTENT_LENGTH + 10)))
    assert rec["content"].endswith(TRUNCATION_NOTE)
    assert len(rec["content"]) == MAX_CONTENT_LENGTH - 100 + len(TRUNCATION_NOTE)

def test_cleanup_keeps_ten_most_recent(tmp_path):
    store = SignedDocumentStore(tmp_path / "signed.json")
    for i in range(12):
        store.save(doc(i))
    assert store.cleanup() == 2
    titles = {d["title"] for d in store.all()}
    assert titles == {f"Doc {i}" for i in range(2, 12)}

def test_overflow_keeps_five_plus_new(tmp_path):
    store = SignedDocumentStore(tmp_path / "signed.json", quota=4000)
    for i in range(8):
        store.save(doc(i, content="y" * 400))
    docs = store.all()
    assert len(docs) <= 6
    assert docs[0]["title"] == "Doc 7"

def test_too_big_even_alone(tmp_path):
    store = SignedDocumentStore(tmp_path / "signed.json", quota=100)
    with pytest.raises(SignedDocumentStoreError):
        store.save(doc(1, content="z" * 500))

def test_signature_images_compressed_svg_kept(tmp_path):
    svg = "data:image/svg+xml;base64," + base64.b64encode(b"<svg/>").decode("ascii")
    sigs = json.dumps({"seller": {"type": "drawn", "data": png_data_url()},
                       "broker": {"type": "upload", "data": svg}})
    rec = SignedDocumentStore(tmp_path / "signed.json").save(doc(1, signature=sigs))
    stored = json.loads(rec["signature"])
    assert stored["seller"]["data"].startswith("data:image/jpeg;base64,")
    assert stored["broker"]["data"] == svg

def test_compressed_thumbnail_fits():
    out = compress_image_data(png_data_url((500, 200)))
    img = Image.open(io.BytesIO(base64.b64decode(out.split(",", 1)[1])))
    assert img.width <= 200 and img.height <= 80

def test_corrupt_file_reads_empty(tmp_path):
    path = tmp_path / "signed.json"
    path.write_text("{not json", encoding="utf-8")
    assert SignedDocumentStore(path).all() == []

def test_delete_and_usage(tmp_path):
    store = SignedDocumentStore(tmp_path / "signed.json")
    rec = store.save(doc(1))
    assert store.usage()["documents_count"] == 1
    assert store.delete(rec["id"]) is True
    assert store.delete(rec["id"]) is False
    store.clear()
    assert store.all() == []
