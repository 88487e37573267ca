# backend/app.py
import os, uuid, json, shutil, logging
from datetime import date, datetime, timezone
from typing import Optional

from fastapi import FastAPI, UploadFile, File, HTTPException, Form, Depends, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import HTMLResponse
from sqlalchemy.orm import Session

import config
from db import Base, engine, SessionLocal
from models import DocumentTemplate, Document as DocModel, DocumentSignature
from schemas import (
    TemplateCreate, TemplateOut, DocumentCreate, DocumentOut, FieldsUpdate, StatusUpdate,
    PreviewRequest, ComposeRequest, SignRequest, SignatureRecordIn, DrawnSignatureIn, PdfRequest,
)
from placeholder_engine import RenderMode, render, unresolved
from placeholder_hints import infer_field
from field_collector import FieldValidationError, parse_fields, infer_fields, collect, completion
from docx_parser import find_placeholders, is_docx
from render_service import docx_to_html
from signature_capture import (
    SignatureSlot, SignatureCaptureError, PointerEvent, CanvasRect, draw_strokes,
)
from signature_compositor import SignaturePosition, compose, finalize, can_finalize, unanchored_roles
from print_renderer import build_print_html
from signed_store import SignedDocumentStore, SignedDocumentStoreError
from collaborators import CollaboratorError, submit_signature, request_pdf
import activity_log

logging.basicConfig(level=config.LOG_LEVEL, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
logger = logging.getLogger("app")

os.makedirs(config.DATA_DIR, exist_ok=True)
Base.metadata.create_all(bind=engine)
signed_store = SignedDocumentStore()

app = FastAPI(title="Brokerage Document Pipeline API")
app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ORIGINS, allow_credentials=True,
    allow_methods=["*"], allow_headers=["*"],
)

def db_sess():
    db = SessionLocal()
    try: yield db
    finally: db.close()

# ---------- helpers ----------
def get_template(db: Session, template_id: str) -> DocumentTemplate:
    t = db.get(DocumentTemplate, template_id)
    if not t: raise HTTPException(404, "Template not found")
    return t

def get_document(db: Session, document_id: str) -> DocModel:
    d = db.get(DocModel, document_id)
    if not d: raise HTTPException(404, "Document not found")
    return d

def document_content(db: Session, doc: DocModel, mode: RenderMode = RenderMode.FINAL) -> str:
    # the template is looked up, not owned: it may have gone away
    t = get_template(db, doc.template_id)
    return render(t.template_content, doc.field_values or {}, mode)

def utcnow_iso() -> str:
    return datetime.now(timezone.utc).isoformat()

# ---------- routes ----------
@app.get("/")
def root():
    return {"service": "Brokerage Document Pipeline API", "status": "operational"}

# ---- templates ----
@app.post("/api/templates", response_model=TemplateOut, status_code=201)
def create_template(body: TemplateCreate, db: Session = Depends(db_sess)):
    fields = body.template_fields if body.template_fields is not None else infer_fields(body.template_content)
    t = DocumentTemplate(name=body.name, document_type=body.document_type,
                         template_content=body.template_content,
                         template_fields=[f.model_dump() for f in fields])
    db.add(t); db.commit(); db.refresh(t)
    return t

@app.post("/api/templates/import", response_model=TemplateOut, status_code=201)
def import_template(file: UploadFile = File(...), name: Optional[str] = Form(None),
                    document_type: str = Form("general"), db: Session = Depends(db_sess)):
    if not file.filename.lower().endswith(".docx"):
        raise HTTPException(status_code=400, detail="Only .docx supported")
    os.makedirs(os.path.join(config.DATA_DIR, "templates"), exist_ok=True)
    path = os.path.join(config.DATA_DIR, "templates", f"{uuid.uuid4()}.docx")
    with open(path, "wb") as f: shutil.copyfileobj(file.file, f)
    if not is_docx(path):
        os.remove(path)
        raise HTTPException(status_code=400, detail="Invalid .docx file")

    keys = find_placeholders(path, include_markers=False)
    t = DocumentTemplate(name=name or os.path.splitext(file.filename)[0], document_type=document_type,
                         template_content=docx_to_html(path),
                         template_fields=[infer_field(k) for k in keys])
    db.add(t); db.commit(); db.refresh(t)
    logger.info("Imported template %s from %s (%d fields)", t.id, file.filename, len(keys))
    return t

@app.get("/api/templates", response_model=list[TemplateOut])
def list_templates(db: Session = Depends(db_sess)):
    return db.query(DocumentTemplate).order_by(DocumentTemplate.created_at.desc()).all()

@app.get("/api/templates/{template_id}", response_model=TemplateOut)
def read_template(template_id: str, db: Session = Depends(db_sess)):
    return get_template(db, template_id)

@app.post("/api/preview")
def preview(body: PreviewRequest):
    return {"html": render(body.template_content, body.field_values, RenderMode(body.mode)),
            "unresolved": unresolved(body.template_content, body.field_values)}

# ---- documents ----
@app.post("/api/documents", response_model=DocumentOut, status_code=201)
def create_document(body: DocumentCreate, db: Session = Depends(db_sess)):
    t = get_template(db, body.template_id)
    try:
        values = collect(parse_fields(t.template_fields), body.field_values, body.client, body.listing)
    except FieldValidationError as e:
        raise HTTPException(400, {"error": str(e), "missing": e.missing})

    doc = DocModel(document_name=body.document_name, template_id=t.id,
                   field_values=values, document_status="draft")
    db.add(doc); db.commit(); db.refresh(doc)
    # second, independent write; a failure leaves the document in place
    activity_log.template_applied(db, t.name, doc.id, doc.document_name, agent_id=body.agent_id)
    return doc

@app.get("/api/documents", response_model=list[DocumentOut])
def list_documents(status: Optional[str] = None, db: Session = Depends(db_sess)):
    q = db.query(DocModel)
    if status: q = q.filter(DocModel.document_status == status)
    return q.order_by(DocModel.created_at.desc()).all()

@app.get("/api/documents/{document_id}", response_model=DocumentOut)
def read_document(document_id: str, db: Session = Depends(db_sess)):
    return get_document(db, document_id)

@app.patch("/api/documents/{document_id}/fields")
def update_fields(document_id: str, body: FieldsUpdate, db: Session = Depends(db_sess)):
    doc = get_document(db, document_id)
    values = {**(doc.field_values or {}), **body.field_values} if body.merge else dict(body.field_values)
    doc.field_values = values; db.commit()
    t = db.get(DocumentTemplate, doc.template_id)
    filled, total = completion(parse_fields(t.template_fields), values) if t else (0, 0)
    return {"ok": True, "field_values": values, "filled": filled, "total": total}

@app.post("/api/documents/{document_id}/status", response_model=DocumentOut)
def update_status(document_id: str, body: StatusUpdate, db: Session = Depends(db_sess)):
    # draft -> finalized -> signed is the caller's convention; not enforced here
    doc = get_document(db, document_id)
    doc.document_status = body.document_status
    if body.document_status == "finalized":
        doc.finalized_at = datetime.now(timezone.utc)
    db.commit(); db.refresh(doc)
    return doc

@app.get("/api/documents/{document_id}/render")
def render_document(document_id: str, mode: RenderMode = RenderMode.FINAL, db: Session = Depends(db_sess)):
    doc = get_document(db, document_id)
    t = get_template(db, doc.template_id)
    return {"html": document_content(db, doc, mode),
            "unresolved": unresolved(t.template_content, doc.field_values or {})}

@app.post("/api/documents/{document_id}/compose")
def compose_signatures(document_id: str, body: ComposeRequest, db: Session = Depends(db_sess)):
    doc = get_document(db, document_id)
    content = document_content(db, doc)
    sigs = body.signatures.to_mapping()
    position = SignaturePosition(body.signature_position)
    return {"html": compose(content, sigs, position),
            "can_finalize": can_finalize(sigs),
            "unanchored": unanchored_roles(content, sigs, position)}

@app.post("/api/documents/{document_id}/sign", status_code=201)
def sign_document(document_id: str, body: SignRequest, db: Session = Depends(db_sess)):
    doc = get_document(db, document_id)
    t = get_template(db, doc.template_id)
    sigs = body.signatures.to_mapping()
    final = finalize(document_content(db, doc), sigs, SignaturePosition(body.signature_position))
    if final is None:
        raise HTTPException(400, "Please complete at least one signature to create the signed document.")

    signed_by = body.signed_by or "Anonymous User"
    try:
        record = signed_store.save({
            "title": doc.document_name or "Untitled Document",
            "content": final,
            "signed_by": signed_by,
            "signed_at": utcnow_iso(),
            "signature": json.dumps({k: (v.to_dict() if v else None) for k, v in sigs.items()}),
            "signing_date": date.today().isoformat(),
            "template_name": t.name,
            "document_id": doc.id,
            "signature_position": body.signature_position,
        })
    except SignedDocumentStoreError as e:
        raise HTTPException(507, "Document signed but failed to save. " + str(e))
    activity_log.document_signed(db, doc.id, doc.document_name, signed_by)
    return record

@app.post("/api/documents/{document_id}/signatures", status_code=201)
def record_signature(document_id: str, body: SignatureRecordIn, request: Request, db: Session = Depends(db_sess)):
    doc = get_document(db, document_id)
    session_id = body.signing_session_id or str(uuid.uuid4())
    rec = DocumentSignature(
        document_id=doc.id, signer_name=body.signer_name, signer_email=body.signer_email,
        signer_type=body.signer_type, signature_data=body.signature_data,
        signature_coordinates=body.signature_coordinates, device_info=body.device_info,
        ip_address=request.client.host if request.client else None,
        signing_session_id=session_id,
    )
    db.add(rec); db.commit(); db.refresh(rec)

    forwarded = False
    if config.SIGNATURE_ENDPOINT_URL:
        try:
            submit_signature({
                "documentId": doc.id, "signerName": body.signer_name, "signerEmail": body.signer_email,
                "signerType": body.signer_type, "signatureData": body.signature_data,
                "signatureCoordinates": body.signature_coordinates, "deviceInfo": body.device_info,
                "signingSessionId": session_id,
            })
        except CollaboratorError as e:
            raise HTTPException(502, str(e))
        forwarded = True
    return {"id": rec.id, "signing_session_id": session_id, "forwarded": forwarded}

@app.post("/api/documents/generate-pdf")
def generate_pdf(body: PdfRequest, db: Session = Depends(db_sess)):
    doc = get_document(db, body.document_id)
    try:
        result = request_pdf(doc.id)
    except CollaboratorError as e:
        raise HTTPException(502 if e.configured else 503, str(e))
    pdf_url = result.get("pdf_url") or result.get("url")
    if pdf_url:
        doc.pdf_url = pdf_url; db.commit()
    return {"ok": True, "pdf_url": pdf_url}

@app.get("/api/documents/{document_id}/print", response_class=HTMLResponse)
def print_document(document_id: str, db: Session = Depends(db_sess)):
    doc = get_document(db, document_id)
    return HTMLResponse(build_print_html(document_content(db, doc), doc.document_name))

# ---- signature capture ----
@app.post("/api/signatures/drawn")
def capture_drawn(body: DrawnSignatureIn):
    slot = SignatureSlot("Signature", default_signer_name=body.signer_name, signer_date=body.signer_date)
    slot.add(); slot.choose_draw()
    strokes = [[PointerEvent(p.x, p.y) for p in stroke] for stroke in body.strokes]
    draw_strokes(slot, strokes, CanvasRect(body.rect.left, body.rect.top), touch=body.input == "touch")
    try:
        slot.confirm()
    except SignatureCaptureError as e:
        raise HTTPException(400, str(e))
    slot.accept()
    return slot.signature.to_dict()

@app.post("/api/signatures/upload")
def capture_upload(file: UploadFile = File(...), signer_name: str = Form(""),
                   signer_date: Optional[str] = Form(None)):
    slot = SignatureSlot("Signature", default_signer_name=signer_name, signer_date=signer_date)
    slot.add(); slot.choose_upload()
    try:
        slot.upload(file.filename, file.content_type, file.file.read())
    except SignatureCaptureError as e:
        raise HTTPException(400, str(e))
    return slot.signature.to_dict()

# ---- signed documents (local store) ----
@app.get("/api/signed-documents")
def list_signed():
    return signed_store.all()

@app.get("/api/signed-documents/usage")
def signed_usage():
    return signed_store.usage()

@app.post("/api/signed-documents/optimize")
def signed_optimize():
    return signed_store.optimize()

@app.get("/api/signed-documents/{signed_id}")
def read_signed(signed_id: str):
    rec = signed_store.get(signed_id)
    if not rec: raise HTTPException(404, "Signed document not found")
    return rec

@app.delete("/api/signed-documents/{signed_id}")
def delete_signed(signed_id: str):
    if not signed_store.delete(signed_id): raise HTTPException(404, "Signed document not found")
    return {"ok": True}

@app.get("/api/signed-documents/{signed_id}/print", response_class=HTMLResponse)
def print_signed(signed_id: str):
    rec = signed_store.get(signed_id)
    if not rec: raise HTTPException(404, "Signed document not found")
    return HTMLResponse(build_print_html(rec.get("content") or "", rec.get("title") or ""))
