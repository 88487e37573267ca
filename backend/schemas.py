# backend/schemas.py
"""
Request / response bodies for the API.
"""
from datetime import datetime
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

from signature_capture import SignatureData

FieldType = Literal["text", "textarea", "number", "currency", "date", "email", "phone", "select"]
DocumentStatus = Literal["draft", "finalized", "signed"]


class TemplateField(BaseModel):
    name: str
    label: str = ""
    type: FieldType = "text"
    required: bool = False
    default: Optional[Any] = None
    options: Optional[List[str]] = None


class TemplateCreate(BaseModel):
    name: str = Field(min_length=1)
    document_type: str = "general"
    template_content: str
    template_fields: Optional[List[TemplateField]] = None


class TemplateOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    document_type: Optional[str]
    template_content: str
    template_fields: List[TemplateField]
    created_at: Optional[datetime] = None


class ClientInfo(BaseModel):
    first_name: str = ""
    last_name: str = ""
    email: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None


class PropertyInfo(BaseModel):
    address: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zip_code: Optional[str] = None
    price: Optional[Any] = None
    mls_number: Optional[str] = None


class DocumentCreate(BaseModel):
    document_name: str = Field(min_length=1)
    template_id: str = Field(min_length=1)
    field_values: Dict[str, Any] = {}
    client: Optional[ClientInfo] = None
    listing: Optional[PropertyInfo] = None
    agent_id: Optional[str] = None


class DocumentOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    document_name: str
    template_id: Optional[str]
    field_values: Dict[str, Any]
    document_status: str
    pdf_url: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    finalized_at: Optional[datetime] = None


class FieldsUpdate(BaseModel):
    field_values: Dict[str, Any]
    merge: bool = True


class StatusUpdate(BaseModel):
    document_status: DocumentStatus


class PreviewRequest(BaseModel):
    template_content: str
    field_values: Dict[str, Any] = {}
    mode: Literal["final", "preview"] = "preview"


class SignatureIn(BaseModel):
    type: Literal["upload", "drawn", "none"]
    data: Optional[str] = None
    file_name: Optional[str] = None
    timestamp: str
    signer_name: Optional[str] = None
    signer_date: Optional[str] = None

    def to_signature(self) -> SignatureData:
        return SignatureData(**self.model_dump())


class SignaturesIn(BaseModel):
    seller: Optional[SignatureIn] = None
    broker: Optional[SignatureIn] = None

    def to_mapping(self) -> dict:
        return {
            "seller": self.seller.to_signature() if self.seller else None,
            "broker": self.broker.to_signature() if self.broker else None,
        }


class ComposeRequest(BaseModel):
    signatures: SignaturesIn = SignaturesIn()
    signature_position: Literal["embedded", "end"] = "end"


class SignRequest(ComposeRequest):
    signed_by: Optional[str] = None


class SignatureRecordIn(BaseModel):
    signer_name: str = Field(min_length=1)
    signer_email: str = Field(min_length=1)
    signer_type: Literal["seller", "broker"]
    signature_data: str
    signature_coordinates: Optional[Dict[str, Any]] = None
    device_info: Optional[Dict[str, Any]] = None
    signing_session_id: Optional[str] = None


class Point(BaseModel):
    x: float
    y: float


class CanvasRect(BaseModel):
    left: float = 0
    top: float = 0


class DrawnSignatureIn(BaseModel):
    strokes: List[List[Point]]
    rect: CanvasRect = CanvasRect()
    input: Literal["pointer", "touch"] = "pointer"
    signer_name: str = ""
    signer_date: Optional[str] = None


class PdfRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    document_id: str = Field(alias="documentId", min_length=1)
