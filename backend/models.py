# backend/models.py
from datetime import datetime, timezone
from sqlalchemy import Column, String, Text, DateTime, JSON
from db import Base
import uuid

def uuid4str():
    return str(uuid.uuid4())

def utcnow():
    return datetime.now(timezone.utc)

class DocumentTemplate(Base):
    __tablename__ = "document_templates"
    id = Column(String, primary_key=True, default=uuid4str)
    name = Column(String, nullable=False)
    document_type = Column(String, default="general")
    template_content = Column(Text, default="")   # HTML with {{token}} placeholders
    template_fields = Column(JSON, default=list)  # [{name,label,type,required,default,options}]
    created_at = Column(DateTime(timezone=True), default=utcnow)

class Document(Base):
    __tablename__ = "documents"
    id = Column(String, primary_key=True, default=uuid4str)
    document_name = Column(String, nullable=False)
    template_id = Column(String, index=True)  # lookup only, no FK: templates live independently
    field_values = Column(JSON, default=dict)
    document_status = Column(String, default="draft")  # draft|finalized|signed
    pdf_url = Column(String, nullable=True)
    created_at = Column(DateTime(timezone=True), default=utcnow)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)
    finalized_at = Column(DateTime(timezone=True), nullable=True)

class DocumentSignature(Base):
    __tablename__ = "document_signatures"
    id = Column(String, primary_key=True, default=uuid4str)
    document_id = Column(String, index=True)
    signer_name = Column(String)
    signer_email = Column(String)
    signer_type = Column(String)          # seller | broker
    signature_data = Column(Text)         # data URL
    signature_coordinates = Column(JSON, nullable=True)
    device_info = Column(JSON, nullable=True)
    ip_address = Column(String, nullable=True)
    signing_session_id = Column(String, index=True)
    signed_at = Column(DateTime(timezone=True), default=utcnow)

class ActivityLog(Base):
    __tablename__ = "activity_logs"
    id = Column(String, primary_key=True, default=uuid4str)
    agent_id = Column(String, nullable=True)
    activity_type = Column(String)        # document_created | template_applied | document_signed ...
    entity_type = Column(String, nullable=True)
    entity_id = Column(String, nullable=True)
    description = Column(Text)
    details = Column(JSON, nullable=True)
    created_at = Column(DateTime(timezone=True), default=utcnow)
