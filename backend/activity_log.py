# backend/activity_log.py
import logging
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from models import ActivityLog

logger = logging.getLogger(__name__)

def log_activity(db: Session, activity_type: str, description: str,
                 agent_id: Optional[str] = None, entity_type: Optional[str] = None,
                 entity_id: Optional[str] = None, details: Optional[dict] = None) -> bool:
    """
    Separate write from whatever it describes: a failure here is logged and reported
    as False, it never undoes or blocks the main write.
    """
    try:
        db.add(ActivityLog(agent_id=agent_id, activity_type=activity_type, entity_type=entity_type,
                           entity_id=entity_id, description=description, details=details))
        db.commit()
        return True
    except SQLAlchemyError as e:
        db.rollback()
        logger.error("Error logging activity %s: %s", activity_type, e)
        return False

def template_applied(db: Session, template_name: str, document_id: str, document_name: str,
                     agent_id: Optional[str] = None) -> bool:
    return log_activity(
        db, "template_applied",
        f'Applied template "{template_name}" to document: {document_name}',
        agent_id=agent_id, entity_type="document", entity_id=document_id,
        details={"templateName": template_name, "entityName": document_name, "entityType": "document"},
    )

def document_signed(db: Session, document_id: str, document_name: str, signed_by: str,
                    agent_id: Optional[str] = None) -> bool:
    return log_activity(
        db, "document_signed", f"Document signed: {document_name} by {signed_by}",
        agent_id=agent_id, entity_type="document", entity_id=document_id,
        details={"signedBy": signed_by},
    )
