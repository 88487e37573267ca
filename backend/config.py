# backend/config.py
import os
from dotenv import load_dotenv

load_dotenv()

# SQLite for speed; swap to Postgres later if desired
DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./app.db")
DATA_DIR = os.getenv("DATA_DIR", "data")
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
CORS_ORIGINS = [o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()]

# external collaborators; unset means "not configured"
SIGNATURE_ENDPOINT_URL = os.getenv("SIGNATURE_ENDPOINT_URL") or None
PDF_SERVICE_URL = os.getenv("PDF_SERVICE_URL") or None
COLLABORATOR_TIMEOUT = float(os.getenv("COLLABORATOR_TIMEOUT", "10"))
