# backend/tests/conftest.py
import os, tempfile

# config is read at import time, so point it at a scratch dir before app loads
_tmp = tempfile.mkdtemp(prefix="docpipe_")
os.environ["DATABASE_URL"] = f"sqlite:///{os.path.join(_tmp, 'test.db')}"
os.environ["DATA_DIR"] = os.path.join(_tmp, "data")
os.environ["SIGNATURE_ENDPOINT_URL"] = ""
os.environ["PDF_SERVICE_URL"] = ""
