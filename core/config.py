# core/config.py
import os
from dotenv import load_dotenv

load_dotenv()

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///restaurants.db")
UPLOAD_DIR = os.getenv("UPLOAD_DIR", os.path.join("public", "uploads"))
UPLOAD_URL_PREFIX = os.getenv("UPLOAD_URL_PREFIX", "/uploads")
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
AUDIT_ACTOR = os.getenv("AUDIT_ACTOR", "system")
