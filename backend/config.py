"""
Configuration settings for the Outfit Color Analyzer API
"""

import os
from pathlib import Path

# Base directory
BASE_DIR = Path(__file__).parent

# API Configuration
API_TITLE = "Outfit Color Analyzer API"
API_DESCRIPTION = "Analyze outfit photos and get color-based style suggestions"
API_VERSION = "1.0.0"
API_HOST = os.getenv("API_HOST", "0.0.0.0")
API_PORT = int(os.getenv("API_PORT", "8000"))

# Storage
DATA_DIR = Path(os.getenv("DATA_DIR", "data"))
UPLOAD_DIR = Path(os.getenv("UPLOAD_DIR", str(DATA_DIR / "uploads")))
PUBLIC_IMAGE_PREFIX = os.getenv("PUBLIC_IMAGE_PREFIX", "/api/images")

# Auth
JWT_SECRET_KEY = os.getenv("JWT_SECRET_KEY", "outfit-analyzer-secret-key")
JWT_ALGORITHM = os.getenv("JWT_ALGORITHM", "HS256")
ACCESS_TOKEN_EXPIRE_MINUTES = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", str(60 * 24 * 7)))  # 7 days
BCRYPT_ROUNDS = int(os.getenv("BCRYPT_ROUNDS", "12"))

# File Upload Settings
MAX_FILE_SIZE = int(os.getenv("MAX_FILE_SIZE", str(5 * 1024 * 1024)))  # 5MB
ALLOWED_EXTENSIONS = {'.jpg', '.jpeg', '.png', '.webp', '.bmp'}

# History
HISTORY_PAGE_SIZE = int(os.getenv("HISTORY_PAGE_SIZE", "20"))
HISTORY_MAX_RECORDS = int(os.getenv("HISTORY_MAX_RECORDS", "100"))

# Logging
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
