"""
CodeArena Configuration
Database, session and execution service settings
"""

import os

# MongoDB
MONGO_URL = os.getenv("MONGO_URL", "mongodb://localhost:27017")
MONGO_DB_NAME = os.getenv("MONGO_DB_NAME", "codearena")

# Sessions (JWT in http-only cookies)
JWT_SECRET = os.getenv("JWT_SECRET", "dev-change-me")
JWT_ALGORITHM = "HS256"
SESSION_MAX_AGE_DAYS = int(os.getenv("SESSION_MAX_AGE_DAYS", "30"))
USER_COOKIE_NAME = "user_jwt"
ADMIN_COOKIE_NAME = "admin_jwt"

ENVIRONMENT = os.getenv("ENVIRONMENT", "development")
SECURE_COOKIES = ENVIRONMENT == "production"

# CORS
CLIENT_URL = os.getenv("CLIENT_URL", "http://localhost:3000")

# Remote execution service (Piston-compatible)
EXECUTION_API_URL = os.getenv("EXECUTION_API_URL", "https://emkc.org/api/v2/piston")
EXECUTION_TIMEOUT_SECONDS = float(os.getenv("EXECUTION_TIMEOUT_SECONDS", "15"))

# Logging
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
SERVICE_NAME = os.getenv("SERVICE_NAME", "codearena-api")
