import os
from datetime import timedelta

from dotenv import load_dotenv

# Load .env from project root so local development MONGO_URI is picked up
load_dotenv()


DEFAULT_JWT_SECRET = "change-this-jwt-secret"


class Config:
    SECRET_KEY = os.environ.get("SECRET_KEY", "dev-secret-key-change-me")
    JWT_SECRET_KEY = os.environ.get("JWT_SECRET_KEY", DEFAULT_JWT_SECRET)
    JWT_ACCESS_TOKEN_EXPIRES = timedelta(hours=int(os.environ.get("JWT_EXPIRES_HOURS", "12")))

    MONGO_URI = os.environ.get("MONGO_URI", "mongodb://localhost:27017/?directConnection=true")
    MONGO_DB_NAME = os.environ.get("MONGO_DB_NAME", "taskboard")
    MONGO_TIMEOUT_MS = int(os.environ.get("MONGO_TIMEOUT_MS", "2000"))

    CORS_ORIGINS = os.environ.get("CORS_ORIGINS", "*")
    API_PREFIX = os.environ.get("API_PREFIX", "/api")
    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")

    DEBUG = os.environ.get("FLASK_DEBUG", "0") == "1"
