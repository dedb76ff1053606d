import os
from dotenv import load_dotenv

load_dotenv()


def _flag(name, default):
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


class Config:
    SECRET_KEY = os.getenv("SECRET_KEY", "dev")
    SQLALCHEMY_DATABASE_URI = os.getenv("SQLALCHEMY_DATABASE_URI", "sqlite:///eddura.db")
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    CORS_ORIGINS = os.getenv("CORS_ORIGINS", "*")
    FIREBASE_CREDENTIALS_PATH = os.getenv("FIREBASE_CREDENTIALS_PATH", "serviceAccountKey.json")
    APP_ENV = os.getenv("ENV", "development")
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
    RATE_LIMIT_PER_MINUTE = int(os.getenv("RATE_LIMIT_PER_MINUTE", "120"))

    # Google Generative AI
    GOOGLE_AI_API_KEY = os.getenv("GOOGLE_AI_API_KEY", "")
    GOOGLE_AI_MODEL = os.getenv("GOOGLE_AI_MODEL", "gemini-1.5-flash")
    AI_MAX_RETRIES = int(os.getenv("AI_MAX_RETRIES", "3"))
    AI_BASE_DELAY = float(os.getenv("AI_BASE_DELAY", "1.0"))
    AI_MAX_DELAY = float(os.getenv("AI_MAX_DELAY", "10.0"))
    AI_BACKOFF_MULTIPLIER = float(os.getenv("AI_BACKOFF_MULTIPLIER", "2"))

    # Payments / paywall
    PAYMENTS_ENABLED = _flag("PAYMENTS_ENABLED", "false")
    ENABLE_PAYWALL = _flag("ENABLE_PAYWALL", "true")
    ENABLE_TRIALS = _flag("ENABLE_TRIALS", "true")
    TRIAL_DURATION_DAYS = int(os.getenv("TRIAL_DURATION_DAYS", "7"))
