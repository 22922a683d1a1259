import os

# Environment
DATABASE_URL = os.getenv("DATABASE_URL")
DATABASE_NAME = os.getenv("DATABASE_NAME", "storefront")

JWT_SECRET = os.getenv("JWT_SECRET", "dev-secret-change-me")
JWT_ALG = "HS256"
JWT_EXPIRE_MINUTES = int(os.getenv("JWT_EXPIRE_MINUTES", str(60 * 24 * 7)))

STRIPE_CURRENCY = os.getenv("STRIPE_CURRENCY", "usd")

CORS_ORIGINS = [o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()]
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
PORT = int(os.getenv("PORT", 8000))


def stripe_secret_key():
    # Read per call so a rotated key is picked up without a restart
    return os.getenv("STRIPE_SECRET_KEY")


def verify_payments() -> bool:
    return os.getenv("STRIPE_VERIFY_PAYMENTS", "false").lower() in ("1", "true", "yes")
