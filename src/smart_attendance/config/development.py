import os

SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-key")

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "smart_attendance"),
}

DEBUG = True

# Apply schema.sql on startup (idempotent: CREATE TABLE IF NOT EXISTS)
AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "1")))
# Seed the default admin account on startup
AUTO_SEED_DB = bool(int(os.getenv("AUTO_SEED_DB", "1")))

ADMIN_EMAIL = os.getenv("ADMIN_EMAIL", "admin@school.local")
ADMIN_PASSWORD = os.getenv("ADMIN_PASSWORD", "Admin@123")

QR_MAX_FRAMES = int(os.getenv("QR_MAX_FRAMES", "30"))
SESSION_DAYS = int(os.getenv("SESSION_DAYS", "7"))
