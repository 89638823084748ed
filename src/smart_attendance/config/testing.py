import os

SECRET_KEY = "test-secret"

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "smart_attendance_test"),
}

DEBUG = False
TESTING = True

AUTO_INIT_DB = False
AUTO_SEED_DB = False

ADMIN_EMAIL = "admin@test.local"
ADMIN_PASSWORD = "Admin@123"

QR_MAX_FRAMES = 5
SESSION_DAYS = 1
