import os

SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-key")

# Toàn bộ dữ liệu roster nằm trong một file JSON
ROSTER_PATH = os.getenv("ROSTER_PATH", "data/roster.json")
ORG_TIMEZONE = os.getenv("ORG_TIMEZONE", "Asia/Ho_Chi_Minh")

# Chu kỳ quét ca bị bỏ quên (giây); 0 = tắt luồng nền
SWEEP_INTERVAL_SECONDS = int(os.getenv("SWEEP_INTERVAL_SECONDS", "300"))

SESSION_DAYS = int(os.getenv("SESSION_DAYS", "1"))

DEBUG = True
LOG_LEVEL = os.getenv("LOG_LEVEL", "DEBUG")

# If enabled, app creates the first admin account when the roster has none
AUTO_SEED_ADMIN = bool(int(os.getenv("AUTO_SEED_ADMIN", "1")))
ADMIN_USERNAME = os.getenv("ADMIN_USERNAME", "admin")
ADMIN_PASSWORD = os.getenv("ADMIN_PASSWORD", "admin123")
