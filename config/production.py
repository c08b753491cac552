import os

SECRET_KEY = os.getenv("SECRET_KEY", "please-set-SECRET_KEY")

ROSTER_PATH = os.getenv("ROSTER_PATH", "data/roster.json")
ORG_TIMEZONE = os.getenv("ORG_TIMEZONE", "Asia/Ho_Chi_Minh")

SWEEP_INTERVAL_SECONDS = int(os.getenv("SWEEP_INTERVAL_SECONDS", "300"))
SESSION_DAYS = int(os.getenv("SESSION_DAYS", "1"))

DEBUG = False
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

AUTO_SEED_ADMIN = bool(int(os.getenv("AUTO_SEED_ADMIN", "0")))
ADMIN_USERNAME = os.getenv("ADMIN_USERNAME", "admin")
ADMIN_PASSWORD = os.getenv("ADMIN_PASSWORD", "")
