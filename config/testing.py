import os

SECRET_KEY = "test-secret"

ROSTER_PATH = os.getenv("ROSTER_PATH", "data/roster-test.json")
ORG_TIMEZONE = "Asia/Ho_Chi_Minh"

SWEEP_INTERVAL_SECONDS = 0
SESSION_DAYS = 1

DEBUG = False
TESTING = True
LOG_LEVEL = "WARNING"

AUTO_SEED_ADMIN = True
ADMIN_USERNAME = "admin"
ADMIN_PASSWORD = "admin123"
