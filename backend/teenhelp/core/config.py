import os
from dotenv import load_dotenv

# Load .env from the backend directory
load_dotenv(os.path.join(os.path.dirname(__file__), "..", "..", ".env"))

SECRET_KEY: str = os.getenv("SECRET_KEY", "teen-help-dev-secret-change-in-prod")
ALGORITHM: str = "HS256"
ACCESS_TOKEN_EXPIRE_MINUTES: int = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", "1440"))  # 24h

# Database — stored in backend/data/
BASE_DIR = os.path.dirname(os.path.abspath(__file__))
BACKEND_DIR = os.path.abspath(os.path.join(BASE_DIR, "..", ".."))

DATABASE_PATH: str = os.getenv(
    "DATABASE_PATH",
    os.path.join(BACKEND_DIR, "data", "teenhelp.db"),
)
MIGRATIONS_DIR: str = os.path.join(BACKEND_DIR, "migrations")

# Seeded on first start when the users table is empty
ADMIN_USERNAME: str = os.getenv("ADMIN_USERNAME", "admin")
ADMIN_PASSWORD: str = os.getenv("ADMIN_PASSWORD", "admin")

LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")
FRONTEND_URL: str = os.getenv("FRONTEND_URL", "http://localhost:3000")

# Field limits
QUESTION_MAX_LENGTH: int = 5000
ANSWER_MAX_LENGTH: int = 5000
REJECTION_REASON_MAX_LENGTH: int = 500

# Moderation queue paging
DEFAULT_PAGE_SIZE: int = 10
MAX_PAGE_SIZE: int = 100
