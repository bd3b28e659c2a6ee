import os

from dotenv import load_dotenv


load_dotenv()

APP_NAME = "EnglishPro API"

HOST = os.getenv("HOST", "0.0.0.0")
PORT = int(os.getenv("PORT", "8000"))

FRONTEND_URL = os.getenv("FRONTEND_URL", "http://localhost:3000")

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./englishpro.db")

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

# bcrypt cost factor for stored password hashes
BCRYPT_ROUNDS = 10

# compression threshold in bytes; smaller responses are sent as-is
GZIP_MINIMUM_SIZE = 1024
