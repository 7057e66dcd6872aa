# journey/config.py
import os
from dotenv import load_dotenv

from journey.errors import ConfigurationError

# Load environment variables
load_dotenv()

# MongoDB Configuration
MONGODB_URI = os.getenv("MONGODB_URI", "mongodb://localhost:27017/")
MONGODB_DB = os.getenv("MONGODB_DB", "journey")

# OpenAI Configuration
OPENAI_API_KEY = os.getenv("OPENAI_API_KEY")
OPENAI_BASE_URL = os.getenv("OPENAI_BASE_URL", "https://api.openai.com/v1/chat/completions")
OPENAI_MODEL = os.getenv("OPENAI_MODEL", "gpt-4")
AI_TEMPERATURE = 0.7
AI_MAX_TOKENS = 700
AI_TIMEOUT = float(os.getenv("AI_TIMEOUT", "60"))

# Auth Configuration
BCRYPT_ROUNDS = int(os.getenv("BCRYPT_ROUNDS", "12"))

# System Configuration
DEBUG = os.getenv("DEBUG", "False").lower() == "true"
LOG_LEVEL = os.getenv("LOG_LEVEL", "DEBUG" if DEBUG else "INFO")
LOG_FORMAT = os.getenv("LOG_FORMAT", "text")


def require_openai_api_key() -> str:
    """Return the OpenAI key, failing hard when it is not configured"""
    if not OPENAI_API_KEY:
        raise ConfigurationError(
            "OPENAI_API_KEY not found. Set it in the environment or in a .env file."
        )
    return OPENAI_API_KEY
