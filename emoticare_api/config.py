"""
Service Configuration

Loads environment variables and provides configuration settings.
"""

import os
from pathlib import Path
from dotenv import load_dotenv

# Load .env.local first (for local development), then .env as fallback
env_local = Path(__file__).parent / '.env.local'
env_file = Path(__file__).parent / '.env'

if env_local.exists():
    load_dotenv(env_local)
elif env_file.exists():
    load_dotenv(env_file)

# Default reply tone when the user has not picked one
DEFAULT_TONE = os.getenv("EMOTICARE_DEFAULT_TONE", "warm")

# Logging
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

# Server Config
BACKEND_HOST = os.getenv("BACKEND_HOST", "0.0.0.0")
BACKEND_PORT = int(os.getenv("BACKEND_PORT", "8000"))
CORS_ORIGINS = os.getenv("CORS_ORIGINS", "*").split(",")
