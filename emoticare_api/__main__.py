"""
Local runner.

Usage:
    python -m emoticare_api

Sessions are kept in process memory, so run a single worker.
"""

import uvicorn

from . import config
from .server import app


def main():
    uvicorn.run(app, host=config.BACKEND_HOST, port=config.BACKEND_PORT, workers=1)


if __name__ == "__main__":
    main()
