"""
Entry point for the relay server
Run from the project root: python run_server.py
"""
import sys
import os

# Add the project root to PYTHONPATH
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

import uvicorn

from cliprelay.config import load_settings
from cliprelay.server.app import create_app
from cliprelay.utils.log import setup_logging

if __name__ == "__main__":
    settings = load_settings()
    setup_logging(settings.log_file, settings.log_level)
    uvicorn.run(create_app(settings), host=settings.host, port=settings.port, log_config=None)
