"""
Entry point for the Users Backend
"""

import sys
import os
import logging
from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

# Add src directory to Python path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), 'src'))

# Import the FastAPI application
from app import app

logger = logging.getLogger(__name__)

if __name__ == "__main__":
    import uvicorn
    settings = app.state.settings
    logger.info(f"Starting Users Backend on {settings.host}:{settings.port}")
    uvicorn.run(app, host=settings.host, port=settings.port)
