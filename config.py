import os
from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

class Config:
    # Scratch area for working and staging directories (None: system temp dir)
    TEMP_DIR = os.getenv("EPUBIO_TEMP_DIR") or None

    # Logging. An empty LOG_FILE disables the file handler.
    LOG_FILE = os.getenv("EPUBIO_LOG_FILE", "epubio.log")
    LOG_LEVEL = os.getenv("EPUBIO_LOG_LEVEL", "INFO").upper()
