from pathlib import Path
import os
from dotenv import load_dotenv
import logging

# Load environment variables
load_dotenv()

class Config:
    # Base paths
    BASE_DIR = Path(__file__).resolve().parent
    LOG_DIR = Path(os.getenv("LOG_DIR", str(BASE_DIR / "logs")))
    LOG_FILE_PATH = os.getenv("LOG_FILE_PATH", str(LOG_DIR / "audit.log"))

    # API Settings
    API_V1_PREFIX = "/api/v1"
    PROJECT_NAME = "Spreadsheet to XML Converter"
    VERSION = "1.0.0"
    DEBUG = os.getenv("DEBUG", "False").lower() == "true"
    SHOW_ERROR_DETAILS = os.getenv("SHOW_ERROR_DETAILS", "False").lower() == "true"

    # Server
    HOST = os.getenv("HOST", "127.0.0.1")
    PORT = int(os.getenv("PORT", "8000"))

    # CORS
    ALLOWED_ORIGINS = os.getenv("ALLOWED_ORIGINS", "http://localhost:3000").split(",")

    # File Upload
    MAX_UPLOAD_SIZE_MB = int(os.getenv("MAX_UPLOAD_SIZE_MB", "10"))
    ALLOWED_EXTENSIONS = {".xlsx", ".xls", ".csv"}
    ALLOWED_CONTENT_TYPES = {
        "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet": "xlsx",
        "application/vnd.ms-excel": "xls",
        "text/csv": "csv",
    }

    # Logging
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

    # XML Settings
    XML_DECLARATION = '<?xml version="1.0" encoding="UTF-8"?>'
    XML_ROOT_TAG = "Workbook"
    XML_SHEET_TAG = "Sheet"
    XML_ROW_TAG = "Row"
    XML_INDENT = "  "
    DEFAULT_OUTPUT_NAME = "output.xml"

    @property
    def max_upload_bytes(self) -> int:
        return self.MAX_UPLOAD_SIZE_MB * 1024 * 1024

# Create singleton instance
config = Config()

log_level = getattr(logging, config.LOG_LEVEL.upper(), logging.INFO)
logging.getLogger("sheetxml").setLevel(log_level)
