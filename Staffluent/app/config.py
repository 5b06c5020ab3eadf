import os
from dotenv import load_dotenv

load_dotenv()


class Config:
    SECRET_KEY = os.environ.get("SECRET_KEY", "dev_key")
    MONGO_URI = os.environ.get("MONGO_URI", "mongodb://localhost:27017")
    MONGO_DB_NAME = os.environ.get("MONGO_DB_NAME", "Staffluent")
    PLATFORM_NAME = os.environ.get("PLATFORM_NAME", "Staffluent")
    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")
    FEEDBACK_FREQUENCY = int(os.environ.get("FEEDBACK_FREQUENCY", 5))  # every Nth message asks for feedback
    HISTORY_WINDOW = int(os.environ.get("HISTORY_WINDOW", 5))
    SESSION_LOOKUP_WORKERS = int(os.environ.get("SESSION_LOOKUP_WORKERS", 8))
