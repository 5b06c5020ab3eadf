import os
from dotenv import load_dotenv, find_dotenv
from pymongo import MongoClient

# Load environment variables from .env file
load_dotenv(find_dotenv())

_client = None


def get_client(uri=None):
    """Return the shared MongoClient, creating it on first use."""
    global _client
    if _client is None:
        _client = MongoClient(
            uri or os.environ.get("MONGO_URI", "mongodb://localhost:27017"),
            serverSelectionTimeoutMS=5000,  # 5 second timeout
            connectTimeoutMS=5000
        )
    return _client


def get_db(name=None, uri=None):
    return get_client(uri)[name or os.environ.get("MONGO_DB_NAME", "Staffluent")]
