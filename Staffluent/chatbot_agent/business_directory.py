from typing import Dict, Optional

from .history_manager import to_object_id


class BusinessDirectory:
    """Read-only lookups of businesses and their users."""

    def __init__(self, mongodb_db):
        self.business_collection = mongodb_db.Business
        self.user_collection = mongodb_db.User

    def find_business_by_id(self, business_id) -> Optional[Dict]:
        object_id = to_object_id(business_id)
        if object_id is None:
            return None
        return self.business_collection.find_one({"_id": object_id})

    def find_business_by_id_and_api_key(self, business_id, api_key: str) -> Optional[Dict]:
        object_id = to_object_id(business_id)
        if object_id is None or not api_key:
            return None
        return self.business_collection.find_one({"_id": object_id, "apiKey": api_key})

    def find_user_by_id(self, user_id) -> Optional[Dict]:
        object_id = to_object_id(user_id)
        if object_id is None:
            return None
        return self.user_collection.find_one({"_id": object_id}, {"name": 1, "email": 1})
