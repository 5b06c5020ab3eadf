from datetime import datetime, timezone
from typing import Dict, List, Optional

from bson import ObjectId
from bson.errors import InvalidId
from pymongo import ASCENDING, DESCENDING


def to_object_id(value) -> Optional[ObjectId]:
    if isinstance(value, ObjectId):
        return value
    try:
        return ObjectId(str(value))
    except (InvalidId, TypeError):
        return None


class MessageStore:
    """Chatbot turns stored in the Chatbot_Messages collection."""

    def __init__(self, mongodb_db):
        self.collection = mongodb_db.Chatbot_Messages

    def create(self, turn: Dict) -> Dict:
        now = datetime.now(timezone.utc)
        doc = dict(turn)
        doc.setdefault('suggestions', [])
        doc.setdefault('metadata', {})
        doc['createdAt'] = now
        doc['updatedAt'] = now
        result = self.collection.insert_one(doc)
        doc['_id'] = result.inserted_id
        return doc

    def find(self, filter: Dict, sort: int = ASCENDING, limit: int = 0, skip: int = 0) -> List[Dict]:
        cursor = self.collection.find(filter).sort('createdAt', sort)
        if skip:
            cursor = cursor.skip(skip)
        if limit:
            cursor = cursor.limit(limit)
        return list(cursor)

    def find_one(self, filter: Dict) -> Optional[Dict]:
        if '_id' in filter:
            filter = dict(filter, _id=to_object_id(filter['_id']))
            if filter['_id'] is None:
                return None
        return self.collection.find_one(filter)

    def count_documents(self, filter: Dict) -> int:
        return self.collection.count_documents(filter)

    def delete_many(self, filter: Dict) -> int:
        return self.collection.delete_many(filter).deleted_count

    def update_metadata(self, message_id, metadata: Dict) -> bool:
        result = self.collection.update_one(
            {'_id': to_object_id(message_id)},
            {'$set': {'metadata': metadata, 'updatedAt': datetime.now(timezone.utc)}}
        )
        return result.matched_count > 0

    def aggregate_sessions(self, business_id: str, client_id: str, skip: int = 0, limit: int = 20) -> List[Dict]:
        """One summary row per session, most recently active first."""
        pipeline = [
            {"$match": {"businessId": business_id, "clientId": client_id}},
            {"$sort": {"createdAt": DESCENDING}},
            {"$group": {
                "_id": "$sessionId",
                "lastMessage": {"$first": "$content"},
                "lastMessageTime": {"$first": "$createdAt"},
                "userId": {"$first": "$userId"},
                "messageCount": {"$sum": 1}
            }},
            {"$sort": {"lastMessageTime": DESCENDING}},
            {"$skip": skip},
            {"$limit": limit}
        ]
        return list(self.collection.aggregate(pipeline))

    def count_sessions(self, business_id: str, client_id: str) -> int:
        pipeline = [
            {"$match": {"businessId": business_id, "clientId": client_id}},
            {"$group": {"_id": "$sessionId"}},
            {"$count": "total"}
        ]
        results = list(self.collection.aggregate(pipeline))
        return results[0]['total'] if results else 0
