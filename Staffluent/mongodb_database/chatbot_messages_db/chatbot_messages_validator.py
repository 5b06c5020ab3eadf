# COLLECTION: Chatbot_Messages
# PURPOSE: Every user and bot turn of the business chatbot, grouped into sessions

chatbot_messages_validator = {
    "$jsonSchema": {
        "bsonType": "object",
        "required": ["businessId", "clientId", "sender", "content", "sessionId", "createdAt"],
        "properties": {
            "_id": {
                "bsonType": "objectId"
            },
            "businessId": {
                "bsonType": "string",
                "description": "Business the conversation belongs to"
            },
            "clientId": {
                "bsonType": "string",
                "description": "Tenant (client) owning the business"
            },
            "userId": {
                "bsonType": ["string", "null"]
            },
            "sender": {
                "enum": ["user", "bot"],
                "description": "user = person chatting, bot = chatbot reply"
            },
            "content": {
                "bsonType": "string"
            },
            "suggestions": {
                "bsonType": "array",
                "items": {
                    "bsonType": "object",
                    "required": ["id", "text"],
                    "properties": {
                        "id": {"bsonType": "string"},
                        "text": {"bsonType": "string"}
                    }
                }
            },
            "sessionId": {
                "bsonType": "string",
                "description": "UUID4 shared by all turns of a session"
            },
            "metadata": {
                "bsonType": "object",
                "description": "Response source, confidence, feedback and context snapshot",
                "properties": {
                    "responseSource": {
                        "enum": ["closure", "conversation", "knowledge", "learned", "nlp"]
                    },
                    "knowledgeUsed": {"bsonType": "bool"},
                    "shouldShowFeedback": {"bsonType": "bool"},
                    "feedback": {
                        "bsonType": "object",
                        "required": ["wasHelpful", "timestamp"],
                        "properties": {
                            "wasHelpful": {"bsonType": "bool"},
                            "feedbackText": {"bsonType": "string"},
                            "timestamp": {"bsonType": "date"}
                        }
                    }
                }
            },
            "createdAt": {"bsonType": "date"},
            "updatedAt": {"bsonType": "date"}
        }
    }
}
