# COLLECTION: Unrecognized_Queries
# PURPOSE: Questions the chatbot could not answer, queued for an admin

unrecognized_queries_validator = {
    "$jsonSchema": {
        "bsonType": "object",
        "required": ["message", "status", "frequency"],
        "properties": {
            "_id": {
                "bsonType": "objectId"
            },
            "message": {
                "bsonType": "string"
            },
            "clientId": {
                "bsonType": ["string", "null"]
            },
            "businessType": {
                "bsonType": ["string", "null"]
            },
            "userId": {
                "bsonType": ["string", "null"]
            },
            "sessionId": {
                "bsonType": ["string", "null"]
            },
            "context": {
                "bsonType": "object"
            },
            "status": {
                "enum": ["pending", "reviewed", "answered"]
            },
            "resolved": {
                "bsonType": "bool"
            },
            "frequency": {
                "bsonType": "int",
                "minimum": 1,
                "description": "How many times the same question was asked"
            },
            "response": {
                "bsonType": "string"
            },
            "answeredAt": {"bsonType": "date"},
            "createdAt": {"bsonType": "date"},
            "updatedAt": {"bsonType": "date"}
        }
    }
}
