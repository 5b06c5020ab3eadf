# COLLECTION: Query_Response_Pairs
# PURPOSE: Answers learned from admins responding to unrecognized questions

query_response_pairs_validator = {
    "$jsonSchema": {
        "bsonType": "object",
        "required": ["query", "response", "category", "active"],
        "properties": {
            "_id": {
                "bsonType": "objectId"
            },
            "query": {
                "bsonType": "string",
                "description": "The question as originally asked"
            },
            "response": {
                "bsonType": "string"
            },
            "category": {
                "bsonType": "string",
                "description": "View the question was asked from, or 'general'"
            },
            "keywords": {
                "bsonType": "array",
                "items": {"bsonType": "string"}
            },
            "clientId": {
                "bsonType": ["string", "null"]
            },
            "active": {
                "bsonType": "bool"
            },
            "useCount": {
                "bsonType": "int"
            },
            "successRate": {
                "bsonType": ["double", "int"],
                "minimum": 0,
                "maximum": 100,
                "description": "Percentage of uses marked helpful"
            },
            "createdAt": {"bsonType": "date"},
            "updatedAt": {"bsonType": "date"}
        }
    }
}
