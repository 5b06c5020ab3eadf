# COLLECTION: Knowledge_Documents
# PURPOSE: Help articles, FAQs and guides the chatbot answers from

knowledge_documents_validator = {
    "$jsonSchema": {
        "bsonType": "object",
        "required": ["title", "content", "type", "active"],
        "properties": {
            "_id": {
                "bsonType": "objectId"
            },
            "title": {
                "bsonType": "string"
            },
            "content": {
                "bsonType": "string"
            },
            "keywords": {
                "bsonType": "array",
                "items": {"bsonType": "string"}
            },
            "type": {
                "enum": ["article", "faq", "guide", "announcement"]
            },
            "categories": {
                "bsonType": "array",
                "items": {"bsonType": "string"},
                "description": "E.g. 'project_management', 'communication'"
            },
            "applicableBusinessTypes": {
                "bsonType": "array",
                "items": {"bsonType": "string"},
                "description": "Empty or containing 'all' means every business type"
            },
            "applicableFeatures": {
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
            "createdAt": {"bsonType": "date"},
            "updatedAt": {"bsonType": "date"}
        }
    }
}
