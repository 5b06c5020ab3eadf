import logging

from pymongo import ASCENDING, DESCENDING

from Staffluent.chatbot_agent.knowledge_base import KnowledgeBase
from Staffluent.mongodb_database.chatbot_messages_db.chatbot_messages_validator import chatbot_messages_validator
from Staffluent.mongodb_database.knowledge_documents_db.knowledge_documents_validator import \
    knowledge_documents_validator
from Staffluent.mongodb_database.query_response_pairs_db.query_response_pairs_validator import \
    query_response_pairs_validator
from Staffluent.mongodb_database.unrecognized_queries_db.unrecognized_queries_validator import \
    unrecognized_queries_validator

logger = logging.getLogger(__name__)

VALIDATORS = {
    "Chatbot_Messages": chatbot_messages_validator,
    "Knowledge_Documents": knowledge_documents_validator,
    "Query_Response_Pairs": query_response_pairs_validator,
    "Unrecognized_Queries": unrecognized_queries_validator,
}


def apply_validators(db):
    """Create each chatbot collection with its validator, or update the validator in place."""
    existing = set(db.list_collection_names())
    for collection_name, validator in VALIDATORS.items():
        if collection_name in existing:
            db.command("collMod", collection_name, validator=validator)
            logger.info("Validator applied to existing collection %s", collection_name)
        else:
            db.create_collection(collection_name, validator=validator)
            logger.info("Collection %s created with validator", collection_name)

    db.Chatbot_Messages.create_index(
        [("businessId", ASCENDING), ("clientId", ASCENDING), ("sessionId", ASCENDING), ("createdAt", DESCENDING)]
    )
    db.Unrecognized_Queries.create_index([("message", "text")])
    KnowledgeBase(db).ensure_indexes()


if __name__ == "__main__":
    from Staffluent.app.logging_config import setup_logging
    from Staffluent.mongodb_database.connection import get_db

    setup_logging()
    apply_validators(get_db())
