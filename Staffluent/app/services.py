from flask import current_app

from ..chatbot_agent.Business_Chatbot import BusinessChatbotService
from ..chatbot_agent.business_directory import BusinessDirectory
from ..chatbot_agent.history_manager import MessageStore
from ..chatbot_agent.knowledge_base import KnowledgeBase
from ..mongodb_database.connection import get_db


def get_chatbot_service():
    """Return the app's chatbot service, building it against MongoDB on first use."""
    service = current_app.config.get('CHATBOT_SERVICE')
    if service is None:
        db = get_db(current_app.config['MONGO_DB_NAME'], current_app.config['MONGO_URI'])
        service = BusinessChatbotService(
            message_store=MessageStore(db),
            knowledge_base=KnowledgeBase(db),
            directory=BusinessDirectory(db),
            platform_name=current_app.config['PLATFORM_NAME'],
            feedback_frequency=current_app.config['FEEDBACK_FREQUENCY'],
            history_window=current_app.config['HISTORY_WINDOW'],
            lookup_workers=current_app.config['SESSION_LOOKUP_WORKERS']
        )
        service.initialize()
        current_app.config['CHATBOT_SERVICE'] = service
    return service
