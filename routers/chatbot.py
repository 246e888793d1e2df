"""
Router for the AI study assistant.
"""
from typing import List, Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from core.rate_limiting import check_rate_limit
from core.security import get_current_user
from db_config import get_db
from models.models import User
from schemas.chatbot import ChatbotAskRequest, ChatbotAnswer, ChatbotHistoryPage
from services.ai_manager import ai_manager
from services.chatbot_service import ChatbotService

router = APIRouter(prefix="/chatbot", tags=["Chatbot"])


@router.post(
    "/ask",
    response_model=ChatbotAnswer,
    dependencies=[Depends(check_rate_limit("ai_generation"))],
)
async def ask_question(
    data: ChatbotAskRequest,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """
    Ask the assistant a question.

    Always answers with 200; `is_fallback` is set when the provider was
    unavailable and a canned answer was returned instead.
    """
    result = await ChatbotService(db, ai_manager).ask(current_user, data.question, data.topic)
    return ChatbotAnswer(**result)


@router.get("/history", response_model=ChatbotHistoryPage)
def get_history(
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    topic: Optional[str] = Query(None, description="Topic filter; 'all' disables it"),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    history = ChatbotService(db, ai_manager).get_history(current_user, page=page, limit=limit, topic=topic)
    return ChatbotHistoryPage.model_validate(history, from_attributes=True)


@router.delete("/history/{history_id}")
def delete_history_item(
    history_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    ChatbotService(db, ai_manager).delete_history_item(current_user, history_id)
    return {"message": "Chat history deleted"}


@router.get("/topics", response_model=List[str])
def list_topics(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Distinct topics from the caller's history, alphabetical."""
    return ChatbotService(db, ai_manager).list_topics(current_user)
