"""
Study assistant service: prompt construction, fallbacks and chat history.
"""
import math
from datetime import datetime, timezone
from typing import List, Optional, Tuple

from sqlalchemy import select, func
from sqlalchemy.orm import Session
from starlette.concurrency import run_in_threadpool

from core.exceptions import AIServiceException, AuthorizationException, ResourceNotFoundException
from core.logging import get_logger
from models.models import User, ChatbotHistory
from services.ai_manager import AIManager

logger = get_logger("chatbot")

PROMPT_TEMPLATE = (
    "You are an educational assistant for SkillCircle, a learning platform.\n"
    "Please provide a helpful, clear, and educational answer to the following question about {topic}:\n"
    "\n"
    "Question: {question}\n"
    "\n"
    "Please provide a comprehensive but concise answer that would help a student learn."
)

UNAVAILABLE_ANSWER = (
    "I apologize, but the AI service is currently unavailable. "
    "Please ensure the Gemini API key is properly configured."
)

FALLBACK_TEMPLATE = (
    "I'm having trouble processing your question right now. However, I'd suggest breaking "
    'down your question about "{question}" into smaller parts and trying to research each '
    "component. You might also want to ask this question in one of the study circles on "
    "our platform where other learners can help!"
)


def build_prompt(question: str, topic: str) -> str:
    return PROMPT_TEMPLATE.format(topic=topic, question=question)


def fallback_answer(question: str) -> str:
    return FALLBACK_TEMPLATE.format(question=question)


class ChatbotService:
    """Service for assistant questions and the per-user history."""

    def __init__(self, db: Session, ai: AIManager):
        self.db = db
        self.ai = ai

    async def ask(self, user: User, question: str, topic: str = "general") -> dict:
        """
        Answer a question and record it.

        Provider problems never fail the request: an unconfigured provider
        yields the static unavailable answer and a failed call yields the
        fallback answer. Either way the pair is stored. The session is
        synchronous, so storing runs in the threadpool.
        """
        answer, is_fallback = await self._answer(user, question, topic)
        entry = await run_in_threadpool(self._store, user, question, answer, topic)

        logger.info("Assistant answer stored", history_id=entry.id, topic=topic, fallback=is_fallback)
        return {
            "question": question,
            "answer": answer,
            "topic": topic,
            "timestamp": entry.created_at or datetime.now(timezone.utc),
            "is_fallback": is_fallback,
        }

    async def _answer(self, user: User, question: str, topic: str) -> Tuple[str, bool]:
        if not self.ai.is_configured:
            logger.warning("Assistant asked while provider is unconfigured", user_id=user.id)
            return UNAVAILABLE_ANSWER, True

        try:
            return await self.ai.generate_text(build_prompt(question, topic)), False
        except AIServiceException as e:
            logger.error("Assistant provider failed, using fallback", user_id=user.id, error=e.detail)
            return fallback_answer(question), True

    def _store(self, user: User, question: str, answer: str, topic: str) -> ChatbotHistory:
        entry = ChatbotHistory(user_id=user.id, question=question, answer=answer, topic=topic)
        self.db.add(entry)
        self.db.commit()
        self.db.refresh(entry)
        return entry

    def get_history(
        self, user: User, page: int = 1, limit: int = 20, topic: Optional[str] = None
    ) -> dict:
        filters = [ChatbotHistory.user_id == user.id]
        if topic and topic != "all":
            filters.append(ChatbotHistory.topic == topic)

        total = self.db.execute(select(func.count(ChatbotHistory.id)).where(*filters)).scalar() or 0
        history = self.db.execute(
            select(ChatbotHistory)
            .where(*filters)
            .order_by(ChatbotHistory.created_at.desc(), ChatbotHistory.id.desc())
            .offset((page - 1) * limit)
            .limit(limit)
        ).scalars().all()

        return {
            "history": history,
            "pagination": {
                "page": page,
                "limit": limit,
                "total": total,
                "pages": math.ceil(total / limit),
            },
        }

    def delete_history_item(self, user: User, history_id: int) -> None:
        entry = self.db.get(ChatbotHistory, history_id)
        if entry is None:
            raise ResourceNotFoundException("Chat history not found")
        if entry.user_id != user.id:
            logger.warning("Chat history delete denied", history_id=history_id, user_id=user.id)
            raise AuthorizationException("Not authorized to delete this entry")

        self.db.delete(entry)
        self.db.commit()
        logger.info("Chat history deleted", history_id=history_id, user_id=user.id)

    def list_topics(self, user: User) -> List[str]:
        return self.db.execute(
            select(ChatbotHistory.topic)
            .where(ChatbotHistory.user_id == user.id)
            .distinct()
            .order_by(ChatbotHistory.topic)
        ).scalars().all()
