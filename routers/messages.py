"""
Router for direct and study circle messages.
"""
from typing import List
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from core.security import get_current_user
from db_config import get_db
from models.models import User
from schemas.message import (
    DirectMessageCreate, GroupMessageCreate, MessageRead, ConversationRead, MarkReadResponse
)
from services.message_service import MessageService

router = APIRouter(prefix="/messages", tags=["Messages"])


@router.get("/direct/{user_id}", response_model=List[MessageRead])
def get_direct_messages(
    user_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Direct thread between the caller and `user_id`, oldest first."""
    messages = MessageService(db).get_direct_thread(current_user, user_id)
    return [MessageRead.model_validate(m) for m in messages]


@router.get("/group/{circle_id}", response_model=List[MessageRead])
def get_group_messages(
    circle_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    messages = MessageService(db).get_group_thread(circle_id)
    return [MessageRead.model_validate(m) for m in messages]


@router.post("/direct", response_model=MessageRead, status_code=status.HTTP_201_CREATED)
def send_direct_message(
    data: DirectMessageCreate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    message = MessageService(db).send_direct(current_user, data.receiver_id, data.content)
    return MessageRead.model_validate(message)


@router.post("/group", response_model=MessageRead, status_code=status.HTTP_201_CREATED)
def send_group_message(
    data: GroupMessageCreate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    message = MessageService(db).send_group(current_user, data.study_circle_id, data.content)
    return MessageRead.model_validate(message)


@router.get("/conversations", response_model=List[ConversationRead])
def list_conversations(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Latest direct message and unread count per peer, newest first."""
    conversations = MessageService(db).list_conversations(current_user)
    return [ConversationRead.model_validate(c, from_attributes=True) for c in conversations]


@router.put("/read/{peer_id}", response_model=MarkReadResponse)
def mark_messages_read(
    peer_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    updated = MessageService(db).mark_read(current_user, peer_id)
    return MarkReadResponse(message="Messages marked as read", updated=updated)
