"""
Messaging service: direct threads, circle threads and conversation summaries.
"""
from typing import List

from sqlalchemy import select, update, func, case, and_, or_
from sqlalchemy.orm import Session, selectinload

from core.config import settings
from core.exceptions import AuthorizationException, ResourceNotFoundException
from core.logging import get_logger
from models.models import User, Message, StudyCircle, StudyCircleMember, MessageTypeEnum

logger = get_logger("message_service")


def _message_options():
    return (
        selectinload(Message.sender),
        selectinload(Message.receiver),
        selectinload(Message.study_circle),
    )


class MessageService:
    """Service for direct and group messaging."""

    def __init__(self, db: Session):
        self.db = db

    def _get_message(self, message_id: int) -> Message:
        return self.db.execute(
            select(Message).options(*_message_options()).where(Message.id == message_id)
        ).scalar_one()

    def get_direct_thread(self, user: User, peer_id: int) -> List[Message]:
        """Direct messages between `user` and `peer_id` in either direction, oldest first."""
        stmt = (
            select(Message)
            .options(*_message_options())
            .where(
                Message.message_type == MessageTypeEnum.direct,
                or_(
                    and_(Message.sender_id == user.id, Message.receiver_id == peer_id),
                    and_(Message.sender_id == peer_id, Message.receiver_id == user.id),
                ),
            )
            .order_by(Message.created_at.asc(), Message.id.asc())
        )
        return self.db.execute(stmt).scalars().all()

    def get_group_thread(self, circle_id: int) -> List[Message]:
        stmt = (
            select(Message)
            .options(*_message_options())
            .where(
                Message.message_type == MessageTypeEnum.group,
                Message.study_circle_id == circle_id,
            )
            .order_by(Message.created_at.asc(), Message.id.asc())
        )
        return self.db.execute(stmt).scalars().all()

    def send_direct(self, sender: User, receiver_id: int, content: str) -> Message:
        message = Message(
            sender_id=sender.id,
            receiver_id=receiver_id,
            content=content,
            message_type=MessageTypeEnum.direct,
        )
        self.db.add(message)
        self.db.commit()

        logger.info("Direct message sent", message_id=message.id, sender_id=sender.id, receiver_id=receiver_id)
        return self._get_message(message.id)

    def send_group(self, sender: User, circle_id: int, content: str) -> Message:
        if self.db.get(StudyCircle, circle_id) is None:
            raise ResourceNotFoundException("Study circle not found")

        if settings.require_circle_membership_for_group_messages:
            if self.db.get(StudyCircleMember, (circle_id, sender.id)) is None:
                logger.warning("Group message from non-member rejected", circle_id=circle_id, sender_id=sender.id)
                raise AuthorizationException("Only circle members can post to this circle")

        message = Message(
            sender_id=sender.id,
            study_circle_id=circle_id,
            content=content,
            message_type=MessageTypeEnum.group,
        )
        self.db.add(message)
        self.db.commit()

        logger.info("Group message sent", message_id=message.id, sender_id=sender.id, circle_id=circle_id)
        return self._get_message(message.id)

    def list_conversations(self, user: User) -> List[dict]:
        """
        One entry per direct-message peer, newest conversation first.

        The latest message per peer is picked in SQL with ROW_NUMBER()
        partitioned by the other party, ties on created_at broken by id.
        """
        peer_expr = case(
            (Message.sender_id == user.id, Message.receiver_id),
            else_=Message.sender_id,
        )
        ranked = (
            select(
                Message.id.label("message_id"),
                peer_expr.label("peer_id"),
                func.row_number().over(
                    partition_by=peer_expr,
                    order_by=(Message.created_at.desc(), Message.id.desc()),
                ).label("rn"),
            )
            .where(
                Message.message_type == MessageTypeEnum.direct,
                or_(Message.sender_id == user.id, Message.receiver_id == user.id),
            )
            .subquery()
        )

        latest = self.db.execute(
            select(ranked.c.peer_id, ranked.c.message_id).where(ranked.c.rn == 1)
        ).all()
        if not latest:
            return []

        unread_rows = self.db.execute(
            select(Message.sender_id, func.count(Message.id))
            .where(
                Message.message_type == MessageTypeEnum.direct,
                Message.receiver_id == user.id,
                Message.is_read.is_(False),
            )
            .group_by(Message.sender_id)
        ).all()
        unread_by_peer = {sender_id: count for sender_id, count in unread_rows}

        message_ids = [row.message_id for row in latest]
        messages = {
            message.id: message
            for message in self.db.execute(
                select(Message).options(*_message_options()).where(Message.id.in_(message_ids))
            ).scalars()
        }
        peers = {
            peer.id: peer
            for peer in self.db.execute(
                select(User).where(User.id.in_([row.peer_id for row in latest]))
            ).scalars()
        }

        conversations = [
            {
                "peer": peers[row.peer_id],
                "last_message": messages[row.message_id],
                "unread_count": unread_by_peer.get(row.peer_id, 0),
            }
            for row in latest
            if row.peer_id in peers
        ]
        conversations.sort(
            key=lambda c: (c["last_message"].created_at, c["last_message"].id),
            reverse=True,
        )
        return conversations

    def mark_read(self, user: User, peer_id: int) -> int:
        """Mark unread direct messages from `peer_id` to `user`; returns the count."""
        result = self.db.execute(
            update(Message)
            .where(
                Message.message_type == MessageTypeEnum.direct,
                Message.sender_id == peer_id,
                Message.receiver_id == user.id,
                Message.is_read.is_(False),
            )
            .values(is_read=True)
            .execution_options(synchronize_session=False)
        )
        self.db.commit()

        logger.info("Messages marked as read", user_id=user.id, peer_id=peer_id, updated=result.rowcount)
        return result.rowcount
