"""
Notification service.

Best-effort delivery: nothing here ever raises to the caller. Writes that fail
are rolled back and logged; reads that fail degrade to an empty list; read
markers that fail still report success so the client never blocks on them.
"""

import logging
from typing import List, Optional

from sqlalchemy.orm import Session

from database.models import Notification, NotificationType, Role, User

log = logging.getLogger(__name__)

DEFAULT_LIST_LIMIT = 5


def _rollback_quietly(db: Session) -> None:
    try:
        db.rollback()
    except Exception:
        log.warning("notifications: rollback failed", exc_info=True)


def notification_dict(n: Notification) -> dict:
    return {
        "id": n.id,
        "type": NotificationType(n.type).value,
        "message": n.message,
        "related_to": n.related_to,
        "on_model": n.on_model,
        "is_read": n.is_read,
        "created_at": n.created_at.isoformat() if n.created_at else None,
    }


def notify(
    db: Session,
    user_id: int,
    type: NotificationType,
    message: str,
    related_to: Optional[int] = None,
    on_model: Optional[str] = None,
) -> Optional[Notification]:
    """Create one notification. Returns None when delivery failed."""
    try:
        notification = Notification(
            user_id=user_id,
            type=NotificationType(type),
            message=message,
            related_to=related_to,
            on_model=on_model,
        )
        db.add(notification)
        db.commit()
        return notification
    except Exception:
        log.warning(f"[NOTIFY] could not notify user={user_id} type={type}", exc_info=True)
        _rollback_quietly(db)
        return None


def notify_students(
    db: Session,
    type: NotificationType,
    message: str,
    related_to: Optional[int] = None,
    on_model: Optional[str] = None,
) -> int:
    """Fan a notification out to every student. Returns how many were written."""
    try:
        student_ids = [row.id for row in db.query(User.id).filter(User.role == Role.STUDENT).all()]
        for student_id in student_ids:
            db.add(Notification(
                user_id=student_id,
                type=NotificationType(type),
                message=message,
                related_to=related_to,
                on_model=on_model,
            ))
        db.commit()
        return len(student_ids)
    except Exception:
        log.warning(f"[NOTIFY] broadcast type={type} failed", exc_info=True)
        _rollback_quietly(db)
        return 0


def list_notifications(db: Session, user_id: int, limit: int = DEFAULT_LIST_LIMIT) -> List[dict]:
    try:
        rows = (
            db.query(Notification)
            .filter(Notification.user_id == user_id)
            .order_by(Notification.created_at.desc(), Notification.id.desc())
            .limit(limit)
            .all()
        )
        return [notification_dict(n) for n in rows]
    except Exception:
        log.warning(f"[NOTIFY] listing for user={user_id} failed, returning empty list", exc_info=True)
        _rollback_quietly(db)
        return []


def mark_read(db: Session, user_id: int, notification_id: int) -> dict:
    try:
        (
            db.query(Notification)
            .filter(Notification.id == notification_id, Notification.user_id == user_id)
            .update({Notification.is_read: True}, synchronize_session=False)
        )
        db.commit()
    except Exception:
        log.warning(f"[NOTIFY] mark_read id={notification_id} failed", exc_info=True)
        _rollback_quietly(db)
    return {"success": True}


def mark_all_read(db: Session, user_id: int) -> dict:
    try:
        (
            db.query(Notification)
            .filter(Notification.user_id == user_id, Notification.is_read.is_(False))
            .update({Notification.is_read: True}, synchronize_session=False)
        )
        db.commit()
    except Exception:
        log.warning(f"[NOTIFY] mark_all_read user={user_id} failed", exc_info=True)
        _rollback_quietly(db)
    return {"success": True}
