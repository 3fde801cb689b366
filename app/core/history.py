"""Verlaufsspeicher: liest und schreibt die Nachrichten eines Nutzers.

Jede Zeile wird beim Lesen gegen ``StoredMessage`` validiert. Unbekannte
Nachrichtenarten tragen nichts zum Kontext bei, kaputte Zeilen bekannter Art
werden als ``None`` geliefert und vom Prompt-Baustein als Platzhalter
dargestellt.
"""
import datetime
import logging
from typing import List, Optional

from pydantic import ValidationError
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker

from app.core.db_sqla import MessageRecord
from app.core.models import Kind, Role, StoredMessage

logger = logging.getLogger(__name__)

KNOWN_KINDS = {k.value for k in Kind}


class HistoryStoreError(Exception):
    """Lesen oder Schreiben des Verlaufs ist fehlgeschlagen."""


def decode_record(record: MessageRecord) -> Optional[StoredMessage]:
    try:
        return StoredMessage.model_validate(record)
    except ValidationError as e:
        logger.error(f"Failed to decode stored message {record.id} of user {record.user_id}: {e}")
        return None


class HistoryStore:
    """Kapselt den Zugriff auf die ``messages``-Tabelle."""

    def __init__(self, session_factory: sessionmaker):
        self._session_factory = session_factory

    def fetch_history(self, user_id: str) -> List[Optional[StoredMessage]]:
        """Alle Nachrichten des Nutzers, neueste zuerst."""
        db = self._session_factory()
        try:
            records = db.scalars(
                select(MessageRecord)
                .where(MessageRecord.user_id == user_id)
                .order_by(MessageRecord.created_at.desc(), MessageRecord.id.desc())
            ).all()
        except SQLAlchemyError as e:
            raise HistoryStoreError(f"history query for {user_id} failed: {e}") from e
        finally:
            db.close()

        return [decode_record(r) for r in records if r.kind in KNOWN_KINDS]

    def append(
        self,
        user_id: str,
        role: Role,
        kind: Kind,
        content: str,
        now: datetime.datetime,
    ) -> StoredMessage:
        try:
            message = StoredMessage(user_id=user_id, role=role, kind=kind, content=content, created_at=now)
        except ValidationError as e:
            raise HistoryStoreError(f"refusing to store invalid message for {user_id}: {e}") from e

        db = self._session_factory()
        try:
            db.add(
                MessageRecord(
                    user_id=message.user_id,
                    role=message.role.value,
                    kind=message.kind.value,
                    content=message.content,
                    created_at=message.created_at,
                )
            )
            db.commit()
        except SQLAlchemyError as e:
            db.rollback()
            raise HistoryStoreError(f"insert for {user_id} failed: {e}") from e
        finally:
            db.close()
        return message
