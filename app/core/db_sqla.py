"""Datenbankmodell für den Gesprächsverlauf: eine einzige Tabelle mit allen
Nachrichten, abgefragt per user_id und sortiert nach created_at."""
import datetime
from typing import Optional

from sqlalchemy import String, Text, DateTime, Index, create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, sessionmaker


# Basis-Klasse für SQLAlchemy Modelle
class Base(DeclarativeBase):
    pass


class MessageRecord(Base):
    """Rohe Zeile des Verlaufs. Die Typprüfung passiert erst beim Lesen
    (``StoredMessage``), daher sind die Felder hier bewusst locker."""
    __tablename__ = "messages"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    user_id: Mapped[str] = mapped_column(String(64))
    role: Mapped[Optional[str]] = mapped_column(String(16), nullable=True)   # 'user', 'bot'
    kind: Mapped[Optional[str]] = mapped_column(String(16), nullable=True)   # 'text', 'image'
    content: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime.datetime] = mapped_column(DateTime, default=datetime.datetime.now)

    __table_args__ = (Index("ix_messages_user_created", "user_id", "created_at"),)

    def __repr__(self) -> str:
        return f"<MessageRecord(role='{self.role}', user_id='{self.user_id}')>"


def create_db_engine(url: str, connect_timeout: int = 10) -> Engine:
    """Erstellt die Engine; der Timeout gilt nur für den Verbindungsaufbau."""
    if url.startswith("sqlite"):
        connect_args = {"check_same_thread": False, "timeout": connect_timeout}
    else:
        connect_args = {"connect_timeout": connect_timeout}
    return create_engine(url, connect_args=connect_args, pool_pre_ping=True)


def create_session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


def init_db(engine: Engine) -> None:
    """Erstellt die Tabellen, falls sie noch nicht existieren."""
    Base.metadata.create_all(bind=engine)
