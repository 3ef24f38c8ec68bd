from __future__ import annotations

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    ForeignKey,
    Integer,
    Numeric,
    String,
    Text,
    UniqueConstraint,
    false,
)
from sqlalchemy.orm import declarative_base, relationship
from sqlalchemy.sql import func

Base = declarative_base()


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True)
    email = Column(String(320), unique=True, nullable=False, index=True)
    password_hash = Column(String, nullable=False)
    name = Column(String, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    login_sessions = relationship("LoginSession", back_populates="user", cascade="all, delete-orphan")

    def __repr__(self) -> str:
        return "<User(id={0}, email={1}, name={2})>".format(self.id, self.email, self.name)


class LoginSession(Base):
    __tablename__ = "login_sessions"

    id = Column(Integer, primary_key=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    token = Column(String(64), nullable=False, unique=True, index=True)
    expires_at = Column(DateTime(timezone=True), nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    user = relationship("User", back_populates="login_sessions")


class Exchange(Base):
    __tablename__ = "exchanges"

    id = Column(Integer, primary_key=True)
    name = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    gift_budget = Column(Numeric(10, 2), nullable=True)
    exchange_date = Column(DateTime(timezone=True), nullable=False)
    code = Column(String(8), unique=True, nullable=False, index=True)
    organizer_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    assignments_generated = Column(Boolean, default=False, server_default=false(), nullable=False)
    assignment_seed = Column(Integer, nullable=True)
    generated_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    organizer = relationship("User", foreign_keys=[organizer_id])
    participants = relationship(
        "Participant",
        back_populates="exchange",
        cascade="all, delete-orphan",
        order_by="Participant.id",
    )
    assignments = relationship("Assignment", back_populates="exchange", cascade="all, delete-orphan")

    def __repr__(self) -> str:
        return (
            f"<Exchange(id={self.id}, code={self.code}, "
            f"assignments_generated={self.assignments_generated})>"
        )


class Participant(Base):
    __tablename__ = "participants"

    id = Column(Integer, primary_key=True)
    exchange_id = Column(Integer, ForeignKey("exchanges.id", ondelete="CASCADE"), nullable=False)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    joined_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    exchange = relationship("Exchange", back_populates="participants")
    user = relationship("User")

    __table_args__ = (
        UniqueConstraint("exchange_id", "user_id", name="uq_participants_exchange_user"),
    )


class Assignment(Base):
    __tablename__ = "assignments"

    id = Column(Integer, primary_key=True)
    exchange_id = Column(Integer, ForeignKey("exchanges.id", ondelete="CASCADE"), nullable=False)
    giver_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    receiver_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    exchange = relationship("Exchange", back_populates="assignments")
    giver = relationship("User", foreign_keys=[giver_id])
    receiver = relationship("User", foreign_keys=[receiver_id])

    __table_args__ = (
        UniqueConstraint("exchange_id", "giver_id", name="uq_assignments_exchange_giver"),
    )
