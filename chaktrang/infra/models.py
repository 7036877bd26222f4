"""
SQLAlchemy ORM models for database tables
"""

from datetime import datetime, timezone
from sqlalchemy import Boolean, Column, String, Integer, DateTime, Index, CheckConstraint, JSON
from sqlalchemy.orm import declarative_base

Base = declarative_base()


class AccountModel(Base):
    """SQLAlchemy ORM model for accounts table"""

    __tablename__ = "accounts"

    id = Column(String(36), primary_key=True)
    username = Column(String(64), nullable=False)
    email = Column(String(255), nullable=False)
    password_hash = Column(String(255), nullable=False)
    display_name = Column(String(64), nullable=False)
    avatar_url = Column(String(255), nullable=False, default="default_avatar")
    country = Column(String(64), nullable=False, default="Cambodia")
    guild_name = Column(String(64), nullable=False, default="")
    coins = Column(Integer, nullable=False, default=1000)
    diamonds = Column(Integer, nullable=False, default=10)
    current_level = Column(Integer, nullable=False, default=1)
    highest_level = Column(Integer, nullable=False, default=1)
    total_wins = Column(Integer, nullable=False, default=0)
    total_losses = Column(Integer, nullable=False, default=0)
    total_draws = Column(Integer, nullable=False, default=0)
    experience_points = Column(Integer, nullable=False, default=0)
    games_played = Column(Integer, nullable=False, default=0)
    win_streak = Column(Integer, nullable=False, default=0)
    rating = Column(Integer, nullable=False, default=1200)
    is_developer = Column(Boolean, nullable=False, default=False)
    is_premium = Column(Boolean, nullable=False, default=False)
    achievements = Column(JSON, nullable=False, default=lambda: [])
    created_at = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc))
    last_login_at = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc))

    __table_args__ = (
        Index('idx_accounts_username', 'username', unique=True),
        Index('idx_accounts_email', 'email', unique=True),
        Index('idx_accounts_ranking', 'highest_level', 'total_wins', 'experience_points'),
        Index('idx_accounts_guild', 'guild_name'),
        CheckConstraint('coins >= 0', name='ck_accounts_coins_non_negative'),
        CheckConstraint('diamonds >= 0', name='ck_accounts_diamonds_non_negative'),
        CheckConstraint('highest_level >= current_level', name='ck_accounts_highest_level'),
    )

    def __repr__(self):
        return f"<Account(username='{self.username}', level={self.current_level}, wins={self.total_wins})>"
