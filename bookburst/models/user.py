from sqlalchemy import Column, Integer, String, Index
from sqlalchemy.orm import relationship

from bookburst.core.db import Base


class User(Base):
    __tablename__ = "users"
    __table_args__ = (
        Index("idx_users_username", "username", unique=True),
        Index("idx_users_email", "email", unique=True),
    )

    id = Column(Integer, primary_key=True)
    username = Column(String(30), nullable=False)
    email = Column(String(255), nullable=False)
    password_hash = Column(String(255), nullable=False)
    profile_picture = Column(String(500), nullable=False, default="")

    # Relationships
    bookshelf_items = relationship(
        "BookshelfItem", back_populates="user", cascade="all, delete-orphan"
    )
    reviews = relationship("Review", back_populates="user", cascade="all, delete-orphan")

    def __repr__(self) -> str:
        return f"<User id={self.id} username={self.username!r}>"
