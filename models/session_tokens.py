from core.database import Base
from sqlalchemy import Column, DateTime, String, Integer, ForeignKey
from sqlalchemy.orm import relationship

class SessionToken(Base):
    """
    A signed session token issued at login.

    A token is only honoured while its row exists: logout and admin
    modification of the owner delete the rows.
    """
    __tablename__ = "jwt_tokens"

    #pk
    id = Column(Integer, primary_key=True, index=True)

    #fk
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)

    #relationships
    user = relationship("User", back_populates="tokens")

    token = Column(String(1000), nullable=False, index=True)
    expires_at = Column(DateTime(timezone=True), nullable=False)
