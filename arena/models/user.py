from sqlalchemy import Column, Integer, String
from arena.core.database import Base

class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    full_name = Column(String)
    email = Column(String, unique=True, index=True)
    role = Column(String, default="player") # e.g., "player", "organizer", "admin"

    # User management lives in the account service; matches only reference users as referees.
