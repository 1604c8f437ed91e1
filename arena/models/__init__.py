from arena.core.database import Base, engine

# Import all models here to ensure they are registered with Base
from .user import User
from .tournament import Tournament, TournamentFormat, TournamentStatus
from .competitor import Competitor
from .match import Match, MatchGame, MatchStatus, Bracket

def create_tables(bind=engine):
    # Called from the app lifespan; tests bind their own engine.
    Base.metadata.create_all(bind=bind)
