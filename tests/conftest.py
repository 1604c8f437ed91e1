import pytest
from datetime import timedelta

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from arena.models import create_tables
from arena.models.tournament import TournamentFormat
from arena.schemas import competitor_schemas, tournament_schemas
from arena.services import tournament_service
from arena.services.match_engine import utcnow


@pytest.fixture
def session_factory():
    # One shared in-memory database per test
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    create_tables(bind=engine)
    yield sessionmaker(autocommit=False, autoflush=False, bind=engine)
    engine.dispose()


@pytest.fixture
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


def tournament_payload(**overrides) -> tournament_schemas.TournamentCreate:
    now = utcnow()
    data = dict(
        name="Spring Invitational",
        format=TournamentFormat.DOUBLE_ELIMINATION,
        description="Regional qualifier",
        game_name="Valorant",
        start_date=now + timedelta(days=30),
        end_date=now + timedelta(days=32),
        registration_deadline=now + timedelta(days=10),
        max_players=8,
    )
    data.update(overrides)
    return tournament_schemas.TournamentCreate(**data)


@pytest.fixture
def make_tournament(db):
    def _make(**overrides):
        return tournament_service.create_tournament(db, tournament_payload(**overrides), organizer_id=1)
    return _make


@pytest.fixture
def tournament_data():
    """Builds a valid TournamentCreate; keyword overrides replace fields."""
    return tournament_payload


@pytest.fixture
def tournament(make_tournament):
    return make_tournament()


@pytest.fixture
def team_a(db, tournament):
    return tournament_service.register_competitor(db, tournament.id, competitor_schemas.CompetitorCreate(name="Sentinels"))


@pytest.fixture
def team_b(db, tournament):
    return tournament_service.register_competitor(db, tournament.id, competitor_schemas.CompetitorCreate(name="Cloud9"))
