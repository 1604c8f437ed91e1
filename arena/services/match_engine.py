"""
Match lifecycle and result resolution.

Every function here works on a single ``Match`` instance in memory and never
touches the database: callers (``match_service``) load the row, run one of
these transitions and commit. Statuses move as follows::

    scheduled --start--> ongoing --record_result / decisive add_game--> completed
    scheduled|ongoing|postponed --reschedule--> scheduled
    completed --reschedule--> scheduled (outcome and games cleared, when allowed)
    any --cancel--> cancelled (terminal)
    any --postpone--> postponed
"""
import datetime
import logging
import math
from typing import Optional

from arena.core.config import settings
from arena.core.exceptions import InvalidStateError, ValidationError
from arena.models.match import Bracket, Match, MatchGame, MatchStatus

logger = logging.getLogger(__name__)

DEFAULT_NOTE_REASON = settings.DEFAULT_NOTE_REASON


def utcnow() -> datetime.datetime:
    """Naive UTC timestamp, the form stored in the DateTime columns."""
    return datetime.datetime.now(datetime.timezone.utc).replace(tzinfo=None)


def _ensure_score(value, label: str) -> int:
    # bool is an int subclass but never a valid score
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValidationError(f"{label} must be an integer")
    if value < 0:
        raise ValidationError(f"{label} cannot be negative")
    return value


def _touch(match: Match, now: datetime.datetime) -> None:
    # Changing a column makes SQLAlchemy issue an UPDATE, which bumps Match.version
    # even when only the game sequence grew.
    match.updated_at = now


def _stamp_end(match: Match, now: datetime.datetime) -> None:
    end = now
    if match.start_time is not None and end <= match.start_time:
        # Clock resolution can hand back the start instant itself.
        end = match.start_time + datetime.timedelta(microseconds=1)
    match.end_time = end


def _clear_outcome(match: Match) -> None:
    """Drops everything a finished series left behind so a replay starts from nothing."""
    match.winner_id = None
    match.result = ""
    match.score_a = 0
    match.score_b = 0
    match.start_time = None
    match.end_time = None
    match.games.clear()


def required_wins(best_of: int) -> int:
    return math.ceil(best_of / 2)


def new_match(
    tournament_id: int,
    team_a_id: int,
    team_b_id: int,
    scheduled_at: Optional[datetime.datetime],
    round: int = 1,
    bracket: Bracket = Bracket.WINNERS,
    best_of: int = 1,
    referee_id: Optional[int] = None,
    stream_url: str = "",
) -> Match:
    """Builds a scheduled match after checking the fields that need no lookups."""
    if team_a_id == team_b_id:
        raise ValidationError("Team A and Team B cannot be the same")
    if scheduled_at is None:
        raise ValidationError("Schedule date is required")
    if round < 1:
        raise ValidationError("Round must be at least 1")
    if best_of < 1:
        raise ValidationError("Best of must be at least 1")
    try:
        bracket = Bracket(bracket)
    except ValueError:
        raise ValidationError(f"Unknown bracket: {bracket}")

    return Match(
        tournament_id=tournament_id,
        team_a_id=team_a_id,
        team_b_id=team_b_id,
        scheduled_at=scheduled_at,
        round=round,
        bracket=bracket,
        best_of=best_of,
        referee_id=referee_id,
        stream_url=stream_url or "",
        status=MatchStatus.SCHEDULED,
        result="",
        score_a=0,
        score_b=0,
        duration=0,
        games=[],
    )


def start(match: Match, now: Optional[datetime.datetime] = None) -> Match:
    if match.status != MatchStatus.SCHEDULED:
        raise InvalidStateError(f"Match cannot be started from status '{MatchStatus(match.status).value}'")
    now = now or utcnow()
    match.status = MatchStatus.ONGOING
    match.start_time = now
    match.end_time = None
    match.winner_id = None
    _touch(match, now)
    logger.info("Match %s started", match.id)
    return match


def record_result(
    match: Match,
    result: Optional[str],
    score_a: int,
    score_b: int,
    tie_break_winner_id: Optional[int] = None,
    allow_ties: bool = True,
    now: Optional[datetime.datetime] = None,
) -> Match:
    """
    Sets the aggregate score and completes the match.

    The higher score wins. Equal scores leave the winner unset when
    ``allow_ties`` is true, unless ``tie_break_winner_id`` names one of the two
    sides. Recording again over a completed match overwrites the previous
    result.
    """
    score_a = _ensure_score(score_a, "Score A")
    score_b = _ensure_score(score_b, "Score B")
    if match.status == MatchStatus.CANCELLED:
        raise InvalidStateError("Cannot record a result for a cancelled match")
    if tie_break_winner_id is not None and tie_break_winner_id not in (match.team_a_id, match.team_b_id):
        raise ValidationError("Tie-break winner must be one of the two teams")

    if score_a > score_b:
        winner_id = match.team_a_id
    elif score_b > score_a:
        winner_id = match.team_b_id
    elif tie_break_winner_id is not None:
        winner_id = tie_break_winner_id
    elif allow_ties:
        winner_id = None
    else:
        raise ValidationError("Tied scores require a tie-break winner")

    now = now or utcnow()
    match.result = result or ""
    match.score_a = score_a
    match.score_b = score_b
    match.winner_id = winner_id
    match.status = MatchStatus.COMPLETED
    _stamp_end(match, now)
    _touch(match, now)
    logger.info("Match %s completed %s-%s, winner %s", match.id, score_a, score_b, winner_id)
    return match


def resolve_best_of(match: Match) -> Optional[int]:
    """
    Returns the side that has reached the required number of game wins, or None.

    Always recounts over the whole game sequence, so edits to earlier games are
    picked up. If both sides somehow qualify, the one that got there first wins.
    """
    needed = required_wins(match.best_of or 1)
    wins = {match.team_a_id: 0, match.team_b_id: 0}
    for game in match.games:
        if game.winner_id in wins:
            wins[game.winner_id] += 1
            if wins[game.winner_id] >= needed:
                return game.winner_id
    return None


def add_game(match: Match, game: MatchGame, now: Optional[datetime.datetime] = None) -> Match:
    if match.status != MatchStatus.ONGOING:
        raise InvalidStateError(f"Games can only be added to an ongoing match, status is '{MatchStatus(match.status).value}'")
    game.team_a_score = _ensure_score(game.team_a_score or 0, "Team A game score")
    game.team_b_score = _ensure_score(game.team_b_score or 0, "Team B game score")
    if game.winner_id is not None and game.winner_id not in (match.team_a_id, match.team_b_id):
        raise ValidationError("Game winner must be one of the two teams")
    if game.game_number is None:
        game.game_number = len(match.games) + 1

    now = now or utcnow()
    match.games.append(game)
    _touch(match, now)

    winner_id = resolve_best_of(match)
    if winner_id is not None:
        match.winner_id = winner_id
        match.status = MatchStatus.COMPLETED
        _stamp_end(match, now)
        logger.info("Match %s decided after game %s, winner %s", match.id, game.game_number, winner_id)
    return match


def reschedule(
    match: Match,
    new_date: Optional[datetime.datetime],
    allow_from_completed: bool = True,
    now: Optional[datetime.datetime] = None,
) -> Match:
    if new_date is None:
        raise ValidationError("New date is required")
    if match.status == MatchStatus.CANCELLED:
        raise InvalidStateError("Cancelled matches cannot be rescheduled")
    if match.status == MatchStatus.COMPLETED:
        if not allow_from_completed:
            raise InvalidStateError("Completed matches cannot be rescheduled")
        _clear_outcome(match)
        logger.info("Match %s reopened, previous outcome cleared", match.id)
    match.scheduled_at = new_date
    match.status = MatchStatus.SCHEDULED
    _touch(match, now or utcnow())
    return match


def cancel(match: Match, reason: Optional[str] = None, now: Optional[datetime.datetime] = None) -> Match:
    match.status = MatchStatus.CANCELLED
    match.notes = reason or DEFAULT_NOTE_REASON
    _touch(match, now or utcnow())
    logger.info("Match %s cancelled: %s", match.id, match.notes)
    return match


def postpone(match: Match, reason: Optional[str] = None, now: Optional[datetime.datetime] = None) -> Match:
    match.status = MatchStatus.POSTPONED
    match.notes = reason or DEFAULT_NOTE_REASON
    _touch(match, now or utcnow())
    logger.info("Match %s postponed: %s", match.id, match.notes)
    return match
