import pytest
from datetime import datetime, timedelta

from arena.core.config import settings
from arena.core.exceptions import InvalidStateError, ValidationError
from arena.models.match import Bracket, MatchGame, MatchStatus
from arena.services import match_engine

TEAM_A = 10
TEAM_B = 20
KICKOFF = datetime(2030, 5, 1, 18, 0)


def build_match(best_of=1, **kwargs):
    return match_engine.new_match(1, TEAM_A, TEAM_B, KICKOFF, best_of=best_of, **kwargs)


def ongoing_match(best_of=1):
    match = build_match(best_of=best_of)
    match_engine.start(match, now=KICKOFF)
    return match


def play(match, *winners):
    for winner in winners:
        match_engine.add_game(match, MatchGame(team_a_score=13, team_b_score=7, winner_id=winner))
    return match


class TestNewMatch:

    def test_defaults(self):
        match = build_match()
        assert match.status == MatchStatus.SCHEDULED
        assert match.bracket == Bracket.WINNERS
        assert match.round == 1
        assert match.score_a == 0 and match.score_b == 0
        assert match.winner_id is None
        assert list(match.games) == []

    def test_same_team_rejected(self):
        with pytest.raises(ValidationError, match="cannot be the same"):
            match_engine.new_match(1, TEAM_A, TEAM_A, KICKOFF)

    def test_round_must_be_positive(self):
        with pytest.raises(ValidationError, match="Round"):
            build_match(round=0)

    def test_best_of_must_be_positive(self):
        with pytest.raises(ValidationError, match="Best of"):
            build_match(best_of=0)

    def test_unknown_bracket_rejected(self):
        with pytest.raises(ValidationError, match="Unknown bracket"):
            build_match(bracket="playoffs")

    def test_bracket_string_accepted(self):
        assert build_match(bracket="group").bracket == Bracket.GROUP

    def test_schedule_time_required(self):
        with pytest.raises(ValidationError):
            match_engine.new_match(1, TEAM_A, TEAM_B, None)


class TestStart:

    def test_start_sets_status_and_time(self):
        match = build_match()
        match_engine.start(match, now=KICKOFF)
        assert match.status == MatchStatus.ONGOING
        assert match.start_time == KICKOFF
        assert match.updated_at == KICKOFF

    def test_second_start_fails(self):
        match = build_match()
        match_engine.start(match)
        with pytest.raises(InvalidStateError):
            match_engine.start(match)

    @pytest.mark.parametrize("status", [MatchStatus.COMPLETED, MatchStatus.CANCELLED, MatchStatus.POSTPONED])
    def test_only_scheduled_matches_start(self, status):
        match = build_match()
        match.status = status
        with pytest.raises(InvalidStateError):
            match_engine.start(match)


class TestBestOf:

    def test_required_wins(self):
        assert [match_engine.required_wins(n) for n in (1, 2, 3, 4, 5, 7)] == [1, 1, 2, 2, 3, 4]

    def test_best_of_three_decided_on_third_game(self):
        match = ongoing_match(best_of=3)
        play(match, TEAM_A, TEAM_B)
        assert match.status == MatchStatus.ONGOING
        assert match.winner_id is None

        play(match, TEAM_A)
        assert match.status == MatchStatus.COMPLETED
        assert match.winner_id == TEAM_A
        assert match.end_time is not None

    def test_best_of_five_two_wins_is_not_enough(self):
        match = play(ongoing_match(best_of=5), TEAM_A, TEAM_A)
        assert match.status == MatchStatus.ONGOING
        assert match.winner_id is None

    def test_best_of_one_single_game(self):
        match = play(ongoing_match(best_of=1), TEAM_B)
        assert match.status == MatchStatus.COMPLETED
        assert match.winner_id == TEAM_B

    def test_games_without_winner_do_not_count(self):
        match = ongoing_match(best_of=1)
        match_engine.add_game(match, MatchGame(team_a_score=1, team_b_score=1))
        assert match.status == MatchStatus.ONGOING
        assert len(match.games) == 1

    def test_game_numbers_default_to_position(self):
        match = play(ongoing_match(best_of=5), TEAM_A, TEAM_B)
        match_engine.add_game(match, MatchGame(game_number=7, team_a_score=2, team_b_score=0))
        assert [g.game_number for g in match.games] == [1, 2, 7]

    def test_foreign_winner_rejected(self):
        match = ongoing_match(best_of=3)
        with pytest.raises(ValidationError, match="Game winner"):
            match_engine.add_game(match, MatchGame(team_a_score=1, team_b_score=0, winner_id=99))
        assert len(match.games) == 0

    def test_negative_game_score_rejected(self):
        match = ongoing_match(best_of=3)
        with pytest.raises(ValidationError):
            match_engine.add_game(match, MatchGame(team_a_score=-1, team_b_score=0, winner_id=TEAM_B))

    @pytest.mark.parametrize("status", [MatchStatus.SCHEDULED, MatchStatus.COMPLETED, MatchStatus.CANCELLED, MatchStatus.POSTPONED])
    def test_games_need_an_ongoing_match(self, status):
        match = build_match(best_of=3)
        match.status = status
        with pytest.raises(InvalidStateError):
            match_engine.add_game(match, MatchGame(team_a_score=1, team_b_score=0, winner_id=TEAM_A))

    def test_resolution_recounts_whole_sequence(self):
        match = play(ongoing_match(best_of=3), TEAM_A, TEAM_B)
        # An earlier game corrected outside the engine
        match.games[1].winner_id = TEAM_A
        assert match_engine.resolve_best_of(match) == TEAM_A


class TestRecordResult:

    def test_higher_score_wins(self):
        match = ongoing_match()
        match_engine.record_result(match, "", 3, 1, now=KICKOFF + timedelta(hours=1))
        assert match.winner_id == TEAM_A
        assert match.status == MatchStatus.COMPLETED
        assert match.score_a == 3 and match.score_b == 1
        assert match.end_time > match.start_time

    def test_team_b_wins(self):
        match = match_engine.record_result(ongoing_match(), "Reverse sweep", 1, 3)
        assert match.winner_id == TEAM_B
        assert match.result == "Reverse sweep"

    def test_tie_completes_without_winner(self):
        # Current behavior: a draw is recorded and no winner is set.
        match = match_engine.record_result(ongoing_match(), "", 2, 2)
        assert match.status == MatchStatus.COMPLETED
        assert match.winner_id is None

    def test_tie_rejected_when_policy_disallows(self):
        match = ongoing_match()
        with pytest.raises(ValidationError, match="tie-break"):
            match_engine.record_result(match, "", 2, 2, allow_ties=False)
        assert match.status == MatchStatus.ONGOING

    def test_tie_break_winner_resolves_tie(self):
        match = match_engine.record_result(ongoing_match(), "", 2, 2, tie_break_winner_id=TEAM_B, allow_ties=False)
        assert match.winner_id == TEAM_B

    def test_tie_break_ignored_when_scores_differ(self):
        match = match_engine.record_result(ongoing_match(), "", 3, 0, tie_break_winner_id=TEAM_B)
        assert match.winner_id == TEAM_A

    def test_tie_break_must_be_a_participant(self):
        with pytest.raises(ValidationError):
            match_engine.record_result(ongoing_match(), "", 2, 2, tie_break_winner_id=99)

    @pytest.mark.parametrize("score_a, score_b", [(-1, 0), (0, -3), ("3", 1), (1.5, 0), (True, 0)])
    def test_scores_must_be_non_negative_integers(self, score_a, score_b):
        with pytest.raises(ValidationError):
            match_engine.record_result(ongoing_match(), "", score_a, score_b)

    def test_allowed_from_scheduled(self):
        match = match_engine.record_result(build_match(), None, 1, 0)
        assert match.status == MatchStatus.COMPLETED
        assert match.result == ""

    def test_recording_again_overwrites(self):
        match = match_engine.record_result(ongoing_match(), "first", 3, 1)
        match_engine.record_result(match, "corrected", 1, 3)
        assert match.winner_id == TEAM_B
        assert match.result == "corrected"
        assert match.status == MatchStatus.COMPLETED

    def test_cancelled_match_rejects_result(self):
        match = match_engine.cancel(build_match())
        with pytest.raises(InvalidStateError):
            match_engine.record_result(match, "", 1, 0)

    def test_end_time_strictly_after_start(self):
        match = ongoing_match()
        match_engine.record_result(match, "", 1, 0, now=match.start_time)
        assert match.end_time > match.start_time


class TestRescheduleCancelPostpone:

    def test_reschedule_from_postponed(self):
        match = match_engine.postpone(build_match(), "Server outage")
        new_date = KICKOFF + timedelta(days=2)
        match_engine.reschedule(match, new_date)
        assert match.status == MatchStatus.SCHEDULED
        assert match.scheduled_at == new_date

    def test_reschedule_after_completed_resets_status(self):
        # Current behavior: a completed match goes back to scheduled.
        match = match_engine.record_result(ongoing_match(), "", 2, 0)
        match_engine.reschedule(match, KICKOFF + timedelta(days=7))
        assert match.status == MatchStatus.SCHEDULED

    def test_reschedule_completed_blocked_by_policy(self):
        match = match_engine.record_result(ongoing_match(), "", 2, 0)
        with pytest.raises(InvalidStateError):
            match_engine.reschedule(match, KICKOFF + timedelta(days=7), allow_from_completed=False)
        assert match.status == MatchStatus.COMPLETED

    def test_reschedule_requires_date(self):
        with pytest.raises(ValidationError, match="New date"):
            match_engine.reschedule(build_match(), None)

    @pytest.mark.parametrize("operation, expected", [
        (match_engine.cancel, MatchStatus.CANCELLED),
        (match_engine.postpone, MatchStatus.POSTPONED),
    ])
    @pytest.mark.parametrize("start", [False, True])
    def test_from_non_terminal_states(self, operation, expected, start):
        match = ongoing_match() if start else build_match()
        operation(match, "Weather")
        assert match.status == expected
        assert match.notes == "Weather"

    @pytest.mark.parametrize("operation", [match_engine.cancel, match_engine.postpone])
    def test_reason_defaults_to_placeholder(self, operation):
        match = operation(build_match())
        assert match.notes == match_engine.DEFAULT_NOTE_REASON

    def test_postponed_match_can_be_cancelled(self):
        match = match_engine.postpone(build_match(), "later")
        match_engine.cancel(match, "dropped")
        assert match.status == MatchStatus.CANCELLED
        assert match.notes == "dropped"

    def test_cancelling_completed_match_is_permitted(self):
        match = match_engine.record_result(ongoing_match(), "", 2, 1)
        match_engine.cancel(match, "Cheating investigation")
        assert match.status == MatchStatus.CANCELLED

    def test_cancelled_match_cannot_be_rescheduled(self):
        match = match_engine.cancel(build_match(), "Team disbanded")
        with pytest.raises(InvalidStateError):
            match_engine.reschedule(match, KICKOFF + timedelta(days=7))
        assert match.status == MatchStatus.CANCELLED

    def test_default_reason_follows_settings(self):
        assert match_engine.DEFAULT_NOTE_REASON == settings.DEFAULT_NOTE_REASON


class TestReplayAfterReschedule:

    def test_reschedule_clears_previous_outcome(self):
        match = play(ongoing_match(best_of=3), TEAM_A, TEAM_A)
        assert match.winner_id == TEAM_A

        match_engine.reschedule(match, KICKOFF + timedelta(days=7))
        assert match.winner_id is None
        assert match.start_time is None and match.end_time is None
        assert (match.score_a, match.score_b, match.result) == (0, 0, "")
        assert list(match.games) == []

    def test_replayed_series_is_decided_by_new_games_only(self):
        match = play(ongoing_match(best_of=3), TEAM_A, TEAM_A)
        replay_at = KICKOFF + timedelta(days=7)
        match_engine.reschedule(match, replay_at)
        match_engine.start(match, now=replay_at)

        play(match, TEAM_B)
        assert match.status == MatchStatus.ONGOING
        assert match.winner_id is None
        assert [g.game_number for g in match.games] == [1]

        play(match, TEAM_B)
        assert match.status == MatchStatus.COMPLETED
        assert match.winner_id == TEAM_B
        assert match.end_time > match.start_time

    def test_start_after_result_reset_keeps_end_after_start(self):
        match = ongoing_match()
        match_engine.record_result(match, "", 2, 0, now=KICKOFF + timedelta(hours=1))
        replay_at = KICKOFF + timedelta(days=7)
        match_engine.reschedule(match, replay_at)
        match_engine.start(match, now=replay_at)
        assert match.start_time == replay_at
        assert match.end_time is None
        assert match.winner_id is None
