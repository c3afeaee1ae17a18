"""
Tests for Challenge Rules

Covers the criteria check, every invariant guard and the status state machine.
"""

from datetime import datetime, timedelta, timezone

import pytest
from services.challenge_rules import (
    ALLOWED_TRANSITIONS,
    TERMINAL_STATUSES,
    check_accepting_submissions,
    check_criteria,
    check_document,
    check_languages,
    check_milestones,
    check_new_challenge,
    check_prize_total,
    check_start_in_future,
    check_status_transition,
    check_team_size,
    check_timeline_order,
    is_valid_criteria,
    parse_datetime,
)
from services.errors import BadRequestError


NOW = datetime(2026, 1, 1, 12, 0, tzinfo=timezone.utc)


class TestIsValidCriteria:
    """Tests for is_valid_criteria()."""

    def test_single_criterion_of_100_is_valid(self):
        assert is_valid_criteria([{"name": "Impact", "weight": 100, "description": "Reach"}])

    def test_weights_summing_to_100_are_valid(self):
        criteria = [
            {"name": "Impact", "weight": 60, "description": "Reach"},
            {"name": "Feasibility", "weight": 40, "description": "Can it ship"},
        ]
        assert is_valid_criteria(criteria)

    def test_weights_not_summing_to_100_are_invalid(self):
        criteria = [
            {"name": "Impact", "weight": 60, "description": "Reach"},
            {"name": "Feasibility", "weight": 30, "description": "Can it ship"},
        ]
        assert not is_valid_criteria(criteria)

    def test_empty_list_is_invalid(self):
        assert not is_valid_criteria([])
        assert not is_valid_criteria(None)

    def test_missing_name_is_invalid(self):
        assert not is_valid_criteria([{"name": "", "weight": 100, "description": "Reach"}])

    def test_missing_description_is_invalid(self):
        assert not is_valid_criteria([{"name": "Impact", "weight": 100, "description": "  "}])

    def test_zero_weight_is_invalid(self):
        criteria = [
            {"name": "Impact", "weight": 100, "description": "Reach"},
            {"name": "Style", "weight": 0, "description": "Looks"},
        ]
        assert not is_valid_criteria(criteria)

    def test_accepts_objects_with_attributes(self):
        class Criterion:
            name = "Impact"
            weight = 100
            description = "Reach"

        assert is_valid_criteria([Criterion()])


class TestPrizeTotal:
    def test_matching_total_passes(self):
        check_prize_total({"amounts": [{"amount": 60}, {"amount": 40}], "total_prize": 100})

    def test_mismatched_total_fails(self):
        with pytest.raises(BadRequestError) as exc_info:
            check_prize_total({"amounts": [{"amount": 100}], "total_prize": 150})

        assert exc_info.value.status_code == 400
        assert "total_prize" in exc_info.value.detail

    def test_float_amounts_tolerate_rounding(self):
        check_prize_total({"amounts": [{"amount": 0.1}, {"amount": 0.2}], "total_prize": 0.3})


class TestCriteriaGuard:
    def test_no_criteria_passes(self):
        check_criteria({"criteria": []})
        check_criteria(None)

    def test_invalid_criteria_fail(self):
        with pytest.raises(BadRequestError):
            check_criteria({"criteria": [{"name": "A", "weight": 50, "description": "x"}]})


class TestTimelineGuards:
    def test_end_after_start_passes(self):
        check_timeline_order({
            "start_date": (NOW + timedelta(days=1)).isoformat(),
            "end_date": (NOW + timedelta(days=2)).isoformat(),
        })

    def test_end_equal_to_start_fails(self):
        moment = NOW.isoformat()
        with pytest.raises(BadRequestError) as exc_info:
            check_timeline_order({"start_date": moment, "end_date": moment})

        assert "end_date" in exc_info.value.detail

    def test_start_in_past_fails(self):
        with pytest.raises(BadRequestError):
            check_start_in_future({"start_date": (NOW - timedelta(minutes=1)).isoformat()}, now=NOW)

    def test_start_exactly_now_fails(self):
        with pytest.raises(BadRequestError):
            check_start_in_future({"start_date": NOW.isoformat()}, now=NOW)

    def test_start_in_future_passes(self):
        check_start_in_future({"start_date": (NOW + timedelta(seconds=1)).isoformat()}, now=NOW)

    def test_zulu_timestamps_are_parsed(self):
        assert parse_datetime("2026-01-01T12:00:00Z") == NOW

    def test_naive_timestamps_are_treated_as_utc(self):
        assert parse_datetime("2026-01-01T12:00:00") == NOW


class TestAudienceGuards:
    def test_team_size_of_one_with_teams_fails(self):
        with pytest.raises(BadRequestError):
            check_team_size({"teams_allowed": True, "max_team_size": 1, "languages": ["en"]})

    def test_missing_team_size_with_teams_fails(self):
        with pytest.raises(BadRequestError):
            check_team_size({"teams_allowed": True, "max_team_size": None})

    def test_team_size_ignored_without_teams(self):
        check_team_size({"teams_allowed": False, "max_team_size": None})

    def test_no_audience_passes(self):
        check_team_size(None)
        check_languages(None)

    def test_empty_languages_fail(self):
        with pytest.raises(BadRequestError):
            check_languages({"languages": []})


class TestMilestones:
    def test_complete_milestones_pass(self):
        check_milestones({"milestones": [
            {"name": "Kickoff", "date": NOW.isoformat(), "description": "Start"},
        ]})

    def test_partial_milestone_fails(self):
        with pytest.raises(BadRequestError) as exc_info:
            check_milestones({"milestones": [{"name": "Kickoff", "date": None, "description": "Start"}]})

        assert "date" in exc_info.value.detail

    def test_blank_milestone_fails(self):
        with pytest.raises(BadRequestError):
            check_milestones({"milestones": [{"name": None, "date": None, "description": None}]})

    def test_no_milestones_pass(self):
        check_milestones({"milestones": []})


class TestStatusTransitions:
    @pytest.mark.parametrize(
        "current,new",
        [("draft", "active"), ("draft", "cancelled"), ("active", "completed"), ("active", "cancelled")],
    )
    def test_legal_transitions(self, current, new):
        check_status_transition(current, new)

    @pytest.mark.parametrize(
        "current,new",
        [
            ("active", "draft"),
            ("active", "active"),
            ("completed", "active"),
            ("cancelled", "active"),
            ("draft", "completed"),
        ],
    )
    def test_illegal_transitions(self, current, new):
        with pytest.raises(BadRequestError) as exc_info:
            check_status_transition(current, new)

        assert exc_info.value.error_code == "INVALID_STATUS_TRANSITION"

    def test_terminal_statuses(self):
        assert TERMINAL_STATUSES == {"completed", "cancelled"}
        assert set(ALLOWED_TRANSITIONS) == {"draft", "active", "completed", "cancelled"}

    def test_only_active_challenges_accept_submissions(self):
        check_accepting_submissions({"status": "active"})
        for status in ("draft", "completed", "cancelled"):
            with pytest.raises(BadRequestError):
                check_accepting_submissions({"status": status})


class TestDocumentChecks:
    def test_valid_payload_passes(self, challenge_payload):
        check_new_challenge(challenge_payload)

    def test_start_in_past_rejected_only_for_new_challenges(self, challenge_payload):
        challenge_payload["timeline"]["start_date"] = (
            datetime.now(timezone.utc) - timedelta(days=1)
        ).isoformat()

        check_document(challenge_payload)
        with pytest.raises(BadRequestError):
            check_new_challenge(challenge_payload)

    def test_prize_mismatch_rejected(self, challenge_payload):
        challenge_payload["prizes"]["total_prize"] = 999

        with pytest.raises(BadRequestError):
            check_document(challenge_payload)
