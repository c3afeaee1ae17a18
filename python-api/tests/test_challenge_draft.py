"""
Tests for the wizard draft aggregate.
"""

from datetime import datetime, timedelta, timezone

import pytest
from pydantic import ValidationError
from services.challenge_draft import (
    ChallengeDraft,
    DraftIncompleteError,
    DraftStepError,
    calculate_total_prize,
    default_milestones,
)
from services.challenge_rules import check_new_challenge


START = datetime.now(timezone.utc) + timedelta(days=7)
END = START + timedelta(days=10)


@pytest.fixture
def complete_draft():
    return (
        ChallengeDraft()
        .apply_intake("Clean water", "Design a filter", ["Cheap", "Cheap", "Durable"], "Design")
        .apply_submission("url", ["Link to prototype"])
        .apply_prizes("tiered", [{"rank": 1, "amount": 300}, {"rank": 2, "amount": 200}])
        .apply_timeline(START, END)
    )


class TestHelpers:
    def test_calculate_total_prize(self):
        assert calculate_total_prize([{"amount": 300}, {"amount": 200}]) == 500
        assert calculate_total_prize([]) == 0

    def test_default_milestones_positions(self):
        milestones = default_milestones(START, END)

        assert [m.name for m in milestones][0] == "Registration Opens"
        assert [m.date for m in milestones] == [
            START,
            START + timedelta(days=2),
            START + timedelta(days=3),
            END - timedelta(days=2),
            END - timedelta(days=1),
            END,
        ]
        assert all(m.description for m in milestones)


class TestSteps:
    def test_steps_return_new_drafts(self):
        draft = ChallengeDraft()

        updated = draft.apply_intake("Title", "Problem", ["Goal"], "Ideation")

        assert draft.title is None
        assert updated.title == "Title"
        assert updated.completed_steps == ("intake",)

    def test_draft_is_frozen(self):
        with pytest.raises(ValidationError):
            ChallengeDraft().title = "x"

    def test_intake_requires_every_field(self):
        with pytest.raises(DraftStepError) as exc_info:
            ChallengeDraft().apply_intake("", "", [" "], None)

        assert exc_info.value.step == "intake"
        assert len(exc_info.value.errors) == 4

    def test_intake_dedupes_goals(self, complete_draft):
        assert complete_draft.goals == ("Cheap", "Durable")

    def test_audience_needs_language(self):
        with pytest.raises(DraftStepError, match="language"):
            ChallengeDraft().apply_audience(languages=[])

    def test_audience_needs_team_size_above_one(self):
        with pytest.raises(DraftStepError, match="team size"):
            ChallengeDraft().apply_audience(languages=["English"], max_team_size=1)

    def test_audience_default_team_size(self):
        draft = ChallengeDraft().apply_audience(languages=["English"])

        assert draft.audience.max_team_size == 5

    def test_submission_needs_requirement(self):
        with pytest.raises(DraftStepError):
            ChallengeDraft().apply_submission("zip", [])

    def test_prizes_need_positive_amounts(self):
        with pytest.raises(DraftStepError, match="greater than 0"):
            ChallengeDraft().apply_prizes("single", [{"rank": 1, "amount": 0}])

    def test_prizes_need_an_amount(self):
        with pytest.raises(DraftStepError):
            ChallengeDraft().apply_prizes("single", [])

    def test_prize_total_is_computed(self, complete_draft):
        assert complete_draft.total_prize == 500

    def test_prize_amounts_from_form_strings(self):
        draft = ChallengeDraft().apply_prizes(
            "tiered", [{"rank": 1, "amount": "300"}, {"rank": 2, "amount": "200.5"}]
        )

        assert draft.total_prize == 500.5
        assert [entry.amount for entry in draft.prizes.amounts] == [300, 200.5]

    @pytest.mark.parametrize("amount", ["abc", "-5", ""])
    def test_bad_form_amounts_raise_step_error(self, amount):
        with pytest.raises(DraftStepError) as exc_info:
            ChallengeDraft().apply_prizes("single", [{"rank": 1, "amount": amount}])

        assert exc_info.value.step == "prizes"

    def test_timeline_end_after_start(self):
        with pytest.raises(DraftStepError, match="End date"):
            ChallengeDraft().apply_timeline(END, START)

    def test_timeline_rejects_partial_milestones(self):
        with pytest.raises(DraftStepError, match="Milestones"):
            ChallengeDraft().apply_timeline(START, END, milestones=[{"name": "Kickoff"}])

    def test_timeline_keeps_explicit_empty_milestones(self):
        draft = ChallengeDraft().apply_timeline(START, END, milestones=[])

        assert draft.timeline.milestones == []

    def test_evaluation_needs_valid_criteria(self):
        with pytest.raises(DraftStepError):
            ChallengeDraft().apply_evaluation([{"name": "A", "weight": 40, "description": "x"}])

    def test_evaluation_needs_complete_reviewers(self):
        with pytest.raises(DraftStepError, match="reviewer"):
            ChallengeDraft().apply_evaluation(
                [{"name": "A", "weight": 100, "description": "x"}],
                reviewers=[{"email": "r@example.com"}],
            )

    def test_evaluation_defaults(self):
        draft = ChallengeDraft().apply_evaluation([{"name": "A", "weight": 100, "description": "x"}])

        assert draft.evaluation.model.value == "post-submission"
        assert draft.evaluation.rubric.scoring_system.value == "points"


class TestToPayload:
    def test_incomplete_draft(self):
        draft = ChallengeDraft().apply_intake("Title", "Problem", ["Goal"], "Ideation")

        with pytest.raises(DraftIncompleteError) as exc_info:
            draft.to_payload()

        assert exc_info.value.missing == ["submission", "prizes", "timeline"]

    def test_payload_passes_creation_rules(self, complete_draft):
        payload = complete_draft.to_payload()

        check_new_challenge(payload)
        assert payload["prizes"]["total_prize"] == 500
        assert payload["challenge_type"] == "Design"
        assert len(payload["timeline"]["milestones"]) == 6
        assert payload["audience"] is None
