import pytest
from pydantic import ValidationError

import variables as var
from functions import meetings
from functions.chats import get_conversation
from functions.errors import ActionNotAllowed
from functions.matching import get_or_create_conversation, has_disliked, has_liked
from functions.profiles import get_profile, honesty_percent


@pytest.fixture
def conversation(db, man, woman):
    return get_or_create_conversation(db, man[var.col_id], woman[var.col_id])


def _confirm(db, conversation, man, woman):
    meetings.request_meeting(db, conversation[var.col_id], man[var.col_id])
    return meetings.request_meeting(db, conversation[var.col_id], woman[var.col_id])


def test_meeting_needs_both_sides(db, conversation, man, woman):
    updated = meetings.request_meeting(db, conversation[var.col_id], man[var.col_id])

    assert meetings.meeting_state(updated, man[var.col_id]) == meetings.STATE_REQUESTED_BY_ME
    assert meetings.meeting_state(updated, woman[var.col_id]) == meetings.STATE_REQUESTED_BY_THEM
    assert not updated.get(var.col_meeting_confirmed)
    assert db.rows(var.table_meetings) == []

    confirmed = meetings.request_meeting(db, conversation[var.col_id], woman[var.col_id])

    assert confirmed[var.col_meeting_confirmed] is True
    assert confirmed[var.col_ready_for_meeting] is True
    assert meetings.meeting_state(confirmed, man[var.col_id]) == meetings.STATE_CONFIRMED

    [meeting] = db.rows(var.table_meetings)
    assert meeting[var.col_confirmed_by_user1] is True
    assert meeting[var.col_confirmed_by_user2] is True


def test_outsider_cannot_request_meeting(db, conversation, bot):
    with pytest.raises(ActionNotAllowed):
        meetings.request_meeting(db, conversation[var.col_id], bot[var.col_id])


def test_review_refused_before_meeting(db, conversation, man):
    assert not meetings.can_review(db, conversation, man[var.col_id])
    with pytest.raises(ActionNotAllowed):
        meetings.submit_review(db, man[var.col_id], conversation[var.col_id], 5)
    assert db.rows(var.table_reviews) == []


def test_review_updates_honesty_rating(db, conversation, man, woman):
    _confirm(db, conversation, man, woman)
    conversation = get_conversation(db, conversation[var.col_id])
    assert meetings.can_review(db, conversation, man[var.col_id])

    meetings.submit_review(db, man[var.col_id], conversation[var.col_id], 4, "  Exactly like her photos  ")

    [review] = db.rows(var.table_reviews)
    assert review[var.col_reviewed_id] == woman[var.col_id]
    assert review[var.col_comment] == "Exactly like her photos"

    reviewed = get_profile(db, woman[var.col_id])
    assert reviewed[var.col_honesty_rating] == 4
    assert reviewed[var.col_total_ratings] == 1
    assert honesty_percent(reviewed[var.col_honesty_rating]) == 80


def test_rating_is_mean_of_all_reviews(db, man, woman, bot):
    for reviewer, score in ((man, 5), (bot, 2)):
        conversation = get_or_create_conversation(db, reviewer[var.col_id], woman[var.col_id])
        _confirm(db, conversation, reviewer, woman)
        meetings.submit_review(db, reviewer[var.col_id], conversation[var.col_id], score)

    reviewed = get_profile(db, woman[var.col_id])
    assert reviewed[var.col_honesty_rating] == 3.5
    assert reviewed[var.col_total_ratings] == 2


def test_duplicate_review_refused(db, conversation, man, woman):
    _confirm(db, conversation, man, woman)
    meetings.submit_review(db, man[var.col_id], conversation[var.col_id], 3)

    with pytest.raises(ActionNotAllowed):
        meetings.submit_review(db, man[var.col_id], conversation[var.col_id], 5)

    assert len(db.rows(var.table_reviews)) == 1
    # the other side still gets to review
    meetings.submit_review(db, woman[var.col_id], conversation[var.col_id], 5)
    assert len(db.rows(var.table_reviews)) == 2


@pytest.mark.parametrize("rating", [0, 6])
def test_rating_out_of_range(db, conversation, man, woman, rating):
    _confirm(db, conversation, man, woman)

    with pytest.raises(ValidationError):
        meetings.submit_review(db, man[var.col_id], conversation[var.col_id], rating)


def test_review_answer_feeds_likes(db, man, woman, bot):
    liked = get_or_create_conversation(db, man[var.col_id], woman[var.col_id])
    _confirm(db, liked, man, woman)
    meetings.submit_review(db, man[var.col_id], liked[var.col_id], 5, is_like=True)

    passed = get_or_create_conversation(db, man[var.col_id], bot[var.col_id])
    _confirm(db, passed, man, bot)
    meetings.submit_review(db, man[var.col_id], passed[var.col_id], 2, is_like=False)

    assert has_liked(db, man[var.col_id], woman[var.col_id])
    assert has_disliked(db, man[var.col_id], bot[var.col_id])
