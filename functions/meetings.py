import logging

import variables as var
from functions.chats import get_conversation, is_participant
from functions.errors import ActionNotAllowed
from functions.matching import canonical_pair, dislike_profile, like_profile, other_participant
from functions.profiles import refresh_honesty_rating
from functions.validations import ReviewForm
from supabase_client import first_row

logger = logging.getLogger(__name__)

STATE_NONE = "none"
STATE_REQUESTED_BY_ME = "requested_by_me"
STATE_REQUESTED_BY_THEM = "requested_by_them"
STATE_CONFIRMED = "confirmed"


def _side_columns(conversation, user_id):
    """(my request column, their request column)"""
    if conversation[var.col_user1_id] == user_id:
        return var.col_meeting_requested_by_user1, var.col_meeting_requested_by_user2
    return var.col_meeting_requested_by_user2, var.col_meeting_requested_by_user1


def meeting_state(conversation, user_id):
    if conversation.get(var.col_meeting_confirmed):
        return STATE_CONFIRMED
    mine, theirs = _side_columns(conversation, user_id)
    if conversation.get(mine):
        return STATE_REQUESTED_BY_ME
    if conversation.get(theirs):
        return STATE_REQUESTED_BY_THEM
    return STATE_NONE


def request_meeting(client, conversation_id, user_id):
    """
    Mark this side as wanting to meet. Once the other side has asked too the
    meeting is confirmed, which is what unlocks reviews.
    """
    conversation = get_conversation(client, conversation_id)
    if not conversation or not is_participant(conversation, user_id):
        raise ActionNotAllowed("You are not part of this conversation")

    if conversation.get(var.col_meeting_confirmed):
        return conversation

    mine, theirs = _side_columns(conversation, user_id)
    changes = {mine: True}
    confirmed = bool(conversation.get(theirs))
    if confirmed:
        changes[var.col_meeting_confirmed] = True
        changes[var.col_ready_for_meeting] = True

    res = (
        client.table(var.table_conversations)
        .update(changes)
        .eq(var.col_id, conversation_id)
        .execute()
    )
    updated = first_row(res) or {**conversation, **changes}

    if confirmed:
        other = other_participant(conversation, user_id)
        mark_met(client, user_id, other)
        mark_met(client, other, user_id)
        logger.info("Meeting confirmed in conversation %s", conversation_id)
    return updated


def mark_met(client, user_id, other_id):
    user1, user2 = canonical_pair(user_id, other_id)
    flag = var.col_confirmed_by_user1 if str(user_id) == user1 else var.col_confirmed_by_user2

    res = (
        client.table(var.table_meetings)
        .select("*")
        .eq(var.col_user1_id, user1)
        .eq(var.col_user2_id, user2)
        .limit(1)
        .execute()
    )
    existing = first_row(res)

    if existing:
        res = (
            client.table(var.table_meetings)
            .update({flag: True})
            .eq(var.col_id, existing[var.col_id])
            .execute()
        )
        return first_row(res) or {**existing, flag: True}

    res = client.table(var.table_meetings).insert({
        var.col_user1_id: user1,
        var.col_user2_id: user2,
        flag: True,
    }).execute()
    return first_row(res)


# --------------------------------------------------
# REVIEWS
# --------------------------------------------------
def has_reviewed(client, reviewer_id, conversation_id):
    res = (
        client.table(var.table_reviews)
        .select(var.col_id)
        .eq(var.col_reviewer_id, reviewer_id)
        .eq(var.col_conversation_id, conversation_id)
        .limit(1)
        .execute()
    )
    return first_row(res) is not None


def can_review(client, conversation, reviewer_id):
    return (
        is_participant(conversation, reviewer_id)
        and bool(conversation.get(var.col_meeting_confirmed))
        and not has_reviewed(client, reviewer_id, conversation[var.col_id])
    )


def submit_review(client, reviewer_id, conversation_id, rating, comment=None, is_like=None):
    form = ReviewForm(rating=rating, comment=comment)

    conversation = get_conversation(client, conversation_id)
    if not conversation or not is_participant(conversation, reviewer_id):
        raise ActionNotAllowed("You are not part of this conversation")
    if not conversation.get(var.col_meeting_confirmed):
        raise ActionNotAllowed("Both sides must confirm the meeting before leaving a review")
    if has_reviewed(client, reviewer_id, conversation_id):
        raise ActionNotAllowed("You have already reviewed this meeting")

    reviewed_id = other_participant(conversation, reviewer_id)
    res = client.table(var.table_reviews).insert({
        var.col_reviewer_id: reviewer_id,
        var.col_reviewed_id: reviewed_id,
        var.col_conversation_id: conversation_id,
        var.col_rating: form.rating,
        var.col_comment: form.comment,
    }).execute()

    rating_now = refresh_honesty_rating(client, reviewed_id)
    logger.info("Review for %s saved, honesty rating now %s", reviewed_id, rating_now)

    if is_like is True:
        like_profile(client, reviewer_id, reviewed_id)
    elif is_like is False:
        dislike_profile(client, reviewer_id, reviewed_id)

    return first_row(res)
