import logging

import variables as var
from functions.errors import ActionNotAllowed
from supabase_client import first_row

logger = logging.getLogger(__name__)


def canonical_pair(a, b):
    """Lower id is user1, so one unordered pair maps to one row."""
    a, b = str(a), str(b)
    return (a, b) if a < b else (b, a)


def other_participant(conversation, user_id):
    if conversation[var.col_user1_id] == user_id:
        return conversation[var.col_user2_id]
    return conversation[var.col_user1_id]


# --------------------------------------------------
# CONVERSATIONS
# --------------------------------------------------
def find_conversation(client, a, b):
    # older rows were not always written in canonical order, look both ways
    for x, y in ((a, b), (b, a)):
        res = (
            client.table(var.table_conversations)
            .select("*")
            .eq(var.col_user1_id, x)
            .eq(var.col_user2_id, y)
            .limit(1)
            .execute()
        )
        row = first_row(res)
        if row:
            return row
    return None


def get_or_create_conversation(client, a, b):
    if a == b:
        raise ActionNotAllowed("Cannot start a conversation with yourself")

    existing = find_conversation(client, a, b)
    if existing:
        return existing

    user1, user2 = canonical_pair(a, b)
    res = client.table(var.table_conversations).insert({
        var.col_user1_id: user1,
        var.col_user2_id: user2,
    }).execute()
    logger.info("Created conversation for %s / %s", user1, user2)
    return first_row(res)


# --------------------------------------------------
# LIKES / DISLIKES
# --------------------------------------------------
def has_liked(client, user_id, target_id):
    res = (
        client.table(var.table_likes)
        .select(var.col_id)
        .eq(var.col_user_id, user_id)
        .eq(var.col_liked_user_id, target_id)
        .limit(1)
        .execute()
    )
    return first_row(res) is not None


def has_disliked(client, user_id, target_id):
    res = (
        client.table(var.table_dislikes)
        .select(var.col_id)
        .eq(var.col_user_id, user_id)
        .eq(var.col_disliked_user_id, target_id)
        .limit(1)
        .execute()
    )
    return first_row(res) is not None


def like_profile(client, user_id, target_id):
    """Register a like. Returns the pair's conversation when the like is mutual."""
    if user_id == target_id:
        raise ActionNotAllowed("You cannot like your own profile")

    if not has_liked(client, user_id, target_id):
        client.table(var.table_likes).insert({
            var.col_user_id: user_id,
            var.col_liked_user_id: target_id,
        }).execute()

    if has_liked(client, target_id, user_id):
        return get_or_create_conversation(client, user_id, target_id)
    return None


def dislike_profile(client, user_id, target_id):
    if user_id == target_id:
        raise ActionNotAllowed("You cannot dislike your own profile")

    if has_disliked(client, user_id, target_id):
        return
    client.table(var.table_dislikes).insert({
        var.col_user_id: user_id,
        var.col_disliked_user_id: target_id,
    }).execute()


def reacted_ids(client, user_id):
    """Ids the user already liked or disliked."""
    likes = (
        client.table(var.table_likes)
        .select(var.col_liked_user_id)
        .eq(var.col_user_id, user_id)
        .execute()
        .data or []
    )
    dislikes = (
        client.table(var.table_dislikes)
        .select(var.col_disliked_user_id)
        .eq(var.col_user_id, user_id)
        .execute()
        .data or []
    )
    return (
        {r[var.col_liked_user_id] for r in likes}
        | {r[var.col_disliked_user_id] for r in dislikes}
    )
