import pandas as pd

import variables as var
from functions.matching import reacted_ids
from functions.profiles import get_profile, get_profiles


PROFILE_CARD_COLUMNS = [
    var.col_id, var.col_name, var.col_age, var.col_city, var.col_gender,
    var.col_about_me, var.col_values, var.col_family_goals, var.col_photo_url,
    var.col_photos, var.col_honesty_rating, var.col_total_ratings, var.col_is_bot,
]

CONVERSATION_COLUMNS = [
    "conversation_id", "other_id", var.col_name, var.col_age, var.col_photo_url,
    var.col_is_bot, "last_message", "last_sender_id", "last_message_at",
    var.col_meeting_confirmed, var.col_ready_for_meeting,
]


def _frame(rows, columns):
    df = pd.DataFrame(rows or [])
    for c in columns:
        if c not in df.columns:
            df[c] = pd.NA
    return df


def _timestamps(df, cols):
    for c in cols:
        if c in df.columns:
            # PostgREST drops the fraction on whole-second values, so rows mix precisions
            df[c] = pd.to_datetime(df[c], errors="coerce", utc=True, format="ISO8601")
    return df


# --------------------------------------------------
# MESSAGES
# --------------------------------------------------
def latest_per_conversation(messages):
    """One row per conversation: its newest message."""
    df = _frame(messages, [var.col_id, var.col_conversation_id, var.col_sender_id,
                           var.col_content, var.col_created_at])
    if df.empty:
        return df
    df = _timestamps(df, [var.col_created_at])
    return (
        df.sort_values(var.col_created_at, kind="stable")
        .groupby(var.col_conversation_id)
        .tail(1)
        .reset_index(drop=True)
    )


# --------------------------------------------------
# BROWSE FEED
# --------------------------------------------------
def browse_candidates(client, user_id):
    me = get_profile(client, user_id) or {}

    rows = (
        client.table(var.table_profiles)
        .select("*")
        .neq(var.col_id, user_id)
        .execute()
        .data or []
    )
    df = _frame(rows, PROFILE_CARD_COLUMNS)
    if df.empty:
        return df[PROFILE_CARD_COLUMNS]

    looking_for = me.get(var.col_looking_for)
    if looking_for:
        df = df[df[var.col_gender] == looking_for]

    seen = reacted_ids(client, user_id)
    df = df[~df[var.col_id].isin(seen)].copy()

    df[var.col_honesty_rating] = pd.to_numeric(df[var.col_honesty_rating], errors="coerce")
    df = df.sort_values(var.col_honesty_rating, ascending=False, na_position="last")
    return df[PROFILE_CARD_COLUMNS].reset_index(drop=True)


# --------------------------------------------------
# CHAT LIST
# --------------------------------------------------
def conversations_overview(client, user_id):
    convs = []
    for col in (var.col_user1_id, var.col_user2_id):
        convs += (
            client.table(var.table_conversations)
            .select("*")
            .eq(col, user_id)
            .execute()
            .data or []
        )
    if not convs:
        return _frame([], CONVERSATION_COLUMNS)[CONVERSATION_COLUMNS]

    df = _frame(convs, [var.col_meeting_confirmed, var.col_ready_for_meeting])
    df = df.drop_duplicates(subset=[var.col_id])
    df["other_id"] = df[var.col_user2_id].where(df[var.col_user1_id] == user_id, df[var.col_user1_id])
    df = df.rename(columns={var.col_id: "conversation_id"})

    others = _frame(
        get_profiles(client, df["other_id"].tolist()),
        [var.col_id, var.col_name, var.col_age, var.col_photo_url, var.col_is_bot],
    )[[var.col_id, var.col_name, var.col_age, var.col_photo_url, var.col_is_bot]]
    df = df.merge(others, left_on="other_id", right_on=var.col_id, how="left")

    messages = (
        client.table(var.table_messages)
        .select("*")
        .in_(var.col_conversation_id, df["conversation_id"].tolist())
        .execute()
        .data or []
    )
    last = latest_per_conversation(messages)
    if not last.empty:
        last = last.rename(columns={
            var.col_content: "last_message",
            var.col_sender_id: "last_sender_id",
            var.col_created_at: "last_message_at",
        })[[var.col_conversation_id, "last_message", "last_sender_id", "last_message_at"]]
        df = df.merge(last, on="conversation_id", how="left")

    df = _frame(df.to_dict("records"), CONVERSATION_COLUMNS)
    df = _timestamps(df, ["last_message_at"])
    df[var.col_meeting_confirmed] = df[var.col_meeting_confirmed].fillna(False).astype(bool)
    df[var.col_ready_for_meeting] = df[var.col_ready_for_meeting].fillna(False).astype(bool)
    df = df.sort_values("last_message_at", ascending=False, na_position="last")
    return df[CONVERSATION_COLUMNS].reset_index(drop=True)


# --------------------------------------------------
# REVIEWS
# --------------------------------------------------
def reviews_with_authors(client, profile_id):
    rows = (
        client.table(var.table_reviews)
        .select("*")
        .eq(var.col_reviewed_id, profile_id)
        .order(var.col_created_at, desc=True)
        .execute()
        .data or []
    )
    df = _frame(rows, [var.col_reviewer_id, var.col_rating, var.col_comment, var.col_created_at])
    if df.empty:
        return df

    authors = _frame(
        get_profiles(client, df[var.col_reviewer_id].tolist()),
        [var.col_id, var.col_name],
    )[[var.col_id, var.col_name]].rename(columns={var.col_id: var.col_reviewer_id, var.col_name: "author"})

    df = df.merge(authors, on=var.col_reviewer_id, how="left")
    df["author"] = df["author"].fillna("Anonymous")
    return _timestamps(df, [var.col_created_at])


# --------------------------------------------------
# BOT QUEUE
# --------------------------------------------------
def queue_status(client, now=None):
    rows = (
        client.table(var.table_bot_queue)
        .select("*")
        .order(var.col_scheduled_at, desc=True)
        .limit(500)
        .execute()
        .data or []
    )
    df = _frame(rows, [var.col_scheduled_at, var.col_processed, var.col_conversation_id])
    if df.empty:
        df["status"] = pd.Series(dtype="object")
        return df

    df = _timestamps(df, [var.col_scheduled_at, var.col_created_at])
    now = pd.Timestamp(now) if now is not None else pd.Timestamp.now(tz="UTC")
    processed = df[var.col_processed].fillna(False).astype(bool)
    due = df[var.col_scheduled_at] <= now
    df["status"] = "waiting"
    df.loc[~processed & due, "status"] = "due"
    df.loc[processed, "status"] = "processed"
    return df
