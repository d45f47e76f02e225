from datetime import timedelta

import pandas as pd

import variables as var
from functions import datasets
from functions.analytics import queue_status_fig, rating_distribution
from functions.matching import dislike_profile, get_or_create_conversation, like_profile
from functions.meetings import request_meeting, submit_review


def test_latest_per_conversation():
    messages = [
        {var.col_id: "1", var.col_conversation_id: "a", var.col_sender_id: "u", var.col_content: "first",
         var.col_created_at: "2026-03-14T12:00:00+00:00"},
        {var.col_id: "2", var.col_conversation_id: "b", var.col_sender_id: "v", var.col_content: "other",
         var.col_created_at: "2026-03-14T12:00:30+00:00"},
        {var.col_id: "3", var.col_conversation_id: "a", var.col_sender_id: "w", var.col_content: "second",
         var.col_created_at: "2026-03-14T12:01:00+00:00"},
    ]

    latest = datasets.latest_per_conversation(messages).set_index(var.col_conversation_id)

    assert latest.loc["a", var.col_content] == "second"
    assert latest.loc["b", var.col_content] == "other"
    assert datasets.latest_per_conversation([]).empty


def test_browse_filters_and_orders(db, man):
    low = db.add_profile(name="Olga", honesty_rating=2.0)
    high = db.add_profile(name="Irina", honesty_rating=4.8)
    unrated = db.add_profile(name="Kate")
    db.add_profile(name="Paul", gender="male", looking_for="female")
    skipped = db.add_profile(name="Daria", honesty_rating=5.0)
    dislike_profile(db, man[var.col_id], skipped[var.col_id])

    feed = datasets.browse_candidates(db, man[var.col_id])

    assert feed[var.col_id].tolist() == [high[var.col_id], low[var.col_id], unrated[var.col_id]]
    assert list(feed.columns) == datasets.PROFILE_CARD_COLUMNS


def test_browse_empty(db, man):
    feed = datasets.browse_candidates(db, man[var.col_id])

    assert feed.empty


def test_conversations_overview(db, man, woman, bot):
    quiet = get_or_create_conversation(db, man[var.col_id], bot[var.col_id])
    like_profile(db, man[var.col_id], woman[var.col_id])
    match = like_profile(db, woman[var.col_id], man[var.col_id])
    db.add_message(match[var.col_id], woman[var.col_id], "See you Friday?")
    request_meeting(db, match[var.col_id], man[var.col_id])
    request_meeting(db, match[var.col_id], woman[var.col_id])

    df = datasets.conversations_overview(db, man[var.col_id])

    assert list(df.columns) == datasets.CONVERSATION_COLUMNS
    assert df["conversation_id"].tolist() == [match[var.col_id], quiet[var.col_id]]
    first = df.iloc[0]
    assert first["other_id"] == woman[var.col_id]
    assert first[var.col_name] == woman[var.col_name]
    assert first["last_message"] == "See you Friday?"
    assert first["last_sender_id"] == woman[var.col_id]
    assert bool(first[var.col_ready_for_meeting]) is True
    second = df.iloc[1]
    assert bool(second[var.col_is_bot]) is True
    assert pd.isna(second["last_message"])


def test_conversations_overview_empty(db, man):
    df = datasets.conversations_overview(db, man[var.col_id])

    assert df.empty
    assert list(df.columns) == datasets.CONVERSATION_COLUMNS


def test_reviews_with_authors(db, man, woman):
    conversation = get_or_create_conversation(db, man[var.col_id], woman[var.col_id])
    request_meeting(db, conversation[var.col_id], man[var.col_id])
    request_meeting(db, conversation[var.col_id], woman[var.col_id])
    submit_review(db, man[var.col_id], conversation[var.col_id], 4, "Nice evening")

    reviews = datasets.reviews_with_authors(db, woman[var.col_id])

    assert reviews["author"].tolist() == [man[var.col_name]]
    fig = rating_distribution(reviews)
    assert list(fig.data[0].y) == [0, 0, 0, 1, 0]


def test_queue_status(db):
    now = db.clock
    for offset, processed in ((-60, True), (-30, False), (600, False)):
        db.new_row(var.table_bot_queue, {
            var.col_conversation_id: "c",
            var.col_bot_id: "b",
            var.col_scheduled_at: (now + timedelta(seconds=offset)).isoformat(),
            var.col_processed: processed,
        })

    queue = datasets.queue_status(db, now=now)

    assert sorted(queue["status"].tolist()) == ["due", "processed", "waiting"]
    assert queue_status_fig(queue) is not None
    assert queue_status_fig(datasets.queue_status(type(db)())) is None


def test_latest_message_with_mixed_timestamp_precision():
    # whole-second values come back without a fraction
    messages = [
        {var.col_id: "m1", var.col_conversation_id: "a", var.col_sender_id: "u", var.col_content: "hi",
         var.col_created_at: "2026-03-14T12:00:00+00:00"},
        {var.col_id: "m2", var.col_conversation_id: "a", var.col_sender_id: "b", var.col_content: "hello",
         var.col_created_at: "2026-03-14T12:00:05.5+00:00"},
        {var.col_id: "m3", var.col_conversation_id: "a", var.col_sender_id: "u", var.col_content: "how are you?",
         var.col_created_at: "2026-03-14T12:00:10+00:00"},
    ]

    latest = datasets.latest_per_conversation(messages)

    assert latest[var.col_id].tolist() == ["m3"]
    assert latest[var.col_created_at].notna().all()
