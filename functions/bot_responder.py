"""
Bot responder: one stateless pass over recent conversations.

Every invocation re-derives what to do from the current rows, so it can be
triggered by the admin page timer, the HTTP handler or by hand:

* scan the last few minutes of messages, newest per conversation, and find the
  ones where a person wrote to a bot and the bot has not answered yet;
* queue mode: insert a ``bot_response_queue`` row with a random delay, then
  answer the rows whose ``scheduled_at`` has passed;
* inline mode: answer straight away, pausing as if typing.

Duplicate replies are avoided by existence checks (queued row per message,
bot already spoke last), not by a database constraint, so two overlapping
passes can still race.
"""
import logging
import random
import time
from datetime import datetime, timedelta, timezone

import variables as var
from config import get_setting
from functions.chats import get_messages, set_typing
from functions.datasets import latest_per_conversation
from functions.errors import ConfigurationError
from functions.llm import ChatCompletionClient
from functions.matching import other_participant
from functions.profiles import get_profile, get_profiles
from supabase_client import first_row

logger = logging.getLogger(__name__)

MODE_QUEUE = "queue"
MODE_INLINE = "inline"

MIN_DELAY_SECONDS = 20
MAX_DELAY_SECONDS = 30 * 60
SCAN_LOOKBACK = timedelta(minutes=5)
RECENT_REPLY_WINDOW = timedelta(seconds=10)
HISTORY_LIMIT = 50

SECONDS_PER_CHAR = 0.05
MIN_TYPING_SECONDS = 1.5
MAX_TYPING_SECONDS = 8.0

PERSONALITY = {
    "friendly": "You like this person. Be warm and playful, show curiosity and ask a follow-up question.",
    "neutral": "Be polite and natural, sometimes ask a question back.",
    "curt": "You are not very interested. Keep answers short and a little reserved, rarely ask questions.",
}


# --------------------------------------------------
# PROMPT
# --------------------------------------------------
def personality_tier(honesty_rating):
    """Tier keyed by the other person's honesty rating (mean review score 1-5)."""
    if honesty_rating is None:
        return "neutral"
    rating = float(honesty_rating)
    if rating >= 4:
        return "friendly"
    if rating >= 2.5:
        return "neutral"
    return "curt"


def build_system_prompt(bot, tier="neutral"):
    return (
        f"You are {bot.get(var.col_name)}, {bot.get(var.col_age)} years old, "
        f"from {bot.get(var.col_city)}. {bot.get(var.col_about_me) or ''} "
        f"Your values: {bot.get(var.col_values) or 'not stated'}. "
        "You are chatting on a dating site. Talk naturally like a real person, "
        "answer briefly (1-3 sentences), use a casual conversational style and "
        "reply in the language the other person writes in. "
        f"{PERSONALITY.get(tier, PERSONALITY['neutral'])}"
    )


def build_history(messages, bot_id):
    return [
        {
            "role": "assistant" if m[var.col_sender_id] == bot_id else "user",
            "content": m[var.col_content],
        }
        for m in messages
    ]


def pick_delay(rng=random):
    return rng.randint(MIN_DELAY_SECONDS, MAX_DELAY_SECONDS)


def typing_seconds(text):
    return min(MAX_TYPING_SECONDS, max(MIN_TYPING_SECONDS, len(text) * SECONDS_PER_CHAR))


# --------------------------------------------------
# SCAN
# --------------------------------------------------
def unanswered_conversations(client, now):
    """(latest message, conversation, bot) where a person wrote to a bot last."""
    recent = (
        client.table(var.table_messages)
        .select("*")
        .gte(var.col_created_at, (now - SCAN_LOOKBACK).isoformat())
        .order(var.col_created_at)
        .execute()
        .data or []
    )
    latest = latest_per_conversation(recent)
    if latest.empty:
        return []

    conversations = {
        c[var.col_id]: c
        for c in (
            client.table(var.table_conversations)
            .select("*")
            .in_(var.col_id, latest[var.col_conversation_id].unique().tolist())
            .execute()
            .data or []
        )
    }
    participants = set()
    for c in conversations.values():
        participants.update((c[var.col_user1_id], c[var.col_user2_id]))
    bots = {p[var.col_id]: p for p in get_profiles(client, participants) if p.get(var.col_is_bot)}

    pending = []
    for msg in latest.to_dict("records"):
        conversation = conversations.get(msg[var.col_conversation_id])
        if not conversation:
            continue
        sender = msg[var.col_sender_id]
        if sender in bots:
            # bot spoke last, nothing to answer
            continue
        bot = bots.get(other_participant(conversation, sender))
        if bot:
            pending.append((msg, conversation, bot))
    return pending


def _already_queued(client, message_id, bot_id):
    res = (
        client.table(var.table_bot_queue)
        .select(var.col_id)
        .eq(var.col_message_id, message_id)
        .eq(var.col_bot_id, bot_id)
        .limit(1)
        .execute()
    )
    return first_row(res) is not None


def schedule_replies(client, now, rng=random):
    scheduled = 0
    for msg, conversation, bot in unanswered_conversations(client, now):
        if _already_queued(client, msg[var.col_id], bot[var.col_id]):
            continue

        delay = pick_delay(rng)
        client.table(var.table_bot_queue).insert({
            var.col_conversation_id: conversation[var.col_id],
            var.col_bot_id: bot[var.col_id],
            var.col_message_id: msg[var.col_id],
            var.col_scheduled_at: (now + timedelta(seconds=delay)).isoformat(),
            var.col_processed: False,
        }).execute()
        logger.info("Scheduled bot reply in %ss for conversation %s", delay, conversation[var.col_id])
        scheduled += 1
    return scheduled


# --------------------------------------------------
# RESPOND
# --------------------------------------------------
def respond(client, llm, conversation_id, bot, sleep=None):
    """
    Generate and post one bot reply. Returns False when there is nothing to
    answer (empty thread, bot already spoke last, empty completion).
    """
    history = get_messages(client, conversation_id)
    if not history or history[-1][var.col_sender_id] == bot[var.col_id]:
        return False

    human = get_profile(client, history[-1][var.col_sender_id]) or {}
    tier = personality_tier(human.get(var.col_honesty_rating))
    prompt = [{"role": "system", "content": build_system_prompt(bot, tier)}]
    prompt += build_history(history[-HISTORY_LIMIT:], bot[var.col_id])

    set_typing(client, conversation_id, bot[var.col_id], True)
    try:
        text = llm.complete(prompt)
        if not text:
            logger.warning("Empty completion for conversation %s", conversation_id)
            return False
        if sleep:
            sleep(typing_seconds(text))
        client.table(var.table_messages).insert({
            var.col_conversation_id: conversation_id,
            var.col_sender_id: bot[var.col_id],
            var.col_content: text,
        }).execute()
    finally:
        set_typing(client, conversation_id, bot[var.col_id], False)

    logger.info("Bot %s replied in conversation %s", bot.get(var.col_name), conversation_id)
    return True


def _mark_processed(client, item_id):
    client.table(var.table_bot_queue).update({var.col_processed: True}).eq(var.col_id, item_id).execute()


def process_due(client, llm, now):
    items = (
        client.table(var.table_bot_queue)
        .select("*")
        .eq(var.col_processed, False)
        .lte(var.col_scheduled_at, now.isoformat())
        .order(var.col_scheduled_at)
        .execute()
        .data or []
    )
    logger.info("Processing %d queued bot responses", len(items))
    bots = {p[var.col_id]: p for p in get_profiles(client, [i[var.col_bot_id] for i in items])}

    sent = failed = 0
    for item in items:
        bot = bots.get(item[var.col_bot_id])
        if not bot:
            logger.warning("Queue item %s points at a missing bot, dropping it", item[var.col_id])
            _mark_processed(client, item[var.col_id])
            continue
        try:
            replied = respond(client, llm, item[var.col_conversation_id], bot)
        except Exception:
            # left unprocessed, picked up again next pass
            logger.exception("Error processing queue item %s", item[var.col_id])
            failed += 1
            continue
        _mark_processed(client, item[var.col_id])
        if replied:
            sent += 1
    return sent, failed


def _recently_replied(client, conversation_id, bot_id, now):
    res = (
        client.table(var.table_messages)
        .select(var.col_id)
        .eq(var.col_conversation_id, conversation_id)
        .eq(var.col_sender_id, bot_id)
        .gte(var.col_created_at, (now - RECENT_REPLY_WINDOW).isoformat())
        .limit(1)
        .execute()
    )
    return first_row(res) is not None


def reply_inline(client, llm, now, sleep=time.sleep):
    sent = failed = 0
    for _, conversation, bot in unanswered_conversations(client, now):
        if _recently_replied(client, conversation[var.col_id], bot[var.col_id], now):
            continue
        try:
            replied = respond(client, llm, conversation[var.col_id], bot, sleep=sleep)
        except Exception:
            logger.exception("Error replying in conversation %s", conversation[var.col_id])
            failed += 1
            continue
        if replied:
            sent += 1
    return sent, failed


# --------------------------------------------------
# PASS
# --------------------------------------------------
def run_pass(client, llm=None, mode=None, now=None, rng=random, sleep=time.sleep):
    # a missing API key aborts the whole pass before anything is touched
    llm = llm or ChatCompletionClient()
    mode = mode or get_setting("BOT_RESPONSE_MODE", MODE_QUEUE)
    now = now or datetime.now(timezone.utc)

    scheduled = 0
    if mode == MODE_QUEUE:
        scheduled = schedule_replies(client, now, rng=rng)
        sent, failed = process_due(client, llm, now)
    elif mode == MODE_INLINE:
        sent, failed = reply_inline(client, llm, now, sleep=sleep)
    else:
        raise ConfigurationError(f"Unknown BOT_RESPONSE_MODE {mode!r}")

    logger.info("Bot pass (%s): scheduled=%d sent=%d failed=%d", mode, scheduled, sent, failed)
    return {
        "success": True,
        "mode": mode,
        "responses_scheduled": scheduled,
        "responses_sent": sent,
        "failed": failed,
    }
