import logging
from datetime import datetime, timezone

import variables as var
from functions.errors import ActionNotAllowed
from functions.validations import MessageForm
from supabase_client import first_row

logger = logging.getLogger(__name__)


def get_conversation(client, conversation_id):
    res = (
        client.table(var.table_conversations)
        .select("*")
        .eq(var.col_id, conversation_id)
        .limit(1)
        .execute()
    )
    return first_row(res)


def is_participant(conversation, user_id):
    return user_id in (conversation[var.col_user1_id], conversation[var.col_user2_id])


def get_messages(client, conversation_id, limit=None):
    query = (
        client.table(var.table_messages)
        .select("*")
        .eq(var.col_conversation_id, conversation_id)
        .order(var.col_created_at)
    )
    if limit:
        query = query.limit(limit)
    return query.execute().data or []


def send_message(client, conversation_id, sender_id, content):
    form = MessageForm(content=content)

    conversation = get_conversation(client, conversation_id)
    if not conversation or not is_participant(conversation, sender_id):
        raise ActionNotAllowed("You are not part of this conversation")

    res = client.table(var.table_messages).insert({
        var.col_conversation_id: conversation_id,
        var.col_sender_id: sender_id,
        var.col_content: form.content,
    }).execute()
    return first_row(res)


# --------------------------------------------------
# TYPING INDICATOR
# --------------------------------------------------
def set_typing(client, conversation_id, user_id, is_typing=True):
    if is_typing:
        client.table(var.table_typing).upsert(
            {
                var.col_conversation_id: conversation_id,
                var.col_user_id: user_id,
                var.col_is_typing: True,
                var.col_updated_at: datetime.now(timezone.utc).isoformat(),
            },
            on_conflict=f"{var.col_conversation_id},{var.col_user_id}",
        ).execute()
    else:
        (
            client.table(var.table_typing)
            .delete()
            .eq(var.col_conversation_id, conversation_id)
            .eq(var.col_user_id, user_id)
            .execute()
        )


def typing_users(client, conversation_id, exclude_user_id=None):
    rows = (
        client.table(var.table_typing)
        .select("*")
        .eq(var.col_conversation_id, conversation_id)
        .eq(var.col_is_typing, True)
        .execute()
        .data or []
    )
    return [r[var.col_user_id] for r in rows if r[var.col_user_id] != exclude_user_id]
