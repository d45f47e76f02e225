import pandas as pd
import streamlit as st
from pydantic import ValidationError

import variables as var
from functions.cards import review_dialog
from functions.chats import get_conversation, get_messages, send_message, typing_users
from functions.datasets import conversations_overview
from functions.errors import ActionNotAllowed, AppError
from functions.meetings import (
    STATE_CONFIRMED, STATE_NONE, STATE_REQUESTED_BY_ME, STATE_REQUESTED_BY_THEM,
    can_review, meeting_state, request_meeting,
)
from functions.validations import first_error
from supabase_client import get_client

st.set_page_config(page_title="Chats", page_icon="💬")

user_id = st.session_state.get("user_id")
if not user_id:
    st.warning("Please log in first")
    if st.button("Go to login"):
        st.switch_page("app.py")
    st.stop()

try:
    supabase = get_client()
except AppError as e:
    st.error(str(e))
    st.stop()


def _preview(row):
    text = row["last_message"]
    if text is None or pd.isna(text):
        return "No messages yet"
    prefix = "You: " if row["last_sender_id"] == user_id else ""
    text = f"{prefix}{text}"
    return text if len(text) <= 60 else text[:57] + "..."


def _conversation_row(row):
    with st.container(border=True):
        c1, c2, c3 = st.columns([1, 4, 1.3])
        photo = row[var.col_photo_url]
        if photo and not pd.isna(photo):
            c1.image(photo, width=48)
        else:
            c1.markdown("### 👤")
        c2.markdown(f"**{row[var.col_name]}**" + (" 🤝" if row[var.col_meeting_confirmed] else ""))
        c2.caption(_preview(row))
        if c3.button("Open", key=f"open_{row['conversation_id']}", width="stretch"):
            st.session_state.open_conversation = row["conversation_id"]
            st.rerun()


def conversation_list():
    df = conversations_overview(supabase, user_id)
    if df.empty:
        st.info("No conversations yet. Like someone on the main page to start chatting.")
        return

    ready = df[df[var.col_ready_for_meeting]]
    others = df[~df[var.col_ready_for_meeting]]

    if not ready.empty:
        st.subheader("Ready to meet")
        for row in ready.to_dict("records"):
            _conversation_row(row)
        st.subheader("Other chats")
    for row in others.to_dict("records"):
        _conversation_row(row)


# --------------------------------------------------
# THREAD
# --------------------------------------------------
@st.fragment(run_every=3)
def message_feed(conversation_id, other_name):
    messages = get_messages(supabase, conversation_id)
    if not messages:
        st.caption("Say hi 👋")
    for m in messages:
        mine = m[var.col_sender_id] == user_id
        with st.chat_message("user" if mine else "assistant", avatar="🙂" if mine else "💬"):
            st.write(m[var.col_content])

    if typing_users(supabase, conversation_id, exclude_user_id=user_id):
        st.caption(f"{other_name} is typing...")


def meeting_panel(conversation):
    state = meeting_state(conversation, user_id)

    if state == STATE_NONE:
        if st.button("🤝 We want to meet", width="stretch"):
            _request(conversation)
    elif state == STATE_REQUESTED_BY_ME:
        st.info("Waiting for the other side to confirm the meeting.")
    elif state == STATE_REQUESTED_BY_THEM:
        st.info("They want to meet you!")
        if st.button("🤝 Confirm meeting", type="primary", width="stretch"):
            _request(conversation)
    elif state == STATE_CONFIRMED:
        st.success("Meeting confirmed")


def _request(conversation):
    try:
        updated = request_meeting(supabase, conversation[var.col_id], user_id)
    except ActionNotAllowed as e:
        st.error(str(e))
        return
    if updated.get(var.col_meeting_confirmed):
        st.toast("Meeting confirmed! You can now review each other.")
    st.rerun()


def thread(conversation_id):
    conversation = get_conversation(supabase, conversation_id)
    if conversation is None:
        st.session_state.pop("open_conversation", None)
        st.error("Conversation not found")
        return

    df = conversations_overview(supabase, user_id)
    row = df[df["conversation_id"] == conversation_id]
    other_name = row.iloc[0][var.col_name] if not row.empty else "Them"

    c1, c2 = st.columns([1, 4])
    if c1.button("← Back"):
        st.session_state.pop("open_conversation", None)
        st.rerun()
    c2.subheader(other_name)

    meeting_panel(conversation)
    if can_review(supabase, conversation, user_id):
        if st.button("⭐ Rate the meeting", width="stretch"):
            review_dialog(supabase, user_id, conversation_id, other_name)

    message_feed(conversation_id, other_name)

    text = st.chat_input("Message")
    if text:
        try:
            send_message(supabase, conversation_id, user_id, text)
        except ValidationError as e:
            st.error(first_error(e))
        except ActionNotAllowed as e:
            st.error(str(e))
        else:
            st.rerun()


st.header("💬 Chats")

open_id = st.session_state.get("open_conversation")
if open_id:
    thread(open_id)
else:
    conversation_list()
