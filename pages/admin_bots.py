import streamlit as st

from config import get_setting
from functions import handlers
from functions.analytics import queue_status_fig
from functions.datasets import queue_status
from functions.errors import AppError
from supabase_client import get_service_client

st.set_page_config(page_title="Bots admin", page_icon="🤖", layout="wide")

if not st.session_state.get("user_id"):
    st.warning("Please log in first")
    st.stop()

try:
    service = get_service_client()
except AppError as e:
    st.error(str(e))
    st.stop()

st.header("🤖 Bots")
st.caption(f"Reply mode: **{get_setting('BOT_RESPONSE_MODE', 'queue')}**")


ACTIONS = [
    ("create-bots", "Create 50 bots", "Creates auth users and profiles for 50 random bots."),
    ("update-bot-photos", "Regenerate photos", "Generates a new portrait for every bot. Slow."),
    ("bot-responder", "Run responder now", "Schedules and sends pending bot replies."),
    ("cleanup-bots", "Clean up bots", "Keeps 5 distinct bots per gender, deletes the rest."),
    ("delete-bot-users", "Delete bot users", "Removes every auth user with a bot email."),
]


def run_action(name):
    with st.spinner(f"Running {name}..."):
        status, body = handlers.invoke(name, client=service)
    if status == 200:
        st.toast(f"{name} done")
        st.json(body, expanded=False)
    else:
        st.error(f"{name} failed: {body.get('error')}")


cols = st.columns(len(ACTIONS))
for col, (name, label, help_text) in zip(cols, ACTIONS):
    danger = name == "delete-bot-users"
    if col.button(label, help=help_text, width="stretch", type="secondary" if danger else "primary"):
        run_action(name)


# --------------------------------------------------
# RESPONDER LOOP
# --------------------------------------------------
st.divider()
auto = st.toggle("Run responder every 30 seconds while this page is open")


@st.fragment(run_every=30 if auto else None)
def responder_loop():
    if not auto:
        return
    status, body = handlers.invoke("bot-responder", client=service)
    if status == 200:
        st.caption(
            f"Last pass: scheduled {body['responses_scheduled']}, "
            f"sent {body['responses_sent']}, failed {body['failed']}"
        )
    else:
        st.error(body.get("error"))


responder_loop()


# --------------------------------------------------
# QUEUE
# --------------------------------------------------
st.subheader("Reply queue")
queue = queue_status(service)
if queue.empty:
    st.info("Queue is empty")
else:
    counts = queue["status"].value_counts()
    c1, c2, c3 = st.columns(3)
    c1.metric("Waiting", int(counts.get("waiting", 0)))
    c2.metric("Due", int(counts.get("due", 0)))
    c3.metric("Processed", int(counts.get("processed", 0)))

    fig = queue_status_fig(queue)
    if fig is not None:
        st.plotly_chart(fig, width="stretch")
