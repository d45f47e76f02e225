import streamlit as st

import functions.authentification as auth
import variables as var
from config import setup_logging
from functions.cards import profile_card
from functions.datasets import browse_candidates, reviews_with_authors
from functions.errors import ActionNotAllowed, AppError
from functions.matching import dislike_profile, get_or_create_conversation, like_profile
from functions.profile_form import photo_manager, profile_form
from functions.profiles import create_profile, get_profile
from supabase_client import get_client

st.set_page_config(page_title="Honest Dating", page_icon="🛡️", layout="centered")
logger = setup_logging()

# Supabase reset links land here with the tokens in the URL
auth.check_for_reset_tokens()
if st.session_state.get("password_reset_mode", False):
    auth.password_reset_screen()
    st.stop()

# initialize the key so it always exists
if "user_id" not in st.session_state:
    st.session_state.user_id = None

user_id = st.session_state.user_id

if not user_id:
    auth.auth_screen()
    st.stop()

try:
    supabase = get_client()
except AppError as e:
    st.error(str(e))
    st.stop()

if st.sidebar.button("Sign Out", width="stretch"):
    auth.sign_out()
    st.rerun()


# --------------------------------------------------
# ONBOARDING
# --------------------------------------------------
me = get_profile(supabase, user_id)

if me is None:
    st.header("Create your profile")
    st.write("Tell people who you are. Honest profiles get honest reviews.")

    st.subheader("Photos")
    photos = photo_manager(supabase, user_id, key="new_photos")

    form = profile_form(photos=photos, submit_label="Create profile", key="new_profile")
    if form is not None:
        try:
            create_profile(supabase, user_id, form)
        except Exception as e:
            logger.exception("Profile creation failed for %s", user_id)
            st.error(f"Could not create profile: {e}")
        else:
            st.session_state.pop("new_photos", None)
            st.success("Profile created!")
            st.rerun()
    st.stop()


# --------------------------------------------------
# BROWSE
# --------------------------------------------------
st.header(f"Hi, {me.get(var.col_name)}")

candidates = browse_candidates(supabase, user_id)
if candidates.empty:
    st.info("No new profiles right now. Check back later!")
    st.stop()

# show one card at a time, the feed shrinks as the user reacts
candidate = candidates.iloc[0].to_dict()
profile_card(candidate, reviews_with_authors(supabase, candidate[var.col_id]))
st.caption(f"{len(candidates)} profile{'s' if len(candidates) != 1 else ''} left")

c1, c2, c3 = st.columns(3)

if c1.button("👎 Skip", width="stretch"):
    try:
        dislike_profile(supabase, user_id, candidate[var.col_id])
    except ActionNotAllowed as e:
        st.error(str(e))
    else:
        st.rerun()

if c2.button("❤️ Like", type="primary", width="stretch"):
    try:
        conversation = like_profile(supabase, user_id, candidate[var.col_id])
    except ActionNotAllowed as e:
        st.error(str(e))
    else:
        if conversation:
            st.session_state.open_conversation = conversation[var.col_id]
            st.toast(f"It's a match with {candidate[var.col_name]}!", icon="🎉")
        st.rerun()

if c3.button("💬 Write", width="stretch"):
    try:
        conversation = get_or_create_conversation(supabase, user_id, candidate[var.col_id])
    except ActionNotAllowed as e:
        st.error(str(e))
    else:
        st.session_state.open_conversation = conversation[var.col_id]
        st.switch_page("pages/chats.py")
