import streamlit as st

import variables as var
from functions.analytics import rating_distribution
from functions.cards import honesty_badge, reviews_list
from functions.datasets import reviews_with_authors
from functions.errors import AppError
from functions.profile_form import photo_manager, profile_form
from functions.profiles import get_profile, profile_stats, set_photos, update_profile
from supabase_client import get_client

st.set_page_config(page_title="My profile", page_icon="🙂")

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

me = get_profile(supabase, user_id)
if me is None:
    st.info("Create your profile first")
    if st.button("Create profile"):
        st.switch_page("app.py")
    st.stop()

st.header(f"{me[var.col_name]}, {me[var.col_age]}")
st.caption(f"📍 {me[var.col_city]}  ·  {honesty_badge(me)}")

stats = profile_stats(supabase, user_id)
c1, c2, c3 = st.columns(3)
c1.metric("Matches", stats["matches"])
c2.metric("Meetings", stats["meetings"])
c3.metric("Reviews", stats["reviews"])

tab_reviews, tab_edit = st.tabs(["Reviews", "Edit profile"])

with tab_reviews:
    reviews = reviews_with_authors(supabase, user_id)
    if not reviews.empty:
        st.plotly_chart(rating_distribution(reviews), width="stretch")
    reviews_list(reviews)

with tab_edit:
    st.subheader("Photos")
    if "my_photos" not in st.session_state:
        st.session_state.my_photos = list(me.get(var.col_photos) or [])
    before = list(me.get(var.col_photos) or [])
    photos = photo_manager(supabase, user_id, key="my_photos")
    if photos != before:
        # uploads and removals are live, keep the row in sync
        set_photos(supabase, user_id, photos)

    form = profile_form(existing=me, photos=photos, submit_label="Save changes", key="edit_profile")
    if form is not None:
        try:
            update_profile(supabase, user_id, form)
        except Exception as e:
            st.error(f"Could not save profile: {e}")
        else:
            st.toast("Profile saved")
            st.rerun()
