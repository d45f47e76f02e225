import pandas as pd
import streamlit as st
from pydantic import ValidationError

import variables as var
from functions.errors import ActionNotAllowed
from functions.meetings import submit_review
from functions.profiles import honesty_percent
from functions.validations import first_error


def _value(profile, key):
    # rows from a DataFrame carry NaN where the column is empty
    value = profile.get(key)
    if value is None or isinstance(value, (list, dict)):
        return value
    return None if pd.isna(value) else value


def stars(rating):
    rating = int(rating or 0)
    return "★" * rating + "☆" * (5 - rating)


def honesty_badge(profile):
    pct = honesty_percent(_value(profile, var.col_honesty_rating))
    total = int(_value(profile, var.col_total_ratings) or 0)
    if pct is None:
        return "🛡️ No reviews yet"
    return f"🛡️ Honesty {pct}% · {total} review{'s' if total != 1 else ''}"


def reviews_list(reviews_df, limit=None):
    if reviews_df is None or reviews_df.empty:
        st.caption("No reviews yet. Reviews appear after the first meetings.")
        return
    rows = reviews_df if limit is None else reviews_df.head(limit)
    for r in rows.to_dict("records"):
        with st.container(border=True):
            c1, c2 = st.columns([3, 1])
            c1.markdown(f"**{r['author']}**")
            c2.markdown(stars(r[var.col_rating]))
            if r.get(var.col_comment) and not pd.isna(r[var.col_comment]):
                st.write(r[var.col_comment])
            if not pd.isna(r.get(var.col_created_at)):
                st.caption(r[var.col_created_at].strftime("%d %b %Y"))


def profile_card(profile, reviews_df=None):
    with st.container(border=True):
        photos = _value(profile, var.col_photos)
        cover = photos[0] if isinstance(photos, list) and photos else _value(profile, var.col_photo_url)
        if cover:
            st.image(cover, width="stretch")

        age = _value(profile, var.col_age)
        st.subheader(f"{_value(profile, var.col_name)}, {int(age) if age is not None else ''}")
        st.caption(f"📍 {_value(profile, var.col_city) or ''}  ·  {honesty_badge(profile)}")

        st.markdown("**About me**")
        st.write(_value(profile, var.col_about_me) or "")
        st.markdown("**Family goals**")
        st.write(_value(profile, var.col_family_goals) or "")

        if reviews_df is not None and not reviews_df.empty:
            st.markdown("**Reviews after meetings**")
            reviews_list(reviews_df, limit=2)
            if len(reviews_df) > 2:
                with st.expander(f"Show all reviews ({len(reviews_df)})"):
                    reviews_list(reviews_df.iloc[2:])


@st.dialog("Rate your meeting")
def review_dialog(client, reviewer_id, conversation_id, other_name):
    st.write(f"How honest was {other_name}?")
    rating = st.feedback("stars")
    comment = st.text_area("Your impression (optional)", max_chars=500)
    keep_talking = st.radio("Do you want to keep talking?", ["Yes", "No"], index=None, horizontal=True)

    if st.button("Submit review", type="primary", width="stretch",
                 disabled=rating is None or keep_talking is None):
        try:
            # st.feedback("stars") is 0-based
            submit_review(client, reviewer_id, conversation_id, rating + 1, comment,
                          is_like=keep_talking == "Yes")
        except ValidationError as e:
            st.error(first_error(e))
            return
        except ActionNotAllowed as e:
            st.error(str(e))
            return
        except Exception as e:
            st.error(f"Could not save review: {e}")
            return
        st.toast("Thanks for your review!")
        st.rerun()
