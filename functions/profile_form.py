import streamlit as st
from pydantic import ValidationError

import variables as var
from functions.errors import PhotoRejected
from functions.photos import remove_photo, upload_photo
from functions.validations import ProfileForm, first_error


CHOICE_LABELS = {"": "Not set", "male": "Man", "female": "Woman"}


def photo_manager(client, user_id, key="photos"):
    """Grid of up to 9 photos kept in session state, with upload and remove."""
    photos = st.session_state.setdefault(key, [])

    cols = st.columns(3)
    for i, url in enumerate(list(photos)):
        with cols[i % 3]:
            st.image(url, width="stretch")
            if st.button("Remove", key=f"{key}_remove_{i}", width="stretch"):
                st.session_state[key] = remove_photo(client, photos, i)
                st.toast("Photo removed")
                st.rerun()

    st.caption(f"Uploaded {len(photos)} of {var.max_photos} photos")
    if len(photos) >= var.max_photos:
        return photos

    uploaded = st.file_uploader(
        "Add photo",
        type=["jpg", "jpeg", "png", "webp", "heic", "heif"],
        accept_multiple_files=False,
        key=f"{key}_uploader",
    )
    # the uploader keeps its file across reruns, only push each file once
    if uploaded and st.session_state.get(f"{key}_last_file") != uploaded.file_id:
        st.session_state[f"{key}_last_file"] = uploaded.file_id
        try:
            with st.spinner("Uploading..."):
                st.session_state[key] = upload_photo(
                    client, user_id, uploaded.name, uploaded.type, uploaded.getvalue(), photos
                )
            st.toast("Photo uploaded")
            st.rerun()
        except PhotoRejected as e:
            st.error(str(e))
        except Exception as e:
            st.error(f"Could not upload photo: {e}")

    return st.session_state[key]


def _select(label, options, current, key):
    options = [""] + options
    index = options.index(current) if current in options else 0
    return st.selectbox(label, options, index=index, key=key,
                        format_func=lambda v: CHOICE_LABELS.get(v, v.replace("_", " ")))


def profile_form(existing=None, photos=None, submit_label="Save profile", key="profile"):
    """Render the profile form. Returns a validated ProfileForm on submit, else None."""
    p = existing or {}

    with st.form(key):
        c1, c2 = st.columns([3, 1])
        name = c1.text_input("Name", value=p.get(var.col_name, ""))
        age = c2.number_input("Age", min_value=18, max_value=100, value=int(p.get(var.col_age) or 18))
        c1, c2 = st.columns(2)
        city = c1.text_input("City", value=p.get(var.col_city, ""))
        phone = c2.text_input("Phone", value=p.get(var.col_phone) or st.session_state.get("user_phone") or "")

        c1, c2 = st.columns(2)
        with c1:
            gender = _select("I am", var.genders, p.get(var.col_gender), f"{key}_gender")
        with c2:
            looking_for = _select("Looking for", var.genders, p.get(var.col_looking_for), f"{key}_looking_for")

        about_me = st.text_area("About me", value=p.get(var.col_about_me, ""))
        values = st.text_area("My values", value=p.get(var.col_values, ""))
        family_goals = st.text_area("Family goals", value=p.get(var.col_family_goals, ""))

        c1, c2, c3, c4 = st.columns(4)
        with c1:
            children = _select("Children", var.children_values, p.get(var.col_children), f"{key}_children")
        with c2:
            smoking = _select("Smoking", var.smoking_values, p.get(var.col_smoking), f"{key}_smoking")
        with c3:
            alcohol = _select("Alcohol", var.alcohol_values, p.get(var.col_alcohol), f"{key}_alcohol")
        with c4:
            zodiac = _select("Zodiac", var.zodiac_signs, p.get(var.col_zodiac_sign), f"{key}_zodiac")

        submitted = st.form_submit_button(submit_label, type="primary", width="stretch")

    if not submitted:
        return None

    try:
        return ProfileForm(
            name=name, age=age, city=city, phone=phone,
            about_me=about_me, values=values, family_goals=family_goals,
            gender=gender, looking_for=looking_for, children=children,
            smoking=smoking, alcohol=alcohol, zodiac_sign=zodiac,
            photos=photos or [],
        )
    except ValidationError as e:
        st.error(first_error(e))
        return None
