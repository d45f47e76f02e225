import streamlit as st

import functions.authentification as auth


st.set_page_config(page_title="Reset Password", page_icon="🔑")

# same recovery flow as the main page, the link may point at either
auth.check_for_reset_tokens()
if st.session_state.get("password_reset_mode", False):
    auth.password_reset_screen()
    st.stop()

st.header("🔑 Reset Your Password")
st.write("Enter your email and we will send you a reset link.")

email = st.text_input("Email")
if st.button("Send reset link", type="primary"):
    ok, msg = auth.send_password_reset(email)
    (st.success if ok else st.error)(msg)

st.divider()
if st.button("← Back to Login"):
    st.switch_page("app.py")
