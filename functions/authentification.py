import time

import streamlit as st
import streamlit.components.v1 as components
from pydantic import ValidationError

from config import get_setting
from functions.validations import EmailForm, OtpForm, PhoneForm, first_error
from supabase_client import get_client


def check_for_reset_tokens():
    """Check if URL contains password reset tokens and extract them"""

    # Supabase puts the tokens in the URL fragment, which Streamlit cannot read
    fragment_script = """
    <script>
        const hash = window.parent.location.hash;
        if (hash) {
            const params = new URLSearchParams(hash.substring(1));
            const accessToken = params.get('access_token');
            const refreshToken = params.get('refresh_token');
            const type = params.get('type');

            if (type === 'recovery' && accessToken && refreshToken) {
                const url = new URL(window.parent.location.href);
                url.search = `?access_token=${accessToken}&refresh_token=${refreshToken}&type=recovery`;
                url.hash = '';
                window.parent.location.href = url.toString();
            }
        }
    </script>
    """
    components.html(fragment_script, height=0)

    if st.query_params.get("type") == "recovery":
        access_token = st.query_params.get("access_token")
        refresh_token = st.query_params.get("refresh_token")

        if access_token and refresh_token:
            st.session_state.reset_access_token = access_token
            st.session_state.reset_refresh_token = refresh_token
            st.session_state.password_reset_mode = True


def _signed_in(user):
    st.session_state.user_id = user.id
    st.session_state.user_email = user.email
    st.session_state.user_phone = user.phone


def smart_auth(email, password):
    """Try login first, if it fails try signup"""
    supabase = get_client()
    try:
        res = supabase.auth.sign_in_with_password({"email": email, "password": password})
        return res, "success", "Welcome back!"
    except Exception:
        try:
            res = supabase.auth.sign_up({"email": email, "password": password})
            if res and res.user:
                if res.user.email_confirmed_at is None:
                    return None, "check_email", f"Check your email ({email}) to confirm your account, then log in again."
                return res, "success", "Account created!"
        except Exception as e:
            if "already registered" in str(e).lower():
                return None, "error", "Wrong password."
            return None, "error", f"Error: {e}"
    return None, "error", "Authentication failed."


def send_otp(email=None, phone=None):
    """One-time code by email or SMS. Returns (ok, message)."""
    supabase = get_client()
    try:
        if email:
            EmailForm(email=email)
            supabase.auth.sign_in_with_otp({
                "email": email,
                "options": {"email_redirect_to": get_setting("APP_URL", "http://localhost:8501")},
            })
            return True, "Code sent! Check your email"
        PhoneForm(phone=phone)
        supabase.auth.sign_in_with_otp({"phone": phone})
        return True, "Code sent! Check your SMS"
    except ValidationError as e:
        return False, first_error(e)
    except Exception as e:
        return False, f"Error: {e}"


def verify_otp(token, email=None, phone=None):
    supabase = get_client()
    try:
        OtpForm(token=token)
        if email:
            res = supabase.auth.verify_otp({"email": email, "token": token, "type": "email"})
        else:
            res = supabase.auth.verify_otp({"phone": phone, "token": token, "type": "sms"})
    except ValidationError as e:
        return None, first_error(e)
    except Exception as e:
        return None, f"Error: {e}"
    if not res or not res.user:
        return None, "Invalid code"
    return res, "Signed in!"


def send_password_reset(email):
    """Send password reset email"""
    try:
        redirect_url = get_setting("APP_URL", "http://localhost:8501")
        get_client().auth.reset_password_email(
            email,
            options={"redirect_to": redirect_url}
        )
        return True, "Check your email for a password reset link"
    except Exception as e:
        return False, f"Error sending reset email: {e}"


def _clear_reset_state():
    st.session_state.password_reset_mode = False
    st.session_state.pop("recovery_session_set", None)
    st.session_state.pop("reset_access_token", None)
    st.session_state.pop("reset_refresh_token", None)
    st.query_params.clear()


def password_reset_screen():
    """Screen for resetting password after clicking email link"""
    st.header("Reset Your Password")
    supabase = get_client()

    access_token = st.session_state.get("reset_access_token")
    refresh_token = st.session_state.get("reset_refresh_token")

    if not access_token or not refresh_token:
        st.error("Invalid or expired reset link. Please request a new one.")
        if st.button("Back to Login"):
            _clear_reset_state()
            st.rerun()
        return

    try:
        if "recovery_session_set" not in st.session_state:
            supabase.auth.set_session(access_token, refresh_token)
            st.session_state.recovery_session_set = True
            st.success("Session verified. Please enter your new password.")
    except Exception as e:
        st.error(f"Error setting session: {e}")
        if st.button("Back to Login"):
            _clear_reset_state()
            st.rerun()
        return

    new_password = st.text_input("New Password", type="password", help="Must be at least 8 characters")
    confirm_password = st.text_input("Confirm New Password", type="password")

    if st.button("Reset Password", type="primary"):
        if not new_password or not confirm_password:
            st.warning("Please enter and confirm your new password")
        elif new_password != confirm_password:
            st.error("Passwords don't match")
        elif len(new_password) < 8:
            st.error("Password must be at least 8 characters")
        else:
            try:
                supabase.auth.update_user({"password": new_password})
                st.success("Password updated successfully! You can now log in with your new password.")
                _clear_reset_state()
                supabase.auth.sign_out()
                time.sleep(1)
                st.rerun()
            except Exception as e:
                st.error(f"Error updating password: {e}")

    if st.button("Cancel"):
        _clear_reset_state()
        st.rerun()


def sign_out():
    try:
        get_client().auth.sign_out()
    finally:
        for key in ("user_id", "user_email", "user_phone", "otp_sent", "supabase"):
            st.session_state.pop(key, None)


def _password_tab():
    email = st.text_input("Email", key="pw_email")
    password = st.text_input("Password", type="password", help="Must be at least 8 characters")

    if st.button("Continue", type="primary", width="stretch"):
        if email and password:
            res, status, msg = smart_auth(email, password)
            if status == "success":
                _signed_in(res.user)
                st.success(msg)
                st.rerun()
            elif status == "check_email":
                st.info(msg)
            else:
                st.error(msg)
        else:
            st.warning("Enter email and password")

    with st.expander("Forgot password?"):
        reset_email = st.text_input("Email for reset link", key="reset_email")
        if st.button("Send reset link"):
            ok, msg = send_password_reset(reset_email)
            (st.success if ok else st.error)(msg)


def _otp_tab():
    method = st.radio("Send code via", ["Email", "SMS"], horizontal=True)
    email = phone = None
    if method == "Email":
        email = st.text_input("Email", key="otp_email")
    else:
        phone = st.text_input("Phone", placeholder="+79991234567", key="otp_phone")

    if not st.session_state.get("otp_sent"):
        if st.button("Send code", type="primary", width="stretch"):
            ok, msg = send_otp(email=email, phone=phone)
            if ok:
                st.session_state.otp_sent = True
                st.success(msg)
                st.rerun()
            else:
                st.error(msg)
        return

    token = st.text_input("6-digit code", max_chars=6)
    c1, c2 = st.columns(2)
    if c1.button("Verify", type="primary", width="stretch"):
        res, msg = verify_otp(token, email=email, phone=phone)
        if res:
            st.session_state.otp_sent = False
            _signed_in(res.user)
            st.rerun()
        else:
            st.error(msg)
    if c2.button("Resend", width="stretch"):
        st.session_state.otp_sent = False
        st.rerun()


def auth_screen():
    if st.session_state.get("password_reset_mode", False):
        password_reset_screen()
        return

    st.header("Login or Sign Up")

    tab_password, tab_code = st.tabs(["Email & password", "One-time code"])
    with tab_password:
        _password_tab()
    with tab_code:
        _otp_tab()
