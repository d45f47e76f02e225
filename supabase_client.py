import streamlit as st
from supabase import create_client, Client

from config import get_setting
from functions.errors import ConfigurationError


def get_client() -> Client:
    # one client per browser session, it carries the signed-in user's auth
    if "supabase" not in st.session_state:
        url = get_setting("SUPABASE_URL")
        key = get_setting("SUPABASE_KEY")
        if not url or not key:
            raise ConfigurationError("SUPABASE_URL / SUPABASE_KEY not configured")
        st.session_state.supabase = create_client(url, key)
    return st.session_state.supabase


def get_service_client() -> Client:
    url = get_setting("SUPABASE_URL")
    key = get_setting("SUPABASE_SERVICE_ROLE_KEY")
    if not url or not key:
        raise ConfigurationError("SUPABASE_URL / SUPABASE_SERVICE_ROLE_KEY not configured")
    return create_client(url, key)


def first_row(res):
    rows = res.data or []
    return rows[0] if rows else None
