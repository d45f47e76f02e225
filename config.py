import logging
import os

import streamlit as st
from streamlit.errors import StreamlitAPIException


def get_setting(key, default=None):
    """Environment first, then .streamlit/secrets.toml"""
    value = os.environ.get(key)
    if value:
        return value
    try:
        return st.secrets.get(key, default)
    except (FileNotFoundError, StreamlitAPIException):
        # no secrets file, e.g. the API server or the test run
        return default


def setup_logging(level=None):
    level_name = (level or get_setting("LOG_LEVEL", "INFO")).upper()
    logging.basicConfig(
        level=getattr(logging, level_name, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )
    return logging.getLogger("honest_dating")
