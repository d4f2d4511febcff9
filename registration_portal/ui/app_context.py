"""Per-session wiring of settings, gateway and application state."""
import logging

import streamlit as st

from registration_portal.services.persistence_gateway import PersistenceGateway
from registration_portal.services.registration_service import AppState, load_initial_total
from registration_portal.utils.async_utils import run_async
from registration_portal.utils.config import get_settings

logger = logging.getLogger(__name__)


def get_gateway() -> PersistenceGateway:
    """Gateway built from the current settings."""
    return PersistenceGateway.from_settings(get_settings())


def get_app_state() -> AppState:
    """
    Application state for this browser session.

    Created on first access with the member total hydrated from the store
    (or the remote sheet when configured).
    """
    if "app_state" not in st.session_state:
        settings = get_settings()
        total = run_async(lambda: load_initial_total(get_gateway(), settings.baseline_members))
        logger.info(f"Initialized session with {total} registered members")
        st.session_state.app_state = AppState(total_members=total)
    return st.session_state.app_state
