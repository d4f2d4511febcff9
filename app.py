"""
AIMS Student Registration Portal
Streamlit entry point: registration form and admin console
"""
import logging
import streamlit as st

from registration_portal.ui.admin_panel import render_admin_panel
from registration_portal.ui.registration_form import render_registration_page
from registration_portal.utils.config import get_settings

logger = logging.getLogger(__name__)


# Streamlit page configuration
st.set_page_config(
    page_title="AIMS Student Registration",
    page_icon="∑",
    layout="centered",
    initial_sidebar_state="collapsed"
)


def configure_logging():
    """Configure root logging from LOG_LEVEL once per process."""
    root = logging.getLogger()
    if root.handlers:
        return
    logging.basicConfig(
        level=getattr(logging, get_settings().log_level, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def initialize_session_state():
    """Initialize default session state values."""
    if "current_page" not in st.session_state:
        st.session_state.current_page = "register"

    if "admin_action" not in st.session_state:
        st.session_state.admin_action = None

    # ?admin=1 opens the admin console directly
    if "url_params_processed" not in st.session_state:
        if st.query_params.get("admin") in ("1", "true", "yes"):
            st.session_state.current_page = "admin"
        st.session_state.url_params_processed = True


def apply_custom_css():
    """Apply custom CSS styles."""
    st.markdown("""
        <style>
        .stApp {
            background: linear-gradient(135deg, #001a4d 0%, #002266 50%, #003399 100%);
        }

        #MainMenu {visibility: hidden;}
        footer {visibility: hidden;}
        header, [data-testid="stHeader"] {
            visibility: hidden;
            height: 0;
        }

        .stButton > button {
            border-radius: 12px;
            font-weight: 600;
            transition: all 0.3s;
            border: none;
        }

        .stButton > button:hover {
            transform: translateY(-2px);
            box-shadow: 0 8px 16px rgba(0, 0, 0, 0.3);
        }

        .stButton > button[kind="primary"] {
            background: linear-gradient(135deg, #0066cc 0%, #00aaff 100%);
            color: white;
        }

        .stTextInput > div > div > input,
        .stTextArea > div > div > textarea {
            background: #0b1f4d;
            border: 1px solid #1e3a8a;
            border-radius: 8px;
            color: #f1f5f9;
        }
        </style>
    """, unsafe_allow_html=True)


def render_navigation():
    """Render navigation buttons."""
    nav_col1, _, nav_col2 = st.columns([1, 2, 1], gap="small")

    with nav_col1:
        if st.button("📝 Register", use_container_width=True, key="nav_register"):
            st.session_state.current_page = "register"

    with nav_col2:
        if st.button("🔧 Admin", use_container_width=True, key="nav_admin"):
            st.session_state.current_page = "admin"


def render_current_page():
    """Render the page selected in session state."""
    try:
        if st.session_state.current_page == "register":
            render_registration_page()

        elif st.session_state.current_page == "admin":
            render_admin_panel()

        else:
            st.error(f"Unknown page: {st.session_state.current_page}")
            if st.button("Back to registration"):
                st.session_state.current_page = "register"
                st.rerun()

    except Exception as e:
        logger.exception("Unhandled exception while rendering page")
        st.error("Something went wrong, please try again later")

        with st.expander("🔍 Error details"):
            st.code(str(e))

        if st.button("Back to registration"):
            st.session_state.current_page = "register"
            st.rerun()


def main():
    """Application entry point."""
    try:
        configure_logging()
        initialize_session_state()
        apply_custom_css()
        render_navigation()
        render_current_page()
    except Exception as e:
        logger.exception("Unhandled exception during app execution")
        st.error("The application hit an error, please refresh the page")
        st.code(str(e))

        if st.button("🔄 Reload"):
            st.session_state.clear()
            st.rerun()


if __name__ == "__main__":
    main()
