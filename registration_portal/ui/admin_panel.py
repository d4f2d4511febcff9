"""Admin console for viewing, searching and exporting registrations."""
import logging
import traceback
from typing import List

import streamlit as st

from registration_portal.models.registration_record import RegistrationRecord
from registration_portal.services.admin_service import (
    XLSX_MIME,
    backend_label,
    check_backend_connection,
    clear_local_records,
    export_filename,
    export_records_csv,
    export_records_json,
    export_records_xlsx,
    filter_by_department,
    list_departments,
    search_records,
    view_all_records,
)
from registration_portal.services.persistence_gateway import PersistenceGateway
from registration_portal.services.registration_service import AppState, load_initial_total
from registration_portal.ui.app_context import get_app_state, get_gateway
from registration_portal.ui.html_utils import html_block
from registration_portal.utils.async_utils import run_async
from registration_portal.utils.config import get_settings

logger = logging.getLogger(__name__)

ALL_DEPARTMENTS = "All departments"


def _show_admin_exception(error: Exception, context: str) -> None:
    """Display error details in UI and log full traceback."""
    logger.exception("Admin panel error during %s", context)

    st.error(f"❌ {context} failed: {error}")
    with st.expander("🔍 Error details"):
        st.code("".join(traceback.format_exception(type(error), error, error.__traceback__)))


def _inject_admin_styles() -> None:
    st.markdown(
        html_block(
            """
            <style>
            .admin-header { display: flex; justify-content: space-between; align-items: center; margin-bottom: 24px; }
            .admin-title { color: #3399ff; font-size: 2rem; font-weight: 800; margin: 0; }
            .admin-subtitle { color: #94a3b8; font-size: 0.95rem; }
            </style>
            """
        ),
        unsafe_allow_html=True,
    )


def _show_feedback() -> None:
    feedback = st.session_state.pop("admin_feedback", None)
    if not feedback:
        return

    level, message = feedback
    if level == "success":
        st.success(message)
    elif level == "error":
        st.error(message)
    elif level == "warning":
        st.warning(message)
    else:
        st.info(message)


def recount_members(app_state: AppState, gateway: PersistenceGateway, baseline: int) -> int:
    """Refresh the displayed total from whatever records remain after a clear."""
    app_state.total_members = run_async(lambda: load_initial_total(gateway, baseline))
    logger.info(f"Member total recounted after clear: {app_state.total_members}")
    return app_state.total_members


def render_downloads(records: List[RegistrationRecord], visible: List[RegistrationRecord]) -> None:
    """
    Offer the full collection for download, plus the filtered view when it differs.

    The Excel workbook is the primary export.
    """
    st.download_button(
        f"📥 Download all students (Excel, {len(records)})",
        data=export_records_xlsx(records),
        file_name=export_filename("xlsx"),
        mime=XLSX_MIME,
        type="primary",
        use_container_width=True,
        key="download_all_xlsx",
    )
    st.download_button(
        "📥 Download all students (CSV)",
        data=export_records_csv(records),
        file_name=export_filename("csv"),
        mime="text/csv",
        use_container_width=True,
        key="download_all_csv",
    )
    st.download_button(
        "📥 Download all students (JSON)",
        data=export_records_json(records),
        file_name=export_filename("json"),
        mime="application/json",
        use_container_width=True,
        key="download_all_json",
    )

    if len(visible) != len(records):
        st.download_button(
            f"📥 Download filtered results only (Excel, {len(visible)})",
            data=export_records_xlsx(visible),
            file_name=export_filename("xlsx", scope="filtered"),
            mime=XLSX_MIME,
            use_container_width=True,
            key="download_filtered_xlsx",
        )


def render_clear_confirmation() -> None:
    """Ask for explicit confirmation before wiping local records."""
    with st.container(border=True):
        st.error("⚠️ This cannot be undone. Clear all locally stored registrations?")

        confirm_col, cancel_col = st.columns(2, gap="small")
        with confirm_col:
            if st.button("✅ Yes, clear local data", type="primary", use_container_width=True, key="confirm_clear"):
                gateway = get_gateway()
                success, message = clear_local_records(gateway, confirmed=True)
                if success:
                    recount_members(get_app_state(), gateway, get_settings().baseline_members)
                    st.session_state.admin_feedback = ("success", f"✅ {message}")
                else:
                    st.session_state.admin_feedback = ("error", f"❌ {message}")
                st.session_state.admin_action = None
                st.rerun()
        with cancel_col:
            if st.button("❌ Cancel", use_container_width=True, key="cancel_clear"):
                st.session_state.admin_action = None
                st.rerun()


def render_admin_panel() -> None:
    """Render the admin console."""
    try:
        _inject_admin_styles()
        _show_feedback()

        gateway = get_gateway()
        app_state = get_app_state()

        st.markdown(
            html_block(
                """
                <div class="admin-header">
                    <div>
                        <h1 class="admin-title">🔧 AIMS Admin Panel</h1>
                        <div class="admin-subtitle">Registrations, search and export</div>
                    </div>
                </div>
                """
            ),
            unsafe_allow_html=True,
        )

        records = run_async(lambda: view_all_records(gateway))

        stat_col1, stat_col2, stat_col3 = st.columns(3, gap="small")
        stat_col1.metric("Total Students", len(records))
        stat_col2.metric("Backend", backend_label(gateway))
        stat_col3.metric("This Session", app_state.total_members)

        action_col1, action_col2, action_col3, action_col4 = st.columns(4, gap="small")
        with action_col1:
            if st.button("🔄 Refresh", use_container_width=True):
                st.rerun()
        with action_col2:
            if st.button("🩺 Test Backend", use_container_width=True):
                ok, message = run_async(lambda: check_backend_connection(gateway))
                st.session_state.admin_feedback = ("success" if ok else "warning", message)
                st.rerun()
        with action_col3:
            if st.button("🗑️ Clear Local Data", use_container_width=True):
                st.session_state.admin_action = "clear"
        with action_col4:
            if st.button("🏠 Back to Form", use_container_width=True):
                st.session_state.current_page = "register"
                st.rerun()

        if st.session_state.get("admin_action") == "clear":
            render_clear_confirmation()

        if not records:
            st.info("📝 No registrations yet")
            return

        search_col, dept_col = st.columns([2, 1], gap="small")
        with search_col:
            term = st.text_input("Search", placeholder="Name, email or student ID", key="admin_search")
        with dept_col:
            department = st.selectbox(
                "Department",
                [ALL_DEPARTMENTS] + list_departments(records),
                key="admin_department",
            )

        visible = search_records(records, term)
        if department != ALL_DEPARTMENTS:
            visible = filter_by_department(visible, department)

        st.caption(f"Showing {len(visible)} of {len(records)} registrations")
        st.dataframe([record.to_dict() for record in visible], use_container_width=True, hide_index=True)

        render_downloads(records, visible)
    except Exception as error:
        _show_admin_exception(error, "Loading admin panel")
