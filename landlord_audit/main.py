"""Main Streamlit application for Landlord Auditor."""

import logging
import sys
import streamlit as st
from pathlib import Path
from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

# Add project root to Python path
project_root = Path(__file__).parent.parent
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))

from landlord_audit.errors import AuditError, MissingResponse
from landlord_audit.service import create_report_service
from landlord_audit.ui_components import (
    render_disclaimer, render_sidebar_config, render_audit_form, select_audit,
    render_questionnaire, render_score_summary, render_recommendations,
    render_question_results, render_missing_responses, render_report_section,
    render_help_section
)

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


def initialize_session_state():
    """Initialize Streamlit session state."""
    if 'report_service' not in st.session_state:
        st.session_state.report_service = create_report_service()


def main():
    """Main application function."""
    st.set_page_config(
        page_title="Landlord Auditor - Compliance Risk Audit",
        page_icon="🏠",
        layout="wide",
        initial_sidebar_state="expanded"
    )

    initialize_session_state()
    service = st.session_state.report_service
    store = service.store

    render_disclaimer()
    render_sidebar_config(store.list_audits())

    st.title("🏠 Landlord Auditor")
    st.markdown("### Landlord Compliance Risk Audit")

    tab1, tab2, tab3, tab4, tab5 = st.tabs([
        "📝 New Audit",
        "📋 Questionnaire",
        "📊 Results",
        "📄 Reports",
        "❓ Help"
    ])

    with tab1:
        details = render_audit_form()
        if details:
            audit = store.create_audit(**details)
            st.success(f"✅ Audit created for {audit.property_address}")
            st.rerun()

    with tab2:
        st.header("📋 Questionnaire")
        pending = [a for a in store.list_audits() if a.status == 'pending']
        audit = select_audit(pending, "Pending audit", "questionnaire_audit")
        if audit is None:
            st.info("Create an audit first.")
        else:
            answers = render_questionnaire(audit, service.repository)
            if answers:
                try:
                    store.submit_responses(audit.id, answers)
                    st.success("✅ Audit submitted successfully")
                    st.rerun()
                except AuditError as e:
                    st.error(str(e))

    ready = [a for a in store.list_audits() if a.is_ready_for_report]

    with tab3:
        st.header("📊 Results")
        audit = select_audit(ready, "Submitted audit", "results_audit")
        if audit is None:
            st.info("Submit an audit to see its results.")
        else:
            try:
                report_data, _scores = service.build_report_data(audit.id)
                render_score_summary(report_data)
                render_recommendations(report_data)
                render_question_results(report_data)
            except MissingResponse as e:
                render_missing_responses(e)
            except AuditError as e:
                st.error(str(e))

    with tab4:
        st.header("📄 Reports & Export")
        audit = select_audit(ready, "Submitted audit", "reports_audit")
        if audit is None:
            st.info("Submit an audit to download its report.")
        else:
            render_report_section(service, audit)
            if audit.status == 'submitted' and st.button("Mark audit completed"):
                store.complete_audit(audit.id)
                st.rerun()

    with tab5:
        render_help_section()


if __name__ == "__main__":
    main()
