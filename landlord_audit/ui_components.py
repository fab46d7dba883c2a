"""UI components for the Landlord Auditor Streamlit app."""

import streamlit as st
from typing import Dict, List, Any, Optional

from landlord_audit.catalog import QuestionRepository
from landlord_audit.config import DEFAULT_SCORING_CONFIG
from landlord_audit.errors import AuditError, MissingResponse
from landlord_audit.models import Audit, VALID_TIERS
from landlord_audit.report_data import ReportData
from landlord_audit.utils import get_color_icon, format_file_size, format_report_date, get_app_version


def render_disclaimer():
    """Render the legal disclaimer banner."""
    st.warning(
        "**DISCLAIMER:** This audit is based on the answers you provide and does not constitute legal advice. "
        "Seek qualified advice before acting on any finding.",
        icon="⚠️"
    )


def render_sidebar_config(audits: List[Audit]):
    """Render sidebar with the audit list."""
    st.sidebar.title("🏠 Landlord Auditor")
    st.sidebar.markdown("Landlord Compliance Risk Audit")

    if audits:
        st.sidebar.subheader("📋 Audits")
        for audit in audits:
            st.sidebar.write(f"• **{audit.property_address}** ({audit.tier}, {audit.status})")

    st.sidebar.markdown("---")
    st.sidebar.markdown(f"**Version:** {get_app_version()}")


def render_audit_form() -> Optional[Dict[str, str]]:
    """Render the new-audit form. Returns the entered details when submitted."""
    st.header("📝 New Audit")

    tier_labels = DEFAULT_SCORING_CONFIG.audit_tier_labels
    with st.form("new_audit"):
        property_address = st.text_input("Property address")
        landlord_name = st.text_input("Landlord name")
        auditor_name = st.text_input("Auditor name")
        client_email = st.text_input("Client email")
        tier = st.selectbox("Audit level", VALID_TIERS, format_func=lambda t: tier_labels.get(t, t))
        submitted = st.form_submit_button("Create audit", type="primary")

    if not submitted:
        return None
    if not property_address.strip():
        st.error("Property address is required.")
        return None

    return {
        'tier': tier,
        'property_address': property_address.strip(),
        'landlord_name': landlord_name.strip(),
        'auditor_name': auditor_name.strip(),
        'client_email': client_email.strip(),
    }


def select_audit(audits: List[Audit], label: str, key: str) -> Optional[Audit]:
    """Render an audit picker."""
    if not audits:
        return None
    return st.selectbox(
        label,
        audits,
        format_func=lambda a: f"{a.property_address} ({a.tier}, {a.status})",
        key=key,
    )


def render_questionnaire(audit: Audit, repository: QuestionRepository) -> Optional[Dict[str, Any]]:
    """Render the questionnaire for an audit. Returns answers when submitted."""
    questions = repository.get_questions_for_tier(audit.tier)
    accepted = DEFAULT_SCORING_CONFIG.accepted_answer_values
    answers = {}

    st.caption(f"{len(questions)} questions for {audit.tier}")
    with st.form(f"questionnaire_{audit.id}"):
        current_category = None
        for question in questions:
            if question.category != current_category:
                current_category = question.category
                st.subheader(current_category)

            options = [o for o in question.answer_options if o.score_value in accepted]
            label = f"{question.number}. {question.question_text}"
            if question.is_critical:
                label += " ❗"
            choice = st.radio(label, options, index=None, format_func=lambda o: o.option_text,
                              key=f"{audit.id}_{question.id}")
            if choice is not None:
                answers[question.id] = choice.score_value

        submitted = st.form_submit_button("Submit audit", type="primary")

    if not submitted:
        return None

    unanswered = [q.number for q in questions if q.id not in answers]
    if unanswered:
        st.error(f"Please answer every question. Missing: {', '.join(unanswered)}")
        return None
    return answers


def render_score_summary(report_data: ReportData):
    """Render the headline score and category scores."""
    st.subheader("📊 Overall Score")
    col1, col2, col3 = st.columns(3)
    with col1:
        st.metric("Overall score", f"{report_data.overall_score:.1f} / 10")
    with col2:
        st.metric("Risk", f"{get_color_icon(report_data.risk_tier)} {report_data.risk_label}")
    with col3:
        st.metric("Report ID", report_data.report_id)

    st.subheader("Category Scores")
    for name, category in report_data.category_scores.items():
        st.write(f"{get_color_icon(category['color'])} **{name}**: {category['score']:.1f}")
        st.progress(min(category['percentage'], 100) / 100)

    with st.expander("Subcategory scores"):
        for sub in report_data.subcategory_scores:
            st.write(f"{get_color_icon(sub['color'])} {sub['name']} ({sub['category']}): {sub['score']:.1f}")


def render_recommendations(report_data: ReportData):
    """Render recommended actions grouped by category."""
    st.subheader("✅ Recommended Actions")
    if not report_data.recommendations_by_category:
        st.success("No subcategory requires action.")
        return

    for category, items in report_data.recommendations_by_category.items():
        st.markdown(f"#### {category}")
        for rec in items:
            score_text = f" ({rec['score']:.1f})" if rec['score'] is not None else ''
            with st.expander(f"{rec['priority']}. {rec['subcategory']}{score_text} - {rec['impact']}"):
                if rec['is_critical']:
                    st.error(f"Critical question(s): {', '.join(rec['critical_questions'])}")
                for suggestion in rec['suggestions']:
                    st.write(f"• {suggestion}")


def render_question_results(report_data: ReportData):
    """Render answers bucketed by colour."""
    st.subheader("🔍 Detailed Results")
    for color, heading in (('red', 'Red (Low)'), ('orange', 'Orange (Medium)'), ('green', 'Green (High)')):
        entries = report_data.question_responses[color]
        with st.expander(f"{get_color_icon(color)} {heading} - {len(entries)}", expanded=(color == 'red')):
            for entry in entries:
                st.write(f"**{entry.number}** {entry.question_text}")
                st.write(f"Answer: {entry.answer}")
                if entry.comment:
                    st.caption(entry.comment)


def render_missing_responses(error: MissingResponse):
    """Explain why an audit cannot be scored yet."""
    st.error(f"This audit is incomplete: {len(error.missing_question_ids)} question(s) have no answer.")
    st.write(", ".join(error.missing_question_ids))
    if error.partial_result is not None:
        st.info(f"Score over answered questions so far: {error.partial_result.overall.score:.1f}")


def render_report_section(service, audit: Audit):
    """Render report download buttons."""
    st.write(f"Audit period ends {format_report_date(audit.end_date)}")
    for fmt, label in (('pdf', '📄 PDF report'), ('markdown', '📝 Markdown report')):
        try:
            report = service.generate_report(audit.id, fmt)
        except MissingResponse as e:
            render_missing_responses(e)
            return
        except AuditError as e:
            st.error(f"Could not generate the report: {e}")
            return
        except Exception:
            st.error("Failed to generate the report. The error has been logged.")
            return

        st.download_button(
            f"{label} ({format_file_size(len(report['content']))})",
            data=report['content'],
            file_name=report['filename'],
            mime=report['content_type'],
            key=f"download_{audit.id}_{fmt}",
        )

    if st.button("💾 Save report package", key=f"package_{audit.id}"):
        files = service.save_report_package(audit.id)
        st.success(f"Saved {len(files)} files to {service.output_dir}")


def render_help_section():
    """Render help and documentation."""
    st.header("❓ Help")
    st.markdown("""
    ### How it works
    1. **Create an audit** for a property and choose the audit level.
    2. **Answer the questionnaire.** Each answer carries a score from 1 to 10.
    3. **Review the results.** Scores are weighted by question and grouped by category.
    4. **Download the report** as PDF or Markdown.

    ### Traffic lights
    - 🟢 **Green**: overall or area score 7.5 and above, answers scored 7 or more
    - 🟠 **Orange**: 4.0 to 7.4, answers scored 4 to 6
    - 🔴 **Red**: below 4.0, answers scored 3 or less

    Critical questions (❗) answered poorly are always listed in the recommendations,
    even when the rest of the area scores well.
    """)
