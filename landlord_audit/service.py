"""Report generation boundary: loads an audit, scores it and renders the report."""

import logging
import time
from datetime import datetime, timedelta
from typing import Dict, Any, Optional, Tuple

from landlord_audit.catalog import QuestionRepository, create_question_repository
from landlord_audit.config import ScoringConfig, DEFAULT_SCORING_CONFIG, get_app_settings
from landlord_audit.errors import NotReady, MissingResponse
from landlord_audit.models import Audit, Response
from landlord_audit.report_data import ReportData, ReportDataAssembler
from landlord_audit.reporting import ReportGenerator
from landlord_audit.scoring import ScoringEngine, ScoreResult
from landlord_audit.store import AuditStore, InMemoryAuditStore, create_audit_store

logger = logging.getLogger(__name__)

REPORT_FORMATS = {
    'pdf': 'application/pdf',
    'html': 'text/html',
    'markdown': 'text/markdown',
}


class ReportService:
    """Wires the catalog, audit store, scoring engine, assembler and renderer."""

    def __init__(self, repository: QuestionRepository, store: AuditStore,
                 generator: Optional[ReportGenerator] = None,
                 config: Optional[ScoringConfig] = None, output_dir: Optional[str] = None):
        self.repository = repository
        self.store = store
        self.output_dir = output_dir or 'reports'
        self.config = config or DEFAULT_SCORING_CONFIG
        self.engine = ScoringEngine(repository, self.config)
        self.assembler = ReportDataAssembler(self.config)
        self.generator = generator or ReportGenerator()

    def build_report_data(self, audit_id: str) -> Tuple[ReportData, ScoreResult]:
        """Score an audit and assemble its report data."""
        audit = self.store.get_audit(audit_id)
        if not audit.is_ready_for_report:
            logger.info(f"[Report] Audit {audit_id} not submitted yet")
            raise NotReady(f"Audit {audit_id} must be submitted before generating report")

        responses = self.store.get_responses(audit_id)
        questions = self.repository.get_questions_for_audit(audit, responses)
        logger.info(f"[Report] Loaded {len(questions)} questions for tier {audit.tier}, "
                    f"{len(responses)} responses")

        scores = self.engine.compute_scores(responses, questions)
        logger.info(f"[Report] Calculated scores: overall {scores.overall.score} ({scores.overall.color})")

        report_data = self.assembler.assemble(audit, responses, questions, scores)
        return report_data, scores

    def generate_report(self, audit_id: str, fmt: str = 'pdf') -> Dict[str, Any]:
        """Generate a downloadable report.

        Returns a dict with ``content``, ``filename``, ``content_type`` and
        ``report_id``. Errors are logged with their stack trace and re-raised.
        """
        if fmt not in REPORT_FORMATS:
            raise ValueError(f"Unsupported report format: {fmt}")

        start_time = time.monotonic()
        logger.info(f"[Report] Generating {fmt} report for audit {audit_id}...")
        try:
            report_data, _scores = self.build_report_data(audit_id)
            content = self._render(report_data, fmt)
        except (NotReady, MissingResponse):
            raise
        except Exception:
            logger.exception(f"[Report] Generation failed for audit {audit_id}")
            raise

        elapsed_ms = int((time.monotonic() - start_time) * 1000)
        size_kb = round(len(content) / 1024)
        logger.info(f"[Report] ✓ Report {report_data.report_id} generated ({elapsed_ms}ms, {size_kb} KB)")

        filename = report_data.filename
        if fmt != 'pdf':
            filename = filename[:-len('.pdf')] + ('.html' if fmt == 'html' else '.md')

        return {
            'content': content,
            'filename': filename,
            'content_type': REPORT_FORMATS[fmt],
            'report_id': report_data.report_id,
            'generation_time_ms': elapsed_ms,
        }

    def _render(self, report_data: ReportData, fmt: str):
        if fmt == 'pdf':
            return self.generator.generate_pdf_report(report_data)
        if fmt == 'html':
            return self.generator.generate_html_report(report_data).encode('utf-8')
        return self.generator.generate_markdown_report(report_data).encode('utf-8')

    def save_report_package(self, audit_id: str, output_dir: Optional[str] = None) -> Dict[str, str]:
        """Write every report format for an audit to the output directory."""
        report_data, _scores = self.build_report_data(audit_id)
        return self.generator.create_report_package(report_data, output_dir or self.output_dir)

    def preview(self, fmt: str = 'markdown') -> Dict[str, Any]:
        """Render a report for a sample audit, for checking the layout."""
        preview_service = create_preview_service(self.repository, self.generator, self.config)
        return preview_service.generate_report(PREVIEW_AUDIT_ID, fmt)


PREVIEW_AUDIT_ID = 'preview'


def create_preview_service(repository: QuestionRepository, generator: Optional[ReportGenerator] = None,
                           config: Optional[ScoringConfig] = None) -> ReportService:
    """Service over a sample tier_2 audit answered with a mix of scores."""
    store = InMemoryAuditStore(repository, config)
    end_date = datetime(2026, 3, 14, 10, 0)
    audit = Audit(
        id=PREVIEW_AUDIT_ID,
        tier='tier_2',
        property_address='123 Sample Street, Auckland 1010',
        landlord_name='John Smith',
        auditor_name='Jane Doe',
        status='submitted',
        created_at=end_date - timedelta(days=7),
        submitted_at=end_date,
    )

    cycle = [10, 5, 10, 1, 10, 5]
    responses = []
    for index, question in enumerate(repository.get_questions_for_tier(audit.tier)):
        wanted = cycle[index % len(cycle)]
        scores = [o.score_value for o in question.answer_options]
        value = wanted if wanted in scores else min(scores, key=lambda s: abs(s - wanted))
        responses.append(Response(audit.id, question.id, value, created_at=end_date))

    store.add(audit, responses)
    return ReportService(repository, store, generator, config)


def create_report_service(settings: Optional[Dict[str, Any]] = None) -> ReportService:
    """Create the report service for this deployment."""
    settings = settings or get_app_settings()
    repository = create_question_repository(settings.get('catalog_path'))
    store = create_audit_store(settings.get('audit_store_path'), repository)
    generator = ReportGenerator(settings.get('brand_name'), settings.get('report_author'))
    return ReportService(repository, store, generator, output_dir=settings.get('report_output_dir'))
