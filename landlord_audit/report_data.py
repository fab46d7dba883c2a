"""Report data assembly: merges audit metadata, scores and answers for the renderer."""

import hashlib
import logging
from datetime import datetime
from typing import Dict, List, Any, Optional

from landlord_audit.config import ScoringConfig, DEFAULT_SCORING_CONFIG
from landlord_audit.errors import NotReady
from landlord_audit.models import Audit, Question, Response, question_number_key
from landlord_audit.scoring import ScoreResult, classify_question_score
from landlord_audit.utils import slugify_address, truncate_text

logger = logging.getLogger(__name__)

BASE36_DIGITS = '0123456789ABCDEFGHIJKLMNOPQRSTUVWXYZ'

# What a documentation-only audit covers
AUDIT_SCOPE = {
    'documentation_reviewed': True,
    'site_inspection': False,
    'tenant_interviews': False,
    'records_examined': True,
}


def _to_base36(number: int) -> str:
    if number == 0:
        return '0'
    digits = []
    while number:
        number, remainder = divmod(number, 36)
        digits.append(BASE36_DIGITS[remainder])
    return ''.join(reversed(digits))


def _normalize_address(address: str) -> str:
    return (address or '').strip()


def generate_report_id(property_address: str, audit_end_date: datetime, prefix: str = 'LRA') -> str:
    """Stable short identifier for a report, e.g. ``LRA-2026-03-K3F9QZ``.

    The same address and end date always give the same identifier.
    """
    source = f"{_normalize_address(property_address)}|{audit_end_date.date().isoformat()}"
    digest = hashlib.sha256(source.encode('utf-8')).hexdigest()
    code = _to_base36(int(digest, 16))[:6]
    return f"{prefix}-{audit_end_date.year}-{audit_end_date.month:02d}-{code}"


def generate_report_filename(property_address: str, audit_end_date: datetime) -> str:
    """Download filename for the PDF report."""
    slug = slugify_address(property_address) or 'property'
    return f"landlord-audit-report-{slug}-{audit_end_date.date().isoformat()}.pdf"


class QuestionResponseEntry:
    """One answered question as shown in the detailed results."""

    def __init__(self, number: str, category: str, subcategory: str, question_text: str,
                 answer: str, score: int, color: str, comment: str = '', is_critical: bool = False):
        self.number = number
        self.category = category
        self.subcategory = subcategory
        self.question_text = question_text
        self.answer = answer
        self.score = score
        self.color = color
        self.comment = comment
        self.is_critical = is_critical

    def to_dict(self) -> Dict[str, Any]:
        data = {
            'number': self.number,
            'category': self.category,
            'subcategory': self.subcategory,
            'question_text': self.question_text,
            'answer': self.answer,
            'score': self.score,
            'color': self.color,
            'is_critical': self.is_critical,
        }
        if self.comment:
            data['comment'] = self.comment
        return data


class ReportData:
    """Denormalized report content consumed by the renderer."""

    def __init__(self, report_id: str, filename: str, audit_id: str, property_address: str,
                 landlord_name: str, auditor_name: str, audit_start_date: datetime,
                 audit_end_date: datetime, audit_tier: str, audit_tier_label: str,
                 overall_score: float, risk_tier: str, risk_level: str, risk_label: str,
                 category_scores: Dict[str, Dict[str, Any]],
                 subcategory_scores: List[Dict[str, Any]],
                 recommendations_by_category: Dict[str, List[Dict[str, Any]]],
                 question_responses: Dict[str, List[QuestionResponseEntry]],
                 critical_findings: List[str], audit_scope: Dict[str, bool]):
        self.report_id = report_id
        self.filename = filename
        self.audit_id = audit_id
        self.property_address = property_address
        self.landlord_name = landlord_name
        self.auditor_name = auditor_name
        self.audit_start_date = audit_start_date
        self.audit_end_date = audit_end_date
        self.audit_tier = audit_tier
        self.audit_tier_label = audit_tier_label
        self.overall_score = overall_score
        self.risk_tier = risk_tier
        self.risk_level = risk_level
        self.risk_label = risk_label
        self.category_scores = category_scores
        self.subcategory_scores = subcategory_scores
        self.recommendations_by_category = recommendations_by_category
        self.question_responses = question_responses
        self.critical_findings = critical_findings
        self.audit_scope = audit_scope

    @property
    def title(self) -> str:
        return f"Landlord Risk Audit Report - {self.property_address}"

    def get_counts(self) -> Dict[str, int]:
        return {color: len(entries) for color, entries in self.question_responses.items()}

    def to_dict(self) -> Dict[str, Any]:
        return {
            'report_id': self.report_id,
            'filename': self.filename,
            'audit_id': self.audit_id,
            'property_address': self.property_address,
            'landlord_name': self.landlord_name,
            'auditor_name': self.auditor_name,
            'audit_start_date': self.audit_start_date.isoformat(),
            'audit_end_date': self.audit_end_date.isoformat(),
            'audit_tier': self.audit_tier,
            'audit_tier_label': self.audit_tier_label,
            'overall_score': self.overall_score,
            'risk_tier': self.risk_tier,
            'risk_level': self.risk_level,
            'risk_label': self.risk_label,
            'category_scores': self.category_scores,
            'subcategory_scores': self.subcategory_scores,
            'recommendations_by_category': self.recommendations_by_category,
            'question_responses': {
                color: [entry.to_dict() for entry in entries]
                for color, entries in self.question_responses.items()
            },
            'critical_findings': list(self.critical_findings),
            'audit_scope': dict(self.audit_scope),
        }


class ReportDataAssembler:
    """Builds ReportData from an audit, its responses and its scores. No I/O."""

    def __init__(self, config: Optional[ScoringConfig] = None):
        self.config = config or DEFAULT_SCORING_CONFIG

    def assemble(self, audit: Audit, responses: List[Response], questions: List[Question],
                 scores: ScoreResult) -> ReportData:
        """Assemble report data for a submitted or completed audit."""
        if not audit.is_ready_for_report:
            raise NotReady(f"Audit {audit.id} is '{audit.status}'; it must be submitted before reporting")

        question_responses = self._bucket_responses(responses, questions, scores)
        critical_findings = [
            f"{entry.subcategory}: {truncate_text(entry.question_text, 120)}"
            for entry in question_responses['red']
        ]

        end_date = audit.end_date
        report_data = ReportData(
            report_id=generate_report_id(audit.property_address, end_date, self.config.report_id_prefix),
            filename=generate_report_filename(audit.property_address, end_date),
            audit_id=audit.id,
            property_address=audit.property_address,
            landlord_name=audit.landlord_name,
            auditor_name=audit.auditor_name,
            audit_start_date=audit.start_date,
            audit_end_date=end_date,
            audit_tier=audit.tier,
            audit_tier_label=self.config.audit_tier_labels.get(audit.tier, audit.tier),
            overall_score=scores.overall.score,
            risk_tier=scores.overall.color,
            risk_level=scores.overall.risk_level,
            risk_label=scores.overall.tier_label,
            category_scores={name: cs.to_dict() for name, cs in scores.category_scores.items()},
            subcategory_scores=[s.to_dict() for s in scores.subcategory_scores],
            recommendations_by_category={
                category: [r.to_dict() for r in items]
                for category, items in scores.recommendations_by_category().items()
            },
            question_responses=question_responses,
            critical_findings=critical_findings,
            audit_scope=dict(AUDIT_SCOPE),
        )

        counts = report_data.get_counts()
        logger.info(f"Assembled report {report_data.report_id}: {counts['red']} red, "
                    f"{counts['orange']} orange, {counts['green']} green")
        return report_data

    def _bucket_responses(self, responses: List[Response], questions: List[Question],
                          scores: ScoreResult) -> Dict[str, List[QuestionResponseEntry]]:
        """Split answered questions into red / orange / green by raw score."""
        buckets: Dict[str, List[QuestionResponseEntry]] = {'red': [], 'orange': [], 'green': []}
        questions_by_id = {q.id: q for q in questions}
        comments = {r.question_id: r.comment for r in responses if r.comment}
        category_order = scores.category_order

        def order_key(question_score):
            category = question_score.category
            index = category_order.index(category) if category in category_order else len(category_order)
            return (index, question_number_key(question_score.number))

        for question_score in sorted(scores.question_scores, key=order_key):
            question = questions_by_id.get(question_score.question_id, question_score.question)
            color = classify_question_score(question_score.score, self.config)
            buckets[color].append(QuestionResponseEntry(
                number=question.number,
                category=question.category,
                subcategory=question.subcategory,
                question_text=question.question_text,
                answer=question_score.answer,
                score=question_score.score,
                color=color,
                comment=comments.get(question.id) or self._guidance_comment(question, color),
                is_critical=question.is_critical,
            ))

        return buckets

    def _guidance_comment(self, question: Question, color: str) -> str:
        """Reason text for a weak answer, from the catalog's score guidance."""
        if color == 'green':
            return ''
        example = question.get_score_example(self.config.score_levels[color])
        if example and example.reason_text:
            return example.reason_text
        return question.motivation_learning_point
