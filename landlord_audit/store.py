"""Audit and response storage used by the report boundary and the UI."""

import json
import logging
import uuid
from abc import ABC, abstractmethod
from datetime import datetime
from pathlib import Path
from typing import Dict, List, Any, Optional

from landlord_audit.config import ScoringConfig, DEFAULT_SCORING_CONFIG
from landlord_audit.errors import (
    AuditError, NotFound, InvalidAnswerValue, InvalidStatusTransition
)
from landlord_audit.models import Audit, Response, validate_tier
from landlord_audit.scoring import match_answer_option
from landlord_audit.utils import save_json_file

logger = logging.getLogger(__name__)


class AuditStore(ABC):
    """Persistence for audits and their responses."""

    def __init__(self, repository=None, config: Optional[ScoringConfig] = None):
        self.repository = repository
        self.config = config or DEFAULT_SCORING_CONFIG

    @abstractmethod
    def get_audit(self, audit_id: str) -> Audit:
        """Get an audit, raising NotFound."""
        pass

    @abstractmethod
    def get_responses(self, audit_id: str) -> List[Response]:
        """Get the responses of an audit ordered by question id."""
        pass

    @abstractmethod
    def list_audits(self) -> List[Audit]:
        """Get all audits, newest first."""
        pass

    @abstractmethod
    def _save(self, audit: Audit, responses: Optional[List[Response]] = None):
        """Persist an audit and, when given, replace its responses."""
        pass

    def create_audit(self, tier: str, property_address: str, landlord_name: str = '',
                     auditor_name: str = '', client_email: str = '') -> Audit:
        """Create a pending audit."""
        validate_tier(tier)
        audit = Audit(
            id=uuid.uuid4().hex[:12],
            tier=tier,
            property_address=property_address,
            landlord_name=landlord_name,
            auditor_name=auditor_name,
            client_email=client_email,
        )
        self._save(audit, [])
        logger.info(f"Created audit {audit.id} ({tier}) for {property_address}")
        return audit

    def submit_responses(self, audit_id: str, answers: Dict[str, Any],
                         comments: Optional[Dict[str, str]] = None) -> Audit:
        """Store answers for a pending audit and mark it submitted.

        ``answers`` maps question id to answer value; values must be one of
        the accepted submission values and, when a catalog is attached, one
        of the question's answer options.
        """
        audit = self.get_audit(audit_id)
        if audit.status != 'pending':
            raise InvalidStatusTransition(f"Audit {audit_id} has already been submitted")
        if not answers:
            raise AuditError("At least one response is required")

        tier_questions = None
        if self.repository is not None:
            tier_questions = {q.id: q for q in self.repository.get_questions_for_tier(audit.tier)}

        comments = comments or {}
        existing = {r.question_id: r for r in self.get_responses(audit_id)}
        now = datetime.now()
        for question_id, value in answers.items():
            if tier_questions is not None and question_id not in tier_questions:
                raise NotFound(f"Question {question_id} is not part of {audit.tier}")
            if isinstance(value, bool) or value not in self.config.accepted_answer_values:
                raise InvalidAnswerValue(question_id, value)
            if tier_questions is not None:
                match_answer_option(tier_questions[question_id], value)
            # One response per question; a resubmitted answer replaces the old one
            existing[question_id] = Response(audit_id, question_id, value, created_at=now,
                                             comment=comments.get(question_id, ''))

        audit.advance_status('submitted', now)
        self._save(audit, sorted(existing.values(), key=lambda r: r.question_id))
        logger.info(f"Audit {audit_id} submitted with {len(existing)} response(s)")
        return audit

    def complete_audit(self, audit_id: str) -> Audit:
        """Mark a submitted audit completed."""
        audit = self.get_audit(audit_id)
        audit.advance_status('completed')
        self._save(audit)
        logger.info(f"Audit {audit_id} completed")
        return audit


class InMemoryAuditStore(AuditStore):
    """Audit store held in memory."""

    def __init__(self, repository=None, config: Optional[ScoringConfig] = None):
        super().__init__(repository, config)
        self._audits: Dict[str, Audit] = {}
        self._responses: Dict[str, List[Response]] = {}

    def add(self, audit: Audit, responses: Optional[List[Response]] = None):
        """Load an existing audit, e.g. from fixtures."""
        self._save(audit, list(responses or []))

    def get_audit(self, audit_id: str) -> Audit:
        if audit_id not in self._audits:
            raise NotFound(f"Audit {audit_id} not found")
        return self._audits[audit_id]

    def get_responses(self, audit_id: str) -> List[Response]:
        self.get_audit(audit_id)
        return sorted(self._responses.get(audit_id, []), key=lambda r: r.question_id)

    def list_audits(self) -> List[Audit]:
        return sorted(self._audits.values(), key=lambda a: a.created_at, reverse=True)

    def _save(self, audit: Audit, responses: Optional[List[Response]] = None):
        self._audits[audit.id] = audit
        if responses is not None:
            self._responses[audit.id] = list(responses)


class JsonAuditStore(InMemoryAuditStore):
    """Audit store persisted to a single JSON file."""

    def __init__(self, file_path: str, repository=None, config: Optional[ScoringConfig] = None):
        super().__init__(repository, config)
        self.file_path = Path(file_path)
        self._load()

    def _load(self):
        if not self.file_path.exists():
            return
        try:
            with open(self.file_path, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.error(f"Error loading audit store {self.file_path}: {e}")
            raise AuditError(f"Audit store {self.file_path} could not be read; refusing to overwrite it") from e
        for record in data.get('audits', []):
            audit = Audit.from_dict(record)
            self._audits[audit.id] = audit
            self._responses[audit.id] = [Response.from_dict(r) for r in record.get('responses', [])]
        logger.info(f"Loaded {len(self._audits)} audit(s) from {self.file_path}")

    def _save(self, audit: Audit, responses: Optional[List[Response]] = None):
        super()._save(audit, responses)
        data = {
            'audits': [
                dict(a.to_dict(), responses=[r.to_dict() for r in self._responses.get(a.id, [])])
                for a in self._audits.values()
            ]
        }
        if not save_json_file(data, str(self.file_path)):
            raise AuditError(f"Could not write audit store {self.file_path}")


def create_audit_store(file_path: Optional[str] = None, repository=None) -> AuditStore:
    """Create the audit store configured for this deployment."""
    if file_path:
        return JsonAuditStore(file_path, repository)
    return InMemoryAuditStore(repository)
