"""Domain objects for landlord compliance audits."""

import re
from datetime import datetime, date
from typing import Dict, List, Any, Optional, Union

from landlord_audit.errors import InvalidStatusTransition, UnknownTier


VALID_TIERS = ['tier_0', 'tier_1', 'tier_2', 'tier_3', 'tier_4']

QUESTION_TYPES = ['yes_no', 'multiple_choice']

SCORE_LEVELS = ['low', 'medium', 'high']

# One-way audit lifecycle
AUDIT_STATUSES = ['pending', 'submitted', 'completed']


def validate_tier(tier: str) -> str:
    """Return the tier unchanged, or raise UnknownTier."""
    if tier not in VALID_TIERS:
        raise UnknownTier(tier)
    return tier


def question_number_key(number: str) -> tuple:
    """Sort key for question numbers like "1.2" or "Q10.3"."""
    parts = re.findall(r'\d+|[^\d.]+', str(number))
    return tuple((0, int(p), '') if p.isdigit() else (1, 0, p.lower()) for p in parts)


def _parse_datetime(value: Any) -> Optional[datetime]:
    if value is None or value == '':
        return None
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    return datetime.fromisoformat(str(value))


def _format_datetime(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None


class AnswerOption:
    """A selectable answer for a question, carrying its score value."""

    def __init__(self, option_text: str, score_value: int, option_order: int = 0,
                 is_example: bool = False):
        self.option_text = option_text
        self.score_value = int(score_value)
        self.option_order = option_order
        self.is_example = is_example

    @classmethod
    def from_dict(cls, data: Dict[str, Any], default_order: int = 0) -> 'AnswerOption':
        return cls(
            option_text=data.get('option_text', ''),
            score_value=data.get('score_value', 0),
            option_order=data.get('option_order', default_order),
            is_example=data.get('is_example', False),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            'option_text': self.option_text,
            'score_value': self.score_value,
            'option_order': self.option_order,
            'is_example': self.is_example,
        }


class ScoreExample:
    """Scoring guidance for one score level of a question."""

    def __init__(self, score_level: str, reason_text: str = '', report_action: str = ''):
        self.score_level = score_level
        self.reason_text = reason_text
        self.report_action = report_action

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'ScoreExample':
        return cls(
            score_level=data.get('score_level', ''),
            reason_text=data.get('reason_text', ''),
            report_action=data.get('report_action', ''),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            'score_level': self.score_level,
            'reason_text': self.reason_text,
            'report_action': self.report_action,
        }


class Question:
    """An audit question from the catalog."""

    def __init__(self, id: str, number: str, category: str, subcategory: str,
                 question_text: str, question_type: str = 'multiple_choice',
                 applicable_tiers: Optional[List[str]] = None, weight: float = 1.0,
                 is_critical: bool = False, answer_options: Optional[List[AnswerOption]] = None,
                 score_examples: Optional[List[ScoreExample]] = None,
                 motivation_learning_point: str = '', is_active: bool = True):
        self.id = id
        self.number = number
        self.category = category
        self.subcategory = subcategory
        self.question_text = question_text
        self.question_type = question_type
        self.applicable_tiers = list(applicable_tiers or [])
        self.weight = float(weight)
        self.is_critical = is_critical
        self.answer_options = sorted(answer_options or [], key=lambda o: o.option_order)
        self.score_examples = list(score_examples or [])
        self.motivation_learning_point = motivation_learning_point
        self.is_active = is_active

    def applies_to(self, tier: str) -> bool:
        """Check whether the question is asked at the given tier."""
        return tier in self.applicable_tiers

    def get_score_example(self, score_level: str) -> Optional[ScoreExample]:
        """Get the guidance entry for a score level (low/medium/high)."""
        for example in self.score_examples:
            if example.score_level == score_level:
                return example
        return None

    def sort_key(self) -> tuple:
        return (self.category.lower(), question_number_key(self.number))

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Question':
        tiers = data.get('applicable_tiers', [])
        if isinstance(tiers, str):
            # Postgres array literal, e.g. "{tier_0,tier_1}"
            tiers = [t.strip() for t in tiers.strip('{}').split(',') if t.strip()]

        options = [
            AnswerOption.from_dict(option, default_order=index)
            for index, option in enumerate(data.get('answer_options', []))
        ]

        number = str(data.get('number', data.get('question_number', '')))
        return cls(
            id=str(data.get('id', number)),
            number=number,
            category=data.get('category', ''),
            subcategory=data.get('subcategory', ''),
            question_text=data.get('question_text', ''),
            question_type=data.get('question_type', 'multiple_choice'),
            applicable_tiers=tiers,
            weight=data.get('weight', 1.0),
            is_critical=data.get('is_critical', False),
            answer_options=options,
            score_examples=[ScoreExample.from_dict(e) for e in data.get('score_examples', [])],
            motivation_learning_point=data.get('motivation_learning_point', '') or '',
            is_active=data.get('is_active', True),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'number': self.number,
            'category': self.category,
            'subcategory': self.subcategory,
            'question_text': self.question_text,
            'question_type': self.question_type,
            'applicable_tiers': list(self.applicable_tiers),
            'weight': self.weight,
            'is_critical': self.is_critical,
            'answer_options': [o.to_dict() for o in self.answer_options],
            'score_examples': [e.to_dict() for e in self.score_examples],
            'motivation_learning_point': self.motivation_learning_point,
            'is_active': self.is_active,
        }

    def __repr__(self) -> str:
        return f"Question({self.number!r}, {self.subcategory!r})"


class Response:
    """The answer given to one question of one audit."""

    def __init__(self, audit_id: str, question_id: str, answer_value: Union[int, float, str],
                 created_at: Optional[datetime] = None, comment: str = ''):
        self.audit_id = audit_id
        self.question_id = question_id
        self.answer_value = answer_value
        self.created_at = created_at
        self.comment = comment

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Response':
        return cls(
            audit_id=str(data.get('audit_id', '')),
            question_id=str(data.get('question_id', '')),
            answer_value=data.get('answer_value'),
            created_at=_parse_datetime(data.get('created_at')),
            comment=data.get('comment', '') or '',
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            'audit_id': self.audit_id,
            'question_id': self.question_id,
            'answer_value': self.answer_value,
            'created_at': _format_datetime(self.created_at),
            'comment': self.comment,
        }


class Audit:
    """One audit engagement for a property."""

    def __init__(self, id: str, tier: str, property_address: str, landlord_name: str = '',
                 auditor_name: str = '', client_email: str = '', status: str = 'pending',
                 created_at: Optional[datetime] = None, submitted_at: Optional[datetime] = None,
                 completed_at: Optional[datetime] = None, updated_at: Optional[datetime] = None):
        if status not in AUDIT_STATUSES:
            raise InvalidStatusTransition(f"Unknown audit status: {status}")
        self.id = id
        self.tier = validate_tier(tier)
        self.property_address = property_address
        self.landlord_name = landlord_name
        self.auditor_name = auditor_name
        self.client_email = client_email
        self.status = status
        self.created_at = created_at or datetime.now()
        self.submitted_at = submitted_at
        self.completed_at = completed_at
        self.updated_at = updated_at

    @property
    def is_ready_for_report(self) -> bool:
        return self.status in ('submitted', 'completed')

    @property
    def start_date(self) -> datetime:
        return self.created_at

    @property
    def end_date(self) -> datetime:
        """Date the audit work ended: completion, else submission, else creation."""
        return self.completed_at or self.submitted_at or self.created_at

    @property
    def last_modified(self) -> datetime:
        return self.updated_at or self.created_at

    def advance_status(self, new_status: str, when: Optional[datetime] = None):
        """Move the audit forward in its lifecycle. Regression is refused."""
        if new_status not in AUDIT_STATUSES:
            raise InvalidStatusTransition(f"Unknown audit status: {new_status}")

        current_index = AUDIT_STATUSES.index(self.status)
        new_index = AUDIT_STATUSES.index(new_status)
        if new_index != current_index + 1:
            raise InvalidStatusTransition(
                f"Audit {self.id} cannot move from '{self.status}' to '{new_status}'"
            )

        when = when or datetime.now()
        self.status = new_status
        if new_status == 'submitted':
            self.submitted_at = when
        elif new_status == 'completed':
            self.completed_at = when
        self.updated_at = when

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Audit':
        return cls(
            id=str(data.get('id', '')),
            tier=data.get('tier', data.get('risk_audit_tier', '')),
            property_address=data.get('property_address', ''),
            landlord_name=data.get('landlord_name', ''),
            auditor_name=data.get('auditor_name', ''),
            client_email=data.get('client_email', ''),
            status=data.get('status', 'pending'),
            created_at=_parse_datetime(data.get('created_at')),
            submitted_at=_parse_datetime(data.get('submitted_at')),
            completed_at=_parse_datetime(data.get('completed_at')),
            updated_at=_parse_datetime(data.get('updated_at')),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'tier': self.tier,
            'property_address': self.property_address,
            'landlord_name': self.landlord_name,
            'auditor_name': self.auditor_name,
            'client_email': self.client_email,
            'status': self.status,
            'created_at': _format_datetime(self.created_at),
            'submitted_at': _format_datetime(self.submitted_at),
            'completed_at': _format_datetime(self.completed_at),
            'updated_at': _format_datetime(self.updated_at),
        }
