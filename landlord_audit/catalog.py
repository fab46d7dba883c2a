"""Question catalog: the versioned set of audit questions per tier."""

import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Dict, List, Any, Optional

from landlord_audit.errors import NotFound, InvalidQuestion
from landlord_audit.models import (
    Question, Response, Audit, AnswerOption, VALID_TIERS, QUESTION_TYPES, validate_tier
)
from landlord_audit.utils import load_json_file, save_json_file, get_assets_path

logger = logging.getLogger(__name__)

MIN_WEIGHT = 0.5
MAX_WEIGHT = 2.0
MIN_OPTION_SCORE = 1
MAX_OPTION_SCORE = 10


def validate_question(question: Question) -> Question:
    """Check a question against the catalog rules, raising InvalidQuestion."""
    if not question.id or not question.number:
        raise InvalidQuestion("Question id and number are required")
    if not question.question_text:
        raise InvalidQuestion(f"Question {question.number} has no text")
    if not question.category or not question.subcategory:
        raise InvalidQuestion(f"Question {question.number} needs a category and subcategory")
    if question.question_type not in QUESTION_TYPES:
        raise InvalidQuestion(f"Question {question.number} has unknown type '{question.question_type}'")

    if not question.applicable_tiers:
        raise InvalidQuestion(f"Question {question.number} must apply to at least one tier")
    for tier in question.applicable_tiers:
        if tier not in VALID_TIERS:
            raise InvalidQuestion(f"Question {question.number} lists unknown tier '{tier}'")

    if not MIN_WEIGHT <= question.weight <= MAX_WEIGHT:
        raise InvalidQuestion(
            f"Question {question.number} weight {question.weight} outside {MIN_WEIGHT}-{MAX_WEIGHT}"
        )

    if not question.answer_options:
        raise InvalidQuestion(f"Question {question.number} has no answer options")

    texts = set()
    orders = set()
    for option in question.answer_options:
        if not MIN_OPTION_SCORE <= option.score_value <= MAX_OPTION_SCORE:
            raise InvalidQuestion(
                f"Option '{option.option_text}' of question {question.number} "
                f"scores {option.score_value}, expected {MIN_OPTION_SCORE}-{MAX_OPTION_SCORE}"
            )
        text_key = option.option_text.strip().lower()
        if text_key in texts:
            raise InvalidQuestion(f"Duplicate option text '{option.option_text}' in question {question.number}")
        if option.option_order in orders:
            raise InvalidQuestion(f"Duplicate option order {option.option_order} in question {question.number}")
        texts.add(text_key)
        orders.add(option.option_order)

    if question.question_type == 'yes_no':
        scores = sorted(option.score_value for option in question.answer_options)
        if scores != [1, 10]:
            raise InvalidQuestion(
                f"Yes/no question {question.number} must have exactly two options scored 10 and 1"
            )

    return question


def default_yes_no_options() -> List[AnswerOption]:
    """Options given to a yes/no question created without any."""
    return [
        AnswerOption("Yes", 10, option_order=0),
        AnswerOption("No", 1, option_order=1),
    ]


class QuestionRepository(ABC):
    """Read-through access to the question catalog."""

    @abstractmethod
    def get_all_questions(self) -> List[Question]:
        """Get every question, active or not."""
        pass

    @abstractmethod
    def save_question(self, question: Question) -> Question:
        """Create or replace a question."""
        pass

    def get_declared_categories(self) -> List[str]:
        """Categories in the order the catalog declares them."""
        return []

    def get_category_order(self) -> List[str]:
        """Declared categories first, then any others in catalog order."""
        order = list(self.get_declared_categories())
        for question in sorted(self.get_all_questions(), key=lambda q: q.sort_key()):
            if question.category not in order:
                order.append(question.category)
        return order

    def get_question(self, question_id: str) -> Question:
        """Get a question by id."""
        for question in self.get_all_questions():
            if question.id == question_id:
                return question
        raise NotFound(f"Question {question_id} not found")

    def get_questions_for_tier(self, tier: str) -> List[Question]:
        """Active questions applicable to a tier, ordered by category then number."""
        validate_tier(tier)
        questions = [
            q for q in self.get_all_questions()
            if q.is_active and q.applies_to(tier)
        ]
        questions.sort(key=lambda q: q.sort_key())
        return questions

    def get_questions_for_audit(self, audit: Audit, responses: List[Response]) -> List[Question]:
        """Questions needed to score an audit.

        The tier's active questions, plus deactivated questions of that tier
        that the audit still has responses for.
        """
        questions = self.get_questions_for_tier(audit.tier)
        answered_ids = {r.question_id for r in responses}
        seen = {q.id for q in questions}

        for question in self.get_all_questions():
            if question.id in seen or question.is_active:
                continue
            if question.id in answered_ids and question.applies_to(audit.tier):
                questions.append(question)

        questions.sort(key=lambda q: q.sort_key())
        return questions

    def update_question(self, question_id: str, changes: Dict[str, Any]) -> Question:
        """Apply an administrator edit to a question."""
        current = self.get_question(question_id)
        data = current.to_dict()
        data.update(changes)
        data['id'] = current.id

        updated = Question.from_dict(data)
        if updated.question_type == 'yes_no' and not updated.answer_options:
            updated.answer_options = default_yes_no_options()

        validate_question(updated)
        logger.info(f"Updating question {updated.number} ({question_id})")
        return self.save_question(updated)

    def deactivate_question(self, question_id: str) -> Question:
        """Soft-delete a question. Existing responses stay valid."""
        question = self.get_question(question_id)
        if not question.is_active:
            return question
        question.is_active = False
        logger.info(f"Deactivated question {question.number} ({question_id})")
        return self.save_question(question)


class InMemoryQuestionRepository(QuestionRepository):
    """Catalog held in memory; used by tests and previews."""

    def __init__(self, questions: Optional[List[Question]] = None,
                 categories: Optional[List[str]] = None):
        self._questions: Dict[str, Question] = {}
        self._categories = list(categories or [])
        for question in questions or []:
            self._questions[question.id] = question

    def get_all_questions(self) -> List[Question]:
        return list(self._questions.values())

    def get_declared_categories(self) -> List[str]:
        return list(self._categories)

    def save_question(self, question: Question) -> Question:
        self._questions[question.id] = question
        return question


class JsonQuestionRepository(InMemoryQuestionRepository):
    """Catalog loaded from a JSON file (the bundled one by default).

    Edits are written back to the same file.
    """

    def __init__(self, catalog_path: Optional[str] = None):
        self.catalog_path = Path(catalog_path) if catalog_path else get_assets_path() / "question_catalog.json"
        self.catalog = self._load_catalog()
        self.version = self.catalog.get('version', '')

        questions = [Question.from_dict(q) for q in self.catalog.get('questions', [])]
        super().__init__(questions, self.catalog.get('categories', []))
        logger.info(f"Loaded {len(questions)} questions from catalog {self.version or self.catalog_path.name}")

    def _load_catalog(self) -> Dict[str, Any]:
        """Load the catalog file."""
        catalog = load_json_file(str(self.catalog_path))
        if not catalog:
            raise NotFound(f"Question catalog not found or empty: {self.catalog_path}")
        return catalog

    def save_question(self, question: Question) -> Question:
        super().save_question(question)
        self.catalog['questions'] = [q.to_dict() for q in self.get_all_questions()]
        if not save_json_file(self.catalog, str(self.catalog_path)):
            logger.warning(f"Catalog change to {question.id} kept in memory only")
        return question


def create_question_repository(catalog_path: Optional[str] = None) -> QuestionRepository:
    """Create the catalog repository configured for this deployment."""
    return JsonQuestionRepository(catalog_path)
