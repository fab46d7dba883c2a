"""Scoring engine: turns audit responses into weighted scores and recommendations."""

import logging
from decimal import Decimal, ROUND_HALF_UP
from typing import Dict, List, Any, Optional, Tuple

from landlord_audit.config import ScoringConfig, DEFAULT_SCORING_CONFIG
from landlord_audit.errors import InvalidAnswerValue, MissingResponse, EmptyAggregate
from landlord_audit.models import Question, Response, Audit, AnswerOption

logger = logging.getLogger(__name__)


def round_score(value: float) -> float:
    """Round half-up to one decimal place."""
    return float(Decimal(str(value)).quantize(Decimal('0.1'), rounding=ROUND_HALF_UP))


def classify_score(score: float, config: ScoringConfig = DEFAULT_SCORING_CONFIG) -> str:
    """Traffic-light colour for an aggregate score on the 0-10 scale."""
    if score >= config.green_threshold:
        return 'green'
    if score >= config.orange_threshold:
        return 'orange'
    return 'red'


def classify_question_score(score: float, config: ScoringConfig = DEFAULT_SCORING_CONFIG) -> str:
    """Traffic-light colour for a single answer on the raw 1-10 option scale."""
    if score <= config.question_red_max:
        return 'red'
    if score <= config.question_orange_max:
        return 'orange'
    return 'green'


def _normalize_text(value: str) -> str:
    return ' '.join(str(value).split()).lower()


def match_answer_option(question: Question, value: Any) -> AnswerOption:
    """Find the answer option a submitted value refers to.

    Text answers match option text ignoring case and whitespace; numeric
    answers (or numeric strings) match the option's score value.
    """
    numeric = None
    if isinstance(value, bool):
        numeric = None
    elif isinstance(value, (int, float)):
        numeric = value
    elif isinstance(value, str):
        text = _normalize_text(value)
        for option in question.answer_options:
            if _normalize_text(option.option_text) == text:
                return option
        try:
            numeric = float(text)
        except ValueError:
            numeric = None

    if numeric is not None:
        for option in question.answer_options:
            if option.score_value == numeric:
                return option

    raise InvalidAnswerValue(question.id, value)


class QuestionScore:
    """Score of one answered question."""

    def __init__(self, question: Question, option: AnswerOption, color: str):
        self.question = question
        self.question_id = question.id
        self.number = question.number
        self.category = question.category
        self.subcategory = question.subcategory
        self.weight = question.weight
        self.is_critical = question.is_critical
        self.answer = option.option_text
        self.score = option.score_value
        self.color = color

    def to_dict(self) -> Dict[str, Any]:
        return {
            'question_id': self.question_id,
            'number': self.number,
            'category': self.category,
            'subcategory': self.subcategory,
            'weight': self.weight,
            'is_critical': self.is_critical,
            'answer': self.answer,
            'score': self.score,
            'color': self.color,
        }


class CategoryScore:
    """Weighted score of a category."""

    def __init__(self, category: str, score: float, weight_total: float, questions_count: int,
                 config: ScoringConfig = DEFAULT_SCORING_CONFIG):
        self.category = category
        self.score = score
        self.max_score = config.max_score
        self.percentage = int(round_score(score / config.max_score * 100)) if config.max_score else 0
        self.color = classify_score(score, config)
        self.risk_level = config.risk_levels[self.color]
        self.weight_total = weight_total
        self.questions_count = questions_count

    def to_dict(self) -> Dict[str, Any]:
        return {
            'category': self.category,
            'score': self.score,
            'max_score': self.max_score,
            'percentage': self.percentage,
            'risk_level': self.risk_level,
            'color': self.color,
            'weight_total': self.weight_total,
            'questions_count': self.questions_count,
        }


class SubcategoryScore:
    """Unweighted mean score of a subcategory."""

    def __init__(self, name: str, category: str, score: float, questions_count: int,
                 config: ScoringConfig = DEFAULT_SCORING_CONFIG):
        self.name = name
        self.category = category
        self.score = score
        self.color = classify_score(score, config)
        self.questions_count = questions_count

    def to_dict(self) -> Dict[str, Any]:
        return {
            'name': self.name,
            'category': self.category,
            'score': self.score,
            'color': self.color,
            'questions_count': self.questions_count,
        }


class OverallScore:
    """Overall weighted score with its risk classification."""

    def __init__(self, score: float, config: ScoringConfig = DEFAULT_SCORING_CONFIG):
        self.score = score
        self.color = classify_score(score, config)
        self.risk_level = config.risk_levels[self.color]
        self.tier_label = config.tier_labels[self.color]

    def to_dict(self) -> Dict[str, Any]:
        return {
            'score': self.score,
            'color': self.color,
            'risk_level': self.risk_level,
            'tier_label': self.tier_label,
        }


class Recommendation:
    """Recommended actions for a poorly scoring subcategory."""

    def __init__(self, category: str, subcategory: str, score: Optional[float], color: str,
                 suggestions: List[str], impact: str, critical_questions: Optional[List[str]] = None):
        self.category = category
        self.subcategory = subcategory
        self.score = score
        self.color = color
        self.suggestions = suggestions
        self.impact = impact
        self.critical_questions = list(critical_questions or [])
        self.priority = 0

    @property
    def is_critical(self) -> bool:
        return bool(self.critical_questions)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'category': self.category,
            'subcategory': self.subcategory,
            'score': self.score,
            'color': self.color,
            'suggestions': list(self.suggestions),
            'priority': self.priority,
            'impact': self.impact,
            'is_critical': self.is_critical,
            'critical_questions': list(self.critical_questions),
        }


class ScoreResult:
    """Everything the scoring engine derives for one audit."""

    def __init__(self, question_scores: List[QuestionScore], category_scores: Dict[str, CategoryScore],
                 subcategory_scores: List[SubcategoryScore], overall: OverallScore,
                 recommendations: List[Recommendation], category_order: List[str],
                 missing_question_ids: Optional[List[str]] = None):
        self.question_scores = question_scores
        self.category_scores = category_scores
        self.subcategory_scores = subcategory_scores
        self.overall = overall
        self.recommendations = recommendations
        self.category_order = category_order
        self.missing_question_ids = list(missing_question_ids or [])

    @property
    def overall_score(self) -> float:
        return self.overall.score

    @property
    def risk_tier(self) -> str:
        return self.overall.color

    def get_question_score(self, question_id: str) -> Optional[QuestionScore]:
        for question_score in self.question_scores:
            if question_score.question_id == question_id:
                return question_score
        return None

    def recommendations_by_category(self) -> Dict[str, List[Recommendation]]:
        """Recommendations grouped by category, categories in declaration order."""
        grouped: Dict[str, List[Recommendation]] = {}
        for category in self.category_order:
            items = [r for r in self.recommendations if r.category == category]
            if items:
                grouped[category] = sorted(items, key=lambda r: r.priority)
        return grouped

    def get_summary(self) -> Dict[str, Any]:
        """Counts of answers per colour and headline figures."""
        color_counts = {'red': 0, 'orange': 0, 'green': 0}
        for question_score in self.question_scores:
            color_counts[question_score.color] += 1

        return {
            'overall_score': self.overall.score,
            'risk_tier': self.overall.color,
            'answered_count': len(self.question_scores),
            'missing_count': len(self.missing_question_ids),
            'color_counts': color_counts,
            'recommendation_count': len(self.recommendations),
            'critical_count': len([r for r in self.recommendations if r.is_critical]),
        }

    def to_dict(self) -> Dict[str, Any]:
        return {
            'overall': self.overall.to_dict(),
            'category_scores': {name: cs.to_dict() for name, cs in self.category_scores.items()},
            'subcategory_scores': [s.to_dict() for s in self.subcategory_scores],
            'question_scores': [q.to_dict() for q in self.question_scores],
            'recommendations': [r.to_dict() for r in self.recommendations],
            'missing_question_ids': list(self.missing_question_ids),
        }


class ScoringEngine:
    """Computes category, subcategory and overall scores for an audit.

    The engine is stateless between calls: the same responses and questions
    always produce the same result.
    """

    def __init__(self, repository=None, config: Optional[ScoringConfig] = None,
                 category_order: Optional[List[str]] = None):
        self.repository = repository
        self.config = config or DEFAULT_SCORING_CONFIG
        self.category_order = list(category_order or [])

    def score_audit(self, audit: Audit, responses: List[Response]) -> ScoreResult:
        """Score an audit using the injected question repository."""
        if self.repository is None:
            raise ValueError("ScoringEngine.score_audit needs a question repository")
        questions = self.repository.get_questions_for_audit(audit, responses)
        return self.compute_scores(responses, questions)

    def compute_scores(self, responses: List[Response], questions: List[Question]) -> ScoreResult:
        """Score responses against the questions required for the audit.

        Raises MissingResponse when an active question has no response and
        InvalidAnswerValue when an answer matches none of its options.
        """
        result = self._compute(responses, questions)
        if result.missing_question_ids:
            logger.warning(f"Cannot score audit: {len(result.missing_question_ids)} question(s) unanswered")
            partial = result if result.question_scores else None
            raise MissingResponse(result.missing_question_ids, partial)
        return result

    def _compute(self, responses: List[Response], questions: List[Question]) -> ScoreResult:
        questions = sorted(questions, key=lambda q: q.sort_key())
        if not questions:
            raise EmptyAggregate("No questions to score")

        responses_by_question = self._index_responses(responses)
        category_order = self._resolve_category_order(questions)

        question_scores = []
        missing = []
        for question in questions:
            response = responses_by_question.get(question.id)
            if response is None:
                if question.is_active:
                    missing.append(question)
                continue
            option = match_answer_option(question, response.answer_value)
            question_scores.append(
                QuestionScore(question, option, classify_question_score(option.score_value, self.config))
            )

        if not question_scores:
            if missing:
                return ScoreResult([], {}, [], OverallScore(0.0, self.config), [], category_order,
                                   [q.id for q in missing])
            raise EmptyAggregate("No answered questions to score")

        subcategory_scores = self._score_subcategories(question_scores, category_order)
        category_scores = self._score_categories(question_scores, category_order)
        overall = OverallScore(self._score_overall(question_scores), self.config)
        recommendations = self._build_recommendations(
            questions, question_scores, subcategory_scores, missing, category_order
        )

        logger.debug(f"Overall score {overall.score} ({overall.color}), "
                     f"{len(recommendations)} recommendation(s)")

        return ScoreResult(question_scores, category_scores, subcategory_scores, overall,
                           recommendations, category_order, [q.id for q in missing])

    def _index_responses(self, responses: List[Response]) -> Dict[str, Response]:
        indexed = {}
        for response in responses:
            if response.question_id in indexed:
                logger.warning(f"Duplicate response for question {response.question_id}; using the latest")
            indexed[response.question_id] = response
        return indexed

    def _resolve_category_order(self, questions: List[Question]) -> List[str]:
        order = list(self.category_order)
        if not order and self.repository is not None:
            order = list(self.repository.get_category_order())
        for question in questions:
            if question.category not in order:
                order.append(question.category)
        return order

    def _score_subcategories(self, question_scores: List[QuestionScore],
                             category_order: List[str]) -> List[SubcategoryScore]:
        """Mean of question scores per (category, subcategory)."""
        groups: Dict[Tuple[str, str], List[QuestionScore]] = {}
        for question_score in question_scores:
            groups.setdefault((question_score.category, question_score.subcategory), []).append(question_score)

        results = []
        for (category, subcategory), members in groups.items():
            mean = sum(m.score for m in members) / len(members)
            results.append(SubcategoryScore(subcategory, category, round_score(mean), len(members), self.config))

        # Catalog order within each category
        results.sort(key=lambda s: category_order.index(s.category))
        return results

    def _score_categories(self, question_scores: List[QuestionScore],
                          category_order: List[str]) -> Dict[str, CategoryScore]:
        """Weighted mean of question scores per category."""
        category_scores = {}
        for category in category_order:
            members = [qs for qs in question_scores if qs.category == category]
            weight_total = sum(m.weight for m in members)
            if weight_total <= 0:
                if members:
                    logger.warning(f"Category '{category}' has zero total weight; omitted")
                continue
            weighted = sum(m.score * m.weight for m in members) / weight_total
            category_scores[category] = CategoryScore(
                category, round_score(weighted), weight_total, len(members), self.config
            )
        return category_scores

    def _score_overall(self, question_scores: List[QuestionScore]) -> float:
        weight_total = sum(qs.weight for qs in question_scores)
        if weight_total <= 0:
            raise EmptyAggregate("Answered questions carry no weight")
        overall = sum(qs.score * qs.weight for qs in question_scores) / weight_total
        return min(max(round_score(overall), 0.0), self.config.max_score)

    def _build_recommendations(self, questions: List[Question], question_scores: List[QuestionScore],
                               subcategory_scores: List[SubcategoryScore], missing: List[Question],
                               category_order: List[str]) -> List[Recommendation]:
        """Recommendations for orange/red subcategories plus failing critical questions."""
        scores_by_id = {qs.question_id: qs for qs in question_scores}
        missing_ids = {q.id for q in missing}

        # Critical questions that failed or were never answered, keyed by subcategory
        critical_failures: Dict[Tuple[str, str], List[Tuple[Question, Optional[int]]]] = {}
        for question in questions:
            if not question.is_critical:
                continue
            question_score = scores_by_id.get(question.id)
            if question_score is None and question.id in missing_ids:
                critical_failures.setdefault((question.category, question.subcategory), []).append((question, None))
            elif question_score is not None and question_score.score <= self.config.critical_fail_max:
                critical_failures.setdefault((question.category, question.subcategory), []).append(
                    (question, question_score.score)
                )

        entries = []
        seen_keys = set()
        for subcategory_score in subcategory_scores:
            key = (subcategory_score.category, subcategory_score.name)
            criticals = critical_failures.get(key, [])
            if subcategory_score.color == 'green' and not criticals:
                continue
            seen_keys.add(key)
            entries.append(self._make_recommendation(
                key, subcategory_score.score, subcategory_score.color, questions, scores_by_id, criticals
            ))

        # Critical questions in subcategories with no answered questions at all
        for key, criticals in critical_failures.items():
            if key not in seen_keys:
                entries.append(self._make_recommendation(key, None, 'red', questions, scores_by_id, criticals))

        def rank_key(entry_with_effective):
            entry, effective = entry_with_effective
            category_index = category_order.index(entry.category) if entry.category in category_order else len(category_order)
            return (effective, category_index, entry.subcategory.lower())

        ranked = sorted(entries, key=rank_key)
        recommendations = []
        for priority, (entry, _effective) in enumerate(ranked, 1):
            entry.priority = priority
            recommendations.append(entry)
        return recommendations

    def _make_recommendation(self, key: Tuple[str, str], score: Optional[float], color: str,
                             questions: List[Question], scores_by_id: Dict[str, QuestionScore],
                             criticals: List[Tuple[Question, Optional[int]]]) -> Tuple[Recommendation, float]:
        category, subcategory = key
        members = [q for q in questions if (q.category, q.subcategory) == key]
        suggestions = self._collect_suggestions(members, color, scores_by_id, criticals)

        has_red_answer = any(
            scores_by_id[q.id].color == 'red' for q in members if q.id in scores_by_id
        )
        legal_exposure, tribunal_risk, best_practice = self.config.impact_labels
        if color == 'red' or criticals:
            impact = legal_exposure
        elif has_red_answer:
            impact = tribunal_risk
        else:
            impact = best_practice

        effective = score if score is not None else 0.0
        for _question, critical_score in criticals:
            effective = min(effective, float(critical_score) if critical_score is not None else 0.0)

        recommendation = Recommendation(
            category, subcategory, score, color, suggestions, impact,
            critical_questions=[q.number for q, _s in criticals],
        )
        return recommendation, effective

    def _collect_suggestions(self, members: List[Question], color: str,
                             scores_by_id: Dict[str, QuestionScore],
                             criticals: List[Tuple[Question, Optional[int]]]) -> List[str]:
        """Ranked, de-duplicated actions from the catalog's score guidance."""
        suggestions: List[str] = []

        def add(text: str):
            text = (text or '').strip()
            if text and text not in suggestions:
                suggestions.append(text)

        # Critical failures come first, worst first, using their low-score guidance
        for question, _score in sorted(criticals, key=lambda c: c[1] if c[1] is not None else 0):
            example = question.get_score_example('low')
            add(example.report_action if example else question.motivation_learning_point)

        answered = [q for q in members if q.id in scores_by_id]
        weak = [q for q in answered if scores_by_id[q.id].color != 'green'] or answered
        for question in sorted(weak, key=lambda q: scores_by_id[q.id].score):
            answer_color = scores_by_id[question.id].color if color != 'red' else 'red'
            level = self.config.score_levels.get(answer_color, 'medium')
            example = question.get_score_example(level)
            if example is None and level != 'low':
                example = question.get_score_example('low')
            if example is not None:
                add(example.report_action)

        if not suggestions:
            subcategory = members[0].subcategory if members else 'this area'
            add(f"Review {subcategory.lower()} practices against current tenancy obligations")
        return suggestions
