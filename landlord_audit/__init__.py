"""Landlord Auditor - landlord compliance risk audit scoring and reports."""

__version__ = "1.0.0"
__author__ = "Landlord Auditor Team"
__description__ = "Questionnaire scoring and PDF compliance reports for landlords"

from landlord_audit.models import Question, AnswerOption, ScoreExample, Audit, Response
from landlord_audit.catalog import QuestionRepository, InMemoryQuestionRepository, JsonQuestionRepository
from landlord_audit.scoring import ScoringEngine, ScoreResult
from landlord_audit.report_data import ReportData, ReportDataAssembler
from landlord_audit.reporting import ReportGenerator
from landlord_audit.service import ReportService, create_report_service

__all__ = [
    'Question',
    'AnswerOption',
    'ScoreExample',
    'Audit',
    'Response',
    'QuestionRepository',
    'InMemoryQuestionRepository',
    'JsonQuestionRepository',
    'ScoringEngine',
    'ScoreResult',
    'ReportData',
    'ReportDataAssembler',
    'ReportGenerator',
    'ReportService',
    'create_report_service'
]
