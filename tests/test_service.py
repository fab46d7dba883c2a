"""End-to-end tests for the report service with the bundled catalog."""

import shutil
import tempfile
import unittest
from pathlib import Path

# Import the modules to test
import sys
sys.path.append('..')

from landlord_audit.catalog import JsonQuestionRepository
from landlord_audit.errors import NotReady, MissingResponse, NotFound, InvalidAnswerValue
from landlord_audit.reporting import ReportGenerator
from landlord_audit.service import ReportService
from landlord_audit.store import InMemoryAuditStore


class TestReportService(unittest.TestCase):
    """Test the ReportService class."""

    def setUp(self):
        self.repository = JsonQuestionRepository()
        self.store = InMemoryAuditStore(self.repository)
        generator = ReportGenerator(brand_name='Test Brand', author='Test Author', use_weasyprint=False)
        self.service = ReportService(self.repository, self.store, generator)
        self.audit = self.store.create_audit('tier_0', '7 Quay Street, Wellington',
                                             landlord_name='Pat Doe', auditor_name='Sam Roe')
        self.questions = self.repository.get_questions_for_tier('tier_0')

    def test_all_maximum_answers(self):
        self.store.submit_responses(self.audit.id, {q.id: 10 for q in self.questions})

        report_data, scores = self.service.build_report_data(self.audit.id)

        self.assertEqual(scores.overall_score, 10.0)
        self.assertEqual(report_data.risk_tier, 'green')
        self.assertEqual(report_data.recommendations_by_category, {})
        self.assertEqual(report_data.get_counts(), {'red': 0, 'orange': 0, 'green': len(self.questions)})
        self.assertEqual(report_data.critical_findings, [])

    def test_mixed_answers(self):
        answers = {q.id: 10 for q in self.questions}
        answers['q-1.1'] = 1
        self.store.submit_responses(self.audit.id, answers)

        report_data, scores = self.service.build_report_data(self.audit.id)

        self.assertLess(scores.overall_score, 10.0)
        self.assertEqual(report_data.question_responses['red'][0].number, '1.1')
        documentation = report_data.recommendations_by_category['Documentation'][0]
        self.assertEqual(documentation['priority'], 1)
        self.assertEqual(documentation['impact'], 'Legal Exposure')

    def test_pending_audit_is_not_ready(self):
        with self.assertRaises(NotReady):
            self.service.generate_report(self.audit.id)

    def test_unknown_audit(self):
        with self.assertRaises(NotFound):
            self.service.generate_report('missing')

    def test_partial_submission(self):
        answers = {q.id: 5 for q in self.questions[1:]}
        self.store.submit_responses(self.audit.id, answers)

        with self.assertRaises(MissingResponse) as context:
            self.service.generate_report(self.audit.id, 'markdown')
        self.assertEqual(context.exception.missing_question_ids, [self.questions[0].id])
        self.assertEqual(context.exception.partial_result.overall_score, 5.0)

    def test_generate_formats(self):
        self.store.submit_responses(self.audit.id, {q.id: 5 for q in self.questions})

        pdf = self.service.generate_report(self.audit.id, 'pdf')
        self.assertTrue(pdf['content'].startswith(b'%PDF'))
        self.assertEqual(pdf['content_type'], 'application/pdf')
        self.assertRegex(pdf['filename'], r'^landlord-audit-report-7-quay-street-wellington-\d{4}-\d{2}-\d{2}\.pdf$')
        self.assertRegex(pdf['report_id'], r'^LRA-\d{4}-\d{2}-[0-9A-Z]{6}$')

        markdown_report = self.service.generate_report(self.audit.id, 'markdown')
        self.assertTrue(markdown_report['filename'].endswith('.md'))
        self.assertIn(b'7 Quay Street, Wellington', markdown_report['content'])

        html_report = self.service.generate_report(self.audit.id, 'html')
        self.assertTrue(html_report['filename'].endswith('.html'))

    def test_save_report_package(self):
        self.store.submit_responses(self.audit.id, {q.id: 10 for q in self.questions})
        temp_dir = tempfile.mkdtemp()
        try:
            files = self.service.save_report_package(self.audit.id, temp_dir)
            self.assertEqual(set(files), {'json', 'markdown', 'html', 'pdf'})
            self.assertTrue(all(Path(path).exists() for path in files.values()))
        finally:
            shutil.rmtree(temp_dir)

    def test_yes_no_question_rejects_middle_value(self):
        audit = self.store.create_audit('tier_4', '9 Cliff Road, Napier')
        answers = {q.id: 10 for q in self.repository.get_questions_for_tier('tier_4')}
        answers['q-1.2'] = 5

        with self.assertRaises(InvalidAnswerValue):
            self.store.submit_responses(audit.id, answers)
        self.assertEqual(self.store.get_audit(audit.id).status, 'pending')

        answers['q-1.2'] = 1
        self.store.submit_responses(audit.id, answers)
        report_data, _scores = self.service.build_report_data(audit.id)
        self.assertEqual(report_data.question_responses['red'][0].number, '1.2')

    def test_unsupported_format(self):
        with self.assertRaises(ValueError):
            self.service.generate_report(self.audit.id, 'docx')

    def test_completed_audit_still_reports(self):
        self.store.submit_responses(self.audit.id, {q.id: 10 for q in self.questions})
        self.store.complete_audit(self.audit.id)

        report = self.service.generate_report(self.audit.id, 'markdown')
        self.assertIn(b'10.0 / 10', report['content'])

    def test_preview(self):
        preview = self.service.preview()

        self.assertTrue(preview['filename'].startswith('landlord-audit-report-123-sample-street-auckland-1010'))
        self.assertIn(b'123 Sample Street', preview['content'])
        self.assertIn(b'Tier 2 - Enhanced', preview['content'])


if __name__ == '__main__':
    unittest.main()
