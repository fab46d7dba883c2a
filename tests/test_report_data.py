"""Tests for report data assembly."""

import re
import unittest
from datetime import datetime

# Import the modules to test
import sys
sys.path.append('..')

from landlord_audit.errors import NotReady
from landlord_audit.models import Response
from landlord_audit.report_data import (
    ReportDataAssembler, generate_report_id, generate_report_filename
)
from landlord_audit.scoring import ScoringEngine
from landlord_audit.utils import slugify_address
from catalog_fixtures import make_question, make_audit


class TestReportIdentifiers(unittest.TestCase):
    """Test report id and filename generation."""

    def setUp(self):
        self.end_date = datetime(2026, 3, 14, 9, 30)

    def test_report_id_format(self):
        report_id = generate_report_id('12 High St., Flat 3', self.end_date)
        self.assertRegex(report_id, r'^LRA-2026-03-[0-9A-Z]{6}$')

    def test_report_id_is_deterministic(self):
        first = generate_report_id('12 High St., Flat 3', self.end_date)
        second = generate_report_id('12 High St., Flat 3', datetime(2026, 3, 14, 17, 0))
        self.assertEqual(first, second)
        self.assertEqual(first, generate_report_id('  12 High St., Flat 3 ', self.end_date))

    def test_report_id_keeps_address_case(self):
        self.assertNotEqual(generate_report_id('12 High St', self.end_date),
                            generate_report_id('12 HIGH ST', self.end_date))

    def test_report_id_changes_with_inputs(self):
        base = generate_report_id('12 High St., Flat 3', self.end_date)
        self.assertNotEqual(base, generate_report_id('14 High St., Flat 3', self.end_date))
        self.assertNotEqual(base, generate_report_id('12 High St., Flat 3', datetime(2026, 3, 15)))

    def test_slug(self):
        self.assertEqual(slugify_address('12 High St., Flat 3'), '12-high-st-flat-3')
        self.assertEqual(slugify_address('  '), '')

    def test_filename(self):
        self.assertEqual(
            generate_report_filename('12 High St., Flat 3', self.end_date),
            'landlord-audit-report-12-high-st-flat-3-2026-03-14.pdf'
        )
        self.assertEqual(
            generate_report_filename('', self.end_date),
            'landlord-audit-report-property-2026-03-14.pdf'
        )


class TestReportDataAssembler(unittest.TestCase):
    """Test the ReportDataAssembler class."""

    def setUp(self):
        options = [('A', 10), ('B', 7), ('C', 6), ('D', 4), ('E', 3), ('F', 1)]
        self.questions = [
            make_question('1.1', options=options, critical=True),
            make_question('1.2', options=options),
            make_question('1.3', options=options),
            make_question('2.1', category='Communication', subcategory='Notices', options=options),
            make_question('2.2', category='Communication', subcategory='Notices', options=options),
            make_question('2.3', category='Communication', subcategory='Notices', options=options),
        ]
        self.responses = [
            Response('audit-1', 'q-1.1', 3),
            Response('audit-1', 'q-1.2', 4, comment='Landlord keeps paper copies only'),
            Response('audit-1', 'q-1.3', 7),
            Response('audit-1', 'q-2.1', 6),
            Response('audit-1', 'q-2.2', 10),
            Response('audit-1', 'q-2.3', 1),
        ]
        self.engine = ScoringEngine()
        self.scores = self.engine.compute_scores(self.responses, self.questions)
        self.assembler = ReportDataAssembler()

    def assemble(self, audit):
        return self.assembler.assemble(audit, self.responses, self.questions, self.scores)

    def test_pending_audit_is_not_ready(self):
        with self.assertRaises(NotReady):
            self.assemble(make_audit(status='pending'))

    def test_completed_audit_is_ready(self):
        audit = make_audit()
        audit.advance_status('completed', datetime(2026, 3, 20))
        report_data = self.assemble(audit)
        self.assertEqual(report_data.audit_end_date, datetime(2026, 3, 20))
        self.assertTrue(report_data.report_id.startswith('LRA-2026-03-'))

    def test_buckets_use_question_cut_points(self):
        report_data = self.assemble(make_audit())
        buckets = report_data.question_responses

        # Categories sort by name: Communication before Documentation
        self.assertEqual([e.number for e in buckets['red']], ['2.3', '1.1'])
        self.assertEqual([e.number for e in buckets['orange']], ['2.1', '1.2'])
        self.assertEqual([e.number for e in buckets['green']], ['2.2', '1.3'])
        self.assertEqual(report_data.get_counts(), {'red': 2, 'orange': 2, 'green': 2})

    def test_bucket_entries(self):
        report_data = self.assemble(make_audit())
        red = report_data.question_responses['red']
        orange = report_data.question_responses['orange']
        green = report_data.question_responses['green']

        self.assertEqual(red[1].answer, 'E')
        self.assertEqual(red[1].score, 3)
        self.assertTrue(red[1].is_critical)
        self.assertEqual(red[1].comment, '1.1 is poor')
        self.assertEqual(orange[1].comment, 'Landlord keeps paper copies only')
        self.assertEqual(orange[0].comment, '2.1 is patchy')
        self.assertEqual(green[0].comment, '')
        self.assertNotIn('comment', green[0].to_dict())

    def test_headline_fields(self):
        report_data = self.assemble(make_audit())

        self.assertEqual(report_data.overall_score, self.scores.overall_score)
        self.assertEqual(report_data.risk_tier, self.scores.risk_tier)
        self.assertEqual(report_data.audit_tier, 'tier_2')
        self.assertEqual(report_data.audit_tier_label, 'Tier 2 - Enhanced')
        self.assertEqual(report_data.filename, 'landlord-audit-report-12-high-st-flat-3-2026-03-14.pdf')
        self.assertEqual(report_data.audit_start_date, datetime(2026, 3, 7, 9, 0))
        self.assertEqual(report_data.audit_end_date, datetime(2026, 3, 14, 9, 30))
        self.assertEqual(set(report_data.category_scores), {'Documentation', 'Communication'})
        self.assertEqual(len(report_data.subcategory_scores), 2)

    def test_critical_findings(self):
        report_data = self.assemble(make_audit())
        self.assertEqual(report_data.critical_findings, [
            'Notices: Question 2.3 text?',
            'Tenancy Agreements: Question 1.1 text?',
        ])

    def test_recommendations_grouped_by_category(self):
        report_data = self.assemble(make_audit())
        grouped = report_data.recommendations_by_category

        self.assertEqual(list(grouped.keys()), ['Communication', 'Documentation'])
        documentation = grouped['Documentation'][0]
        self.assertEqual(documentation['subcategory'], 'Tenancy Agreements')
        self.assertTrue(documentation['is_critical'])

    def test_to_dict(self):
        data = self.assemble(make_audit()).to_dict()

        self.assertEqual(data['audit_end_date'], '2026-03-14T09:30:00')
        self.assertTrue(re.match(r'^LRA-2026-03-[0-9A-Z]{6}$', data['report_id']))
        self.assertEqual(len(data['question_responses']['red']), 2)
        self.assertIn('documentation_reviewed', data['audit_scope'])


if __name__ == '__main__':
    unittest.main()
