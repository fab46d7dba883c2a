"""Tests for the report generator."""

import json
import shutil
import tempfile
import unittest
from datetime import datetime
from pathlib import Path

# Import the modules to test
import sys
sys.path.append('..')

from landlord_audit.models import Response
from landlord_audit.report_data import ReportDataAssembler
from landlord_audit.reporting import ReportGenerator
from landlord_audit.scoring import ScoringEngine
from catalog_fixtures import make_question, make_audit


def build_report_data():
    questions = [
        make_question('1.1', critical=True),
        make_question('1.2'),
        make_question('2.1', category='Communication', subcategory='Notices'),
    ]
    responses = [
        Response('audit-1', 'q-1.1', 1),
        Response('audit-1', 'q-1.2', 10),
        Response('audit-1', 'q-2.1', 5),
    ]
    scores = ScoringEngine().compute_scores(responses, questions)
    return ReportDataAssembler().assemble(make_audit(), responses, questions, scores)


class TestReportGenerator(unittest.TestCase):
    """Test the ReportGenerator class."""

    def setUp(self):
        self.generator = ReportGenerator(brand_name='Test Brand', author='Test Author', use_weasyprint=False)
        self.report_data = build_report_data()
        self.generated = datetime(2026, 3, 15)
        self.temp_dir = tempfile.mkdtemp()

    def tearDown(self):
        shutil.rmtree(self.temp_dir)

    def test_markdown_report(self):
        content = self.generator.generate_markdown_report(self.report_data, self.generated)

        self.assertIn('# Landlord Risk Audit Report', content)
        self.assertIn('**Property:** 12 High St., Flat 3', content)
        self.assertIn(f"**Report ID:** {self.report_data.report_id}", content)
        self.assertIn('**Generated:** 15 March 2026', content)
        self.assertIn('**Audit period:** 7 March 2026 to 14 March 2026', content)
        self.assertIn('### Critical Findings', content)
        self.assertIn('- Tenancy Agreements: Question 1.1 text?', content)
        self.assertIn('Fix 1.1 now', content)
        self.assertIn('| 2.1 | Question 2.1 text? | Sometimes | 2.1 is patchy |', content)

    def test_markdown_sections_in_order(self):
        content = self.generator.generate_markdown_report(self.report_data, self.generated)
        positions = [content.index(heading) for heading in (
            '## Executive Summary', '## Methodology', '### Category Scores',
            '## Recommended Actions', '## Detailed Results',
        )]
        self.assertEqual(positions, sorted(positions))

    def test_html_report(self):
        html = self.generator.generate_html_report(self.report_data, self.generated)

        self.assertIn('<table>', html)
        self.assertIn('<title>Landlord Risk Audit Report - 12 High St., Flat 3</title>', html)
        self.assertIn('content="Test Author"', html)

    def test_pdf_report(self):
        pdf = self.generator.generate_pdf_report(self.report_data, self.generated)

        self.assertIsInstance(pdf, bytes)
        self.assertTrue(pdf.startswith(b'%PDF'))

    def test_export_json(self):
        file_path = str(Path(self.temp_dir) / "report.json")
        self.assertTrue(self.generator.export_report_json(self.report_data, file_path))

        with open(file_path, 'r', encoding='utf-8') as f:
            data = json.load(f)
        self.assertEqual(data['report_id'], self.report_data.report_id)
        self.assertEqual(data['overall_score'], self.report_data.overall_score)
        self.assertEqual(len(data['question_responses']['red']), 1)

    def test_report_package(self):
        files = self.generator.create_report_package(self.report_data, self.temp_dir)

        self.assertEqual(set(files), {'json', 'markdown', 'html', 'pdf'})
        self.assertTrue(files['pdf'].endswith(self.report_data.filename))
        for path in files.values():
            self.assertTrue(Path(path).exists())


if __name__ == '__main__':
    unittest.main()
