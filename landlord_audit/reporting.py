"""Reporting module for rendering audit reports as Markdown, HTML, PDF and JSON."""

import io
import logging
import markdown
from datetime import datetime
from typing import Dict, Any, Optional
from pathlib import Path
from xml.sax.saxutils import escape

from jinja2 import Environment, FileSystemLoader
from reportlab.lib import colors
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import getSampleStyleSheet
from reportlab.lib.units import mm
from reportlab.platypus import SimpleDocTemplate, Paragraph, Spacer, Table, TableStyle, PageBreak

try:
    from weasyprint import HTML
    WEASYPRINT_AVAILABLE = True
except (ImportError, OSError):
    WEASYPRINT_AVAILABLE = False

from landlord_audit.config import get_app_settings
from landlord_audit.report_data import ReportData
from landlord_audit.utils import (
    get_templates_path, save_json_file, format_report_date, get_color_hex, get_color_icon
)

logger = logging.getLogger(__name__)


class ReportGenerator:
    """Renders ReportData into the report formats offered for download."""

    def __init__(self, brand_name: Optional[str] = None, author: Optional[str] = None,
                 use_weasyprint: bool = True):
        settings = get_app_settings()
        self.brand_name = brand_name or settings['brand_name']
        self.author = author or settings['report_author']
        self.use_weasyprint = use_weasyprint and WEASYPRINT_AVAILABLE
        self.templates_path = get_templates_path()
        self.jinja_env = Environment(
            loader=FileSystemLoader(str(self.templates_path)),
            trim_blocks=True,
            lstrip_blocks=True,
        )

    def generate_markdown_report(self, report_data: ReportData,
                                 generated_date: Optional[datetime] = None) -> str:
        """Render the report as Markdown."""
        template = self.jinja_env.get_template('report.md.j2')
        generated_date = generated_date or datetime.now()

        return template.render(
            data=report_data,
            counts=report_data.get_counts(),
            generated_date=format_report_date(generated_date),
            format_date=format_report_date,
            icon=get_color_icon,
        )

    def generate_html_report(self, report_data: ReportData,
                             generated_date: Optional[datetime] = None) -> str:
        """Render the report as a standalone HTML page."""
        markdown_content = self.generate_markdown_report(report_data, generated_date)
        return self._convert_markdown_to_html(markdown_content, report_data.title)

    def generate_pdf_report(self, report_data: ReportData,
                            generated_date: Optional[datetime] = None) -> bytes:
        """Render the report as PDF bytes."""
        if self.use_weasyprint:
            html_content = self.generate_html_report(report_data, generated_date)
            return HTML(string=html_content).write_pdf()
        return self._generate_pdf_with_reportlab(report_data, generated_date or datetime.now())

    def export_report_json(self, report_data: ReportData, file_path: str) -> bool:
        """Export report data as a JSON file."""
        return save_json_file(report_data.to_dict(), file_path)

    def _convert_markdown_to_html(self, markdown_content: str, title: str) -> str:
        """Convert markdown to HTML."""
        html_content = markdown.markdown(markdown_content, extensions=['tables'])

        styled_html = f"""
        <!DOCTYPE html>
        <html>
        <head>
            <meta charset="utf-8">
            <title>{title}</title>
            <meta name="author" content="{self.author}">
            <style>
                body {{ font-family: Helvetica, Arial, sans-serif; margin: 40px; line-height: 1.5; color: #222; }}
                h1 {{ color: #1b5e20; }}
                h2, h3 {{ color: #1565c0; }}
                table {{ border-collapse: collapse; width: 100%; margin-bottom: 16px; }}
                th, td {{ border: 1px solid #ddd; padding: 6px; text-align: left; font-size: 0.9em; }}
                th {{ background-color: #f2f2f2; }}
            </style>
        </head>
        <body>
            {html_content}
        </body>
        </html>
        """

        return styled_html

    def _generate_pdf_with_reportlab(self, report_data: ReportData, generated_date: datetime) -> bytes:
        """Generate the PDF with ReportLab."""
        buffer = io.BytesIO()
        doc = SimpleDocTemplate(
            buffer,
            pagesize=A4,
            title=report_data.title,
            author=self.brand_name,
            subject="Risk Assessment Report",
            creator=self.author,
            leftMargin=18 * mm,
            rightMargin=18 * mm,
        )
        styles = getSampleStyleSheet()
        story = []

        # Cover
        story.append(Paragraph("Landlord Risk Audit Report", styles['Title']))
        story.append(Spacer(1, 12))
        cover_rows = [
            ['Property', report_data.property_address],
            ['Landlord', report_data.landlord_name or 'Not provided'],
            ['Auditor', report_data.auditor_name or 'Not provided'],
            ['Audit period', f"{format_report_date(report_data.audit_start_date)} to "
                             f"{format_report_date(report_data.audit_end_date)}"],
            ['Audit level', report_data.audit_tier_label],
            ['Report ID', report_data.report_id],
            ['Generated', format_report_date(generated_date)],
        ]
        story.append(self._table(cover_rows, header=False))
        story.append(Spacer(1, 18))

        overall_text = (f"Overall score: <b>{report_data.overall_score:.1f} / 10</b> "
                        f"<font color='{get_color_hex(report_data.risk_tier)}'>({report_data.risk_label})</font>")
        story.append(Paragraph(overall_text, styles['Heading2']))

        if report_data.critical_findings:
            story.append(Paragraph("Critical Findings", styles['Heading3']))
            for finding in report_data.critical_findings:
                story.append(Paragraph(f"• {escape(finding)}", styles['Normal']))
        story.append(PageBreak())

        # Results
        story.append(Paragraph("Category Scores", styles['Heading2']))
        category_rows = [['Category', 'Score', 'Rating']]
        row_colors = []
        for name, category in report_data.category_scores.items():
            category_rows.append([name, f"{category['score']:.1f}", category['risk_level'].title()])
            row_colors.append(category['color'])
        story.append(self._table(category_rows, row_colors=row_colors))
        story.append(Spacer(1, 12))

        story.append(Paragraph("Subcategory Scores", styles['Heading2']))
        sub_rows = [['Subcategory', 'Category', 'Score']]
        row_colors = []
        for sub in report_data.subcategory_scores:
            sub_rows.append([sub['name'], sub['category'], f"{sub['score']:.1f}"])
            row_colors.append(sub['color'])
        story.append(self._table(sub_rows, row_colors=row_colors))

        # Recommendations
        story.append(Paragraph("Recommended Actions", styles['Heading2']))
        if not report_data.recommendations_by_category:
            story.append(Paragraph("No subcategory requires action.", styles['Normal']))
        for category, items in report_data.recommendations_by_category.items():
            story.append(Paragraph(escape(category), styles['Heading3']))
            for rec in items:
                score_text = f" ({rec['score']:.1f})" if rec['score'] is not None else ''
                story.append(Paragraph(
                    f"<b>{rec['priority']}. {escape(rec['subcategory'])}</b>{score_text} - {rec['impact']}",
                    styles['Normal']
                ))
                for suggestion in rec['suggestions']:
                    story.append(Paragraph(f"• {escape(suggestion)}", styles['Normal']))
                story.append(Spacer(1, 6))
        story.append(PageBreak())

        # Detailed results
        story.append(Paragraph("Detailed Results", styles['Heading2']))
        for color, heading in (('red', 'Red (Low) Scoring Answers'),
                               ('orange', 'Orange (Medium) Scoring Answers'),
                               ('green', 'Green (High) Scoring Answers')):
            story.append(Paragraph(heading, styles['Heading3']))
            entries = report_data.question_responses[color]
            if not entries:
                story.append(Paragraph("None.", styles['Normal']))
                continue
            rows = [['#', 'Question', 'Answer', 'Comment']]
            for entry in entries:
                rows.append([
                    entry.number,
                    Paragraph(escape(entry.question_text), styles['BodyText']),
                    Paragraph(escape(entry.answer), styles['BodyText']),
                    Paragraph(escape(entry.comment or ''), styles['BodyText']),
                ])
            story.append(self._table(rows, col_widths=[12 * mm, 70 * mm, 45 * mm, 47 * mm],
                                     row_colors=[color] * len(entries)))

        doc.build(story)
        return buffer.getvalue()

    def _table(self, rows, header: bool = True, row_colors=None, col_widths=None) -> Table:
        table = Table(rows, colWidths=col_widths, hAlign='LEFT')
        style = [
            ('GRID', (0, 0), (-1, -1), 0.5, colors.HexColor('#dddddd')),
            ('VALIGN', (0, 0), (-1, -1), 'TOP'),
            ('FONTSIZE', (0, 0), (-1, -1), 9),
        ]
        if header:
            style.append(('BACKGROUND', (0, 0), (-1, 0), colors.HexColor('#f2f2f2')))
            style.append(('FONTNAME', (0, 0), (-1, 0), 'Helvetica-Bold'))
        offset = 1 if header else 0
        for index, color in enumerate(row_colors or []):
            # Traffic-light marker down the left edge of the row
            style.append(('LINEBEFORE', (0, index + offset), (0, index + offset), 4,
                          colors.HexColor(get_color_hex(color))))
        table.setStyle(TableStyle(style))
        return table

    def create_report_package(self, report_data: ReportData, output_dir: str) -> Dict[str, str]:
        """Write JSON, Markdown, HTML and PDF versions of the report."""
        output_path = Path(output_dir)
        output_path.mkdir(parents=True, exist_ok=True)
        stem = report_data.filename[:-len('.pdf')]
        generated_date = datetime.now()

        package_files = {}

        json_path = output_path / f"{stem}.json"
        if self.export_report_json(report_data, str(json_path)):
            package_files['json'] = str(json_path)

        md_path = output_path / f"{stem}.md"
        md_path.write_text(self.generate_markdown_report(report_data, generated_date), encoding='utf-8')
        package_files['markdown'] = str(md_path)

        html_path = output_path / f"{stem}.html"
        html_path.write_text(self.generate_html_report(report_data, generated_date), encoding='utf-8')
        package_files['html'] = str(html_path)

        pdf_path = output_path / report_data.filename
        pdf_path.write_bytes(self.generate_pdf_report(report_data, generated_date))
        package_files['pdf'] = str(pdf_path)

        logger.info(f"Wrote report package for {report_data.report_id} to {output_path}")
        return package_files
