# bidtracker/services/exports.py
import csv
import logging
from io import BytesIO, StringIO
from datetime import datetime
from xml.sax.saxutils import escape

from reportlab.lib import colors
from reportlab.lib.pagesizes import letter, landscape
from reportlab.lib.styles import getSampleStyleSheet
from reportlab.lib.units import inch
from reportlab.platypus import SimpleDocTemplate, Paragraph, Spacer, Table, TableStyle

logger = logging.getLogger(__name__)

CSV_COLUMNS = [
    ('Company', 'company'),
    ('Project Name', 'project_name'),
    ('Client', 'client_name'),
    ('Location', 'location'),
    ('Estimator', 'estimator_display'),
    ('Deadline', 'deadline'),
    ('Follow-Up Date', 'follow_up_date'),
    ('Status', 'status'),
    ('Bid Amount', 'bid_amount'),
    ('Description', 'description'),
    ('Created', 'created_at'),
]


def _cell(job, field):
    if field == 'estimator_display':
        return job.get('estimator_display') or job.get('estimator_name') or ''
    value = job.get(field)
    if value is None:
        return ''
    if field == 'bid_amount':
        return f"{float(value):.2f}"
    if field == 'created_at':
        # Keep only the date part of the timestamp
        return str(value)[:10]
    return str(value)


def jobs_to_csv(jobs):
    """CSV text with every field quoted, one row per job in the given order."""
    buffer = StringIO()
    writer = csv.writer(buffer, quoting=csv.QUOTE_ALL, lineterminator='\n')
    writer.writerow([header for header, _ in CSV_COLUMNS])
    for job in jobs:
        writer.writerow([_cell(job, field) for _, field in CSV_COLUMNS])
    return buffer.getvalue()


def _money(value):
    return f"${value:,.2f}"


def jobs_to_pdf(jobs, summary, company_name='Bid Tracker', title='Bid Report'):
    """Print-formatted PDF of the job list with a summary table. Returns bytes."""
    buffer = BytesIO()

    doc = SimpleDocTemplate(
        buffer,
        pagesize=landscape(letter),
        rightMargin=36,
        leftMargin=36,
        topMargin=36,
        bottomMargin=36,
        title=title,
    )

    elements = []
    styles = getSampleStyleSheet()
    title_style = styles['Heading1']
    heading2_style = styles['Heading2']
    normal_style = styles['Normal']
    small_style = styles['BodyText'].clone('Small', fontSize=8, leading=10)

    elements.append(Paragraph(escape(f"{company_name} - {title}"), title_style))
    current_date = datetime.now().strftime("%B %d, %Y")
    elements.append(Paragraph(f"Generated: {current_date}", normal_style))
    elements.append(Spacer(1, 0.2*inch))

    elements.append(Paragraph("Summary", heading2_style))
    summary_data = [
        ["Total Jobs", str(summary.get('total_jobs', 0)),
         "Total Bid Value", _money(summary.get('total_bid_value', 0))],
        ["In Progress", str(summary.get('in_progress_jobs', 0)),
         "Won Bid Value", _money(summary.get('won_bid_value', 0))],
        ["Submitted", str(summary.get('submitted_jobs', 0)),
         "Win Rate", f"{summary.get('win_rate', 0)}%"],
        ["Overdue", str(summary.get('overdue_jobs', 0)),
         "Due This Week", str(summary.get('due_this_week', 0))],
    ]
    summary_table = Table(summary_data, colWidths=[1.4*inch, 1*inch, 1.4*inch, 1.4*inch])
    summary_table.setStyle(TableStyle([
        ('FONTNAME', (0, 0), (0, -1), 'Helvetica-Bold'),
        ('FONTNAME', (2, 0), (2, -1), 'Helvetica-Bold'),
        ('GRID', (0, 0), (-1, -1), 0.5, colors.grey),
        ('BACKGROUND', (0, 0), (0, -1), colors.whitesmoke),
        ('BACKGROUND', (2, 0), (2, -1), colors.whitesmoke),
    ]))
    elements.append(summary_table)
    elements.append(Spacer(1, 0.25*inch))

    elements.append(Paragraph(f"Jobs ({len(jobs)})", heading2_style))
    if not jobs:
        elements.append(Paragraph("No jobs match the current filters.", normal_style))
    else:
        table_data = [["Project", "Client", "Location", "Estimator", "Deadline", "Status", "Bid Amount"]]
        for job in jobs:
            amount = job.get('bid_amount')
            table_data.append([
                Paragraph(escape(job.get('project_name') or 'N/A'), small_style),
                Paragraph(escape(job.get('client_name') or 'N/A'), small_style),
                Paragraph(escape(job.get('location') or 'N/A'), small_style),
                Paragraph(escape(_cell(job, 'estimator_display') or 'N/A'), small_style),
                job.get('deadline') or 'N/A',
                job.get('status') or 'N/A',
                _money(amount) if amount is not None else '',
            ])

        jobs_table = Table(
            table_data,
            colWidths=[2.3*inch, 1.8*inch, 1.5*inch, 1.3*inch, 0.9*inch, 0.9*inch, 1*inch],
            repeatRows=1,
        )
        jobs_table.setStyle(TableStyle([
            ('BACKGROUND', (0, 0), (-1, 0), colors.lightgrey),
            ('FONTNAME', (0, 0), (-1, 0), 'Helvetica-Bold'),
            ('FONTSIZE', (0, 0), (-1, -1), 8),
            ('VALIGN', (0, 0), (-1, -1), 'TOP'),
            ('ALIGN', (-1, 1), (-1, -1), 'RIGHT'),
            ('GRID', (0, 0), (-1, -1), 0.5, colors.grey),
        ]))
        elements.append(jobs_table)

    doc.build(elements)
    pdf = buffer.getvalue()
    buffer.close()
    logger.info(f"Generated PDF report with {len(jobs)} jobs ({len(pdf)} bytes)")
    return pdf
