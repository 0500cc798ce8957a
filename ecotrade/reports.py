# reports.py
from datetime import datetime
from io import BytesIO

from reportlab.lib import colors
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import getSampleStyleSheet, ParagraphStyle
from reportlab.lib.units import inch
from reportlab.platypus import SimpleDocTemplate, Table, TableStyle, Paragraph, Spacer
from sqlalchemy import func

from ecotrade.models import (db, User, Order, OrderStatus, Plant, PlasticSubmission,
                             SubmissionStatus)

BRAND_GREEN = colors.HexColor('#2E7D32')


def summary():
    verified = PlasticSubmission.status == SubmissionStatus.VERIFIED

    total_kg = db.session.query(func.sum(PlasticSubmission.weight)).filter(verified).scalar() or 0

    by_type = db.session.query(
        PlasticSubmission.plastic_type,
        func.sum(PlasticSubmission.weight).label('total')
    ).filter(verified).group_by(PlasticSubmission.plastic_type).all()

    plastic_by_type = []
    for plastic_type, total in by_type:
        share = (total / total_kg * 100) if total_kg > 0 else 0
        plastic_by_type.append({
            'type': plastic_type or 'UNKNOWN',
            'total_kg': round(total, 2),
            'percentage': round(share, 1),
        })

    submission_counts = dict(db.session.query(
        PlasticSubmission.status, func.count(PlasticSubmission.id)
    ).group_by(PlasticSubmission.status).all())

    order_counts = dict(db.session.query(
        Order.status, func.count(Order.id)
    ).group_by(Order.status).all())

    total_points = db.session.query(func.sum(User.eco_points)).scalar() or 0

    return {
        'verified_plastic_kg': round(total_kg, 2),
        'plastic_by_type': plastic_by_type,
        'submissions': {s.value: submission_counts.get(s, 0) for s in SubmissionStatus},
        'orders': {s.value: order_counts.get(s, 0) for s in OrderStatus},
        'eco_points_in_circulation': int(total_points),
        'plants_tracked': Plant.query.count(),
    }


def _table(data, widths, header_color):
    table = Table(data, colWidths=widths)
    table.setStyle(TableStyle([
        ('BACKGROUND', (0, 0), (-1, 0), header_color),
        ('TEXTCOLOR', (0, 0), (-1, 0), colors.whitesmoke),
        ('ALIGN', (0, 0), (-1, -1), 'CENTER'),
        ('FONTNAME', (0, 0), (-1, 0), 'Helvetica-Bold'),
        ('BOTTOMPADDING', (0, 0), (-1, 0), 10),
        ('GRID', (0, 0), (-1, -1), 1, colors.gray),
    ]))
    return table


def build_pdf(stats=None):
    """Render the sustainability summary as a PDF, returned as a buffer."""
    stats = stats or summary()

    buffer = BytesIO()
    doc = SimpleDocTemplate(buffer, pagesize=A4, topMargin=30)
    styles = getSampleStyleSheet()
    title_style = ParagraphStyle(
        'ReportTitle',
        parent=styles['Heading1'],
        fontSize=16,
        textColor=BRAND_GREEN,
        spaceAfter=30,
        alignment=1,
    )

    elements = [
        Paragraph('ECOTRADE SUSTAINABILITY REPORT', title_style),
        Paragraph(f"Generated: {datetime.now().strftime('%Y-%m-%d %H:%M')}", styles['Normal']),
        Spacer(1, 20),
    ]

    metrics = [
        ['METRIC', 'VALUE'],
        ['Verified plastic recycled', f"{stats['verified_plastic_kg']} kg"],
        ['EcoPoints in circulation', str(stats['eco_points_in_circulation'])],
        ['Plants tracked', str(stats['plants_tracked'])],
    ]
    elements.append(_table(metrics, [3 * inch, 2 * inch], BRAND_GREEN))
    elements.append(Spacer(1, 20))

    elements.append(Paragraph('Plastic submissions', styles['Heading2']))
    elements.append(Spacer(1, 10))
    rows = [['STATUS', 'COUNT']]
    rows += [[status, str(count)] for status, count in stats['submissions'].items()]
    elements.append(_table(rows, [2.5 * inch, 1.5 * inch], colors.HexColor('#17A2B8')))
    elements.append(Spacer(1, 20))

    if stats['plastic_by_type']:
        elements.append(Paragraph('Verified plastic by type', styles['Heading2']))
        elements.append(Spacer(1, 10))
        rows = [['TYPE', 'WEIGHT (kg)', 'SHARE']]
        for entry in stats['plastic_by_type']:
            rows.append([entry['type'], str(entry['total_kg']), f"{entry['percentage']}%"])
        elements.append(_table(rows, [2 * inch, 1.5 * inch, 1.5 * inch],
                               colors.HexColor('#28A745')))
        elements.append(Spacer(1, 20))

    elements.append(Paragraph('Orders', styles['Heading2']))
    elements.append(Spacer(1, 10))
    rows = [['STATUS', 'COUNT']]
    rows += [[status, str(count)] for status, count in stats['orders'].items()]
    elements.append(_table(rows, [2.5 * inch, 1.5 * inch], colors.HexColor('#343A40')))

    doc.build(elements)
    buffer.seek(0)
    return buffer
