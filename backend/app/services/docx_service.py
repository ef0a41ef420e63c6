"""
Экспорт аналитического отчёта в docx: титульный лист, таблица потерь и текст анализа.
Текст анализа приходит в упрощённом Markdown (## заголовки, - списки, **жирный**).
"""
import re
from datetime import date
from decimal import Decimal
from io import BytesIO
from typing import Optional

from docx import Document
from docx.enum.text import WD_ALIGN_PARAGRAPH, WD_BREAK
from docx.shared import Pt, RGBColor

from app.services.derivation import FinancialSummary

REPORT_TITLE = "АНАЛИТИЧЕСКИЙ ОТЧЕТ"
REPORT_SUBTITLE = "Производственные и финансовые показатели"
REPORT_OBJECT = 'Судостроительный комплекс "ЗВЕЗДА"'
REPORT_FOOTER = "Сгенерировано автоматической системой мониторинга"

DOCX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"

_BOLD_RE = re.compile(r"\*\*(.+?)\*\*")
_TITLE_COLOR = RGBColor(0x0F, 0x17, 0x2A)
_MUTED_COLOR = RGBColor(0x47, 0x55, 0x69)


def report_filename(today: Optional[date] = None) -> str:
    today = today or date.today()
    return f"SSK_Report_{today.isoformat()}.docx"


def format_rub(value: Decimal) -> str:
    """1234567.5 → «1 234 567,50 ₽», целые без копеек."""
    value = Decimal(value)
    if value == value.to_integral_value():
        text = f"{int(value):,}".replace(",", " ")
    else:
        text = f"{value:,.2f}".replace(",", " ").replace(".", ",")
    return f"{text} ₽"


def _add_runs(paragraph, text: str) -> None:
    """Разбить строку на обычные и **жирные** фрагменты."""
    pos = 0
    for m in _BOLD_RE.finditer(text):
        if m.start() > pos:
            paragraph.add_run(text[pos:m.start()])
        paragraph.add_run(m.group(1)).bold = True
        pos = m.end()
    if pos < len(text):
        paragraph.add_run(text[pos:])


def _add_title_page(doc, start_date: Optional[str], end_date: Optional[str], today: date) -> None:
    for _ in range(6):
        doc.add_paragraph()
    p = doc.add_paragraph()
    p.alignment = WD_ALIGN_PARAGRAPH.CENTER
    run = p.add_run(REPORT_TITLE)
    run.bold = True
    run.font.size = Pt(24)
    run.font.color.rgb = _TITLE_COLOR

    p = doc.add_paragraph()
    p.alignment = WD_ALIGN_PARAGRAPH.CENTER
    run = p.add_run(REPORT_SUBTITLE)
    run.font.size = Pt(14)
    run.font.color.rgb = _MUTED_COLOR

    for _ in range(4):
        doc.add_paragraph()
    period = f"с {start_date} по {end_date}" if start_date and end_date else "последние записи журнала"
    for label, value in (
        ("Объект", REPORT_OBJECT),
        ("Период анализа", period),
        ("Дата формирования", today.strftime("%d.%m.%Y")),
    ):
        p = doc.add_paragraph()
        p.alignment = WD_ALIGN_PARAGRAPH.CENTER
        p.add_run(f"{label}: ").bold = True
        p.add_run(value)

    for _ in range(6):
        doc.add_paragraph()
    p = doc.add_paragraph()
    p.alignment = WD_ALIGN_PARAGRAPH.CENTER
    run = p.add_run(REPORT_FOOTER)
    run.font.size = Pt(9)
    run.font.color.rgb = _MUTED_COLOR
    run.add_break(WD_BREAK.PAGE)


def _add_financial_table(doc, summary: FinancialSummary) -> None:
    doc.add_heading("Финансовые потери", level=2)
    table = doc.add_table(rows=1, cols=3)
    table.style = "Table Grid"
    header = table.rows[0].cells
    header[0].text = "Показатель"
    header[1].text = "Сумма"
    header[2].text = "Ставка"
    rows = [
        ("Общие потери", summary.total_losses, ""),
        ("Потери от брака", summary.total_defect_cost, f"{format_rub(summary.cost_per_defect)}/шт"),
        ("Потери от простоя", summary.total_downtime_cost, f"{format_rub(summary.cost_per_minute_downtime)}/мин"),
    ]
    for label, amount, rate in rows:
        cells = table.add_row().cells
        cells[0].text = label
        cells[1].text = format_rub(amount)
        cells[2].text = rate


def _add_analysis(doc, analysis: str) -> None:
    doc.add_heading("Результаты анализа", level=2)
    for raw in analysis.splitlines():
        line = raw.strip()
        if not line:
            continue
        if line.startswith("#"):
            doc.add_heading(line.lstrip("#").strip(), level=3)
        elif line.startswith("- ") or line.startswith("* "):
            _add_runs(doc.add_paragraph(style="List Bullet"), line[2:].strip())
        else:
            _add_runs(doc.add_paragraph(), line)


def render_report(
    analysis: str,
    summary: FinancialSummary,
    start_date: Optional[str] = None,
    end_date: Optional[str] = None,
    today: Optional[date] = None,
) -> bytes:
    """Собрать отчёт и вернуть docx как bytes."""
    today = today or date.today()
    doc = Document()
    doc.styles["Normal"].font.name = "Calibri"
    doc.styles["Normal"].font.size = Pt(11)
    _add_title_page(doc, start_date, end_date, today)
    _add_financial_table(doc, summary)
    _add_analysis(doc, analysis)
    buffer = BytesIO()
    doc.save(buffer)
    buffer.seek(0)
    return buffer.getvalue()
