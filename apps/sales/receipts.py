"""PDF receipt for one completed sale, drawn with the ReportLab canvas."""
from datetime import date, datetime
from io import BytesIO

from django.utils import timezone
from reportlab.lib.pagesizes import A4
from reportlab.lib.units import mm
from reportlab.pdfgen import canvas

from apps.common.exceptions import ValidationError
from apps.common.money import format_brl, per_installment
from apps.sales.models import PaymentMethod

PRODUCT_NAME_LIMIT = 30
ELLIPSIS = "..."
UNKNOWN_PAYMENT_LABEL = "Desconhecido"
PAYMENT_LABELS = {
    PaymentMethod.PIX.value: "PIX",
    PaymentMethod.CARD.value: "Cartao de Credito",
    PaymentMethod.CASH.value: "Dinheiro",
}

MARGIN = 15 * mm
COLUMN_WIDTHS = (80 * mm, 20 * mm, 25 * mm, 35 * mm)
SEPARATOR_GRAY = 200 / 255.0
HEADER_FILL = 240 / 255.0

_MISSING = object()


def receipt_filename(sale_id):
    return f"venda-{sale_id}.pdf"


def truncate_name(name, limit=PRODUCT_NAME_LIMIT):
    name = str(name or "")
    if len(name) <= limit:
        return name
    return name[: limit - len(ELLIPSIS)] + ELLIPSIS


def payment_label(method):
    return PAYMENT_LABELS.get(method, UNKNOWN_PAYMENT_LABEL)


def _get(source, name, default=_MISSING):
    if isinstance(source, dict):
        return source.get(name, default)
    return getattr(source, name, default)


def _required(source, name, owner):
    value = _get(source, name)
    if value is _MISSING or value is None:
        raise ValidationError({name: f"Campo obrigatorio ausente em {owner}."})
    return value


def _optional_text(source, name):
    if source is None:
        return ""
    value = _get(source, name, "")
    return "" if value is None else str(value)


def _format_date(value):
    if isinstance(value, datetime):
        if timezone.is_aware(value):
            value = timezone.localtime(value)
        return value.strftime("%d/%m/%Y")
    if isinstance(value, date):
        return value.strftime("%d/%m/%Y")
    raise ValidationError({"created_at": "Data da venda invalida."})


def _item_rows(items):
    if not items:
        raise ValidationError({"items": "O comprovante precisa de pelo menos um item."})
    rows = []
    for item in items:
        name = _get(item, "product_name", None) or _get(item, "name", None)
        if not name:
            raise ValidationError({"product_name": "Campo obrigatorio ausente em item."})
        rows.append(
            (
                truncate_name(name),
                str(_required(item, "quantity", "item")),
                format_brl(_required(item, "unit_price", "item")),
                format_brl(_required(item, "total_price", "item")),
            )
        )
    return rows


class _ReceiptPage:
    def __init__(self, buffer, sale_id):
        self.canvas = canvas.Canvas(buffer, pagesize=A4, invariant=1, pageCompression=0)
        self.canvas.setTitle(f"Comprovante de venda #{sale_id}")
        self.canvas.setAuthor("PDV")
        self.canvas.setCreator("PDV")
        self.width, self.height = A4
        self.cursor = MARGIN
        self.current_font = ("normal", 12)
        self.repeat_heading = None

    def y(self):
        return self.height - self.cursor

    def advance(self, amount_mm):
        self.cursor += amount_mm * mm
        if self.cursor > self.height - 2 * MARGIN:
            self.canvas.showPage()
            self.cursor = MARGIN
            # showPage resets the graphics state, font included.
            font = self.current_font
            if self.repeat_heading:
                self.repeat_heading()
            self.font(*font)

    def font(self, style, size):
        self.current_font = (style, size)
        name = {"bold": "Helvetica-Bold", "italic": "Helvetica-Oblique"}.get(style, "Helvetica")
        self.canvas.setFont(name, size)

    def text(self, value, x):
        self.canvas.drawString(x, self.y(), value)

    def separator(self):
        self.canvas.setStrokeGray(SEPARATOR_GRAY)
        self.canvas.line(MARGIN, self.y(), self.width - MARGIN, self.y())
        self.advance(8)


def render_receipt(sale, customer, items):
    """Render the receipt and return the PDF bytes.

    ``sale``, ``customer`` and ``items`` may be model instances or plain
    mappings with the same field names; ``customer`` may be ``None`` when
    the sale's customer no longer exists.
    """
    sale_id = _required(sale, "id", "venda")
    total_amount = _required(sale, "total_amount", "venda")
    method = _required(sale, "payment_method", "venda")
    installments = _required(sale, "installments", "venda")
    created_at = _format_date(_required(sale, "created_at", "venda"))
    rows = _item_rows(items)

    buffer = BytesIO()
    page = _ReceiptPage(buffer, sale_id)
    pdf = page.canvas

    page.font("bold", 20)
    pdf.drawCentredString(page.width / 2, page.y(), "COMPROVANTE DE VENDA")
    page.advance(10)

    page.font("normal", 10)
    page.text(f"Venda #{sale_id}", MARGIN)
    page.text(f"Data: {created_at}", page.width / 2)
    page.advance(8)
    page.separator()

    page.font("bold", 10)
    page.text("DADOS DO CLIENTE", MARGIN)
    page.advance(6)
    page.font("normal", 9)
    for label, field in (("Nome", "name"), ("CPF", "cpf"), ("Email", "email"), ("Telefone", "phone")):
        page.text(f"{label}: {_optional_text(customer, field)}", MARGIN)
        page.advance(5)
    page.advance(3)
    page.separator()

    page.font("bold", 10)
    page.text("ITENS DA VENDA", MARGIN)
    page.advance(8)

    columns = [MARGIN]
    for width in COLUMN_WIDTHS[:-1]:
        columns.append(columns[-1] + width)

    def table_heading():
        page.font("bold", 9)
        pdf.setFillGray(HEADER_FILL)
        pdf.rect(MARGIN, page.y() - 1 * mm, page.width - 2 * MARGIN, 6 * mm, stroke=0, fill=1)
        pdf.setFillGray(0)
        for heading, x in zip(("Produto", "Qtd", "Valor Unit.", "Total"), columns):
            page.text(heading, x)
        page.advance(8)

    table_heading()
    page.font("normal", 9)
    page.repeat_heading = table_heading
    for row in rows:
        for value, x in zip(row, columns):
            page.text(value, x)
        page.advance(6)
    page.repeat_heading = None
    page.advance(4)
    page.separator()

    page.font("bold", 10)
    page.text("RESUMO FINANCEIRO", MARGIN)
    page.advance(8)
    page.font("normal", 9)
    page.text("Total da Venda:", MARGIN)
    pdf.drawRightString(page.width - MARGIN - 30 * mm, page.y(), format_brl(total_amount))
    page.advance(6)
    page.text(f"Forma de Pagamento: {payment_label(method)}", MARGIN)
    page.advance(6)

    if installments > 1:
        share = format_brl(per_installment(total_amount, installments))
        page.text(f"Parcelas: {installments}x de {share}", MARGIN)
        page.advance(6)

    if method == PaymentMethod.CASH:
        amount_received = _required(sale, "amount_received", "venda")
        change = _required(sale, "change", "venda")
        page.text(f"Valor Recebido: {format_brl(amount_received)}", MARGIN)
        page.advance(5)
        page.text(f"Troco: {format_brl(change)}", MARGIN)
        page.advance(6)

    page.advance(8)
    page.separator()

    page.font("italic", 8)
    pdf.drawCentredString(page.width / 2, 15 * mm, "Obrigado pela compra! Volte sempre.")

    pdf.showPage()
    pdf.save()
    return buffer.getvalue()
