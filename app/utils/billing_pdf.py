# [ Imports ]
from reportlab.lib.pagesizes import A4
from reportlab.lib.units import cm
from reportlab.pdfgen import canvas
from reportlab.lib.colors import HexColor
from reportlab.platypus import Paragraph
from reportlab.lib.styles import getSampleStyleSheet
from reportlab.lib.enums import TA_CENTER, TA_JUSTIFY
from datetime import date, datetime
from decimal import Decimal, ROUND_HALF_UP
from io import BytesIO
import logging

logger = logging.getLogger(__name__)

DOCUMENT_LABELS = {
    "estimate": "ORÇAMENTO",
    "invoice": "FATURA",
}

STATUS_LABELS = {
    "DRAFT": "Rascunho",
    "PENDING": "Pendente",
    "SENT": "Enviado",
    "VIEWED": "Visualizado",
    "PAID": "Pago",
    "OVERDUE": "Vencido",
    "CANCELLED": "Cancelado",
}


# ==========================================
# CONFIGURAÇÕES DE DESIGN
# ==========================================
class DocumentDesign:
    PRIMARY = '#000000'      # Textos
    SECONDARY = '#B8860B'    # Linhas
    ACCENT = '#1a237e'       # Valor total e cabeçalho da tabela
    DARK = '#343a40'
    LIGHT = '#ffffff'
    GRAY = '#6c757d'
    BACKGROUND = '#FDFBF5'
    ROW_ALT = '#f4f1e8'

    FONT_BOLD = "Times-Bold"
    FONT_REGULAR = "Times-Roman"
    FONT_ITALIC = "Times-Italic"

    MARGIN_LEFT = 2.2*cm
    MARGIN_RIGHT = 2.2*cm
    MARGIN_TOP = 2.2*cm
    MARGIN_BOTTOM = 2.2*cm

    SPACE_L = 1.2*cm
    SPACE_M = 0.8*cm
    SPACE_S = 0.5*cm


def numero_por_extenso(valor: Decimal) -> str:
    """Converte valor monetário para extenso em reais"""
    unidades = ["", "Um", "Dois", "Três", "Quatro", "Cinco", "Seis", "Sete", "Oito", "Nove"]
    dezenas = ["", "", "Vinte", "Trinta", "Quarenta", "Cinquenta", "Sessenta", "Setenta", "Oitenta", "Noventa"]
    especiais = ["Dez", "Onze", "Doze", "Treze", "Catorze", "Quinze", "Dezesseis", "Dezessete", "Dezoito", "Dezenove"]
    centenas = ["", "Cento", "Duzentos", "Trezentos", "Quatrocentos", "Quinhentos", "Seiscentos", "Setecentos", "Oitocentos", "Novecentos"]

    def converte_ate_999(n):
        if n == 0:
            return ""
        elif n < 10:
            return unidades[n]
        elif n < 20:
            return especiais[n - 10]
        elif n < 100:
            d, u = divmod(n, 10)
            if u == 0:
                return dezenas[d]
            return f"{dezenas[d]} e {unidades[u]}"
        else:
            c, resto = divmod(n, 100)
            if n == 100:
                return "Cem"
            if resto == 0:
                return centenas[c]
            return f"{centenas[c]} e {converte_ate_999(resto)}"

    valor = Decimal(str(valor)).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)
    valor_int = int(valor)
    centavos = int((valor - valor_int) * 100)

    if valor_int == 0 and centavos == 0:
        return "Zero Reais"

    if valor_int >= 1000000:
        milhoes, resto = divmod(valor_int, 1000000)
        parte_inteira = "Um Milhão" if milhoes == 1 else f"{converte_ate_999(milhoes)} Milhões"
        if resto > 0:
            parte_inteira += f" e {converte_ate_999(resto)}" if resto < 1000 else f" {_milhares(resto, converte_ate_999)}"
    elif valor_int >= 1000:
        parte_inteira = _milhares(valor_int, converte_ate_999)
    else:
        parte_inteira = converte_ate_999(valor_int)

    if valor_int == 1:
        parte_inteira += " Real"
    elif valor_int > 1:
        parte_inteira += " Reais"

    if centavos > 0:
        parte_centavos = "Um Centavo" if centavos == 1 else f"{converte_ate_999(centavos)} Centavos"
        if parte_inteira:
            return f"{parte_inteira} e {parte_centavos}"
        return parte_centavos

    return parte_inteira


def _milhares(n: int, converte_ate_999) -> str:
    milhares, resto = divmod(n, 1000)
    texto = "Mil" if milhares == 1 else f"{converte_ate_999(milhares)} Mil"
    if resto > 0:
        texto += f" e {converte_ate_999(resto)}"
    return texto


def format_currency(value, currency: str = "BRL") -> str:
    """1234.5 -> R$ 1.234,50"""
    amount = Decimal(str(value or 0))
    formatted = f"{amount:,.2f}".replace(',', 'X').replace('.', ',').replace('X', '.')
    symbol = "R$" if currency == "BRL" else currency
    return f"{symbol} {formatted}"


def format_date(value) -> str:
    if not value:
        return "-"
    if isinstance(value, str):
        value = datetime.fromisoformat(value.replace('Z', '+00:00'))
    if isinstance(value, (date, datetime)):
        return value.strftime('%d/%m/%Y')
    return str(value)


def draw_refined_line(c, y_pos, left=None, right=None):
    """Linha dupla (grossa e fina)"""
    largura = A4[0]
    left = DocumentDesign.MARGIN_LEFT if left is None else left
    right = largura - DocumentDesign.MARGIN_RIGHT if right is None else right
    c.setStrokeColor(HexColor(DocumentDesign.SECONDARY))

    c.setLineWidth(2.0)
    c.line(left, y_pos, right, y_pos)

    c.setLineWidth(0.5)
    c.line(left, y_pos - 0.08*cm, right, y_pos - 0.08*cm)

    return y_pos - 0.2*cm


def draw_watermark(c, text: str):
    c.saveState()
    c.translate(A4[0]/2, A4[1]/2)
    c.rotate(45)
    c.setFont(DocumentDesign.FONT_BOLD, 100)
    c.setFillColor(HexColor('#e9ecef'))
    c.setFillAlpha(0.5)
    c.drawCentredString(0, 0, text)
    c.restoreState()


def draw_header(c, document: dict, y_position):
    """Escritório emissor e identificação do documento"""
    largura = A4[0]
    sender = document.get('sender_details') or {}
    sender_name = document.get('sender_name') or sender.get('name') or ''

    c.setFont(DocumentDesign.FONT_BOLD, 16)
    c.setFillColor(HexColor(DocumentDesign.PRIMARY))
    c.drawString(DocumentDesign.MARGIN_LEFT, y_position, sender_name.upper())

    c.setFont(DocumentDesign.FONT_REGULAR, 10)
    c.setFillColor(HexColor(DocumentDesign.GRAY))
    detail_y = y_position - DocumentDesign.SPACE_S
    for key in ('email', 'phone', 'address'):
        if sender.get(key):
            c.drawString(DocumentDesign.MARGIN_LEFT, detail_y, str(sender[key]))
            detail_y -= 0.45*cm

    label = DOCUMENT_LABELS.get(document.get('type'), 'DOCUMENTO')
    c.setFont(DocumentDesign.FONT_BOLD, 22)
    c.setFillColor(HexColor(DocumentDesign.ACCENT))
    c.drawRightString(largura - DocumentDesign.MARGIN_RIGHT, y_position, label)

    c.setFont(DocumentDesign.FONT_REGULAR, 11)
    c.setFillColor(HexColor(DocumentDesign.DARK))
    right_x = largura - DocumentDesign.MARGIN_RIGHT
    c.drawRightString(right_x, y_position - 0.6*cm, f"Nº {document.get('number', '')}")
    c.drawRightString(right_x, y_position - 1.1*cm, f"Emissão: {format_date(document.get('date'))}")
    c.drawRightString(right_x, y_position - 1.6*cm, f"Vencimento: {format_date(document.get('due_date'))}")

    status = STATUS_LABELS.get(document.get('status'), document.get('status') or '')
    if status:
        c.drawRightString(right_x, y_position - 2.1*cm, f"Situação: {status}")

    bottom = min(detail_y, y_position - 2.1*cm)
    return draw_refined_line(c, bottom - DocumentDesign.SPACE_S) - DocumentDesign.SPACE_M


def draw_receiver(c, document: dict, y_position):
    receiver = document.get('receiver_details') or {}
    receiver_name = document.get('receiver_name') or receiver.get('name') or ''

    c.setFont(DocumentDesign.FONT_BOLD, 11)
    c.setFillColor(HexColor(DocumentDesign.GRAY))
    c.drawString(DocumentDesign.MARGIN_LEFT, y_position, "DESTINATÁRIO")
    y_position -= DocumentDesign.SPACE_S

    c.setFont(DocumentDesign.FONT_BOLD, 13)
    c.setFillColor(HexColor(DocumentDesign.PRIMARY))
    c.drawString(DocumentDesign.MARGIN_LEFT, y_position, receiver_name)
    y_position -= 0.5*cm

    c.setFont(DocumentDesign.FONT_REGULAR, 10)
    c.setFillColor(HexColor(DocumentDesign.DARK))
    for key in ('email', 'mobile', 'phone', 'address', 'city'):
        if receiver.get(key):
            c.drawString(DocumentDesign.MARGIN_LEFT, y_position, str(receiver[key]))
            y_position -= 0.45*cm

    title = document.get('title')
    if title:
        y_position -= 0.3*cm
        c.setFont(DocumentDesign.FONT_BOLD, 12)
        c.drawString(DocumentDesign.MARGIN_LEFT, y_position, title)
        y_position -= 0.5*cm

    return y_position - DocumentDesign.SPACE_S


def draw_items(c, document: dict, y_position):
    """Tabela de itens: descrição, quantidade, valor unitário e total"""
    largura = A4[0]
    left = DocumentDesign.MARGIN_LEFT
    right = largura - DocumentDesign.MARGIN_RIGHT
    currency = document.get('currency') or 'BRL'
    row_height = 0.7*cm
    columns = (left + 0.2*cm, right - 7.5*cm, right - 4.5*cm, right - 0.2*cm)

    c.setFillColor(HexColor(DocumentDesign.ACCENT))
    c.rect(left, y_position - row_height, right - left, row_height, stroke=0, fill=1)
    c.setFillColor(HexColor(DocumentDesign.LIGHT))
    c.setFont(DocumentDesign.FONT_BOLD, 10)
    text_y = y_position - row_height + 0.22*cm
    c.drawString(columns[0], text_y, "Descrição")
    c.drawRightString(columns[1], text_y, "Qtd.")
    c.drawRightString(columns[2], text_y, "Valor unit.")
    c.drawRightString(columns[3], text_y, "Total")
    y_position -= row_height

    c.setFont(DocumentDesign.FONT_REGULAR, 10)
    for index, item in enumerate(document.get('items') or []):
        if index % 2:
            c.setFillColor(HexColor(DocumentDesign.ROW_ALT))
            c.rect(left, y_position - row_height, right - left, row_height, stroke=0, fill=1)
        c.setFillColor(HexColor(DocumentDesign.DARK))
        text_y = y_position - row_height + 0.22*cm
        description = str(item.get('description', ''))
        if len(description) > 60:
            description = description[:57] + "..."
        c.drawString(columns[0], text_y, description)
        c.drawRightString(columns[1], text_y, f"{Decimal(str(item.get('quantity', 0))).normalize():f}")
        c.drawRightString(columns[2], text_y, format_currency(item.get('rate'), currency))
        c.drawRightString(columns[3], text_y, format_currency(item.get('amount'), currency))
        y_position -= row_height

    return y_position - DocumentDesign.SPACE_M


def draw_totals(c, document: dict, y_position):
    largura = A4[0]
    right = largura - DocumentDesign.MARGIN_RIGHT
    label_x = right - 6.5*cm
    currency = document.get('currency') or 'BRL'

    rows = [("Subtotal", document.get('subtotal'))]
    for field, label in (('discount', 'Desconto'), ('fee', 'Taxa'), ('tax', 'Impostos')):
        value = Decimal(str(document.get(field) or 0))
        if value:
            suffix = f" ({value.normalize():f}%)" if document.get(f"{field}_type") == 'percentage' else ""
            rows.append((f"{label}{suffix}", None if suffix else value))

    c.setFont(DocumentDesign.FONT_REGULAR, 11)
    c.setFillColor(HexColor(DocumentDesign.DARK))
    for label, value in rows:
        c.drawString(label_x, y_position, label)
        if value is not None:
            c.drawRightString(right, y_position, format_currency(value, currency))
        y_position -= 0.55*cm

    # Caixa do valor total
    box_height = 2.4*cm
    box_x = DocumentDesign.MARGIN_LEFT
    box_width = right - box_x
    box_y = y_position - box_height
    c.setFillColor(HexColor(DocumentDesign.BACKGROUND))
    c.roundRect(box_x, box_y, box_width, box_height, 0.3*cm, stroke=0, fill=1)
    c.setStrokeColor(HexColor(DocumentDesign.SECONDARY))
    c.setLineWidth(2)
    c.roundRect(box_x, box_y, box_width, box_height, 0.3*cm, stroke=1, fill=0)

    total = Decimal(str(document.get('total') or 0))
    c.setFont(DocumentDesign.FONT_BOLD, 24)
    c.setFillColor(HexColor(DocumentDesign.ACCENT))
    c.drawCentredString(largura / 2, y_position - 1.0*cm, format_currency(total, currency))

    if currency == 'BRL':
        c.setFont(DocumentDesign.FONT_ITALIC, 11)
        c.setFillColor(HexColor(DocumentDesign.DARK))
        c.drawCentredString(largura / 2, y_position - 1.8*cm, f"({numero_por_extenso(total)})")

    return box_y - DocumentDesign.SPACE_L


def draw_notes(c, document: dict, y_position):
    text = " ".join(filter(None, [document.get('description'), document.get('notes')]))
    if not text:
        return y_position

    styles = getSampleStyleSheet()
    style = styles['Normal']
    style.fontName = DocumentDesign.FONT_REGULAR
    style.fontSize = 10
    style.leading = 13
    style.alignment = TA_JUSTIFY
    style.textColor = HexColor(DocumentDesign.DARK)

    max_width = A4[0] - DocumentDesign.MARGIN_LEFT - DocumentDesign.MARGIN_RIGHT
    p = Paragraph(f"<b>Observações:</b> {text}", style)
    w, h = p.wrap(max_width, 10*cm)
    p.drawOn(c, DocumentDesign.MARGIN_LEFT, y_position - h)
    return y_position - h - DocumentDesign.SPACE_M


def draw_footer(c, document: dict):
    styles = getSampleStyleSheet()
    style = styles['Normal']
    style.fontName = DocumentDesign.FONT_REGULAR
    style.fontSize = 8
    style.alignment = TA_CENTER
    style.textColor = HexColor(DocumentDesign.GRAY)

    max_width = A4[0] - DocumentDesign.MARGIN_LEFT - DocumentDesign.MARGIN_RIGHT
    text = f"{document.get('sender_name', '')} • Documento {document.get('number', '')} gerado em {datetime.now().strftime('%d/%m/%Y %H:%M')}"
    p = Paragraph(text, style)
    w, h = p.wrap(max_width, 2*cm)
    p.drawOn(c, DocumentDesign.MARGIN_LEFT, DocumentDesign.MARGIN_BOTTOM / 2)


def generate_billing_pdf(document: dict) -> bytes:
    """
    Gera o PDF de um orçamento ou fatura.
    document é a linha de ${schema}.billing já serializada.
    """
    buffer = BytesIO()
    c = canvas.Canvas(buffer, pagesize=A4)
    c.setTitle(f"{DOCUMENT_LABELS.get(document.get('type'), 'Documento')} {document.get('number', '')}")

    try:
        y_pos = A4[1] - DocumentDesign.MARGIN_TOP

        if document.get('status') == 'PAID':
            draw_watermark(c, "PAGO")
        elif document.get('status') == 'CANCELLED':
            draw_watermark(c, "CANCELADO")

        y_pos = draw_header(c, document, y_pos)
        y_pos = draw_receiver(c, document, y_pos)
        y_pos = draw_items(c, document, y_pos)
        y_pos = draw_totals(c, document, y_pos)
        draw_notes(c, document, y_pos)
        draw_footer(c, document)

        c.showPage()
        c.save()
        return buffer.getvalue()

    except Exception as e:
        logger.error(f"Erro ao gerar PDF do documento {document.get('number')}: {e}")
        raise
    finally:
        buffer.close()
