import io
import qrcode
from qrcode.image.pil import PilImage
from reportlab.lib.pagesizes import A4
from reportlab.lib.units import mm
from reportlab.lib.utils import ImageReader
from reportlab.pdfgen import canvas
from sqlalchemy import select
from sqlalchemy.orm import Session
from siminventory.models.item import Item
from siminventory.services.item_service import get_item

# Label grid on A4
_COLS = 3
_ROWS = 8
_LABEL_W = 70 * mm
_LABEL_H = 37 * mm
_QR_SIZE = 30 * mm


def make_qr_png(data: str) -> bytes:
    qr = qrcode.QRCode(version=1, box_size=10, border=4)
    qr.add_data(data)
    qr.make(fit=True)
    img: PilImage = qr.make_image(fill_color="black", back_color="white")
    buf = io.BytesIO()
    img.save(buf, format="PNG")
    return buf.getvalue()


def generate_item_label(db: Session, item_id: int) -> bytes:
    """QR code carrying the item's barcode, readable by the scanner page."""
    item = get_item(db, item_id)
    return make_qr_png(item.barcode)


def _shorten(text: str, limit: int = 32) -> str:
    return text if len(text) <= limit else text[: limit - 3] + "..."


def generate_labels_pdf(db: Session, item_ids: list[int]) -> bytes:
    """Sticker sheet: QR + barcode digits + item name, 3 x 8 per page."""
    items = db.scalars(select(Item).where(Item.id.in_(item_ids)).order_by(Item.name)).all()

    buf = io.BytesIO()
    c = canvas.Canvas(buf, pagesize=A4)
    page_width, page_height = A4
    margin_x = (page_width - _COLS * _LABEL_W) / 2
    margin_y = (page_height - _ROWS * _LABEL_H) / 2

    for index, item in enumerate(items):
        slot = index % (_COLS * _ROWS)
        if index and slot == 0:
            c.showPage()
        col, row = slot % _COLS, slot // _COLS
        x = margin_x + col * _LABEL_W
        y = page_height - margin_y - (row + 1) * _LABEL_H

        qr_img = ImageReader(io.BytesIO(make_qr_png(item.barcode)))
        c.drawImage(qr_img, x + 2 * mm, y + (_LABEL_H - _QR_SIZE) / 2, _QR_SIZE, _QR_SIZE)

        text_x = x + _QR_SIZE + 4 * mm
        c.setFont("Helvetica-Bold", 9)
        c.drawString(text_x, y + _LABEL_H / 2 + 4 * mm, item.barcode)
        c.setFont("Helvetica", 7)
        c.drawString(text_x, y + _LABEL_H / 2 - 1 * mm, _shorten(item.name))
        c.drawString(text_x, y + _LABEL_H / 2 - 5 * mm, _shorten(item.category))

    if not items:
        c.setFont("Helvetica", 10)
        c.drawString(margin_x, page_height - margin_y, "No items selected")
    c.save()
    return buf.getvalue()
