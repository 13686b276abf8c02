import base64
import io

import qrcode


def verification_url(ticket_id: str, base_url: str) -> str:
    return f"{base_url.rstrip('/')}/scanned/{ticket_id}"


def render_qr_png(ticket_id: str, base_url: str) -> bytes:
    qr = qrcode.QRCode(
        error_correction=qrcode.constants.ERROR_CORRECT_M,
        box_size=8,
        border=4,
    )
    qr.add_data(verification_url(ticket_id, base_url))
    qr.make(fit=True)

    img = qr.make_image(fill_color="black", back_color="white")
    buf = io.BytesIO()
    img.save(buf, format="PNG")
    return buf.getvalue()


def render_qr(ticket_id: str, base_url: str) -> str:
    """QR code for the ticket's scan page as an inline ``data:`` URI."""
    png_b64 = base64.b64encode(render_qr_png(ticket_id, base_url)).decode("utf-8")
    return f"data:image/png;base64,{png_b64}"
