# scripts/render_qr.py
import os
import argparse

from qrticket.qr import render_qr_png, verification_url

def main() -> None:
    parser = argparse.ArgumentParser(description="Write the QR code that points at a ticket's scan page.")
    parser.add_argument("--ticket-id", required=True)
    parser.add_argument("--base-url", default=os.environ.get("BASE_URL", "http://localhost:8000"))
    parser.add_argument("--out", help="PNG path (default: <ticket-id>.png)")
    args = parser.parse_args()

    out = args.out or f"{args.ticket_id}.png"
    with open(out, "wb") as f:
        f.write(render_qr_png(args.ticket_id, args.base_url))

    print(verification_url(args.ticket_id, args.base_url))
    print(f"wrote {out}")

if __name__ == "__main__":
    main()
