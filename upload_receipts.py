#!/usr/bin/env python3
"""
Batch upload receipt images to the receipt ledger API.

Usage:
    python upload_receipts.py ./receipts
    python upload_receipts.py ./receipts --api-url http://127.0.0.1:8000
"""
import argparse
import mimetypes
import time
from pathlib import Path

import requests

API_BASE_URL = "http://127.0.0.1:8000"
RECEIPT_SUFFIXES = {".jpg", ".jpeg", ".png", ".pdf", ".tiff", ".tif"}


def upload_receipt(file_path: Path, api_base_url: str = API_BASE_URL):
    """Upload one receipt and print the extracted bill"""
    url = f"{api_base_url}/receipts/upload"
    content_type = mimetypes.guess_type(file_path.name)[0] or "application/octet-stream"

    with open(file_path, "rb") as f:
        files = {"file": (file_path.name, f, content_type)}
        response = requests.post(url, files=files, allow_redirects=False, timeout=120)

    if response.status_code == 303:
        print(f"✅ {file_path.name}: stored (redirect to {response.headers.get('location')})")
        return None

    if response.status_code == 200:
        data = response.json()
        invoice = data["invoice"]
        line = f"{invoice['vendor_name']} - {invoice['total']} ({len(invoice['line_items'])} items)"
        if data["stats_updated"]:
            print(f"✅ {file_path.name}: {line}")
        else:
            print(f"⚠️  {file_path.name}: {line} - stats not updated: {data['warning']}")
        return data

    print(f"❌ {file_path.name}: {response.status_code} - {response.text}")
    return None


def find_receipts(folder: Path) -> list[Path]:
    return sorted(p for p in folder.iterdir() if p.is_file() and p.suffix.lower() in RECEIPT_SUFFIXES)


def main():
    parser = argparse.ArgumentParser(description="Upload a folder of receipts to the receipt ledger API")
    parser.add_argument("folder", type=Path, help="Folder containing receipt images or PDFs")
    parser.add_argument("--api-url", default=API_BASE_URL, help=f"API base URL (default: {API_BASE_URL})")
    parser.add_argument("--delay", type=float, default=0.5, help="Seconds to wait between uploads")
    args = parser.parse_args()

    if not args.folder.is_dir():
        parser.error(f"{args.folder} is not a directory")

    receipts = find_receipts(args.folder)
    print("=" * 70)
    print(f"Uploading {len(receipts)} receipt(s) to {args.api_url}")
    print("=" * 70)

    for receipt in receipts:
        upload_receipt(receipt, args.api_url)
        time.sleep(args.delay)

    print("-" * 70)
    response = requests.get(f"{args.api_url}/receipts/stats", timeout=30)
    if response.status_code == 200:
        stats = response.json()
        print(f"Total bills: {stats['total_bills']}")
        print(f"Total amount: {stats['total_amount']:.2f}")
    else:
        print(f"❌ Could not fetch stats: {response.status_code}")


if __name__ == "__main__":
    main()
