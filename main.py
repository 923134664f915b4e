"""Simple CLI entry to run the traveller extraction on a local file."""

import argparse
import json
import logging
from pathlib import Path

from traveller_autofill import extract_travellers
from traveller_autofill.service import guess_media_type


def main() -> None:
    parser = argparse.ArgumentParser(description="Extract traveller details from a document.")
    parser.add_argument("document", type=Path, help="Path to a text, spreadsheet, PDF, Word or image file")
    parser.add_argument("--media-type", help="Declared media type; guessed from the extension when omitted")
    parser.add_argument("--output", type=Path, help="Optional path to save the extracted JSON")
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")

    media_type = args.media_type or guess_media_type(args.document.name)
    result = extract_travellers(args.document, media_type)
    output = json.dumps(result, indent=2, ensure_ascii=False)

    if args.output:
        args.output.write_text(output, encoding="utf-8")
        print(f"Travellers saved to {args.output}")
    else:
        print(output)


if __name__ == "__main__":
    main()
