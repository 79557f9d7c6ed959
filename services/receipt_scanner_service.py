"""
Delivery note scanner using Claude Vision.

Sends a photo of a delivery note plus the known product names and reads
back a JSON array of {product_name, quantity, price}. The model answers
in free text, so the reply is treated as untrusted: the first
bracket-delimited array is extracted and every element is checked before
anything is used. One bad element rejects the whole scan.
"""

import base64
import json
import math
from decimal import Decimal
from typing import Any, Optional, Sequence
import structlog
import anthropic

from config import settings
from models.purchase_order import ScannedEntry
from exceptions import ScanParseError, ExternalServiceError

logger = structlog.get_logger(__name__)

SUPPORTED_MEDIA_TYPES = {"image/jpeg", "image/png", "image/gif", "image/webp"}


class ReceiptScannerService:
    """
    Read delivery notes with Claude Vision.

    Only extraction lives here; matching against the catalog is done by
    the reconciliation functions.
    """

    # Max product names sent as hint
    MAX_HINT_NAMES = 300

    SYSTEM_PROMPT = """You read delivery notes (pakbonnen) for a greengrocer.

IMPORTANT: Return ONLY a JSON array, no markdown, no explanation.

For every product line on the note return one object:
- product_name: the product name, normalized (e.g. "Tomaten" instead of "Tom.")
- quantity: number of boxes/packs delivered (number)
- price: price per unit (number, 0 if not visible)

Quantities may be written as "2x", "3 st", "5 doos", etc.
Prefer names from the known product list when the line clearly refers to one.

Example:
[
  {"product_name": "Bio Bananen", "quantity": 3, "price": 1.20},
  {"product_name": "Tomaten los", "quantity": 2, "price": 0.85}
]"""

    def __init__(self, client: Optional[Any] = None):
        """
        Initialize scanner.

        Args:
            client: Anthropic client; built from settings when omitted
        """
        if client is not None:
            self.client = client
        elif settings.scanner_configured:
            self.client = anthropic.Anthropic(api_key=settings.anthropic_api_key)
        else:
            self.client = None

    async def scan_image(
        self,
        image_bytes: bytes,
        media_type: str,
        known_product_names: Sequence[str]
    ) -> list[ScannedEntry]:
        """
        Extract scanned entries from a delivery note photo.

        Args:
            image_bytes: Raw image content
            media_type: MIME type of the image
            known_product_names: Active catalog names, sent as a hint

        Returns:
            Validated scanned entries (possibly empty)

        Raises:
            ExternalServiceError: Scanner not configured or API failure
            ScanParseError: Reply has no usable JSON array
        """
        if self.client is None:
            raise ExternalServiceError(
                "anthropic",
                "Receipt scanner not available. Set ANTHROPIC_API_KEY."
            )

        if media_type not in SUPPORTED_MEDIA_TYPES:
            raise ScanParseError(
                "Unsupported image type",
                details={"media_type": media_type}
            )

        logger.info("receipt_scan_started", image_size=len(image_bytes), media_type=media_type)

        hint = ", ".join(list(known_product_names)[:self.MAX_HINT_NAMES])
        prompt = "Extract all products from this delivery note."
        if hint:
            prompt += f"\n\nKnown products: {hint}"

        try:
            response = self.client.messages.create(
                model=settings.scanner_model,
                max_tokens=settings.scanner_max_tokens,
                system=self.SYSTEM_PROMPT,
                messages=[{
                    "role": "user",
                    "content": [
                        {
                            "type": "image",
                            "source": {
                                "type": "base64",
                                "media_type": media_type,
                                "data": base64.b64encode(image_bytes).decode("utf-8")
                            }
                        },
                        {
                            "type": "text",
                            "text": prompt
                        }
                    ]
                }]
            )
        except anthropic.APIError as e:
            logger.error("claude_api_error", error=str(e))
            raise ExternalServiceError("anthropic", f"Claude API error: {e}")

        response_text = "".join(
            getattr(block, "text", "") for block in response.content
        )
        logger.debug("claude_response_received", response_length=len(response_text))

        entries = parse_scan_response(response_text)

        logger.info("receipt_scan_completed", entries=len(entries))

        return entries


# ===================
# RESPONSE PARSING
# ===================

def extract_json_array(text: str) -> list:
    """
    Pull the first bracket-delimited JSON array out of free text.

    Raises:
        ScanParseError: No array found or it does not parse
    """
    text = text or ""
    start = text.find("[")
    if start == -1:
        logger.error("scan_json_missing", response_preview=text[:500])
        raise ScanParseError("No valid JSON returned by the scanner")

    # Anything after the first complete array is ignored
    try:
        data, _ = json.JSONDecoder().raw_decode(text, start)
    except json.JSONDecodeError as e:
        logger.error("scan_json_invalid", response_preview=text[start:start + 500], error=str(e))
        raise ScanParseError("Scanner returned invalid JSON", details={"error": str(e)})

    if not isinstance(data, list):
        raise ScanParseError("Scanner did not return a list")

    return data


def _is_number(value: Any) -> bool:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return math.isfinite(value)


def validate_scan_items(items: list) -> list[ScannedEntry]:
    """
    Check every element before trusting any of them.

    Each element must be an object with a non-empty string product_name
    and non-negative numeric quantity and price.

    Raises:
        ScanParseError: On the first element that breaks the shape
    """
    entries: list[ScannedEntry] = []

    for index, item in enumerate(items):
        if not isinstance(item, dict):
            raise ScanParseError("Scanned item is not an object", details={"index": index})

        name = item.get("product_name")
        quantity = item.get("quantity")
        price = item.get("price")

        if not isinstance(name, str) or not name.strip():
            raise ScanParseError("Scanned item has no product name", details={"index": index})
        if not _is_number(quantity) or quantity < 0:
            raise ScanParseError(
                "Scanned item has an invalid quantity",
                details={"index": index, "quantity": repr(quantity)}
            )
        if not _is_number(price) or price < 0:
            raise ScanParseError(
                "Scanned item has an invalid price",
                details={"index": index, "price": repr(price)}
            )

        entries.append(ScannedEntry(
            raw_name=name.strip(),
            quantity=Decimal(str(quantity)),
            unit_price=Decimal(str(price))
        ))

    return entries


def parse_scan_response(text: str) -> list[ScannedEntry]:
    """Extract and validate scanned entries from a raw scanner reply."""
    return validate_scan_items(extract_json_array(text))


# Singleton instance
_scanner: Optional[ReceiptScannerService] = None


def get_receipt_scanner_service() -> ReceiptScannerService:
    """Get or create ReceiptScannerService instance."""
    global _scanner
    if _scanner is None:
        _scanner = ReceiptScannerService()
    return _scanner
