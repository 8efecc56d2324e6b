"""PIX BR Code payload generator following BCB EMV QR Code specification.

Generates the "Pix Copia e Cola" payload string for a static charge, validates
and decodes existing payloads, and renders them as PNG QR codes.
"""

from __future__ import annotations

import logging
import re
import unicodedata
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from io import BytesIO

import qrcode
from qrcode.image.pil import PilImage

from streampix.models import CENTS
from streampix.models.pix import PixKeyType, PixPayloadInfo, PixRequest

logger = logging.getLogger(__name__)

PIX_GUI = "br.gov.bcb.pix"
CRC_PREFIX = "6304"

MAX_FIELD_LENGTH = 99
MAX_NAME_LENGTH = 25
MAX_CITY_LENGTH = 15
MAX_TXID_LENGTH = 25

DEFAULT_MERCHANT_NAME = "Recebedor"
DEFAULT_MERCHANT_CITY = "Cidade"
DEFAULT_TXID = "***"

_DOCUMENT_TYPES = {"cpf", "cnpj"}
_PHONE_TYPES = {"phone", "celular", "telefone"}
_UNSPECIFIED_TYPES = {"", "unspecified"}

_NON_DIGITS = re.compile(r"[^0-9]")
_NON_TEXT = re.compile(r"[^a-zA-Z0-9 ]")
_NON_ALNUM = re.compile(r"[^a-zA-Z0-9]")
_DOCUMENT_PUNCTUATION = re.compile(r"[./-]")
_FIELD_HEADER = re.compile(r"[0-9]{4}")


class PixError(ValueError):
    """Base error for invalid PIX input or payloads."""


class PixFieldTooLongError(PixError):
    def __init__(self, tag: str, length: int) -> None:
        super().__init__(f"Field {tag} has {length} characters, the limit is {MAX_FIELD_LENGTH}")
        self.tag = tag
        self.length = length


class PixAmountError(PixError):
    pass


class PixPayloadError(PixError):
    pass


def tlv(tag: str, value: str) -> str:
    """Build a TLV (Tag-Length-Value) field.

    Raises PixFieldTooLongError when the value does not fit a two-digit length.
    """
    if len(value) > MAX_FIELD_LENGTH:
        raise PixFieldTooLongError(tag, len(value))
    return f"{tag}{len(value):02d}{value}"


def crc16(data: str) -> str:
    """Compute CRC16-CCITT (0xFFFF) over the payload string.

    Works on character codes, not encoded bytes. Sanitized payloads are ASCII,
    where both give the same result.
    """
    crc = 0xFFFF
    for char in data:
        crc ^= ord(char) << 8
        for _ in range(8):
            if crc & 0x8000:
                crc = (crc << 1) ^ 0x1021
            else:
                crc <<= 1
            crc &= 0xFFFF
    return f"{crc:04X}"


def _key_label(key_type: str | PixKeyType | None) -> str:
    if key_type is None:
        return ""
    if isinstance(key_type, PixKeyType):
        return key_type.value
    return key_type.strip().lower()


def normalize_key(key: str | None, key_type: str | PixKeyType | None = None) -> str:
    """Rewrite a PIX key into the form registered in the DICT directory.

    CPF/CNPJ keys keep digits only, phone keys keep digits and a leading ``+``.
    Other declared types pass through trimmed. Without a declared type, a key
    that looks like a punctuated CPF/CNPJ is reduced to its digits.
    """
    if not key:
        return ""
    clean = key.strip()
    label = _key_label(key_type)

    if label in _DOCUMENT_TYPES:
        return _NON_DIGITS.sub("", clean)

    if label in _PHONE_TYPES:
        digits = _NON_DIGITS.sub("", clean)
        return f"+{digits}" if clean.startswith("+") else digits

    if label in _UNSPECIFIED_TYPES:
        digits = _NON_DIGITS.sub("", clean)
        if len(digits) in (11, 14) and _DOCUMENT_PUNCTUATION.search(clean) and "@" not in clean:
            return digits

    return clean


def _strip_accents(text: str) -> str:
    """Remove accents for ASCII-safe PIX payload fields."""
    nfd = unicodedata.normalize("NFD", text)
    return "".join(c for c in nfd if not unicodedata.combining(c))


def normalize_text(value: str | None, max_length: int) -> str:
    """Reduce a name or city to ASCII letters, digits and spaces, truncated to ``max_length``."""
    if not value:
        return ""
    return _NON_TEXT.sub("", _strip_accents(value))[:max_length]


def sanitize_txid(txid: str | None) -> str:
    return _NON_ALNUM.sub("", txid or "")[:MAX_TXID_LENGTH] or DEFAULT_TXID


def quantize_amount(amount: Decimal | int | float | str) -> Decimal:
    """Convert an amount to a non-negative Decimal with two decimal places.

    Floats go through ``str`` so 10.1 stays 10.10 instead of its binary expansion.
    """
    try:
        value = amount if isinstance(amount, Decimal) else Decimal(str(amount).strip())
        if not value.is_finite():
            raise PixAmountError(f"Invalid amount: {amount!r}")
        value = value.quantize(CENTS, rounding=ROUND_HALF_UP)
    except InvalidOperation:
        raise PixAmountError(f"Invalid amount: {amount!r}") from None
    if value < 0:
        raise PixAmountError(f"Amount must not be negative: {amount!r}")
    return value


def format_amount(amount: Decimal | int | float | str) -> str:
    """Render an amount for tag 54: 10 -> '10.00'."""
    return f"{quantize_amount(amount):.2f}"


def generate_pix_payload(
    *,
    pix_key: str,
    merchant_name: str = "",
    merchant_city: str = "",
    amount: Decimal | int | float | str | None = None,
    txid: str = DEFAULT_TXID,
    key_type: str | PixKeyType | None = None,
) -> str:
    """Generate a PIX BR Code payload string.

    Args:
        pix_key: The PIX key (CPF, CNPJ, phone, email, or random key).
        merchant_name: Recipient name (sanitized, max 25 chars).
        merchant_city: Recipient city (sanitized, max 15 chars).
        amount: Transaction amount in reais (e.g. 55.90).
        txid: Transaction ID (default "***").
        key_type: Declared key type, drives key normalization.

    Returns:
        The complete BR Code payload string with CRC16, or an empty string
        when the key or the amount is missing.
    """
    key = normalize_key(pix_key, key_type)
    if not key or amount is None:
        return ""

    value = quantize_amount(amount)
    if not value:
        return ""

    name = normalize_text(merchant_name, MAX_NAME_LENGTH) or DEFAULT_MERCHANT_NAME
    city = normalize_text(merchant_city, MAX_CITY_LENGTH) or DEFAULT_MERCHANT_CITY

    # Merchant Account Information (tag 26)
    mai = tlv("00", PIX_GUI) + tlv("01", key)
    # Additional Data Field Template (tag 62)
    adft = tlv("05", sanitize_txid(txid))

    payload = (
        tlv("00", "01")  # Payload Format Indicator
        + tlv("26", mai)  # Merchant Account Information
        + tlv("52", "0000")  # Merchant Category Code
        + tlv("53", "986")  # Transaction Currency (BRL)
        + tlv("54", f"{value:.2f}")  # Transaction Amount
        + tlv("58", "BR")  # Country Code
        + tlv("59", name)  # Merchant Name
        + tlv("60", city)  # Merchant City
        + tlv("62", adft)  # Additional Data
    )

    # CRC16 placeholder: tag "63" + length "04" + actual CRC
    payload += CRC_PREFIX
    payload += crc16(payload)

    logger.debug("Generated PIX payload for key %s (%d chars)", key, len(payload))
    return payload


def generate_pix_payload_from_request(request: PixRequest) -> str:
    return generate_pix_payload(
        pix_key=request.key,
        key_type=request.key_type,
        merchant_name=request.merchant_name,
        merchant_city=request.merchant_city,
        amount=request.amount,
        txid=request.txid,
    )


def parse_tlv(data: str) -> list[tuple[str, str]]:
    """Split a TLV string into (tag, value) pairs, in order."""
    fields: list[tuple[str, str]] = []
    pos = 0
    while pos < len(data):
        header = data[pos : pos + 4]
        if not _FIELD_HEADER.fullmatch(header):
            raise PixPayloadError(f"Malformed field header at position {pos}: {header!r}")
        tag, length = header[:2], int(header[2:])
        start = pos + 4
        end = start + length
        if end > len(data):
            raise PixPayloadError(f"Field {tag} declares {length} characters but only {len(data) - start} remain")
        fields.append((tag, data[start:end]))
        pos = end
    return fields


def validate_pix_payload(payload: str) -> bool:
    """Check that the payload ends with a CRC16 field matching everything before it."""
    if len(payload) < 8 or payload[-8:-4] != CRC_PREFIX:
        return False
    return crc16(payload[:-4]) == payload[-4:].upper()


def decode_pix_payload(payload: str) -> PixPayloadInfo:
    """Validate a payload and extract its well-known fields.

    Raises PixPayloadError on a checksum mismatch or a malformed TLV structure.
    """
    payload = payload.strip()
    if not validate_pix_payload(payload):
        raise PixPayloadError("CRC16 mismatch or missing CRC field")

    fields = dict(parse_tlv(payload))
    if fields.get("00") != "01":
        raise PixPayloadError("Missing payload format indicator")

    account = dict(parse_tlv(fields.get("26", "")))
    additional = dict(parse_tlv(fields.get("62", "")))

    amount = None
    if "54" in fields:
        try:
            amount = Decimal(fields["54"])
        except InvalidOperation:
            raise PixPayloadError(f"Invalid amount field: {fields['54']!r}") from None
        if not amount.is_finite():
            raise PixPayloadError(f"Invalid amount field: {fields['54']!r}")

    return PixPayloadInfo(
        payload_format=fields["00"],
        gui=account.get("00", ""),
        pix_key=account.get("01", ""),
        merchant_category=fields.get("52", ""),
        currency=fields.get("53", ""),
        amount=amount,
        country_code=fields.get("58", ""),
        merchant_name=fields.get("59", ""),
        merchant_city=fields.get("60", ""),
        txid=additional.get("05", ""),
        crc=fields.get("63", payload[-4:]),
    )


def generate_pix_qrcode_png(payload: str, *, box_size: int = 10, border: int = 2) -> bytes:
    """Render a PIX payload as a QR code.

    Returns:
        PNG image bytes ready to be saved or displayed.
    """
    if not payload:
        raise PixPayloadError("Cannot render an empty PIX payload")

    qr = qrcode.QRCode(
        version=None,
        error_correction=qrcode.constants.ERROR_CORRECT_M,
        box_size=box_size,
        border=border,
    )
    qr.add_data(payload)
    qr.make(fit=True)

    img: PilImage = qr.make_image(fill_color="black", back_color="white")

    buf = BytesIO()
    img.save(buf, format="PNG")
    return buf.getvalue()
