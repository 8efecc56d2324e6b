from __future__ import annotations

import logging
from decimal import Decimal

from streampix.models import CENTS
from streampix.models.pix import PixCharge, PixKeyType, PixPayloadInfo
from streampix.pix import (
    DEFAULT_TXID,
    MAX_TXID_LENGTH,
    decode_pix_payload,
    generate_pix_payload,
    generate_pix_qrcode_png,
    normalize_text,
    quantize_amount,
)
from streampix.settings import Settings, settings

logger = logging.getLogger(__name__)


def split_amount(total: Decimal | int | float | str, members: int) -> list[Decimal]:
    """Divide a subscription price into per-member shares.

    Leftover centavos go to the first members so the shares add up to ``total``.
    """
    if members <= 0:
        raise ValueError("Number of members must be positive")
    centavos = int(quantize_amount(total) * 100)
    share, remainder = divmod(centavos, members)
    return [(Decimal(share + (1 if i < remainder else 0)) / 100).quantize(CENTS) for i in range(members)]


class PaymentService:
    def __init__(self, config: Settings | None = None) -> None:
        self.settings = config or settings

    def create_charge(
        self,
        amount: Decimal | int | float | str | None,
        *,
        pix_key: str = "",
        key_type: str | PixKeyType | None = None,
        merchant_name: str = "",
        merchant_city: str = "",
        txid: str = "",
        with_qrcode: bool = True,
    ) -> PixCharge | None:
        """Build a PIX charge, falling back to the configured key and merchant.

        Returns None when no payload can be produced (no key or zero amount).
        """
        if not pix_key:
            pix_key = self.settings.get_pix_key()
            key_type = key_type or self.settings.pix_key_type or None
        merchant_name = merchant_name or self.settings.pix_merchant_name
        merchant_city = merchant_city or self.settings.pix_merchant_city

        payload = generate_pix_payload(
            pix_key=pix_key,
            key_type=key_type,
            merchant_name=merchant_name,
            merchant_city=merchant_city,
            amount=amount,
            txid=txid or DEFAULT_TXID,
        )
        if not payload:
            logger.warning("PIX payload not generated (key=%r, amount=%r)", pix_key, amount)
            return None

        png = None
        if with_qrcode:
            png = generate_pix_qrcode_png(
                payload,
                box_size=self.settings.qrcode_box_size,
                border=self.settings.qrcode_border,
            )

        info = decode_pix_payload(payload)
        key_label = key_type.value if isinstance(key_type, PixKeyType) else key_type
        logger.info("PIX charge created for key %s: %s", info.pix_key, info.amount)
        return PixCharge(
            pix_key=info.pix_key,
            key_type=key_label,
            merchant_name=info.merchant_name,
            merchant_city=info.merchant_city,
            amount=info.amount,
            txid=info.txid,
            payload=payload,
            qrcode_png=png,
        )

    def split_charges(
        self,
        total: Decimal | int | float | str,
        members: list[str],
        *,
        pix_key: str = "",
        key_type: str | PixKeyType | None = None,
    ) -> list[tuple[str, PixCharge | None]]:
        """Create one charge per member for a shared subscription.

        Returns (member, charge) pairs in input order; repeated names each get their own share.
        """
        shares = split_amount(total, len(members))
        return [
            (
                member,
                self.create_charge(
                    share,
                    pix_key=pix_key,
                    key_type=key_type,
                    txid=normalize_text(member, MAX_TXID_LENGTH),
                    with_qrcode=False,
                ),
            )
            for member, share in zip(members, shares)
        ]

    @staticmethod
    def inspect(payload: str) -> PixPayloadInfo:
        return decode_pix_payload(payload)
