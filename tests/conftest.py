"""Root conftest: isolated settings and sample charges."""

from __future__ import annotations

from decimal import Decimal

import pytest

from streampix.models.pix import PixCharge
from streampix.settings import Settings


def _sample_settings(**overrides) -> Settings:
    defaults = dict(
        pix_key="",
        pix_key_type="",
        pix_merchant_name="Streams Control",
        pix_merchant_city="Recife",
        qrcode_box_size=4,
        qrcode_border=1,
    )
    defaults.update(overrides)
    return Settings(_env_file=None, **defaults)


def _sample_charge(**overrides) -> PixCharge:
    defaults = dict(
        pix_key="11999999999",
        key_type="phone",
        merchant_name="Streams Control",
        merchant_city="Recife",
        amount=Decimal("18.64"),
        txid="Ana",
        payload="00020126330014br.gov.bcb.pix0111119999999996304ABCD",
        qrcode_png=b"\x89PNG-fake",
    )
    defaults.update(overrides)
    return PixCharge(**defaults)


@pytest.fixture()
def sample_settings():
    return _sample_settings


@pytest.fixture()
def sample_charge():
    return _sample_charge
