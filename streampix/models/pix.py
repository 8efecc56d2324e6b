from __future__ import annotations

from decimal import Decimal
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class PixKeyType(str, Enum):
    CPF = "cpf"
    CNPJ = "cnpj"
    PHONE = "phone"
    EMAIL = "email"
    RANDOM = "random"
    UNSPECIFIED = "unspecified"


KEY_TYPE_LABELS = {
    PixKeyType.CPF: "CPF",
    PixKeyType.CNPJ: "CNPJ",
    PixKeyType.PHONE: "Celular",
    PixKeyType.EMAIL: "E-mail",
    PixKeyType.RANDOM: "Chave aleatória",
    PixKeyType.UNSPECIFIED: "Não informado",
}


class PixRequest(BaseModel):
    model_config = ConfigDict(frozen=True)

    key: str
    # Free-form label: aliases like "celular" or "telefone" are accepted too.
    key_type: str | None = None
    merchant_name: str = ""
    merchant_city: str = ""
    amount: Decimal = Field(default=Decimal("0"), ge=0)
    txid: str = "***"


class PixCharge(BaseModel):
    model_config = ConfigDict(frozen=True)

    pix_key: str
    key_type: str | None = None
    merchant_name: str
    merchant_city: str
    amount: Decimal
    txid: str = "***"
    payload: str
    qrcode_png: bytes | None = None


class PixPayloadInfo(BaseModel):
    model_config = ConfigDict(frozen=True)

    payload_format: str
    gui: str = ""
    pix_key: str = ""
    merchant_category: str = ""
    currency: str = ""
    amount: Decimal | None = None
    country_code: str = ""
    merchant_name: str = ""
    merchant_city: str = ""
    txid: str = ""
    crc: str
