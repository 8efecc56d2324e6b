from decimal import Decimal
from unittest.mock import MagicMock, patch

from streampix.models.pix import PixKeyType
from streampix.pix import PixAmountError, generate_pix_payload
from streampix.services.payment_service import PaymentService


def _printed(mock_console) -> str:
    return "\n".join(str(arg) for c in mock_console.print.call_args_list for arg in c.args)


def _service(pix_key: str = "") -> MagicMock:
    service = MagicMock()
    service.settings.pix_key = pix_key
    return service


class TestGeneratePixMenu:
    @patch("streampix.cli.pix_menu.console")
    @patch("streampix.cli.pix_menu.questionary")
    def test_generate_with_typed_key(self, mock_q, mock_console, sample_charge):
        from streampix.cli.pix_menu import generate_pix_menu

        service = _service()
        service.create_charge.return_value = sample_charge()
        mock_q.text.return_value.ask.side_effect = ["11999999999", "55,90", "", "", ""]
        mock_q.select.return_value.ask.return_value = "Celular"

        generate_pix_menu(service)

        service.create_charge.assert_called_once_with(
            Decimal("55.90"),
            pix_key="11999999999",
            key_type=PixKeyType.PHONE,
            merchant_name="",
            txid="",
        )
        assert sample_charge().payload in _printed(mock_console)

    @patch("streampix.cli.pix_menu.console")
    @patch("streampix.cli.pix_menu.questionary")
    def test_uses_default_key(self, mock_q, mock_console, sample_charge):
        from streampix.cli.pix_menu import generate_pix_menu

        service = _service(pix_key="fulano@example.com")
        service.create_charge.return_value = sample_charge()
        mock_q.confirm.return_value.ask.return_value = False
        mock_q.text.return_value.ask.side_effect = ["10", "Fulano", "ref1", ""]

        generate_pix_menu(service)

        service.create_charge.assert_called_once_with(
            Decimal("10.00"), pix_key="", key_type=None, merchant_name="Fulano", txid="ref1"
        )
        mock_q.select.assert_not_called()

    @patch("streampix.cli.pix_menu.console")
    @patch("streampix.cli.pix_menu.questionary")
    def test_saves_qrcode(self, mock_q, mock_console, sample_charge, tmp_path):
        from streampix.cli.pix_menu import generate_pix_menu

        target = tmp_path / "pix.png"
        service = _service()
        service.create_charge.return_value = sample_charge()
        mock_q.text.return_value.ask.side_effect = ["key", "10", "", "", str(target)]
        mock_q.select.return_value.ask.return_value = "Chave aleatória"

        generate_pix_menu(service)

        assert target.read_bytes() == sample_charge().qrcode_png

    @patch("streampix.cli.pix_menu.console")
    @patch("streampix.cli.pix_menu.questionary")
    def test_retries_invalid_amount(self, mock_q, mock_console, sample_charge):
        from streampix.cli.pix_menu import generate_pix_menu

        service = _service()
        service.create_charge.return_value = sample_charge()
        mock_q.text.return_value.ask.side_effect = ["key", "abc", "0", "12,50", "", "", ""]
        mock_q.select.return_value.ask.return_value = "E-mail"

        generate_pix_menu(service)

        assert service.create_charge.call_args.args[0] == Decimal("12.50")
        assert "Valor inválido" in _printed(mock_console)

    @patch("streampix.cli.pix_menu.console")
    @patch("streampix.cli.pix_menu.questionary")
    def test_cancel_without_key(self, mock_q, mock_console):
        from streampix.cli.pix_menu import generate_pix_menu

        service = _service()
        mock_q.text.return_value.ask.return_value = ""

        generate_pix_menu(service)

        service.create_charge.assert_not_called()
        assert "Operação cancelada" in _printed(mock_console)

    @patch("streampix.cli.pix_menu.console")
    @patch("streampix.cli.pix_menu.questionary")
    def test_cancel_on_amount_prompt(self, mock_q, mock_console):
        from streampix.cli.pix_menu import generate_pix_menu

        service = _service()
        mock_q.text.return_value.ask.side_effect = ["key", None]
        mock_q.select.return_value.ask.return_value = "E-mail"

        generate_pix_menu(service)

        service.create_charge.assert_not_called()

    @patch("streampix.cli.pix_menu.console")
    @patch("streampix.cli.pix_menu.questionary")
    def test_no_payload(self, mock_q, mock_console):
        from streampix.cli.pix_menu import generate_pix_menu

        service = _service()
        service.create_charge.return_value = None
        mock_q.text.return_value.ask.side_effect = ["key", "10", "", ""]
        mock_q.select.return_value.ask.return_value = "CPF"

        generate_pix_menu(service)

        assert "Dados inválidos para gerar Pix" in _printed(mock_console)

    @patch("streampix.cli.pix_menu.console")
    @patch("streampix.cli.pix_menu.questionary")
    def test_pix_error(self, mock_q, mock_console):
        from streampix.cli.pix_menu import generate_pix_menu

        service = _service()
        service.create_charge.side_effect = PixAmountError("Amount must not be negative")
        mock_q.text.return_value.ask.side_effect = ["key", "10", "", ""]
        mock_q.select.return_value.ask.return_value = "CPF"

        generate_pix_menu(service)

        assert "Amount must not be negative" in _printed(mock_console)


class TestSplitSubscriptionMenu:
    @patch("streampix.cli.pix_menu.console")
    @patch("streampix.cli.pix_menu.questionary")
    def test_split(self, mock_q, mock_console, sample_charge):
        from streampix.cli.pix_menu import split_subscription_menu

        service = _service(pix_key="fulano@example.com")
        service.split_charges.return_value = [("Ana", sample_charge()), ("Ana", None)]
        mock_q.text.return_value.ask.side_effect = ["55,90", "Ana, Ana, "]
        mock_q.confirm.return_value.ask.return_value = False

        split_subscription_menu(service)

        service.split_charges.assert_called_once_with(
            Decimal("55.90"), ["Ana", "Ana"], pix_key="", key_type=None
        )

    @patch("streampix.cli.pix_menu.console")
    @patch("streampix.cli.pix_menu.questionary")
    def test_no_members(self, mock_q, mock_console):
        from streampix.cli.pix_menu import split_subscription_menu

        service = _service()
        mock_q.text.return_value.ask.side_effect = ["30", " , "]

        split_subscription_menu(service)

        service.split_charges.assert_not_called()
        assert "Nenhum membro informado" in _printed(mock_console)

    @patch("streampix.cli.pix_menu.console")
    @patch("streampix.cli.pix_menu.questionary")
    def test_cancel_on_total(self, mock_q, mock_console):
        from streampix.cli.pix_menu import split_subscription_menu

        service = _service()
        mock_q.text.return_value.ask.return_value = None

        split_subscription_menu(service)

        service.split_charges.assert_not_called()


class TestValidatePixMenu:
    @patch("streampix.cli.pix_menu.console")
    @patch("streampix.cli.pix_menu.questionary")
    def test_valid_payload(self, mock_q, mock_console, sample_settings):
        from streampix.cli.pix_menu import validate_pix_menu

        payload = generate_pix_payload(pix_key="fulano@example.com", amount=Decimal("18.64"))
        mock_q.text.return_value.ask.return_value = payload

        validate_pix_menu(PaymentService(sample_settings()))

        assert "inválido" not in _printed(mock_console)

    @patch("streampix.cli.pix_menu.console")
    @patch("streampix.cli.pix_menu.questionary")
    def test_invalid_payload(self, mock_q, mock_console, sample_settings):
        from streampix.cli.pix_menu import validate_pix_menu

        mock_q.text.return_value.ask.return_value = "not a pix code"

        validate_pix_menu(PaymentService(sample_settings()))

        assert "Código Pix inválido" in _printed(mock_console)

    @patch("streampix.cli.pix_menu.console")
    @patch("streampix.cli.pix_menu.questionary")
    def test_cancel(self, mock_q, mock_console):
        from streampix.cli.pix_menu import validate_pix_menu

        service = _service()
        mock_q.text.return_value.ask.return_value = ""

        validate_pix_menu(service)

        service.inspect.assert_not_called()

    @patch("streampix.cli.pix_menu.console")
    @patch("streampix.cli.pix_menu.questionary")
    def test_non_finite_amount_reported(self, mock_q, mock_console, sample_settings):
        from streampix.cli.pix_menu import validate_pix_menu
        from streampix.pix import crc16, tlv

        body = tlv("00", "01") + tlv("54", "NaN") + "6304"
        mock_q.text.return_value.ask.return_value = body + crc16(body)

        validate_pix_menu(PaymentService(sample_settings()))

        assert "Código Pix inválido" in _printed(mock_console)
