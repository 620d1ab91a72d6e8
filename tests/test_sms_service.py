"""
Unit tests for SMS delivery through the Twilio REST API
"""

import asyncio

import httpx
import pytest

from nco_search.services.sms_service import (
    TwilioSMSClient, ConsoleSMSClient, SMSDeliveryError,
    format_phone_e164, build_otp_message
)

ACCOUNT_SID = "AC0123456789abcdef0123456789abcdef"

def make_client(handler, **kwargs):
    options = {
        "account_sid": ACCOUNT_SID,
        "auth_token": "token",
        "from_number": "+15005550006",
        "transport": httpx.MockTransport(handler),
    }
    options.update(kwargs)
    return TwilioSMSClient(**options)

class TestPhoneFormatting:

    def test_adds_country_code(self):
        assert format_phone_e164("9876543210", "+91") == "+919876543210"

    def test_keeps_e164(self):
        assert format_phone_e164("+919876543210") == "+919876543210"

    def test_message_contains_code_and_expiry(self):
        message = build_otp_message("123456")
        assert "123456" in message
        assert "5 minutes" in message

class TestTwilioSMSClient:
    """Test cases for the Twilio adapter"""

    def test_send_success(self):
        captured = {}

        def handler(request: httpx.Request) -> httpx.Response:
            captured["url"] = str(request.url)
            captured["body"] = request.content.decode()
            captured["auth"] = request.headers.get("authorization")
            return httpx.Response(201, json={"sid": "SM123", "status": "queued"})

        sid = asyncio.run(make_client(handler).send_otp("9876543210", "123456"))

        assert sid == "SM123"
        assert captured["url"].endswith(f"/Accounts/{ACCOUNT_SID}/Messages.json")
        assert "To=%2B919876543210" in captured["body"]
        assert "123456" in captured["body"]
        assert captured["auth"].startswith("Basic ")

    @pytest.mark.parametrize("code, expected", [
        (21211, "Invalid phone number format"),
        (21608, "not verified"),
        (21606, "not a valid Twilio number"),
    ])
    def test_known_provider_errors(self, code, expected):
        def handler(request):
            return httpx.Response(400, json={"code": code, "message": "provider text"})

        with pytest.raises(SMSDeliveryError) as exc_info:
            asyncio.run(make_client(handler).send_otp("9876543210", "123456"))

        assert expected in exc_info.value.message
        assert exc_info.value.provider_code == code

    def test_unknown_provider_error(self):
        def handler(request):
            return httpx.Response(500, json={"code": 20500, "message": "Internal Server Error"})

        with pytest.raises(SMSDeliveryError) as exc_info:
            asyncio.run(make_client(handler).send_otp("9876543210", "123456"))

        assert exc_info.value.message == "Failed to send OTP: Internal Server Error"

    def test_network_failure(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        with pytest.raises(SMSDeliveryError):
            asyncio.run(make_client(handler).send_otp("9876543210", "123456"))

    def test_not_configured(self):
        def handler(request):
            raise AssertionError("no request expected")

        client = make_client(handler, account_sid="your_account_sid_here")
        assert not client.is_configured

        with pytest.raises(SMSDeliveryError) as exc_info:
            asyncio.run(client.send_otp("9876543210", "123456"))
        assert "not configured" in exc_info.value.message

class TestConsoleSMSClient:

    def test_logs_code(self, caplog):
        with caplog.at_level("WARNING"):
            result = asyncio.run(ConsoleSMSClient().send_otp("9876543210", "123456"))
        assert result == "console"
        assert "123456" in caplog.text
