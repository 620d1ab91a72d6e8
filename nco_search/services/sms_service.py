"""
SMS delivery for one-time passcodes
The Twilio client talks to the REST API directly through httpx
"""

from typing import Optional
from fastapi import Request
import httpx
import logging

from nco_search.config import settings

logger = logging.getLogger(__name__)

OTP_MESSAGE_TEMPLATE = (
    "Your NCO Search verification code is: {code}. "
    "Valid for {minutes} minutes. Do not share this code with anyone."
)

# User-facing explanations for Twilio error codes
TWILIO_ERROR_MESSAGES = {
    21211: "Invalid phone number format. Please check the number and try again.",
    21608: "This phone number is not verified. In trial mode, you must verify your phone number in the Twilio console first.",
    21606: 'The "From" phone number is not a valid Twilio number. Please check your Twilio phone number configuration.',
}

class SMSDeliveryError(Exception):
    """Raised when the messaging provider does not accept a message"""
    def __init__(self, message: str, provider_code: Optional[int] = None):
        self.message = message
        self.provider_code = provider_code
        super().__init__(self.message)

def format_phone_e164(phone: str, country_code: str = None) -> str:
    """Prefix the national number with the country code unless already E.164"""
    if phone.startswith('+'):
        return phone
    return f"{country_code or settings.SMS_COUNTRY_CODE}{phone}"

def build_otp_message(code: str) -> str:
    return OTP_MESSAGE_TEMPLATE.format(code=code, minutes=settings.OTP_EXPIRY_MINUTES)

class TwilioSMSClient:
    """Sends messages through Twilio's Messages resource"""

    def __init__(
        self,
        account_sid: str,
        auth_token: str,
        from_number: str,
        base_url: str = "https://api.twilio.com/2010-04-01",
        timeout: float = 5.0,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        self.account_sid = account_sid
        self.auth_token = auth_token
        self.from_number = from_number
        self.base_url = base_url.rstrip('/')
        self.timeout = timeout
        self._transport = transport

    @property
    def is_configured(self) -> bool:
        return bool(
            self.account_sid
            and self.auth_token
            and self.from_number
            and self.account_sid.startswith('AC')
            and self.account_sid != 'your_account_sid_here'
        )

    async def send_otp(self, phone: str, code: str) -> str:
        """Send the code and return the provider's message SID"""
        if not self.is_configured:
            raise SMSDeliveryError(
                "SMS provider is not configured. Set TWILIO_ACCOUNT_SID, "
                "TWILIO_AUTH_TOKEN and TWILIO_PHONE_NUMBER and restart the server."
            )

        formatted_phone = format_phone_e164(phone)
        url = f"{self.base_url}/Accounts/{self.account_sid}/Messages.json"
        logger.info(f"Attempting to send OTP to: {formatted_phone}")

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                response = await client.post(
                    url,
                    data={
                        "To": formatted_phone,
                        "From": self.from_number,
                        "Body": build_otp_message(code),
                    },
                    auth=(self.account_sid, self.auth_token)
                )
        except httpx.HTTPError as e:
            logger.error(f"Twilio request failed: {e}")
            raise SMSDeliveryError(f"Failed to send OTP: {e}") from e

        if response.status_code >= 400:
            try:
                payload = response.json()
            except ValueError:
                payload = {}
            provider_code = payload.get("code")
            provider_message = payload.get("message") or f"HTTP {response.status_code}"
            logger.error(
                f"Twilio SMS error: code={provider_code} status={response.status_code} "
                f"message={provider_message} more_info={payload.get('more_info')}"
            )
            raise SMSDeliveryError(
                TWILIO_ERROR_MESSAGES.get(provider_code, f"Failed to send OTP: {provider_message}"),
                provider_code
            )

        sid = response.json().get("sid", "")
        logger.info(f"OTP sent to {formatted_phone}. Message SID: {sid}")
        return sid

class ConsoleSMSClient:
    """Writes the code to the log instead of sending it; local development only"""

    is_configured = True

    async def send_otp(self, phone: str, code: str) -> str:
        logger.warning(f"[console SMS] OTP for {phone}: {code}")
        return "console"

def build_sms_client():
    if settings.SMS_BACKEND == "console":
        logger.warning("SMS backend is 'console': codes are logged, not delivered")
        return ConsoleSMSClient()
    return TwilioSMSClient(
        account_sid=settings.TWILIO_ACCOUNT_SID,
        auth_token=settings.TWILIO_AUTH_TOKEN,
        from_number=settings.TWILIO_PHONE_NUMBER,
        base_url=settings.TWILIO_API_BASE_URL,
        timeout=settings.SMS_TIMEOUT_SECONDS
    )

def get_sms_client(request: Request):
    """Dependency returning the SMS client built at startup"""
    return request.app.state.sms_client
