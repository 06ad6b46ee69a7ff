"""
SMTP Delivery Channel

Sends reminder e-mails over one cached, lazily opened SMTP session.

The session is reused across sends. Every transport failure drops it so
the next call reconnects, and a cached session that went idle on the
server side is checked with NOOP and replaced before use.
"""

import asyncio
import re
import smtplib
import ssl
import threading
from dataclasses import dataclass
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from email.utils import formataddr, make_msgid
from typing import Callable

from dpms.config.settings import Settings, get_settings
from dpms.core.shared.logger import get_channel_logger
from dpms.domains.prescriptions.application.ports import (
    DeliveryFailure,
    DeliveryFailureKind,
    DeliveryResult,
    OutboundMessage,
)

logger = get_channel_logger("smtp")

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
IMPLICIT_TLS_PORT = 465
AUTH_FAILED_CODE = 535


@dataclass(frozen=True)
class SmtpChannelConfig:
    host: str = "smtp.gmail.com"
    port: int = 587
    username: str | None = None
    password: str | None = None
    from_name: str = "Digital Prescription System"
    connect_timeout: float = 10.0
    greeting_timeout: float = 10.0
    socket_timeout: float = 10.0

    @property
    def use_secure_transport(self) -> bool:
        """Implicit TLS on 465, STARTTLS upgrade on every other port."""
        return self.port == IMPLICIT_TLS_PORT

    @property
    def is_configured(self) -> bool:
        return bool(self.username and self.password)

    @property
    def sender(self) -> str:
        return formataddr((self.from_name, self.username or ""))

    @classmethod
    def from_settings(cls, settings: Settings | None = None) -> "SmtpChannelConfig":
        settings = settings or get_settings()
        return cls(
            host=settings.SMTP_HOST,
            port=settings.SMTP_PORT,
            username=settings.SMTP_USERNAME,
            password=settings.SMTP_PASSWORD,
            from_name=settings.SMTP_FROM_NAME,
            connect_timeout=settings.SMTP_CONNECT_TIMEOUT,
            greeting_timeout=settings.SMTP_GREETING_TIMEOUT,
            socket_timeout=settings.SMTP_SOCKET_TIMEOUT,
        )


ConnectionFactory = Callable[[SmtpChannelConfig], smtplib.SMTP]


def open_smtp_connection(config: SmtpChannelConfig) -> smtplib.SMTP:
    """
    Connect, secure and log in.

    smtplib reads the server greeting inside connect(), so the connect phase
    is bounded by the larger of the connect and greeting timeouts. After
    that the socket uses the inactivity timeout.
    """
    timeout = max(config.connect_timeout, config.greeting_timeout)
    context = ssl.create_default_context()

    if config.use_secure_transport:
        connection: smtplib.SMTP = smtplib.SMTP_SSL(config.host, config.port, timeout=timeout, context=context)
    else:
        connection = smtplib.SMTP(config.host, config.port, timeout=timeout)

    try:
        if not config.use_secure_transport:
            connection.ehlo()
            connection.starttls(context=context)
            connection.ehlo()
        if connection.sock is not None:
            connection.sock.settimeout(config.socket_timeout)
        connection.login(config.username or "", config.password or "")
    except BaseException:
        connection.close()
        raise
    return connection


def classify_smtp_error(error: BaseException, config: SmtpChannelConfig, recipient: str | None = None) -> DeliveryFailure:
    """Map an smtplib/socket error to a delivery failure kind with an operator hint."""
    if isinstance(error, TimeoutError):
        return DeliveryFailure(
            kind=DeliveryFailureKind.TIMEOUT,
            message="Connection timeout. Please check your internet connection and SMTP settings.",
            hint="The SMTP server did not respond in time. Check firewall settings and network connection.",
        )

    if isinstance(error, smtplib.SMTPAuthenticationError) or (
        isinstance(error, smtplib.SMTPResponseException) and error.smtp_code == AUTH_FAILED_CODE
    ):
        return DeliveryFailure(
            kind=DeliveryFailureKind.AUTHENTICATION,
            message="Authentication failed. Please check SMTP_USERNAME and SMTP_PASSWORD.",
            hint="For Gmail use an App Password with 2-Step Verification enabled, not the account password.",
            smtp_code=error.smtp_code,
        )

    if isinstance(error, smtplib.SMTPConnectError):
        return _connection_failure(config, smtp_code=error.smtp_code)

    if isinstance(error, smtplib.SMTPRecipientsRefused):
        refused = next(iter(error.recipients.values()), (None, b""))
        return DeliveryFailure(
            kind=DeliveryFailureKind.INVALID_ADDRESS,
            message="Invalid email address.",
            hint=f'The recipient email address "{recipient}" was refused by the server.',
            smtp_code=refused[0],
        )

    if isinstance(error, smtplib.SMTPResponseException):
        reply = error.smtp_error.decode(errors="replace") if isinstance(error.smtp_error, bytes) else str(error.smtp_error)
        return DeliveryFailure(
            kind=DeliveryFailureKind.REJECTED,
            message=f"SMTP server error: {error.smtp_code} {reply}",
            hint="The email server returned an error. Check your SMTP credentials.",
            smtp_code=error.smtp_code,
        )

    return _connection_failure(config)


def _connection_failure(config: SmtpChannelConfig, smtp_code: int | None = None) -> DeliveryFailure:
    return DeliveryFailure(
        kind=DeliveryFailureKind.CONNECTION,
        message="Connection failed. Please check your SMTP_HOST and SMTP_PORT settings.",
        hint=f"Unable to connect to {config.host}:{config.port}. Check your internet connection.",
        smtp_code=smtp_code,
    )


class SmtpDeliveryChannel:
    """
    E-mail delivery channel over a single reusable SMTP session.

    A session is a serial conversation, so every use of it happens under a
    re-entrant lock. Blocking smtplib calls run in worker threads.

    Example:
        ```python
        channel = SmtpDeliveryChannel(SmtpChannelConfig.from_settings())
        result = await channel.send(OutboundMessage(to="ana@example.com", subject="Hi", text="..."))
        if not result.success:
            print(result.failure.kind)
        ```
    """

    def __init__(self, config: SmtpChannelConfig, connection_factory: ConnectionFactory | None = None):
        self.config = config
        self._connection_factory = connection_factory or open_smtp_connection
        self._connection: smtplib.SMTP | None = None
        self._lock = threading.RLock()

    @property
    def is_configured(self) -> bool:
        return self.config.is_configured

    @property
    def host(self) -> str:
        return self.config.host

    @property
    def port(self) -> int:
        return self.config.port

    @property
    def username(self) -> str | None:
        return self.config.username

    @property
    def has_cached_connection(self) -> bool:
        return self._connection is not None

    async def send(self, message: OutboundMessage) -> DeliveryResult:
        """Send one message; transport problems come back as a classified failure."""
        recipient = message.to
        if not self.is_configured:
            logger.error("SMTP credentials not configured", recipient=recipient)
            return DeliveryResult.failed(self._not_configured(), recipient)

        if not recipient or not EMAIL_PATTERN.match(recipient):
            logger.warning("Refusing to send to malformed address", recipient=recipient)
            return DeliveryResult.failed(
                DeliveryFailure(
                    kind=DeliveryFailureKind.INVALID_ADDRESS,
                    message="Invalid email format",
                    hint=f'The recipient email address "{recipient}" appears to be invalid.',
                ),
                recipient,
            )

        mime = self._build_mime(message)
        return await asyncio.to_thread(self._send_blocking, mime, recipient)

    async def verify(self) -> DeliveryResult:
        """Check that a session can be opened (or the cached one still answers)."""
        if not self.is_configured:
            return DeliveryResult.failed(self._not_configured())
        return await asyncio.to_thread(self._verify_blocking)

    def invalidate(self) -> None:
        """Drop the cached session; the next call reconnects."""
        with self._lock:
            self._discard_connection()

    async def close(self) -> None:
        """QUIT the cached session if there is one."""
        await asyncio.to_thread(self._quit_blocking)

    def _send_blocking(self, mime: MIMEMultipart, recipient: str) -> DeliveryResult:
        with self._lock:
            try:
                connection = self._acquire_connection()
                connection.send_message(mime)
            except (smtplib.SMTPException, OSError) as e:
                self._discard_connection()
                failure = classify_smtp_error(e, self.config, recipient)
                logger.error(
                    f"Error sending email: {failure.message}",
                    recipient=recipient,
                    kind=failure.kind.value,
                    error=str(e),
                )
                return DeliveryResult.failed(failure, recipient)
            except Exception:
                self._discard_connection()
                raise

        message_id = mime["Message-ID"]
        logger.info("Email sent", recipient=recipient, message_id=message_id)
        return DeliveryResult.ok(recipient=recipient, message_id=message_id)

    def _verify_blocking(self) -> DeliveryResult:
        with self._lock:
            try:
                connection = self._acquire_connection()
                code, reply = connection.noop()
                if code != 250:
                    raise smtplib.SMTPResponseException(code, reply)
            except (smtplib.SMTPException, OSError) as e:
                self._discard_connection()
                failure = classify_smtp_error(e, self.config)
                logger.error(f"SMTP connection test failed: {failure.message}", kind=failure.kind.value, error=str(e))
                return DeliveryResult.failed(failure)
            except Exception:
                self._discard_connection()
                raise

        logger.info("SMTP connection verified", host=self.host, port=self.port)
        return DeliveryResult.ok()

    def _quit_blocking(self) -> None:
        with self._lock:
            connection, self._connection = self._connection, None
            if connection is None:
                return
            try:
                connection.quit()
            except (smtplib.SMTPException, OSError) as e:
                logger.debug(f"SMTP QUIT failed, closing socket: {e}")
                connection.close()

    def _acquire_connection(self) -> smtplib.SMTP:
        """Return a live session, replacing a cached one the server already dropped."""
        if self._connection is not None:
            try:
                code, _ = self._connection.noop()
                if code == 250:
                    return self._connection
            except (smtplib.SMTPException, OSError):
                pass
            logger.info("Cached SMTP session is stale, reconnecting", host=self.host)
            self._discard_connection()

        logger.debug("Opening SMTP session", host=self.host, port=self.port, secure=self.config.use_secure_transport)
        self._connection = self._connection_factory(self.config)
        return self._connection

    def _discard_connection(self) -> None:
        connection, self._connection = self._connection, None
        if connection is not None:
            try:
                connection.close()
            except OSError:
                pass

    def _build_mime(self, message: OutboundMessage) -> MIMEMultipart:
        sender_address = self.config.username or ""
        mime = MIMEMultipart("alternative")
        mime["From"] = self.config.sender
        mime["To"] = message.to
        mime["Reply-To"] = sender_address
        mime["Subject"] = message.subject
        mime["Message-ID"] = make_msgid(domain=sender_address.rpartition("@")[2] or None)
        mime.attach(MIMEText(message.text, "plain", "utf-8"))
        if message.html:
            mime.attach(MIMEText(message.html, "html", "utf-8"))
        return mime

    @staticmethod
    def _not_configured() -> DeliveryFailure:
        return DeliveryFailure(
            kind=DeliveryFailureKind.NOT_CONFIGURED,
            message="Email service not configured. Please contact administrator.",
            hint="Set SMTP_USERNAME and SMTP_PASSWORD in the environment or .env file.",
        )
