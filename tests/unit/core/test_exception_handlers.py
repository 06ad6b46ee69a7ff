"""
Unit tests for the domain exception to HTTP status mapping.
"""

import pytest

from dpms.api.exception_handlers import error_body, status_code_for
from dpms.core.domain import (
    ChannelAuthFailureException,
    ChannelConnectionFailureException,
    ChannelInvalidAddressException,
    ChannelNotConfiguredException,
    ChannelRejectedException,
    DomainException,
    NoContactAddressException,
    ValidationException,
)


@pytest.mark.unit
@pytest.mark.parametrize(
    "exc,expected",
    [
        (ValidationException("bad", field="timing"), 400),
        (NoContactAddressException(1, 7), 400),
        (ChannelNotConfiguredException("missing"), 503),
        (ChannelAuthFailureException("denied"), 502),
        (ChannelConnectionFailureException("down"), 502),
        (ChannelInvalidAddressException("refused"), 400),
        (ChannelRejectedException("spam"), 502),
        (DomainException("other"), 400),
    ],
)
def test_status_code_for(exc, expected):
    """Test the HTTP status each domain exception maps to."""
    assert status_code_for(exc) == expected


@pytest.mark.unit
def test_channel_exception_details_carry_hint():
    """Test that channel exceptions expose their hint and SMTP code as details."""
    # Act
    exc = ChannelAuthFailureException("denied", hint="Use an App Password", smtp_code=535)

    # Assert
    assert exc.code == "CHANNEL_AUTH_FAILURE"
    assert exc.details == {"hint": "Use an App Password", "smtp_code": 535}


@pytest.mark.unit
def test_error_body_shape():
    """Test the JSON error body shape."""
    assert error_body("nope", 404, "ENTITY_NOT_FOUND") == {
        "error": True,
        "message": "nope",
        "code": "ENTITY_NOT_FOUND",
        "details": None,
        "status_code": 404,
    }
