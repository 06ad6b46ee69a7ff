"""
Domain Layer - Core DDD building blocks

This module provides base classes for Domain-Driven Design:
- Entities: Objects with identity and lifecycle
- Value Objects: Immutable objects compared by value
- Exceptions: Domain-specific error handling
"""

from dpms.core.domain.entities import Entity, SoftDeletableEntity
from dpms.core.domain.exceptions import (
    AuthorizationException,
    ChannelAuthFailureException,
    ChannelConnectionFailureException,
    ChannelException,
    ChannelInvalidAddressException,
    ChannelNotConfiguredException,
    ChannelRejectedException,
    ChannelTimeoutException,
    DomainException,
    EntityNotFoundException,
    NoContactAddressException,
    NoMatchingLinesException,
    PayloadAlreadyIssuedException,
    ValidationException,
)
from dpms.core.domain.value_objects import StatusEnum, ValueObject

__all__ = [
    # Entities
    "Entity",
    "SoftDeletableEntity",
    # Value Objects
    "ValueObject",
    "StatusEnum",
    # Exceptions
    "DomainException",
    "ValidationException",
    "EntityNotFoundException",
    "PayloadAlreadyIssuedException",
    "NoContactAddressException",
    "NoMatchingLinesException",
    "AuthorizationException",
    "ChannelException",
    "ChannelNotConfiguredException",
    "ChannelAuthFailureException",
    "ChannelConnectionFailureException",
    "ChannelTimeoutException",
    "ChannelRejectedException",
    "ChannelInvalidAddressException",
]
