# -*- coding: utf-8 -*-
"""Exceptions raised by async_upnp_bindgen."""

import asyncio
from typing import Any, Optional
from xml.etree import ElementTree as ET

import aiohttp

# pylint: disable=too-many-ancestors


class UpnpError(Exception):
    """UpnpError."""


class UpnpSchemaError(UpnpError):
    """SCPD document could not be turned into a binding."""


class UpnpXmlParseError(UpnpSchemaError, ET.ParseError):
    """SCPD document is not valid XML."""

    def __init__(self, orig_err: ET.ParseError) -> None:
        """Initialize from original ParseError, to match it."""
        super().__init__(str(orig_err))
        self.code = orig_err.code
        self.position = orig_err.position


class UpnpXmlContentError(UpnpSchemaError):
    """SCPD document does not have the expected structure."""


class UpnpUnresolvedStateVariableError(UpnpSchemaError):
    """Argument refers to a state variable which is not declared."""

    def __init__(self, action_name: str, argument_name: str, name: str) -> None:
        """Initialize."""
        super().__init__(
            f"Unexpected state variable {name} for argument "
            f"{action_name}.{argument_name}"
        )
        self.action_name = action_name
        self.argument_name = argument_name
        self.name = name


class UpnpUnknownDataTypeError(UpnpSchemaError):
    """Data type is not a known UPnP type."""

    def __init__(self, data_type: Optional[str]) -> None:
        """Initialize."""
        super().__init__(f"Unsupported data type: {data_type}")
        self.data_type = data_type


class UpnpUnsupportedDataTypeError(UpnpUnknownDataTypeError):
    """Data type is known, but no mapping exists for it (fixed.p.q)."""


class UpnpValueError(UpnpError, ValueError):
    """Invalid value error."""

    def __init__(self, name: str, value: Any) -> None:
        """Initialize."""
        super().__init__(f"Invalid value for {name}: '{value}'")
        self.name = name
        self.value = value


class UpnpProtocolError(UpnpError):
    """Unexpected response from the UPnP device.

    Raised when the response envelope lacks the body element for the called
    action. SOAP faults end up here as well.
    """


class UpnpResponseParseError(UpnpProtocolError):
    """Response from the UPnP device is not valid XML."""


class UpnpResponseValueError(UpnpProtocolError):
    """Response from the UPnP device contains an invalid value."""

    def __init__(self, name: str, value: Any) -> None:
        """Initialize."""
        super().__init__(f"Invalid value in response for {name}: '{value}'")
        self.name = name
        self.value = value


class UpnpEventParseError(UpnpError):
    """Notification body could not be parsed. Never leaves the event handler."""


class UpnpCommunicationError(UpnpError, aiohttp.ClientError):
    """Error occurred while communicating with the UPnP device ."""


class UpnpResponseError(UpnpCommunicationError):
    """HTTP error code returned by the UPnP device."""

    def __init__(
        self,
        status: int,
        headers: Optional[aiohttp.typedefs.LooseHeaders] = None,
        message: Optional[str] = None,
    ) -> None:
        """Initialize."""
        super().__init__(message or f"Did not receive HTTP 200 but {status}")
        self.status = status
        self.headers = headers


class UpnpClientResponseError(aiohttp.ClientResponseError, UpnpCommunicationError):
    """HTTP response error with more details from aiohttp."""


class UpnpConnectionError(UpnpCommunicationError, aiohttp.ClientConnectionError):
    """Error in the underlying connection to the UPnP device.

    This could indicate that the device is offline.
    """


class UpnpConnectionTimeoutError(
    UpnpConnectionError, aiohttp.ServerTimeoutError, asyncio.TimeoutError
):
    """Timeout while communicating with the device."""
