# -*- coding: utf-8 -*-
"""Constants module."""

from typing import NamedTuple, Optional

NS = {
    "soap_envelope": "http://schemas.xmlsoap.org/soap/envelope/",
    "soap_encoding": "http://schemas.xmlsoap.org/soap/encoding/",
}

SOAP_ENVELOPE_SCHEMA = NS["soap_envelope"]
SOAP_ENCODING_SCHEMA = NS["soap_encoding"]
XML_DECLARATION = '<?xml version="1.0"?>'
SOAP_CONTENT_TYPE = 'text/xml; charset="utf-8"'

# Name of the protocol-mandated field on every request type, carrying the
# service type URN (emitted as xmlns:u on the action element).
REQUEST_NAMESPACE_FIELD = "xmlns"

DIRECTION_IN = "in"
DIRECTION_OUT = "out"

SERVICE_TYPE_TEMPLATE = "urn:schemas-upnp-org:service:{name}:1"

NOTIFY_NT = "upnp:event"
NOTIFY_NTS = "upnp:propchange"


class EventedValue(NamedTuple):
    """A newly observed value of an evented state variable."""

    name: str
    value: Optional[object]
