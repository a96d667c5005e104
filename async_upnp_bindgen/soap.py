# -*- coding: utf-8 -*-
"""SOAP execution protocol, shared by every action of every binding."""

import logging
from typing import TYPE_CHECKING, Dict, Mapping, Optional, Sequence, Tuple, Union
from xml.etree import ElementTree as ET
from xml.sax.saxutils import escape, quoteattr

import defusedxml.ElementTree as DET
from defusedxml import DefusedXmlException

from async_upnp_bindgen.const import (
    SOAP_CONTENT_TYPE,
    SOAP_ENCODING_SCHEMA,
    SOAP_ENVELOPE_SCHEMA,
    XML_DECLARATION,
)
from async_upnp_bindgen.exceptions import UpnpProtocolError, UpnpResponseParseError

if TYPE_CHECKING:
    from async_upnp_bindgen.client import UpnpRequester

_LOGGER = logging.getLogger(__name__)

# Carriage returns are normalized away by XML parsers unless escaped.
_ESCAPE_ENTITIES = {"\r": "&#13;"}


def _local_name(tag: str) -> str:
    return tag.rsplit("}", 1)[-1]


def build_envelope(
    action_name: str, namespace: str, arguments: Sequence[Tuple[str, str]]
) -> str:
    """Build the SOAP envelope for an action call, arguments are UPnP values."""
    soap_args = "".join(
        f"<{name}>{escape(value, _ESCAPE_ENTITIES)}</{name}>"
        for name, value in arguments
    )
    return (
        f"{XML_DECLARATION}"
        f"<s:Envelope xmlns:s={quoteattr(SOAP_ENVELOPE_SCHEMA)}"
        f" s:encodingStyle={quoteattr(SOAP_ENCODING_SCHEMA)}>"
        f"<s:Body>"
        f"<u:{action_name} xmlns:u={quoteattr(namespace)}>"
        f"{soap_args}"
        f"</u:{action_name}>"
        f"</s:Body>"
        f"</s:Envelope>"
    )


def build_headers(service_type: str, action_name: str) -> Dict[str, str]:
    """Build the HTTP headers for an action call."""
    return {
        "Content-Type": SOAP_CONTENT_TYPE,
        "SOAPAction": f"{service_type}#{action_name}",
    }


def parse_envelope_body(
    body: Union[str, bytes], element_name: str
) -> Optional[ET.Element]:
    """
    Find the element called element_name in the Body of a SOAP envelope.

    Namespaces are ignored when matching.

    :return element, or None if the envelope does not carry it
    :raise UpnpResponseParseError: body is not well-formed XML, or uses
        forbidden constructs such as entity declarations
    """
    if isinstance(body, bytes):
        body = body.decode("utf-8", errors="replace")
    stripped_body = body.strip(" \t\r\n\0")
    try:
        envelope_el: ET.Element = DET.fromstring(stripped_body)
    except ET.ParseError as err:
        _LOGGER.debug("Unable to parse XML: %s\nXML:\n%s", err, body)
        raise UpnpResponseParseError(f"Invalid XML in envelope: {err}") from err
    except DefusedXmlException as err:
        _LOGGER.debug("Forbidden construct in XML: %r\nXML:\n%s", err, body)
        raise UpnpResponseParseError(f"Forbidden XML in envelope: {err!r}") from err

    if _local_name(envelope_el.tag) != "Envelope":
        return None

    for body_el in envelope_el:
        if _local_name(body_el.tag) != "Body":
            continue
        for element in body_el:
            if _local_name(element.tag) == element_name:
                return element

    return None


def element_values(element: ET.Element) -> Dict[str, Optional[str]]:
    """Get the text of all children of element, keyed by local name."""
    return {_local_name(child.tag): child.text for child in element}


def element_namespace(element: ET.Element) -> Optional[str]:
    """Get the namespace of element, if any."""
    if element.tag.startswith("{"):
        return element.tag[1:].split("}", 1)[0]
    return None


def _service_name(service_type: str) -> str:
    """Get a short name from a service type URN."""
    parts = service_type.split(":")
    if len(parts) >= 2:
        return parts[-2].lower()
    return service_type


async def async_execute(
    requester: "UpnpRequester",
    control_url: str,
    service_type: str,
    action_name: str,
    arguments: Sequence[Tuple[str, str]],
    namespace: Optional[str] = None,
) -> Mapping[str, Optional[str]]:
    """
    Execute an action: POST the envelope and unpack the response.

    A single request/response pair, no retries. The HTTP status is not
    checked: a response without the expected body is an error either way.

    :param namespace Value for xmlns:u, defaults to service_type
    :return out-arguments, UPnP values keyed by name
    :raise UpnpCommunicationError: Transport failure, from the requester
    :raise UpnpResponseParseError: Response is not well-formed XML
    :raise UpnpProtocolError: Response does not carry <action_name>Response
    """
    body = build_envelope(action_name, namespace or service_type, arguments)
    headers = build_headers(service_type, action_name)

    _LOGGER.debug("Calling %s#%s at %s", service_type, action_name, control_url)
    (
        status_code,
        _response_headers,
        response_body,
    ) = await requester.async_http_request("POST", control_url, headers, body)

    response_el = parse_envelope_body(response_body or "", f"{action_name}Response")
    if response_el is None:
        _LOGGER.debug(
            "Unexpected response, status: %s, body: %s", status_code, response_body
        )
        raise UpnpProtocolError(
            f"unexpected response from service calling "
            f"{_service_name(service_type)}.{action_name}()"
        )

    return element_values(response_el)
