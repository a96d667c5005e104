# -*- coding: utf-8 -*-
"""UPnP event notification module."""

import logging
from http import HTTPStatus
from typing import TYPE_CHECKING, Dict, List, Mapping, Optional, Union
from urllib.parse import urlparse
from xml.etree import ElementTree as ET

import defusedxml.ElementTree as DET
from defusedxml import DefusedXmlException

from async_upnp_bindgen.const import NOTIFY_NT, NOTIFY_NTS, EventedValue
from async_upnp_bindgen.exceptions import UpnpEventParseError
from async_upnp_bindgen.utils import CaseInsensitiveDict

if TYPE_CHECKING:
    from async_upnp_bindgen.client import UpnpServiceBinding

_LOGGER = logging.getLogger(__name__)


def _local_name(tag: str) -> str:
    return tag.rsplit("}", 1)[-1]


def parse_property_set(body: Union[str, bytes]) -> List[Dict[str, str]]:
    """
    Parse a propertyset document.

    :return per property element, the contained variables by name
    :raise UpnpEventParseError: body is not a propertyset document
    """
    if isinstance(body, bytes):
        body = body.decode("utf-8", errors="replace")
    stripped_body = body.rstrip(" \t\r\n\0")
    try:
        el_root: ET.Element = DET.fromstring(stripped_body)
    except ET.ParseError as err:
        raise UpnpEventParseError(f"Invalid XML in notification: {err}") from err
    except DefusedXmlException as err:
        raise UpnpEventParseError(f"Forbidden XML in notification: {err!r}") from err

    if _local_name(el_root.tag) != "propertyset":
        raise UpnpEventParseError(f"Invalid document root: {el_root.tag}")

    properties = []
    for el_property in el_root:
        if _local_name(el_property.tag) != "property":
            continue
        properties.append(
            {
                _local_name(el_state_var.tag): el_state_var.text or ""
                for el_state_var in el_property
            }
        )
    return properties


class UpnpEventHandler:
    """
    Routes incoming NOTIFY requests to bindings.

    Bindings are registered by the path of their event URL. Subscribing is
    not done here, the path is what the device will call back on.
    """

    def __init__(self) -> None:
        """Initialize."""
        self._bindings: Dict[str, "UpnpServiceBinding"] = {}

    def register(self, binding: "UpnpServiceBinding") -> None:
        """Register binding, to receive events for its event URL."""
        path = urlparse(binding.event_url).path
        _LOGGER.debug("Registering %s for event path %s", binding, path)
        self._bindings[path] = binding

    def unregister(self, binding: "UpnpServiceBinding") -> None:
        """Unregister binding."""
        path = urlparse(binding.event_url).path
        if self._bindings.get(path) is binding:
            del self._bindings[path]

    def binding_for_path(self, path: str) -> Optional["UpnpServiceBinding"]:
        """Get the binding registered for path."""
        return self._bindings.get(urlparse(path).path)

    def handle_notify(
        self, path: str, headers: Mapping[str, str], body: Union[str, bytes]
    ) -> HTTPStatus:
        """
        Handle a NOTIFY request.

        Malformed bodies are accepted, and dropped.
        """
        headers = CaseInsensitiveDict(headers)

        # ensure valid request
        if "NT" not in headers or "NTS" not in headers:
            return HTTPStatus.BAD_REQUEST

        if headers["NT"] != NOTIFY_NT or headers["NTS"] != NOTIFY_NTS:
            return HTTPStatus.PRECONDITION_FAILED

        binding = self.binding_for_path(path)
        if binding is None:
            _LOGGER.debug("No binding for event path: %s", path)
            return HTTPStatus.NOT_FOUND

        changes: List[EventedValue] = binding.handle_event(body)
        _LOGGER.debug(
            "Got %s change(s) for %s, SID: %s",
            len(changes),
            binding,
            headers.get("SID"),
        )
        return HTTPStatus.OK
