# -*- coding: utf-8 -*-
"""Fixtures for async_upnp_bindgen tests."""

import asyncio
import os.path
from collections import deque
from copy import deepcopy
from typing import (
    Deque,
    List,
    Mapping,
    MutableMapping,
    Optional,
    Tuple,
    cast,
)

from async_upnp_bindgen.client import UpnpRequester

DEVICE_URL = "http://sonos:1400/"
CONTROL_URL = "http://sonos:1400/MediaRenderer/RenderingControl/Control"


def read_file(filename: str) -> str:
    """Read file."""
    path = os.path.join(os.path.dirname(__file__), "fixtures", filename)
    with open(path, encoding="utf-8") as file:
        return file.read()


def soap_response(action_name: str, values: Mapping[str, str]) -> str:
    """Create a response envelope, as a RenderingControl would send it."""
    out_args = "".join(f"<{name}>{value}</{name}>" for name, value in values.items())
    return (
        '<?xml version="1.0"?>'
        '<s:Envelope xmlns:s="http://schemas.xmlsoap.org/soap/envelope/" '
        's:encodingStyle="http://schemas.xmlsoap.org/soap/encoding/">'
        "<s:Body>"
        f'<u:{action_name}Response '
        'xmlns:u="urn:schemas-upnp-org:service:RenderingControl:1">'
        f"{out_args}"
        f"</u:{action_name}Response>"
        "</s:Body>"
        "</s:Envelope>"
    )


SOAP_FAULT = (
    '<?xml version="1.0"?>'
    '<s:Envelope xmlns:s="http://schemas.xmlsoap.org/soap/envelope/" '
    's:encodingStyle="http://schemas.xmlsoap.org/soap/encoding/">'
    "<s:Body>"
    "<s:Fault>"
    "<faultcode>s:Client</faultcode>"
    "<faultstring>UPnPError</faultstring>"
    "<detail>"
    '<UPnPError xmlns="urn:schemas-upnp-org:control-1-0">'
    "<errorCode>402</errorCode>"
    "</UPnPError>"
    "</detail>"
    "</s:Fault>"
    "</s:Body>"
    "</s:Envelope>"
)


class UpnpTestRequester(UpnpRequester):
    """Test requester, replies from a response map and records all requests."""

    # pylint: disable=too-few-public-methods

    def __init__(
        self,
        response_map: Mapping[Tuple[str, str], Tuple[int, Mapping[str, str], str]],
    ) -> None:
        """Class initializer."""
        self.response_map: MutableMapping[
            Tuple[str, str],
            Tuple[int, MutableMapping[str, str], str],
        ] = deepcopy(cast(MutableMapping, response_map))
        self.exceptions: Deque[Optional[Exception]] = deque()
        self.requests: List[
            Tuple[str, str, Optional[Mapping[str, str]], Optional[str]]
        ] = []

    async def async_http_request(
        self,
        method: str,
        url: str,
        headers: Optional[Mapping[str, str]] = None,
        body: Optional[str] = None,
    ) -> Tuple[int, Mapping, str]:
        """Do a HTTP request."""
        await asyncio.sleep(0.01)
        self.requests.append((method, url, headers, body))

        if self.exceptions:
            exception = self.exceptions.popleft()
            if exception is not None:
                raise exception

        key = (method, url)
        if key not in self.response_map:
            raise KeyError(f"Request not in response map: {key}")

        return self.response_map[key]


RESPONSE_MAP: Mapping[Tuple[str, str], Tuple[int, Mapping[str, str], str]] = {
    ("GET", "http://sonos:1400/xml/RenderingControl1.xml"): (
        200,
        {},
        read_file("RenderingControl1.xml"),
    ),
    ("GET", "http://sonos:1400/xml/AlarmClock1.xml"): (
        200,
        {},
        read_file("scpd_unresolved.xml"),
    ),
    ("GET", "http://sonos:1400/xml/QPlay1.xml"): (
        404,
        {},
        "",
    ),
    ("POST", CONTROL_URL): (
        200,
        {},
        soap_response("GetVolume", {"CurrentVolume": "42"}),
    ),
}
