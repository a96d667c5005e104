# -*- coding: utf-8 -*-
"""UPnP binding generator module."""

from async_upnp_bindgen.binding import ServiceBindingDefinition  # noqa: F401
from async_upnp_bindgen.binding import synthesize_binding  # noqa: F401
from async_upnp_bindgen.client import UpnpBoundAction  # noqa: F401
from async_upnp_bindgen.client import UpnpRequester  # noqa: F401
from async_upnp_bindgen.client import UpnpServiceBinding  # noqa: F401
from async_upnp_bindgen.client_factory import UpnpBindingFactory  # noqa: F401
from async_upnp_bindgen.codegen import generate_source  # noqa: F401
from async_upnp_bindgen.event_handler import UpnpEventHandler  # noqa: F401
from async_upnp_bindgen.exceptions import UpnpError  # noqa: F401
from async_upnp_bindgen.exceptions import UpnpProtocolError  # noqa: F401
from async_upnp_bindgen.exceptions import UpnpSchemaError  # noqa: F401
from async_upnp_bindgen.exceptions import UpnpValueError  # noqa: F401
from async_upnp_bindgen.scpd import parse_scpd  # noqa: F401
