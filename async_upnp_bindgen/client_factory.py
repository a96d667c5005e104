# -*- coding: utf-8 -*-
"""UPnP binding factory module."""

import asyncio
import logging
import urllib.parse
from typing import Dict, Optional, Sequence, Tuple, Union

from async_upnp_bindgen.binding import ServiceBindingDefinition, synthesize_binding
from async_upnp_bindgen.client import UpnpRequester, UpnpServiceBinding
from async_upnp_bindgen.exceptions import (
    UpnpError,
    UpnpResponseError,
    UpnpSchemaError,
)
from async_upnp_bindgen.scpd import parse_scpd
from async_upnp_bindgen.services import KnownService, known_service

_LOGGER = logging.getLogger(__name__)


class UpnpBindingFactory:
    """
    Factory for UpnpServiceBinding.

    Use UpnpBindingFactory.async_create_binding() to fetch the SCPD of a
    known service from a device and bind to it. You have probably received
    the device URL from SSDP discovery.
    """

    def __init__(self, requester: UpnpRequester) -> None:
        """Initialize."""
        self.requester = requester
        self._definitions: Dict[Tuple[str, str], ServiceBindingDefinition] = {}

    @staticmethod
    def _resolve_service(service_name: str) -> KnownService:
        service = known_service(service_name)
        if service is None:
            raise UpnpError(f"Unknown service: {service_name}")
        return service

    def create_definition(
        self,
        scpd_xml: Union[str, bytes],
        service_name: str,
        control_path: Optional[str] = None,
        event_path: Optional[str] = None,
        service_type: Optional[str] = None,
    ) -> ServiceBindingDefinition:
        """
        Parse an SCPD and synthesize the binding definition.

        Endpoints and service type default to those of the known service.

        :raise UpnpSchemaError: SCPD could not be turned into a binding
        """
        if control_path is None or event_path is None:
            service = self._resolve_service(service_name)
            control_path = control_path or service.control_path
            event_path = event_path or service.event_path
            service_type = service_type or service.service_type

        scpd = parse_scpd(scpd_xml)
        return synthesize_binding(
            scpd,
            service_name,
            control_path,
            event_path,
            service_type=service_type,
        )

    def create_binding(
        self,
        scpd_xml: Union[str, bytes],
        device_url: str,
        service_name: str,
        control_path: Optional[str] = None,
        event_path: Optional[str] = None,
        service_type: Optional[str] = None,
    ) -> UpnpServiceBinding:
        """Create a UpnpServiceBinding from an SCPD document."""
        definition = self.create_definition(
            scpd_xml, service_name, control_path, event_path, service_type
        )
        return UpnpServiceBinding(definition, self.requester, device_url)

    async def async_create_binding(
        self,
        device_url: str,
        service_name: str,
        scpd_path: Optional[str] = None,
    ) -> UpnpServiceBinding:
        """
        Create a UpnpServiceBinding for a known service, fetching its SCPD.

        Definitions are cached per service and SCPD URL.
        """
        service = self._resolve_service(service_name)
        scpd_url = urllib.parse.urljoin(device_url, scpd_path or service.scpd_path)

        key = (service.name, scpd_url)
        definition = self._definitions.get(key)
        if definition is None:
            _LOGGER.debug("Creating binding for %s, SCPD: %s", service.name, scpd_url)
            scpd_xml = await self._async_get(scpd_url)
            definition = self.create_definition(scpd_xml, service.name)
            self._definitions[key] = definition

        return UpnpServiceBinding(definition, self.requester, device_url)

    async def async_create_bindings(
        self,
        device_url: str,
        service_names: Sequence[str],
    ) -> Tuple[Dict[str, UpnpServiceBinding], Dict[str, UpnpError]]:
        """
        Create bindings for several services.

        A service which fails does not stop the others.

        :return bindings and errors, both keyed by service name
        """
        results = await asyncio.gather(
            *(
                self.async_create_binding(device_url, service_name)
                for service_name in service_names
            ),
            return_exceptions=True,
        )

        bindings: Dict[str, UpnpServiceBinding] = {}
        errors: Dict[str, UpnpError] = {}
        for service_name, result in zip(service_names, results):
            if isinstance(result, UpnpServiceBinding):
                bindings[service_name] = result
            elif isinstance(result, UpnpError):
                if isinstance(result, UpnpSchemaError):
                    _LOGGER.warning(
                        "Could not create binding for %s: %s", service_name, result
                    )
                errors[service_name] = result
            else:
                raise result

        return bindings, errors

    async def _async_get(self, url: str) -> str:
        """Get a url."""
        (
            status_code,
            response_headers,
            response_body,
        ) = await self.requester.async_http_request("GET", url)

        if status_code != 200:
            raise UpnpResponseError(status=status_code, headers=response_headers)

        return response_body or ""
