# -*- coding: utf-8 -*-
"""Known services of a Sonos ZonePlayer, with their device-scoped endpoints."""

from typing import Dict, NamedTuple, Optional

from async_upnp_bindgen.const import SERVICE_TYPE_TEMPLATE


class KnownService(NamedTuple):
    """Endpoints of a known service, relative to the device URL."""

    name: str
    service_type: str
    control_path: str
    event_path: str
    scpd_path: str


def _known_service(name: str, prefix: str = "") -> KnownService:
    return KnownService(
        name=name,
        service_type=SERVICE_TYPE_TEMPLATE.format(name=name),
        control_path=f"{prefix}/{name}/Control",
        event_path=f"{prefix}/{name}/Event",
        scpd_path=f"/xml/{name}1.xml",
    )


KNOWN_SERVICES: Dict[str, KnownService] = {
    service.name: service
    for service in (
        _known_service("AlarmClock"),
        _known_service("AVTransport", "/MediaRenderer"),
        _known_service("ConnectionManager", "/MediaServer"),
        _known_service("ContentDirectory", "/MediaServer"),
        _known_service("DeviceProperties"),
        _known_service("GroupManagement"),
        _known_service("GroupRenderingControl", "/MediaRenderer"),
        _known_service("MusicServices"),
        _known_service("QPlay"),
        _known_service("Queue", "/MediaRenderer"),
        _known_service("RenderingControl", "/MediaRenderer"),
        _known_service("SystemProperties"),
        _known_service("VirtualLineIn", "/MediaRenderer"),
        _known_service("ZoneGroupTopology"),
    )
}


def known_service(name: str) -> Optional[KnownService]:
    """Get a known service by name, case-insensitive."""
    if name in KNOWN_SERVICES:
        return KNOWN_SERVICES[name]

    for service_name, service in KNOWN_SERVICES.items():
        if service_name.lower() == name.lower():
            return service

    return None
