# -*- coding: utf-8 -*-
"""Unit tests for codegen module."""

from typing import Any, Dict

import pytest

from async_upnp_bindgen.binding import ServiceBindingDefinition, synthesize_binding
from async_upnp_bindgen.client import UpnpServiceBinding
from async_upnp_bindgen.codegen import generate_source
from async_upnp_bindgen.const import EventedValue
from async_upnp_bindgen.scpd import parse_scpd

from .conftest import DEVICE_URL, RESPONSE_MAP, UpnpTestRequester, read_file


def _definition(fixture: str, service_name: str) -> ServiceBindingDefinition:
    return synthesize_binding(
        parse_scpd(read_file(fixture)),
        service_name,
        f"/MediaRenderer/{service_name}/Control",
        f"/MediaRenderer/{service_name}/Event",
    )


def _load(source: str) -> Dict[str, Any]:
    """Compile and run generated source."""
    namespace: Dict[str, Any] = {"__name__": "generated"}
    exec(compile(source, "<generated>", "exec"), namespace)  # pylint: disable=exec-used
    return namespace


def test_generate_source() -> None:
    """Test the generated source for RenderingControl."""
    source = generate_source(_definition("RenderingControl1.xml", "RenderingControl"))
    assert source.startswith("# -*- coding: utf-8 -*-\n")
    assert "SERVICE_TYPE = 'urn:schemas-upnp-org:service:RenderingControl:1'" in source
    assert "class GetVolumeArgs(NamedTuple):" in source
    assert "class GetVolumeResponse(NamedTuple):" in source
    assert "    CurrentVolume: Optional[int] = None" in source
    assert "    xmlns: str = SERVICE_TYPE" in source
    assert "class RenderingControlService(UpnpServiceBinding):" in source
    assert "    async def async_get_volume_db(" in source
    assert "    def last_change(self) -> Optional[str]:" in source
    assert "from urllib.parse import SplitResult" in source
    assert "    ProgramURI: SplitResult" in source


def test_generate_source_allowed_comments() -> None:
    """Test allowed values and ranges are documented on request fields."""
    source = generate_source(_definition("RenderingControl1.xml", "RenderingControl"))
    assert (
        "    # Allowed Value: Master\n"
        "    # Allowed Value: LF\n"
        "    # Allowed Value: RF\n"
        "    Channel: str\n"
    ) in source
    assert "    # Allowed Range: 0 -> 100 step: 1\n    DesiredVolume: int\n" in source


def test_generated_types() -> None:
    """Test the generated types match the synthesized ones."""
    definition = _definition("RenderingControl1.xml", "RenderingControl")
    namespace = _load(generate_source(definition))

    generated: ServiceBindingDefinition = namespace["DEFINITION"]
    assert generated.service_type == definition.service_type
    assert generated.control_path == definition.control_path
    assert list(generated.actions) == list(definition.actions)
    for name, action in definition.actions.items():
        generated_action = generated.action(name)
        assert generated_action.in_fields == action.in_fields
        assert generated_action.out_fields == action.out_fields
        assert generated_action.request_type._fields == action.request_type._fields
        assert generated_action.response_type._fields == action.response_type._fields
    assert generated.evented == definition.evented

    args = namespace["SetVolumeArgs"](InstanceID=0, Channel="Master", DesiredVolume=5)
    assert args.xmlns == "urn:schemas-upnp-org:service:RenderingControl:1"
    assert namespace["GetVolumeResponse"]().CurrentVolume is None


@pytest.mark.asyncio
async def test_generated_service() -> None:
    """Test calling an action through the generated service class."""
    namespace = _load(
        generate_source(_definition("RenderingControl1.xml", "RenderingControl"))
    )
    requester = UpnpTestRequester(RESPONSE_MAP)
    service = namespace["RenderingControlService"](requester, DEVICE_URL)
    assert isinstance(service, UpnpServiceBinding)

    response = await service.async_get_volume(
        namespace["GetVolumeArgs"](InstanceID=0, Channel="Master")
    )
    assert isinstance(response, namespace["GetVolumeResponse"])
    assert response.CurrentVolume == 42
    assert service.last_change is None


def test_generated_evented_properties() -> None:
    """Test the generated properties reflect handled events."""
    namespace = _load(generate_source(_definition("Evented1.xml", "Evented")))
    service = namespace["EventedService"](UpnpTestRequester(RESPONSE_MAP), DEVICE_URL)
    changes = service.handle_event(
        '<e:propertyset xmlns:e="urn:schemas-upnp-org:event-1-0">'
        "<e:property><A>3</A></e:property>"
        "<e:property><D>yes</D></e:property>"
        "</e:propertyset>"
    )
    assert changes == [EventedValue("A", 3), EventedValue("D", True)]
    assert service.a == 3
    assert service.b is None
    assert service.d is True

    reset_args = namespace["ResetArgs"]()
    assert reset_args == ("urn:schemas-upnp-org:service:Evented:1",)


def test_member_name_collision() -> None:
    """Test evented variables do not shadow members of the binding."""
    scpd = parse_scpd(
        "<scpd><serviceStateTable>"
        '<stateVariable sendEvents="yes"><name>Actions</name>'
        "<dataType>string</dataType></stateVariable>"
        "</serviceStateTable></scpd>"
    )
    definition = synthesize_binding(scpd, "Odd", "/Odd/Control", "/Odd/Event")
    source = generate_source(definition)
    assert "    def actions_value(self) -> Optional[str]:" in source

    namespace = _load(source)
    service = namespace["OddService"](UpnpTestRequester(RESPONSE_MAP), DEVICE_URL)
    assert service.actions == {}
    assert service.actions_value is None
