# -*- coding: utf-8 -*-
"""Unit tests for binding module."""

from typing import Optional

import pytest

from async_upnp_bindgen.binding import create_record_type, synthesize_binding
from async_upnp_bindgen.exceptions import (
    UpnpSchemaError,
    UpnpUnresolvedStateVariableError,
    UpnpUnknownDataTypeError,
    UpnpUnsupportedDataTypeError,
)
from async_upnp_bindgen.scpd import (
    Action,
    Argument,
    Scpd,
    SpecVersion,
    StateVariable,
    parse_scpd,
)

from .conftest import read_file

RC_URN = "urn:schemas-upnp-org:service:RenderingControl:1"


def _rendering_control():
    scpd = parse_scpd(read_file("RenderingControl1.xml"))
    return synthesize_binding(
        scpd,
        "RenderingControl",
        "/MediaRenderer/RenderingControl/Control",
        "/MediaRenderer/RenderingControl/Event",
    )


def test_synthesize() -> None:
    """Test synthesizing a binding definition."""
    definition = _rendering_control()
    assert definition.service_name == "RenderingControl"
    assert definition.service_type == RC_URN
    assert definition.control_path == "/MediaRenderer/RenderingControl/Control"
    assert definition.event_path == "/MediaRenderer/RenderingControl/Event"
    assert list(definition.actions) == [
        "GetMute",
        "SetMute",
        "GetVolume",
        "SetVolume",
        "GetVolumeDB",
        "GetOutputFixed",
        "RampToVolume",
    ]
    assert definition.soap_action("GetVolume") == f"{RC_URN}#GetVolume"
    assert [field.name for field in definition.evented] == ["LastChange"]


def test_request_type() -> None:
    """Test the request type has the in-arguments in order, plus xmlns."""
    action = _rendering_control().action("GetVolume")
    request_type = action.request_type
    assert request_type.__name__ == "GetVolumeArgs"
    assert request_type._fields == ("InstanceID", "Channel", "xmlns")
    assert request_type.__annotations__ == {
        "InstanceID": int,
        "Channel": str,
        "xmlns": str,
    }

    request = request_type(InstanceID=0, Channel="Master")
    assert request.xmlns == RC_URN


def test_response_type() -> None:
    """Test the response type has the out-arguments in order, defaulting to None."""
    action = _rendering_control().action("GetVolume")
    response_type = action.response_type
    assert response_type.__name__ == "GetVolumeResponse"
    assert response_type._fields == ("CurrentVolume",)
    assert response_type.__annotations__ == {"CurrentVolume": Optional[int]}
    assert response_type().CurrentVolume is None
    assert action.response_element == "GetVolumeResponse"


def test_field_types() -> None:
    """Test field types follow the related state variables."""
    action = _rendering_control().action("RampToVolume")
    assert action.in_field("DesiredVolume").data_type == "ui2"
    assert action.in_field("ResetVolumeAfter").type_info.python_type is bool
    assert action.in_field("Channel").allowed_values == ("Master", "LF", "RF")
    assert action.in_field("DesiredVolume").allowed_value_range is not None
    assert action.out_field("RampTime").data_type == "ui4"
    with pytest.raises(KeyError):
        action.in_field("RampTime")


def test_action_without_arguments() -> None:
    """Test an action without arguments has empty request and response types."""
    scpd = parse_scpd(read_file("Evented1.xml"))
    definition = synthesize_binding(
        scpd, "Evented", "/Evented/Control", "/Evented/Event"
    )
    action = definition.action("Reset")
    assert action.in_fields == ()
    assert action.out_fields == ()
    assert action.request_type._fields == ("xmlns",)
    assert action.response_type._fields == ()
    assert definition.service_type == "urn:schemas-upnp-org:service:Evented:1"


def test_evented_order() -> None:
    """Test evented fields keep document order."""
    scpd = parse_scpd(read_file("Evented1.xml"))
    definition = synthesize_binding(
        scpd, "Evented", "/Evented/Control", "/Evented/Event"
    )
    assert [field.name for field in definition.evented] == ["A", "B", "D"]
    assert definition.evented_field("A").data_type == "ui4"
    assert definition.evented_field("C") is None


def test_explicit_service_type() -> None:
    """Test the service type can be given."""
    scpd = parse_scpd(read_file("Evented1.xml"))
    definition = synthesize_binding(
        scpd,
        "Evented",
        "/Evented/Control",
        "/Evented/Event",
        service_type="urn:schemas-sonos-com:service:Evented:2",
    )
    assert (
        definition.soap_action("Reset")
        == "urn:schemas-sonos-com:service:Evented:2#Reset"
    )
    request = definition.action("Reset").request_type()
    assert request.xmlns == "urn:schemas-sonos-com:service:Evented:2"


def _scpd_with_type(data_type: str) -> Scpd:
    return Scpd(
        spec_version=SpecVersion(),
        state_variables=(
            StateVariable("Ok", "ui4"),
            StateVariable("Odd", data_type),
        ),
        actions=(
            Action("GetOk", (Argument("Value", "out", "Ok"),)),
            Action("GetOdd", (Argument("Value", "out", "Odd"),)),
        ),
    )


def test_unknown_data_type_aborts_service() -> None:
    """Test an unmapped data type aborts the whole service."""
    with pytest.raises(UpnpUnknownDataTypeError):
        synthesize_binding(_scpd_with_type("bin.base64"), "Odd", "/c", "/e")

    with pytest.raises(UpnpUnsupportedDataTypeError):
        synthesize_binding(_scpd_with_type("fixed.14.4"), "Odd", "/c", "/e")


def test_unknown_evented_data_type() -> None:
    """Test an unmapped data type of an evented variable aborts the service."""
    scpd = Scpd(
        spec_version=SpecVersion(),
        state_variables=(StateVariable("Blob", "bin.hex", send_events=True),),
        actions=(),
    )
    with pytest.raises(UpnpSchemaError):
        synthesize_binding(scpd, "Blob", "/c", "/e")


def test_create_record_type_invalid_name() -> None:
    """Test names which are not identifiers are a schema error."""
    with pytest.raises(UpnpSchemaError):
        create_record_type("Bad-Name", [("Value", int)])
    with pytest.raises(UpnpSchemaError):
        create_record_type("Good", [("Bad Value", int)])


def test_unresolved_state_variable() -> None:
    """Test an argument referring to an undeclared state variable."""
    scpd = Scpd(
        spec_version=SpecVersion(),
        state_variables=(StateVariable("Volume", "ui2"),),
        actions=(Action("GetVolume", (Argument("CurrentVolume", "out", "Nope"),)),),
    )
    with pytest.raises(UpnpUnresolvedStateVariableError) as err:
        synthesize_binding(scpd, "RenderingControl", "/c", "/e")
    assert err.value.name == "Nope"
    assert "GetVolume.CurrentVolume" in str(err.value)
