# -*- coding: utf-8 -*-
"""SCPD (Service Control Protocol Description) model and parser."""

import logging
from typing import List, NamedTuple, Optional, Sequence, Union
from xml.etree import ElementTree as ET

import defusedxml.ElementTree as DET
from defusedxml import DefusedXmlException

from async_upnp_bindgen.const import DIRECTION_IN, DIRECTION_OUT
from async_upnp_bindgen.exceptions import (
    UpnpUnresolvedStateVariableError,
    UpnpXmlContentError,
    UpnpXmlParseError,
)

_LOGGER = logging.getLogger(__name__)


class AllowedValueRange(NamedTuple):
    """Allowed value range, as found in the SCPD. Values are kept as text."""

    minimum: Optional[str]
    maximum: Optional[str]
    step: Optional[str] = None


class StateVariable(NamedTuple):
    """State variable of a service."""

    name: str
    data_type: str
    send_events: bool = False
    multicast: bool = False
    default_value: Optional[str] = None
    allowed_value_range: Optional[AllowedValueRange] = None
    allowed_values: Sequence[str] = ()


class Argument(NamedTuple):
    """Argument of an action."""

    name: str
    direction: str
    related_state_variable: str


class Action(NamedTuple):
    """Action of a service."""

    name: str
    arguments: Sequence[Argument] = ()

    def in_arguments(self) -> List[Argument]:
        """Get all in-arguments, in document order."""
        return [arg for arg in self.arguments if arg.direction == DIRECTION_IN]

    def out_arguments(self) -> List[Argument]:
        """Get all out-arguments, in document order."""
        return [arg for arg in self.arguments if arg.direction == DIRECTION_OUT]


class SpecVersion(NamedTuple):
    """UPnP architecture version of the SCPD."""

    major: int = 1
    minor: int = 0


class Scpd(NamedTuple):
    """A parsed SCPD document."""

    spec_version: SpecVersion
    state_variables: Sequence[StateVariable]
    actions: Sequence[Action]

    def state_variable(self, name: str) -> StateVariable:
        """Get StateVariable by name."""
        for state_var in self.state_variables:
            if state_var.name == name:
                return state_var
        raise KeyError(name)

    def has_state_variable(self, name: str) -> bool:
        """Check if a StateVariable called name is declared."""
        return any(state_var.name == name for state_var in self.state_variables)

    def action(self, name: str) -> Action:
        """Get Action by name."""
        for action in self.actions:
            if action.name == name:
                return action
        raise KeyError(name)

    @property
    def evented_state_variables(self) -> List[StateVariable]:
        """Get all StateVariables which send events, in document order."""
        return [
            state_var for state_var in self.state_variables if state_var.send_events
        ]


def _local_name(tag: str) -> str:
    """Strip the namespace from a tag."""
    return tag.rsplit("}", 1)[-1]


def _findtext(element: ET.Element, path: str) -> Optional[str]:
    """Find text of a child, by local name in any namespace."""
    text = element.findtext(path)
    if text is None:
        return None
    return text.strip()


def _required_text(element: ET.Element, path: str, what: str) -> str:
    text = _findtext(element, path)
    if not text:
        raise UpnpXmlContentError(f"Missing {path.split('}')[-1]} for {what}")
    return text


def parse_scpd(scpd_xml: Union[str, bytes]) -> Scpd:
    """
    Parse an SCPD document.

    State variables and actions are kept in document order.

    :raise UpnpXmlParseError: Document is not well-formed
    :raise UpnpXmlContentError: Document does not have the SCPD structure,
        or uses forbidden constructs such as entity declarations
    :raise UpnpUnresolvedStateVariableError: Argument refers to an undeclared
        state variable
    """
    if isinstance(scpd_xml, str):
        scpd_xml = scpd_xml.rstrip(" \t\r\n\0")
    else:
        scpd_xml = scpd_xml.rstrip(b" \t\r\n\0")

    try:
        scpd_el: ET.Element = DET.fromstring(scpd_xml)
    except ET.ParseError as err:
        _LOGGER.debug("Unable to parse SCPD XML: %s", err)
        raise UpnpXmlParseError(err) from err
    except DefusedXmlException as err:
        _LOGGER.debug("Forbidden construct in SCPD XML: %r", err)
        raise UpnpXmlContentError(f"Forbidden XML in SCPD: {err!r}") from err

    if _local_name(scpd_el.tag) != "scpd":
        raise UpnpXmlContentError(f"Invalid document root: {scpd_el.tag}")

    spec_version = _parse_spec_version(scpd_el)
    state_variables = _parse_state_variables(scpd_el)
    actions = _parse_actions(scpd_el)
    scpd = Scpd(
        spec_version=spec_version,
        state_variables=tuple(state_variables),
        actions=tuple(actions),
    )

    for action in scpd.actions:
        for argument in action.arguments:
            if not scpd.has_state_variable(argument.related_state_variable):
                raise UpnpUnresolvedStateVariableError(
                    action.name, argument.name, argument.related_state_variable
                )

    _LOGGER.debug(
        "Parsed SCPD, %s state variables, %s actions",
        len(scpd.state_variables),
        len(scpd.actions),
    )
    return scpd


def _parse_spec_version(scpd_el: ET.Element) -> SpecVersion:
    spec_version_el = scpd_el.find("./{*}specVersion")
    if spec_version_el is None:
        _LOGGER.debug("No specVersion in SCPD, assuming 1.0")
        return SpecVersion()

    try:
        return SpecVersion(
            major=int(_findtext(spec_version_el, "./{*}major") or 1),
            minor=int(_findtext(spec_version_el, "./{*}minor") or 0),
        )
    except ValueError as err:
        raise UpnpXmlContentError(f"Invalid specVersion: {err}") from err


def _parse_state_variables(scpd_el: ET.Element) -> List[StateVariable]:
    """Parse the serviceStateTable."""
    state_vars: List[StateVariable] = []
    seen = set()
    for state_var_el in scpd_el.findall("./{*}serviceStateTable/{*}stateVariable"):
        state_var = _parse_state_variable_el(state_var_el)
        if state_var.name in seen:
            raise UpnpXmlContentError(f"Duplicate state variable: {state_var.name}")
        seen.add(state_var.name)
        state_vars.append(state_var)
    return state_vars


def _parse_state_variable_el(state_variable_el: ET.Element) -> StateVariable:
    """Parse XML for state variable."""
    name = _required_text(state_variable_el, "./{*}name", "state variable")
    data_type = _required_text(
        state_variable_el, "./{*}dataType", f"state variable {name}"
    )

    # send events, attribute or (legacy) element
    if "sendEvents" in state_variable_el.attrib:
        send_events = state_variable_el.attrib["sendEvents"] == "yes"
    else:
        send_events = _findtext(state_variable_el, "./{*}sendEventsAttribute") == "yes"
    multicast = state_variable_el.attrib.get("multicast") == "yes"

    allowed_value_range = None
    allowed_value_range_el = state_variable_el.find("./{*}allowedValueRange")
    if allowed_value_range_el is not None:
        allowed_value_range = AllowedValueRange(
            minimum=_findtext(allowed_value_range_el, "./{*}minimum"),
            maximum=_findtext(allowed_value_range_el, "./{*}maximum"),
            step=_findtext(allowed_value_range_el, "./{*}step"),
        )

    allowed_value_els = state_variable_el.findall(
        "./{*}allowedValueList/{*}allowedValue"
    )
    allowed_values = tuple(
        value_el.text
        for value_el in allowed_value_els
        if value_el.text is not None
    )

    return StateVariable(
        name=name,
        data_type=data_type,
        send_events=send_events,
        multicast=multicast,
        default_value=state_variable_el.findtext("./{*}defaultValue"),
        allowed_value_range=allowed_value_range,
        allowed_values=allowed_values,
    )


def _parse_actions(scpd_el: ET.Element) -> List[Action]:
    """Parse the actionList."""
    actions: List[Action] = []
    seen = set()
    for action_el in scpd_el.findall("./{*}actionList/{*}action"):
        action = _parse_action_el(action_el)
        if action.name in seen:
            raise UpnpXmlContentError(f"Duplicate action: {action.name}")
        seen.add(action.name)
        actions.append(action)
    return actions


def _parse_action_el(action_el: ET.Element) -> Action:
    """Parse XML for action."""
    action_name = _required_text(action_el, "./{*}name", "action")

    arguments: List[Argument] = []
    for argument_el in action_el.findall("./{*}argumentList/{*}argument"):
        what = f"argument of action {action_name}"
        argument_name = _required_text(argument_el, "./{*}name", what)
        what = f"argument {action_name}.{argument_name}"
        direction = _required_text(argument_el, "./{*}direction", what)
        if direction not in (DIRECTION_IN, DIRECTION_OUT):
            raise UpnpXmlContentError(
                f"Unexpected action direction for {what}: {direction}"
            )
        state_variable_name = _required_text(
            argument_el, "./{*}relatedStateVariable", what
        )
        arguments.append(
            Argument(
                name=argument_name,
                direction=direction,
                related_state_variable=state_variable_name,
            )
        )

    return Action(name=action_name, arguments=tuple(arguments))
