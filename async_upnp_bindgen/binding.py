# -*- coding: utf-8 -*-
"""UPnP binding synthesizer module.

Derives, from a parsed SCPD, everything a client of that service needs: a
request and response type per action, the SOAPAction per action, and the set
of evented state variables.
"""

import collections
import logging
from typing import (
    Any,
    Dict,
    Mapping,
    NamedTuple,
    Optional,
    Sequence,
    Tuple,
)

from async_upnp_bindgen.const import REQUEST_NAMESPACE_FIELD, SERVICE_TYPE_TEMPLATE
from async_upnp_bindgen.data_types import DataTypeInfo, map_data_type
from async_upnp_bindgen.exceptions import (
    UpnpSchemaError,
    UpnpUnresolvedStateVariableError,
)
from async_upnp_bindgen.scpd import (
    Action,
    AllowedValueRange,
    Argument,
    Scpd,
    StateVariable,
)

_LOGGER = logging.getLogger(__name__)


class FieldDefinition(NamedTuple):
    """A typed field, backed by a state variable."""

    name: str
    state_variable: StateVariable

    @property
    def data_type(self) -> str:
        """UPnP data type of this field."""
        return self.state_variable.data_type

    @property
    def type_info(self) -> DataTypeInfo:
        """Semantic type of this field."""
        return map_data_type(self.state_variable.data_type)

    @property
    def allowed_values(self) -> Sequence[str]:
        """Allowed values, for documentation only."""
        return self.state_variable.allowed_values

    @property
    def allowed_value_range(self) -> Optional[AllowedValueRange]:
        """Allowed value range, for documentation only."""
        return self.state_variable.allowed_value_range


class ActionDefinition(NamedTuple):
    """Synthesized definition of an action."""

    name: str
    in_fields: Sequence[FieldDefinition]
    out_fields: Sequence[FieldDefinition]
    request_type: type
    response_type: type

    def in_field(self, name: str) -> FieldDefinition:
        """Get in-field by name."""
        for field in self.in_fields:
            if field.name == name:
                return field
        raise KeyError(name)

    def out_field(self, name: str) -> FieldDefinition:
        """Get out-field by name."""
        for field in self.out_fields:
            if field.name == name:
                return field
        raise KeyError(name)

    @property
    def response_element(self) -> str:
        """Name of the element wrapping the response arguments."""
        return f"{self.name}Response"


class ServiceBindingDefinition(NamedTuple):
    """Synthesized definition of a service binding."""

    service_name: str
    service_type: str
    control_path: str
    event_path: str
    actions: Mapping[str, ActionDefinition]
    evented: Sequence[FieldDefinition] = ()

    def action(self, name: str) -> ActionDefinition:
        """Get ActionDefinition by name."""
        return self.actions[name]

    def soap_action(self, action_name: str) -> str:
        """Get the value for the SOAPAction header."""
        return f"{self.service_type}#{action_name}"

    def evented_field(self, name: str) -> Optional[FieldDefinition]:
        """Get evented field by name, if tracked."""
        for field in self.evented:
            if field.name == name:
                return field
        return None


def create_record_type(
    typename: str,
    fields: Sequence[Tuple[str, type]],
    defaults: Optional[Sequence[Any]] = None,
) -> type:
    """Create a named tuple type, annotated with the field types."""
    try:
        record_type = collections.namedtuple(  # type: ignore
            typename, [name for name, _ in fields], defaults=defaults
        )
    except ValueError as err:
        raise UpnpSchemaError(f"Cannot create type {typename}: {err}") from err

    record_type.__annotations__ = dict(fields)
    return record_type


def create_request_type(
    action_name: str, in_fields: Sequence[FieldDefinition], service_type: str
) -> type:
    """Create the request type for an action, including the namespace field."""
    fields = [(field.name, field.type_info.python_type) for field in in_fields]
    fields.append((REQUEST_NAMESPACE_FIELD, str))
    return create_record_type(f"{action_name}Args", fields, defaults=(service_type,))


def create_response_type(
    action_name: str, out_fields: Sequence[FieldDefinition]
) -> type:
    """Create the response type for an action, every field defaults to None."""
    fields = [
        (field.name, Optional[field.type_info.python_type])  # type: ignore
        for field in out_fields
    ]
    return create_record_type(
        f"{action_name}Response", fields, defaults=(None,) * len(fields)
    )


def _create_field(scpd: Scpd, action: Action, argument: Argument) -> FieldDefinition:
    """Resolve the state variable of an argument and check its data type."""
    try:
        state_var = scpd.state_variable(argument.related_state_variable)
    except KeyError as err:
        raise UpnpUnresolvedStateVariableError(
            action.name, argument.name, argument.related_state_variable
        ) from err

    map_data_type(state_var.data_type)
    return FieldDefinition(name=argument.name, state_variable=state_var)


def synthesize_action(
    scpd: Scpd, action: Action, service_type: str
) -> ActionDefinition:
    """Synthesize the definition for a single action."""
    in_fields = tuple(_create_field(scpd, action, arg) for arg in action.in_arguments())
    out_fields = tuple(
        _create_field(scpd, action, arg) for arg in action.out_arguments()
    )
    return ActionDefinition(
        name=action.name,
        in_fields=in_fields,
        out_fields=out_fields,
        request_type=create_request_type(action.name, in_fields, service_type),
        response_type=create_response_type(action.name, out_fields),
    )


def synthesize_binding(
    scpd: Scpd,
    service_name: str,
    control_path: str,
    event_path: str,
    service_type: Optional[str] = None,
) -> ServiceBindingDefinition:
    """
    Synthesize the binding definition for a service.

    Any error aborts the whole service, no partial definition is returned.

    :raise UpnpUnresolvedStateVariableError: Argument refers to an undeclared
        state variable
    :raise UpnpUnknownDataTypeError: A used state variable has an unmapped type
    """
    service_type = service_type or SERVICE_TYPE_TEMPLATE.format(name=service_name)

    actions: Dict[str, ActionDefinition] = {}
    for action in scpd.actions:
        try:
            actions[action.name] = synthesize_action(scpd, action, service_type)
        except UpnpSchemaError as err:
            _LOGGER.debug(
                "Could not synthesize action %s of %s: %s",
                action.name,
                service_name,
                err,
            )
            raise

    evented = []
    for state_var in scpd.evented_state_variables:
        map_data_type(state_var.data_type)
        evented.append(FieldDefinition(name=state_var.name, state_variable=state_var))

    _LOGGER.debug(
        "Synthesized binding for %s, actions: %s, evented: %s",
        service_name,
        ",".join(actions),
        ",".join(field.name for field in evented),
    )
    return ServiceBindingDefinition(
        service_name=service_name,
        service_type=service_type,
        control_path=control_path,
        event_path=event_path,
        actions=actions,
        evented=tuple(evented),
    )
