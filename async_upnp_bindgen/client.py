# -*- coding: utf-8 -*-
"""UPnP service binding module."""

import logging
import threading
import urllib.parse
from abc import ABC
from typing import (
    Any,
    Callable,
    Dict,
    List,
    Mapping,
    Optional,
    Sequence,
    Tuple,
    Union,
)

import voluptuous as vol

from async_upnp_bindgen import soap
from async_upnp_bindgen.binding import (
    ActionDefinition,
    FieldDefinition,
    ServiceBindingDefinition,
)
from async_upnp_bindgen.const import REQUEST_NAMESPACE_FIELD, EventedValue
from async_upnp_bindgen.event_handler import parse_property_set
from async_upnp_bindgen.exceptions import (
    UpnpError,
    UpnpEventParseError,
    UpnpProtocolError,
    UpnpResponseValueError,
    UpnpValueError,
)

_LOGGER = logging.getLogger(__name__)


EventCallbackType = Callable[["UpnpServiceBinding", Sequence[EventedValue]], None]


class UpnpRequester(ABC):
    """
    Abstract base class used for performing async HTTP requests.

    Implement method async_http_request() in your concrete class.
    """

    # pylint: disable=too-few-public-methods

    async def async_http_request(
        self,
        method: str,
        url: str,
        headers: Optional[Mapping[str, str]] = None,
        body: Optional[str] = None,
    ) -> Tuple[int, Mapping[str, str], str]:
        """
        Do a HTTP request.

        :param method HTTP Method
        :param url URL to call
        :param headers Headers to send
        :param body Body to send

        :return status code, headers, body
        """
        raise NotImplementedError()


def _coerce_python(field: FieldDefinition, upnp_value: Optional[str]) -> Any:
    """
    Coerce a UPnP value to Python.

    Empty values are None, except for text types.

    :raise ValueError: value is not valid for the type of field
    """
    type_info = field.type_info
    if not upnp_value:
        return "" if type_info.python_type is str else None
    return type_info.coerce_python(upnp_value)


class UpnpBoundAction:
    """An action of a service binding, bound to its control URL."""

    def __init__(
        self, binding: "UpnpServiceBinding", definition: ActionDefinition
    ) -> None:
        """Initialize."""
        self._binding = binding
        self._definition = definition

    @property
    def name(self) -> str:
        """Get the name."""
        return self._definition.name

    @property
    def definition(self) -> ActionDefinition:
        """Get the synthesized definition."""
        return self._definition

    @property
    def request_type(self) -> type:
        """Get the request type."""
        return self._definition.request_type

    @property
    def response_type(self) -> type:
        """Get the response type."""
        return self._definition.response_type

    @property
    def soap_action(self) -> str:
        """Get the value for the SOAPAction header."""
        return self._binding.definition.soap_action(self.name)

    def __str__(self) -> str:
        """To string."""
        return f"<UpnpBoundAction({self.name})>"

    def __repr__(self) -> str:
        """To repr."""
        in_names = [field.name for field in self._definition.in_fields]
        out_names = [field.name for field in self._definition.out_fields]
        return f"<UpnpBoundAction({self.name})({in_names}) -> {out_names}>"

    def create_request_value(self, request: Any = None, **kwargs: Any) -> Any:
        """
        Create the request value, from a request or from keyword arguments.

        Any object with attributes named after the in-arguments is accepted
        as request.
        """
        if request is not None:
            if kwargs:
                raise UpnpError("Give either a request or keyword arguments")
            return request

        for field in self._definition.in_fields:
            if field.name not in kwargs:
                raise UpnpValueError(field.name, None)
        try:
            return self.request_type(**kwargs)
        except TypeError as err:
            raise UpnpError(f"Invalid arguments for {self.name}: {err}") from err

    def format_arguments(self, request: Any) -> List[Tuple[str, str]]:
        """Validate request and coerce it to UPnP values, in document order."""
        arguments = []
        for field in self._definition.in_fields:
            if not hasattr(request, field.name):
                raise UpnpValueError(field.name, None)
            value = getattr(request, field.name)
            type_info = field.type_info
            try:
                value = type_info.validate(value)
            except vol.Invalid as err:
                raise UpnpValueError(field.name, value) from err
            arguments.append((field.name, type_info.coerce_upnp(value)))
        return arguments

    def create_request(
        self, request: Any = None, **kwargs: Any
    ) -> Tuple[str, Mapping[str, str], str]:
        """Create URL, headers and body for this to-be-called action."""
        request = self.create_request_value(request, **kwargs)
        service_type = self._binding.service_type
        namespace = getattr(request, REQUEST_NAMESPACE_FIELD, None) or service_type
        body = soap.build_envelope(
            self.name, namespace, self.format_arguments(request)
        )
        headers = soap.build_headers(service_type, self.name)
        return self._binding.control_url, headers, body

    def parse_request(self, body: Union[str, bytes]) -> Any:
        """Parse a request envelope for this action, back into a request value."""
        action_el = soap.parse_envelope_body(body, self.name)
        if action_el is None:
            raise UpnpProtocolError(f"Envelope does not carry {self.name}")

        values = soap.element_values(action_el)
        kwargs: Dict[str, Any] = {}
        for field in self._definition.in_fields:
            try:
                kwargs[field.name] = _coerce_python(field, values.get(field.name))
            except ValueError as err:
                raise UpnpValueError(field.name, values.get(field.name)) from err
        namespace = soap.element_namespace(action_el)
        if namespace:
            kwargs[REQUEST_NAMESPACE_FIELD] = namespace
        return self.request_type(**kwargs)

    def parse_response(self, body: Union[str, bytes]) -> Any:
        """Parse a response envelope for this action."""
        response_el = soap.parse_envelope_body(body, self._definition.response_element)
        if response_el is None:
            raise UpnpProtocolError(
                f"unexpected response from service calling "
                f"{self._binding.service_name.lower()}.{self.name}()"
            )
        return self.create_response_value(soap.element_values(response_el))

    def create_response_value(self, values: Mapping[str, Optional[str]]) -> Any:
        """Create the response value from UPnP values, unknown values are ignored."""
        kwargs: Dict[str, Any] = {}
        for field in self._definition.out_fields:
            if field.name not in values:
                continue
            upnp_value = values[field.name]
            try:
                kwargs[field.name] = _coerce_python(field, upnp_value)
            except ValueError as err:
                raise UpnpResponseValueError(field.name, upnp_value) from err
        return self.response_type(**kwargs)

    async def async_call(self, request: Any = None, **kwargs: Any) -> Any:
        """
        Call the action.

        :raise UpnpValueError: Invalid request value
        :raise UpnpCommunicationError: Transport failure
        :raise UpnpProtocolError: Unexpected response
        """
        request = self.create_request_value(request, **kwargs)
        arguments = self.format_arguments(request)
        values = await soap.async_execute(
            self._binding.requester,
            self._binding.control_url,
            self._binding.service_type,
            self.name,
            arguments,
            namespace=getattr(request, REQUEST_NAMESPACE_FIELD, None),
        )
        return self.create_response_value(values)


class UpnpServiceBinding:
    """
    A service binding, bound to a device.

    Actions are independent of each other and can be called concurrently.
    The cached values of evented state variables are only changed by
    handle_event().
    """

    # pylint: disable=too-many-instance-attributes

    def __init__(
        self,
        definition: ServiceBindingDefinition,
        requester: UpnpRequester,
        device_url: str,
    ) -> None:
        """Initialize."""
        self.requester = requester
        self._definition = definition
        self._device_url = device_url
        self._control_url: str = urllib.parse.urljoin(
            device_url, definition.control_path
        )
        self._event_url: str = urllib.parse.urljoin(device_url, definition.event_path)
        self._actions = {
            name: UpnpBoundAction(self, action_definition)
            for name, action_definition in definition.actions.items()
        }

        self._evented_lock = threading.Lock()
        self._evented_values: Dict[str, Any] = {
            field.name: None for field in definition.evented
        }
        self.on_event: Optional[EventCallbackType] = None

    @property
    def definition(self) -> ServiceBindingDefinition:
        """Get the synthesized definition."""
        return self._definition

    @property
    def service_name(self) -> str:
        """Get the service name."""
        return self._definition.service_name

    @property
    def service_type(self) -> str:
        """Get service type for this binding."""
        return self._definition.service_type

    @property
    def device_url(self) -> str:
        """Get the device URL this binding is bound to."""
        return self._device_url

    @property
    def control_url(self) -> str:
        """Get full control-url for this binding."""
        return self._control_url

    @property
    def event_url(self) -> str:
        """Get full event-url for this binding."""
        return self._event_url

    @property
    def actions(self) -> Mapping[str, UpnpBoundAction]:
        """Get all actions."""
        return self._actions

    def has_action(self, name: str) -> bool:
        """Check if self has action called name."""
        return name in self._actions

    def action(self, name: str) -> UpnpBoundAction:
        """Get UpnpBoundAction by name."""
        return self._actions[name]

    async def async_call_action(
        self, action: Union[str, UpnpBoundAction], request: Any = None, **kwargs: Any
    ) -> Any:
        """Call an action, by name or UpnpBoundAction."""
        if isinstance(action, str):
            action = self._actions[action]

        return await action.async_call(request, **kwargs)

    def evented_value(self, name: str) -> Any:
        """Get the last observed value of an evented state variable, or None."""
        with self._evented_lock:
            return self._evented_values[name]

    @property
    def evented_values(self) -> Dict[str, Any]:
        """Get a copy of the last observed values of all evented state variables."""
        with self._evented_lock:
            return dict(self._evented_values)

    def handle_event(self, body: Union[str, bytes]) -> List[EventedValue]:
        """
        Handle the body of a property change notification.

        Updates the cached values and returns the newly observed values, in
        document order. A malformed notification is dropped as a whole and
        yields no changes.

        An empty value of a non-text variable is not reported, as there is no
        value to coerce it to. The other variables in its property are not
        tried in its place.
        """
        try:
            changes = self._parse_event(body)
        except UpnpEventParseError as err:
            _LOGGER.debug("Dropping notification for %s: %s", self, err)
            return []

        with self._evented_lock:
            for change in changes:
                self._evented_values[change.name] = change.value

        if changes and self.on_event:
            # pylint: disable=not-callable
            self.on_event(self, changes)

        return changes

    def _parse_event(self, body: Union[str, bytes]) -> List[EventedValue]:
        """Parse a notification, into the values of tracked state variables."""
        changes = []
        for property_ in parse_property_set(body):
            # A property carries a single variable, first tracked one wins.
            field = next(
                (
                    field
                    for field in self._definition.evented
                    if field.name in property_
                ),
                None,
            )
            if field is None:
                _LOGGER.debug(
                    "Untracked state variable(s) for %s, ignoring: %s",
                    self,
                    ",".join(property_),
                )
                continue

            upnp_value = property_[field.name]
            if not upnp_value and field.type_info.python_type is not str:
                _LOGGER.debug("Empty value for %s, ignoring", field.name)
                continue

            try:
                value = _coerce_python(field, upnp_value)
            except ValueError as err:
                raise UpnpEventParseError(
                    f"Invalid value for {field.name}: '{upnp_value}'"
                ) from err
            changes.append(EventedValue(field.name, value))

        return changes

    def __str__(self) -> str:
        """To string."""
        return f"<UpnpServiceBinding({self.service_name}, {self.device_url})>"

    def __repr__(self) -> str:
        """To repr."""
        return f"<UpnpServiceBinding({self.service_name}, {self.device_url})>"
