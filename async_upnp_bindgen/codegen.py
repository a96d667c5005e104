# -*- coding: utf-8 -*-
"""Generate Python source for a service binding.

The generated module only carries the types and a table describing the
service; calls and event parsing are done by UpnpServiceBinding.
"""

import logging
import re
from typing import Dict, List, Sequence

from async_upnp_bindgen.binding import (
    ActionDefinition,
    FieldDefinition,
    ServiceBindingDefinition,
)
from async_upnp_bindgen.client import UpnpServiceBinding
from async_upnp_bindgen.const import REQUEST_NAMESPACE_FIELD
from async_upnp_bindgen.scpd import StateVariable
from async_upnp_bindgen.utils import snake_case

_LOGGER = logging.getLogger(__name__)

_INDENT = "    "

# Attributes set on instances, which are not visible on the class.
_RESERVED_MEMBERS = {"requester", "on_event"}


def _class_name(name: str) -> str:
    """Make name usable as (part of) a class name."""
    name = re.sub(r"\W", "", name)
    if not name or name[0].isdigit():
        name = "Service" + name
    return name


def _member_name(name: str, prefix: str = "") -> str:
    """Make name usable as a member of the generated service class."""
    member = prefix + snake_case(name)
    if member in _RESERVED_MEMBERS or hasattr(UpnpServiceBinding, member):
        member += "_value"
    return member


def _allowed_comments(field: FieldDefinition) -> List[str]:
    """Document the allowed values of a field."""
    lines = []
    allowed_value_range = field.allowed_value_range
    if allowed_value_range is not None:
        lines.append(
            f"# Allowed Range: {allowed_value_range.minimum} -> "
            f"{allowed_value_range.maximum} step: {allowed_value_range.step}"
        )
    for allowed_value in field.allowed_values:
        lines.append(f"# Allowed Value: {allowed_value}")
    return lines


def _request_class(action: ActionDefinition) -> List[str]:
    lines = [
        f"class {action.name}Args(NamedTuple):",
        f'{_INDENT}"""Arguments for {action.name}."""',
        "",
    ]
    for field in action.in_fields:
        lines += [_INDENT + comment for comment in _allowed_comments(field)]
        lines.append(f"{_INDENT}{field.name}: {field.type_info.type_hint}")
    lines.append(f"{_INDENT}{REQUEST_NAMESPACE_FIELD}: str = SERVICE_TYPE")
    return lines


def _response_class(action: ActionDefinition) -> List[str]:
    lines = [
        f"class {action.name}Response(NamedTuple):",
        f'{_INDENT}"""Response of {action.name}."""',
    ]
    if action.out_fields:
        lines.append("")
    for field in action.out_fields:
        lines.append(
            f"{_INDENT}{field.name}: Optional[{field.type_info.type_hint}] = None"
        )
    return lines


def _field_definitions(
    keyword: str, fields: Sequence[FieldDefinition], indent: str
) -> List[str]:
    if not fields:
        return [f"{indent}{keyword}=(),"]
    lines = [f"{indent}{keyword}=("]
    for field in fields:
        lines.append(
            f"{indent}{_INDENT}FieldDefinition("
            f"{field.name!r}, _STATE_VARIABLES[{field.state_variable.name!r}]),"
        )
    lines.append(f"{indent}),")
    return lines


def _definition(definition: ServiceBindingDefinition) -> List[str]:
    lines = [
        "DEFINITION = ServiceBindingDefinition(",
        f"{_INDENT}service_name=SERVICE_NAME,",
        f"{_INDENT}service_type=SERVICE_TYPE,",
        f"{_INDENT}control_path=CONTROL_PATH,",
        f"{_INDENT}event_path=EVENT_PATH,",
        f"{_INDENT}actions={{",
    ]
    indent = _INDENT * 3
    for action in definition.actions.values():
        lines.append(f"{_INDENT * 2}{action.name!r}: ActionDefinition(")
        lines.append(f"{indent}name={action.name!r},")
        lines += _field_definitions("in_fields", action.in_fields, indent)
        lines += _field_definitions("out_fields", action.out_fields, indent)
        lines.append(f"{indent}request_type={action.name}Args,")
        lines.append(f"{indent}response_type={action.name}Response,")
        lines.append(f"{_INDENT * 2}),")
    lines.append(f"{_INDENT}}},")
    lines += _field_definitions("evented", definition.evented, _INDENT)
    lines.append(")")
    return lines


def _service_class(definition: ServiceBindingDefinition, class_name: str) -> List[str]:
    lines = [
        f"class {class_name}(UpnpServiceBinding):",
        f'{_INDENT}"""{definition.service_name} service binding."""',
        "",
        f"{_INDENT}def __init__(",
        f"{_INDENT * 2}self, requester: UpnpRequester, device_url: str",
        f"{_INDENT}) -> None:",
        f'{_INDENT * 2}"""Initialize."""',
        f"{_INDENT * 2}super().__init__(DEFINITION, requester, device_url)",
    ]
    for action in definition.actions.values():
        lines += [
            "",
            f"{_INDENT}async def {_member_name(action.name, 'async_')}(",
            f"{_INDENT * 2}self, args: {action.name}Args",
            f"{_INDENT}) -> {action.name}Response:",
            f'{_INDENT * 2}"""Call {action.name}."""',
            f"{_INDENT * 2}response: {action.name}Response = (",
            f"{_INDENT * 3}await self.async_call_action({action.name!r}, args)",
            f"{_INDENT * 2})",
            f"{_INDENT * 2}return response",
        ]
    for field in definition.evented:
        lines += [
            "",
            f"{_INDENT}@property",
            f"{_INDENT}def {_member_name(field.name)}(self) -> "
            f"Optional[{field.type_info.type_hint}]:",
            f'{_INDENT * 2}"""Last observed value of {field.name}."""',
            f"{_INDENT * 2}return self.evented_value({field.name!r})",
        ]
    return lines


def _state_variables(definition: ServiceBindingDefinition) -> Dict[str, StateVariable]:
    """All state variables used by the definition, in order of first use."""
    state_vars: Dict[str, StateVariable] = {}
    for action in definition.actions.values():
        for field in list(action.in_fields) + list(action.out_fields):
            state_vars.setdefault(field.state_variable.name, field.state_variable)
    for field in definition.evented:
        state_vars.setdefault(field.state_variable.name, field.state_variable)
    return state_vars


def _uses_uri(definition: ServiceBindingDefinition) -> bool:
    fields: List[FieldDefinition] = list(definition.evented)
    for action in definition.actions.values():
        fields += list(action.in_fields) + list(action.out_fields)
    return any(field.data_type == "uri" for field in fields)


def generate_source(definition: ServiceBindingDefinition) -> str:
    """Generate the source of a Python module for a service binding definition."""
    class_name = _class_name(definition.service_name) + "Service"
    _LOGGER.debug("Generating source for %s as %s", definition.service_name, class_name)

    lines = [
        "# -*- coding: utf-8 -*-",
        f'"""{definition.service_name} service binding.',
        "",
        "Generated by async_upnp_bindgen, do not edit.",
        '"""',
        "",
        "from typing import NamedTuple, Optional",
    ]
    if _uses_uri(definition):
        lines.append("from urllib.parse import SplitResult")
    lines += [
        "",
        "from async_upnp_bindgen.binding import (",
        f"{_INDENT}ActionDefinition,",
        f"{_INDENT}FieldDefinition,",
        f"{_INDENT}ServiceBindingDefinition,",
        ")",
        "from async_upnp_bindgen.client import UpnpRequester, UpnpServiceBinding",
        "from async_upnp_bindgen.scpd import (  # noqa: F401",
        f"{_INDENT}AllowedValueRange,",
        f"{_INDENT}StateVariable,",
        ")",
        "",
        f"SERVICE_NAME = {definition.service_name!r}",
        f"SERVICE_TYPE = {definition.service_type!r}",
        f"CONTROL_PATH = {definition.control_path!r}",
        f"EVENT_PATH = {definition.event_path!r}",
        "",
        "_STATE_VARIABLES = {",
    ]
    for name, state_var in _state_variables(definition).items():
        lines.append(f"{_INDENT}{name!r}: {state_var!r},")
    lines.append("}")

    for action in definition.actions.values():
        lines += ["", ""] + _request_class(action)
        lines += ["", ""] + _response_class(action)

    lines += ["", ""] + _definition(definition)
    lines += ["", ""] + _service_class(definition, class_name)
    return "\n".join(lines) + "\n"
