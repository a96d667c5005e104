# -*- coding: utf-8 -*-
"""CLI UPnP binding generator module."""
# pylint: disable=invalid-name

import argparse
import asyncio
import json
import logging
import sys
import time
import urllib.parse
from typing import Any, Dict, List, Mapping, Optional, Sequence

from async_upnp_bindgen import UpnpBindingFactory, UpnpServiceBinding
from async_upnp_bindgen.aiohttp import AiohttpRequester
from async_upnp_bindgen.binding import (
    FieldDefinition,
    ServiceBindingDefinition,
    synthesize_binding,
)
from async_upnp_bindgen.codegen import generate_source
from async_upnp_bindgen.exceptions import UpnpError, UpnpSchemaError
from async_upnp_bindgen.scpd import parse_scpd
from async_upnp_bindgen.services import KNOWN_SERVICES, known_service

logging.basicConfig()
_LOGGER = logging.getLogger("upnp-bindgen")
_LOGGER.setLevel(logging.ERROR)
_LOGGER_LIB = logging.getLogger("async_upnp_bindgen")
_LOGGER_LIB.setLevel(logging.ERROR)
_LOGGER_TRAFFIC = logging.getLogger("async_upnp_bindgen.traffic")
_LOGGER_TRAFFIC.setLevel(logging.ERROR)


parser = argparse.ArgumentParser(description="upnp_bindgen")
parser.add_argument("--debug", action="store_true", help="Show debug messages")
parser.add_argument("--debug-traffic", action="store_true", help="Show network traffic")
parser.add_argument(
    "--pprint", action="store_true", help="Pretty-print (indent) JSON output"
)
parser.add_argument("--timeout", type=int, help="Timeout for connection", default=5)
subparsers = parser.add_subparsers(title="Command", dest="command")
subparsers.required = True

subparser = subparsers.add_parser(
    "generate", help="Generate Python source for a service binding"
)
subparser.add_argument("name", help="Service name, e.g., RenderingControl")
subparser.add_argument("control", help="Control path, relative to the device URL")
subparser.add_argument("event", help="Event path, relative to the device URL")
subparser.add_argument("scpd", help="Path to SCPD XML file")
subparser.add_argument(
    "--service_type", help="Service type, default urn:schemas-upnp-org:service:NAME:1"
)
subparser = subparsers.add_parser("describe", help="Describe a service binding")
subparser.add_argument("scpd", help="Path to SCPD XML file")
subparser.add_argument("--name", help="Service name", default="Service")
subparser = subparsers.add_parser("call-action", help="Call an action")
subparser.add_argument("device", help="Device URL, e.g., http://192.168.0.10:1400/")
subparser.add_argument(
    "call-action", nargs="+", help="service/action param1=val1 param2=val2"
)


def _read_scpd(path: str) -> bytes:
    """Read an SCPD file, exit on failure."""
    try:
        with open(path, "rb") as file:
            return file.read()
    except OSError as err:
        print("Unable to read %s: %s" % (path, err), file=sys.stderr)
        sys.exit(1)


def _json_value(value: Any) -> Any:
    """Make value JSON serializable."""
    if isinstance(value, urllib.parse.SplitResult):
        return value.geturl()
    return value


def _describe_field(field: FieldDefinition) -> Dict[str, Any]:
    description: Dict[str, Any] = {
        "name": field.name,
        "data_type": field.data_type,
        "python_type": field.type_info.type_hint,
        "state_variable": field.state_variable.name,
    }
    if field.allowed_values:
        description["allowed_values"] = list(field.allowed_values)
    if field.allowed_value_range:
        description["allowed_value_range"] = field.allowed_value_range._asdict()
    return description


def describe_definition(definition: ServiceBindingDefinition) -> Dict[str, Any]:
    """Describe a binding definition as a JSON serializable dict."""
    return {
        "service_name": definition.service_name,
        "service_type": definition.service_type,
        "control_path": definition.control_path,
        "event_path": definition.event_path,
        "actions": {
            action.name: {
                "soap_action": definition.soap_action(action.name),
                "in_arguments": [_describe_field(f) for f in action.in_fields],
                "out_arguments": [_describe_field(f) for f in action.out_fields],
            }
            for action in definition.actions.values()
        },
        "evented": [_describe_field(field) for field in definition.evented],
    }


def generate(args: argparse.Namespace) -> None:
    """Generate source for a binding and write it to stdout."""
    scpd_xml = _read_scpd(args.scpd)
    try:
        definition = synthesize_binding(
            parse_scpd(scpd_xml),
            args.name,
            args.control,
            args.event,
            service_type=args.service_type,
        )
    except UpnpSchemaError as err:
        print("Unable to generate %s: %s" % (args.name, err), file=sys.stderr)
        sys.exit(1)

    sys.stdout.write(generate_source(definition))


def describe(args: argparse.Namespace, pprint_indent: Optional[int]) -> None:
    """Describe the binding for an SCPD."""
    scpd_xml = _read_scpd(args.scpd)
    try:
        definition = synthesize_binding(
            parse_scpd(scpd_xml), args.name, "/Control", "/Event"
        )
    except UpnpSchemaError as err:
        print("Unable to describe %s: %s" % (args.scpd, err), file=sys.stderr)
        sys.exit(1)

    print(json.dumps(describe_definition(definition), indent=pprint_indent))


def parse_action_args(
    binding: UpnpServiceBinding, action_name: str, call_action_args: Sequence[str]
) -> Dict[str, Any]:
    """Parse Argument=value pairs into Python values for an action."""
    action = binding.action(action_name)
    definition = action.definition

    action_args = {}
    for action_arg in call_action_args:
        if "=" not in action_arg:
            print("Invalid argument value: %s" % (action_arg,))
            print("Use: Argument=value")
            sys.exit(1)
        key, value = action_arg.split("=", 1)
        action_args[key] = value

    coerced_args = {}
    for key, value in action_args.items():
        try:
            field = definition.in_field(key)
        except KeyError:
            print("Unknown argument: %s" % (key,))
            print(
                "Available arguments: %s"
                % (",".join([f.name for f in definition.in_fields]))
            )
            sys.exit(1)
        try:
            coerced_args[key] = field.type_info.coerce_python(value)
        except ValueError:
            print("Invalid value for %s: %s" % (key, value))
            sys.exit(1)

    # ensure all in variables given
    missing: List[str] = [
        f.name for f in definition.in_fields if f.name not in coerced_args
    ]
    if missing:
        print("Missing in-arguments")
        print("Known in-arguments:\n%s" % ("\n".join(["  " + m for m in missing])))
        sys.exit(1)

    return coerced_args


async def call_action(
    device_url: str,
    call_action_args: Sequence[str],
    timeout: int,
    pprint_indent: Optional[int],
) -> None:
    """Call an action and show results."""
    if "/" not in call_action_args[0]:
        print("Use: Service/Action Argument=value")
        sys.exit(1)
    service_name, action_name = call_action_args[0].split("/", 1)

    if known_service(service_name) is None:
        print("Unknown service: %s" % (service_name,))
        print(
            "Available services:\n%s"
            % ("\n".join(["  " + name for name in sorted(KNOWN_SERVICES)]))
        )
        sys.exit(1)

    requester = AiohttpRequester(timeout)
    factory = UpnpBindingFactory(requester)
    try:
        binding = await factory.async_create_binding(device_url, service_name)
    except UpnpSchemaError as err:
        print("Unable to create binding for %s: %s" % (service_name, err))
        sys.exit(1)

    if not binding.has_action(action_name):
        print("Unknown action: %s" % (action_name,))
        print(
            "Available actions:\n%s"
            % ("\n".join(["  " + name for name in sorted(binding.actions)]))
        )
        sys.exit(1)

    coerced_args = parse_action_args(binding, action_name, call_action_args[1:])
    _LOGGER.debug(
        "Calling %s.%s, parameters:\n%s",
        binding.service_name,
        action_name,
        "\n".join(["%s:%s" % (key, value) for key, value in coerced_args.items()]),
    )
    response = await binding.async_call_action(action_name, **coerced_args)
    out_parameters: Mapping[str, Any] = response._asdict()
    _LOGGER.debug(
        "Results:\n%s",
        "\n".join(["%s:%s" % (key, value) for key, value in out_parameters.items()]),
    )

    obj = {
        "timestamp": time.time(),
        "service_type": binding.service_type,
        "action": action_name,
        "in_parameters": {k: _json_value(v) for k, v in coerced_args.items()},
        "out_parameters": {k: _json_value(v) for k, v in out_parameters.items()},
    }
    print(json.dumps(obj, indent=pprint_indent))


async def async_main(args: argparse.Namespace) -> None:
    """Async main."""
    if args.debug:
        _LOGGER.setLevel(logging.DEBUG)
        _LOGGER_LIB.setLevel(logging.DEBUG)
        _LOGGER_TRAFFIC.setLevel(logging.INFO)
    if args.debug_traffic:
        _LOGGER_TRAFFIC.setLevel(logging.DEBUG)

    pprint_indent = 4 if args.pprint else None
    if args.command == "generate":
        generate(args)
    elif args.command == "describe":
        describe(args, pprint_indent)
    elif args.command == "call-action":
        try:
            await call_action(
                args.device, getattr(args, "call-action"), args.timeout, pprint_indent
            )
        except UpnpError as err:
            print("Error calling action: %s" % (err,))
            sys.exit(1)


def main(argv: Optional[Sequence[str]] = None) -> None:
    """Set up async loop and run the main program."""
    args = parser.parse_args(argv)
    loop = asyncio.new_event_loop()

    try:
        loop.run_until_complete(async_main(args))
    finally:
        loop.close()


if __name__ == "__main__":
    main()
