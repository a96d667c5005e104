"""Receive events of a Sonos ZonePlayer, subscribe with e.g. curl:

curl -X SUBSCRIBE -H 'CALLBACK: <http://<this host>:8001/MediaRenderer/RenderingControl/Event>' \
    -H 'NT: upnp:event' -H 'TIMEOUT: Second-300' \
    http://<zoneplayer>:1400/MediaRenderer/RenderingControl/Event
"""
import logging
import sys

from aiohttp import web

from async_upnp_bindgen.aiohttp import AiohttpRequester
from async_upnp_bindgen.client_factory import UpnpBindingFactory
from async_upnp_bindgen.event_handler import UpnpEventHandler

logging.basicConfig(level=logging.DEBUG)


LOGGER = logging.getLogger(__name__)
PORT = 8001
EVENT_HANDLER = UpnpEventHandler()


def on_event(binding, changes):
    for change in changes:
        LOGGER.info('%s: %s = %s', binding.service_name, change.name, change.value)


async def async_handle_notify(request):
    body = await request.read()
    status = EVENT_HANDLER.handle_notify(request.path, request.headers, body)
    return web.Response(status=status)


async def async_bind(app):
    factory = UpnpBindingFactory(AiohttpRequester())
    bindings, errors = await factory.async_create_bindings(
        app['device_url'], ['RenderingControl', 'AVTransport', 'ZoneGroupTopology'])
    for service_name, error in errors.items():
        LOGGER.warning('No binding for %s: %s', service_name, error)
    for binding in bindings.values():
        binding.on_event = on_event
        EVENT_HANDLER.register(binding)


app = web.Application()
app['device_url'] = sys.argv[1] if len(sys.argv) > 1 else 'http://192.168.178.11:1400/'
app.on_startup.append(async_bind)
app.router.add_route('NOTIFY', '/{path:.*}', async_handle_notify)

web.run_app(app, port=PORT)
