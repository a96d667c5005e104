#!/usr/bin/env python
# -*- coding: utf-8 -*-

"""
Example to get the current volume from a Sonos ZonePlayer.

Change the target variable below to point at your ZonePlayer.
"""

import asyncio
import logging

from async_upnp_bindgen.aiohttp import AiohttpRequester
from async_upnp_bindgen.client_factory import UpnpBindingFactory

logging.basicConfig(level=logging.INFO)


target = "http://192.168.178.11:1400/"


async def main():
    # create the factory
    requester = AiohttpRequester()
    factory = UpnpBindingFactory(requester)

    # bind to RenderingControl, the SCPD is fetched from the device
    binding = await factory.async_create_binding(target, "RenderingControl")
    print("Binding: {}".format(binding))

    # perform GetVolume action
    get_volume = binding.action("GetVolume")
    print("Action: {!r}".format(get_volume))
    request = get_volume.request_type(InstanceID=0, Channel="Master")
    response = await get_volume.async_call(request)
    print("Volume: {}".format(response.CurrentVolume))


asyncio.run(main())
