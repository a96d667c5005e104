# -*- coding: utf-8 -*-
"""aiohttp requester module."""

import asyncio
import logging
from typing import Mapping, Optional, Tuple

import aiohttp
import async_timeout

from async_upnp_bindgen.client import UpnpRequester
from async_upnp_bindgen.exceptions import (
    UpnpClientResponseError,
    UpnpCommunicationError,
    UpnpConnectionError,
    UpnpConnectionTimeoutError,
)

_LOGGER_TRAFFIC_UPNP = logging.getLogger("async_upnp_bindgen.traffic.upnp")


def _log_request(
    method: str, url: str, headers: Mapping[str, str], body: Optional[str]
) -> None:
    _LOGGER_TRAFFIC_UPNP.debug(
        "Sending request:\n%s %s\n%s\n%s\n",
        method,
        url,
        "\n".join([key + ": " + value for key, value in headers.items()]),
        body or "",
    )


def _log_response(status: int, headers: Mapping[str, str], body: bytes) -> None:
    _LOGGER_TRAFFIC_UPNP.debug(
        "Got response:\n%s\n%s\n\n%s",
        status,
        "\n".join([key + ": " + value for key, value in headers.items()]),
        body,
    )


async def _async_session_request(
    session: aiohttp.ClientSession,
    timeout: int,
    method: str,
    url: str,
    headers: Mapping[str, str],
    body: Optional[str],
) -> Tuple[int, Mapping[str, str], str]:
    """Do a HTTP request on session, mapping errors to UpnpCommunicationErrors."""
    # pylint: disable=too-many-arguments
    try:
        async with async_timeout.timeout(timeout):
            async with session.request(
                method, url, headers=headers, data=body
            ) as response:
                status = response.status
                resp_headers: Mapping = response.headers or {}
                resp_body = await response.read()
                _log_response(status, resp_headers, resp_body)

                resp_body_text = await response.text()
    except asyncio.TimeoutError as err:
        raise UpnpConnectionTimeoutError(str(err)) from err
    except aiohttp.ServerDisconnectedError:
        raise
    except aiohttp.ClientConnectionError as err:
        raise UpnpConnectionError(str(err)) from err
    except aiohttp.ClientResponseError as err:
        raise UpnpClientResponseError(
            request_info=err.request_info,
            history=err.history,
            status=err.status,
            message=err.message,
            headers=err.headers,
        ) from err
    except aiohttp.ClientError as err:
        raise UpnpCommunicationError(str(err)) from err
    except UnicodeDecodeError as err:
        raise UpnpCommunicationError(str(err)) from err

    return status, resp_headers, resp_body_text


class AiohttpRequester(UpnpRequester):
    """Standard AiohttpRequester, to be used with UpnpBindingFactory."""

    # pylint: disable=too-few-public-methods

    def __init__(
        self, timeout: int = 5, http_headers: Optional[Mapping[str, str]] = None
    ) -> None:
        """Initialize."""
        self._timeout = timeout
        self._http_headers = http_headers or {}

    async def async_http_request(
        self,
        method: str,
        url: str,
        headers: Optional[Mapping[str, str]] = None,
        body: Optional[str] = None,
    ) -> Tuple[int, Mapping[str, str], str]:
        """Do a HTTP request."""
        req_headers = {**self._http_headers, **(headers or {})}
        _log_request(method, url, req_headers, body)

        try:
            async with aiohttp.ClientSession() as session:
                return await _async_session_request(
                    session, self._timeout, method, url, req_headers, body
                )
        except aiohttp.ServerDisconnectedError as err:
            raise UpnpConnectionError(str(err)) from err


class AiohttpSessionRequester(UpnpRequester):
    """
    Standard AiohttpSessionRequester, to be used with UpnpBindingFactory.

    With pluggable session.
    """

    # pylint: disable=too-few-public-methods

    def __init__(
        self,
        session: aiohttp.ClientSession,
        with_sleep: bool = False,
        timeout: int = 5,
        http_headers: Optional[Mapping[str, str]] = None,
    ) -> None:
        """Initialize."""
        self._session = session
        self._with_sleep = with_sleep
        self._timeout = timeout
        self._http_headers = http_headers or {}

    async def async_http_request(
        self,
        method: str,
        url: str,
        headers: Optional[Mapping[str, str]] = None,
        body: Optional[str] = None,
    ) -> Tuple[int, Mapping[str, str], str]:
        """Do a HTTP request.

        A disconnect by the server is reported as an UpnpConnectionError, it
        is up to the caller to retry.
        """
        req_headers = {**self._http_headers, **(headers or {})}
        _log_request(method, url, req_headers, body)

        if self._with_sleep:
            await asyncio.sleep(0)

        try:
            return await _async_session_request(
                self._session, self._timeout, method, url, req_headers, body
            )
        except aiohttp.ServerDisconnectedError as err:
            raise UpnpConnectionError(str(err)) from err
