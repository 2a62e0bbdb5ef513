import json
import logging
import os

import httpx

from zulip_mcp.errors import MissingCredentials
from zulip_mcp.errors import RemoteCallError


EMAIL_VARIABLE = 'ZULIP_EMAIL'
API_KEY_VARIABLE = 'ZULIP_API_KEY'
SITE_VARIABLE = 'ZULIP_URL'


class RemoteCredentials:
    def __init__(self, email, api_key, site):
        self._email = email
        self._api_key = api_key
        self._site = site

    @property
    def email(self):
        return self._email

    @property
    def api_key(self):
        return self._api_key

    @property
    def site(self):
        return self._site

    @property
    def api_base_url(self):
        site = self.site.rstrip('/')
        if site.endswith('/api/v1'):
            return site + '/'
        if site.endswith('/api'):
            return site + '/v1/'
        return site + '/api/v1/'

    def __repr__(self):
        return '<RemoteCredentials email=%r site=%r>' % (self.email, self.site)


def credentials_from_environment(environment=None):
    if environment is None:
        environment = os.environ
    missing_variable_names = [
        variable_name
        for variable_name in (EMAIL_VARIABLE, API_KEY_VARIABLE, SITE_VARIABLE)
        if not environment.get(variable_name)
    ]
    if missing_variable_names:
        raise MissingCredentials(missing_variable_names)
    return RemoteCredentials(
        environment[EMAIL_VARIABLE],
        environment[API_KEY_VARIABLE],
        environment[SITE_VARIABLE],
    )


def encoded_parameters(parameters):
    """Zulip takes strings verbatim and everything else as JSON."""
    return {
        name: value if isinstance(value, str) else json.dumps(value)
        for name, value in (parameters or {}).items()
    }


class ZulipConnection:
    """An authenticated session against a Zulip server's REST API.

    Construction does no I/O. Call :meth:`connect` (or use the connection as
    an async context manager) before issuing requests; ``connect`` verifies
    the credentials so that a bad configuration fails at startup rather than
    on the first tool call.
    """

    def __init__(self, credentials, transport=None):
        self.credentials = credentials
        self.transport = transport
        self.client = None
        self.profile = None

    @property
    def is_connected(self):
        return self.client is not None

    async def connect(self):
        logging.getLogger(__name__).info(
            'Connecting to %s as %s',
            self.credentials.api_base_url,
            self.credentials.email,
        )
        client_arguments = {
            'base_url': self.credentials.api_base_url,
            'auth': (self.credentials.email, self.credentials.api_key),
        }
        if self.transport is not None:
            client_arguments['transport'] = self.transport
        self.client = httpx.AsyncClient(**client_arguments)
        try:
            self.profile = await self.get('users/me')
        except RemoteCallError:
            await self.close()
            raise
        return self

    async def close(self):
        client = self.client
        self.client = None
        if client is not None:
            await client.aclose()

    async def __aenter__(self):
        return await self.connect()

    async def __aexit__(self, exception_type, exception, traceback):
        await self.close()

    async def get(self, path, parameters=None):
        return await self.request('GET', path, params=encoded_parameters(parameters))

    async def post(self, path, parameters=None):
        return await self.request('POST', path, data=encoded_parameters(parameters))

    async def request(self, method, path, **request_arguments):
        if not self.is_connected:
            raise RemoteCallError('Zulip connection is not established.')
        logging.getLogger(__name__).debug('%s %s', method, path)
        try:
            response = await self.client.request(method, path, **request_arguments)
        except httpx.HTTPError as error:
            raise RemoteCallError(
                '%s %s failed: %s' % (method, path, error),
                cause=error,
            ) from error
        return self.decoded_response(response)

    def decoded_response(self, response):
        try:
            payload = response.json()
        except ValueError as error:
            raise RemoteCallError(
                'Unexpected response from Zulip (HTTP %s).' % response.status_code,
                cause=error,
            ) from error
        if isinstance(payload, dict) and payload.get('result') == 'error':
            raise RemoteCallError(
                payload.get('msg') or 'Zulip returned an error (HTTP %s).' % response.status_code
            )
        if response.is_error:
            raise RemoteCallError('Zulip returned HTTP %s.' % response.status_code)
        return payload
