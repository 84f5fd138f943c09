# Copyright 2017 Canonical Ltd.
# Licensed under the LGPLv3, see LICENCE file for details.
import abc
import logging
from urllib.parse import urljoin

import requests

from bakeryclient.httpbakery.error import TransportError

log = logging.getLogger(__name__)


class WebHandler(abc.ABC):
    ''' Represents the HTTP transport used by the bakery client.

    The bakery only relies on the status_code, headers, content, text and
    json attributes of the returned response, as found on
    requests.Response.

    A request whose connection was closed by the server without a response
    must be reported as a response with a status code of 0 and an empty
    body: long-polling requests rely on this to retry.
    '''

    @abc.abstractmethod
    def send_request(self, method, url, headers=None, data=None):
        ''' Perform an HTTP request and return its response.

        @param method the HTTP verb, for instance 'GET'.
        @param url the URL or path to request.
        @param headers optional dict of request headers.
        @param data optional body, as a string, bytes or a dict to be
        form-encoded.
        @return a requests.Response like object.
        @raises TransportError if the request cannot be performed.
        '''
        raise NotImplementedError('send_request method must be defined in '
                                  'subclass')


class RequestsWebHandler(WebHandler):
    ''' A WebHandler that uses the requests library.

    @param base_url optional URL against which request paths are resolved.
    @param session optional requests.Session used to make the requests,
    so that cookies are shared across requests.
    @param timeout optional timeout in seconds passed to requests.
    '''
    def __init__(self, base_url=None, session=None, timeout=None):
        if session is None:
            session = requests.Session()
        self._base_url = base_url
        self._session = session
        self._timeout = timeout

    @property
    def cookies(self):
        return self._session.cookies

    def send_request(self, method, url, headers=None, data=None):
        if self._base_url is not None:
            url = urljoin(self._base_url, url)
        log.debug('{} {}'.format(method, url))
        try:
            return self._session.request(method=method, url=url,
                                         headers=headers, data=data,
                                         timeout=self._timeout)
        except requests.ConnectionError as exc:
            log.debug('connection to {} closed: {}'.format(url, exc))
            return closed_response(url)
        except requests.RequestException as exc:
            raise TransportError(
                'cannot {} {}: {}'.format(method, url, exc)) from exc


def closed_response(url=None):
    ''' Return the response reported for a request whose connection was
    closed by the server: status code 0 and no content.
    '''
    resp = requests.Response()
    resp.status_code = 0
    resp._content = b''
    resp.url = url
    return resp


def is_connection_reset(response):
    ''' Report whether the response stands for a closed connection.
    '''
    return response.status_code == 0 and not response.content
