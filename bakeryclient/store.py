# Copyright 2017 Canonical Ltd.
# Licensed under the LGPLv3, see LICENCE file for details.
import logging
from urllib.parse import urlparse

import requests.cookies

from bakeryclient import utils
from bakeryclient.error import MacaroonFormatError

log = logging.getLogger(__name__)


def macaroon_name(service_name):
    '''Return the name under which the macaroons of a service are stored.'''
    return 'Macaroons-' + service_name


class MacaroonStore:
    ''' Holds the macaroon sets acquired for each service, along with the
    discharge token used to identify the user to dischargers.

    Macaroon sets are kept in memory and, when asked, also stored as cookies
    in a cookie jar so that they outlive the store itself.

    @param cookies storage for the cookies {CookieJar}. If not provided, one
    will be created.
    @param cookie_url optional URL whose host and path are used to scope
    the stored cookies.
    '''
    def __init__(self, cookies=None, cookie_url=None):
        if cookies is None:
            cookies = requests.cookies.RequestsCookieJar()
        self.cookies = cookies
        self.identity = None
        self._cookie_url = cookie_url
        self._macaroons = {}

    def get(self, service_name):
        ''' Return the macaroon set stored for the service as a list of
        pymacaroons.Macaroon, or None when nothing usable is stored.
        '''
        encoded = self.get_encoded(service_name)
        if encoded is None:
            return None
        try:
            return utils.decode_macaroons(encoded)
        except MacaroonFormatError as e:
            log.warning('ignoring stored {}: {}'.format(
                macaroon_name(service_name), e))
            return None

    def get_encoded(self, service_name):
        ''' Return the stored macaroon set for the service as sent in the
        Macaroons header, or None.
        '''
        name = macaroon_name(service_name)
        encoded = self._macaroons.get(name)
        if encoded is None:
            encoded = self.cookies.get(name)
        return encoded

    def set(self, service_name, macaroons, persist_as_cookie=False):
        ''' Replace the macaroon set stored for the service.

        @param service_name the name of the service.
        @param macaroons a list of pymacaroons.Macaroon or of their JSON
        dict form, or a macaroon set already encoded as a string.
        @param persist_as_cookie whether the set is also stored in the
        cookie jar.
        '''
        if isinstance(macaroons, (str, bytes)):
            encoded = utils.to_bytes(macaroons).decode('ascii')
        else:
            encoded = utils.encode_macaroons(macaroons)
        name = macaroon_name(service_name)
        self._macaroons[name] = encoded
        if persist_as_cookie:
            self.cookies.set_cookie(requests.cookies.create_cookie(
                name, encoded, **self._cookie_scope()))

    def clear(self, service_name):
        ''' Forget the macaroon set stored for the service, including any
        cookie of that name in the cookie jar, and the discharge token.
        '''
        name = macaroon_name(service_name)
        self._macaroons.pop(name, None)
        requests.cookies.remove_cookie_by_name(self.cookies, name)
        self.identity = None

    def _cookie_scope(self):
        if self._cookie_url is None:
            return {}
        u = urlparse(self._cookie_url)
        return {
            'domain': u.hostname,
            'path': u.path or '/',
            'secure': u.scheme == 'https',
        }
