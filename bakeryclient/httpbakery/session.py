# Copyright 2017 Canonical Ltd.
# Licensed under the LGPLv3, see LICENCE file for details.
import json
import logging

from bakeryclient import utils
from bakeryclient.httpbakery.error import SessionSyncError

log = logging.getLogger(__name__)

JSON_CONTENT_TYPE = 'application/json'


class SessionSync:
    ''' Stores discharged macaroon sets, optionally registering them with
    a same-origin endpoint which sets them as a cookie, so that pages
    rendered by the server see the same authorization as the client.

    @param web_handler the WebHandler used to reach the endpoint.
    @param store the MacaroonStore holding the macaroons.
    @param set_cookie_path the path of the endpoint. If None, the store
    is the only place the macaroons are kept.
    @param set_cookie whether the store also keeps the macaroons in its
    cookie jar.
    '''
    def __init__(self, web_handler, store, set_cookie_path=None,
                 set_cookie=False):
        self._web_handler = web_handler
        self._store = store
        self._set_cookie_path = set_cookie_path
        self._set_cookie = set_cookie

    def persist(self, service_name, macaroons):
        ''' Save the macaroons for the given service.

        The store is always updated first, so that it holds the macaroons
        even when registering them with the endpoint fails.

        @param service_name the name of the service.
        @param macaroons a list of pymacaroons.Macaroon or of their dicts.
        @return the endpoint response, or None if no endpoint is set.
        @raises SessionSyncError if the endpoint returns an error.
        '''
        self._store.set(service_name, macaroons, self._set_cookie)
        if self._set_cookie_path is None:
            return None
        exported = [m if isinstance(m, dict) else utils.macaroon_to_dict(m)
                    for m in macaroons]
        resp = self._web_handler.send_request(
            'PUT', self._set_cookie_path,
            headers={'Content-Type': JSON_CONTENT_TYPE},
            data=json.dumps({'Macaroons': exported}))
        if resp.status_code >= 400:
            raise SessionSyncError(
                'cannot set macaroon cookie at {}: status {}'.format(
                    self._set_cookie_path, resp.status_code),
                response=resp)
        log.debug('macaroons registered at {}'.format(self._set_cookie_path))
        return resp
