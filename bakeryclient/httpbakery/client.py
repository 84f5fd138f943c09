# Copyright 2017 Canonical Ltd.
# Licensed under the LGPLv3, see LICENCE file for details.
import json
import logging

from bakeryclient import utils
from bakeryclient.error import BakeryException, MacaroonFormatError
from bakeryclient.store import MacaroonStore
from bakeryclient.httpbakery.browser import WebBrowserVisitor
from bakeryclient.httpbakery.discharge import DischargeEngine
from bakeryclient.httpbakery.error import (
    BAKERY_PROTOCOL_HEADER,
    PROTOCOL_VERSION,
)
from bakeryclient.httpbakery.interactor import (
    CustomVisitor,
    NonInteractiveVisitor,
    Visitor,
)
from bakeryclient.httpbakery.session import SessionSync
from bakeryclient.httpbakery.webhandler import RequestsWebHandler

log = logging.getLogger(__name__)

JSON_CONTENT_TYPE = 'application/json'


class Client:
    '''Client holds the context for making HTTP requests that
    automatically acquire and discharge macaroons.

    For example:
        from bakeryclient import httpbakery
        client = httpbakery.Client(
            httpbakery.ClientConfig(service_name='charmstore'),
            web_handler=httpbakery.RequestsWebHandler(
                base_url='https://api.example.com'))
        client.get('/v5/whoami', on_success, on_failure)

    Every request carries the Bakery-Protocol-Version header and the
    macaroons stored for the service. When a request is answered with a
    macaroon discharge challenge, the challenge macaroon is discharged,
    the resulting macaroons are stored, and the request is sent again once.

    @param config the ClientConfig.
    @param web_handler the WebHandler performing HTTP requests. If not
    provided, a RequestsWebHandler is used.
    @param store the MacaroonStore. If not provided, one will be created.
    '''
    def __init__(self, config, web_handler=None, store=None):
        if web_handler is None:
            web_handler = RequestsWebHandler()
        if store is None:
            store = MacaroonStore()
        self._config = config
        self._web_handler = web_handler
        self.store = store
        self.service_name = config.service_name
        self._on_success = config.on_success or (lambda: None)
        self._discharge_engine = DischargeEngine(
            web_handler, store, _make_visitor(config, web_handler),
            key=config.key)
        self._session = SessionSync(web_handler, store,
                                    set_cookie_path=config.set_cookie_path,
                                    set_cookie=config.set_cookie)
        if config.macaroon is not None:
            store.set(self.service_name, config.macaroon, config.set_cookie)
        if config.discharge_token is not None:
            store.identity = config.discharge_token

    def get(self, path, on_success, on_failure, redirect=True):
        return self.request('GET', path, None, on_success, on_failure,
                            redirect)

    def delete(self, path, on_success, on_failure, redirect=True):
        return self.request('DELETE', path, None, on_success, on_failure,
                            redirect)

    def post(self, path, data, on_success, on_failure, redirect=True):
        return self.request('POST', path, data, on_success, on_failure,
                            redirect)

    def put(self, path, data, on_success, on_failure, redirect=True):
        return self.request('PUT', path, data, on_success, on_failure,
                            redirect)

    def patch(self, path, data, on_success, on_failure, redirect=True):
        return self.request('PATCH', path, data, on_success, on_failure,
                            redirect)

    def request(self, method, path, data, on_success, on_failure,
                redirect=True):
        ''' Make a request, discharging the macaroons it requires.

        @param method the HTTP verb.
        @param path the path or URL to request.
        @param data the body of the request. Dicts and lists are sent as
        JSON. Ignored for GET and DELETE requests.
        @param on_success called with the response when the request
        succeeds.
        @param on_failure called with the response when the request
        fails with a status of 400 or more, or with the BakeryException
        when the request cannot be performed or authorized.
        @param redirect whether a discharge is attempted when the response
        is a macaroon discharge challenge.
        @return the value returned by the called callback.
        '''
        overrides = None
        if method not in ('GET', 'DELETE'):
            overrides = {'Content-Type': JSON_CONTENT_TYPE}
            if data is not None and not isinstance(data, (str, bytes)):
                data = json.dumps(data)
        else:
            data = None
        try:
            resp = self._send(method, path, overrides, data)
            if redirect and _is_discharge_required(resp):
                self._authenticate(_challenge_macaroon(resp))
                resp = self._send(method, path, overrides, data)
        except BakeryException as exc:
            return on_failure(exc)
        if resp.status_code >= 400:
            return on_failure(resp)
        return on_success(resp)

    def discharge(self, m, on_success, on_failure):
        ''' Discharge the macaroon.

        @param m the macaroon to be discharged, as a pymacaroons.Macaroon
        or its JSON dict form.
        @param on_success called with the resulting macaroons, exported as a
        list of dicts, if the discharge succeeds.
        @param on_failure called with the BakeryException if the discharge
        fails.
        '''
        def success(macaroons):
            result = on_success(macaroons)
            self._on_success()
            return result
        return self._discharge_engine.discharge(m, success, on_failure)

    def fetch_macaroon_from_static_path(self, callback):
        ''' Return the macaroons stored for the service. If none has been
        stored, fetch a macaroon from the static macaroon path, discharge
        and store it.

        @param callback called as callback(None, macaroons) on success, where
        macaroons is a list of pymacaroons.Macaroon, and as callback(error)
        on failure.
        @return the value returned by callback.
        '''
        saved = self.get_macaroon()
        if saved is not None:
            return callback(None, saved)
        path = self._config.static_macaroon_path
        if not path:
            return callback(BakeryException(
                'static macaroon path was not defined'))
        try:
            resp = self._web_handler.send_request(
                'GET', path, headers=self._prepare_headers(None))
            try:
                m = resp.json()
            except ValueError as exc:
                raise MacaroonFormatError(
                    'cannot parse macaroon from {}: {}'.format(path, exc))
            self._authenticate(m)
        except BakeryException as exc:
            return callback(exc)
        return callback(None, self.get_macaroon())

    def get_macaroon(self):
        ''' Return the macaroons stored for the service, or None.
        '''
        return self.store.get(self.service_name)

    def clear_cookie(self):
        ''' Forget the macaroons stored for the service and the discharge
        token.
        '''
        self.store.clear(self.service_name)

    def _authenticate(self, m):
        ''' Discharge the challenge macaroon and save the resulting
        macaroons.
        '''
        if isinstance(m, dict):
            m = utils.macaroon_from_dict(m)
        macaroons = self._discharge_engine.discharge_all(m)
        self._on_success()
        self._session.persist(self.service_name, macaroons)
        log.debug('stored {} macaroons for {}'.format(
            len(macaroons), self.service_name))

    def _prepare_headers(self, overrides):
        headers = {BAKERY_PROTOCOL_HEADER: str(PROTOCOL_VERSION)}
        if overrides is not None:
            headers.update(overrides)
        macaroons = self.store.get_encoded(self.service_name)
        if macaroons is not None:
            headers['Macaroons'] = macaroons
        return headers

    def _send(self, method, path, overrides, data):
        return self._web_handler.send_request(
            method, path, headers=self._prepare_headers(overrides), data=data)


def _make_visitor(config, web_handler):
    if config.visitor is not None:
        if isinstance(config.visitor, Visitor):
            return config.visitor
        return CustomVisitor(config.visitor)
    if not config.interactive:
        return NonInteractiveVisitor(web_handler, config.auth)
    return WebBrowserVisitor()


def _is_discharge_required(resp):
    return (resp.status_code == 401 and
            resp.headers.get('WWW-Authenticate') == 'Macaroon')


def _challenge_macaroon(resp):
    ''' Return the macaroon, as a dict, held by a discharge challenge.
    '''
    try:
        m = resp.json()['Info']['Macaroon']
    except (ValueError, KeyError, TypeError) as exc:
        raise MacaroonFormatError(
            'cannot read macaroon from discharge required response: '
            '{}'.format(exc))
    if m is None:
        raise MacaroonFormatError(
            'no macaroon in discharge required response')
    return m
