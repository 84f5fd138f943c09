# Copyright 2017 Canonical Ltd.
# Licensed under the LGPLv3, see LICENCE file for details.
from collections import namedtuple
from urllib.parse import parse_qs

from httmock import response, urlmatch
import pymacaroons
from pymacaroons.exceptions import MacaroonException

import bakeryclient
from bakeryclient import httpbakery

API_LOCATION = 'http://api.example.com'
DISCHARGER_LOCATION = 'http://idm.example.com'
CONDITION = 'is-authenticated-user'

Request = namedtuple('Request', 'method, url, headers, data')


class ScriptedWebHandler(httpbakery.WebHandler):
    ''' A WebHandler returning the given responses in order and recording
    the requests it is asked to perform.
    '''
    def __init__(self, *responses):
        self.responses = list(responses)
        self.requests = []

    def send_request(self, method, url, headers=None, data=None):
        self.requests.append(Request(method, url, headers, data))
        resp = self.responses.pop(0)
        if isinstance(resp, Exception):
            raise resp
        return resp


def json_response(status_code, content, headers=None):
    all_headers = {'Content-Type': 'application/json'}
    all_headers.update(headers or {})
    return response(status_code=status_code, content=content,
                    headers=all_headers)


class Discharger:
    ''' A third party discharging caveats whose condition is in allowed.
    '''
    def __init__(self, location=DISCHARGER_LOCATION, allowed=(CONDITION,)):
        self.location = location
        self.key = bakeryclient.generate_key()
        self.allowed = allowed
        self.forms = []

    def check(self, condition):
        if condition not in self.allowed:
            raise ValueError('condition {!r} not allowed'.format(condition))

    def discharge(self, caveat_id):
        ''' Return the discharge macaroon for the caveat id, as a dict.
        '''
        m = bakeryclient.discharge_third_party_caveat(
            caveat_id, self.key, self.check)
        return bakeryclient.macaroon_to_dict(m)

    def read_form(self, request):
        form = {k: v[0] for k, v in parse_qs(request.body).items()}
        self.forms.append(form)
        return form


class Service:
    ''' A first party service whose macaroons require a discharge from
    discharger.
    '''
    def __init__(self, discharger, location=API_LOCATION,
                 condition=CONDITION):
        self.discharger = discharger
        self.location = location
        self.condition = condition
        self.key = bakeryclient.generate_key()
        self.root_key = b'root key of the test service'
        self.requests = []

    def new_macaroon(self):
        m = pymacaroons.Macaroon(location=self.location,
                                 identifier='service-id',
                                 key=self.root_key)
        return bakeryclient.add_third_party_caveat(
            m, self.condition, self.discharger.location,
            self.discharger.key.public_key, self.key)

    def authorized(self, headers):
        encoded = headers.get('Macaroons')
        if encoded is None:
            return False
        try:
            ms = bakeryclient.decode_macaroons(encoded)
            pymacaroons.Verifier().verify(ms[0], self.root_key, ms[1:])
        except (bakeryclient.MacaroonFormatError, MacaroonException):
            return False
        return True

    def challenge(self):
        return json_response(401, {
            'Code': httpbakery.ERR_DISCHARGE_REQUIRED,
            'Message': 'discharge required',
            'Info': {
                'Macaroon': bakeryclient.macaroon_to_dict(
                    self.new_macaroon()),
                'MacaroonPath': '/',
            },
        }, headers={'WWW-Authenticate': 'Macaroon'})

    def handler(self, path='/api/x'):
        ''' Return an httmock handler serving path, challenging requests
        without valid macaroons.
        '''
        @urlmatch(netloc='api.example.com', path=path)
        def serve(url, request):
            self.requests.append(request)
            if not self.authorized(request.headers):
                return self.challenge()
            return json_response(200, {'path': path})
        return serve


def discharge_handler(discharger):
    ''' Return an httmock handler discharging caveats directly.
    '''
    @urlmatch(netloc='idm.example.com', path='/discharge', method='POST')
    def discharge(url, request):
        form = discharger.read_form(request)
        return json_response(200, {
            'Macaroon': discharger.discharge(form['id']),
        })
    return discharge
