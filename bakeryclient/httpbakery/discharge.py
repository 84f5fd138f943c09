# Copyright 2017 Canonical Ltd.
# Licensed under the LGPLv3, see LICENCE file for details.
import base64
import json
import logging

from bakeryclient import codec, utils
from bakeryclient.error import BakeryException
from bakeryclient.httpbakery.error import (
    BAKERY_PROTOCOL_HEADER,
    ERR_INTERACTION_REQUIRED,
    PROTOCOL_VERSION,
    DischargeRejected,
    Error,
    InteractionError,
)
from bakeryclient.httpbakery.webhandler import is_connection_reset

log = logging.getLogger(__name__)

# The number of times a wait request is sent again after the server
# closed the connection. Identity providers close long-polling requests
# after about a minute, so this bounds the time left to the user to log in.
MAX_WAIT_RETRIES = 5

FORM_CONTENT_TYPE = 'application/x-www-form-urlencoded'
JSON_CONTENT_TYPE = 'application/json'

IDLE = 'idle'
AWAITING_THIRD_PARTY = 'awaiting-third-party'
INTERACTING = 'interacting'
WAITING = 'waiting'
DISCHARGED = 'discharged'
FAILED = 'failed'

_TRANSITIONS = {
    IDLE: (AWAITING_THIRD_PARTY, DISCHARGED, FAILED),
    AWAITING_THIRD_PARTY: (AWAITING_THIRD_PARTY, INTERACTING, DISCHARGED,
                           FAILED),
    INTERACTING: (WAITING, FAILED),
    WAITING: (AWAITING_THIRD_PARTY, DISCHARGED, FAILED),
    DISCHARGED: (),
    FAILED: (),
}


class _Attempt:
    ''' Tracks the state of a single discharge attempt.
    '''
    def __init__(self, macaroon):
        self._id = macaroon.identifier
        self.state = IDLE

    def transition(self, state):
        if state not in _TRANSITIONS[self.state]:
            raise RuntimeError('invalid discharge transition {} -> {}'.format(
                self.state, state))
        log.debug('discharge of {!r}: {} -> {}'.format(
            self._id, self.state, state))
        self.state = state


class DischargeEngine:
    ''' Acquires the discharge macaroons needed by a macaroon.

    Third party caveats are discharged by posting to the discharge endpoint
    of their location. When the discharger requires the user to log in,
    the visitor is asked to start the login and the wait URL returned by
    the discharger is polled until the discharge macaroon is available.

    The engine keeps no state between discharges: the discharge token
    returned by dischargers is saved as the identity of the store.

    @param web_handler the WebHandler used to talk to the dischargers.
    @param store the MacaroonStore holding the identity token.
    @param visitor the Visitor used when interaction is required. If None,
    discharges requiring interaction fail.
    @param key optional nacl private key of the client, used to discharge
    third party caveats with the special location "local".
    '''
    def __init__(self, web_handler, store, visitor=None, key=None):
        self._web_handler = web_handler
        self._store = store
        self._visitor = visitor
        self._key = key

    def discharge(self, m, on_success, on_failure):
        ''' Discharge the macaroon.

        @param m the pymacaroons.Macaroon to be discharged, or its JSON
        dict form.
        @param on_success called with the exported macaroon set (a list of
        dicts, m first) if the discharge succeeds.
        @param on_failure called with the BakeryException if the discharge
        fails.
        @return the value returned by the called callback.
        '''
        try:
            if isinstance(m, dict):
                m = utils.macaroon_from_dict(m)
            discharges = self.discharge_all(m)
        except BakeryException as exc:
            log.info('discharge failed: {}'.format(exc))
            return on_failure(exc)
        return on_success(utils.export_macaroons(discharges))

    def discharge_all(self, m):
        '''Gathers discharge macaroons for all the third party caveats in m
        (and any subsequent caveats required by those).

        All the discharge macaroons are bound to the primary macaroon.

        @param m the pymacaroons.Macaroon to be discharged.
        @return a list of pymacaroons.Macaroon with m as the first element,
        followed by all the discharge macaroons.
        '''
        attempt = _Attempt(m)
        discharges = [m]
        # Each caveat is queued with the location of the macaroon holding it.
        need = [(m.location, cav) for cav in m.third_party_caveats()]
        try:
            while need:
                location, cav = need.pop(0)
                attempt.transition(AWAITING_THIRD_PARTY)
                if self._key is not None and cav.location == 'local':
                    dm = codec.discharge_third_party_caveat(
                        cav.caveat_id, self._key, _check_local_condition)
                else:
                    dm = self._acquire_discharge(attempt, location, cav)
                discharges.append(m.prepare_for_request(dm))
                need.extend((dm.location, c)
                            for c in dm.third_party_caveats())
        except BakeryException:
            attempt.transition(FAILED)
            raise
        attempt.transition(DISCHARGED)
        return discharges

    def _acquire_discharge(self, attempt, first_party_location, cav):
        ''' Request a discharge macaroon from the caveat location.

        @param attempt the current _Attempt.
        @param first_party_location the location of the macaroon holding
        the caveat.
        @param cav the pymacaroons caveat to be discharged.
        @return the discharge pymacaroons.Macaroon.
        '''
        resp = self._request_discharge(first_party_location, cav)
        if resp.status_code < 400:
            return self._extract_macaroon(resp)
        info = self._interaction_info(cav.location, resp)
        if self._visitor is None:
            raise InteractionError('interaction required but not possible',
                                   code=ERR_INTERACTION_REQUIRED)
        attempt.transition(INTERACTING)
        try:
            self._visitor.visit(info)
        except BakeryException:
            raise
        except Exception as exc:
            raise InteractionError(
                'cannot visit {}: {}'.format(info.visit_url, exc)) from exc
        attempt.transition(WAITING)
        resp = self._wait(info.wait_url)
        if resp.status_code >= 400:
            raise DischargeRejected(
                'cannot get {}: status {}'.format(
                    info.wait_url, resp.status_code),
                response=resp)
        return self._extract_macaroon(resp)

    def _request_discharge(self, first_party_location, cav):
        headers = {
            BAKERY_PROTOCOL_HEADER: str(PROTOCOL_VERSION),
            'Content-Type': FORM_CONTENT_TYPE,
        }
        if self._store.identity:
            headers['Macaroons'] = self._store.identity
        req = {}
        _add_json_binary_field(cav.caveat_id_bytes, req, 'id')
        req['location'] = first_party_location or ''
        target = utils.relative_url(cav.location, 'discharge')
        log.debug('requesting discharge from {}'.format(target))
        return self._web_handler.send_request(
            'POST', target, headers=headers, data=req)

    def _interaction_info(self, location, resp):
        ''' Return the ErrorInfo of an interaction-required error response,
        with its URLs resolved against the discharger location.
        '''
        try:
            content = resp.json()
        except ValueError:
            content = None
        if not isinstance(content, dict):
            raise DischargeRejected(
                'discharge failed with status {}'.format(resp.status_code),
                response=resp)
        error = Error.from_dict(content)
        if error.code != ERR_INTERACTION_REQUIRED:
            raise InteractionError(
                'unexpected discharge error code {!r}: {}'.format(
                    error.code, error.message),
                code=error.code)
        info = error.info
        if info is None or not info.visit_url or not info.wait_url:
            raise InteractionError(
                'interaction-required response with no visit or wait URL: '
                '{}'.format(content),
                code=error.code)
        return info._replace(
            visit_url=utils.relative_url(location, info.visit_url),
            wait_url=utils.relative_url(location, info.wait_url),
        )

    def _wait(self, wait_url):
        ''' Poll the wait URL until it returns something other than a
        closed connection, or until MAX_WAIT_RETRIES retries were made.
        In the latter case the last response is returned as is.
        '''
        headers = {
            BAKERY_PROTOCOL_HEADER: str(PROTOCOL_VERSION),
            'Content-Type': JSON_CONTENT_TYPE,
        }
        retries = 0
        while True:
            resp = self._web_handler.send_request('GET', wait_url,
                                                  headers=headers)
            if not is_connection_reset(resp) or retries >= MAX_WAIT_RETRIES:
                return resp
            retries += 1
            log.info('wait request to {} closed by the server, '
                     'retrying ({}/{})'.format(wait_url, retries,
                                               MAX_WAIT_RETRIES))

    def _extract_macaroon(self, resp):
        ''' Return the macaroon from a discharge response, saving the
        discharge token it may hold.
        '''
        try:
            content = resp.json()
        except ValueError:
            content = None
        if not isinstance(content, dict):
            raise DischargeRejected(
                'cannot parse discharge response (status {})'.format(
                    resp.status_code),
                response=resp)
        token = content.get('DischargeToken')
        if token is not None and token != '':
            log.info('saving discharge token')
            self._store.identity = base64.b64encode(
                json.dumps(token).encode('utf-8')).decode('ascii')
        m = content.get('Macaroon')
        if m is None:
            raise DischargeRejected('no macaroon in discharge response',
                                    response=resp)
        return utils.macaroon_from_dict(m)


def _check_local_condition(condition):
    if condition != 'true':
        raise DischargeRejected(
            'unexpected condition {!r} in local third party caveat'.format(
                condition))


def _add_json_binary_field(b, form, field):
    # Ids that are not utf-8 are sent base64 encoded as field + '64'.
    try:
        form[field] = b.decode('utf-8')
    except UnicodeDecodeError:
        form[field + '64'] = base64.b64encode(b).decode('ascii')
