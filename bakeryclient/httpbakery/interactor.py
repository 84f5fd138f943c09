# Copyright 2017 Canonical Ltd.
# Licensed under the LGPLv3, see LICENCE file for details.
import abc
import json

from bakeryclient.utils import relative_url
from bakeryclient.httpbakery.error import InteractionError

JSON_CONTENT_TYPE = 'application/json'


class Visitor(abc.ABC):
    ''' Represents a way of getting the user to log in to an identity
    provider when a discharger answers with an interaction-required error.

    A visitor only starts the login: the discharge macaroon is then
    acquired by waiting on the error's wait URL.
    '''

    @abc.abstractmethod
    def visit(self, info):
        ''' Start the interaction described by info.

        @param info the ErrorInfo of the interaction-required error. Its
        visit_url and wait_url have been resolved against the location
        of the discharger.
        '''
        raise NotImplementedError('visit method must be defined in '
                                  'subclass')


class CustomVisitor(Visitor):
    ''' Delegates the interaction to a function, for instance to show the
    login page inside the host application.

    @param func a function called with the ErrorInfo.
    '''
    def __init__(self, func):
        self._func = func

    def visit(self, info):
        self._func(info)


class NonInteractiveVisitor(Visitor):
    ''' Logs in without user interaction by sending an authentication
    payload that was acquired beforehand.

    The visit URL is asked for the login methods it supports, as a JSON
    object mapping method names to URLs, and the payload is posted as
    {"login": auth} to the URL of the configured method.

    @param web_handler the WebHandler used to talk to the identity provider.
    @param auth the authentication payload, serializable as JSON.
    @param method the name of the login method to use.
    '''
    def __init__(self, web_handler, auth, method='jujugui'):
        self._web_handler = web_handler
        self._auth = auth
        self._method = method

    def visit(self, info):
        resp = self._web_handler.send_request(
            'GET', info.visit_url, headers={'Accept': JSON_CONTENT_TYPE})
        if resp.status_code != 200:
            raise InteractionError(
                'cannot get login methods from {}: status {}'.format(
                    info.visit_url, resp.status_code))
        try:
            methods = resp.json()
        except ValueError:
            raise InteractionError(
                'cannot parse login methods from {}'.format(info.visit_url))
        login_url = None
        if isinstance(methods, dict):
            login_url = methods.get(self._method)
        if login_url is None:
            raise InteractionError(
                'no {} login method found at {}'.format(
                    self._method, info.visit_url))
        login_url = relative_url(info.visit_url, login_url)
        resp = self._web_handler.send_request(
            'POST', login_url,
            headers={'Content-Type': JSON_CONTENT_TYPE},
            data=json.dumps({'login': self._auth}))
        if resp.status_code >= 400:
            raise InteractionError(
                'cannot log in at {}: status {}'.format(
                    login_url, resp.status_code))
