# Copyright 2017 Canonical Ltd.
# Licensed under the LGPLv3, see LICENCE file for details.
from collections import namedtuple
import json

from bakeryclient.keys import decode_private_key
from bakeryclient.httpbakery.error import ConfigFileFormatError


class ClientConfig(
    namedtuple('ClientConfig', 'service_name, visitor, interactive, '
                               'on_success, set_cookie_path, set_cookie, '
                               'static_macaroon_path, macaroon, '
                               'discharge_token, auth, key')):
    ''' Holds the configuration of a Client.

    @param service_name the name of the service for which the client is
    used. Its macaroons are stored under "Macaroons-" + service_name.
    @param visitor the Visitor, or a function called with the ErrorInfo,
    used to log into the identity provider. If not specified, a browser
    window is opened, unless interactive is False.
    @param interactive whether to use interactive mode (the default) or
    non-interactive mode, in which case auth is sent to the identity provider
    instead of involving the user.
    @param on_success an optional function called without arguments once a
    discharge has succeeded.
    @param set_cookie_path optional path of an endpoint registering the
    macaroons as a cookie.
    @param set_cookie whether the macaroons are also stored in the cookie
    jar of the store.
    @param static_macaroon_path optional path from which a macaroon can be
    fetched ahead of any request.
    @param macaroon an initial macaroon set to be stored.
    @param discharge_token optional token to be used when discharging.
    @param auth the authentication payload used in non-interactive mode.
    @param key optional nacl private key of the client, used to discharge
    "local" third party caveats.
    '''
    __slots__ = ()

    def __new__(cls, service_name, visitor=None, interactive=True,
                on_success=None, set_cookie_path=None, set_cookie=False,
                static_macaroon_path=None, macaroon=None,
                discharge_token=None, auth=None, key=None):
        return super(ClientConfig, cls).__new__(
            cls, service_name, visitor, interactive, on_success,
            set_cookie_path, set_cookie, static_macaroon_path, macaroon,
            discharge_token, auth, key)


def load_config_file(filename, **kwargs):
    ''' Loads the client configuration from the specified JSON file.

        The file holds an object with a mandatory "service-name" field and
        the optional "interactive", "set-cookie-path", "set-cookie",
        "static-macaroon-path", "discharge-token", "auth" and
        "key": {"private": ...} fields. Options that cannot be expressed in
        JSON, such as the visitor, can be given as keyword arguments.
    '''
    with open(filename) as f:
        try:
            data = json.load(f)
        except ValueError as e:
            raise ConfigFileFormatError('invalid config file', e)
    try:
        key = None
        if data.get('key') is not None:
            key = decode_private_key(data['key']['private'])
        return ClientConfig(
            service_name=data['service-name'],
            interactive=data.get('interactive', True),
            set_cookie_path=data.get('set-cookie-path'),
            set_cookie=data.get('set-cookie', False),
            static_macaroon_path=data.get('static-macaroon-path'),
            discharge_token=data.get('discharge-token'),
            auth=data.get('auth'),
            key=key,
            **kwargs)
    except (AttributeError, KeyError, TypeError, ValueError) as e:
        raise ConfigFileFormatError('invalid config file', e)
