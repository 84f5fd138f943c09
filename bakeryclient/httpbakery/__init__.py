# Copyright 2017 Canonical Ltd.
# Licensed under the LGPLv3, see LICENCE file for details.
from bakeryclient.httpbakery.error import (
    BAKERY_PROTOCOL_HEADER,
    ConfigFileFormatError,
    DischargeRejected,
    ERR_DISCHARGE_REQUIRED,
    ERR_INTERACTION_REQUIRED,
    Error,
    ErrorInfo,
    InteractionError,
    PROTOCOL_VERSION,
    SessionSyncError,
    TransportError,
)
from bakeryclient.httpbakery.webhandler import (
    RequestsWebHandler,
    WebHandler,
    closed_response,
    is_connection_reset,
)
from bakeryclient.httpbakery.interactor import (
    CustomVisitor,
    NonInteractiveVisitor,
    Visitor,
)
from bakeryclient.httpbakery.browser import WebBrowserVisitor
from bakeryclient.httpbakery.discharge import (
    DischargeEngine,
    MAX_WAIT_RETRIES,
)
from bakeryclient.httpbakery.session import SessionSync
from bakeryclient.httpbakery.config import (
    ClientConfig,
    load_config_file,
)
from bakeryclient.httpbakery.client import Client

__all__ = [
    'BAKERY_PROTOCOL_HEADER',
    'Client',
    'ClientConfig',
    'ConfigFileFormatError',
    'CustomVisitor',
    'DischargeEngine',
    'DischargeRejected',
    'ERR_DISCHARGE_REQUIRED',
    'ERR_INTERACTION_REQUIRED',
    'Error',
    'ErrorInfo',
    'InteractionError',
    'MAX_WAIT_RETRIES',
    'NonInteractiveVisitor',
    'PROTOCOL_VERSION',
    'RequestsWebHandler',
    'SessionSync',
    'SessionSyncError',
    'TransportError',
    'Visitor',
    'WebBrowserVisitor',
    'WebHandler',
    'closed_response',
    'is_connection_reset',
    'load_config_file',
]
