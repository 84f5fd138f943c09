# Copyright 2017 Canonical Ltd.
# Licensed under the LGPLv3, see LICENCE file for details.
from collections import namedtuple

from bakeryclient.error import BakeryException

ERR_INTERACTION_REQUIRED = 'interaction required'
ERR_DISCHARGE_REQUIRED = 'macaroon discharge required'

# BAKERY_PROTOCOL_HEADER is the header that HTTP clients should set
# to determine the bakery protocol version. If it is 0 or missing,
# a discharge-required error response will be returned with HTTP status 407;
# if it is greater than 0, the response will have status 401 with the
# WWW-Authenticate header set to "Macaroon".
BAKERY_PROTOCOL_HEADER = 'Bakery-Protocol-Version'
PROTOCOL_VERSION = 1


class TransportError(BakeryException):
    '''Raised by a web handler when a request cannot be performed.'''


class InteractionError(BakeryException):
    '''Raised when a discharger asks for an interaction that cannot be
    carried out.

    @param message the error message.
    @param code the error code returned by the discharger, if any.
    '''
    def __init__(self, message, code=None):
        super(InteractionError, self).__init__(message)
        self.code = code


class DischargeRejected(BakeryException):
    '''Raised when a third party declines to discharge a caveat.

    @param message the error message.
    @param response the response from the discharger, if any.
    '''
    def __init__(self, message, response=None):
        super(DischargeRejected, self).__init__(message)
        self.response = response


class SessionSyncError(BakeryException):
    '''Raised when the macaroons cannot be registered as a cookie.'''
    def __init__(self, message, response=None):
        super(SessionSyncError, self).__init__(message)
        self.response = response


class ConfigFileFormatError(BakeryException):
    ''' ConfigFileFormatError is the exception raised when a client
        configuration file has a bad structure.
    '''


class Error(namedtuple('Error', 'code, message, version, info')):
    '''An error response from a bakery service or discharger.'''
    @classmethod
    def from_dict(cls, serialized):
        '''Create an error from a JSON-deserialized object
        @param serialized the object holding the serialized error {dict}
        '''
        # Some servers return lower case field names for message and code.
        # The Go client is tolerant of this, so be similarly tolerant here.
        def field(name):
            return serialized.get(name) or serialized.get(name.lower())
        return Error(
            code=field('Code'),
            message=field('Message'),
            info=ErrorInfo.from_dict(field('Info')),
            version=PROTOCOL_VERSION,
        )


class ErrorInfo(
    namedtuple('ErrorInfo', 'macaroon, macaroon_path, cookie_name_suffix, '
                            'visit_url, wait_url')):
    '''The Info field of an error returned by a bakery service or a
    discharger.

    @param macaroon the macaroon, in JSON form, to be discharged. Set with
    the ERR_DISCHARGE_REQUIRED code.
    @param macaroon_path the URL path under which the macaroon is valid.
    @param cookie_name_suffix the suggested suffix of the cookie holding
    the macaroon. The client stores macaroons by service name instead.
    @param visit_url the URL where the user logs in. Set with the
    ERR_INTERACTION_REQUIRED code.
    @param wait_url the URL answering with the discharge macaroon once the
    user has logged in. It may block for a while, or close the connection.
    '''

    __slots__ = ()

    @classmethod
    def from_dict(cls, serialized):
        '''Create a new ErrorInfo object from a JSON deserialized
        dictionary
        @param serialized The JSON object {dict}
        @return ErrorInfo object
        '''
        if not isinstance(serialized, dict):
            return None
        return ErrorInfo(
            macaroon=serialized.get('Macaroon'),
            macaroon_path=serialized.get('MacaroonPath'),
            cookie_name_suffix=serialized.get('CookieNameSuffix'),
            visit_url=serialized.get('VisitURL'),
            wait_url=serialized.get('WaitURL'),
        )

    def __new__(cls, macaroon=None, macaroon_path=None,
                cookie_name_suffix=None, visit_url=None, wait_url=None):
        return super(ErrorInfo, cls).__new__(
            cls, macaroon, macaroon_path, cookie_name_suffix,
            visit_url, wait_url)
