# Copyright 2017 Canonical Ltd.
# Licensed under the LGPLv3, see LICENCE file for details.

import base64
import binascii
import json
from urllib.parse import urljoin
import webbrowser

import pymacaroons
from pymacaroons.exceptions import MacaroonDeserializationException
from pymacaroons.serializers import json_serializer

from bakeryclient.error import MacaroonFormatError


def to_bytes(s):
    '''Return s as a bytes type, using utf-8 encoding if necessary.
    @param s string or bytes
    @return bytes
    '''
    if isinstance(s, bytes):
        return s
    if isinstance(s, str):
        return s.encode('utf-8')
    raise TypeError('want string or bytes, got {}'.format(type(s)))


def b64decode(s):
    '''Base64 decodes a base64-encoded string in URL-safe
    or normal format, with or without padding.
    The argument may be string or bytes.

    @param s bytes decode
    @return bytes decoded
    @raises ValueError on failure
    '''
    # add padding if necessary.
    s = to_bytes(s)
    if not s.endswith(b'='):
        s = s + b'=' * (-len(s) % 4)
    try:
        if b'_' in s or b'-' in s:
            return base64.urlsafe_b64decode(s)
        return base64.b64decode(s)
    except (TypeError, binascii.Error) as e:
        raise ValueError(str(e))


def macaroon_to_dict(macaroon):
    '''Turn a pymacaroons.Macaroon into its JSON object form.

    @param macaroon the macaroon to serialize.
    @return a dict that can be passed to json.dumps.
    '''
    return json.loads(macaroon.serialize(json_serializer.JsonSerializer()))


def macaroon_from_dict(json_macaroon):
    '''Return a pymacaroons.Macaroon from its JSON object form.

    Macaroons wrapped with their bakery version, as in
    {"m": <macaroon>, "v": 3}, are accepted too.

    @param json_macaroon the macaroon as a dict.
    @raises MacaroonFormatError if the macaroon cannot be read.
    '''
    if not isinstance(json_macaroon, dict):
        raise MacaroonFormatError(
            'macaroon is not a JSON object: {!r}'.format(json_macaroon))
    if isinstance(json_macaroon.get('m'), dict):
        json_macaroon = json_macaroon['m']
    try:
        return pymacaroons.Macaroon.deserialize(
            json.dumps(json_macaroon), json_serializer.JsonSerializer())
    except (KeyError, TypeError, ValueError,
            MacaroonDeserializationException) as e:
        raise MacaroonFormatError('cannot read macaroon: {}'.format(e))


def export_macaroons(macaroons):
    '''Return the JSON form of a macaroon set.

    @param macaroons a list of pymacaroons.Macaroon.
    @return a list of dicts.
    '''
    return [macaroon_to_dict(m) for m in macaroons]


def encode_macaroons(macaroons):
    '''Encode a macaroon set as sent in the Macaroons header.

    @param macaroons a list of pymacaroons.Macaroon, or of their dict form.
    @return the base64 encoded JSON array, as a string.
    '''
    exported = [m if isinstance(m, dict) else macaroon_to_dict(m)
                for m in macaroons]
    data = json.dumps(exported).encode('utf-8')
    return base64.urlsafe_b64encode(data).decode('ascii')


def decode_macaroons(encoded):
    '''Decode a macaroon set encoded by encode_macaroons.

    @param encoded string or bytes.
    @return a list of pymacaroons.Macaroon.
    @raises MacaroonFormatError if the data cannot be read.
    '''
    try:
        data = json.loads(b64decode(encoded).decode('utf-8'))
    except (TypeError, ValueError) as e:
        raise MacaroonFormatError('cannot decode macaroons: {}'.format(e))
    if not isinstance(data, list):
        raise MacaroonFormatError('macaroons are not a JSON array')
    return [macaroon_from_dict(m) for m in data]


def relative_url(base, new):
    ''' Returns new path relative to an original URL.
    '''
    if new == '':
        return base
    if not base.endswith('/'):
        base += '/'
    return urljoin(base, new)


def visit_page_with_browser(visit_url):
    '''Open a browser so the user can validate its identity.

    @param visit_url: where to prove your identity.
    '''
    webbrowser.open(visit_url, new=1)
