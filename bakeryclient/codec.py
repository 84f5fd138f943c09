# Copyright 2017 Canonical Ltd.
# Licensed under the LGPLv3, see LICENCE file for details.

import base64
import copy
from collections import namedtuple
import json

import nacl.exceptions
import nacl.utils
from nacl.public import Box, PublicKey
import pymacaroons

from bakeryclient.error import (
    CaveatFormatError,
    DecryptionError,
    KeyMismatchError,
    MissingConditionError,
    NonceLengthError,
)
from bakeryclient.keys import encode_key
from bakeryclient.third_party import ThirdPartyCaveatInfo

NONCE_LEN = 24
ROOT_KEY_LEN = 24


class CaveatIdEnvelope(namedtuple('CaveatIdEnvelope',
                                  'third_party_public_key, '
                                  'first_party_public_key, nonce, '
                                  'sealed_payload')):
    '''Holds the public parts of a sealed third party caveat id.

    All the fields are base64 encoded strings.

    @param third_party_public_key the key of the party the caveat is
    addressed to.
    @param first_party_public_key the key of the party that added the caveat.
    @param nonce the nonce used to seal the payload.
    @param sealed_payload the encrypted {RootKey, Condition} JSON object.
    '''
    __slots__ = ()

    def to_dict(self):
        return {
            'ThirdPartyPublicKey': self.third_party_public_key,
            'FirstPartyPublicKey': self.first_party_public_key,
            'Nonce': self.nonce,
            'Id': self.sealed_payload,
        }

    def serialize(self):
        '''Return the caveat id as a JSON string.'''
        return json.dumps(self.to_dict())

    @classmethod
    def deserialize(cls, caveat_id):
        '''Parse a caveat id.

        The id is a JSON object, optionally base64 encoded.

        @param caveat_id string or bytes.
        @return CaveatIdEnvelope
        @raises CaveatFormatError if the id cannot be parsed.
        '''
        if isinstance(caveat_id, bytes):
            try:
                caveat_id = caveat_id.decode('utf-8')
            except UnicodeDecodeError:
                raise CaveatFormatError('caveat id is not valid utf-8')
        if caveat_id.startswith('e'):
            # 'e' will be the first character if the caveat id is a base64
            # encoded JSON object.
            try:
                caveat_id = base64.b64decode(caveat_id).decode('utf-8')
            except ValueError:
                raise CaveatFormatError('unable to parse caveat id')
        try:
            wrapper = json.loads(caveat_id)
        except ValueError:
            raise CaveatFormatError('unable to parse caveat id')
        if not isinstance(wrapper, dict):
            raise CaveatFormatError('unable to parse caveat id')
        fields = []
        for name in ('ThirdPartyPublicKey', 'FirstPartyPublicKey',
                     'Nonce', 'Id'):
            value = wrapper.get(name)
            if not isinstance(value, str) or value == '':
                raise CaveatFormatError(
                    'caveat id has no {} field'.format(name))
            fields.append(value)
        return cls(*fields)


def seal(condition, third_party_public_key, key, random=None):
    '''Encrypt a third-party caveat condition.

    The third_party_public_key is the public key of the third party
    we're encrypting the caveat for; the key is the public/private key pair
    of the party that's adding the caveat.

    @param condition string
    @param third_party_public_key nacl public key
    @param key nacl private key
    @param random function returning the given number of random bytes.
    @return a tuple of the CaveatIdEnvelope and the root key (bytes) that
    the caveat id protects.
    '''
    if random is None:
        random = nacl.utils.random
    nonce = random(NONCE_LEN)
    root_key = random(ROOT_KEY_LEN)
    plain_data = json.dumps({
        'RootKey': base64.b64encode(root_key).decode('ascii'),
        'Condition': condition,
    })
    box = Box(key, third_party_public_key)
    sealed = box.encrypt(plain_data.encode('utf-8'), nonce).ciphertext
    envelope = CaveatIdEnvelope(
        third_party_public_key=encode_key(third_party_public_key),
        first_party_public_key=encode_key(key.public_key),
        nonce=base64.b64encode(nonce).decode('ascii'),
        sealed_payload=base64.b64encode(sealed).decode('ascii'),
    )
    return envelope, root_key


def unseal(caveat_id, key):
    '''Decode a caveat id by decrypting its sealed payload with key.

    @param caveat_id the caveat id (string or bytes) or a CaveatIdEnvelope.
    @param key the nacl private key of the third party.
    @return ThirdPartyCaveatInfo
    '''
    if isinstance(caveat_id, CaveatIdEnvelope):
        envelope = caveat_id
        caveat_id = envelope.serialize()
    else:
        envelope = CaveatIdEnvelope.deserialize(caveat_id)

    tp_public_key = _decode_field(envelope.third_party_public_key,
                                  'ThirdPartyPublicKey')
    if tp_public_key != key.public_key.encode():
        raise KeyMismatchError('public key mismatch')
    nonce = _decode_field(envelope.nonce, 'Nonce')
    try:
        fp_public_key = PublicKey(_decode_field(
            envelope.first_party_public_key, 'FirstPartyPublicKey'))
    except (TypeError, ValueError, nacl.exceptions.CryptoError):
        raise CaveatFormatError('invalid first party public key')
    if len(nonce) != NONCE_LEN:
        raise NonceLengthError('bad nonce length {}'.format(len(nonce)))
    sealed = _decode_field(envelope.sealed_payload, 'Id')

    box = Box(key, fp_public_key)
    try:
        data = box.decrypt(sealed, nonce)
    except nacl.exceptions.CryptoError as e:
        raise DecryptionError('cannot decrypt caveat id: {}'.format(e))
    try:
        record = json.loads(data.decode('utf-8'))
    except (UnicodeDecodeError, ValueError):
        raise CaveatFormatError('unable to parse decrypted caveat payload')
    if not isinstance(record, dict):
        raise CaveatFormatError('unable to parse decrypted caveat payload')
    if record.get('Condition') is None:
        raise MissingConditionError('empty condition in third party caveat')
    root_key = record.get('RootKey')
    if root_key is None:
        raise CaveatFormatError('no root key in third party caveat')
    return ThirdPartyCaveatInfo(
        condition=record['Condition'],
        first_party_public_key=fp_public_key,
        third_party_key_pair=key,
        root_key=_decode_field(root_key, 'RootKey'),
        caveat=caveat_id,
    )


def add_third_party_caveat(m, condition, location, third_party_public_key,
                           key, random=None):
    '''Add a public-key encrypted third party caveat to a macaroon.

    The given macaroon is left untouched.

    @param m the pymacaroons.Macaroon to add the caveat to.
    @param condition the condition for the third party to verify.
    @param location the URL of the third party.
    @param third_party_public_key the nacl public key of the third party.
    @param key the nacl private key of the party adding the caveat.
    @param random optional random bytes source, see seal.
    @return the derived pymacaroons.Macaroon.
    '''
    envelope, root_key = seal(condition, third_party_public_key, key,
                              random=random)
    m = copy.deepcopy(m)
    m.add_third_party_caveat(location, root_key, envelope.serialize())
    return m


def discharge_third_party_caveat(caveat_id, key, check):
    '''Discharge a public-key encrypted third party caveat.

    @param caveat_id the third party caveat id to check.
    @param key the third party's nacl private key.
    @param check a function that is called with the condition. It should
    raise an exception if the condition is not met.
    @return the pymacaroons.Macaroon that discharges the caveat.
    '''
    info = unseal(caveat_id, key)
    check(info.condition)
    identifier = info.caveat
    if isinstance(identifier, bytes):
        identifier = identifier.decode('utf-8')
    return pymacaroons.Macaroon(
        key=info.root_key, identifier=identifier, location='')


def _decode_field(value, name):
    try:
        return base64.b64decode(value, validate=True)
    except (TypeError, ValueError):
        raise CaveatFormatError('invalid base64 in {} field'.format(name))
