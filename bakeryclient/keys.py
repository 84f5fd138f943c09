# Copyright 2017 Canonical Ltd.
# Licensed under the LGPLv3, see LICENCE file for details.
import nacl.exceptions
from nacl.encoding import Base64Encoder
from nacl.public import PrivateKey, PublicKey


def generate_key():
    '''GenerateKey generates a new key pair.
    :return: a nacl.public.PrivateKey
    '''
    return PrivateKey.generate()


def encode_key(key):
    '''Return the base64 encoding of a nacl public or private key.'''
    return key.encode(Base64Encoder).decode('ascii')


def decode_public_key(s):
    '''Decode a base64 encoded nacl public key.

    @param s string or bytes.
    @return nacl.public.PublicKey
    @raises ValueError if s does not hold a valid key.
    '''
    return _decode(PublicKey, s)


def decode_private_key(s):
    '''Decode a base64 encoded nacl private key.

    @param s string or bytes.
    @return nacl.public.PrivateKey
    @raises ValueError if s does not hold a valid key.
    '''
    return _decode(PrivateKey, s)


def _decode(cls, s):
    if isinstance(s, str):
        s = s.encode('ascii')
    try:
        return cls(s, Base64Encoder)
    except (TypeError, ValueError, nacl.exceptions.CryptoError) as e:
        raise ValueError('invalid key {!r}: {}'.format(s, e))
