# Copyright 2017 Canonical Ltd.
# Licensed under the LGPLv3, see LICENCE file for details.

from bakeryclient.error import (
    BakeryException,
    CaveatError,
    CaveatFormatError,
    DecryptionError,
    KeyMismatchError,
    MacaroonFormatError,
    MissingConditionError,
    NonceLengthError,
)
from bakeryclient.keys import (
    decode_private_key,
    decode_public_key,
    encode_key,
    generate_key,
)
from bakeryclient.third_party import ThirdPartyCaveatInfo
from bakeryclient.codec import (
    CaveatIdEnvelope,
    NONCE_LEN,
    add_third_party_caveat,
    discharge_third_party_caveat,
    seal,
    unseal,
)
from bakeryclient.store import (
    MacaroonStore,
    macaroon_name,
)
from bakeryclient.utils import (
    b64decode,
    decode_macaroons,
    encode_macaroons,
    export_macaroons,
    macaroon_from_dict,
    macaroon_to_dict,
)

__all__ = [
    'BakeryException',
    'CaveatError',
    'CaveatFormatError',
    'CaveatIdEnvelope',
    'DecryptionError',
    'KeyMismatchError',
    'MacaroonFormatError',
    'MacaroonStore',
    'MissingConditionError',
    'NONCE_LEN',
    'NonceLengthError',
    'ThirdPartyCaveatInfo',
    'add_third_party_caveat',
    'b64decode',
    'decode_macaroons',
    'decode_private_key',
    'decode_public_key',
    'discharge_third_party_caveat',
    'encode_key',
    'encode_macaroons',
    'export_macaroons',
    'generate_key',
    'macaroon_from_dict',
    'macaroon_name',
    'macaroon_to_dict',
    'seal',
    'unseal',
]
