# Copyright 2017 Canonical Ltd.
# Licensed under the LGPLv3, see LICENCE file for details.
from collections import namedtuple


class ThirdPartyCaveatInfo(namedtuple(
    'ThirdPartyCaveatInfo',
    'condition, first_party_public_key, third_party_key_pair, root_key, '
        'caveat')):
    '''The contents of an unsealed third party caveat id.

    @param condition the condition the third party is asked to check.
    @param first_party_public_key the nacl public key of the party that
    sealed the caveat.
    @param third_party_key_pair the nacl private key that unsealed it.
    @param root_key the root key (bytes) of the discharge macaroon.
    @param caveat the caveat id, as given to unseal.
    '''
