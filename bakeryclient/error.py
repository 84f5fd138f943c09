# Copyright 2017 Canonical Ltd.
# Licensed under the LGPLv3, see LICENCE file for details.


class BakeryException(Exception):
    '''Base class of all the errors raised by the bakery client.'''


class MacaroonFormatError(BakeryException):
    '''Raised when a macaroon or a macaroon set cannot be read.'''


class CaveatError(BakeryException):
    '''Raised when a third party caveat id cannot be unsealed.'''


class CaveatFormatError(CaveatError):
    '''The caveat id, or its decrypted payload, is malformed.'''


class KeyMismatchError(CaveatError):
    '''The caveat id was not sealed for the given key.'''


class NonceLengthError(CaveatError):
    '''The caveat id holds a nonce with an unexpected length.'''


class DecryptionError(CaveatError):
    '''The sealed payload failed authenticated decryption.'''


class MissingConditionError(CaveatError):
    '''The decrypted payload holds no condition.'''
