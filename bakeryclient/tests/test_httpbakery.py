# Copyright 2017 Canonical Ltd.
# Licensed under the LGPLv3, see LICENCE file for details.
from unittest import TestCase

import bakeryclient
from bakeryclient import httpbakery


class TestErrorInfo(TestCase):

    def test_from_dict(self):
        info_dict = {
            'VisitURL': 'https://example.com/visit',
            'WaitURL': 'https://example.com/wait',
            'MacaroonPath': '/',
        }
        info = httpbakery.ErrorInfo.from_dict(info_dict)
        self.assertEqual(info.visit_url, 'https://example.com/visit')
        self.assertEqual(info.wait_url, 'https://example.com/wait')
        self.assertEqual(info.macaroon_path, '/')
        self.assertIsNone(info.macaroon)
        self.assertIsNone(info.cookie_name_suffix)

    def test_from_non_dict(self):
        self.assertIsNone(httpbakery.ErrorInfo.from_dict(None))
        self.assertIsNone(httpbakery.ErrorInfo.from_dict('info'))


class TestError(TestCase):

    def test_from_dict_upper_case_fields(self):
        err = httpbakery.Error.from_dict({
            'Message': 'm',
            'Code': 'c',
        })
        self.assertEqual(err, httpbakery.Error(
            code='c',
            message='m',
            info=None,
            version=httpbakery.PROTOCOL_VERSION,
        ))

    def test_from_dict_lower_case_fields(self):
        err = httpbakery.Error.from_dict({
            'message': 'm',
            'code': 'c',
        })
        self.assertEqual(err, httpbakery.Error(
            code='c',
            message='m',
            info=None,
            version=httpbakery.PROTOCOL_VERSION,
        ))

    def test_from_dict_with_info(self):
        err = httpbakery.Error.from_dict({
            'Code': httpbakery.ERR_INTERACTION_REQUIRED,
            'Info': {'VisitURL': 'v', 'WaitURL': 'w'},
        })
        self.assertEqual(err.info, httpbakery.ErrorInfo(visit_url='v',
                                                        wait_url='w'))


class TestExceptions(TestCase):

    def test_hierarchy(self):
        for cls in (httpbakery.TransportError, httpbakery.InteractionError,
                    httpbakery.DischargeRejected, httpbakery.SessionSyncError,
                    httpbakery.ConfigFileFormatError,
                    bakeryclient.MacaroonFormatError,
                    bakeryclient.KeyMismatchError):
            with self.subTest(cls.__name__):
                self.assertTrue(issubclass(cls, bakeryclient.BakeryException))
        for cls in (bakeryclient.CaveatFormatError,
                    bakeryclient.KeyMismatchError,
                    bakeryclient.NonceLengthError,
                    bakeryclient.DecryptionError,
                    bakeryclient.MissingConditionError):
            with self.subTest(cls.__name__):
                self.assertTrue(issubclass(cls, bakeryclient.CaveatError))

    def test_attributes(self):
        err = httpbakery.InteractionError('message', code='c')
        self.assertEqual(str(err), 'message')
        self.assertEqual(err.code, 'c')
        self.assertIsNone(httpbakery.DischargeRejected('m').response)
