# Copyright 2017 Canonical Ltd.
# Licensed under the LGPLv3, see LICENCE file for details.
from unittest import TestCase

import pymacaroons
import requests.cookies

import bakeryclient


def new_macaroons():
    m = pymacaroons.Macaroon(location='http://api.example.com',
                             identifier='primary', key=b'root key')
    d = pymacaroons.Macaroon(location='', identifier='discharge',
                             key=b'other key')
    return [m, m.prepare_for_request(d)]


class TestMacaroonStore(TestCase):
    def test_macaroon_name(self):
        self.assertEqual(bakeryclient.macaroon_name('charmstore'),
                         'Macaroons-charmstore')

    def test_empty(self):
        store = bakeryclient.MacaroonStore()
        self.assertIsNone(store.get('svc'))
        self.assertIsNone(store.get_encoded('svc'))
        self.assertIsNone(store.identity)

    def test_set_and_get(self):
        store = bakeryclient.MacaroonStore()
        ms = new_macaroons()
        store.set('svc', ms)
        got = store.get('svc')
        self.assertEqual([m.identifier for m in got],
                         ['primary', 'discharge'])
        self.assertEqual([m.signature for m in got],
                         [m.signature for m in ms])
        self.assertEqual(store.get_encoded('svc'),
                         bakeryclient.encode_macaroons(ms))
        # Nothing was written to the cookie jar.
        self.assertEqual(len(store.cookies), 0)

    def test_set_replaces(self):
        store = bakeryclient.MacaroonStore()
        store.set('svc', new_macaroons())
        m = pymacaroons.Macaroon(location='loc', identifier='new',
                                 key=b'key')
        store.set('svc', [m])
        self.assertEqual([m.identifier for m in store.get('svc')], ['new'])

    def test_services_are_separate(self):
        store = bakeryclient.MacaroonStore()
        store.set('svc', new_macaroons())
        self.assertIsNone(store.get('other'))

    def test_set_dicts_and_encoded(self):
        ms = new_macaroons()
        store = bakeryclient.MacaroonStore()
        store.set('dicts', bakeryclient.export_macaroons(ms))
        store.set('encoded', bakeryclient.encode_macaroons(ms))
        for name in ('dicts', 'encoded'):
            with self.subTest(name):
                self.assertEqual(store.get_encoded(name),
                                 bakeryclient.encode_macaroons(ms))

    def test_unparseable_value(self):
        store = bakeryclient.MacaroonStore()
        store.set('svc', 'not a macaroon set')
        with self.assertLogs('bakeryclient.store', 'WARNING'):
            self.assertIsNone(store.get('svc'))

    def test_persist_as_cookie(self):
        jar = requests.cookies.RequestsCookieJar()
        store = bakeryclient.MacaroonStore(
            cookies=jar, cookie_url='https://api.example.com/v1')
        store.set('svc', new_macaroons(), persist_as_cookie=True)
        cookie = next(iter(jar))
        self.assertEqual(cookie.name, 'Macaroons-svc')
        self.assertEqual(cookie.domain, 'api.example.com')
        self.assertEqual(cookie.path, '/v1')
        self.assertTrue(cookie.secure)

        # A new store sharing the jar sees the macaroons.
        other = bakeryclient.MacaroonStore(cookies=jar)
        self.assertEqual([m.identifier for m in other.get('svc')],
                         ['primary', 'discharge'])

    def test_clear(self):
        jar = requests.cookies.RequestsCookieJar()
        store = bakeryclient.MacaroonStore(cookies=jar)
        store.set('svc', new_macaroons(), persist_as_cookie=True)
        store.identity = 'token'
        store.clear('svc')
        self.assertIsNone(store.get('svc'))
        self.assertIsNone(store.identity)
        self.assertIsNone(jar.get('Macaroons-svc'))

    def test_clear_without_cookie(self):
        store = bakeryclient.MacaroonStore()
        store.set('svc', new_macaroons())
        store.identity = 'token'
        store.clear('svc')
        self.assertIsNone(store.get('svc'))
        self.assertIsNone(store.identity)

    def test_clear_removes_scoped_cookie(self):
        jar = requests.cookies.RequestsCookieJar()
        store = bakeryclient.MacaroonStore(
            cookies=jar, cookie_url='https://api.example.com/v1')
        store.set('svc', new_macaroons(), persist_as_cookie=True)
        store.clear('svc')
        self.assertIsNone(store.get('svc'))
        self.assertEqual(len(jar), 0)

    def test_clear_removes_cookie_set_by_others(self):
        jar = requests.cookies.RequestsCookieJar()
        jar.set_cookie(requests.cookies.create_cookie(
            'Macaroons-svc', bakeryclient.encode_macaroons(new_macaroons()),
            domain='api.example.com', path='/'))
        jar.set_cookie(requests.cookies.create_cookie('other', 'value'))
        store = bakeryclient.MacaroonStore(cookies=jar)
        self.assertIsNotNone(store.get('svc'))
        store.clear('svc')
        self.assertIsNone(store.get('svc'))
        self.assertEqual([c.name for c in jar], ['other'])
