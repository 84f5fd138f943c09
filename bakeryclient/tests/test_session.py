# Copyright 2017 Canonical Ltd.
# Licensed under the LGPLv3, see LICENCE file for details.
import json
from unittest import TestCase

import pymacaroons

import bakeryclient
from bakeryclient import httpbakery
from bakeryclient.tests import common


class TestSessionSync(TestCase):

    def setUp(self):
        self.store = bakeryclient.MacaroonStore()
        self.macaroons = [pymacaroons.Macaroon(
            location='loc', identifier='id', key=b'key')]

    def test_store_only(self):
        wh = common.ScriptedWebHandler()
        sync = httpbakery.SessionSync(wh, self.store)
        self.assertIsNone(sync.persist('svc', self.macaroons))
        self.assertEqual(wh.requests, [])
        self.assertEqual(self.store.get('svc')[0].identifier, 'id')

    def test_put(self):
        wh = common.ScriptedWebHandler(
            common.response(status_code=200, content=''))
        sync = httpbakery.SessionSync(wh, self.store,
                                      set_cookie_path='/set-cookie')
        resp = sync.persist('svc', self.macaroons)
        self.assertEqual(resp.status_code, 200)
        req = wh.requests[0]
        self.assertEqual(req.method, 'PUT')
        self.assertEqual(req.url, '/set-cookie')
        self.assertEqual(req.headers, {'Content-Type': 'application/json'})
        self.assertEqual(json.loads(req.data), {
            'Macaroons': bakeryclient.export_macaroons(self.macaroons),
        })

    def test_put_failure(self):
        wh = common.ScriptedWebHandler(
            common.response(status_code=403, content=''))
        sync = httpbakery.SessionSync(wh, self.store,
                                      set_cookie_path='/set-cookie')
        with self.assertRaises(httpbakery.SessionSyncError) as cm:
            sync.persist('svc', self.macaroons)
        self.assertEqual(cm.exception.response.status_code, 403)
        self.assertIsNotNone(self.store.get('svc'))

    def test_set_cookie(self):
        wh = common.ScriptedWebHandler()
        sync = httpbakery.SessionSync(wh, self.store, set_cookie=True)
        sync.persist('svc', self.macaroons)
        self.assertIsNotNone(self.store.cookies.get('Macaroons-svc'))
