# Copyright 2017 Canonical Ltd.
# Licensed under the LGPLv3, see LICENCE file for details.
from bakeryclient.utils import visit_page_with_browser
from bakeryclient.httpbakery.interactor import Visitor


class WebBrowserVisitor(Visitor):
    ''' Handles interaction-required errors by opening a web browser to
    allow the user to prove their credentials interactively.

    @param open a function called with the URL to visit. It defaults to
    opening a new browser window.
    '''
    def __init__(self, open=None):
        if open is None:
            open = visit_page_with_browser
        self._open_web_browser = open

    def visit(self, info):
        self._open_web_browser(info.visit_url)
