# settee: a small client for a CouchDB server
# Copyright (C) 2026 The Settee Developers
#
# This file is part of `settee`.
#
# `settee` is free software: you can redistribute it and/or modify it under
# the terms of the GNU Lesser General Public License as published by the Free
# Software Foundation, either version 3 of the License, or (at your option) any
# later version.
#
# `settee` is distributed in the hope that it will be useful, but WITHOUT
# ANY WARRANTY; without even the implied warranty of MERCHANTABILITY or FITNESS
# FOR A PARTICULAR PURPOSE.  See the GNU Lesser General Public License for more
# details.
#
# You should have received a copy of the GNU Lesser General Public License along
# with `settee`.  If not, see <http://www.gnu.org/licenses/>.
#
# Authors:
#   The Settee Developers
#

"""
Unit tests for the `settee` package.

Requests are made against `FakeCouch`, a tiny HTTP server running in a thread
that answers with scripted responses and records each request it receives.
"""

from unittest import TestCase
from base64 import b32encode
from collections import namedtuple
import os
import json
import threading
from http.server import ThreadingHTTPServer, BaseHTTPRequestHandler


Request = namedtuple('Request', 'method path headers body')


def random_id(numbytes=10):
    return b32encode(os.urandom(numbytes)).decode('ascii')


def random_basic():
    return dict(
        (k, random_id())
        for k in ('username', 'password')
    )


class FakeHandler(BaseHTTPRequestHandler):
    def handle_any(self):
        length = int(self.headers.get('Content-Length', 0))
        body = (self.rfile.read(length) if length else b'')
        self.server.requests.append(
            Request(self.command, self.path, self.headers, body)
        )
        (status, headers, data) = self.server.responses.pop(0)
        self.send_response(status)
        for (name, value) in headers:
            self.send_header(name, value)
        self.send_header('Content-Length', str(len(data)))
        self.end_headers()
        if self.command != 'HEAD':
            self.wfile.write(data)

    do_HEAD = handle_any
    do_GET = handle_any
    do_PUT = handle_any
    do_POST = handle_any
    do_DELETE = handle_any
    do_COPY = handle_any

    def log_message(self, *args):
        pass


class FakeCouch:
    """
    Answer requests with scripted responses, in the order they were queued.
    """

    def __init__(self):
        self.httpd = ThreadingHTTPServer(('127.0.0.1', 0), FakeHandler)
        self.httpd.daemon_threads = True
        self.httpd.requests = []
        self.httpd.responses = []
        self.thread = threading.Thread(target=self.httpd.serve_forever)
        self.thread.daemon = True
        self.thread.start()
        (host, port) = self.httpd.server_address[:2]
        self.host = host
        self.port = port
        self.url = 'http://{}:{}/'.format(host, port)

    @property
    def requests(self):
        return self.httpd.requests

    def reply(self, status, obj=None, headers=None, body=None,
              content_type='application/json'):
        if body is None:
            body = (b'' if obj is None else json.dumps(obj).encode('utf-8'))
        h = [('Content-Type', content_type)]
        if headers:
            h.extend(headers)
        self.httpd.responses.append((status, h, body))

    def close(self):
        self.httpd.shutdown()
        self.httpd.server_close()
        self.thread.join()


class FakeCouchTestCase(TestCase):
    def setUp(self):
        self.couch = FakeCouch()
        self.env = {'url': self.couch.url}

    def tearDown(self):
        self.couch.close()
        self.couch = None
        self.env = None
