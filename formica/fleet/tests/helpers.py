import os
import socket
import tempfile
import threading

from googleapiclient.http import HttpMock, HttpMockSequence

BASE_DIR = os.path.dirname(os.path.abspath(__file__))

ENDPOINT = 'http://198.51.100.23:9160'


def fixture_path(name):
    return os.path.join(BASE_DIR, 'fixtures', name)


def load_fixture(name):
    with open(fixture_path(name)) as fh:
        return fh.read()


def discovery_http():
    """An HttpMock that serves the fleet v1 discovery document"""
    return HttpMock(fixture_path('fleet_v1.json'), {'status': '200'})


class RecordingHttp(HttpMockSequence):
    """HttpMockSequence that remembers every request made through it"""

    def __init__(self, iterable):
        super(RecordingHttp, self).__init__(iterable)
        self.requests = []

    def request(self, uri, method='GET', body=None, headers=None, redirections=1, connection_type=None):
        self.requests.append({'uri': uri, 'method': method, 'body': body})

        return super(RecordingHttp, self).request(
            uri,
            method=method,
            body=body,
            headers=headers,
            redirections=redirections,
            connection_type=connection_type
        )


def fleet_http(*responses):
    """A RecordingHttp that serves the discovery document, then ``responses`` in order"""
    return RecordingHttp([({'status': '200'}, load_fixture('fleet_v1.json'))] + list(responses))


def read_request(conn):
    """Read one HTTP request, headers and body, off a socket"""
    data = b''
    while b'\r\n\r\n' not in data:
        chunk = conn.recv(4096)
        if not chunk:
            return data
        data += chunk

    head, _, body = data.partition(b'\r\n\r\n')

    length = 0
    for line in head.split(b'\r\n')[1:]:
        name, _, value = line.partition(b':')
        if name.strip().lower() == b'content-length':
            length = int(value.strip())

    while len(body) < length:
        chunk = conn.recv(4096)
        if not chunk:
            break
        body += chunk

    return head + b'\r\n\r\n' + body


def write_response(conn, status, body):
    """Send a complete HTTP response and ask the client to close the connection"""
    body = body.encode('utf-8')

    conn.sendall(
        'HTTP/1.1 {0} OK\r\n'
        'Content-Type: application/json\r\n'
        'Content-Length: {1}\r\n'
        'Connection: close\r\n'
        '\r\n'.format(status, len(body)).encode('ascii') + body
    )


class UnixSocketFleet(object):
    """A fleet stand-in listening on a unix domain socket

    Answers one request per connection with the next of ``responses``, a list
    of (status, body) tuples, and remembers the raw requests it read.
    """

    def __init__(self, responses):
        self.responses = list(responses)
        self.requests = []

        self.tmpdir = tempfile.mkdtemp()
        self.path = os.path.join(self.tmpdir, 'fleet.sock')

        self.server = socket.socket(socket.AF_UNIX, socket.SOCK_STREAM)
        self.server.bind(self.path)
        self.server.listen(len(self.responses))

        self.thread = threading.Thread(target=self._serve)
        self.thread.daemon = True
        self.thread.start()

    @property
    def endpoint(self):
        return 'unix://' + self.path

    def _serve(self):
        for status, body in self.responses:
            conn, _ = self.server.accept()
            try:
                self.requests.append(read_request(conn))
                write_response(conn, status, body)
            finally:
                conn.close()

    def close(self):
        self.thread.join(5)
        self.server.close()
        os.unlink(self.path)
        os.rmdir(self.tmpdir)
