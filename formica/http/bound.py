import httplib2


class BoundHttp(httplib2.Http):
    """An httplib2.Http that always opens its connections with one connection class

    httplib2 normally picks the connection class from the request's scheme.
    Here the class is chosen once, when the object is built, and is handed to
    httplib2 as ``connection_type`` on every request (redirects included).
    This is how the unix socket and ssh tunnel transports take over dialing
    without touching httplib2's module level scheme table.

        >>> http = BoundHttp(UnixSocketConnection.bind('/var/run/fleet.sock'))
        >>> http.request('http://domain-sock/fleet/v1/machines')

    """

    def __init__(self, connection_type, **kwargs):
        """
        Args:
            connection_type (type): An http.client.HTTPConnection subclass, called like ``connection_type(authority, timeout=..., proxy_info=...)``
                                  httplib2 checks it with issubclass, so it must be a class.
            **kwargs: Passed directly to httplib2.Http. proxy_info defaults to None as proxies
                      can not be used with a bound connection.

        """
        kwargs.setdefault('proxy_info', None)

        super(BoundHttp, self).__init__(**kwargs)

        self.connection_type = connection_type

    def request(self, uri, method='GET', body=None, headers=None,
                redirections=httplib2.DEFAULT_MAX_REDIRECTS, connection_type=None):
        # whatever the caller asked for, we dial with our own connection class
        return super(BoundHttp, self).request(
            uri,
            method=method,
            body=body,
            headers=headers,
            redirections=redirections,
            connection_type=self.connection_type
        )
