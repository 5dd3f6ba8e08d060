import http.client as httplib
import json
import logging
import socket

import httplib2
from googleapiclient.discovery import build
import googleapiclient.errors

from formica.fleet.endpoint import resolve_endpoint
from formica.fleet.errors import APIError, ConfigurationError, TransportError
from formica.fleet.objects import Machine, Unit, UnitState, STATES

logger = logging.getLogger(__name__)

# everything the transport can raise when a request never gets a usable response
TRANSPORT_ERRORS = (socket.error, httplib.HTTPException, httplib2.HttpLib2Error)


def _api_error(exc):
    """Convert a googleapiclient HttpError into an APIError

    fleet reports errors as {"error": {"code": 404, "message": "unit does not exist"}}
    but a proxy in front of it may not, so fall back to the raw response.
    """
    code = exc.resp.status
    message = exc.content

    try:
        response = json.loads(exc.content.decode('utf-8'))['error']
        code = response['code']
        message = response['message']
    except (ValueError, KeyError, TypeError, AttributeError):
        if isinstance(message, bytes):
            message = message.decode('utf-8', 'replace')

    return APIError(code=code, message=message, http_error=exc)


class Client(object):
    """A python wrapper for the fleet v1 API

    The fleet v1 API is documented here: https://github.com/coreos/fleet/blob/master/Documentation/api-v1.md

    Every method is a single synchronous request (two or more only when fleet pages a listing);
    nothing is retried and nothing is cached.
   """

    _API = 'fleet'
    _VERSION = 'v1'
    _STATES = list(STATES)

    def __init__(self, endpoint, http=None, timeout=None, **ssh_options):
        """Connect to the fleet API and generate a client based on it's discovery document.

        Args:
            endpoint (str): A URL where the fleet API can be reached. See
                formica.fleet.endpoint.resolve_endpoint for the supported schemes.
            http (httplib2.Http): An instance of httplib2.Http (or something that acts like it) that HTTP requests will
                be made through for http(s) endpoints.
            timeout (float): Socket timeout in seconds for connections we open ourselves.
            **ssh_options: ssh_tunnel, ssh_username, ssh_timeout, ssh_known_hosts_file,
                ssh_strict_host_key_checking and ssh_raw_transport, passed to resolve_endpoint.

        Raises:
            ConfigurationError: The endpoint is invalid, or is not a fleet v1 API endpoint
            TransportError: The endpoint was not reachable
            APIError: The endpoint returned an error for the discovery document
        """

        # resolved once, every request made by this client goes through the same transport
        self._resolved = resolve_endpoint(endpoint, http=http, timeout=timeout, **ssh_options)

        self._endpoint = self._resolved.url
        self._http = self._resolved.http

        # generate a client binding using the google-api-python client.
        # See https://developers.google.com/api-client-library/python/start/get_started
        # For more infomation on how to use the generated client binding.
        discovery_url = self._endpoint + '/{api}/{apiVersion}/discovery'

        logger.debug('fetching fleet discovery document from %s', discovery_url)

        try:
            self._service = build(
                self._API,
                self._VERSION,
                cache_discovery=False,
                discoveryServiceUrl=discovery_url,
                http=self._http
            )
        except TRANSPORT_ERRORS as exc:
            raise TransportError('Unable to connect to endpoint {0}'.format(self._endpoint), cause=exc)
        except googleapiclient.errors.UnknownApiNameOrVersion as exc:
            raise ConfigurationError(
                'Connected to endpoint {0} but it is not a fleet v1 API endpoint. '
                'This usually means a GET request to {0}/{1}/{2}/discovery failed.'.format(
                    self._endpoint,
                    self._API,
                    self._VERSION
                ), cause=exc)
        except googleapiclient.errors.InvalidJsonError as exc:
            raise TransportError(
                'Endpoint {0} returned a discovery document that is not valid JSON'.format(self._endpoint),
                cause=exc
            )
        except googleapiclient.errors.HttpError as exc:
            raise _api_error(exc)

    @property
    def endpoint(self):
        """str: The URL requests are made against (http://domain-sock for unix sockets)"""
        return self._endpoint

    def _single_request(self, method, *args, **kwargs):
        """Make a single request to the fleet API endpoint

        Args:
            method (str): A dot delimited string indicating the method to call.  Example: 'Machines.List'
            *args: Passed directly to the method being called.
            **kwargs: Passed directly to the method being called.

        Returns:
            dict: The response from the method called.

        Raises:
            APIError: Fleet returned a response code >= 400
            TransportError: The request failed before fleet could answer it
        """

        # The auto generated client binding require instantiating each object you want to call a method on
        # For example to make a request to /machines for the list of machines you would do:
        # self._service.Machines().List(**kwargs)
        (resource, _, name) = method.rpartition('.')

        _method = self._service
        for item in resource.split('.'):
            _method = getattr(_method, item)()

        _method = getattr(_method, name)(*args, **kwargs)

        # Per the fleet API documentation:
            # "Note that this discovery document intentionally ships with an unusable rootUrl;
            # clients must initialize this as appropriate."
        _method.uri = _method.uri.replace('$ENDPOINT', self._endpoint)

        logger.debug('fleet request %s %s', _method.method, _method.uri)

        try:
            return _method.execute(http=self._http)
        except googleapiclient.errors.HttpError as exc:
            raise _api_error(exc)
        except TRANSPORT_ERRORS as exc:
            raise TransportError('{0} request to {1} failed'.format(method, self._endpoint), cause=exc)

    def _request(self, method, *args, **kwargs):
        """Make a request with automatic pagination handling

        Args:
            method (str): A dot delimited string indicating the method to call.  Example: 'Machines.List'
            *args: Passed directly to the method being called.
            **kwargs: Passed directly to the method being called.
                        Note: This method will inject the 'nextPageToken' key into `**kwargs` as needed to handle
                        pagination overwriting any value specified by the caller.  If you wish to handle pagination
                        manually use the `_single_request` method

        Yields:
            dict: The next page of responses from the method called.

        Raises:
            APIError: Fleet returned a response code >= 400
            TransportError: The request failed, or fleet returned something other than a page

        """

        # False and not None so that the loop below runs at least once
        next_page_token = False

        while next_page_token is not None:
            if next_page_token:
                kwargs['nextPageToken'] = next_page_token

            response = self._single_request(method, *args, **kwargs)

            if not isinstance(response, dict):
                raise TransportError('{0} returned a malformed response: {1!r}'.format(method, response))

            next_page_token = response.get('nextPageToken', None)

            yield response

    def _unit_name(self, unit):
        # if we are given an object, grab it's name property
        if isinstance(unit, Unit):
            return unit.name

        return str(unit)

    def create_unit(self, name, unit):
        """Create a new Unit in the cluster

        Create and modify Unit entities to communicate to fleet the desired state of the cluster.
        This simply declares what should be happening; the backend system still has to react to
        the changes in this desired state. The actual state of the system is communicated with
        UnitState entities.

        Args:
            name (str): The name of the unit to create
            unit (Unit): The unit to submit to fleet

        Returns:
            True: The unit was created

        Raises:
            APIError: Fleet returned a response code >= 400
            TransportError: The request failed before fleet could answer it

        """

        self._single_request('Units.Set', unitName=name, body={
            'desiredState': unit.desiredState,
            'options': unit.options
        })

        return True

    def set_unit_desired_state(self, unit, desired_state):
        """Update the desired state of a unit running in the cluster

        Args:
            unit (str, Unit): The Unit, or name of the unit to update

            desired_state: State the user wishes the Unit to be in
                          ("inactive", "loaded", or "launched")
        Returns:
            True: The desired state was updated

        Raises:
            APIError: Fleet returned a response code >= 400, including 404 for an unknown unit
            TransportError: The request failed before fleet could answer it
            ValueError: An invalid value was provided for ``desired_state``

        """

        if desired_state not in self._STATES:
            raise ValueError('state must be one of: {0}'.format(
                self._STATES
            ))

        self._single_request('Units.Set', unitName=self._unit_name(unit), body={
            'desiredState': desired_state
        })

        return True

    def destroy_unit(self, unit):
        """Delete a unit from the cluster

        Args:
            unit (str, Unit): The Unit, or name of the unit to delete

        Returns:
            True: The unit was deleted

        Raises:
            APIError: Fleet returned a response code >= 400
            TransportError: The request failed before fleet could answer it

        """

        self._single_request('Units.Delete', unitName=self._unit_name(unit))
        return True

    def list_units(self):
        """Return the current list of the Units in the fleet cluster

        Yields:
            Unit: The next Unit in the cluster

        Raises:
            APIError: Fleet returned a response code >= 400
            TransportError: The request failed before fleet could answer it

        """
        for page in self._request('Units.List'):
            for unit in page.get('units', []):
                yield Unit(data=unit)

    def get_unit(self, name):
        """Retreive a specific unit from the fleet cluster by name

        Args:
            name (str): The name of the unit

        Returns:
            Unit: The unit identified by ``name`` in the fleet cluster

        Raises:
            APIError: Fleet returned a response code >= 400
            TransportError: The request failed before fleet could answer it

        """
        return Unit(data=self._single_request('Units.Get', unitName=name))

    def list_unit_states(self, machine_id=None, unit_name=None):
        """Return the current UnitState for the fleet cluster

        Args:
            machine_id (str): filter all UnitState objects to those
                              originating from a specific machine

            unit_name (str):  filter all UnitState objects to those related
                              to a specific unit

        Yields:
            UnitState: The next UnitState in the cluster

        Raises:
            APIError: Fleet returned a response code >= 400
            TransportError: The request failed before fleet could answer it

        """
        for page in self._request('UnitState.List', machineID=machine_id, unitName=unit_name):
            for state in page.get('states', []):
                yield UnitState(data=state)

    def list_machines(self):
        """Retrieve a list of machines in the fleet cluster

        Yields:
            Machine: The next machine in the cluster

        Raises:
            APIError: Fleet returned a response code >= 400
            TransportError: The request failed before fleet could answer it

        """
        for page in self._request('Machines.List'):
            for machine in page.get('machines', []):
                yield Machine(data=machine)
