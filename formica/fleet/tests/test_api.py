import unittest
import mock

import json, socket  # NOQA

from googleapiclient.http import HttpMock, HttpMockSequence

from ..api import Client
from ..errors import APIError, ConfigurationError, TransportError, is_unit_not_found
from ..objects import Unit

from .helpers import ENDPOINT, RecordingHttp, discovery_http, fixture_path, load_fixture


class TestFleetClient(unittest.TestCase):
    def setUp(self):
        self.discovery = discovery_http()

        self.endpoint = ENDPOINT
        self.client = Client(self.endpoint, http=self.discovery)

    def mock(self, http):
        self.client._http = http

    def test_init(self):
        """Test constructor"""
        assert self.client._endpoint == 'http://198.51.100.23:9160'
        assert self.client.endpoint == 'http://198.51.100.23:9160'
        assert id(self.client._http) == id(self.discovery)

    def test_init_trailing_slash(self):
        """A trailing slash on the endpoint is dropped"""
        client = Client(self.endpoint + '/', http=discovery_http())

        assert client.endpoint == 'http://198.51.100.23:9160'

    def test_init_discovery_url(self):
        """The discovery document is fetched from the fleet v1 discovery path"""
        http = RecordingHttp([({'status': '200'}, load_fixture('fleet_v1.json'))])

        Client(self.endpoint, http=http)

        assert http.requests[0]['uri'] == 'http://198.51.100.23:9160/fleet/v1/discovery'

    def test_init_endpoint_active_but_invalid(self):
        """Accessible endpoint with no discovery document"""

        def test():

            http = HttpMock(
                fixture_path('empty_response.txt'),
                {'status': '404'},
            )

            Client(self.endpoint, http=http)

        self.assertRaises(ConfigurationError, test)
        self.assertRaises(ValueError, test)

    def test_init_endpoint_error(self):
        """A server error for the discovery document is an APIError"""

        def test():
            http = HttpMock(
                fixture_path('empty_response.txt'),
                {'status': '500'},
            )

            Client(self.endpoint, http=http)

        self.assertRaises(APIError, test)

    def test_init_endpoint_unreachable(self):
        """A refused connection while fetching the discovery document is a TransportError"""

        def test():
            with mock.patch('formica.fleet.api.build', side_effect=ConnectionRefusedError()):
                Client(self.endpoint, http=self.discovery)

        self.assertRaises(TransportError, test)

    def test_init_bad_scheme(self):
        """Endpoint resolution runs before anything is fetched"""

        def test():
            Client('ftp://198.51.100.23', http=self.discovery)

        self.assertRaises(ConfigurationError, test)

    def test_single_request_good(self):
        """A single request returns 200"""
        self.mock(HttpMock(
            fixture_path('machines_single_no_metadata.json'),
            {'status': '200'}
        ))

        output = self.client._single_request('Machines.List')

        assert 'machines' in output

    def test_single_request_bad(self):
        """A 404 return causes APIError to be raised"""

        self.mock(HttpMockSequence([
            ({'status': '404'}, '{"error":{"code":404,"message":"unit does not exist"}}')
        ]))

        try:
            self.client._single_request('Units.Get', unitName='test.service')
        except APIError as exc:
            assert exc.code == 404
            assert exc.message == 'unit does not exist'
            assert not is_unit_not_found(exc)
        else:
            self.fail('APIError not raised')

    def test_single_request_not_json(self):
        """An error response that isn't fleet's JSON still becomes an APIError"""

        self.mock(HttpMockSequence([
            ({'status': '502'}, 'Bad Gateway')
        ]))

        try:
            self.client._single_request('Machines.List')
        except APIError as exc:
            assert exc.code == 502
            assert exc.message == 'Bad Gateway'
        else:
            self.fail('APIError not raised')

    def test_single_request_transport_error(self):
        """A refused connection causes TransportError to be raised"""

        http = mock.Mock()
        http.request.side_effect = ConnectionRefusedError()

        self.mock(http)

        try:
            self.client._single_request('Machines.List')
        except TransportError as exc:
            assert isinstance(exc.cause, ConnectionRefusedError)
        else:
            self.fail('TransportError not raised')

    def test_request_with_no_pagination(self):
        """A paging request with no second page works"""
        self.mock(HttpMock(
            fixture_path('machines_single_no_metadata.json'),
            {'status': '200'}
        ))

        output = list(self.client._request('Machines.List'))

        assert len(output) == 1

        assert 'machines' in output[0]

    def test_request_with_pagination(self):
        """Pagination works automatcally"""

        http = RecordingHttp([
            ({'status': '200'}, '{"machines":[{"id":"b4104f4b83fd48b2acc16a085b0ec2ce","primaryIP":"198.51.100.99"}],'
                                '"nextPageToken": "foo"}'),
            ({'status': '200'}, '{"machines":[{"id":"b4104f4b83fd48b2acc16a085b0ec2ce","primaryIP":"198.51.100.99"}]}')
        ])
        self.mock(http)

        output = list(self.client._request('Machines.List'))

        assert len(output) == 2

        assert 'machines' in output[0]
        assert 'machines' in output[1]

        assert 'nextPageToken=foo' in http.requests[1]['uri']

    def test_request_malformed(self):
        """A page that isn't an object is a TransportError"""
        self.mock(HttpMockSequence([
            ({'status': '200'}, '"not a page"')
        ]))

        def test():
            list(self.client._request('Machines.List'))

        self.assertRaises(TransportError, test)

    def test_create_unit(self):
        """Create a unit"""
        http = RecordingHttp([
            ({'status': '201'}, '{}'),
        ])
        self.mock(http)

        unit = Unit(from_file=fixture_path('test.service'), desired_state='loaded')

        assert self.client.create_unit('test.service', unit)

        request = http.requests[0]

        assert request['method'] == 'PUT'
        assert request['uri'].startswith('http://198.51.100.23:9160/fleet/v1/units/test.service')
        assert json.loads(request['body']) == {
            'desiredState': 'loaded',
            'options': [{'section': 'Service', 'name': 'ExecStart', 'value': '/usr/bin/sleep 1d'}]
        }

    def test_set_unit_desired_state_bad(self):
        """ValueError is raised when an invalid state is passed"""

        def test():
            self.client.set_unit_desired_state('test.service', 'invalid-state')

        self.assertRaises(ValueError, test)

    def test_set_unit_name_desired_state_good(self):
        """Unit Desired State can be updated by name"""

        http = RecordingHttp([
            ({'status': '204'}, None),
        ])
        self.mock(http)

        assert self.client.set_unit_desired_state('test.service', 'launched')

        request = http.requests[0]

        assert request['method'] == 'PUT'
        assert request['uri'].startswith('http://198.51.100.23:9160/fleet/v1/units/test.service')
        assert json.loads(request['body']) == {'desiredState': 'launched'}

    def test_set_unit_obj_desired_state_good(self):
        """Unit Desired State can be updated by object"""

        http = RecordingHttp([
            ({'status': '204'}, None),
        ])
        self.mock(http)

        unit = Unit(from_file=fixture_path('test.service'))
        unit._data['name'] = 'test.service'

        assert self.client.set_unit_desired_state(unit, 'inactive')

        assert '/units/test.service' in http.requests[0]['uri']

    def test_destroy_unit_name(self):
        """Destroy a unit by name"""
        http = RecordingHttp([
            ({'status': '204'}, None),
        ])
        self.mock(http)

        assert self.client.destroy_unit('test.service')

        assert http.requests[0]['method'] == 'DELETE'
        assert '/units/test.service' in http.requests[0]['uri']

    def test_destroy_unit_obj(self):
        """Destroy a unit by object"""

        self.mock(HttpMockSequence([
            ({'status': '204'}, None),
        ]))

        unit = Unit(from_file=fixture_path('test.service'))
        unit._data['name'] = 'test.service'

        assert self.client.destroy_unit(unit)

    def test_list_units(self):
        """List units"""
        self.mock(HttpMockSequence([
            ({'status': '200'}, '{"units":[{"currentState":"launched","desiredState":"launched","machineID":'
                                '"b4104f4b83fd48b2acc16a085b0ec2ce","name":"foo.service","options":'
                                '[{"name":"ExecStart","section":"Service","value":"/usr/bin/sleep 1d"}]}], '
                                '"nextPageToken": "foo"}'),
            ({'status': '200'}, '{"units":[{"currentState":"launched","desiredState":"launched","machineID":'
                                '"b4104f4b83fd48b2acc16a085b0ec2ce","name":"bar.service","options":'
                                '[{"name":"ExecStart","section":"Service","value":"/usr/bin/sleep 1d"}]}]}')
        ]))

        units = list(self.client.list_units())

        assert len(units) == 2

        assert units[0].name == 'foo.service'
        assert units[1].name == 'bar.service'

        assert units[1].machineID == 'b4104f4b83fd48b2acc16a085b0ec2ce'

    def test_list_units_empty(self):
        """fleet leaves out the units key when there are none"""
        self.mock(HttpMockSequence([
            ({'status': '200'}, '{}'),
        ]))

        assert list(self.client.list_units()) == []

    def test_get_unit(self):
        """Get an individual unit"""
        self.mock(HttpMockSequence([
            ({'status': '200'}, '{"currentState":"launched","desiredState":"launched","machineID":'
                                '"b4104f4b83fd48b2acc16a085b0ec2ce","name":"test.service","options":'
                                '[{"name":"ExecStart","section":"Service","value":"/usr/bin/sleep 1d"}]}')
        ]))

        unit = self.client.get_unit('test.service')

        assert 'name' in unit
        assert unit.currentState == 'launched'

    def test_list_unit_states(self):
        """List unit states"""
        self.mock(HttpMockSequence([
            ({'status': '200'}, '{"states":[{"hash":"dd401fa78c2de99a9c4045cbb4b285679067acf6","machineID":'
                                '"b4104f4b83fd48b2acc16a085b0ec2ce","name":"foo.service","systemdActiveState":'
                                '"active","systemdLoadState":"loaded","systemdSubState":"running"}], "nextPageToken":'
                                '"foo"}'),
            ({'status': '200'}, '{"states":[{"hash":"dd401fa78c2de99a9c4045cbb4b285679067acf6","machineID":'
                                '"b4104f4b83fd48b2acc16a085b0ec2ce","name":"foo.service","systemdActiveState":'
                                '"active","systemdLoadState":"loaded","systemdSubState":"running"}]}')
        ]))

        unitstates = list(self.client.list_unit_states())

        assert len(unitstates) == 2

        assert 'hash' in unitstates[0]
        assert 'hash' in unitstates[1]

    def test_list_unit_states_filtered(self):
        """Filters are passed to fleet as query parameters"""
        http = RecordingHttp([
            ({'status': '200'}, '{"states":[]}'),
        ])
        self.mock(http)

        assert list(self.client.list_unit_states(unit_name='foo.service')) == []

        assert 'unitName=foo.service' in http.requests[0]['uri']
        assert 'machineID' not in http.requests[0]['uri']

    def test_list_machines(self):
        """List Machines"""
        self.mock(HttpMock(
            fixture_path('machines_single_no_metadata.json'),
            {'status': '200'}
        ))

        machines = list(self.client.list_machines())

        assert len(machines) == 1

        assert 'id' in machines[0]
        assert machines[0].metadata == {}
