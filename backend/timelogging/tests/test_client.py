"""
Test the async API client against an httpx mock transport.
"""
import json
from datetime import date

import httpx
from django.test import SimpleTestCase

from timelogging.client import TimeLoggingAPIError, TimeLoggingClient


class TimeLoggingClientTestCase(SimpleTestCase):

    def setUp(self):
        self.requests = []
        self.responses = {}

    def _handler(self, request):
        self.requests.append(request)
        key = (request.method, request.url.path)
        status_code, body = self.responses.get(key, (404, {"detail": "Not found."}))
        return httpx.Response(status_code, json=body)

    def _client(self, token='abc'):
        return TimeLoggingClient(
            'http://testserver/api', token, transport=httpx.MockTransport(self._handler),
        )

    async def test_get_week_entries(self):
        self.responses[('GET', '/api/resources/7/time-entries/week/2025-06-02')] = (200, [{'id': 1}])
        async with self._client() as client:
            entries = await client.get_week_entries(7, date(2025, 6, 2))
        self.assertEqual(entries, [{'id': 1}])
        self.assertEqual(self.requests[0].headers['Authorization'], 'Bearer abc')

    async def test_allocation_status_filter(self):
        self.responses[('GET', '/api/resources/7/allocations')] = (200, [])
        async with self._client() as client:
            await client.get_allocations(7, status='active')
        self.assertEqual(self.requests[0].url.params['status'], 'active')

    async def test_create_posts_payload(self):
        self.responses[('POST', '/api/time-entries')] = (201, {'id': 5})
        async with self._client() as client:
            result = await client.create_time_entry({'allocationId': 2, 'mondayHours': '8.00'})
        self.assertEqual(result, {'id': 5})
        self.assertEqual(json.loads(self.requests[0].content)['mondayHours'], '8.00')

    async def test_missing_submission_is_none(self):
        async with self._client() as client:
            self.assertIsNone(await client.get_weekly_submission(7, '2025-06-02'))

    async def test_blocked_submit_exposes_violated_days(self):
        self.responses[('POST', '/api/time-logging/submit/7/2025-06-02')] = (
            400, {'detail': 'You have 1 day (Tuesday) with >8h logged.', 'violatedDays': ['Tuesday']},
        )
        async with self._client() as client:
            with self.assertRaises(TimeLoggingAPIError) as ctx:
                await client.submit_week(7, date(2025, 6, 2))
        self.assertEqual(ctx.exception.status_code, 400)
        self.assertEqual(ctx.exception.violated_days, ['Tuesday'])
        self.assertIn('Tuesday', str(ctx.exception))

    async def test_transport_error(self):
        def broken(request):
            raise httpx.ConnectError('refused', request=request)

        client = TimeLoggingClient('http://testserver/api', transport=httpx.MockTransport(broken))
        async with client:
            with self.assertRaises(TimeLoggingAPIError) as ctx:
                await client.get_time_entry(1)
        self.assertIsNone(ctx.exception.status_code)

    async def test_login_stores_token(self):
        self.responses[('POST', '/api/accounts/login/')] = (
            200, {'user': {'id': 1}, 'tokens': {'access': 'new-token', 'refresh': 'r'}},
        )
        async with self._client(token=None) as client:
            await client.login('ana', 'secret')
            self.assertEqual(client.token, 'new-token')
        self.assertNotIn('Authorization', self.requests[0].headers)

    async def test_overview_params(self):
        self.responses[('GET', '/api/time-logging/submission-overview')] = (200, [])
        async with self._client() as client:
            await client.submission_overview(date(2025, 6, 2), department='Engineering')
        params = self.requests[0].url.params
        self.assertEqual(params['week'], '2025-06-02')
        self.assertEqual(params['department'], 'Engineering')
