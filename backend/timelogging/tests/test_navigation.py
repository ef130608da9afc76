"""
Test the unsaved-changes navigation guard.
"""
from datetime import date

from django.test import SimpleTestCase

from timelogging.ledger import PendingChangeLedger
from timelogging.navigation import NavigationGuard, Router
from timelogging.tests.helpers import FakeStore


class NavigationGuardTestCase(SimpleTestCase):

    def setUp(self):
        self.store = FakeStore()
        self.ledger = PendingChangeLedger(self.store, 7, date(2025, 6, 2))
        self.ledger.load([], allocation_ids=[1])
        self.router = Router(location='/time-logging')
        self.guard = NavigationGuard(self.ledger, self.router)

    async def test_clean_ledger_navigates(self):
        self.assertTrue(await self.guard.navigate('/projects'))
        self.assertEqual(self.router.location, '/projects')
        self.assertEqual(self.router.back(), '/time-logging')

    async def test_unsaved_changes_block(self):
        self.ledger.record_edit(1, 'monday', '3')
        self.assertFalse(await self.guard.navigate('/projects'))
        self.assertTrue(self.guard.is_blocked)
        self.assertEqual(self.guard.prompt.pending_count, 1)
        self.assertEqual(self.router.location, '/time-logging')

    async def test_cancel(self):
        self.ledger.record_edit(1, 'monday', '3')
        await self.guard.navigate('/projects')
        self.guard.cancel()
        self.assertFalse(self.guard.is_blocked)
        self.assertTrue(self.ledger.has_unsaved_changes)
        self.assertEqual(self.router.location, '/time-logging')

    async def test_save_and_continue(self):
        self.ledger.record_edit(1, 'monday', '3')
        await self.guard.navigate('/projects')
        self.assertTrue(await self.guard.save_and_continue())
        self.assertEqual(self.router.location, '/projects')
        self.assertEqual(len(self.store.entries), 1)
        self.assertFalse(self.ledger.accepting_edits)

    async def test_failed_save_keeps_prompt(self):
        self.store.fail.add(1)
        self.ledger.record_edit(1, 'monday', '3')
        await self.guard.navigate('/projects')
        self.assertFalse(await self.guard.save_and_continue())
        self.assertTrue(self.guard.is_blocked)
        self.assertIn('failed to save', self.guard.prompt.error)
        self.assertEqual(self.router.location, '/time-logging')

    async def test_discard_and_continue(self):
        self.ledger.record_edit(1, 'monday', '3')
        await self.guard.navigate('/projects')
        self.assertTrue(await self.guard.discard_and_continue())
        self.assertFalse(self.ledger.has_unsaved_changes)
        self.assertEqual(self.router.location, '/projects')
        self.assertEqual(self.store.entries, {})
