"""
Test daily, submission and allocation checks.
"""
import itertools
from datetime import date
from decimal import Decimal

from django.test import SimpleTestCase

from timelogging.entries import AllocationRef, WeekEntry
from timelogging.validation import (
    AllocationState, Severity,
    allocation_warnings, compute_allocation_status, compute_daily_validation,
    compute_submission_validation, daily_total, daily_totals, violated_cell_keys, weekly_summary,
)


def entry(allocation_id, **hours):
    e = WeekEntry(allocation_id=allocation_id)
    for day, value in hours.items():
        e.set_hours(day, value)
    return e


class DailyValidationTestCase(SimpleTestCase):

    def test_within_cap(self):
        result = compute_daily_validation('monday', 1, '6', [entry(1, monday=2), entry(2, monday=1)])
        self.assertEqual(result.total_hours, Decimal('7'))
        self.assertEqual(result.remaining_hours, Decimal('1'))
        self.assertIs(result.severity, Severity.NONE)
        self.assertEqual(result.warning_message, '')
        self.assertTrue(result.is_valid)

    def test_candidate_replaces_own_value(self):
        entries = [entry(1, monday=8), entry(2, monday=2)]
        result = compute_daily_validation('monday', 1, '1', entries)
        self.assertEqual(result.total_hours, Decimal('3'))

    def test_candidate_for_row_without_entry(self):
        result = compute_daily_validation('monday', 9, '3', [entry(1, monday=4)])
        self.assertEqual(result.total_hours, Decimal('7'))

    def test_two_allocations_five_hours_each(self):
        entries = [entry(1, monday=5), entry(2, monday=5)]
        result = compute_daily_validation('monday', 1, '5', entries)
        self.assertEqual(result.total_hours, Decimal('10'))
        self.assertEqual(result.remaining_hours, Decimal('0'))
        self.assertIs(result.severity, Severity.MODERATE)
        self.assertIn('+2.0h', result.warning_message)
        self.assertTrue(result.is_valid)

    def test_severe_above_ten(self):
        result = compute_daily_validation('monday', 1, '5.5', [entry(1), entry(2, monday=5)])
        self.assertIs(result.severity, Severity.SEVERE)
        self.assertEqual(result.warning_message, '10.5h significantly exceeds daily cap of 8h (+2.5h)')

    def test_blank_candidate_counts_as_zero(self):
        self.assertEqual(daily_total('monday', [entry(1, monday=8)], substitute=(1, '')), Decimal('0'))


class SubmissionValidationTestCase(SimpleTestCase):

    def test_single_violation(self):
        result = compute_submission_validation([entry(1, monday=5, tuesday=9)])
        self.assertFalse(result.can_submit)
        self.assertEqual(result.violated_days, ['Tuesday'])
        self.assertIn('1 day (Tuesday)', result.error_message)

    def test_multiple_violations_across_allocations(self):
        entries = [entry(1, monday=6, friday=4), entry(2, monday=3, friday=4.5)]
        result = compute_submission_validation(entries)
        self.assertEqual(result.violated_days, ['Monday', 'Friday'])
        self.assertEqual(
            result.error_message,
            'You have 2 days with >8h logged (Monday, Friday). Please correct before submitting.',
        )
        self.assertEqual(result.violation_count, 2)

    def test_exactly_eight_is_allowed(self):
        result = compute_submission_validation([entry(1, monday=4), entry(2, monday=4)])
        self.assertTrue(result.can_submit)
        self.assertEqual(result.error_message, '')

    def test_just_over_cap_blocks(self):
        result = compute_submission_validation([entry(1, monday=4), entry(2, monday='4.01')])
        self.assertFalse(result.can_submit)
        self.assertEqual(result.violated_days, ['Monday'])

    def test_entry_order_does_not_matter(self):
        entries = [entry(1, monday=6, friday=4), entry(2, monday=3, tuesday=8), entry(3, friday='4.5')]
        expected_totals = daily_totals(entries)
        expected = compute_submission_validation(entries)
        for ordering in itertools.permutations(entries):
            self.assertEqual(daily_totals(ordering), expected_totals)
            self.assertEqual(compute_submission_validation(ordering), expected)
        self.assertEqual(expected.violated_days, ['Monday', 'Friday'])

    def test_empty_week(self):
        self.assertTrue(compute_submission_validation([]).can_submit)

    def test_violated_cell_keys_order(self):
        entries = [entry(1, monday=6, tuesday=9), entry(2, monday=3)]
        validation = compute_submission_validation(entries)
        self.assertEqual(violated_cell_keys(validation, entries), ['1-monday', '2-monday', '1-tuesday'])


class AllocationStatusTestCase(SimpleTestCase):

    def test_exceeded(self):
        e = entry(1, monday=8, tuesday=8, wednesday=8, thursday=2)
        result = compute_allocation_status(1, Decimal('20'), [e, entry(2, monday=8)])
        self.assertEqual(result.weekly_hours, Decimal('26'))
        self.assertEqual(result.percentage, Decimal('130'))
        self.assertIs(result.status, AllocationState.EXCEEDED)
        self.assertEqual(result.message, 'Significantly over allocation: 26.0 / 20.0 hours (130%)')

    def test_thresholds(self):
        cases = [('16', AllocationState.WITHIN), ('18', AllocationState.MODERATE),
                 ('20', AllocationState.MODERATE), ('20.5', AllocationState.EXCEEDED)]
        for hours, expected in cases:
            with self.subTest(hours=hours):
                result = compute_allocation_status(1, '16', [entry(1, monday=hours)])
                self.assertIs(result.status, expected)

    def test_zero_allocation(self):
        result = compute_allocation_status(1, 0, [entry(1, monday=4)])
        self.assertEqual(result.percentage, Decimal('0'))
        self.assertIs(result.status, AllocationState.WITHIN)

    def test_warning_banner(self):
        allocations = [
            AllocationRef(1, Decimal('10'), 'Atlas'),
            AllocationRef(2, Decimal('10'), 'Borealis'),
        ]
        entries = [entry(1, monday=8, tuesday=5), entry(2, monday=5)]
        self.assertEqual(allocation_warnings(allocations, entries), ['Atlas: 13.0h logged (10.0h allocated)'])

    def test_weekly_summary(self):
        allocations = [AllocationRef(1, Decimal('20'), 'Atlas'), AllocationRef(2, Decimal('10'), 'Borealis')]
        summary = weekly_summary([entry(1, monday=8), entry(2, tuesday=2)], allocations)
        self.assertEqual(summary['total_hours'], Decimal('10'))
        self.assertEqual(summary['expected_hours'], Decimal('30'))
        self.assertEqual(summary['by_project'], {'Atlas': Decimal('8'), 'Borealis': Decimal('2')})
        self.assertEqual(summary['by_day']['tuesday'], Decimal('2'))


class WeekEntryPayloadTestCase(SimpleTestCase):

    def test_from_payload(self):
        e = WeekEntry.from_payload({
            'id': 4,
            'mondayHours': '7.5',
            'tuesdayHours': None,
            'notes': None,
            'allocation': {'id': 2, 'project': {'name': 'Atlas'}},
        })
        self.assertEqual(e.allocation_id, 2)
        self.assertEqual(e.hours_for('monday'), Decimal('7.50'))
        self.assertEqual(e.hours_for('tuesday'), Decimal('0.00'))
        self.assertEqual(e.project_name, 'Atlas')
        self.assertEqual(e.notes, '')

    def test_to_payload(self):
        payload = entry(2, friday=4).to_payload(7, date(2025, 6, 2))
        self.assertEqual(payload['weekStartDate'], '2025-06-02')
        self.assertEqual(payload['fridayHours'], '4.00')
        self.assertEqual(payload['sundayHours'], '0.00')
        self.assertEqual(payload['resourceId'], 7)


class AllocationRefTestCase(SimpleTestCase):

    def test_from_payload_dates(self):
        ref = AllocationRef.from_payload({
            'id': 3, 'allocatedHours': '12.5', 'status': 'active',
            'startDate': '2025-05-01', 'endDate': None, 'project': {'name': 'Atlas'},
        })
        self.assertEqual(ref.start_date, date(2025, 5, 1))
        self.assertIsNone(ref.end_date)
        self.assertEqual(ref.allocated_hours, Decimal('12.5'))

    def test_overlaps_week(self):
        week = date(2025, 6, 2)
        self.assertTrue(AllocationRef(1, Decimal('10')).overlaps(week))
        self.assertTrue(AllocationRef(1, Decimal('10'), start_date=date(2025, 6, 8)).overlaps(week))
        self.assertTrue(AllocationRef(1, Decimal('10'), end_date=date(2025, 6, 2)).overlaps(week))
        self.assertFalse(AllocationRef(1, Decimal('10'), start_date=date(2025, 6, 9)).overlaps(week))
        self.assertFalse(AllocationRef(1, Decimal('10'), end_date=date(2025, 6, 1)).overlaps(week))
