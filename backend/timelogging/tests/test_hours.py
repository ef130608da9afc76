"""
Test hour parsing and the single-cell input model.
"""
from datetime import date
from decimal import Decimal

from django.test import SimpleTestCase

from timelogging.hours import (
    HourCell, filter_keystroke, normalize_hours, parse_hours, quantize_hours,
)
from timelogging.weeks import api_field, day_date, model_field, parse_week_start, week_key, week_start_for


class KeystrokeFilterTestCase(SimpleTestCase):

    def test_accepts_partial_decimals(self):
        for text in ('', '7', '7.', '.5', '07.25'):
            self.assertEqual(filter_keystroke('', text), text)

    def test_rejects_invalid_input(self):
        for text in ('7.5.', 'a', '-1', '1e3', '7,5', ' 7'):
            self.assertEqual(filter_keystroke('7', text), '7')


class NormalizeHoursTestCase(SimpleTestCase):

    def test_normalization(self):
        cases = {
            '': '0.00',
            '7': '7.00',
            '7.5': '7.50',
            '.25': '0.25',
            '30': '24.00',
            '-3': '0.00',
            'abc': '0.00',
            'NaN': '0.00',
            'Infinity': '0.00',
            '8.005': '8.01',
            None: '0.00',
        }
        for raw, expected in cases.items():
            with self.subTest(raw=raw):
                self.assertEqual(normalize_hours(raw), expected)

    def test_parse_is_lenient(self):
        self.assertEqual(parse_hours(' 4.5 '), Decimal('4.5'))
        self.assertEqual(parse_hours('x'), Decimal('0'))
        self.assertEqual(quantize_hours(Decimal('25')), Decimal('24.00'))


class HourCellTestCase(SimpleTestCase):

    def setUp(self):
        self.changes = []
        self.cell = HourCell(3, 'monday', on_change=lambda cell, old, new: self.changes.append((old, new)))

    def test_key(self):
        self.assertEqual(self.cell.key, '3-monday')

    def test_type_then_commit(self):
        self.cell.type('7')
        self.cell.type('7.')
        self.cell.type('7.x')
        self.assertEqual(self.cell.text, '7.')
        self.assertEqual(self.cell.value, '0.00')
        self.assertEqual(self.cell.commit(), '7.00')
        self.assertEqual(self.changes, [('0.00', '7.00')])

    def test_commit_without_change_is_silent(self):
        self.cell.type('0')
        self.cell.commit()
        self.assertEqual(self.changes, [])

    def test_commit_clamps(self):
        self.cell.type('99')
        self.assertEqual(self.cell.commit(), '24.00')

    def test_step_stays_in_bounds(self):
        self.assertEqual(self.cell.step(-1), '0.00')
        self.assertEqual(self.cell.step(1), '0.50')
        self.cell.preset(Decimal('24'))
        self.assertEqual(self.cell.step(1), '24.00')

    def test_presets(self):
        self.assertEqual(self.cell.preset(8), '8.00')
        self.assertEqual(self.cell.preset(4), '4.00')
        self.assertEqual(self.changes, [('0.00', '8.00'), ('8.00', '4.00')])

    def test_reset_does_not_notify(self):
        self.cell.reset('5')
        self.assertEqual(self.cell.value, '5.00')
        self.assertEqual(self.changes, [])

    def test_disabled_cell_ignores_edits(self):
        self.cell.reset('5')
        self.cell.disabled = True
        self.cell.type('9')
        self.assertEqual(self.cell.text, '5.00')
        self.assertEqual(self.cell.commit(), '5.00')
        self.assertEqual(self.cell.step(1), '5.00')
        self.assertEqual(self.cell.preset(8), '5.00')
        self.assertEqual(self.changes, [])


class WeekHelpersTestCase(SimpleTestCase):

    def test_parse_week_start(self):
        self.assertEqual(parse_week_start('2025-06-02'), date(2025, 6, 2))
        self.assertEqual(parse_week_start(date(2025, 6, 2)), date(2025, 6, 2))

    def test_parse_week_start_rejects(self):
        for value in ('2025-06-03', '02/06/2025', 'soon', ''):
            with self.subTest(value=value), self.assertRaises(ValueError):
                parse_week_start(value)

    def test_week_start_for(self):
        self.assertEqual(week_start_for(date(2025, 6, 8)), date(2025, 6, 2))
        self.assertEqual(week_key(date(2025, 6, 2)), '2025-06-02')
        self.assertEqual(day_date(date(2025, 6, 2), 'sunday'), date(2025, 6, 8))

    def test_field_names(self):
        self.assertEqual(api_field('monday'), 'mondayHours')
        self.assertEqual(model_field('sunday'), 'sunday_hours')
