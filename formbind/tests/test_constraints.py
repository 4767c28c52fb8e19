# Copyright (c) 2026 NASK. All rights reserved.

import datetime
import unittest
from decimal import Decimal
from unittest.mock import patch

from unittest_expander import (
    expand,
    foreach,
    param,
)

from formbind.constraints import (
    Check,
    ConstraintValidator,
    DecimalMax,
    DecimalMin,
    Future,
    Max,
    Min,
    NotBlank,
    NotEmpty,
    NotNull,
    OneOf,
    Past,
    Pattern,
    Size,
    Violation,
)
from formbind.exceptions import BindingConfigError
from formbind.tests._generic_helpers import (
    DE_DE,
    EN_US,
)


@expand
class TestConstraints_is_valid(unittest.TestCase):

    @foreach(
        param(Min(18), 18, expected=True),
        param(Min(18), 17, expected=False),
        param(Min(0.5), 0.25, expected=False),
        param(Max(130), 130, expected=True),
        param(Max(130), 131, expected=False),
        param(DecimalMin('0.01'), Decimal('0.01'), expected=True),
        param(DecimalMin('0.01', inclusive=False), Decimal('0.01'), expected=False),
        param(DecimalMin('0.1'), 0.1, expected=True),
        param(DecimalMax('99.99'), Decimal('100'), expected=False),
        param(DecimalMax('100', inclusive=False), 100, expected=False),
        param(DecimalMax('100', inclusive=False), Decimal('99.999'), expected=True),
        param(Size(min=2, max=3), 'ab', expected=True),
        param(Size(min=2, max=3), 'abcd', expected=False),
        param(Size(min=1), [], expected=False),
        param(Pattern(r'[a-z]+'), 'abc', expected=True),
        param(Pattern(r'[a-z]+'), 'abc1', expected=False),
        param(OneOf(['PLN', 'EUR']), 'EUR', expected=True),
        param(OneOf(['PLN', 'EUR']), 'USD', expected=False),
        param(NotEmpty(), '', expected=False),
        param(NotEmpty(), [0], expected=True),
        param(NotBlank(), ' \t', expected=False),
        param(NotBlank(), ' x ', expected=True),
        param(NotNull(), 0, expected=True),
        param(Check(lambda n: n % 2 == 0), 4, expected=True),
        param(Check(lambda n: n % 2 == 0), 5, expected=False),
    )
    def test(self, constraint, value, expected):
        self.assertIs(constraint.is_valid(value), expected)


@expand
class TestConstraints_none_handling(unittest.TestCase):

    @foreach(
        param(Min(1)),
        param(Max(1)),
        param(DecimalMin('1')),
        param(DecimalMax('1')),
        param(Size(min=1)),
        param(Pattern('x')),
        param(OneOf(['x'])),
        param(Past()),
        param(Future()),
        param(Check(lambda value: False)),
    )
    def test_none_is_valid(self, constraint):
        self.assertEqual(list(constraint.iter_violations(None)), [])

    @foreach(
        param(NotNull(), expected_message='A value is required.'),
        param(NotEmpty(), expected_message='Must not be empty.'),
        param(NotBlank(), expected_message='Must not be blank.'),
    )
    def test_none_is_not_valid(self, constraint, expected_message):
        [violation] = constraint.iter_violations(None)
        self.assertIs(violation.constraint, constraint)
        self.assertEqual(violation.message, expected_message)
        self.assertIsNone(violation.invalid_value)


class TestConstraints_messages(unittest.TestCase):

    def test_default_messages(self):
        self.assertEqual(Min(18).format_message(16), 'Must be greater than or equal to 18.')
        self.assertEqual(Max(5).format_message(6), 'Must be less than or equal to 5.')
        self.assertEqual(DecimalMin('0', inclusive=False).format_message(0),
                         'Must be greater than 0.')
        self.assertEqual(DecimalMax('1.5', inclusive=False).format_message(2),
                         'Must be less than 1.5.')
        self.assertEqual(Size(min=1, max=3).format_message('abcd'),
                         'Size must be between 1 and 3.')
        self.assertEqual(Size(min=2).format_message('a'),
                         'Size must be at least 2.')
        self.assertEqual(Pattern('[0-9]+').format_message('x'),
                         'Must match "[0-9]+".')
        self.assertEqual(OneOf(['PLN', 'EUR']).format_message('USD'),
                         'Must be one of: "PLN", "EUR".')

    def test_numbers_formatted_for_locale(self):
        constraint = DecimalMin('1234.5')
        self.assertEqual(constraint.format_message(1, locale=EN_US),
                         'Must be greater than or equal to 1,234.5.')
        self.assertEqual(constraint.format_message(1, locale=DE_DE),
                         'Must be greater than or equal to 1.234,5.')

    def test_custom_message_and_name(self):
        constraint = Min(18, message='You must be at least {min} (got {value}).',
                         name='Adult')
        [violation] = constraint.iter_violations(16)
        self.assertEqual(violation.message, 'You must be at least 18 (got 16).')
        self.assertEqual(violation.constraint_name, 'Adult')

    def test_default_name(self):
        [violation] = Max(1).iter_violations(2)
        self.assertEqual(violation.constraint_name, 'Max')

    def test_check_message(self):
        constraint = Check(lambda value: False, message='Value {value} rejected.')
        [violation] = constraint.iter_violations('ł')
        self.assertEqual(violation.message, 'Value \\u0142 rejected.')


class TestConstraints_collections(unittest.TestCase):

    def test_scalar_constraint_checks_each_item(self):
        violations = list(Min(18).iter_violations([20, 3, 18, 1]))
        self.assertEqual([v.invalid_value for v in violations], [3, 1])

    def test_none_items_are_skipped(self):
        self.assertEqual(list(Min(18).iter_violations([None, 20])), [])

    def test_size_applies_to_the_whole_collection(self):
        [violation] = Size(max=2).iter_violations([1, 2, 3])
        self.assertEqual(violation.invalid_value, [1, 2, 3])

    def test_not_empty_applies_to_the_whole_collection(self):
        [violation] = NotEmpty().iter_violations(())
        self.assertEqual(violation.invalid_value, ())
        self.assertEqual(list(NotEmpty().iter_violations(('',))), [])

    def test_not_blank_checks_each_item(self):
        violations = list(NotBlank().iter_violations(['a', ' ', '']))
        self.assertEqual([v.invalid_value for v in violations], [' ', ''])


class TestPastAndFuture(unittest.TestCase):

    TODAY = datetime.date(2026, 10, 19)

    def test_past(self):
        with patch.object(Past, 'today', return_value=self.TODAY):
            self.assertTrue(Past().is_valid(datetime.date(2026, 10, 18)))
            self.assertFalse(Past().is_valid(self.TODAY))

    def test_future(self):
        with patch.object(Past, 'today', return_value=self.TODAY):
            self.assertTrue(Future().is_valid(datetime.date(2026, 10, 20)))
            self.assertFalse(Future().is_valid(self.TODAY))


class TestSizeBounds(unittest.TestCase):

    def test_illegal_bounds(self):
        with self.assertRaises(BindingConfigError):
            Size(min=-1)
        with self.assertRaises(BindingConfigError):
            Size(min=3, max=2)


class TestConstraintValidator(unittest.TestCase):

    def setUp(self):
        self.validator = ConstraintValidator()

    def test_valid(self):
        self.assertEqual(self.validator.validate(20, [Min(18), Max(130)]), [])

    def test_no_constraints(self):
        self.assertEqual(self.validator.validate(-1, []), [])

    def test_declaration_order(self):
        constraints = [
            Check(lambda value: False, message='First.'),
            Max(5),
            Check(lambda value: False, message='Third.'),
        ]
        violations = self.validator.validate(10, constraints)
        self.assertEqual([v.message for v in violations], [
            'First.',
            'Must be less than or equal to 5.',
            'Third.',
        ])
        self.assertTrue(all(isinstance(v, Violation) for v in violations))
        self.assertEqual([v.constraint for v in violations], constraints)

    def test_locale_is_used_in_messages(self):
        [violation] = self.validator.validate(
            Decimal('0.1'), [DecimalMin('0.5')], locale=DE_DE)
        self.assertEqual(violation.message, 'Must be greater than or equal to 0,5.')
        self.assertEqual(violation.invalid_value, Decimal('0.1'))

    def test_validator_is_stateless(self):
        first = self.validator.validate(1, [Min(2)])
        second = self.validator.validate(1, [Min(2)])
        self.assertEqual(len(first), 1)
        self.assertEqual(len(second), 1)
        self.assertEqual(self.validator.validate(3, [Min(2)]), [])
