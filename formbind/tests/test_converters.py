# Copyright (c) 2026 NASK. All rights reserved.

import datetime
import sys
import typing
import unittest
from decimal import Decimal

from unittest_expander import (
    expand,
    foreach,
    param,
    paramseq,
)

from formbind.converters import (
    BooleanConverter,
    Converter,
    DateConverter,
    DecimalConverter,
    FloatConverter,
    IntegerConverter,
    TargetTypeInfo,
    TextConverter,
    analyze_target_type,
    default_converter_registry,
    ConverterRegistry,
)
from formbind.exceptions import (
    BindingConfigError,
    ConverterNotFoundError,
    FieldValueError,
)
from formbind.tests._generic_helpers import (
    DE_DE,
    EN_US,
    FR_FR,
    PL_PL,
    TestCaseMixin,
)



#
# Target type analysis

@expand
class Test_analyze_target_type(unittest.TestCase):

    @foreach(
        param(int, expected=TargetTypeInfo(int, False, None)),
        param(Decimal, expected=TargetTypeInfo(Decimal, False, None)),
        param(typing.Optional[int], expected=TargetTypeInfo(int, True, None)),
        param(typing.Union[None, bool], expected=TargetTypeInfo(bool, True, None)),
        param(typing.List[int], expected=TargetTypeInfo(int, False, list)),
        param(list[float], expected=TargetTypeInfo(float, False, list)),
        param(tuple[str, ...], expected=TargetTypeInfo(str, False, tuple)),
        param(typing.Sequence[typing.Optional[bool]],
              expected=TargetTypeInfo(bool, True, list)),
    )
    def test_supported(self, target_type, expected):
        result = analyze_target_type(target_type)
        self.assertEqual(result, expected)
        self.assertEqual(result.multi, expected.collection is not None)

    @unittest.skipIf(sys.version_info < (3, 10), 'X | None syntax needs Python 3.10+')
    def test_pipe_union(self):
        target_type = eval('int | None')
        self.assertEqual(analyze_target_type(target_type),
                         TargetTypeInfo(int, True, None))

    @foreach(
        param(typing.Union[int, str]),
        param(typing.Union[int, str, None]),
        param(tuple[int, str]),
        param(typing.List),
        param(typing.Dict[str, int]),
        param(typing.Optional[typing.List[int]]),
        param('int'),
        param(42),
    )
    def test_unsupported(self, target_type):
        with self.assertRaises(BindingConfigError):
            analyze_target_type(target_type)



#
# Concrete converters

@expand
class TestNumberConverters(TestCaseMixin, unittest.TestCase):

    @paramseq
    def valid_cases(cls):
        # en_US
        yield param(IntegerConverter, EN_US, '16', expected=16)
        yield param(IntegerConverter, EN_US, '1,234', expected=1234)
        yield param(IntegerConverter, EN_US, '1,234,567', expected=1234567)
        yield param(IntegerConverter, EN_US, '-5', expected=-5)
        yield param(IntegerConverter, EN_US, '+7', expected=7)
        yield param(IntegerConverter, EN_US, '  42 ', expected=42)
        yield param(IntegerConverter, EN_US, '16.0', expected=16)
        yield param(IntegerConverter, EN_US, '123456789012345678901234567890',
                    expected=123456789012345678901234567890)
        yield param(FloatConverter, EN_US, '3.25', expected=3.25)
        yield param(FloatConverter, EN_US, '1,234.5', expected=1234.5)
        yield param(FloatConverter, EN_US, '-0.5', expected=-0.5)
        yield param(FloatConverter, EN_US, '.5', expected=0.5)
        yield param(DecimalConverter, EN_US, '19.99', expected=Decimal('19.99'))
        yield param(DecimalConverter, EN_US, '-1,000.01', expected=Decimal('-1000.01'))
        # de_DE
        yield param(IntegerConverter, DE_DE, '1.234', expected=1234)
        yield param(FloatConverter, DE_DE, '3,25', expected=3.25)
        yield param(FloatConverter, DE_DE, '1.234,5', expected=1234.5)
        yield param(DecimalConverter, DE_DE, '19,99', expected=Decimal('19.99'))
        yield param(DecimalConverter, DE_DE, '-0,001', expected=Decimal('-0.001'))
        # pl_PL and fr_FR (no-break-space grouping separators)
        yield param(IntegerConverter, PL_PL, '12\xa0345', expected=12345)
        yield param(IntegerConverter, PL_PL, '12 345', expected=12345)
        yield param(DecimalConverter, PL_PL, '-1 234 567,5', expected=Decimal('-1234567.5'))
        yield param(IntegerConverter, FR_FR, '12 345', expected=12345)
        yield param(FloatConverter, FR_FR, '12 345,25', expected=12345.25)

    @paramseq
    def invalid_cases(cls):
        # not numbers at all
        yield param(IntegerConverter, EN_US, 'foobar')
        yield param(IntegerConverter, EN_US, '12abc')
        yield param(IntegerConverter, EN_US, '12 34')
        yield param(IntegerConverter, EN_US, '--5')
        yield param(IntegerConverter, EN_US, '-')
        yield param(FloatConverter, EN_US, '1e5')
        yield param(FloatConverter, EN_US, 'NaN')
        yield param(FloatConverter, EN_US, 'inf')
        yield param(FloatConverter, EN_US, '1' + '0' * 400)
        yield param(FloatConverter, EN_US, '-1' + '0' * 400)
        yield param(FloatConverter, DE_DE, '1' + '0' * 309 + ',5')
        yield param(DecimalConverter, EN_US, '1.2.3')
        yield param(DecimalConverter, EN_US, '0x1F')
        # improperly placed grouping separators
        yield param(IntegerConverter, EN_US, '1,23')
        yield param(IntegerConverter, EN_US, ',123')
        yield param(IntegerConverter, DE_DE, '12.34')
        yield param(IntegerConverter, PL_PL, '12 34')
        yield param(IntegerConverter, PL_PL, '12,345 678')
        # valid only according to the rules of another locale
        yield param(DecimalConverter, EN_US, '19,99')
        yield param(FloatConverter, DE_DE, '3.25')
        yield param(FloatConverter, EN_US, '1.234,5')
        # not integral
        yield param(IntegerConverter, EN_US, '16.5')
        yield param(IntegerConverter, DE_DE, '16,5')

    @foreach(valid_cases)
    def test_valid(self, converter_class, locale, raw_value, expected):
        converter = converter_class()
        value = converter.bind_value(raw_value, locale)
        self.assertEqualIncludingTypes(value, expected)

    @foreach(valid_cases)
    def test_valid_nullable_form_gives_the_same(self, converter_class, locale, raw_value,
                                                expected):
        converter = converter_class()
        value = converter.bind_value(raw_value, locale, nullable=True)
        self.assertEqualIncludingTypes(value, expected)

    @foreach(invalid_cases)
    def test_invalid(self, converter_class, locale, raw_value):
        converter = converter_class()
        with self.assertRaises(FieldValueError) as cm:
            converter.bind_value(raw_value, locale)
        self.assertIn(raw_value.strip(), cm.exception.public_message)

    def test_invalid_number_message(self):
        with self.assertRaises(FieldValueError) as cm:
            IntegerConverter().bind_value('foobar', EN_US)
        self.assertEqual(
            cm.exception.public_message,
            '"foobar" is not a valid number (according to the '
            'number format of the "en_US" locale).')

    def test_not_integral_message(self):
        with self.assertRaises(FieldValueError) as cm:
            IntegerConverter().bind_value('16.5', EN_US)
        self.assertEqual(
            cm.exception.public_message,
            '"16.5" cannot be interpreted as an integer number.')

    @foreach(
        param(converter_class=IntegerConverter, expected=0),
        param(converter_class=FloatConverter, expected=0.0),
        param(converter_class=DecimalConverter, expected=Decimal('0')),
    )
    @foreach(
        param(raw_value=''),
        param(raw_value=' '),
        param(raw_value='\t  \n'),
    )
    def test_empty(self, converter_class, expected, raw_value):
        converter = converter_class()
        self.assertEqualIncludingTypes(converter.bind_value(raw_value, EN_US), expected)
        self.assertIsNone(converter.bind_value(raw_value, EN_US, nullable=True))


@expand
class TestBooleanConverter(unittest.TestCase):

    @foreach(['true', 'on', 'TRUE', 'True', 'ON', 'On', 'tRuE'])
    def test_true(self, raw_value):
        converter = BooleanConverter()
        self.assertIs(converter.bind_value(raw_value, EN_US), True)
        self.assertIs(converter.bind_value(raw_value, DE_DE, nullable=True), True)

    @foreach(['false', 'off', 'yes', 'no', '1', '0', 'x', ' on', 'true ', 'truee', ' ',
              'whatever'])
    def test_false(self, raw_value):
        converter = BooleanConverter()
        self.assertIs(converter.bind_value(raw_value, EN_US), False)
        self.assertIs(converter.bind_value(raw_value, DE_DE, nullable=True), False)

    def test_empty(self):
        converter = BooleanConverter()
        self.assertIs(converter.bind_value('', EN_US), False)
        self.assertIsNone(converter.bind_value('', EN_US, nullable=True))

    def test_case_sensitive(self):
        converter = BooleanConverter(case_sensitive=True)
        self.assertIs(converter.bind_value('on', EN_US), True)
        self.assertIs(converter.bind_value('ON', EN_US), False)

    def test_custom_true_literals(self):
        converter = BooleanConverter(true_literals=frozenset({'yes', '1'}))
        self.assertIs(converter.bind_value('YES', EN_US), True)
        self.assertIs(converter.bind_value('1', EN_US), True)
        self.assertIs(converter.bind_value('on', EN_US), False)


class TestTextConverter(unittest.TestCase):

    def test_default(self):
        converter = TextConverter()
        self.assertEqual(converter.bind_value(' Zażółć ', EN_US), ' Zażółć ')
        self.assertEqual(converter.bind_value(' ', EN_US), ' ')
        self.assertEqual(converter.bind_value('', EN_US), '')
        self.assertIsNone(converter.bind_value('', EN_US, nullable=True))

    def test_strip(self):
        converter = TextConverter(strip=True)
        self.assertEqual(converter.bind_value(' abc\n', EN_US), 'abc')
        self.assertEqual(converter.bind_value('  ', EN_US), '')
        self.assertIsNone(converter.bind_value('  ', EN_US, nullable=True))


@expand
class TestDateConverter(unittest.TestCase):

    def test_valid(self):
        converter = DateConverter()
        self.assertEqual(converter.bind_value('2026-10-19', DE_DE),
                         datetime.date(2026, 10, 19))
        self.assertEqual(converter.bind_value(' 2024-02-29 ', EN_US),
                         datetime.date(2024, 2, 29))

    @foreach(['19.10.2026', '2026-02-30', '2026-1-5', '20261019', '2026-10-19T12:00',
              'today'])
    def test_invalid(self, raw_value):
        with self.assertRaises(FieldValueError) as cm:
            DateConverter().bind_value(raw_value, EN_US)
        self.assertIn('expected format: YYYY-MM-DD', cm.exception.public_message)

    def test_empty(self):
        converter = DateConverter()
        self.assertIsNone(converter.bind_value('', EN_US))
        self.assertIsNone(converter.bind_value(' ', EN_US, nullable=True))


class TestConverterCustomization(unittest.TestCase):

    def test_per_instance_attrs(self):
        converter = IntegerConverter(empty_value=-1)
        self.assertEqual(converter.bind_value('', EN_US), -1)
        self.assertEqual(IntegerConverter().bind_value('', EN_US), 0)
        self.assertEqual(repr(converter), 'IntegerConverter(empty_value=-1)')

    def test_illegal_kwargs(self):
        with self.assertRaises(TypeError):
            IntegerConverter(foo=42)
        with self.assertRaises(TypeError):
            IntegerConverter(_ASCII_DIGITS='0')

    def test_subclass(self):
        class UpperTextConverter(Converter):
            empty_value = ''
            def convert(self, value, locale):
                return value.upper()

        converter = UpperTextConverter()
        self.assertEqual(converter.bind_value('abc', EN_US), 'ABC')
        self.assertEqual(converter.bind_value('', EN_US), '')



#
# The registry

class TestConverterRegistry(unittest.TestCase):

    def setUp(self):
        self.registry = default_converter_registry()

    def test_default_converters(self):
        self.assertIsInstance(self.registry.lookup(int), IntegerConverter)
        self.assertIsInstance(self.registry.lookup(float), FloatConverter)
        self.assertIsInstance(self.registry.lookup(Decimal), DecimalConverter)
        self.assertIsInstance(self.registry.lookup(bool), BooleanConverter)
        self.assertIsInstance(self.registry.lookup(str), TextConverter)
        self.assertIsInstance(self.registry.lookup(datetime.date), DateConverter)

    def test_lookup_unwraps_target_types(self):
        converter = self.registry.lookup(int)
        self.assertIs(self.registry.lookup(typing.Optional[int]), converter)
        self.assertIs(self.registry.lookup(list[int]), converter)
        self.assertIs(self.registry.lookup(tuple[typing.Optional[int], ...]), converter)

    def test_lookup_uses_mro(self):
        class MyInt(int):
            pass

        self.assertIs(self.registry.lookup(MyInt), self.registry.lookup(int))
        self.assertIsNot(self.registry.lookup(bool), self.registry.lookup(int))

    def test_lookup_datetime_not_served_by_date_converter(self):
        for target_type in [datetime.datetime,
                            typing.Optional[datetime.datetime],
                            list[datetime.datetime]]:
            with self.assertRaises(ConverterNotFoundError) as cm:
                self.registry.lookup(target_type)
            self.assertIs(cm.exception.target_type, datetime.datetime)
        self.assertNotIn(datetime.datetime, self.registry)

    def test_lookup_datetime_registered_explicitly(self):
        converter = DateConverter()
        self.registry.register(datetime.datetime, converter)
        self.assertIs(self.registry.lookup(datetime.datetime), converter)

    def test_lookup_skips_refusing_converter(self):
        class MyInt(int):
            pass

        class _RefusingConverter(IntegerConverter):
            def accepts_target_type(self, item_type):
                return item_type is int

        refusing = _RefusingConverter()
        self.registry.register(int, refusing, allow_replace=True)
        self.assertIs(self.registry.lookup(int), refusing)
        with self.assertRaises(ConverterNotFoundError):
            self.registry.lookup(MyInt)

    def test_lookup_not_found(self):
        with self.assertRaises(ConverterNotFoundError) as cm:
            self.registry.lookup(complex)
        self.assertIs(cm.exception.target_type, complex)
        self.assertIsInstance(cm.exception, BindingConfigError)
        self.assertIsInstance(cm.exception, LookupError)

    def test_contains(self):
        self.assertIn(int, self.registry)
        self.assertIn(typing.Optional[bool], self.registry)
        self.assertNotIn(complex, self.registry)

    def test_register(self):
        converter = TextConverter(strip=True)
        self.registry.register(complex, converter)
        self.assertIs(self.registry.lookup(complex), converter)

    def test_register_duplicate(self):
        with self.assertRaises(BindingConfigError):
            self.registry.register(int, IntegerConverter())

    def test_register_replacing(self):
        converter = IntegerConverter(empty_value=-1)
        self.registry.register(int, converter, allow_replace=True)
        self.assertIs(self.registry.lookup(int), converter)

    def test_register_when_frozen(self):
        self.assertFalse(self.registry.frozen)
        self.registry.freeze()
        self.assertTrue(self.registry.frozen)
        with self.assertRaises(BindingConfigError):
            self.registry.register(complex, TextConverter())
        # lookups are still possible
        self.assertIsInstance(self.registry.lookup(int), IntegerConverter)

    def test_register_illegal(self):
        with self.assertRaises(BindingConfigError):
            self.registry.register(typing.Optional[complex], TextConverter())
        with self.assertRaises(BindingConfigError):
            self.registry.register(complex, complex)

    def test_init_with_mapping(self):
        converter = BooleanConverter()
        registry = ConverterRegistry({bool: converter})
        self.assertIs(registry.lookup(bool), converter)
        self.assertNotIn(int, registry)
