# Copyright (c) 2026 NASK. All rights reserved.

"""
Converters: the strategies of converting raw (textual) request
parameter values into values of the declared target types -- as well
as the registry that maps target types to converters.

The built-in converters follow these rules:

=========================  ===========================  ==========================
target type                non-empty raw value          empty raw value
=========================  ===========================  ==========================
`int`, `float`, `Decimal`  parsed according to the      `0`, `0.0`, `Decimal('0')`
                           number format of the         (nullable forms: `None`)
                           request locale
`bool`                     `True` for ``"true"`` and    `False`
                           ``"on"`` (any letter case),  (nullable form: `None`)
                           `False` for anything else
`str`                      the value as it is           `''`
                                                        (nullable form: `None`)
`datetime.date`            *ISO 8601* date              `None`
=========================  ===========================  ==========================

>>> from babel import Locale
>>> registry = default_converter_registry()
>>> registry.lookup(int).bind_value('1,234', Locale.parse('en_US'))
1234
>>> registry.lookup(Decimal).bind_value('19,99', Locale.parse('de_DE'))
Decimal('19.99')
>>> registry.lookup(bool).bind_value('on', Locale.parse('en_US'))
True
>>> registry.lookup(int).bind_value('', Locale.parse('en_US'), nullable=True) is None
True
"""

import collections
import collections.abc as collections_abc
import datetime
import math
import re
import types
import typing
from decimal import Decimal

from babel.numbers import (
    NumberFormatError,
    get_decimal_symbol,
    get_group_symbol,
    get_minus_sign_symbol,
    get_plus_sign_symbol,
    parse_decimal,
)

from formbind.common_helpers import ascii_str
from formbind.exceptions import (
    BindingConfigError,
    ConverterNotFoundError,
    FieldValueError,
)



#
# Target type analysis

class TargetTypeInfo(collections.namedtuple('TargetTypeInfo', 'item_type, nullable, collection')):

    """
    The result of :func:`analyze_target_type`.

    * `item_type` -- the plain (unwrapped) type, used to look up the
      converter;
    * `nullable` -- whether empty values shall be bound as `None`;
    * `collection` -- `None` for single-valued targets, otherwise the
      type of the bound collection (`list` or `tuple`).
    """

    @property
    def multi(self):
        return self.collection is not None


_COLLECTION_ORIGIN_TO_RESULT_TYPE = {
    list: list,
    tuple: tuple,
    collections_abc.Sequence: list,
}

_UNION_ORIGINS = tuple(
    origin for origin in (typing.Union, getattr(types, 'UnionType', None))
    if origin is not None)

_NONE_TYPE = type(None)


def analyze_target_type(target_type):
    """
    Analyze the given declared target type.

    Args:
        `target_type`:
            A plain type (e.g., `int`), a nullable form of a type
            (e.g., `Optional[int]`), or a collection form of any of
            the former (e.g., `list[int]`, `tuple[Optional[int], ...]`).

    Returns:
        A :class:`TargetTypeInfo` instance.

    Raises:
        :exc:`~formbind.exceptions.BindingConfigError` if the given
        target type is not supported.

    >>> analyze_target_type(int)
    TargetTypeInfo(item_type=<class 'int'>, nullable=False, collection=None)
    >>> analyze_target_type(typing.Optional[Decimal])
    TargetTypeInfo(item_type=<class 'decimal.Decimal'>, nullable=True, collection=None)
    >>> analyze_target_type(typing.List[typing.Optional[bool]])
    TargetTypeInfo(item_type=<class 'bool'>, nullable=True, collection=<class 'list'>)
    """
    collection = None
    origin = typing.get_origin(target_type)
    if origin in _COLLECTION_ORIGIN_TO_RESULT_TYPE:
        args = typing.get_args(target_type)
        if origin is tuple:
            if len(args) != 2 or args[1] is not Ellipsis:
                raise BindingConfigError(
                    'only variable-length tuples (`tuple[X, ...]`) are '
                    'supported as target types (got: {!a})'.format(target_type))
        elif len(args) != 1:
            raise BindingConfigError(
                'the item type of {!a} is not specified'.format(target_type))
        collection = _COLLECTION_ORIGIN_TO_RESULT_TYPE[origin]
        target_type = args[0]
        origin = typing.get_origin(target_type)
    nullable = False
    if origin in _UNION_ORIGINS:
        args = typing.get_args(target_type)
        non_none_args = [arg for arg in args if arg is not _NONE_TYPE]
        if len(non_none_args) != 1 or len(args) != 2:
            raise BindingConfigError(
                'only `Optional[X]`-like unions are supported '
                'as target types (got: {!a})'.format(target_type))
        nullable = True
        [target_type] = non_none_args
    if typing.get_origin(target_type) is not None or not isinstance(target_type, type):
        raise BindingConfigError('{!a} is not a supported target type'.format(target_type))
    return TargetTypeInfo(target_type, nullable, collection)



#
# The base converter class

class Converter(object):

    """
    The base class for all converters.

    Converters can be customized in two ways:

    1) by subclassing (overriding/extending some class-level
       attributes and/or methods);

    2) by specifying custom *per-instance* values with keyword
       arguments passed to the constructor -- then corresponding
       class-level attributes are overridden.

    >>> TextConverter(strip=True)
    TextConverter(strip=True)
    >>> TextConverter(spam=True)         # doctest: +ELLIPSIS
    Traceback (most recent call last):
      ...
    TypeError: TextConverter.__init__() got an unexpected keyword argument 'spam'

    Converter instances should not be modified after their creation
    (they are shared by all requests).
    """

    #: The value bound when the raw value is empty
    #: and the target type is *not* nullable.
    empty_value = None

    def __init__(self, **kwargs):
        self._init_kwargs = kwargs
        self._set_per_instance_attrs(kwargs)

    def __repr__(self):
        return '{}({})'.format(
            self.__class__.__qualname__,
            ', '.join(
                '{}={!r}'.format(key, value)
                for key, value in sorted(self._init_kwargs.items())))

    def bind_value(self, value, locale, nullable=False):
        """
        Apply the complete conversion rule to the given raw value:
        the *empty value* rule if :meth:`is_empty` says so, otherwise
        :meth:`convert`.

        Args:
            `value`:
                A single raw parameter value (*always* a :class:`str`).
            `locale`:
                The :class:`babel.Locale` of the current request.

        Kwargs:
            `nullable` (default: :obj:`False`):
                Whether the target type is a nullable one.

        Raises:
            :exc:`~formbind.exceptions.FieldValueError` (or any other
            exception raised by :meth:`convert`).
        """
        assert isinstance(value, str)
        if self.is_empty(value):
            return None if nullable else self.get_empty_value()
        return self.convert(value, locale)

    #
    # overridable methods/attributes

    def convert(self, value, locale):
        """
        Convert a non-empty raw value.

        Args:
            `value`:
                A single raw parameter value (*always* a :class:`str`).
            `locale`:
                The :class:`babel.Locale` of the current request.

        Returns:
            The converted value.

        Raises:
            Any instance/subclass of :exc:`~exceptions.Exception`
            (especially a :exc:`formbind.exceptions.FieldValueError`,
            preferably with the `public_message` specified).

        The default implementation just passes the value unchanged.
        """
        return value

    def is_empty(self, value):
        return value == ''

    def get_empty_value(self):
        return self.empty_value

    def accepts_target_type(self, item_type):
        """
        Whether this converter can produce values of the given plain
        type; consulted by :meth:`ConverterRegistry.lookup` when the
        converter was registered for a base class of `item_type`.

        The default implementation returns :obj:`True`.
        """
        return True

    #
    # non-public internals

    def _set_per_instance_attrs(self, per_instance_attrs):
        # per-instance customizations of class-level attributes
        cls = self.__class__
        for attr_name, obj in per_instance_attrs.items():
            if attr_name.startswith('_') or not hasattr(cls, attr_name):
                raise TypeError(
                    '{}.__init__() got an unexpected keyword argument {!a}'
                    .format(cls.__qualname__, attr_name))
            setattr(self, attr_name, obj)



#
# Concrete converter classes

class NumberConverter(Converter):

    """
    The base class for locale-sensitive number converters.

    The raw value is parsed using the number symbols (the decimal
    separator, the grouping separator, the plus/minus signs) of the
    request locale; when the grouping separator is used, it must be
    placed properly -- so, e.g., ``"19,99"`` is *not* a valid number
    in the ``en_US`` locale (whereas in the ``de_DE`` locale it is a
    valid one).  Leading/trailing whitespace is ignored (whitespace-only
    raw values are considered empty).  In locales whose grouping
    separator is a no-break space, an ordinary space is accepted in
    its place.  Exponent notation, *NaN* and infinities are not
    supported.
    """

    def is_empty(self, value):
        return not value.strip()

    def convert(self, value, locale):
        number = self._parse_number(value.strip(), locale)
        return self._coerce_number(number, value, locale)

    def _parse_number(self, value, locale):
        negative, body = self._split_sign(value, locale)
        body = self._normalize_group_spaces(body, locale)
        if not self._consists_of_number_chars(body, locale):
            raise self._make_error(value, locale)
        try:
            # (the sign has been split off, so that the strict check of
            # grouping, made by Babel, is not confused by locale-specific
            # minus signs)
            number = parse_decimal(body, locale=locale, strict=True)
        except NumberFormatError as exc:
            raise self._make_error(value, locale) from exc
        if not number.is_finite():
            raise self._make_error(value, locale)
        return -number if negative else number

    def _coerce_number(self, number, value, locale):
        raise NotImplementedError

    @staticmethod
    def _split_sign(value, locale):
        # the ASCII signs are always accepted, apart from the locale's ones
        for sign, negative in [(get_minus_sign_symbol(locale), True),
                               ('-', True),
                               (get_plus_sign_symbol(locale), False),
                               ('+', False)]:
            if sign and value.startswith(sign):
                return negative, value[len(sign):]
        return False, value

    @staticmethod
    def _normalize_group_spaces(body, locale):
        # a plain space typed in place of a no-break-space grouping separator
        group_symbol = get_group_symbol(locale)
        if group_symbol in _NO_BREAK_SPACES:
            return body.replace(' ', group_symbol)
        return body

    @staticmethod
    def _consists_of_number_chars(body, locale):
        group_symbol = get_group_symbol(locale)
        symbols = {get_decimal_symbol(locale), group_symbol}
        return bool(body) and not body.startswith(group_symbol) and all(
            (ch in _ASCII_DIGITS) or (ch in symbols)
            for ch in body)

    @staticmethod
    def _make_error(value, locale):
        return FieldValueError(public_message=(
            '"{}" is not a valid number (according to the '
            'number format of the "{}" locale).'.format(
                ascii_str(value),
                ascii_str(locale))))

_ASCII_DIGITS = frozenset('0123456789')
_NO_BREAK_SPACES = frozenset('\u00a0\u202f')


class IntegerConverter(NumberConverter):

    """
    For integer numbers (any size) -- converted to :class:`int`.

    Numbers with a non-zero fractional part are rejected.
    """

    empty_value = 0

    def _coerce_number(self, number, value, locale):
        if number != number.to_integral_value():
            raise FieldValueError(public_message=(
                '"{}" cannot be interpreted as an '
                'integer number.'.format(ascii_str(value.strip()))))
        return int(number)


class FloatConverter(NumberConverter):

    """
    For floating-point numbers -- converted to :class:`float`.
    """

    empty_value = 0.0

    def _coerce_number(self, number, value, locale):
        result = float(number)
        if not math.isfinite(result):
            raise self._make_error(value, locale)
        return result


class DecimalConverter(NumberConverter):

    """
    For arbitrary-precision decimal numbers -- converted to
    :class:`decimal.Decimal`.
    """

    empty_value = Decimal('0')

    def _coerce_number(self, number, value, locale):
        return number


class BooleanConverter(Converter):

    """
    For *YES/NO* values (e.g., submitted by HTML checkboxes).

    The raw values ``"true"`` and ``"on"`` are converted to :obj:`True`;
    any other non-empty value is converted to :obj:`False` (conversion
    never fails).  The comparison is case-insensitive (unless the
    `case_sensitive` attribute is true) and no whitespace is stripped.

    >>> c = BooleanConverter()
    >>> [c.bind_value(v, None) for v in ('on', 'TRUE', 'True', 'yes', '1', ' on', '')]
    [True, True, True, False, False, False, False]
    >>> c.bind_value('', None, nullable=True) is None
    True
    """

    empty_value = False
    true_literals = frozenset({'true', 'on'})
    case_sensitive = False

    def convert(self, value, locale):
        if not self.case_sensitive:
            value = value.lower()
        return value in self.true_literals


class TextConverter(Converter):

    """
    For arbitrary text -- passed as it is (or, if the `strip`
    attribute is true, with leading/trailing whitespace removed).
    """

    empty_value = ''
    strip = False

    def is_empty(self, value):
        if self.strip:
            value = value.strip()
        return value == ''

    def convert(self, value, locale):
        if self.strip:
            value = value.strip()
        return value


class DateConverter(Converter):

    """
    For dates in the *ISO 8601* ``YYYY-MM-DD`` format (the format used
    by HTML date inputs) -- converted to :class:`datetime.date`.

    There is no sensible *zero* date, so empty values are always
    converted to :obj:`None`.

    >>> DateConverter().bind_value('2026-10-19', None)
    datetime.date(2026, 10, 19)
    >>> DateConverter().bind_value('', None) is None
    True
    """

    empty_value = None

    _DATE_REGEX = re.compile(r'\A[0-9]{4}-[0-9]{2}-[0-9]{2}\Z')

    def is_empty(self, value):
        return not value.strip()

    def convert(self, value, locale):
        value = value.strip()
        try:
            if not self._DATE_REGEX.match(value):
                raise ValueError('not a YYYY-MM-DD string')
            return datetime.date.fromisoformat(value)
        except ValueError as exc:
            raise FieldValueError(public_message=(
                '"{}" is not a valid date (expected '
                'format: YYYY-MM-DD).'.format(ascii_str(value)))) from exc

    def accepts_target_type(self, item_type):
        # `datetime.datetime` is a subclass of `datetime.date`
        return not issubclass(item_type, datetime.datetime)



#
# The registry

class ConverterRegistry(object):

    """
    A process-wide mapping of target types to converters.

    Registration is supposed to be done at the configuration time
    (before any requests are processed); then the registry can be
    frozen (see :meth:`freeze`) -- after that, it is only read.

    >>> registry = ConverterRegistry({int: IntegerConverter()})
    >>> registry.lookup(int)
    IntegerConverter()
    >>> registry.lookup(typing.Optional[int])
    IntegerConverter()
    >>> registry.lookup(str)               # doctest: +ELLIPSIS
    Traceback (most recent call last):
      ...
    formbind.exceptions.ConverterNotFoundError: ... no converter registered for <class 'str'>
    """

    def __init__(self, type_to_converter=None):
        self._type_to_converter = {}
        self._frozen = False
        if type_to_converter is not None:
            for target_type, converter in type_to_converter.items():
                self.register(target_type, converter)

    def __repr__(self):
        return '<{} with converters for: {}>'.format(
            self.__class__.__qualname__,
            ', '.join(t.__qualname__ for t in self._type_to_converter))

    def __contains__(self, target_type):
        try:
            self.lookup(target_type)
        except ConverterNotFoundError:
            return False
        return True

    @property
    def frozen(self):
        return self._frozen

    def freeze(self):
        self._frozen = True

    def register(self, target_type, converter, allow_replace=False):
        """
        Register the given converter for the given (plain) type.

        Raises:
            :exc:`~formbind.exceptions.BindingConfigError` if the
            registry is frozen, or if `target_type` is not a plain
            type, or if some converter is already registered for it
            and `allow_replace` is false.
        """
        if self._frozen:
            raise BindingConfigError(
                'cannot register a converter for {!a} -- the registry '
                'is already frozen'.format(target_type))
        if typing.get_origin(target_type) is not None or not isinstance(target_type, type):
            raise BindingConfigError(
                'converters can be registered only for plain '
                'types (got: {!a})'.format(target_type))
        if not isinstance(converter, Converter):
            raise BindingConfigError(
                '{!a} is not a Converter instance'.format(converter))
        if target_type in self._type_to_converter and not allow_replace:
            raise BindingConfigError(
                'a converter for {!a} is already registered'.format(target_type))
        self._type_to_converter[target_type] = converter

    def lookup(self, target_type):
        """
        Get the converter for the given target type (possibly, a nullable
        and/or collection form of a type -- then the converter for the
        underlying plain type is returned).

        If there is no converter registered for the exact plain type,
        its base classes are tried (in the MRO order); a converter
        registered for a base class is skipped if its
        :meth:`Converter.accepts_target_type` refuses the type.

        Raises:
            :exc:`~formbind.exceptions.ConverterNotFoundError` if no
            suitable converter is registered; or
            :exc:`~formbind.exceptions.BindingConfigError` if the target
            type is not supported at all (see: :func:`analyze_target_type`).
        """
        item_type = analyze_target_type(target_type).item_type
        for cls in item_type.__mro__:
            converter = self._type_to_converter.get(cls)
            if converter is None:
                continue
            if cls is item_type or converter.accepts_target_type(item_type):
                return converter
        raise ConverterNotFoundError(item_type)


def default_converter_registry():
    """
    Make a new (not frozen) :class:`ConverterRegistry` populated with
    the built-in converters.
    """
    return ConverterRegistry({
        int: IntegerConverter(),
        float: FloatConverter(),
        Decimal: DecimalConverter(),
        bool: BooleanConverter(),
        str: TextConverter(),
        datetime.date: DateConverter(),
    })
