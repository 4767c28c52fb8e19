# Copyright (c) 2026 NASK. All rights reserved.

"""
Constraints that can be declared for bindings, and the validator that
checks (already converted) values against them.

The conventions follow those of the *Bean Validation* constraints
known from the MVC binding design:

* `None` is considered valid by all constraints except
  :class:`NotNull`, :class:`NotEmpty` and :class:`NotBlank`;

* *scalar* constraints (e.g., :class:`Min`, :class:`Pattern`),
  when applied to a collection value, check each of its items and
  report a separate violation for each offending item;

* violations of a value are reported in the order in which the
  constraints were declared.

>>> validator = ConstraintValidator()
>>> [v.message for v in validator.validate(16, [Min(18), Max(130)])]
['Must be greater than or equal to 18.']
>>> validator.validate(None, [Min(18)])
[]
>>> [v.invalid_value for v in validator.validate([20, 3, 1], [Min(18)])]
[3, 1]
"""

import collections
import collections.abc as collections_abc
import datetime
import re
from decimal import Decimal

from babel.numbers import format_decimal

from formbind.common_helpers import ascii_str
from formbind.exceptions import BindingConfigError


class Violation(collections.namedtuple('Violation', 'constraint, message, invalid_value')):

    """
    A single constraint violation: the violated constraint, the
    (client-safe) message and the offending value.
    """

    @property
    def constraint_name(self):
        return self.constraint.name



#
# The base constraint class

class Constraint(object):

    """
    The base class for all constraints.

    Constructor keyword-only arguments (supported by all constraints):

    * `message` (default: the class's `default_message`):
          A custom message template; it can contain the same
          `{...}`-placeholders as the default one.
    * `name` (default: the class name):
          The identifier of the constraint (it becomes the
          :attr:`Violation.constraint_name`).
    """

    #: (overridable in subclasses)
    default_message = 'Not a valid value.'

    #: Whether, for a collection value, each item is checked separately.
    applies_to_items = True

    #: Whether `None` is considered invalid.
    rejects_none = False

    def __init__(self, *, message=None, name=None):
        self.message = message if message is not None else self.default_message
        self.name = name if name is not None else self.__class__.__name__

    def __repr__(self):
        return '{}({})'.format(
            self.__class__.__qualname__,
            ', '.join('{}={!r}'.format(key, val)
                      for key, val in self.get_message_params().items()))

    def iter_violations(self, value, locale=None):
        """
        Check the given value; yield :class:`Violation` instances.
        """
        if value is None:
            if self.rejects_none:
                yield self._make_violation(value, locale)
            return
        if self.applies_to_items and _is_collection(value):
            for item in value:
                if item is not None and not self.is_valid(item):
                    yield self._make_violation(item, locale)
        elif not self.is_valid(value):
            yield self._make_violation(value, locale)

    #
    # overridable methods

    def is_valid(self, value):
        """
        Check a non-`None` value (for scalar constraints: a single
        item).  Must be implemented in subclasses.
        """
        raise NotImplementedError

    def get_message_params(self):
        """
        Get a dict of constraint parameters (to be used in the message).
        """
        return {}

    def format_message(self, invalid_value, locale=None):
        params = {
            key: _format_param(val, locale)
            for key, val in self.get_message_params().items()}
        return self.message.format(value=ascii_str(invalid_value), **params)

    #
    # non-public internals

    def _make_violation(self, invalid_value, locale):
        return Violation(self, self.format_message(invalid_value, locale), invalid_value)


def _is_collection(value):
    return (isinstance(value, collections_abc.Collection)
            and not isinstance(value, (str, bytes, bytearray)))


def _format_param(val, locale):
    if isinstance(val, (int, float, Decimal)) and not isinstance(val, bool):
        if locale is not None:
            return format_decimal(val, locale=locale)
        return str(val)
    if isinstance(val, (list, tuple, frozenset, set)):
        return ', '.join('"{}"'.format(ascii_str(v)) for v in val)
    return ascii_str(val)



#
# Concrete constraint classes

class NotNull(Constraint):

    default_message = 'A value is required.'
    rejects_none = True
    applies_to_items = False

    def is_valid(self, value):
        return True


class NotEmpty(Constraint):

    """
    For strings and collections: the length must be at least 1.
    """

    default_message = 'Must not be empty.'
    rejects_none = True
    applies_to_items = False

    def is_valid(self, value):
        return len(value) > 0


class NotBlank(Constraint):

    """
    For strings: must contain at least one non-whitespace character.
    """

    default_message = 'Must not be blank.'
    rejects_none = True

    def is_valid(self, value):
        return bool(str(value).strip())


class Min(Constraint):

    default_message = 'Must be greater than or equal to {min}.'

    def __init__(self, min, **kwargs):
        self.min = min
        super().__init__(**kwargs)

    def get_message_params(self):
        return {'min': self.min}

    def is_valid(self, value):
        return value >= self.min


class Max(Constraint):

    default_message = 'Must be less than or equal to {max}.'

    def __init__(self, max, **kwargs):
        self.max = max
        super().__init__(**kwargs)

    def get_message_params(self):
        return {'max': self.max}

    def is_valid(self, value):
        return value <= self.max


class DecimalMin(Constraint):

    """
    Like :class:`Min` but the bound is given as a decimal string (or
    a :class:`~decimal.Decimal`) and comparisons are made exactly
    (using :class:`~decimal.Decimal` arithmetic); the bound can be
    exclusive (`inclusive=False`).
    """

    def __init__(self, min, inclusive=True, **kwargs):
        self.min = Decimal(min)
        self.inclusive = inclusive
        super().__init__(**kwargs)

    @property
    def default_message(self):
        return ('Must be greater than or equal to {min}.' if self.inclusive
                else 'Must be greater than {min}.')

    def get_message_params(self):
        return {'min': self.min}

    def is_valid(self, value):
        value = _as_decimal(value)
        return value >= self.min if self.inclusive else value > self.min


class DecimalMax(Constraint):

    """
    Like :class:`Max` but the bound is given as a decimal string (or
    a :class:`~decimal.Decimal`) and comparisons are made exactly
    (using :class:`~decimal.Decimal` arithmetic); the bound can be
    exclusive (`inclusive=False`).
    """

    def __init__(self, max, inclusive=True, **kwargs):
        self.max = Decimal(max)
        self.inclusive = inclusive
        super().__init__(**kwargs)

    @property
    def default_message(self):
        return ('Must be less than or equal to {max}.' if self.inclusive
                else 'Must be less than {max}.')

    def get_message_params(self):
        return {'max': self.max}

    def is_valid(self, value):
        value = _as_decimal(value)
        return value <= self.max if self.inclusive else value < self.max


def _as_decimal(value):
    if isinstance(value, float):
        # (`repr()` gives the shortest string that round-trips)
        return Decimal(repr(value))
    return Decimal(value)


class Size(Constraint):

    """
    For strings and collections: the length must be within the bounds.
    """

    applies_to_items = False

    def __init__(self, min=0, max=None, **kwargs):
        if min < 0 or (max is not None and max < min):
            raise BindingConfigError(
                'illegal Size bounds: min={!a}, max={!a}'.format(min, max))
        self.min = min
        self.max = max
        super().__init__(**kwargs)

    @property
    def default_message(self):
        if self.max is None:
            return 'Size must be at least {min}.'
        return 'Size must be between {min} and {max}.'

    def get_message_params(self):
        return {'min': self.min, 'max': self.max}

    def is_valid(self, value):
        return self.min <= len(value) and (self.max is None or len(value) <= self.max)


class Pattern(Constraint):

    """
    For strings: the whole string must match the regular expression.
    """

    default_message = 'Must match "{regexp}".'

    def __init__(self, regexp, flags=0, **kwargs):
        self.regexp = regexp
        self._compiled = re.compile(regexp, flags)
        super().__init__(**kwargs)

    def get_message_params(self):
        return {'regexp': self.regexp}

    def is_valid(self, value):
        return self._compiled.fullmatch(str(value)) is not None


class OneOf(Constraint):

    default_message = 'Must be one of: {values}.'

    def __init__(self, values, **kwargs):
        self.values = tuple(values)
        super().__init__(**kwargs)

    def get_message_params(self):
        return {'values': self.values}

    def is_valid(self, value):
        return value in self.values


class Past(Constraint):

    """
    For dates: must be earlier than today.
    """

    default_message = 'Must be a date in the past.'

    def is_valid(self, value):
        return value < self.today()

    def today(self):
        return datetime.date.today()


class Future(Past):

    """
    For dates: must be later than today.
    """

    default_message = 'Must be a date in the future.'

    def is_valid(self, value):
        return value > self.today()


class Check(Constraint):

    """
    An arbitrary check: `predicate` is a callable that takes a single
    (non-`None`) value and returns a true value if it is valid.

    >>> is_even = Check(lambda n: n % 2 == 0, message='Must be even.', name='Even')
    >>> [(v.constraint_name, v.message) for v in is_even.iter_violations(3)]
    [('Even', 'Must be even.')]
    """

    def __init__(self, predicate, **kwargs):
        self.predicate = predicate
        super().__init__(**kwargs)

    def get_message_params(self):
        return {'predicate': self.predicate}

    def format_message(self, invalid_value, locale=None):
        return self.message.format(value=ascii_str(invalid_value))

    def is_valid(self, value):
        return bool(self.predicate(value))



#
# The validator

class ConstraintValidator(object):

    """
    The default (stateless) validator.

    Any object having a compatible :meth:`validate` method can be used
    in place of it.
    """

    def validate(self, value, constraints, locale=None):
        """
        Check the given (converted) value against the given constraints.

        Args:
            `value`:
                The converted value (possibly `None` or a collection).
            `constraints`:
                A sequence of :class:`Constraint` instances.

        Kwargs:
            `locale` (optional):
                The :class:`babel.Locale` to format numbers in messages.

        Returns:
            A list of :class:`Violation` instances (empty if the value
            is valid); in the constraint declaration order.
        """
        violations = []
        for constraint in constraints:
            violations.extend(constraint.iter_violations(value, locale))
        return violations
