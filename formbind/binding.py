# Copyright (c) 2026 NASK. All rights reserved.

"""
The binding machinery: binding descriptors, the binder and the
binding result.

The binder converts the raw values of all bindings of a request
(using the converters found in a :class:`~formbind.converters.ConverterRegistry`
and the locale of the request), and then validates the successfully
converted values against the declared constraints.

For *deferred* bindings, no failure is raised -- instead, each
conversion failure and each constraint violation is recorded in the
:class:`BindingResult` (and the handler of the request decides what
to do about them).  For *non-deferred* bindings, failures abort the
request (see: :exc:`~formbind.exceptions.ParamValueBindingError`).

>>> from babel import Locale
>>> from formbind.constraints import Min
>>> from formbind.converters import default_converter_registry
>>> binder = Binder(default_converter_registry())
>>> bound_values, result = binder.bind([
...     BindingDescriptor('age', int, ('16',), constraints=(Min(18),)),
...     BindingDescriptor('weight', int, ('foobar',)),
...     BindingDescriptor('subscribe', bool, ('on',)),
... ], Locale.parse('en_US'))
>>> bound_values
{'age': 16, 'weight': 0, 'subscribe': True}
>>> result.is_failed()
True
>>> result.get_all_messages()
['Must be greater than or equal to 18.', '"foobar" is not a valid number (according to the number format of the "en_US" locale).']
"""

import dataclasses
from typing import (
    Any,
    Optional,
)

from formbind.constraints import ConstraintValidator
from formbind.converters import analyze_target_type
from formbind.exceptions import (
    ParamValueBindingError,
    _ErrorWithPublicMessageMixin,
)
from formbind.log_helpers import get_logger


LOGGER = get_logger(__name__)



#
# Binding descriptors

@dataclasses.dataclass(frozen=True)
class BindingDescriptor:

    """
    A resolved binding: all what the binder needs to bind a value.

    Attributes:
        `name` (str):
            The binding identity (the name of the target field or
            handler parameter).
        `target_type`:
            The declared target type, e.g.: `int`, `Optional[Decimal]`,
            `list[bool]` (see: :func:`formbind.converters.analyze_target_type`).
        `raw_values` (tuple of str):
            The submitted raw values (empty if nothing was submitted).
        `constraints` (tuple):
            The declared constraints (passed to the validator as they are).
        `deferred` (bool; default: true):
            Whether failures are to be recorded (rather than raised).
        `default_raw_value` (str or `None`):
            The raw value to be used if `raw_values` is empty.
    """

    name: str
    target_type: Any
    raw_values: tuple = ()
    constraints: tuple = ()
    deferred: bool = True
    default_raw_value: Optional[str] = None

    def __post_init__(self):
        # (let's accept any iterables, but keep them immutable)
        object.__setattr__(self, 'raw_values', tuple(self.raw_values))
        object.__setattr__(self, 'constraints', tuple(self.constraints))

    @property
    def effective_raw_values(self):
        if not self.raw_values and self.default_raw_value is not None:
            return (self.default_raw_value,)
        return self.raw_values



#
# Errors recorded in binding results

class ParamError(object):

    """
    The base class of errors recorded in a :class:`BindingResult`.

    Attributes:
        `name`: the binding identity;
        `message`: a client-safe message (a :class:`str`).
    """

    def __init__(self, name, message):
        self.name = name
        self.message = message

    def __repr__(self):
        return '<{}: name={!r}; message={!r}>'.format(
            self.__class__.__qualname__,
            self.name,
            self.message)


class BindingError(ParamError):

    """
    A *conversion error*: the submitted value could not be converted
    to the declared target type.

    Additional attributes:
        `submitted_value`: the offending raw value (a :class:`str`);
        `target_type`: the declared target type;
        `cause`: the exception raised by the converter.
    """

    #: used if the cause does not provide a public message
    default_message = 'Not a valid value.'

    def __init__(self, name, submitted_value, target_type, cause):
        if isinstance(cause, _ErrorWithPublicMessageMixin):
            message = cause.public_message
        else:
            message = self.default_message
        super().__init__(name, message)
        self.submitted_value = submitted_value
        self.target_type = target_type
        self.cause = cause


class ValidationError(ParamError):

    """
    A *validation error*: the (successfully converted) value violates
    a declared constraint.

    Additional attributes:
        `constraint`: the violated constraint;
        `constraint_name`: its identifier;
        `invalid_value`: the offending value;
        `violation`: the :class:`~formbind.constraints.Violation`
        reported by the validator.
    """

    def __init__(self, name, violation):
        super().__init__(name, violation.message)
        self.violation = violation
        self.constraint = violation.constraint
        self.constraint_name = violation.constraint_name
        self.invalid_value = violation.invalid_value



#
# The binding result

class BindingResult(object):

    """
    The request-scoped aggregate of binding (conversion and validation)
    errors.

    Errors are kept per binding identity, in the detection order; the
    identities are kept in the order of their first error.

    Calling any of the query methods (`is_failed()`, `get_*()`) marks
    the result as *accessed* (see: :attr:`accessed`).

    After the :meth:`seal` method has been called (the dispatcher does
    that before invoking the handler) the result is read-only.
    """

    def __init__(self):
        self._name_to_errors = {}
        self._accessed = False
        self._sealed = False

    def __repr__(self):
        return '<{} failed={!r} accessed={!r} errors={!r}>'.format(
            self.__class__.__qualname__,
            bool(self._name_to_errors),
            self._accessed,
            self._name_to_errors)

    #
    # Properties that do *not* mark the result as accessed

    @property
    def accessed(self):
        """Whether any of the query methods has been called."""
        return self._accessed

    @property
    def sealed(self):
        return self._sealed

    @property
    def has_unconsulted_errors(self):
        """
        Whether there are any errors but none of the query methods has
        been called (used by the dispatcher to emit the diagnostic
        warning).
        """
        return bool(self._name_to_errors) and not self._accessed

    #
    # Query methods (for handlers)

    def is_failed(self):
        """True if at least one binding has at least one error."""
        self._accessed = True
        return bool(self._name_to_errors)

    def get_all_messages(self):
        """
        Get a list of messages of all errors (binding-then-detection order).
        """
        self._accessed = True
        return [err.message for err in self._iter_all_errors()]

    def get_all_errors(self):
        self._accessed = True
        return list(self._iter_all_errors())

    def get_errors(self, name):
        """
        Get a list of errors of the specified binding (empty if none).
        """
        self._accessed = True
        return list(self._name_to_errors.get(name, ()))

    def get_error(self, name):
        """
        Get the first error of the specified binding (or `None`).
        """
        self._accessed = True
        errors = self._name_to_errors.get(name)
        return errors[0] if errors else None

    def get_all_binding_errors(self):
        self._accessed = True
        return [err for err in self._iter_all_errors()
                if isinstance(err, BindingError)]

    def get_binding_error(self, name):
        """
        Get the (first) conversion error of the specified binding (or `None`).
        """
        self._accessed = True
        for err in self._name_to_errors.get(name, ()):
            if isinstance(err, BindingError):
                return err
        return None

    def get_all_validation_errors(self):
        self._accessed = True
        return [err for err in self._iter_all_errors()
                if isinstance(err, ValidationError)]

    def get_validation_errors(self, name):
        self._accessed = True
        return [err for err in self._name_to_errors.get(name, ())
                if isinstance(err, ValidationError)]

    def get_failed_names(self):
        """Get a tuple of identities of the bindings that have errors."""
        self._accessed = True
        return tuple(self._name_to_errors)

    #
    # Mutation (for the binder and the dispatcher only)

    def seal(self):
        self._sealed = True

    def _record_conversion_error(self, error):
        assert isinstance(error, BindingError)
        self._add_errors(error.name, [error])

    def _record_validation_errors(self, errors):
        for error in errors:
            assert isinstance(error, ValidationError)
            self._add_errors(error.name, [error])

    def _add_errors(self, name, errors):
        if self._sealed:
            raise RuntimeError(
                'cannot record errors in a sealed binding result '
                '(binding {!a})'.format(name))
        self._name_to_errors.setdefault(name, []).extend(errors)

    def _iter_all_errors(self):
        for errors in self._name_to_errors.values():
            yield from errors



#
# The binder

class Binder(object):

    """
    Converts and validates the raw values of bindings.

    Constructor args:
        `converter_registry`:
            A :class:`~formbind.converters.ConverterRegistry` instance
            (shared by all requests).

    Constructor kwargs:
        `validator` (default: a new
        :class:`~formbind.constraints.ConstraintValidator`):
            Any object with a compatible `validate()` method.
    """

    def __init__(self, converter_registry, validator=None):
        self.converter_registry = converter_registry
        self.validator = (
            validator if validator is not None
            else ConstraintValidator())

    def check_target_types(self, target_types):
        """
        Ensure that converters are registered for all the given target
        types (to be called at the configuration time).

        Raises:
            :exc:`~formbind.exceptions.BindingConfigError` (especially,
            :exc:`~formbind.exceptions.ConverterNotFoundError`).
        """
        for target_type in target_types:
            self.converter_registry.lookup(target_type)

    def bind(self, descriptors, locale):
        """
        Bind the values of the given bindings.

        Args:
            `descriptors`:
                A sequence of :class:`BindingDescriptor` instances
                (processed in the given order).
            `locale`:
                The :class:`babel.Locale` of the current request.

        Returns:
            A pair: (a dict that maps binding identities to the bound
            values, a new :class:`BindingResult` instance).  If the
            conversion of a value fails, the *empty value* of the
            target type is bound (e.g., `0` for `int`, `None` for
            `Optional[int]`, an empty list for `list[int]`).

        Raises:
            :exc:`~formbind.exceptions.ParamValueBindingError` --
            if any *non-deferred* binding fails (never because of
            *deferred* bindings);
            :exc:`~formbind.exceptions.BindingConfigError` -- if no
            converter is registered for some target type (etc.).
        """
        result = BindingResult()
        bound_values = {}
        immediate_error_info_seq = []
        for descriptor in descriptors:
            if descriptor.deferred:
                bound_values[descriptor.name] = self._bind_deferred(descriptor, locale, result)
            else:
                try:
                    bound_values[descriptor.name] = self._bind_immediate(descriptor, locale)
                except _ImmediateBindingFailure as failure:
                    immediate_error_info_seq.extend(failure.error_info_seq)
        if immediate_error_info_seq:
            raise ParamValueBindingError(immediate_error_info_seq)
        return bound_values, result

    #
    # non-public internals

    def _bind_deferred(self, descriptor, locale, result):
        value, conversion_errors = self._convert(descriptor, locale)
        if conversion_errors:
            for error in conversion_errors:
                LOGGER.debug('Conversion error: %a (submitted value: %a)',
                             error, error.submitted_value)
                result._record_conversion_error(error)
            return value
        violations = self.validator.validate(value, descriptor.constraints, locale=locale)
        if violations:
            LOGGER.debug('Value %a of %a violates constraints: %a',
                         value, descriptor.name, violations)
            result._record_validation_errors(
                ValidationError(descriptor.name, violation)
                for violation in violations)
        return value

    def _bind_immediate(self, descriptor, locale):
        value, conversion_errors = self._convert(descriptor, locale)
        if conversion_errors:
            raise _ImmediateBindingFailure([
                (descriptor.name, err.submitted_value, err.cause)
                for err in conversion_errors])
        violations = self.validator.validate(value, descriptor.constraints, locale=locale)
        if violations:
            raise _ImmediateBindingFailure([
                (descriptor.name, list(descriptor.effective_raw_values), _ViolationError(violation))
                for violation in violations])
        return value

    def _convert(self, descriptor, locale):
        # Returns a pair: (the bound value, a list of BindingError instances).
        type_info = analyze_target_type(descriptor.target_type)
        converter = self.converter_registry.lookup(type_info.item_type)
        raw_values = descriptor.effective_raw_values
        if type_info.multi:
            items = []
            conversion_errors = []
            for raw_value in raw_values:
                try:
                    items.append(converter.bind_value(raw_value, locale, type_info.nullable))
                except Exception as exc:
                    conversion_errors.append(
                        BindingError(descriptor.name, raw_value, descriptor.target_type, exc))
            if conversion_errors:
                return type_info.collection(), conversion_errors
            return type_info.collection(items), []
        # (for a single-valued target, only the first
        # of possibly many submitted values is taken)
        raw_value = raw_values[0] if raw_values else ''
        try:
            return converter.bind_value(raw_value, locale, type_info.nullable), []
        except Exception as exc:
            empty_value = None if type_info.nullable else converter.get_empty_value()
            return empty_value, [
                BindingError(descriptor.name, raw_value, descriptor.target_type, exc)]


class _ImmediateBindingFailure(Exception):

    def __init__(self, error_info_seq):
        self.error_info_seq = error_info_seq
        super().__init__(error_info_seq)


class _ViolationError(_ErrorWithPublicMessageMixin, ValueError):

    def __init__(self, violation):
        self.violation = violation
        super().__init__(violation, public_message=violation.message)
