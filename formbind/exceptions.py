# Copyright (c) 2026 NASK. All rights reserved.

"""
Exception classes used by *formbind*.

Two kinds of problems are distinguished:

* *per-value* problems -- caused by the data submitted by the client
  (:exc:`FieldValueError`, raised by converters; and, only for
  *non-deferred* bindings, :exc:`ParamValueBindingError`);

* *configuration* problems -- independent of any request data
  (:exc:`BindingConfigError` and its subclasses, as well as
  :exc:`formbind.config.ConfigError`); they are never recorded in a
  binding result, they just break the application (preferably, at
  its startup).
"""

from collections.abc import Sequence

from formbind.common_helpers import ascii_str, as_unicode


#
# Generic mix-ins

class _ErrorWithPublicMessageMixin(object):

    r"""
    A mix-in class that provides the :attr:`public_message` property.

    The value of this property is a :class:`str`.  It is taken either
    from the `public_message` constructor keyword argument or -- if the
    argument was not specified -- from the value of the
    :attr:`default_public_message` attribute.

    The public message should be a complete sentence (or several
    sentences): first word capitalized (if not being an identifier
    that begins with a lower case letter) + the period at the end.

    .. warning::

       Generally, the message is intended to be presented to clients.
       **Ensure that you do not disclose any sensitive details in the
       message.**

    >>> class SomeError(_ErrorWithPublicMessageMixin, Exception):
    ...     pass
    ...
    >>> str(SomeError('a', 'b'))  # using attribute default_public_message
    'Internal error.'
    >>> str(SomeError('a', 'b', public_message='Spąm.')) == 'Spąm.'
    True
    >>> SomeError('a', 'b')
    <SomeError: args=('a', 'b'); public_message='Internal error.'>
    """

    #: (overridable in subclasses)
    default_public_message = 'Internal error.'

    def __init__(self, *args, **kwargs):
        try:
            public_message = kwargs.pop('public_message')
        except KeyError:
            pass
        else:
            self._public_message = as_unicode(public_message)
        try:
            super(_ErrorWithPublicMessageMixin, self).__init__(*args, **kwargs)
        except TypeError:
            if kwargs:
                raise TypeError(
                    'illegal keyword arguments for {} constructor: {}'.format(
                        self.__class__.__name__,
                        ', '.join(sorted(map(repr, kwargs)))))
            else:
                raise

    @property
    def public_message(self):
        """The aforementioned property."""
        try:
            return self._public_message
        except AttributeError:
            # (in subclasses `default_public_message` can also be a @property)
            self._public_message = as_unicode(self.default_public_message)
            return self._public_message

    def __str__(self):
        return self.public_message

    def __repr__(self):
        return ('<{0.__class__.__name__}: args={0.args!r}; '
                'public_message={0.public_message!r}>'.format(self))


class _ValueBindingErrorMixin(object):
    """
    Mix-in for *value binding*-related exception classes.

    Each instance of such a class:

    * should be initialized with one argument being a list of (*<binding
      name>*, *<offending value or list of offending values>*, *<actual
      exception>*) tuples -- where *<actual exception>* is the exception
      instance that caused the error (e.g., a :exc:`FieldValueError`);

    * exposes that argument as the :attr:`error_info_seq` attribute
      (for possible later inspection).
    """

    def __init__(self, error_info_seq):
        self.error_info_seq = error_info_seq
        super(_ValueBindingErrorMixin, self).__init__(error_info_seq)


#
# Actual exception classes

class FieldValueError(_ErrorWithPublicMessageMixin, ValueError):

    """
    Intended to be raised in :meth:`~.Converter.convert` methods of
    :class:`formbind.converters.Converter` subclasses when the given
    raw value cannot be converted to the target type.

    It is recommended (though not required) to instantiate the
    exception specifying the `public_message` keyword argument -- it
    becomes the message of the resultant conversion error.

    Typically, this exception (as any other :exc:`~exceptions.Exception`
    subclass/instance raised in a converter's :meth:`convert`) is caught
    by :class:`formbind.binding.Binder` -- then, for a *deferred*
    binding, it is recorded (as the :attr:`cause` of a
    :class:`formbind.binding.BindingError`) in the binding result or,
    for a *non-deferred* binding, it becomes an item of
    :attr:`ParamValueBindingError.error_info_seq`.
    """

    default_public_message = 'Not a valid value.'


class BindingConfigError(Exception):

    """
    The base class for *configuration-time* binding-related errors
    (i.e., problems that are independent of any request data).

    >>> print(BindingConfigError('Some Message'))
    [binding configuration error] Some Message
    """

    def __str__(self):
        return '[binding configuration error] ' + super().__str__()


class ConverterNotFoundError(BindingConfigError, LookupError):

    """
    Raised by :meth:`formbind.converters.ConverterRegistry.lookup`
    when no converter is registered for the given target type.

    >>> exc = ConverterNotFoundError(complex)
    >>> exc.target_type is complex
    True
    >>> print(exc)
    [binding configuration error] no converter registered for <class 'complex'>
    """

    def __init__(self, target_type):
        self.target_type = target_type
        super().__init__('no converter registered for {!a}'.format(target_type))


class ParamBindingError(_ErrorWithPublicMessageMixin, Exception):

    """
    The base class for exceptions raised when request parameters
    bound by *non-deferred* bindings are not valid.

    Such exceptions abort the request processing (the Pyramid
    exception view translates them into *HTTP 400 Bad Request*);
    they are never raised for *deferred* bindings.
    """

    default_public_message = 'Invalid parameter(s).'


class ParamValueBindingError(_ValueBindingErrorMixin, ParamBindingError):

    r"""
    Raised when value(s) of request parameter(s) bound by
    *non-deferred* bindings cannot be converted or violate constraints.

    This exception class provides :attr:`default_public_message` (see:
    :exc:`_ErrorWithPublicMessageMixin`) as a property whose value is a
    nice, user-readable message that includes, *for each contained
    exception*: the binding name, the offending value(s) and the
    :attr:`public_message` attribute of that *contained exception* (the
    latter only for instances of :exc:`_ErrorWithPublicMessageMixin`
    subclasses).

    >>> err1 = TypeError('foo', 'bar')
    >>> err2 = FieldValueError('foo', 'bar', public_message='Message.')
    >>> try:
    ...     raise ParamValueBindingError([
    ...         ('k1', 'ł-1', err1),
    ...         ('k2', ['ł-2', 'xyz'], err2),
    ...     ])
    ... except ParamBindingError as e:
    ...     exc = e
    ...
    >>> exc.public_message == (
    ...     'Problem with value(s) ("\\u0142-1") of parameter "k1". ' +
    ...     'Problem with value(s) ("\\u0142-2", "xyz")' +
    ...     ' of parameter "k2" (Message).')
    True
    >>> exc.error_info_seq == [
    ...     ('k1', 'ł-1', err1),
    ...     ('k2', ['ł-2', 'xyz'], err2),
    ... ]
    True
    """

    msg_template = ('Problem with value(s) ({values_repr}) of '
                    'parameter "{key}"{optional_exc_public_message}.')

    @property
    def default_public_message(self):
        """The aforementioned property."""
        messages = []
        for key, values, exc in self.error_info_seq:
            if isinstance(values, str):
                values = (values,)
            assert isinstance(values, Sequence)
            msg = self.msg_template.format(
                key=ascii_str(key),
                values_repr=', '.join(
                    '"{}"'.format(ascii_str(val))
                    for val in values),
                optional_exc_public_message=(
                    ' ({})'.format(exc.public_message.rstrip('.'))
                    if isinstance(exc, _ErrorWithPublicMessageMixin)
                    else ''))
            messages.append(msg)
        return ' '.join(messages)
