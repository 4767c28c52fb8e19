# Copyright (c) 2026 NASK. All rights reserved.

import functools


def attr_required(*attr_names, dummy_placeholder=None):
    """
    A method decorator: provides a check for presence of specified attributes.

    Some positional args:
        Names of attributes that are required to be present *and*
        not to be the `dummy_placeholder` object (see below) when
        the decorated method is called.

    Kwargs:
        `dummy_placeholder` (default: :obj:`None`):
            The object that is not treated as a required value.

    The decorated function (method) will raise:
        :exc:`~exceptions.NotImplementedError`:
            When at least one of the specified attributes is set to
            the `dummy_placeholder` object or does not exist.

    >>> class XX(object):
    ...     a = 1
    ...
    ...     @attr_required('a')
    ...     def meth_a(self):
    ...          print('OK')
    ...
    ...     @attr_required('a', 'b')
    ...     def meth_ab(self):
    ...          print('Excellent')
    ...
    >>> x = XX()
    >>> x.meth_a()
    OK
    >>> x.meth_ab()  # doctest: +IGNORE_EXCEPTION_DETAIL
    Traceback (most recent call last):
      ...
    NotImplementedError: ...
    >>> x.b = 42
    >>> x.meth_ab()
    Excellent
    >>> XX.a = None
    >>> x.meth_ab()  # doctest: +IGNORE_EXCEPTION_DETAIL
    Traceback (most recent call last):
      ...
    NotImplementedError: ...
    """
    def decorator(func):
        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            self = args[0]  # to avoid arg name clash ('self' may be in kwargs)
            for name in attr_names:
                if getattr(self, name, dummy_placeholder) is dummy_placeholder:
                    raise NotImplementedError('attribute {0!r} is required to '
                                              'be present and not to be {1!r}'
                                              .format(name, dummy_placeholder))
            return func(*args, **kwargs)
        return wrapper
    return decorator
