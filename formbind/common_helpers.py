# Copyright (c) 2026 NASK. All rights reserved.

import re


def ascii_str(obj):

    r"""
    Safely convert the given object to an ASCII-only :class:`str`.

    This function does its best to obtain a string representation
    (possibly :class:`str`-like or :class:`bytes`-like converted to str,
    though :func:`repr` can also be used as the last-resort fallback)
    and then escaping any non-ASCII characters -- *not raising* any
    encoding/decoding exceptions.

    It is used to embed client-submitted values in log entries and
    in public messages.

    >>> ascii_str('')
    ''
    >>> ascii_str('Ala ma kota')
    'Ala ma kota'
    >>> ascii_str('19,99 zł')
    '19,99 z\\u0142'
    >>> ascii_str(b'19,99 z\xc5\x82')
    '19,99 z\\u0142'
    >>> ascii_str(42)
    '42'
    """
    if isinstance(obj, str):
        s = obj
    else:
        if isinstance(obj, memoryview):
            obj = bytes(obj)
        if isinstance(obj, (bytes, bytearray)):
            s = obj.decode('utf-8', 'surrogateescape')
        else:
            try:
                s = str(obj)
            except ValueError:
                s = repr(obj)
    return s.encode('ascii', 'backslashreplace').decode('ascii')


def as_unicode(obj, decode_error_handling='strict'):

    r"""
    Convert the given object to a :class:`str` (possibly containing
    various **non**-ASCII characters).

    Binary data (:class:`bytes`/:class:`bytearray`/:class:`memoryview`)
    is decoded as *UTF-8* (with the given `decode_error_handling`);
    any other object is converted with :class:`str` (or, as the
    last-resort fallback, with :func:`repr`).

    >>> as_unicode('Cena') == 'Cena'
    True
    >>> as_unicode(b'Cena: 19,99 z\xc5\x82') == 'Cena: 19,99 zł'
    True
    >>> as_unicode(42) == '42'
    True
    """
    if isinstance(obj, memoryview):
        obj = bytes(obj)
    if isinstance(obj, (bytes, bytearray)):
        s = obj.decode('utf-8', decode_error_handling)
    else:
        try:
            s = str(obj)
        except ValueError:
            s = repr(obj)
    return s


def py_identifier_str(obj):
    """
    Convert the given object to a string being a valid Python identifier.

    Used to make names of the automatically created view subclasses.

    >>> py_identifier_str('order-form')
    'order_form'
    >>> py_identifier_str('/orders/{id}')
    '_orders__id_'
    >>> py_identifier_str('42 items')
    '_42_items'
    """
    s = _PY_IDENTIFIER_INVALID_CHAR.sub('_', ascii_str(obj))
    if not s or s[0].isdigit():
        s = '_' + s
    return s


_PY_IDENTIFIER_INVALID_CHAR = re.compile(r'[^0-9a-zA-Z_]', re.ASCII)
