# Copyright (c) 2026 NASK. All rights reserved.

"""
Configuration of *formbind*, taken from Pyramid-like settings.

A *configuration specification* (*config spec*) -- in a format which
is somewhat similar to the `configparser`-like `*.ini`-format --
defines what options are legal, what their default values are (if
any; an option without a default value is required) and how their
values shall be converted:

    [some_section]
    required_opt
    opt_with_default = 42 :: int
    another_opt = foo, bar :: list_of_str

The raw values are taken from a Pyramid-like settings mapping (e.g.,
the `[app:main]` part of the application's *.ini* file parsed by
Pyramid) in which each option is specified in the
`<section name>.<option name> = <option value>` format.

>>> spec = '''
...     [shop]
...     currency
...     page_size = 20 :: int
...     languages = en, pl :: list_of_str
... '''
>>> section = Config.section(spec, settings={
...     'shop.currency': 'PLN',
...     'shop.page_size': '50',
...     'pyramid.reload_templates': 'true',
... })
>>> section
ConfigSection('shop', {'currency': 'PLN', 'languages': ['en', 'pl'], 'page_size': 50})
>>> section.page_size
50
"""

import re

from formbind.common_helpers import ascii_str, as_unicode
from formbind.log_helpers import get_logger


LOGGER = get_logger(__name__)


class ConfigError(Exception):

    """
    A generic, `Config`-related, exception class.

    >>> print(ConfigError('Some Message'))
    [configuration-related error] Some Message
    """

    def __str__(self):
        return '[configuration-related error] ' + super().__str__()


class NoConfigOptionError(ConfigError, KeyError):

    def __init__(self, sect_name, opt_name):
        self.sect_name = sect_name
        self.opt_name = opt_name
        super().__init__(sect_name, opt_name)

    def __str__(self):
        return '[configuration-related error] no option `{}` in section `{}`'.format(
            ascii_str(self.opt_name),
            ascii_str(self.sect_name))


class ConfigSection(dict):

    """
    A subclass of `dict` that represents a configuration section.

    It maps option names to converted option values; it keeps also
    the name of the section (`sect_name`).  Options can be accessed
    also as attributes.

    >>> s = ConfigSection('some_sect', {'some_opt': 'FOO_bar,spam'})
    >>> s
    ConfigSection('some_sect', {'some_opt': 'FOO_bar,spam'})
    >>> s['some_opt']
    'FOO_bar,spam'
    >>> s.some_opt
    'FOO_bar,spam'
    >>> s['another_opt']     # doctest: +ELLIPSIS
    Traceback (most recent call last):
      ...
    formbind.config.NoConfigOptionError: ... `another_opt` in section `some_sect`
    """

    def __init__(self, sect_name, opt_name_to_value=None):
        self.sect_name = sect_name
        super().__init__(opt_name_to_value or {})

    def __repr__(self):
        return '{}({!r}, {!r})'.format(
            self.__class__.__qualname__,
            self.sect_name,
            dict(sorted(self.items())))

    def __missing__(self, key):
        raise NoConfigOptionError(self.sect_name, key)

    def __getattr__(self, name):
        if name.startswith('_'):
            raise AttributeError(name)
        try:
            return self[name]
        except KeyError:
            raise AttributeError(
                '{!a} has no option {!a}'.format(self, name)) from None


def _str_to_bool(s):
    """
    >>> _str_to_bool('Yes'), _str_to_bool('off')
    (True, False)
    """
    try:
        return _LOWERCASE_TO_BOOL[s.strip().lower()]
    except KeyError:
        raise ValueError('{!a} is not a valid boolean value'.format(s)) from None

_LOWERCASE_TO_BOOL = {
    '1': True, 'y': True, 'yes': True, 't': True, 'true': True, 'on': True,
    '0': False, 'n': False, 'no': False, 'f': False, 'false': False, 'off': False,
}


def _make_list_converter(item_converter, name, delimiter=','):

    def converter(s):
        s = s.strip()
        if s.endswith(delimiter):
            # remove trailing delimiter
            s = s[:-len(delimiter)].rstrip()
        if s:
            return [item_converter(item.strip())
                    for item in s.split(delimiter)]
        else:
            return []

    converter.__name__ = name
    converter.item_converter = item_converter
    converter.delimiter = delimiter
    return converter


class Config(object):

    """
    The namespace of the configuration-parsing machinery.

    See the module docs for the description of the *config spec*
    format.  Use the :meth:`section` class method to obtain a
    :class:`ConfigSection`.
    """

    DEFAULT_CONVERTER_SPEC = 'str'
    BASIC_CONVERTERS = {
        'str': str,
        'bool': _str_to_bool,
        'int': int,
        'float': float,
        'list_of_str': _make_list_converter(str, 'list_of_str'),
        'list_of_int': _make_list_converter(int, 'list_of_int'),
    }
    assert DEFAULT_CONVERTER_SPEC in BASIC_CONVERTERS

    @classmethod
    def section(cls, config_spec, settings=None, custom_converters=None):
        """
        Get the (only) section defined by `config_spec`, populated from
        `settings` (a Pyramid-like settings mapping; if `None`, only the
        defaults are used).

        Raises:
            :exc:`ConfigError` if the config spec is not valid, or
            some value cannot be converted, or any required options
            are missing, or any illegal options are present.
        """
        converters = dict(cls.BASIC_CONVERTERS, **(custom_converters or {}))
        sect_name, opt_specs = cls._parse_config_spec(config_spec)
        raw_values = cls._get_raw_section_values(sect_name, settings or {})
        illegal_opt_names = sorted(raw_values.keys() - opt_specs.keys())
        if illegal_opt_names:
            raise ConfigError('illegal options in section `{}`: {}'.format(
                ascii_str(sect_name),
                ', '.join(map(ascii_str, illegal_opt_names))))
        section = ConfigSection(sect_name)
        conversion_errors = []
        missing_opt_names = []
        for opt_name, (default, converter_spec) in opt_specs.items():
            raw_value = raw_values.get(opt_name, default)
            if raw_value is None:
                missing_opt_names.append(opt_name)
                continue
            converter = converters.get(converter_spec)
            if converter is None:
                conversion_errors.append(
                    'unknown config value converter `{}` (for `{}.{}`)'.format(
                        ascii_str(converter_spec),
                        ascii_str(sect_name),
                        ascii_str(opt_name)))
                continue
            try:
                section[opt_name] = converter(raw_value)
            except Exception as exc:
                conversion_errors.append(
                    'error when applying config value converter {!a} '
                    'to `{}.{}`={!a} ({}: {})'.format(
                        converter_spec,
                        ascii_str(sect_name),
                        ascii_str(opt_name),
                        raw_value,
                        type(exc).__qualname__,
                        ascii_str(exc)))
        if missing_opt_names:
            raise ConfigError('missing required options in section `{}`: {}'.format(
                ascii_str(sect_name),
                ', '.join(map(ascii_str, missing_opt_names))))
        if conversion_errors:
            raise ConfigError('; '.join(conversion_errors))
        return section

    @classmethod
    def _parse_config_spec(cls, config_spec):
        sect_name = None
        opt_specs = {}
        for line in config_spec.splitlines():
            line = line.strip()
            if not line or line.startswith(('#', ';')):
                continue
            sect_match = cls._SECT_HEADER_REGEX.match(line)
            if sect_match:
                if sect_name is not None:
                    raise ConfigError(
                        'config spec should define exactly one section')
                sect_name = sect_match.group('sect_name')
                continue
            if sect_name is None:
                raise ConfigError(
                    'option spec {!a} not preceded by any section header'.format(line))
            opt_match = cls._OPT_SPEC_REGEX.match(line)
            if opt_match is None:
                raise ConfigError('malformed option spec {!a}'.format(line))
            opt_name = opt_match.group('opt_name')
            default = opt_match.group('default')
            if default is not None:
                default = default.strip()
            converter_spec = opt_match.group('converter_spec') or cls.DEFAULT_CONVERTER_SPEC
            opt_specs[opt_name] = (default, converter_spec)
        if sect_name is None:
            raise ConfigError('config spec does not define any section')
        return sect_name, opt_specs

    @staticmethod
    def _get_raw_section_values(sect_name, settings):
        raw_values = {}
        prefix = sect_name + '.'
        for key, value in settings.items():
            if not isinstance(key, str) or not key.startswith(prefix):
                continue
            if not isinstance(value, str):
                LOGGER.warning(
                    'Coercing non-`str` value %a (of setting %s) '
                    'to `str` (before further conversion)',
                    value, ascii_str(key))
                value = as_unicode(value)
            raw_values[key[len(prefix):]] = value
        return raw_values

    _SECT_HEADER_REGEX = re.compile(r'\A\[\s*(?P<sect_name>[^\]\s]+)\s*\]\Z')
    _OPT_SPEC_REGEX = re.compile(r'''
        \A
        (?P<opt_name> [^\s=:]+ )
        \s*
        (?: = (?P<default> .*? ) )?
        \s*
        (?: :: \s* (?P<converter_spec> \S+ ) )?
        \Z
    ''', re.VERBOSE)
