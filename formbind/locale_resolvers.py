# Copyright (c) 2026 NASK. All rights reserved.

"""
Locale resolution: determining the locale of the current request
(it governs the number format used by converters, and the format of
numbers in constraint violation messages).

Locale resolvers are consulted in the order of their descending
`priority`; the first one that returns a locale wins; if none does,
the configured default locale is used.  Resolution never fails.
"""

from babel import (
    Locale,
    UnknownLocaleError,
)

from formbind.log_helpers import get_logger


LOGGER = get_logger(__name__)


def parse_locale_tag(tag):
    """
    Parse a locale tag (such as ``"de-DE"``, ``"de_DE"`` or ``"de"``).

    Returns:
        A :class:`babel.Locale` instance, or `None` if the tag is not
        a (known) locale.

    >>> parse_locale_tag('de-DE')
    Locale('de', territory='DE')
    >>> parse_locale_tag('pl_PL')
    Locale('pl', territory='PL')
    >>> parse_locale_tag('xx-whatever!') is None
    True
    """
    try:
        return Locale.parse(tag.strip().replace('_', '-'), sep='-')
    except (ValueError, TypeError, UnknownLocaleError) as exc:
        LOGGER.debug('Skipping unusable locale tag %a (%s)', tag, exc)
        return None


def match_supported_locale(locale, supported_locales):
    """
    Match the given locale against the sequence of supported locales.

    Returns:
        * `locale` itself if `supported_locales` is empty; otherwise:
        * the supported locale that is equal to `locale`, or
        * the supported locale whose language is the same as the
          language of `locale` and which has no territory specified, or
        * if `locale` has no territory specified: the first supported
          locale whose language is the same as the language of `locale`;
        * `None` if none of the above applies.

    >>> supported = [Locale.parse('en_US'), Locale.parse('de'), Locale.parse('pl_PL')]
    >>> match_supported_locale(Locale.parse('en_US'), supported)
    Locale('en', territory='US')
    >>> match_supported_locale(Locale.parse('de_AT'), supported)
    Locale('de')
    >>> match_supported_locale(Locale.parse('pl'), supported)
    Locale('pl', territory='PL')
    >>> match_supported_locale(Locale.parse('en_GB'), supported) is None
    True
    """
    if not supported_locales:
        return locale
    for candidate in supported_locales:
        if candidate == locale:
            return candidate
    for candidate in supported_locales:
        if candidate.language == locale.language and candidate.territory is None:
            return candidate
    if locale.territory is None:
        for candidate in supported_locales:
            if candidate.language == locale.language:
                return candidate
    return None



#
# Locale resolvers

class LocaleResolver(object):

    """
    The base class for locale resolvers.

    Subclasses must implement the :meth:`resolve` method.
    """

    #: Resolvers with greater priorities are consulted first.
    priority = 0

    def __init__(self, supported_locales=(), priority=None):
        self.supported_locales = tuple(supported_locales)
        if priority is not None:
            self.priority = priority

    def __repr__(self):
        return '<{} priority={!r}>'.format(self.__class__.__qualname__, self.priority)

    def resolve(self, request):
        """
        Get the locale for the given request, or `None` if this
        resolver is not able to determine it.
        """
        raise NotImplementedError

    def _from_tag(self, tag):
        locale = parse_locale_tag(tag)
        if locale is None:
            return None
        return match_supported_locale(locale, self.supported_locales)


class RequestParamLocaleResolver(LocaleResolver):

    """
    Takes the locale from a request (query or form) parameter --
    by default, the one named ``_LOCALE_`` (just as Pyramid's default
    locale negotiator does).
    """

    priority = 100

    def __init__(self, param_name='_LOCALE_', **kwargs):
        self.param_name = param_name
        super().__init__(**kwargs)

    def resolve(self, request):
        tag = request.params.get(self.param_name)
        if tag is not None and not isinstance(tag, str):
            LOGGER.debug('Skipping non-textual value of the %a request '
                         'parameter (%a)', self.param_name, tag)
            return None
        if not tag:
            return None
        return self._from_tag(tag)


class AcceptLanguageLocaleResolver(LocaleResolver):

    """
    Takes the locale from the *Accept-Language* request header: the
    language ranges are tried in the order of their descending quality
    values (the wildcard, zero-quality and unusable ones are skipped).
    """

    priority = 0

    def resolve(self, request):
        accept_language = request.accept_language
        # (`parsed` is `None` if the header is missing or invalid)
        parsed = getattr(accept_language, 'parsed', None) or ()
        for tag, quality in sorted(parsed, key=lambda item: item[1], reverse=True):
            if tag == '*' or quality <= 0:
                continue
            locale = self._from_tag(tag)
            if locale is not None:
                return locale
        return None


class LocaleResolverChain(object):

    """
    The request locale resolution entry point.

    Constructor args:
        `resolvers`:
            An iterable of :class:`LocaleResolver` instances (they will
            be sorted by their priorities; resolvers with equal
            priorities keep their original order).
        `default_locale`:
            The fallback locale (a :class:`babel.Locale` or a tag).

    >>> chain = LocaleResolverChain([], 'pl_PL')
    >>> chain.resolve(request=None)
    Locale('pl', territory='PL')
    """

    def __init__(self, resolvers, default_locale):
        self.resolvers = sorted(resolvers, key=lambda r: r.priority, reverse=True)
        if not isinstance(default_locale, Locale):
            default_locale = Locale.parse(default_locale)
        self.default_locale = default_locale

    def resolve(self, request):
        for resolver in self.resolvers:
            locale = resolver.resolve(request)
            if locale is not None:
                LOGGER.debug('Locale %s resolved by %a', locale, resolver)
                return locale
        LOGGER.debug('Using the default locale %s', self.default_locale)
        return self.default_locale
