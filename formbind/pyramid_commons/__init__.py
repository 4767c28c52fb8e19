# Copyright (c) 2026 NASK. All rights reserved.

"""
The Pyramid integration: binding declarations, view base classes
(invoking handlers with bound values and binding results), as well as
the application configuration helpers.
"""

from formbind.pyramid_commons._pyramid_commons import (
    CONFIG_SPEC,
    exc_to_http_exc,
    get_request_locale,

    BindingSpec,

    AbstractViewBase,
    BindingViewBase,

    HttpResource,
    ConfigHelper,
)


__all__ = [
    'CONFIG_SPEC',
    'exc_to_http_exc',
    'get_request_locale',

    'BindingSpec',

    'AbstractViewBase',
    'BindingViewBase',

    'HttpResource',
    'ConfigHelper',
]
