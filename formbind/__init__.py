# Copyright (c) 2026 NASK. All rights reserved.

"""
*formbind*: locale-aware binding (conversion and validation) of
request parameters for Pyramid applications.

See the submodules:

* :mod:`formbind.binding` -- binding descriptors, the binder and the
  binding result;
* :mod:`formbind.converters` -- converters and their registry;
* :mod:`formbind.constraints` -- constraints and the validator;
* :mod:`formbind.locale_resolvers` -- request locale resolution;
* :mod:`formbind.pyramid_commons` -- the Pyramid integration.
"""
