# Copyright (c) 2026 NASK. All rights reserved.

from pyramid.config import Configurator
from pyramid.httpexceptions import (
    HTTPException,
    HTTPBadRequest,
    HTTPServerError,
)

from formbind.binding import (
    Binder,
    BindingDescriptor,
)
from formbind.class_helpers import attr_required
from formbind.common_helpers import (
    ascii_str,
    py_identifier_str,
)
from formbind.config import (
    Config,
    ConfigError,
)
from formbind.constraints import ConstraintValidator
from formbind.converters import default_converter_registry
from formbind.exceptions import (
    BindingConfigError,
    ParamBindingError,
)
from formbind.locale_resolvers import (
    AcceptLanguageLocaleResolver,
    LocaleResolverChain,
    RequestParamLocaleResolver,
    parse_locale_tag,
)
from formbind.log_helpers import get_logger


LOGGER = get_logger(__name__)



#
# Auxiliary constants

CONFIG_SPEC = '''
    [formbind]
    default_locale = en_US
    supported_locales = :: list_of_str
    locale_param_name = _LOCALE_
    accept_language_enabled = yes :: bool
    warn_on_unconsulted_result = yes :: bool
'''



#
# Helper functions

def exc_to_http_exc(exc):
    """
    Takes any :exc:`~exceptions.Exception` instance, returns a
    :exc:`pyramid.httpexceptions.HTTPException` instance.
    """
    if isinstance(exc, HTTPException):
        code = getattr(exc, 'code', None)
        if isinstance(code, int) and 200 <= code < 500:
            LOGGER.debug(
                'HTTPException: %a ("%s", code: %s)',
                exc, ascii_str(exc), code)
        else:
            LOGGER.error(
                'HTTPException: %a ("%s", code: %a)',
                exc, ascii_str(exc), code,
                exc_info=True)
        http_exc = exc
    elif isinstance(exc, ParamBindingError):
        LOGGER.debug(
            'Request parameters not valid: %a (public message: "%s")',
            exc, ascii_str(exc.public_message))
        http_exc = HTTPBadRequest(exc.public_message)
    else:
        LOGGER.error(
            'Non-HTTPException/ParamBindingError exception: %a',
            exc,
            exc_info=True)
        http_exc = HTTPServerError()
    return http_exc


def get_request_locale(request):
    """
    Resolve the locale of the given request (using the locale
    resolver chain installed by :class:`ConfigHelper`).

    It is the implementation of the ``request.formbind_locale``
    property (*reified*, so the resolution is done at most once
    per request).
    """
    return request.registry.formbind_locale_resolver.resolve(request)



#
# Binding declarations

class BindingSpec(object):

    """
    A declaration of a single binding (to be placed, as a value, in
    the `binding_specs` mapping of a :class:`BindingViewBase` subclass;
    the corresponding key is the binding identity).

    Constructor args/kwargs:
        `target_type`:
            The declared target type, e.g.: `int`, `Optional[Decimal]`,
            `list[bool]`.
        `source` (default: ``'params'``):
            Where the raw values are taken from: ``'params'`` (both
            the query string and the form data), ``'GET'`` (the query
            string only) or ``'POST'`` (the form data only).
        `param_name` (default: `None`):
            The name of the request parameter; if `None`, the binding
            identity is used.
        `deferred` (default: :obj:`True`):
            Whether failures are to be recorded in the binding result
            (if false: they make the request fail with *HTTP 400*).
        `constraints` (default: empty tuple):
            A sequence of :class:`formbind.constraints.Constraint`
            instances.
        `default` (default: `None`):
            The raw (textual) value to be used when the parameter
            has not been submitted at all.
    """

    legal_sources = ('params', 'GET', 'POST')

    def __init__(self, target_type,
                 source='params',
                 param_name=None,
                 deferred=True,
                 constraints=(),
                 default=None):
        if source not in self.legal_sources:
            raise BindingConfigError(
                'illegal binding source {!a} (should be one of: {})'.format(
                    source, ', '.join(self.legal_sources)))
        if default is not None and not isinstance(default, str):
            raise BindingConfigError(
                'the default raw value should be a str (got: {!a})'.format(default))
        self.target_type = target_type
        self.source = source
        self.param_name = param_name
        self.deferred = deferred
        self.constraints = tuple(constraints)
        self.default = default

    def __repr__(self):
        return ('{0.__class__.__qualname__}({0.target_type!r}, source={0.source!r}, '
                'param_name={0.param_name!r}, deferred={0.deferred!r}, '
                'constraints={0.constraints!r}, default={0.default!r})'.format(self))

    def make_descriptor(self, name, request):
        param_name = self.param_name or name
        raw_values = []
        for value in getattr(request, self.source).getall(param_name):
            if isinstance(value, str):
                raw_values.append(value)
            else:
                # (e.g., an uploaded file)
                LOGGER.debug('Ignoring non-textual value %a of parameter %a',
                             value, param_name)
        return BindingDescriptor(
            name=name,
            target_type=self.target_type,
            raw_values=raw_values,
            constraints=self.constraints,
            deferred=self.deferred,
            default_raw_value=self.default)



#
# View base classes

class AbstractViewBase(object):

    # to be specified as a keyword argument for concrete_view_class()
    resource_id = None

    @classmethod
    def validate_url_pattern(cls, url_pattern):
        """
        In subclasses this method may implement URL path pattern validation.
        """

    @classmethod
    def concrete_view_class(cls, resource_id, config):
        """
        Create a concrete view subclass (for a particular HTTP resource).

        This method is called automatically (by
        :meth:`HttpResource.configure_views`).

        Kwargs:
            `resource_id` (string):
                The identifier of the HTTP resource (as given as the
                `resource_id` argument for the :class:`HttpResource`
                constructor).
            `config`:
                The :class:`pyramid.config.Configurator` instance used
                to configure the whole application.

        Returns:
            A concrete subclass of the class.
        """
        _resource_id = resource_id

        class view_class(cls):
            resource_id = _resource_id

        view_class.__name__ = '_{0}_subclass_for_{1}'.format(
            cls.__name__,
            py_identifier_str(resource_id).lstrip('_'))

        return view_class

    @classmethod
    def get_default_http_methods(cls):
        """
        Get name(s) of the HTTP method(s) that are supported by default.

        This method should return a string or a sequence of strings.
        The default implementation returns ``('GET', 'POST')``.
        """
        return ('GET', 'POST')

    @attr_required('resource_id')
    def __init__(self, context, request):
        self.request = request

    def __call__(self):
        self.params = self.prepare_params()
        return self.make_response()

    def prepare_params(self):
        raise NotImplementedError

    def make_response(self):
        raise NotImplementedError



class BindingViewBase(AbstractViewBase):

    """
    The base class for views whose request parameters are bound
    (converted and validated) according to declared bindings.

    Concrete subclasses should:

    * specify the `binding_specs` mapping (binding identities mapped
      to :class:`BindingSpec` instances) -- either as a class
      attribute or as the ``binding_specs`` item of `view_properties`
      passed to the :class:`HttpResource` constructor;

    * implement the :meth:`make_response` method (the *handler*): it
      can use `self.params` (a dict that maps binding identities to
      bound values) and `self.binding_result` (the
      :class:`formbind.binding.BindingResult`, also available as
      `self.request.binding_result`).

    The handler is always invoked exactly once per request, no matter
    whether any *deferred* bindings failed.  Only failures of
    *non-deferred* bindings prevent invoking it (then
    :exc:`formbind.exceptions.ParamValueBindingError` is raised,
    which is translated into *HTTP 400 Bad Request*).

    If the handler finishes (without raising an exception) but has
    not called any query method of the binding result although the
    result contains some errors, a warning is logged (unless disabled
    with the ``formbind.warn_on_unconsulted_result`` setting).
    """

    # to be specified as a class attribute or
    # as a keyword argument for concrete_view_class()
    binding_specs = None

    @classmethod
    def concrete_view_class(cls, resource_id, config, binding_specs=None):
        view_class = super(BindingViewBase, cls).concrete_view_class(
            resource_id=resource_id,
            config=config)
        if binding_specs is not None:
            view_class.binding_specs = dict(binding_specs)
        if view_class.binding_specs is None:
            raise BindingConfigError(
                'no binding specs for the resource {!a}'.format(resource_id))
        binder = getattr(config.registry, 'formbind_binder', None)
        if binder is None:
            raise BindingConfigError(
                'no binder installed in the registry (the Pyramid '
                'configurator should be prepared with ConfigHelper)')
        # a missing converter makes the application startup fail
        binder.check_target_types(
            spec.target_type for spec in view_class.binding_specs.values())
        return view_class

    def __init__(self, context, request):
        super(BindingViewBase, self).__init__(context, request)
        self.binding_result = None

    def __call__(self):
        self.params = self.prepare_params()
        self.binding_result.seal()
        self.request.binding_result = self.binding_result
        response = self.make_response()
        self.check_binding_result_consulted()
        return response

    def prepare_params(self):
        locale = self.request.formbind_locale
        descriptors = [
            spec.make_descriptor(name, self.request)
            for name, spec in self.binding_specs.items()]
        bound_values, self.binding_result = self.request.registry.formbind_binder.bind(
            descriptors,
            locale)
        return bound_values

    def check_binding_result_consulted(self):
        if not self.binding_result.has_unconsulted_errors:
            return
        if not self.request.registry.formbind_config.warn_on_unconsulted_result:
            return
        LOGGER.warning(
            'The handler of %s (resource %a) completed without '
            'consulting the binding result (although binding '
            'failed): %a',
            self.__class__.__name__,
            self.resource_id,
            self.binding_result)



#
# Application startup/configuration

class HttpResource(object):

    """
    A class of containers of HTTP resource properties.

    Required constructor arguments:
        `resource_id` (string):
            The identifier of the HTTP resource.
            It will be used as the Pyramid route name.
        `url_pattern` (string):
            A URL path pattern, e.g.: ``"/order"``.

    Optional constructor arguments:
        `view_base` (:class:`AbstractViewBase` subclass):
            The base class of the view; default: :class:`BindingViewBase`.
        `view_properties` (:class:`dict`):
            A dictionary of keyword arguments that will be passed in --
            in addition to `resource_id` and `config` -- to the
            :meth:`concrete_view_class` class method of the `view_base`
            class (for :class:`BindingViewBase`: ``binding_specs``).
        `http_methods` (string, or iterable of strings, or ``None``):
            Name(s) of HTTP method(s) enabled for the resource; if
            ``None`` then the name(s) will be determined by calling
            the :meth:`~AbstractViewBase.get_default_http_methods`
            of the concrete view class; default: ``None``.
    """

    def __init__(self, resource_id,
                 url_pattern,
                 view_base=BindingViewBase,
                 view_properties=None,
                 http_methods=None):
        self.resource_id = resource_id
        self.url_pattern = url_pattern
        self.view_properties = (
            {} if view_properties is None
            else view_properties)
        self.view_base = view_base
        self.http_methods = http_methods

    def configure_views(self, config):
        """
        Automatically called by :meth:`ConfigHelper.make_wsgi_app` or
        :meth:`ConfigHelper.complete`.
        """
        route_name = self.resource_id
        view_class = self.view_base.concrete_view_class(
            resource_id=self.resource_id,
            config=config,
            **self.view_properties)
        view_class.validate_url_pattern(self.url_pattern)
        http_methods = (
            view_class.get_default_http_methods() if self.http_methods is None
            else self.http_methods)
        actual_http_methods = (
            (http_methods,) if isinstance(http_methods, str)
            else tuple(http_methods))
        config.add_route(route_name, self.url_pattern)
        config.add_view(
            view=view_class,
            route_name=route_name,
            request_method=actual_http_methods)


class ConfigHelper(object):

    """
    Class of an object that automatizes necessary WSGI app setup steps.

    Typical usage in your Pyramid application's ``__init__.py``:

    .. code-block:: python

        RESOURCES = <list of HttpResource instances>

        def main(global_config, **settings):
            helper = ConfigHelper(
                settings=settings,
                resources=RESOURCES,
            )
            ...  # <- here you can call any methods of the helper.config object
            ...  #    which is a pyramid.config.Configurator instance (e.g.,
            ...  #    helper.converter_registry.register(...) can be called)
            return helper.make_wsgi_app()

    The ``formbind.*`` settings are read according to :data:`CONFIG_SPEC`.

    Note: all constructor arguments should be specified as keyword arguments.
    """

    #: (overridable attribute)
    config_spec = CONFIG_SPEC

    def __init__(self,
                 settings,
                 resources,
                 converter_registry=None,
                 validator=None,
                 locale_resolvers=(),
                 **rest_configurator_kwargs):
        self.settings = self.prepare_settings(settings)
        self.formbind_config = Config.section(self.config_spec, self.settings)
        self.resources = resources
        self.converter_registry = (
            converter_registry if converter_registry is not None
            else self.make_converter_registry())
        self.validator = (
            validator if validator is not None
            else self.make_validator())
        self.extra_locale_resolvers = list(locale_resolvers)
        self.rest_configurator_kwargs = rest_configurator_kwargs
        self.config = self.prepare_config(self.make_config())
        self._completed = False

    def make_wsgi_app(self):
        if not self._completed:
            self.complete()
        return self.config.make_wsgi_app()

    # overridable/extendable methods (hooks):

    def prepare_settings(self, settings):
        return dict(settings)

    def make_config(self):
        return Configurator(
            settings=self.settings,
            **self.rest_configurator_kwargs)

    def prepare_config(self, config):
        config.registry.formbind_config = self.formbind_config
        config.registry.formbind_converter_registry = self.converter_registry
        config.registry.formbind_binder = self.make_binder()
        config.registry.formbind_locale_resolver = self.make_locale_resolver()
        config.add_request_method(get_request_locale, 'formbind_locale', reify=True)
        return config

    def make_converter_registry(self):
        return default_converter_registry()

    def make_validator(self):
        return ConstraintValidator()

    def make_binder(self):
        return Binder(self.converter_registry, validator=self.validator)

    def make_locale_resolver(self):
        default_locale = self._parse_configured_locale(self.formbind_config.default_locale)
        supported_locales = [
            self._parse_configured_locale(tag)
            for tag in self.formbind_config.supported_locales]
        resolvers = list(self.extra_locale_resolvers)
        if self.formbind_config.locale_param_name:
            resolvers.append(RequestParamLocaleResolver(
                param_name=self.formbind_config.locale_param_name,
                supported_locales=supported_locales))
        if self.formbind_config.accept_language_enabled:
            resolvers.append(AcceptLanguageLocaleResolver(
                supported_locales=supported_locales))
        return LocaleResolverChain(resolvers, default_locale)

    def complete(self):
        self.config.add_view(view=self.exception_view, context=Exception)
        self.config.add_view(view=self.exception_view, context=HTTPException)
        for res in self.resources:
            res.configure_views(self.config)
        # no registrations are allowed after the startup
        self.converter_registry.freeze()
        self._completed = True

    @classmethod
    def exception_view(cls, exc, request):
        http_exc = exc_to_http_exc(exc)
        assert isinstance(http_exc, HTTPException)
        # force a plain-text (non-HTML) response
        # if http_exc.body has not been set yet
        environ_copy = request.environ.copy()
        environ_copy.pop('HTTP_ACCEPT', None)
        http_exc.prepare(environ_copy)
        return http_exc

    @staticmethod
    def _parse_configured_locale(tag):
        locale = parse_locale_tag(tag)
        if locale is None:
            raise ConfigError('{!a} is not a valid locale'.format(tag))
        return locale
