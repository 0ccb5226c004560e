import types
import typing
from typing import Union, Iterable, Optional

import injector
from injector import T

from auto_prop.inject.auto_prop_module import AutoPropModule
from auto_prop.inject.parser_factory import ParserFactory
from auto_prop.inject.prop_exceptions import PropException
from auto_prop.inject.prop_factory import PropFactory
from auto_prop.inject.prop_field import has_prop_fields, prop_dependency, collect_prop_parameters
from auto_prop.inject.prop_members_injector import PropMembersInjector
from auto_prop.util.logger import LoggerFacade

PropInjectorT = typing.ForwardRef("PropInjector")


class PropProvider(injector.Provider):
    """
    Provides the Prop requested by a dependency annotated as Annotated[Prop[T], Named(...)].
    """

    def __init__(self, interface: typing.Any):
        self.interface = interface
        self.prop_field = prop_dependency(None, repr(interface), interface)

    def get(self, injector_: injector.Injector):
        members_injector = injector_.members_injector() if isinstance(injector_, PropInjector) else None
        if members_injector is None:
            raise PropException(f"Could not provide {self.interface} as no AutoPropModule was installed.")
        return members_injector.provide(self.prop_field.property_name, self.prop_field.target_type)


class PropBinder(injector.Binder):
    """
    Binder resolving Prop dependencies, so that props can be injected in constructors as well as fields.
    """

    def provider_for(self, interface: typing.Any, to: typing.Any = None) -> injector.Provider:
        if to is None and prop_dependency(None, repr(interface), interface) is not None:
            return PropProvider(interface)
        return super().provider_for(interface, to)


_BUILTIN_PROVIDERS = (injector.ClassProvider, injector.InstanceProvider, injector.CallableProvider,
                      injector.MultiBindProvider, PropProvider)


class PropInjector(injector.Injector):
    """
    Injector that populates the prop fields of every object it creates, when an AutoPropModule is installed in it or
    in a parent injector. Constructor parameters annotated as Annotated[Prop[T], Named(...)] receive the same props.

    Once the modules are installed the bindings are scanned, so that errors in the prop declarations of the bound
    classes are raised when the injector is created. Bound instances, custom providers and modules with provider
    methods have their prop fields populated at that point, as the injector does not create them.
    """

    def __init__(
            self,
            modules: Union[injector._InstallableModuleType, Iterable[injector._InstallableModuleType]] = None,
            auto_bind: bool = True,
            parent: injector.Injector = None,
    ):
        super().__init__(None, auto_bind, parent)
        self.binder = PropBinder(self, auto_bind=auto_bind, parent=parent.binder if parent is not None else None)
        self.binder.bind(injector.Injector, to=self)
        self.binder.bind(injector.Binder, to=self.binder)

        if not modules:
            modules = []
        elif not hasattr(modules, '__iter__'):
            modules = [modules]

        for module in modules:
            self.binder.install(module)

        self.scan_bindings()

    def members_injector(self) -> Optional[PropMembersInjector]:
        binder = self.binder
        while binder is not None:
            binding = binder._bindings.get(PropMembersInjector)
            if binding is not None:
                return binding.provider.get(self)
            binder = binder.parent
        return None

    def create_object(self, cls: typing.Type[T], additional_kwargs: typing.Any = None) -> T:
        collect_prop_parameters(cls)
        instance = super().create_object(cls, additional_kwargs)
        if not has_prop_fields(cls):
            return instance
        members_injector = self.members_injector()
        if members_injector is None:
            LoggerFacade.warn(f"{cls.__qualname__} has prop fields but no AutoPropModule was installed.")
            return instance
        return members_injector.inject_members(instance)

    def create_child_injector(self, *args: typing.Any, **kwargs: typing.Any) -> PropInjectorT:
        kwargs['parent'] = self
        return PropInjector(*args, **kwargs)

    def scan_bindings(self):
        members_injector = self.members_injector()
        if members_injector is None:
            return
        injected: set[int] = set()
        for interface, binding in list(self.binder._bindings.items()):
            provider = binding.provider
            if isinstance(provider, injector.ClassProvider):
                members_injector.validate(provider._cls)
            elif isinstance(provider, injector.InstanceProvider):
                self._inject_once(members_injector, provider._instance, injected)
            elif isinstance(provider, injector.CallableProvider):
                owner = getattr(provider._callable, '__self__', None)
                if isinstance(provider._callable, types.MethodType) and isinstance(owner, injector.Module):
                    self._inject_once(members_injector, owner, injected)
            elif not isinstance(provider, _BUILTIN_PROVIDERS):
                self._inject_once(members_injector, provider, injected)

    @staticmethod
    def _inject_once(members_injector: PropMembersInjector, instance: object, injected: set[int]):
        if id(instance) in injected:
            return
        injected.add(id(instance))
        members_injector.inject_members(instance)


def create_prop_injector(
        modules: Union[injector._InstallableModuleType, Iterable[injector._InstallableModuleType]] = None,
        base_package: Optional[str] = None,
        prop_factory: Optional[PropFactory] = None,
        parser_factory: Optional[ParserFactory] = None,
        fail_fast: Optional[bool] = None,
        auto_bind: bool = True) -> PropInjector:
    """
    Create a PropInjector with an AutoPropModule installed ahead of the modules provided.
    """
    if not modules:
        modules = []
    elif not hasattr(modules, '__iter__'):
        modules = [modules]
    all_modules = [AutoPropModule(base_package, prop_factory, parser_factory, fail_fast)]
    all_modules.extend(modules)
    return PropInjector(all_modules, auto_bind=auto_bind)
