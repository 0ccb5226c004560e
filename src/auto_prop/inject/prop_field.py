import collections
import dataclasses
import inspect
import threading
import typing
from typing import Optional

import injector

from auto_prop.core.prop import Prop
from auto_prop.inject.prop_exceptions import PropDeclarationException, RequiredNamedAnnotationException, \
    DuplicatePropException, describe_prop
from auto_prop.properties.prop_marker import PropMarker, Named
from auto_prop.util.logger import LoggerFacade

prop_field_lock = threading.RLock()

_prop_fields: dict[typing.Type, list["PropField"]] = {}
_prop_parameters: dict[typing.Type, list["PropField"]] = {}


@dataclasses.dataclass(frozen=True)
class PropField:
    field_name: str
    property_name: str
    target_type: typing.Any


def has_prop_fields(cls: typing.Type) -> bool:
    return any(isinstance(v, PropMarker) for klass in cls.__mro__ for v in vars(klass).values())


@injector.synchronized(prop_field_lock)
def collect_prop_fields(cls: typing.Type) -> list[PropField]:
    """
    :param cls: the class to scan.
    :return: the prop fields declared on the class or its bases, validated. Cached per class.
    :raises PropDeclarationException: when a field can never be injected.
    """
    if cls in _prop_fields.keys():
        return _prop_fields[cls]

    markers: dict[str, PropMarker] = {}
    for klass in reversed(cls.__mro__):
        for field_name, value in vars(klass).items():
            if isinstance(value, PropMarker):
                markers[field_name] = value
            elif field_name in markers.keys():
                del markers[field_name]

    fields = [
        _create_prop_field(cls, field_name, marker, field_hint(cls, field_name))
        for field_name, marker in markers.items()
    ]
    _validate_unique(cls, fields)

    if len(fields) != 0:
        LoggerFacade.debug(f"Found prop fields {fields} on {cls.__qualname__}.")
    _prop_fields[cls] = fields
    return fields


@injector.synchronized(prop_field_lock)
def collect_prop_parameters(cls: typing.Type) -> list[PropField]:
    """
    :return: the parameters of the injected constructor of cls requesting a Prop, validated. Cached per class.
    """
    if cls in _prop_parameters.keys():
        return _prop_parameters[cls]

    parameters = []
    init = getattr(cls, '__init__', None)
    if inspect.isfunction(init):
        for parameter_name, interface in injector.get_bindings(init).items():
            parameter = prop_dependency(cls, parameter_name, interface)
            if parameter is not None:
                parameters.append(parameter)

    _prop_parameters[cls] = parameters
    return parameters


def field_hint(cls: typing.Type, field_name: str):
    """
    Resolve the annotation of one field, from the nearest class in the MRO annotating it. The other annotations of
    the class are left unresolved.
    """
    for klass in cls.__mro__:
        annotations = inspect.get_annotations(klass)
        if field_name not in annotations.keys():
            continue
        holder = type(klass.__name__, (), {'__annotations__': {field_name: annotations[field_name]},
                                           '__module__': klass.__module__})
        try:
            return typing.get_type_hints(holder, localns=dict(vars(klass)), include_extras=True)[field_name]
        except NameError as e:
            raise PropDeclarationException(f"Could not resolve the annotation of {cls.__qualname__}.{field_name}: "
                                           f"{e}") from e
    return None


def prop_dependency(owner: typing.Optional[typing.Type], name: str, interface) -> typing.Optional[PropField]:
    """
    :return: the prop requested by a dependency annotated as Annotated[Prop[T], Named(...)], None when the dependency
    is not a Prop.
    """
    prop_ty, qualifiers = unwrap_annotated(interface)
    if typing.get_origin(prop_ty) is not Prop:
        return None
    target_type = _target_type(owner, name, prop_ty)
    return PropField(name, resolve_property_name(owner, name, PropMarker(), qualifiers), target_type)


def _create_prop_field(owner: typing.Type, field_name: str, marker: PropMarker, hint) -> PropField:
    if hint is None:
        raise PropDeclarationException(f"Prop field {owner.__qualname__}.{field_name} has no annotation. Annotate it "
                                       f"as Prop[T].")
    prop_ty, qualifiers = unwrap_annotated(hint)
    if typing.get_origin(prop_ty) is not Prop:
        raise PropDeclarationException(f"Prop field {owner.__qualname__}.{field_name} was annotated as {hint}. "
                                       f"Annotate it as Prop[T].")
    target_type = _target_type(owner, field_name, prop_ty)
    property_name = resolve_property_name(owner, field_name, marker, qualifiers)
    return PropField(field_name, property_name, target_type)


def _target_type(owner: typing.Optional[typing.Type], name: str, prop_ty):
    target_type = typing.get_args(prop_ty)[0] if len(typing.get_args(prop_ty)) != 0 else None
    if target_type is None or isinstance(target_type, typing.TypeVar):
        raise PropDeclarationException(f"Prop {describe_prop(owner, name)} has unbound type {target_type}.")
    return target_type


def unwrap_annotated(hint) -> typing.Tuple[typing.Any, list[Named]]:
    if typing.get_origin(hint) is not typing.Annotated:
        return hint, []
    underlying, *metadata = typing.get_args(hint)
    return underlying, [m for m in metadata if isinstance(m, Named)]


def resolve_property_name(owner: Optional[typing.Type], field_name: str, marker: PropMarker,
                          qualifiers: list[Named]) -> str:
    """
    The name passed to prop(...) takes precedence, else the Named qualifier. A Named qualifier is validated even when
    it is not used.
    """
    qualifier_name: Optional[str] = None
    if len(qualifiers) > 1:
        raise RequiredNamedAnnotationException(owner, field_name, "more than one Named was provided")
    elif len(qualifiers) == 1:
        qualifier_name = qualifiers[0].value
        if not isinstance(qualifier_name, str) or len(qualifier_name.strip()) == 0:
            raise RequiredNamedAnnotationException(owner, field_name, "the Named value was empty")

    if marker.name is not None and len(marker.name.strip()) != 0:
        if qualifier_name is not None and qualifier_name != marker.name:
            LoggerFacade.debug(f"Prop field {owner.__qualname__}.{field_name} is named both {marker.name} and "
                               f"{qualifier_name}. Using {marker.name}.")
        return marker.name
    elif qualifier_name is not None:
        return qualifier_name

    raise RequiredNamedAnnotationException(owner, field_name)


def _validate_unique(owner: typing.Type, fields: list[PropField]):
    by_name: dict[str, list[str]] = collections.defaultdict(list)
    for f in fields:
        by_name[f.property_name].append(f.field_name)
    for property_name, field_names in by_name.items():
        if len(field_names) > 1:
            raise DuplicatePropException(owner, property_name, field_names)
