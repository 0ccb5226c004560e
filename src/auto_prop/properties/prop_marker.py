import typing
from typing import Optional

from auto_prop.inject.prop_exceptions import PropException


class Named(typing.NamedTuple):
    """
    Qualifies a Prop field with its property name, placed in the field's Annotated metadata.

        my_prop: Annotated[Prop[str], Named("io.pleo.my_prop")] = prop()
    """
    value: str


class PropMarker:
    """
    Default value of a field to be populated with a Prop. Once the prop is injected, the instance attribute shadows
    the marker, so reading a marker means the object was created without the AutoPropModule.
    """

    def __init__(self, name: Optional[str] = None):
        self.name = name
        self.field_name: Optional[str] = None
        self.owner: Optional[typing.Type] = None

    def __set_name__(self, owner, name):
        self.owner = owner
        self.field_name = name

    def get(self):
        owner = self.owner.__qualname__ if self.owner is not None else None
        raise PropException(f"Prop {owner}.{self.field_name} was not injected. Was {owner} created by an injector "
                            f"with the AutoPropModule installed?")

    def __repr__(self):
        return f'prop({self.name!r})' if self.name is not None else 'prop()'


def prop(name: Optional[str] = None) -> typing.Any:
    """
    Mark a field to be populated with the Prop of the named property.

        class Config:
            my_prop: Prop[MyModel] = prop("io.pleo.my_prop")

    :param name: the property name. Optional when the field is annotated with Named.
    """
    return PropMarker(name)
