import typing


def describe_prop(owner: typing.Optional[typing.Type], name: str) -> str:
    return f'{owner.__qualname__}.{name}' if owner is not None else name


class PropException(Exception):
    pass


class PropDeclarationException(PropException):
    """
    A field or parameter requests a prop in a way that can never be satisfied, ex. it is not annotated as Prop[T].
    """
    pass


class RequiredNamedAnnotationException(PropDeclarationException):

    def __init__(self, owner: typing.Optional[typing.Type], field_name: str,
                 reason: str = "no property name was provided"):
        super().__init__(f"Prop {describe_prop(owner, field_name)} requires a property name: {reason}. Pass the name "
                         f"to prop(...) or annotate it with Named(...).")
        self.owner = owner
        self.field_name = field_name


class DuplicatePropException(PropDeclarationException):

    def __init__(self, owner: typing.Type, property_name: str, field_names: typing.Iterable[str]):
        super().__init__(f"{owner.__qualname__} uses property {property_name} more than once, in fields "
                         f"{', '.join(field_names)}.")
        self.owner = owner
        self.property_name = property_name


class FailedToCreatePropException(PropException):

    def __init__(self, property_name: str, message: str):
        super().__init__(f"Failed to create prop {property_name}: {message}")
        self.property_name = property_name


class MissingPropValueException(FailedToCreatePropException):

    def __init__(self, property_name: str):
        super().__init__(property_name, "the property has no value.")
