import os
import unittest
from typing import Annotated

import injector

from auto_prop.core.prop import Prop
from auto_prop.env.property_source import YamlPropertySource
from auto_prop.inject.parser_factory import PydanticParserFactory
from auto_prop.inject.prop_exceptions import FailedToCreatePropException, RequiredNamedAnnotationException, \
    DuplicatePropException, MissingPropValueException, PropDeclarationException, PropException
from auto_prop.inject.prop_factory import PropertySourcePropFactory
from auto_prop.inject.prop_injector import create_prop_injector, PropInjector
from auto_prop.properties.prop_marker import Named
from prop_tests.fixtures.prop_objects import ComplexObjects, InjectedObject, NullValue, UnnamedProp, \
    SamePropertyAsComplexObjects, UsesTwiceSameProp, BothNamedAnnotations, InvalidJSON, MyInterface, \
    MyInterfaceProvider, EmptyNamedAnnotation, InlineProviderModule, WithConstructor, Primitives, InjectedMap, \
    ExtendsComplexObjects, MissingValue, TwoNamedAnnotations, NotAProp, InjectsConstructor, OutsidePackage, \
    ConstructorComplexObjects, ConstructorMissingValue, ConstructorUnnamedProp, ConstructorEmptyNamedAnnotation, \
    InjectedObjectWithConstructor, UnresolvedAnnotation

APPLICATION_YML = os.path.join(os.path.dirname(os.path.dirname(__file__)), 'resources', 'application.yml')


def create_injector(*modules, base_package=None, fail_fast=True) -> PropInjector:
    return create_prop_injector(list(modules),
                                base_package=base_package,
                                prop_factory=PropertySourcePropFactory(YamlPropertySource([APPLICATION_YML])),
                                parser_factory=PydanticParserFactory(),
                                fail_fast=fail_fast)


class PropInjectorTest(unittest.TestCase):

    def test_can_read_complex_properties(self):
        inj = create_injector(lambda binder: binder.bind(ComplexObjects))

        complex_objects = inj.get(ComplexObjects)

        complex_object_prop_value = complex_objects.my_complex_object_prop.get()
        assert isinstance(complex_object_prop_value, InjectedObject)
        assert complex_object_prop_value.name == "Rush B"
        assert complex_object_prop_value.age == 12

        list_of_complex_object_prop_value = complex_objects.my_list_of_complex_object_prop.get()
        assert len(list_of_complex_object_prop_value) == 2
        assert list_of_complex_object_prop_value[0] == InjectedObject(name="dustII", age=3)
        assert list_of_complex_object_prop_value[1] == InjectedObject(name="inferno", age=16)

        assert complex_objects.my_string_prop.get() == "awp"

    def test_can_read_into_class_with_constructor(self):
        inj = create_injector(lambda binder: binder.bind(WithConstructor))

        with_constructor = inj.get(WithConstructor).with_constructor.get()

        assert with_constructor.name == "Rush B"
        assert with_constructor.age == 12

    def test_can_read_primitives_and_sections(self):
        primitives = create_injector().get(Primitives)

        assert primitives.max_rounds.get() == 30
        assert primitives.overtime.get() is True
        assert primitives.map_prop.get() == InjectedMap(name="mirage", age=9)

    def test_inherits_prop_fields(self):
        extended = create_injector().get(ExtendsComplexObjects)

        assert extended.my_string_prop.get() == "awp"
        assert extended.my_other_string_prop.get() == "usp"

    def test_throws_on_null_values(self):
        with self.assertRaises(MissingPropValueException):
            inj = create_injector(lambda binder: binder.bind(NullValue))
            inj.get(NullValue)

    def test_null_value_is_failed_to_create(self):
        with self.assertRaises(FailedToCreatePropException):
            create_injector().get(NullValue)

    def test_throws_on_missing_values(self):
        with self.assertRaises(MissingPropValueException):
            create_injector().get(MissingValue)

    def test_throws_when_created_lazily_without_fail_fast(self):
        inj = create_injector(lambda binder: binder.bind(NullValue), fail_fast=False)

        with self.assertRaises(MissingPropValueException):
            inj.get(NullValue)

    def test_throws_on_unnamed_prop(self):
        with self.assertRaises(RequiredNamedAnnotationException):
            inj = create_injector(lambda binder: binder.bind(UnnamedProp))
            inj.get(UnnamedProp)

    def test_throws_on_unnamed_prop_without_fail_fast(self):
        with self.assertRaises(RequiredNamedAnnotationException):
            create_injector(lambda binder: binder.bind(UnnamedProp), fail_fast=False)

    def test_can_have_multiple_objects_using_the_same_prop(self):
        inj = create_injector(lambda binder: binder.bind(ComplexObjects),
                              lambda binder: binder.bind(SamePropertyAsComplexObjects))

        complex_objects = inj.get(ComplexObjects)
        same_property_as_complex_objects = inj.get(SamePropertyAsComplexObjects)

        assert isinstance(complex_objects.my_complex_object_prop, Prop)
        self.assertIs(complex_objects.my_complex_object_prop,
                      same_property_as_complex_objects.my_complex_object_prop)

    def test_cannot_use_twice_same_prop_in_same_object(self):
        with self.assertRaises(DuplicatePropException):
            inj = create_injector(lambda binder: binder.bind(UsesTwiceSameProp))
            inj.get(UsesTwiceSameProp)

    def test_can_use_both_named_annotations(self):
        inj = create_injector(lambda binder: binder.bind(BothNamedAnnotations))

        both_named_annotations = inj.get(BothNamedAnnotations)

        assert both_named_annotations.string_prop1.get() == "awp"
        assert both_named_annotations.string_prop2.get() == "usp"

    def test_throws_if_deserialization_fails(self):
        with self.assertRaises(FailedToCreatePropException) as ctx:
            inj = create_injector(lambda binder: binder.bind(InvalidJSON))
            inj.get(InvalidJSON)
        assert not isinstance(ctx.exception, MissingPropValueException)
        assert ctx.exception.property_name == "io.pleo.test.invalid_json"

    def test_module_with_no_element_does_not_throw(self):
        create_injector(lambda binder: None)

    def test_module_with_no_binding_does_not_throw(self):
        create_prop_injector([],
                             prop_factory=PropertySourcePropFactory(YamlPropertySource([APPLICATION_YML])),
                             auto_bind=False)

    def test_module_with_provider(self):
        inj = create_injector(lambda binder: binder.bind(MyInterface, to=MyInterfaceProvider()))

        my_interface = inj.get(MyInterface)

        assert my_interface.get_prop_value() == "awp"

    def test_module_with_empty_named_annotation(self):
        with self.assertRaises(RequiredNamedAnnotationException):
            create_injector(lambda binder: binder.bind(EmptyNamedAnnotation))

    def test_module_with_two_named_annotations(self):
        with self.assertRaises(RequiredNamedAnnotationException):
            create_injector(lambda binder: binder.bind(TwoNamedAnnotations))

    def test_field_not_annotated_as_prop(self):
        with self.assertRaises(PropDeclarationException):
            create_injector(lambda binder: binder.bind(NotAProp))

    def test_child_injector_support(self):
        inj = create_injector(lambda binder: binder.bind(SamePropertyAsComplexObjects))

        child = inj.create_child_injector([lambda binder: binder.bind(ComplexObjects)])
        complex_objects = child.get(ComplexObjects)

        assert isinstance(child, PropInjector)
        assert complex_objects.my_string_prop.get() == "awp"
        self.assertIs(complex_objects.my_complex_object_prop,
                      inj.get(SamePropertyAsComplexObjects).my_complex_object_prop)

    def test_inline_provider_support(self):
        inj = create_injector(InlineProviderModule())

        injected_object = inj.get(InjectedObject)

        assert injected_object.name == "awp"

    def test_injects_objects_created_with_constructor_injection(self):
        injects_constructor = create_injector().get(InjectsConstructor)

        assert injects_constructor.string_prop.get() == "awp"
        assert injects_constructor.complex_objects.my_string_prop.get() == "awp"

    def test_skips_classes_outside_base_package(self):
        inj = create_injector(base_package='elsewhere')

        outside_package = inj.get(OutsidePackage)
        complex_objects = inj.get(ComplexObjects)

        assert outside_package.string_prop.get() == "awp"
        with self.assertRaises(PropException):
            complex_objects.my_string_prop.get()

    def test_injects_props_in_constructor(self):
        inj = create_injector(lambda binder: binder.bind(ConstructorComplexObjects),
                              lambda binder: binder.bind(SamePropertyAsComplexObjects))

        constructor_complex_objects = inj.get(ConstructorComplexObjects)

        assert constructor_complex_objects.my_complex_object_prop.get() == InjectedObject(name="Rush B", age=12)
        with_constructor = constructor_complex_objects.with_constructor.get()
        assert isinstance(with_constructor, InjectedObjectWithConstructor)
        assert with_constructor.age == 12
        assert len(constructor_complex_objects.my_list_of_complex_object_prop.get()) == 2
        assert constructor_complex_objects.my_string_prop.get() == "awp"
        self.assertIs(constructor_complex_objects.my_complex_object_prop,
                      inj.get(SamePropertyAsComplexObjects).my_complex_object_prop)

    def test_injects_props_requested_from_injector(self):
        inj = create_injector()

        string_prop = inj.get(Annotated[Prop[str], Named("io.pleo.test.prop3")])

        assert string_prop.get() == "awp"
        self.assertIs(string_prop, inj.get(ComplexObjects).my_string_prop)

    def test_throws_on_missing_constructor_values(self):
        with self.assertRaises(MissingPropValueException):
            create_injector(lambda binder: binder.bind(ConstructorMissingValue))
        with self.assertRaises(MissingPropValueException):
            create_injector().get(ConstructorMissingValue)

    def test_throws_on_unnamed_constructor_prop(self):
        with self.assertRaises(RequiredNamedAnnotationException) as ctx:
            create_injector().get(ConstructorUnnamedProp)
        assert ctx.exception.owner is ConstructorUnnamedProp
        assert ctx.exception.field_name == "unnamed_prop"

    def test_throws_on_empty_named_constructor_prop(self):
        with self.assertRaises(RequiredNamedAnnotationException):
            create_injector(lambda binder: binder.bind(ConstructorEmptyNamedAnnotation), fail_fast=False)

    def test_multibindings_are_left_to_injector(self):
        def configure(binder: injector.Binder):
            binder.multibind(list[str], to=["awp"])
            binder.multibind(dict[str, str], to={"primary": "awp"})
            binder.bind(ComplexObjects)

        inj = create_injector(configure)

        assert inj.get(list[str]) == ["awp"]
        assert inj.get(dict[str, str]) == {"primary": "awp"}
        assert inj.get(ComplexObjects).my_string_prop.get() == "awp"

    def test_ignores_unresolved_annotations_of_other_fields(self):
        unresolved_annotation = create_injector(lambda binder: binder.bind(UnresolvedAnnotation)) \
            .get(UnresolvedAnnotation)

        assert unresolved_annotation.string_prop.get() == "awp"
