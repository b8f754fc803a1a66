"""Tests for the model registry and polymorphic deserialization.

Critical Invariants:
- A tagged payload builds exactly the tagged class, never the declared field type
- Tags outside the declared type's hierarchy are rejected
- Lookups without a registry fail loudly
"""

import warnings

import pytest

from modelcore import (
    Model,
    ModelRegistry,
    RegistryMissingError,
    TypeMismatchError,
    UnknownTypeError,
    field,
)

shape_registry = ModelRegistry()


@shape_registry.register
class Shape(Model, registry=shape_registry):
    label = field(str)


@shape_registry.register
class Circle(Shape):
    radius = field(float)


@shape_registry.register
class Square(Shape, type_name="shapes.Square"):
    side = field(float)


@shape_registry.register
class Drawing(Model, registry=shape_registry):
    main = field(Shape)
    shapes = field(list[Shape])


@shape_registry.register
class Unrelated(Model, registry=shape_registry):
    pass


@shape_registry.register(name="shapes.Triangle")
class Triangle(Shape):
    base = field(float)


class Loose(Model):
    x = field(int)


# Polymorphic deserialization


def test_tag_selects_concrete_subclass():
    shape = Shape.deserialize({"_type": "Circle", "label": "c", "radius": 2})

    assert type(shape) is Circle
    assert shape.radius == 2.0
    assert shape.is_of_type("Circle")
    assert shape.is_of_type("Shape")
    assert not shape.is_changed()


def test_custom_type_name_resolves():
    shape = Shape.deserialize({"_type": "shapes.Square", "side": 3})

    assert type(shape) is Square
    assert shape.serialize() == {"_type": "shapes.Square", "side": 3.0}


def test_nested_fields_resolve_polymorphically():
    drawing = Drawing.deserialize(
        {
            "_type": "Drawing",
            "main": {"_type": "Circle", "radius": 3},
            "shapes": [{"_type": "Circle", "radius": 1}, {"_type": "Shape", "label": "plain"}],
        }
    )

    assert type(drawing.main) is Circle
    assert [type(s) for s in drawing.shapes] == [Circle, Shape]


def test_polymorphic_round_trip():
    drawing = Drawing(main=Circle(radius=1.5), shapes=[Square(side=2), Shape(label="s")])

    payload = drawing.serialize()
    restored = Drawing.deserialize(payload)

    assert restored.serialize() == payload
    assert type(restored.main) is Circle
    assert not restored.is_changed()


def test_aliased_registration_round_trips():
    """CRITICAL: A class registered under an explicit tag serializes with that tag.

    Why: A payload tagged with the class name would not resolve back through the registry.
    """
    payload = Triangle(base=2).serialize()

    assert payload == {"_type": "shapes.Triangle", "base": 2.0}
    restored = Shape.deserialize(payload)
    assert type(restored) is Triangle
    assert restored.is_of_type("shapes.Triangle")
    assert restored.serialize() == payload


def test_construction_also_resolves_tags():
    drawing = Drawing(main={"_type": "Circle", "radius": 1})

    assert type(drawing.main) is Circle
    assert drawing.main.is_changed()


# Failures


def test_unknown_tag():
    with pytest.raises(UnknownTypeError, match="Model not found \\(name: 'Hexagon'\\)"):
        Shape.deserialize({"_type": "Hexagon"})


def test_tag_outside_hierarchy():
    """CRITICAL: A registered but unrelated tag must not be accepted.

    Why: A field typed Shape holding an Unrelated breaks every reader of that field.
    """
    with pytest.raises(TypeMismatchError, match="expected: 'Shape', provided: 'Unrelated'"):
        Shape.deserialize({"_type": "Unrelated"})


def test_non_string_tag():
    with pytest.raises(TypeMismatchError, match="type tag string"):
        Shape.create({"_type": 5})


def test_registry_missing():
    with pytest.raises(RegistryMissingError, match="Registry not found \\(model: 'Loose'\\)"):
        Loose.deserialize({"_type": "Other"})


def test_own_tag_needs_no_registry():
    """CRITICAL: A payload tagged with the requested class's own name builds it directly.

    Why: Self-tagged payloads of registry-less models must still round trip.
    """

    class Holder(Model):
        loose = field(Loose)
        many = field(list[Loose])

    holder = Holder.deserialize(
        {"_type": "Holder", "loose": {"_type": "Loose", "x": 1}, "many": [{"_type": "Loose", "x": 2}]}
    )

    assert Loose.deserialize({"_type": "Loose", "x": 1}).x == 1
    assert holder.loose.x == 1
    assert holder.many[0].x == 2
    assert Holder.deserialize(holder.serialize()).serialize() == holder.serialize()


def test_own_tag_skips_registry_lookup():
    class Sketch(Shape):
        pass

    assert not shape_registry.is_registered(Sketch)
    assert type(Sketch.deserialize({"_type": "Sketch"})) is Sketch
    with pytest.raises(UnknownTypeError, match="Sketch"):
        Shape.deserialize({"_type": "Sketch"})


def test_constructor_rejects_foreign_tags():
    with pytest.raises(TypeMismatchError, match="create"):
        Shape({"_type": "Circle", "radius": 1})


# Registry object


def test_register_forms(registry):
    class Foo(Model):
        pass

    class Bar(Model):
        pass

    assert registry.register(Foo) is Foo
    assert registry.register(name="bar.v1")(Bar) is Bar

    assert "Foo" in registry
    assert "bar.v1" in registry
    assert registry.get("bar.v1") is Bar
    assert registry.get("Bar") is None
    assert Bar.get_name() == "bar.v1"
    assert registry.resolve("Foo") is Foo
    assert registry.is_registered(Bar)
    assert registry.names() == ["Foo", "bar.v1"]
    assert list(registry) == ["Foo", "bar.v1"]
    assert len(registry) == 2


def test_register_is_idempotent(registry):
    class Foo(Model):
        pass

    registry.register(Foo)
    registry.register(Foo)

    assert len(registry) == 1


def test_register_collision(registry):
    """CRITICAL: Two classes may not share a tag.

    Why: Silent replacement = payloads deserialize into the wrong class.
    """

    class Foo(Model):
        pass

    class Other(Model, type_name="Foo"):
        pass

    registry.register(Foo)

    with pytest.raises(RuntimeError, match="Model name collision"):
        registry.register(Other)


def test_resolve_unknown(registry):
    with pytest.raises(UnknownTypeError):
        registry.resolve("Nope")


def test_registry_is_inherited():
    assert Circle.get_registry() is shape_registry
    assert Circle.resolve_model("shapes.Square") is Square


def test_set_registry_warns_when_replacing(registry):
    class Own(Model, registry=registry):
        pass

    class Child(Own):
        pass

    with warnings.catch_warnings():
        warnings.simplefilter("error")
        Child.set_registry(ModelRegistry())

    with pytest.warns(UserWarning, match="Replacing the registry"):
        Own.set_registry(ModelRegistry())
