"""Unit tests for blueprints and the blueprint registry."""

from dataclasses import dataclass

from pydantic import BaseModel
import pytest

from indexkit.errors import ConfigurationError, EvaluationError
from indexkit.search.blueprint import (
    Blueprint,
    BlueprintRegistry,
    Computed,
    Direct,
    declared_names,
    has_closed_shape,
)
from tests.fixtures.objects import IndexedObject, Recipe, SpecialIndexedObject


class TestAccessors:
    def test_direct_reads_fields_and_properties(self):
        assert Direct("text")(IndexedObject(1, text="hi")) == "hi"
        assert Direct("title")(Recipe(1, "Soup", "Boil water")) == "Soup"

    def test_direct_invokes_bound_methods(self):
        assert Direct("summary")(IndexedObject(7)) == "summary of 7"

    def test_direct_invokes_static_methods(self):
        class Labelled:
            @staticmethod
            def label():
                return "static label"

        assert Direct("label")(Labelled()) == "static label"

    def test_direct_returns_stored_callables_uncalled(self):
        def callback():
            return "called"

        class Holder:
            def __init__(self):
                self.callback = callback

        assert Direct("callback")(Holder()) is callback

    def test_direct_missing_attribute_is_a_configuration_error(self):
        with pytest.raises(ConfigurationError, match="no accessor 'missing'"):
            Direct("missing")(IndexedObject(1))

    def test_direct_propagates_accessor_failures_unmodified(self):
        with pytest.raises(RuntimeError, match="database unavailable"):
            Direct("broken")(Recipe(1, "Soup", "Boil water"))

    def test_computed_receives_the_object(self):
        accessor = Computed(lambda obj: "zero" if obj.id == 0 else "not zero", label="complex")

        assert accessor(IndexedObject(0)) == "zero"
        assert accessor(IndexedObject(5)) == "not zero"

    def test_computed_failures_become_evaluation_errors(self):
        accessor = Computed(lambda obj: 1 / 0, label="ratio")

        with pytest.raises(EvaluationError, match="ratio: ZeroDivisionError") as excinfo:
            accessor(IndexedObject(1))

        assert excinfo.value.field_name == "ratio"
        assert isinstance(excinfo.value.__cause__, ZeroDivisionError)


class TestBlueprintDeclarations:
    def test_attributes_keep_declaration_order(self):
        blueprint = Blueprint(IndexedObject)
        blueprint.attribute("id").attribute("text").attribute("no_value").attribute("array")

        assert [a.name for a in blueprint.attributes] == ["id", "text", "no_value", "array"]

    def test_attributes_are_indexed_unless_disabled(self):
        blueprint = Blueprint(IndexedObject)
        blueprint.attribute("text")
        blueprint.attribute("id", index=False)

        assert [f.name for f in blueprint.indexed_fields] == ["text"]

    def test_redeclaring_an_attribute_keeps_its_position(self):
        blueprint = Blueprint(IndexedObject)
        blueprint.attribute("id").attribute("text").attribute("array")
        blueprint.attribute("text", lambda obj: obj.text.upper())

        assert [a.name for a in blueprint.attributes] == ["id", "text", "array"]
        assert isinstance(blueprint.attributes[1].accessor, Computed)

    def test_index_redeclaration_replaces_weight(self):
        blueprint = Blueprint(IndexedObject)
        blueprint.attribute("text")
        blueprint.index("text", weight=3)

        (declaration,) = blueprint.indexed_fields
        assert declaration.weight == 3
        assert declaration.prefix == "XTEXT"

    def test_redeclaring_an_attribute_without_index_drops_its_index_entry(self):
        blueprint = Blueprint(IndexedObject)
        blueprint.attribute("text").attribute("id")
        blueprint.attribute("text", index=False)

        assert [f.name for f in blueprint.indexed_fields] == ["id"]
        assert [a.name for a in blueprint.attributes] == ["text", "id"]

    def test_attribute_without_index_keeps_an_explicit_index_declaration(self):
        blueprint = Blueprint(IndexedObject)
        blueprint.attribute("text").index("text", weight=2)
        blueprint.attribute("text", index=False)

        (declaration,) = blueprint.indexed_fields
        assert declaration.weight == 2

    @pytest.mark.parametrize("weight", [0, -1, 1.5, True])
    def test_invalid_weights_are_rejected(self, weight):
        with pytest.raises(ConfigurationError, match="positive integer"):
            Blueprint(IndexedObject).index("text", weight=weight)

    def test_non_callable_computation_is_rejected(self):
        with pytest.raises(ConfigurationError, match="must be callable"):
            Blueprint(IndexedObject).attribute("text", "not a function")  # type: ignore[arg-type]

    def test_resolve_attributes_and_indexed_text(self):
        blueprint = Blueprint(IndexedObject)
        blueprint.attribute("id")
        blueprint.index("complex", lambda obj: f"item {obj.id}")
        obj = IndexedObject(4)

        assert blueprint.resolve_attributes(obj) == [("id", 4)]
        assert [(d.name, value) for d, value in blueprint.resolve_indexed_text(obj)] == [
            ("id", 4),
            ("complex", "item 4"),
        ]

    def test_language_resolver_accepts_names_and_functions(self):
        blueprint = Blueprint(IndexedObject)
        assert blueprint.resolve_language(IndexedObject(1, lang_cd="de")) is None

        blueprint.language_method("lang_cd")
        assert blueprint.resolve_language(IndexedObject(1, lang_cd="de")) == "de"

        blueprint.language_method(lambda obj: "en")
        assert blueprint.resolve_language(IndexedObject(1)) == "en"


class TestDocumentKey:
    def test_defaults_to_type_name_and_id(self):
        assert Blueprint(IndexedObject).resolve_document_key(IndexedObject(12)) == "IndexedObject-12"

    def test_uses_document_key_attribute_when_present(self):
        @dataclass
        class Keyed:
            document_key: str

        assert Blueprint(Keyed).resolve_document_key(Keyed("custom-1")) == "custom-1"

    def test_override_with_accessor(self):
        blueprint = Blueprint(IndexedObject).document_key(lambda obj: f"obj:{obj.id}")

        assert blueprint.resolve_document_key(IndexedObject(3)) == "obj:3"

    def test_missing_identity_is_a_configuration_error(self):
        class Anonymous:
            pass

        with pytest.raises(ConfigurationError, match="document id"):
            Blueprint(Anonymous).resolve_document_key(Anonymous())


class TestValidation:
    def test_declared_names_cover_fields_properties_and_methods(self):
        names = declared_names(IndexedObject)

        assert {"id", "text", "no_value", "array", "lang_cd", "summary"} <= names
        assert {"id", "title", "body", "broken"} <= declared_names(Recipe)

    def test_declared_names_cover_pydantic_models_and_slots(self):
        class Article(BaseModel):
            headline: str

        class Slotted:
            __slots__ = ("code",)

        assert "headline" in declared_names(Article)
        assert "code" in declared_names(Slotted)

    def test_unknown_direct_accessors_fail_eagerly(self):
        blueprint = Blueprint(IndexedObject)
        blueprint.attribute("text")
        blueprint.index("missing_field")

        with pytest.raises(ConfigurationError, match="missing_field"):
            blueprint.validate()

    def test_missing_language_method_is_a_configuration_error(self):
        blueprint = Blueprint(IndexedObject).language_method("locale")

        with pytest.raises(ConfigurationError, match="locale"):
            blueprint.validate()

    def test_slotted_classes_are_checked_eagerly(self):
        class Slotted:
            __slots__ = ("code",)

        blueprint = Blueprint(Slotted).attribute("name")

        with pytest.raises(ConfigurationError, match="name"):
            blueprint.validate()

    def test_open_classes_are_checked_per_object(self, registry):
        class Note:
            def __init__(self, id, text):
                self.id = id
                self.text = text

        with registry.setup(Note) as blueprint:
            blueprint.attribute("text")
            blueprint.index("missing")

        assert registry.blueprint_for(Note) is blueprint
        assert blueprint.resolve_attributes(Note(1, "hello")) == [("text", "hello")]
        with pytest.raises(ConfigurationError, match="no accessor 'missing'"):
            blueprint.resolve_indexed_text(Note(1, "hello"))

    def test_closed_shape_detection(self):
        class Open:
            pass

        class Slotted:
            __slots__ = ("code",)

        class SlottedWithDict:
            __slots__ = ("code", "__dict__")

        class Article(BaseModel):
            headline: str

        assert has_closed_shape(IndexedObject)
        assert has_closed_shape(Slotted)
        assert has_closed_shape(Article)
        assert not has_closed_shape(Open)
        assert not has_closed_shape(SlottedWithDict)
        assert not has_closed_shape(Recipe)

    def test_computed_accessors_are_not_checked(self):
        blueprint = Blueprint(IndexedObject)
        blueprint.attribute("anything", lambda obj: 1)

        blueprint.validate()


class TestBlueprintRegistry:
    def test_setup_registers_on_exit(self, registry):
        with registry.setup(IndexedObject) as blueprint:
            blueprint.attribute("text")
            assert IndexedObject not in registry

        assert registry.blueprint_for(IndexedObject) is blueprint
        assert len(registry) == 1

    def test_setup_does_not_register_when_the_block_fails(self, registry):
        with pytest.raises(RuntimeError), registry.setup(IndexedObject) as blueprint:
            blueprint.attribute("text")
            raise RuntimeError("half-configured")

        assert IndexedObject not in registry

    def test_setup_validates_declarations(self, registry):
        with pytest.raises(ConfigurationError), registry.setup(IndexedObject) as blueprint:
            blueprint.attribute("nope")

        assert IndexedObject not in registry

    def test_latest_blueprint_wins(self, registry):
        with registry.setup(IndexedObject) as first:
            first.attribute("text")
        with registry.setup(IndexedObject) as second:
            second.index("text")

        assert registry.blueprint_for(IndexedObject) is second
        assert second.attributes == ()

    def test_subclasses_inherit_base_blueprint(self, registry):
        with registry.setup(IndexedObject) as blueprint:
            blueprint.attribute("text")

        assert registry.blueprint_for(SpecialIndexedObject) is blueprint

    def test_unknown_type_is_a_configuration_error(self):
        with pytest.raises(ConfigurationError, match="No blueprint registered for Recipe"):
            BlueprintRegistry().blueprint_for(Recipe)
