from datetime import date
from decimal import Decimal

import pytest

from tripleorm.core import (
    BooleanField,
    CascadeType,
    DateField,
    DecimalField,
    Entity,
    IntegerField,
    ModelConfigurationError,
    Relation,
    StringField,
    URIField,
    entity_registry,
)
from tripleorm.hooks import LifecycleEvent, post_load
from tripleorm.query import NamedQuery
from tripleorm.rdf import Namespace, URIRef

EX = Namespace("http://example.org/core/")


class Publisher(Entity):
    name = StringField(nullable=False, max_length=20)
    founded = DateField()
    homepage = URIField(EX.homepage)

    class Meta:
        rdf_type = EX.Publisher
        namespace = "http://example.org/core/"
        named_queries = (NamedQuery("core.publishers", "SELECT ?p WHERE { ?p a <http://example.org/core/Publisher> }"),)


class Catalogue(Entity):
    title = StringField()
    price = DecimalField()
    in_print = BooleanField()
    copies = IntegerField(default=1)
    tags = StringField(many=True)
    publisher = Relation(Publisher, cascade=[CascadeType.ALL])
    related = Relation("Publisher", many=True)

    class Meta:
        rdf_type = EX.Catalogue
        namespace = "http://example.org/core/"

    @post_load
    def loaded(self):
        pass


class SpecialCatalogue(Catalogue):
    edition = IntegerField()


def test_fields_are_collected_in_declaration_order():
    options = Catalogue._meta
    assert list(options.fields) == ["title", "price", "in_print", "copies", "tags"]
    assert list(options.relations) == ["publisher", "related"]
    assert options.rdf_type == EX.Catalogue
    assert options.lifecycle_methods == {LifecycleEvent.POST_LOAD: "loaded"}


def test_default_and_explicit_predicates():
    assert Catalogue._meta.get_field("title").predicate == URIRef("http://example.org/core/title")
    assert Publisher._meta.get_field("homepage").predicate == EX.homepage


def test_defaults_and_conversion():
    item = Catalogue(title=42, price="9.50")
    assert item.title == "42"
    assert item.price == Decimal("9.50")
    assert item.in_print is False
    assert item.copies == 1
    assert item.tags == []
    assert item.publisher is None


def test_field_validation_errors():
    item = Catalogue()
    with pytest.raises(ValueError):
        item.copies = "many"
    with pytest.raises(ValueError):
        item.tags = "not-a-list"
    with pytest.raises(ValueError):
        item.publisher = "not an entity"
    publisher = Publisher(name="Tor")
    with pytest.raises(ValueError):
        publisher.name = None
    with pytest.raises(ValueError):
        publisher.name = "x" * 21
    with pytest.raises(ValueError):
        publisher.homepage = "no scheme"


def test_unknown_keyword_argument():
    with pytest.raises(TypeError):
        Publisher(name="Tor", city="New York")


def test_identity_is_immutable_once_assigned():
    publisher = Publisher(name="Tor")
    assert publisher.rdf_id is None

    publisher.rdf_id = "http://example.org/core/tor"
    publisher.rdf_id = "http://example.org/core/tor"
    assert publisher.rdf_id == EX.tor

    with pytest.raises(ValueError):
        publisher.rdf_id = "http://example.org/core/other"
    with pytest.raises(ValueError):
        Publisher(rdf_id="not-an-iri")


def test_cascade_all_expands():
    relation = Catalogue._meta.get_field("publisher")
    assert relation.cascade == frozenset({CascadeType.PERSIST, CascadeType.MERGE, CascadeType.REMOVE})
    assert Catalogue._meta.cascade_directives() == {"publisher": relation.cascade}


def test_string_relation_resolves_through_registry():
    assert Catalogue._meta.get_field("related").remote_model is Publisher
    assert entity_registry.get("Publisher") is Publisher


def test_inheritance_carries_fields_and_options():
    options = SpecialCatalogue._meta
    assert options.rdf_type == EX.Catalogue
    assert options.namespace == "http://example.org/core/"
    assert "title" in options.fields
    assert "edition" in options.fields
    assert options.lifecycle_methods == {LifecycleEvent.POST_LOAD: "loaded"}


def test_to_dict_reduces_relations_to_identities():
    publisher = Publisher(EX.tor, name="Tor", founded=date(1980, 1, 1))
    item = Catalogue(EX.item, title="Dune", publisher=publisher, tags=["sf"])

    data = item.to_dict()

    assert data["rdf_id"] == EX.item
    assert data["publisher"] == EX.tor
    assert data["tags"] == ["sf"]
    assert data["related"] == []


def test_invalid_meta_iri_rejected():
    with pytest.raises(ModelConfigurationError):

        class Broken(Entity):
            class Meta:
                rdf_type = "not an iri"


def test_abstract_entities_are_not_persistable_types():
    class Base(Entity):
        class Meta:
            rdf_type = EX.Base
            abstract = True

    assert Base not in entity_registry.persistable_types()
    assert Publisher in entity_registry.persistable_types()
    assert Publisher._meta.named_queries[0].name == "core.publishers"
