from decimal import Decimal

import pytest

from tripleorm.errors import QuerySyntaxError
from tripleorm.query import evaluate, parse_query
from tripleorm.query.patterns import Parameter, Variable
from tripleorm.rdf import RDF_TYPE, Graph, Literal, Namespace, URIRef
from tripleorm.stores import MemoryStore

EX = Namespace("http://example.org/patterns/")


@pytest.fixture
def store():
    graph = Graph()
    graph.add(EX.ann, RDF_TYPE, EX.Person)
    graph.add(EX.ann, EX.age, 31)
    graph.add(EX.ann, EX.knows, EX.ben)
    graph.add(EX.ben, RDF_TYPE, EX.Person)
    graph.add(EX.ben, EX.age, 28)
    graph.add(EX.ben, EX.knows, EX.ben)
    graph.add(EX.cat, RDF_TYPE, EX.Robot)
    store = MemoryStore(graph)
    store.connect()
    return store


def test_parse_select_with_projection_and_parameters():
    parsed = parse_query(
        "SELECT DISTINCT ?name WHERE { ?person a <http://example.org/patterns/Person> . "
        "?person <http://example.org/patterns/name> ?name . ?person <http://example.org/patterns/knows> $friend }"
    )

    assert parsed.distinct is True
    assert parsed.projection == ["name"]
    assert parsed.variables == ["person", "name"]
    assert parsed.parameters == ["friend"]
    first = parsed.patterns[0]
    assert first.subject == Variable("person")
    assert first.predicate == RDF_TYPE
    assert parsed.patterns[2].object == Parameter("friend")


def test_parse_literals():
    parsed = parse_query(
        '{ ?s ?p "quoted \\"text\\"" . ?s ?p "5"^^<http://www.w3.org/2001/XMLSchema#integer> . '
        "?s ?p 1.5 . ?s ?p -3 . ?s ?p true }"
    )
    objects = [pattern.object for pattern in parsed.patterns]
    assert objects == [
        Literal('quoted "text"'),
        Literal.from_python(5),
        Literal.from_python(Decimal("1.5")),
        Literal.from_python(-3),
        Literal.from_python(True),
    ]
    assert parsed.projection is None
    assert parsed.result_variables == ["s", "p"]


@pytest.mark.parametrize(
    "text",
    [
        "",
        "SELECT WHERE { ?s ?p ?o }",
        "SELECT ?x WHERE { ?s ?p ?o }",
        "{ ?s ?p ?o",
        "{ ?s ?p }",
        "{ ?s ?p ?o } trailing",
        "{ ?s ?p @o }",
        '{ ?s ?p "x"^^"y" }',
        '{ ?s ?p "abc"^^<http://www.w3.org/2001/XMLSchema#integer> }',
    ],
)
def test_malformed_queries_raise(text):
    with pytest.raises(QuerySyntaxError):
        parse_query(text)


def test_query_syntax_error_is_value_error():
    assert issubclass(QuerySyntaxError, ValueError)


def test_evaluate_joins_patterns(store):
    parsed = parse_query("SELECT ?who ?age WHERE { ?who a <http://example.org/patterns/Person> . ?who <http://example.org/patterns/age> ?age }")

    rows = sorted(evaluate(parsed, store), key=lambda row: row["who"])

    assert rows == [
        {"who": EX.ann, "age": Literal.from_python(31)},
        {"who": EX.ben, "age": Literal.from_python(28)},
    ]


def test_evaluate_enforces_repeated_variables(store):
    parsed = parse_query("SELECT ?x WHERE { ?x <http://example.org/patterns/knows> ?x }")
    assert list(evaluate(parsed, store)) == [{"x": EX.ben}]


def test_evaluate_binds_parameters(store):
    parsed = parse_query("SELECT ?who WHERE { ?who <http://example.org/patterns/age> $age }")

    assert list(evaluate(parsed, store, {"age": 28})) == [{"who": EX.ben}]
    with pytest.raises(QuerySyntaxError):
        list(evaluate(parsed, store))


def test_evaluate_distinct(store):
    parsed = parse_query("SELECT DISTINCT ?type WHERE { ?s a ?type }")
    assert sorted(row["type"] for row in evaluate(parsed, store)) == [EX.Person, EX.Robot]

    parsed = parse_query("SELECT ?type WHERE { ?s a ?type }")
    assert len(list(evaluate(parsed, store))) == 3


def test_evaluate_matches_uri_objects(store):
    parsed = parse_query("SELECT ?s WHERE { ?s ?p <http://example.org/patterns/ben> }")
    assert sorted(row["s"] for row in evaluate(parsed, store)) == [URIRef(EX.ann), URIRef(EX.ben)]
