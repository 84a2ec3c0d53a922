"""
Field definitions and descriptors for TripleORM entities.
"""

from __future__ import annotations

from datetime import date, datetime, timezone
from decimal import Decimal, InvalidOperation
from typing import TYPE_CHECKING, Any, Optional, cast

from ..rdf import Literal, Term, URIRef, is_valid_iri
from ..rdf.namespaces import XSD_BOOLEAN, XSD_DATE, XSD_DATETIME, XSD_DECIMAL, XSD_DOUBLE, XSD_INTEGER, XSD_STRING

if TYPE_CHECKING:
    from .entity import Entity


class FieldError(Exception):
    """Internal exception for field configuration issues."""


class Field:
    """
    Base class for literal-valued entity properties.

    A field maps one attribute to one predicate. ``many=True`` fields hold a
    list and produce one statement per element.
    """

    _creation_counter = 0
    datatype: Optional[str] = None

    def __init__(
        self,
        predicate: Optional[str] = None,
        *,
        many: bool = False,
        nullable: bool = True,
        default: Any = None,
        datatype: Optional[str] = None,
        help_text: Optional[str] = None,
    ) -> None:
        self.predicate: URIRef | None = URIRef(predicate) if predicate else None
        self.many = many
        self.nullable = nullable
        self.default = default
        if datatype is not None:
            self.datatype = datatype
        self.help_text = help_text

        self.model: type["Entity"] | None = None
        self.name: str | None = None
        self.creation_counter = Field._creation_counter
        Field._creation_counter += 1

    # Descriptor protocol -------------------------------------------------
    def __get__(self, instance: object | None, owner: type | None = None) -> Any:
        if instance is None:
            return self

        entity = cast("Entity", instance)
        name = self.require_name()
        if name not in entity._field_values:
            entity._field_values[name] = [] if self.many else self.get_default()
        return entity._field_values[name]

    def __set__(self, instance: object, value: Any) -> None:
        entity = cast("Entity", instance)
        name = self.require_name()
        if value is None:
            if self.many:
                entity._field_values[name] = []
                return
            if not self.nullable:
                raise ValueError(f"Field '{name}' cannot be None")
            entity._field_values[name] = None
            return

        if self.many:
            if isinstance(value, (str, bytes)) or not hasattr(value, "__iter__"):
                raise ValueError(f"Field '{name}' expects a collection of values")
            entity._field_values[name] = [self.to_python(item) for item in value]
        else:
            entity._field_values[name] = self.to_python(value)

    # Metadata helpers ----------------------------------------------------
    def bind(self, model: type["Entity"], name: str, namespace: str) -> None:
        self.model = model
        self.name = name
        if self.predicate is None:
            self.predicate = URIRef(f"{namespace}{name}")

    def contribute_to_class(self, model: type["Entity"], name: str, namespace: str) -> None:
        self.bind(model, name, namespace)
        setattr(model, name, self)

    def require_name(self) -> str:
        if self.name is None:
            raise FieldError("Field name is not set.")
        return self.name

    def require_predicate(self) -> URIRef:
        if self.predicate is None:
            raise FieldError(f"Field '{self.name}' has no predicate.")
        return self.predicate

    # Conversion ----------------------------------------------------------
    def get_default(self) -> Any:
        if callable(self.default):
            return self.default()
        return self.default

    def to_python(self, value: Any) -> Any:
        return value

    def to_term(self, value: Any) -> Term:
        return Literal.from_python(value, self.datatype)

    def from_term(self, term: Term) -> Any:
        if isinstance(term, Literal):
            return self.to_python(term.value)
        return self.to_python(str(term))


class IdentityField:
    """
    Descriptor holding an entity's IRI. Once assigned it cannot change.
    """

    name = "rdf_id"

    def __get__(self, instance: object | None, owner: type | None = None) -> Any:
        if instance is None:
            return self
        return instance.__dict__.get("_rdf_id")

    def __set__(self, instance: object, value: Any) -> None:
        current = instance.__dict__.get("_rdf_id")
        if value is None:
            if current is not None:
                raise ValueError(f"Identity of {type(instance).__name__} is already {current}")
            return
        if not is_valid_iri(str(value)):
            raise ValueError(f"'{value}' is not an absolute IRI")
        value = URIRef(str(value))
        if current is not None and current != value:
            raise ValueError(f"Identity of {type(instance).__name__} is already {current}")
        instance.__dict__["_rdf_id"] = value


class StringField(Field):
    datatype = XSD_STRING

    def __init__(self, predicate: Optional[str] = None, *, max_length: Optional[int] = None, **kwargs: Any) -> None:
        super().__init__(predicate, **kwargs)
        self.max_length = max_length

    def to_python(self, value: Any) -> str | None:
        if value is None:
            return value
        result = str(value)
        if self.max_length and len(result) > self.max_length:
            raise ValueError(f"Value for field '{self.name}' exceeds max_length {self.max_length}")
        return result


class IntegerField(Field):
    datatype = XSD_INTEGER

    def to_python(self, value: Any) -> int | None:
        if value is None:
            return value
        if isinstance(value, bool):
            raise ValueError(f"Invalid integer value '{value}'")
        try:
            return int(value)
        except (TypeError, ValueError) as exc:
            raise ValueError(f"Invalid integer value '{value}'") from exc


class FloatField(Field):
    datatype = XSD_DOUBLE

    def to_python(self, value: Any) -> float | None:
        if value is None:
            return value
        try:
            return float(value)
        except (TypeError, ValueError) as exc:
            raise ValueError(f"Invalid float value '{value}'") from exc


class DecimalField(Field):
    datatype = XSD_DECIMAL

    def to_python(self, value: Any) -> Decimal | None:
        if value is None:
            return value
        try:
            return Decimal(str(value))
        except InvalidOperation as exc:
            raise ValueError(f"Invalid decimal value '{value}'") from exc


class BooleanField(Field):
    datatype = XSD_BOOLEAN

    def __init__(self, predicate: Optional[str] = None, *, default: Any = False, **kwargs: Any) -> None:
        super().__init__(predicate, default=default, **kwargs)

    def to_python(self, value: Any) -> bool | None:
        if value is None:
            return value
        if isinstance(value, bool):
            return value
        if isinstance(value, str):
            lowered = value.lower()
            if lowered in {"true", "t", "1"}:
                return True
            if lowered in {"false", "f", "0"}:
                return False
        if isinstance(value, (int, float)):
            return bool(value)
        raise ValueError(f"Invalid boolean value '{value}'")


class DateTimeField(Field):
    datatype = XSD_DATETIME

    def __init__(self, predicate: Optional[str] = None, *, auto_now_add: bool = False, **kwargs: Any) -> None:
        super().__init__(predicate, **kwargs)
        self.auto_now_add = auto_now_add

    def get_default(self) -> Any:
        if self.auto_now_add:
            return datetime.now(timezone.utc)
        return super().get_default()

    def to_python(self, value: Any) -> datetime | None:
        if value is None or isinstance(value, datetime):
            return value
        if isinstance(value, str):
            return datetime.fromisoformat(value)
        raise ValueError(f"Expected datetime for field '{self.name}', received {value!r}")


class DateField(Field):
    datatype = XSD_DATE

    def to_python(self, value: Any) -> date | None:
        if value is None:
            return value
        if isinstance(value, datetime):
            return value.date()
        if isinstance(value, date):
            return value
        if isinstance(value, str):
            return date.fromisoformat(value)
        raise ValueError(f"Expected date for field '{self.name}', received {value!r}")


class URIField(Field):
    """
    Field whose values are resource IRIs rather than literals.
    """

    def to_python(self, value: Any) -> URIRef | None:
        if value is None:
            return value
        if not is_valid_iri(str(value)):
            raise ValueError(f"'{value}' is not an absolute IRI")
        return URIRef(str(value))

    def to_term(self, value: Any) -> Term:
        return URIRef(str(value))
