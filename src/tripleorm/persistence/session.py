"""
Session coordinating the store, mapper, cascades, hooks and transactions.
"""

from __future__ import annotations

from contextlib import contextmanager
from enum import Enum
from typing import TYPE_CHECKING, Any, Generator, Optional, Set, Type, TypeVar

from ..core.relations import CascadeType
from ..errors import (
    DeleteVerificationError,
    EntityNotFoundError,
    IdentityConflictError,
    IllegalStateError,
    MappingError,
    UnsupportedConfigurationError,
    UnsupportedOperationError,
    WriteVerificationError,
)
from ..hooks.events import LifecycleEvent
from ..mapping import Mapper, RdfMapper, as_identity
from ..metadata import MetadataProvider, RegistryMetadataProvider
from ..query import Query, QueryFactory
from ..rdf import Graph, URIRef
from ..stores import GraphStore, StoreConfig, SupportsNamedGraphs, create_store
from ..utils import get_logger, time_call
from ..validation import validate_entity, validate_fields
from .cascade import cascade
from .listeners import ListenerCache, ListenerFactory
from .transaction import Transaction, as_transactional, transaction

if TYPE_CHECKING:
    from ..hooks import HookDispatcher, LifecycleErrorCallback

T = TypeVar("T")


class FlushMode(str, Enum):
    AUTO = "auto"
    COMMIT = "commit"


class Session:
    """
    Persistence context over one graph store.

    Writes are applied as soon as ``persist``/``merge``/``remove`` return;
    there is no deferred write queue. The session owns its store: it is
    connected on construction and disconnected by :meth:`close`.
    """

    def __init__(
        self,
        store: GraphStore,
        *,
        metadata: Optional[MetadataProvider] = None,
        mapper: Optional[Mapper] = None,
        listener_factory: Optional[ListenerFactory] = None,
        hooks: Optional["HookDispatcher"] = None,
        on_lifecycle_error: Optional["LifecycleErrorCallback"] = None,
        config: Optional[StoreConfig] = None,
    ) -> None:
        self.store = store
        self.config = config
        self.metadata: MetadataProvider = metadata or RegistryMetadataProvider()
        self.mapper: Mapper = mapper or RdfMapper(
            self.metadata if isinstance(self.metadata, RegistryMetadataProvider) else None
        )
        if hooks is None:
            from ..hooks import hooks as default_hooks

            hooks = default_hooks
        self.hooks = hooks
        self.on_lifecycle_error = on_lifecycle_error
        self.listeners = ListenerCache(listener_factory)
        self.logger = get_logger("persistence.session")

        self._transactional = as_transactional(store)
        self._transaction: Optional[Transaction] = None
        self.query_factory = QueryFactory.from_metadata(store, self.metadata, loader=self._load_result)

        self.store.connect()
        self._open = True
        self.logger.debug("Session opened on %s", self._label())

    @classmethod
    def from_config(cls, config: StoreConfig, **kwargs: Any) -> "Session":
        return cls(create_store(config), config=config, **kwargs)

    @classmethod
    def from_dsn(cls, dsn: str, **kwargs: Any) -> "Session":
        return cls.from_config(StoreConfig.from_dsn(dsn), **kwargs)

    # ------------------------------------------------------------------ #
    # Context management
    # ------------------------------------------------------------------ #
    def __enter__(self) -> "Session":
        self.get_transaction().begin()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        try:
            handle = self._transaction
            if handle is not None and handle.is_active and self._open:
                if exc_type:
                    handle.rollback()
                else:
                    handle.commit()
        finally:
            if self._open:
                self.close()

    @contextmanager
    def transaction(self) -> Generator["Session", None, None]:
        """
        Run the block in a transaction, committing on success.
        """
        self._assert_open()
        with transaction(self.get_transaction()):
            yield self

    # ------------------------------------------------------------------ #
    # State
    # ------------------------------------------------------------------ #
    def is_open(self) -> bool:
        return self._open

    def close(self) -> None:
        self._assert_open()
        handle = self._transaction
        if handle is not None and handle.is_active:
            self.logger.warning("Closing session with an active transaction; rolling back")
            handle.rollback()
        try:
            self.store.disconnect()
        finally:
            self._clean_state()
            self._open = False
            self.logger.debug("Session closed on %s", self._label())

    def clear(self) -> None:
        self._assert_open()
        self._clean_state()

    def _clean_state(self) -> None:
        self.listeners.clear()

    def flush(self) -> None:
        self._assert_open()

    @property
    def flush_mode(self) -> FlushMode:
        self._assert_open()
        return FlushMode.AUTO

    @flush_mode.setter
    def flush_mode(self, mode: FlushMode) -> None:
        self._assert_open()
        if FlushMode(mode) is not FlushMode.AUTO:
            raise UnsupportedConfigurationError("Commit style flush mode is not supported.")

    def lock(self, entity: Any, mode: Any) -> None:
        self._assert_open()
        raise UnsupportedOperationError("Lock is not supported.")

    def get_transaction(self) -> Transaction:
        self._assert_open()
        if self._transaction is None or self._transaction.is_finished:
            self._transaction = Transaction(self._transactional)
        return self._transaction

    def join_transaction(self) -> None:
        self._assert_open()

    def get_delegate(self) -> GraphStore:
        self._assert_open()
        return self.store

    # ------------------------------------------------------------------ #
    # Persistence operations
    # ------------------------------------------------------------------ #
    def persist(self, entity: Any) -> None:
        self._assert_valid(entity)
        self._persist(entity, set())

    def merge(self, entity: T) -> T:
        self._assert_valid(entity)
        self._merge(entity, set())
        return entity

    def remove(self, entity: Any) -> None:
        self._assert_valid(entity)
        self._remove(entity, set())

    def contains(self, entity: Any) -> bool:
        self._assert_valid(entity)
        rdf_id = entity.rdf_id
        if rdf_id is None:
            return False
        return self._exists(URIRef(rdf_id))

    def refresh(self, entity: Any) -> None:
        self._assert_valid(entity)
        if not self.contains(entity):
            raise EntityNotFoundError(f"Entity does not exist: {entity!r}")
        fetched = self.find(type(entity), entity.rdf_id)
        if fetched is None:
            raise EntityNotFoundError(f"Entity does not exist: {entity!r}")
        for name in self.metadata.mapped_attributes(type(entity)):
            entity._field_values[name] = getattr(fetched, name)

    def find(self, entity_type: Type[T], key: Any) -> Optional[T]:
        self._assert_open()
        identity = as_identity(key)
        if not self.metadata.is_persistable_type(entity_type):
            raise MappingError(f"'{getattr(entity_type, '__name__', entity_type)}' is not a valid entity type.")
        if not self._exists(identity):
            return None
        return self._load_result(entity_type, identity)

    def get_reference(self, entity_type: Type[T], key: Any) -> T:
        self._assert_open()
        found = self.find(entity_type, key)
        if found is None:
            raise EntityNotFoundError(f"Cannot find entity with identity: {key}")
        return found

    # ------------------------------------------------------------------ #
    # Queries
    # ------------------------------------------------------------------ #
    def create_query(self, text: str) -> Query:
        self._assert_open()
        return self.query_factory.create_query(text)

    def create_named_query(self, name: str) -> Query:
        self._assert_open()
        return self.query_factory.create_named_query(name)

    def create_native_query(
        self,
        text: str,
        result_type: Optional[type] = None,
        *,
        result_set_mapping: Optional[str] = None,
    ) -> Query:
        self._assert_open()
        return self.query_factory.create_native_query(
            text, result_type, result_set_mapping=result_set_mapping
        )

    # ------------------------------------------------------------------ #
    # Operation bodies shared with cascades
    # ------------------------------------------------------------------ #
    def _persist(self, entity: Any, visited: Set[int]) -> None:
        visited.add(id(entity))
        if entity.rdf_id is not None and self._exists(URIRef(entity.rdf_id)):
            raise IdentityConflictError(f"Entity already exists: {entity!r}")

        with time_call("session.persist", self.logger, entity=repr(entity)):
            self._fire(LifecycleEvent.PRE_PERSIST, entity)
            validate_fields(entity)
            data = self.mapper.to_graph(entity)
            self._add(entity, data)

            if not self._exists(URIRef(entity.rdf_id)):
                raise WriteVerificationError(f"Addition failed for {type(entity).__name__} -> {entity.rdf_id}")

            cascade(self, entity, CascadeType.PERSIST, visited)
            self._fire(LifecycleEvent.POST_PERSIST, entity)

    def _merge(self, entity: Any, visited: Set[int]) -> None:
        visited.add(id(entity))
        if not self.contains(entity):
            raise EntityNotFoundError(f"Entity does not exist: {entity!r}")

        with time_call("session.merge", self.logger, entity=repr(entity)):
            self._fire(LifecycleEvent.PRE_UPDATE, entity)
            validate_fields(entity)
            existing = self.mapper.describe(self.store, entity)
            data = self.mapper.to_graph(entity)
            self._remove_data(entity, existing)
            self._add(entity, data)

            cascade(self, entity, CascadeType.MERGE, visited)
            self._fire(LifecycleEvent.POST_UPDATE, entity)

    def _remove(self, entity: Any, visited: Set[int]) -> None:
        visited.add(id(entity))
        if not self.contains(entity):
            raise EntityNotFoundError(f"Entity does not exist: {entity!r}")

        with time_call("session.remove", self.logger, entity=repr(entity)):
            self._fire(LifecycleEvent.PRE_REMOVE, entity)
            # everything the store knows about the identity, not just the mapped fields
            existing = self.mapper.describe(self.store, entity)
            self._remove_data(entity, existing)

            if self._exists(URIRef(entity.rdf_id)):
                raise DeleteVerificationError(f"Remove failed for {type(entity).__name__} -> {entity.rdf_id}")

            cascade(self, entity, CascadeType.REMOVE, visited)
            self._fire(LifecycleEvent.POST_REMOVE, entity)

    def _load_result(self, entity_type: type, identity: URIRef) -> Any:
        loaded = self.mapper.from_graph(entity_type, identity, self.store)
        self._fire(LifecycleEvent.POST_LOAD, loaded)
        return loaded

    # ------------------------------------------------------------------ #
    # Helpers
    # ------------------------------------------------------------------ #
    def _add(self, entity: Any, data: Graph) -> None:
        graph_id = self._named_graph(entity)
        if graph_id is not None:
            self._transactional.add_to_graph(graph_id, data)  # type: ignore[union-attr]
        else:
            self._transactional.add(data)

    def _remove_data(self, entity: Any, data: Graph) -> None:
        graph_id = self._named_graph(entity)
        if graph_id is not None:
            self._transactional.remove_from_graph(graph_id, data)  # type: ignore[union-attr]
        else:
            self._transactional.remove(data)

    def _named_graph(self, entity: Any) -> Optional[URIRef]:
        if not isinstance(self.store, SupportsNamedGraphs):
            return None
        return self.metadata.named_graph(entity)

    def _exists(self, identity: URIRef) -> bool:
        return bool(self.query_factory.create_exists_query(identity).get_result_list())

    def _fire(self, event: LifecycleEvent, entity: Any) -> None:
        listener_types = self.metadata.listener_types(type(entity))
        listeners = []
        if listener_types:
            listeners = self.listeners.listeners_for(
                entity,
                listener_types,
                on_failure=lambda listener_type, exc: self.hooks.report(
                    event, entity, exc, self.on_lifecycle_error
                ),
            )
        self.hooks.fire(
            event,
            entity,
            metadata=self.metadata,
            listeners=listeners,
            on_error=self.on_lifecycle_error,
        )

    def _assert_valid(self, entity: Any) -> None:
        self._assert_open()
        validate_entity(entity, self.metadata)

    def _assert_open(self) -> None:
        if not self._open:
            raise IllegalStateError("Cannot perform operation, session is not open.")

    def _label(self) -> str:
        if self.config is not None:
            return self.config.descriptive_label()
        return type(self.store).__name__
