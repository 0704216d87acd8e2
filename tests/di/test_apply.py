"""Tests for field injection with apply and apply_map."""

import weakref
from dataclasses import dataclass, field
from typing import Annotated, Optional, Protocol

import pytest

from typeinject import (
    Container,
    ContainerSettings,
    DependencyNotFoundError,
    Inject,
    injected,
)


class Database:
    pass


class Cache:
    pass


class Clock(Protocol):
    def now(self) -> float:
        ...


class FixedClock:
    def now(self) -> float:
        return 0.0


@dataclass
class Handler:
    db: Database = injected()
    cache: Cache = injected()
    label: str = "handler"
    note: Optional[Database] = None


@dataclass
class Reporter:
    clock: Clock = injected()


@dataclass
class AnnotatedHandler:
    db: Annotated[Database, Inject] = None


class PlainService:
    db: Annotated[Database, Inject]
    cache: Cache

    def __init__(self):
        self.cache = None


@dataclass
class WithPrivate:
    _db: Database = injected()
    cache: Cache = injected()


@dataclass(frozen=True)
class Frozen:
    db: Database = injected()


@dataclass
class CustomMarked:
    db: Database = field(default=None, metadata={"wire": "yes"})
    cache: Cache = injected()


@dataclass
class EmptyMarker:
    db: Database = field(default=None, metadata={"inject": ""})


@dataclass
class Batch:
    jobs: list = injected(default_factory=list)
    cache: Cache = injected(default=Cache())


class TestApply:
    """Test suite for Container.apply."""

    def setup_method(self):
        self.container = Container()
        self.db = Database()
        self.cache = Cache()

    def test_marked_dataclass_fields(self):
        """Test that every marked field is set and unmarked fields are untouched."""
        self.container.map_value(self.db).map_value(self.cache)
        handler = Handler()

        self.container.apply(handler)

        assert handler.db is self.db
        assert handler.cache is self.cache
        assert handler.label == "handler"
        assert handler.note is None

    def test_annotated_dataclass_field(self):
        self.container.map_value(self.db)
        handler = AnnotatedHandler()

        self.container.apply(handler)

        assert handler.db is self.db

    def test_annotated_plain_class(self):
        """Test that Annotated[T, Inject] marks fields on non-dataclasses."""
        self.container.map_value(self.db).map_value(self.cache)
        service = PlainService()

        self.container.apply(service)

        assert service.db is self.db
        assert service.cache is None

    def test_missing_field_raises(self):
        """Test that the error names the field and record that failed."""
        self.container.map_value(self.db)
        handler = Handler()

        with pytest.raises(DependencyNotFoundError) as exc_info:
            self.container.apply(handler)

        details = exc_info.value.context.technical_details
        assert exc_info.value.type_id is Cache
        assert details["field"] == "cache"
        assert "Handler" in details["target"]

    def test_fields_before_failure_stay_set(self):
        """Test that injection stops at the first failure without rolling back."""
        self.container.map_value(self.db)
        handler = Handler()

        with pytest.raises(DependencyNotFoundError):
            self.container.apply(handler)

        assert handler.db is self.db
        assert handler.cache is None

    @pytest.mark.parametrize("value", [42, "text", [1, 2], {"a": 1}, None, Handler])
    def test_non_records_are_ignored(self, value):
        """Test that values without annotated fields are a no-op."""
        assert self.container.apply(value) is None

    def test_weak_reference_is_followed(self):
        self.container.map_value(self.db).map_value(self.cache)
        handler = Handler()

        self.container.apply(weakref.ref(handler))

        assert handler.db is self.db

    def test_private_fields_are_skipped(self):
        self.container.map_value(self.db).map_value(self.cache)
        record = WithPrivate()

        self.container.apply(record)

        assert record._db is None
        assert record.cache is self.cache

    def test_frozen_dataclass_is_skipped(self):
        """Test that unsettable frozen fields are ignored, even when unresolvable."""
        record = Frozen()

        self.container.apply(record)

        assert record.db is None

    def test_custom_marker_key(self):
        """Test that the marker key comes from the container settings."""
        container = Container(settings=ContainerSettings(marker_key="wire"))
        container.map_value(self.db).map_value(self.cache)
        record = CustomMarked()

        container.apply(record)

        assert record.db is self.db
        assert record.cache is None

    def test_empty_marker_value_does_not_mark(self):
        record = EmptyMarker()

        self.container.apply(record)

        assert record.db is None

    def test_injected_with_default_factory(self):
        """Test that injected() forwards default_factory instead of forcing None."""
        batch = Batch()
        assert batch.jobs == []
        assert isinstance(batch.cache, Cache)

        jobs = ["resize", "upload"]
        self.container.map_value(jobs).map_value(self.cache)
        self.container.apply(batch)

        assert batch.jobs is jobs
        assert batch.cache is self.cache

    def test_field_resolved_by_provider(self):
        calls = []

        def make_cache() -> Cache:
            calls.append("cache")
            return self.cache

        self.container.map_value(self.db).register_provider(make_cache)
        handler = Handler()

        self.container.apply(handler)

        assert handler.cache is self.cache
        assert calls == ["cache"]

    def test_field_resolved_by_interface_scan(self):
        clock = FixedClock()
        self.container.map_value(clock)
        reporter = Reporter()

        self.container.apply(reporter)

        assert reporter.clock is clock

    def test_field_resolved_from_parent(self):
        parent = Container()
        parent.map_value(self.db).map_value(self.cache)
        child = parent.create_child()
        handler = Handler()

        child.apply(handler)

        assert handler.db is self.db
        assert handler.cache is self.cache


class TestApplyMap:
    """Test suite for Container.apply_map."""

    def setup_method(self):
        self.container = Container()

    def test_record_is_bound_after_injection(self):
        db, cache = Database(), Cache()
        self.container.map_value(db).map_value(cache)
        handler = Handler()

        result = self.container.apply_map(handler)

        assert result is self.container
        assert handler.db is db
        assert self.container.get(Handler) is handler

    def test_record_is_not_bound_on_failure(self):
        handler = Handler()

        with pytest.raises(DependencyNotFoundError):
            self.container.apply_map(handler)

        assert self.container.get(Handler) is None

    def test_weak_reference_binds_referent(self):
        self.container.map_value(Database()).map_value(Cache())
        handler = Handler()

        self.container.apply_map(weakref.ref(handler))

        assert self.container.get(Handler) is handler

    def test_non_record_is_bound(self):
        """Test that values without marked fields are still bound under their type."""
        self.container.apply_map(42)

        assert self.container.get(int) == 42
