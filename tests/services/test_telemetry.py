"""Tests for telemetry spans and the @traced decorator."""

from __future__ import annotations

from crmctl.infrastructure.store import Store
from crmctl.services.people import PersonService
from crmctl.services.result import ServiceResult
from crmctl.services.telemetry import (
    Span,
    disable_telemetry,
    enable_telemetry,
    get_current_span,
    trace_span,
    traced,
)


class TestSpan:
    def test_duration_zero_until_ended(self) -> None:
        span = Span(name="x")
        assert span.duration_ms == 0.0
        span.end()
        assert span.duration_ms >= 0.0

    def test_to_dict_nests_children(self) -> None:
        root = Span(name="root")
        child = Span(name="child", parent=root)
        root.children.append(child)
        child.annotate("rows", 3)
        child.end()
        root.end()
        data = root.to_dict()
        assert data["children"][0]["name"] == "child"
        assert data["children"][0]["annotations"] == {"rows": 3}


class TestTraced:
    def test_disabled_leaves_meta_alone(self, store: Store) -> None:
        disable_telemetry()
        result = PersonService(store).list()
        assert result.meta is None

    def test_enabled_injects_meta(self, store: Store) -> None:
        enable_telemetry()
        result = PersonService(store).create({"first_name": "Jane", "last_name": "Doe"})
        assert result.meta is not None
        assert result.meta["telemetry"]["name"] == "PersonService.create"

    def test_nested_call_is_child(self) -> None:
        enable_telemetry()

        @traced
        def inner() -> ServiceResult:
            with trace_span("work") as span:
                assert span is not None
            return ServiceResult(ok=True, op="inner")

        @traced
        def outer() -> ServiceResult:
            inner_result = inner()
            assert inner_result.meta is None
            return ServiceResult(ok=True, op="outer")

        result = outer()
        assert result.meta is not None
        tree = result.meta["telemetry"]
        assert tree["children"][0]["children"][0]["name"] == "work"

    def test_trace_span_outside_traced_yields_none(self) -> None:
        enable_telemetry()
        with trace_span("orphan") as span:
            assert span is None
        assert get_current_span() is None
