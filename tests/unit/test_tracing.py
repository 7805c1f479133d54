from __future__ import annotations

import logging

from tenant_authz.authz.engine import AuthorizationEngine
from tenant_authz.authz.tracing import DecisionStep, LoggingTracer, RecordingTracer

S = DecisionStep


def _traced(engine: AuthorizationEngine, tracer) -> AuthorizationEngine:
    return AuthorizationEngine(engine.roles, engine.permissions, engine.policy_roles, tracer)


def test_steps_follow_precedence_order(engine, make_principal) -> None:
    tracer = RecordingTracer()
    traced = _traced(engine, tracer)
    assert traced.authorize(make_principal("Coordinator"), "staff", "edit", 3) is True
    assert tracer.names == [
        S.PRINCIPAL,
        S.ROLE,
        S.SUPERUSER,
        S.TENANT_BOUNDARY,
        S.PERMISSION,
        S.ACTION,
        S.SCOPE,
        S.DECISION,
    ]


def test_trace_stops_at_tenant_boundary(engine, make_principal) -> None:
    tracer = RecordingTracer()
    _traced(engine, tracer).authorize(make_principal("Coordinator"), "staff", "edit", 5)
    assert tracer.names[-1] is S.TENANT_BOUNDARY
    assert tracer.steps[-1][1] is False


def test_trace_stops_at_superuser(engine, make_principal) -> None:
    tracer = RecordingTracer()
    _traced(engine, tracer).authorize(make_principal("ConsoleManager"), "staff", "edit", 5)
    assert tracer.names == [S.PRINCIPAL, S.ROLE, S.SUPERUSER]
    assert tracer.steps[-1][1] is True


def test_trace_on_missing_principal(engine) -> None:
    tracer = RecordingTracer()
    _traced(engine, tracer).authorize(None, "staff", "edit")
    assert tracer.names == [S.PRINCIPAL]


def test_tracer_does_not_change_decisions(engine, make_principal) -> None:
    traced = _traced(engine, RecordingTracer())
    p = make_principal("SupportWorker", assigned={5})
    for resource in (None, 5, 7):
        assert traced.authorize(p, "clients", "view", None, resource) == engine.authorize(
            p, "clients", "view", None, resource
        )


def test_logging_tracer_only_logs_selected_modules(engine, make_principal, caplog) -> None:
    caplog.set_level(logging.DEBUG, logger="tenant_authz.authz.tracing")
    traced = _traced(engine, LoggingTracer(["staff"]))
    p = make_principal("Coordinator")

    traced.authorize(p, "clients", "view")
    assert not [r for r in caplog.records if r.name == "tenant_authz.authz.tracing"]

    traced.authorize(p, "staff", "edit", 5)
    messages = [r.getMessage() for r in caplog.records if r.name == "tenant_authz.authz.tracing"]
    assert messages
    assert "step=tenant_boundary passed=False" in messages[-1]


class _FailingTracer:
    def record(self, step, passed, **details) -> None:
        raise RuntimeError("sink down")


def test_failing_tracer_does_not_break_decisions(engine, make_principal, caplog) -> None:
    caplog.set_level(logging.ERROR, logger="tenant_authz.authz.engine")
    traced = _traced(engine, _FailingTracer())
    p = make_principal("Coordinator")

    assert traced.authorize(p, "staff", "edit", 5) is False
    assert traced.authorize(p, "staff", "edit") is True
    assert any("authz.tracer_failed" in r.getMessage() for r in caplog.records)


class _FormatSpy:
    def __init__(self) -> None:
        self.calls = 0

    def __format__(self, spec: str) -> str:
        self.calls += 1
        return "spy"


def test_logging_tracer_skips_formatting_when_debug_disabled(caplog) -> None:
    caplog.set_level(logging.INFO, logger="tenant_authz.authz.tracing")
    spy = _FormatSpy()
    LoggingTracer(["staff"]).record(S.ACTION, True, module="staff", detail=spy)
    assert spy.calls == 0

    caplog.set_level(logging.DEBUG, logger="tenant_authz.authz.tracing")
    LoggingTracer(["staff"]).record(S.ACTION, True, module="staff", detail=spy)
    assert spy.calls == 1
