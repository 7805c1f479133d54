from tenant_authz.authz.engine import AuthorizationEngine, PolicyRoles
from tenant_authz.authz.scope_evaluator import evaluate_scope
from tenant_authz.authz.tracing import DecisionStep, DecisionTracer, LoggingTracer, NoopTracer

__all__ = [
    "AuthorizationEngine",
    "PolicyRoles",
    "evaluate_scope",
    "DecisionStep",
    "DecisionTracer",
    "LoggingTracer",
    "NoopTracer",
]
