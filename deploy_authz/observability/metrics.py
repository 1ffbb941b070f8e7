"""Authorization counters backed by prometheus_client.

Counters are registered on an explicit ``CollectorRegistry`` so tests can use
a fresh registry per case.  prometheus_client increments are thread-safe.
"""

from __future__ import annotations

from functools import lru_cache

from prometheus_client import REGISTRY, CollectorRegistry, Counter

SKIPPED = "authorization_skipped"
MISSING_APPLICATION = "authorization_missing_application"
AUTHORIZATION = "authorization"


class AuthorizationMetrics:
    def __init__(self, registry: CollectorRegistry | None = None, namespace: str = ""):
        self.registry = registry if registry is not None else REGISTRY
        self.namespace = namespace

        self.skipped = Counter(
            name=SKIPPED,
            documentation="Operations whose account authorization was skipped by policy",
            labelnames=("descriptionClass", "account"),
            namespace=namespace,
            registry=self.registry,
        )
        self.missing_application = Counter(
            name=MISSING_APPLICATION,
            documentation="Account-scoped operations carrying no application",
            labelnames=("descriptionClass", "account"),
            namespace=namespace,
            registry=self.registry,
        )
        self.decisions = Counter(
            name=AUTHORIZATION,
            documentation="Authorization decisions by outcome",
            labelnames=("descriptionClass", "success"),
            namespace=namespace,
            registry=self.registry,
        )

    def record_skip(self, description_class: str, account: str | None) -> None:
        self.skipped.labels(description_class, account or "none").inc()

    def record_missing_application(self, description_class: str, account: str) -> None:
        self.missing_application.labels(description_class, account).inc()

    def record_decision(self, description_class: str, success: bool) -> None:
        self.decisions.labels(description_class, "true" if success else "false").inc()

    def value(self, name: str, **labels: str) -> float:
        """Current value of counter *name* for *labels* (0.0 if never incremented)."""
        full = f"{self.namespace}_{name}" if self.namespace else name
        return self.registry.get_sample_value(f"{full}_total", labels) or 0.0


@lru_cache(maxsize=None)
def default_metrics() -> AuthorizationMetrics:
    """Process-wide metrics on the default prometheus registry, created once."""
    return AuthorizationMetrics()
