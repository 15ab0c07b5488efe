"""Prometheus metrics exposed by the webhook mailer.

Counters live in a private :class:`CollectorRegistry` owned by each
:class:`MailMetrics`, so several applications can coexist in one process.

Example:
    Reading the counters::

        metrics = MailMetrics()
        metrics.inc_sent()
        print(metrics.generate_latest().decode())
"""

from prometheus_client import Counter, CollectorRegistry, generate_latest


class MailMetrics:
    """Wrapper around the Prometheus registry used by the service."""

    def __init__(self, registry: CollectorRegistry | None = None):
        """Create counters inside the provided registry.

        Args:
            registry: Registry to attach the counters to. A fresh one is
                created when omitted.
        """
        self.registry = registry or CollectorRegistry()
        self.sent = Counter("wm_sent_total", "Total emails accepted by the relay", registry=self.registry)
        self.errors = Counter("wm_errors_total", "Total delivery failures", registry=self.registry)
        self.rejected = Counter("wm_rejected_total", "Total requests rejected before delivery", ["reason"], registry=self.registry)

    def inc_sent(self):
        """Increase the ``sent`` counter after the relay accepted a message."""
        self.sent.inc()

    def inc_error(self):
        """Increase the ``errors`` counter after a failed delivery."""
        self.errors.inc()

    def inc_rejected(self, reason: str):
        """Increase the ``rejected`` counter.

        Args:
            reason: Why the request was refused before delivery, either
                ``unauthorized`` or ``bad_request``.
        """
        self.rejected.labels(reason=reason).inc()

    def generate_latest(self) -> bytes:
        """Return the latest metrics snapshot.

        Returns:
            The registry rendered in the Prometheus text exposition format.
        """
        return generate_latest(self.registry)
