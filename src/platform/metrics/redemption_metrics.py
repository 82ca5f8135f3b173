from prometheus_client import Counter, Gauge, Histogram


class RedemptionMetrics:
    """
    Redemption subsystem metrics

    Server side: redemption outcomes, inventory decrements, oversell flags.
    Device side: sync drains, per-attempt replay results, offline queue depth.
    """

    def __init__(self) -> None:
        # ========== Redemption Endpoint ==========
        self.redemption_requests = Counter(
            'redemption_requests_total',
            'Redemption calls by outcome',
            ['outcome', 'offline_sync'],  # outcome: checked_in/already_redeemed/not_found/...
        )

        self.redemption_duration = Histogram(
            'redemption_duration_seconds',
            'Redemption processing time',
            ['outcome'],
            buckets=[0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5],
        )

        self.evidence_upload_failures = Counter(
            'redemption_evidence_upload_failures_total',
            'Evidence photos that could not be stored',
        )

        self.audit_write_failures = Counter(
            'redemption_audit_write_failures_total',
            'Audit log appends that failed',
        )

        # ========== Inventory ==========
        self.inventory_decrements = Counter(
            'inventory_decrements_total',
            'Inventory decrements applied on purchase completion',
            ['result'],  # result: applied/sold_out/oversell
        )

        # ========== Sync Manager (device) ==========
        self.sync_drains = Counter(
            'sync_drains_total',
            'Queue drains by final status',
            ['status'],
        )

        self.sync_attempts = Counter(
            'sync_attempts_total',
            'Replayed offline attempts by result',
            ['result'],  # result: successful/rejected/failed
        )

        self.offline_queue_depth = Gauge(
            'offline_queue_depth',
            'Attempts waiting in the local redemption queue',
        )

    # ========== Helper Methods ==========

    def record_redemption(self, *, outcome: str, offline_sync: bool, duration: float) -> None:
        self.redemption_requests.labels(
            outcome=outcome, offline_sync=str(offline_sync).lower()
        ).inc()
        self.redemption_duration.labels(outcome=outcome).observe(duration)

    def record_inventory_decrement(self, *, result: str) -> None:
        self.inventory_decrements.labels(result=result).inc()

    def record_sync_drain(
        self, *, status: str, successful: int, rejected: int, failed: int, pending: int
    ) -> None:
        self.sync_drains.labels(status=status).inc()
        self.sync_attempts.labels(result='successful').inc(successful)
        self.sync_attempts.labels(result='rejected').inc(rejected)
        self.sync_attempts.labels(result='failed').inc(failed)
        self.offline_queue_depth.set(pending)


# Global metrics instance
metrics = RedemptionMetrics()
