from prometheus_client import Counter, Gauge, Histogram


class BookingMetrics:
    """
    Booking Engine Core Metrics Collector

    Tracks booking outcomes, transaction latency and sold tickets per tier
    """

    def __init__(self):
        # ========== Booking Transaction Metrics ==========
        self.booking_attempts = Counter(
            'booking_attempts_total',
            'Total booking attempts',
            ['result'],  # success / invalid_input / unknown_tier / insufficient_stock / ...
        )

        self.booking_duration = Histogram(
            'booking_duration_seconds',
            'Booking transaction duration (lock to commit)',
            ['result'],
            buckets=[0.005, 0.01, 0.05, 0.1, 0.2, 0.5, 1.0, 2.0, 5.0, 10.0],
        )

        self.bookings_in_flight = Gauge('bookings_in_flight', 'Booking transactions in progress')

        # ========== Inventory Metrics ==========
        self.tickets_sold = Counter(
            'tickets_sold_total',
            'Tickets sold',
            ['item_class_id'],
        )

        self.payment_charges = Counter(
            'payment_charges_total',
            'Payment gateway charges',
            ['result'],  # approved / declined
        )

    # ========== Helper Methods ==========

    def record_booking(self, *, result: str, duration: float):
        self.booking_attempts.labels(result=result).inc()
        self.booking_duration.labels(result=result).observe(duration)

    def record_tickets_sold(self, *, item_class_id: str, quantity: int):
        self.tickets_sold.labels(item_class_id=item_class_id).inc(quantity)

    def record_payment(self, *, approved: bool):
        self.payment_charges.labels(result='approved' if approved else 'declined').inc()


# Global metrics instance
booking_metrics = BookingMetrics()
