# Default tiers: (id, unit_price, total)
DEFAULT_SEED: list[tuple[str, str, int]] = [
    ('VIP', '100.00', 10),
    ('FRONT_ROW', '50.00', 50),
    ('GA', '10.00', 200),
]

TEST_BUYER_ID = 'alice'
ANOTHER_BUYER_ID = 'bob'
