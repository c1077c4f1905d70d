"""CREATE TABLE statements for messages, orders, and webhook bookkeeping."""

MESSAGES = """
CREATE TABLE messages (
    id           UUID PRIMARY KEY DEFAULT gen_random_uuid(),
    artwork_id   UUID NOT NULL REFERENCES artworks(id),
    sender_id    UUID NOT NULL REFERENCES profiles(id),
    receiver_id  UUID NOT NULL REFERENCES profiles(id),
    content      TEXT NOT NULL,
    created_at   TIMESTAMPTZ NOT NULL DEFAULT now()
);
"""

ORDERS = """
CREATE TABLE orders (
    id                   UUID PRIMARY KEY DEFAULT gen_random_uuid(),
    artwork_id           UUID NOT NULL REFERENCES artworks(id),
    checkout_session_id  VARCHAR(255) NOT NULL UNIQUE,
    buyer_email          VARCHAR(320),
    shipping_address     JSONB,
    price                NUMERIC(10,2) NOT NULL,
    shipping_cost        NUMERIC(10,2) NOT NULL,
    service_fee          NUMERIC(10,2) NOT NULL
                         CONSTRAINT ck_order_fee_nonneg CHECK (service_fee >= 0),
    artist_earnings      NUMERIC(10,2) NOT NULL,
    created_at           TIMESTAMPTZ NOT NULL DEFAULT now(),
    CONSTRAINT ck_order_earnings_split
        CHECK (artist_earnings = price - service_fee + shipping_cost)
);
"""

PROCESSED_WEBHOOKS = """
CREATE TABLE processed_webhooks (
    event_id     VARCHAR(255) PRIMARY KEY,
    processed_at TIMESTAMPTZ NOT NULL DEFAULT now()
);
"""

ALL = [
    MESSAGES,
    ORDERS,
    PROCESSED_WEBHOOKS,
]
