"""CREATE TABLE statements for artwork listings."""

ARTWORKS = """
CREATE TABLE artworks (
    id             UUID PRIMARY KEY DEFAULT gen_random_uuid(),
    artist_id      UUID NOT NULL REFERENCES profiles(id),
    title          VARCHAR(200) NOT NULL,
    description    TEXT,
    price          NUMERIC(10,2) NOT NULL
                   CONSTRAINT ck_artwork_price_positive CHECK (price > 0),
    shipping_cost  NUMERIC(10,2) NOT NULL DEFAULT 0
                   CONSTRAINT ck_artwork_shipping_nonneg CHECK (shipping_cost >= 0),
    image_path     VARCHAR(500) NOT NULL,
    style          VARCHAR(20) NOT NULL
                   CONSTRAINT ck_artwork_style
                   CHECK (style IN ('abstract','realism','minimalist','popart','other')),
    status         VARCHAR(20) NOT NULL DEFAULT 'pending'
                   CONSTRAINT ck_artwork_status
                   CHECK (status IN ('pending','approved','rejected')),
    sold           BOOLEAN NOT NULL DEFAULT FALSE,
    created_at     TIMESTAMPTZ NOT NULL DEFAULT now()
);
"""

ALL = [ARTWORKS]
