"""CREATE TABLE statements for identity-linked profiles."""

PROFILES = """
CREATE TABLE profiles (
    id          UUID PRIMARY KEY,
    email       VARCHAR(320) NOT NULL,
    username    VARCHAR(40) UNIQUE,
    avatar_url  VARCHAR(500),
    bio         TEXT,
    role        VARCHAR(20) NOT NULL DEFAULT 'artist'
                CONSTRAINT ck_profile_role CHECK (role IN ('artist','buyer')),
    created_at  TIMESTAMPTZ NOT NULL DEFAULT now()
);
"""

ALL = [PROFILES]
