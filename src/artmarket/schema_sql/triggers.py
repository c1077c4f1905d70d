"""Trigger functions and trigger DDL for the initial schema."""

# ---- Trigger functions ----

FN_RAISE_IMMUTABLE = """
CREATE OR REPLACE FUNCTION raise_immutable_error()
RETURNS TRIGGER AS $$
BEGIN
    RAISE EXCEPTION 'Rows in table % are immutable', TG_TABLE_NAME;
END;
$$ LANGUAGE plpgsql;
"""

FN_CHECK_SOLD_FINAL = """
CREATE OR REPLACE FUNCTION check_sold_is_final()
RETURNS TRIGGER AS $$
BEGIN
    IF OLD.sold AND NOT NEW.sold THEN
        RAISE EXCEPTION 'Artwork % is already sold', OLD.id;
    END IF;
    RETURN NEW;
END;
$$ LANGUAGE plpgsql;
"""

FUNCTIONS_ALL = [
    FN_RAISE_IMMUTABLE,
    FN_CHECK_SOLD_FINAL,
]

# ---- Triggers ----

TRIGGERS_ALL = [
    "CREATE TRIGGER trg_processed_webhooks_immutable "
    "BEFORE UPDATE OR DELETE ON processed_webhooks "
    "FOR EACH ROW EXECUTE FUNCTION raise_immutable_error();",

    "CREATE TRIGGER trg_orders_immutable "
    "BEFORE UPDATE OR DELETE ON orders "
    "FOR EACH ROW EXECUTE FUNCTION raise_immutable_error();",

    "CREATE TRIGGER trg_messages_append_only "
    "BEFORE UPDATE OR DELETE ON messages "
    "FOR EACH ROW EXECUTE FUNCTION raise_immutable_error();",

    "CREATE TRIGGER trg_artwork_sold_final "
    "BEFORE UPDATE ON artworks "
    "FOR EACH ROW EXECUTE FUNCTION check_sold_is_final();",
]
