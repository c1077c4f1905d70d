"""All CREATE INDEX statements for the initial schema."""

ALL = [
    # artworks
    "CREATE INDEX idx_artworks_approved ON artworks(created_at DESC, id DESC) "
    "WHERE status = 'approved';",
    "CREATE INDEX idx_artworks_artist ON artworks(artist_id, created_at DESC);",
    "CREATE INDEX idx_artworks_pending ON artworks(created_at) "
    "WHERE status = 'pending';",
    # messages
    "CREATE INDEX idx_messages_sender ON messages(sender_id, created_at DESC);",
    "CREATE INDEX idx_messages_receiver ON messages(receiver_id, created_at DESC);",
    "CREATE INDEX idx_messages_artwork ON messages(artwork_id, created_at);",
    # orders
    "CREATE INDEX idx_orders_artwork ON orders(artwork_id);",
]
