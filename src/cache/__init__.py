"""Storage contract, connection handling and backends."""
