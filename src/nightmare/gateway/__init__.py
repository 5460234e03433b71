"""Gateway: wire schemas, HTTP helpers and the gateway session resolver."""
