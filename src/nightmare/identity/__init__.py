"""Identity: device id derivation and the persisted credential record."""
