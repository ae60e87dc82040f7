"""Host-independent core: ids, record types, asset and locale resolution."""
