"""
Shared test constants.

Definition documents used across pipeline, CLI and cloner tests.
"""

import hashlib

#: The coin definition used in the end-to-end examples.
COIN_DEFINITION = {
    "_id": "coin01",
    "_proto": "base123",
    "_props": {"Name": "Coin", "Description": "Shiny"},
}

#: Internal id for ``coin01``, computed independently of the loader.
COIN_INTERNAL_ID = hashlib.sha256(b"coin01").digest()[:12].hex()

#: A template table with the coin's template and the fallback template.
TEMPLATE_ITEMS = {
    "base123": {
        "_id": "base123",
        "_name": "coin_base",
        "_parent": "543be5dd4bdc2deb348b4569",
        "_props": {
            "Name": "Base coin",
            "Description": "Template coin",
            "Weight": 0.01,
            "Prefab": {"path": "assets/content/items/coin.bundle", "rcid": ""},
        },
    },
    "66b37eb4acff495a29492407": {
        "_id": "66b37eb4acff495a29492407",
        "_name": "fallback_base",
        "_parent": "5447e0e74bdc2d3c308b4567",
        "_props": {"Name": "Fallback", "Description": "", "Weight": 0.1},
    },
}
