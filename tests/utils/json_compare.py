from typing import Dict, Iterable, Set

# Account fields that change per run or per request
VOLATILE_ACCOUNT_KEYS = {
    "id",
    "createdAt",
    "updatedAt",
    "lastLoginAt",
    "passwordExpiresAt",
}


def exclude_keys(data: Dict, keys: Set[str]) -> Dict:
    return {k: v for k, v in data.items() if k not in keys}


def assert_no_keys(data: Dict, keys: Iterable[str]):
    leaked = sorted(set(keys) & set(data))
    assert not leaked, f"unexpected keys in payload: {leaked}"
