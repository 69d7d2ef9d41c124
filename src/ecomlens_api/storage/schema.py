"""Versioned encoding of the persisted user and session blobs.

Version 1 is the legacy layout: the users blob is a bare JSON list of
camelCase records (``creditsUsed``, ``maxCredits``, ``lastResetDate``, role
``user``) and the session blob is a full copy of one of those records.
Version 2 wraps both in an envelope with an explicit ``version`` field and
stores the session as a pointer to a user ID.
"""

import json
from typing import Any

from pydantic import ValidationError

from ecomlens_api.config import UserRole
from ecomlens_api.errors.exceptions import StoreDecodeError
from ecomlens_api.models.user import UserRecord

SCHEMA_VERSION = 2

_V1_ROLES = {"admin": UserRole.ADMIN.value, "user": UserRole.STANDARD.value}


def _load_json(key: str, raw: str) -> Any:
    try:
        return json.loads(raw)
    except json.JSONDecodeError as e:
        raise StoreDecodeError(key, f"invalid JSON ({e.msg})") from e


def _migrate_v1_user(key: str, data: Any) -> dict[str, Any]:
    if not isinstance(data, dict):
        raise StoreDecodeError(key, "user entry is not an object")
    try:
        return {
            "id": data["id"],
            "email": data["email"],
            "role": _V1_ROLES.get(data["role"], data["role"]),
            "usage_count": data["creditsUsed"],
            "usage_limit": data["maxCredits"],
            "last_reset_date": data["lastResetDate"],
        }
    except KeyError as e:
        raise StoreDecodeError(key, f"legacy user entry is missing {e.args[0]!r}") from e


def _validate_user(key: str, data: Any) -> UserRecord:
    try:
        return UserRecord.model_validate(data)
    except ValidationError as e:
        raise StoreDecodeError(key, f"invalid user record ({e.error_count()} errors)") from e


def decode_users(key: str, raw: str | None) -> tuple[list[UserRecord], int]:
    """
    Decode the users blob.

    Returns:
        Tuple of (users in stored order, schema version found). A missing
        blob decodes as an empty version-2 list.

    Raises:
        StoreDecodeError: If the blob is malformed or from a newer schema
    """
    if raw is None:
        return [], SCHEMA_VERSION

    data = _load_json(key, raw)

    if isinstance(data, list):
        return [_validate_user(key, _migrate_v1_user(key, item)) for item in data], 1

    if not isinstance(data, dict) or "version" not in data:
        raise StoreDecodeError(key, "missing schema version")

    version = data["version"]
    if version != SCHEMA_VERSION:
        raise StoreDecodeError(key, f"unsupported schema version {version!r}")

    users = data.get("users")
    if not isinstance(users, list):
        raise StoreDecodeError(key, "'users' is not a list")

    return [_validate_user(key, item) for item in users], version


def encode_users(users: list[UserRecord]) -> str:
    """Encode users as a version-2 blob."""
    return json.dumps(
        {
            "version": SCHEMA_VERSION,
            "users": [user.model_dump(mode="json") for user in users],
        }
    )


def decode_session(key: str, raw: str | None) -> str | None:
    """
    Decode a session blob into the user ID it points at.

    Raises:
        StoreDecodeError: If the blob is malformed
    """
    if raw is None:
        return None

    data = _load_json(key, raw)
    if not isinstance(data, dict):
        raise StoreDecodeError(key, "session is not an object")

    if "version" not in data:
        # Legacy session: a denormalized copy of the whole user record
        user_id = data.get("id")
    elif data["version"] == SCHEMA_VERSION:
        user_id = data.get("user_id")
    else:
        raise StoreDecodeError(key, f"unsupported schema version {data['version']!r}")

    if not isinstance(user_id, str) or not user_id:
        raise StoreDecodeError(key, "session has no user ID")
    return user_id


def encode_session(user_id: str) -> str:
    """Encode a session pointer as a version-2 blob."""
    return json.dumps({"version": SCHEMA_VERSION, "user_id": user_id})
