"""
Snapshot persistence for the three gym-tracker collections.

Each collection lives in its own named slot of a blob store.  Slots are
saved and loaded independently: a corrupt slot loads as an empty collection
without affecting the other two.

Also provides the export bundle: one JSON document carrying every
collection base64-encoded, plus a format version, for manual backups.
"""

import base64
import binascii
import json
import warnings
from dataclasses import dataclass, field
from typing import Callable, Sequence

from ..core.config import BUNDLE_VERSION, EXERCISES_KEY, PLANS_KEY, SESSIONS_KEY
from ..core.models import Exercise, TrainingPlan, TrainingSession
from .blob_store import BlobStore
from .serializers import (
    ValidationError,
    decode_exercises,
    decode_plans,
    decode_sessions,
    encode_exercises,
    encode_plans,
    encode_sessions,
)

BUNDLE_FIELDS = ("exercises", "sessions", "plans")


@dataclass
class Snapshot:
    """The three collections as loaded from, or written to, persistence."""

    exercises: list[Exercise] = field(default_factory=list)
    sessions: list[TrainingSession] = field(default_factory=list)
    plans: list[TrainingPlan] = field(default_factory=list)


@dataclass
class LoadResult(Snapshot):
    """
    A loaded snapshot plus per-slot decode errors.

    ``errors`` maps a slot key to the reason it was discarded.  A slot that
    was simply never saved is empty and has no entry.
    """

    errors: dict[str, str] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return not self.errors


class SnapshotStore:
    """
    Persistence adapter writing full snapshots to a blob store.

    Slot keys are ``gym_data`` (exercises), ``gym_sessions`` and
    ``gym_plans``.
    """

    def __init__(self, blobs: BlobStore):
        """
        Initialize the snapshot store.

        Args:
            blobs: Key-value store that receives one blob per collection
        """
        self.blobs = blobs

    def save(
        self,
        exercises: Sequence[Exercise],
        sessions: Sequence[TrainingSession],
        plans: Sequence[TrainingPlan],
    ) -> None:
        """
        Serialize and write all three collections.

        Each slot is written independently; an OSError from the blob store
        propagates to the caller.
        """
        self.blobs.set(EXERCISES_KEY, encode_exercises(exercises))
        self.blobs.set(SESSIONS_KEY, encode_sessions(sessions))
        self.blobs.set(PLANS_KEY, encode_plans(plans))

    def load(self) -> LoadResult:
        """
        Read all three collections.

        Returns:
            LoadResult; missing or corrupt slots come back empty
        """
        result = LoadResult()
        result.exercises = self._load_slot(EXERCISES_KEY, decode_exercises, result.errors)
        result.sessions = self._load_slot(SESSIONS_KEY, decode_sessions, result.errors)
        result.plans = self._load_slot(PLANS_KEY, decode_plans, result.errors)
        return result

    def _load_slot(self, key: str, decode: Callable[[bytes], list], errors: dict[str, str]) -> list:
        data = self.blobs.get(key)
        if data is None:
            return []
        try:
            return decode(data)
        except ValidationError as e:
            errors[key] = str(e)
            warnings.warn(
                f"gym-tracker: discarding unreadable slot '{key}' ({e}); starting it empty.",
                stacklevel=3,
            )
            return []


# =============================================================================
# EXPORT BUNDLE
# =============================================================================


def export_bundle(
    exercises: Sequence[Exercise],
    sessions: Sequence[TrainingSession],
    plans: Sequence[TrainingPlan],
) -> bytes:
    """
    Build a backup bundle.

    The bundle is a JSON object with ``exercises``, ``sessions`` and
    ``plans`` (each the base64 of the serialized collection) and
    ``version`` ("1.0").

    Returns:
        UTF-8 encoded JSON document
    """
    payload = {
        "exercises": base64.b64encode(encode_exercises(exercises)).decode("ascii"),
        "sessions": base64.b64encode(encode_sessions(sessions)).decode("ascii"),
        "plans": base64.b64encode(encode_plans(plans)).decode("ascii"),
        "version": BUNDLE_VERSION,
    }
    return json.dumps(payload, indent=2).encode("utf-8")


def import_bundle(data: bytes) -> Snapshot:
    """
    Decode a bundle written by export_bundle().

    Unlike load(), a restore is all-or-nothing: any bad field rejects the
    whole bundle.

    Raises:
        ValidationError: If the bundle is malformed or has an unknown version
    """
    try:
        raw = json.loads(data.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError) as e:
        raise ValidationError(f"Bundle is not valid JSON: {e}") from e
    if not isinstance(raw, dict):
        raise ValidationError("Bundle must be a JSON object")

    version = raw.get("version")
    if version != BUNDLE_VERSION:
        raise ValidationError(
            f"Unsupported bundle version: {version!r}. Expected {BUNDLE_VERSION!r}"
        )

    decoded: dict[str, bytes] = {}
    for name in BUNDLE_FIELDS:
        value = raw.get(name)
        if not isinstance(value, str):
            raise ValidationError(f"Bundle field '{name}' must be a base64 string")
        try:
            decoded[name] = base64.b64decode(value, validate=True)
        except (binascii.Error, ValueError) as e:
            raise ValidationError(f"Bundle field '{name}' is not valid base64") from e

    return Snapshot(
        exercises=decode_exercises(decoded["exercises"]),
        sessions=decode_sessions(decoded["sessions"]),
        plans=decode_plans(decoded["plans"]),
    )
