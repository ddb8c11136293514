"""Named-profile token storage.

The store is a single JSON file::

    {"profiles": {"<name>": {"token": "<envelope>", "updatedAt": "<iso8601>"}},
     "currentProfile": "<name>"}

No file locking is done: two CLI invocations writing at the same time
resolve as last-writer-wins, which is acceptable for a single-user tool.
"""

import json
import logging
import os
from datetime import datetime, timezone
from pathlib import Path

from slack_cli.crypto import TokenCipher
from slack_cli.errors import ConfigurationError
from slack_cli.models import Profile

logger = logging.getLogger(__name__)

CONFIG_DIR = Path.home() / ".slack-cli"
CONFIG_FILE = CONFIG_DIR / "config.json"
CONFIG_FILE_MODE = 0o600

DEFAULT_PROFILE_NAME = "default"

TOKEN_MASK_LENGTH = 4
TOKEN_MIN_LENGTH = 9


def empty_store() -> dict:
    return {"profiles": {}, "currentProfile": DEFAULT_PROFILE_NAME}


def mask_token(token: str) -> str:
    """Mask a token for display, keeping only its first and last 4 chars."""
    if len(token) <= TOKEN_MIN_LENGTH:
        return "****"
    return f"{token[:TOKEN_MASK_LENGTH]}-****-****-{token[-TOKEN_MASK_LENGTH:]}"


def _migrate(data: dict) -> tuple[dict, bool]:
    """Upgrade older on-disk shapes. Returns (store, changed)."""
    # Legacy single-token format: {token, updatedAt}
    if "token" in data and "profiles" not in data:
        profile = {"token": data["token"], "updatedAt": data.get("updatedAt", "")}
        return {
            "profiles": {DEFAULT_PROFILE_NAME: profile},
            "currentProfile": DEFAULT_PROFILE_NAME,
        }, True
    # Early multi-profile format named the pointer "defaultProfile"
    if "defaultProfile" in data and "currentProfile" not in data:
        store = {k: v for k, v in data.items() if k != "defaultProfile"}
        store["currentProfile"] = data["defaultProfile"]
        return store, True
    return data, False


class ProfileStore:
    def __init__(self, path: Path | None = None, cipher: TokenCipher | None = None) -> None:
        self.path = path or CONFIG_FILE
        self.cipher = cipher or TokenCipher()

    # -- Raw store I/O ----------------------------------------------------------

    def read(self) -> dict:
        """Load the store, migrating legacy layouts in place."""
        if not self.path.exists():
            return empty_store()
        try:
            data = json.loads(self.path.read_text())
        except json.JSONDecodeError as exc:
            raise ConfigurationError("Invalid config file format") from exc
        except OSError as exc:
            raise ConfigurationError(f"Cannot read config file {self.path}: {exc}") from exc
        if not isinstance(data, dict):
            raise ConfigurationError("Invalid config file format")

        data, changed = _migrate(data)
        if changed:
            logger.debug("Migrated legacy config at %s", self.path)
            self.write(data)
        data.setdefault("profiles", {})
        data.setdefault("currentProfile", DEFAULT_PROFILE_NAME)
        return data

    def write(self, store: dict) -> None:
        """Persist the store, creating parent dirs and restricting permissions."""
        self.path.parent.mkdir(parents=True, exist_ok=True)
        # Owner-only from creation
        fd = os.open(self.path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, CONFIG_FILE_MODE)
        with os.fdopen(fd, "w") as fh:
            fh.write(json.dumps(store, indent=2))
        # A pre-existing file keeps its old mode through O_CREAT
        self.path.chmod(CONFIG_FILE_MODE)

    # -- Profiles ---------------------------------------------------------------

    def get_profile(self, name: str) -> Profile:
        store = self.read()
        entry = store["profiles"].get(name)
        if entry is None:
            raise ConfigurationError(f'Profile "{name}" not found')
        profile = Profile.from_store(entry)
        # Pre-encryption configs hold the token in plaintext
        if self.cipher.is_envelope(profile.token):
            profile.token = self.cipher.decrypt(profile.token)
        return profile

    def set_profile(self, name: str, profile: Profile) -> None:
        store = self.read()
        entry = Profile(token=self.cipher.encrypt(profile.token), updated_at=profile.updated_at)
        store["profiles"][name] = entry.to_store()
        if store.get("currentProfile") not in store["profiles"]:
            store["currentProfile"] = name
        self.write(store)

    def set_token(self, token: str, name: str | None = None) -> str:
        """Store ``token`` under ``name`` (default profile if omitted).

        The profile becomes current when it is named ``default`` or when
        no valid current profile exists. Returns the profile name.
        """
        name = name or DEFAULT_PROFILE_NAME
        updated_at = datetime.now(timezone.utc).isoformat()
        self.set_profile(name, Profile(token=token, updated_at=updated_at))
        if name == DEFAULT_PROFILE_NAME and self.get_current() != name:
            self.set_current(name)
        return name

    def get_token(self, name: str | None = None) -> str:
        """Return the decrypted token for ``name`` or the current profile."""
        name = name or self.get_current()
        if name not in self.list_profile_names():
            raise ConfigurationError(
                f'No configuration found for profile "{name}". '
                f'Use "slack-cli config set --token <token> --profile {name}" to set up.'
            )
        return self.get_profile(name).token

    def delete_profile(self, name: str) -> None:
        """Remove a profile.

        Deleting the current profile promotes the first remaining one
        (insertion order). Deleting the last profile removes the file.
        """
        store = self.read()
        if name not in store["profiles"]:
            raise ConfigurationError(f'Profile "{name}" not found')
        del store["profiles"][name]

        if not store["profiles"]:
            self.path.unlink(missing_ok=True)
            return
        if store.get("currentProfile") == name:
            store["currentProfile"] = next(iter(store["profiles"]))
        self.write(store)

    def list_profile_names(self) -> list[str]:
        return list(self.read()["profiles"])

    def list_profiles(self) -> list[tuple[str, Profile, bool]]:
        """(name, profile, is_current) for every profile, tokens decrypted."""
        store = self.read()
        current = store.get("currentProfile")
        profiles = []
        for name, entry in store["profiles"].items():
            profile = Profile.from_store(entry)
            if self.cipher.is_envelope(profile.token):
                profile.token = self.cipher.decrypt(profile.token)
            profiles.append((name, profile, name == current))
        return profiles

    def get_current(self) -> str:
        return self.read().get("currentProfile") or DEFAULT_PROFILE_NAME

    def set_current(self, name: str) -> None:
        store = self.read()
        if name not in store["profiles"]:
            raise ConfigurationError(f'Profile "{name}" not found')
        store["currentProfile"] = name
        self.write(store)
