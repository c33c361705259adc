"""Local credential storage for commit-counter."""

import json
from pathlib import Path
from typing import Any

from rich import print


class Config:
    """Manage commit-counter configuration and per-platform token storage."""

    def __init__(self) -> None:
        """Initialize config with default paths."""
        self.config_dir = Path.home() / ".commit-counter"
        self.config_file = self.config_dir / "config.json"
        self._ensure_config_dir()

    def _ensure_config_dir(self) -> None:
        """Create config directory if it doesn't exist."""
        self.config_dir.mkdir(exist_ok=True)
        # Tokens live here: owner-only access
        self.config_dir.chmod(0o700)

    def _load_config(self) -> dict[str, Any]:
        """Load existing config or return empty dict."""
        if not self.config_file.exists():
            return {}

        try:
            with self.config_file.open() as f:
                return json.load(f)  # type: ignore[no-any-return]
        except (json.JSONDecodeError, OSError):
            return {}

    def _save_config(self, config_data: dict[str, Any]) -> None:
        with self.config_file.open("w") as f:
            json.dump(config_data, f, indent=2)
        self.config_file.chmod(0o600)

    def get_token(self, platform: str) -> str | None:
        """Get the stored access token for a platform.

        Returns:
            Token if stored, None otherwise
        """
        return self._load_config().get("tokens", {}).get(platform)

    def get_username(self, platform: str) -> str | None:
        """Get the username stored alongside a platform's token."""
        return self._load_config().get("usernames", {}).get(platform)

    def set_token(self, platform: str, token: str, username: str | None = None) -> None:
        """Store a platform access token, and optionally its username.

        Args:
            platform: Platform name, e.g. "github"
            token: Access token to store
            username: Account the token belongs to
        """
        config_data = self._load_config()
        config_data.setdefault("tokens", {})[platform] = token
        if username:
            config_data.setdefault("usernames", {})[platform] = username

        self._save_config(config_data)
        print(f"[green]✓[/green] {platform} token stored securely in {self.config_file}")

    def remove_token(self, platform: str) -> None:
        """Remove a platform's stored token and username."""
        config_data = self._load_config()
        for section in ("tokens", "usernames"):
            config_data.get(section, {}).pop(platform, None)
            if not config_data.get(section):
                config_data.pop(section, None)

        if config_data:
            self._save_config(config_data)
        else:
            # Remove empty config file
            self.config_file.unlink(missing_ok=True)

        print(f"[green]✓[/green] {platform} token removed from local storage")

    def get_config_info(self) -> dict[str, Any]:
        """Get information about current configuration.

        Returns:
            Dictionary with config status information
        """
        config_exists = self.config_file.exists()

        return {
            "config_file": str(self.config_file),
            "config_exists": config_exists,
            "platforms": sorted(self._load_config().get("tokens", {})),
            "config_file_permissions": oct(self.config_file.stat().st_mode)[-3:]
            if config_exists
            else None,
        }
