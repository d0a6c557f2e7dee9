"""Garmin Connect authentication helpers.

Wraps garminconnect / garth token management with the health_source
error hierarchy.
"""

from __future__ import annotations

import logging
import shutil
from pathlib import Path
from typing import Callable, Optional

from garminconnect import Garmin

from health_source.exceptions import HealthSourceMFARequired, HealthSourcePermissionError

logger = logging.getLogger(__name__)

DEFAULT_TOKEN_DIR = Path("~/.garminconnect").expanduser()
_TOKEN_FILE = "oauth1_token.json"


def has_saved_tokens(token_dir: Path | str = DEFAULT_TOKEN_DIR) -> bool:
    return (Path(token_dir) / _TOKEN_FILE).exists()


def create_session(
    email: str,
    password: str,
    token_dir: Path | str = DEFAULT_TOKEN_DIR,
    prompt_mfa: Optional[Callable[[], str]] = None,
) -> Garmin:
    """Authenticate with Garmin Connect and return a session.

    Two-phase login:
    1. If saved tokens exist, try token-based resume (fast, no MFA).
    2. If no tokens or resume fails, do fresh SSO login.

    Parameters
    ----------
    email : str
        Garmin Connect account email.
    password : str
        Garmin Connect account password.
    token_dir : Path | str
        Directory where garth tokens are persisted.
    prompt_mfa : callable, optional
        Called when MFA is required. Must return the MFA code string.
        If None and MFA is required, raises ``HealthSourceMFARequired``.

    Returns
    -------
    Garmin
        Authenticated session.
    """
    token_dir = Path(token_dir)
    token_dir.mkdir(parents=True, exist_ok=True)
    tokenstore = str(token_dir)

    # Phase 1: Try token-based resume (no MFA needed)
    if has_saved_tokens(token_dir):
        try:
            client = Garmin(email=email, password=password)
            client.login(tokenstore=tokenstore)
            client.garth.dump(tokenstore)
            logger.info("Resumed session from saved tokens at %s", token_dir)
            return client
        except Exception:
            logger.info("Token resume failed, trying fresh SSO login")

    if not email or not password:
        raise HealthSourcePermissionError(
            f"No valid saved tokens at {token_dir} and no credentials configured"
        )

    # Phase 2: Fresh SSO login
    try:
        client = Garmin(email=email, password=password, prompt_mfa=prompt_mfa)
        client.login()
        client.garth.dump(tokenstore)
        logger.info("Logged in via SSO and saved tokens to %s", token_dir)
        return client
    except Exception as exc:
        _msg = str(exc).lower()
        if "mfa" in _msg or "verification" in _msg or "two-factor" in _msg:
            raise HealthSourceMFARequired(str(exc)) from exc
        raise HealthSourcePermissionError(f"Login failed: {exc}") from exc


def clear_tokens(token_dir: Path | str = DEFAULT_TOKEN_DIR) -> None:
    """Delete saved tokens."""
    token_dir = Path(token_dir)
    if token_dir.exists():
        shutil.rmtree(token_dir)
        logger.info("Cleared tokens at %s", token_dir)
