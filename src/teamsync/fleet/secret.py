"""Look up and decode a Kubernetes secret in the current kubectl context."""

from __future__ import annotations

import base64
import binascii
import re
from collections.abc import Iterable
from typing import TypeVar

import questionary
from pydantic import BaseModel, ConfigDict, Field, ValidationError
from rich.text import Text

from teamsync.core.errors import ExternalToolError
from teamsync.core.logging import get_logger
from teamsync.shell import run_tool
from teamsync.sync import prompts
from teamsync.sync.context import SyncContext

log = get_logger("fleet.secret")

M = TypeVar("M", bound=BaseModel)

MAX_VALUE_LENGTH = 200

# Rotated secrets share a name and differ by a numeric (date) suffix
_VERSIONED_NAME = re.compile(r"^(.*?)(-[0-9]+)+$")


class SecretMetadata(BaseModel):
    model_config = ConfigDict(extra="ignore")

    name: str


class SecretItem(BaseModel):
    model_config = ConfigDict(extra="ignore")

    metadata: SecretMetadata
    data: dict[str, str] = Field(default_factory=dict)


class SecretList(BaseModel):
    model_config = ConfigDict(extra="ignore")

    items: list[SecretItem] = Field(default_factory=list)


def latest_versions(names: Iterable[str]) -> list[str]:
    """Collapse versioned names to their newest version, keeping first-seen order."""
    latest: dict[str, str] = {}
    for name in names:
        match = _VERSIONED_NAME.match(name)
        base = match.group(1) if match else name
        current = latest.get(base)
        if current is None or name > current:
            latest[base] = name
    return list(latest.values())


def decode_value(value: str) -> str:
    if len(value) > MAX_VALUE_LENGTH:
        return "..."
    try:
        return base64.b64decode(value).decode("utf-8", errors="replace")
    except binascii.Error:
        log.warning("secret_value_not_base64")
        return value


def parse_kubectl_json(model: type[M], raw: str, what: str) -> M:
    """Validate kubectl JSON output against ``model``."""
    try:
        return model.model_validate_json(raw)
    except ValidationError as e:
        raise ExternalToolError.invalid_output("kubectl", f"{what}: {e.error_count()} validation errors") from e


async def list_secret_names() -> list[str]:
    output = await run_tool("kubectl", "get", "secrets", "-o", "json")
    secrets = parse_kubectl_json(SecretList, output, "secret list")
    return [item.metadata.name for item in secrets.items]


async def choose_secret(names: list[str], wanted: str | None = None) -> str:
    """Pick a secret. An exact ``wanted`` name skips the prompt."""
    candidates = latest_versions(names)
    if wanted:
        if wanted in candidates:
            return wanted
        filtered = [n for n in candidates if wanted in n]
        candidates = filtered or candidates
    return str(
        await prompts.select(
            "Start typing to search for a secret",
            [questionary.Choice(n, value=n) for n in candidates],
            search=True,
        )
    )


async def show_secret(ctx: SyncContext, name: str | None = None) -> dict[str, str]:
    """Print each key of a secret with its decoded value."""
    names = await list_secret_names()
    if not names:
        ctx.console.print("[yellow]No secrets found in the current context[/yellow]")
        return {}
    chosen = await choose_secret(names, name)

    output = await run_tool("kubectl", "get", "secret", chosen, "-o", "json")
    secret = parse_kubectl_json(SecretItem, output, f"secret {chosen}")

    decoded = {key: decode_value(value) for key, value in secret.data.items()}
    for key, value in decoded.items():
        ctx.console.print(Text.assemble((key, "cyan"), ": ", (value, "green")))
    return decoded
