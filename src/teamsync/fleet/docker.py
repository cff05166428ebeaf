"""Docker registry lookups through the docker CLI."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError

from teamsync.core.errors import ExternalToolError
from teamsync.shell import run_tool


class Platform(BaseModel):
    model_config = ConfigDict(extra="ignore")

    architecture: str = ""
    os: str = ""


class Descriptor(BaseModel):
    model_config = ConfigDict(extra="ignore")

    digest: str | None = None
    platform: Platform | None = None


class ManifestEntry(BaseModel):
    """One entry of ``docker manifest inspect --verbose``."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    ref: str = Field(default="", alias="Ref")
    descriptor: Descriptor = Field(alias="Descriptor")


# Multi-arch images print a list, single-arch images a single object
_MANIFEST_OUTPUT = TypeAdapter(list[ManifestEntry] | ManifestEntry)


def parse_manifest_digest(raw: str, *, architecture: str = "amd64") -> str:
    """Digest of ``architecture`` in verbose manifest JSON."""
    try:
        parsed = _MANIFEST_OUTPUT.validate_json(raw)
    except ValidationError as e:
        raise ExternalToolError.invalid_output("docker", f"manifest did not parse: {e.error_count()} errors") from e

    if isinstance(parsed, list):
        entry = next(
            (
                m
                for m in parsed
                if m.descriptor.platform is not None and m.descriptor.platform.architecture == architecture
            ),
            None,
        )
        digest = entry.descriptor.digest if entry else None
    else:
        digest = parsed.descriptor.digest

    if not digest:
        raise ExternalToolError.invalid_output("docker", f"no {architecture} manifest digest found")
    return digest


async def latest_digest(image: str) -> str:
    """Digest of ``image:latest`` as currently published."""
    output = await run_tool("docker", "manifest", "inspect", "--verbose", f"{image}:latest")
    return parse_manifest_digest(output)
