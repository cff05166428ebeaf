"""Generate local Kafka client configs from an app's Aiven credentials.

The credentials secret is found through the ``aiven-credentials`` volume of
a ``kafka=enabled`` pod. Its keys are decoded into
``<cache>/<kube context>/<app>/.secrets`` and three client configs are
written next to that directory: kcat, plain Java properties and a Spring
Boot profile.
"""

from __future__ import annotations

import base64
import binascii
import shutil
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any

import questionary
import yaml
from pydantic import BaseModel, ConfigDict, Field
from rich.markup import escape

from teamsync.core.errors import ConfigError, ExternalToolError
from teamsync.core.logging import get_logger
from teamsync.fleet.secret import SecretItem, parse_kubectl_json
from teamsync.shell import run_tool
from teamsync.sync import prompts
from teamsync.sync.context import SyncContext

log = get_logger("fleet.kafka")

KAFKACTL_CONFIG_PATH = Path("~/.config/kafkactl/config.yml").expanduser()

CREDENTIALS_VOLUME = "aiven-credentials"
SECRETS_DIR = ".secrets"
BROKERS_KEY = "KAFKA_BROKERS"
CREDSTORE_PASSWORD_KEY = "KAFKA_CREDSTORE_PASSWORD"


# =============================================================================
# kubectl payloads
# =============================================================================


class _SecretVolumeSource(BaseModel):
    model_config = ConfigDict(extra="ignore")

    secret_name: str = Field(alias="secretName")


class _Volume(BaseModel):
    model_config = ConfigDict(extra="ignore")

    name: str
    secret: _SecretVolumeSource | None = None


class _PodSpec(BaseModel):
    model_config = ConfigDict(extra="ignore")

    volumes: list[_Volume] = Field(default_factory=list)


class _PodMetadata(BaseModel):
    model_config = ConfigDict(extra="ignore")

    name: str
    labels: dict[str, str] = Field(default_factory=dict)


class Pod(BaseModel):
    model_config = ConfigDict(extra="ignore")

    metadata: _PodMetadata
    spec: _PodSpec = Field(default_factory=_PodSpec)

    @property
    def app(self) -> str:
        return self.metadata.labels.get("app") or self.metadata.name

    def credentials_secret(self) -> str:
        """Name of the secret mounted as the Aiven credentials volume."""
        for volume in self.spec.volumes:
            if volume.name == CREDENTIALS_VOLUME and volume.secret is not None:
                return volume.secret.secret_name
        raise ExternalToolError.invalid_output(
            "kubectl", f"pod {self.metadata.name} has no {CREDENTIALS_VOLUME} volume"
        )


class PodList(BaseModel):
    model_config = ConfigDict(extra="ignore")

    items: list[Pod] = Field(default_factory=list)


@dataclass(frozen=True, slots=True)
class KafkaFiles:
    """Where one app's Kafka configs were written."""

    app: str
    context: str
    base: Path
    brokers: str
    kafkactl_context: str | None = None

    @property
    def secrets(self) -> Path:
        return self.base / SECRETS_DIR

    @property
    def kcat(self) -> Path:
        return self.base / "kcat.config"

    @property
    def java(self) -> Path:
        return self.base / "kafka.config"

    @property
    def spring(self) -> Path:
        return self.base / "application-dev-kafka.yaml"


# =============================================================================
# Config rendering
# =============================================================================


def kcat_config(secrets: Path, brokers: str) -> str:
    return (
        f"ssl.ca.location={secrets}/KAFKA_CA\n"
        f"ssl.key.location={secrets}/KAFKA_PRIVATE_KEY\n"
        f"ssl.certificate.location={secrets}/KAFKA_CERTIFICATE\n"
        f"bootstrap.servers={brokers}\n"
        "security.protocol=ssl\n"
        "enable.ssl.certificate.verification=false\n"
    )


def java_config(secrets: Path, brokers: str, password: str) -> str:
    return (
        f"bootstrap.servers={brokers}\n"
        "security.protocol=ssl\n"
        "ssl.keystore.type=PKCS12\n"
        "ssl.endpoint.identification.algorithm=\n"
        f"ssl.truststore.location={secrets}/client.truststore.jks\n"
        f"ssl.keystore.location={secrets}/client.keystore.p12\n"
        f"ssl.truststore.password={password}\n"
        f"ssl.keystore.password={password}\n"
    )


def spring_config(secrets: Path, brokers: str, password: str) -> str:
    profile = {
        "spring": {
            "kafka": {
                "bootstrap-servers": brokers,
                "security": {"protocol": "ssl"},
                "ssl": {
                    "key-store-type": "PKCS12",
                    "trust-store-location": f"file:{secrets}/client.truststore.jks",
                    "key-store-location": f"file:{secrets}/client.keystore.p12",
                    "trust-store-password": password,
                    "key-store-password": password,
                },
            }
        }
    }
    header = (
        "# Put this file in your resources folder, and start the spring boot "
        "server with the additional profile: dev-kafka\n"
    )
    return header + yaml.safe_dump(profile, sort_keys=False)


# =============================================================================
# Secrets on disk
# =============================================================================


def decode_secret(secret: SecretItem) -> dict[str, bytes]:
    """Base64-decode every key of ``secret``."""
    decoded: dict[str, bytes] = {}
    for key, value in secret.data.items():
        try:
            decoded[key] = base64.b64decode(value, validate=True)
        except binascii.Error as e:
            raise ExternalToolError.invalid_output(
                "kubectl", f"secret {secret.metadata.name} key {key} is not base64"
            ) from e
    return decoded


def _text(values: dict[str, bytes], key: str, secret: str) -> str:
    if key not in values:
        raise ExternalToolError.invalid_output("kubectl", f"secret {secret} has no {key}")
    return values[key].decode("utf-8").strip()


def write_kafka_files(base: Path, secret: SecretItem, *, app: str, context: str) -> KafkaFiles:
    """Write the decoded secret and the three client configs under ``base``."""
    values = decode_secret(secret)
    brokers = _text(values, BROKERS_KEY, secret.metadata.name)
    password = _text(values, CREDSTORE_PASSWORD_KEY, secret.metadata.name)

    files = KafkaFiles(app=app, context=context, base=base, brokers=brokers)
    files.secrets.mkdir(parents=True, exist_ok=True)
    for key, value in values.items():
        (files.secrets / key).write_bytes(value)
    files.kcat.write_text(kcat_config(files.secrets, brokers), encoding="utf-8")
    files.java.write_text(java_config(files.secrets, brokers, password), encoding="utf-8")
    files.spring.write_text(spring_config(files.secrets, brokers, password), encoding="utf-8")
    log.info("kafka_files_written", app=app, context=context, path=str(base))
    return files


def add_kafkactl_context(config_path: Path, files: KafkaFiles) -> str | None:
    """Add ``<app>-<context>`` to an existing kafkactl config and select it.

    Returns the context name, or None when there is no kafkactl config.
    """
    if not config_path.exists():
        return None
    try:
        data: Any = yaml.safe_load(config_path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as e:
        raise ConfigError.parse_error(str(config_path), str(e)) from e
    if not isinstance(data, dict):
        raise ConfigError.parse_error(str(config_path), "top level must be a mapping")

    name = f"{files.app}-{files.context}"
    contexts = data.get("contexts")
    if not isinstance(contexts, dict):
        contexts = data["contexts"] = {}
    contexts[name] = {
        "brokers": [files.brokers],
        "tls": {
            "enabled": True,
            "insecure": True,
            "ca": str(files.secrets / "KAFKA_CA"),
            "cert": str(files.secrets / "KAFKA_CERTIFICATE"),
            "certKey": str(files.secrets / "KAFKA_PRIVATE_KEY"),
        },
    }
    data["current-context"] = name
    config_path.write_text(yaml.safe_dump(data, sort_keys=False), encoding="utf-8")
    log.info("kafkactl_context_added", context=name, path=str(config_path))
    return name


def remove_kafka_files(cache_dir: Path) -> list[Path]:
    """Delete every generated ``<context>/<app>`` directory under ``cache_dir``."""
    removed: list[Path] = []
    if not cache_dir.is_dir():
        return removed
    for context_dir in sorted(p for p in cache_dir.iterdir() if p.is_dir()):
        generated = [p for p in sorted(context_dir.iterdir()) if (p / SECRETS_DIR).is_dir()]
        for app_dir in generated:
            shutil.rmtree(app_dir)
            removed.append(app_dir)
        if generated and not any(context_dir.iterdir()):
            context_dir.rmdir()
    log.info("kafka_files_removed", count=len(removed))
    return removed


# =============================================================================
# Flow
# =============================================================================


def apps_by_name(pods: list[Pod]) -> dict[str, Pod]:
    """First pod of each app, sorted by app name."""
    apps: dict[str, Pod] = {}
    for pod in pods:
        apps.setdefault(pod.app, pod)
    return dict(sorted(apps.items()))


async def choose_app(apps: list[str], wanted: str | None = None) -> str:
    """Pick an app. An exact ``wanted`` name skips the prompt."""
    candidates = apps
    if wanted:
        if wanted in apps:
            return wanted
        candidates = [a for a in apps if wanted in a] or apps
    return str(
        await prompts.select(
            "Start typing to search for an app",
            [questionary.Choice(a, value=a) for a in candidates],
            search=True,
        )
    )


async def kafka_config(
    ctx: SyncContext,
    app: str | None = None,
    *,
    kafkactl_config: Path = KAFKACTL_CONFIG_PATH,
) -> KafkaFiles | None:
    """Write Kafka client configs for one app of the current kubectl context."""
    context = (await run_tool("kubectl", "config", "current-context")).strip()
    output = await run_tool("kubectl", "get", "pods", "-l", "kafka=enabled", "-o", "json")
    apps = apps_by_name(parse_kubectl_json(PodList, output, "pod list").items)
    if not apps:
        ctx.console.print(f"[yellow]No Kafka-enabled pods found in {escape(context)}[/yellow]")
        return None

    chosen = await choose_app(list(apps), app)
    secret_name = apps[chosen].credentials_secret()
    raw = await run_tool("kubectl", "get", "secret", secret_name, "-o", "json")
    secret = parse_kubectl_json(SecretItem, raw, f"secret {secret_name}")

    files = write_kafka_files(ctx.config.cache.dir / context / chosen, secret, app=chosen, context=context)
    kafkactl_context = add_kafkactl_context(kafkactl_config, files)

    c = ctx.console
    c.print(f"\nbootstrap.servers: [green]{escape(files.brokers)}[/green]")
    c.print(f"\nSaved kcat config:\n[black on cyan]{escape(str(files.kcat))}[/black on cyan]")
    c.print(f"\nSaved kafka config:\n[black on yellow]{escape(str(files.java))}[/black on yellow]")
    c.print(f"\nSaved Spring Boot config:\n[black on green]{escape(str(files.spring))}[/black on green]")
    if kafkactl_context:
        c.print(f"\nAdded [blue]{escape(kafkactl_context)}[/blue] context to kafkactl")
    return replace(files, kafkactl_context=kafkactl_context)
