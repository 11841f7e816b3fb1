"""The Kubernetes context segment."""

from __future__ import annotations

import configparser
import os
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from ..powerline import Powerline, Segment

KUBE_ICON = "\u2388"
_SUDO_FG = 9
_SUDO_BG = 51


@dataclass(frozen=True)
class KubeContext:
    """One named context of a kubeconfig file."""

    name: str = ""
    cluster: str = ""
    namespace: str = ""
    user: str = ""


@dataclass
class KubeConfig:
    """The parts of a kubeconfig file the prompt uses."""

    contexts: list[KubeContext] = field(default_factory=list)
    current_context: str = ""


def home_path() -> str:
    """The user's home directory from the environment."""
    name = "USERPROFILE" if sys.platform == "win32" else "HOME"
    return os.environ.get(name, "")


def _text(value: Any, what: str) -> str:
    if value is None:
        return ""
    if isinstance(value, (dict, list)):
        raise ValueError(f"{what} must be a scalar")
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def _parse_context(raw: Any) -> KubeContext:
    if raw is None:
        return KubeContext()
    if not isinstance(raw, dict):
        raise ValueError("a kube context must be a mapping")
    inner = raw.get("context") or {}
    if not isinstance(inner, dict):
        raise ValueError("a kube context body must be a mapping")
    return KubeContext(
        name=_text(raw.get("name"), "name"),
        cluster=_text(inner.get("cluster"), "cluster"),
        namespace=_text(inner.get("namespace"), "namespace"),
        user=_text(inner.get("user"), "user"),
    )


def read_kube_config(path: str | os.PathLike[str]) -> KubeConfig:
    """Load a kubeconfig file.

    Raises OSError if it cannot be read and ValueError if it is malformed.
    """
    content = Path(os.path.abspath(path)).read_bytes()
    try:
        data = yaml.safe_load(content)
    except yaml.YAMLError as exc:
        raise ValueError(f"invalid kubeconfig {os.fspath(path)!r}: {exc}") from exc
    if data is None:
        return KubeConfig()
    if not isinstance(data, dict):
        raise ValueError("a kubeconfig must be a mapping")
    raw_contexts = data.get("contexts") or []
    if not isinstance(raw_contexts, list):
        raise ValueError("kubeconfig contexts must be a list")
    return KubeConfig(
        contexts=[_parse_context(item) for item in raw_contexts],
        current_context=_text(data.get("current-context"), "current-context"),
    )


def read_gcloud_account(base_path: str | os.PathLike[str]) -> str:
    """Account of the active gcloud configuration, or '' if it has none.

    Raises OSError if the configuration files cannot be read and
    configparser.Error if the configuration is malformed.
    """
    base = Path(base_path)
    active = (base / "active_config").read_text(encoding="utf-8").strip()
    text = (base / "configurations" / f"config_{active}").read_text(encoding="utf-8")
    parser = configparser.ConfigParser(interpolation=None, strict=False)
    parser.read_string(text)
    return parser.get("core", "account", fallback="")


def segment_kube(p: Powerline) -> None:
    """Show the current Kubernetes context and namespace."""
    paths = os.environ.get("KUBECONFIG", "").split(":")
    paths.append(os.path.join(home_path(), ".kube", "config"))
    config = KubeConfig()
    for config_path in paths:
        try:
            config = read_kube_config(config_path)
        except (OSError, ValueError):
            continue
        break

    gcloud_base = os.path.join(home_path(), ".config", "gcloud")
    try:
        account = read_gcloud_account(gcloud_base)
    except (OSError, configparser.Error) as exc:
        print(exc)
        account = ""
    sudo = account.startswith("sudo-")

    name = config.current_context
    namespace = next(
        (ctx.namespace for ctx in config.contexts if ctx.name == config.current_context), ""
    )

    icon_drawn = False
    if name:
        icon_drawn = True
        fg, bg = p.theme.kube_cluster_fg, p.theme.kube_cluster_bg
        if sudo:
            fg, bg = _SUDO_FG, _SUDO_BG
            name += "-sudo"
        p.append_segment(
            "kube-cluster", Segment(content=f"{KUBE_ICON} {name}", foreground=fg, background=bg)
        )

    if namespace:
        content = namespace if icon_drawn else f"{KUBE_ICON} {namespace}"
        p.append_segment(
            "kube-namespace",
            Segment(
                content=content,
                foreground=p.theme.kube_namespace_fg,
                background=p.theme.kube_namespace_bg,
            ),
        )