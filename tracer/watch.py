"""Running several provider watchers at once, with duplicate suppression."""

from __future__ import annotations

import hashlib
import json
import logging
import threading
from typing import Callable, Mapping, Optional

from tracer.provider import AgentChatSession, Provider

logger = logging.getLogger(__name__)

SessionCallback = Callable[[str, AgentChatSession], None]


class WatchError(Exception):
    """One or more provider watchers failed."""

    def __init__(self, errors: list[Exception]) -> None:
        super().__init__("\n".join(str(e) for e in errors))
        self.errors = errors


class _ProviderFailure(Exception):
    def __init__(self, provider_name: str, cause: BaseException) -> None:
        super().__init__(f"{provider_name}: {cause}")
        self.provider_name = provider_name
        self.cause = cause


def session_fingerprint(session: Optional[AgentChatSession]) -> str:
    """Return a SHA-256 hex digest of a session's raw data and structured content."""
    if session is None:
        return ""
    content = session.raw_data
    if session.session_data is not None:
        try:
            content += json.dumps(
                session.session_data.to_dict(), separators=(",", ":"), ensure_ascii=False
            )
        except (TypeError, ValueError):
            content += session.session_data.updated_at
    return hashlib.sha256(content.encode("utf-8")).hexdigest()


def watch_providers(
    stop: threading.Event,
    project_path: str,
    providers: Mapping[str, Provider],
    debug_raw: bool,
    session_callback: SessionCallback,
) -> None:
    """Watch every provider concurrently until all stop or ``stop`` is set.

    ``session_callback`` receives the provider id and the session whenever a
    session's content changes. Failures raise ``WatchError`` unless ``stop``
    was set, which counts as a clean exit.
    """
    logger.info(
        "Starting multi-provider watch of %s (%d providers, debug_raw=%s)",
        project_path, len(providers), debug_raw,
    )

    lock = threading.Lock()
    last_fingerprints: dict[str, str] = {}
    errors: list[Exception] = []

    def run(provider_id: str, provider: Provider) -> None:
        provider_name = provider.name()
        logger.info("Starting watcher for provider %s (%s)", provider_id, provider_name)

        def on_session(session: Optional[AgentChatSession]) -> None:
            if session is None or session.session_data is None:
                return
            fingerprint = session_fingerprint(session)
            key = f"{provider_id}:{session.session_id}"
            with lock:
                if last_fingerprints.get(key) == fingerprint:
                    logger.debug(
                        "Skipping duplicate callback for %s session %s",
                        provider_id, session.session_id,
                    )
                    return
                last_fingerprints[key] = fingerprint
            logger.debug("Provider %s reported session %s", provider_id, session.session_id)
            session_callback(provider_id, session)

        try:
            provider.watch_agent(stop, project_path, debug_raw, on_session)
        except Exception as exc:  # noqa: BLE001 - every watcher failure is collected
            if stop.is_set():
                logger.info("Provider watcher stopped: %s", provider_name)
                return
            logger.error("Provider watcher failed: %s: %s", provider_name, exc)
            with lock:
                errors.append(_ProviderFailure(provider_name, exc))

    threads = [
        threading.Thread(target=run, args=(pid, prov), name=f"watch-{pid}", daemon=True)
        for pid, prov in providers.items()
    ]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    if stop.is_set():
        return
    if errors:
        raise WatchError(errors)