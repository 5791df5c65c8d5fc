# src/llm_roles/llms/manager.py

import asyncio
import logging
import os
import threading
from collections.abc import Callable, Mapping
from dataclasses import dataclass

from llm_roles.observability import names
from llm_roles.observability.base import MetricsHook, NoOpMetricsHook

from .base import ChatRequest, ClientRole, LLMResponse, UsageStats
from .client import LLMClient
from .config import LLMConfig, RoleConfigs
from .factory import create_llm_client

logger = logging.getLogger(__name__)

ClientFactory = Callable[..., LLMClient]

# Keeps close tasks alive until they finish
_pending_closes: set[asyncio.Task] = set()


async def _close_logged(client: LLMClient) -> None:
    try:
        await client.aclose()
    except Exception as exc:
        logger.warning("Failed to close LLM client for model %s: %s", client.model, exc)


def _discard_clients(clients: list[LLMClient]) -> None:
    """Release the transports of clients that will never be used.

    Runs the closes to completion when called outside an event loop.
    Inside one, they are scheduled on it.
    """
    try:
        loop = asyncio.get_running_loop()
    except RuntimeError:
        loop = None
    for client in clients:
        if loop is None:
            asyncio.run(_close_logged(client))
        else:
            task = loop.create_task(_close_logged(client))
            _pending_closes.add(task)
            task.add_done_callback(_pending_closes.discard)


@dataclass(frozen=True)
class RoleClients:
    """Exactly one client per role."""

    planner: LLMClient
    executor: LLMClient
    reflector: LLMClient

    def for_role(self, role: ClientRole | str) -> LLMClient:
        return getattr(self, ClientRole(role).value)


class LLMManager:
    """Owns one LLM client per role and tracks their usage.

    Clients are built once, at construction, and all of them must build:
    a failure for any role aborts construction. Usage stats only change
    through ``update_usage`` (or the helpers that call it); snapshots are
    immutable values.
    """

    def __init__(
        self,
        configs: RoleConfigs,
        *,
        env: Mapping[str, str] | None = None,
        metrics_hook: MetricsHook = NoOpMetricsHook(),
        client_factory: ClientFactory = create_llm_client,
    ) -> None:
        self._configs = configs
        self.metrics_hook = metrics_hook
        env = os.environ if env is None else env

        clients: dict[ClientRole, LLMClient] = {}
        for role in ClientRole:
            config = configs.for_role(role)
            try:
                clients[role] = client_factory(
                    config, env=env, metrics_hook=metrics_hook
                )
            except Exception:
                logger.error("Failed to initialize LLM client for role: %s", role.value)
                _discard_clients(list(clients.values()))
                raise
            logger.info(
                "LLM client initialized for role: %s (provider=%s, model=%s)",
                role.value,
                clients[role].provider,
                clients[role].model,
            )

        self._clients = RoleClients(
            planner=clients[ClientRole.PLANNER],
            executor=clients[ClientRole.EXECUTOR],
            reflector=clients[ClientRole.REFLECTOR],
        )
        self._usage: dict[ClientRole, UsageStats] = {
            role: UsageStats() for role in ClientRole
        }
        self._usage_lock = threading.Lock()

    def get_client(self, role: ClientRole | str) -> LLMClient:
        """Client for a role.

        Raises:
            ValueError: If ``role`` is not one of planner, executor, reflector.
        """
        return self._clients.for_role(role)

    def get_config(self, role: ClientRole | str) -> LLMConfig:
        return self._configs.for_role(role)

    def update_usage(
        self,
        role: ClientRole | str,
        prompt_tokens: int,
        completion_tokens: int,
        cost: float,
    ) -> None:
        role = ClientRole(role)
        with self._usage_lock:
            self._usage[role] = self._usage[role].add(
                prompt_tokens, completion_tokens, cost
            )
        self.metrics_hook.increment(
            names.ROLE_USAGE_UPDATES_TOTAL, labels={"role": role.value}
        )

    def record_response(self, role: ClientRole | str, response: LLMResponse) -> float:
        """Account a response against a role using that role's pricing.

        Returns:
            The cost charged.
        """
        usage = response.usage
        cost = self.get_client(role).calculate_cost(
            usage.prompt_tokens, usage.completion_tokens
        )
        self.update_usage(role, usage.prompt_tokens, usage.completion_tokens, cost)
        return cost

    async def chat(self, role: ClientRole | str, request: ChatRequest) -> LLMResponse:
        """Call a role's client and record the usage."""
        response = await self.get_client(role).chat(request)
        self.record_response(role, response)
        return response

    def get_usage_stats(self, role: ClientRole | str) -> UsageStats:
        with self._usage_lock:
            return self._usage[ClientRole(role)]

    def get_total_usage(self) -> UsageStats:
        with self._usage_lock:
            return sum(self._usage.values(), UsageStats())

    def get_all_usage_stats(self) -> dict[str, UsageStats]:
        with self._usage_lock:
            return {role.value: stats for role, stats in self._usage.items()}

    def reset_usage_stats(self, role: ClientRole | str) -> None:
        with self._usage_lock:
            self._usage[ClientRole(role)] = UsageStats()

    def reset_all_usage_stats(self) -> None:
        with self._usage_lock:
            self._usage = {role: UsageStats() for role in ClientRole}

    def is_ready(self) -> bool:
        return all(self._clients.for_role(role) is not None for role in ClientRole)

    def get_summary(self) -> dict[str, dict[str, str]]:
        """Provider and model per role, for display."""
        return {
            role.value: {
                "provider": self.get_client(role).provider,
                "model": self.get_client(role).model,
            }
            for role in ClientRole
        }

    async def aclose(self) -> None:
        for role in ClientRole:
            await self._clients.for_role(role).aclose()
