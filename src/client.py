"""LLama stack client retrieval."""

import logging

from typing import Optional

from llama_stack import AsyncLlamaStackAsLibraryClient  # type: ignore
from llama_stack_client import AsyncLlamaStackClient  # type: ignore
from models.config import LlamaStackConfiguration
from utils.types import Singleton


logger = logging.getLogger(__name__)


class AsyncLlamaStackClientHolder(metaclass=Singleton):
    """Container for the client shared by coaching and summarization calls."""

    _lsc: Optional[AsyncLlamaStackClient] = None

    async def load(
        self,
        llama_stack_config: LlamaStackConfiguration,
        timeout: Optional[float] = None,
    ) -> None:
        """Retrieve Async Llama stack client according to configuration.

        The timeout (in seconds) is applied to every HTTP request made by the
        client running against remote service.
        """
        if llama_stack_config.use_as_library_client is True:
            if llama_stack_config.library_client_config_path is None:
                msg = "Configuration problem: library_client_config_path option is not set"
                logger.error(msg)
                raise ValueError(msg)
            logger.info("Using Llama stack as library client")
            client = AsyncLlamaStackAsLibraryClient(
                llama_stack_config.library_client_config_path
            )
            await client.initialize()
            self._lsc = client
            return

        logger.info("Using Llama stack running as a service at %s", llama_stack_config.url)
        api_key = (
            llama_stack_config.api_key.get_secret_value()
            if llama_stack_config.api_key is not None
            else None
        )
        if timeout is None:
            self._lsc = AsyncLlamaStackClient(
                base_url=llama_stack_config.url, api_key=api_key
            )
        else:
            self._lsc = AsyncLlamaStackClient(
                base_url=llama_stack_config.url, api_key=api_key, timeout=timeout
            )

    def is_loaded(self) -> bool:
        """Check if the client has been initialised."""
        return self._lsc is not None

    def get_client(self) -> AsyncLlamaStackClient:
        """Return an initialised AsyncLlamaStackClient."""
        if not self._lsc:
            raise RuntimeError(
                "AsyncLlamaStackClient has not been initialised. Ensure 'load(..)' has been called."
            )
        return self._lsc

    async def close(self) -> None:
        """Close connections of the initialised client, if any."""
        if self._lsc is None:
            return
        logger.info("Closing Llama stack client")
        await self._lsc.close()
        self._lsc = None
