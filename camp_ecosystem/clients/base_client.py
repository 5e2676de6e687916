"""Base Solana RPC client for Camp Ecosystem.

This module provides the core functionality for making JSON-RPC requests to
Solana nodes. Retries are left to callers, see
``camp_ecosystem.utils.retry``.
"""

# Standard library imports
import json
from typing import Any, Dict, List, Optional, Union

# Third-party library imports
import httpx

# Internal imports
from camp_ecosystem.config import RpcConfig, get_rpc_config
from camp_ecosystem.logging_config import get_logger
from camp_ecosystem.utils.errors import (
    RpcConnectionError, RpcTimeoutError, SolanaRpcError
)

# Get logger
logger = get_logger(__name__)

Params = Union[List[Any], Dict[str, Any]]


class BaseRpcClient:
    """Base client for JSON-RPC calls against Solana endpoints."""

    def __init__(self, config: Optional[RpcConfig] = None,
                 http_client: Optional[httpx.AsyncClient] = None):
        """Initialize the client.

        Args:
            config: RPC configuration. Defaults to environment-based config.
            http_client: Optional shared HTTP client (tests inject one with a
                mock transport)
        """
        self.config = config or get_rpc_config()
        self.headers = {"Content-Type": "application/json"}
        self._http_client = http_client
        self._owns_client = http_client is None

    @property
    def default_url(self) -> str:
        """Endpoint used when a call does not name one."""
        return self.config.rpc_url

    def _get_client(self) -> httpx.AsyncClient:
        if self._http_client is None:
            self._http_client = httpx.AsyncClient(
                timeout=self.config.timeout,
                limits=httpx.Limits(max_keepalive_connections=10, max_connections=20)
            )
        return self._http_client

    async def _make_request(self, method: str, params: Optional[Params] = None,
                            url: Optional[str] = None,
                            request_id: Union[int, str] = 1) -> Any:
        """Make a JSON-RPC request.

        Args:
            method: The RPC method to call
            params: Positional (list) or named (dict) parameters
            url: Endpoint to call instead of the default one
            request_id: JSON-RPC request id

        Returns:
            The ``result`` member of the JSON-RPC response

        Raises:
            RpcTimeoutError: If the request exceeds the configured timeout
            RpcConnectionError: If the endpoint cannot be reached
            SolanaRpcError: If the endpoint answers with an HTTP or RPC error
        """
        target = url or self.default_url
        payload = {
            "jsonrpc": "2.0",
            "id": request_id,
            "method": method,
            "params": params if params is not None else []
        }

        try:
            response = await self._get_client().post(target, headers=self.headers, json=payload)
        except httpx.TimeoutException as e:
            logger.warning(f"{method} timed out after {self.config.timeout}s")
            raise RpcTimeoutError(f"{method} timed out", {"method": method}) from e
        except httpx.TransportError as e:
            logger.warning(f"{method} failed to reach endpoint: {str(e)}")
            raise RpcConnectionError(f"Could not reach RPC endpoint: {str(e)}", {"method": method}) from e

        if response.status_code >= 400:
            raise SolanaRpcError(
                f"HTTP {response.status_code} from RPC endpoint",
                {"method": method, "status": response.status_code}
            )

        try:
            result = response.json()
        except json.JSONDecodeError as e:
            raise SolanaRpcError(f"Invalid JSON from RPC endpoint for {method}") from e

        if "error" in result:
            error = result["error"]
            if isinstance(error, dict):
                message = f"Solana RPC error: {error.get('message', 'Unknown error')}"
                if "data" in error:
                    message += f" - {json.dumps(error['data'])}"
                raise SolanaRpcError(message, error)
            raise SolanaRpcError(f"Solana RPC error: {error}", {"message": str(error)})

        return result.get("result")

    async def __aenter__(self):
        """Async context manager entry.

        Returns:
            Self
        """
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit."""
        await self.close()

    async def close(self):
        """Close the client and release resources."""
        if self._http_client is not None and self._owns_client:
            await self._http_client.aclose()
            self._http_client = None

