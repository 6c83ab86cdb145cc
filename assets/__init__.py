"""Asset metadata client.

Fetches the chain -> configured assets mapping from the assets info endpoint and
resolves decimal precision, chain display names and asset labels from it.
The metadata may be stale or incomplete; a lookup miss raises instead of
returning a default.
"""
import logging
from typing import Any, Dict, List, Optional, Union

import requests
from pydantic import BaseModel, ConfigDict, Field, ValidationError

logger = logging.getLogger(__name__)

class AssetError(Exception):
    """Base exception for asset metadata errors."""
    pass

class AssetServiceError(AssetError):
    """Raised when the assets endpoint can't be reached or returns garbage."""
    pass

class ChainNotFoundError(AssetError):
    """Raised when a chain is missing from the asset metadata."""
    def __init__(self, chain: str):
        self.chain = chain
        super().__init__(f"Chain {chain} not found in network info")

class AssetNotFoundError(AssetError):
    """Raised when an asset is missing from its chain's configuration."""
    def __init__(self, chain: str, asset: str):
        self.chain = chain
        self.asset = asset
        super().__init__(f"Asset {asset} not found for chain {chain}")

class AssetConfig(BaseModel):
    model_config = ConfigDict(extra='ignore', populate_by_name=True)

    name: str = ''
    symbol: str
    decimals: int
    token_address: str = Field('', alias='tokenAddress')
    atomic_swap_address: str = Field('', alias='atomicSwapAddress')

    def matches(self, asset: str) -> bool:
        """An asset id matches by symbol, token address or HTLC address."""
        wanted = asset.lower()
        return wanted in (
            self.symbol.lower(),
            self.token_address.lower(),
            self.atomic_swap_address.lower(),
        )

class NetworkInfo(BaseModel):
    model_config = ConfigDict(extra='ignore', populate_by_name=True)

    name: Optional[str] = None
    chain_id: Optional[Union[int, str]] = Field(None, alias='chainId')
    identifier: Optional[str] = None
    asset_config: List[AssetConfig] = Field(default_factory=list, alias='assetConfig')

class AssetDirectory:
    """Snapshot of the asset metadata service."""

    def __init__(
        self,
        url: Optional[str] = None,
        session: Optional[requests.Session] = None,
        timeout: float = 10,
        networks: Optional[Dict[str, Any]] = None
    ):
        """Initialize the directory.

        Args:
            url: Assets info endpoint
            session: Optional requests session
            timeout: HTTP timeout in seconds
            networks: Optional preloaded payload in the endpoint's shape
        """
        self.url = url
        self.session = session or requests.Session()
        self.timeout = timeout
        self._networks: Optional[Dict[str, NetworkInfo]] = None
        if networks is not None:
            self._networks = self._parse(networks)

    @staticmethod
    def _parse(payload: Dict[str, Any]) -> Dict[str, NetworkInfo]:
        if not isinstance(payload, dict):
            raise AssetServiceError("Asset info response is not an object")
        # Some deployments wrap the mapping in {"result": ...}
        if set(payload) == {'result'} and isinstance(payload['result'], dict):
            payload = payload['result']
        try:
            return {
                chain.lower(): NetworkInfo.model_validate(info)
                for chain, info in payload.items()
            }
        except ValidationError as e:
            raise AssetServiceError(f"Invalid asset info response: {e}") from e

    @property
    def loaded(self) -> bool:
        return self._networks is not None

    @property
    def networks(self) -> Dict[str, NetworkInfo]:
        if self._networks is None:
            raise AssetServiceError("Asset metadata has not been loaded")
        return self._networks

    def refresh(self) -> Dict[str, NetworkInfo]:
        """Fetch the asset metadata, keeping the previous snapshot on failure.

        Raises:
            AssetServiceError: If the fetch fails and no snapshot exists yet
        """
        if not self.url:
            return self.networks

        logger.info("Fetching network and asset information")
        try:
            response = self.session.get(self.url, timeout=self.timeout)
            response.raise_for_status()
            networks = self._parse(response.json())
        except (requests.exceptions.RequestException, ValueError, AssetServiceError) as e:
            if self._networks is not None:
                logger.warning(f"Asset info refresh failed, using stale metadata: {e}")
                return self._networks
            raise AssetServiceError(f"Asset info request failed: {e}") from e

        self._networks = networks
        logger.info(
            f"Received information for {len(networks)} networks: {', '.join(networks)}"
        )
        for chain, info in networks.items():
            logger.debug(f"Network {chain} has {len(info.asset_config)} assets configured")
        return networks

    def find_asset(self, chain: str, asset: str) -> Optional[AssetConfig]:
        network = self.networks.get((chain or '').lower())
        if network is None or not asset:
            return None
        return next((config for config in network.asset_config if config.matches(asset)), None)

    def decimals(self, chain: str, asset: str) -> int:
        """Decimal precision for an asset.

        Raises:
            ChainNotFoundError: If the chain is unknown
            AssetNotFoundError: If the asset isn't configured on the chain
        """
        if (chain or '').lower() not in self.networks:
            raise ChainNotFoundError(chain)
        config = self.find_asset(chain, asset)
        if config is None:
            raise AssetNotFoundError(chain, asset)
        return config.decimals

    def chain_name(self, chain: str) -> Optional[str]:
        network = self.networks.get((chain or '').lower())
        return network.name if network and network.name else None

    def asset_label(self, chain: str, asset: str) -> Optional[str]:
        """`SYMBOL (Name)` for a configured asset."""
        config = self.find_asset(chain, asset)
        if config is None:
            return None
        return f"{config.symbol} ({config.name})" if config.name else config.symbol

__all__ = [
    'AssetDirectory',
    'AssetConfig',
    'NetworkInfo',
    'AssetError',
    'AssetServiceError',
    'ChainNotFoundError',
    'AssetNotFoundError',
]
