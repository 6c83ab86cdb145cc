"""Endpoints and asset notation for the external swap aggregators."""

API_URLS = {
    'thorswap': 'https://api.swapkit.dev/quote',
    'relay': 'https://api.testnets.relay.link/quote',
    'chainflip': 'https://chainflip-swap.chainflip.io/v2/quote',
}

# Relay does not estimate Bitcoin legs; use a fixed 20 minutes
RELAY_BTC_SWAP_TIME = 1200  # seconds

EVM_DEAD_ADDRESS = '0x000000000000000000000000000000000000dead'
BTC_MAINNET_CHAIN_ID = '8253038'
BTC_TESTNET_CHAIN_ID = '9092725'
BTC_MAINNET_RECIPIENT = 'bc1q4vxn43l44h30nkluqfxd9eckf45vr2awz38lwa'
BTC_TESTNET_RECIPIENT = 'tb1qqqqqqqqqqqqqqqqqqqqqqqqqqqqqqqqtlc5af'

# Keys are "<chain>:<symbol>", lower-cased
THORSWAP_ASSETS = {
    'bitcoin:btc': 'BTC.BTC',
    'arbitrum:usdc': 'ARB.USDC-0xaf88d065e77c8cc2239327c5edb3a432268e5831',
    'ethereum:usdc': 'ETH.USDC-0xa0b86991c6218b36c1d19d4a2e9eb0ce3606eb48',
    'ethereum:wbtc': 'ETH.WBTC-0x2260fac5e5542a773aa44fbcfedf7c193bc2c599',
    'ethereum:cbbtc': 'ETH.cbBTC-0xcbb7c0000ab88b473b1f5afd9ef808440eed33bf',
    'base:usdc': 'BASE.USDC-0x833589fcd6edb6e08f4c7c32d4f71b54bda02913',
    'base:cbbtc': 'BASE.CBBTC-0xcbb7c0000ab88b473b1f5afd9ef808440eed33bf',
}

RELAY_ASSETS = {
    'bitcoin:btc': {
        'chain_id': BTC_MAINNET_CHAIN_ID,
        'currency': 'bc1qqqqqqqqqqqqqqqqqqqqqqqqqqqqqqqqmql8k8',
    },
    'bitcoin_testnet:btc': {
        'chain_id': BTC_TESTNET_CHAIN_ID,
        'currency': 'tb1qqqqqqqqqqqqqqqqqqqqqqqqqqqqqqqqtlc5af',
    },
    'ethereum:wbtc': {'chain_id': '1', 'currency': '0x2260fac5e5542a773aa44fbcfedf7c193bc2c599'},
    'ethereum:usdc': {'chain_id': '1', 'currency': '0xa0b86991c6218b36c1d19d4a2e9eb0ce3606eb48'},
    'ethereum:cbbtc': {'chain_id': '1', 'currency': '0xcbb7c0000ab88b473b1f5afd9ef808440eed33bf'},
    'base:usdc': {'chain_id': '8453', 'currency': '0x833589fcd6edb6e08f4c7c32d4f71b54bda02913'},
    'base:cbbtc': {'chain_id': '8453', 'currency': '0xcbb7c0000ab88b473b1f5afd9ef808440eed33bf'},
    'arbitrum:wbtc': {'chain_id': '42161', 'currency': '0x2f2a2543b76a4166549f7aab2e75bef0aefc5b0f'},
    'arbitrum:usdc': {'chain_id': '42161', 'currency': '0xaf88d065e77c8cc2239327c5edb3a432268e5831'},
}

CHAINFLIP_ASSETS = {
    'bitcoin:btc': {'chain': 'Bitcoin', 'asset': 'BTC'},
    'ethereum:usdc': {'chain': 'Ethereum', 'asset': 'USDC'},
    'arbitrum:usdc': {'chain': 'Arbitrum', 'asset': 'USDC'},
}
