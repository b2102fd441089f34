"""
proxybid - escrowed proxy-bidding auctions

An English auction engine with:
- Proxy (binding-bid) pricing
- Escrowed pledges with pull-payment refunds
- Native-currency and token-ledger asset modes
- A directory for spawning and enumerating auctions
"""

__version__ = "0.1.0"
