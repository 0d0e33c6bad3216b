"""DeFi Trust Engine.

Trust scoring, evaluation caching and contract monitoring for Solana DeFi
contracts, with trust-gated swap quotes on top.
"""

__version__ = "0.1.0"
__author__ = "DeFi Trust Engine Contributors"
__email__ = "maintainers@defi-trust.dev"
