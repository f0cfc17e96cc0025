"""mintbridge: custodial-wallet bridging and withdrawals on Base and Arbitrum."""

__version__ = "0.1.0"
