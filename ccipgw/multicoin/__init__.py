"""Coin types and the address encoders used for multichain records."""