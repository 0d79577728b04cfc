"""
Exchange connectors.

- aevo: Aevo derivatives exchange (streaming + REST, EIP-712 signed orders)
"""
