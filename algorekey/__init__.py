"""
Drives an Algorand node to fund, rekey and sweep a pair of accounts on a local test network.
"""
