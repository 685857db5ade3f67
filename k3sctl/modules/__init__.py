"""
Cluster provisioning modules.
"""
