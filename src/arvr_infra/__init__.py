"""
AR/VR e-commerce infrastructure deployer.

Provisions the platform's Azure topology (resource group, virtual network,
AKS cluster, PostgreSQL server, storage account, CDN) as an ordered,
dependency-aware pipeline with per-operation retries.
"""

__version__ = "1.0.0"
