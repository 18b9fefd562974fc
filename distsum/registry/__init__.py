"""Registry metadata document (Composer/Satis ``packages.json``)."""

from distsum.registry.document import RegistryDocument, VersionRecord

__all__ = ["RegistryDocument", "VersionRecord"]
