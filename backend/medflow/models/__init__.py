from medflow.models.storage_entry import StorageEntry

__all__ = ["StorageEntry"]
