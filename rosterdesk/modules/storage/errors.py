"""Storage error taxonomy."""


class StorageError(Exception):
    """Base storage error"""
    pass


class DuplicateKeyError(StorageError):
    """A unique index already holds the value"""

    def __init__(self, collection: str, field: str, value: str):
        super().__init__(f"Duplicate value for {field}: {value}")
        self.collection = collection
        self.field = field
        self.value = value


class RecordNotFoundError(StorageError):
    """No record with the given id"""

    def __init__(self, collection: str, record_id: str):
        super().__init__(f"{collection} record not found: {record_id}")
        self.collection = collection
        self.record_id = record_id
