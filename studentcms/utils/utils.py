class CMSError(Exception):
    pass


class RecordNotFoundError(CMSError):
    def __init__(self, record_id: int):
        self.record_id = record_id
        super().__init__(f"The record with ID={record_id} does not exist.")


class DuplicateIdError(CMSError):
    def __init__(self, record_id: int):
        self.record_id = record_id
        super().__init__(f"Record with ID={record_id} already exists.")


class ValidationError(CMSError):
    pass


class CMSIOError(CMSError):
    pass


class MissingBackupError(CMSError):
    pass


class NotLoadedError(CMSError):
    def __init__(self, message: str = "No records loaded. Open and load the database first."):
        super().__init__(message)
