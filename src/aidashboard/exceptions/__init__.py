class AidashboardException(Exception):
    """
    Aidashboard exception.
    """

    pass


class ChatSessionError(AidashboardException):
    """
    A chat operation was invoked without what it needs,
    e.g. no active thread or an empty user message.
    """

    pass


class StorageError(AidashboardException):
    """
    Persisted data could not be read back.
    """

    pass


class SessionStoreError(StorageError):
    """
    The persisted session collection is not a list of sessions.
    """

    pass
